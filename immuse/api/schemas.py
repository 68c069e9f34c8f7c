"""Request and response schemas for the Immuse HTTP API.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: API (pydantic v2 schemas for request validation and response
#        serialization).
#
# Wire format is camelCase (``museumId``, ``vectorStoreId``...) through
# ``alias_generator=to_camel``; ``populate_by_name`` lets the routes build
# responses with snake_case keyword arguments.  Generated documents
# (tour ``result``, chips, preview, story intro) keep their snake_case
# keys because that is the schema the model is asked to fill.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from immuse.models.content import Selections
from immuse.models.museum import ArchiveStatus, FloorPlanStructure
from immuse.models.tour import MAX_TOUR_MINUTES, MIN_TOUR_MINUTES, TourLevel, TourPlanDocument


class ApiModel(BaseModel):
    """Base for every wire schema: frozen, camelCase aliases."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


# ─── Museums ─────────────────────────────────────────────────────────


class CreateMuseumRequest(ApiModel):
    name: str = Field(min_length=1, description="Display name of the museum.")
    website: str | None = Field(default=None, description="http(s) URL; empty string means none.")
    description: str | None = None


class CreateMuseumResponse(ApiModel):
    id: str


class MuseumResponse(ApiModel):
    id: str
    name: str
    website: str | None = None
    description: str | None = None
    vector_store_id: str | None = None
    created_at: str


# ─── Archives & ingestion ────────────────────────────────────────────


class AddArchiveUrlRequest(ApiModel):
    url: str | None = None


class ArchiveResponse(ApiModel):
    id: str
    filename: str
    status: ArchiveStatus


class IngestionCountsResponse(ApiModel):
    total: int
    ready: int
    failed: int


class IngestionResultResponse(ApiModel):
    id: str
    filename: str
    status: ArchiveStatus
    error: str | None = None
    file_id: str | None = None


class IngestResponse(ApiModel):
    vector_store_id: str
    counts: IngestionCountsResponse
    results: list[IngestionResultResponse]


class ArchiveStatusEntry(ApiModel):
    id: str
    filename: str
    status: ArchiveStatus
    error: str | None = None
    created_at: str


class IngestStatusResponse(ApiModel):
    museum_id: str
    vector_store_id: str | None = None
    overall_status: ArchiveStatus
    status_counts: dict[str, int]
    files: list[ArchiveStatusEntry]


# ─── Floor plan ──────────────────────────────────────────────────────


class FloorPlanRequest(ApiModel):
    notes: str | None = None
    structure: dict[str, Any] | None = None


class FloorPlanResponse(ApiModel):
    id: str
    image_path: str | None = None
    notes: str | None = None
    structure: FloorPlanStructure | None = None


# ─── Tours ───────────────────────────────────────────────────────────


class CreateTourRequest(ApiModel):
    museum_id: str = Field(min_length=1)
    interests: list[str] = Field(min_length=1)
    level: TourLevel
    minutes: int = Field(ge=MIN_TOUR_MINUTES, le=MAX_TOUR_MINUTES)


class CreateTourResponse(ApiModel):
    id: str
    tour_request_id: str
    result: TourPlanDocument
    warning: str | None = None


class TourMuseumSummary(ApiModel):
    name: str
    description: str | None = None


class TourRequestSummary(ApiModel):
    interests: list[str]
    level: TourLevel
    minutes: int
    created_at: str


class TourDetailResponse(ApiModel):
    id: str
    museum: TourMuseumSummary
    tour_request: TourRequestSummary
    result: TourPlanDocument
    created_at: str


class TourPreviewRequest(ApiModel):
    museum_name: str = Field(min_length=1)
    level: str = Field(min_length=1)
    minutes: int = Field(ge=1, le=24 * 60)
    interests: list[str] = Field(default_factory=list)


class TourPreviewResponse(ApiModel):
    museum_name: str
    tour_content: str
    level: str
    minutes: int
    interests: list[str]


# ─── Wizard content ──────────────────────────────────────────────────


class MuseumData(ApiModel):
    """Museum facts sent by the wizard client; blanks are filled server-side."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True, extra="ignore")

    name: str | None = None
    description: str | None = None
    website: str | None = None


class DynamicChipsRequest(ApiModel):
    museum_id: str = Field(min_length=1)
    museum_data: MuseumData


class ContentRequest(ApiModel):
    """Body of ``/preview`` and ``/story-intro``."""

    museum_id: str = Field(min_length=1)
    selections: Selections
    museum_data: MuseumData | None = None


# ─── Misc ────────────────────────────────────────────────────────────


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    provider: str
    openai_configured: bool


class OpenAICheckResponse(ApiModel):
    """Result of the live OpenAI connectivity check."""

    success: bool
    provider: str | None = None
    vector_store_id: str | None = None
    message: str | None = None
    error: str | None = None


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    code: str
    details: list[dict[str, Any]] | None = None
