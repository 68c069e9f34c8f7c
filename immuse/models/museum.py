"""Museum, archive and floor-plan domain models.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Models (bottom of the dependency graph, no imports from upper
#        layers).
#
# A Museum owns ArchiveFiles and FloorPlans.  An ArchiveFile moves through
# a small lifecycle driven only by the ingestion service:
#
#     PENDING  (URL registered) ──┐
#                                 ├──► INDEXING ──► READY | FAILED
#     UPLOADED (bytes on disk)  ──┘
#
# All models are frozen; the SQLite store is the only place state changes.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ArchiveStatus(str, Enum):
    """Lifecycle states of an archive file."""

    PENDING = "PENDING"
    UPLOADED = "UPLOADED"
    INDEXING = "INDEXING"
    READY = "READY"
    FAILED = "FAILED"


# Statuses ingestion is allowed to pick up.
INGESTIBLE_STATUSES: frozenset[ArchiveStatus] = frozenset({
    ArchiveStatus.PENDING,
    ArchiveStatus.UPLOADED,
})

# Statuses that still count as "work in progress" for the overall status.
IN_PROGRESS_STATUSES: frozenset[ArchiveStatus] = frozenset({
    ArchiveStatus.PENDING,
    ArchiveStatus.UPLOADED,
    ArchiveStatus.INDEXING,
})


class SourceType(str, Enum):
    """Where an archive file's bytes come from."""

    UPLOAD = "UPLOAD"
    URL = "URL"


class Museum(BaseModel):
    """A museum tenant.  ``vector_store_id`` is assigned once by ingestion."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    website: str | None = None
    description: str | None = None
    vector_store_id: str | None = Field(
        default=None,
        description="Handle of the museum's external retrieval index.",
    )
    created_at: str


class ArchiveFile(BaseModel):
    """One ingestible document belonging to a museum."""

    model_config = ConfigDict(frozen=True)

    id: str
    museum_id: str
    filename: str
    mime_type: str | None = None
    size_bytes: int | None = Field(default=None, ge=0)
    storage_path: str = Field(
        default="",
        description="Local path for uploads; the source URL once a URL archive is READY.",
    )
    source_type: SourceType
    source_url: str | None = None
    status: ArchiveStatus
    error: str | None = None
    created_at: str


# ─── Floor plan structure ────────────────────────────────────────────
# Mirrors the JSON the floor-plan editor produces (camelCase keys).


class _CamelModel(BaseModel):
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class FloorRoom(_CamelModel):
    id: str
    name: str
    bbox: list[float] = Field(min_length=4, max_length=4, description="x, y, width, height")


class FloorMarker(_CamelModel):
    id: str
    title: str
    room_id: str | None = None
    point: list[float] = Field(min_length=2, max_length=2)
    keywords: list[str] = Field(default_factory=list)
    est_minutes: int = Field(default=5, ge=0)


class Floor(_CamelModel):
    name: str
    rooms: list[FloorRoom] = Field(default_factory=list)
    markers: list[FloorMarker] = Field(default_factory=list)


class FloorPlanStructure(_CamelModel):
    floors: list[Floor] = Field(default_factory=list)

    def room_names(self) -> list[str]:
        """Return unique room names across all floors, in document order."""
        return list(dict.fromkeys(room.name for floor in self.floors for room in floor.rooms))


class FloorPlan(BaseModel):
    """Operator-supplied floor plan of a museum."""

    model_config = ConfigDict(frozen=True)

    id: str
    museum_id: str
    image_path: str | None = None
    notes: str | None = None
    structure: FloorPlanStructure | None = None
    created_at: str
