"""Tour request and tour plan models.

``TourPlanDocument`` is the structured document the model is asked to
produce (schema name ``TourPlan``); it is also what gets persisted and
returned verbatim as ``result``.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

MIN_TOUR_MINUTES = 15
MAX_TOUR_MINUTES = 180


class TourLevel(str, Enum):
    """Visitor expertise level."""

    CHILDREN = "children"
    ADULTS = "adults"
    PROFESSIONALS = "professionals"


class TourStop(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    room: str
    minutes: int = Field(ge=0)
    why: str = Field(description="Why this stop matters for the visitor.")
    source_refs: list[str] = Field(default_factory=list)


class TourPlanDocument(BaseModel):
    """Generated itinerary: ordered stops plus routing notes."""

    model_config = ConfigDict(frozen=True)

    museum: str
    total_minutes: int = Field(ge=0)
    stops: list[TourStop]
    route_notes: str
    fallbacks: list[str] = Field(default_factory=list)


class TourRequest(BaseModel):
    """Visitor preferences for one tour.  Immutable once stored."""

    model_config = ConfigDict(frozen=True)

    id: str
    museum_id: str
    interests: list[str] = Field(min_length=1)
    level: TourLevel
    minutes: int = Field(ge=MIN_TOUR_MINUTES, le=MAX_TOUR_MINUTES)
    created_at: str


class TourPlan(BaseModel):
    """Persisted result for exactly one TourRequest."""

    model_config = ConfigDict(frozen=True)

    id: str
    museum_id: str
    tour_request_id: str
    result: TourPlanDocument
    created_at: str


def fallback_tour_plan(museum_name: str, minutes: int) -> TourPlanDocument:
    """Deterministic single-stop plan served when generation fails."""
    return TourPlanDocument(
        museum=museum_name,
        total_minutes=minutes,
        stops=[
            TourStop(
                title="Introductory tour",
                room="Main hall",
                minutes=min(minutes, 30),
                why="General overview of the museum and its collection",
                source_refs=[],
            )
        ],
        route_notes="A full tour will be available once the museum archives are processed",
        fallbacks=["Check that the museum archives have been processed"],
    )
