"""Immuse domain models: re-exports all public model classes.

Submodules by concern:
    - museum.py    : Museum, ArchiveFile (+ status lifecycle), FloorPlan
    - ingestion.py : ingestion report and museum-level status aggregation
    - tour.py      : TourRequest, TourPlan and the plan document schema
    - content.py   : wizard content blocks (chips, preview, story intro)
"""

from __future__ import annotations

from immuse.models.content import (
    ChipSets,
    FirstObject,
    Hero,
    MuseumProfile,
    OutlineRoom,
    Preview,
    RouteStep,
    Selections,
    StoryIntro,
    TourPreview,
    Welcome,
)
from immuse.models.ingestion import (
    IngestionCounts,
    IngestionOutcome,
    IngestionReport,
    IngestionStatus,
    aggregate_status,
    count_statuses,
)
from immuse.models.museum import (
    INGESTIBLE_STATUSES,
    IN_PROGRESS_STATUSES,
    ArchiveFile,
    ArchiveStatus,
    Floor,
    FloorMarker,
    FloorPlan,
    FloorPlanStructure,
    FloorRoom,
    Museum,
    SourceType,
)
from immuse.models.tour import (
    MAX_TOUR_MINUTES,
    MIN_TOUR_MINUTES,
    TourLevel,
    TourPlan,
    TourPlanDocument,
    TourRequest,
    TourStop,
    fallback_tour_plan,
)

__all__ = [
    # content
    "ChipSets",
    "FirstObject",
    "Hero",
    "MuseumProfile",
    "OutlineRoom",
    "Preview",
    "RouteStep",
    "Selections",
    "StoryIntro",
    "TourPreview",
    "Welcome",
    # ingestion
    "IngestionCounts",
    "IngestionOutcome",
    "IngestionReport",
    "IngestionStatus",
    "aggregate_status",
    "count_statuses",
    # museum
    "INGESTIBLE_STATUSES",
    "IN_PROGRESS_STATUSES",
    "ArchiveFile",
    "ArchiveStatus",
    "Floor",
    "FloorMarker",
    "FloorPlan",
    "FloorPlanStructure",
    "FloorRoom",
    "Museum",
    "SourceType",
    # tour
    "MAX_TOUR_MINUTES",
    "MIN_TOUR_MINUTES",
    "TourLevel",
    "TourPlan",
    "TourPlanDocument",
    "TourRequest",
    "TourStop",
    "fallback_tour_plan",
]
