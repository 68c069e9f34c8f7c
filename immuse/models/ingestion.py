"""Ingestion report and status aggregation models."""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field

from immuse.models.museum import IN_PROGRESS_STATUSES, ArchiveFile, ArchiveStatus


class IngestionOutcome(BaseModel):
    """Terminal result of ingesting one archive file."""

    model_config = ConfigDict(frozen=True)

    archive_id: str
    filename: str
    status: ArchiveStatus
    error: str | None = None
    file_id: str | None = Field(default=None, description="Id of the file inside the external index.")


class IngestionCounts(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int = 0
    ready: int = 0
    failed: int = 0


class IngestionReport(BaseModel):
    """Result of one ingestion run over a museum's eligible archives."""

    model_config = ConfigDict(frozen=True)

    vector_store_id: str
    counts: IngestionCounts
    results: list[IngestionOutcome] = Field(default_factory=list)


class IngestionStatus(BaseModel):
    """Museum-level view of ingestion progress."""

    model_config = ConfigDict(frozen=True)

    museum_id: str
    vector_store_id: str | None = None
    overall_status: ArchiveStatus
    status_counts: dict[str, int] = Field(default_factory=dict)
    files: list[ArchiveFile] = Field(default_factory=list)


def aggregate_status(statuses: Iterable[ArchiveStatus]) -> ArchiveStatus:
    """Derive the overall status from per-file statuses.

    Precedence: any FAILED wins; otherwise anything still pending, uploaded
    or indexing means INDEXING; otherwise READY.  No files at all is READY.
    """
    seen = set(statuses)
    if ArchiveStatus.FAILED in seen:
        return ArchiveStatus.FAILED
    if seen & IN_PROGRESS_STATUSES:
        return ArchiveStatus.INDEXING
    return ArchiveStatus.READY


def count_statuses(files: Iterable[ArchiveFile]) -> dict[str, int]:
    """Count files per status; only statuses that occur appear as keys."""
    counts: dict[str, int] = {}
    for archive in files:
        counts[archive.status.value] = counts.get(archive.status.value, 0) + 1
    return counts
