"""Abstract base class for museum persistence.

Concrete implementation: ``SQLiteMuseumStore``
(immuse/providers/store/sqlite_museum_store.py).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Collection

from immuse.models.museum import ArchiveFile, ArchiveStatus, FloorPlan, Museum
from immuse.models.tour import TourPlan, TourRequest


class IMuseumStore(ABC):
    """Contract for storing museums, archives, floor plans and tours."""

    @abstractmethod
    async def initialize(self) -> None:
        """Create tables and indices if they don't exist.  Idempotent."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier for this store."""

    # ── Museums ─────────────────────────────────────────────────────

    @abstractmethod
    async def create_museum(self, museum: Museum) -> None:
        """Persist a new museum."""

    @abstractmethod
    async def get_museum(self, museum_id: str) -> Museum | None:
        """Return the museum or ``None``."""

    @abstractmethod
    async def set_vector_store_id(self, museum_id: str, vector_store_id: str) -> bool:
        """Assign the index handle if none is set yet.

        Returns
        -------
        bool
            ``True`` if this call assigned the handle, ``False`` if the
            museum already had one (the existing value is left untouched).
        """

    # ── Archive files ───────────────────────────────────────────────

    @abstractmethod
    async def add_archive_file(self, archive: ArchiveFile) -> None:
        """Persist a new archive file record."""

    @abstractmethod
    async def list_archive_files(
        self,
        museum_id: str,
        *,
        statuses: Collection[ArchiveStatus] | None = None,
        newest_first: bool = True,
    ) -> list[ArchiveFile]:
        """List a museum's archive files, optionally filtered by status."""

    @abstractmethod
    async def update_archive_file(
        self,
        archive_id: str,
        *,
        status: ArchiveStatus,
        error: str | None = None,
        storage_path: str | None = None,
    ) -> None:
        """Set status and error; replace ``storage_path`` when given."""

    # ── Floor plans ─────────────────────────────────────────────────

    @abstractmethod
    async def save_floor_plan(self, floor_plan: FloorPlan) -> None:
        """Persist a floor plan."""

    @abstractmethod
    async def get_latest_floor_plan(self, museum_id: str) -> FloorPlan | None:
        """Return the most recently saved floor plan of a museum."""

    # ── Tours ───────────────────────────────────────────────────────

    @abstractmethod
    async def create_tour_request(self, tour_request: TourRequest) -> None:
        """Persist a tour request."""

    @abstractmethod
    async def get_tour_request(self, tour_request_id: str) -> TourRequest | None:
        """Return the tour request or ``None``."""

    @abstractmethod
    async def list_tour_requests(self, museum_id: str) -> list[TourRequest]:
        """List a museum's tour requests, newest first."""

    @abstractmethod
    async def save_tour_plan(self, tour_plan: TourPlan) -> None:
        """Persist the plan generated for a tour request."""

    @abstractmethod
    async def get_tour_plan(self, tour_plan_id: str) -> TourPlan | None:
        """Return the tour plan or ``None``."""
