"""Ingestion pipeline and status aggregation.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Services.
#
# ingest(museum_id):
#   1. Pick every PENDING / UPLOADED archive of the museum, oldest first.
#   2. Make sure the museum has an external index (created at most once,
#      the stored handle never changes afterwards).
#   3. For each archive, sequentially:
#        INDEXING → fetch URL / read file → upload → READY
#                                                   └► FAILED + error
#      One archive failing never touches another's status.
#
# get_status(museum_id):
#   Read-only; overall status follows FAILED > INDEXING > READY.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio

import httpx
import structlog

from immuse.interfaces.museum_store import IMuseumStore
from immuse.interfaces.vector_index_provider import IVectorIndexProvider
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
    ArchiveFile,
    ArchiveStatus,
    Museum,
    SourceType,
)
from immuse.utils.errors import ExternalServiceError, ImmuseError, InvalidStateError, NotFoundError
from immuse.utils.files import read_file

logger = structlog.get_logger(logger_name=__name__)


class IngestionService:
    """Feeds a museum's archives into its external retrieval index."""

    def __init__(
        self,
        store: IMuseumStore,
        vector_index: IVectorIndexProvider,
        http_client: httpx.AsyncClient,
    ) -> None:
        self._store = store
        self._vector_index = vector_index
        self._http = http_client

    async def ingest(self, museum_id: str) -> IngestionReport:
        """Ingest every eligible archive of a museum.

        Raises
        ------
        NotFoundError
            Unknown museum.
        InvalidStateError
            Nothing is PENDING or UPLOADED.
        ExternalServiceError
            The index could not be created (no archive was touched).
        """
        museum = await self._require_museum(museum_id)
        archives = await self._store.list_archive_files(
            museum_id,
            statuses=INGESTIBLE_STATUSES,
            newest_first=False,
        )
        if not archives:
            raise InvalidStateError(message="No files to ingest")

        index_id = await self._ensure_index(museum)

        logger.info("ingestion_started", museum_id=museum_id, files=len(archives), vector_store_id=index_id)
        outcomes = [await self._ingest_one(archive, index_id) for archive in archives]

        counts = IngestionCounts(
            total=len(outcomes),
            ready=sum(1 for o in outcomes if o.status is ArchiveStatus.READY),
            failed=sum(1 for o in outcomes if o.status is ArchiveStatus.FAILED),
        )
        logger.info(
            "ingestion_finished",
            museum_id=museum_id,
            total=counts.total,
            ready=counts.ready,
            failed=counts.failed,
        )
        return IngestionReport(vector_store_id=index_id, counts=counts, results=outcomes)

    async def get_status(self, museum_id: str) -> IngestionStatus:
        """Aggregate the per-file statuses of a museum (newest file first)."""
        museum = await self._require_museum(museum_id)
        files = await self._store.list_archive_files(museum_id, newest_first=True)
        return IngestionStatus(
            museum_id=museum.id,
            vector_store_id=museum.vector_store_id,
            overall_status=aggregate_status(archive.status for archive in files),
            status_counts=count_statuses(files),
            files=files,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _require_museum(self, museum_id: str) -> Museum:
        museum = await self._store.get_museum(museum_id)
        if museum is None:
            raise NotFoundError(message="Museum not found")
        return museum

    async def _ensure_index(self, museum: Museum) -> str:
        if museum.vector_store_id:
            return museum.vector_store_id

        index_id = await self._vector_index.create_index(museum.name)
        if await self._store.set_vector_store_id(museum.id, index_id):
            return index_id

        # A concurrent ingestion assigned a handle first; use the stored one.
        current = await self._require_museum(museum.id)
        logger.warning(
            "vector_store_already_assigned",
            museum_id=museum.id,
            kept=current.vector_store_id,
            orphaned=index_id,
        )
        return current.vector_store_id or index_id

    async def _ingest_one(self, archive: ArchiveFile, index_id: str) -> IngestionOutcome:
        """Move one archive from INDEXING to READY or FAILED.

        Every step, including the status writes, is guarded so a failure
        ends as a FAILED outcome and the loop continues with the siblings.
        """
        try:
            await self._store.update_archive_file(archive.id, status=ArchiveStatus.INDEXING)
            data, mime_type = await self._load_bytes(archive)
            file_id = await self._vector_index.upload_file(
                index_id,
                archive.filename,
                data,
                archive.mime_type or mime_type,
            )
            storage_path = archive.source_url if archive.source_type is SourceType.URL else None
            await self._store.update_archive_file(
                archive.id,
                status=ArchiveStatus.READY,
                storage_path=storage_path,
            )
        except Exception as exc:  # noqa: BLE001 - failure is recorded on the archive
            error = exc.message if isinstance(exc, ImmuseError) else str(exc) or type(exc).__name__
            logger.warning(
                "archive_ingest_failed",
                archive_id=archive.id,
                filename=archive.filename,
                error_type=type(exc).__name__,
                error=error,
            )
            await self._mark_failed(archive, error)
            return IngestionOutcome(
                archive_id=archive.id,
                filename=archive.filename,
                status=ArchiveStatus.FAILED,
                error=error,
            )

        logger.info("archive_ingested", archive_id=archive.id, filename=archive.filename, file_id=file_id)
        return IngestionOutcome(
            archive_id=archive.id,
            filename=archive.filename,
            status=ArchiveStatus.READY,
            file_id=file_id,
        )

    async def _mark_failed(self, archive: ArchiveFile, error: str) -> None:
        try:
            await self._store.update_archive_file(archive.id, status=ArchiveStatus.FAILED, error=error)
        except Exception:  # noqa: BLE001 - the outcome still reports FAILED
            logger.exception("archive_status_write_failed", archive_id=archive.id, status="FAILED")

    async def _load_bytes(self, archive: ArchiveFile) -> tuple[bytes, str | None]:
        """Return the archive's bytes and, for URLs, the served content type."""
        if archive.source_type is SourceType.URL:
            if not archive.source_url:
                raise ExternalServiceError(message="URL archive has no source URL")
            try:
                response = await self._http.get(archive.source_url, follow_redirects=True)
            except httpx.HTTPError as exc:
                raise ExternalServiceError(
                    message=f"Failed to download file: {exc}",
                    provider_name="http",
                ) from exc
            if not response.is_success:
                raise ExternalServiceError(
                    message=f"Failed to download file: {response.status_code} {response.reason_phrase}",
                    provider_name="http",
                )
            content_type = response.headers.get("content-type")
            return response.content, content_type.split(";")[0].strip() if content_type else None

        return await asyncio.to_thread(read_file, archive.storage_path), None
