"""Archive intake: register uploaded files and remote URLs for a museum.

Uploads are written to ``<upload_dir>/<museum_id>/<uuid4>-<basename>`` and
recorded as UPLOADED.  URLs are only recorded (PENDING); their bytes are
fetched later by the ingestion service.
"""

from __future__ import annotations

import asyncio
import uuid
from pathlib import Path

import structlog

from immuse.interfaces.museum_store import IMuseumStore
from immuse.models.museum import ArchiveFile, ArchiveStatus, SourceType
from immuse.utils.errors import InputValidationError, NotFoundError
from immuse.utils.files import write_file
from immuse.utils.timestamps import utc_now_iso
from immuse.utils.urls import filename_from_url, is_http_url

logger = structlog.get_logger(logger_name=__name__)


class ArchiveService:
    """Create ArchiveFile records from uploads or URLs."""

    def __init__(self, store: IMuseumStore, upload_dir: str | Path) -> None:
        self._store = store
        self._upload_dir = Path(upload_dir)

    async def add_upload(
        self,
        museum_id: str,
        filename: str | None,
        data: bytes | None,
        mime_type: str | None = None,
    ) -> ArchiveFile:
        """Persist uploaded bytes and record them as UPLOADED."""
        await self._require_museum(museum_id)
        if data is None:
            raise InputValidationError(message="No file provided")

        # Path(...).name drops any directory components a client sent along.
        original_name = Path(filename or "").name or "upload"
        target = self._upload_dir / museum_id / f"{uuid.uuid4()}-{original_name}"
        await asyncio.to_thread(write_file, target, data)

        archive = ArchiveFile(
            id=str(uuid.uuid4()),
            museum_id=museum_id,
            filename=original_name,
            mime_type=mime_type or None,
            size_bytes=len(data),
            storage_path=str(target),
            source_type=SourceType.UPLOAD,
            status=ArchiveStatus.UPLOADED,
            created_at=utc_now_iso(),
        )
        await self._store.add_archive_file(archive)
        logger.info(
            "archive_uploaded",
            museum_id=museum_id,
            archive_id=archive.id,
            filename=original_name,
            bytes=len(data),
        )
        return archive

    async def add_url(self, museum_id: str, url: str | None) -> ArchiveFile:
        """Record a remote document as PENDING; nothing is fetched yet."""
        await self._require_museum(museum_id)
        url = (url or "").strip()
        if not url:
            raise InputValidationError(message="URL is required")
        if not is_http_url(url):
            raise InputValidationError(
                message="Validation error",
                details=[{"loc": ["url"], "msg": "URL must be an absolute http(s) URL", "type": "url"}],
            )

        archive = ArchiveFile(
            id=str(uuid.uuid4()),
            museum_id=museum_id,
            filename=filename_from_url(url),
            storage_path="",
            source_type=SourceType.URL,
            source_url=url,
            status=ArchiveStatus.PENDING,
            created_at=utc_now_iso(),
        )
        await self._store.add_archive_file(archive)
        logger.info("archive_url_registered", museum_id=museum_id, archive_id=archive.id, url=url)
        return archive

    async def _require_museum(self, museum_id: str) -> None:
        if await self._store.get_museum(museum_id) is None:
            raise NotFoundError(message="Museum not found")
