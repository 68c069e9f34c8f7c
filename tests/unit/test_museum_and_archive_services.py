"""Unit tests for MuseumService and ArchiveService against a real SQLite store."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from immuse.models.museum import ArchiveStatus, SourceType
from immuse.services.archive_service import ArchiveService
from immuse.services.museum_service import MuseumService, parse_floor_plan_structure
from immuse.utils.errors import InputValidationError, NotFoundError


@pytest.fixture
def museums(store, upload_dir) -> MuseumService:
    return MuseumService(store, upload_dir)


@pytest.fixture
def archives(store, upload_dir) -> ArchiveService:
    return ArchiveService(store, upload_dir)


# ─── Museums ──────────────────────────────────────────────────────

class TestCreateMuseum:
    @pytest.mark.asyncio
    async def test_creates_and_persists(self, museums, store) -> None:
        museum = await museums.create_museum("  Museum of Hetmanate ", website="https://hetman.example.org")

        assert museum.name == "Museum of Hetmanate"
        assert museum.vector_store_id is None
        assert await store.get_museum(museum.id) == museum

    @pytest.mark.asyncio
    async def test_blank_website_means_none(self, museums) -> None:
        museum = await museums.create_museum("Museum", website="", description="  ")
        assert museum.website is None
        assert museum.description is None

    @pytest.mark.asyncio
    async def test_blank_name_rejected(self, museums) -> None:
        with pytest.raises(InputValidationError) as exc_info:
            await museums.create_museum("   ")
        assert exc_info.value.details[0]["loc"] == ["name"]

    @pytest.mark.asyncio
    async def test_non_http_website_rejected(self, museums) -> None:
        with pytest.raises(InputValidationError):
            await museums.create_museum("Museum", website="ftp://files.example.org")

    @pytest.mark.asyncio
    async def test_get_unknown_museum(self, museums) -> None:
        with pytest.raises(NotFoundError):
            await museums.get_museum("missing")


class TestFloorPlan:
    @pytest.mark.asyncio
    async def test_saves_image_notes_and_structure(self, museums, upload_dir: Path) -> None:
        museum = await museums.create_museum("Museum")
        structure = parse_floor_plan_structure(json.dumps({
            "floors": [{"name": "F1", "rooms": [{"id": "r", "name": "Hall 1", "bbox": [0, 0, 1, 1]}]}],
        }))

        plan = await museums.save_floor_plan(
            museum.id,
            notes=" entrance on the left ",
            structure=structure,
            image_filename="../../plan.png",
            image_data=b"\x89PNG",
        )

        assert plan.notes == "entrance on the left"
        image_path = Path(plan.image_path)
        assert image_path.read_bytes() == b"\x89PNG"
        assert image_path.name.endswith("-plan.png")
        assert upload_dir in image_path.parents

    @pytest.mark.asyncio
    async def test_unknown_museum(self, museums) -> None:
        with pytest.raises(NotFoundError):
            await museums.save_floor_plan("missing", notes="x")

    def test_parse_structure_rejects_garbage(self) -> None:
        with pytest.raises(InputValidationError) as exc_info:
            parse_floor_plan_structure("{not json")
        assert exc_info.value.message == "Invalid floor plan structure"

    def test_parse_structure_none(self) -> None:
        assert parse_floor_plan_structure(None) is None


# ─── Archives ─────────────────────────────────────────────────────

class TestArchiveUpload:
    @pytest.mark.asyncio
    async def test_upload_stored_as_uploaded(self, museums, archives, store) -> None:
        museum = await museums.create_museum("Museum")

        archive = await archives.add_upload(museum.id, "guide.pdf", b"%PDF-1.4", "application/pdf")

        assert archive.status is ArchiveStatus.UPLOADED
        assert archive.source_type is SourceType.UPLOAD
        assert archive.size_bytes == 8
        assert Path(archive.storage_path).read_bytes() == b"%PDF-1.4"
        assert (await store.list_archive_files(museum.id))[0].id == archive.id

    @pytest.mark.asyncio
    async def test_directory_components_stripped(self, museums, archives) -> None:
        museum = await museums.create_museum("Museum")
        archive = await archives.add_upload(museum.id, "../../etc/passwd", b"x")
        assert archive.filename == "passwd"

    @pytest.mark.asyncio
    async def test_missing_file(self, museums, archives) -> None:
        museum = await museums.create_museum("Museum")
        with pytest.raises(InputValidationError, match="No file provided"):
            await archives.add_upload(museum.id, None, None)

    @pytest.mark.asyncio
    async def test_unknown_museum_checked_first(self, archives) -> None:
        with pytest.raises(NotFoundError):
            await archives.add_upload("missing", None, None)


class TestArchiveUrl:
    @pytest.mark.asyncio
    async def test_url_registered_as_pending(self, museums, archives) -> None:
        museum = await museums.create_museum("Museum")

        archive = await archives.add_url(museum.id, "https://example.org/files/catalogue.pdf")

        assert archive.status is ArchiveStatus.PENDING
        assert archive.source_type is SourceType.URL
        assert archive.filename == "catalogue.pdf"
        assert archive.storage_path == ""

    @pytest.mark.asyncio
    async def test_blank_url(self, museums, archives) -> None:
        museum = await museums.create_museum("Museum")
        with pytest.raises(InputValidationError, match="URL is required"):
            await archives.add_url(museum.id, "  ")

    @pytest.mark.asyncio
    async def test_non_http_url(self, museums, archives) -> None:
        museum = await museums.create_museum("Museum")
        with pytest.raises(InputValidationError):
            await archives.add_url(museum.id, "file:///etc/passwd")
