"""Shared pytest fixtures for the Immuse test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from immuse.interfaces.llm_provider import ILLMProvider
from immuse.interfaces.vector_index_provider import IVectorIndexProvider
from immuse.models.museum import ArchiveFile, ArchiveStatus, Museum, SourceType
from immuse.providers.store.sqlite_museum_store import SQLiteMuseumStore
from immuse.utils.timestamps import utc_now_iso

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Return a minimal configuration dict for services."""
    return {
        "app": {"name": "immuse", "version": "0.1.0"},
        "generation": {
            "tour": {"temperature": 0.5, "max_tokens": 2000},
            "dynamic_chips": {"temperature": 0.7, "max_tokens": 1000},
            "preview": {"temperature": 0.8, "max_tokens": 1500},
            "story_intro": {"temperature": 0.8, "max_tokens": 1200},
            "tour_preview": {"temperature": 0.7, "max_tokens": 500},
        },
        "museum_directory": {"limit": 20},
        "polling": {"interval_seconds": 0.0, "max_attempts": 3, "timeout_seconds": None},
    }


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


@pytest.fixture
async def store(tmp_path: Path) -> SQLiteMuseumStore:
    """Initialised SQLite store in a per-test temp directory."""
    museum_store = SQLiteMuseumStore(db_path=tmp_path / "immuse.db")
    await museum_store.initialize()
    return museum_store


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


def make_museum(
    museum_id: str = "museum-1",
    name: str = "Museum of Kyiv History",
    vector_store_id: str | None = None,
    **kwargs: Any,
) -> Museum:
    return Museum(
        id=museum_id,
        name=name,
        website=kwargs.get("website", "https://kyivhistory.example.org"),
        description=kwargs.get("description", "City history from the Kyivan Rus to today"),
        vector_store_id=vector_store_id,
        created_at=kwargs.get("created_at", utc_now_iso()),
    )


def make_archive(
    archive_id: str,
    museum_id: str = "museum-1",
    status: ArchiveStatus = ArchiveStatus.UPLOADED,
    **kwargs: Any,
) -> ArchiveFile:
    source_type = kwargs.get("source_type", SourceType.UPLOAD)
    return ArchiveFile(
        id=archive_id,
        museum_id=museum_id,
        filename=kwargs.get("filename", f"{archive_id}.pdf"),
        mime_type=kwargs.get("mime_type", "application/pdf"),
        size_bytes=kwargs.get("size_bytes"),
        storage_path=kwargs.get("storage_path", ""),
        source_type=source_type,
        source_url=kwargs.get("source_url"),
        status=status,
        error=kwargs.get("error"),
        created_at=kwargs.get("created_at", utc_now_iso()),
    )


# ---------------------------------------------------------------------------
# Provider mocks
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_llm() -> MagicMock:
    """LLM provider whose calls fail unless a test configures them."""
    llm = MagicMock(spec=ILLMProvider)
    llm.complete = AsyncMock(return_value="In the first room you will see...")
    llm.complete_structured = AsyncMock(side_effect=RuntimeError("LLM not configured in this test"))
    llm.get_provider_name.return_value = "mock_llm"
    llm.is_available.return_value = True
    llm.validate_credentials = AsyncMock(return_value=True)
    return llm


@pytest.fixture
def mock_vector_index() -> MagicMock:
    """Vector index that hands out sequential store and file ids."""
    index = MagicMock(spec=IVectorIndexProvider)
    index.create_index = AsyncMock(return_value="vs_test_1")
    counter = {"n": 0}

    async def _upload(index_id: str, filename: str, data: bytes, mime_type: str | None = None) -> str:
        counter["n"] += 1
        return f"file_{counter['n']}"

    index.upload_file = AsyncMock(side_effect=_upload)
    index.get_provider_name.return_value = "mock_vector_index"
    return index


@pytest.fixture
def sample_tour_document() -> dict[str, Any]:
    """A well-formed TourPlan answer as the model would return it."""
    return {
        "museum": "Museum of Kyiv History",
        "total_minutes": 60,
        "stops": [
            {
                "title": "Kyivan Rus treasures",
                "room": "Hall 1",
                "minutes": 20,
                "why": "Matches your interest in medieval jewellery",
                "source_refs": ["guide.pdf"],
            },
            {
                "title": "Cossack era",
                "room": "Hall 3",
                "minutes": 25,
                "why": "Weapons and everyday objects of the Hetmanate",
                "source_refs": [],
            },
        ],
        "route_notes": "Start on the ground floor and go clockwise.",
        "fallbacks": ["If Hall 3 is closed, visit Hall 4"],
    }


@pytest.fixture
def museum_factory():
    """Return :func:`make_museum` so tests can build museums inline."""
    return make_museum


@pytest.fixture
def archive_factory():
    """Return :func:`make_archive` so tests can build archives inline."""
    return make_archive
