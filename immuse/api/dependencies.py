"""Dependency injection helpers: resolve service singletons from ``app.state``.

Each helper reads one component that ``main._build_all`` attached to the
application state.  Route functions declare the ``...Dep`` aliases as
parameters; tests can hand a ``components`` dict of mocks to
``create_app`` and the same helpers pick them up.
"""

from __future__ import annotations

from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request

from immuse.interfaces.llm_provider import ILLMProvider
from immuse.interfaces.vector_index_provider import IVectorIndexProvider
from immuse.services.archive_service import ArchiveService
from immuse.services.content_service import ContentService
from immuse.services.ingestion_service import IngestionService
from immuse.services.museum_directory import MuseumDirectory
from immuse.services.museum_service import MuseumService
from immuse.services.tour_service import TourService

DEFAULT_MAX_UPLOAD_BYTES = 25 * 1024 * 1024


def _require(request: Request, name: str) -> Any:
    component = getattr(request.app.state, name, None)
    if component is None:
        raise HTTPException(status_code=503, detail=f"Service unavailable: {name}")
    return component


def _get_museum_service(request: Request) -> MuseumService:
    return _require(request, "museum_service")


def _get_archive_service(request: Request) -> ArchiveService:
    return _require(request, "archive_service")


def _get_ingestion_service(request: Request) -> IngestionService:
    return _require(request, "ingestion_service")


def _get_tour_service(request: Request) -> TourService:
    return _require(request, "tour_service")


def _get_content_service(request: Request) -> ContentService:
    return _require(request, "content_service")


def _get_museum_directory(request: Request) -> MuseumDirectory:
    return _require(request, "museum_directory")


def _get_llm_provider(request: Request) -> ILLMProvider | None:
    """Return the LLM provider from application state, or ``None``."""
    return getattr(request.app.state, "primary_llm", None)


def _get_vector_index(request: Request) -> IVectorIndexProvider | None:
    return getattr(request.app.state, "vector_index", None)


def _get_max_upload_bytes(request: Request) -> int:
    return getattr(request.app.state, "max_upload_bytes", None) or DEFAULT_MAX_UPLOAD_BYTES


MuseumServiceDep = Annotated[MuseumService, Depends(_get_museum_service)]
ArchiveServiceDep = Annotated[ArchiveService, Depends(_get_archive_service)]
IngestionServiceDep = Annotated[IngestionService, Depends(_get_ingestion_service)]
TourServiceDep = Annotated[TourService, Depends(_get_tour_service)]
ContentServiceDep = Annotated[ContentService, Depends(_get_content_service)]
MuseumDirectoryDep = Annotated[MuseumDirectory, Depends(_get_museum_directory)]
LLMProviderDep = Annotated[ILLMProvider | None, Depends(_get_llm_provider)]
MaxUploadDep = Annotated[int, Depends(_get_max_upload_bytes)]
VectorIndexDep = Annotated[IVectorIndexProvider | None, Depends(_get_vector_index)]
