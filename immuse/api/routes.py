"""Museum, archive and ingestion routes.

# ─── API ROUTE MAP ────────────────────────────────────────────────────
#
# Endpoint                                  Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/v1/museums                           POST    Register a museum
# /api/v1/museums/directory                 GET     Known museum names
# /api/v1/museums/{id}                      GET     Museum details
# /api/v1/museums/{id}/archives             POST    Add archive (file or URL)
# /api/v1/museums/{id}/ingest               POST    Index archives remotely
# /api/v1/museums/{id}/ingest/status        GET     Aggregated ingest status
# /api/v1/museums/{id}/floorplan            POST    Store a floor plan
# /api/v1/health                            GET     Health check
# /api/v1/health/openai                     GET     Live OpenAI key + vector store check
#
# Tour routes live in tour_routes.py, wizard content in content_routes.py.
# ``/museums/directory`` is declared before ``/museums/{id}`` so the
# literal path wins.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import json
from typing import Any

import structlog
from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.datastructures import UploadFile

from immuse import __version__
from immuse.api.dependencies import (
    ArchiveServiceDep,
    IngestionServiceDep,
    LLMProviderDep,
    MaxUploadDep,
    MuseumDirectoryDep,
    MuseumServiceDep,
    VectorIndexDep,
)
from immuse.api.schemas import (
    AddArchiveUrlRequest,
    ArchiveResponse,
    ArchiveStatusEntry,
    CreateMuseumRequest,
    CreateMuseumResponse,
    ErrorResponse,
    FloorPlanRequest,
    FloorPlanResponse,
    HealthResponse,
    IngestionCountsResponse,
    IngestionResultResponse,
    IngestResponse,
    IngestStatusResponse,
    MuseumResponse,
    OpenAICheckResponse,
)
from immuse.services.museum_service import parse_floor_plan_structure
from immuse.utils.errors import ExternalServiceError, InputValidationError
from immuse.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["museums"])

# Uploads are read in 64 KB increments so oversized files are rejected
# without buffering the whole payload.
_UPLOAD_CHUNK_SIZE = 64 * 1024

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


async def _read_upload(upload: UploadFile, max_bytes: int) -> bytes:
    chunks: list[bytes] = []
    total_size = 0
    while True:
        chunk = await upload.read(_UPLOAD_CHUNK_SIZE)
        if not chunk:
            break
        total_size += len(chunk)
        if total_size > max_bytes:
            _logger.warning("upload_rejected", filename=upload.filename, max_bytes=max_bytes)
            raise HTTPException(
                status_code=413,
                detail=f"File too large: maximum is {max_bytes} bytes",
            )
        chunks.append(chunk)
    return b"".join(chunks)


async def _json_body(request: Request) -> dict[str, Any]:
    """Parse a JSON object body; anything unparseable counts as empty."""
    try:
        body = await request.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _is_multipart(request: Request) -> bool:
    return request.headers.get("content-type", "").startswith("multipart/form-data")


# ---------------------------------------------------------------------------
# Museums
# ---------------------------------------------------------------------------


@router.post(
    "/museums",
    response_model=CreateMuseumResponse,
    responses=_ERROR_RESPONSES,
    summary="Register a museum",
)
async def create_museum(body: CreateMuseumRequest, museums: MuseumServiceDep) -> CreateMuseumResponse:
    museum = await museums.create_museum(body.name, website=body.website, description=body.description)
    return CreateMuseumResponse(id=museum.id)


@router.get("/museums/directory", response_model=list[str], summary="Known museum names")
async def list_museum_directory(directory: MuseumDirectoryDep) -> list[str]:
    """Names for the wizard's museum picker; never fails, falls back to a fixed list."""
    return await directory.list_museums()


@router.get(
    "/museums/{museum_id}",
    response_model=MuseumResponse,
    responses=_ERROR_RESPONSES,
    summary="Museum details",
)
async def get_museum(museum_id: str, museums: MuseumServiceDep) -> MuseumResponse:
    museum = await museums.get_museum(museum_id)
    return MuseumResponse(
        id=museum.id,
        name=museum.name,
        website=museum.website,
        description=museum.description,
        vector_store_id=museum.vector_store_id,
        created_at=museum.created_at,
    )


# ---------------------------------------------------------------------------
# Archives & ingestion
# ---------------------------------------------------------------------------


@router.post(
    "/museums/{museum_id}/archives",
    response_model=ArchiveResponse,
    responses={**_ERROR_RESPONSES, 413: {"model": ErrorResponse}},
    summary="Add an archive document (multipart file or JSON url)",
)
async def add_archive(
    museum_id: str,
    request: Request,
    archives: ArchiveServiceDep,
    max_upload_bytes: MaxUploadDep,
) -> ArchiveResponse:
    """Multipart bodies carry the document in a ``file`` field; JSON bodies carry ``{"url": ...}``."""
    if _is_multipart(request):
        async with request.form() as form:
            upload = form.get("file")
            if isinstance(upload, UploadFile):
                data = await _read_upload(upload, max_upload_bytes)
                archive = await archives.add_upload(museum_id, upload.filename, data, upload.content_type)
            else:
                archive = await archives.add_upload(museum_id, None, None)
    else:
        try:
            payload = AddArchiveUrlRequest.model_validate(await _json_body(request))
        except ValidationError as exc:
            raise InputValidationError(details=json.loads(exc.json(include_url=False))) from exc
        archive = await archives.add_url(museum_id, payload.url)

    return ArchiveResponse(id=archive.id, filename=archive.filename, status=archive.status)


@router.post(
    "/museums/{museum_id}/ingest",
    response_model=IngestResponse,
    responses={**_ERROR_RESPONSES, 502: {"model": ErrorResponse}},
    summary="Index the museum's pending archives in the vector store",
)
async def ingest_archives(museum_id: str, ingestion: IngestionServiceDep) -> IngestResponse:
    report = await ingestion.ingest(museum_id)
    return IngestResponse(
        vector_store_id=report.vector_store_id,
        counts=IngestionCountsResponse(
            total=report.counts.total,
            ready=report.counts.ready,
            failed=report.counts.failed,
        ),
        results=[
            IngestionResultResponse(
                id=outcome.archive_id,
                filename=outcome.filename,
                status=outcome.status,
                error=outcome.error,
                file_id=outcome.file_id,
            )
            for outcome in report.results
        ],
    )


@router.get(
    "/museums/{museum_id}/ingest/status",
    response_model=IngestStatusResponse,
    responses=_ERROR_RESPONSES,
    summary="Aggregated ingestion status",
)
async def get_ingest_status(museum_id: str, ingestion: IngestionServiceDep) -> IngestStatusResponse:
    status = await ingestion.get_status(museum_id)
    return IngestStatusResponse(
        museum_id=status.museum_id,
        vector_store_id=status.vector_store_id,
        overall_status=status.overall_status,
        status_counts=status.status_counts,
        files=[
            ArchiveStatusEntry(
                id=archive.id,
                filename=archive.filename,
                status=archive.status,
                error=archive.error,
                created_at=archive.created_at,
            )
            for archive in status.files
        ],
    )


# ---------------------------------------------------------------------------
# Floor plan
# ---------------------------------------------------------------------------


@router.post(
    "/museums/{museum_id}/floorplan",
    response_model=FloorPlanResponse,
    responses={**_ERROR_RESPONSES, 413: {"model": ErrorResponse}},
    summary="Store a floor plan (image, notes and/or room structure)",
)
async def save_floor_plan(
    museum_id: str,
    request: Request,
    museums: MuseumServiceDep,
    max_upload_bytes: MaxUploadDep,
) -> FloorPlanResponse:
    image_filename: str | None = None
    image_data: bytes | None = None

    if _is_multipart(request):
        async with request.form() as form:
            image = form.get("image")
            if isinstance(image, UploadFile):
                image_filename = image.filename
                image_data = await _read_upload(image, max_upload_bytes)
            notes = form.get("notes")
            raw_structure = form.get("structure")
        notes = notes if isinstance(notes, str) else None
        structure = parse_floor_plan_structure(raw_structure if isinstance(raw_structure, str) else None)
    else:
        try:
            payload = FloorPlanRequest.model_validate(await _json_body(request))
        except ValidationError as exc:
            raise InputValidationError(details=json.loads(exc.json(include_url=False))) from exc
        notes = payload.notes
        structure = parse_floor_plan_structure(payload.structure)

    floor_plan = await museums.save_floor_plan(
        museum_id,
        notes=notes,
        structure=structure,
        image_filename=image_filename,
        image_data=image_data,
    )
    return FloorPlanResponse(
        id=floor_plan.id,
        image_path=floor_plan.image_path,
        notes=floor_plan.notes,
        structure=floor_plan.structure,
    )


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@router.get("/health", response_model=HealthResponse, tags=["health"], summary="Application health check")
async def health_check(llm: LLMProviderDep) -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        provider=llm.get_provider_name() if llm is not None else "none",
        openai_configured=llm.is_available() if llm is not None else False,
    )


_CHECK_VECTOR_STORE_NAME = "Immuse connectivity check"


@router.get(
    "/health/openai",
    response_model=OpenAICheckResponse,
    response_model_exclude_none=True,
    responses={500: {"model": OpenAICheckResponse}},
    tags=["health"],
    summary="Live OpenAI check: credentials and vector store API",
)
async def openai_check(llm: LLMProviderDep, vector_index: VectorIndexDep) -> OpenAICheckResponse | JSONResponse:
    """List models with the configured key, then create a throwaway vector store.

    Failures are reported as ``{"success": false, "error": ...}`` with
    status 500 instead of going through the error middleware.
    """
    if llm is None or vector_index is None:
        return _openai_check_failed("OpenAI providers are not configured")
    if not await llm.validate_credentials():
        return _openai_check_failed("OpenAI API key is missing or was rejected")
    try:
        vector_store_id = await vector_index.create_index(_CHECK_VECTOR_STORE_NAME)
    except ExternalServiceError as exc:
        return _openai_check_failed(exc.message)

    _logger.info("openai_check_passed", vector_store_id=vector_store_id)
    return OpenAICheckResponse(
        success=True,
        provider=llm.get_provider_name(),
        vector_store_id=vector_store_id,
        message="OpenAI API connection successful",
    )


def _openai_check_failed(error: str) -> JSONResponse:
    _logger.warning("openai_check_failed", error=error)
    body = OpenAICheckResponse(success=False, error=error)
    return JSONResponse(status_code=500, content=body.model_dump(by_alias=True, exclude_none=True))
