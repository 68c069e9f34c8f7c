"""Tour generation routes.

``POST /tours/preview`` is registered before ``GET /tours/{tour_id}``;
the methods differ, but keeping literal paths first avoids surprises if a
GET preview is ever added.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter

from immuse.api.dependencies import ContentServiceDep, TourServiceDep
from immuse.api.schemas import (
    CreateTourRequest,
    CreateTourResponse,
    ErrorResponse,
    TourDetailResponse,
    TourMuseumSummary,
    TourPreviewRequest,
    TourPreviewResponse,
    TourRequestSummary,
)
from immuse.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["tours"])

_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


@router.post(
    "/tours",
    response_model=CreateTourResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
    summary="Generate a personalised tour",
)
async def create_tour(body: CreateTourRequest, tours: TourServiceDep) -> CreateTourResponse:
    """Generate a tour grounded in the museum's indexed archives.

    Generation failures are not errors here: a deterministic fallback plan
    is stored and returned together with a ``warning``.
    """
    creation = await tours.create_tour(body.museum_id, body.interests, body.level, body.minutes)
    if creation.warning:
        _logger.warning("tour_fallback_returned", tour_id=creation.plan.id, museum_id=body.museum_id)
    return CreateTourResponse(
        id=creation.plan.id,
        tour_request_id=creation.plan.tour_request_id,
        result=creation.plan.result,
        warning=creation.warning,
    )


@router.post(
    "/tours/preview",
    response_model=TourPreviewResponse,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
    summary="Short free-text teaser of the first room",
)
async def preview_tour(body: TourPreviewRequest, content: ContentServiceDep) -> TourPreviewResponse:
    preview = await content.tour_preview(body.museum_name, body.level, body.minutes, body.interests)
    return TourPreviewResponse(
        museum_name=preview.museum_name,
        tour_content=preview.tour_content,
        level=preview.level,
        minutes=preview.minutes,
        interests=preview.interests,
    )


@router.get(
    "/tours/{tour_id}",
    response_model=TourDetailResponse,
    responses=_ERROR_RESPONSES,
    summary="Stored tour with its museum and request",
)
async def get_tour(tour_id: str, tours: TourServiceDep) -> TourDetailResponse:
    details = await tours.get_tour(tour_id)
    return TourDetailResponse(
        id=details.plan.id,
        museum=TourMuseumSummary(name=details.museum.name, description=details.museum.description),
        tour_request=TourRequestSummary(
            interests=details.request.interests,
            level=details.request.level,
            minutes=details.request.minutes,
            created_at=details.request.created_at,
        ),
        result=details.plan.result,
        created_at=details.plan.created_at,
    )
