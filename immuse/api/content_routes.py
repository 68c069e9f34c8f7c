"""Wizard content routes: option chips, tour preview card, story intro.

All three degrade to deterministic content when generation fails, so they
only error on malformed requests.
"""

from __future__ import annotations

from fastapi import APIRouter

from immuse.api.dependencies import ContentServiceDep
from immuse.api.schemas import ContentRequest, DynamicChipsRequest, ErrorResponse
from immuse.models.content import ChipSets, Preview, StoryIntro

router = APIRouter(prefix="/api/v1", tags=["content"])


@router.post(
    "/dynamic-chips",
    response_model=ChipSets,
    responses={400: {"model": ErrorResponse}},
    summary="Museum-specific motivation and interest options",
)
async def dynamic_chips(body: DynamicChipsRequest, content: ContentServiceDep) -> ChipSets:
    return await content.dynamic_chips(body.museum_id, body.museum_data.model_dump())


@router.post(
    "/preview",
    response_model=Preview,
    responses={400: {"model": ErrorResponse}},
    summary="Personalised preview card",
)
async def preview(body: ContentRequest, content: ContentServiceDep) -> Preview:
    museum_data = body.museum_data.model_dump() if body.museum_data else None
    return await content.preview(body.museum_id, body.selections, museum_data)


@router.post(
    "/story-intro",
    response_model=StoryIntro,
    responses={400: {"model": ErrorResponse}},
    summary="Welcome text and room outline",
)
async def story_intro(body: ContentRequest, content: ContentServiceDep) -> StoryIntro:
    museum_data = body.museum_data.model_dump() if body.museum_data else None
    return await content.story_intro(body.museum_id, body.selections, museum_data)
