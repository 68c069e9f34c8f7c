"""Tour generation and retrieval.

A tour is only generated for a museum whose archives were indexed at least
once (it has a vector store).  The request is persisted first; the plan is
then generated with file search over the museum's index.  Any generation
failure yields the deterministic single-stop fallback plus a warning; in
both cases exactly one TourPlan is stored for the request.
"""

from __future__ import annotations

import json
import uuid
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, ValidationError

from immuse.config.loader import generation_params
from immuse.interfaces.llm_provider import ILLMProvider
from immuse.interfaces.museum_store import IMuseumStore
from immuse.models.museum import Museum
from immuse.models.tour import (
    TourLevel,
    TourPlan,
    TourPlanDocument,
    TourRequest,
    fallback_tour_plan,
)
from immuse.services.fallback import attempt
from immuse.utils.errors import InputValidationError, InvalidStateError, NotFoundError
from immuse.utils.schema import strict_json_schema
from immuse.utils.timestamps import utc_now_iso

logger = structlog.get_logger(logger_name=__name__)

FALLBACK_WARNING = "Fallback tour generated due to API error"

_SYSTEM_PROMPT = """\
You are a museum curator and route planner. Answer in {language}.
Use only the information found in the attached museum files (file search is enabled).
Build a linear route that fits the visitor's time budget and level.
Follow the visitor's interests and briefly explain for every stop why it matters.
Use real hall names or numbers whenever the files or the hall list provide them.
Stop minutes must not add up to more than the time budget.
Return ONLY JSON that follows the provided schema."""

_LEVEL_LABELS = {
    TourLevel.CHILDREN: "children (playful, simple language)",
    TourLevel.ADULTS: "adults (general audience)",
    TourLevel.PROFESSIONALS: "professionals (expert depth, terminology welcome)",
}


class TourCreation(BaseModel):
    """Result of :meth:`TourService.create_tour`."""

    model_config = ConfigDict(frozen=True)

    plan: TourPlan
    warning: str | None = None


class TourDetails(BaseModel):
    """A stored tour with the museum and request it belongs to."""

    model_config = ConfigDict(frozen=True)

    plan: TourPlan
    museum: Museum
    request: TourRequest


class TourService:
    """Generates, persists and retrieves tour plans."""

    def __init__(
        self,
        store: IMuseumStore,
        llm: ILLMProvider,
        config: dict[str, Any] | None = None,
        response_language: str = "Ukrainian",
    ) -> None:
        self._store = store
        self._llm = llm
        self._params = generation_params(config or {}, "tour")
        self._language = response_language
        self._schema = strict_json_schema(TourPlanDocument)

    async def create_tour(
        self,
        museum_id: str,
        interests: list[str],
        level: TourLevel | str,
        minutes: int,
    ) -> TourCreation:
        """Validate, persist the request, generate (or fall back) and persist the plan.

        Raises
        ------
        InputValidationError
            Empty interests, unknown level or minutes outside 15..180.
        NotFoundError
            Unknown museum.
        InvalidStateError
            The museum has never been ingested (no vector store).
        """
        try:
            tour_request = TourRequest(
                id=str(uuid.uuid4()),
                museum_id=museum_id,
                interests=[i.strip() for i in interests if i and i.strip()],
                level=level,
                minutes=minutes,
                created_at=utc_now_iso(),
            )
        except ValidationError as exc:
            raise InputValidationError(
                message="Validation error",
                details=json.loads(exc.json(include_url=False)),
            ) from exc

        museum = await self._store.get_museum(museum_id)
        if museum is None:
            raise NotFoundError(message="Museum not found")
        if not museum.vector_store_id:
            raise InvalidStateError(message="Museum archives not processed yet")

        await self._store.create_tour_request(tour_request)

        hall_names = await self._hall_names(museum_id)
        outcome = await attempt(
            lambda: self._llm.complete_structured(
                _SYSTEM_PROMPT.format(language=self._language),
                self._user_prompt(museum, tour_request, hall_names),
                schema_name="TourPlan",
                schema=self._schema,
                temperature=self._params["temperature"],
                max_tokens=self._params["max_tokens"],
                vector_store_ids=[museum.vector_store_id],
            ),
            fallback=lambda: fallback_tour_plan(museum.name, tour_request.minutes),
            schema=TourPlanDocument,
            operation="tour",
        )

        plan = TourPlan(
            id=str(uuid.uuid4()),
            museum_id=museum_id,
            tour_request_id=tour_request.id,
            result=outcome.value,
            created_at=utc_now_iso(),
        )
        await self._store.save_tour_plan(plan)
        logger.info(
            "tour_created",
            museum_id=museum_id,
            tour_id=plan.id,
            stops=len(plan.result.stops),
            fallback=outcome.used_fallback,
        )
        return TourCreation(plan=plan, warning=FALLBACK_WARNING if outcome.used_fallback else None)

    async def get_tour(self, tour_id: str) -> TourDetails:
        plan = await self._store.get_tour_plan(tour_id)
        if plan is None:
            raise NotFoundError(message="Tour not found")
        museum = await self._store.get_museum(plan.museum_id)
        request = await self._store.get_tour_request(plan.tour_request_id)
        if museum is None or request is None:
            raise NotFoundError(message="Tour not found")
        return TourDetails(plan=plan, museum=museum, request=request)

    async def _hall_names(self, museum_id: str) -> list[str]:
        floor_plan = await self._store.get_latest_floor_plan(museum_id)
        if floor_plan is None or floor_plan.structure is None:
            return []
        return floor_plan.structure.room_names()

    @staticmethod
    def _user_prompt(museum: Museum, tour_request: TourRequest, hall_names: list[str]) -> str:
        lines = [
            f"Museum: {museum.name}",
            f"Description: {museum.description or 'no description'}",
            f"Interests: {', '.join(tour_request.interests)}",
            f"Level: {_LEVEL_LABELS[tour_request.level]}",
            f"Time: {tour_request.minutes} min",
        ]
        if hall_names:
            lines.append(f"Known halls: {', '.join(hall_names)}")
        return "\n".join(lines)
