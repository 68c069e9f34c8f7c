"""Museum registry and floor plans."""

from __future__ import annotations

import asyncio
import json
import uuid
from pathlib import Path
from typing import Any

import structlog
from pydantic import ValidationError

from immuse.interfaces.museum_store import IMuseumStore
from immuse.models.museum import FloorPlan, FloorPlanStructure, Museum
from immuse.utils.errors import InputValidationError, NotFoundError
from immuse.utils.files import write_file
from immuse.utils.timestamps import utc_now_iso
from immuse.utils.urls import is_http_url

logger = structlog.get_logger(logger_name=__name__)


def parse_floor_plan_structure(raw: str | dict[str, Any] | None) -> FloorPlanStructure | None:
    """Validate a floor-plan structure given as JSON text or a dict.

    Raises
    ------
    InputValidationError
        If the JSON is malformed or does not match the structure model.
    """
    if raw is None or raw == "":
        return None
    try:
        if isinstance(raw, str):
            return FloorPlanStructure.model_validate_json(raw)
        return FloorPlanStructure.model_validate(raw)
    except ValidationError as exc:
        raise InputValidationError(
            message="Invalid floor plan structure",
            details=json.loads(exc.json(include_url=False)),
        ) from exc


class MuseumService:
    """Create and look up museums; store their floor plans."""

    def __init__(self, store: IMuseumStore, upload_dir: str | Path) -> None:
        self._store = store
        self._upload_dir = Path(upload_dir)

    async def create_museum(
        self,
        name: str,
        website: str | None = None,
        description: str | None = None,
    ) -> Museum:
        name = (name or "").strip()
        if not name:
            raise InputValidationError(
                message="Validation error",
                details=[{"loc": ["name"], "msg": "Museum name is required", "type": "missing"}],
            )
        website = (website or "").strip() or None
        if website is not None and not is_http_url(website):
            raise InputValidationError(
                message="Validation error",
                details=[{"loc": ["website"], "msg": "Website must be an http(s) URL", "type": "url"}],
            )

        museum = Museum(
            id=str(uuid.uuid4()),
            name=name,
            website=website,
            description=(description or "").strip() or None,
            created_at=utc_now_iso(),
        )
        await self._store.create_museum(museum)
        logger.info("museum_created", museum_id=museum.id, name=museum.name)
        return museum

    async def get_museum(self, museum_id: str) -> Museum:
        museum = await self._store.get_museum(museum_id)
        if museum is None:
            raise NotFoundError(message="Museum not found")
        return museum

    async def save_floor_plan(
        self,
        museum_id: str,
        *,
        notes: str | None = None,
        structure: FloorPlanStructure | None = None,
        image_filename: str | None = None,
        image_data: bytes | None = None,
    ) -> FloorPlan:
        """Store a floor plan; the optional image goes next to the archives."""
        await self.get_museum(museum_id)

        image_path: str | None = None
        if image_data is not None:
            safe_name = Path(image_filename or "floorplan").name or "floorplan"
            target = self._upload_dir / museum_id / "floorplan" / f"{uuid.uuid4()}-{safe_name}"
            await asyncio.to_thread(write_file, target, image_data)
            image_path = str(target)

        floor_plan = FloorPlan(
            id=str(uuid.uuid4()),
            museum_id=museum_id,
            image_path=image_path,
            notes=(notes or "").strip() or None,
            structure=structure,
            created_at=utc_now_iso(),
        )
        await self._store.save_floor_plan(floor_plan)
        logger.info(
            "floor_plan_saved",
            museum_id=museum_id,
            floor_plan_id=floor_plan.id,
            has_image=image_path is not None,
            floors=len(structure.floors) if structure else 0,
        )
        return floor_plan
