"""SQLite-backed museum persistence.

# ─── ARCHITECTURE ROLE ───────────────────────────────────────────────
#
# Layer: Providers (concrete adapter implementing IMuseumStore).
#
# Database: ``data/immuse.db`` by default (``DATABASE_PATH``).
#
# Tables:
#   museums        : tenant rows, including the external index handle
#   archive_files  : one row per uploaded file / registered URL
#   floor_plans    : operator floor plans (structure stored as JSON text)
#   tour_requests  : visitor preferences (interests stored as JSON text)
#   tour_plans     : generated result per request (1:1, JSON text)
#
# Timestamps are ISO-8601 UTC strings with microseconds.  Newest-first
# listings order by created_at and fall back to rowid for identical
# timestamps, so insertion order is always preserved.
#
# Uses ``aiosqlite`` for async I/O and ``PRAGMA journal_mode=WAL`` for
# concurrent read safety.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import json
from collections.abc import Collection
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from immuse.interfaces.museum_store import IMuseumStore
from immuse.models.museum import (
    ArchiveFile,
    ArchiveStatus,
    FloorPlan,
    FloorPlanStructure,
    Museum,
    SourceType,
)
from immuse.models.tour import TourLevel, TourPlan, TourPlanDocument, TourRequest

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/immuse.db")

# ── Schema DDL ────────────────────────────────────────────────────────

_CREATE_MUSEUMS_TABLE = """\
CREATE TABLE IF NOT EXISTS museums (
    id               TEXT PRIMARY KEY,
    name             TEXT NOT NULL,
    website          TEXT,
    description      TEXT,
    vector_store_id  TEXT,
    created_at       TEXT NOT NULL
);
"""

_CREATE_ARCHIVE_FILES_TABLE = """\
CREATE TABLE IF NOT EXISTS archive_files (
    id            TEXT PRIMARY KEY,
    museum_id     TEXT NOT NULL REFERENCES museums(id),
    filename      TEXT NOT NULL,
    mime_type     TEXT,
    size_bytes    INTEGER,
    storage_path  TEXT NOT NULL DEFAULT '',
    source_type   TEXT NOT NULL,
    source_url    TEXT,
    status        TEXT NOT NULL,
    error         TEXT,
    created_at    TEXT NOT NULL
);
"""

_CREATE_FLOOR_PLANS_TABLE = """\
CREATE TABLE IF NOT EXISTS floor_plans (
    id          TEXT PRIMARY KEY,
    museum_id   TEXT NOT NULL REFERENCES museums(id),
    image_path  TEXT,
    notes       TEXT,
    structure   TEXT,
    created_at  TEXT NOT NULL
);
"""

_CREATE_TOUR_REQUESTS_TABLE = """\
CREATE TABLE IF NOT EXISTS tour_requests (
    id          TEXT PRIMARY KEY,
    museum_id   TEXT NOT NULL REFERENCES museums(id),
    interests   TEXT NOT NULL,
    level       TEXT NOT NULL,
    minutes     INTEGER NOT NULL,
    created_at  TEXT NOT NULL
);
"""

_CREATE_TOUR_PLANS_TABLE = """\
CREATE TABLE IF NOT EXISTS tour_plans (
    id               TEXT PRIMARY KEY,
    museum_id        TEXT NOT NULL REFERENCES museums(id),
    tour_request_id  TEXT NOT NULL UNIQUE REFERENCES tour_requests(id),
    result           TEXT NOT NULL,
    created_at       TEXT NOT NULL
);
"""

_CREATE_INDICES = [
    "CREATE INDEX IF NOT EXISTS idx_archive_museum ON archive_files(museum_id, created_at);",
    "CREATE INDEX IF NOT EXISTS idx_archive_status ON archive_files(museum_id, status);",
    "CREATE INDEX IF NOT EXISTS idx_floor_plans_museum ON floor_plans(museum_id, created_at);",
    "CREATE INDEX IF NOT EXISTS idx_tour_requests_museum ON tour_requests(museum_id, created_at);",
]

# ── DML ───────────────────────────────────────────────────────────────

_INSERT_MUSEUM = """\
INSERT INTO museums (id, name, website, description, vector_store_id, created_at)
VALUES (?, ?, ?, ?, ?, ?);
"""

_SELECT_MUSEUM = """\
SELECT id, name, website, description, vector_store_id, created_at
FROM museums WHERE id = ?;
"""

# Only assigns when no handle exists yet; the handle never changes afterwards.
_SET_VECTOR_STORE_ID = """\
UPDATE museums SET vector_store_id = ?
WHERE id = ? AND vector_store_id IS NULL;
"""

_INSERT_ARCHIVE_FILE = """\
INSERT INTO archive_files (id, museum_id, filename, mime_type, size_bytes, storage_path,
                           source_type, source_url, status, error, created_at)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
"""

_SELECT_ARCHIVE_FILES = """\
SELECT id, museum_id, filename, mime_type, size_bytes, storage_path,
       source_type, source_url, status, error, created_at
FROM archive_files WHERE museum_id = ?
"""

_INSERT_FLOOR_PLAN = """\
INSERT INTO floor_plans (id, museum_id, image_path, notes, structure, created_at)
VALUES (?, ?, ?, ?, ?, ?);
"""

_SELECT_LATEST_FLOOR_PLAN = """\
SELECT id, museum_id, image_path, notes, structure, created_at
FROM floor_plans WHERE museum_id = ?
ORDER BY created_at DESC, rowid DESC LIMIT 1;
"""

_INSERT_TOUR_REQUEST = """\
INSERT INTO tour_requests (id, museum_id, interests, level, minutes, created_at)
VALUES (?, ?, ?, ?, ?, ?);
"""

_SELECT_TOUR_REQUEST = """\
SELECT id, museum_id, interests, level, minutes, created_at
FROM tour_requests WHERE id = ?;
"""

_SELECT_TOUR_REQUESTS_FOR_MUSEUM = """\
SELECT id, museum_id, interests, level, minutes, created_at
FROM tour_requests WHERE museum_id = ?
ORDER BY created_at DESC, rowid DESC;
"""

_INSERT_TOUR_PLAN = """\
INSERT INTO tour_plans (id, museum_id, tour_request_id, result, created_at)
VALUES (?, ?, ?, ?, ?);
"""

_SELECT_TOUR_PLAN = """\
SELECT id, museum_id, tour_request_id, result, created_at
FROM tour_plans WHERE id = ?;
"""


class SQLiteMuseumStore(IMuseumStore):
    """SQLite-backed persistence for museums, archives, floor plans and tours."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    async def initialize(self) -> None:
        """Create all tables and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute("PRAGMA journal_mode=WAL;")
            await db.execute(_CREATE_MUSEUMS_TABLE)
            await db.execute(_CREATE_ARCHIVE_FILES_TABLE)
            await db.execute(_CREATE_FLOOR_PLANS_TABLE)
            await db.execute(_CREATE_TOUR_REQUESTS_TABLE)
            await db.execute(_CREATE_TOUR_PLANS_TABLE)
            for idx_sql in _CREATE_INDICES:
                await db.execute(idx_sql)
            await db.commit()
        logger.info("museum_db_initialized", path=str(self._db_path))

    def get_provider_name(self) -> str:
        return "sqlite_museum"

    # ── Museums ────────────────────────────────────────────────────────

    async def create_museum(self, museum: Museum) -> None:
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_INSERT_MUSEUM, (
                museum.id,
                museum.name,
                museum.website,
                museum.description,
                museum.vector_store_id,
                museum.created_at,
            ))
            await db.commit()

    async def get_museum(self, museum_id: str) -> Museum | None:
        row = await self._fetch_one(_SELECT_MUSEUM, (museum_id,))
        return Museum(**row) if row else None

    async def set_vector_store_id(self, museum_id: str, vector_store_id: str) -> bool:
        async with aiosqlite.connect(str(self._db_path)) as db:
            cursor = await db.execute(_SET_VECTOR_STORE_ID, (vector_store_id, museum_id))
            await db.commit()
            return cursor.rowcount == 1

    # ── Archive files ──────────────────────────────────────────────────

    async def add_archive_file(self, archive: ArchiveFile) -> None:
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_INSERT_ARCHIVE_FILE, (
                archive.id,
                archive.museum_id,
                archive.filename,
                archive.mime_type,
                archive.size_bytes,
                archive.storage_path,
                archive.source_type.value,
                archive.source_url,
                archive.status.value,
                archive.error,
                archive.created_at,
            ))
            await db.commit()

    async def list_archive_files(
        self,
        museum_id: str,
        *,
        statuses: Collection[ArchiveStatus] | None = None,
        newest_first: bool = True,
    ) -> list[ArchiveFile]:
        sql = _SELECT_ARCHIVE_FILES
        params: list[Any] = [museum_id]
        if statuses is not None:
            if not statuses:
                return []
            placeholders = ", ".join("?" for _ in statuses)
            sql += f" AND status IN ({placeholders})"
            params.extend(status.value for status in statuses)
        direction = "DESC" if newest_first else "ASC"
        sql += f" ORDER BY created_at {direction}, rowid {direction};"

        rows = await self._fetch_all(sql, tuple(params))
        return [self._row_to_archive(row) for row in rows]

    async def update_archive_file(
        self,
        archive_id: str,
        *,
        status: ArchiveStatus,
        error: str | None = None,
        storage_path: str | None = None,
    ) -> None:
        assignments = ["status = ?", "error = ?"]
        params: list[Any] = [status.value, error]
        if storage_path is not None:
            assignments.append("storage_path = ?")
            params.append(storage_path)
        params.append(archive_id)

        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(
                f"UPDATE archive_files SET {', '.join(assignments)} WHERE id = ?;",
                tuple(params),
            )
            await db.commit()

    # ── Floor plans ────────────────────────────────────────────────────

    async def save_floor_plan(self, floor_plan: FloorPlan) -> None:
        structure = (
            floor_plan.structure.model_dump_json(by_alias=True)
            if floor_plan.structure is not None
            else None
        )
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_INSERT_FLOOR_PLAN, (
                floor_plan.id,
                floor_plan.museum_id,
                floor_plan.image_path,
                floor_plan.notes,
                structure,
                floor_plan.created_at,
            ))
            await db.commit()

    async def get_latest_floor_plan(self, museum_id: str) -> FloorPlan | None:
        row = await self._fetch_one(_SELECT_LATEST_FLOOR_PLAN, (museum_id,))
        if row is None:
            return None
        structure = row.pop("structure")
        return FloorPlan(
            **row,
            structure=FloorPlanStructure.model_validate_json(structure) if structure else None,
        )

    # ── Tours ──────────────────────────────────────────────────────────

    async def create_tour_request(self, tour_request: TourRequest) -> None:
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_INSERT_TOUR_REQUEST, (
                tour_request.id,
                tour_request.museum_id,
                json.dumps(tour_request.interests, ensure_ascii=False),
                tour_request.level.value,
                tour_request.minutes,
                tour_request.created_at,
            ))
            await db.commit()

    async def get_tour_request(self, tour_request_id: str) -> TourRequest | None:
        row = await self._fetch_one(_SELECT_TOUR_REQUEST, (tour_request_id,))
        return self._row_to_tour_request(row) if row else None

    async def list_tour_requests(self, museum_id: str) -> list[TourRequest]:
        rows = await self._fetch_all(_SELECT_TOUR_REQUESTS_FOR_MUSEUM, (museum_id,))
        return [self._row_to_tour_request(row) for row in rows]

    async def save_tour_plan(self, tour_plan: TourPlan) -> None:
        async with aiosqlite.connect(str(self._db_path)) as db:
            await db.execute(_INSERT_TOUR_PLAN, (
                tour_plan.id,
                tour_plan.museum_id,
                tour_plan.tour_request_id,
                tour_plan.result.model_dump_json(),
                tour_plan.created_at,
            ))
            await db.commit()

    async def get_tour_plan(self, tour_plan_id: str) -> TourPlan | None:
        row = await self._fetch_one(_SELECT_TOUR_PLAN, (tour_plan_id,))
        if row is None:
            return None
        result = row.pop("result")
        return TourPlan(**row, result=TourPlanDocument.model_validate_json(result))

    # ── Internals ──────────────────────────────────────────────────────

    async def _fetch_one(self, sql: str, params: tuple[Any, ...]) -> dict[str, Any] | None:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(sql, params)
            row = await cursor.fetchone()
            return dict(row) if row is not None else None

    async def _fetch_all(self, sql: str, params: tuple[Any, ...]) -> list[dict[str, Any]]:
        async with aiosqlite.connect(str(self._db_path)) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(sql, params)
            rows = await cursor.fetchall()
            return [dict(row) for row in rows]

    @staticmethod
    def _row_to_archive(row: dict[str, Any]) -> ArchiveFile:
        return ArchiveFile(
            **{
                **row,
                "source_type": SourceType(row["source_type"]),
                "status": ArchiveStatus(row["status"]),
            }
        )

    @staticmethod
    def _row_to_tour_request(row: dict[str, Any]) -> TourRequest:
        return TourRequest(
            id=row["id"],
            museum_id=row["museum_id"],
            interests=json.loads(row["interests"]),
            level=TourLevel(row["level"]),
            minutes=row["minutes"],
            created_at=row["created_at"],
        )
