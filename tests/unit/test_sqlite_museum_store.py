"""Unit tests for SQLiteMuseumStore.

Runs against a temporary database file per test (see the ``store``
fixture in conftest.py).
"""

from __future__ import annotations

import pytest

from immuse.models.museum import ArchiveStatus, FloorPlan, FloorPlanStructure, SourceType
from immuse.models.tour import TourLevel, TourPlan, TourRequest, fallback_tour_plan

_T0 = "2025-06-15T10:00:00.000000+00:00"
_T1 = "2025-06-15T10:00:01.000000+00:00"


# ─── Initialization ───────────────────────────────────────────────

@pytest.mark.asyncio
async def test_provider_name(store):
    assert store.get_provider_name() == "sqlite_museum"


@pytest.mark.asyncio
async def test_double_initialize_is_idempotent(store):
    await store.initialize()


# ─── Museums ──────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_create_and_get_museum(store, museum_factory):
    museum = museum_factory()
    await store.create_museum(museum)

    loaded = await store.get_museum(museum.id)
    assert loaded == museum


@pytest.mark.asyncio
async def test_get_unknown_museum_returns_none(store):
    assert await store.get_museum("nope") is None


@pytest.mark.asyncio
async def test_vector_store_id_is_assigned_once(store, museum_factory):
    await store.create_museum(museum_factory())

    assert await store.set_vector_store_id("museum-1", "vs_first") is True
    assert await store.set_vector_store_id("museum-1", "vs_second") is False

    museum = await store.get_museum("museum-1")
    assert museum.vector_store_id == "vs_first"


# ─── Archive files ────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_list_archives_newest_first_with_rowid_tiebreak(store, museum_factory, archive_factory):
    await store.create_museum(museum_factory())
    await store.add_archive_file(archive_factory("a", created_at=_T0))
    await store.add_archive_file(archive_factory("b", created_at=_T1))
    # Same timestamp as "b": insertion order decides.
    await store.add_archive_file(archive_factory("c", created_at=_T1))

    newest = await store.list_archive_files("museum-1")
    oldest = await store.list_archive_files("museum-1", newest_first=False)

    assert [a.id for a in newest] == ["c", "b", "a"]
    assert [a.id for a in oldest] == ["a", "b", "c"]


@pytest.mark.asyncio
async def test_list_archives_filtered_by_status(store, museum_factory, archive_factory):
    await store.create_museum(museum_factory())
    await store.add_archive_file(archive_factory("up", status=ArchiveStatus.UPLOADED))
    await store.add_archive_file(archive_factory("ready", status=ArchiveStatus.READY))
    await store.add_archive_file(
        archive_factory(
            "url",
            status=ArchiveStatus.PENDING,
            source_type=SourceType.URL,
            source_url="https://example.org/a.pdf",
        )
    )

    eligible = await store.list_archive_files(
        "museum-1",
        statuses={ArchiveStatus.PENDING, ArchiveStatus.UPLOADED},
    )
    assert {a.id for a in eligible} == {"up", "url"}
    assert await store.list_archive_files("museum-1", statuses=set()) == []


@pytest.mark.asyncio
async def test_update_archive_status_error_and_path(store, museum_factory, archive_factory):
    await store.create_museum(museum_factory())
    await store.add_archive_file(archive_factory("a", storage_path="/tmp/a.pdf"))

    await store.update_archive_file("a", status=ArchiveStatus.FAILED, error="boom")
    (failed,) = await store.list_archive_files("museum-1")
    assert failed.status is ArchiveStatus.FAILED
    assert failed.error == "boom"
    assert failed.storage_path == "/tmp/a.pdf"

    await store.update_archive_file("a", status=ArchiveStatus.READY, storage_path="https://x.org/a.pdf")
    (ready,) = await store.list_archive_files("museum-1")
    assert ready.status is ArchiveStatus.READY
    assert ready.error is None
    assert ready.storage_path == "https://x.org/a.pdf"


@pytest.mark.asyncio
async def test_archives_scoped_to_museum(store, museum_factory, archive_factory):
    await store.create_museum(museum_factory("m1"))
    await store.create_museum(museum_factory("m2"))
    await store.add_archive_file(archive_factory("a", museum_id="m1"))

    assert await store.list_archive_files("m2") == []


# ─── Floor plans ──────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_latest_floor_plan_round_trips_structure(store, museum_factory):
    await store.create_museum(museum_factory())
    structure = FloorPlanStructure.model_validate({
        "floors": [{
            "name": "Ground",
            "rooms": [{"id": "r1", "name": "Hall 1", "bbox": [0, 0, 5, 5]}],
            "markers": [{"id": "m1", "title": "Helmet", "roomId": "r1", "point": [1, 1], "estMinutes": 3}],
        }],
    })
    await store.save_floor_plan(FloorPlan(
        id="fp-old", museum_id="museum-1", notes="old", created_at=_T0,
    ))
    await store.save_floor_plan(FloorPlan(
        id="fp-new", museum_id="museum-1", structure=structure, created_at=_T1,
    ))

    latest = await store.get_latest_floor_plan("museum-1")
    assert latest.id == "fp-new"
    assert latest.structure == structure
    assert latest.structure.floors[0].markers[0].est_minutes == 3


@pytest.mark.asyncio
async def test_no_floor_plan(store, museum_factory):
    await store.create_museum(museum_factory())
    assert await store.get_latest_floor_plan("museum-1") is None


# ─── Tours ────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_tour_request_and_plan_round_trip(store, museum_factory):
    await store.create_museum(museum_factory(vector_store_id="vs_1"))
    request = TourRequest(
        id="req-1",
        museum_id="museum-1",
        interests=["ікони", "textiles"],
        level=TourLevel.CHILDREN,
        minutes=45,
        created_at=_T0,
    )
    await store.create_tour_request(request)
    plan = TourPlan(
        id="plan-1",
        museum_id="museum-1",
        tour_request_id="req-1",
        result=fallback_tour_plan("Museum of Kyiv History", 45),
        created_at=_T1,
    )
    await store.save_tour_plan(plan)

    assert await store.get_tour_request("req-1") == request
    assert await store.get_tour_plan("plan-1") == plan
    assert [r.id for r in await store.list_tour_requests("museum-1")] == ["req-1"]


@pytest.mark.asyncio
async def test_unknown_tour_plan(store):
    assert await store.get_tour_plan("missing") is None
    assert await store.get_tour_request("missing") is None
