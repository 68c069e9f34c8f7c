"""Unit tests for the ``immuse`` command-line client.

Requests go to an ``httpx.MockTransport`` standing in for the server.
"""

from __future__ import annotations

import json
from pathlib import Path

import httpx
import pytest

from immuse.cli.wizard import EXIT_API_ERROR, EXIT_OK, EXIT_TIMEOUT, build_parser, polling_options, run

_FAST_POLLING = {"polling": {"interval_seconds": 0.0, "max_attempts": 3, "timeout_seconds": None}}


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url="http://testserver", transport=httpx.MockTransport(handler))


def _status(overall: str) -> dict:
    return {
        "museumId": "m1",
        "vectorStoreId": "vs_1",
        "overallStatus": overall,
        "statusCounts": {overall: 1},
        "files": [],
    }


class TestParser:
    def test_archive_requires_exactly_one_source(self) -> None:
        parser = build_parser()
        with pytest.raises(SystemExit):
            parser.parse_args(["archive", "m1"])
        with pytest.raises(SystemExit):
            parser.parse_args(["archive", "m1", "--file", "a.pdf", "--url", "https://x.org/a.pdf"])

    def test_tour_collects_interests(self) -> None:
        args = build_parser().parse_args(["tour", "m1", "--interest", "icons", "--interest", "maps", "--minutes", "45"])
        assert args.interests == ["icons", "maps"]
        assert args.level == "adults"

    def test_polling_overrides(self) -> None:
        args = build_parser().parse_args(["--interval", "0.5", "status", "m1"])
        options = polling_options(args, {"polling": {"interval_seconds": 2.0, "max_attempts": 7, "timeout_seconds": 60}})
        assert options == {"interval": 0.5, "max_attempts": 7, "timeout": 60}


class TestRun:
    @pytest.mark.asyncio
    async def test_create_museum(self, capsys) -> None:
        seen: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(200, json={"id": "m1"})

        args = build_parser().parse_args(["museum", "Hetman Museum", "--website", "https://h.example.org"])
        async with _client(handler) as client:
            code = await run(args, client, _FAST_POLLING)

        assert code == EXIT_OK
        assert seen[0]["name"] == "Hetman Museum"
        assert json.loads(capsys.readouterr().out) == {"id": "m1"}

    @pytest.mark.asyncio
    async def test_upload_file_as_multipart(self, tmp_path: Path) -> None:
        document = tmp_path / "guide.pdf"
        document.write_bytes(b"%PDF")
        captured: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["path"] = request.url.path
            captured["content_type"] = request.headers["content-type"]
            return httpx.Response(200, json={"id": "a1", "filename": "guide.pdf", "status": "UPLOADED"})

        args = build_parser().parse_args(["archive", "m1", "--file", str(document)])
        async with _client(handler) as client:
            assert await run(args, client, _FAST_POLLING) == EXIT_OK

        assert captured["path"] == "/api/v1/museums/m1/archives"
        assert captured["content_type"].startswith("multipart/form-data")

    @pytest.mark.asyncio
    async def test_ingest_and_wait_until_ready(self, capsys) -> None:
        statuses = iter(["INDEXING", "READY"])

        def handler(request: httpx.Request) -> httpx.Response:
            if request.method == "POST":
                return httpx.Response(200, json={"vectorStoreId": "vs_1", "counts": {}, "results": []})
            return httpx.Response(200, json=_status(next(statuses)))

        args = build_parser().parse_args(["ingest", "m1", "--wait"])
        async with _client(handler) as client:
            code = await run(args, client, _FAST_POLLING)

        assert code == EXIT_OK
        assert '"overallStatus": "READY"' in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_wait_gives_up(self) -> None:
        args = build_parser().parse_args(["status", "m1", "--wait"])
        async with _client(lambda request: httpx.Response(200, json=_status("INDEXING"))) as client:
            assert await run(args, client, _FAST_POLLING) == EXIT_TIMEOUT

    @pytest.mark.asyncio
    async def test_api_error_exit_code(self, capsys) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"error": "Museum archives not processed yet", "code": "InvalidStateError"})

        args = build_parser().parse_args(["tour", "m1", "--interest", "icons"])
        async with _client(handler) as client:
            code = await run(args, client, _FAST_POLLING)

        assert code == EXIT_API_ERROR
        captured = capsys.readouterr()
        assert "HTTP 400" in captured.err
        assert "Museum archives not processed yet" in captured.out

    @pytest.mark.asyncio
    async def test_tour_request_body(self) -> None:
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"id": "t1", "tourRequestId": "r1", "result": {}})

        args = build_parser().parse_args(
            ["tour", "m1", "--interest", "icons", "--level", "children", "--minutes", "30"]
        )
        async with _client(handler) as client:
            assert await run(args, client, _FAST_POLLING) == EXIT_OK

        assert bodies == [{"museumId": "m1", "interests": ["icons"], "level": "children", "minutes": 30}]
