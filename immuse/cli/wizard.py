#!/usr/bin/env python3
# =============================================================================
# immuse/cli/wizard.py - Command-line client for the Immuse API
# =============================================================================
#
# Drives the same flow as the web wizard against a running server:
#
#   1. register a museum
#   2. add archive documents (local files or URLs)
#   3. ingest them and wait until indexing settles
#   4. generate a tour and print it
#
# Waiting is bounded: the poll interval, attempt count and wall-clock
# budget come from the ``polling`` section of config/config.yaml and can
# be overridden per call.
#
# Usage:
#   immuse museum "Museum of Kyiv History" --website https://example.org
#   immuse archive <museum_id> --file guide.pdf
#   immuse archive <museum_id> --url https://example.org/catalogue.pdf
#   immuse ingest <museum_id> --wait
#   immuse tour <museum_id> --interest icons --interest textiles --level adults --minutes 60
#   immuse get-tour <tour_id>
# =============================================================================

"""Command-line client for the Immuse HTTP API."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import httpx

from immuse.config.loader import load_config
from immuse.models.museum import ArchiveStatus
from immuse.utils.errors import ConfigurationError, PollingTimeoutError
from immuse.utils.files import read_file
from immuse.utils.polling import poll_until

DEFAULT_BASE_URL = "http://localhost:8000"

_TERMINAL_STATUSES = frozenset({ArchiveStatus.READY.value, ArchiveStatus.FAILED.value})

EXIT_OK = 0
EXIT_API_ERROR = 1
EXIT_TIMEOUT = 2


class ApiCallError(Exception):
    """Non-success HTTP answer from the server."""

    def __init__(self, status_code: int, body: Any) -> None:
        super().__init__(f"HTTP {status_code}")
        self.status_code = status_code
        self.body = body


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="immuse",
        description="Register museums, ingest archives and generate tours via the Immuse API.",
    )
    parser.add_argument("--base-url", default=DEFAULT_BASE_URL, help="Server root URL")
    parser.add_argument("--config", default=None, help="Path to config.yaml (polling defaults)")
    parser.add_argument("--interval", type=float, default=None, help="Seconds between status polls")
    parser.add_argument("--max-attempts", type=int, default=None, help="Maximum number of status polls")
    parser.add_argument("--timeout", type=float, default=None, help="Overall polling budget in seconds")

    commands = parser.add_subparsers(dest="command", required=True)

    museum = commands.add_parser("museum", help="Register a museum")
    museum.add_argument("name")
    museum.add_argument("--website", default=None)
    museum.add_argument("--description", default=None)

    archive = commands.add_parser("archive", help="Add an archive document to a museum")
    archive.add_argument("museum_id")
    source = archive.add_mutually_exclusive_group(required=True)
    source.add_argument("--file", type=Path, help="Local file to upload")
    source.add_argument("--url", help="Remote document URL")

    ingest = commands.add_parser("ingest", help="Ingest pending archives")
    ingest.add_argument("museum_id")
    ingest.add_argument("--wait", action="store_true", help="Poll until ingestion settles")

    status = commands.add_parser("status", help="Show ingestion status")
    status.add_argument("museum_id")
    status.add_argument("--wait", action="store_true", help="Poll until ingestion settles")

    tour = commands.add_parser("tour", help="Generate a tour")
    tour.add_argument("museum_id")
    tour.add_argument("--interest", dest="interests", action="append", required=True)
    tour.add_argument("--level", choices=["children", "adults", "professionals"], default="adults")
    tour.add_argument("--minutes", type=int, default=60)

    get_tour = commands.add_parser("get-tour", help="Fetch a stored tour")
    get_tour.add_argument("tour_id")

    commands.add_parser("directory", help="List known museum names")

    return parser


def polling_options(args: argparse.Namespace, config: dict[str, Any]) -> dict[str, Any]:
    """Merge CLI overrides over the ``polling`` config section."""
    section = config.get("polling", {})
    return {
        "interval": args.interval if args.interval is not None else float(section.get("interval_seconds", 2.0)),
        "max_attempts": (
            args.max_attempts if args.max_attempts is not None else int(section.get("max_attempts", 90))
        ),
        "timeout": args.timeout if args.timeout is not None else section.get("timeout_seconds"),
    }


async def _call(client: httpx.AsyncClient, method: str, path: str, **kwargs: Any) -> Any:
    response = await client.request(method, f"/api/v1{path}", **kwargs)
    try:
        body = response.json()
    except ValueError:
        body = response.text
    if not response.is_success:
        raise ApiCallError(response.status_code, body)
    return body


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _print_progress(status: dict[str, Any]) -> None:
    counts = ", ".join(f"{name}={count}" for name, count in sorted(status.get("statusCounts", {}).items()))
    print(f"  {status.get('overallStatus')}: {counts or 'no files'}", file=sys.stderr)


async def _wait_for_ingestion(
    client: httpx.AsyncClient,
    museum_id: str,
    options: dict[str, Any],
) -> dict[str, Any]:
    return await poll_until(
        lambda: _call(client, "GET", f"/museums/{museum_id}/ingest/status"),
        lambda status: status.get("overallStatus") in _TERMINAL_STATUSES,
        on_result=_print_progress,
        **options,
    )


async def run(args: argparse.Namespace, client: httpx.AsyncClient, config: dict[str, Any]) -> int:
    """Execute one parsed command; returns the process exit code."""
    options = polling_options(args, config)
    try:
        if args.command == "museum":
            body = {"name": args.name, "website": args.website, "description": args.description}
            _print_json(await _call(client, "POST", "/museums", json=body))
        elif args.command == "archive":
            if args.file is not None:
                data = await asyncio.to_thread(read_file, args.file)
                files = {"file": (args.file.name, data)}
                result = await _call(client, "POST", f"/museums/{args.museum_id}/archives", files=files)
            else:
                result = await _call(client, "POST", f"/museums/{args.museum_id}/archives", json={"url": args.url})
            _print_json(result)
        elif args.command == "ingest":
            _print_json(await _call(client, "POST", f"/museums/{args.museum_id}/ingest"))
            if args.wait:
                _print_json(await _wait_for_ingestion(client, args.museum_id, options))
        elif args.command == "status":
            if args.wait:
                _print_json(await _wait_for_ingestion(client, args.museum_id, options))
            else:
                _print_json(await _call(client, "GET", f"/museums/{args.museum_id}/ingest/status"))
        elif args.command == "tour":
            body = {
                "museumId": args.museum_id,
                "interests": args.interests,
                "level": args.level,
                "minutes": args.minutes,
            }
            result = await _call(client, "POST", "/tours", json=body)
            if result.get("warning"):
                print(f"Warning: {result['warning']}", file=sys.stderr)
            _print_json(result)
        elif args.command == "get-tour":
            _print_json(await _call(client, "GET", f"/tours/{args.tour_id}"))
        elif args.command == "directory":
            for name in await _call(client, "GET", "/museums/directory"):
                print(name)
    except ApiCallError as exc:
        print(f"Error: HTTP {exc.status_code}", file=sys.stderr)
        _print_json(exc.body)
        return EXIT_API_ERROR
    except PollingTimeoutError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return EXIT_TIMEOUT
    except httpx.HTTPError as exc:
        print(f"Error: cannot reach {args.base_url}: {exc}", file=sys.stderr)
        return EXIT_API_ERROR
    return EXIT_OK


async def _main_async(args: argparse.Namespace) -> int:
    try:
        config = load_config(args.config)
    except ConfigurationError as exc:
        print(exc.message, file=sys.stderr)
        return EXIT_API_ERROR
    # Tour generation can take a while; the server enforces its own limits.
    async with httpx.AsyncClient(base_url=args.base_url, timeout=120.0) as client:
        return await run(args, client, config)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    return asyncio.run(_main_async(args))


if __name__ == "__main__":
    sys.exit(main())
