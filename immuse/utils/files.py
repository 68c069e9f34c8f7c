"""Blocking file helpers, meant to be run via ``asyncio.to_thread``."""

from __future__ import annotations

from pathlib import Path


def write_file(target: Path, data: bytes) -> None:
    """Write *data* to *target*, creating parent directories."""
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)


def read_file(path: str | Path) -> bytes:
    return Path(path).read_bytes()
