"""UTC timestamp helpers shared by services and the SQLite store."""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now_iso() -> str:
    """Return the current UTC time as an ISO-8601 string with microseconds.

    Microsecond precision keeps ``ORDER BY created_at`` stable for rows
    written in quick succession.
    """
    return datetime.now(tz=timezone.utc).isoformat(timespec="microseconds")
