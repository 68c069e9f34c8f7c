"""URL helpers for museum websites and URL-sourced archives."""

from __future__ import annotations

from pathlib import PurePosixPath
from urllib.parse import unquote, urlparse

_ALLOWED_SCHEMES = frozenset({"http", "https"})


def is_http_url(value: str | None) -> bool:
    """Return True when *value* is an absolute http(s) URL with a host."""
    if not value:
        return False
    parsed = urlparse(value.strip())
    return parsed.scheme.lower() in _ALLOWED_SCHEMES and bool(parsed.netloc)


def filename_from_url(url: str, default: str = "archive") -> str:
    """Derive a display filename from the last path segment of *url*.

    ``https://example.org/docs/catalogue.pdf?v=2`` gives ``catalogue.pdf``;
    a bare host or a trailing slash gives *default*.  Not unique: two
    different URLs may share a trailing segment.
    """
    path = unquote(urlparse(url.strip()).path)
    name = PurePosixPath(path).name if path and not path.endswith("/") else ""
    return name or default
