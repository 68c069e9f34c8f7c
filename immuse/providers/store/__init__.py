"""Persistence adapters (IMuseumStore implementations)."""

from immuse.providers.store.sqlite_museum_store import SQLiteMuseumStore

__all__ = ["SQLiteMuseumStore"]
