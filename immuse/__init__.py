"""Immuse: museum tour wizard backend."""

__version__ = "0.1.0"
