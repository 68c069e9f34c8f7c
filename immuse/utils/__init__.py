"""Utility modules for Immuse.

- **errors** -- exception hierarchy rooted at ImmuseError; the API
  middleware maps each subclass to an HTTP status.
- **logging** -- structlog setup with a dual renderer (console in
  development, JSON in production).
- **polling** -- bounded async polling used by the CLI to wait for
  ingestion to finish.
- **schema** -- strict-mode JSON schema derivation from pydantic models.
- **timestamps** / **urls** (not re-exported) -- small shared helpers.
"""

from immuse.utils.errors import (
    ConfigurationError,
    ExternalServiceError,
    ImmuseError,
    InputValidationError,
    InvalidStateError,
    NotFoundError,
    PollingTimeoutError,
)
from immuse.utils.logging import configure_logging, get_logger

__all__ = [
    "ConfigurationError",
    "ExternalServiceError",
    "ImmuseError",
    "InputValidationError",
    "InvalidStateError",
    "NotFoundError",
    "PollingTimeoutError",
    "configure_logging",
    "get_logger",
]
