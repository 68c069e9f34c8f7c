"""Custom exception hierarchy for Immuse.

All application exceptions inherit from :class:`ImmuseError`, which
carries an optional ``provider_name`` so error handlers can tell which
external service (e.g. "openai", "museum-portal") caused the failure.

The hierarchy follows how the API surfaces each failure:

    ImmuseError  (base)
    +-- InputValidationError   (bad request payload, HTTP 400, with details)
    +-- NotFoundError          (unknown museum / tour, HTTP 404)
    +-- InvalidStateError      (operation not allowed yet, HTTP 400)
    +-- ExternalServiceError   (OpenAI / remote fetch failure, HTTP 502)
    +-- ConfigurationError     (startup / missing config, HTTP 500)
    +-- PollingTimeoutError    (client-side status polling gave up)

Ingestion and generation code catch ``ExternalServiceError`` and turn it
into a per-file FAILED status or a fallback payload; only the routes that
have no fallback let it reach the client.
"""

from __future__ import annotations

from typing import Any


class ImmuseError(Exception):
    """Base exception for all Immuse errors.

    ``__str__`` prefixes the provider name in brackets for log scanning,
    e.g. ``[openai] Request timed out``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Client-side errors
# ---------------------------------------------------------------------------


class InputValidationError(ImmuseError):
    """Raised when a request payload is missing required fields or is malformed.

    ``details`` holds field-level problems in the same shape FastAPI uses
    for request validation errors (``loc`` / ``msg`` / ``type``).
    """

    def __init__(
        self,
        message: str = "Validation error",
        details: list[dict[str, Any]] | None = None,
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
        self._details = details or []

    @property
    def details(self) -> list[dict[str, Any]]:
        return self._details


class NotFoundError(ImmuseError):
    """Raised when a referenced museum, tour or archive does not exist."""

    def __init__(
        self,
        message: str = "Resource not found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class InvalidStateError(ImmuseError):
    """Raised when an operation is not allowed in the entity's current state.

    Examples: ingesting a museum with nothing left to ingest, or generating
    a tour before the museum's archives were ever indexed.
    """

    def __init__(
        self,
        message: str = "Operation not allowed in the current state",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# External service / configuration errors
# ---------------------------------------------------------------------------


class ExternalServiceError(ImmuseError):
    """Raised when OpenAI or a remote HTTP source fails or answers garbage."""

    def __init__(
        self,
        message: str = "External service call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(ImmuseError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class PollingTimeoutError(ImmuseError):
    """Raised when status polling exhausts its attempt or time budget."""

    def __init__(
        self,
        message: str = "Polling did not reach a terminal state",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
