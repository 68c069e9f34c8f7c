"""Generate-or-fall-back strategy shared by every generation endpoint.

``attempt`` runs the primary coroutine, validates its answer against a
pydantic model and, on *any* failure (network error, empty or malformed
output, schema violation), returns the static fallback instead.  The
fallback is always returned whole; partial answers are never merged into it.

Usage::

    outcome = await attempt(
        lambda: llm.complete_structured(...),
        fallback=lambda: fallback_preview(profile),
        schema=Preview,
        operation="preview",
    )
    if outcome.used_fallback:
        ...
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import structlog
from pydantic import BaseModel

logger = structlog.get_logger(logger_name=__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


@dataclass(frozen=True)
class FallbackResult(Generic[ModelT]):
    """Outcome of :func:`attempt`.

    Attributes
    ----------
    value:
        The validated primary answer, or the fallback.
    used_fallback:
        ``True`` when *value* is the fallback.
    error:
        Text of the failure that triggered the fallback.
    """

    value: ModelT
    used_fallback: bool
    error: str | None = None


async def attempt(
    primary: Callable[[], Awaitable[Any]],
    *,
    fallback: ModelT | Callable[[], ModelT],
    schema: type[ModelT],
    operation: str,
) -> FallbackResult[ModelT]:
    """Await *primary* and validate it as *schema*, or return *fallback*.

    Parameters
    ----------
    primary:
        Zero-argument coroutine function producing a dict or a *schema*
        instance.
    fallback:
        A ready *schema* instance, or a zero-argument factory building one
        lazily (only called when needed).
    schema:
        Pydantic model the primary answer must satisfy.
    operation:
        Name used in log events.
    """
    try:
        raw = await primary()
        value = raw if isinstance(raw, schema) else schema.model_validate(raw)
    except Exception as exc:  # noqa: BLE001 - every failure maps to the fallback
        logger.warning(
            "generation_fallback_used",
            operation=operation,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        fallback_value = fallback if isinstance(fallback, BaseModel) else fallback()
        return FallbackResult(value=fallback_value, used_fallback=True, error=str(exc))

    return FallbackResult(value=value, used_fallback=False)
