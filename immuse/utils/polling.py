"""Bounded async polling.

Used by the CLI to wait for ingestion to reach a terminal status.  The loop
always ends: either ``is_terminal`` accepts a result, or the attempt or
wall-clock budget is spent and :class:`PollingTimeoutError` is raised.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog

from immuse.utils.errors import PollingTimeoutError

logger = structlog.get_logger(logger_name=__name__)

T = TypeVar("T")


async def poll_until(
    fetch: Callable[[], Awaitable[T]],
    is_terminal: Callable[[T], bool],
    *,
    interval: float = 2.0,
    max_attempts: int = 90,
    timeout: float | None = None,
    on_result: Callable[[T], None] | None = None,
) -> T:
    """Call *fetch* until *is_terminal* accepts its result.

    Parameters
    ----------
    fetch:
        Zero-argument coroutine function returning the current state.
    is_terminal:
        Predicate deciding whether polling can stop.
    interval:
        Seconds to sleep between attempts.
    max_attempts:
        Upper bound on the number of ``fetch`` calls.
    timeout:
        Optional wall-clock budget in seconds across all attempts.
    on_result:
        Optional callback invoked with every intermediate result
        (progress display).

    Returns
    -------
    T
        The first result accepted by *is_terminal*.

    Raises
    ------
    PollingTimeoutError
        If neither budget allows another attempt.
    ValueError
        If ``max_attempts`` is less than 1.
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    deadline = time.monotonic() + timeout if timeout is not None else None

    for attempt in range(1, max_attempts + 1):
        result = await fetch()
        if on_result is not None:
            on_result(result)
        if is_terminal(result):
            logger.debug("poll_terminal", attempt=attempt)
            return result

        if attempt == max_attempts:
            break
        if deadline is not None and time.monotonic() + interval > deadline:
            raise PollingTimeoutError(
                message=f"Gave up after {attempt} attempts ({timeout}s budget)"
            )
        await asyncio.sleep(interval)

    raise PollingTimeoutError(message=f"Gave up after {max_attempts} attempts")
