"""structlog configuration for the Immuse API and CLI.

Events are rendered by a coloured console renderer in development and as
one JSON object per line in production.  Request-scoped values (the
request id bound by the request logging middleware) live in structlog's
context variables and are merged into every event logged while the
request is handled, including events from services and providers.
"""

from __future__ import annotations

import logging
import os
import sys

import structlog

# Chatty at INFO: one line per outbound HTTP call.
_NOISY_LOGGERS = ("httpx", "httpcore", "openai")


def _renderer(use_json: bool) -> structlog.types.Processor:
    if use_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(
    log_level: str = "INFO",
    *,
    app_env: str | None = None,
    json_output: bool = False,
) -> structlog.BoundLogger:
    """Configure structlog and route stdlib logging through it.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR.
        app_env: Deployment environment; ``production`` selects JSON.
                 Read from ``APP_ENV`` when omitted.
        json_output: Force JSON regardless of the environment.
    """
    env = app_env or os.environ.get("APP_ENV", "development")
    level = log_level.upper()
    renderer = _renderer(json_output or env == "production")

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # uvicorn, httpx and the openai SDK log through stdlib logging.
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *shared_processors,
                renderer,
            ],
        )
    )
    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    if level != "DEBUG":
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a logger bound with ``logger_name``; configures defaults on first use."""
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(logger_name=name)


def bind_request_context(**values: str) -> None:
    """Attach *values* to every event logged in the current request."""
    structlog.contextvars.bind_contextvars(**values)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
