"""Immuse FastAPI application entry point.

Wires together providers, services, and routes via dependency injection.
Loads configuration from ``.env`` and ``config/config.yaml`` and configures
structured logging before anything else runs.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from immuse import __version__
from immuse.api.content_routes import router as content_router
from immuse.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
    register_exception_handlers,
)
from immuse.api.routes import router as museum_router
from immuse.api.tour_routes import router as tour_router
from immuse.config.loader import load_config
from immuse.config.settings import Settings
from immuse.providers.llm.openai_provider import OpenAILLMProvider, build_openai_client
from immuse.providers.store.sqlite_museum_store import SQLiteMuseumStore
from immuse.providers.vector_index.openai_vector_store_provider import OpenAIVectorStoreProvider
from immuse.services.archive_service import ArchiveService
from immuse.services.content_service import ContentService
from immuse.services.ingestion_service import IngestionService
from immuse.services.museum_directory import MuseumDirectory
from immuse.services.museum_service import MuseumService
from immuse.services.tour_service import TourService
from immuse.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings=settings)

configure_logging(settings.log_level, app_env=settings.app_env)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Full DI assembly for the FastAPI application
# ---------------------------------------------------------------------------


def _build_all(app_settings: Settings, app_config: dict[str, Any]) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    The OpenAI client is shared by the LLM and vector-store adapters; the
    httpx client is shared by URL ingestion and the museum directory.
    """
    # -- Shared resources --
    http_client = httpx.AsyncClient(timeout=app_settings.http_timeout_seconds)
    openai_client = build_openai_client(app_settings)

    # -- Providers --
    primary_llm = OpenAILLMProvider(app_settings, openai_client)
    vector_index = OpenAIVectorStoreProvider(openai_client)
    museum_store = SQLiteMuseumStore(app_settings.database_path)

    if not primary_llm.is_available():
        _logger.warning("openai_not_configured", detail="generation will serve fallback content")

    # -- Services --
    language = app_settings.response_language
    directory_limit = int(app_config.get("museum_directory", {}).get("limit", 20))

    return {
        "http_client": http_client,
        "openai_client": openai_client,
        "primary_llm": primary_llm,
        "primary_llm_name": primary_llm.get_provider_name(),
        "vector_index": vector_index,
        "museum_store": museum_store,
        "max_upload_bytes": app_settings.max_upload_bytes,
        "museum_service": MuseumService(museum_store, app_settings.upload_dir),
        "archive_service": ArchiveService(museum_store, app_settings.upload_dir),
        "ingestion_service": IngestionService(museum_store, vector_index, http_client),
        "tour_service": TourService(museum_store, primary_llm, app_config, response_language=language),
        "content_service": ContentService(museum_store, primary_llm, app_config, response_language=language),
        "museum_directory": MuseumDirectory(
            http_client,
            app_settings.museum_directory_url,
            limit=directory_limit,
        ),
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Wire components onto ``app.state`` on startup, release clients on shutdown.

    Components handed to :func:`create_app` are used as-is (tests pass
    mocks this way); otherwise the full graph is built from settings.
    """
    components = getattr(application.state, "prebuilt_components", None)
    if components is None:
        components = _build_all(settings, config)

    for key, value in components.items():
        setattr(application.state, key, value)

    museum_store = components.get("museum_store")
    if museum_store is not None:
        await museum_store.initialize()

    _logger.info(
        "app_startup",
        version=__version__,
        environment=settings.app_env,
        primary_llm=components.get("primary_llm_name", "none"),
    )

    yield

    # -- Shutdown: close shared clients --
    http_client = components.get("http_client")
    if isinstance(http_client, httpx.AsyncClient):
        await http_client.aclose()
    openai_client = components.get("openai_client")
    if openai_client is not None:
        await openai_client.close()
    _logger.info("app_shutdown", message="HTTP clients closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(components: dict[str, Any] | None = None) -> FastAPI:
    """Build and configure the FastAPI application.

    Parameters
    ----------
    components:
        Optional dict of pre-built DI components keyed like the result of
        ``_build_all``.  When omitted, the lifespan builds its own.
    """
    application = FastAPI(
        title="Immuse API",
        version=__version__,
        description=(
            "Backend for a museum tour wizard: register museums, ingest their "
            "archives into a vector store, and generate personalised tours "
            "grounded in those archives."
        ),
        lifespan=_lifespan,
    )

    if components is not None:
        application.state.prebuilt_components = components

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=settings.get_cors_origins())
    register_exception_handlers(application)

    # -- API routes --
    application.include_router(museum_router)
    application.include_router(tour_router)
    application.include_router(content_router)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "immuse.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
