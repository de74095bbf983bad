"""Event search FastAPI application entry point.

Wires together providers, services, and routes via dependency injection.
Loads configuration from ``.env`` and ``config/config.yaml`` and
configures structured logging.

Also exposes ``build_search_components`` so the CLI can assemble the same
pipeline outside the web server.
"""

from __future__ import annotations

import asyncio
import contextlib
from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from src.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from src.api.routes import APP_VERSION
from src.api.routes import router as api_router
from src.config.loader import load_config
from src.config.settings import Settings
from src.pipeline.event_details import EventDetailPipeline
from src.pipeline.orchestrator import SearchOrchestrator
from src.providers.cache.memory_cache import MemoryCacheProvider
from src.providers.event.fallback_backend import HTTPFallbackSearchBackend
from src.providers.event.rapidapi_provider import RapidAPIEventProvider
from src.services.classifier import PartyClassifier
from src.services.geo_date_filter import GeoDateFilter
from src.services.normalizer import EventNormalizer
from src.services.search_cache import EventSearchCache
from src.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings=settings)

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Component wiring
# ---------------------------------------------------------------------------


def build_search_components(
    app_settings: Settings,
    app_config: dict[str, Any],
    http_client: httpx.AsyncClient,
) -> dict[str, Any]:
    """Construct the search pipeline around a shared HTTP client.

    Returns a flat dict of named components (orchestrator, detail pipeline,
    caches, providers and the provider registry).
    """
    retriever_cfg = app_config["retriever"]
    cache_cfg = app_config["cache"]
    fallback_cfg = app_config["fallback"]

    provider = RapidAPIEventProvider(
        http_client=http_client,
        api_key=app_settings.rapidapi_key,
        host=app_settings.rapidapi_host,
        base_url=app_settings.rapidapi_base_url,
        max_retries=int(retriever_cfg["max_retries"]),
        backoff_base=float(retriever_cfg["backoff_base"]),
        timeout=float(retriever_cfg["timeout_seconds"]),
        overfetch_factor=int(retriever_cfg["overfetch_factor"]),
        max_limit=int(retriever_cfg["max_limit"]),
    )
    fallback = HTTPFallbackSearchBackend(
        http_client=http_client,
        url=app_settings.fallback_search_url,
        api_key=app_settings.fallback_api_key,
        timeout=float(fallback_cfg["timeout_seconds"]),
    )

    ttl = int(cache_cfg["ttl_seconds"])
    search_store = MemoryCacheProvider(max_size=int(cache_cfg["max_entries"]), ttl=ttl)
    detail_store = MemoryCacheProvider(max_size=int(cache_cfg["detail_max_entries"]), ttl=ttl)
    search_cache = EventSearchCache(search_store, ttl_seconds=ttl)

    normalizer = EventNormalizer(PartyClassifier(), provider=provider.get_provider_name())
    event_details = EventDetailPipeline(provider, normalizer, detail_store, ttl=ttl)
    orchestrator = SearchOrchestrator(
        provider=provider,
        normalizer=normalizer,
        geo_filter=GeoDateFilter(),
        cache=search_cache,
        fallback=fallback,
        details=event_details,
        coalesce=bool(app_config["search"]["coalesce_requests"]),
        overfetch_factor=int(retriever_cfg["overfetch_factor"]),
        max_limit=int(retriever_cfg["max_limit"]),
    )

    provider_registry = {
        provider.get_provider_name(): provider.is_available(),
        fallback.get_provider_name(): fallback.is_available(),
    }
    provider_list = [
        {"name": provider.get_provider_name(), "type": "primary", "available": provider.is_available()},
        {"name": fallback.get_provider_name(), "type": "fallback", "available": fallback.is_available()},
    ]

    return {
        "orchestrator": orchestrator,
        "event_details": event_details,
        "search_cache": search_cache,
        "detail_store": detail_store,
        "provider": provider,
        "fallback": fallback,
        "provider_registry": provider_registry,
        "provider_list": provider_list,
    }


def _build_all(app_settings: Settings, app_config: dict[str, Any]) -> dict[str, Any]:
    """Construct every component for the web application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    http_client = httpx.AsyncClient(timeout=float(app_config["retriever"]["timeout_seconds"]))
    components = build_search_components(app_settings, app_config, http_client)
    components["http_client"] = http_client
    return components


async def _sweep_caches(
    search_cache: EventSearchCache,
    detail_store: MemoryCacheProvider,
    interval: float,
) -> None:
    """Periodically drop expired cache entries until cancelled."""
    while True:
        await asyncio.sleep(interval)
        await search_cache.sweep()
        await detail_store.purge_expired()


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise providers and services on startup, clean up on shutdown."""
    components = _build_all(settings, config)

    for key, value in components.items():
        setattr(application.state, key, value)

    sweeper = asyncio.create_task(
        _sweep_caches(
            components["search_cache"],
            components["detail_store"],
            float(config["cache"]["sweep_interval_seconds"]),
        )
    )

    _logger.info(
        "app_startup",
        version=APP_VERSION,
        environment=settings.app_env,
        providers=components["provider_registry"],
    )

    yield

    sweeper.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await sweeper

    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="Event Search API",
        version=APP_VERSION,
        description=(
            "Search nearby events by coordinates, place name, keyword and date "
            "range.  Results are normalized, classified into party "
            "subcategories, filtered by distance and date, and cached."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=settings.get_cors_origins())

    # -- API routes --
    application.include_router(api_router)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "src.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
