"""FastAPI API routes for the event search service.

Service dependencies are resolved from ``app.state`` via FastAPI's
``Depends`` using the ``Annotated`` pattern.

# ─── API ROUTE MAP ────────────────────────────────────────────────────
#
# Endpoint                     Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/v1/events/search        POST    Search events near a point / place
# /api/v1/events/{event_id}    GET     Single event details
# /api/v1/health               GET     Health check + provider status
# /api/v1/providers            GET     List configured search backends
#
# Semantic request problems (latitude out of range, inverted date range)
# are reported inside the search response's sourceStats, not as HTTP
# errors.  Structurally malformed bodies still get FastAPI's 422.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request

from src.api.presentation import place_for_display, to_display
from src.api.schemas import (
    ErrorResponse,
    EventDetailResponse,
    HealthResponse,
    ProvidersResponse,
    SearchEventsRequest,
    SearchEventsResponse,
)
from src.pipeline.event_details import EventDetailPipeline
from src.pipeline.orchestrator import SearchOrchestrator
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

APP_VERSION = "0.1.0"

router = APIRouter(prefix="/api/v1")


def _get_orchestrator(request: Request) -> SearchOrchestrator:
    """Return the search orchestrator from application state."""
    return request.app.state.orchestrator


def _get_detail_pipeline(request: Request) -> EventDetailPipeline:
    """Return the event detail pipeline from application state."""
    return request.app.state.event_details


OrchestratorDep = Annotated[SearchOrchestrator, Depends(_get_orchestrator)]
DetailPipelineDep = Annotated[EventDetailPipeline, Depends(_get_detail_pipeline)]


@router.post(
    "/events/search",
    response_model=SearchEventsResponse,
    response_model_by_alias=True,
    summary="Search events",
)
async def search_events(
    body: SearchEventsRequest,
    orchestrator: OrchestratorDep,
) -> SearchEventsResponse:
    """Run a search and return ``{events, sourceStats, meta}``."""
    result = await orchestrator.search(body.to_search_request())

    if body.display_origin:
        events = place_for_display(result.events, body.latitude, body.longitude)
    else:
        events = [to_display(event) for event in result.events]

    return SearchEventsResponse(
        events=events,
        source_stats=result.source_stats,
        meta=result.meta,
    )


@router.get(
    "/events/{event_id}",
    response_model=EventDetailResponse,
    response_model_by_alias=True,
    responses={404: {"model": ErrorResponse}},
    summary="Get one event",
)
async def get_event(event_id: str, details: DetailPipelineDep) -> EventDetailResponse:
    """Return one event by its canonical (or bare provider) id."""
    event = await details.get_event(event_id)
    if event is None:
        raise HTTPException(status_code=404, detail=f"Event not found: {event_id}")
    return EventDetailResponse(event=event)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
)
async def health_check(request: Request) -> HealthResponse:
    """Return application health, version, and provider availability.

    ``healthy`` when the primary provider is configured, ``degraded`` when
    only the fallback is, ``unhealthy`` when neither is.
    """
    providers: dict[str, Any] = {}
    if hasattr(request.app.state, "provider_registry"):
        providers = dict(request.app.state.provider_registry)

    if providers.get("rapidapi", False):
        status = "healthy"
    elif providers.get("fallback", False):
        status = "degraded"
    else:
        status = "unhealthy"

    return HealthResponse(status=status, version=APP_VERSION, providers=providers)


@router.get(
    "/providers",
    response_model=ProvidersResponse,
    summary="List configured providers",
)
async def list_providers(request: Request) -> ProvidersResponse:
    """List all configured providers, their roles, and availability status."""
    providers: list[dict[str, Any]] = []
    if hasattr(request.app.state, "provider_list"):
        providers = request.app.state.provider_list

    return ProvidersResponse(providers=providers)
