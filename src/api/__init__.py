"""Event search API layer: routes, schemas, presentation, and middleware."""

from src.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from src.api.presentation import place_for_display
from src.api.routes import router
from src.api.schemas import (
    DisplayEvent,
    ErrorResponse,
    EventDetailResponse,
    HealthResponse,
    ProvidersResponse,
    SearchEventsRequest,
    SearchEventsResponse,
)

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "place_for_display",
    "router",
    "DisplayEvent",
    "ErrorResponse",
    "EventDetailResponse",
    "HealthResponse",
    "ProvidersResponse",
    "SearchEventsRequest",
    "SearchEventsResponse",
]
