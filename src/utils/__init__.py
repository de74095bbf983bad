"""Utility modules for the event search service.

- **errors** -- exception hierarchy rooted at EventSearchError; the class of
  an error decides whether the retriever retries and whether the
  orchestrator falls back.
- **logging** -- structlog setup with console output in development and
  JSON in production.
- **geo** -- Haversine distance and coordinate validation.
- **dates** -- timestamp parsing (python-dateutil) and display formatting.
- **concurrency** -- single-flight coalescing of identical concurrent searches.
"""

from src.utils.concurrency import SingleFlight
from src.utils.dates import format_display_date, format_display_time, parse_timestamp
from src.utils.errors import (
    AuthError,
    ConfigurationError,
    EventSearchError,
    ParseError,
    ProviderRequestError,
    ProviderUnavailableError,
    RateLimitError,
    SearchValidationError,
    TransientProviderError,
)
from src.utils.geo import haversine_miles, is_valid_coordinate
from src.utils.logging import configure_logging, get_logger

__all__ = [
    "AuthError",
    "ConfigurationError",
    "EventSearchError",
    "ParseError",
    "ProviderRequestError",
    "ProviderUnavailableError",
    "RateLimitError",
    "SearchValidationError",
    "SingleFlight",
    "TransientProviderError",
    "configure_logging",
    "format_display_date",
    "format_display_time",
    "get_logger",
    "haversine_miles",
    "is_valid_coordinate",
    "parse_timestamp",
]
