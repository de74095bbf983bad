"""Real-Time Events Search (RapidAPI) provider.

Issues ``GET /search-events`` with a free-text ``query`` plus the
``date``/``is_virtual``/``start``/``limit``/``sort`` flags, authenticated
with the ``x-rapidapi-key`` / ``x-rapidapi-host`` headers.  The response
body is ``{"status": "OK", "data": [...raw events...]}``.

Retry policy (shared by search and event details):

    network error / timeout / 5xx / 408 / 429  -> retry, sleep backoff_base ** attempt
    401 / 403                                  -> AuthError, no retry
    other 4xx                                  -> ProviderRequestError, no retry
    non-JSON body or missing ``data`` list     -> ParseError, no retry

At most ``max_retries`` HTTP calls are made per invocation; there is no
sleep after the last attempt.  Follows the same adapter shape as the other
HTTP providers: injected ``httpx.AsyncClient``, structured logging, and
typed errors from :mod:`src.utils.errors`.
"""

from __future__ import annotations

import asyncio
from datetime import date, datetime, timezone
from typing import Any, Callable

import httpx

from src.interfaces.event_provider import IEventProvider
from src.models.search import FetchResult, SearchRequest
from src.services.query_builder import build_search_query, date_bucket, provider_window
from src.utils.errors import (
    AuthError,
    ConfigurationError,
    EventSearchError,
    ParseError,
    ProviderRequestError,
    RateLimitError,
    TransientProviderError,
)
from src.utils.geo import finite_float
from src.utils.logging import get_logger

PROVIDER_NAME = "rapidapi"
DEFAULT_HOST = "real-time-events-search.p.rapidapi.com"
DEFAULT_BASE_URL = f"https://{DEFAULT_HOST}"
_SEARCH_PATH = "/search-events"
_DETAILS_PATH = "/event-details"
_MAX_RETRIES = 3
_BACKOFF_BASE = 2.0
_TIMEOUT = 20.0
_RETRYABLE_4XX = frozenset({408, 425, 429})


def _utc_today() -> date:
    return datetime.now(tz=timezone.utc).date()


class RapidAPIEventProvider(IEventProvider):
    """Primary event retriever backed by the RapidAPI events search.

    Parameters
    ----------
    http_client:
        Injected ``httpx.AsyncClient`` for testability and connection pooling.
    api_key:
        RapidAPI key.  Empty means unconfigured: every call fails fast with
        :class:`ConfigurationError`.
    host:
        Value of the ``x-rapidapi-host`` header.
    base_url:
        Scheme + host the endpoint paths are appended to.
    max_retries:
        Maximum HTTP attempts per invocation (default 3).
    backoff_base:
        Sleep ``backoff_base ** attempt`` seconds between attempts.
    overfetch_factor, max_limit:
        Over-fetch tuning, see :func:`~src.services.query_builder.provider_window`.
    today:
        Clock for the coarse date bucket.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_key: str,
        host: str = DEFAULT_HOST,
        base_url: str = DEFAULT_BASE_URL,
        max_retries: int = _MAX_RETRIES,
        backoff_base: float = _BACKOFF_BASE,
        timeout: float = _TIMEOUT,
        overfetch_factor: int = 2,
        max_limit: int = 200,
        today: Callable[[], date] = _utc_today,
    ) -> None:
        self._http = http_client
        self._api_key = api_key
        self._host = host
        self._base_url = base_url.rstrip("/")
        self._max_retries = max(1, max_retries)
        self._backoff_base = backoff_base
        self._timeout = timeout
        self._overfetch_factor = overfetch_factor
        self._max_limit = max_limit
        self._today = today
        self._logger = get_logger(__name__)

    # ------------------------------------------------------------------
    # IEventProvider
    # ------------------------------------------------------------------

    def get_provider_name(self) -> str:
        return PROVIDER_NAME

    def is_available(self) -> bool:
        return bool(self._api_key)

    async def fetch(self, request: SearchRequest) -> FetchResult:
        """Search the provider; failures come back inside the result."""
        query = build_search_query(request)
        params = self.build_params(request, query)

        try:
            self._require_key()
            payload = await self._request_with_retry(_SEARCH_PATH, params)
            raw_events = self._extract_events(payload)
        except EventSearchError as exc:
            self._logger.warning(
                "rapidapi_fetch_failed",
                error_type=type(exc).__name__,
                error=exc.message,
                query=query,
            )
            return FetchResult(error=exc, query_used=query, provider=PROVIDER_NAME)

        self._logger.info(
            "rapidapi_fetch_complete",
            query=query,
            requested=params["limit"],
            received=len(raw_events),
        )
        return FetchResult(raw_events=raw_events, query_used=query, provider=PROVIDER_NAME)

    async def fetch_details(self, event_id: str) -> dict[str, Any] | None:
        """Fetch one raw event by (optionally namespaced) id."""
        provider_id = self.strip_prefix(event_id)
        if not provider_id:
            return None
        self._require_key()

        try:
            payload = await self._request_with_retry(_DETAILS_PATH, {"event_id": provider_id})
        except ProviderRequestError as exc:
            if exc.status_code == 404:
                self._logger.info("rapidapi_event_not_found", event_id=provider_id)
                return None
            raise

        if not isinstance(payload, dict):
            raise ParseError("Event details response is not an object", provider_name=PROVIDER_NAME)

        # Current API nests the record under "data"; older responses used "event".
        record = payload.get("data", payload.get("event"))
        if isinstance(record, list):
            record = record[0] if record else None
        if record is None:
            return None
        if not isinstance(record, dict):
            raise ParseError("Event details payload has an unexpected shape", provider_name=PROVIDER_NAME)
        return record

    # ------------------------------------------------------------------
    # Request construction
    # ------------------------------------------------------------------

    def build_params(self, request: SearchRequest, query: str) -> dict[str, Any]:
        """Query-string parameters for a search call."""
        return {
            "query": query,
            "date": date_bucket(request, self._today()),
            "is_virtual": "false",
            "start": 0,
            "limit": provider_window(request, self._overfetch_factor, self._max_limit),
            "sort": "relevance",
        }

    @staticmethod
    def strip_prefix(event_id: str) -> str:
        prefix = f"{PROVIDER_NAME}_"
        event_id = (event_id or "").strip()
        return event_id[len(prefix):] if event_id.startswith(prefix) else event_id

    def _headers(self) -> dict[str, str]:
        return {
            "x-rapidapi-key": self._api_key,
            "x-rapidapi-host": self._host,
            "Accept": "application/json",
        }

    def _require_key(self) -> None:
        if not self._api_key:
            raise ConfigurationError("RAPIDAPI_KEY is not configured", provider_name=PROVIDER_NAME)

    # ------------------------------------------------------------------
    # HTTP with retry
    # ------------------------------------------------------------------

    async def _request_with_retry(self, path: str, params: dict[str, Any]) -> Any:
        """GET *path* with the retry policy; returns the decoded JSON body."""
        url = f"{self._base_url}{path}"
        last_error: TransientProviderError

        for attempt in range(1, self._max_retries + 1):
            try:
                response = await self._http.get(
                    url,
                    params=params,
                    headers=self._headers(),
                    timeout=self._timeout,
                )
            except httpx.TimeoutException as exc:
                last_error = TransientProviderError(
                    f"Request timed out: {exc}", provider_name=PROVIDER_NAME
                )
            except httpx.HTTPError as exc:
                last_error = TransientProviderError(
                    f"Network error: {exc}", provider_name=PROVIDER_NAME
                )
            else:
                if 200 <= response.status_code < 300:
                    return self._decode(response)
                error = self._error_for_status(response)
                if not isinstance(error, TransientProviderError):
                    self._logger.warning(
                        "rapidapi_request_rejected",
                        status=response.status_code,
                        path=path,
                    )
                    raise error
                last_error = error

            self._logger.warning(
                "rapidapi_transient_error",
                error=last_error.message,
                status=last_error.status_code,
                attempt=attempt,
                max_retries=self._max_retries,
            )
            if attempt == self._max_retries:
                self._logger.error("rapidapi_retries_exhausted", path=path, attempts=attempt)
                raise last_error
            await asyncio.sleep(self._backoff_delay(attempt, last_error))

        raise TransientProviderError("No request attempts were made", provider_name=PROVIDER_NAME)

    def _backoff_delay(self, attempt: int, error: TransientProviderError) -> float:
        delay = self._backoff_base ** attempt
        if isinstance(error, RateLimitError) and error.retry_after:
            delay = max(delay, error.retry_after)
        return delay

    @staticmethod
    def _error_for_status(response: httpx.Response) -> EventSearchError:
        status = response.status_code
        if status in (401, 403):
            return AuthError(
                f"Provider rejected the API key (HTTP {status})", provider_name=PROVIDER_NAME
            )
        if status == 429:
            return RateLimitError(
                "Provider rate limit exceeded (HTTP 429)",
                provider_name=PROVIDER_NAME,
                retry_after=finite_float(response.headers.get("retry-after")),
            )
        if status >= 500 or status in _RETRYABLE_4XX:
            return TransientProviderError(
                f"Provider returned HTTP {status}", provider_name=PROVIDER_NAME, status_code=status
            )
        return ProviderRequestError(
            f"Provider returned HTTP {status}", provider_name=PROVIDER_NAME, status_code=status
        )

    @staticmethod
    def _decode(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise ParseError(
                f"Provider response is not valid JSON: {exc}", provider_name=PROVIDER_NAME
            ) from exc

    def _extract_events(self, payload: Any) -> list[dict[str, Any]]:
        if not isinstance(payload, dict):
            raise ParseError("Provider response is not a JSON object", provider_name=PROVIDER_NAME)
        data = payload.get("data")
        if not isinstance(data, list):
            raise ParseError("Provider response has no 'data' list", provider_name=PROVIDER_NAME)

        records = [item for item in data if isinstance(item, dict)]
        if len(records) != len(data):
            self._logger.warning(
                "rapidapi_non_object_records",
                skipped=len(data) - len(records),
            )
        return records
