"""HTTP adapter for the secondary search backend.

The backend is another instance of the same search contract: it takes the
camelCase ``SearchRequest`` JSON and answers ``{events, sourceStats, meta}``.
Only that envelope is checked here; individual events are left for the
normalizer so one malformed record cannot sink the whole reply.
No retries happen here; the primary provider already spent its retry
budget by the time this is called.
"""

from __future__ import annotations

import httpx
from pydantic import ValidationError

from src.interfaces.fallback_backend import IFallbackSearchBackend
from src.models.search import FallbackSearchResult, SearchRequest
from src.utils.errors import ProviderUnavailableError
from src.utils.logging import get_logger

PROVIDER_NAME = "fallback"
_TIMEOUT = 30.0


class HTTPFallbackSearchBackend(IFallbackSearchBackend):
    """POSTs search requests to a secondary search endpoint.

    Parameters
    ----------
    http_client:
        Injected ``httpx.AsyncClient``.
    url:
        Full endpoint URL.  Empty means the backend is not configured.
    api_key:
        Optional bearer token sent in ``Authorization``.
    timeout:
        Per-request timeout in seconds.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        url: str,
        api_key: str = "",
        timeout: float = _TIMEOUT,
    ) -> None:
        self._http = http_client
        self._url = url
        self._api_key = api_key
        self._timeout = timeout
        self._logger = get_logger(__name__)

    def get_provider_name(self) -> str:
        return PROVIDER_NAME

    def is_available(self) -> bool:
        return bool(self._url)

    async def search(self, request: SearchRequest) -> FallbackSearchResult:
        if not self._url:
            raise ProviderUnavailableError(
                "Fallback search URL is not configured", provider_name=PROVIDER_NAME
            )

        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        try:
            response = await self._http.post(
                self._url,
                json=request.model_dump(mode="json", by_alias=True),
                headers=headers,
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            self._logger.warning("fallback_request_failed", error=str(exc))
            raise ProviderUnavailableError(
                f"Fallback request failed: {exc}", provider_name=PROVIDER_NAME
            ) from exc

        if not 200 <= response.status_code < 300:
            self._logger.warning("fallback_bad_status", status=response.status_code)
            raise ProviderUnavailableError(
                f"Fallback returned HTTP {response.status_code}", provider_name=PROVIDER_NAME
            )

        try:
            result = FallbackSearchResult.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            self._logger.warning("fallback_bad_payload", error=str(exc)[:200])
            raise ProviderUnavailableError(
                "Fallback response is not a valid search result", provider_name=PROVIDER_NAME
            ) from exc

        self._logger.info("fallback_search_complete", events=len(result.events))
        return result
