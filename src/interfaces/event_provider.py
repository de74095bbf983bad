"""Abstract base class for primary event data providers.

A provider turns a :class:`~src.models.search.SearchRequest` into raw
provider records.  It owns query construction, the HTTP call and the retry
policy; it does not normalize, filter or cache.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from src.models.search import FetchResult, SearchRequest


class IEventProvider(ABC):
    """Contract for the primary events backend (the "retriever")."""

    @abstractmethod
    async def fetch(self, request: SearchRequest) -> FetchResult:
        """Fetch raw events for *request*.

        Never raises for provider failures: the outcome, including the
        error and the query string that was sent, is returned in the
        :class:`FetchResult`.
        """

    @abstractmethod
    async def fetch_details(self, event_id: str) -> dict[str, Any] | None:
        """Fetch a single raw event by id.

        Parameters
        ----------
        event_id:
            Either the bare provider id or the namespaced canonical id
            (``"<provider>_<id>"``); the prefix is stripped.

        Returns
        -------
        dict or None
            The raw record, or ``None`` when the provider does not know it.

        Raises
        ------
        EventSearchError
            When the provider cannot be reached after retries.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Short tag used in event ids and ``sourceStats`` keys."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` when the provider is configured (API key present)."""
