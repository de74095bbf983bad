"""Abstract base class for the secondary search backend.

The fallback accepts the same request as the orchestrator and answers with
the same ``{events, sourceStats, meta}`` shape.  Events come back as raw
dicts; the orchestrator re-normalizes them record by record.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.search import FallbackSearchResult, SearchRequest


class IFallbackSearchBackend(ABC):
    """Contract for the backend used when the primary provider fails."""

    @abstractmethod
    async def search(self, request: SearchRequest) -> FallbackSearchResult:
        """Run *request* on the secondary backend.

        Raises
        ------
        ProviderUnavailableError
            On any transport, status or response-shape problem.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Short tag used as the ``sourceStats`` key."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` when the backend URL is configured."""
