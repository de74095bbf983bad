"""Abstract base class for cache backends.

The search cache and the event-detail cache both sit on top of this
key/value contract.  The in-memory implementation is enough for a single
process; a shared backend (Redis, memcached) can implement the same methods
without touching the pipeline.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class ICacheProvider(ABC):
    """Contract for key-value cache backends.

    All operations are async so network-backed stores do not block the
    event loop.
    """

    @abstractmethod
    async def get(self, key: str) -> Any | None:
        """Return the value stored under *key*, or ``None`` if missing or expired."""

    @abstractmethod
    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store *value* under *key*.

        Parameters
        ----------
        key:
            The cache key.
        value:
            The value to store.  Values are treated as immutable; callers
            replace entries instead of editing them.
        ttl:
            Time-to-live in seconds.  ``None`` uses the backend default.
        """

    @abstractmethod
    async def delete(self, key: str) -> None:
        """Remove *key*; a no-op when it is absent."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Return ``True`` if *key* is present and not expired."""

    @abstractmethod
    async def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
