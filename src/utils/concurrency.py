"""Request coalescing for concurrent identical searches.

Without coalescing, N simultaneous requests for the same cache fingerprint
all miss the cache and all hit the provider.  :class:`SingleFlight` lets
the first caller for a key do the work while later callers await the same
future.

Cancellation: each waiter awaits the shared future through
``asyncio.shield``, so a caller that gives up does not cancel the fetch for
the others.  If the leader's work raises, every waiter sees the exception
and the key is released so the next request starts fresh.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Generic, TypeVar

import structlog

from src.utils.logging import get_logger

_T = TypeVar("_T")

_logger: structlog.BoundLogger = get_logger(__name__)


class SingleFlight(Generic[_T]):
    """Deduplicate concurrent calls that share a key."""

    def __init__(self) -> None:
        self._inflight: dict[str, asyncio.Future[_T]] = {}

    @property
    def inflight_keys(self) -> list[str]:
        return list(self._inflight)

    async def run(self, key: str, work: Callable[[], Awaitable[_T]]) -> _T:
        """Run *work* for *key*, or join the call already in flight.

        Parameters
        ----------
        key:
            Deduplication key, the search fingerprint in practice.
        work:
            Zero-argument coroutine factory; only invoked by the leader.
        """
        future = self._inflight.get(key)
        if future is not None:
            _logger.debug("singleflight_join", key=key)
            return await asyncio.shield(future)

        future = asyncio.ensure_future(work())
        self._inflight[key] = future
        future.add_done_callback(lambda _f: self._release(key, _f))
        return await asyncio.shield(future)

    def _release(self, key: str, future: asyncio.Future[_T]) -> None:
        if self._inflight.get(key) is future:
            del self._inflight[key]
        # Consume the exception so an unobserved failure is not reported
        # as "never retrieved" when every waiter was cancelled.
        if not future.cancelled():
            future.exception()
