"""Cache providers.

MemoryCacheProvider keeps search results and event details for the cache
TTL (5 minutes by default) inside one process.  For multi-worker
deployments, swap in an adapter implementing ICacheProvider without
changing any pipeline code.
"""

from src.providers.cache.memory_cache import MemoryCacheProvider

__all__ = ["MemoryCacheProvider"]
