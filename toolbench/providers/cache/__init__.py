"""Cache providers.

MemoryCacheProvider holds vendor metadata (account details, credit balance,
voice lists) between requests.  It is not shared across processes; swap in
a Redis adapter implementing ICacheProvider for multi-worker deployments.
"""

from toolbench.providers.cache.memory_cache import MemoryCacheProvider

__all__ = ["MemoryCacheProvider"]
