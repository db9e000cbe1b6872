"""
Read cache keyed by query parameters

Keys are tuples such as ``("jobs", "quoted")`` or ``("job", job_id)``.
Invalidation matches by prefix, so ``invalidate("jobs")`` drops every
cached job list regardless of filter. A load that was started before an
invalidation returns its result to the caller but does not cache it.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Hashable, Tuple, TypeVar, Union

logger = logging.getLogger(__name__)

T = TypeVar("T")
CacheKey = Tuple[Hashable, ...]


def _as_key(key: Union[str, CacheKey]) -> CacheKey:
    return (key,) if isinstance(key, str) else tuple(key)


class QueryCache:
    """Key-based cache with explicit invalidation and no other eviction"""

    def __init__(self):
        self._entries: Dict[CacheKey, Any] = {}
        self._generation = 0
        self.hits = 0
        self.misses = 0

    def __contains__(self, key: Union[str, CacheKey]) -> bool:
        return _as_key(key) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    async def fetch(self, key: Union[str, CacheKey], loader: Callable[[], Awaitable[T]]) -> T:
        """Return the cached value for ``key`` or await ``loader`` and cache its result"""
        key = _as_key(key)
        if key in self._entries:
            self.hits += 1
            return self._entries[key]

        self.misses += 1
        generation = self._generation
        value = await loader()
        if generation == self._generation:
            self._entries[key] = value
        else:
            logger.debug(f"Discarded stale load for {key}")
        return value

    def invalidate(self, *prefix: Hashable) -> int:
        """Drop every entry whose key starts with ``prefix``; returns the count dropped"""
        prefix_key = tuple(prefix)
        self._generation += 1
        stale = [k for k in self._entries if k[:len(prefix_key)] == prefix_key]
        for k in stale:
            del self._entries[k]
        if stale:
            logger.debug(f"Invalidated {len(stale)} cached queries for {prefix_key}")
        return len(stale)

    def clear(self) -> None:
        self._generation += 1
        self._entries.clear()
