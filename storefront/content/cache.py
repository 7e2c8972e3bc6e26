"""Request cache with per-query lifetimes and in-flight de-duplication."""
import asyncio
import time
from dataclasses import dataclass
from functools import partial
from typing import Any, Awaitable, Callable, Dict, Mapping, NamedTuple, Optional, Tuple
from storefront.utils.logger import get_logger

logger = get_logger(__name__)


class QueryKey(NamedTuple):
    """Cache key: query class name plus its parameters in a stable order."""
    name: str
    params: Tuple[Tuple[str, Any], ...] = ()

    @classmethod
    def build(cls, name: str, params: Optional[Mapping[str, Any]] = None) -> "QueryKey":
        return cls(name, tuple(sorted((params or {}).items())))

    def param(self, name: str, default: Any = None) -> Any:
        return dict(self.params).get(name, default)


@dataclass
class CacheEntry:
    """State of one cached request."""
    task: Optional[asyncio.Future] = None
    value: Any = None
    has_value: bool = False
    settled_at: float = 0.0
    lifetime: float = 0.0


class RequestCache:
    """
    Memoizes fetch coroutines by QueryKey.

    Concurrent requests for the same key share one in-flight task. A settled
    value is reused until its lifetime, which is never shorter than the
    de-duplication window, runs out. Failures are not cached.
    """

    def __init__(self, dedupe_interval: float = 2.0, clock: Callable[[], float] = time.monotonic):
        """
        Initialize the cache.

        Args:
            dedupe_interval: Default de-duplication window in seconds
            clock: Monotonic clock returning seconds
        """
        self.dedupe_interval = dedupe_interval
        self._clock = clock
        self._entries: Dict[QueryKey, CacheEntry] = {}

    async def get_or_fetch(
        self,
        key: QueryKey,
        fetcher: Callable[[], Awaitable[Any]],
        revalidate: Optional[float] = None,
        dedupe_interval: Optional[float] = None
    ) -> Any:
        """
        Return the cached value for key, joining or starting a fetch if needed.

        Args:
            key: Structured cache key
            fetcher: Zero-argument coroutine function performing the real fetch
            revalidate: Cache lifetime in seconds, None for no-store
            dedupe_interval: Override of the de-duplication window

        Returns:
            The fetched (or cached) value
        """
        window = self.dedupe_interval if dedupe_interval is None else dedupe_interval
        lifetime = max(revalidate or 0, window)

        entry = self._entries.get(key)
        if entry is not None:
            if entry.task is not None:
                logger.debug(f"Joining in-flight request for {key.name}")
                return await asyncio.shield(entry.task)
            if entry.has_value and self._clock() - entry.settled_at < entry.lifetime:
                logger.debug(f"Cache hit for {key.name}")
                return entry.value

        self._prune()
        entry = CacheEntry(lifetime=lifetime)
        self._entries[key] = entry
        task = asyncio.ensure_future(fetcher())
        entry.task = task
        task.add_done_callback(partial(self._settle, key, entry))
        return await asyncio.shield(task)

    def _prune(self) -> None:
        """Drop settled entries whose lifetime has run out."""
        now = self._clock()
        expired = [
            key for key, entry in self._entries.items()
            if entry.task is None and now - entry.settled_at >= entry.lifetime
        ]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"Pruned {len(expired)} expired cache entries")

    def _settle(self, key: QueryKey, entry: CacheEntry, task: asyncio.Future) -> None:
        if self._entries.get(key) is not entry:
            # Invalidated while in flight
            return
        if task.cancelled() or task.exception() is not None:
            del self._entries[key]
            return
        entry.value = task.result()
        entry.has_value = True
        entry.settled_at = self._clock()
        entry.task = None

    def invalidate(self, predicate: Callable[[QueryKey], bool]) -> int:
        """
        Drop every entry whose key matches predicate.

        Returns:
            Number of entries removed
        """
        stale = [key for key in self._entries if predicate(key)]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: QueryKey) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
