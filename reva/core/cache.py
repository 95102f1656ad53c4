"""
In-memory TTL cache for third-party enrichment results.

Each PDL lookup costs money and counts against a rate limit, so outcomes are
remembered for a while - including "no match" outcomes, otherwise an
unmatchable email would be re-queried on every save.

Expiry is enforced twice:
- get() re-checks the entry age, so a stale value is never returned
- a periodic sweep drops expired entries nobody reads again
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional

import structlog

logger = structlog.get_logger(__name__)


def _now_ms() -> float:
    return time.time() * 1000


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    stored_at: float
    ttl_ms: int

    def is_live(self, now_ms: float) -> bool:
        return now_ms - self.stored_at <= self.ttl_ms


class TTLCache:
    """
    Key/value cache with a per-entry TTL.

    Never raises to callers: a miss looks the same whether the key was never
    set or has expired.

    Args:
        clock: Callable returning the current time in milliseconds.
            Tests pass a fake clock to simulate elapsed time.
    """

    def __init__(self, clock: Callable[[], float] = _now_ms):
        self._entries: dict[str, CacheEntry] = {}
        self._clock = clock
        self._sweep_task: Optional[asyncio.Task] = None

    def get(self, key: str) -> Optional[Any]:
        """
        Get value from cache if not expired.

        Args:
            key: Cache key

        Returns:
            Cached value or None if not found/expired
        """
        entry = self._entries.get(key)
        if entry is None:
            return None

        if not entry.is_live(self._clock()):
            self._entries.pop(key, None)
            return None

        return entry.value

    def set(self, key: str, value: Any, ttl_ms: int) -> None:
        """
        Store a value, overwriting any existing entry for the key.

        Args:
            key: Cache key, namespaced as "<namespace>:<identity>"
            value: Value to cache
            ttl_ms: Time to live in milliseconds
        """
        self._entries[key] = CacheEntry(value=value, stored_at=self._clock(), ttl_ms=ttl_ms)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Clear all cache entries."""
        self._entries.clear()

    def size(self) -> int:
        """Get number of stored entries (expired ones included until swept)."""
        return len(self._entries)

    def __len__(self) -> int:
        return self.size()

    def sweep(self) -> int:
        """
        Remove every expired entry.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if not entry.is_live(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    async def _sweep_loop(self, interval_seconds: float) -> None:
        while True:
            await asyncio.sleep(interval_seconds)
            removed = self.sweep()
            if removed:
                logger.debug("cache_sweep", removed=removed, remaining=len(self._entries))

    def start_sweeper(self, interval_seconds: float) -> asyncio.Task:
        """
        Start the periodic sweep on the running event loop.

        Idempotent: a second call returns the task already running.
        """
        if self._sweep_task is None or self._sweep_task.done():
            self._sweep_task = asyncio.create_task(self._sweep_loop(interval_seconds))
            logger.info("cache_sweeper_started", interval_seconds=interval_seconds)
        return self._sweep_task

    async def stop_sweeper(self) -> None:
        """Cancel the periodic sweep (called on application shutdown)."""
        task, self._sweep_task = self._sweep_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("cache_sweeper_stopped")
