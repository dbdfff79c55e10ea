# armory_scout/cache.py
"""
In-memory TTL cache of scrape results.

Entries live for ``ttl`` seconds of the store clock. The store keeps at most
``capacity`` keys and evicts by insertion order (FIFO, not LRU). Stale entries
are hidden from :meth:`CacheStore.get` immediately and physically removed by
:meth:`CacheStore.sweep`, which :class:`CacheSweeper` runs on a fixed interval.
"""
from __future__ import annotations

import asyncio
import threading
import time
from collections import OrderedDict
from typing import Callable, Optional

from armory_scout.errors import CacheStoreError
from armory_scout.logger import get_logger
from armory_scout.models import CacheEntry, ScrapeResult

__all__ = ["CacheStore", "CacheSweeper", "normalize_key", "CACHE_DURATION", "CACHE_CAPACITY", "SWEEP_INTERVAL"]

CACHE_DURATION: float = 5 * 60
CACHE_CAPACITY: int = 50
SWEEP_INTERVAL: float = 60.0

Clock = Callable[[], float]

logger = get_logger("cache")


def normalize_key(character: str) -> str:
    """Cache key for a character name: trimmed and lower-cased."""
    key = character.strip().lower()
    if not key:
        raise CacheStoreError("empty character name")
    return key


class CacheStore:
    """Bounded mapping ``key -> CacheEntry`` with read-time freshness checks."""

    def __init__(
        self,
        capacity: int = CACHE_CAPACITY,
        ttl: float = CACHE_DURATION,
        clock: Clock = time.monotonic,
    ) -> None:
        if capacity < 1:
            raise CacheStoreError(f"capacity must be >= 1, got {capacity}")
        if ttl <= 0:
            raise CacheStoreError(f"ttl must be > 0, got {ttl}")
        self.capacity = capacity
        self.ttl = ttl
        self._clock = clock
        self._entries: OrderedDict[str, CacheEntry] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def is_fresh(self, entry: CacheEntry, now: Optional[float] = None) -> bool:
        now = self._clock() if now is None else now
        return (now - entry.inserted_at) < self.ttl

    def get(self, key: str) -> Optional[CacheEntry]:
        """Fresh entry for *key* or None. Never changes eviction order."""
        entry = self._entries.get(key)
        if entry is None or not self.is_fresh(entry):
            return None
        return entry

    def put(self, key: str, payload: ScrapeResult) -> CacheEntry:
        entry = CacheEntry(payload=payload, inserted_at=self._clock())
        with self._lock:
            # overwrite counts as a new insertion
            self._entries.pop(key, None)
            self._entries[key] = entry
            if len(self._entries) > self.capacity:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Cache full (%d), evicted %s", self.capacity, evicted)
        return entry

    def sweep(self, now: Optional[float] = None) -> int:
        """Drop every stale entry; returns the number removed."""
        now = self._clock() if now is None else now
        with self._lock:
            stale = [k for k, e in self._entries.items() if not self.is_fresh(e, now)]
            for key in stale:
                del self._entries[key]
        if stale:
            logger.debug("Swept %d stale entries, %d left", len(stale), len(self._entries))
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> dict[str, float | int]:
        return {"size": len(self._entries), "capacity": self.capacity, "ttl": self.ttl}


class CacheSweeper:
    """Background task calling ``store.sweep()`` every *interval* seconds."""

    def __init__(self, store: CacheStore, interval: float = SWEEP_INTERVAL) -> None:
        if interval <= 0:
            raise ValueError("interval must be > 0")
        self.store = store
        self.interval = interval
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="cache-sweeper")
        logger.info("Cache sweeper started (every %.0f s)", self.interval)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Cache sweeper stopped")

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                self.store.sweep()
            except Exception:
                logger.exception("Cache sweep failed")

    async def __aenter__(self) -> CacheSweeper:
        self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()
