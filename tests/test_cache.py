# File: tests/test_cache.py
from __future__ import annotations

import asyncio

import pytest

from armory_scout.cache import CACHE_DURATION, CacheStore, CacheSweeper, normalize_key
from armory_scout.errors import CacheStoreError
from armory_scout.models import ScrapeResult
from armory_pages import FIXED_NOW


def result(tag: str) -> ScrapeResult:
    return ScrapeResult(left=({"href": f"/item/{tag}"},), scraped_at=FIXED_NOW)


@pytest.fixture()
def store(clock) -> CacheStore:
    return CacheStore(clock=clock)


@pytest.mark.parametrize(
    "raw,expected",
    [("Frostbite", "frostbite"), ("  FROSTBITE ", "frostbite"), ("frostbite", "frostbite")],
)
def test_normalize_key(raw, expected):
    assert normalize_key(raw) == expected


def test_normalize_key_rejects_blank():
    with pytest.raises(CacheStoreError):
        normalize_key("   ")


@pytest.mark.parametrize("capacity,ttl", [(0, 300), (50, 0), (-1, 10)])
def test_invalid_construction(capacity, ttl):
    with pytest.raises(CacheStoreError):
        CacheStore(capacity=capacity, ttl=ttl)


def test_get_missing_returns_none(store):
    assert store.get("nobody") is None


def test_fresh_until_ttl_boundary(store, clock):
    payload = result("1")
    store.put("frostbite", payload)

    clock.advance(CACHE_DURATION - 0.5)
    entry = store.get("frostbite")
    assert entry is not None and entry.payload is payload

    # exactly at the boundary the entry is stale
    clock.advance(0.5)
    assert store.get("frostbite") is None
    # hidden from get, but only the sweep removes it
    assert "frostbite" in store


def test_repeated_get_is_idempotent(store):
    store.put("frostbite", result("1"))
    first = store.get("frostbite")
    second = store.get("frostbite")
    assert first is second
    assert first.payload == second.payload
    assert len(store) == 1


def test_capacity_evicts_oldest_insertion(store, clock):
    for i in range(50):
        store.put(f"char{i}", result(str(i)))
        clock.advance(0.1)
    assert len(store) == 50

    # reading does not refresh insertion order (FIFO, not LRU)
    assert store.get("char0") is not None

    store.put("char50", result("50"))
    assert len(store) == 50
    assert "char0" not in store
    assert all(f"char{i}" in store for i in range(1, 51))


def test_overwrite_moves_key_to_newest(store):
    for i in range(50):
        store.put(f"char{i}", result(str(i)))
    store.put("char0", result("again"))
    store.put("char50", result("50"))

    assert "char0" in store
    assert "char1" not in store
    assert store.get("char0").payload.left[0]["href"] == "/item/again"


def test_overwrite_resets_insertion_time(store, clock):
    store.put("frostbite", result("old"))
    clock.advance(CACHE_DURATION - 1)
    store.put("frostbite", result("new"))
    clock.advance(2)
    entry = store.get("frostbite")
    assert entry is not None
    assert entry.payload.left[0]["href"] == "/item/new"


def test_sweep_removes_only_stale(store, clock):
    store.put("old", result("old"))
    clock.advance(CACHE_DURATION / 2)
    store.put("young", result("young"))
    clock.advance(CACHE_DURATION / 2)

    removed = store.sweep()

    assert removed == 1
    assert "old" not in store
    assert store.get("young") is not None


def test_sweep_with_explicit_now(store, clock):
    store.put("a", result("a"))
    store.put("b", result("b"))
    assert store.sweep(now=clock.now + CACHE_DURATION) == 2
    assert len(store) == 0


def test_stats_and_clear(store):
    store.put("a", result("a"))
    assert store.stats() == {"size": 1, "capacity": 50, "ttl": CACHE_DURATION}
    store.clear()
    assert len(store) == 0


@pytest.mark.asyncio()
async def test_sweeper_runs_periodically(store, clock):
    store.put("a", result("a"))
    clock.advance(CACHE_DURATION)

    async with CacheSweeper(store, interval=0.01) as sweeper:
        assert sweeper.running
        for _ in range(50):
            if len(store) == 0:
                break
            await asyncio.sleep(0.01)

    assert len(store) == 0
    assert not sweeper.running


@pytest.mark.asyncio()
async def test_sweeper_survives_failing_sweep(clock):
    calls = {"n": 0}

    class FlakyStore(CacheStore):
        def sweep(self, now=None):
            calls["n"] += 1
            if calls["n"] == 1:
                raise RuntimeError("boom")
            return super().sweep(now)

    sweeper = CacheSweeper(FlakyStore(clock=clock), interval=0.01)
    sweeper.start()
    for _ in range(50):
        if calls["n"] >= 2:
            break
        await asyncio.sleep(0.01)
    await sweeper.stop()

    assert calls["n"] >= 2
    assert not sweeper.running


@pytest.mark.asyncio()
async def test_sweeper_stop_is_idempotent(store):
    sweeper = CacheSweeper(store, interval=60)
    await sweeper.stop()
    sweeper.start()
    sweeper.start()
    await sweeper.stop()
    await sweeper.stop()
    assert not sweeper.running
