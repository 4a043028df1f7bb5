"""Unit tests for TTLCache.

Test Strategy:
1. Entries expire ttl seconds after being written (injected clock, no sleeping)
2. Least recently used entry is evicted at capacity
3. A read refreshes recency but not expiry
"""
import pytest

from app.services.core.ttl_cache import TTLCache


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestExpiry:

    def test_value_available_until_ttl(self):
        clock = FakeClock()
        cache = TTLCache(ttl=60, capacity=4, clock=clock)
        cache.set("lebron", ["LeBron James"])

        clock.now += 59.9
        assert cache.get("lebron") == ["LeBron James"]

        clock.now += 0.1
        assert cache.get("lebron") is None
        assert len(cache) == 0

    def test_read_does_not_extend_expiry(self):
        clock = FakeClock()
        cache = TTLCache(ttl=10, capacity=4, clock=clock)
        cache.set("a", 1)

        clock.now += 8
        cache.get("a")
        clock.now += 3

        assert "a" not in cache

    def test_overwrite_resets_expiry(self):
        clock = FakeClock()
        cache = TTLCache(ttl=10, capacity=4, clock=clock)
        cache.set("a", 1)
        clock.now += 8
        cache.set("a", 2)
        clock.now += 8

        assert cache.get("a") == 2


class TestCapacity:

    def test_evicts_least_recently_used(self):
        cache = TTLCache(ttl=60, capacity=2, clock=FakeClock())
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        cache.set("c", 3)

        assert cache.get("b") is None
        assert cache.get("a") == 1
        assert cache.get("c") == 3
        assert len(cache) == 2

    def test_clear(self):
        cache = TTLCache(ttl=60, capacity=2, clock=FakeClock())
        cache.set("a", 1)
        cache.clear()
        assert len(cache) == 0

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValueError):
            TTLCache(ttl=60, capacity=0)
