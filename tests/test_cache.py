"""Tests for the in-memory lookup cache."""

from recipe_nutrition.services.cache import InMemoryCache


class _Clock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_cache_evicts_least_recently_used() -> None:
    cache = InMemoryCache(max_entries=2)
    cache.set("a", 1, ttl_seconds=60)
    cache.set("b", 2, ttl_seconds=60)
    assert cache.get("a") == 1

    cache.set("c", 3, ttl_seconds=60)

    assert cache.get("b") is None
    assert cache.get("a") == 1
    assert len(cache) == 2


def test_cache_expires_entries() -> None:
    clock = _Clock()
    cache = InMemoryCache(clock=clock)
    cache.set("flour", "value", ttl_seconds=10)

    clock.now += 9
    assert cache.get("flour") == "value"

    clock.now += 1
    assert cache.get("flour") is None
    assert len(cache) == 0


def test_cache_clear() -> None:
    cache = InMemoryCache()
    cache.set("flour", "value", ttl_seconds=10)

    cache.clear()

    assert len(cache) == 0
