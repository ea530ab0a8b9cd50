"""Tests for LRU cache."""

import pytest

from ondeestou.lru_cache import LRUCache


class FakeClock:
    """Manually advanced millisecond clock."""

    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return LRUCache(max_size=3, expiration_ms=1000, clock=clock)


def test_set_and_get(cache):
    cache.set("a", 1)
    assert cache.get("a") == 1
    assert cache.get("missing") is None
    assert len(cache) == 1


def test_evicts_least_recently_used(cache):
    """Test inserting capacity + 1 keys evicts the oldest."""
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("c", 3)
    cache.set("d", 4)

    assert len(cache) == 3
    assert "a" not in cache
    assert cache.get("b") == 2
    assert cache.get("d") == 4


def test_get_protects_from_eviction(cache):
    """Test reading an entry makes it most recently used."""
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("c", 3)

    cache.get("a")
    cache.set("d", 4)

    assert "a" in cache
    assert "b" not in cache


def test_overwrite_does_not_evict(cache):
    cache.set("a", 1)
    cache.set("b", 2)
    cache.set("c", 3)
    cache.set("a", 10)

    assert len(cache) == 3
    assert cache.get("a") == 10
    assert "b" in cache


def test_expired_entry_is_miss_and_removed(cache, clock):
    """Test entry read after its TTL is removed."""
    cache.set("a", 1)
    clock.advance(1001)

    assert cache.get("a") is None
    assert "a" not in cache
    assert len(cache) == 0


def test_entry_at_ttl_boundary_still_valid(cache, clock):
    cache.set("a", 1)
    clock.advance(1000)
    assert cache.get("a") == 1


def test_access_does_not_extend_ttl(cache, clock):
    """Test TTL is measured from creation, not last access."""
    cache.set("a", 1)
    clock.advance(600)
    assert cache.get("a") == 1
    clock.advance(600)
    assert cache.get("a") is None


def test_access_updates_last_accessed(cache, clock):
    cache.set("a", 1)
    clock.advance(300)
    cache.get("a")

    entry = cache.entry("a")
    assert entry.created_at == 1_000_000
    assert entry.last_accessed == 1_000_300


def test_clean_expired(cache, clock):
    """Test sweep removes only expired entries and returns the count."""
    cache.set("a", 1)
    cache.set("b", 2)
    clock.advance(800)
    cache.set("c", 3)
    clock.advance(300)

    assert cache.clean_expired() == 2
    assert list(cache.snapshot()) == ["c"]
    assert cache.clean_expired() == 0


def test_clear(cache):
    cache.set("a", 1)
    cache.clear()
    assert len(cache) == 0


def test_invalid_size():
    with pytest.raises(ValueError):
        LRUCache(max_size=0)


def test_default_limits():
    cache = LRUCache()
    assert cache.max_size == 50
    assert cache.expiration_ms == 300000
    assert str(cache) == "LRUCache: size=0/50, expiration=300000ms"
