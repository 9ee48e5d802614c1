import pytest

from core.cache import TTLCache


def test_get_within_ttl_returns_stored_value(clock):
    cache = TTLCache(300, clock=clock)
    value = b"payload"
    cache.put("index.html", value)
    clock.advance(299.9)
    assert cache.get("index.html") is value


def test_entry_expires_at_ttl(clock):
    cache = TTLCache(300, clock=clock)
    cache.put("index.html", b"payload")
    clock.advance(300)
    assert cache.get("index.html") is None
    # Stale entries stay until overwritten.
    assert len(cache) == 1


def test_put_refreshes_entry(clock):
    cache = TTLCache(10, clock=clock)
    cache.put("k", "old")
    clock.advance(8)
    cache.put("k", "new")
    clock.advance(8)
    assert cache.get("k") == "new"
    clock.advance(2)
    assert cache.get("k") is None


def test_get_or_load_recomputes_only_after_expiry(clock):
    cache = TTLCache(600, clock=clock)
    calls = []

    def loader():
        calls.append(clock())
        return ("record",)

    assert cache.get_or_load("certs", loader) == ("record",)
    clock.advance(599)
    cache.get_or_load("certs", loader)
    assert len(calls) == 1
    clock.advance(1)
    cache.get_or_load("certs", loader)
    assert calls == [1000.0, 1600.0]


def test_get_or_load_failure_caches_nothing(clock):
    cache = TTLCache(600, clock=clock)

    def broken():
        raise OSError("disk gone")

    with pytest.raises(OSError):
        cache.get_or_load("certs", broken)
    assert cache.get("certs") is None
    assert len(cache) == 0


def test_independent_instances_keep_their_own_ttl(clock):
    static = TTLCache(300, clock=clock)
    dataset = TTLCache(600, clock=clock)
    static.put("k", 1)
    dataset.put("k", 2)
    clock.advance(400)
    assert static.get("k") is None
    assert dataset.get("k") == 2


def test_negative_ttl_rejected():
    with pytest.raises(ValueError):
        TTLCache(-1)
