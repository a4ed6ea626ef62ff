import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from core.cache import TTLCache


def test_ttlcache_set_get_and_expire(clock):
    c = TTLCache(ttl_seconds=10.0)

    c.set("k", "v")
    assert c.get("k") == "v"

    clock.advance(10.0)
    assert c.get("k") is None


@pytest.mark.parametrize("ttl", [0.001, 1.0, 3600.0])
def test_set_then_get_returns_value_for_positive_ttl(clock, ttl):
    c = TTLCache()
    c.set("k", {"n": 1}, ttl)
    assert c.get("k") == {"n": 1}


@pytest.mark.parametrize("ttl", [0, -5])
def test_non_positive_ttl_never_hits(clock, ttl):
    c = TTLCache()
    c.set("k", "v", ttl)
    assert c.get("k") is None


def test_default_ttl_applies_when_none_given(clock):
    c = TTLCache(ttl_seconds=5.0)
    c.set("k", "v")

    clock.advance(4.9)
    assert c.get("k") == "v"

    clock.advance(0.2)
    assert c.get("k") is None


def test_repeated_get_is_idempotent(clock):
    c = TTLCache()
    value = {"last": 1}
    c.set("k", value, 60)

    first = c.get("k")
    second = c.get("k")

    assert first is value
    assert second is value
    assert c.size() == 1


def test_ticker_entry_expires_after_ttl(clock):
    c = TTLCache(ttl_seconds=10.0)
    c.set("ticker:THB_BTC", {"last": 3500000}, 10)
    assert c.get("ticker:THB_BTC") == {"last": 3500000}

    before = c.size()
    clock.advance(11)

    assert c.get("ticker:THB_BTC") is None
    assert c.size() == before - 1


def test_size_counts_expired_entries_until_pruned(clock):
    c = TTLCache()
    c.set("a", 1, 1)
    c.set("b", 2, 100)

    clock.advance(5)
    assert c.size() == 2

    assert c.cleanup() == 1
    assert c.size() == 1
    assert c.get("b") == 2


def test_cleanup_with_nothing_expired(clock):
    c = TTLCache()
    c.set("a", 1, 10)
    assert c.cleanup() == 0
    assert c.size() == 1


def test_overwrite_replaces_value_and_expiry(clock):
    c = TTLCache()
    c.set("k", "old", 1)
    c.set("k", "new", 100)

    clock.advance(50)
    assert c.get("k") == "new"
    assert c.size() == 1


def test_clear_removes_everything(clock):
    c = TTLCache()
    c.set("a", 1)
    c.set("b", 2)
    c.clear()
    assert c.size() == 0
    assert c.get("a") is None


def test_ttlcache_eviction_by_maxsize(clock):
    c = TTLCache(ttl_seconds=100.0, maxsize=2)

    c.set("a", 1)
    c.set("b", 2)
    c.set("c", 3)

    assert c.get("a") is None
    assert c.get("b") == 2
    assert c.get("c") == 3


def test_ttlcache_lru_touch_moves_to_end(clock):
    c = TTLCache(ttl_seconds=100.0, maxsize=2)

    c.set("a", 1)
    c.set("b", 2)

    assert c.get("a") == 1

    c.set("c", 3)

    assert c.get("a") == 1
    assert c.get("b") is None
    assert c.get("c") == 3


def test_get_default_distinguishes_cached_none(clock):
    missing = object()
    c = TTLCache()

    c.set("k", None, 10)

    assert c.get("k", missing) is None
    assert c.get("other", missing) is missing

    clock.advance(11)
    assert c.get("k", missing) is missing


def test_parallel_set_get_cleanup_stay_consistent():
    c = TTLCache(ttl_seconds=60.0)
    workers, rounds = 8, 200
    barrier = threading.Barrier(workers)

    def work(n):
        barrier.wait()
        for i in range(rounds):
            c.set(f"live:{n}:{i}", (n, i))
            c.set(f"dead:{n}:{i}", (n, i), 0)
            assert c.get(f"live:{n}:{i}") == (n, i)
            c.get(f"dead:{n}:{i}")
            if i % 10 == 0:
                c.cleanup()

    with ThreadPoolExecutor(max_workers=workers) as pool:
        list(pool.map(work, range(workers)))

    c.cleanup()
    assert c.size() == workers * rounds
    assert all(c.get(f"live:{n}:{i}") == (n, i) for n in range(workers) for i in range(rounds))
