import threading

from courier_routing.models.domain import Location
from courier_routing.services.cache import TravelTimeCache, fingerprint


class FakeClock:
    def __init__(self) -> None:
        self.now = 100.0

    def __call__(self) -> float:
        return self.now


def _counter():
    calls = {"count": 0}

    def compute():
        calls["count"] += 1
        return calls["count"]

    return calls, compute


def test_get_or_compute_memoizes():
    cache = TravelTimeCache()
    calls, compute = _counter()
    assert cache.get_or_compute("k", compute) == 1
    assert cache.get_or_compute("k", compute) == 1
    assert calls["count"] == 1


def test_invalidate_all_forces_recompute():
    cache = TravelTimeCache()
    calls, compute = _counter()
    cache.get_or_compute("k", compute)

    assert cache.invalidate_all() == 1
    assert cache.get_or_compute("k", compute) == 2
    assert calls["count"] == 2
    assert cache.stats().generation == 1


def test_entries_expire_after_ttl():
    clock = FakeClock()
    cache = TravelTimeCache(ttl_seconds=10, clock=clock)
    calls, compute = _counter()
    cache.get_or_compute("k", compute)
    clock.now += 9
    cache.get_or_compute("k", compute)
    assert calls["count"] == 1
    clock.now += 2
    cache.get_or_compute("k", compute)
    assert calls["count"] == 2


def test_oldest_entry_is_evicted_when_full():
    cache = TravelTimeCache(max_entries=2)
    for key in ("a", "b", "c"):
        cache.get_or_compute(key, lambda: key)
    assert cache.stats().size == 2
    calls, compute = _counter()
    cache.get_or_compute("a", compute)
    assert calls["count"] == 1


def test_value_computed_across_an_invalidation_is_not_stored():
    cache = TravelTimeCache()
    started = threading.Event()
    release = threading.Event()

    def slow_compute():
        started.set()
        release.wait(5)
        return "stale"

    worker = threading.Thread(target=lambda: cache.get_or_compute("k", slow_compute))
    worker.start()
    started.wait(5)
    cache.invalidate_all()
    release.set()
    worker.join(5)

    assert cache.stats().size == 0
    assert cache.get_or_compute("k", lambda: "fresh") == "fresh"


def test_fingerprint_is_stable_and_order_sensitive():
    start = Location(latitude=1.0, longitude=2.0)
    a = Location(latitude=3.0, longitude=4.0)
    b = Location(latitude=5.0, longitude=6.0)
    assert fingerprint(start, [a, b], "speed=30") == fingerprint(start, [a, b], "speed=30")
    assert fingerprint(start, [a, b]) != fingerprint(start, [b, a])
    assert fingerprint(start, [a, b], "speed=30") != fingerprint(start, [a, b], "speed=40")


def test_fingerprint_distinguishes_nearby_points():
    start = Location(latitude=24.7136, longitude=46.6753)
    near = Location(latitude=24.7136001, longitude=46.6753)
    micro = Location(latitude=24.713600001, longitude=46.6753)
    assert fingerprint(start, [start]) != fingerprint(start, [near])
    assert fingerprint(start, [near]) != fingerprint(start, [micro])
    assert fingerprint(Location(latitude=1, longitude=2), []) == fingerprint(Location(latitude=1.0, longitude=2.0), [])
