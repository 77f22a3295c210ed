import threading

import pytest
from shapely.geometry import Polygon

from courier_routing.errors import InvalidInputError
from courier_routing.models.domain import Location
from courier_routing.services.geo_index import GeospatialIndex


def _index(*points: tuple[str, float, float]) -> GeospatialIndex:
    index = GeospatialIndex("test")
    for entity_id, lat, lon in points:
        index.upsert(entity_id, lat, lon)
    return index


def test_nearest_orders_by_distance_then_id():
    index = _index(("b", 0.0, 1.0), ("a", 0.0, -1.0), ("c", 0.0, 3.0), ("d", 0.0, 0.5))
    result = index.nearest(Location(latitude=0, longitude=0), 3)
    assert [item.entry.entity_id for item in result] == ["d", "a", "b"]
    assert result[1].distance_m == result[2].distance_m


def test_nearest_with_zero_or_negative_k():
    index = _index(("a", 0.0, 0.0))
    assert index.nearest(Location(latitude=0, longitude=0), 0) == []
    with pytest.raises(InvalidInputError):
        index.nearest(Location(latitude=0, longitude=0), -1)


def test_within_radius_is_inclusive_and_sorted():
    index = _index(("far", 0.0, 2.0), ("near", 0.0, 0.1), ("mid", 0.0, 0.5))
    result = index.within_radius(Location(latitude=0, longitude=0), 60.0)
    assert [item.entry.entity_id for item in result] == ["near", "mid"]
    assert all(item.distance_m <= 60_000 for item in result)


def test_within_boundary_handles_antimeridian():
    index = _index(("east", 10.0, 179.5), ("west", 10.0, -179.5), ("middle", 10.0, 0.0))
    plain = index.within_boundary(Location(latitude=0, longitude=-10), Location(latitude=20, longitude=10))
    assert [entry.entity_id for entry in plain] == ["middle"]
    wrapped = index.within_boundary(Location(latitude=0, longitude=179), Location(latitude=20, longitude=-179))
    assert [entry.entity_id for entry in wrapped] == ["east", "west"]
    with pytest.raises(InvalidInputError):
        index.within_boundary(Location(latitude=20, longitude=0), Location(latitude=0, longitude=10))


def test_within_geometry():
    index = _index(("inside", 0.5, 0.5), ("outside", 2.0, 2.0), ("edge", 0.0, 0.5))
    square = Polygon([(0, 0), (1, 0), (1, 1), (0, 1)])
    assert [entry.entity_id for entry in index.within_geometry(square)] == ["edge", "inside"]


def test_upsert_replaces_and_remove_reports_presence():
    index = _index(("courier-1", 0.0, 0.0))
    index.upsert("courier-1", 1.0, 1.0)
    assert len(index) == 1
    assert index.get("courier-1").latitude == 1.0
    assert index.remove("courier-1") is True
    assert index.remove("courier-1") is False
    with pytest.raises(InvalidInputError):
        index.upsert("bad", 95.0, 0.0)


def test_scaling_warning_logged_once(caplog: pytest.LogCaptureFixture):
    index = GeospatialIndex("small", scan_warning_threshold=2)
    with caplog.at_level("WARNING"):
        for i in range(5):
            index.upsert(f"e{i}", 0.0, float(i))
    assert sum("scaling risk" in record.message for record in caplog.records) == 1


def test_concurrent_updates_never_tear_snapshots():
    index = GeospatialIndex("couriers")
    errors: list[Exception] = []
    stop = threading.Event()

    def writer(worker: int) -> None:
        for step in range(200):
            index.upsert(f"courier-{worker}", step % 80, step % 170)

    def reader() -> None:
        while not stop.is_set():
            try:
                snapshot = index.snapshot()
                assert len({entry.entity_id for entry in snapshot}) == len(snapshot)
                index.nearest(Location(latitude=0, longitude=0), 3)
            except Exception as exc:  # pragma: no cover - surfaced by the assert below
                errors.append(exc)
                return

    readers = [threading.Thread(target=reader) for _ in range(2)]
    writers = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
    for thread in readers + writers:
        thread.start()
    for thread in writers:
        thread.join()
    stop.set()
    for thread in readers:
        thread.join()

    assert errors == []
    assert len(index) == 4
