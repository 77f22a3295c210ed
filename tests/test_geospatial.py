import math

import pytest

from courier_routing.errors import InvalidInputError
from courier_routing.models.domain import Location
from courier_routing.services.geospatial import (
    CIRCLE_POLYGON_POINTS,
    circle_polygon,
    distance_meters,
    estimated_travel_minutes,
    haversine_km,
    polygon_from_wkt,
)


def _loc(lat: float, lon: float) -> Location:
    return Location(latitude=lat, longitude=lon)


def test_distance_is_symmetric_and_zero_for_same_point():
    pairs = [
        (_loc(21.5, 39.2), _loc(24.7, 46.7)),
        (_loc(-33.86, 151.2), _loc(51.5, -0.12)),
        (_loc(0.0, 179.9), _loc(0.0, -179.9)),
    ]
    for a, b in pairs:
        assert distance_meters(a, b) == distance_meters(b, a)
        assert distance_meters(a, b) > 0
        assert distance_meters(a, a) == 0.0


def test_one_degree_of_longitude_on_equator():
    expected = 6371.0 * math.radians(1.0) * 1000.0
    assert distance_meters(_loc(0, 0), _loc(0, 1)) == pytest.approx(expected, rel=1e-9)
    assert haversine_km(0, 0, 0, 1) == pytest.approx(expected / 1000.0)


def test_estimated_travel_minutes():
    assert estimated_travel_minutes(30_000, 30.0) == pytest.approx(60.0)
    assert estimated_travel_minutes(0, 45.0) == 0.0
    with pytest.raises(InvalidInputError):
        estimated_travel_minutes(1_000, 0)
    with pytest.raises(InvalidInputError):
        estimated_travel_minutes(-1, 30)


@pytest.mark.parametrize(
    "lat,lon",
    [(91, 0), (-91, 0), (0, 181), (0, -180.5), (float("nan"), 0), (0, float("inf")), ("1", 2), (True, 0)],
)
def test_invalid_coordinates_are_rejected(lat, lon):
    with pytest.raises(InvalidInputError):
        Location(latitude=lat, longitude=lon)


def test_circle_polygon_contains_center():
    center = _loc(21.5, 39.2)
    polygon = circle_polygon(center, 2.0)
    assert len(polygon.exterior.coords) == CIRCLE_POLYGON_POINTS + 1
    assert polygon.contains(polygon.centroid)
    min_x, min_y, max_x, max_y = polygon.bounds
    assert min_x < center.longitude < max_x
    assert min_y < center.latitude < max_y
    assert polygon.wkt.startswith("POLYGON")


def test_polygon_from_wkt_rejects_bad_input():
    with pytest.raises(InvalidInputError):
        polygon_from_wkt("not a polygon")
    with pytest.raises(InvalidInputError):
        polygon_from_wkt("POINT (1 2)")
    polygon = polygon_from_wkt("POLYGON ((0 0, 1 0, 1 1, 0 1, 0 0))")
    assert polygon.area == pytest.approx(1.0)
