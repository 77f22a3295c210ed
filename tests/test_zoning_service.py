import pytest
from shapely.geometry import Point

from courier_routing.errors import InvalidInputError
from courier_routing.models.domain import Location
from courier_routing.services.geospatial import destination_point
from courier_routing.services.zoning.polar import partition_into_zones, zone_for_point, zone_polygon


def _center() -> Location:
    return Location(latitude=21.5433, longitude=39.1728, name="DC")


@pytest.mark.parametrize("count", [1, 3, 4, 7, 12])
def test_partition_covers_full_circle(count: int):
    zones = partition_into_zones(_center(), 15.0, count, rotation_offset=10.0)

    assert len(zones) == count
    assert sum(zone.angular_span for zone in zones) == pytest.approx(360.0)
    assert all(zone.radius_km == 15.0 for zone in zones)
    assert [zone.sequence_index for zone in zones] == list(range(count))
    assert zones[0].start_bearing == 10.0
    assert zones[0].id == "ZONE001"


def test_partition_rejects_invalid_arguments():
    with pytest.raises(InvalidInputError):
        partition_into_zones(_center(), 10.0, 0)
    with pytest.raises(InvalidInputError):
        partition_into_zones(_center(), 0.0, 4)


def test_zone_for_point_uses_bearing_and_radius():
    center = _center()
    zones = partition_into_zones(center, 10.0, 4)

    lat, lon = destination_point(center.latitude, center.longitude, 100.0, 5.0)
    assert zone_for_point(zones, Location(latitude=lat, longitude=lon)).id == "ZONE002"

    lat, lon = destination_point(center.latitude, center.longitude, 350.0, 5.0)
    assert zone_for_point(zones, Location(latitude=lat, longitude=lon)).id == "ZONE004"

    lat, lon = destination_point(center.latitude, center.longitude, 100.0, 25.0)
    assert zone_for_point(zones, Location(latitude=lat, longitude=lon)) is None


def test_zone_polygon_contains_a_point_of_its_sector():
    center = _center()
    zone = partition_into_zones(center, 10.0, 4)[0]
    polygon = zone_polygon(zone)
    lat, lon = destination_point(center.latitude, center.longitude, 45.0, 5.0)
    assert polygon.contains(Point(lon, lat))
