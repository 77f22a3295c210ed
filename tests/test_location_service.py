import pytest

from courier_routing.errors import InvalidInputError, NotFoundError
from courier_routing.models.domain import Location
from courier_routing.persistence.memory import InMemoryLocationRepository
from courier_routing.services.geo_index import GeospatialIndex
from courier_routing.services.locations import LocationService


def _service() -> LocationService:
    return LocationService(InMemoryLocationRepository(), GeospatialIndex("locations"))


def test_create_mirrors_into_index():
    service = _service()
    location = service.create(21.5, 39.2, name="Warehouse", city="Jeddah")

    assert service.get(location.id).name == "Warehouse"
    assert location.id in service.index
    nearest = service.nearest(Location(latitude=21.5, longitude=39.2), 1)
    assert nearest[0].entry.entity_id == location.id


def test_create_validates_coordinates_and_fields():
    service = _service()
    with pytest.raises(InvalidInputError):
        service.create(120.0, 0.0)
    with pytest.raises(InvalidInputError):
        service.create(1.0, 1.0, colour="blue")
    assert len(service.index) == 0


def test_update_changes_descriptive_fields_only():
    service = _service()
    location = service.create(21.5, 39.2, name="Old")
    updated = service.update(location.id, name="New", postal_code="21411")

    assert updated.name == "New"
    assert updated.postal_code == "21411"
    assert service.index.get(location.id).payload.name == "New"
    with pytest.raises(InvalidInputError):
        service.update(location.id, latitude=0.0)


def test_delete_removes_from_index():
    service = _service()
    location = service.create(21.5, 39.2)
    service.delete(location.id)

    assert location.id not in service.index
    with pytest.raises(NotFoundError):
        service.get(location.id)
    with pytest.raises(NotFoundError):
        service.delete(location.id)


def test_search_is_case_insensitive():
    service = _service()
    jeddah = service.create(21.5, 39.2, city="Jeddah", country="SA")
    service.create(24.7, 46.7, city="Riyadh", country="SA")

    assert [location.id for location in service.search(city="jeddah")] == [jeddah.id]
    assert len(service.search(country="sa")) == 2
    assert len(service.search()) == 2


def test_distance_between_ids():
    service = _service()
    a = service.create(0.0, 0.0)
    b = service.create(0.0, 1.0)
    assert service.distance_between(a.id, b.id) == pytest.approx(111_194.93, rel=1e-4)
    assert service.distance_between(a.id, a.id) == 0.0
    with pytest.raises(NotFoundError):
        service.distance_between(a.id, "missing")


def test_in_zone_and_boundary_queries():
    service = _service()
    inside = service.create(0.5, 0.5)
    service.create(5.0, 5.0)

    in_zone = service.in_zone("POLYGON ((0 0, 1 0, 1 1, 0 1, 0 0))")
    assert [location.id for location in in_zone] == [inside.id]

    boxed = service.within_boundary(Location(latitude=0, longitude=0), Location(latitude=1, longitude=1))
    assert [location.id for location in boxed] == [inside.id]
