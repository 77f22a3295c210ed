"""Location registry mirrored into the location proximity index."""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..errors import InvalidInputError, NotFoundError
from ..models.domain import Location, utcnow
from ..persistence.memory import InMemoryLocationRepository
from .geo_index import GeospatialIndex, Proximity
from .geospatial import distance_meters, polygon_from_wkt

logger = logging.getLogger(__name__)

DESCRIPTIVE_FIELDS = ("street", "city", "state", "country", "postal_code", "name", "description")


class LocationService:
    def __init__(self, repository: InMemoryLocationRepository, index: GeospatialIndex) -> None:
        self.repository = repository
        self.index = index
        for location in repository.list():
            index.upsert(location.id, location.latitude, location.longitude, payload=location)

    def create(self, latitude: float, longitude: float, **details: Any) -> Location:
        unknown = set(details) - set(DESCRIPTIVE_FIELDS)
        if unknown:
            raise InvalidInputError(f"Unknown location fields: {', '.join(sorted(unknown))}")
        location = Location(latitude=latitude, longitude=longitude, **details)
        saved = self.repository.save(location)
        self.index.upsert(saved.id, saved.latitude, saved.longitude, payload=saved)
        logger.info("Registered location %s (%s)", saved.id, saved.label)
        return saved

    def get(self, location_id: str) -> Location:
        location = self.repository.get(location_id)
        if location is None:
            raise NotFoundError("Location", location_id)
        return location

    def update(self, location_id: str, **changes: Any) -> Location:
        """Update descriptive fields; coordinates are fixed once registered."""

        unknown = set(changes) - set(DESCRIPTIVE_FIELDS)
        if unknown:
            raise InvalidInputError(f"Only descriptive fields can be updated, got: {', '.join(sorted(unknown))}")
        location = self.get(location_id)
        for field_name, value in changes.items():
            if value is not None:
                setattr(location, field_name, value)
        location.updated_at = utcnow()
        saved = self.repository.save(location)
        self.index.upsert(saved.id, saved.latitude, saved.longitude, payload=saved)
        return saved

    def delete(self, location_id: str) -> None:
        if not self.repository.delete(location_id):
            raise NotFoundError("Location", location_id)
        self.index.remove(location_id)
        logger.info("Deleted location %s", location_id)

    def search(
        self,
        *,
        city: Optional[str] = None,
        state: Optional[str] = None,
        country: Optional[str] = None,
    ) -> list[Location]:
        results = self.repository.search(city=city, state=state, country=country)
        return sorted(results, key=lambda location: location.id)

    def distance_between(self, first_id: str, second_id: str) -> float:
        return distance_meters(self.get(first_id), self.get(second_id))

    # Proximity queries answered from the index.
    def nearest(self, point: Location, limit: int) -> list[Proximity]:
        return self.index.nearest(point, limit)

    def within_radius(self, point: Location, radius_km: float) -> list[Proximity]:
        return self.index.within_radius(point, radius_km)

    def within_boundary(self, south_west: Location, north_east: Location) -> list[Location]:
        return [entry.as_location() for entry in self.index.within_boundary(south_west, north_east)]

    def in_zone(self, zone_wkt: str) -> list[Location]:
        polygon = polygon_from_wkt(zone_wkt)
        return [entry.as_location() for entry in self.index.within_geometry(polygon)]
