"""In-memory proximity index over locations and courier positions.

Readers work on an immutable snapshot and never take a lock. Writers copy the
current snapshot under an index-scoped lock and publish the new one with a
single reference swap, so a query never observes a half-applied update.

The backing structure is a linear scan. It is fine for the working sets a
single service instance holds; past ``scan_warning_threshold`` entries a
warning is logged because a spatial tree would be the next step.
"""

from __future__ import annotations

import heapq
import logging
import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from shapely.geometry import Point
from shapely.geometry.base import BaseGeometry
from shapely.prepared import prep

from ..errors import InvalidInputError
from ..models.domain import Location, validate_coordinates
from .geospatial import distance_meters

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class IndexEntry:
    entity_id: str
    latitude: float
    longitude: float
    payload: Any = field(default=None, compare=False)

    def as_location(self) -> Location:
        if isinstance(self.payload, Location):
            return self.payload
        return Location(latitude=self.latitude, longitude=self.longitude, id=self.entity_id)


@dataclass(frozen=True, slots=True)
class Proximity:
    entry: IndexEntry
    distance_m: float


class GeospatialIndex:
    """Nearest-k, radius, bounding-box and polygon queries over point entities."""

    def __init__(self, name: str = "index", *, scan_warning_threshold: int | None = None) -> None:
        self.name = name
        self.scan_warning_threshold = scan_warning_threshold
        self._write_lock = threading.Lock()
        self._entries: Mapping[str, IndexEntry] = MappingProxyType({})
        self._scaling_warned = False

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entries

    def get(self, entity_id: str) -> IndexEntry | None:
        return self._entries.get(entity_id)

    def snapshot(self) -> tuple[IndexEntry, ...]:
        entries = self._entries
        return tuple(entries[key] for key in sorted(entries))

    def upsert(self, entity_id: str, latitude: float, longitude: float, payload: Any = None) -> IndexEntry:
        validate_coordinates(latitude, longitude)
        entry = IndexEntry(str(entity_id), float(latitude), float(longitude), payload)
        with self._write_lock:
            updated = dict(self._entries)
            updated[entry.entity_id] = entry
            self._publish(updated)
        return entry

    def upsert_many(self, entries: Iterable[IndexEntry]) -> None:
        batch = list(entries)
        for entry in batch:
            validate_coordinates(entry.latitude, entry.longitude)
        with self._write_lock:
            updated = dict(self._entries)
            updated.update((entry.entity_id, entry) for entry in batch)
            self._publish(updated)

    def remove(self, entity_id: str) -> bool:
        with self._write_lock:
            if entity_id not in self._entries:
                return False
            updated = dict(self._entries)
            del updated[entity_id]
            self._publish(updated)
        return True

    def clear(self) -> None:
        with self._write_lock:
            self._publish({})

    def _publish(self, entries: dict[str, IndexEntry]) -> None:
        self._entries = MappingProxyType(entries)
        threshold = self.scan_warning_threshold
        if threshold and len(entries) > threshold and not self._scaling_warned:
            self._scaling_warned = True
            logger.warning(
                "Index '%s' holds %d entries; linear scans above %d entries are a scaling risk",
                self.name,
                len(entries),
                threshold,
            )

    def nearest(self, point: Location, k: int) -> list[Proximity]:
        """Up to ``k`` entries by ascending distance, ties broken by entity id."""

        if k < 0:
            raise InvalidInputError("k must be >= 0")
        if k == 0:
            return []
        entries = self._entries
        scored = ((distance_meters(point, entry), entry.entity_id, entry) for entry in entries.values())
        best = heapq.nsmallest(k, scored, key=lambda item: (item[0], item[1]))
        return [Proximity(entry=entry, distance_m=distance) for distance, _, entry in best]

    def within_radius(self, point: Location, radius_km: float) -> list[Proximity]:
        if radius_km < 0:
            raise InvalidInputError("radius_km must be >= 0")
        limit_m = radius_km * 1000.0
        matches = []
        for entry in self._entries.values():
            distance = distance_meters(point, entry)
            if distance <= limit_m:
                matches.append(Proximity(entry=entry, distance_m=distance))
        matches.sort(key=lambda item: (item.distance_m, item.entry.entity_id))
        return matches

    def within_boundary(self, south_west: Location, north_east: Location) -> list[IndexEntry]:
        """Entries inside the lat/lng box; a box with west > east wraps the antimeridian."""

        if south_west.latitude > north_east.latitude:
            raise InvalidInputError("south-west latitude must not exceed north-east latitude")
        wraps = south_west.longitude > north_east.longitude
        matches = []
        for entry in self._entries.values():
            if not south_west.latitude <= entry.latitude <= north_east.latitude:
                continue
            if wraps:
                inside = entry.longitude >= south_west.longitude or entry.longitude <= north_east.longitude
            else:
                inside = south_west.longitude <= entry.longitude <= north_east.longitude
            if inside:
                matches.append(entry)
        matches.sort(key=lambda entry: entry.entity_id)
        return matches

    def within_geometry(self, geometry: BaseGeometry) -> list[IndexEntry]:
        """Entries covered by a shapely geometry expressed as x=lon, y=lat."""

        prepared = prep(geometry)
        matches = [
            entry
            for entry in self._entries.values()
            if prepared.covers(Point(entry.longitude, entry.latitude))
        ]
        matches.sort(key=lambda entry: entry.entity_id)
        return matches

