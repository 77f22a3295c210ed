"""Polar sector based delivery zone partitioning."""

from __future__ import annotations

from typing import Sequence

from shapely.geometry import Polygon

from ...errors import InvalidInputError
from ...models.domain import DeliveryZone, Location
from ..geospatial import bearing_degrees, haversine_km, sector_polygon


def partition_into_zones(
    center: Location,
    max_radius_km: float,
    zone_count: int,
    *,
    rotation_offset: float = 0.0,
) -> list[DeliveryZone]:
    """Split the disc around ``center`` into ``zone_count`` equal-angle sectors.

    Sectors are equal in angle, not in area or workload; callers that need an
    even load per zone have to rebalance on their side.
    """

    if zone_count < 1:
        raise InvalidInputError("zone_count must be >= 1")
    if max_radius_km <= 0:
        raise InvalidInputError("max_radius_km must be > 0")

    sector_size = 360.0 / zone_count
    zones: list[DeliveryZone] = []
    for index in range(zone_count):
        start = rotation_offset + index * sector_size
        # The last sector closes the circle exactly so the spans add up to 360.
        end = rotation_offset + 360.0 if index == zone_count - 1 else start + sector_size
        zones.append(
            DeliveryZone(
                id=f"ZONE{index + 1:03d}",
                center=center,
                radius_km=max_radius_km,
                sequence_index=index,
                start_bearing=start,
                end_bearing=end,
            )
        )
    return zones


def zone_for_point(zones: Sequence[DeliveryZone], point: Location) -> DeliveryZone | None:
    """Return the sector containing ``point`` or None when it lies outside every zone."""

    for zone in zones:
        center = zone.center
        distance_km = haversine_km(center.latitude, center.longitude, point.latitude, point.longitude)
        if distance_km > zone.radius_km:
            continue
        if distance_km == 0:
            return zone
        bearing = bearing_degrees(center.latitude, center.longitude, point.latitude, point.longitude)
        relative = (bearing - zone.start_bearing) % 360
        if relative < zone.angular_span:
            return zone
    return None


def zone_polygon(zone: DeliveryZone) -> Polygon:
    return sector_polygon(zone.center, zone.radius_km, zone.start_bearing, zone.end_bearing)
