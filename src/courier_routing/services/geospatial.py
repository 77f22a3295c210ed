"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Protocol

from shapely import wkt as shapely_wkt
from shapely.errors import ShapelyError
from shapely.geometry import Polygon
from shapely.geometry.base import BaseGeometry

from ..errors import InvalidInputError
from ..models.domain import Location

EARTH_RADIUS_KM = 6371.0
EARTH_RADIUS_M = EARTH_RADIUS_KM * 1000.0
CIRCLE_POLYGON_POINTS = 32


class Coordinates(Protocol):
    latitude: float
    longitude: float


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def distance_meters(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance between two locations in meters."""

    if a.latitude == b.latitude and a.longitude == b.longitude:
        return 0.0
    # Order the arguments so the result is bit-for-bit symmetric.
    first, second = sorted(((a.latitude, a.longitude), (b.latitude, b.longitude)))
    return haversine_km(first[0], first[1], second[0], second[1]) * 1000.0


def estimated_travel_minutes(distance_m: float, avg_speed_kmh: float) -> float:
    """Minutes needed to cover ``distance_m`` at a constant average speed."""

    if avg_speed_kmh <= 0:
        raise InvalidInputError(f"average speed must be positive, got {avg_speed_kmh}")
    if distance_m < 0:
        raise InvalidInputError(f"distance must be non-negative, got {distance_m}")
    return (distance_m / 1000.0) / avg_speed_kmh * 60.0


def bearing_degrees(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate the initial bearing from (lat1, lon1) to (lat2, lon2)."""

    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_lambda = math.radians(lon2 - lon1)
    y = math.sin(delta_lambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(delta_lambda)
    bearing = math.degrees(math.atan2(y, x))
    return (bearing + 360) % 360


def destination_point(lat: float, lon: float, bearing: float, distance_km: float) -> tuple[float, float]:
    """Point reached travelling ``distance_km`` from (lat, lon) on an initial bearing."""

    angular = distance_km / EARTH_RADIUS_KM
    theta = math.radians(bearing)
    phi1 = math.radians(lat)
    lambda1 = math.radians(lon)
    phi2 = math.asin(
        math.sin(phi1) * math.cos(angular) + math.cos(phi1) * math.sin(angular) * math.cos(theta)
    )
    lambda2 = lambda1 + math.atan2(
        math.sin(theta) * math.sin(angular) * math.cos(phi1),
        math.cos(angular) - math.sin(phi1) * math.sin(phi2),
    )
    lon2 = (math.degrees(lambda2) + 540) % 360 - 180
    return math.degrees(phi2), lon2


def circle_polygon(center: Location, radius_km: float, points: int = CIRCLE_POLYGON_POINTS) -> Polygon:
    """Polygon approximating a circle of ``radius_km`` around ``center`` (x=lon, y=lat)."""

    if radius_km <= 0:
        raise InvalidInputError("radius_km must be > 0")
    ring = []
    for i in range(points):
        lat, lon = destination_point(center.latitude, center.longitude, 360.0 * i / points, radius_km)
        ring.append((lon, lat))
    return Polygon(ring)


def sector_polygon(
    center: Location,
    radius_km: float,
    start_bearing: float,
    end_bearing: float,
    arc_points: int = 8,
) -> Polygon:
    """Wedge between two bearings, closed through the center."""

    ring = [(center.longitude, center.latitude)]
    for i in range(arc_points + 1):
        bearing = start_bearing + (end_bearing - start_bearing) * i / arc_points
        lat, lon = destination_point(center.latitude, center.longitude, bearing, radius_km)
        ring.append((lon, lat))
    return Polygon(ring)


def polygon_from_wkt(zone_wkt: str) -> BaseGeometry:
    """Parse a WKT polygon with x=longitude, y=latitude."""

    try:
        geometry = shapely_wkt.loads(zone_wkt)
    except (ShapelyError, ValueError, TypeError) as exc:
        raise InvalidInputError(f"Invalid WKT geometry: {exc}") from exc
    if geometry.geom_type not in ("Polygon", "MultiPolygon"):
        raise InvalidInputError(f"Expected a polygon, got {geometry.geom_type}")
    return geometry
