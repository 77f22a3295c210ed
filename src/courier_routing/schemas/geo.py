"""Pydantic models for geospatial queries and zoning."""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, Field

from ..models.domain import DeliveryZone
from ..services.geo_index import Proximity
from .locations import LocationInput, LocationModel


class NearbyLocationModel(BaseModel):
    distance_meters: float
    location: LocationModel

    @classmethod
    def from_proximity(cls, proximity: Proximity) -> "NearbyLocationModel":
        return cls(
            distance_meters=proximity.distance_m,
            location=LocationModel.from_domain(proximity.entry.as_location()),
        )


class NearbyCourierModel(BaseModel):
    courier_id: str
    route_id: Optional[str] = None
    latitude: float
    longitude: float
    distance_meters: float

    @classmethod
    def from_proximity(cls, proximity: Proximity) -> "NearbyCourierModel":
        entry = proximity.entry
        route_id: Any = entry.payload
        return cls(
            courier_id=entry.entity_id,
            route_id=route_id if isinstance(route_id, str) else None,
            latitude=entry.latitude,
            longitude=entry.longitude,
            distance_meters=proximity.distance_m,
        )


class ZoneRequest(BaseModel):
    center: LocationInput
    radius_km: float = Field(..., description="Outer radius of every zone.")
    zone_count: int = Field(..., description="Number of equal-angle sectors.")
    rotation_offset: float = Field(0.0, description="Bearing, in degrees, where the first sector starts.")
    point: Optional[LocationInput] = Field(
        default=None,
        description="Optional point to locate within the generated zones.",
    )


class ZoneModel(BaseModel):
    id: str
    sequence_index: int
    radius_km: float
    start_bearing: float
    end_bearing: float
    angular_span: float
    center: LocationModel
    polygon_wkt: str

    @classmethod
    def from_domain(cls, zone: DeliveryZone, polygon_wkt: str) -> "ZoneModel":
        return cls(
            id=zone.id,
            sequence_index=zone.sequence_index,
            radius_km=zone.radius_km,
            start_bearing=zone.start_bearing,
            end_bearing=zone.end_bearing,
            angular_span=zone.angular_span,
            center=LocationModel.from_domain(zone.center),
            polygon_wkt=polygon_wkt,
        )


class ZoneResponse(BaseModel):
    zones: List[ZoneModel]
    containing_zone_id: Optional[str] = None


class CircleResponse(BaseModel):
    wkt: str
    points: int
