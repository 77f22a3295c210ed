"""Domain models for locations, waypoints, routes and delivery zones."""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from ..errors import InvalidInputError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return uuid.uuid4().hex


def validate_coordinates(latitude: float, longitude: float) -> None:
    """Reject non-numeric, non-finite or out-of-range coordinates."""

    for label, value in (("latitude", latitude), ("longitude", longitude)):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidInputError(f"{label} must be a number, got {value!r}")
        if not math.isfinite(value):
            raise InvalidInputError(f"{label} must be finite, got {value!r}")
    if not -90.0 <= latitude <= 90.0:
        raise InvalidInputError(f"latitude must be within [-90, 90], got {latitude}")
    if not -180.0 <= longitude <= 180.0:
        raise InvalidInputError(f"longitude must be within [-180, 180], got {longitude}")


class RouteStatus(str, Enum):
    CREATED = "CREATED"
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"

    @property
    def is_terminal(self) -> bool:
        return self in (RouteStatus.COMPLETED, RouteStatus.CANCELLED)


class WaypointKind(str, Enum):
    PICKUP = "pickup"
    DELIVERY = "delivery"
    STOP = "stop"


class WaypointStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


@dataclass(slots=True)
class Location:
    """A point on the map with optional address details."""

    latitude: float
    longitude: float
    id: str = field(default_factory=new_id)
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        validate_coordinates(self.latitude, self.longitude)

    @property
    def label(self) -> str:
        return self.name or self.street or f"[{self.latitude:.5f}, {self.longitude:.5f}]"


@dataclass(slots=True)
class TimeWindow:
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.start and self.end and self.start > self.end:
            raise InvalidInputError("time window start must not be after its end")


@dataclass(slots=True)
class Waypoint:
    """A single stop of a route."""

    location: Location
    id: str = field(default_factory=new_id)
    sequence_number: int = 0
    kind: WaypointKind = WaypointKind.DELIVERY
    time_window: Optional[TimeWindow] = None
    status: WaypointStatus = WaypointStatus.PENDING
    shipment_id: Optional[str] = None


@dataclass(slots=True)
class Route:
    """An ordered collection of waypoints tracked through its lifecycle."""

    id: str = field(default_factory=new_id)
    courier_id: Optional[str] = None
    vehicle_id: Optional[str] = None
    status: RouteStatus = RouteStatus.CREATED
    waypoints: list[Waypoint] = field(default_factory=list)
    start_time: Optional[datetime] = None
    total_distance_meters: float = 0.0
    estimated_duration_minutes: float = 0.0
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    actual_start_time: Optional[datetime] = None
    actual_end_time: Optional[datetime] = None
    last_known_position: Optional[Location] = None
    notes: list[str] = field(default_factory=list)

    def resequence(self) -> None:
        for index, waypoint in enumerate(self.waypoints):
            waypoint.sequence_number = index

    def find_waypoint(self, waypoint_id: str) -> Optional[Waypoint]:
        return next((wp for wp in self.waypoints if wp.id == waypoint_id), None)

    def pending_waypoints(self) -> list[Waypoint]:
        return [wp for wp in self.waypoints if wp.status is WaypointStatus.PENDING]

    def shipment_ids(self) -> set[str]:
        return {wp.shipment_id for wp in self.waypoints if wp.shipment_id}


@dataclass(slots=True)
class DeliveryZone:
    """Angular sector of a disc around a center point."""

    center: Location
    radius_km: float
    sequence_index: int
    start_bearing: float
    end_bearing: float
    id: str = field(default_factory=new_id)

    @property
    def angular_span(self) -> float:
        return self.end_bearing - self.start_bearing


@dataclass(frozen=True, slots=True)
class OptimizationResult:
    algorithm_name: str
    ordered_waypoints: tuple[Waypoint, ...]
    total_distance_meters: float
    estimated_duration_minutes: float
    computation_time_ms: float
