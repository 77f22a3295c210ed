"""Routing request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from ..models.domain import Route, TimeWindow, Waypoint, WaypointKind
from ..services.routing import AlgorithmComparison
from .locations import LocationInput, LocationModel


class TimeWindowModel(BaseModel):
    start: Optional[datetime] = None
    end: Optional[datetime] = None


class WaypointInput(BaseModel):
    id: Optional[str] = Field(default=None, description="Client supplied id; generated when omitted.")
    location: LocationInput
    kind: Literal["pickup", "delivery", "stop"] = "delivery"
    time_window: Optional[TimeWindowModel] = None
    shipment_id: Optional[str] = None

    def to_domain(self) -> Waypoint:
        extra = {"id": self.id} if self.id else {}
        window = None
        if self.time_window is not None:
            window = TimeWindow(start=self.time_window.start, end=self.time_window.end)
        return Waypoint(
            location=self.location.to_domain(),
            kind=WaypointKind(self.kind),
            time_window=window,
            shipment_id=self.shipment_id,
            **extra,
        )


class WaypointModel(BaseModel):
    id: str
    sequence_number: int
    kind: str
    status: str
    shipment_id: Optional[str] = None
    location: LocationModel
    time_window: Optional[TimeWindowModel] = None

    @classmethod
    def from_domain(cls, waypoint: Waypoint) -> "WaypointModel":
        window = None
        if waypoint.time_window is not None:
            window = TimeWindowModel(start=waypoint.time_window.start, end=waypoint.time_window.end)
        return cls(
            id=waypoint.id,
            sequence_number=waypoint.sequence_number,
            kind=waypoint.kind.value,
            status=waypoint.status.value,
            shipment_id=waypoint.shipment_id,
            location=LocationModel.from_domain(waypoint.location),
            time_window=window,
        )


class RouteCreateRequest(BaseModel):
    courier_id: Optional[str] = None
    vehicle_id: Optional[str] = None
    waypoints: List[WaypointInput] = Field(default_factory=list)
    start_time: Optional[datetime] = None


class RouteModel(BaseModel):
    id: str
    courier_id: Optional[str] = None
    vehicle_id: Optional[str] = None
    status: str
    waypoints: List[WaypointModel]
    start_time: Optional[datetime] = None
    total_distance_meters: float
    estimated_duration_minutes: float
    created_at: datetime
    updated_at: datetime
    actual_start_time: Optional[datetime] = None
    actual_end_time: Optional[datetime] = None
    last_known_position: Optional[LocationModel] = None
    notes: List[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, route: Route) -> "RouteModel":
        return cls(
            id=route.id,
            courier_id=route.courier_id,
            vehicle_id=route.vehicle_id,
            status=route.status.value,
            waypoints=[WaypointModel.from_domain(waypoint) for waypoint in route.waypoints],
            start_time=route.start_time,
            total_distance_meters=route.total_distance_meters,
            estimated_duration_minutes=route.estimated_duration_minutes,
            created_at=route.created_at,
            updated_at=route.updated_at,
            actual_start_time=route.actual_start_time,
            actual_end_time=route.actual_end_time,
            last_known_position=(
                LocationModel.from_domain(route.last_known_position) if route.last_known_position else None
            ),
            notes=list(route.notes),
        )


class CancelRouteRequest(BaseModel):
    reason: Optional[str] = Field(default=None, description="Appended to the route's audit notes.")


class PositionUpdateRequest(BaseModel):
    latitude: float
    longitude: float


class OptimizeRouteRequest(BaseModel):
    algorithm: Optional[str] = Field(default=None, description="Registered algorithm name; default when omitted.")


class OptimalRouteRequest(BaseModel):
    start_location: Optional[LocationInput] = None
    waypoints: List[WaypointInput] = Field(default_factory=list)
    algorithm: Optional[str] = None
    avg_speed_kmh: Optional[float] = None


class OptimalRouteResponse(BaseModel):
    algorithm_name: str
    ordered_waypoints: List[WaypointModel]
    total_distance_meters: float
    estimated_time_minutes: float
    computation_time_ms: float


class AlgorithmListResponse(BaseModel):
    default: str
    algorithms: List[str]


class ComparisonRequest(BaseModel):
    start_location: Optional[LocationInput] = None
    waypoints: List[WaypointInput] = Field(default_factory=list)
    avg_speed_kmh: Optional[float] = None
    timeout_seconds: Optional[float] = Field(default=None, gt=0)


class ComparisonEntry(BaseModel):
    algorithm_name: str
    total_distance_km: float
    estimated_travel_time_minutes: float
    computation_time_ms: float

    @classmethod
    def from_domain(cls, comparison: AlgorithmComparison) -> "ComparisonEntry":
        return cls(
            algorithm_name=comparison.algorithm_name,
            total_distance_km=comparison.total_distance_km,
            estimated_travel_time_minutes=comparison.estimated_travel_time_minutes,
            computation_time_ms=comparison.computation_time_ms,
        )


class EtaResponse(BaseModel):
    id: str
    available: bool
    estimated_time_of_arrival: Optional[datetime] = None
