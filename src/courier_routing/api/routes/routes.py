"""Route lifecycle endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ...models.domain import RouteStatus
from ...schemas.routing import (
    CancelRouteRequest,
    EtaResponse,
    OptimizeRouteRequest,
    PositionUpdateRequest,
    RouteCreateRequest,
    RouteModel,
    WaypointInput,
)
from ...services.container import ServiceContainer
from ..dependencies import get_container
from ..errors import http_errors

router = APIRouter(tags=["routes"])


@router.post("/routes", response_model=RouteModel, status_code=status.HTTP_201_CREATED)
def create_route(payload: RouteCreateRequest, container: ServiceContainer = Depends(get_container)) -> RouteModel:
    with http_errors("create route"):
        route = container.lifecycle.create(
            [waypoint.to_domain() for waypoint in payload.waypoints],
            courier_id=payload.courier_id,
            vehicle_id=payload.vehicle_id,
            start_time=payload.start_time,
        )
    return RouteModel.from_domain(route)


@router.get("/routes", response_model=List[RouteModel], status_code=status.HTTP_200_OK)
def list_routes(
    courier_id: Optional[str] = Query(default=None, description="Filter by assigned courier"),
    route_status: Optional[RouteStatus] = Query(default=None, alias="status", description="Filter by status"),
    shipment_id: Optional[str] = Query(default=None, description="Routes carrying this shipment"),
    container: ServiceContainer = Depends(get_container),
) -> List[RouteModel]:
    with http_errors("list routes"):
        routes = container.lifecycle.list_routes(
            courier_id=courier_id,
            status=route_status,
            shipment_id=shipment_id,
        )
    return [RouteModel.from_domain(route) for route in routes]


@router.get("/routes/{route_id}", response_model=RouteModel, status_code=status.HTTP_200_OK)
def get_route(route_id: str, container: ServiceContainer = Depends(get_container)) -> RouteModel:
    with http_errors("load route"):
        route = container.lifecycle.get_route(route_id)
    return RouteModel.from_domain(route)


@router.put("/routes/{route_id}/courier/{courier_id}", response_model=RouteModel)
def assign_courier(route_id: str, courier_id: str, container: ServiceContainer = Depends(get_container)) -> RouteModel:
    with http_errors("assign courier"):
        route = container.lifecycle.assign_courier(route_id, courier_id)
    return RouteModel.from_domain(route)


@router.post("/routes/{route_id}/start", response_model=RouteModel)
def start_route(route_id: str, container: ServiceContainer = Depends(get_container)) -> RouteModel:
    with http_errors("start route"):
        route = container.lifecycle.start(route_id)
    return RouteModel.from_domain(route)


@router.post("/routes/{route_id}/complete", response_model=RouteModel)
def complete_route(route_id: str, container: ServiceContainer = Depends(get_container)) -> RouteModel:
    with http_errors("complete route"):
        route = container.lifecycle.complete(route_id)
    return RouteModel.from_domain(route)


@router.post("/routes/{route_id}/cancel", response_model=RouteModel)
def cancel_route(
    route_id: str,
    payload: Optional[CancelRouteRequest] = None,
    container: ServiceContainer = Depends(get_container),
) -> RouteModel:
    with http_errors("cancel route"):
        route = container.lifecycle.cancel(route_id, payload.reason if payload else None)
    return RouteModel.from_domain(route)


@router.post("/routes/{route_id}/waypoints", response_model=RouteModel)
def add_waypoint(
    route_id: str,
    payload: WaypointInput,
    container: ServiceContainer = Depends(get_container),
) -> RouteModel:
    with http_errors("add waypoint"):
        route = container.lifecycle.add_waypoint(route_id, payload.to_domain())
    return RouteModel.from_domain(route)


@router.delete("/routes/{route_id}/waypoints/{waypoint_id}", response_model=RouteModel)
def remove_waypoint(route_id: str, waypoint_id: str, container: ServiceContainer = Depends(get_container)) -> RouteModel:
    with http_errors("remove waypoint"):
        route = container.lifecycle.remove_waypoint(route_id, waypoint_id)
    return RouteModel.from_domain(route)


@router.post("/routes/{route_id}/waypoints/{waypoint_id}/complete", response_model=RouteModel)
def complete_waypoint(
    route_id: str,
    waypoint_id: str,
    container: ServiceContainer = Depends(get_container),
) -> RouteModel:
    with http_errors("complete waypoint"):
        route = container.lifecycle.complete_waypoint(route_id, waypoint_id)
    return RouteModel.from_domain(route)


@router.put("/routes/{route_id}/position", response_model=RouteModel)
def update_position(
    route_id: str,
    payload: PositionUpdateRequest,
    container: ServiceContainer = Depends(get_container),
) -> RouteModel:
    with http_errors("update courier position"):
        route = container.lifecycle.update_position(route_id, payload.latitude, payload.longitude)
    return RouteModel.from_domain(route)


@router.post("/routes/{route_id}/optimize", response_model=RouteModel)
def optimize_route(
    route_id: str,
    payload: Optional[OptimizeRouteRequest] = None,
    container: ServiceContainer = Depends(get_container),
) -> RouteModel:
    with http_errors("optimize route"):
        route = container.lifecycle.optimize(route_id, algorithm=payload.algorithm if payload else None)
    return RouteModel.from_domain(route)


@router.get("/eta/{identifier}", response_model=EtaResponse)
def get_eta(identifier: str, container: ServiceContainer = Depends(get_container)) -> EtaResponse:
    """ETA for a route or shipment id; ``available`` is false when none can be given."""
    with http_errors("calculate ETA"):
        eta = container.lifecycle.calculate_eta(identifier)
    return EtaResponse(id=identifier, available=eta is not None, estimated_time_of_arrival=eta)
