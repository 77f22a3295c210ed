"""Stateless optimization endpoints: optimal route, algorithm listing and comparison."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status

from ...schemas.routing import (
    AlgorithmListResponse,
    ComparisonEntry,
    ComparisonRequest,
    OptimalRouteRequest,
    OptimalRouteResponse,
    WaypointModel,
)
from ...services.container import ServiceContainer
from ..dependencies import get_container
from ..errors import http_errors

router = APIRouter(tags=["algorithms"])


def _optimal_route(
    container: ServiceContainer,
    payload: OptimalRouteRequest,
    algorithm: str | None,
) -> OptimalRouteResponse:
    start = payload.start_location.to_domain() if payload.start_location else None
    waypoints = [waypoint.to_domain() for waypoint in payload.waypoints]
    result = container.engine.optimize(start, waypoints, algorithm=algorithm, avg_speed_kmh=payload.avg_speed_kmh)
    ordered = []
    for index, waypoint in enumerate(result.ordered_waypoints):
        waypoint.sequence_number = index
        ordered.append(WaypointModel.from_domain(waypoint))
    return OptimalRouteResponse(
        algorithm_name=result.algorithm_name,
        ordered_waypoints=ordered,
        total_distance_meters=result.total_distance_meters,
        estimated_time_minutes=result.estimated_duration_minutes,
        computation_time_ms=result.computation_time_ms,
    )


@router.post("/optimal-route", response_model=OptimalRouteResponse, status_code=status.HTTP_200_OK)
def optimal_route(payload: OptimalRouteRequest, container: ServiceContainer = Depends(get_container)) -> OptimalRouteResponse:
    """Order waypoints without persisting a route."""
    with http_errors("generate optimal route"):
        return _optimal_route(container, payload, payload.algorithm)


@router.get("/algorithms", response_model=AlgorithmListResponse)
def list_algorithms(container: ServiceContainer = Depends(get_container)) -> AlgorithmListResponse:
    return AlgorithmListResponse(
        default=container.registry.default_name,
        algorithms=container.engine.algorithm_names(),
    )


@router.post("/algorithms/compare", response_model=List[ComparisonEntry])
def compare_algorithms(payload: ComparisonRequest, container: ServiceContainer = Depends(get_container)) -> List[ComparisonEntry]:
    with http_errors("compare algorithms"):
        start = payload.start_location.to_domain() if payload.start_location else None
        results = container.engine.compare(
            start,
            [waypoint.to_domain() for waypoint in payload.waypoints],
            avg_speed_kmh=payload.avg_speed_kmh,
            timeout=payload.timeout_seconds,
        )
    return [ComparisonEntry.from_domain(result) for result in results]


@router.post("/algorithms/{name}/optimize", response_model=OptimalRouteResponse)
def optimize_with_algorithm(
    name: str,
    payload: OptimalRouteRequest,
    container: ServiceContainer = Depends(get_container),
) -> OptimalRouteResponse:
    with http_errors(f"optimize with {name}"):
        return _optimal_route(container, payload, name)
