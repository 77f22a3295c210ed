"""Location registry endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status

from ...schemas.locations import (
    DistanceResponse,
    LocationInput,
    LocationListResponse,
    LocationModel,
    LocationUpdateRequest,
)
from ...services.container import ServiceContainer
from ..dependencies import get_container
from ..errors import http_errors

router = APIRouter(prefix="/locations", tags=["locations"])


@router.post("", response_model=LocationModel, status_code=status.HTTP_201_CREATED)
def create_location(payload: LocationInput, container: ServiceContainer = Depends(get_container)) -> LocationModel:
    with http_errors("create location"):
        location = container.locations.create(payload.latitude, payload.longitude, **payload.details())
    return LocationModel.from_domain(location)


@router.get("", response_model=LocationListResponse)
def search_locations(
    city: Optional[str] = Query(default=None),
    state: Optional[str] = Query(default=None),
    country: Optional[str] = Query(default=None),
    container: ServiceContainer = Depends(get_container),
) -> LocationListResponse:
    with http_errors("search locations"):
        locations = container.locations.search(city=city, state=state, country=country)
    return LocationListResponse(
        count=len(locations),
        locations=[LocationModel.from_domain(location) for location in locations],
    )


@router.get("/distance", response_model=DistanceResponse)
def distance_between(
    from_id: str = Query(..., description="First location id"),
    to_id: str = Query(..., description="Second location id"),
    container: ServiceContainer = Depends(get_container),
) -> DistanceResponse:
    with http_errors("calculate distance"):
        meters = container.locations.distance_between(from_id, to_id)
    return DistanceResponse(distance_meters=meters, distance_km=meters / 1000.0)


@router.get("/{location_id}", response_model=LocationModel)
def get_location(location_id: str, container: ServiceContainer = Depends(get_container)) -> LocationModel:
    with http_errors("load location"):
        location = container.locations.get(location_id)
    return LocationModel.from_domain(location)


@router.put("/{location_id}", response_model=LocationModel)
def update_location(
    location_id: str,
    payload: LocationUpdateRequest,
    container: ServiceContainer = Depends(get_container),
) -> LocationModel:
    with http_errors("update location"):
        location = container.locations.update(location_id, **payload.model_dump(exclude_none=True))
    return LocationModel.from_domain(location)


@router.delete("/{location_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_location(location_id: str, container: ServiceContainer = Depends(get_container)) -> Response:
    with http_errors("delete location"):
        container.locations.delete(location_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
