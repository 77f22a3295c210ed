"""Geospatial query and zoning endpoints."""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from ...models.domain import Location
from ...schemas.geo import CircleResponse, NearbyCourierModel, NearbyLocationModel, ZoneModel, ZoneRequest, ZoneResponse
from ...schemas.locations import DistanceResponse, LocationModel
from ...services.container import ServiceContainer
from ...services.geospatial import CIRCLE_POLYGON_POINTS, circle_polygon, distance_meters
from ...services.zoning.polar import partition_into_zones, zone_for_point, zone_polygon
from ..dependencies import get_container
from ..errors import http_errors

router = APIRouter(prefix="/geo", tags=["geo"])


@router.get("/locations/nearest", response_model=List[NearbyLocationModel])
def nearest_locations(
    latitude: float = Query(...),
    longitude: float = Query(...),
    limit: int = Query(default=5, ge=0, description="Maximum number of locations"),
    container: ServiceContainer = Depends(get_container),
) -> List[NearbyLocationModel]:
    with http_errors("find nearest locations"):
        matches = container.locations.nearest(Location(latitude=latitude, longitude=longitude), limit)
    return [NearbyLocationModel.from_proximity(match) for match in matches]


@router.get("/locations/radius", response_model=List[NearbyLocationModel])
def locations_within_radius(
    latitude: float = Query(...),
    longitude: float = Query(...),
    radius_km: float = Query(..., description="Search radius in kilometers"),
    container: ServiceContainer = Depends(get_container),
) -> List[NearbyLocationModel]:
    with http_errors("find locations within radius"):
        matches = container.locations.within_radius(Location(latitude=latitude, longitude=longitude), radius_km)
    return [NearbyLocationModel.from_proximity(match) for match in matches]


@router.get("/locations/boundary", response_model=List[LocationModel])
def locations_within_boundary(
    sw_latitude: float = Query(...),
    sw_longitude: float = Query(...),
    ne_latitude: float = Query(...),
    ne_longitude: float = Query(...),
    container: ServiceContainer = Depends(get_container),
) -> List[LocationModel]:
    with http_errors("find locations within boundary"):
        matches = container.locations.within_boundary(
            Location(latitude=sw_latitude, longitude=sw_longitude),
            Location(latitude=ne_latitude, longitude=ne_longitude),
        )
    return [LocationModel.from_domain(location) for location in matches]


@router.get("/locations/in-zone", response_model=List[LocationModel])
def locations_in_zone(
    wkt: str = Query(..., description="Polygon in WKT, x=longitude y=latitude"),
    container: ServiceContainer = Depends(get_container),
) -> List[LocationModel]:
    with http_errors("find locations in zone"):
        matches = container.locations.in_zone(wkt)
    return [LocationModel.from_domain(location) for location in matches]


@router.get("/distance", response_model=DistanceResponse)
def distance(
    from_latitude: float = Query(...),
    from_longitude: float = Query(...),
    to_latitude: float = Query(...),
    to_longitude: float = Query(...),
) -> DistanceResponse:
    with http_errors("calculate distance"):
        meters = distance_meters(
            Location(latitude=from_latitude, longitude=from_longitude),
            Location(latitude=to_latitude, longitude=to_longitude),
        )
    return DistanceResponse(distance_meters=meters, distance_km=meters / 1000.0)


@router.get("/couriers/nearest", response_model=List[NearbyCourierModel])
def nearest_couriers(
    latitude: float = Query(...),
    longitude: float = Query(...),
    radius_km: Optional[float] = Query(default=None, ge=0),
    limit: Optional[int] = Query(default=None, ge=1),
    container: ServiceContainer = Depends(get_container),
) -> List[NearbyCourierModel]:
    with http_errors("find nearest couriers"):
        matches = container.lifecycle.nearest_couriers(
            Location(latitude=latitude, longitude=longitude),
            radius_km=radius_km,
            limit=limit,
        )
    return [NearbyCourierModel.from_proximity(match) for match in matches]


@router.post("/zones", response_model=ZoneResponse, status_code=status.HTTP_200_OK)
def create_zones(payload: ZoneRequest) -> ZoneResponse:
    """Split the area around a center into equal-angle delivery zones."""
    with http_errors("create zones"):
        zones = partition_into_zones(
            payload.center.to_domain(),
            payload.radius_km,
            payload.zone_count,
            rotation_offset=payload.rotation_offset,
        )
        containing = zone_for_point(zones, payload.point.to_domain()) if payload.point else None
    return ZoneResponse(
        zones=[ZoneModel.from_domain(zone, zone_polygon(zone).wkt) for zone in zones],
        containing_zone_id=containing.id if containing else None,
    )


@router.get("/circle", response_model=CircleResponse)
def circle(
    latitude: float = Query(...),
    longitude: float = Query(...),
    radius_km: float = Query(..., gt=0),
    points: int = Query(default=CIRCLE_POLYGON_POINTS, ge=3, le=360),
) -> CircleResponse:
    with http_errors("build circle polygon"):
        polygon = circle_polygon(Location(latitude=latitude, longitude=longitude), radius_km, points)
    return CircleResponse(wkt=polygon.wkt, points=points)
