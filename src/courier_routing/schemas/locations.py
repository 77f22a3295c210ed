"""Pydantic request/response models for locations."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.domain import Location


class LocationInput(BaseModel):
    latitude: float
    longitude: float
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None

    def details(self) -> dict:
        return self.model_dump(exclude={"latitude", "longitude"}, exclude_none=True)

    def to_domain(self) -> Location:
        return Location(latitude=self.latitude, longitude=self.longitude, **self.details())


class LocationUpdateRequest(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None


class LocationModel(BaseModel):
    id: str
    latitude: float
    longitude: float
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_domain(cls, location: Location) -> "LocationModel":
        return cls(
            id=location.id,
            latitude=location.latitude,
            longitude=location.longitude,
            street=location.street,
            city=location.city,
            state=location.state,
            country=location.country,
            postal_code=location.postal_code,
            name=location.name,
            description=location.description,
            created_at=location.created_at,
            updated_at=location.updated_at,
        )


class LocationListResponse(BaseModel):
    count: int
    locations: List[LocationModel]


class DistanceResponse(BaseModel):
    distance_meters: float = Field(..., description="Great-circle distance in meters.")
    distance_km: float
