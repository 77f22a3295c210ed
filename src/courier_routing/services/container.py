"""Wiring of the routing collaborators."""

from __future__ import annotations

from dataclasses import dataclass

from ..config import Settings, settings as default_settings
from ..persistence.memory import InMemoryLocationRepository, InMemoryRouteRepository
from .cache import TravelTimeCache
from .geo_index import GeospatialIndex
from .lifecycle import RouteLifecycleManager
from .locations import LocationService
from .routing import AlgorithmRegistry, RouteOptimizationEngine, build_default_registry


@dataclass(slots=True)
class ServiceContainer:
    registry: AlgorithmRegistry
    cache: TravelTimeCache
    engine: RouteOptimizationEngine
    location_index: GeospatialIndex
    courier_index: GeospatialIndex
    routes: InMemoryRouteRepository
    location_repository: InMemoryLocationRepository
    lifecycle: RouteLifecycleManager
    locations: LocationService


def build_container(config: Settings | None = None) -> ServiceContainer:
    config = config or default_settings
    registry = build_default_registry(config)
    cache = TravelTimeCache(
        ttl_seconds=config.travel_cache_ttl_seconds,
        max_entries=config.travel_cache_max_entries,
    )
    engine = RouteOptimizationEngine(registry, cache, config)
    location_index = GeospatialIndex("locations", scan_warning_threshold=config.index_scan_warning_threshold)
    courier_index = GeospatialIndex("couriers", scan_warning_threshold=config.index_scan_warning_threshold)
    routes = InMemoryRouteRepository()
    location_repository = InMemoryLocationRepository()
    return ServiceContainer(
        registry=registry,
        cache=cache,
        engine=engine,
        location_index=location_index,
        courier_index=courier_index,
        routes=routes,
        location_repository=location_repository,
        lifecycle=RouteLifecycleManager(routes, engine, courier_index, config=config),
        locations=LocationService(location_repository, location_index),
    )
