"""Route lifecycle: creation, status transitions, waypoint edits, optimize and ETA.

Every mutation runs under the lock of the route it touches and works on a
copy loaded from the repository. The copy is saved back only when the whole
operation succeeded, so a failed call leaves the stored route unchanged.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Callable, Iterator, Optional, Sequence

from ..config import Settings, settings as default_settings
from ..errors import InvalidInputError, InvalidStateTransitionError, NotFoundError
from ..models.domain import (
    Location,
    Route,
    RouteStatus,
    Waypoint,
    WaypointStatus,
    utcnow,
    validate_coordinates,
)
from ..persistence.memory import InMemoryRouteRepository
from .geo_index import GeospatialIndex, Proximity
from .routing.engine import RouteOptimizationEngine

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[RouteStatus, frozenset[RouteStatus]] = {
    RouteStatus.CREATED: frozenset({RouteStatus.ASSIGNED, RouteStatus.CANCELLED}),
    RouteStatus.ASSIGNED: frozenset({RouteStatus.ASSIGNED, RouteStatus.IN_PROGRESS, RouteStatus.CANCELLED}),
    RouteStatus.IN_PROGRESS: frozenset({RouteStatus.COMPLETED, RouteStatus.CANCELLED}),
    RouteStatus.COMPLETED: frozenset(),
    RouteStatus.CANCELLED: frozenset(),
}

EDITABLE_STATUSES = frozenset({RouteStatus.CREATED, RouteStatus.ASSIGNED})


def ensure_transition(current: RouteStatus, requested: RouteStatus) -> None:
    if requested not in ALLOWED_TRANSITIONS[current]:
        raise InvalidStateTransitionError(current, requested)


class RouteLifecycleManager:
    def __init__(
        self,
        repository: InMemoryRouteRepository,
        engine: RouteOptimizationEngine,
        courier_index: GeospatialIndex,
        *,
        clock: Callable[[], datetime] = utcnow,
        config: Settings | None = None,
    ) -> None:
        self.repository = repository
        self.engine = engine
        self.courier_index = courier_index
        self._clock = clock
        self.config = config or default_settings
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    # ------------------------------------------------------------------ #
    # Locking and persistence helpers
    # ------------------------------------------------------------------ #
    def _lock_for(self, route_id: str) -> threading.Lock:
        """Lock of a stored route; unknown ids never get a table entry."""
        with self._locks_guard:
            lock = self._locks.get(route_id)
            if lock is None:
                if route_id not in self.repository:
                    raise NotFoundError("Route", route_id)
                lock = self._locks[route_id] = threading.Lock()
            return lock

    @contextmanager
    def route_lock(self, route_id: str) -> Iterator[None]:
        """Serialize mutations of a single route; other routes are unaffected."""
        with self._lock_for(route_id):
            yield

    def _load(self, route_id: str) -> Route:
        route = self.repository.get(route_id)
        if route is None:
            raise NotFoundError("Route", route_id)
        return route

    def _mutate(
        self,
        route_id: str,
        change: Callable[[Route], None],
        *,
        after: Optional[Callable[[Optional[str], Route], None]] = None,
    ) -> Route:
        """Apply ``change`` to a copy and save it.

        ``after(previous_courier_id, saved)`` runs under the same route lock.
        """
        with self.route_lock(route_id):
            route = self._load(route_id)
            previous_courier = route.courier_id
            change(route)
            route.updated_at = self._clock()
            saved = self.repository.save(route)
            if after is not None:
                after(previous_courier, saved)
            return saved

    def _release_courier(self, courier_id: Optional[str], route_id: str) -> None:
        """Drop a courier from the index if its entry still points at ``route_id``."""
        if not courier_id:
            return
        entry = self.courier_index.get(courier_id)
        if entry is not None and entry.payload == route_id:
            self.courier_index.remove(courier_id)
            logger.debug("Removed courier %s of route %s from the index", courier_id, route_id)

    def _release_previous_courier(self, previous_courier: Optional[str], saved: Route) -> None:
        if previous_courier != saved.courier_id:
            self._release_courier(previous_courier, saved.id)

    def _release_route_courier(self, previous_courier: Optional[str], saved: Route) -> None:
        self._release_courier(saved.courier_id, saved.id)

    # ------------------------------------------------------------------ #
    # Creation and queries
    # ------------------------------------------------------------------ #
    def create(
        self,
        waypoints: Sequence[Waypoint],
        *,
        courier_id: Optional[str] = None,
        vehicle_id: Optional[str] = None,
        start_time: Optional[datetime] = None,
    ) -> Route:
        seen: set[str] = set()
        for waypoint in waypoints:
            if not isinstance(waypoint, Waypoint):
                raise InvalidInputError(f"Expected a waypoint, got {type(waypoint).__name__}")
            if waypoint.id in seen:
                raise InvalidInputError(f"Duplicate waypoint id: {waypoint.id}")
            seen.add(waypoint.id)
            validate_coordinates(waypoint.location.latitude, waypoint.location.longitude)

        now = self._clock()
        route = Route(
            courier_id=_blank_to_none(courier_id),
            vehicle_id=_blank_to_none(vehicle_id),
            waypoints=list(waypoints),
            start_time=start_time,
            created_at=now,
            updated_at=now,
        )
        route.resequence()
        saved = self.repository.save(route)
        logger.info("Created route %s with %d waypoints", saved.id, len(saved.waypoints))
        return saved

    def get_route(self, route_id: str) -> Route:
        return self._load(route_id)

    def list_routes(
        self,
        *,
        courier_id: Optional[str] = None,
        status: Optional[RouteStatus] = None,
        shipment_id: Optional[str] = None,
    ) -> list[Route]:
        routes = self.repository.list()
        if courier_id is not None:
            routes = [route for route in routes if route.courier_id == courier_id]
        if status is not None:
            routes = [route for route in routes if route.status is status]
        if shipment_id is not None:
            routes = [route for route in routes if shipment_id in route.shipment_ids()]
        return sorted(routes, key=lambda route: (route.created_at, route.id))

    # ------------------------------------------------------------------ #
    # Status transitions
    # ------------------------------------------------------------------ #
    def assign_courier(self, route_id: str, courier_id: str) -> Route:
        courier_id = _blank_to_none(courier_id)
        if courier_id is None:
            raise InvalidInputError("courier id must not be empty")

        def change(route: Route) -> None:
            ensure_transition(route.status, RouteStatus.ASSIGNED)
            route.courier_id = courier_id
            route.status = RouteStatus.ASSIGNED

        route = self._mutate(route_id, change, after=self._release_previous_courier)
        logger.info("Assigned courier %s to route %s", courier_id, route_id)
        return route

    def start(self, route_id: str) -> Route:
        def change(route: Route) -> None:
            ensure_transition(route.status, RouteStatus.IN_PROGRESS)
            route.status = RouteStatus.IN_PROGRESS
            route.actual_start_time = self._clock()

        route = self._mutate(route_id, change)
        logger.info("Started route %s", route_id)
        return route

    def complete(self, route_id: str) -> Route:
        def change(route: Route) -> None:
            ensure_transition(route.status, RouteStatus.COMPLETED)
            route.status = RouteStatus.COMPLETED
            route.actual_end_time = self._clock()

        route = self._mutate(route_id, change, after=self._release_route_courier)
        logger.info("Completed route %s", route_id)
        return route

    def cancel(self, route_id: str, reason: Optional[str] = None) -> Route:
        def change(route: Route) -> None:
            ensure_transition(route.status, RouteStatus.CANCELLED)
            route.status = RouteStatus.CANCELLED
            note = (reason or "").strip() or "no reason given"
            route.notes.append(f"{self._clock().isoformat()} cancelled: {note}")

        route = self._mutate(route_id, change, after=self._release_route_courier)
        logger.info("Cancelled route %s", route_id)
        return route

    # ------------------------------------------------------------------ #
    # Waypoints and position
    # ------------------------------------------------------------------ #
    def add_waypoint(self, route_id: str, waypoint: Waypoint) -> Route:
        validate_coordinates(waypoint.location.latitude, waypoint.location.longitude)

        def change(route: Route) -> None:
            _ensure_editable(route)
            if route.find_waypoint(waypoint.id) is not None:
                raise InvalidInputError(f"Duplicate waypoint id: {waypoint.id}")
            route.waypoints.append(waypoint)
            route.resequence()

        return self._mutate(route_id, change)

    def remove_waypoint(self, route_id: str, waypoint_id: str) -> Route:
        def change(route: Route) -> None:
            _ensure_editable(route)
            waypoint = route.find_waypoint(waypoint_id)
            if waypoint is None:
                raise NotFoundError("Waypoint", waypoint_id)
            route.waypoints.remove(waypoint)
            route.resequence()

        return self._mutate(route_id, change)

    def complete_waypoint(self, route_id: str, waypoint_id: str) -> Route:
        def change(route: Route) -> None:
            if route.status is not RouteStatus.IN_PROGRESS:
                raise InvalidStateTransitionError(
                    route.status,
                    route.status,
                    f"Waypoints can only be completed while IN_PROGRESS, route is {route.status.value}",
                )
            waypoint = route.find_waypoint(waypoint_id)
            if waypoint is None:
                raise NotFoundError("Waypoint", waypoint_id)
            waypoint.status = WaypointStatus.COMPLETED
            route.last_known_position = waypoint.location

        return self._mutate(route_id, change)

    def update_position(self, route_id: str, latitude: float, longitude: float) -> Route:
        position = Location(latitude=latitude, longitude=longitude, name="courier position")

        with self.route_lock(route_id):
            route = self._load(route_id)
            if route.status.is_terminal:
                raise InvalidStateTransitionError(
                    route.status,
                    route.status,
                    f"Cannot update the position of a {route.status.value} route",
                )
            route.last_known_position = position
            route.updated_at = self._clock()
            saved = self.repository.save(route)
            if saved.courier_id:
                self.courier_index.upsert(saved.courier_id, latitude, longitude, payload=saved.id)
            else:
                logger.debug("Route %s has no courier; position not indexed", route_id)
        return saved

    def nearest_couriers(
        self,
        point: Location,
        *,
        radius_km: Optional[float] = None,
        limit: Optional[int] = None,
    ) -> list[Proximity]:
        radius_km = radius_km if radius_km is not None else self.config.nearest_couriers_default_radius_km
        limit = limit if limit is not None else self.config.nearest_couriers_default_limit
        if limit <= 0:
            raise InvalidInputError("limit must be positive")
        return self.courier_index.within_radius(point, radius_km)[:limit]

    # ------------------------------------------------------------------ #
    # Optimization and ETA
    # ------------------------------------------------------------------ #
    def optimize(self, route_id: str, *, algorithm: Optional[str] = None) -> Route:
        """Reorder the pending waypoints and refresh distance and duration.

        Completed stops keep their place at the front of the route.
        """

        def change(route: Route) -> None:
            if route.status.is_terminal:
                raise InvalidStateTransitionError(
                    route.status,
                    route.status,
                    f"Cannot optimize a {route.status.value} route",
                )
            if not route.waypoints:
                route.total_distance_meters = 0.0
                route.estimated_duration_minutes = 0.0
                return
            start = _route_start(route)
            pending = route.pending_waypoints()
            visited = [wp for wp in route.waypoints if wp.status is WaypointStatus.COMPLETED]
            result = self.engine.optimize(start, pending, algorithm=algorithm)
            route.waypoints = visited + list(result.ordered_waypoints)
            route.resequence()
            route.total_distance_meters = result.total_distance_meters
            route.estimated_duration_minutes = result.estimated_duration_minutes

        route = self._mutate(route_id, change)
        logger.info(
            "Optimized route %s: %.1f m, %.1f min",
            route_id,
            route.total_distance_meters,
            route.estimated_duration_minutes,
        )
        return route

    def calculate_eta(self, identifier: str) -> Optional[datetime]:
        """Arrival time at the end of a route, or at a shipment's stop.

        ``None`` means no ETA can be given: the route has no courier, has
        finished, or has nothing left to visit.
        """

        route = self.repository.get(identifier)
        target: Optional[str] = None
        if route is None:
            carrying = self.list_routes(shipment_id=identifier)
            if not carrying:
                raise NotFoundError("Route or shipment", identifier)
            active = [candidate for candidate in carrying if not candidate.status.is_terminal]
            if not active:
                return None
            route, target = active[0], identifier

        if route.courier_id is None or route.status.is_terminal:
            return None
        pending = route.pending_waypoints()
        if target is not None:
            last = max(
                (index for index, wp in enumerate(pending) if wp.shipment_id == target),
                default=None,
            )
            pending = pending[: last + 1] if last is not None else []
        if not pending:
            return None

        start = route.last_known_position or pending[0].location
        estimate = self.engine.estimate(start, pending)
        return self._clock() + timedelta(minutes=estimate.duration_minutes)


def _ensure_editable(route: Route) -> None:
    if route.status not in EDITABLE_STATUSES:
        raise InvalidStateTransitionError(
            route.status,
            route.status,
            f"Waypoints can only be changed while CREATED or ASSIGNED, route is {route.status.value}",
        )


def _route_start(route: Route) -> Optional[Location]:
    if route.last_known_position is not None:
        return route.last_known_position
    if route.waypoints:
        return route.waypoints[0].location
    return None


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None
