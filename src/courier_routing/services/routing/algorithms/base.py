"""Contract shared by the route sequencing algorithms."""

from __future__ import annotations

import logging
import threading
from typing import Protocol, Sequence, runtime_checkable

from ....config import settings
from ....errors import InvalidInputError, OptimizationCancelledError
from ....models.domain import Location, Waypoint, validate_coordinates
from ...geospatial import distance_meters, estimated_travel_minutes

logger = logging.getLogger(__name__)


class CancelSignal(Protocol):
    def is_set(self) -> bool: ...


class CancellationToken:
    """Cancel flag that also trips when any linked event is set."""

    def __init__(self, *linked: threading.Event | None) -> None:
        self._event = threading.Event()
        self._linked = tuple(event for event in linked if event is not None)

    def cancel(self) -> None:
        self._event.set()

    def is_set(self) -> bool:
        return self._event.is_set() or any(event.is_set() for event in self._linked)


@runtime_checkable
class RoutingAlgorithm(Protocol):
    """Interface every registered sequencing algorithm provides."""

    name: str

    def optimize(
        self,
        start: Location | None,
        waypoints: Sequence[Waypoint],
        *,
        cancel: CancelSignal | None = None,
    ) -> list[Waypoint]: ...

    def route_distance(self, start: Location, ordered: Sequence[Waypoint]) -> float: ...

    def estimated_travel_time(
        self, start: Location, ordered: Sequence[Waypoint], avg_speed_kmh: float | None = None
    ) -> float: ...


class PathMetrics:
    """Distance and travel-time estimates over an open path from ``start``."""

    name = "path"

    def __init__(self, *, default_speed_kmh: float | None = None, service_minutes: float | None = None) -> None:
        self.default_speed_kmh = default_speed_kmh or settings.default_average_speed_kmh
        self.service_minutes = (
            service_minutes if service_minutes is not None else settings.service_minutes_per_waypoint
        )

    def route_distance(self, start: Location, ordered: Sequence[Waypoint]) -> float:
        return path_distance(start, ordered)

    def estimated_travel_time(
        self, start: Location, ordered: Sequence[Waypoint], avg_speed_kmh: float | None = None
    ) -> float:
        if not ordered:
            return 0.0
        speed = avg_speed_kmh
        if speed is None or speed <= 0:
            if speed is not None:
                logger.warning(
                    "Invalid average speed %s km/h for %s, using default %s km/h",
                    speed,
                    self.name,
                    self.default_speed_kmh,
                )
            speed = self.default_speed_kmh
        travel = estimated_travel_minutes(self.route_distance(start, ordered), speed)
        return travel + len(ordered) * self.service_minutes


def path_distance(start: Location, ordered: Sequence[Waypoint]) -> float:
    total = 0.0
    previous = start
    for waypoint in ordered:
        total += distance_meters(previous, waypoint.location)
        previous = waypoint.location
    return total


def distance_matrix(start: Location, waypoints: Sequence[Waypoint]) -> list[list[float]]:
    """Pairwise distances with ``start`` at node 0 and waypoint i at node i + 1."""

    points = [start, *(waypoint.location for waypoint in waypoints)]
    size = len(points)
    matrix = [[0.0] * size for _ in range(size)]
    for i in range(size):
        for j in range(i + 1, size):
            value = distance_meters(points[i], points[j])
            matrix[i][j] = value
            matrix[j][i] = value
    return matrix


def require_start(start: Location | None, algorithm_name: str) -> Location:
    if start is None:
        raise InvalidInputError(f"{algorithm_name}: start location is required")
    validate_coordinates(start.latitude, start.longitude)
    return start


def raise_if_cancelled(cancel: CancelSignal | None, algorithm_name: str) -> None:
    if cancel is not None and cancel.is_set():
        raise OptimizationCancelledError(f"{algorithm_name} optimization was cancelled")


def reversal_delta(matrix: Sequence[Sequence[float]], tour: Sequence[int], i: int, j: int) -> float:
    """Length change of the open path 0 -> tour when tour[i..j] is reversed."""

    before = 0 if i == 0 else tour[i - 1]
    first, last = tour[i], tour[j]
    delta = matrix[before][last] - matrix[before][first]
    if j + 1 < len(tour):
        after = tour[j + 1]
        delta += matrix[first][after] - matrix[last][after]
    return delta
