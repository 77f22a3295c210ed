"""Route optimization engine: algorithm selection, estimates and comparison."""

from __future__ import annotations

import logging
import threading
import time
from collections import Counter
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Sequence

from ...config import Settings, settings as default_settings
from ...errors import ComputationError, InvalidInputError, OptimizationCancelledError, RoutingError
from ...models.domain import Location, OptimizationResult, Waypoint, validate_coordinates
from ..cache import TravelTimeCache, fingerprint
from .algorithms import CancellationToken, RoutingAlgorithm
from .registry import AlgorithmRegistry

logger = logging.getLogger(__name__)

_POLL_SECONDS = 0.05


@dataclass(frozen=True, slots=True)
class PathEstimate:
    distance_meters: float
    duration_minutes: float


@dataclass(frozen=True, slots=True)
class AlgorithmComparison:
    algorithm_name: str
    total_distance_meters: float
    estimated_travel_time_minutes: float
    computation_time_ms: float

    @property
    def total_distance_km(self) -> float:
        return self.total_distance_meters / 1000.0


class RouteOptimizationEngine:
    def __init__(self, registry: AlgorithmRegistry, cache: TravelTimeCache, config: Settings | None = None) -> None:
        self.registry = registry
        self.cache = cache
        self.config = config or default_settings

    def algorithm_names(self) -> list[str]:
        return self.registry.names()

    def optimize(
        self,
        start: Location | None,
        waypoints: Sequence[Waypoint],
        *,
        algorithm: str | None = None,
        avg_speed_kmh: float | None = None,
    ) -> OptimizationResult:
        """Order ``waypoints`` from ``start`` with the named (or default) algorithm."""

        selected = self.registry.get(algorithm)
        _require_start(start)
        if not waypoints:
            return OptimizationResult(
                algorithm_name=selected.name,
                ordered_waypoints=(),
                total_distance_meters=0.0,
                estimated_duration_minutes=0.0,
                computation_time_ms=0.0,
            )

        started = time.perf_counter()
        ordered = _run_algorithm(selected, start, waypoints)
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        estimate = self.estimate(start, ordered, avg_speed_kmh=avg_speed_kmh, algorithm=selected)
        logger.info(
            "Optimized %d waypoints with %s: %.1f m, %.1f min in %.1f ms",
            len(ordered),
            selected.name,
            estimate.distance_meters,
            estimate.duration_minutes,
            elapsed_ms,
        )
        return OptimizationResult(
            algorithm_name=selected.name,
            ordered_waypoints=tuple(ordered),
            total_distance_meters=estimate.distance_meters,
            estimated_duration_minutes=estimate.duration_minutes,
            computation_time_ms=elapsed_ms,
        )

    def estimate(
        self,
        start: Location,
        ordered: Sequence[Waypoint],
        *,
        avg_speed_kmh: float | None = None,
        algorithm: RoutingAlgorithm | None = None,
    ) -> PathEstimate:
        """Cached distance/duration of visiting ``ordered`` in order from ``start``."""

        if not ordered:
            return PathEstimate(0.0, 0.0)
        metrics = algorithm or self.registry.get()
        speed = avg_speed_kmh if avg_speed_kmh and avg_speed_kmh > 0 else self.config.default_average_speed_kmh
        key = fingerprint(
            start,
            [waypoint.location for waypoint in ordered],
            f"speed={speed}",
            f"service={getattr(metrics, 'service_minutes', self.config.service_minutes_per_waypoint)}",
        )

        def compute() -> PathEstimate:
            return PathEstimate(
                distance_meters=metrics.route_distance(start, ordered),
                duration_minutes=metrics.estimated_travel_time(start, ordered, speed),
            )

        return self.cache.get_or_compute(key, compute)

    def compare(
        self,
        start: Location | None,
        waypoints: Sequence[Waypoint],
        *,
        avg_speed_kmh: float | None = None,
        timeout: float | None = None,
        cancel_event: threading.Event | None = None,
    ) -> list[AlgorithmComparison]:
        """Run every registered algorithm on the same input, shortest first.

        A timeout or a set ``cancel_event`` stops the comparison; algorithms that
        have not finished by then are left out of the result.
        """

        _require_start(start)
        algorithms = list(self.registry)
        if not algorithms:
            return []
        timeout = timeout if timeout is not None else self.config.comparison_timeout_seconds
        token = CancellationToken(cancel_event)
        deadline = time.monotonic() + timeout
        speed = avg_speed_kmh if avg_speed_kmh and avg_speed_kmh > 0 else self.config.default_average_speed_kmh

        logger.info("Comparing %d algorithms on %d waypoints", len(algorithms), len(waypoints))
        executor = ThreadPoolExecutor(max_workers=len(algorithms), thread_name_prefix="route-compare")
        try:
            futures: dict[Future, str] = {
                executor.submit(_timed_run, algorithm, start, list(waypoints), speed, token): algorithm.name
                for algorithm in algorithms
            }
            pending = set(futures)
            while pending and not token.is_set():
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    logger.warning(
                        "Algorithm comparison timed out after %.2fs; dropping %s",
                        timeout,
                        sorted(futures[future] for future in pending),
                    )
                    break
                _, pending = wait(pending, timeout=min(_POLL_SECONDS, remaining), return_when=FIRST_COMPLETED)
            if pending:
                token.cancel()
                if cancel_event is not None and cancel_event.is_set():
                    logger.warning("Algorithm comparison cancelled by caller")
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        results: list[AlgorithmComparison] = []
        failures: list[str] = []
        for future, name in futures.items():
            if future in pending or not future.done() or future.cancelled():
                continue
            error = future.exception()
            if error is None:
                results.append(future.result())
            elif isinstance(error, OptimizationCancelledError):
                continue
            else:
                logger.error("Algorithm %s failed during comparison: %s", name, error)
                failures.append(name)
        if failures and len(failures) == len(futures):
            raise ComputationError(f"Every algorithm failed during comparison: {', '.join(sorted(failures))}")
        results.sort(key=lambda item: (item.total_distance_meters, item.algorithm_name))
        return results


def _require_start(start: Location | None) -> None:
    if start is None:
        raise InvalidInputError("A start location is required for optimization")
    validate_coordinates(start.latitude, start.longitude)


def _run_algorithm(
    algorithm: RoutingAlgorithm,
    start: Location,
    waypoints: Sequence[Waypoint],
    cancel: CancellationToken | None = None,
) -> list[Waypoint]:
    try:
        ordered = algorithm.optimize(start, waypoints, cancel=cancel)
    except RoutingError:
        raise
    except Exception as exc:
        logger.exception("Algorithm %s failed", algorithm.name)
        raise ComputationError(f"Algorithm '{algorithm.name}' failed: {exc}") from exc
    if Counter(id(wp) for wp in ordered) != Counter(id(wp) for wp in waypoints):
        raise ComputationError(f"Algorithm '{algorithm.name}' did not return a permutation of its input")
    return list(ordered)


def _timed_run(
    algorithm: RoutingAlgorithm,
    start: Location,
    waypoints: list[Waypoint],
    speed: float,
    token: CancellationToken,
) -> AlgorithmComparison:
    started = time.perf_counter()
    ordered = _run_algorithm(algorithm, start, waypoints, token)
    elapsed_ms = (time.perf_counter() - started) * 1000.0
    return AlgorithmComparison(
        algorithm_name=algorithm.name,
        total_distance_meters=algorithm.route_distance(start, ordered),
        estimated_travel_time_minutes=algorithm.estimated_travel_time(start, ordered, speed),
        computation_time_ms=elapsed_ms,
    )
