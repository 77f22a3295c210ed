"""Name-keyed registry of routing algorithms."""

from __future__ import annotations

from typing import Iterator

from ...config import Settings, settings as default_settings
from ...errors import InvalidInputError, NotFoundError
from .algorithms import (
    NearestNeighborAlgorithm,
    OrToolsAlgorithm,
    RoutingAlgorithm,
    SimulatedAnnealingAlgorithm,
    TwoOptAlgorithm,
)


class AlgorithmRegistry:
    def __init__(self, default_name: str | None = None) -> None:
        self._algorithms: dict[str, RoutingAlgorithm] = {}
        self._default_name = default_name

    def register(self, algorithm: RoutingAlgorithm) -> RoutingAlgorithm:
        if not isinstance(algorithm, RoutingAlgorithm):
            raise InvalidInputError(f"{algorithm!r} does not implement the routing algorithm interface")
        if algorithm.name in self._algorithms:
            raise InvalidInputError(f"Algorithm '{algorithm.name}' is already registered")
        self._algorithms[algorithm.name] = algorithm
        return algorithm

    def get(self, name: str | None = None) -> RoutingAlgorithm:
        key = name or self.default_name
        try:
            return self._algorithms[key]
        except KeyError:
            raise NotFoundError("Algorithm", key) from None

    @property
    def default_name(self) -> str:
        if self._default_name:
            return self._default_name
        if not self._algorithms:
            raise NotFoundError("Algorithm", "<default>")
        return next(iter(self._algorithms))

    def names(self) -> list[str]:
        return sorted(self._algorithms)

    def __contains__(self, name: object) -> bool:
        return name in self._algorithms

    def __iter__(self) -> Iterator[RoutingAlgorithm]:
        return iter(self._algorithms[name] for name in self.names())

    def __len__(self) -> int:
        return len(self._algorithms)


def build_default_registry(config: Settings | None = None) -> AlgorithmRegistry:
    config = config or default_settings
    metrics = {
        "default_speed_kmh": config.default_average_speed_kmh,
        "service_minutes": config.service_minutes_per_waypoint,
    }
    registry = AlgorithmRegistry(default_name=config.default_algorithm)
    registry.register(NearestNeighborAlgorithm(**metrics))
    registry.register(TwoOptAlgorithm(max_passes=config.two_opt_max_passes, **metrics))
    registry.register(
        SimulatedAnnealingAlgorithm(
            initial_temperature=config.annealing_initial_temperature,
            cooling_rate=config.annealing_cooling_rate,
            final_temperature=config.annealing_final_temperature,
            iterations_per_temperature=config.annealing_iterations_per_temperature,
            seed=config.annealing_seed,
            **metrics,
        )
    )
    registry.register(OrToolsAlgorithm(time_limit_seconds=config.ortools_time_limit_seconds, **metrics))
    if registry.default_name not in registry:
        raise InvalidInputError(f"Configured default algorithm '{config.default_algorithm}' is not registered")
    return registry
