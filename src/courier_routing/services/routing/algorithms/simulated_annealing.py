"""Simulated annealing over segment reversals."""

from __future__ import annotations

import logging
import math
import random
from typing import Sequence

from ....config import settings
from ....models.domain import Location, Waypoint
from .base import (
    CancelSignal,
    PathMetrics,
    distance_matrix,
    raise_if_cancelled,
    require_start,
    reversal_delta,
)
from .nearest_neighbor import NearestNeighborAlgorithm

logger = logging.getLogger(__name__)

_UNSET = object()


class SimulatedAnnealingAlgorithm(PathMetrics):
    """Probabilistic search that can climb out of local optima.

    The walk starts from the nearest-neighbour tour and the best tour seen is
    returned, so the result is never longer than the greedy baseline. With a
    fixed seed the output is reproducible.
    """

    name = "simulated_annealing"

    def __init__(
        self,
        *,
        initial_temperature: float | None = None,
        cooling_rate: float | None = None,
        final_temperature: float | None = None,
        iterations_per_temperature: int | None = None,
        seed: int | None | object = _UNSET,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        self.initial_temperature = initial_temperature or settings.annealing_initial_temperature
        self.cooling_rate = cooling_rate or settings.annealing_cooling_rate
        self.final_temperature = final_temperature or settings.annealing_final_temperature
        self.iterations_per_temperature = (
            iterations_per_temperature or settings.annealing_iterations_per_temperature
        )
        self.seed = settings.annealing_seed if seed is _UNSET else seed
        self._seed_algorithm = NearestNeighborAlgorithm(**kwargs)

    def optimize(
        self,
        start: Location | None,
        waypoints: Sequence[Waypoint],
        *,
        cancel: CancelSignal | None = None,
    ) -> list[Waypoint]:
        if not waypoints:
            return []
        start = require_start(start, self.name)
        seeded = self._seed_algorithm.optimize(start, waypoints)
        if len(seeded) < 3:
            return seeded

        rng = random.Random(self.seed)
        matrix = distance_matrix(start, seeded)
        current = list(range(1, len(seeded) + 1))
        current_cost = _path_cost(matrix, current)
        best, best_cost = list(current), current_cost
        initial_cost = current_cost

        temperature = self.initial_temperature
        while temperature > self.final_temperature:
            raise_if_cancelled(cancel, self.name)
            for _ in range(self.iterations_per_temperature):
                i, j = sorted(rng.sample(range(len(current)), 2))
                delta = reversal_delta(matrix, current, i, j)
                if delta < 0 or rng.random() < math.exp(-delta / temperature):
                    current[i : j + 1] = reversed(current[i : j + 1])
                    current_cost += delta
                    if current_cost < best_cost - 1e-9:
                        best, best_cost = list(current), current_cost
            temperature *= self.cooling_rate

        logger.info(
            "Annealing finished: seed distance %.1f m, best distance %.1f m",
            initial_cost,
            best_cost,
        )
        return [seeded[node - 1] for node in best]


def _path_cost(matrix: Sequence[Sequence[float]], tour: Sequence[int]) -> float:
    cost = 0.0
    previous = 0
    for node in tour:
        cost += matrix[previous][node]
        previous = node
    return cost
