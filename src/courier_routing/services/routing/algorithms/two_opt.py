"""Nearest-neighbour construction followed by 2-opt improvement."""

from __future__ import annotations

import logging
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

IMPROVEMENT_EPSILON = 1e-9


class TwoOptAlgorithm(PathMetrics):
    name = "two_opt"

    def __init__(self, *, max_passes: int | None = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.max_passes = max_passes or settings.two_opt_max_passes
        self._seed = NearestNeighborAlgorithm(**kwargs)

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
        seeded = self._seed.optimize(start, waypoints)
        if len(seeded) < 3:
            return seeded

        matrix = distance_matrix(start, seeded)
        tour = list(range(1, len(seeded) + 1))
        passes = 0
        improved = True
        while improved and passes < self.max_passes:
            raise_if_cancelled(cancel, self.name)
            improved = False
            passes += 1
            for i in range(len(tour) - 1):
                for j in range(i + 1, len(tour)):
                    if reversal_delta(matrix, tour, i, j) < -IMPROVEMENT_EPSILON:
                        tour[i : j + 1] = reversed(tour[i : j + 1])
                        improved = True
        logger.debug("2-opt finished after %d passes", passes)
        return [seeded[node - 1] for node in tour]
