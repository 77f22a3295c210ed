"""Greedy nearest-neighbour sequencing."""

from __future__ import annotations

import logging
from typing import Sequence

from ....models.domain import Location, Waypoint
from ...geospatial import distance_meters
from .base import CancelSignal, PathMetrics, require_start

logger = logging.getLogger(__name__)


class NearestNeighborAlgorithm(PathMetrics):
    """Always travel next to the closest unvisited waypoint.

    Ties are broken by ascending waypoint id, so the output depends only on
    the input set and never on its order.
    """

    name = "nearest_neighbor"

    def optimize(
        self,
        start: Location | None,
        waypoints: Sequence[Waypoint],
        *,
        cancel: CancelSignal | None = None,
    ) -> list[Waypoint]:
        if not waypoints:
            logger.warning("Empty waypoint list provided for route optimization")
            return []
        current = require_start(start, self.name)

        logger.info("Optimizing route with %d waypoints using %s", len(waypoints), self.name)
        remaining = list(waypoints)
        ordered: list[Waypoint] = []
        while remaining:
            position = min(
                range(len(remaining)),
                key=lambda idx: (distance_meters(current, remaining[idx].location), remaining[idx].id),
            )
            nearest = remaining.pop(position)
            ordered.append(nearest)
            current = nearest.location
        return ordered
