"""OR-Tools open-path TSP for a single courier's waypoint set."""

from __future__ import annotations

import logging
from typing import Sequence

from ortools.constraint_solver import pywrapcp, routing_enums_pb2

from ....config import settings
from ....models.domain import Location, Waypoint
from .base import CancelSignal, PathMetrics, distance_matrix, raise_if_cancelled, require_start
from .nearest_neighbor import NearestNeighborAlgorithm

logger = logging.getLogger(__name__)


class OrToolsAlgorithm(PathMetrics):
    """Constraint-solver sequencing with a free end point.

    A dummy end node with zero cost from every waypoint turns the depot-return
    tour into an open path that starts at ``start``.
    """

    name = "ortools"

    def __init__(self, *, time_limit_seconds: int | None = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.time_limit_seconds = time_limit_seconds or settings.ortools_time_limit_seconds
        self._fallback = NearestNeighborAlgorithm(**kwargs)

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
        if len(waypoints) < 3:
            return self._fallback.optimize(start, waypoints)
        raise_if_cancelled(cancel, self.name)

        matrix = _integer_matrix(distance_matrix(start, waypoints))
        end_node = len(matrix) - 1
        manager = pywrapcp.RoutingIndexManager(len(matrix), 1, [0], [end_node])
        routing = pywrapcp.RoutingModel(manager)

        def distance_callback(from_index: int, to_index: int) -> int:
            from_node = manager.IndexToNode(from_index)
            to_node = manager.IndexToNode(to_index)
            return matrix[from_node][to_node]

        transit_callback_index = routing.RegisterTransitCallback(distance_callback)
        routing.SetArcCostEvaluatorOfAllVehicles(transit_callback_index)

        search_parameters = pywrapcp.DefaultRoutingSearchParameters()
        search_parameters.first_solution_strategy = (
            routing_enums_pb2.FirstSolutionStrategy.PATH_CHEAPEST_ARC
        )
        search_parameters.local_search_metaheuristic = (
            routing_enums_pb2.LocalSearchMetaheuristic.GUIDED_LOCAL_SEARCH
        )
        search_parameters.time_limit.FromSeconds(self.time_limit_seconds)

        assignment = routing.SolveWithParameters(search_parameters)
        if not assignment:
            logger.warning("OR-Tools found no solution for %d waypoints, using nearest neighbour", len(waypoints))
            return self._fallback.optimize(start, waypoints)

        ordered: list[Waypoint] = []
        index = assignment.Value(routing.NextVar(routing.Start(0)))
        while not routing.IsEnd(index):
            node = manager.IndexToNode(index)
            ordered.append(waypoints[node - 1])
            index = assignment.Value(routing.NextVar(index))
        return ordered


def _integer_matrix(matrix: list[list[float]]) -> list[list[int]]:
    """Round to whole meters and append a dummy end node reachable at zero cost."""

    size = len(matrix)
    rounded = [[int(round(value)) for value in row] + [0] for row in matrix]
    rounded.append([0] * (size + 1))
    return rounded
