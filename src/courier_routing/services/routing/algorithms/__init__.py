"""Route sequencing algorithms."""

from .base import CancellationToken, PathMetrics, RoutingAlgorithm
from .nearest_neighbor import NearestNeighborAlgorithm
from .ortools_tsp import OrToolsAlgorithm
from .simulated_annealing import SimulatedAnnealingAlgorithm
from .two_opt import TwoOptAlgorithm

__all__ = [
    "CancellationToken",
    "NearestNeighborAlgorithm",
    "OrToolsAlgorithm",
    "PathMetrics",
    "RoutingAlgorithm",
    "SimulatedAnnealingAlgorithm",
    "TwoOptAlgorithm",
]
