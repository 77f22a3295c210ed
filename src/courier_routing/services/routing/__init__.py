"""Route optimization: algorithms, registry and engine."""

from .engine import AlgorithmComparison, PathEstimate, RouteOptimizationEngine
from .registry import AlgorithmRegistry, build_default_registry

__all__ = [
    "AlgorithmComparison",
    "AlgorithmRegistry",
    "PathEstimate",
    "RouteOptimizationEngine",
    "build_default_registry",
]
