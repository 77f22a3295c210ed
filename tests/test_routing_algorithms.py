import random

import pytest

from courier_routing.errors import InvalidInputError, OptimizationCancelledError
from courier_routing.models.domain import Location, Waypoint
from courier_routing.services.geospatial import distance_meters
from courier_routing.services.routing.algorithms import (
    CancellationToken,
    NearestNeighborAlgorithm,
    OrToolsAlgorithm,
    SimulatedAnnealingAlgorithm,
    TwoOptAlgorithm,
)
from courier_routing.services.routing.algorithms.base import path_distance


def _waypoint(wid: str, lat: float, lon: float) -> Waypoint:
    return Waypoint(id=wid, location=Location(latitude=lat, longitude=lon))


def _scattered(count: int, seed: int = 7) -> list[Waypoint]:
    rng = random.Random(seed)
    return [
        _waypoint(f"W{i:02d}", 21.4 + rng.random() * 0.3, 39.1 + rng.random() * 0.3)
        for i in range(count)
    ]


START = Location(latitude=21.5, longitude=39.2)

ALL_ALGORITHMS = [
    NearestNeighborAlgorithm(),
    TwoOptAlgorithm(),
    SimulatedAnnealingAlgorithm(iterations_per_temperature=10),
    OrToolsAlgorithm(time_limit_seconds=1),
]


def test_nearest_neighbor_scenario():
    origin = Location(latitude=0, longitude=0)
    waypoints = [_waypoint("a", 0, 1), _waypoint("b", 0, 5), _waypoint("c", 0, 2)]
    algorithm = NearestNeighborAlgorithm()

    ordered = algorithm.optimize(origin, waypoints)

    assert [wp.id for wp in ordered] == ["a", "c", "b"]
    expected = (
        distance_meters(origin, waypoints[0].location)
        + distance_meters(waypoints[0].location, waypoints[2].location)
        + distance_meters(waypoints[2].location, waypoints[1].location)
    )
    assert algorithm.route_distance(origin, ordered) == pytest.approx(expected)


def test_nearest_neighbor_is_deterministic_and_order_independent():
    waypoints = _scattered(12)
    algorithm = NearestNeighborAlgorithm()
    first = [wp.id for wp in algorithm.optimize(START, waypoints)]
    second = [wp.id for wp in algorithm.optimize(START, list(reversed(waypoints)))]
    assert first == second


def test_nearest_neighbor_breaks_ties_by_id():
    origin = Location(latitude=0, longitude=0)
    waypoints = [_waypoint("z", 0, 1), _waypoint("m", 0, -1)]
    assert [wp.id for wp in NearestNeighborAlgorithm().optimize(origin, waypoints)] == ["m", "z"]


@pytest.mark.parametrize("algorithm", ALL_ALGORITHMS, ids=lambda algorithm: algorithm.name)
def test_every_algorithm_returns_a_permutation(algorithm):
    waypoints = _scattered(9)
    ordered = algorithm.optimize(START, waypoints)
    assert sorted(wp.id for wp in ordered) == sorted(wp.id for wp in waypoints)
    assert len(ordered) == len(waypoints)


@pytest.mark.parametrize("algorithm", ALL_ALGORITHMS, ids=lambda algorithm: algorithm.name)
def test_every_algorithm_handles_empty_input(algorithm):
    assert algorithm.optimize(START, []) == []
    assert algorithm.route_distance(START, []) == 0.0
    assert algorithm.estimated_travel_time(START, []) == 0.0


@pytest.mark.parametrize("algorithm", ALL_ALGORITHMS, ids=lambda algorithm: algorithm.name)
def test_missing_start_is_rejected(algorithm):
    with pytest.raises(InvalidInputError):
        algorithm.optimize(None, _scattered(4))


@pytest.mark.parametrize(
    "algorithm",
    [TwoOptAlgorithm(), SimulatedAnnealingAlgorithm(iterations_per_temperature=10)],
    ids=lambda algorithm: algorithm.name,
)
def test_improvers_never_lose_to_nearest_neighbor(algorithm):
    waypoints = _scattered(15, seed=3)
    baseline = path_distance(START, NearestNeighborAlgorithm().optimize(START, waypoints))
    improved = path_distance(START, algorithm.optimize(START, waypoints))
    assert improved <= baseline + 1e-6


def test_simulated_annealing_is_reproducible_with_a_seed():
    waypoints = _scattered(10)
    first = SimulatedAnnealingAlgorithm(seed=42, iterations_per_temperature=5).optimize(START, waypoints)
    second = SimulatedAnnealingAlgorithm(seed=42, iterations_per_temperature=5).optimize(START, waypoints)
    assert [wp.id for wp in first] == [wp.id for wp in second]


def test_cancelled_token_stops_cancellable_algorithms():
    token = CancellationToken()
    token.cancel()
    with pytest.raises(OptimizationCancelledError):
        TwoOptAlgorithm().optimize(START, _scattered(6), cancel=token)
    with pytest.raises(OptimizationCancelledError):
        SimulatedAnnealingAlgorithm().optimize(START, _scattered(6), cancel=token)


def test_travel_time_adds_service_minutes_and_falls_back_on_bad_speed():
    origin = Location(latitude=0, longitude=0)
    waypoints = [_waypoint("a", 0, 0.1), _waypoint("b", 0, 0.2)]
    algorithm = NearestNeighborAlgorithm(default_speed_kmh=30.0, service_minutes=5.0)
    distance_km = algorithm.route_distance(origin, waypoints) / 1000.0

    minutes = algorithm.estimated_travel_time(origin, waypoints, 60.0)
    assert minutes == pytest.approx(distance_km / 60.0 * 60.0 + 10.0)

    fallback = algorithm.estimated_travel_time(origin, waypoints, -5.0)
    assert fallback == pytest.approx(distance_km / 30.0 * 60.0 + 10.0)
