"""Typed errors raised by the routing core."""

from __future__ import annotations

from typing import Any


class RoutingError(Exception):
    """Base class for every error the routing core reports to callers."""


class NotFoundError(RoutingError):
    """A referenced route, location or waypoint does not exist."""

    def __init__(self, kind: str, identifier: Any) -> None:
        super().__init__(f"{kind} not found with id: {identifier}")
        self.kind = kind
        self.identifier = identifier


class InvalidInputError(RoutingError, ValueError):
    """Malformed coordinates, empty required fields or a missing start location."""


class InvalidStateTransitionError(RoutingError):
    """A requested status change is not an edge of the route state machine."""

    def __init__(self, current: Any, requested: Any, message: str | None = None) -> None:
        current_name = getattr(current, "value", current)
        requested_name = getattr(requested, "value", requested)
        super().__init__(
            message or f"Cannot move route from {current_name} to {requested_name}"
        )
        self.current = current
        self.requested = requested


class ComputationError(RoutingError):
    """An optimization algorithm failed internally."""


class OptimizationCancelledError(ComputationError):
    """A cancellable optimization run was stopped before it finished."""
