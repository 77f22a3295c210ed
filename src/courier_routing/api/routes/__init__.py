"""Route group exports."""

from . import algorithms, geo, health, locations, routes, webhooks

__all__ = ["algorithms", "geo", "health", "locations", "routes", "webhooks"]
