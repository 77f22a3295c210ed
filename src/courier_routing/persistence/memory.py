"""In-memory repositories standing in for durable route and location storage."""

from __future__ import annotations

import copy
import threading
from typing import Iterable, Optional

from ..models.domain import Location


class _InMemoryStore:
    """Dict store keyed by ``id`` that hands out deep copies so callers never share state."""

    def __init__(self, items: Iterable = ()) -> None:
        self._lock = threading.Lock()
        self._items: dict[str, object] = {}
        for item in items:
            self._items[item.id] = copy.deepcopy(item)

    def __contains__(self, item_id: object) -> bool:
        with self._lock:
            return item_id in self._items

    def get(self, item_id: str):
        with self._lock:
            item = self._items.get(item_id)
            return copy.deepcopy(item) if item is not None else None

    def save(self, item):
        stored = copy.deepcopy(item)
        with self._lock:
            self._items[stored.id] = stored
        return copy.deepcopy(stored)

    def delete(self, item_id: str) -> bool:
        with self._lock:
            return self._items.pop(item_id, None) is not None

    def list(self) -> list:
        with self._lock:
            return [copy.deepcopy(item) for item in self._items.values()]


class InMemoryRouteRepository(_InMemoryStore):
    """Routes own their waypoints, so deleting a route drops its waypoints with it."""


class InMemoryLocationRepository(_InMemoryStore):
    def search(
        self,
        *,
        city: Optional[str] = None,
        state: Optional[str] = None,
        country: Optional[str] = None,
    ) -> list[Location]:
        def matches(value: Optional[str], wanted: Optional[str]) -> bool:
            return wanted is None or (value or "").strip().lower() == wanted.strip().lower()

        return [
            location
            for location in self.list()
            if matches(location.city, city) and matches(location.state, state) and matches(location.country, country)
        ]
