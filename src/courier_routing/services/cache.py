"""Travel-time memoization with coarse, whole-cache invalidation."""

from __future__ import annotations

import hashlib
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable, TypeVar

from .geospatial import Coordinates

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _coordinate_key(point: Coordinates) -> str:
    return f"{float(point.latitude)!r}:{float(point.longitude)!r}"


def fingerprint(start: Coordinates, points: Iterable[Coordinates], *extra: Any) -> str:
    """Stable key for a (start, ordered points) input.

    Coordinates are hashed at full float precision, so distinct inputs never share a key.
    """

    parts = [_coordinate_key(start)]
    parts.extend(_coordinate_key(point) for point in points)
    parts.extend(str(item) for item in extra)
    return hashlib.sha1("|".join(parts).encode("utf-8")).hexdigest()


@dataclass(slots=True)
class _CachedValue:
    value: Any
    expires_at: float | None


@dataclass(frozen=True, slots=True)
class CacheStats:
    size: int
    hits: int
    misses: int
    generation: int


class TravelTimeCache:
    """Thread-safe memo keyed by input fingerprint.

    ``invalidate_all`` bumps a generation counter under the same lock that
    guards the entries. A value whose computation started before an
    invalidation is returned to its caller but never stored, so later
    readers always recompute against post-invalidation inputs.
    """

    def __init__(
        self,
        *,
        ttl_seconds: float = 0.0,
        max_entries: int = 10_000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, _CachedValue] = {}
        self._generation = 0
        self._hits = 0
        self._misses = 0

    def get_or_compute(self, key: str, compute: Callable[[], T]) -> T:
        now = self._clock()
        with self._lock:
            cached = self._entries.get(key)
            if cached is not None and (cached.expires_at is None or cached.expires_at > now):
                self._hits += 1
                logger.debug("Travel cache hit for %s", key)
                return cached.value
            if cached is not None:
                del self._entries[key]
            self._misses += 1
            generation = self._generation
        logger.debug("Travel cache miss for %s", key)

        value = compute()

        with self._lock:
            if generation == self._generation:
                if len(self._entries) >= self.max_entries and key not in self._entries:
                    # Dicts keep insertion order; drop the oldest entry.
                    self._entries.pop(next(iter(self._entries)))
                expires_at = self._clock() + self.ttl_seconds if self.ttl_seconds > 0 else None
                self._entries[key] = _CachedValue(value=value, expires_at=expires_at)
        return value

    def invalidate_all(self) -> int:
        with self._lock:
            dropped = len(self._entries)
            self._entries = {}
            self._generation += 1
        logger.info("Travel cache invalidated (%d entries dropped)", dropped)
        return dropped

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(
                size=len(self._entries),
                hits=self._hits,
                misses=self._misses,
                generation=self._generation,
            )
