"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...services.container import ServiceContainer
from ..dependencies import get_container

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root(container: ServiceContainer = Depends(get_container)) -> dict:
    cache = container.cache.stats()
    return {
        "status": "ok",
        "algorithms": container.engine.algorithm_names(),
        "cache": {
            "size": cache.size,
            "hits": cache.hits,
            "misses": cache.misses,
            "generation": cache.generation,
        },
        "indexes": {
            "locations": len(container.location_index),
            "couriers": len(container.courier_index),
        },
    }
