"""Inbound traffic and roadwork notifications.

Events carry no usable per-route scope, so every notification clears the
whole travel-time cache. Bodies are read leniently: anything that is not a
JSON object is treated as carrying no ``affected`` marker. Failures are
logged and never reported back to the sender.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request, status

from ...services.container import ServiceContainer
from ..dependencies import get_container

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])


async def _affected_marker(request: Request, source: str) -> Any:
    raw = await request.body()
    if not raw:
        return None
    try:
        payload = json.loads(raw)
    except (UnicodeDecodeError, ValueError):
        logger.warning("Ignoring unparseable %s notification body (%d bytes)", source, len(raw))
        return None
    if not isinstance(payload, dict):
        return None
    return payload.get("affected")


async def _invalidate(request: Request, container: ServiceContainer, source: str) -> dict:
    try:
        affected = await _affected_marker(request, source)
    except Exception:
        logger.exception("Failed to read %s notification body", source)
        affected = None
    try:
        dropped = container.cache.invalidate_all()
        logger.info("%s notification (affected=%r) cleared %d cached estimates", source, affected, dropped)
    except Exception:
        logger.exception("Failed to invalidate travel cache for %s notification", source)
    return {"status": "accepted", "source": source}


@router.post("/traffic", status_code=status.HTTP_202_ACCEPTED)
async def traffic_update(request: Request, container: ServiceContainer = Depends(get_container)) -> dict:
    return await _invalidate(request, container, "traffic")


@router.post("/roadwork", status_code=status.HTTP_202_ACCEPTED)
async def roadwork_update(request: Request, container: ServiceContainer = Depends(get_container)) -> dict:
    return await _invalidate(request, container, "roadwork")
