"""Health module routes."""

import time
from datetime import UTC, datetime
from typing import Any

import psutil
from fastapi import APIRouter, Request

from webprint import __version__

router = APIRouter()

_MB = 1024 * 1024


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    """
    Liveness check.

    Stays 200 when the rendering engine is unavailable; the engine state is
    reported in the body instead. Memory figures are in MB: the service
    process RSS and what the host still has available for new browsers.
    """
    engine = request.app.state.engine
    started_at = request.app.state.started_at
    return {
        "status": "ok",
        "timestamp": datetime.now(UTC).isoformat(),
        "uptime_seconds": round(time.monotonic() - started_at, 3),
        "memory_rss_mb": round(psutil.Process().memory_info().rss / _MB, 1),
        "memory_available_mb": round(psutil.virtual_memory().available / _MB, 1),
        "engine_available": bool(engine.available),
    }


@router.get("/")
async def root() -> dict[str, str]:
    return {"service": "WebPrint", "version": __version__}
