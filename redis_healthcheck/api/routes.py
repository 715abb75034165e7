"""API routes for the Redis status report.

Endpoints:
  GET  /api/health                 — liveness of the plugin service itself
  GET  /api/status/redis           — status messages + per-check data (JSON)
  GET  /api/status/redis?format=html — the HTML fragment for the status page
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse

from redis_healthcheck import __version__
from redis_healthcheck.health.engine import RedisHealthCheck

logger = logging.getLogger(__name__)

status_router = APIRouter()

FORMATS = ("json", "html")


@status_router.get("/health")
def liveness() -> dict[str, Any]:
    return {"status": "ok", "version": __version__}


@status_router.get("/status/redis", response_model=None)
def redis_status(request: Request, format: str = "json") -> dict[str, Any] | HTMLResponse:
    """Run the Redis health check now and return its outcome."""
    if format not in FORMATS:
        raise HTTPException(status_code=400, detail=f"Unknown format: {format}")

    check = RedisHealthCheck(config=request.app.state.cache_config)
    messages = check.perform_checks()
    report = check.report

    if format == "html":
        if report is None:
            # Not configured or unreachable: no report to render
            raise HTTPException(status_code=503, detail=messages[0].message)
        return HTMLResponse(report.html)

    return {
        "messages": [m.to_dict() for m in messages],
        "report": report.to_dict() if report else None,
    }
