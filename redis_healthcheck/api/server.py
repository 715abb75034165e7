"""FastAPI server exposing the Redis status report."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from redis_healthcheck import __version__
from redis_healthcheck.api.routes import status_router
from redis_healthcheck.config import CacheConfig, load_config

logger = logging.getLogger(__name__)


def create_app(config: CacheConfig | None = None) -> FastAPI:
    app = FastAPI(
        title="Redis Health Check",
        description="Redis cache diagnostics for the CRM system status page",
        version=__version__,
    )
    app.state.cache_config = config or load_config()
    app.include_router(status_router, prefix="/api")
    logger.info(
        "Serving Redis status for %s:%s (enabled=%s)",
        app.state.cache_config.host,
        app.state.cache_config.port,
        app.state.cache_config.enabled,
    )
    return app
