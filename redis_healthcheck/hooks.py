"""CRM hook implementations.

The host calls ``on_status_check(messages)`` while building its system status
page; the plugin appends its own messages to that list.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from redis_healthcheck.config import CacheConfig
from redis_healthcheck.health.engine import RedisHealthCheck, StatusMessage

logger = logging.getLogger(__name__)


def on_status_check(messages: list[StatusMessage], config: CacheConfig | None = None) -> None:
    """``check`` hook: extend the host's message list in place."""
    check = RedisHealthCheck(config=config)
    produced = check.perform_checks()
    logger.debug("Redis health check contributed %d message(s)", len(produced))
    messages.extend(produced)


HOOKS: dict[str, Callable[..., Any]] = {
    "check": on_status_check,
}


def register(add_listener: Callable[[str, Callable[..., Any]], Any]) -> None:
    """Register every hook through the host's ``add_listener(name, fn)``."""
    for name, fn in HOOKS.items():
        add_listener(name, fn)
