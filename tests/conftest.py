"""Shared test fixtures."""

from __future__ import annotations

import copy
from typing import Any
from unittest.mock import MagicMock

import pytest
from redis.exceptions import ResponseError

from redis_healthcheck.config import CacheConfig

# INFO sections of a healthy server
HEALTHY_INFO: dict[str, dict[str, Any]] = {
    "server": {
        "redis_version": "7.2.4",
        "redis_mode": "standalone",
        "uptime_in_seconds": 93784,  # 1d 2h 3m 4s
    },
    "memory": {
        "used_memory": 1048576,  # 1 MB
        "maxmemory": 10485760,  # 10 MB
        "mem_fragmentation_ratio": 1.2,
        "maxmemory_policy": "allkeys-lru",
    },
    "keyspace": {
        "db0": {"keys": 200, "expires": 10, "avg_ttl": 0},
    },
    "stats": {
        "total_connections_received": 500,
        "total_commands_processed": 93784,
        "keyspace_hits": 900,
        "keyspace_misses": 100,
        "evicted_keys": 0,
    },
    "clients": {
        "connected_clients": 5,
        "maxclients": 10000,
    },
    "persistence": {
        "rdb_last_save_time": 1700000000,
        "aof_enabled": 0,
    },
}

HEALTHY_CONFIG = {
    "maxmemory-policy": "allkeys-lru",
    "maxclients": "10000",
}

# SCAN pages for "crm_*": 3 keys over two round trips
SCAN_PAGES = {
    0: (17, ["crm_a", "crm_b"]),
    17: (0, ["crm_c"]),
}


def make_redis(
    info: dict[str, dict[str, Any]] | None = None,
    config: dict[str, Any] | None = None,
    scan_pages: dict[int, tuple[int, list[str]]] | None = None,
    config_refused: bool = False,
) -> MagicMock:
    """A MagicMock standing in for ``redis.Redis`` (decode_responses=True)."""
    sections = copy.deepcopy(HEALTHY_INFO)
    for name, values in (info or {}).items():
        sections[name] = values
    params = dict(HEALTHY_CONFIG, **(config or {}))
    pages = scan_pages if scan_pages is not None else SCAN_PAGES
    store: dict[str, str] = {}

    client = MagicMock(name="redis")
    client.ping.return_value = True
    client.info.side_effect = lambda section="default": copy.deepcopy(sections[section])

    def config_get(name: str) -> dict[str, Any]:
        if config_refused:
            raise ResponseError("unknown command 'CONFIG'")
        return {name: params[name]} if name in params else {}

    client.config_get.side_effect = config_get
    client.scan.side_effect = lambda cursor=0, match=None, count=None: pages[cursor]

    def setex(key: str, ttl: int, value: str) -> bool:
        store[key] = value
        return True

    client.setex.side_effect = setex
    client.get.side_effect = lambda key: store.get(key)
    client.delete.side_effect = lambda *keys: sum(1 for k in keys if store.pop(k, None) is not None)
    client.store = store
    return client


@pytest.fixture
def cache_config() -> CacheConfig:
    return CacheConfig(
        enabled=True,
        cache_class="Redis",
        host="cache.internal",
        port=6380,
        password="s3cret",
        timeout=3600,
        prefix="crm_",
    )


@pytest.fixture
def disabled_config() -> CacheConfig:
    return CacheConfig.from_constants({})


@pytest.fixture
def fake_redis() -> MagicMock:
    return make_redis()


@pytest.fixture
def redis_factory():
    """``make_redis`` for tests that need a non-default server."""
    return make_redis
