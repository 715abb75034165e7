from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic_settings import BaseSettings

REDIS_CACHE_CLASSES = ("Redis", "redis")


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env file."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # CRM cache constants (DB_CACHE_*)
    db_cache_class: str | None = None
    db_cache_host: str = "localhost"
    db_cache_port: int = 6379
    db_cache_password: str | None = None
    db_cache_timeout: int = 3600  # TTL the CRM applies to cache entries
    db_cache_prefix: str = "crm_"

    # Redis client
    redis_connect_timeout: float = 5.0  # seconds, connect + socket

    # Report
    report_level_follows_status: bool = False  # default: always emit at info

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Logging
    log_level: str = "INFO"


settings = Settings()


@dataclass(frozen=True)
class CacheConfig:
    """Snapshot of the CRM cache constants the health check works from."""

    enabled: bool
    cache_class: str
    host: str
    port: int
    password: str | None
    timeout: int
    prefix: str
    connect_timeout: float = 5.0

    @classmethod
    def from_constants(cls, constants: Mapping[str, Any]) -> CacheConfig:
        """Build from a mapping of constant name -> value (e.g. ``DB_CACHE_HOST``)."""
        cache_class = constants.get("DB_CACHE_CLASS")
        return cls(
            enabled=cache_class in REDIS_CACHE_CLASSES,
            cache_class=cache_class if cache_class is not None else "N/A",
            host=constants.get("DB_CACHE_HOST", "localhost"),
            port=int(constants.get("DB_CACHE_PORT", 6379)),
            password=constants.get("DB_CACHE_PASSWORD") or None,
            timeout=int(constants.get("DB_CACHE_TIMEOUT", 3600)),
            prefix=constants.get("DB_CACHE_PREFIX", "crm_"),
        )

    @property
    def password_protected(self) -> bool:
        return bool(self.password)


def load_config(source: Settings | None = None) -> CacheConfig:
    """Read the DB_CACHE_* constants into a :class:`CacheConfig`."""
    s = source or settings
    return CacheConfig(
        enabled=s.db_cache_class in REDIS_CACHE_CLASSES,
        cache_class=s.db_cache_class if s.db_cache_class is not None else "N/A",
        host=s.db_cache_host,
        port=s.db_cache_port,
        password=s.db_cache_password or None,
        timeout=s.db_cache_timeout,
        prefix=s.db_cache_prefix,
        connect_timeout=s.redis_connect_timeout,
    )
