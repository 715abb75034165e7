"""Redis health check engine — connects, runs every check, merges the results.

The outcome is a list of StatusMessage records in the shape the CRM status
page consumes: normally one consolidated message whose body is the HTML
report and whose title is the one-line summary, or a single warning/error
message when Redis is not configured or not reachable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import redis

from ..config import CacheConfig, load_config, settings
from .checks import CHECK_RUNNERS, INFORMATIONAL_CHECKS, CheckResult, Status
from .connector import connect, disconnect
from .render import build_html_report, summary_line

logger = logging.getLogger(__name__)

REPORT_NAME = "redis_healthcheck"
REPORT_ICON = "fa-bug"


# ── Models ───────────────────────────────────────────────────────────────────


class LogLevel(str, Enum):
    """PSR-3 level names used by the status page."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


_STATUS_LEVELS = {
    Status.OK: LogLevel.INFO,
    Status.WARNING: LogLevel.WARNING,
    Status.ERROR: LogLevel.ERROR,
}


@dataclass
class StatusMessage:
    """One entry on the CRM status page."""

    name: str
    message: str
    title: str
    level: LogLevel = LogLevel.INFO
    icon: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "message": self.message,
            "title": self.title,
            "level": self.level.value,
            "icon": self.icon,
        }


@dataclass
class HealthReport:
    """All check results plus the worst status among those that count."""

    results: list[CheckResult] = field(default_factory=list)
    status: Status = Status.OK

    @property
    def html(self) -> str:
        return build_html_report(self.results)

    @property
    def summary(self) -> str:
        return summary_line(self.status, self.results)

    def get(self, key: str) -> CheckResult | None:
        return next((r for r in self.results if r.key == key), None)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "summary": self.summary,
            "checks": [r.to_dict() for r in self.results],
        }


# ── Aggregation ──────────────────────────────────────────────────────────────


def run_checks(client: redis.Redis, config: CacheConfig) -> HealthReport:
    """Run every check in order and track the worst status seen."""
    report = HealthReport()
    for key, runner in CHECK_RUNNERS.items():
        result = runner(client, config)
        report.results.append(result)
        if key not in INFORMATIONAL_CHECKS:
            report.status = report.status.worst(result.status)
        logger.debug("Check %s: %s (%s)", key, result.status.value, result.summary)
    return report


class RedisHealthCheck:
    """Single-shot Redis diagnosis for the CRM status page."""

    def __init__(
        self,
        config: CacheConfig | None = None,
        level_follows_status: bool | None = None,
    ) -> None:
        self.config = config or load_config()
        if level_follows_status is None:
            level_follows_status = settings.report_level_follows_status
        self.level_follows_status = level_follows_status
        self.report: HealthReport | None = None

    def perform_checks(self) -> list[StatusMessage]:
        """Return the status messages this plugin contributes."""
        self.report = None
        if not self.config.enabled:
            logger.info("Redis cache not enabled (DB_CACHE_CLASS=%s)", self.config.cache_class)
            return [warning_message(
                "Redis caching is not enabled in CRM configuration",
                "DB_CACHE_CLASS is not set to Redis",
            )]

        conn = connect(self.config)
        if not conn.connected:
            disconnect(conn.client)
            return [error_message("Unable to connect to Redis server", conn.error or "")]

        try:
            self.report = run_checks(conn.client, self.config)
        except Exception as e:
            logger.exception("Redis health checks aborted")
            return [error_message("An error occurred during health checks", str(e))]
        finally:
            disconnect(conn.client)

        logger.info("Redis health: %s", self.report.status.value)
        return [self._consolidated_message(self.report)]

    def _consolidated_message(self, report: HealthReport) -> StatusMessage:
        level = _STATUS_LEVELS[report.status] if self.level_follows_status else LogLevel.INFO
        return StatusMessage(
            name=REPORT_NAME,
            message=report.html,
            title=report.summary,
            level=level,
            icon=REPORT_ICON,
        )


def error_message(message: str, title: str = "") -> StatusMessage:
    return StatusMessage(name=f"{REPORT_NAME}_error", message=message, title=title, level=LogLevel.ERROR)


def warning_message(message: str, title: str = "") -> StatusMessage:
    return StatusMessage(name=f"{REPORT_NAME}_warning", message=message, title=title, level=LogLevel.WARNING)
