"""Health subsystem — connector, check runners, engine, HTML renderer."""

from .checks import CHECK_RUNNERS, CheckResult, Status
from .engine import HealthReport, LogLevel, RedisHealthCheck, StatusMessage, run_checks
