"""Redis check runners.

Each runner takes a connected ``redis.Redis`` and the cache config and
returns a CheckResult. Runners never raise: a failing command becomes an
``error`` result carrying the exception text.
"""

from __future__ import annotations

import hashlib
import logging
import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import redis
from redis.exceptions import ResponseError

from ..config import CacheConfig
from .formatting import format_bytes, format_decimal, format_uptime

logger = logging.getLogger(__name__)

LATENCY_WARN_MS = 50.0
MEMORY_WARN_PCT = 80.0
MEMORY_ERROR_PCT = 90.0
FRAGMENTATION_WARN_RATIO = 1.5
CLIENTS_WARN_PCT = 80.0
PROBE_TTL_SECONDS = 10


# ── Models ───────────────────────────────────────────────────────────────────


class Status(str, Enum):
    OK = "ok"
    WARNING = "warning"
    ERROR = "error"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    def worst(self, other: Status) -> Status:
        return other if other.severity > self.severity else self


_SEVERITY = {Status.OK: 0, Status.WARNING: 1, Status.ERROR: 2}


@dataclass
class CheckResult:
    """Result of a single Redis check."""

    key: str
    title: str
    status: Status
    summary: str = ""
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "title": self.title,
            "status": self.status.value,
            "summary": self.summary,
            "details": dict(self.details),
        }


def _failed(key: str, title: str, summary: str, exc: Exception) -> CheckResult:
    logger.warning("%s check failed: %s: %s", key, type(exc).__name__, exc)
    return CheckResult(
        key=key, title=title, status=Status.ERROR,
        summary=summary, details={"Error": str(exc)},
    )


# ── Check runners ────────────────────────────────────────────────────────────


def run_reachability_check(client: redis.Redis, config: CacheConfig) -> CheckResult:
    """Timed PING."""
    title = "Connection & Latency"
    try:
        t0 = time.perf_counter()
        client.ping()
        latency = (time.perf_counter() - t0) * 1000

        good = latency < LATENCY_WARN_MS
        return CheckResult(
            key="reachability", title=title,
            status=Status.OK if good else Status.WARNING,
            summary=f"Reachable - Response time: {format_decimal(latency)}ms",
            details={
                "Status": "Good" if good else "High Latency",
                "Response Time": f"{format_decimal(latency)}ms",
                "Host": config.host,
                "Port": config.port,
            },
        )
    except Exception as e:
        return _failed("reachability", title, "Failed to check reachability", e)


def run_configuration_check(client: redis.Redis, config: CacheConfig) -> CheckResult:
    """Echo the CRM cache settings next to the server's version and mode."""
    title = "Configuration"
    try:
        info = client.info("server")
        return CheckResult(
            key="configuration", title=title, status=Status.OK,
            summary="Configured correctly",
            details={
                "Cache Backend": config.cache_class,
                "Redis Version": info["redis_version"],
                "Server Mode": info.get("redis_mode", "standalone"),
                "Key Prefix": config.prefix,
                "Cache Timeout (TTL)": f"{config.timeout} seconds",
                "Password Protected": "Yes" if config.password_protected else "No",
            },
        )
    except Exception as e:
        return _failed("configuration", title, "Failed to retrieve configuration", e)


def run_memory_check(client: redis.Redis, config: CacheConfig) -> CheckResult:
    """Used vs. maxmemory, plus allocator fragmentation."""
    title = "Memory Usage"
    try:
        info = client.info("memory")
        used = int(info["used_memory"])
        max_memory = int(info.get("maxmemory", 0) or 0)

        used_fmt = format_bytes(used)
        max_fmt = format_bytes(max_memory) if max_memory > 0 else "Unlimited"
        details: dict[str, Any] = {"Used Memory": used_fmt, "Max Memory": max_fmt}

        status = Status.OK
        if max_memory > 0:
            pct = used / max_memory * 100
            pct_fmt = format_decimal(pct)
            details["Usage"] = f"{pct_fmt}%"
            if pct > MEMORY_ERROR_PCT:
                status = Status.ERROR
                summary = f"CRITICAL - {used_fmt} / {max_fmt} ({pct_fmt}%)"
            elif pct > MEMORY_WARN_PCT:
                status = Status.WARNING
                summary = f"WARNING - {used_fmt} / {max_fmt} ({pct_fmt}%)"
            else:
                summary = f"{used_fmt} / {max_fmt} ({pct_fmt}%)"
        else:
            summary = f"{used_fmt} (unlimited max)"

        fragmentation = float(info.get("mem_fragmentation_ratio", 1.0))
        details["Fragmentation Ratio"] = format_decimal(fragmentation)
        if fragmentation > FRAGMENTATION_WARN_RATIO:
            details["⚠ Warning"] = "High fragmentation detected. Consider restarting Redis."
            status = status.worst(Status.WARNING)

        return CheckResult(key="memory", title=title, status=status, summary=summary, details=details)
    except Exception as e:
        return _failed("memory", title, "Failed to retrieve memory information", e)


def run_keys_check(client: redis.Redis, config: CacheConfig) -> CheckResult:
    """Key counts for db0 and the CRM prefix, plus a live SETEX/GET/DEL probe."""
    title = "Key Health"
    try:
        total = _db0_key_count(client.info("keyspace"))
        crm_keys = count_keys_by_pattern(client, f"{config.prefix}*")

        details: dict[str, Any] = {
            "Total Keys in Database": total,
            f"CRM Keys (prefix: {config.prefix})": crm_keys,
        }
        if total > 0:
            details["CRM Percentage"] = f"{format_decimal(crm_keys / total * 100)}%"

        status = Status.ERROR
        stamp = int(time.time())
        probe_key = f"{config.prefix}_healthcheck_test_{stamp}"
        probe_value = "healthcheck_" + hashlib.sha1(str(stamp).encode()).hexdigest()
        try:
            client.setex(probe_key, PROBE_TTL_SECONDS, probe_value)
            read_back = client.get(probe_key)
            if read_back == probe_value:
                details["Write/Read Test"] = "✓ PASSED"
                status = Status.OK
            else:
                details["Write/Read Test"] = "✗ FAILED (values do not match)"
            client.delete(probe_key)
        except Exception as e:
            logger.warning("Write/read probe failed: %s", e)
            details["Write/Read Test"] = f"✗ FAILED - {e}"

        return CheckResult(
            key="keys", title=title, status=status,
            summary=f"Keys: {total} (CRM: {crm_keys})",
            details=details,
        )
    except Exception as e:
        return _failed("keys", title, "Failed to retrieve key information", e)


def run_performance_check(client: redis.Redis, config: CacheConfig) -> CheckResult:
    """Throughput since start-up and keyspace hit ratio."""
    title = "Performance Metrics"
    try:
        stats = client.info("stats")
        server = client.info("server")
        clients = client.info("clients")

        total_connections = stats.get("total_connections_received", 0)
        total_commands = stats.get("total_commands_processed", 0)
        connected = clients.get("connected_clients", 0)
        uptime = server.get("uptime_in_seconds", 1)
        per_second = total_commands / uptime if uptime > 0 else 0.0

        details: dict[str, Any] = {
            "Total Connections": total_connections,
            "Connected Clients": connected,
            "Total Commands Processed": total_commands,
            "Commands/Second": format_decimal(per_second),
            "Server Uptime": format_uptime(uptime),
        }

        if "keyspace_hits" in stats and "keyspace_misses" in stats:
            hits = int(stats["keyspace_hits"])
            misses = int(stats["keyspace_misses"])
            if hits + misses > 0:
                details["Cache Hit Ratio"] = f"{format_decimal(hits / (hits + misses) * 100)}%"
                details["Hits / Misses"] = f"{hits} / {misses}"

        return CheckResult(
            key="performance", title=title, status=Status.OK,
            summary=f"Clients: {connected}, Throughput: {format_decimal(per_second)} cmds/sec",
            details=details,
        )
    except Exception as e:
        return _failed("performance", title, "Failed to retrieve performance metrics", e)


def run_eviction_check(client: redis.Redis, config: CacheConfig) -> CheckResult:
    """maxmemory-policy and the number of keys evicted so far."""
    title = "Eviction Policy"
    try:
        policy = _config_value(client, "maxmemory-policy")
        if policy is None:
            policy = client.info("memory").get("maxmemory_policy", "noeviction")

        details: dict[str, Any] = {"Eviction Policy": policy}

        evicted = int(client.info("stats").get("evicted_keys", 0))
        status = Status.OK
        if evicted > 0:
            details["Keys Evicted"] = evicted
            status = Status.WARNING

        if policy == "noeviction":
            details["⚠ Note"] = "Keys will NOT be evicted when memory limit is reached."

        evictions = f"{evicted} keys evicted" if evicted > 0 else "No evictions"
        return CheckResult(
            key="eviction", title=title, status=status,
            summary=f"{policy} ({evictions})",
            details=details,
        )
    except Exception as e:
        return _failed("eviction", title, "Failed to retrieve eviction policy", e)


def run_persistence_check(client: redis.Redis, config: CacheConfig) -> CheckResult:
    """RDB / AOF status. Informational only."""
    title = "Persistence"
    try:
        info = client.info("persistence")

        last_save = info.get("rdb_last_save_time")
        aof_enabled = bool(int(info.get("aof_enabled", 0)))

        details: dict[str, Any] = {
            "RDB (Snapshots)": "Enabled" if last_save is not None else "Disabled",
        }
        if last_save:
            saved_at = datetime.fromtimestamp(int(last_save), tz=timezone.utc)
            details["Last RDB Save"] = saved_at.strftime("%Y-%m-%d %H:%M:%S UTC")

        details["AOF (Append Only File)"] = "Enabled" if aof_enabled else "Disabled"

        rewrite_secs = info.get("aof_last_rewrite_time_sec")
        if aof_enabled and rewrite_secs is not None and int(rewrite_secs) >= 0:
            details["Last AOF Rewrite Duration"] = f"{rewrite_secs} seconds"

        details["ℹ Note"] = (
            "For CRM caching, persistence is optional. Enable if durability is required."
        )

        return CheckResult(
            key="persistence", title=title, status=Status.OK,
            summary="Enabled" if (aof_enabled or last_save) else "Disabled",
            details=details,
        )
    except Exception as e:
        logger.warning("persistence check failed: %s", e)
        return CheckResult(
            key="persistence", title=title, status=Status.WARNING,
            summary="Unable to determine",
            details={"Error": f"Persistence status could not be determined: {e}"},
        )


def run_connections_check(client: redis.Redis, config: CacheConfig) -> CheckResult:
    """Connected clients against maxclients."""
    title = "Client Connections"
    try:
        info = client.info("clients")

        connected = int(info.get("connected_clients", 0))
        max_clients: Any = info.get("maxclients")
        if max_clients is None:
            max_clients = _config_value(client, "maxclients")
        if max_clients is None:
            max_clients = "Unlimited"
        elif str(max_clients).isdigit():
            max_clients = int(max_clients)

        details: dict[str, Any] = {
            "Connected Clients": connected,
            "Max Clients": max_clients,
        }

        status = Status.OK
        if isinstance(max_clients, int) and max_clients > 0 and connected > 0:
            pct = connected / max_clients * 100
            details["Usage"] = f"{format_decimal(pct)}%"
            if pct > CLIENTS_WARN_PCT:
                status = Status.WARNING
                details["⚠ Warning"] = "Approaching maximum client connections."

        return CheckResult(
            key="connections", title=title, status=status,
            summary=f"Connected: {connected}",
            details=details,
        )
    except Exception as e:
        return _failed("connections", title, "Failed to retrieve client information", e)


# Fixed execution order
CHECK_RUNNERS = {
    "reachability": run_reachability_check,
    "configuration": run_configuration_check,
    "memory": run_memory_check,
    "keys": run_keys_check,
    "performance": run_performance_check,
    "eviction": run_eviction_check,
    "persistence": run_persistence_check,
    "connections": run_connections_check,
}

# Shown in the report but never raise the overall status
INFORMATIONAL_CHECKS = frozenset({"persistence"})


# ── Helpers ──────────────────────────────────────────────────────────────────


def count_keys_by_pattern(client: redis.Redis, pattern: str) -> int:
    """Count keys matching ``pattern`` with a cursor SCAN. -1 if SCAN fails."""
    try:
        count = 0
        cursor = 0
        while True:
            cursor, keys = client.scan(cursor=cursor, match=pattern, count=1000)
            count += len(keys)
            if int(cursor) == 0:
                return count
    except Exception as e:
        logger.warning("SCAN %s failed: %s", pattern, e)
        return -1


def _db0_key_count(keyspace: dict[str, Any]) -> int:
    db0 = keyspace.get("db0")
    if not db0:
        return 0
    if isinstance(db0, dict):
        return int(db0.get("keys", 0))
    # Unparsed "keys=12,expires=0,avg_ttl=0"
    m = re.search(r"keys=(\d+)", str(db0))
    return int(m.group(1)) if m else 0


def _config_value(client: redis.Redis, name: str) -> Any:
    """CONFIG GET one parameter; None when the server refuses CONFIG."""
    try:
        return client.config_get(name).get(name)
    except ResponseError as e:
        logger.debug("CONFIG GET %s refused: %s", name, e)
        return None
