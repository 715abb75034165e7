"""Redis connection — connect, authenticate, PING."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import redis
from redis.exceptions import AuthenticationError, BusyLoadingError
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from ..config import CacheConfig

logger = logging.getLogger(__name__)


@dataclass
class ConnectionStatus:
    """Outcome of :func:`connect`. ``client`` is set whenever one was built."""

    connected: bool
    error: str | None = None
    client: redis.Redis | None = None


def create_client(config: CacheConfig) -> redis.Redis:
    return redis.Redis(
        host=config.host,
        port=config.port,
        password=config.password,
        socket_connect_timeout=config.connect_timeout,
        socket_timeout=config.connect_timeout,
        decode_responses=True,
    )


def connect(config: CacheConfig) -> ConnectionStatus:
    """Open a client, authenticate if a password is set, and verify with PING.

    redis-py connects lazily and sends AUTH as part of the handshake, so the
    PING below is what actually exercises the socket and the password.
    """
    client: redis.Redis | None = None
    try:
        client = create_client(config)
        pong = client.ping()
    except AuthenticationError:
        logger.warning("Redis AUTH rejected for %s:%s", config.host, config.port)
        return ConnectionStatus(
            connected=False,
            error="Redis authentication failed (invalid password)",
            client=client,
        )
    except BusyLoadingError as e:
        # Reached the server, which is still loading its dataset
        logger.warning("Redis at %s:%s is loading: %s", config.host, config.port, e)
        return ConnectionStatus(connected=False, error=str(e), client=client)
    except (RedisConnectionError, RedisTimeoutError) as e:
        logger.warning("Redis unreachable at %s:%s: %s", config.host, config.port, e)
        return ConnectionStatus(
            connected=False,
            error=f"Failed to connect to Redis at {config.host}:{config.port}",
            client=client,
        )
    except Exception as e:
        logger.warning("Redis connection error: %s: %s", type(e).__name__, e)
        return ConnectionStatus(connected=False, error=str(e), client=client)

    if pong is not True and pong != "PONG":
        return ConnectionStatus(connected=False, error="Redis PING command failed", client=client)

    logger.debug("Connected to Redis at %s:%s", config.host, config.port)
    return ConnectionStatus(connected=True, client=client)


def disconnect(client: redis.Redis | None) -> None:
    """Close the client; errors on close are not reported."""
    if client is None:
        return
    try:
        client.close()
    except Exception:
        logger.debug("Ignoring error while closing Redis client", exc_info=True)
