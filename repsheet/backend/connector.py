"""
Redis Connector for Repsheet
============================

Opens, checks and releases the connection every store operation runs on.
Connect-time failures raise ``ConnectError``; a connection that breaks later
is reported by ``check_connection`` as ``DISCONNECTED`` instead of raising.
"""

import logging
import time
from typing import Optional

import redis
from redis.exceptions import ConnectionError, TimeoutError, RedisError

from ..core.constants import (
    DEFAULT_CONNECT_TIMEOUT_MS, DEFAULT_REDIS_DB, MAX_BACKOFF_SECONDS
)
from ..core.exceptions import ConnectError
from ..core.models import ConnectionState

logger = logging.getLogger(__name__)


class Connection:
    """Owns a single Redis client; close it exactly once (or use ``with``)"""

    def __init__(self, client: redis.Redis, host: str = None, port: int = None):
        self._client = client
        self.host = host
        self.port = port
        self._closed = False

    @property
    def client(self) -> redis.Redis:
        if self._closed:
            raise ConnectError("Connection already closed", self.host, self.port)
        return self._client

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Release the underlying client. Later calls do nothing."""
        if self._closed:
            return
        self._closed = True
        try:
            self._client.close()
            logger.debug(f"Redis connection to {self.host}:{self.port} closed")
        except RedisError as e:
            logger.warning(f"Error closing Redis connection: {e}")

    def __enter__(self) -> 'Connection':
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<Connection {self.host}:{self.port} {state}>"


def connect(host: str, port: int, timeout_ms: int = 0, db: int = DEFAULT_REDIS_DB,
            max_retries: int = 0) -> Connection:
    """Open a connection to Redis and verify it with PING.

    Args:
        host: Redis hostname
        port: Redis port
        timeout_ms: connect and socket timeout in milliseconds; non-positive
            values mean the 10 second default
        db: Redis database number
        max_retries: extra attempts after the first, with exponential backoff

    Raises:
        ConnectError: the backend refused the connection or timed out
    """
    if timeout_ms <= 0:
        timeout_ms = DEFAULT_CONNECT_TIMEOUT_MS
    timeout = timeout_ms / 1000.0

    attempt = 0
    while True:
        client = redis.Redis(
            host=host,
            port=port,
            db=db,
            decode_responses=True,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
        )
        try:
            client.ping()
            logger.info(f"Connected to Redis at {host}:{port}")
            return Connection(client, host, port)
        except (ConnectionError, TimeoutError, RedisError) as e:
            client.close()
            attempt += 1
            logger.error(f"Redis connection failed (attempt {attempt}): {e}")

            if attempt > max_retries:
                raise ConnectError(f"Could not connect to Redis at {host}:{port}: {e}", host, port) from e

            retry_delay = min(2 ** attempt, MAX_BACKOFF_SECONDS)
            logger.info(f"Retrying Redis connection in {retry_delay} seconds...")
            time.sleep(retry_delay)


def connect_from_config(config) -> Connection:
    """Open a connection using a ``RepsheetConfig``"""
    return connect(
        config.redis_host,
        config.redis_port,
        config.redis_timeout_ms,
        db=config.redis_db,
        max_retries=config.connect_retries,
    )


def check_connection(connection: Optional[Connection]) -> ConnectionState:
    """Probe liveness without raising"""
    if connection is None or connection.closed:
        return ConnectionState.DISCONNECTED

    try:
        connection.client.ping()
        return ConnectionState.HEALTHY
    except (ConnectionError, TimeoutError, RedisError) as e:
        logger.warning(f"Redis health check failed: {e}")
        return ConnectionState.DISCONNECTED
