"""
Repsheet Custom Exceptions
Standardized exception hierarchy for better error handling
"""

from contextlib import contextmanager

from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError
from redis.exceptions import TimeoutError as RedisTimeoutError


class RepsheetError(Exception):
    """Base exception for all Repsheet errors"""
    pass


class ConfigurationError(RepsheetError):
    """Configuration-related errors"""
    pass


class ValidationError(RepsheetError):
    """Invalid arguments passed to a store operation"""
    pass


class ConnectError(RepsheetError):
    """Backend could not be reached when opening a connection"""

    def __init__(self, message: str, host: str = None, port: int = None):
        super().__init__(message)
        self.message = message
        self.host = host
        self.port = port


class BackendError(RepsheetError):
    """A command failed on an already open connection"""
    pass


class BackendUnavailableError(BackendError):
    """The connection was lost or timed out while running a command"""
    pass


@contextmanager
def backend_errors(operation: str):
    """Re-raise redis-py errors from ``operation`` as Repsheet errors."""
    try:
        yield
    except (RedisConnectionError, RedisTimeoutError) as e:
        raise BackendUnavailableError(f"{operation} failed, backend unavailable: {e}") from e
    except RedisError as e:
        raise BackendError(f"{operation} failed: {e}") from e
