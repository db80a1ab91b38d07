from .models import ActorKind, Status, ConnectionState, RequestRecord, ActorReport
from .address import remote_address, is_valid_ipv4
from .config import RepsheetConfig, ConfigManager
from .exceptions import (
    RepsheetError, ConfigurationError, ValidationError,
    ConnectError, BackendError, BackendUnavailableError
)

__all__ = [
    "ActorKind", "Status", "ConnectionState", "RequestRecord", "ActorReport",
    "remote_address", "is_valid_ipv4",
    "RepsheetConfig", "ConfigManager",
    "RepsheetError", "ConfigurationError", "ValidationError",
    "ConnectError", "BackendError", "BackendUnavailableError"
]
