__version__ = "1.0.0"

from .core.models import ActorKind, Status, ConnectionState, RequestRecord, ActorReport
from .core.address import remote_address, is_valid_ipv4
from .core.config import RepsheetConfig, ConfigManager
from .core.exceptions import (
    RepsheetError, ConfigurationError, ValidationError,
    ConnectError, BackendError, BackendUnavailableError
)
from .backend import (
    Connection, connect, connect_from_config, check_connection,
    ReputationStore, EvidenceLedger
)

__all__ = [
    "ActorKind", "Status", "ConnectionState", "RequestRecord", "ActorReport",
    "remote_address", "is_valid_ipv4",
    "RepsheetConfig", "ConfigManager",
    "RepsheetError", "ConfigurationError", "ValidationError",
    "ConnectError", "BackendError", "BackendUnavailableError",
    "Connection", "connect", "connect_from_config", "check_connection",
    "ReputationStore", "EvidenceLedger"
]
