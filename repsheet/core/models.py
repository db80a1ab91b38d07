"""Repsheet Core Models - actor kinds, statuses and evidence records"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from .constants import MISSING_FIELD, RECORD_SEPARATOR


# ===============================================================================
# ENUMERATIONS
# ===============================================================================

class ActorKind(Enum):
    """Kinds of tracked actors; the value is the key namespace"""
    IP = "ip"
    USER = "users"

    @classmethod
    def coerce(cls, kind: Union['ActorKind', str, None]) -> Optional['ActorKind']:
        """Return the matching kind, or None when ``kind`` is not supported.

        Accepts an ``ActorKind``, its namespace value (``"ip"``, ``"users"``)
        or its name (``"IP"``, ``"user"``).
        """
        if isinstance(kind, cls):
            return kind
        if not isinstance(kind, str):
            return None
        lowered = kind.strip().lower()
        for member in cls:
            if lowered in (member.value, member.name.lower()):
                return member
        return None


class Status(Enum):
    """Reputation status of an actor or country"""
    CLEAN = "clean"
    OK = "clean"  # alias of CLEAN
    MARKED = "marked"
    BLACKLISTED = "blacklisted"
    WHITELISTED = "whitelisted"
    UNSUPPORTED = "unsupported"


class ConnectionState(Enum):
    """Result of a liveness check"""
    HEALTHY = "healthy"
    DISCONNECTED = "disconnected"


# ===============================================================================
# EVIDENCE RECORDS
# ===============================================================================

def _field_or_missing(value: Optional[str]) -> str:
    return MISSING_FIELD if value is None else str(value)


def _missing_to_none(value: str) -> Optional[str]:
    return None if value == MISSING_FIELD else value


@dataclass
class RequestRecord:
    """Summary of a single request kept in an actor's history log"""
    timestamp: Optional[str] = None
    user_agent: Optional[str] = None
    method: Optional[str] = None
    uri: Optional[str] = None
    arguments: Optional[str] = None

    def to_log_line(self) -> str:
        """Serialize as ``"timestamp, user_agent, method, uri, args"``"""
        return RECORD_SEPARATOR.join(
            _field_or_missing(value) for value in
            (self.timestamp, self.user_agent, self.method, self.uri, self.arguments)
        )

    @classmethod
    def from_log_line(cls, line: str) -> 'RequestRecord':
        """Parse a stored history entry.

        The timestamp is split from the left and method, uri and arguments
        from the right, so a user agent containing ``", "`` survives. Lines
        with fewer than five fields fill the missing trailing fields with
        ``None``.
        """
        head, _, rest = line.partition(RECORD_SEPARATOR)
        if not rest:
            return cls(timestamp=_missing_to_none(head))

        parts = rest.rsplit(RECORD_SEPARATOR, 3)
        parts += [MISSING_FIELD] * (4 - len(parts))
        user_agent, method, uri, arguments = parts
        return cls(
            timestamp=_missing_to_none(head),
            user_agent=_missing_to_none(user_agent),
            method=_missing_to_none(method),
            uri=_missing_to_none(uri),
            arguments=_missing_to_none(arguments),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ActorReport:
    """Everything known about one actor"""
    kind: ActorKind
    actor: str
    status: Status
    reason: str = ""
    rule_counts: Dict[str, int] = field(default_factory=dict)
    recent_requests: List[RequestRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert report to dictionary for JSON output"""
        return {
            'kind': self.kind.value,
            'actor': self.actor,
            'status': self.status.value,
            'reason': self.reason,
            'rule_counts': dict(self.rule_counts),
            'recent_requests': [r.to_dict() for r in self.recent_requests],
        }
