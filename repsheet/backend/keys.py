"""Redis key layout for actor flags, evidence and audit sets"""

from ..core.models import ActorKind

MARKED_LABEL = "repsheet"
BLACKLIST_LABEL = "repsheet:blacklist"
WHITELIST_LABEL = "repsheet:whitelist"

MARKED_COUNTRIES_KEY = "repsheet:countries:marked"


def labeled_key(kind: ActorKind, actor: str, label: str) -> str:
    return f"{actor}:{kind.value}:{label}"


def reason_key(flag_key: str) -> str:
    return f"{flag_key}:reason"


def marked_key(kind: ActorKind, actor: str) -> str:
    return labeled_key(kind, actor, MARKED_LABEL)


def blacklist_key(kind: ActorKind, actor: str) -> str:
    return labeled_key(kind, actor, BLACKLIST_LABEL)


def whitelist_key(kind: ActorKind, actor: str) -> str:
    return labeled_key(kind, actor, WHITELIST_LABEL)


def detected_key(actor: str) -> str:
    return f"{actor}:detected"


def requests_key(actor: str) -> str:
    return f"{actor}:requests"


def blacklist_history_key(kind: ActorKind) -> str:
    return f"repsheet:{kind.value}:blacklist:history"
