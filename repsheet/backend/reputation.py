"""
Reputation Store
================

Marked / blacklisted / whitelisted flags per actor, country marks and the
blacklist audit history. Flags live under independent keys and may coexist;
``actor_status`` resolves them with the precedence
WHITELISTED > BLACKLISTED > MARKED > CLEAN.
"""

import logging
from typing import Optional, Set, Tuple, Union

from redis.exceptions import ResponseError

from . import keys
from .connector import Connection
from ..core.constants import FLAG_VALUE, MAX_REASON_LENGTH
from ..core.exceptions import ValidationError, backend_errors
from ..core.models import ActorKind, Status

logger = logging.getLogger(__name__)

KindLike = Union[ActorKind, str]


def truncate_reason(reason: Optional[str]) -> Optional[str]:
    """Clip a reason to ``MAX_REASON_LENGTH`` characters"""
    if reason is None:
        return None
    return str(reason)[:MAX_REASON_LENGTH]


def _as_text(value) -> Optional[str]:
    if isinstance(value, bytes):
        return value.decode('utf-8', errors='replace')
    return value


def require_kind(kind: KindLike) -> ActorKind:
    """Resolve ``kind`` for a write, raising ValidationError if unsupported"""
    resolved = ActorKind.coerce(kind)
    if resolved is None:
        raise ValidationError(f"Unsupported actor kind: {kind!r}")
    return resolved


class ReputationStore:
    """Actor and country reputation on top of an open connection"""

    def __init__(self, connection: Connection):
        self.connection = connection

    # ------------------------------------------------------------------
    # internal helpers
    # ------------------------------------------------------------------

    def _get(self, key: str) -> Optional[str]:
        """GET that reads wrong-type keys as absent"""
        with backend_errors(f"GET {key}"):
            try:
                return _as_text(self.connection.client.get(key))
            except ResponseError as e:
                logger.warning(f"Ignoring unreadable value at {key}: {e}")
                return None

    def _flag_set(self, key: str) -> bool:
        return self._get(key) == FLAG_VALUE

    def _set_flag(self, key: str, reason: Optional[str]) -> None:
        reason = truncate_reason(reason)
        with backend_errors(f"SET {key}"):
            pipe = self.connection.client.pipeline(transaction=True)
            pipe.set(key, FLAG_VALUE)
            if reason:
                pipe.set(keys.reason_key(key), reason)
            else:
                pipe.delete(keys.reason_key(key))
            pipe.execute()

    # ------------------------------------------------------------------
    # flag writes
    # ------------------------------------------------------------------

    def mark_actor(self, kind: KindLike, actor: str, reason: Optional[str] = None) -> None:
        """Put the actor on the repsheet (no expiry)"""
        kind = require_kind(kind)
        self._set_flag(keys.marked_key(kind, actor), reason)
        logger.info(f"Marked {kind.value} {actor}: {reason or '-'}")

    def blacklist_actor(self, kind: KindLike, actor: str, reason: str) -> None:
        """Blacklist the actor (no expiry); a reason is required"""
        kind = require_kind(kind)
        if not reason:
            raise ValidationError("A reason is required to blacklist an actor")
        self._set_flag(keys.blacklist_key(kind, actor), reason)
        logger.info(f"Blacklisted {kind.value} {actor}: {reason}")

    def whitelist_actor(self, kind: KindLike, actor: str, reason: Optional[str] = None) -> None:
        """Whitelist the actor; whitelisting overrides every other flag"""
        kind = require_kind(kind)
        self._set_flag(keys.whitelist_key(kind, actor), reason)
        logger.info(f"Whitelisted {kind.value} {actor}: {reason or '-'}")

    # ------------------------------------------------------------------
    # flag reads
    # ------------------------------------------------------------------

    def is_on_repsheet(self, kind: KindLike, actor: str) -> bool:
        kind = ActorKind.coerce(kind)
        return kind is not None and self._flag_set(keys.marked_key(kind, actor))

    def is_blacklisted(self, kind: KindLike, actor: str) -> bool:
        kind = ActorKind.coerce(kind)
        return kind is not None and self._flag_set(keys.blacklist_key(kind, actor))

    def is_whitelisted(self, kind: KindLike, actor: str) -> bool:
        kind = ActorKind.coerce(kind)
        return kind is not None and self._flag_set(keys.whitelist_key(kind, actor))

    def actor_status(self, kind: KindLike, actor: str) -> Tuple[Status, str]:
        """Return the actor's effective status and the reason recorded for it.

        All three flags and their reasons are fetched with one MGET; MGET
        returns nil for keys holding non-string values, so corrupt entries
        read as unset.
        """
        resolved = ActorKind.coerce(kind)
        if resolved is None:
            return Status.UNSUPPORTED, ""

        ordered = (
            (Status.WHITELISTED, keys.whitelist_key(resolved, actor)),
            (Status.BLACKLISTED, keys.blacklist_key(resolved, actor)),
            (Status.MARKED, keys.marked_key(resolved, actor)),
        )
        lookup = []
        for _, flag_key in ordered:
            lookup.extend((flag_key, keys.reason_key(flag_key)))

        with backend_errors(f"MGET status of {actor}"):
            values = [_as_text(v) for v in self.connection.client.mget(lookup)]

        for index, (status, _) in enumerate(ordered):
            flag, reason = values[2 * index], values[2 * index + 1]
            if flag == FLAG_VALUE:
                return status, reason or ""

        return Status.CLEAN, ""

    def is_ip_blacklisted_with_reason(self, actor: str) -> Tuple[bool, Optional[str]]:
        """Blacklist check for an IP plus its reason.

        The reason is only meaningful when the first element is True.
        """
        flag_key = keys.blacklist_key(ActorKind.IP, actor)
        with backend_errors(f"MGET blacklist of {actor}"):
            flag, reason = (_as_text(v) for v in self.connection.client.mget([flag_key, keys.reason_key(flag_key)]))
        if flag != FLAG_VALUE:
            return False, None
        return True, reason or ""

    # ------------------------------------------------------------------
    # expiry
    # ------------------------------------------------------------------

    def expire(self, kind: KindLike, actor: str, label: str, ttl: int) -> bool:
        """Set a TTL on ``{actor}:{kind}:{label}`` and its reason key.

        Returns True if the labeled record existed.
        """
        kind = require_kind(kind)
        if ttl <= 0:
            raise ValidationError(f"TTL must be positive, got {ttl}")

        key = keys.labeled_key(kind, actor, label)
        with backend_errors(f"EXPIRE {key}"):
            pipe = self.connection.client.pipeline(transaction=True)
            pipe.expire(key, ttl)
            pipe.expire(keys.reason_key(key), ttl)
            existed, _ = pipe.execute()
        return bool(existed)

    def blacklist_and_expire(self, kind: KindLike, actor: str, ttl: int, reason: str) -> None:
        """Blacklist the actor for ``ttl`` seconds and add it to the history set.

        The flag, reason and history membership are written in one MULTI/EXEC
        block. The flag and reason expire together; history membership is
        permanent.
        """
        kind = require_kind(kind)
        if ttl <= 0:
            raise ValidationError(f"TTL must be positive, got {ttl}")
        if not reason:
            raise ValidationError("A reason is required to blacklist an actor")

        flag_key = keys.blacklist_key(kind, actor)
        with backend_errors(f"blacklist {actor}"):
            pipe = self.connection.client.pipeline(transaction=True)
            pipe.set(flag_key, FLAG_VALUE, ex=ttl)
            pipe.set(keys.reason_key(flag_key), truncate_reason(reason), ex=ttl)
            pipe.sadd(keys.blacklist_history_key(kind), actor)
            pipe.execute()

        logger.info(f"Blacklisted {kind.value} {actor} for {ttl}s: {reason}")

    def blacklist_history(self, kind: KindLike) -> Set[str]:
        """Every actor of ``kind`` ever blacklisted with an expiry"""
        kind = require_kind(kind)
        key = keys.blacklist_history_key(kind)
        with backend_errors(f"SMEMBERS {key}"):
            try:
                members = self.connection.client.smembers(key)
            except ResponseError as e:
                logger.warning(f"Ignoring unreadable blacklist history at {key}: {e}")
                return set()
        return {_as_text(m) for m in members}

    # ------------------------------------------------------------------
    # countries
    # ------------------------------------------------------------------

    def mark_country(self, code: str) -> None:
        """Add ``code`` to the marked set exactly as given"""
        if not isinstance(code, str) or not code:
            raise ValidationError(f"Invalid country code: {code!r}")
        with backend_errors("SADD marked countries"):
            self.connection.client.sadd(keys.MARKED_COUNTRIES_KEY, code)
        logger.info(f"Marked country {code}")

    def country_status(self, code: str) -> Status:
        """MARKED if ``code`` is a member of the marked set, otherwise OK.

        Membership is exact: ``"kp"`` does not match a stored ``"KP"``.
        """
        if not isinstance(code, str) or not code:
            return Status.OK
        with backend_errors("SISMEMBER marked countries"):
            try:
                member = self.connection.client.sismember(keys.MARKED_COUNTRIES_KEY, code)
            except ResponseError as e:
                logger.warning(f"Ignoring unreadable marked countries set: {e}")
                return Status.OK
        return Status.MARKED if member else Status.OK
