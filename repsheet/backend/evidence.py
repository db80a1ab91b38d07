"""
Evidence Ledger
===============

Rule-trigger counters and bounded request history per actor.
"""

import logging
from typing import Dict, List, Optional

from redis.exceptions import ResponseError

from . import keys
from .connector import Connection
from .reputation import ReputationStore, KindLike
from ..core.exceptions import ValidationError, backend_errors
from ..core.models import ActorKind, ActorReport, RequestRecord

logger = logging.getLogger(__name__)


class EvidenceLedger:
    """Evidence collection on top of an open connection"""

    def __init__(self, connection: Connection):
        self.connection = connection

    def increment_rule_count(self, actor: str, rule: str) -> int:
        """Count one more trigger of ``rule`` for ``actor``; returns the new count"""
        with backend_errors(f"ZINCRBY {actor} {rule}"):
            score = self.connection.client.zincrby(keys.detected_key(actor), 1, rule)
        logger.debug(f"Rule {rule} triggered by {actor} ({int(score)} times)")
        return int(score)

    def rule_counts(self, actor: str) -> Dict[str, int]:
        """Trigger counts for ``actor``, most triggered first"""
        key = keys.detected_key(actor)
        with backend_errors(f"ZREVRANGE {key}"):
            try:
                entries = self.connection.client.zrevrange(key, 0, -1, withscores=True)
            except ResponseError as e:
                logger.warning(f"Ignoring unreadable rule counts at {key}: {e}")
                return {}
        return {rule: int(score) for rule, score in entries}

    def record_request(self, actor: str, record: RequestRecord, max_length: int, ttl: int = 0) -> None:
        """Prepend ``record`` to the actor's history and trim it to ``max_length``.

        The whole list gets ``ttl`` seconds to live when ``ttl`` is positive;
        otherwise it is only bounded by length. Push, trim and expire run in
        one MULTI/EXEC block so readers never see more than ``max_length``
        entries.
        """
        if max_length < 1:
            raise ValidationError(f"max_length must be at least 1, got {max_length}")

        key = keys.requests_key(actor)
        with backend_errors(f"record request for {actor}"):
            pipe = self.connection.client.pipeline(transaction=True)
            pipe.lpush(key, record.to_log_line())
            pipe.ltrim(key, 0, max_length - 1)
            if ttl > 0:
                pipe.expire(key, ttl)
            pipe.execute()

    def recent_requests(self, actor: str, limit: Optional[int] = None) -> List[RequestRecord]:
        """History entries for ``actor``, newest first"""
        if limit is not None and limit < 1:
            return []
        end = -1 if limit is None else limit - 1
        key = keys.requests_key(actor)
        with backend_errors(f"LRANGE {key}"):
            try:
                lines = self.connection.client.lrange(key, 0, end)
            except ResponseError as e:
                logger.warning(f"Ignoring unreadable request history at {key}: {e}")
                return []
        return [RequestRecord.from_log_line(line) for line in lines]

    def report(self, reputation: ReputationStore, kind: KindLike, actor: str,
               limit: Optional[int] = None) -> ActorReport:
        """Collect status, rule counts and recent requests for one actor"""
        resolved = ActorKind.coerce(kind)
        if resolved is None:
            raise ValidationError(f"Unsupported actor kind: {kind!r}")
        status, reason = reputation.actor_status(resolved, actor)
        return ActorReport(
            kind=resolved,
            actor=actor,
            status=status,
            reason=reason,
            rule_counts=self.rule_counts(actor),
            recent_requests=self.recent_requests(actor, limit),
        )
