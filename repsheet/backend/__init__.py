"""
Repsheet Redis Backend
======================

Connection handling, reputation flags and evidence collection on Redis.
Every store takes an explicit ``Connection``; open one per worker.
"""

from .connector import Connection, connect, connect_from_config, check_connection
from .reputation import ReputationStore, truncate_reason
from .evidence import EvidenceLedger

__all__ = [
    'Connection',
    'connect',
    'connect_from_config',
    'check_connection',
    'ReputationStore',
    'truncate_reason',
    'EvidenceLedger',
]
