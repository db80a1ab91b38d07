"""Shared helpers: stores backed by an in-memory fakeredis server"""

import unittest

import fakeredis

from repsheet.backend import Connection, EvidenceLedger, ReputationStore


def fake_connection() -> Connection:
    return Connection(fakeredis.FakeRedis(decode_responses=True), "fakeredis", 6379)


class FakeRedisTestCase(unittest.TestCase):
    """Gives each test a fresh fake Redis, a ReputationStore and an EvidenceLedger"""

    def setUp(self):
        self.connection = fake_connection()
        self.redis = self.connection.client
        self.reputation = ReputationStore(self.connection)
        self.evidence = EvidenceLedger(self.connection)

    def tearDown(self):
        self.redis.flushall()
        self.connection.close()
