"""Unit tests for the evidence ledger"""

import sys
import unittest
from pathlib import Path
from unittest.mock import MagicMock

sys.path.insert(0, str(Path(__file__).parent.parent))

from redis.exceptions import TimeoutError as RedisTimeoutError

from repsheet.backend import Connection, EvidenceLedger
from repsheet.core.exceptions import BackendUnavailableError, ValidationError
from repsheet.core.models import ActorKind, RequestRecord, Status

from fake_backend import FakeRedisTestCase


class TestRuleCounts(FakeRedisTestCase):

    def test_increment_rule_count(self):
        count = self.evidence.increment_rule_count("1.1.1.1", "950001")

        self.assertEqual(count, 1)
        self.assertEqual(self.redis.zrange("1.1.1.1:detected", 0, -1), ["950001"])

    def test_counts_accumulate_per_rule(self):
        for rule in ("950001", "950001", "950001", "981176"):
            self.evidence.increment_rule_count("1.1.1.1", rule)

        self.assertEqual(self.evidence.rule_counts("1.1.1.1"), {"950001": 3, "981176": 1})
        self.assertEqual(list(self.evidence.rule_counts("1.1.1.1")), ["950001", "981176"])
        self.assertEqual(self.redis.ttl("1.1.1.1:detected"), -1)

    def test_no_counts(self):
        self.assertEqual(self.evidence.rule_counts("9.9.9.9"), {})

    def test_wrong_type_reads_as_no_counts(self):
        self.redis.set("1.1.1.1:detected", "corrupt")

        self.assertEqual(self.evidence.rule_counts("1.1.1.1"), {})


class TestRequestHistory(FakeRedisTestCase):

    def test_record_request_serializes_missing_fields(self):
        self.evidence.record_request("1.1.1.1", RequestRecord(timestamp="1000", method="GET", uri="/"), 10)

        self.assertEqual(self.redis.lrange("1.1.1.1:requests", 0, -1), ["1000, -, GET, /, -"])

    def test_history_is_bounded_newest_first(self):
        max_length = 5
        for i in range(max_length + 3):
            self.evidence.record_request("1.1.1.1", RequestRecord(timestamp=str(i)), max_length)

        stored = self.redis.lrange("1.1.1.1:requests", 0, -1)
        self.assertEqual(len(stored), max_length)
        self.assertEqual([RequestRecord.from_log_line(line).timestamp for line in stored],
                         ["7", "6", "5", "4", "3"])

    def test_ttl_applied_only_when_positive(self):
        test_cases = [(300, 300), (0, -1), (-10, -1)]

        for ttl, expected in test_cases:
            with self.subTest(ttl=ttl):
                actor = f"ttl-{ttl}"
                self.evidence.record_request(actor, RequestRecord(timestamp="1"), 10, ttl)
                self.assertEqual(self.redis.ttl(f"{actor}:requests"), expected)

    def test_wrong_type_reads_as_no_history(self):
        self.redis.set("1.1.1.1:requests", "corrupt")

        self.assertEqual(self.evidence.recent_requests("1.1.1.1"), [])

    def test_rejects_empty_bound(self):
        with self.assertRaises(ValidationError):
            self.evidence.record_request("1.1.1.1", RequestRecord(), 0)
        self.assertFalse(self.redis.exists("1.1.1.1:requests"))

    def test_recent_requests(self):
        ua = "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko)"
        self.evidence.record_request("1.1.1.1", RequestRecord("1", ua, "GET", "/a", "q=1"), 10)
        self.evidence.record_request("1.1.1.1", RequestRecord("2", None, "POST", "/b", None), 10)

        recent = self.evidence.recent_requests("1.1.1.1")
        self.assertEqual(recent, [
            RequestRecord("2", None, "POST", "/b", None),
            RequestRecord("1", ua, "GET", "/a", "q=1"),
        ])
        self.assertEqual(len(self.evidence.recent_requests("1.1.1.1", limit=1)), 1)
        self.assertEqual(self.evidence.recent_requests("1.1.1.1", limit=0), [])


class TestReport(FakeRedisTestCase):

    def test_report(self):
        self.reputation.mark_actor(ActorKind.IP, "1.1.1.1", "scanner")
        self.evidence.increment_rule_count("1.1.1.1", "950001")
        self.evidence.record_request("1.1.1.1", RequestRecord(timestamp="1", uri="/wp-admin"), 10)

        report = self.evidence.report(self.reputation, "ip", "1.1.1.1")

        self.assertEqual(report.kind, ActorKind.IP)
        self.assertEqual(report.status, Status.MARKED)
        self.assertEqual(report.reason, "scanner")
        self.assertEqual(report.rule_counts, {"950001": 1})
        self.assertEqual(report.recent_requests[0].uri, "/wp-admin")

    def test_report_rejects_unsupported_kind(self):
        with self.assertRaises(ValidationError):
            self.evidence.report(self.reputation, "country", "KP")


class TestEvidenceBackendFailures(unittest.TestCase):

    def test_timeout_propagates(self):
        client = MagicMock()
        client.zincrby.side_effect = RedisTimeoutError("Timeout reading from socket")
        ledger = EvidenceLedger(Connection(client))

        with self.assertRaises(BackendUnavailableError):
            ledger.increment_rule_count("1.1.1.1", "950001")


if __name__ == '__main__':
    unittest.main()
