"""Unit tests for origin address resolution"""

import sys
import unittest
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from repsheet.core.address import is_valid_ipv4, remote_address


class TestRemoteAddress(unittest.TestCase):
    """Standard headers"""

    def test_returns_none_when_headers_are_none(self):
        self.assertIsNone(remote_address(None, None))

    def test_processes_a_single_address(self):
        self.assertEqual(remote_address("192.168.1.100", None), "192.168.1.100")

    def test_direct_address_is_returned_verbatim(self):
        self.assertEqual(remote_address("not-validated", None), "not-validated")

    def test_blank_header_counts_as_absent(self):
        self.assertEqual(remote_address("10.0.0.1", "   "), "10.0.0.1")
        self.assertEqual(remote_address("10.0.0.1", ""), "10.0.0.1")

    def test_extracts_only_the_first_ip_address(self):
        self.assertEqual(
            remote_address("1.1.1.1", "8.8.8.8 12.34.56.78, 212.23.230.15"), "8.8.8.8"
        )

    def test_header_without_direct_address(self):
        self.assertEqual(remote_address(None, "8.8.4.4, 10.0.0.1"), "8.8.4.4")


class TestMaliciousForwardedHeaders(unittest.TestCase):
    """Attacker-supplied noise in front of the real address"""

    def test_ignores_user_generated_noise(self):
        test_cases = [
            ("\x5000 8.8.8.8, 12.23.45.67", "8.8.8.8"),
            ("\\x5000 8.8.8.8, 12.23.45.67", "8.8.8.8"),
            ("This is not an IP address 8.8.8.8, 12.23.45.67", "8.8.8.8"),
            ("999.999.999.999, 8.8.8.8, 12.23.45.67", "8.8.8.8"),
            ("8.8.8.8;, 9.9.9.9", "9.9.9.9"),
            ("1.2.3, 1.2.3.4.5, 4.4.4.4", "4.4.4.4"),
        ]

        for header, expected in test_cases:
            with self.subTest(header=header):
                self.assertEqual(remote_address("1.1.1.1", header), expected)

    def test_no_valid_token_yields_none(self):
        for header in ["garbage", "999.1.1.1", "unknown, ::1"]:
            with self.subTest(header=header):
                self.assertIsNone(remote_address("1.1.1.1", header))


class TestIsValidIPv4(unittest.TestCase):

    def test_validation(self):
        test_cases = [
            ("8.8.8.8", True),
            ("0.0.0.0", True),
            ("255.255.255.255", True),
            ("256.1.1.1", False),
            ("1.1.1", False),
            ("1.1.1.1 ", False),
            ("a.b.c.d", False),
            ("01.2.3.4", False),
            ("1.2.3.010", False),
            ("10.0.100.0", True),
            ("-1.2.3.4", False),
            ("١.1.1.1", False),  # Arabic-Indic digit
            ("", False),
        ]

        for token, expected in test_cases:
            with self.subTest(token=token):
                self.assertEqual(is_valid_ipv4(token), expected)


if __name__ == '__main__':
    unittest.main()
