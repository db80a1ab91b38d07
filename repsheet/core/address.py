"""
Client address resolution

Picks the request's origin address from the direct peer address and the
``X-Forwarded-For`` header. The header is attacker-controlled: any hop, or
the client itself, can put arbitrary text in front of the address added by
the first trusted proxy.
"""

import ipaddress
import re
from typing import Optional

_TOKEN_SPLIT = re.compile(r'[,\s]+')


def is_valid_ipv4(token: str) -> bool:
    """Return True if ``token`` is exactly a dotted-quad IPv4 address.

    Each of the four components must be a decimal number in 0..255 with
    nothing attached. Leading zeros are rejected since they are ambiguous
    (octal in some parsers).
    """
    if not token or not token.isascii():
        return False
    if any(len(part) > 1 and part.startswith('0') for part in token.split('.')):
        return False
    try:
        ipaddress.IPv4Address(token)
        return True
    except ValueError:
        return False


def remote_address(direct_address: Optional[str],
                   forwarded_header: Optional[str]) -> Optional[str]:
    """Resolve the address to treat as the request origin.

    Without a forwarded header the direct address is returned verbatim
    (``None`` if that is absent too). With a header, the first token that is
    a valid IPv4 address wins; invalid tokens are skipped. If no token
    validates the result is ``None`` and the caller decides whether to fall
    back to ``direct_address``.
    """
    if forwarded_header is None or not forwarded_header.strip():
        return direct_address

    for token in _TOKEN_SPLIT.split(forwarded_header):
        if is_valid_ipv4(token):
            return token

    return None
