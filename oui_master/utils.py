"""Key normalization and MAC helpers for oui-master."""

import re
from datetime import datetime, timezone
from typing import List, Optional

from .constants import _KEY_WIDTHS

_NON_HEX = re.compile(r"[^0-9A-Fa-f]")
_MAC_IN_TEXT = re.compile(
    r"(?<![0-9A-Fa-f])"
    r"(?:[0-9A-Fa-f]{2}(?::[0-9A-Fa-f]{2}){5}"
    r"|[0-9A-Fa-f]{2}(?:-[0-9A-Fa-f]{2}){5}"
    r"|[0-9A-Fa-f]{12})"
    r"(?![0-9A-Fa-f])"
)


def _timestamp() -> str:
    """Return ISO 8601 timestamp with timezone offset."""
    now = datetime.now(timezone.utc).astimezone()
    return now.strftime("%Y-%m-%dT%H:%M:%S%z")


def strip_hex(token: str) -> str:
    """Drop every non-hex character and upper-case the rest."""
    return _NON_HEX.sub("", token or "").upper()


def format_key(hex_digits: str) -> Optional[str]:
    """Format 6, 7 or 9 upper-case hex digits as a canonical key.

    ``AABBCC`` -> ``AA:BB:CC``, ``AABBCCD`` -> ``AA:BB:CC:D``,
    ``AABBCCDDE`` -> ``AA:BB:CC:DD:E``.  Any other length returns None.
    """
    n = len(hex_digits)
    if n not in _KEY_WIDTHS:
        return None
    octets = [hex_digits[i:i+2] for i in range(0, n - n % 2, 2)]
    if n % 2:
        octets.append(hex_digits[-1])
    return ":".join(octets)


def normalize_key(token: str) -> Optional[str]:
    """Canonicalize a raw hex prefix in any delimiter style.

    Returns None when the token does not hold exactly 6, 7 or 9 hex digits;
    the caller decides whether to skip the row or fall back.
    """
    return format_key(strip_hex(token))


def key_width(key: str) -> Optional[int]:
    """Return the block width in bits (24, 28 or 36) of a canonical key."""
    return _KEY_WIDTHS.get(len((key or "").replace(":", "")))


def lookup_key(mac: str) -> Optional[str]:
    """Resolve any MAC-like string to its 24-bit key (first 6 hex digits).

    Returns None when fewer than 6 hex digits are present.
    """
    clean = strip_hex(mac)
    if len(clean) < 6:
        return None
    return format_key(clean[:6])


def compact_key(key: str) -> str:
    """Return the 24-bit portion of a key without separators (``AABBCC``)."""
    return (key or "").replace(":", "")[:6]


def extract_macs(text: str) -> List[str]:
    """Return every MAC-shaped substring of ``text`` in order of appearance."""
    return _MAC_IN_TEXT.findall(text or "")


def _is_randomized_mac(mac: str) -> bool:
    """Return True if the MAC address is locally administered (randomized).

    Modern operating systems set the locally administered bit (bit 1 of the
    first octet) when randomizing WiFi MAC addresses.  Such addresses carry
    no registered OUI, so a lookup miss on them is expected.
    """
    clean = strip_hex(mac)
    if len(clean) < 2:
        return False
    return bool(int(clean[:2], 16) & 0x02)
