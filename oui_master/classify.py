"""Heuristic device-type classification and country extraction for oui-master.

Both functions are pure: they walk an ordered, read-only pattern table and
return the first hit.  The tables default to the ones in ``constants`` and
can be swapped per call (the merge engine is handed its tables explicitly).
"""

from typing import Dict, Optional, Pattern, Sequence, Tuple

from .constants import (
    COUNTRY_ALIASES, COUNTRY_PATTERNS, DEVICE_TYPE_PATTERNS,
    _COUNTRY_CN_POSTAL, _COUNTRY_POSTAL_FALLBACK, _COUNTRY_TRAILING_CODE,
    _COUNTRY_US_POSTAL,
)

PatternTable = Sequence[Tuple[str, Sequence[Pattern]]]


def classify_device_type(manufacturer: Optional[str],
                         short_name: Optional[str] = None,
                         patterns: PatternTable = DEVICE_TYPE_PATTERNS) -> Optional[str]:
    """Return the first device category whose patterns match, else None.

    The manufacturer and short name are joined with a space and matched
    case-insensitively.  Categories are tried in table order and, within a
    category, patterns in list order.
    """
    if not manufacturer:
        return None
    haystack = f"{manufacturer} {short_name or ''}"
    for label, rules in patterns:
        for rule in rules:
            if rule.search(haystack):
                return label
    return None


def extract_country(address: Optional[str],
                    patterns: Sequence[Pattern] = COUNTRY_PATTERNS,
                    aliases: Dict[str, str] = COUNTRY_ALIASES) -> Optional[str]:
    """Best-effort 2-letter country code from a free-text postal address."""
    if not address:
        return None

    for pattern in patterns:
        m = pattern.search(address)
        if m:
            code = m.group(1).upper()
            if len(code) > 2:
                code = aliases.get(code.lower(), code[:2])
            return code

    m = _COUNTRY_POSTAL_FALLBACK.search(address)
    if m:
        return m.group(1)
    if _COUNTRY_US_POSTAL.search(address):
        return "US"
    if _COUNTRY_CN_POSTAL.search(address):
        return "CN"
    m = _COUNTRY_TRAILING_CODE.search(address)
    if m:
        return m.group(1)
    return None
