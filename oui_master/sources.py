"""Source parsers for the registry and community OUI datasets.

Every parser is a generator over the text of one input file.  Rows are parsed
one at a time by a ``_parse_*`` helper that returns None for a row it cannot
use; the generator skips those rows and keeps going, so a corrupt line costs
one entry and never the whole source.
"""

import csv
import json
import logging
import re
from typing import Iterator, NamedTuple, Optional, Tuple

from .constants import REGISTRY_MAL
from .utils import format_key, normalize_key, strip_hex

logger = logging.getLogger(__name__)

_SIX_HEX = re.compile(r"[0-9A-F]{6}")
_WHITESPACE = re.compile(r"\s+")
_HISTORY_WIDTHS = (24, 28, 36)


class RawRecord(NamedTuple):
    """One row as reported by a single source, before merging.

    ``long_name`` marks a manufacturer taken from the long-name column of the
    name table; the merge engine lets it supersede an existing name.
    """
    key: str
    manufacturer: str
    registry: Optional[str] = None
    short_name: Optional[str] = None
    address: Optional[str] = None
    registered_date: Optional[str] = None
    long_name: bool = False


def _content_lines(text: str) -> Iterator[str]:
    """Yield stripped, non-blank, non-comment lines."""
    for line in (text or "").splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith("#"):
            yield stripped


def _clean_org_name(name: str) -> str:
    name = _WHITESPACE.sub(" ", name).strip()
    if name.endswith(","):
        name = name[:-1].rstrip()
    return name


# ---------------------------------------------------------------------------
# IEEE registry CSV
# ---------------------------------------------------------------------------

def _parse_registry_line(line: str, default_registry: str) -> Optional[RawRecord]:
    """Parse ``Registry,Assignment,Organization Name,Organization Address``."""
    try:
        fields = next(csv.reader([line]))
    except (csv.Error, StopIteration):
        return None
    if len(fields) < 4:
        return None

    registry = fields[0].strip() or default_registry
    assignment = fields[1].strip().replace('"', "").upper()
    org_name = _clean_org_name(fields[2])
    address = fields[3].strip()
    if not assignment or not org_name:
        return None

    # Unrecognized widths keep the raw assignment as their key
    key = normalize_key(assignment) or assignment
    return RawRecord(
        key=key,
        manufacturer=org_name,
        registry=registry,
        address=address or None,
    )


def parse_registry_csv(text: str, default_registry: str = REGISTRY_MAL) -> Iterator[RawRecord]:
    """Yield records from an IEEE registry CSV export (header row skipped)."""
    lines = (text or "").splitlines()
    for lineno, line in enumerate(lines[1:], start=2):
        line = line.strip()
        if not line:
            continue
        rec = _parse_registry_line(line, default_registry)
        if rec is None:
            logger.debug("registry csv: skipped line %d: %r", lineno, line[:80])
            continue
        yield rec


# ---------------------------------------------------------------------------
# Name table (tab-delimited: prefix, short name, long name # comment)
# ---------------------------------------------------------------------------

def _name_table_key(token: str) -> Optional[str]:
    """Normalize a name-table prefix, honouring an optional ``/bits`` suffix."""
    if "/" in token:
        hex_part, _, bits = token.partition("/")
        try:
            width = int(bits)
        except ValueError:
            return None
        return format_key(strip_hex(hex_part)[:width // 4])
    return normalize_key(token)


def _parse_name_table_line(line: str) -> Optional[RawRecord]:
    parts = line.split("\t")
    if len(parts) < 2:
        return None

    key = _name_table_key(parts[0].strip())
    if key is None:
        return None
    short_name = parts[1].strip()
    long_name = parts[2].split("#")[0].strip() if len(parts) > 2 else ""
    manufacturer = long_name or short_name
    if not manufacturer:
        return None
    return RawRecord(
        key=key,
        manufacturer=manufacturer,
        short_name=short_name or None,
        long_name=bool(long_name),
    )


def parse_name_table(text: str) -> Iterator[RawRecord]:
    """Yield records from a Wireshark-style ``manuf`` file."""
    for line in _content_lines(text):
        rec = _parse_name_table_line(line)
        if rec is None:
            logger.debug("name table: skipped line %r", line[:80])
            continue
        yield rec


# ---------------------------------------------------------------------------
# Prefix table (space-delimited: 6-hex prefix, manufacturer)
# ---------------------------------------------------------------------------

def _parse_prefix_line(line: str) -> Optional[RawRecord]:
    parts = line.split(None, 1)
    if len(parts) < 2:
        return None
    prefix = parts[0].strip().upper()
    manufacturer = parts[1].strip()
    if not manufacturer:
        return None
    # Only exact 6-digit prefixes are formatted; anything else passes through
    key = format_key(prefix) if _SIX_HEX.fullmatch(prefix) else prefix
    return RawRecord(key=key, manufacturer=manufacturer)


def parse_prefix_table(text: str) -> Iterator[RawRecord]:
    """Yield records from an Nmap-style ``nmap-mac-prefixes`` file."""
    for line in _content_lines(text):
        rec = _parse_prefix_line(line)
        if rec is None:
            logger.debug("prefix table: skipped line %r", line[:80])
            continue
        yield rec


# ---------------------------------------------------------------------------
# Historical registration dates (JSON keyed by "<hex>/<bits>")
# ---------------------------------------------------------------------------

def _parse_history_entry(native_key: str, events) -> Optional[Tuple[str, str]]:
    hex_part, _, bits = str(native_key).partition("/")
    try:
        width = int(bits) if bits else 24
    except ValueError:
        return None
    if width not in _HISTORY_WIDTHS:
        return None
    key = format_key(strip_hex(hex_part)[:width // 4])
    if key is None or not isinstance(events, list):
        return None

    first_add = next(
        (ev for ev in events if isinstance(ev, dict) and ev.get("t") == "add"),
        None,
    )
    if first_add is None or not first_add.get("d"):
        return None
    return key, str(first_add["d"])


def parse_history(text: str) -> Iterator[Tuple[str, str]]:
    """Yield ``(canonical key, registration date)`` pairs from history JSON.

    Raises ValueError when the document itself is not a JSON object; bad
    individual entries are skipped.
    """
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("history document must be a JSON object")
    for native_key, events in data.items():
        entry = _parse_history_entry(native_key, events)
        if entry is None:
            logger.debug("history: skipped entry %r", native_key)
            continue
        yield entry
