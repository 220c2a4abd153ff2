"""OUI lookup against a published master database snapshot."""

import json
import os
import threading
from collections import Counter
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from .constants import (
    UNKNOWN_MANUFACTURER, _DEFAULT_DB_FILE, _DEFAULT_OUTPUT_DIR,
)
from .utils import _is_randomized_mac, extract_macs, lookup_key, normalize_key

_DEFAULT_DB_PATH = os.path.join(_DEFAULT_OUTPUT_DIR, _DEFAULT_DB_FILE)


class DatabaseNotFoundError(RuntimeError):
    """The published database file does not exist."""


def _freeze(entry: Mapping[str, Any]) -> Mapping[str, Any]:
    return MappingProxyType({
        k: tuple(v) if isinstance(v, list) else v for k, v in entry.items()
    })


def _thaw(entry: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: list(v) if isinstance(v, tuple) else v for k, v in entry.items()}


class OuiDatabase:
    """Immutable, read-only view of a published ``master_oui.min.json``.

    Entries are frozen on construction and every accessor hands out a fresh
    copy, so the snapshot is safe to share between threads.  To refresh,
    load a new instance and swap the reference.
    """

    def __init__(self, entries: Mapping[str, Mapping[str, Any]], path: Optional[str] = None):
        self._entries = MappingProxyType(
            {key: _freeze(entry) for key, entry in entries.items()})
        self.path = path

    @classmethod
    def load(cls, path: str = _DEFAULT_DB_PATH) -> "OuiDatabase":
        if not os.path.exists(path):
            raise DatabaseNotFoundError(f"database not found: {path}")
        with open(path, encoding="utf-8") as f:
            entries = json.load(f)
        if not isinstance(entries, dict) or not all(
                isinstance(v, dict) for v in entries.values()):
            raise ValueError(f"{path}: expected a JSON object of entries keyed by OUI")
        return cls(entries, path)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def get(self, key: str) -> Optional[Dict[str, Any]]:
        entry = self._entries.get(key)
        return _thaw(entry) if entry is not None else None

    def _resolve(self, mac: str) -> Optional[str]:
        # Stored keys win as written, so pass-through keys stay reachable
        raw = (mac or "").strip().upper()
        if raw in self._entries:
            return raw
        exact = normalize_key(mac)
        if exact in self._entries:
            return exact
        return lookup_key(mac)

    def lookup(self, mac: str) -> Dict[str, Any]:
        """Resolve a MAC (any delimiter style) to its manufacturer.

        An input that is itself a stored key (canonical 28/36-bit blocks, or
        keys a source passed through unnormalized) is matched exactly;
        everything else resolves by its first 6 hex digits.  The result
        ``status`` is ``found``, ``unknown`` or ``invalid``.
        """
        key = self._resolve(mac)
        if key is None:
            return {
                "status": "invalid",
                "mac": mac,
                "oui": None,
                "manufacturer": None,
                "error": "Invalid MAC address format",
            }

        entry = self._entries.get(key)
        randomized = _is_randomized_mac(mac)
        if entry is None:
            return {
                "status": "unknown",
                "mac": mac,
                "oui": key,
                "manufacturer": UNKNOWN_MANUFACTURER,
                "error": "OUI not found",
                "randomized": randomized,
            }
        result = {"status": "found", "mac": mac, "oui": key, "randomized": randomized}
        result.update(_thaw(entry))
        return result

    def search(self, term: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Case-insensitive substring search over manufacturer and short name."""
        needle = (term or "").lower()
        if not needle:
            return []
        results = []
        for key, entry in self._entries.items():
            manufacturer = (entry.get("manufacturer") or "").lower()
            short_name = (entry.get("short_name") or "").lower()
            if needle in manufacturer or needle in short_name:
                results.append({"oui": key, **_thaw(entry)})
                if limit is not None and len(results) >= limit:
                    break
        return results

    def lookup_text(self, text: str) -> List[Dict[str, Any]]:
        """Look up every MAC-shaped substring found in ``text``."""
        return [self.lookup(mac) for mac in extract_macs(text)]

    def stats(self) -> Dict[str, Any]:
        by_type: Counter = Counter()
        by_country: Counter = Counter()
        by_registry: Counter = Counter()
        with_date = 0
        for entry in self._entries.values():
            by_type[entry.get("device_type") or "Unclassified"] += 1
            if entry.get("country"):
                by_country[entry["country"]] += 1
            if entry.get("registry"):
                by_registry[entry["registry"]] += 1
            if entry.get("registered_date"):
                with_date += 1
        return {
            "total": len(self._entries),
            "with_date": with_date,
            "by_device_type": dict(by_type.most_common()),
            "by_country": dict(by_country.most_common()),
            "by_registry": dict(by_registry.most_common()),
        }




# ---------------------------------------------------------------------------
# Shared snapshot
# ---------------------------------------------------------------------------

class SharedDatabase:
    """Holds the current snapshot; reload loads a new one and swaps the reference.

    Readers that already hold the previous snapshot keep a valid view.
    """

    def __init__(self, path: Optional[str] = None, db: Optional[OuiDatabase] = None):
        self._path = path or (db.path if db is not None else None)
        self._db = db
        self._lock = threading.Lock()

    @property
    def path(self) -> Optional[str]:
        return self._path

    def get(self, path: Optional[str] = None) -> OuiDatabase:
        """Return the current snapshot, loading it on first use."""
        db = self._db
        if db is None:
            with self._lock:
                if self._db is None:
                    self._path = path or self._path or _DEFAULT_DB_PATH
                    self._db = OuiDatabase.load(self._path)
                db = self._db
        return db

    def reload(self, path: Optional[str] = None) -> OuiDatabase:
        source = path or self._path
        if source is None:
            raise DatabaseNotFoundError("no database file to reload from")
        fresh = OuiDatabase.load(source)
        with self._lock:
            self._db = fresh
            self._path = source
        return fresh


_shared = SharedDatabase(_DEFAULT_DB_PATH)


def get_database(path: Optional[str] = None) -> OuiDatabase:
    """Return the process-wide snapshot, loading it on first use."""
    return _shared.get(path)


def reload_database(path: Optional[str] = None) -> OuiDatabase:
    """Load a fresh process-wide snapshot and swap it in."""
    return _shared.reload(path)


def get_oui_vendor(mac: str) -> Optional[str]:
    """Look up the manufacturer name for a MAC address, or None if unknown."""
    result = get_database().lookup(mac or "")
    if result["status"] != "found":
        return None
    return result.get("manufacturer")
