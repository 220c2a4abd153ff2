"""Merge engine: folds parsed source records into the master OUI database.

Sources are folded one at a time in priority order (IEEE registries first,
then the Wireshark name table, then the Nmap prefix table).  Field
precedence is "first writer wins" with two exceptions: a long-form name from
the name table replaces the manufacturer, and the source list grows with
every new contributor.  Because of this, changing the source order changes
the merged result.
"""

from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Optional, Pattern, Sequence, Tuple

from .classify import PatternTable, classify_device_type, extract_country
from .constants import COUNTRY_PATTERNS, DEVICE_TYPE_PATTERNS, REGISTRY_MAL
from .sources import RawRecord


class HistoricalDateIndex:
    """Read-only map of canonical key -> earliest known registration date.

    Built from ``(key, date)`` pairs; the first pair seen for a key wins.
    """

    def __init__(self, pairs: Iterable[Tuple[str, str]] = ()):
        dates: Dict[str, str] = {}
        for key, date in pairs:
            dates.setdefault(key, date)
        self._dates = MappingProxyType(dates)

    def get(self, key: str) -> Optional[str]:
        return self._dates.get(key)

    def __contains__(self, key: str) -> bool:
        return key in self._dates

    def __len__(self) -> int:
        return len(self._dates)


class Record:
    """One consolidated address block in the master database."""

    __slots__ = (
        "key", "manufacturer", "registry", "short_name", "device_type",
        "address", "country", "registered_date", "sources",
    )

    def __init__(self, key: str, manufacturer: str, registry: str = REGISTRY_MAL,
                 short_name: Optional[str] = None, device_type: Optional[str] = None,
                 address: Optional[str] = None, country: Optional[str] = None,
                 registered_date: Optional[str] = None,
                 sources: Optional[List[str]] = None):
        self.key = key
        self.manufacturer = manufacturer
        self.registry = registry
        self.short_name = short_name
        self.device_type = device_type
        self.address = address
        self.country = country
        self.registered_date = registered_date
        self.sources: List[str] = []
        for tag in sources or ():
            self.add_source(tag)

    def add_source(self, tag: str) -> bool:
        """Append a provenance tag unless already present.  Returns True if added."""
        if tag in self.sources:
            return False
        self.sources.append(tag)
        return True

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready view keyed like the published database entries."""
        return {
            "manufacturer": self.manufacturer,
            "registry": self.registry,
            "short_name": self.short_name,
            "device_type": self.device_type,
            "registered_date": self.registered_date,
            "address": self.address,
            "country": self.country,
            "sources": list(self.sources),
        }

    def __repr__(self) -> str:
        return f"Record({self.key!r}, {self.manufacturer!r}, sources={self.sources!r})"


class MergeStats:
    """Per-source row counts plus merge totals for the statistics report."""

    def __init__(self):
        self.sources: Dict[str, int] = {}
        self.merged = 0
        self.mac_tracker = 0
        self.unique = 0

    def count(self, stat_key: str, n: int = 1):
        self.sources[stat_key] = self.sources.get(stat_key, 0) + n

    def get(self, stat_key: str) -> int:
        return self.sources.get(stat_key, 0)

    def as_dict(self) -> Dict[str, int]:
        out = dict(self.sources)
        out.update(merged=self.merged, mac_tracker=self.mac_tracker, unique=self.unique)
        return out


class MasterDatabase:
    """Mapping of canonical key -> :class:`Record`, built by folding sources.

    Once :meth:`freeze` has been called the database rejects further folds;
    serializers and lookups only read it.
    """

    def __init__(self, history: Optional[HistoricalDateIndex] = None,
                 device_patterns: PatternTable = DEVICE_TYPE_PATTERNS,
                 country_patterns: Sequence[Pattern] = COUNTRY_PATTERNS):
        self._records: Dict[str, Record] = {}
        self._history = history if history is not None else HistoricalDateIndex()
        self._device_patterns = device_patterns
        self._country_patterns = country_patterns
        self._frozen = False
        self.stats = MergeStats()
        self.stats.mac_tracker = len(self._history)

    # -- mapping interface -------------------------------------------------

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, key: str) -> bool:
        return key in self._records

    def __iter__(self) -> Iterator[str]:
        return iter(self._records)

    def __getitem__(self, key: str) -> Record:
        return self._records[key]

    def get(self, key: str) -> Optional[Record]:
        return self._records.get(key)

    def items(self):
        return self._records.items()

    def values(self):
        return self._records.values()

    @property
    def frozen(self) -> bool:
        return self._frozen

    # -- merging -----------------------------------------------------------

    def _classify(self, raw: RawRecord) -> Optional[str]:
        return classify_device_type(raw.manufacturer, raw.short_name,
                                    self._device_patterns)

    def _country(self, address: Optional[str]) -> Optional[str]:
        return extract_country(address, self._country_patterns)

    def fold(self, raw: RawRecord, source: str) -> Record:
        """Create or update the record for ``raw.key`` and return it."""
        if self._frozen:
            raise RuntimeError("master database is frozen")

        existing = self._records.get(raw.key)
        if existing is None:
            rec = Record(
                key=raw.key,
                manufacturer=raw.manufacturer,
                registry=raw.registry or REGISTRY_MAL,
                short_name=raw.short_name,
                device_type=self._classify(raw),
                address=raw.address,
                country=self._country(raw.address),
                registered_date=self._history.get(raw.key) or raw.registered_date,
                sources=[source],
            )
            self._records[raw.key] = rec
            self.stats.unique = len(self._records)
            return rec

        existing.add_source(source)
        if raw.long_name:
            existing.manufacturer = raw.manufacturer
        if not existing.short_name and raw.short_name:
            existing.short_name = raw.short_name
        if not existing.device_type:
            existing.device_type = self._classify(raw)
        if not existing.address and raw.address:
            existing.address = raw.address
            existing.country = self._country(raw.address)
        self.stats.merged += 1
        return existing

    def fold_all(self, records: Iterable[RawRecord], source: str,
                 stat_key: Optional[str] = None) -> int:
        """Fold a whole parser stream; returns the number of rows folded."""
        n = 0
        for raw in records:
            self.fold(raw, source)
            n += 1
        self.stats.count(stat_key or source.lower(), n)
        return n

    def freeze(self) -> "MasterDatabase":
        self._frozen = True
        self.stats.unique = len(self._records)
        return self

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Return ``{key: entry}`` in insertion order."""
        return {key: rec.to_dict() for key, rec in self._records.items()}
