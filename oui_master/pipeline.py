"""Build pipeline: read every source, fold it into the master database, write outputs."""

import logging
import os
from typing import Callable, Iterator, List, NamedTuple, Optional

from .constants import (
    REGISTRY_CID, REGISTRY_IAB, REGISTRY_MAL, REGISTRY_MAM, REGISTRY_MAS,
    SOURCE_IEEE, SOURCE_NMAP, SOURCE_WIRESHARK,
)
from .merge import HistoricalDateIndex, MasterDatabase
from .output import write_outputs
from .sources import (
    RawRecord, parse_history, parse_name_table, parse_prefix_table,
    parse_registry_csv,
)

logger = logging.getLogger(__name__)

_HISTORY_FILE = "mac_tracker_history.json"


class SourceMissingError(RuntimeError):
    """A required input file is missing or unreadable."""

    def __init__(self, path: str, reason: str = "not found"):
        super().__init__(f"required source {reason}: {path}")
        self.path = path


class SourceSpec(NamedTuple):
    label: str
    filename: str
    tag: str
    stat_key: str
    parse: Callable[[str], Iterator[RawRecord]]
    required: bool = False


def _registry(default_registry: str) -> Callable[[str], Iterator[RawRecord]]:
    def parse(text: str) -> Iterator[RawRecord]:
        return parse_registry_csv(text, default_registry)
    return parse


# Processing order is significant: registries before community tables.
SOURCES: List[SourceSpec] = [
    SourceSpec("IEEE MA-L (OUI)", "ieee_mal.csv", SOURCE_IEEE, "ieee_mal",
               _registry(REGISTRY_MAL), required=True),
    SourceSpec("IEEE MA-M", "ieee_mam.csv", SOURCE_IEEE, "ieee_mam",
               _registry(REGISTRY_MAM)),
    SourceSpec("IEEE MA-S", "ieee_mas.csv", SOURCE_IEEE, "ieee_mas",
               _registry(REGISTRY_MAS)),
    SourceSpec("IEEE IAB", "ieee_iab.csv", SOURCE_IEEE, "ieee_iab",
               _registry(REGISTRY_IAB)),
    SourceSpec("IEEE CID", "ieee_cid.csv", SOURCE_IEEE, "ieee_cid",
               _registry(REGISTRY_CID)),
    SourceSpec("Wireshark manuf", "wireshark_manuf.txt", SOURCE_WIRESHARK,
               "wireshark", parse_name_table, required=True),
    SourceSpec("Nmap MAC prefixes", "nmap_prefixes.txt", SOURCE_NMAP,
               "nmap", parse_prefix_table, required=True),
]


def _read(path: str, required: bool) -> Optional[str]:
    if not os.path.exists(path):
        if required:
            raise SourceMissingError(path)
        return None
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            return f.read()
    except OSError as e:
        if required:
            raise SourceMissingError(path, f"unreadable ({e.strerror})") from e
        logger.warning("could not read optional source %s: %s", path, e)
        return None


def check_sources(sources_dir: str, specs: List[SourceSpec] = SOURCES):
    """Raise SourceMissingError for the first required file that is absent."""
    for spec in specs:
        path = os.path.join(sources_dir, spec.filename)
        if spec.required and not os.path.isfile(path):
            raise SourceMissingError(path)


def load_history(sources_dir: str) -> HistoricalDateIndex:
    """Load the registration-date index; an absent or broken file gives an empty index."""
    path = os.path.join(sources_dir, _HISTORY_FILE)
    text = _read(path, required=False)
    if text is None:
        logger.warning("history file not found: %s (continuing without dates)", path)
        return HistoricalDateIndex()
    try:
        return HistoricalDateIndex(parse_history(text))
    except ValueError as e:
        logger.warning("history file unparsable: %s (%s)", path, e)
        return HistoricalDateIndex()


def build_database(sources_dir: str, specs: List[SourceSpec] = SOURCES,
                   quiet: bool = False) -> MasterDatabase:
    """Fold every source, in order, into a new frozen master database."""
    check_sources(sources_dir, specs)

    history = load_history(sources_dir)
    if not quiet:
        print(f"[*] Historical registration dates: {len(history):,}")

    db = MasterDatabase(history)
    total = len(specs)
    for i, spec in enumerate(specs, start=1):
        path = os.path.join(sources_dir, spec.filename)
        text = _read(path, spec.required)
        if text is None:
            logger.warning("%s: %s not found, skipping", spec.label, path)
            if not quiet:
                print(f"[!] [{i}/{total}] {spec.label}: file not found, skipping")
            db.stats.count(spec.stat_key, 0)
            continue
        n = db.fold_all(spec.parse(text), spec.tag, spec.stat_key)
        if not quiet:
            print(f"[*] [{i}/{total}] {spec.label}: {n:,} entries parsed")
    return db.freeze()


def run(sources_dir: str, output_dir: str, quiet: bool = False) -> MasterDatabase:
    """Build the database and write every artifact.  Nothing is written on error."""
    db = build_database(sources_dir, quiet=quiet)
    sizes = write_outputs(db, output_dir)
    if not quiet:
        for name, size in sizes.items():
            print(f"[*] Wrote {os.path.join(output_dir, name)} ({size:,} bytes)")
        print(f"[*] Unique OUIs: {db.stats.unique:,}  Merged entries: {db.stats.merged:,}")
    return db
