"""Serialization of the master database and console output for oui-master."""

import json
import os
import sqlite3
import xml.etree.ElementTree as ET
from typing import Any, Dict, Iterable, List, Optional

from .constants import (
    _CSV_HEADER, _OUT_CSV, _OUT_JSON, _OUT_JSON_MIN, _OUT_SQL, _OUT_SQLITE,
    _OUT_STATS, _OUT_TSV, _OUT_TXT, _OUT_XML, _SQL_BATCH_SIZE, _SQL_COLUMNS,
    _TSV_FIELDS,
)
from .merge import MasterDatabase, MergeStats, Record
from .utils import _timestamp, compact_key


# ---------------------------------------------------------------------------
# Text formats
# ---------------------------------------------------------------------------

def _sources(rec: Record, sep: str = "+") -> str:
    return sep.join(rec.sources)


def render_csv(db: MasterDatabase) -> str:
    """CSV with manufacturer and address always double-quoted."""
    lines = [_CSV_HEADER]
    for key, rec in db.items():
        manufacturer = rec.manufacturer.replace('"', '""')
        address = (rec.address or "").replace('"', '""')
        lines.append(
            f'{key},"{manufacturer}",{rec.registry},{rec.short_name or ""},'
            f'{rec.device_type or ""},{rec.registered_date or ""},'
            f'"{address}",{_sources(rec)}'
        )
    return "\n".join(lines)


def render_json(db: MasterDatabase, pretty: bool = True) -> str:
    if pretty:
        return json.dumps(db.to_dict(), indent=2, ensure_ascii=False)
    return json.dumps(db.to_dict(), separators=(",", ":"), ensure_ascii=False)


def render_tsv(db: MasterDatabase) -> str:
    lines = ["\t".join(_TSV_FIELDS)]
    for key, rec in db.items():
        lines.append("\t".join([
            key, rec.manufacturer, rec.registry, rec.short_name or "",
            rec.registered_date or "", _sources(rec),
        ]))
    return "\n".join(lines)


def render_txt(db: MasterDatabase, generated: Optional[str] = None) -> str:
    """Plain ``AABBCC<tab>Manufacturer`` lines for grep/awk."""
    lines = [
        "# OUI Master Database - Simple Format",
        f"# Generated: {generated or _timestamp()}",
        f"# Total Entries: {len(db)}",
        "# Format: OUI<tab>Manufacturer",
        "#",
    ]
    for key, rec in db.items():
        lines.append(f"{compact_key(key)}\t{rec.manufacturer}")
    return "\n".join(lines)


def render_xml(db: MasterDatabase, generated: Optional[str] = None) -> str:
    root = ET.Element("oui_database")
    for key, rec in db.items():
        entry = ET.SubElement(root, "entry")
        fields = [
            ("oui", key),
            ("manufacturer", rec.manufacturer),
            ("registry", rec.registry),
            ("short_name", rec.short_name),
            ("device_type", rec.device_type),
            ("registered_date", rec.registered_date),
            ("country", rec.country),
            ("sources", _sources(rec, ",")),
        ]
        for tag, value in fields:
            if value:
                ET.SubElement(entry, tag).text = value
    ET.indent(root, space="  ")

    header = [
        '<?xml version="1.0" encoding="UTF-8"?>',
        "<!-- OUI Master Database -->",
        f"<!-- Generated: {generated or _timestamp()} -->",
        f"<!-- Total Entries: {len(db)} -->",
    ]
    return "\n".join(header) + "\n" + ET.tostring(root, encoding="unicode")


# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_CREATE_TABLE = """CREATE TABLE IF NOT EXISTS oui_registry (
  oui TEXT PRIMARY KEY,
  manufacturer TEXT NOT NULL,
  registry TEXT,
  short_name TEXT,
  device_type TEXT,
  registered_date TEXT,
  address TEXT,
  sources TEXT,
  last_updated TEXT DEFAULT CURRENT_TIMESTAMP
);"""
_CREATE_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_oui_manufacturer ON oui_registry(manufacturer);",
    "CREATE INDEX IF NOT EXISTS idx_oui_short_name ON oui_registry(short_name);",
    "CREATE INDEX IF NOT EXISTS idx_oui_registry ON oui_registry(registry);",
    "CREATE INDEX IF NOT EXISTS idx_oui_registered_date ON oui_registry(registered_date);",
]


def _sql_str(value: Optional[str]) -> str:
    if value is None:
        return "NULL"
    return "'" + value.replace("'", "''") + "'"


def _row(key: str, rec: Record) -> List[Any]:
    return [
        key, rec.manufacturer, rec.registry, rec.short_name, rec.device_type,
        rec.registered_date, rec.address or "", _sources(rec),
    ]


def render_sql(db: MasterDatabase, generated: Optional[str] = None,
               batch_size: int = _SQL_BATCH_SIZE) -> str:
    """SQLite-compatible import script with batched ``INSERT OR IGNORE``."""
    lines = [
        "-- Master OUI Database Import",
        f"-- Generated: {generated or _timestamp()}",
        f"-- Total Entries: {len(db)}",
        "",
        _CREATE_TABLE,
        "",
        *_CREATE_INDEXES,
        "",
    ]
    rows = [_row(key, rec) for key, rec in db.items()]
    insert = f"INSERT OR IGNORE INTO oui_registry ({', '.join(_SQL_COLUMNS)}) VALUES"
    for start in range(0, len(rows), batch_size):
        batch = rows[start:start + batch_size]
        lines.append(f"-- Batch {start // batch_size + 1} ({len(batch)} entries)")
        lines.append(insert)
        values = ["  (" + ", ".join(_sql_str(v) for v in row) + ")" for row in batch]
        lines.append(",\n".join(values) + ";")
        lines.append("")
    return "\n".join(lines)


class SqliteWriter:
    """Write the master database to a fresh, ready-to-query SQLite file."""

    def __init__(self, path: str):
        self._path = path
        self._conn: Optional[sqlite3.Connection] = None

    def open(self):
        if os.path.exists(self._path):
            os.unlink(self._path)
        self._conn = sqlite3.connect(self._path)
        self._conn.execute(_CREATE_TABLE)
        for stmt in _CREATE_INDEXES:
            self._conn.execute(stmt)
        self._conn.commit()

    def write(self, db: MasterDatabase):
        """Insert every record in a single transaction."""
        if self._conn is None:
            return
        placeholders = ", ".join("?" for _ in _SQL_COLUMNS)
        with self._conn:
            self._conn.executemany(
                f"INSERT INTO oui_registry ({', '.join(_SQL_COLUMNS)}) "
                f"VALUES ({placeholders});",
                (_row(key, rec) for key, rec in db.items()),
            )

    def close(self):
        if self._conn is None:
            return
        try:
            self._conn.close()
        finally:
            self._conn = None


# ---------------------------------------------------------------------------
# Statistics report
# ---------------------------------------------------------------------------

_REPORT_FILES = [
    (_OUT_TXT, "simple grep/awk format"),
    (_OUT_CSV, "full data with addresses"),
    (_OUT_TSV, "Excel/Sheets import"),
    (_OUT_JSON, "pretty-printed"),
    (_OUT_JSON_MIN, "compact for scripts"),
    (_OUT_XML, "enterprise/Java"),
    (_OUT_SQLITE, "SQLite ready-to-query"),
    (_OUT_SQL, "SQL import script"),
]

_IEEE_STAT_KEYS = [
    ("ieee_mal", "MA-L (Large/OUI):"),
    ("ieee_mam", "MA-M (Medium):"),
    ("ieee_mas", "MA-S (Small):"),
    ("ieee_iab", "IAB (Individual):"),
    ("ieee_cid", "CID (Company ID):"),
]


def render_stats_report(stats: MergeStats, sizes: Dict[str, int],
                        generated: Optional[str] = None) -> str:
    lines = ["OUI Database Merge Statistics", "=" * 30, "", "IEEE Registries Processed:"]
    total_ieee = 0
    for key, label in _IEEE_STAT_KEYS:
        n = stats.get(key)
        total_ieee += n
        lines.append(f"  {label:<20}{n:,} entries")
    lines.append("  " + "-" * 33)
    lines.append(f"  {'IEEE Total:':<20}{total_ieee:,} entries")
    lines += [
        "",
        "Community Sources:",
        f"  {'Wireshark:':<20}{stats.get('wireshark'):,} entries",
        f"  {'Nmap:':<20}{stats.get('nmap'):,} entries",
        "",
        "Historical Data:",
        f"  {'Mac-Tracker:':<20}{stats.mac_tracker:,} registration dates",
        "",
        "Results:",
        f"  {'Unique OUIs:':<20}{stats.unique:,} entries",
        f"  {'Merged Entries:':<20}{stats.merged:,} (same OUI from multiple sources)",
        "",
        "Output Files:",
    ]
    for name, desc in _REPORT_FILES:
        if name in sizes:
            lines.append(f"  {name:<20}{sizes[name] / 1024 / 1024:.2f} MB  ({desc})")
    lines += ["", f"Generated: {generated or _timestamp()}", ""]
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Writing everything
# ---------------------------------------------------------------------------

def _write_text(path: str, text: str):
    with open(path, "w", encoding="utf-8", newline="") as fh:
        fh.write(text)


def write_outputs(db: MasterDatabase, output_dir: str,
                  generated: Optional[str] = None) -> Dict[str, int]:
    """Write every artifact plus ``stats.txt``; returns ``{file name: size}``."""
    os.makedirs(output_dir, exist_ok=True)
    generated = generated or _timestamp()

    renders = [
        (_OUT_CSV, render_csv(db)),
        (_OUT_JSON, render_json(db, pretty=True)),
        (_OUT_SQL, render_sql(db, generated)),
        (_OUT_TXT, render_txt(db, generated)),
        (_OUT_TSV, render_tsv(db)),
        (_OUT_JSON_MIN, render_json(db, pretty=False)),
        (_OUT_XML, render_xml(db, generated)),
    ]
    for name, text in renders:
        _write_text(os.path.join(output_dir, name), text)

    writer = SqliteWriter(os.path.join(output_dir, _OUT_SQLITE))
    writer.open()
    try:
        writer.write(db)
    finally:
        writer.close()

    sizes = {
        name: os.path.getsize(os.path.join(output_dir, name))
        for name, _ in _REPORT_FILES
    }
    report = render_stats_report(db.stats, sizes, generated)
    _write_text(os.path.join(output_dir, _OUT_STATS), report)
    sizes[_OUT_STATS] = os.path.getsize(os.path.join(output_dir, _OUT_STATS))
    return sizes


# ---------------------------------------------------------------------------
# Console output
# ---------------------------------------------------------------------------

def _sep(char="-", width=60):
    return char * width


_DETAIL_FIELDS = [
    ("short_name", "Short Name"),
    ("device_type", "Device Type"),
    ("country", "Country"),
    ("address", "Address"),
    ("registry", "Registry"),
    ("registered_date", "Registered"),
]


def print_result(result: Dict[str, Any], label: Optional[str] = None):
    """Print a formatted lookup result to stdout."""
    print(_sep())
    if label:
        print(f"  {'Device':<14}: {label}")
    for key, name in (("ip", "IP"), ("ssid", "SSID"), ("signal", "Signal"),
                      ("channel", "Channel")):
        if result.get(key):
            print(f"  {name:<14}: {result[key]}")

    status = result.get("status")
    if status == "invalid":
        print(f"  {'Input':<14}: {result.get('mac', '')}")
        print(f"  {'Error':<14}: {result.get('error', 'Invalid MAC address format')}")
        return

    mac = result.get("mac", "")
    rand = " [randomized MAC]" if result.get("randomized") else ""
    print(f"  {'MAC Address':<14}: {mac}{rand}")
    print(f"  {'OUI':<14}: {result.get('oui', '')}")
    print(f"  {'Manufacturer':<14}: {result.get('manufacturer', '')}")
    if status != "found":
        return
    for key, name in _DETAIL_FIELDS:
        if result.get(key):
            print(f"  {name:<14}: {result[key]}")
    if result.get("sources"):
        print(f"  {'Sources':<14}: {', '.join(result['sources'])}")


def print_matches(matches: Iterable[Dict[str, Any]]):
    """Print one ``OUI  Manufacturer (type)`` line per search hit."""
    for m in matches:
        dtype = f" ({m['device_type']})" if m.get("device_type") else ""
        print(f"  {m.get('oui', ''):<14}  {m.get('manufacturer', '')}{dtype}")
