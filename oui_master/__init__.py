"""oui-master: merge IEEE, Wireshark and Nmap OUI datasets into one master
database and resolve MAC addresses to their registered manufacturer."""

from .classify import classify_device_type, extract_country
from .lookup import OuiDatabase, get_oui_vendor
from .merge import HistoricalDateIndex, MasterDatabase, Record
from .pipeline import SourceMissingError, build_database, run
from .sources import (
    RawRecord, parse_history, parse_name_table, parse_prefix_table,
    parse_registry_csv,
)
from .utils import lookup_key, normalize_key

__version__ = "1.0.0"
__all__ = [
    "classify_device_type",
    "extract_country",
    "OuiDatabase",
    "get_oui_vendor",
    "HistoricalDateIndex",
    "MasterDatabase",
    "Record",
    "SourceMissingError",
    "build_database",
    "run",
    "RawRecord",
    "parse_history",
    "parse_name_table",
    "parse_prefix_table",
    "parse_registry_csv",
    "lookup_key",
    "normalize_key",
]
