"""Command-line interface for oui-master."""

import argparse
import logging
import os
import re
import sys
from typing import Any, Dict, List, Optional

from .constants import (
    _BANNER, _DEFAULT_OUTPUT_DIR, _DEFAULT_SOURCES_DIR, _SEARCH_DISPLAY_LIMIT,
)
from .lookup import _DEFAULT_DB_PATH, DatabaseNotFoundError, OuiDatabase
from .output import print_matches, print_result

_MAC_QUERY = re.compile(r"^[0-9a-f:\-.]{6,17}$", re.IGNORECASE)

_DEFAULTS: Dict[str, Any] = {
    "sources": _DEFAULT_SOURCES_DIR,
    "output": _DEFAULT_OUTPUT_DIR,
    "db": _DEFAULT_DB_PATH,
    "search_limit": _SEARCH_DISPLAY_LIMIT,
    "host": "127.0.0.1",
    "port": 5000,
    "verbose": False,
    "quiet": False,
}


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="oui-master",
        description=(
            "Build a merged OUI database from IEEE, Wireshark and Nmap sources,\n"
            "and look up MAC address manufacturers against it."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("--config", metavar="FILE",
                   help="Path to configuration file (TOML or JSON)")
    p.add_argument("--db", metavar="FILE", default=None,
                   help=f"Database to query (default: {_DEFAULT_DB_PATH})")
    vq = p.add_mutually_exclusive_group()
    vq.add_argument("-v", "--verbose", action="store_true",
                    help="Debug logging")
    vq.add_argument("-q", "--quiet", action="store_true",
                    help="Suppress progress output")

    sub = p.add_subparsers(dest="command", metavar="COMMAND")

    build = sub.add_parser("build", help="Merge the sources and write every output format")
    build.add_argument("--sources", metavar="DIR", default=None,
                       help=f"Source directory (default: {_DEFAULT_SOURCES_DIR})")
    build.add_argument("--output", metavar="DIR", default=None,
                       help=f"Output directory (default: {_DEFAULT_OUTPUT_DIR})")

    lookup = sub.add_parser("lookup", help="Look up one or more MAC addresses")
    lookup.add_argument("macs", nargs="+", metavar="MAC")

    search = sub.add_parser("search", help="Search manufacturers by name")
    search.add_argument("term")
    search.add_argument("--limit", dest="search_limit", type=int, default=None,
                        metavar="N", help=f"Rows to show (default: {_SEARCH_DISPLAY_LIMIT})")

    file_ = sub.add_parser("file", help="Look up every MAC address found in a file")
    file_.add_argument("path")

    sub.add_parser("stats", help="Database statistics")
    sub.add_parser("arp", help="Look up vendors in the host ARP table")
    sub.add_parser("wifi", help="Look up vendors of nearby WiFi access points")
    sub.add_parser("bluetooth", help="Look up vendors of known Bluetooth devices")
    sub.add_parser("interactive", help="Interactive lookup prompt")

    serve = sub.add_parser("serve", help="Serve lookups as a JSON HTTP API")
    serve.add_argument("--host", default=None, help="Bind address (default: 127.0.0.1)")
    serve.add_argument("--port", type=int, default=None, help="Port (default: 5000)")

    return p


def _load_db(args) -> OuiDatabase:
    try:
        return OuiDatabase.load(args.db)
    except DatabaseNotFoundError as e:
        print(f"Error: {e}")
        print("  Build it first with:  oui-master build")
        sys.exit(1)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def cmd_build(args) -> int:
    from .pipeline import SourceMissingError, run
    if not args.quiet:
        print(_BANNER)
    try:
        run(args.sources, args.output, quiet=args.quiet)
    except SourceMissingError as e:
        logging.getLogger(__name__).error("%s", e)
        print(f"Error: {e}")
        return 1
    return 0


def cmd_lookup(args) -> int:
    db = _load_db(args)
    for mac in args.macs:
        print_result(db.lookup(mac))
    return 0


def _show_search(db: OuiDatabase, term: str, limit: int):
    matches = db.search(term)
    if not matches:
        print(f'No matches for "{term}"')
        return
    shown = f" (showing {limit})" if len(matches) > limit else ""
    print(f"Found {len(matches)} matches{shown}:\n")
    print_matches(matches[:limit])


def cmd_search(args) -> int:
    _show_search(_load_db(args), args.term, args.search_limit)
    return 0


def cmd_file(args) -> int:
    if not os.path.exists(args.path):
        print(f"Error: File not found: {args.path}")
        return 1
    db = _load_db(args)
    with open(args.path, encoding="utf-8", errors="replace") as f:
        results = db.lookup_text(f.read())
    if not results:
        print("No MAC addresses found in file")
        return 0
    print(f"Found {len(results)} MAC address(es):\n")
    for result in results:
        print_result(result)
    return 0


def _show_stats(db: OuiDatabase):
    s = db.stats()
    print("OUI Database Statistics")
    print("=" * 23)
    print(f"\nTotal OUIs: {s['total']:,}")
    print(f"With Registration Date: {s['with_date']:,}")
    print("\nTop Device Types:")
    for name, n in list(s["by_device_type"].items())[:10]:
        print(f"  {name:<20} {n:>6}")
    print("\nTop Countries:")
    for name, n in list(s["by_country"].items())[:10]:
        print(f"  {name:<5} {n:>6}")
    print("\nBy Registry:")
    for name, n in s["by_registry"].items():
        print(f"  {name:<10} {n:>6}")


def cmd_stats(args) -> int:
    _show_stats(_load_db(args))
    return 0


_PEER_SCANS = {
    "arp": ("scan_arp", "ARP entries"),
    "wifi": ("scan_wifi", "access point(s)"),
    "bluetooth": ("scan_bluetooth", "Bluetooth device(s)"),
}


def _scan_peers(db: OuiDatabase, kind: str):
    from . import peers
    func_name, what = _PEER_SCANS[kind]
    found = getattr(peers, func_name)()
    if not found:
        print(f"No {what} found")
        return
    print(f"Found {len(found)} {what}:\n")
    for peer in found:
        result = db.lookup(peer["mac"])
        result.update({k: v for k, v in peer.items() if k != "mac"})
        print_result(result, label=peer.get("name"))


def cmd_peers(args) -> int:
    _scan_peers(_load_db(args), args.command)
    return 0


def handle_query(db: OuiDatabase, text: str, limit: int = _SEARCH_DISPLAY_LIMIT) -> bool:
    """Answer one interactive query.  Returns False when the user quits."""
    query = text.strip()
    if not query:
        return True
    lower = query.lower()
    if lower in ("quit", "exit", "q"):
        return False
    if lower == "stats":
        _show_stats(db)
    elif lower == "arp":
        _scan_peers(db, "arp")
    elif lower in ("wifi", "wf", "wi"):
        _scan_peers(db, "wifi")
    elif lower == "bt" or lower.startswith("blu"):
        _scan_peers(db, "bluetooth")
    elif _MAC_QUERY.match(query):
        print_result(db.lookup(query))
    else:
        _show_search(db, query, limit)
    return True


def cmd_interactive(args) -> int:
    db = _load_db(args)
    print(f"Loaded {len(db):,} OUI entries")
    print("Enter a MAC address, a manufacturer name, or: wifi, bluetooth, arp, stats, quit\n")
    while True:
        try:
            line = input("oui> ")
        except (EOFError, KeyboardInterrupt):
            print()
            break
        if not handle_query(db, line, args.search_limit):
            break
        print()
    return 0


def cmd_serve(args) -> int:
    from .api_server import ApiServer
    server = ApiServer(_load_db(args), host=args.host, port=args.port)
    print(f"[*] Serving lookups on http://{args.host}:{args.port}/api/")
    server.start()
    try:
        server.join()
    except KeyboardInterrupt:
        pass
    return 0


_COMMANDS = {
    "build": cmd_build,
    "lookup": cmd_lookup,
    "search": cmd_search,
    "file": cmd_file,
    "stats": cmd_stats,
    "arp": cmd_peers,
    "wifi": cmd_peers,
    "bluetooth": cmd_peers,
    "interactive": cmd_interactive,
    "serve": cmd_serve,
}


def main(argv: Optional[List[str]] = None):
    parser = _build_parser()
    args = parser.parse_args(argv)

    from .config import load_config, merge_with_cli
    # Defaults first: config keys must also reach subcommands without a flag
    for key, value in _DEFAULTS.items():
        if getattr(args, key, None) is None:
            setattr(args, key, value)
    cfg = load_config(args.config)
    if cfg:
        merge_with_cli(args, cfg, _DEFAULTS)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return

    sys.exit(_COMMANDS[args.command](args))
