"""Configuration loading for oui-master."""

import json
import os
import sys
from typing import Any, Dict, Optional

_CONFIG_ENV_VAR = "OUI_MASTER_CONFIG"
_CONFIG_PATHS = [
    os.path.expanduser("~/.config/oui-master/config.toml"),
    os.path.expanduser("~/.config/oui-master/config.json"),
]
_CONFIG_KEYS = {
    "sources", "output", "db", "search_limit", "port", "host",
    "verbose", "quiet",
}


def _load_toml(path: str) -> Dict[str, Any]:
    if sys.version_info >= (3, 11):
        import tomllib
    else:
        import tomli as tomllib
    with open(path, "rb") as f:
        return tomllib.load(f)


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from file (TOML preferred, JSON fallback).

    Search order:
    1. Explicit ``config_path`` argument
    2. ``$OUI_MASTER_CONFIG`` environment variable
    3. ``~/.config/oui-master/config.toml``
    4. ``~/.config/oui-master/config.json``

    A missing or unparsable file yields ``{}``.
    """
    if config_path:
        paths = [config_path]
    else:
        env = os.environ.get(_CONFIG_ENV_VAR)
        paths = [env] if env else _CONFIG_PATHS

    for path in paths:
        if not os.path.exists(path):
            continue
        try:
            if path.endswith(".toml"):
                return _load_toml(path)
            with open(path) as f:
                data = json.load(f)
            return data if isinstance(data, dict) else {}
        except (OSError, ValueError):
            return {}
    return {}


def merge_with_cli(args, config: Dict[str, Any], defaults: Optional[Dict[str, Any]] = None):
    """Merge config file values into the argparse namespace.

    CLI arguments take precedence when they differ from their argparse
    defaults.  Config values only fill in attributes that are still unset or
    at their default value.  Unknown keys are ignored.
    """
    defaults = defaults or {}
    for key, value in config.items():
        if key not in _CONFIG_KEYS or not hasattr(args, key):
            continue
        current = getattr(args, key)
        if current is None or current == defaults.get(key):
            setattr(args, key, value)
