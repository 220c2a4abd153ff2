"""Root-level shim entry point for oui-master.

Allows running directly as:  python oui-master.py [args]
"""

from oui_master.lookup import OuiDatabase, get_oui_vendor
from oui_master.pipeline import build_database, run
from oui_master.utils import lookup_key, normalize_key

if __name__ == "__main__":
    from oui_master.cli import main
    main()
