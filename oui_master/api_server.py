"""Flask JSON API serving read-only lookups for oui-master."""

import logging
import threading
from typing import Optional

from flask import Flask, jsonify, request

from .constants import _SEARCH_DISPLAY_LIMIT
from .lookup import _DEFAULT_DB_PATH, DatabaseNotFoundError, OuiDatabase, SharedDatabase

logger = logging.getLogger(__name__)


def create_app(db: Optional[OuiDatabase] = None, db_path: Optional[str] = None) -> Flask:
    """Build the Flask app around a loaded snapshot (or load one from ``db_path``).

    ``POST /api/reload`` re-reads the file the snapshot came from; a snapshot
    built in memory has no file and answers 409.
    """
    if db is None:
        db = OuiDatabase.load(db_path or _DEFAULT_DB_PATH)
    shared = SharedDatabase(db_path, db)

    app = Flask(__name__)
    app.json.sort_keys = False

    @app.route("/api/lookup/<path:mac>")
    def lookup(mac):
        result = shared.get().lookup(mac)
        status = 400 if result["status"] == "invalid" else 200
        return jsonify(result), status

    @app.route("/api/search")
    def search():
        term = request.args.get("q", "").strip()
        if not term:
            return jsonify({"error": "missing query parameter 'q'"}), 400
        try:
            limit = int(request.args.get("limit", _SEARCH_DISPLAY_LIMIT))
        except ValueError:
            return jsonify({"error": "limit must be an integer"}), 400
        matches = shared.get().search(term)
        return jsonify({"query": term, "total": len(matches), "results": matches[:limit]})

    @app.route("/api/extract", methods=["POST"])
    def extract():
        text = request.get_data(as_text=True)
        return jsonify({"results": shared.get().lookup_text(text)})

    @app.route("/api/stats")
    def stats():
        return jsonify(shared.get().stats())

    @app.route("/api/reload", methods=["POST"])
    def reload():
        if shared.path is None:
            return jsonify({"error": "snapshot has no database file to reload from"}), 409
        try:
            fresh = shared.reload()
        except (OSError, ValueError, DatabaseNotFoundError) as e:
            logger.error("reload failed: %s", e)
            return jsonify({"error": str(e)}), 500
        return jsonify({"entries": len(fresh)})

    return app


class ApiServer:
    """Runs the lookup API on a background thread."""

    def __init__(self, db: OuiDatabase, host: str = "127.0.0.1", port: int = 5000):
        self._host = host
        self._port = port
        self._app = create_app(db)
        self._thread: Optional[threading.Thread] = None

    @property
    def app(self) -> Flask:
        return self._app

    def start(self):
        self._thread = threading.Thread(
            target=self._app.run,
            kwargs={"host": self._host, "port": self._port, "use_reloader": False},
            daemon=True,
        )
        self._thread.start()
        logger.info("lookup API listening on http://%s:%d", self._host, self._port)

    def join(self):
        if self._thread is not None:
            self._thread.join()
