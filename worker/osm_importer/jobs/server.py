"""HTTP monitoring surface for the importer (Render friendly)."""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional

from flask import Flask, jsonify, request
from werkzeug.serving import make_server

from osm_importer.core.progress import ProgressReporter

logger = logging.getLogger(__name__)

DEFAULT_RECENT_LIMIT = 100
MAX_RECENT_LIMIT = 1000


def _parse_limit(raw: Optional[str]) -> int:
    try:
        limit = int(raw) if raw is not None else DEFAULT_RECENT_LIMIT
    except (TypeError, ValueError):
        return DEFAULT_RECENT_LIMIT
    if limit <= 0:
        return DEFAULT_RECENT_LIMIT
    return min(limit, MAX_RECENT_LIMIT)


def create_app(reporter: ProgressReporter, store: Any) -> Flask:
    """Build the Flask app; ``store`` only needs ``fetch_recent(limit)``."""
    app = Flask(__name__)

    @app.get("/")
    def root() -> Any:
        """Simple root to avoid 404 on GET /"""
        return "ok", 200

    @app.get("/health")
    def health() -> Any:
        return jsonify(reporter.health()), 200

    @app.get("/stats")
    def stats() -> Any:
        return jsonify(reporter.stats()), 200

    @app.get("/api/recent")
    def recent() -> Any:
        limit = _parse_limit(request.args.get("limit"))
        try:
            records = store.fetch_recent(limit)
        except Exception as exc:  # noqa: BLE001
            logger.error("Error fetching recent data: %s", exc)
            return jsonify({"success": False, "error": str(exc)}), 500
        return (
            jsonify(
                {
                    "success": True,
                    "count": len(records),
                    "records": [record.to_json() for record in records],
                }
            ),
            200,
        )

    return app


class ServerThread(threading.Thread):
    """Serves the app on a background thread until :meth:`shutdown`."""

    def __init__(self, app: Flask, host: str, port: int) -> None:
        super().__init__(name="http-server", daemon=True)
        self._server = make_server(host, port, app, threaded=True)
        self.port = self._server.server_port

    def run(self) -> None:
        logger.info("Health endpoint running on port %d", self.port)
        self._server.serve_forever()

    def shutdown(self) -> None:
        self._server.shutdown()
