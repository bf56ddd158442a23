"""Process entrypoint: wire settings, store, HTTP surface and the import loop."""

import argparse
import logging
import signal
import threading
from typing import List, Optional

import psycopg2

from osm_importer.core.catalog import default_catalog
from osm_importer.core.config import ConfigError, Settings, get_settings
from osm_importer.core.db import PostgresStore
from osm_importer.core.keepalive import KeepAlive
from osm_importer.core.progress import ProgressReporter
from osm_importer.jobs.importer import ImportOrchestrator
from osm_importer.jobs.server import ServerThread, create_app
from osm_importer.vendors.overpass import OverpassClient

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Continuously import OpenStreetMap establishments")
    parser.add_argument("--port", dest="port", type=int, help="HTTP port (overrides PORT)")
    parser.add_argument("--delay-ms", dest="delay_ms", type=int, help="Pause between requests (overrides IMPORT_DELAY)")
    parser.add_argument("--log-level", dest="log_level", help="Logging level (overrides LOG_LEVEL)")
    return parser


def build_overpass_client(settings: Settings, stop_event: threading.Event) -> OverpassClient:
    # The cool-down waits on the loop's stop event so shutdown cuts it short.
    return OverpassClient(
        url=settings.overpass_url,
        timeout=settings.overpass_timeout_seconds,
        rate_limit_cooldown=settings.rate_limit_cooldown_seconds,
        wait=stop_event.wait,
    )


def build_orchestrator(
    settings: Settings,
    store: PostgresStore,
    client: OverpassClient,
    stop_event: threading.Event,
    delay_ms: Optional[int] = None,
) -> ImportOrchestrator:
    return ImportOrchestrator(
        default_catalog(),
        fetch=client.fetch,
        store=store,
        request_delay=(settings.import_delay_ms if delay_ms is None else delay_ms) / 1000.0,
        error_delay=settings.error_delay_seconds,
        mode=settings.import_mode,
        stop_event=stop_event,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

    try:
        settings = get_settings()
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        return 1

    logging.getLogger().setLevel((args.log_level or settings.log_level).upper())
    delay_ms = args.delay_ms if args.delay_ms is not None else settings.import_delay_ms
    logger.info("[BOOT] Mode: %s", settings.import_mode.upper())
    logger.info("[BOOT] Delay: %dms", delay_ms)
    logger.info("[BOOT] Database: %s", "configured" if settings.database_url else "missing")

    store = PostgresStore(settings.database_url)
    try:
        store.init_pool()
        store.ensure_schema()
    except (psycopg2.Error, RuntimeError) as exc:
        logger.error("Fatal error connecting to the database: %s", exc)
        store.close()
        return 1

    stop_event = threading.Event()
    client = build_overpass_client(settings, stop_event)
    orchestrator = build_orchestrator(settings, store, client, stop_event, delay_ms)
    keep_alive = KeepAlive(
        settings.external_url,
        enabled=settings.keep_alive_enabled,
        interval_minutes=settings.keep_alive_interval_minutes,
    )
    reporter = ProgressReporter(orchestrator.snapshot, orchestrator.catalog, settings.import_mode, keep_alive)

    port = args.port or settings.port
    try:
        server = ServerThread(create_app(reporter, store), "0.0.0.0", port)
    except OSError as exc:
        logger.error("Fatal error binding port %d: %s", port, exc)
        client.close()
        store.close()
        return 1
    server.start()

    keep_alive.start()

    def _handle_signal(signum, frame):
        logger.info("%s received, shutting down gracefully...", signal.Signals(signum).name)
        orchestrator.request_stop()

    orchestrator.start()
    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    try:
        orchestrator.run()
    finally:
        keep_alive.stop()
        server.shutdown()
        client.close()
        store.close()
    logger.info("Shutdown complete")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
