"""Continuous import loop: fetch, normalize, dedupe and insert, one work unit at a time."""

from __future__ import annotations

import logging
import threading
from typing import Callable, Iterable, List, Optional, Protocol

from osm_importer.core.catalog import Catalog
from osm_importer.core.db import InsertOutcome, InsertStatus
from osm_importer.core.state import CycleCursor, ImportState, ProgressSnapshot
from osm_importer.etl.transform import to_record
from osm_importer.models import Category, Location, NormalizedRecord, RawElement

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_DELAY = 3.0
DEFAULT_ERROR_DELAY = 10.0

Fetcher = Callable[[Location, Category, int], List[RawElement]]


class RecordStore(Protocol):
    def exists_by_key(self, latitude: float, longitude: float, name: str) -> bool: ...

    def insert(self, record: NormalizedRecord) -> InsertOutcome: ...


class ImportOrchestrator:
    """Drives the catalog walk until :meth:`stop` is called.

    The loop is single-threaded: one work unit is fetched and written at a
    time, and every pause is an interruptible wait on ``stop_event``.
    """

    def __init__(
        self,
        catalog: Catalog,
        fetch: Fetcher,
        store: RecordStore,
        *,
        request_delay: float = DEFAULT_REQUEST_DELAY,
        error_delay: float = DEFAULT_ERROR_DELAY,
        mode: str = "continuous",
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        self.catalog = catalog
        self.mode = mode
        self.request_delay = request_delay
        self.error_delay = error_delay
        self._fetch = fetch
        self._store = store
        self._stop_event = stop_event or threading.Event()
        self.state = ImportState(CycleCursor(len(catalog.locations), len(catalog.categories)))

    @property
    def stop_event(self) -> threading.Event:
        return self._stop_event

    def snapshot(self) -> ProgressSnapshot:
        return self.state.snapshot()

    def start(self) -> None:
        self._stop_event.clear()
        self.state.mark_started()
        logger.info("Starting %s import mode over %d work units", self.mode, self.catalog.size)

    def request_stop(self) -> None:
        """Ask the loop to exit after its current step; safe from a signal handler."""
        self._stop_event.set()

    def stop(self) -> None:
        if self.state.is_running:
            logger.info("Stop requested; finishing current step")
        self.state.mark_stopped()
        self._stop_event.set()

    def run(self, max_units: Optional[int] = None) -> None:
        """Run until stopped, or until ``max_units`` iterations have executed."""
        if self.state.snapshot().started_at is None:
            self.start()
        executed = 0
        while self.state.is_running and not self._stop_event.is_set():
            if max_units is not None and executed >= max_units:
                break
            self.run_once()
            executed += 1
        self.state.mark_stopped()
        logger.info("Import loop exited")

    def run_once(self) -> None:
        """Process the current work unit, then pace or back off."""
        try:
            self._process_current_unit()
        except Exception as exc:  # noqa: BLE001
            errors = self.state.record_error()
            logger.exception("Import error (errors=%d): %s", errors, exc)
            self._stop_event.wait(self.error_delay)
            return
        self._stop_event.wait(self.request_delay)

    def _process_current_unit(self) -> None:
        location_index, category_index, cycle_count = self.state.position()
        location, category = self.catalog.work_unit(location_index, category_index)
        logger.info("[Cycle %d] %s - %s", cycle_count + 1, location.name, category.name)

        elements = self._fetch(location, category, location.radius_m)
        imported = self.import_elements(elements, category)

        total = self.state.mark_import_finished()
        if imported > 0:
            logger.info("Added %d (Total: %d)", imported, total)

        if self.state.advance():
            logger.info("Completed cycle %d", self.state.position()[2])

    def import_elements(self, elements: Iterable[RawElement], category: Category) -> int:
        """Insert unseen elements in fetch order and return how many were stored."""
        inserted = 0
        for element in elements:
            if not isinstance(element, dict):
                logger.debug("Skipping non-object element: %r", element)
                continue
            record = to_record(element, category)
            if record is None:
                continue
            if self._store.exists_by_key(record.latitude, record.longitude, record.name):
                continue
            outcome = self._store.insert(record)
            if outcome.status is InsertStatus.INSERTED:
                # Counted per record so a later store error cannot lose it.
                self.state.add_imported()
                inserted += 1
            elif outcome.status is InsertStatus.FAILED:
                errors = self.state.record_error()
                logger.warning("Skipping %s after insert failure (errors=%d): %s", record.name, errors, outcome.reason)
        return inserted
