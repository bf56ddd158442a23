"""Cursor and counters owned by the import loop."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional


@dataclass
class CycleCursor:
    """Position inside the catalog, walked in row-major order."""

    location_count: int
    category_count: int
    location_index: int = 0
    category_index: int = 0
    cycle_count: int = 0

    def __post_init__(self) -> None:
        if self.location_count <= 0 or self.category_count <= 0:
            raise ValueError("cursor dimensions must be positive")
        if not 0 <= self.location_index < self.location_count:
            raise ValueError("location_index out of range")
        if not 0 <= self.category_index < self.category_count:
            raise ValueError("category_index out of range")

    def advance(self) -> bool:
        """Step to the next work unit; return True when a full cycle just completed."""
        self.category_index += 1
        if self.category_index < self.category_count:
            return False
        self.category_index = 0
        self.location_index += 1
        if self.location_index < self.location_count:
            return False
        self.location_index = 0
        self.cycle_count += 1
        return True


@dataclass(frozen=True)
class ProgressSnapshot:
    is_running: bool
    location_index: int
    category_index: int
    cycle_count: int
    total_imported: int
    error_count: int
    started_at: Optional[float]
    last_import_time: Optional[str]

    def uptime_seconds(self, now: Optional[float] = None) -> int:
        if self.started_at is None:
            return 0
        now = time.time() if now is None else now
        return max(0, int(now - self.started_at))


class ImportState:
    """Mutable loop state; every read and write goes through ``_lock``."""

    def __init__(self, cursor: CycleCursor) -> None:
        self._lock = threading.Lock()
        self._cursor = cursor
        self._running = False
        self._started_at: Optional[float] = None
        self._total_imported = 0
        self._error_count = 0
        self._last_import_time: Optional[str] = None

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._running

    def mark_started(self) -> None:
        with self._lock:
            self._running = True
            self._started_at = time.time()

    def mark_stopped(self) -> None:
        with self._lock:
            self._running = False

    def position(self):
        with self._lock:
            return self._cursor.location_index, self._cursor.category_index, self._cursor.cycle_count

    def add_imported(self, count: int = 1) -> int:
        with self._lock:
            self._total_imported += count
            return self._total_imported

    def mark_import_finished(self) -> int:
        with self._lock:
            self._last_import_time = datetime.now(timezone.utc).isoformat()
            return self._total_imported

    def record_imported(self, count: int) -> int:
        self.add_imported(count)
        return self.mark_import_finished()

    def record_error(self) -> int:
        with self._lock:
            self._error_count += 1
            return self._error_count

    def advance(self) -> bool:
        with self._lock:
            return self._cursor.advance()

    def snapshot(self) -> ProgressSnapshot:
        with self._lock:
            return ProgressSnapshot(
                is_running=self._running,
                location_index=self._cursor.location_index,
                category_index=self._cursor.category_index,
                cycle_count=self._cursor.cycle_count,
                total_imported=self._total_imported,
                error_count=self._error_count,
                started_at=self._started_at,
                last_import_time=self._last_import_time,
            )
