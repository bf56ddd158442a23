"""Read-only projections of import progress for the monitoring endpoints."""

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from osm_importer.core.catalog import Catalog
from osm_importer.core.state import ProgressSnapshot

SERVICE_NAME = "OSM Importer Service"


class ProgressReporter:
    def __init__(
        self,
        snapshot: Callable[[], ProgressSnapshot],
        catalog: Catalog,
        mode: str = "continuous",
        keep_alive: Optional[Any] = None,
    ) -> None:
        self._snapshot = snapshot
        self._catalog = catalog
        self._mode = mode
        self._keep_alive = keep_alive

    def health(self) -> Dict[str, Any]:
        snap = self._snapshot()
        return {
            "status": "healthy",
            "uptimeSeconds": snap.uptime_seconds(),
            "isImporting": snap.is_running,
            "totalImported": snap.total_imported,
        }

    def stats(self) -> Dict[str, Any]:
        snap = self._snapshot()
        location, category = self._catalog.work_unit(snap.location_index, snap.category_index)
        return {
            "service": SERVICE_NAME,
            "state": {
                "isRunning": snap.is_running,
                "mode": self._mode,
                "currentLocation": location.name,
                "currentCategory": category.name,
                "currentLocationIndex": snap.location_index,
                "currentCategoryIndex": snap.category_index,
                "totalLocations": len(self._catalog.locations),
                "totalCategories": len(self._catalog.categories),
            },
            "progress": {
                "totalImported": snap.total_imported,
                "cycleCount": snap.cycle_count,
                "errors": snap.error_count,
                "uptimeSeconds": snap.uptime_seconds(),
                "lastImportTime": snap.last_import_time,
            },
            "keepAlive": self._keep_alive_block(),
        }

    def _keep_alive_block(self) -> Dict[str, Any]:
        if self._keep_alive is None:
            return {"enabled": False, "pings": 0, "intervalDescription": None}
        return self._keep_alive.describe()
