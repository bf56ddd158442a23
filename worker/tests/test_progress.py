from osm_importer.core.progress import ProgressReporter
from osm_importer.core.state import CycleCursor, ImportState


class DummyKeepAlive:
    def describe(self):
        return {"enabled": True, "pings": 3, "intervalDescription": "14 minutes"}


def make_reporter(catalog, keep_alive=None):
    state = ImportState(CycleCursor(len(catalog.locations), len(catalog.categories)))
    return state, ProgressReporter(state.snapshot, catalog, "continuous", keep_alive)


def test_health_before_start(small_catalog):
    _, reporter = make_reporter(small_catalog)
    assert reporter.health() == {
        "status": "healthy",
        "uptimeSeconds": 0,
        "isImporting": False,
        "totalImported": 0,
    }


def test_stats_reflects_latest_advance(small_catalog):
    state, reporter = make_reporter(small_catalog, DummyKeepAlive())
    state.mark_started()
    state.record_imported(5)
    state.record_error()
    state.advance()
    state.advance()

    stats = reporter.stats()

    assert stats["state"] == {
        "isRunning": True,
        "mode": "continuous",
        "currentLocation": "Beta",
        "currentCategory": "restaurant",
        "currentLocationIndex": 1,
        "currentCategoryIndex": 0,
        "totalLocations": 2,
        "totalCategories": 2,
    }
    assert stats["progress"]["totalImported"] == 5
    assert stats["progress"]["errors"] == 1
    assert stats["progress"]["cycleCount"] == 0
    assert stats["progress"]["lastImportTime"] is not None
    assert stats["keepAlive"]["pings"] == 3


def test_stats_without_keep_alive(small_catalog):
    _, reporter = make_reporter(small_catalog)
    assert reporter.stats()["keepAlive"]["enabled"] is False
