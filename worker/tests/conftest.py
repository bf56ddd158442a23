import sys
from pathlib import Path

import pytest

# Ensure the `osm_importer` package is importable when running pytest from the worker directory.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from osm_importer.core.catalog import Catalog  # noqa: E402
from osm_importer.models import Category, Location  # noqa: E402


@pytest.fixture
def small_catalog():
    return Catalog.build(
        [
            Location("Alpha", 14.0, 121.0, 1000),
            Location("Beta", 10.0, 123.0, 2000),
        ],
        [Category("restaurant"), Category("supermarket", key="shop")],
    )
