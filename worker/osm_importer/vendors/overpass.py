"""Client utilities for the OpenStreetMap Overpass API."""

import logging
import time
from typing import Callable, List, Optional

import requests

from osm_importer.core.config import DEFAULT_OVERPASS_URL
from osm_importer.models import Category, Location, RawElement

logger = logging.getLogger(__name__)

QUERY_BUDGET_SECONDS = 45
REQUEST_TIMEOUT = 50
RATE_LIMIT_COOLDOWN = 60
_RATE_LIMIT_STATUSES = {429}


def build_query(location: Location, category: Category, radius_m: int) -> str:
    """Overpass QL for nodes and ways tagged with the category around a point."""
    area = f"around:{radius_m},{location.latitude},{location.longitude}"
    selector = f'["{category.key}"="{category.name}"]({area})'
    return (
        f"[out:json][timeout:{QUERY_BUDGET_SECONDS}];\n"
        "(\n"
        f"  node{selector};\n"
        f"  way{selector};\n"
        ");\n"
        "out center;\n"
    )


class OverpassClient:
    """Fetches raw elements; every failure is reported as an empty result."""

    def __init__(
        self,
        url: str = DEFAULT_OVERPASS_URL,
        timeout: float = REQUEST_TIMEOUT,
        rate_limit_cooldown: float = RATE_LIMIT_COOLDOWN,
        session: Optional[requests.Session] = None,
        wait: Callable[[float], object] = time.sleep,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.rate_limit_cooldown = rate_limit_cooldown
        self._session = session or requests.Session()
        self._wait = wait

    def fetch(self, location: Location, category: Category, radius_m: int) -> List[RawElement]:
        query = build_query(location, category, radius_m)
        try:
            response = self._session.post(
                self.url,
                data=query.encode("utf-8"),
                headers={"Content-Type": "text/plain"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.Timeout:
            logger.warning("Overpass request timed out for %s/%s, continuing", location.name, category.name)
            return []
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            if status in _RATE_LIMIT_STATUSES:
                logger.warning("Rate limited by Overpass, waiting %ss", self.rate_limit_cooldown)
                self._wait(self.rate_limit_cooldown)
            else:
                logger.warning("Overpass returned status=%s for %s/%s", status, location.name, category.name)
            return []
        except requests.RequestException as exc:
            logger.warning("Overpass fetch error: %s", exc)
            return []
        except ValueError as exc:
            logger.warning("Overpass returned an undecodable payload: %s", exc)
            return []

        elements = payload.get("elements") if isinstance(payload, dict) else None
        if not isinstance(elements, list):
            logger.warning("Overpass payload missing elements list. preview=%s", str(payload)[:200])
            return []
        return elements

    def close(self) -> None:
        self._session.close()
