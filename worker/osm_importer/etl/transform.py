"""Utilities for transforming Overpass elements into store records."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from osm_importer.models import ADDRESS_UNAVAILABLE, Category, NormalizedRecord, RawElement

logger = logging.getLogger(__name__)


def _safe_float(value: Any) -> Optional[float]:
    try:
        if value is None:
            return None
        return float(value)
    except (TypeError, ValueError):
        return None


def _strip_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    value_str = str(value).strip()
    return value_str or None


def element_coordinates(element: RawElement) -> Optional[Tuple[float, float]]:
    """Return ``(lat, lon)`` from the node itself or, for ways, from its centre."""
    lat = _safe_float(element.get("lat"))
    lon = _safe_float(element.get("lon"))
    if lat is not None and lon is not None:
        return lat, lon

    center = element.get("center") or {}
    lat = _safe_float(center.get("lat"))
    lon = _safe_float(center.get("lon"))
    if lat is not None and lon is not None:
        return lat, lon
    return None


def format_address(tags: Dict[str, Any]) -> str:
    full = _strip_or_none(tags.get("addr:full"))
    if full:
        return full

    street = " ".join(
        part for part in (_strip_or_none(tags.get("addr:housenumber")), _strip_or_none(tags.get("addr:street"))) if part
    )
    city = _strip_or_none(tags.get("addr:city"))
    if street and city:
        return f"{street}, {city}"
    return street or ADDRESS_UNAVAILABLE


def to_record(element: RawElement, category: Category, now: Optional[datetime] = None) -> Optional[NormalizedRecord]:
    """Normalize one element, or return None when it has no usable coordinates."""
    coords = element_coordinates(element)
    if coords is None:
        logger.debug("Skipping element without coordinates: %s", element.get("id"))
        return None

    tags = element.get("tags") or {}
    lat, lon = coords
    return NormalizedRecord(
        # Names are stored verbatim; they are part of the dedup key.
        name=tags.get("name") or category.name,
        category=_strip_or_none(tags.get(category.key)) or category.name,
        latitude=lat,
        longitude=lon,
        address=format_address(tags),
        phone=_strip_or_none(tags.get("phone") or tags.get("contact:phone")),
        website=_strip_or_none(tags.get("website") or tags.get("contact:website")),
        added_at=now or datetime.now(timezone.utc),
        raw_snapshot=element,
    )
