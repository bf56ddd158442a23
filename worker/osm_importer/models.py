"""Core data models shared by the OpenStreetMap import pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

RawElement = Dict[str, Any]

ADDRESS_UNAVAILABLE = "Address not available"
SOURCE_OSM = "OpenStreetMap"


@dataclass(frozen=True)
class Location:
    """A named search centre; radius is expressed in metres."""

    name: str
    latitude: float
    longitude: float
    radius_m: int


@dataclass(frozen=True)
class Category:
    """An establishment kind, queried as ``[key=name]`` against OSM tags."""

    name: str
    key: str = "amenity"

    def __str__(self) -> str:
        return self.name


@dataclass(slots=True)
class NormalizedRecord:
    """Normalized snapshot of an establishment returned by the Overpass API."""

    name: str
    category: str
    latitude: float
    longitude: float
    added_at: datetime
    address: str = ADDRESS_UNAVAILABLE
    phone: Optional[str] = None
    website: Optional[str] = None
    source: str = SOURCE_OSM
    coordinates_verified: bool = True
    coordinate_source: str = SOURCE_OSM
    raw_snapshot: Optional[RawElement] = field(default=None, repr=False)

    @property
    def dedup_key(self):
        return (self.latitude, self.longitude, self.name)

    def to_json(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "category": self.category,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "address": self.address,
            "phone": self.phone,
            "website": self.website,
            "source": self.source,
            "coordinatesVerified": self.coordinates_verified,
            "coordinateSource": self.coordinate_source,
            "addedAt": self.added_at.isoformat() if self.added_at else None,
        }
