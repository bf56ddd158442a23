"""Static enumeration of the locations and categories the importer walks."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple

from osm_importer.models import Category, Location


def _km(name: str, lat: float, lon: float, radius_km: int) -> Location:
    return Location(name=name, latitude=lat, longitude=lon, radius_m=radius_km * 1000)


LOCATIONS: Tuple[Location, ...] = (
    # Metro Manila
    _km("Metro Manila", 14.5995, 120.9842, 30),
    _km("Quezon City", 14.6760, 121.0437, 15),
    _km("Manila", 14.5995, 120.9842, 10),
    _km("Makati", 14.5547, 121.0244, 8),
    _km("BGC", 14.5507, 121.0494, 3),
    _km("Ortigas", 14.5860, 121.0566, 3),
    # Major cities
    _km("Cebu", 10.3157, 123.8854, 25),
    _km("Davao", 7.0731, 125.6125, 25),
    _km("Baguio", 16.4119, 120.5969, 15),
    _km("Iloilo", 10.7202, 122.5621, 20),
    _km("Cagayan de Oro", 8.4542, 124.6319, 15),
    # Other provinces
    _km("Laguna", 14.2691, 121.3507, 20),
    _km("Cavite", 14.4791, 120.8970, 20),
    _km("Bulacan", 14.7942, 120.8795, 20),
    _km("Pampanga", 15.0794, 120.6200, 20),
    _km("Rizal", 14.6037, 121.3084, 20),
    _km("Batangas", 13.7565, 121.0583, 20),
    _km("Negros Occidental", 10.6319, 122.9823, 20),
    _km("Bohol", 9.8500, 124.1435, 20),
    _km("Palawan", 9.8349, 118.7384, 25),
)

_SHOP = {"supermarket", "convenience", "mall"}
_LEISURE = {"park", "playground", "sports_centre", "swimming_pool"}
_TOURISM = {"hotel", "motel", "hostel", "guest_house"}


def _category(name: str) -> Category:
    if name in _SHOP:
        return Category(name, key="shop")
    if name in _LEISURE:
        return Category(name, key="leisure")
    if name in _TOURISM:
        return Category(name, key="tourism")
    return Category(name)


CATEGORIES: Tuple[Category, ...] = tuple(
    _category(name)
    for name in (
        "restaurant", "cafe", "fast_food", "bar", "pub",
        "hospital", "clinic", "pharmacy", "dentist", "doctors",
        "school", "university", "college", "kindergarten",
        "bank", "atm", "bureau_de_change",
        "fuel", "charging_station", "car_wash", "car_rental",
        "supermarket", "convenience", "mall", "marketplace",
        "police", "fire_station", "post_office", "townhall",
        "library", "community_centre", "social_facility",
        "place_of_worship", "grave_yard",
        "hotel", "motel", "hostel", "guest_house",
        "park", "playground", "sports_centre", "swimming_pool",
        "cinema", "theatre", "arts_centre", "casino",
    )
)


@dataclass(frozen=True)
class Catalog:
    """Row-major product of locations and categories.

    Work unit ``(i, j)`` is location ``i`` paired with category ``j``; all
    categories of a location are visited before moving to the next one.
    """

    locations: Tuple[Location, ...]
    categories: Tuple[Category, ...]

    def __post_init__(self) -> None:
        if not self.locations or not self.categories:
            raise ValueError("catalog needs at least one location and one category")
        names = [location.name for location in self.locations]
        if len(set(names)) != len(names):
            raise ValueError("location names must be unique within the catalog")

    @classmethod
    def build(cls, locations: Sequence[Location], categories: Sequence[Category]) -> "Catalog":
        return cls(tuple(locations), tuple(categories))

    @property
    def size(self) -> int:
        return len(self.locations) * len(self.categories)

    def work_unit(self, location_index: int, category_index: int) -> Tuple[Location, Category]:
        return self.locations[location_index], self.categories[category_index]

    def __iter__(self) -> Iterator[Tuple[Location, Category]]:
        for location in self.locations:
            for category in self.categories:
                yield location, category


def default_catalog() -> Catalog:
    return Catalog(LOCATIONS, CATEGORIES)
