"""Static catalog of the cafeterias whose menus can be fetched."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterable

DEFAULT_BASE_URL = "https://www.studierendenwerk-pb.de/gastronomie/speiseplaene/"

BASE_URL = os.getenv("MENSA_BASE_URL") or DEFAULT_BASE_URL


class UnknownLocationError(ValueError):
    """Raised when a location id is not part of the catalog."""


@dataclass(frozen=True, slots=True)
class Location:
    """One physical service point with its own menu page."""

    key: str
    name: str
    path: str

    @property
    def url(self) -> str:
        base = BASE_URL if BASE_URL.endswith("/") else BASE_URL + "/"
        return base + self.path

    def __str__(self) -> str:
        return self.name


FORUM = Location("forum", "Forum", "forum/")
ACADEMICA = Location("academica", "Academica", "mensa-academica/")
PICKNICK = Location("picknick", "Picknick", "picknick/")
BONA_VISTA = Location("bona-vista", "Bona Vista", "bona-vista/")
GRILL_CAFE = Location("grill-cafe", "Grill | Café", "grillcafe/")
ZM2 = Location("zm2", "ZM2", "mensa-zm2/")
BASILICA = Location("basilica", "Basilica", "mensa-basilica-hamm/")
ATRIUM = Location("atrium", "Atrium", "mensa-atrium-lippstadt/")

CATALOG: tuple[Location, ...] = (
    FORUM,
    ACADEMICA,
    PICKNICK,
    BONA_VISTA,
    GRILL_CAFE,
    ZM2,
    BASILICA,
    ATRIUM,
)

DEFAULT_LOCATIONS: tuple[Location, ...] = (FORUM, ACADEMICA)

_BY_KEY: dict[str, Location] = {location.key: location for location in CATALOG}
_ORDER: dict[str, int] = {location.key: index for index, location in enumerate(CATALOG)}


def location_keys() -> list[str]:
    return [location.key for location in CATALOG]


def get_location(key: str) -> Location:
    """Return the catalog entry for *key* (case-insensitive)."""

    try:
        return _BY_KEY[key.strip().lower()]
    except KeyError:
        raise UnknownLocationError(
            f"Unknown location {key!r}; expected one of {', '.join(location_keys())}"
        ) from None


def parse_locations(value: str | Iterable[str]) -> list[Location]:
    """Resolve ids (list or comma separated string) into unique locations."""

    if isinstance(value, str):
        items = value.split(",")
    else:
        items = list(value)
    locations: list[Location] = []
    for item in items:
        if not item.strip():
            continue
        location = get_location(item)
        if location not in locations:
            locations.append(location)
    return locations


def catalog_index(location: Location) -> int:
    """Position of *location* in the catalog; unknown locations sort last."""

    return _ORDER.get(location.key, len(CATALOG))


def sort_locations(locations: Iterable[Location]) -> tuple[Location, ...]:
    """Deduplicate and order *locations* by catalog position."""

    unique = set(locations)
    return tuple(sorted(unique, key=lambda location: (catalog_index(location), location.key)))
