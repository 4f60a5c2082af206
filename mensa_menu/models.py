"""Data models used across the mensa menu aggregator."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .locations import Location


class Course(str, Enum):
    MAIN = "main"
    SIDE = "side"
    DESSERT = "dessert"


class PriceTier(str, Enum):
    STUDENT = "student"
    EMPLOYEE = "employee"
    GUEST = "guest"


# Labels used on the menu pages to announce a price tier.
PRICE_TIER_LABELS: dict[str, PriceTier] = {
    "Studierende": PriceTier.STUDENT,
    "Bedienstete": PriceTier.EMPLOYEE,
    "Gäste": PriceTier.GUEST,
}

# Names accepted from users for a price tier, including the German ones.
PRICE_TIER_ALIASES: dict[str, PriceTier] = {
    "student": PriceTier.STUDENT,
    "studierende": PriceTier.STUDENT,
    "employee": PriceTier.EMPLOYEE,
    "bediensteter": PriceTier.EMPLOYEE,
    "bedienstete": PriceTier.EMPLOYEE,
    "guest": PriceTier.GUEST,
    "gast": PriceTier.GUEST,
    "gäste": PriceTier.GUEST,
}


def parse_price_tier(value: str) -> PriceTier:
    """Resolve a user supplied tier name; raises ValueError when unknown."""

    try:
        return PRICE_TIER_ALIASES[value.strip().lower()]
    except KeyError:
        raise ValueError(
            f"invalid price level {value!r} (choose from student, employee, guest)"
        ) from None


ContentKey = tuple[str, Optional[str], Optional[str], Optional[str], frozenset[str]]


@dataclass(frozen=True, slots=True)
class RawDishEntry:
    """One dish as reported by a single location's page."""

    name: str
    price_students: Optional[str] = None
    price_employees: Optional[str] = None
    price_guests: Optional[str] = None
    extras: tuple[str, ...] = ()
    image_url: Optional[str] = field(default=None, compare=False)

    def content_key(self) -> ContentKey:
        """Return the key two entries must share to collapse into one dish.

        Prices compare as opaque strings, absence included. Extras compare
        as a set. Names are not normalised.
        """

        return (
            self.name,
            self.price_students,
            self.price_employees,
            self.price_guests,
            frozenset(self.extras),
        )


@dataclass(slots=True)
class DailyLocationResult:
    """Raw dishes extracted from one location for one run."""

    location: Location
    main_dishes: list[RawDishEntry] = field(default_factory=list)
    side_dishes: list[RawDishEntry] = field(default_factory=list)
    desserts: list[RawDishEntry] = field(default_factory=list)

    def entries(self, course: Course) -> list[RawDishEntry]:
        if course is Course.MAIN:
            return self.main_dishes
        if course is Course.SIDE:
            return self.side_dishes
        return self.desserts


@dataclass(frozen=True, slots=True)
class CanonicalDish:
    """A deduplicated dish together with every location serving it."""

    name: str
    price_students: Optional[str]
    price_employees: Optional[str]
    price_guests: Optional[str]
    extras: tuple[str, ...]
    locations: tuple[Location, ...]

    @classmethod
    def from_entry(cls, entry: RawDishEntry, location: Location) -> "CanonicalDish":
        return cls(
            name=entry.name,
            price_students=entry.price_students,
            price_employees=entry.price_employees,
            price_guests=entry.price_guests,
            extras=tuple(sorted(set(entry.extras))),
            locations=(location,),
        )

    def content_key(self) -> ContentKey:
        return (
            self.name,
            self.price_students,
            self.price_employees,
            self.price_guests,
            frozenset(self.extras),
        )

    def price_for(self, tier: PriceTier) -> Optional[str]:
        if tier is PriceTier.STUDENT:
            return self.price_students
        if tier is PriceTier.EMPLOYEE:
            return self.price_employees
        return self.price_guests

    @property
    def location_names(self) -> list[str]:
        return [location.name for location in self.locations]

    def to_dict(self) -> dict[str, object]:
        return {
            "name": self.name,
            "prices": {tier.value: self.price_for(tier) for tier in PriceTier},
            "extras": list(self.extras),
            "locations": self.location_names,
        }


@dataclass(frozen=True, slots=True)
class AggregatedMenu:
    """The unified menu across all evaluated locations."""

    main_dishes: tuple[CanonicalDish, ...] = ()
    side_dishes: tuple[CanonicalDish, ...] = ()
    desserts: tuple[CanonicalDish, ...] = ()

    def dishes(self, course: Course) -> tuple[CanonicalDish, ...]:
        if course is Course.MAIN:
            return self.main_dishes
        if course is Course.SIDE:
            return self.side_dishes
        return self.desserts

    def is_empty(self) -> bool:
        return not (self.main_dishes or self.side_dishes or self.desserts)

    def to_dict(self) -> dict[str, list[dict[str, object]]]:
        return {
            course.value: [dish.to_dict() for dish in self.dishes(course)]
            for course in Course
        }
