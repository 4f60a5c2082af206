"""Merging of per-location results into one deduplicated menu."""

from __future__ import annotations

import logging
from functools import reduce
from typing import Iterable, Sequence

from .locations import Location, sort_locations
from .models import AggregatedMenu, CanonicalDish, Course, DailyLocationResult, RawDishEntry

logger = logging.getLogger(__name__)


class AggregationError(RuntimeError):
    """Raised when an aggregated menu violates its ordering or uniqueness rules."""


def merge_entry(
    dishes: Sequence[CanonicalDish],
    entry: RawDishEntry,
    location: Location,
) -> list[CanonicalDish]:
    """Return a new dish list with *entry* served at *location* folded in.

    A content-equal dish gains *location*; otherwise a new dish is appended.
    """

    key = entry.content_key()
    merged: list[CanonicalDish] = []
    found = False
    for dish in dishes:
        if not found and dish.content_key() == key:
            dish = CanonicalDish(
                name=dish.name,
                price_students=dish.price_students,
                price_employees=dish.price_employees,
                price_guests=dish.price_guests,
                extras=dish.extras,
                locations=sort_locations((*dish.locations, location)),
            )
            found = True
        merged.append(dish)

    if not found:
        merged.append(CanonicalDish.from_entry(entry, location))
    return merged


def merge_course(results: Iterable[DailyLocationResult], course: Course) -> tuple[CanonicalDish, ...]:
    """Fold one course across *results* and sort the outcome by name."""

    pairs = (
        (entry, result.location)
        for result in results
        for entry in result.entries(course)
    )
    dishes = reduce(lambda acc, pair: merge_entry(acc, *pair), pairs, [])
    return tuple(sorted(dishes, key=_sort_key))


def _sort_key(dish: CanonicalDish) -> tuple:
    # Name first; the rest only orders same-named dishes with different content.
    prices = tuple(
        (price is not None, price or "")
        for price in (dish.price_students, dish.price_employees, dish.price_guests)
    )
    return (dish.name, prices, dish.extras)


def aggregate(results: Iterable[DailyLocationResult]) -> AggregatedMenu:
    """Build the :class:`AggregatedMenu` for the given location results.

    The outcome depends only on the (dish, location) pairs observed, not on
    the order of *results*. No results yield an empty menu.
    """

    collected = list(results)
    menu = AggregatedMenu(
        main_dishes=merge_course(collected, Course.MAIN),
        side_dishes=merge_course(collected, Course.SIDE),
        desserts=merge_course(collected, Course.DESSERT),
    )
    verify_menu(menu)
    logger.debug(
        "Aggregated %d locations into %d/%d/%d dishes",
        len(collected),
        len(menu.main_dishes),
        len(menu.side_dishes),
        len(menu.desserts),
    )
    return menu


def verify_menu(menu: AggregatedMenu) -> None:
    """Raise :class:`AggregationError` when *menu* breaks an invariant."""

    for course in Course:
        dishes = menu.dishes(course)
        names = [dish.name for dish in dishes]
        if names != sorted(names):
            raise AggregationError(f"{course.value} dishes are not sorted by name")

        seen: set = set()
        for dish in dishes:
            key = dish.content_key()
            if key in seen:
                raise AggregationError(
                    f"duplicate {course.value} dish {dish.name!r} survived the merge"
                )
            seen.add(key)

            if dish.locations != sort_locations(dish.locations):
                raise AggregationError(
                    f"locations of {dish.name!r} are not unique and ordered"
                )
