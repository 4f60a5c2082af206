"""Table, JSON and CSV output for aggregated menus."""

from __future__ import annotations

import csv
import io
import json

from rich import box
from rich.table import Table
from rich.text import Text

from .filters import project_prices
from .models import AggregatedMenu, CanonicalDish, Course, PriceTier

COURSE_TITLES: dict[Course, str] = {
    Course.MAIN: "Hauptgerichte",
    Course.SIDE: "Beilagen",
    Course.DESSERT: "Desserts",
}

PRICE_HEADERS: dict[PriceTier, str] = {
    PriceTier.STUDENT: "Preis Studierende",
    PriceTier.EMPLOYEE: "Preis Bedienstete",
    PriceTier.GUEST: "Preis Gäste",
}

EMPTY_COURSE_TEXT = "Keine Daten"


def _header(price_level: PriceTier | None, show_mensa: bool) -> list[str]:
    header = ["Gericht"]
    if price_level is not None:
        header.append("Preis")
    else:
        header.extend(PRICE_HEADERS[tier] for tier in PriceTier)
    if show_mensa:
        header.append("Mensa")
    header.append("Extras")
    return header


def _row(dish: CanonicalDish, price_level: PriceTier | None, show_mensa: bool) -> list[str]:
    prices = project_prices(dish, price_level)
    row = [dish.name]
    row.extend(value or "" for value in prices.values())
    if show_mensa:
        row.append(", ".join(dish.location_names))
    row.append(", ".join(dish.extras))
    return row


def menu_table(
    menu: AggregatedMenu,
    price_level: PriceTier | None = None,
    show_mensa: bool = False,
) -> Table:
    """Build a rich table with one section per course."""

    header = _header(price_level, show_mensa)
    table = Table(box=box.SQUARE, expand=True, show_lines=False)
    for index, title in enumerate(header):
        table.add_column(title, justify="left" if index == 0 else "right")

    for course in Course:
        if course is not Course.MAIN:
            table.add_section()
        table.add_row(Text(COURSE_TITLES[course], style="bold underline"), *[""] * (len(header) - 1))
        table.add_section()
        dishes = menu.dishes(course)
        if not dishes:
            table.add_row(Text(EMPTY_COURSE_TEXT, style="dim"), *[""] * (len(header) - 1))
            continue
        for dish in dishes:
            table.add_row(*_row(dish, price_level, show_mensa))
    return table


def menu_json(menu: AggregatedMenu, price_level: PriceTier | None = None) -> str:
    """Serialise *menu* as JSON keyed by course."""

    payload = {
        course.value: [
            {
                "name": dish.name,
                "prices": project_prices(dish, price_level),
                "extras": list(dish.extras),
                "locations": dish.location_names,
            }
            for dish in menu.dishes(course)
        ]
        for course in Course
    }
    return json.dumps(payload, ensure_ascii=False)


def menu_csv(
    menu: AggregatedMenu,
    price_level: PriceTier | None = None,
    show_mensa: bool = True,
) -> str:
    """Render *menu* as CSV with a leading course column."""

    handle = io.StringIO()
    writer = csv.writer(handle)
    writer.writerow(["Kategorie", *_header(price_level, show_mensa)])
    for course in Course:
        for dish in menu.dishes(course):
            writer.writerow([COURSE_TITLES[course], *_row(dish, price_level, show_mensa)])
    return handle.getvalue()
