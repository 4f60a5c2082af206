"""Menu page extraction for the Studierendenwerk Paderborn menu pages."""

from __future__ import annotations

import logging
from typing import Callable, Mapping, Sequence
from urllib.parse import urljoin

from bs4 import BeautifulSoup, NavigableString, Tag

from .models import PRICE_TIER_LABELS, Course, PriceTier, RawDishEntry

logger = logging.getLogger(__name__)

# Rows below a dish table; each row holds an optional image and a ``div.desc``.
COURSE_SELECTORS: dict[Course, str] = {
    Course.MAIN: "table.table-dishes.main-dishes tr.odd > td.description > div.row",
    Course.SIDE: "table.table-dishes.side-dishes tr.odd > td.description > div.row",
    Course.DESSERT: "table.table-dishes.soups tr.odd > td.description > div.row",
}

Extractor = Callable[[str, str], Mapping[Course, Sequence[RawDishEntry]]]


class MenuExtractionError(ValueError):
    """Raised when a single dish cannot be read from the page."""


def extract_menu(html: str, base_url: str = "") -> dict[Course, list[RawDishEntry]]:
    """Return the raw dishes found in *html*, grouped by course.

    Dishes that cannot be parsed are skipped individually.
    """

    menu: dict[Course, list[RawDishEntry]] = {course: [] for course in Course}
    if not html:
        return menu

    soup = BeautifulSoup(html, "lxml")
    for course, selector in COURSE_SELECTORS.items():
        for row in soup.select(selector):
            try:
                menu[course].append(parse_dish(row, base_url))
            except MenuExtractionError as exc:
                logger.debug("Skipping %s dish: %s", course.value, exc)
    return menu


def parse_dish(row: Tag, base_url: str = "") -> RawDishEntry:
    """Parse one dish row into a :class:`RawDishEntry`."""

    desc = row.select_one("div.desc")
    if desc is None:
        raise MenuExtractionError("dish row without description")

    heading = desc.find("h4")
    if heading is None:
        raise MenuExtractionError("dish without name")
    name = heading.get_text("", strip=False).strip()
    if not name:
        raise MenuExtractionError("dish with empty name")

    prices: dict[PriceTier, str] = {}
    for label, value in _iter_prices(desc):
        tier = PRICE_TIER_LABELS.get(label)
        if tier is not None and tier not in prices:
            prices[tier] = value

    extras = tuple(
        str(extra["title"])
        for extra in desc.select(".buttons > *")
        if extra.get("title")
    )

    return RawDishEntry(
        name=name,
        price_students=prices.get(PriceTier.STUDENT),
        price_employees=prices.get(PriceTier.EMPLOYEE),
        price_guests=prices.get(PriceTier.GUEST),
        extras=extras,
        image_url=_image_url(row, base_url),
    )


def _iter_prices(desc: Tag) -> list[tuple[str, str]]:
    """Return ``(label, value)`` pairs from ``.price`` elements.

    The label is the bold text without its trailing colon, the value is the
    last text node of the element.
    """

    pairs: list[tuple[str, str]] = []
    for price in desc.select(".price"):
        strong = price.find("strong")
        if strong is None:
            continue
        label = strong.get_text("", strip=True).rstrip(":").strip()

        texts = [
            str(child).strip()
            for child in price.children
            if isinstance(child, NavigableString) and str(child).strip()
        ]
        if not label or not texts:
            continue
        pairs.append((label, texts[-1]))
    return pairs


def _image_url(row: Tag, base_url: str) -> str | None:
    image = row.find("img")
    if image is None:
        return None
    src = (image.get("data-src") or image.get("src") or "").strip()
    if not src or src.startswith("data:"):
        return None
    return urljoin(base_url, src) if base_url else src
