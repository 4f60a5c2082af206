"""Concurrent per-location menu fetching."""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from typing import Iterable, Sequence

from .crawler import AsyncCrawler
from .enrichment import ImageEnricher
from .extraction import Extractor, extract_menu
from .locations import Location
from .models import Course, DailyLocationResult, RawDishEntry

logger = logging.getLogger(__name__)

DATE_PARAM = "tx_pamensa_mensa[date]"


def date_params(day: date | None) -> dict[str, str]:
    """Query parameters selecting *day*; empty means the service's today."""

    if day is None:
        return {}
    return {DATE_PARAM: day.strftime("%Y-%m-%d")}


async def fetch_daily_menus(
    locations: Iterable[Location],
    day: date | None = None,
    *,
    crawler: AsyncCrawler | None = None,
    extractor: Extractor = extract_menu,
    enricher: ImageEnricher | None = None,
) -> list[DailyLocationResult]:
    """Fetch every location concurrently and return the successful results.

    Locations whose request or extraction fails contribute nothing.
    """

    unique: list[Location] = []
    for location in locations:
        if location not in unique:
            unique.append(location)

    if crawler is None:
        async with AsyncCrawler(concurrency=max(len(unique), 1)) as own_crawler:
            return await _gather(unique, day, own_crawler, extractor, enricher)
    return await _gather(unique, day, crawler, extractor, enricher)


async def _gather(
    locations: Sequence[Location],
    day: date | None,
    crawler: AsyncCrawler,
    extractor: Extractor,
    enricher: ImageEnricher | None,
) -> list[DailyLocationResult]:
    tasks = [
        asyncio.create_task(_process_location(location, day, crawler, extractor, enricher))
        for location in locations
    ]
    results = await asyncio.gather(*tasks, return_exceptions=True)
    collected: list[DailyLocationResult] = []
    for location, result in zip(locations, results):
        if isinstance(result, BaseException):
            logger.warning("Dropping %s after unexpected error: %r", location.name, result)
            continue
        if result is not None:
            collected.append(result)
    logger.info("Fetched %d of %d locations", len(collected), len(locations))
    return collected


async def _process_location(
    location: Location,
    day: date | None,
    crawler: AsyncCrawler,
    extractor: Extractor,
    enricher: ImageEnricher | None,
) -> DailyLocationResult | None:
    result = await crawler.post(location.url, params=date_params(day) or None)

    if result.error:
        logger.warning("Failed to fetch menu for %s: %s", location.name, result.error)
        return None

    status = result.status_code or 0
    if status >= 400:
        logger.warning("Menu page for %s answered with HTTP %s", location.name, status)
        return None

    base_url = result.final_url or location.url
    try:
        extracted = extractor(result.text or "", base_url)
    except Exception as exc:
        logger.warning("Failed to extract menu for %s: %s", location.name, exc)
        return None

    daily = DailyLocationResult(
        location=location,
        main_dishes=_valid_entries(extracted.get(Course.MAIN, ()), location),
        side_dishes=_valid_entries(extracted.get(Course.SIDE, ()), location),
        desserts=_valid_entries(extracted.get(Course.DESSERT, ()), location),
    )

    if enricher is not None:
        for course in Course:
            for entry in daily.entries(course):
                if entry.image_url:
                    enricher.submit(entry.name, entry.image_url)

    return daily


def _valid_entries(entries: Iterable[RawDishEntry], location: Location) -> list[RawDishEntry]:
    valid: list[RawDishEntry] = []
    for entry in entries:
        if not entry.name or not entry.name.strip():
            logger.debug("Dropping nameless dish from %s", location.name)
            continue
        valid.append(entry)
    return valid
