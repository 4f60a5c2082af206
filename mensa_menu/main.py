"""CLI entry point for the mensa menu aggregator."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Sequence

from rich.console import Console

from .aggregation import aggregate
from .crawler import DEFAULT_USER_AGENT, AsyncCrawler
from .enrichment import ImageEnricher
from .extraction import Extractor, extract_menu
from .filters import apply_filters
from .locations import DEFAULT_LOCATIONS, Location, get_location, location_keys
from .models import AggregatedMenu, PriceTier, parse_price_tier
from .rendering import menu_csv, menu_json, menu_table
from .scheduler import fetch_daily_menus

USER_AGENT = os.getenv("MENSA_USER_AGENT") or DEFAULT_USER_AGENT
OUTPUT_FORMATS = ("table", "json", "csv")


def main(argv: Sequence[str] | None = None) -> None:
    """Execute the CLI."""

    args = _parse_args(argv)
    _configure_logging(args.log_level)

    locations = [get_location(key) for key in args.mensa]
    day = resolve_day(days_ahead=args.days_ahead, explicit=args.date)
    logging.info(
        "Fetching menus for %s (%s)",
        ", ".join(location.name for location in locations),
        day.isoformat() if day else "today",
    )

    menu = asyncio.run(
        build_menu(locations, day, extras=args.extras, user_agent=args.user_agent)
    )
    if menu.is_empty():
        logging.warning("No dishes found for the selected criteria")

    show_mensa = len(locations) > 1
    if args.format == "json":
        print(menu_json(menu, args.price_level))
    elif args.format == "csv":
        print(menu_csv(menu, args.price_level, show_mensa=show_mensa), end="")
    else:
        Console().print(menu_table(menu, args.price_level, show_mensa=show_mensa))


async def build_menu(
    locations: Iterable[Location],
    day: date | None = None,
    *,
    extras: Sequence[str] | None = None,
    user_agent: str = USER_AGENT,
    crawler: AsyncCrawler | None = None,
    extractor: Extractor = extract_menu,
    enricher: ImageEnricher | None = None,
) -> AggregatedMenu:
    """Fetch, aggregate and filter the menus of *locations* for *day*."""

    selected = list(locations)
    if crawler is None:
        async with AsyncCrawler(
            user_agent=user_agent, concurrency=max(len(selected), 1)
        ) as own_crawler:
            results = await fetch_daily_menus(
                selected, day, crawler=own_crawler, extractor=extractor, enricher=enricher
            )
    else:
        results = await fetch_daily_menus(
            selected, day, crawler=crawler, extractor=extractor, enricher=enricher
        )
    return apply_filters(aggregate(results), extras)


def resolve_day(
    *,
    days_ahead: int | None = None,
    explicit: date | None = None,
    today: date | None = None,
) -> date | None:
    """Pick the target date; ``None`` leaves the choice to the remote service."""

    if explicit is not None:
        return explicit
    if days_ahead is None:
        return None
    base = today or datetime.now(timezone.utc).date()
    return base + timedelta(days=days_ahead)


def parse_price_level(value: str) -> PriceTier:
    try:
        return parse_price_tier(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from None


def _parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD") from None


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError("days ahead must be >= 0")
    return number


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "-m",
        "--mensa",
        nargs="+",
        choices=location_keys(),
        default=[location.key for location in DEFAULT_LOCATIONS],
        help="Cafeterias to include",
    )
    parser.add_argument(
        "-p",
        "--price-level",
        type=parse_price_level,
        default=None,
        help="Only show the price for this tier (student, employee, guest)",
    )
    when = parser.add_mutually_exclusive_group()
    when.add_argument(
        "-d",
        "--days-ahead",
        type=_non_negative_int,
        default=None,
        help="Show the menu this many days from today",
    )
    when.add_argument(
        "--date",
        type=_parse_date,
        default=None,
        help="Show the menu for this date (YYYY-MM-DD)",
    )
    parser.add_argument(
        "-e",
        "--extras",
        action="extend",
        nargs="+",
        default=[],
        help="Only show dishes whose extras contain every given term",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=OUTPUT_FORMATS,
        default="table",
        help="Output format",
    )
    parser.add_argument(
        "--user-agent",
        default=USER_AGENT,
        help="User-Agent header to send with HTTP requests",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (e.g. INFO, DEBUG)",
    )

    return parser.parse_args(argv)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(levelname)s %(message)s",
    )


if __name__ == "__main__":
    main()
