"""Minimal FastAPI front end showing the aggregated menu per day."""

from __future__ import annotations

import html
import logging
import os
from datetime import date, datetime, timedelta, timezone
from typing import Optional
from urllib.parse import quote, urlencode

from fastapi import FastAPI, Query
from fastapi.responses import HTMLResponse, JSONResponse, Response

from mensa_menu.crawler import AsyncCrawler
from mensa_menu.enrichment import ImageEnricher
from mensa_menu.filters import project_prices
from mensa_menu.locations import (
    CATALOG,
    DEFAULT_LOCATIONS,
    Location,
    UnknownLocationError,
    parse_locations,
)
from mensa_menu.main import USER_AGENT, build_menu
from mensa_menu.models import AggregatedMenu, Course, PriceTier, parse_price_tier
from mensa_menu.rendering import COURSE_TITLES, EMPTY_COURSE_TEXT, PRICE_HEADERS

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
logging.getLogger("httpx").setLevel(logging.INFO)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)

DAY_TABS = 7
WEEKDAY_NAMES = (
    "Montag",
    "Dienstag",
    "Mittwoch",
    "Donnerstag",
    "Freitag",
    "Samstag",
    "Sonntag",
)

app = FastAPI(title="Mensa Menu")

_enricher: ImageEnricher | None = None
_image_crawler: AsyncCrawler | None = None


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


CONCURRENCY = _env_int("MENSA_CONCURRENCY", len(CATALOG))


def _default_locations() -> list[Location]:
    configured = os.getenv("MENSA_DEFAULT_LOCATIONS")
    if configured:
        try:
            locations = parse_locations(configured)
        except UnknownLocationError as exc:
            logger.warning("Ignoring MENSA_DEFAULT_LOCATIONS: %s", exc)
        else:
            if locations:
                return locations
    return list(DEFAULT_LOCATIONS)


@app.on_event("startup")
async def _on_startup() -> None:
    global _enricher, _image_crawler
    if _enricher is None:
        _image_crawler = AsyncCrawler(user_agent=USER_AGENT, concurrency=CONCURRENCY)
        _enricher = ImageEnricher(_image_crawler)


@app.on_event("shutdown")
async def _on_shutdown() -> None:
    global _enricher, _image_crawler
    if _enricher is not None:
        await _enricher.wait()
    if _image_crawler is not None:
        await _image_crawler.aclose()
    _enricher = None
    _image_crawler = None


def day_for_offset(offset: int, today: date | None = None) -> date:
    base = today or datetime.now(timezone.utc).date()
    return base + timedelta(days=offset)


def day_label(offset: int, today: date | None = None) -> str:
    """Tab title: Heute, Morgen, then the German weekday name."""

    if offset == 0:
        return "Heute"
    if offset == 1:
        return "Morgen"
    return WEEKDAY_NAMES[day_for_offset(offset, today).weekday()]


class _BadRequest(ValueError):
    pass


def _resolve_request(
    mensa: list[str] | None, price_level: str | None
) -> tuple[list[Location], PriceTier | None]:
    try:
        locations = parse_locations(mensa) if mensa else _default_locations()
    except UnknownLocationError as exc:
        raise _BadRequest(str(exc)) from None
    if not locations:
        raise _BadRequest("At least one location must be specified")

    tier = None
    if price_level:
        try:
            tier = parse_price_tier(price_level)
        except ValueError as exc:
            raise _BadRequest(str(exc)) from None
    return locations, tier


async def _load_menu(day: int, locations: list[Location], extras: list[str]) -> AggregatedMenu:
    return await build_menu(
        locations,
        day_for_offset(day),
        extras=extras,
        user_agent=USER_AGENT,
        enricher=_enricher,
    )


@app.get("/locations")
def locations():
    return [{"key": location.key, "name": location.name, "url": location.url} for location in CATALOG]


@app.get("/api/menu")
async def api_menu(
    day: int = Query(0, ge=0, lt=DAY_TABS),
    mensa: Optional[list[str]] = Query(None),
    extras: Optional[list[str]] = Query(None),
    price_level: Optional[str] = None,
):
    try:
        selected, tier = _resolve_request(mensa, price_level)
    except _BadRequest as exc:
        return JSONResponse({"error": str(exc)}, status_code=400)

    menu = await _load_menu(day, selected, extras or [])
    payload: dict[str, object] = {
        "date": day_for_offset(day).isoformat(),
        "locations": [location.name for location in selected],
    }
    for course in Course:
        payload[course.value] = [
            {
                "name": dish.name,
                "prices": project_prices(dish, tier),
                "extras": list(dish.extras),
                "locations": dish.location_names,
                "image": f"/images/{quote(dish.name, safe='')}" if _has_image(dish.name) else None,
            }
            for dish in menu.dishes(course)
        ]
    return payload


@app.get("/images/{dish_name:path}")
def image(dish_name: str):
    found = _enricher.get(dish_name) if _enricher is not None else None
    if found is None:
        return Response(status_code=404)
    return Response(content=found.content, media_type=found.content_type)


@app.get("/", response_class=HTMLResponse)
async def index(
    day: int = Query(0, ge=0, lt=DAY_TABS),
    mensa: Optional[list[str]] = Query(None),
    extras: Optional[list[str]] = Query(None),
    price_level: Optional[str] = None,
):
    try:
        selected, tier = _resolve_request(mensa, price_level)
    except _BadRequest as exc:
        return HTMLResponse(f"<p>{html.escape(str(exc))}</p>", status_code=400)

    menu = await _load_menu(day, selected, extras or [])
    show_mensa = len(selected) > 1

    base_params: list[tuple[str, str]] = [("mensa", location.key) for location in selected]
    base_params.extend(("extras", term) for term in extras or [])
    if price_level:
        base_params.append(("price_level", price_level))

    tabs = "\n      ".join(
        '<a class="tab{active}" href="/?{query}">{label}</a>'.format(
            active=" active" if offset == day else "",
            query=html.escape(urlencode([("day", str(offset)), *base_params])),
            label=day_label(offset),
        )
        for offset in range(DAY_TABS)
    )

    headers = ["Gericht"]
    headers.extend(["Preis"] if tier is not None else [PRICE_HEADERS[level] for level in PriceTier])
    if show_mensa:
        headers.append("Mensa")
    headers.append("Extras")
    header_markup = "".join(f"<th>{html.escape(title)}</th>" for title in headers)

    sections: list[str] = []
    for course in Course:
        rows: list[str] = []
        for dish in menu.dishes(course):
            cells = [_name_cell(dish.name)]
            cells.extend(
                f'<td class="price">{html.escape(value or "")}</td>'
                for value in project_prices(dish, tier).values()
            )
            if show_mensa:
                cells.append(f"<td>{html.escape(', '.join(dish.location_names))}</td>")
            cells.append(f"<td>{html.escape(', '.join(dish.extras))}</td>")
            rows.append(f"<tr>{''.join(cells)}</tr>")
        if not rows:
            rows.append(f'<tr><td class="empty" colspan="{len(headers)}">{EMPTY_COURSE_TEXT}</td></tr>')
        sections.append(
            f"""
      <h2>{COURSE_TITLES[course]}</h2>
      <table>
        <thead><tr>{header_markup}</tr></thead>
        <tbody>{''.join(rows)}</tbody>
      </table>"""
        )

    return f"""
<!doctype html>
<html lang="de">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>Mensa UPB</title>
    <style>
      body {{
        font-family: system-ui, -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif;
        margin: 2rem auto;
        max-width: 960px;
        line-height: 1.5;
      }}
      nav {{ display: flex; gap: 0.25rem; margin-bottom: 1rem; }}
      .tab {{ padding: 0.25rem 0.75rem; background: #444; color: #ddd; text-decoration: none; }}
      .tab.active {{ background: #2e7d32; color: #fff; }}
      table {{ width: 100%; border-collapse: collapse; }}
      th, td {{ border-bottom: 1px solid #ddd; padding: 0.25rem 0.5rem; text-align: left; }}
      td.price {{ text-align: right; white-space: nowrap; }}
      td.empty {{ color: #888; font-style: italic; }}
      img.dish {{ height: 2.5rem; vertical-align: middle; margin-right: 0.5rem; }}
    </style>
  </head>
  <body>
    <h1>Mensa UPB</h1>
    <nav>
      {tabs}
    </nav>
    <p>{html.escape(day_for_offset(day).strftime('%d.%m.%Y'))} &middot; {html.escape(', '.join(location.name for location in selected))}</p>
    {''.join(sections)}
  </body>
</html>
"""


def _has_image(name: str) -> bool:
    return _enricher is not None and name in _enricher


def _name_cell(name: str) -> str:
    image_markup = ""
    if _has_image(name):
        image_markup = f'<img class="dish" alt="" src="/images/{quote(name, safe="")}" />'
    return f"<td>{image_markup}{html.escape(name)}</td>"
