"""Extras filtering and price-tier projection for aggregated menus."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from .models import AggregatedMenu, CanonicalDish, PriceTier

NOT_OFFERED = "-"


def matches_extras(dish: CanonicalDish, terms: Sequence[str]) -> bool:
    """True if every term is a substring of at least one of the dish's extras.

    Matching ignores case, so ``"vegan"`` matches ``"Veganes Gericht"``.
    """

    labels = [extra.casefold() for extra in dish.extras]
    return all(
        any(term.casefold() in label for label in labels)
        for term in terms
    )


def filter_by_extras(
    dishes: Iterable[CanonicalDish], terms: Sequence[str] | None
) -> tuple[CanonicalDish, ...]:
    cleaned = [term for term in terms or () if term]
    if not cleaned:
        return tuple(dishes)
    return tuple(dish for dish in dishes if matches_extras(dish, cleaned))


def apply_filters(menu: AggregatedMenu, extras: Sequence[str] | None = None) -> AggregatedMenu:
    """Return a copy of *menu* holding only dishes that match *extras*."""

    if not extras:
        return menu
    return AggregatedMenu(
        main_dishes=filter_by_extras(menu.main_dishes, extras),
        side_dishes=filter_by_extras(menu.side_dishes, extras),
        desserts=filter_by_extras(menu.desserts, extras),
    )


def project_prices(
    dish: CanonicalDish, tier: PriceTier | None = None
) -> dict[str, Optional[str]]:
    """Reduce a dish's prices to the requested tier.

    Without a tier all three prices are returned unmodified (``None`` when
    not offered). With a tier only that price is returned, using
    :data:`NOT_OFFERED` when the dish is not sold at that tier.
    """

    if tier is None:
        return {level.value: dish.price_for(level) for level in PriceTier}
    price = dish.price_for(tier)
    return {tier.value: price if price is not None else NOT_OFFERED}
