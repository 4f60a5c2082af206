from mensa_menu.filters import NOT_OFFERED, apply_filters, filter_by_extras, matches_extras, project_prices
from mensa_menu.locations import FORUM
from mensa_menu.models import AggregatedMenu, CanonicalDish, PriceTier, RawDishEntry


def dish(name: str, extras=(), **prices) -> CanonicalDish:
    return CanonicalDish.from_entry(RawDishEntry(name=name, extras=tuple(extras), **prices), FORUM)


def test_every_term_must_match_some_extra():
    both = dish("Bowl", ["Veganes Gericht", "Bio-Siegel"])
    vegan_only = dish("Curry", ["Veganes Gericht"])

    assert matches_extras(both, ["vegan", "bio"])
    assert not matches_extras(vegan_only, ["vegan", "bio"])
    assert filter_by_extras([both, vegan_only], ["vegan", "bio"]) == (both,)


def test_terms_match_substrings_not_whole_labels():
    assert matches_extras(dish("Bowl", ["Veganes Gericht"]), ["Gericht"])
    assert not matches_extras(dish("Bowl", ["Veganes Gericht"]), ["Fisch"])


def test_empty_terms_keep_everything():
    dishes = [dish("A"), dish("B", ["Vegan"])]

    assert filter_by_extras(dishes, []) == tuple(dishes)
    assert filter_by_extras(dishes, None) == tuple(dishes)
    assert filter_by_extras(dishes, [""]) == tuple(dishes)


def test_terms_are_matched_verbatim():
    seal = dish("Bowl", ["Bio-Siegel"])
    daily = dish("Eintopf", ["Tag Bio"])

    assert filter_by_extras([seal, daily], [" bio"]) == (daily,)
    assert filter_by_extras([seal, daily], ["BIO"]) == (seal, daily)
    assert filter_by_extras([seal, daily], [" "]) == (daily,)


def test_apply_filters_covers_all_courses():
    menu = AggregatedMenu(
        main_dishes=(dish("A", ["Vegan"]), dish("B")),
        side_dishes=(dish("C"),),
        desserts=(dish("D", ["vegan"]),),
    )

    filtered = apply_filters(menu, ["vegan"])

    assert [d.name for d in filtered.main_dishes] == ["A"]
    assert filtered.side_dishes == ()
    assert [d.name for d in filtered.desserts] == ["D"]
    assert apply_filters(menu, []) is menu


def test_projection_without_tier_exposes_all_prices():
    stew = dish("Linseneintopf", price_students="2,20€", price_guests="4,00€")

    assert project_prices(stew) == {
        "student": "2,20€",
        "employee": None,
        "guest": "4,00€",
    }


def test_projection_with_tier_uses_placeholder_when_not_offered():
    stew = dish("Linseneintopf", price_students="2,20€")

    assert project_prices(stew, PriceTier.STUDENT) == {"student": "2,20€"}
    assert project_prices(stew, PriceTier.EMPLOYEE) == {"employee": NOT_OFFERED}
