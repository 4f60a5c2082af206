import pytest

from mensa_menu.locations import (
    ACADEMICA,
    ATRIUM,
    CATALOG,
    FORUM,
    GRILL_CAFE,
    UnknownLocationError,
    get_location,
    parse_locations,
    sort_locations,
)


def test_catalog_urls():
    assert FORUM.url.endswith("/gastronomie/speiseplaene/forum/")
    assert GRILL_CAFE.name == "Grill | Café"
    assert len({location.key for location in CATALOG}) == len(CATALOG)


def test_lookup_is_case_insensitive():
    assert get_location("Bona-Vista").name == "Bona Vista"
    with pytest.raises(UnknownLocationError):
        get_location("mars")


def test_parse_locations_deduplicates_and_keeps_order():
    assert parse_locations("academica, forum,academica,") == [ACADEMICA, FORUM]
    assert parse_locations(["atrium"]) == [ATRIUM]


def test_sort_locations_uses_catalog_order():
    assert sort_locations([ATRIUM, FORUM, ACADEMICA, FORUM]) == (FORUM, ACADEMICA, ATRIUM)
