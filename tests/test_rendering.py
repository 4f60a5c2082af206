import csv
import io
import json

from rich.console import Console

from mensa_menu.locations import ACADEMICA, FORUM
from mensa_menu.models import AggregatedMenu, CanonicalDish, PriceTier
from mensa_menu.rendering import EMPTY_COURSE_TEXT, menu_csv, menu_json, menu_table

STEW = CanonicalDish(
    name="Linseneintopf",
    price_students="2,20€",
    price_employees="3,10€",
    price_guests=None,
    extras=("Bio-Siegel", "Veganes Gericht"),
    locations=(FORUM, ACADEMICA),
)
MENU = AggregatedMenu(main_dishes=(STEW,))


def render(table) -> str:
    console = Console(width=160, record=True, color_system=None)
    console.print(table)
    return console.export_text()


def test_json_groups_dishes_by_course():
    payload = json.loads(menu_json(MENU))

    assert payload["side"] == []
    assert payload["dessert"] == []
    assert payload["main"] == [
        {
            "name": "Linseneintopf",
            "prices": {"student": "2,20€", "employee": "3,10€", "guest": None},
            "extras": ["Bio-Siegel", "Veganes Gericht"],
            "locations": ["Forum", "Academica"],
        }
    ]


def test_json_with_price_level_shows_single_price():
    payload = json.loads(menu_json(MENU, PriceTier.GUEST))

    assert payload["main"][0]["prices"] == {"guest": "-"}


def test_csv_has_course_column():
    rows = list(csv.reader(io.StringIO(menu_csv(MENU, PriceTier.STUDENT))))

    assert rows[0] == ["Kategorie", "Gericht", "Preis", "Mensa", "Extras"]
    assert rows[1] == ["Hauptgerichte", "Linseneintopf", "2,20€", "Forum, Academica", "Bio-Siegel, Veganes Gericht"]
    assert len(rows) == 2


def test_table_lists_sections_and_locations():
    text = render(menu_table(MENU, show_mensa=True))

    assert "Hauptgerichte" in text
    assert "Beilagen" in text
    assert "Desserts" in text
    assert "Linseneintopf" in text
    assert "Forum, Academica" in text
    assert "Preis Studierende" in text
    assert EMPTY_COURSE_TEXT in text


def test_table_hides_location_column_for_single_location():
    text = render(menu_table(MENU, PriceTier.STUDENT, show_mensa=False))

    assert "Mensa" not in text
    assert "Preis Studierende" not in text
    assert "2,20€" in text
