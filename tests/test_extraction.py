from mensa_menu.extraction import extract_menu
from mensa_menu.models import Course

PAGE = """
<html>
  <body>
    <table class="table-dishes main-dishes">
      <tbody>
        <tr class="odd">
          <td class="description">
            <div class="row">
              <div class="img"><img src="/fileadmin/linsen.jpg" /></div>
              <div class="desc">
                <h4> Linseneintopf </h4>
                <div class="price"><strong>Studierende:</strong> 2,20 €</div>
                <div class="price"><strong>Bedienstete:</strong> 3,10 €</div>
                <div class="price"><strong>Gäste:</strong> 4,00 €</div>
                <div class="buttons">
                  <a title="Veganes Gericht"></a>
                  <span title="Bio-Siegel"></span>
                  <span></span>
                </div>
              </div>
            </div>
          </td>
        </tr>
        <tr class="even">
          <td class="description">
            <div class="row"><div class="desc"><h4>Detailzeile</h4></div></div>
          </td>
        </tr>
        <tr class="odd">
          <td class="description">
            <div class="row">
              <div class="desc">
                <div class="price"><strong>Studierende:</strong> 1,00 €</div>
              </div>
            </div>
          </td>
        </tr>
        <tr class="odd">
          <td class="description">
            <div class="row">
              <div class="desc">
                <h4>Currywurst</h4>
                <div class="price"><strong>Studierende:</strong> 2,00 €</div>
              </div>
            </div>
          </td>
        </tr>
      </tbody>
    </table>
    <table class="table-dishes side-dishes">
      <tbody>
        <tr class="odd">
          <td class="description">
            <div class="row"><div class="desc"><h4>Pommes</h4></div></div>
          </td>
        </tr>
      </tbody>
    </table>
    <table class="table-dishes soups">
      <tbody>
        <tr class="odd">
          <td class="description">
            <div class="row"><div class="desc"><h4>   </h4></div></div>
          </td>
        </tr>
        <tr class="odd">
          <td class="description">
            <div class="row"><div class="desc"><h4>Schokopudding</h4></div></div>
          </td>
        </tr>
      </tbody>
    </table>
  </body>
</html>
"""


def test_extracts_dishes_per_course():
    menu = extract_menu(PAGE, "https://www.studierendenwerk-pb.de/gastronomie/speiseplaene/forum/")

    assert [dish.name for dish in menu[Course.MAIN]] == ["Linseneintopf", "Currywurst"]
    assert [dish.name for dish in menu[Course.SIDE]] == ["Pommes"]
    assert [dish.name for dish in menu[Course.DESSERT]] == ["Schokopudding"]


def test_reads_prices_extras_and_image():
    stew = extract_menu(PAGE, "https://www.studierendenwerk-pb.de/gastronomie/speiseplaene/forum/")[Course.MAIN][0]

    assert stew.price_students == "2,20 €"
    assert stew.price_employees == "3,10 €"
    assert stew.price_guests == "4,00 €"
    assert stew.extras == ("Veganes Gericht", "Bio-Siegel")
    assert stew.image_url == "https://www.studierendenwerk-pb.de/fileadmin/linsen.jpg"


def test_missing_prices_stay_absent():
    currywurst = extract_menu(PAGE)[Course.MAIN][1]

    assert currywurst.price_students == "2,00 €"
    assert currywurst.price_employees is None
    assert currywurst.price_guests is None
    assert currywurst.extras == ()
    assert currywurst.image_url is None


def test_empty_page_yields_empty_courses():
    assert extract_menu("") == {Course.MAIN: [], Course.SIDE: [], Course.DESSERT: []}
    assert extract_menu("<html><body><p>Heute geschlossen</p></body></html>") == {
        Course.MAIN: [],
        Course.SIDE: [],
        Course.DESSERT: [],
    }
