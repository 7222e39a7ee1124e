"""Tests for the ratings CSV export."""

from beerfest.models.entities import Beer, Brewery
from beerfest.services.exporter import ratings_csv


def _beer(name, rating, style="IPA", brewery="Oakham"):
    return Beer(name.lower(), name, 5.0, Brewery("P1", brewery), style=style, rating=rating)


class TestRatingsCsv:
    def test_header_only_when_nothing_rated(self):
        assert ratings_csv([]) == "Beer,Brewery,Style,Rating\n"

    def test_rated_rows(self):
        body = ratings_csv([_beer("Citra", 4), _beer("Inferno", 2, style="Golden Ale")])

        assert body.splitlines() == [
            "Beer,Brewery,Style,Rating",
            '"Citra","Oakham","IPA",4',
            '"Inferno","Oakham","Golden Ale",2',
        ]

    def test_unrated_beers_left_out(self):
        body = ratings_csv([_beer("Citra", 0), _beer("Inferno", 3)])
        assert "Citra" not in body

    def test_quotes_escaped(self):
        body = ratings_csv([_beer('The "Big" One', 5, brewery="Ale, Co")])
        assert '"The ""Big"" One","Ale, Co","IPA",5' in body

    def test_from_store(self, store):
        store.upsert_brewery("P1", "Milton")
        store.upsert_beer("B1", "Pegasus", 4.1, "", "Bitter", "", "", "P1")
        store.upsert_beer("B2", "Minotaur", 3.3, "", "Mild", "", "", "P1")
        store.set_rating("B2", 4)

        assert ratings_csv(store.rated_beers()).splitlines()[1:] == ['"Minotaur","Milton","Mild",4']
