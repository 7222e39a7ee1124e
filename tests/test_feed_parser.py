"""Tests for FeedParser: document-level failures and per-entry skipping."""

import json
import sys

import pytest

from beerfest.errors import MalformedFeed, SchemaMismatch
from beerfest.feed.parser import FeedParser

from conftest import make_feed, make_producer, make_product


@pytest.fixture
def parser():
    return FeedParser()


class TestWellFormedFeed:
    def test_parses_sample_feed(self, parser, sample_feed_bytes):
        feed = parser.parse(sample_feed_bytes)

        assert len(feed) == 2
        assert feed.product_count == 3
        assert feed.skipped_count == 0
        assert [b.name for b in feed] == ["Oakham Ales", "Brasserie Dupont"]

    def test_product_fields(self, parser, sample_feed_bytes):
        feed = parser.parse(sample_feed_bytes)
        citra = feed[0].products[0]

        assert citra.festival_id == "a1f0"
        assert citra.name == "Citra"
        assert citra.abv == pytest.approx(4.2)
        assert citra.notes == "Pale golden ale with grapefruit and lychee."
        assert citra.style == "Golden Ale"
        assert citra.status_text == "Plenty left"
        assert citra.dispense == "cask"
        assert citra.allergens == "gluten"
        assert citra.category == "beer"

    def test_preserves_feed_order(self, parser):
        raw = make_feed(
            make_producer("P2", "Zebra", products=[make_product("Z2", "Zulu"), make_product("Z1", "Alpha")]),
            make_producer("P1", "Aardvark"),
        )
        feed = parser.parse(raw)

        assert [b.festival_id for b in feed] == ["P2", "P1"]
        assert [p.festival_id for p in feed[0].products] == ["Z2", "Z1"]

    def test_brewery_description_prefers_notes_over_location(self, parser):
        raw = make_feed(make_producer(notes="Family brewery", location="Ely"))
        assert parser.parse(raw)[0].description == "Family brewery"

    def test_brewery_description_falls_back_to_location(self, parser, sample_feed_bytes):
        feed = parser.parse(sample_feed_bytes)
        assert feed[0].description == "Peterborough, Cambridgeshire"

    def test_producer_without_id_uses_name(self, parser):
        producer = make_producer()
        del producer["id"]
        assert parser.parse(make_feed(producer))[0].festival_id == "Milton"

    def test_unicode_text_preserved(self, parser, sample_feed_bytes):
        feed = parser.parse(sample_feed_bytes)
        assert feed[1].products[0].name == "Avec les Bons Vœux"

    def test_accepts_str_input_and_bom(self, parser):
        raw = make_feed(make_producer(products=[make_product()]))
        assert len(parser.parse(raw.decode("utf-8"))) == 1
        assert len(parser.parse(b"\xef\xbb\xbf" + raw)) == 1

    def test_unknown_fields_ignored(self, parser):
        raw = make_feed(
            make_producer(products=[make_product(allergens={"gluten": 1})], year_founded=1999),
            extra={"timestamp": "2024-05-20"},
        )
        feed = parser.parse(raw)
        assert feed.product_count == 1
        assert feed.skipped_count == 0

    def test_optional_product_text_defaults_to_empty(self, parser):
        product = {"id": "X1", "name": "Mystery", "abv": "5"}
        feed = parser.parse(make_feed(make_producer(products=[product])))
        parsed = feed[0].products[0]

        assert parsed.notes == ""
        assert parsed.style == ""
        assert parsed.status_text == ""
        assert parsed.dispense == ""


class TestAllergensAndCategory:
    def test_defaults(self, parser):
        product = parser.parse(make_feed(make_producer(products=[make_product()])))[0].products[0]
        assert product.allergens == ""
        assert product.category == "beer"

    def test_allergen_flags_object(self, parser):
        raw = make_feed(make_producer(products=[
            make_product(allergens={"gluten": 1, "sulphites": 0, "lactose": True}),
        ]))
        assert parser.parse(raw)[0].products[0].allergens == "gluten, lactose"

    @pytest.mark.parametrize("allergens, expected", [
        (["gluten", "nuts"], "gluten, nuts"),
        ("gluten, sulphites", "gluten, sulphites"),
        (None, ""),
    ])
    def test_allergen_list_or_string(self, parser, allergens, expected):
        raw = make_feed(make_producer(products=[make_product(allergens=allergens)]))
        assert parser.parse(raw)[0].products[0].allergens == expected

    def test_category_carried(self, parser):
        raw = make_feed(make_producer(products=[make_product(category="low-no")]))
        assert parser.parse(raw)[0].products[0].category == "low-no"

    def test_bad_allergens_skip_product(self, parser):
        raw = make_feed(make_producer(products=[make_product(allergens=42)]))
        feed = parser.parse(raw)
        assert feed.product_count == 0
        assert feed.skipped[0].path == "producers[0].products[0].allergens"


class TestEmptyFeed:
    def test_empty_producers_is_valid(self, parser):
        feed = parser.parse(b'{"producers": []}')
        assert len(feed) == 0
        assert feed.skipped_count == 0

    def test_producer_without_products(self, parser):
        feed = parser.parse(make_feed(make_producer(products=None)))
        assert len(feed) == 1
        assert feed[0].products == []


class TestDocumentFailures:
    @pytest.mark.parametrize("raw", [b"", b"{not json", b'{"producers": [', b"\xff\xfe\x00"])
    def test_malformed_document(self, parser, raw):
        with pytest.raises(MalformedFeed):
            parser.parse(raw)

    @pytest.mark.parametrize("raw", [b"[]", b'"producers"', b"42", b"null"])
    def test_non_object_top_level(self, parser, raw):
        with pytest.raises(MalformedFeed):
            parser.parse(raw)

    def test_missing_producers(self, parser):
        with pytest.raises(SchemaMismatch) as exc_info:
            parser.parse(b'{"breweries": []}')
        assert exc_info.value.path == "producers"

    def test_producers_not_an_array(self, parser):
        with pytest.raises(SchemaMismatch):
            parser.parse(b'{"producers": {"id": "P1"}}')

    @pytest.mark.skipif(
        not hasattr(sys, "get_int_max_str_digits"), reason="no integer digit limit on this Python"
    )
    def test_integer_past_digit_limit_is_malformed(self, parser):
        raw = b'{"producers": [], "total": ' + b"1" * 5000 + b"}"
        with pytest.raises(MalformedFeed) as exc_info:
            parser.parse(raw)
        assert "not valid JSON" in str(exc_info.value)

    def test_nesting_too_deep_is_malformed(self, parser):
        raw = b'{"producers": [], "x": ' + b"[" * 200_000 + b"]" * 200_000 + b"}"
        with pytest.raises(MalformedFeed):
            parser.parse(raw)


class TestEntrySkipping:
    def test_product_missing_abv_is_skipped(self, parser):
        bad = make_product("B2", "No ABV")
        del bad["abv"]
        raw = make_feed(make_producer(products=[make_product("B1"), bad, make_product("B3", "Third")]))

        feed = parser.parse(raw)

        assert [p.festival_id for p in feed[0].products] == ["B1", "B3"]
        assert feed.skipped_count == 1
        assert feed.skipped[0].path == "producers[0].products[1].abv"

    @pytest.mark.parametrize("abv", ["four", "-1", "4,5", "", "1e3", "nan", True, None, -0.5])
    def test_invalid_abv_is_skipped(self, parser, abv):
        raw = make_feed(make_producer(products=[make_product(abv=abv)]))
        feed = parser.parse(raw)

        assert feed.product_count == 0
        assert feed.skipped_count == 1

    @pytest.mark.parametrize("abv, expected", [("4", 4.0), ("4.", 4.0), (".5", 0.5), (" 3.8 ", 3.8), (0, 0.0), (5.5, 5.5)])
    def test_valid_abv_forms(self, parser, abv, expected):
        feed = parser.parse(make_feed(make_producer(products=[make_product(abv=abv)])))
        assert feed[0].products[0].abv == pytest.approx(expected)

    @pytest.mark.parametrize("abv", ["9" * 400, "9" * 400 + ".5", 10 ** 400])
    def test_abv_too_large_for_a_float_is_skipped(self, parser, abv):
        raw = make_feed(make_producer(products=[make_product("B1", abv=abv), make_product("B2", "Mild")]))

        feed = parser.parse(raw)

        assert [p.festival_id for p in feed[0].products] == ["B2"]
        assert feed.skipped_count == 1
        assert feed.skipped[0].path == "producers[0].products[0].abv"
        assert "out of range" in str(feed.skipped[0])

    def test_product_missing_id_is_skipped(self, parser):
        bad = make_product()
        del bad["id"]
        feed = parser.parse(make_feed(make_producer(products=[bad])))

        assert feed.product_count == 0
        assert "id" in str(feed.skipped[0])

    def test_product_that_is_not_an_object_is_skipped(self, parser):
        feed = parser.parse(make_feed(make_producer(products=["Citra", make_product()])))
        assert feed.product_count == 1
        assert feed.skipped[0].path == "producers[0].products[0]"

    def test_producer_missing_name_is_skipped(self, parser):
        bad = make_producer("P2", products=[make_product("B9")])
        del bad["name"]
        raw = make_feed(make_producer("P1", products=[make_product("B1")]), bad)

        feed = parser.parse(raw)

        assert [b.festival_id for b in feed] == ["P1"]
        assert feed.skipped_count == 1
        assert feed.skipped[0].path == "producers[1].name"

    def test_producer_with_non_array_products_is_skipped(self, parser):
        feed = parser.parse(make_feed(make_producer(products="none")))
        assert len(feed) == 0
        assert feed.skipped_count == 1

    def test_skipped_entries_are_logged(self, parser, caplog):
        bad = make_product()
        del bad["name"]
        with caplog.at_level("WARNING", logger="beerfest.feed.parser"):
            parser.parse(make_feed(make_producer(products=[bad])))
        assert "1 skipped" in caplog.text

    def test_parsing_is_stateless(self, parser):
        raw = make_feed(make_producer(products=[make_product()]))
        first = parser.parse(raw)
        second = parser.parse(raw)
        assert first[0] == second[0]


class TestLargeFeed:
    def test_many_products(self, parser):
        products = [make_product(f"B{i}", f"Beer {i}") for i in range(500)]
        document = {"producers": [make_producer(products=products)]}
        feed = parser.parse(json.dumps(document))
        assert feed.product_count == 500
