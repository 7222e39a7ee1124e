"""
Pytest configuration for the beer festival tests.

Every store is backed by a fresh SQLite file under tmp_path with the
Alembic schema applied.
"""

import json
from pathlib import Path
from typing import Optional

import pytest

from beerfest.db import ensure_schema
from beerfest.services.beer_store import BeerStore
from beerfest.services.preferences import AppPreferences


FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def db_path(tmp_path):
    """Create a fresh DB with schema applied."""
    path = str(tmp_path / "beers.db")
    ensure_schema(path)
    return path


@pytest.fixture
def store(db_path):
    store = BeerStore(db_path=db_path, migrate=False)
    yield store
    store.close()


@pytest.fixture
def preferences(tmp_path):
    return AppPreferences(str(tmp_path / "preferences.json"))


@pytest.fixture
def sample_feed_bytes():
    """The bundled two-brewery sample feed."""
    return (FIXTURES_DIR / "beer.json").read_bytes()


def make_product(festival_id="B1", name="Best Bitter", abv="4.2", **overrides) -> dict:
    """Build a feed product entry with sensible defaults."""
    product = {
        "id": festival_id,
        "name": name,
        "abv": abv,
        "notes": f"Notes for {name}",
        "style": "Bitter",
        "status_text": "Plenty left",
        "dispense": "cask",
    }
    product.update(overrides)
    return product


def make_producer(festival_id="P1", name="Milton", products=None, **overrides) -> dict:
    """Build a feed producer entry with sensible defaults."""
    producer = {
        "id": festival_id,
        "name": name,
        "location": "Cambridge",
        "products": products if products is not None else [],
    }
    producer.update(overrides)
    return producer


def make_feed(*producers: dict, extra: Optional[dict] = None) -> bytes:
    """Encode producers as a feed document."""
    document = {"producers": list(producers)}
    if extra:
        document.update(extra)
    return json.dumps(document).encode("utf-8")


class StaticFetcher:
    """In-memory feed source. Swap ``body`` between syncs."""

    def __init__(self, body: bytes):
        self.body = body
        self.calls = []

    def fetch(self, timeout=None) -> bytes:
        self.calls.append(timeout)
        return self.body
