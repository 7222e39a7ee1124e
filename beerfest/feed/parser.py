"""
Festival feed parser.

Decodes the JSON beer list into ParsedBrewery/ParsedProduct records.
Shape of the feed:

    {"producers": [
        {"id": "...", "name": "...", "location": "...", "notes": "...",
         "products": [
            {"id": "...", "name": "...", "abv": "4.5", "notes": "...",
             "style": "...", "status_text": "...", "dispense": "...",
             "allergens": {"gluten": 1}, "category": "beer"}
         ]}
    ]}

A malformed document or a missing ``producers`` array fails the whole
parse. A bad individual producer or product is dropped and recorded in
``ParsedFeed.skipped``; the remainder of the feed still imports.
"""

import json
import logging
import math
import re
from collections.abc import Sequence
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from ..config import Config
from ..errors import MalformedFeed, SchemaMismatch
from .protocols import ParsedBrewery, ParsedProduct

logger = logging.getLogger(__name__)

PRODUCERS = "producers"

# Locale-independent non-negative decimal: "4", "4.5", "4.", ".5"
_DECIMAL_RE = re.compile(r"^\s*(?:\d+(?:\.\d*)?|\.\d+)\s*$")


class ProducerSchema(BaseModel):
    """Producer fields, validated before its products."""
    model_config = ConfigDict(extra="ignore")

    name: str
    id: Optional[str] = None
    notes: Optional[str] = None
    location: Optional[str] = None
    products: list[Any] = []

    @field_validator("products", mode="before")
    @classmethod
    def null_products_as_empty(cls, v: Any) -> Any:
        return [] if v is None else v


class ProductSchema(BaseModel):
    """A single product entry."""
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    abv: float
    notes: Optional[str] = None
    style: Optional[str] = None
    status_text: Optional[str] = None
    dispense: Optional[str] = None
    allergens: str = ""
    category: Optional[str] = None

    @field_validator("abv", mode="before")
    @classmethod
    def parse_abv(cls, v: Any) -> float:
        """Accept a finite decimal string (or plain JSON number) >= 0."""
        if isinstance(v, bool):
            raise ValueError("abv must be a decimal number")
        if isinstance(v, str):
            if not _DECIMAL_RE.match(v):
                raise ValueError(f"abv is not a decimal number: {v!r}")
            v = v.strip()
        elif not isinstance(v, (int, float)):
            raise ValueError(f"abv is not a decimal number: {v!r}")

        try:
            value = float(v)
        except (OverflowError, ValueError) as e:
            raise ValueError("abv out of range") from e
        if not math.isfinite(value) or value < 0:
            raise ValueError(f"abv out of range: {value!r}")
        return value

    @field_validator("allergens", mode="before")
    @classmethod
    def join_allergens(cls, v: Any) -> Any:
        """
        Normalise allergens to a comma-separated string.

        The feed sends either ``{"gluten": 1, "sulphites": 0}`` (flagged keys
        are kept), a list of names, or an already joined string.
        """
        if v is None:
            return ""
        if isinstance(v, dict):
            return ", ".join(str(name) for name, flagged in v.items() if flagged)
        if isinstance(v, list) and all(isinstance(name, str) for name in v):
            return ", ".join(v)
        return v


class ParsedFeed(Sequence):
    """
    Result of parsing a feed: a sequence of ParsedBrewery in feed order.

    ``skipped`` lists one SchemaMismatch per dropped producer or product.
    """

    def __init__(self, breweries: list[ParsedBrewery], skipped: list[SchemaMismatch]):
        self._breweries = breweries
        self.skipped = skipped

    def __getitem__(self, index):
        return self._breweries[index]

    def __len__(self) -> int:
        return len(self._breweries)

    def __repr__(self) -> str:
        return f"ParsedFeed(breweries={len(self)}, products={self.product_count}, skipped={self.skipped_count})"

    @property
    def product_count(self) -> int:
        return sum(len(b.products) for b in self._breweries)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


def _describe(error: ValidationError, prefix: str) -> tuple[str, str]:
    """Flatten a pydantic error into (field path, message) for the first failure."""
    first = error.errors()[0]
    loc = ".".join(str(part) for part in first["loc"])
    path = f"{prefix}.{loc}" if loc else prefix
    message = first["msg"]
    if error.error_count() > 1:
        message += f" (+{error.error_count() - 1} more)"
    return path, message


class FeedParser:
    """Stateless parser for the festival JSON feed."""

    def parse(self, raw: Union[str, bytes]) -> ParsedFeed:
        """
        Parse a raw feed document.

        Raises:
            MalformedFeed: input is not well-formed JSON or not a JSON object
            SchemaMismatch: the ``producers`` array is absent or not an array
        """
        document = self._decode(raw)

        producers = document.get(PRODUCERS)
        if not isinstance(producers, list):
            raise SchemaMismatch(
                "missing or non-array 'producers'",
                path=PRODUCERS,
            )

        breweries: list[ParsedBrewery] = []
        skipped: list[SchemaMismatch] = []

        for i, producer in enumerate(producers):
            brewery = self._parse_producer(producer, i, skipped)
            if brewery is not None:
                breweries.append(brewery)

        feed = ParsedFeed(breweries, skipped)
        if skipped:
            logger.warning(f"Parsed feed with {feed.skipped_count} skipped entries: {feed!r}")
        else:
            logger.debug(f"Parsed feed: {feed!r}")
        return feed

    @staticmethod
    def _decode(raw: Union[str, bytes]) -> dict:
        if isinstance(raw, (bytes, bytearray)):
            try:
                raw = raw.decode("utf-8-sig")
            except UnicodeDecodeError as e:
                raise MalformedFeed(f"Feed is not valid UTF-8: {e}") from e
        try:
            document = json.loads(raw)
        except json.JSONDecodeError as e:
            raise MalformedFeed(
                f"Feed is not valid JSON: {e.msg} at line {e.lineno} column {e.colno}",
                context={"position": e.pos},
            ) from e
        except (ValueError, RecursionError) as e:
            # Integer literals past the int digit limit, or nesting too deep
            raise MalformedFeed(f"Feed is not valid JSON: {str(e)[:200]}") from e
        if not isinstance(document, dict):
            raise MalformedFeed(
                f"Feed must be a JSON object, got {type(document).__name__}"
            )
        return document

    def _parse_producer(
        self,
        producer: Any,
        index: int,
        skipped: list[SchemaMismatch],
    ) -> Optional[ParsedBrewery]:
        prefix = f"{PRODUCERS}[{index}]"
        try:
            schema = ProducerSchema.model_validate(producer)
        except ValidationError as e:
            path, message = _describe(e, prefix)
            skipped.append(SchemaMismatch(f"producer skipped: {message}", path=path))
            logger.debug(f"Skipping producer at {path}: {message}")
            return None

        brewery = ParsedBrewery(
            festival_id=schema.id if schema.id is not None else schema.name,
            name=schema.name,
            description=schema.notes if schema.notes is not None else (schema.location or ""),
        )

        for j, product in enumerate(schema.products):
            parsed = self._parse_product(product, f"{prefix}.products[{j}]", skipped)
            if parsed is not None:
                brewery.products.append(parsed)

        return brewery

    @staticmethod
    def _parse_product(
        product: Any,
        prefix: str,
        skipped: list[SchemaMismatch],
    ) -> Optional[ParsedProduct]:
        try:
            schema = ProductSchema.model_validate(product)
        except ValidationError as e:
            path, message = _describe(e, prefix)
            name = product.get("name") if isinstance(product, dict) else None
            label = f" '{name}'" if isinstance(name, str) else ""
            skipped.append(SchemaMismatch(f"product{label} skipped: {message}", path=path))
            logger.debug(f"Skipping product at {path}: {message}")
            return None

        return ParsedProduct(
            festival_id=schema.id,
            name=schema.name,
            abv=schema.abv,
            notes=schema.notes or "",
            style=schema.style or "",
            status_text=schema.status_text or "",
            dispense=schema.dispense or "",
            allergens=schema.allergens,
            category=schema.category or Config.DEFAULT_CATEGORY,
        )
