"""
Protocols and data classes for festival feed ingestion.

Defines the intermediate records the parser produces and the interface a
feed source must implement.
"""

from dataclasses import dataclass, field
from typing import Optional, Protocol

from ..config import Config


@dataclass
class ParsedProduct:
    """
    A beer as described by the feed, before reconciliation.

    ``abv`` has already been parsed from its decimal string.
    """
    festival_id: str
    name: str
    abv: float
    notes: str = ""
    style: str = ""
    status_text: str = ""
    dispense: str = ""
    allergens: str = ""
    category: str = Config.DEFAULT_CATEGORY


@dataclass
class ParsedBrewery:
    """A producer from the feed with its products in feed order."""
    festival_id: str
    name: str
    description: str = ""
    products: list[ParsedProduct] = field(default_factory=list)


class FeedFetcher(Protocol):
    """
    Protocol for feed sources.

    Implementations return the raw feed document and raise
    ``beerfest.errors.FetchError`` on network failure or timeout.
    """

    def fetch(self, timeout: Optional[float] = None) -> bytes:
        """
        Retrieve the raw feed.

        Args:
            timeout: Seconds before giving up, None for the source default

        Returns:
            The feed document as bytes
        """
        ...
