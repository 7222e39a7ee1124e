"""
Persisted entities: breweries and the beers they make.

Both are identified by the festival's external id. The internal row id is
carried for convenience but never takes part in equality.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class Brewery:
    """A producer from the festival feed."""
    festival_id: str
    name: str
    description: str = ""
    id: Optional[int] = field(default=None, compare=False, repr=False)


@dataclass(frozen=True, eq=False)
class Beer:
    """
    A single beer, always linked to exactly one brewery.

    Two beers are equal iff every field matches, with the brewery
    compared by its festival id.
    """
    festival_id: str
    name: str
    abv: float
    brewery: Brewery
    description: str = ""
    style: str = ""
    status: str = ""
    dispense_method: str = ""
    allergens: str = ""
    category: str = "beer"
    # User state, never written by a sync
    rating: int = 0
    user_comments: str = ""
    id: Optional[int] = field(default=None, repr=False)

    def _key(self) -> tuple:
        return (
            self.festival_id,
            self.name,
            self.abv,
            self.description,
            self.style,
            self.status,
            self.dispense_method,
            self.allergens,
            self.category,
            self.rating,
            self.user_comments,
            self.brewery.festival_id,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Beer):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())
