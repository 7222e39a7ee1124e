"""
Read-side beer list views.

A BeerList is a configured, lazy query over the BeerStore. Nothing is read
until it is iterated; each iteration takes a fresh snapshot of the store
(and of the bookmark set) so the same list can be re-walked after a sync
and reflects the latest data.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterator, Optional

from ..config import Config
from ..models.entities import Beer
from ..models.enums import BeerFilter, SortOrder, StatusToShow
from .beer_store import BeerSequence, BeerStore
from .preferences import BookmarkPreferences

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BeerListConfig:
    """Options recognised by BeerList."""
    sort_order: SortOrder = SortOrder.NAME_ASC
    filter: BeerFilter = BeerFilter.ALL
    search_text: str = ""
    styles_to_hide: frozenset[str] = field(default_factory=frozenset)
    allergens_to_hide: frozenset[str] = field(default_factory=frozenset)
    status_to_show: StatusToShow = StatusToShow.ALL


def _config_for(list_filter: BeerFilter, options: dict) -> BeerListConfig:
    """Build the config for a convenience constructor, which owns the filter."""
    requested = options.pop("filter", list_filter)
    if requested != list_filter:
        raise ValueError(
            f"filter={requested!r} conflicts with this constructor's {list_filter.value!r} list; "
            f"use BeerList(store, BeerListConfig(filter=...)) instead"
        )
    return BeerListConfig(filter=list_filter, **options)


class BeerList:
    """
    Ordered, filterable view of the beers in a store.

    Beers are ordered by name (case-insensitive) with the festival id as
    tie-breaker. The ALL list leaves out low/no alcohol beers, which get
    their own LOW_NO_ALCOHOL list. A BOOKMARKED list includes a beer iff
    its id is bookmarked when iteration starts; toggling a bookmark
    mid-iteration only affects the next iteration.
    """

    def __init__(
        self,
        store: BeerStore,
        config: Optional[BeerListConfig] = None,
        bookmarks: Optional[BookmarkPreferences] = None,
    ):
        """
        Args:
            store: Beer store to read from
            config: View options (all beers, name order if None)
            bookmarks: Bookmark source, required for the BOOKMARKED filter

        Raises:
            ValueError: BOOKMARKED filter without bookmarks, or unknown sort order
        """
        self.store = store
        self.config = config or BeerListConfig()
        self.bookmarks = bookmarks

        if self.config.sort_order != SortOrder.NAME_ASC:
            raise ValueError(f"Unsupported sort order: {self.config.sort_order}")
        if self.config.filter == BeerFilter.BOOKMARKED and bookmarks is None:
            raise ValueError("A bookmarked beer list needs bookmark preferences")

    # The convenience constructors below fix the filter themselves; their
    # **options are any other BeerListConfig field.

    @classmethod
    def all_beers(cls, store: BeerStore, **options) -> "BeerList":
        """Every regular beer in name order, optionally narrowed by search/style/status options."""
        return cls(store, _config_for(BeerFilter.ALL, options))

    @classmethod
    def low_no_alcohol_beers(cls, store: BeerStore, **options) -> "BeerList":
        """Only the low/no alcohol beers, in name order."""
        return cls(store, _config_for(BeerFilter.LOW_NO_ALCOHOL, options))

    @classmethod
    def bookmarked_beers(
        cls, store: BeerStore, bookmarks: BookmarkPreferences, **options
    ) -> "BeerList":
        """Only the bookmarked beers, in name order."""
        return cls(store, _config_for(BeerFilter.BOOKMARKED, options), bookmarks)

    def _query(self) -> BeerSequence:
        statuses = (
            Config.UNAVAILABLE_STATUSES
            if self.config.status_to_show == StatusToShow.AVAILABLE_ONLY
            else ()
        )
        category = exclude_category = None
        if self.config.filter == BeerFilter.ALL:
            exclude_category = Config.LOW_NO_ALCOHOL_CATEGORY
        elif self.config.filter == BeerFilter.LOW_NO_ALCOHOL:
            category = Config.LOW_NO_ALCOHOL_CATEGORY
        return self.store.beers(
            search_text=self.config.search_text,
            styles_to_hide=self.config.styles_to_hide,
            statuses_to_hide=statuses,
            allergens_to_hide=self.config.allergens_to_hide,
            category=category,
            exclude_category=exclude_category,
        )

    def __iter__(self) -> Iterator[Beer]:
        beers = iter(self._query())
        if self.config.filter == BeerFilter.BOOKMARKED:
            bookmarked = self.bookmarks.get_bookmarked_ids()
            return (beer for beer in beers if beer.festival_id in bookmarked)
        return beers

    def size(self) -> int:
        """Number of beers the list would yield if iterated now."""
        if self.config.filter == BeerFilter.BOOKMARKED:
            return sum(1 for _ in self)
        return len(self._query())

    def __len__(self) -> int:
        return self.size()
