"""
Festival feed package.

Fetches the remote JSON beer list and parses it into plain records ready
for reconciliation into the beer store.
"""

from .protocols import FeedFetcher, ParsedBrewery, ParsedProduct
from .parser import FeedParser, ParsedFeed
from .fetcher import FileFeedFetcher, HttpFeedFetcher

__all__ = [
    "FeedFetcher",
    "ParsedBrewery",
    "ParsedProduct",
    "FeedParser",
    "ParsedFeed",
    "FileFeedFetcher",
    "HttpFeedFetcher",
]
