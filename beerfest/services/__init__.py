from .beer_store import BeerSequence, BeerStore
from .preferences import AppPreferences, BookmarkPreferences
from .sync_engine import SyncEngine, SyncFailure, SyncMessage, SyncResult
from .beer_list import BeerList, BeerListConfig
from .update_service import UpdateService
from .exporter import ratings_csv

__all__ = [
    "BeerSequence",
    "BeerStore",
    "AppPreferences",
    "BookmarkPreferences",
    "SyncEngine",
    "SyncFailure",
    "SyncMessage",
    "SyncResult",
    "BeerList",
    "BeerListConfig",
    "UpdateService",
    "ratings_csv",
]
