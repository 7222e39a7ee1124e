"""
Shared singletons for the API routes.

Created lazily on first use from Config. Tests replace the module-level
instances directly.
"""

from datetime import timedelta
from typing import Optional

from ..config import Config
from ..feed.fetcher import HttpFeedFetcher
from ..services.beer_store import BeerStore
from ..services.preferences import AppPreferences
from ..services.sync_engine import SyncEngine
from ..services.update_service import UpdateService

_store: Optional[BeerStore] = None
_preferences: Optional[AppPreferences] = None
_engine: Optional[SyncEngine] = None
_update_service: Optional[UpdateService] = None


def get_store() -> BeerStore:
    """Get or create beer store singleton."""
    global _store
    if _store is None:
        _store = BeerStore()
    return _store


def get_preferences() -> AppPreferences:
    """Get or create preferences singleton."""
    global _preferences
    if _preferences is None:
        _preferences = AppPreferences()
    return _preferences


def get_engine() -> SyncEngine:
    """Get or create sync engine singleton over the configured feed URLs."""
    global _engine
    if _engine is None:
        fetcher = HttpFeedFetcher(Config.feed_urls(), default_timeout=Config.fetch_timeout())
        _engine = SyncEngine(get_store(), fetcher)
    return _engine


def get_update_service() -> UpdateService:
    """Get or create update service singleton."""
    global _update_service
    if _update_service is None:
        _update_service = UpdateService(
            get_engine(),
            get_store(),
            get_preferences(),
            interval=timedelta(hours=Config.update_interval_hours()),
        )
    return _update_service
