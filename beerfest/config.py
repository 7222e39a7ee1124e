"""
Centralized configuration for the beer festival client.

All constants are defined here to avoid scattered magic numbers.
Environment-backed values are read on every call so tests can patch
the environment.
"""

import os
from pathlib import Path
from typing import List


class Config:
    """Application configuration constants."""

    # === Feed ===
    DEFAULT_FEED_URL = "https://data.cambridgebeerfestival.com/cbf/beer.json"
    DEFAULT_FETCH_TIMEOUT = 30.0

    # === Beer list ===
    # Statuses hidden when only available beers are shown
    UNAVAILABLE_STATUSES = frozenset({"Ordered", "Arrived", "Sold Out"})
    MAX_RATING = 5
    DEFAULT_CATEGORY = "beer"
    # Listed separately from the main beer list
    LOW_NO_ALCOHOL_CATEGORY = "low-no"
    MAX_COMMENT_LENGTH = 2000

    # === Update scheduling ===
    DEFAULT_UPDATE_INTERVAL_HOURS = 12.0

    # === Store ===
    BUSY_TIMEOUT_SECONDS = 10.0
    ROW_LOCK_STRIPES = 64

    @staticmethod
    def feed_urls() -> List[str]:
        """Comma-separated list of feed URLs. Default: the festival feed."""
        raw = os.getenv("FEED_URLS", Config.DEFAULT_FEED_URL)
        return [url.strip() for url in raw.split(",") if url.strip()]

    @staticmethod
    def fetch_timeout() -> float:
        """Timeout in seconds for each feed request. Default: 30.0."""
        try:
            return float(os.getenv("FETCH_TIMEOUT", str(Config.DEFAULT_FETCH_TIMEOUT)))
        except ValueError:
            return Config.DEFAULT_FETCH_TIMEOUT

    @staticmethod
    def update_interval_hours() -> float:
        """Minimum hours between scheduled feed updates. Default: 12."""
        try:
            return float(os.getenv(
                "UPDATE_INTERVAL_HOURS", str(Config.DEFAULT_UPDATE_INTERVAL_HOURS)
            ))
        except ValueError:
            return Config.DEFAULT_UPDATE_INTERVAL_HOURS

    @staticmethod
    def log_level() -> str:
        """Log level (DEBUG, INFO, WARNING, ERROR)."""
        return os.getenv("LOG_LEVEL", "INFO").upper()

    # === Persistence ===
    @staticmethod
    def database_path() -> str:
        """Path to the SQLite beer database.
        Default: beerfest/data/beers.db. Override with DATABASE_PATH.
        """
        default = str(Path(__file__).parent / "data" / "beers.db")
        return os.getenv("DATABASE_PATH", default)

    @staticmethod
    def preferences_path() -> str:
        """Path to the JSON preferences file holding bookmarks.
        Default: beerfest/data/preferences.json. Override with PREFERENCES_PATH.
        """
        default = str(Path(__file__).parent / "data" / "preferences.json")
        return os.getenv("PREFERENCES_PATH", default)
