"""
User preferences persisted outside the beer database.

Holds the bookmark set plus sync bookkeeping (last feed digest and the
next scheduled update time). Stored as a small JSON document, rewritten
atomically on every change, so bookmarks survive re-syncs and store
rebuilds.
"""

import json
import logging
import os
import tempfile
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Protocol

from ..config import Config

logger = logging.getLogger(__name__)

BOOKMARKS_KEY = "bookmarks"
LAST_DIGEST_KEY = "last_digest"
NEXT_UPDATE_TIME_KEY = "next_update_time"

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class BookmarkPreferences(Protocol):
    """Read-only view of the user's bookmarked beer ids."""

    def get_bookmarked_ids(self) -> set[str]:
        ...

    def is_bookmarked(self, festival_id: str) -> bool:
        ...


class AppPreferences:
    """
    JSON-file backed preferences.

    Thread-safe; reads come from an in-memory copy loaded at construction.
    A missing or corrupt file yields defaults.
    """

    def __init__(self, path: Optional[str] = None):
        """
        Args:
            path: JSON file location. Defaults to Config.preferences_path()
        """
        self.path = Path(path if path is not None else Config.preferences_path())
        self._lock = threading.Lock()
        self._data = self._load()

    # === Bookmarks ===

    def get_bookmarked_ids(self) -> set[str]:
        with self._lock:
            return set(self._data[BOOKMARKS_KEY])

    def is_bookmarked(self, festival_id: str) -> bool:
        with self._lock:
            return festival_id in self._data[BOOKMARKS_KEY]

    def set_bookmarked(self, festival_id: str, bookmarked: bool) -> None:
        with self._lock:
            bookmarks = set(self._data[BOOKMARKS_KEY])
            if bookmarked:
                bookmarks.add(festival_id)
            else:
                bookmarks.discard(festival_id)
            self._data[BOOKMARKS_KEY] = sorted(bookmarks)
            self._save()

    def toggle_bookmark(self, festival_id: str) -> bool:
        """Flip the bookmark for a beer. Returns the new state."""
        with self._lock:
            bookmarks = set(self._data[BOOKMARKS_KEY])
            now_bookmarked = festival_id not in bookmarks
            if now_bookmarked:
                bookmarks.add(festival_id)
            else:
                bookmarks.discard(festival_id)
            self._data[BOOKMARKS_KEY] = sorted(bookmarks)
            self._save()
        return now_bookmarked

    # === Sync bookkeeping ===

    @property
    def last_digest(self) -> str:
        with self._lock:
            return self._data[LAST_DIGEST_KEY]

    @last_digest.setter
    def last_digest(self, digest: str) -> None:
        with self._lock:
            self._data[LAST_DIGEST_KEY] = digest or ""
            self._save()

    @property
    def next_update_time(self) -> datetime:
        with self._lock:
            raw = self._data[NEXT_UPDATE_TIME_KEY]
        try:
            value = datetime.fromisoformat(raw)
        except (TypeError, ValueError):
            return EPOCH
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value

    @next_update_time.setter
    def next_update_time(self, when: datetime) -> None:
        with self._lock:
            self._data[NEXT_UPDATE_TIME_KEY] = when.isoformat()
            self._save()

    # === Persistence ===

    @staticmethod
    def _defaults() -> dict:
        return {
            BOOKMARKS_KEY: [],
            LAST_DIGEST_KEY: "",
            NEXT_UPDATE_TIME_KEY: EPOCH.isoformat(),
        }

    def _load(self) -> dict:
        data = self._defaults()
        if not self.path.exists():
            return data
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                stored = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read preferences from {self.path}, using defaults: {e}")
            return data
        if not isinstance(stored, dict):
            logger.error(f"Ignoring malformed preferences file {self.path}")
            return data

        bookmarks = stored.get(BOOKMARKS_KEY, [])
        if isinstance(bookmarks, list):
            data[BOOKMARKS_KEY] = sorted({str(b) for b in bookmarks})
        if isinstance(stored.get(LAST_DIGEST_KEY), str):
            data[LAST_DIGEST_KEY] = stored[LAST_DIGEST_KEY]
        if isinstance(stored.get(NEXT_UPDATE_TIME_KEY), str):
            data[NEXT_UPDATE_TIME_KEY] = stored[NEXT_UPDATE_TIME_KEY]
        return data

    def _save(self) -> None:
        """Write atomically. Caller holds the lock."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
