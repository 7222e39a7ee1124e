"""
Scheduled feed updates.

Decides whether a sync is due and records the outcome in the user
preferences: the digest of the last applied feed and when the next update
should run. An update is due when the store is empty or the scheduled time
has passed.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from ..config import Config
from .beer_store import BeerStore
from .preferences import AppPreferences
from .sync_engine import ProgressCallback, SyncEngine, SyncResult

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UpdateService:
    """Runs the sync engine when an update is due."""

    def __init__(
        self,
        engine: SyncEngine,
        store: BeerStore,
        preferences: AppPreferences,
        interval: Optional[timedelta] = None,
        now: Callable[[], datetime] = _utcnow,
    ):
        self.engine = engine
        self.store = store
        self.preferences = preferences
        self.interval = interval or timedelta(hours=Config.update_interval_hours())
        self._now = now

    def update_due(self, now: Optional[datetime] = None) -> bool:
        """True when the store is empty or the next update time has passed."""
        if self.store.count() == 0:
            return True
        now = now or self._now()
        return now > self.preferences.next_update_time

    def run(
        self,
        force: bool = False,
        timeout: Optional[float] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Optional[SyncResult]:
        """
        Sync if due (or forced).

        A forced run ignores the stored digest, so the feed is always
        re-applied.

        Returns:
            The SyncResult, or None if no update was due
        """
        if not force and not self.update_due():
            logger.debug(f"No update due until {self.preferences.next_update_time.isoformat()}")
            return None

        previous_digest = None if force else (self.preferences.last_digest or None)
        result = self.engine.sync(
            timeout=timeout,
            previous_digest=previous_digest,
            on_progress=on_progress,
        )

        if result.succeeded:
            if result.digest:
                self.preferences.last_digest = result.digest
            next_update = self._now() + self.interval
            self.preferences.next_update_time = next_update
            logger.info(f"Next feed update scheduled for {next_update.isoformat()}")
        return result
