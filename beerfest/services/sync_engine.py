"""
Feed sync engine.

Runs one fetch → parse → reconcile pass against the beer store:

    IDLE → FETCHING → PARSING → RECONCILING → SUCCEEDED | FAILED

Every outcome, including failures, is returned as a SyncResult; nothing in
the taxonomy of beerfest.errors escapes sync(). The engine never retries.
Re-running after a failure is safe because every write is an idempotent
upsert.
"""

import hashlib
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

from ..errors import (
    BeerFestError,
    FetchError,
    MalformedFeed,
    SchemaMismatch,
    StoreError,
    SyncAlreadyInProgress,
)
from ..feed.parser import FeedParser
from ..feed.protocols import FeedFetcher
from ..models.enums import FailureKind, MessageKind, SyncState
from .beer_store import BeerStore

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


@dataclass
class SyncMessage:
    """Structured message for the presentation layer: kind plus detail."""
    kind: MessageKind
    detail: str


@dataclass
class SyncFailure:
    """Why a sync failed, with the underlying exception."""
    kind: FailureKind
    detail: str
    cause: Optional[BaseException] = None


@dataclass
class SyncResult:
    """Outcome of a sync run."""
    state: SyncState
    breweries_upserted: int = 0
    beers_upserted: int = 0
    skipped_count: int = 0
    elapsed: float = 0.0
    digest: Optional[str] = None
    # True when the feed digest matched the previous one and nothing was written
    unchanged: bool = False
    failure: Optional[SyncFailure] = None
    messages: list[SyncMessage] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.state == SyncState.SUCCEEDED

    def to_dict(self) -> dict:
        """Convert to dictionary for logging/API responses."""
        return {
            "state": self.state.value,
            "breweries_upserted": self.breweries_upserted,
            "beers_upserted": self.beers_upserted,
            "skipped_count": self.skipped_count,
            "elapsed": round(self.elapsed, 3),
            "digest": self.digest,
            "unchanged": self.unchanged,
            "failure": (
                {"kind": self.failure.kind.value, "detail": self.failure.detail}
                if self.failure else None
            ),
            "messages": [
                {"kind": m.kind.value, "detail": m.detail} for m in self.messages
            ],
        }


_MESSAGE_KINDS = {
    FailureKind.FETCH_ERROR: MessageKind.FETCH_ERROR,
    FailureKind.PARSE_ERROR: MessageKind.PARSE_ERROR,
    FailureKind.STORE_ERROR: MessageKind.STORE_ERROR,
    FailureKind.SYNC_ALREADY_IN_PROGRESS: MessageKind.SYNC_ALREADY_IN_PROGRESS,
}


def feed_digest(raw: bytes) -> str:
    """MD5 hex digest of a raw feed, used to detect unchanged feeds."""
    return hashlib.md5(raw).hexdigest()


class SyncEngine:
    """
    Orchestrates a single feed sync into a BeerStore.

    Only one sync runs at a time; a second request made while one is in
    flight is rejected with a SYNC_ALREADY_IN_PROGRESS result.
    """

    def __init__(
        self,
        store: BeerStore,
        fetcher: FeedFetcher,
        parser: Optional[FeedParser] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            store: Beer store to reconcile into
            fetcher: Source of the raw feed
            parser: Feed parser (creates default if None)
            clock: Monotonic clock for elapsed time
        """
        self.store = store
        self.fetcher = fetcher
        self.parser = parser or FeedParser()
        self._clock = clock
        self._run_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._state = SyncState.IDLE

    @property
    def state(self) -> SyncState:
        """State of the current (or most recent) sync."""
        with self._state_lock:
            return self._state

    @property
    def in_progress(self) -> bool:
        return self._run_lock.locked()

    def sync(
        self,
        timeout: Optional[float] = None,
        previous_digest: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> SyncResult:
        """
        Fetch the feed and reconcile it into the store.

        Args:
            timeout: Fetch timeout in seconds (fetcher default if None)
            previous_digest: Digest of the last applied feed; an identical
                             feed finishes SUCCEEDED without writing
            on_progress: Called with (beers_done, beers_total) while reconciling

        Returns:
            SyncResult describing success or the failure kind
        """
        if not self._run_lock.acquire(blocking=False):
            error = SyncAlreadyInProgress()
            logger.warning(f"Rejecting sync request: {error.message}")
            result = SyncResult(state=SyncState.FAILED)
            self._record_failure(result, FailureKind.SYNC_ALREADY_IN_PROGRESS, error)
            return result

        try:
            return self._run(timeout, previous_digest, on_progress)
        finally:
            self._run_lock.release()

    def _run(
        self,
        timeout: Optional[float],
        previous_digest: Optional[str],
        on_progress: Optional[ProgressCallback],
    ) -> SyncResult:
        started = self._clock()
        result = SyncResult(state=SyncState.FETCHING)

        self._set_state(SyncState.FETCHING)
        try:
            raw = self.fetcher.fetch(timeout)
        except FetchError as e:
            return self._fail(result, FailureKind.FETCH_ERROR, e, started)

        result.digest = feed_digest(raw)
        if previous_digest and result.digest == previous_digest:
            logger.info("Beer list has not changed, not updating.")
            result.unchanged = True
            return self._succeed(result, started)

        self._set_state(SyncState.PARSING)
        try:
            feed = self.parser.parse(raw)
        except (MalformedFeed, SchemaMismatch) as e:
            return self._fail(result, FailureKind.PARSE_ERROR, e, started)

        result.skipped_count = feed.skipped_count
        for mismatch in feed.skipped:
            result.messages.append(SyncMessage(MessageKind.SCHEMA_MISMATCH, str(mismatch)))

        self._set_state(SyncState.RECONCILING)
        total = feed.product_count
        done = 0
        try:
            for parsed in feed:
                brewery = self.store.upsert_brewery(
                    parsed.festival_id, parsed.name, parsed.description
                )
                result.breweries_upserted += 1

                for product in parsed.products:
                    done += 1
                    try:
                        self.store.upsert_beer(
                            festival_id=product.festival_id,
                            name=product.name,
                            abv=product.abv,
                            description=product.notes,
                            style=product.style,
                            status=product.status_text,
                            dispense=product.dispense,
                            brewery_ref=brewery,
                            allergens=product.allergens,
                            category=product.category,
                        )
                    except ValueError as e:
                        # Rejected by the store's own field checks
                        result.skipped_count += 1
                        result.messages.append(SyncMessage(
                            MessageKind.SCHEMA_MISMATCH,
                            f"product '{product.festival_id}' skipped: {e}",
                        ))
                        logger.warning(f"Skipping product '{product.festival_id}': {e}")
                    else:
                        result.beers_upserted += 1
                    if on_progress is not None:
                        on_progress(done, total)
        except StoreError as e:
            return self._fail(result, FailureKind.STORE_ERROR, e, started)

        return self._succeed(result, started)

    def _set_state(self, state: SyncState) -> None:
        with self._state_lock:
            self._state = state
        logger.debug(f"Sync state -> {state.value}")

    def _succeed(self, result: SyncResult, started: float) -> SyncResult:
        result.state = SyncState.SUCCEEDED
        result.elapsed = self._clock() - started
        self._set_state(SyncState.SUCCEEDED)
        logger.info(
            f"Sync succeeded in {result.elapsed:.2f}s: "
            f"{result.breweries_upserted} breweries, {result.beers_upserted} beers, "
            f"{result.skipped_count} skipped"
            + (" (feed unchanged)" if result.unchanged else "")
        )
        return result

    def _fail(
        self,
        result: SyncResult,
        kind: FailureKind,
        error: BeerFestError,
        started: float,
    ) -> SyncResult:
        result.state = SyncState.FAILED
        result.elapsed = self._clock() - started
        self._record_failure(result, kind, error)
        self._set_state(SyncState.FAILED)
        logger.error(
            f"Sync failed ({kind.value}) after {result.beers_upserted} beers: {error}"
        )
        return result

    @staticmethod
    def _record_failure(result: SyncResult, kind: FailureKind, error: BeerFestError) -> None:
        result.failure = SyncFailure(kind=kind, detail=str(error), cause=error)
        result.messages.append(SyncMessage(_MESSAGE_KINDS[kind], str(error)))
