"""
Exception hierarchy for the beer festival sync core.

    BeerFestError (base)
    ├── FetchError                 network / HTTP status / timeout
    ├── MalformedFeed              document is not well-formed JSON
    ├── SchemaMismatch             required field absent or of the wrong type
    ├── StoreError                 persistence unavailable or corrupt
    │   └── ReferentialIntegrityError   beer references an unknown brewery
    ├── SyncAlreadyInProgress      a sync is already running
    └── NotFound                   query miss (expected control flow)

Every error carries a human-readable message plus a context dict that is
logged but not meant for display.
"""

from typing import Any, Dict, Optional


class BeerFestError(Exception):
    """Base class for all errors raised by the sync core."""

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class FetchError(BeerFestError):
    """Raised when the remote feed cannot be retrieved.

    Recoverable by retrying later. ``timeout`` is True when the request
    exceeded the caller-supplied timeout.
    """

    def __init__(
        self,
        message: str = "Failed to fetch beer feed",
        timeout: bool = False,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.timeout = timeout
        super().__init__(message, context)


class MalformedFeed(BeerFestError):
    """Raised when the feed is not well-formed structured data."""

    def __init__(
        self,
        message: str = "Feed is not valid JSON",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, context)


class SchemaMismatch(BeerFestError):
    """A required field is absent or has the wrong type.

    Raised for the whole feed when the ``producers`` array is missing.
    For individual producers/products it is recorded, not raised.
    """

    def __init__(
        self,
        message: str = "Feed does not match the expected schema",
        path: str = "",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.path = path
        super().__init__(message, context)

    def __str__(self) -> str:
        if self.path:
            return f"{self.path}: {self.message}"
        return self.message


class StoreError(BeerFestError):
    """Persistence layer is unavailable or corrupt. Retry after recovery."""

    def __init__(
        self,
        message: str = "Beer database operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, context)


class ReferentialIntegrityError(StoreError):
    """A beer references a brewery that is not in the store."""

    def __init__(self, brewery_id: str):
        self.brewery_id = brewery_id
        super().__init__(
            f"Brewery '{brewery_id}' does not exist",
            context={"brewery_id": brewery_id},
        )


class SyncAlreadyInProgress(BeerFestError):
    """A sync was requested while another one is still running."""

    def __init__(self, message: str = "A sync is already in progress"):
        super().__init__(message)


class NotFound(BeerFestError):
    """Lookup by festival id found nothing."""

    def __init__(self, entity: str, festival_id: str):
        self.entity = entity
        self.festival_id = festival_id
        super().__init__(
            f"{entity} '{festival_id}' not found",
            context={"entity": entity, "festival_id": festival_id},
        )
