"""
Enums for type-safe string constants in the beer festival client.
"""

from enum import Enum


class SyncState(str, Enum):
    """Lifecycle of a single feed sync."""
    IDLE = "idle"
    FETCHING = "fetching"
    PARSING = "parsing"
    RECONCILING = "reconciling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class FailureKind(str, Enum):
    """Why a sync ended in the FAILED state."""
    FETCH_ERROR = "fetch_error"
    PARSE_ERROR = "parse_error"
    STORE_ERROR = "store_error"
    SYNC_ALREADY_IN_PROGRESS = "sync_already_in_progress"


class MessageKind(str, Enum):
    """Kind of a structured message surfaced to the presentation layer."""
    SCHEMA_MISMATCH = "schema_mismatch"
    FETCH_ERROR = "fetch_error"
    PARSE_ERROR = "parse_error"
    STORE_ERROR = "store_error"
    SYNC_ALREADY_IN_PROGRESS = "sync_already_in_progress"


class BeerFilter(str, Enum):
    """Which beers a list shows."""
    ALL = "all"
    BOOKMARKED = "bookmarked"
    LOW_NO_ALCOHOL = "low_no_alcohol"


class SortOrder(str, Enum):
    """Beer list ordering. Name ascending is the only supported order."""
    NAME_ASC = "name_asc"


class StatusToShow(str, Enum):
    """Whether unavailable beers are listed."""
    ALL = "all"
    AVAILABLE_ONLY = "available_only"
