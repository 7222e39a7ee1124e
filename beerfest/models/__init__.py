from .enums import (
    SyncState,
    FailureKind,
    MessageKind,
    BeerFilter,
    SortOrder,
    StatusToShow,
)
from .entities import Beer, Brewery
from .response import (
    BreweryResponse,
    BeerResponse,
    BeerListResponse,
    RatingRequest,
    CommentsRequest,
    SyncMessageResponse,
    SyncFailureResponse,
    SyncResponse,
)

__all__ = [
    "SyncState",
    "FailureKind",
    "MessageKind",
    "BeerFilter",
    "SortOrder",
    "StatusToShow",
    "Beer",
    "Brewery",
    "BreweryResponse",
    "BeerResponse",
    "BeerListResponse",
    "RatingRequest",
    "CommentsRequest",
    "SyncMessageResponse",
    "SyncFailureResponse",
    "SyncResponse",
]
