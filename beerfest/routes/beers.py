"""
Beer list endpoints.

GET    /beers                     name-ordered beer list with filters
GET    /beers/{id}                single beer
PUT    /beers/{id}/bookmark       bookmark a beer
DELETE /beers/{id}/bookmark       remove a bookmark
PUT    /beers/{id}/rating         set the user's star rating
PUT    /beers/{id}/comments       save the user's tasting notes
GET    /styles                    distinct styles, for the hide-style filter
GET    /allergens                 distinct allergens, for the hide-allergen filter
GET    /ratings.csv               rated beers as CSV
"""

import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import PlainTextResponse

from ..errors import NotFound, StoreError
from ..models.enums import BeerFilter, StatusToShow
from ..models.response import BeerListResponse, BeerResponse, CommentsRequest, RatingRequest
from ..services.beer_list import BeerList, BeerListConfig
from ..services.exporter import ratings_csv
from .dependencies import get_preferences, get_store

logger = logging.getLogger(__name__)
router = APIRouter()


def _store_unavailable(e: StoreError) -> HTTPException:
    logger.error(f"Beer store unavailable: {e}", exc_info=True)
    return HTTPException(status_code=503, detail="Beer database unavailable")


@router.get("/beers", response_model=BeerListResponse)
async def list_beers(
    filter: BeerFilter = Query(default=BeerFilter.ALL, description="all, bookmarked or low_no_alcohol"),
    q: str = Query(default="", description="Search name, style, description or brewery"),
    hide_style: Optional[list[str]] = Query(default=None, description="Styles to leave out"),
    hide_allergen: Optional[list[str]] = Query(default=None, description="Allergens to leave out"),
    available_only: bool = Query(default=False, description="Hide ordered, arrived and sold out beers"),
) -> BeerListResponse:
    """List beers ordered by name."""
    preferences = get_preferences()
    config = BeerListConfig(
        filter=filter,
        search_text=q.strip(),
        styles_to_hide=frozenset(hide_style or ()),
        allergens_to_hide=frozenset(hide_allergen or ()),
        status_to_show=StatusToShow.AVAILABLE_ONLY if available_only else StatusToShow.ALL,
    )
    beer_list = BeerList(get_store(), config, bookmarks=preferences)

    try:
        bookmarked = preferences.get_bookmarked_ids()
        beers = [
            BeerResponse.from_entity(beer, bookmarked=beer.festival_id in bookmarked)
            for beer in beer_list
        ]
    except StoreError as e:
        raise _store_unavailable(e)

    return BeerListResponse(total=len(beers), beers=beers)


@router.get("/beers/{festival_id}", response_model=BeerResponse)
async def get_beer(festival_id: str) -> BeerResponse:
    """Get a single beer by festival id."""
    try:
        beer = get_store().find_by_id(festival_id)
    except NotFound:
        raise HTTPException(status_code=404, detail="Beer not found")
    except StoreError as e:
        raise _store_unavailable(e)
    return BeerResponse.from_entity(beer, bookmarked=get_preferences().is_bookmarked(festival_id))


def _set_bookmark(festival_id: str, bookmarked: bool) -> BeerResponse:
    try:
        beer = get_store().find_by_id(festival_id)
    except NotFound:
        raise HTTPException(status_code=404, detail="Beer not found")
    except StoreError as e:
        raise _store_unavailable(e)

    get_preferences().set_bookmarked(festival_id, bookmarked)
    logger.info(f"Beer {festival_id} bookmarked={bookmarked}")
    return BeerResponse.from_entity(beer, bookmarked=bookmarked)


@router.put("/beers/{festival_id}/bookmark", response_model=BeerResponse)
async def add_bookmark(festival_id: str) -> BeerResponse:
    """Bookmark a beer."""
    return _set_bookmark(festival_id, True)


@router.delete("/beers/{festival_id}/bookmark", response_model=BeerResponse)
async def remove_bookmark(festival_id: str) -> BeerResponse:
    """Remove a beer's bookmark."""
    return _set_bookmark(festival_id, False)


@router.put("/beers/{festival_id}/rating", response_model=BeerResponse)
async def rate_beer(festival_id: str, request: RatingRequest) -> BeerResponse:
    """Set the user's star rating for a beer (0 clears it)."""
    try:
        beer = get_store().set_rating(festival_id, request.rating)
    except NotFound:
        raise HTTPException(status_code=404, detail="Beer not found")
    except StoreError as e:
        raise _store_unavailable(e)
    return BeerResponse.from_entity(beer, bookmarked=get_preferences().is_bookmarked(festival_id))


@router.put("/beers/{festival_id}/comments", response_model=BeerResponse)
async def comment_on_beer(festival_id: str, request: CommentsRequest) -> BeerResponse:
    """Save the user's tasting notes for a beer (empty clears them)."""
    try:
        beer = get_store().set_user_comments(festival_id, request.comments)
    except NotFound:
        raise HTTPException(status_code=404, detail="Beer not found")
    except StoreError as e:
        raise _store_unavailable(e)
    return BeerResponse.from_entity(beer, bookmarked=get_preferences().is_bookmarked(festival_id))


@router.get("/styles", response_model=list[str])
async def list_styles() -> list[str]:
    """Distinct beer styles, sorted case-insensitively."""
    try:
        return get_store().available_styles()
    except StoreError as e:
        raise _store_unavailable(e)


@router.get("/allergens", response_model=list[str])
async def list_allergens() -> list[str]:
    """Distinct allergens across all beers, sorted."""
    try:
        return get_store().available_allergens()
    except StoreError as e:
        raise _store_unavailable(e)


@router.get("/ratings.csv", response_class=PlainTextResponse)
async def export_ratings() -> PlainTextResponse:
    """Rated beers as CSV."""
    try:
        body = ratings_csv(get_store().rated_beers())
    except StoreError as e:
        raise _store_unavailable(e)
    return PlainTextResponse(
        body,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="ratings.csv"'},
    )
