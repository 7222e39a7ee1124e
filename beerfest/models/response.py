"""
Pydantic models for the beer festival API.

Beer payload:
{
  "festival_id": "string",
  "name": "string",
  "abv": 4.5,
  "brewery": {"festival_id": "string", "name": "string", "description": "string"},
  "description": "string",
  "style": "string",
  "status": "string",
  "dispense_method": "string",
  "allergens": "string",
  "category": "beer",
  "rating": 0,
  "user_comments": "string",
  "bookmarked": false
}
"""

from typing import Optional

from pydantic import BaseModel, Field

from ..config import Config
from .entities import Beer, Brewery


class BreweryResponse(BaseModel):
    """A producer listed at the festival."""
    festival_id: str = Field(..., description="Festival-assigned brewery id")
    name: str
    description: str = ""

    @classmethod
    def from_entity(cls, brewery: Brewery) -> "BreweryResponse":
        return cls(
            festival_id=brewery.festival_id,
            name=brewery.name,
            description=brewery.description,
        )


class BeerResponse(BaseModel):
    """A beer with its brewery and the user's own state."""
    festival_id: str = Field(..., description="Festival-assigned beer id")
    name: str
    abv: float = Field(..., ge=0, description="Alcohol by volume, percent")
    brewery: BreweryResponse
    description: str = ""
    style: str = ""
    status: str = Field("", description="Availability text from the feed")
    dispense_method: str = ""
    allergens: str = Field("", description="Comma-separated allergens")
    category: str = Config.DEFAULT_CATEGORY
    rating: int = Field(0, ge=0, le=Config.MAX_RATING, description="User star rating, 0 = unrated")
    user_comments: str = ""
    bookmarked: bool = False

    @classmethod
    def from_entity(cls, beer: Beer, bookmarked: bool = False) -> "BeerResponse":
        return cls(
            festival_id=beer.festival_id,
            name=beer.name,
            abv=beer.abv,
            brewery=BreweryResponse.from_entity(beer.brewery),
            description=beer.description,
            style=beer.style,
            status=beer.status,
            dispense_method=beer.dispense_method,
            allergens=beer.allergens,
            category=beer.category,
            rating=beer.rating,
            user_comments=beer.user_comments,
            bookmarked=bookmarked,
        )


class BeerListResponse(BaseModel):
    """Response from GET /beers."""
    total: int
    beers: list[BeerResponse] = Field(default_factory=list)


class RatingRequest(BaseModel):
    """Body of PUT /beers/{id}/rating."""
    rating: int = Field(..., ge=0, le=Config.MAX_RATING, description="Stars, 0 clears the rating")


class CommentsRequest(BaseModel):
    """Body of PUT /beers/{id}/comments."""
    comments: str = Field(..., max_length=Config.MAX_COMMENT_LENGTH, description="Tasting notes; empty clears them")


class SyncMessageResponse(BaseModel):
    kind: str
    detail: str


class SyncFailureResponse(BaseModel):
    kind: str
    detail: str


class SyncResponse(BaseModel):
    """Response from POST /sync."""
    state: str
    breweries_upserted: int = 0
    beers_upserted: int = 0
    skipped_count: int = 0
    elapsed: float = 0.0
    digest: Optional[str] = None
    unchanged: bool = False
    skipped_update: bool = Field(False, description="True if no update was due")
    failure: Optional[SyncFailureResponse] = None
    messages: list[SyncMessageResponse] = Field(default_factory=list)
