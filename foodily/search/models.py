from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

SearchType = Literal["dish", "cuisine", "restaurant", "location"]


class GeoPoint(BaseModel):
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)


class GroundingSource(BaseModel):
    uri: str | None = None
    title: str | None = None


class GroundingChunk(BaseModel):
    """Citation backing a generated answer: a Maps listing or a web page."""

    maps: GroundingSource | None = None
    web: GroundingSource | None = None


class SearchResult(BaseModel):
    text: str
    grounding_chunks: list[GroundingChunk] = Field(default_factory=list)


class Pick(BaseModel):
    name: str
    rating: str | None = None
    description: str = ""
    maps_uri: str | None = None


class ParsedPicks(BaseModel):
    intro: str = ""
    picks: list[Pick] = Field(default_factory=list)


class SearchRequest(BaseModel):
    query: str = Field(..., min_length=1, max_length=500)
    location: GeoPoint | None = None
    search_type: SearchType = "dish"
    auto_log: bool = Field(
        default=False, description="Also record the search in today's food journal"
    )


class SearchResponse(BaseModel):
    text: str
    grounding_chunks: list[GroundingChunk]
    intro: str
    picks: list[Pick]
    cuisine: str | None = None
    food_type: str | None = None
    logged: bool = False


class RestaurantDetailsResponse(BaseModel):
    name: str
    text: str
    grounding_chunks: list[GroundingChunk]
    cuisine_types: list[str]


class ConciergeRequest(BaseModel):
    occasion: str = Field(..., min_length=1, max_length=200)
    people: str = Field(..., min_length=1, max_length=200)
    request: str = Field(..., min_length=1, max_length=1000)


class ConciergeResponse(BaseModel):
    text: str
    grounding_chunks: list[GroundingChunk]
    intro: str
    picks: list[Pick]


class SlotOptionsRequest(BaseModel):
    target_type: Literal["cuisine", "food"]
    value: str = Field(..., min_length=1, max_length=100)


class SlotOptionsResponse(BaseModel):
    target_type: str
    value: str
    options: list[str]


class PlaceDetails(BaseModel):
    place_id: str
    name: str
    formatted_address: str | None = None
    location: GeoPoint | None = None
    phone_number: str | None = None
    website: str | None = None
    rating: float | None = None


class PlaceLookupResponse(BaseModel):
    place: PlaceDetails | None
    maps_url: str


class SearchHistoryItem(BaseModel):
    id: str
    search_query: str
    search_type: str
    dish_name: str | None = None
    cuisine_type: str | None = None
    location_searched: str | None = None
    results_count: int = 0
    timestamp: float
