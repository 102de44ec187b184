from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends, Query

from ..analytics.store import record_event
from ..auth.dependencies import require_user
from ..exceptions import NotFoundError
from ..insights import taste_profile
from ..journal.logs import auto_log_food_search
from ..llm.groq_client import expand_slot_options, extract_cuisine_from_search
from ..profile.service import get_dietary_restrictions
from . import history
from .cuisines import extract_cuisine_types
from .grounding import concierge_chat, get_restaurant_details, search_restaurants_by_maps
from .models import (
    ConciergeRequest,
    ConciergeResponse,
    PlaceLookupResponse,
    RestaurantDetailsResponse,
    SearchHistoryItem,
    SearchRequest,
    SearchResponse,
    SlotOptionsRequest,
    SlotOptionsResponse,
)
from .picks import attach_map_links, parse_picks
from .places import google_maps_url, search_place_by_name

router = APIRouter(tags=["Search"])
logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> float:
    return round((time.time() - start) * 1000, 1)


@router.post("/search", response_model=SearchResponse)
def search(body: SearchRequest, user: dict = Depends(require_user)) -> SearchResponse:
    start = time.time()
    uid = user["uid"]

    # 1. Personalise the prompt
    restrictions = get_dietary_restrictions(uid)
    summary = taste_profile.cuisine_preference_summary(taste_profile.get_taste_profile(uid))

    # 2. Grounded search
    result = search_restaurants_by_maps(body.query, body.location, restrictions, summary)
    parsed = parse_picks(result.text)
    picks = attach_map_links(parsed.picks, result.grounding_chunks)

    # 3. Optional journal entry
    cuisine = food_type = None
    if body.auto_log:
        extracted = extract_cuisine_from_search(body.query)
        cuisine, food_type = extracted["cuisine"], extracted["foodType"]
        auto_log_food_search(uid, cuisine, food_type)

    # 4. History and analytics
    history.save_search_history(
        uid,
        body.query,
        body.search_type,
        results_count=len(picks),
        dish_name=food_type or (body.query if body.search_type == "dish" else None),
        cuisine_type=cuisine,
        user_location=body.location,
    )
    record_event("search", {
        "query": body.query,
        "search_type": body.search_type,
        "has_location": body.location is not None,
        "citations": len(result.grounding_chunks),
        "results_count": len(picks),
        "logged": body.auto_log,
        "response_time_ms": _elapsed_ms(start),
    })

    return SearchResponse(
        text=result.text,
        grounding_chunks=result.grounding_chunks,
        intro=parsed.intro,
        picks=picks,
        cuisine=cuisine,
        food_type=food_type,
        logged=body.auto_log,
    )


@router.get("/restaurants/{name}/details", response_model=RestaurantDetailsResponse)
def restaurant_details(name: str, user: dict = Depends(require_user)) -> RestaurantDetailsResponse:
    start = time.time()
    result = get_restaurant_details(name)
    record_event("details", {"restaurant": name, "response_time_ms": _elapsed_ms(start)})
    return RestaurantDetailsResponse(
        name=name,
        text=result.text,
        grounding_chunks=result.grounding_chunks,
        cuisine_types=extract_cuisine_types(result.text, name),
    )


@router.post("/concierge", response_model=ConciergeResponse)
def concierge(body: ConciergeRequest, user: dict = Depends(require_user)) -> ConciergeResponse:
    start = time.time()
    result = concierge_chat(body.occasion, body.people, body.request)
    parsed = parse_picks(result.text)
    record_event("concierge", {"occasion": body.occasion, "response_time_ms": _elapsed_ms(start)})
    return ConciergeResponse(
        text=result.text,
        grounding_chunks=result.grounding_chunks,
        intro=parsed.intro,
        picks=attach_map_links(parsed.picks, result.grounding_chunks),
    )


@router.post("/slot-options", response_model=SlotOptionsResponse)
def slot_options(body: SlotOptionsRequest, user: dict = Depends(require_user)) -> SlotOptionsResponse:
    return SlotOptionsResponse(
        target_type=body.target_type,
        value=body.value,
        options=expand_slot_options(body.target_type, body.value),
    )


@router.get("/places/lookup", response_model=PlaceLookupResponse)
def place_lookup(
    name: str = Query(..., min_length=1, max_length=200),
    user: dict = Depends(require_user),
) -> PlaceLookupResponse:
    place = search_place_by_name(name)
    return PlaceLookupResponse(place=place, maps_url=google_maps_url(name, place))


# ── Search history ───────────────────────────────────────────────────────


@router.get("/search-history", response_model=list[SearchHistoryItem])
def search_history(
    limit: int = Query(default=50, ge=1, le=200),
    search_type: str | None = Query(default=None),
    user: dict = Depends(require_user),
):
    return history.get_search_history(user["uid"], limit, search_type)


@router.get("/search-history/recent", response_model=list[SearchHistoryItem])
def recent_searches(user: dict = Depends(require_user)):
    return history.get_recent_searches(user["uid"])


@router.delete("/search-history")
def clear_search_history(user: dict = Depends(require_user)) -> dict:
    return {"status": "ok", "removed": history.clear_search_history(user["uid"])}


@router.delete("/search-history/{search_id}")
def delete_search(search_id: str, user: dict = Depends(require_user)) -> dict:
    if not history.delete_search_entry(user["uid"], search_id):
        raise NotFoundError("Search not found", details={"id": search_id})
    return {"status": "ok", "removed": search_id}
