from __future__ import annotations

import logging
import time
from typing import Any

from ..storage import documents
from .models import GeoPoint, SearchHistoryItem

logger = logging.getLogger(__name__)

COLLECTION = "searchHistory"
RECENT_WINDOW_DAYS = 7


def _to_item(doc: dict[str, Any]) -> SearchHistoryItem:
    return SearchHistoryItem(
        id=doc["id"],
        search_query=doc.get("searchQuery", ""),
        search_type=doc.get("searchType", "dish"),
        dish_name=doc.get("dishName"),
        cuisine_type=doc.get("cuisineType"),
        location_searched=doc.get("locationSearched"),
        results_count=doc.get("resultsCount", 0),
        timestamp=doc["createdAt"],
    )


def save_search_history(
    user_id: str,
    search_query: str,
    search_type: str,
    results_count: int = 0,
    dish_name: str | None = None,
    cuisine_type: str | None = None,
    location_searched: str | None = None,
    user_location: GeoPoint | None = None,
) -> str:
    doc = documents.add(COLLECTION, {
        "userId": user_id,
        "searchQuery": search_query,
        "searchType": search_type,
        "dishName": dish_name,
        "cuisineType": cuisine_type,
        "locationSearched": location_searched,
        "resultsCount": results_count,
        "userLocation": user_location.model_dump() if user_location else None,
    })
    logger.debug("Search saved to history: %s", doc["id"])
    return doc["id"]


def get_search_history(
    user_id: str,
    limit: int = 50,
    search_type: str | None = None,
) -> list[SearchHistoryItem]:
    where = [("userId", "==", user_id)]
    if search_type:
        where.append(("searchType", "==", search_type))
    docs = documents.query(COLLECTION, where=where, order_by="createdAt", descending=True, limit=limit)
    return [_to_item(d) for d in docs]


def get_recent_searches(user_id: str, now: float | None = None) -> list[SearchHistoryItem]:
    """Searches from the last seven days, newest first."""
    now = time.time() if now is None else now
    cutoff = now - RECENT_WINDOW_DAYS * 86400
    docs = documents.query(
        COLLECTION,
        where=[("userId", "==", user_id), ("createdAt", ">=", cutoff)],
        order_by="createdAt",
        descending=True,
    )
    return [_to_item(d) for d in docs]


def delete_search_entry(user_id: str, search_id: str) -> bool:
    doc = documents.get(COLLECTION, search_id)
    if doc is None or doc.get("userId") != user_id:
        return False
    return documents.delete(COLLECTION, search_id)


def clear_search_history(user_id: str) -> int:
    """Remove every search of ``user_id``. Returns how many were removed."""
    docs = documents.query(COLLECTION, where=[("userId", "==", user_id)])
    for doc in docs:
        documents.delete(COLLECTION, doc["id"])
    logger.info("Cleared %d searches for %s", len(docs), user_id)
    return len(docs)
