"""Implicit interaction signals that feed the taste profile."""
from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Literal

from ..storage import documents

logger = logging.getLogger(__name__)

COLLECTION = "userActivity"

ActivityType = Literal["restaurant_view", "quick_exit", "search_no_click"]


def time_of_day(hour: int) -> str:
    if 6 <= hour < 11:
        return "breakfast"
    if 11 <= hour < 15:
        return "lunch"
    if 17 <= hour < 22:
        return "dinner"
    return "snack"


def _context(now: dt.datetime | None, location: dict | None) -> dict[str, Any]:
    now = now or dt.datetime.now()
    return {
        "timeOfDay": time_of_day(now.hour),
        # Sunday = 0
        "dayOfWeek": (now.weekday() + 1) % 7,
        "location": location,
    }


def _record(user_id: str, activity_type: ActivityType, fields: dict[str, Any],
            now: dt.datetime | None, location: dict | None) -> dict[str, Any]:
    activity = documents.add(COLLECTION, {
        "userId": user_id,
        "activityType": activity_type,
        **fields,
        "context": _context(now, location),
    })
    logger.debug("Tracked %s for %s", activity_type, user_id)
    return activity


def track_restaurant_view(
    user_id: str,
    restaurant_id: str,
    restaurant_name: str,
    cuisine_types: list[str],
    time_spent: float,
    location: dict | None = None,
    now: dt.datetime | None = None,
) -> dict[str, Any]:
    return _record(user_id, "restaurant_view", {
        "restaurantId": restaurant_id,
        "restaurantName": restaurant_name,
        "cuisineTypes": cuisine_types,
        "timeSpent": time_spent,
    }, now, location)


def track_quick_exit(
    user_id: str,
    restaurant_id: str,
    restaurant_name: str,
    time_spent: float,
    cuisine_types: list[str] | None = None,
    location: dict | None = None,
    now: dt.datetime | None = None,
) -> dict[str, Any]:
    return _record(user_id, "quick_exit", {
        "restaurantId": restaurant_id,
        "restaurantName": restaurant_name,
        "cuisineTypes": cuisine_types or [],
        "timeSpent": time_spent,
    }, now, location)


def track_search_no_click(
    user_id: str,
    search_query: str,
    location: dict | None = None,
    now: dt.datetime | None = None,
) -> dict[str, Any]:
    return _record(user_id, "search_no_click", {"searchQuery": search_query}, now, location)


def get_user_activity(
    user_id: str,
    limit: int = 100,
    activity_type: ActivityType | None = None,
) -> list[dict[str, Any]]:
    where = [("userId", "==", user_id)]
    if activity_type:
        where.append(("activityType", "==", activity_type))
    return documents.query(COLLECTION, where=where, order_by="createdAt", descending=True, limit=limit)
