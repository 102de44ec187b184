"""
Food journal entries.

A log records what a user ate on a given day (``date`` is ``YYYY-MM-DD``).
Listings are newest date first; the weekly view runs Sunday to Saturday.
"""
from __future__ import annotations

import datetime as dt
import logging
import uuid
from typing import Any

from ..auth.dependencies import ensure_owner
from ..exceptions import NotFoundError
from ..storage import documents

logger = logging.getLogger(__name__)

COLLECTION = "foodLogs"

DEFAULT_CUISINE = "General"
DEFAULT_FOOD_TYPE = "Exploring"

_FIELDS = {
    "date": "date",
    "cuisine": "cuisine",
    "food_type": "foodType",
    "meal_type": "mealType",
    "restaurant_name": "restaurantName",
    "logs": "logs",
    "rating": "rating",
    "notes": "notes",
}


def _log_items(items: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [
        {
            "id": item.get("id") or uuid.uuid4().hex[:12],
            "foodName": item["food_name"],
            "rating": item.get("rating"),
        }
        for item in items
    ]


def _to_fields(data: dict[str, Any]) -> dict[str, Any]:
    fields: dict[str, Any] = {}
    for key, value in data.items():
        if key not in _FIELDS:
            continue
        if key == "date" and isinstance(value, dt.date):
            value = value.isoformat()
        elif key == "logs":
            value = _log_items(value or [])
        fields[_FIELDS[key]] = value
    return fields


def week_bounds(today: dt.date | None = None) -> tuple[str, str]:
    """Sunday and Saturday of the week containing ``today``."""
    today = today or dt.date.today()
    start = today - dt.timedelta(days=(today.weekday() + 1) % 7)
    end = start + dt.timedelta(days=6)
    return start.isoformat(), end.isoformat()


def create_food_log(user_id: str, data: dict[str, Any]) -> dict[str, Any]:
    doc = {
        "userId": user_id,
        "mealType": None,
        "restaurantId": None,
        "restaurantName": "",
        "logs": [],
        "rating": None,
        "notes": "",
        **_to_fields(data),
    }
    created = documents.add(COLLECTION, doc)
    logger.info("Food log %s created for %s", created["id"], user_id)
    return created


def get_food_logs(
    user_id: str,
    start_date: str | None = None,
    end_date: str | None = None,
) -> list[dict[str, Any]]:
    where = [("userId", "==", user_id)]
    if start_date:
        where.append(("date", ">=", start_date))
    if end_date:
        where.append(("date", "<=", end_date))
    return documents.query(COLLECTION, where=where, order_by="date", descending=True)


def get_weekly_logs(user_id: str, today: dt.date | None = None) -> list[dict[str, Any]]:
    start, end = week_bounds(today)
    return get_food_logs(user_id, start, end)


def _owned_log(user: dict, log_id: str) -> dict[str, Any]:
    log = documents.get(COLLECTION, log_id)
    if log is None:
        raise NotFoundError("Food log not found", details={"id": log_id})
    ensure_owner(log, user, "food logs")
    return log


def update_food_log(user: dict, log_id: str, updates: dict[str, Any]) -> dict[str, Any]:
    _owned_log(user, log_id)
    return documents.update(COLLECTION, log_id, _to_fields(updates))


def delete_food_log(user: dict, log_id: str) -> None:
    _owned_log(user, log_id)
    documents.delete(COLLECTION, log_id)
    logger.info("Food log %s deleted", log_id)


def auto_log_food_search(
    user_id: str,
    cuisine: str | None,
    food_type: str | None,
    restaurant_name: str | None = None,
    today: dt.date | None = None,
) -> dict[str, Any]:
    """Record a search as today's food log."""
    return create_food_log(user_id, {
        "date": today or dt.date.today(),
        "cuisine": cuisine or DEFAULT_CUISINE,
        "food_type": food_type or DEFAULT_FOOD_TYPE,
        "restaurant_name": restaurant_name or "",
    })


def get_explored_restaurants(user_id: str) -> list[dict[str, Any]]:
    """Unique restaurants across a user's logs, keeping the newest entry per name."""
    explored: dict[str, dict[str, Any]] = {}
    for log in get_food_logs(user_id):
        name = log.get("restaurantName")
        if not name:
            continue
        key = name.lower()
        if key not in explored:
            explored[key] = {
                "id": log.get("restaurantId") or log["id"],
                "name": name,
                "cuisine": log.get("cuisine", ""),
                "timestamp": log["createdAt"],
            }
    return list(explored.values())
