"""Per-user bookmarks: saved restaurants and saved community menu items."""
from __future__ import annotations

import logging
import time
from typing import Any

from ..exceptions import ConflictError, NotFoundError
from ..storage import documents

logger = logging.getLogger(__name__)

SAVED_RESTAURANTS = "savedRestaurants"
SAVED_MENU_ITEMS = "savedMenuItems"


def _find(collection: str, user_id: str, field: str, value: str) -> dict[str, Any] | None:
    found = documents.query(collection, where=[("userId", "==", user_id), (field, "==", value)], limit=1)
    return found[0] if found else None


# ── Restaurants ──────────────────────────────────────────────────────────


def is_restaurant_saved(user_id: str, restaurant_id: str) -> bool:
    return _find(SAVED_RESTAURANTS, user_id, "restaurantId", restaurant_id) is not None


def save_restaurant(user_id: str, data: dict[str, Any]) -> dict[str, Any]:
    if is_restaurant_saved(user_id, data["restaurant_id"]):
        raise ConflictError("Restaurant is already saved")
    saved = documents.add(SAVED_RESTAURANTS, {
        "userId": user_id,
        "restaurantId": data["restaurant_id"],
        "restaurantName": data["restaurant_name"],
        "restaurantPhoto": data.get("restaurant_photo"),
        "cuisineTypes": data.get("cuisine_types", []),
        "notes": data.get("notes", ""),
        "tags": data.get("tags", []),
        "lastVisited": None,
        "visitCount": 0,
        "rating": data.get("rating"),
        "priceRating": data.get("price_rating"),
    })
    logger.info("Restaurant %s saved by %s", saved["restaurantName"], user_id)
    return saved


def unsave_restaurant(user_id: str, restaurant_id: str) -> None:
    saved = _find(SAVED_RESTAURANTS, user_id, "restaurantId", restaurant_id)
    if saved is None:
        raise NotFoundError("Saved restaurant not found")
    documents.delete(SAVED_RESTAURANTS, saved["id"])


def toggle_save_restaurant(user_id: str, data: dict[str, Any]) -> bool:
    """Returns ``True`` when the restaurant is saved afterwards."""
    if is_restaurant_saved(user_id, data["restaurant_id"]):
        unsave_restaurant(user_id, data["restaurant_id"])
        return False
    save_restaurant(user_id, data)
    return True


def get_saved_restaurants(user_id: str) -> list[dict[str, Any]]:
    return documents.query(
        SAVED_RESTAURANTS, where=[("userId", "==", user_id)],
        order_by="createdAt", descending=True,
    )


def update_saved_restaurant(user_id: str, restaurant_id: str, updates: dict[str, Any]) -> dict[str, Any]:
    saved = _find(SAVED_RESTAURANTS, user_id, "restaurantId", restaurant_id)
    if saved is None:
        raise NotFoundError("Saved restaurant not found")

    changes: dict[str, Any] = {}
    for key, field in (("notes", "notes"), ("tags", "tags"), ("rating", "rating"), ("price_rating", "priceRating")):
        if updates.get(key) is not None:
            changes[field] = updates[key]
    if updates.get("visited"):
        changes["visitCount"] = saved.get("visitCount", 0) + 1
        changes["lastVisited"] = time.time()
    return documents.update(SAVED_RESTAURANTS, saved["id"], changes)


# ── Menu items ───────────────────────────────────────────────────────────


def is_menu_item_saved(user_id: str, menu_item_id: str) -> bool:
    return _find(SAVED_MENU_ITEMS, user_id, "menuItemId", menu_item_id) is not None


def toggle_save_menu_item(user_id: str, data: dict[str, Any]) -> bool:
    existing = _find(SAVED_MENU_ITEMS, user_id, "menuItemId", data["menu_item_id"])
    if existing:
        documents.delete(SAVED_MENU_ITEMS, existing["id"])
        return False
    documents.add(SAVED_MENU_ITEMS, {
        "userId": user_id,
        "menuItemId": data["menu_item_id"],
        "restaurantId": data["restaurant_id"],
        "restaurantName": data["restaurant_name"],
        "title": data["title"],
        "image": data.get("image"),
        "price": data.get("price"),
        "rating": data.get("rating"),
    })
    return True


def get_saved_menu_items(user_id: str) -> list[dict[str, Any]]:
    return documents.query(
        SAVED_MENU_ITEMS, where=[("userId", "==", user_id)],
        order_by="createdAt", descending=True,
    )
