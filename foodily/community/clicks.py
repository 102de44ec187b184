from __future__ import annotations

import logging
from typing import Any

from ..storage import documents

logger = logging.getLogger(__name__)

COLLECTION = "restaurantClicks"


def track_restaurant_click(user_id: str, data: dict[str, Any]) -> dict[str, Any]:
    click = documents.add(COLLECTION, {
        "userId": user_id,
        "restaurantId": data["restaurant_id"],
        "restaurantName": data["restaurant_name"],
        "restaurantPhoto": data.get("restaurant_photo"),
        "cuisineTypes": data.get("cuisine_types", []),
        "source": data.get("source", "other"),
    })
    logger.debug("Restaurant click tracked: %s", click["restaurantName"])
    return click


def get_clicked_restaurants(user_id: str) -> list[dict[str, Any]]:
    """Most recent click per restaurant, newest first."""
    seen: dict[str, dict[str, Any]] = {}
    clicks = documents.query(
        COLLECTION, where=[("userId", "==", user_id)],
        order_by="createdAt", descending=True,
    )
    for click in clicks:
        key = click["restaurantId"]
        if key not in seen:
            seen[key] = {
                "id": key,
                "name": click["restaurantName"],
                "photo": click.get("restaurantPhoto"),
                "cuisineTypes": click.get("cuisineTypes", []),
                "timestamp": click["createdAt"],
                "source": click.get("source", "other"),
            }
    return list(seen.values())


def has_clicked_restaurant(user_id: str, restaurant_id: str) -> bool:
    return bool(documents.query(
        COLLECTION,
        where=[("userId", "==", user_id), ("restaurantId", "==", restaurant_id)],
        limit=1,
    ))
