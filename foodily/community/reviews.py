from __future__ import annotations

import datetime as dt
import logging
from collections import Counter
from typing import Any

from ..auth.dependencies import ensure_owner
from ..exceptions import NotFoundError
from ..storage import documents
from . import likes, posts

logger = logging.getLogger(__name__)

COLLECTION = "reviews"
DEFAULT_LIMIT = 50

_FIELDS = {
    "rating": "rating",
    "comment": "comment",
    "photos": "photos",
    "visit_date": "visitDate",
}


def _to_fields(data: dict[str, Any]) -> dict[str, Any]:
    fields = {}
    for key, value in data.items():
        if key not in _FIELDS:
            continue
        if isinstance(value, dt.date):
            value = value.isoformat()
        fields[_FIELDS[key]] = value
    return fields


def create_review(user: dict, data: dict[str, Any]) -> dict[str, Any]:
    user_name, user_photo = posts.author_of(user)
    review = documents.add(COLLECTION, {
        "userId": user["uid"],
        "userName": user_name,
        "userPhoto": user_photo,
        "restaurantId": data["restaurant_id"],
        "restaurantName": data["restaurant_name"],
        "photos": [],
        "visitDate": None,
        **_to_fields(data),
        "likes": 0,
    })
    logger.info("Review %s created for %s", review["id"], review["restaurantName"])
    return review


def get_review(review_id: str) -> dict[str, Any]:
    review = documents.get(COLLECTION, review_id)
    if review is None:
        raise NotFoundError("Review not found", details={"id": review_id})
    return review


def get_restaurant_reviews(restaurant_id: str, limit: int = DEFAULT_LIMIT) -> list[dict[str, Any]]:
    return documents.query(
        COLLECTION, where=[("restaurantId", "==", restaurant_id)],
        order_by="createdAt", descending=True, limit=limit,
    )


def get_user_reviews(user_id: str, limit: int = DEFAULT_LIMIT) -> list[dict[str, Any]]:
    return documents.query(
        COLLECTION, where=[("userId", "==", user_id)],
        order_by="createdAt", descending=True, limit=limit,
    )


def update_review(user: dict, review_id: str, updates: dict[str, Any]) -> dict[str, Any]:
    ensure_owner(get_review(review_id), user, "reviews")
    return documents.update(COLLECTION, review_id, _to_fields(updates))


def delete_review(user: dict, review_id: str) -> None:
    ensure_owner(get_review(review_id), user, "reviews")
    documents.delete(COLLECTION, review_id)
    likes.remove_likes_for(likes.REVIEW_LIKES, review_id)
    logger.info("Review %s deleted", review_id)


def restaurant_summary(restaurant_id: str) -> dict[str, Any]:
    """Aggregate community signals for one restaurant."""
    reviews = documents.query(COLLECTION, where=[("restaurantId", "==", restaurant_id)])
    restaurant_posts = documents.query(posts.COLLECTION, where=[("restaurantId", "==", restaurant_id)])

    ratings = [r["rating"] for r in reviews if r.get("rating")]
    distribution = Counter(str(r) for r in ratings)

    photos: list[str] = []
    for doc in sorted(reviews + restaurant_posts, key=lambda d: d["createdAt"], reverse=True):
        photos.extend(doc.get("photos") or doc.get("images") or [])

    return {
        "restaurant_id": restaurant_id,
        "review_count": len(reviews),
        "post_count": len(restaurant_posts),
        "average_rating": round(sum(ratings) / len(ratings), 1) if ratings else None,
        "rating_distribution": {str(star): distribution.get(str(star), 0) for star in range(1, 6)},
        "total_likes": sum(d.get("likes", 0) for d in reviews + restaurant_posts),
        "photos": photos[:12],
    }
