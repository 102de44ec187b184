"""
Like toggles for posts and reviews.

One like document per (user, target). The target's ``likes`` counter moves
with every toggle and is clamped at zero.
"""
from __future__ import annotations

import logging
import threading

from ..exceptions import NotFoundError
from ..storage import documents

logger = logging.getLogger(__name__)

POST_LIKES = "postLikes"
REVIEW_LIKES = "reviewLikes"

_toggle_lock = threading.Lock()

# likes collection -> (target collection, id field)
_TARGETS = {
    POST_LIKES: ("communityPosts", "postId"),
    REVIEW_LIKES: ("reviews", "reviewId"),
}


def _find_like(likes_collection: str, user_id: str, target_id: str) -> dict | None:
    _, id_field = _TARGETS[likes_collection]
    found = documents.query(
        likes_collection,
        where=[("userId", "==", user_id), (id_field, "==", target_id)],
        limit=1,
    )
    return found[0] if found else None


def toggle_like(
    likes_collection: str,
    user_id: str,
    target_id: str,
    restaurant_id: str = "",
) -> tuple[bool, int]:
    """Like or unlike. Returns ``(liked_now, like_count)``."""
    target_collection, id_field = _TARGETS[likes_collection]
    with _toggle_lock:
        target = documents.get(target_collection, target_id)
        if target is None:
            raise NotFoundError(f"{id_field} {target_id} not found")

        existing = _find_like(likes_collection, user_id, target_id)
        if existing:
            documents.delete(likes_collection, existing["id"])
            count = documents.increment(target_collection, target_id, "likes", -1)
            return False, count

        documents.add(likes_collection, {
            "userId": user_id,
            id_field: target_id,
            "restaurantId": restaurant_id or target.get("restaurantId", ""),
        })
        count = documents.increment(target_collection, target_id, "likes", 1)
        return True, count


def is_liked(likes_collection: str, user_id: str, target_id: str) -> bool:
    return _find_like(likes_collection, user_id, target_id) is not None


def liked_ids(likes_collection: str, user_id: str) -> list[str]:
    _, id_field = _TARGETS[likes_collection]
    likes = documents.query(likes_collection, where=[("userId", "==", user_id)])
    return [like[id_field] for like in likes]


def get_likes(likes_collection: str, target_id: str) -> list[dict]:
    _, id_field = _TARGETS[likes_collection]
    return documents.query(likes_collection, where=[(id_field, "==", target_id)])


def remove_likes_for(likes_collection: str, target_id: str) -> int:
    likes = get_likes(likes_collection, target_id)
    for like in likes:
        documents.delete(likes_collection, like["id"])
    return len(likes)
