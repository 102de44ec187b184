from __future__ import annotations

import logging
from typing import Any

from ..auth.dependencies import ensure_owner
from ..exceptions import NotFoundError
from ..storage import documents
from . import likes

logger = logging.getLogger(__name__)

COLLECTION = "communityPosts"
DEFAULT_LIMIT = 50

_FIELDS = {
    "title": "title",
    "name": "name",
    "description": "description",
    "price": "price",
    "dishes": "dishes",
    "image": "image",
    "images": "images",
    "rating": "rating",
    "experience": "experience",
}


def author_of(user: dict) -> tuple[str, str | None]:
    """Display name and photo denormalised onto community documents."""
    profile = documents.get("users", user["uid"]) or {}
    name = profile.get("displayName") or user.get("display_name") or user["username"]
    return name, profile.get("profilePictureURL")


def create_post(user: dict, data: dict[str, Any]) -> dict[str, Any]:
    user_name, user_photo = author_of(user)
    post = documents.add(COLLECTION, {
        "userId": user["uid"],
        "userName": user_name,
        "userPhoto": user_photo,
        "restaurantId": data["restaurant_id"],
        "restaurantName": data["restaurant_name"],
        "title": data.get("title", ""),
        "name": data["name"],
        "description": data.get("description", ""),
        "price": data.get("price"),
        "dishes": data.get("dishes", []),
        "image": data.get("image"),
        "images": data.get("images", []),
        "rating": data.get("rating"),
        "experience": data.get("experience", ""),
        "likes": 0,
    })
    logger.info("Community post %s created for %s", post["id"], post["restaurantName"])
    return post


def get_post(post_id: str) -> dict[str, Any]:
    post = documents.get(COLLECTION, post_id)
    if post is None:
        raise NotFoundError("Post not found", details={"id": post_id})
    return post


def get_restaurant_posts(restaurant_id: str, limit: int = DEFAULT_LIMIT) -> list[dict[str, Any]]:
    return documents.query(
        COLLECTION, where=[("restaurantId", "==", restaurant_id)],
        order_by="createdAt", descending=True, limit=limit,
    )


def get_user_posts(user_id: str, limit: int = DEFAULT_LIMIT) -> list[dict[str, Any]]:
    return documents.query(
        COLLECTION, where=[("userId", "==", user_id)],
        order_by="createdAt", descending=True, limit=limit,
    )


def update_post(user: dict, post_id: str, updates: dict[str, Any]) -> dict[str, Any]:
    ensure_owner(get_post(post_id), user, "posts")
    return documents.update(COLLECTION, post_id, {_FIELDS[k]: v for k, v in updates.items() if k in _FIELDS})


def delete_post(user: dict, post_id: str) -> None:
    ensure_owner(get_post(post_id), user, "posts")
    documents.delete(COLLECTION, post_id)
    removed = likes.remove_likes_for(likes.POST_LIKES, post_id)
    logger.info("Community post %s deleted with %d likes", post_id, removed)


def to_menu_item(post: dict[str, Any], liked: set[str] = frozenset()) -> dict[str, Any]:
    images = post.get("images") or []
    return {
        "id": post["id"],
        "title": post.get("title", ""),
        "name": post.get("name", ""),
        "description": post.get("description", ""),
        "price": post.get("price"),
        "image": post.get("image") or (images[0] if images else None),
        "images": images,
        "dishes": post.get("dishes", []),
        "userName": post.get("userName", ""),
        "timestamp": post["createdAt"],
        "likes": post.get("likes", 0),
        "isLiked": post["id"] in liked,
        "rating": post.get("rating"),
        "experience": post.get("experience", ""),
    }


def get_liked_posts(user_id: str) -> list[dict[str, Any]]:
    """Posts the user liked, skipping ones deleted since."""
    result = []
    for like in documents.query(likes.POST_LIKES, where=[("userId", "==", user_id)], order_by="createdAt", descending=True):
        post = documents.get(COLLECTION, like["postId"])
        if post is not None:
            result.append({**post, "postId": post["id"], "likedAt": like["createdAt"]})
    return result
