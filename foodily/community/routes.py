from __future__ import annotations

from fastapi import APIRouter, Depends, File, Query, UploadFile, status

from ..auth.dependencies import get_current_user, require_user
from ..storage import images
from . import clicks, likes, posts, reviews, saved
from .models import (
    ClickRequest,
    LikeRequest,
    LikeResponse,
    PostCreate,
    PostUpdate,
    RestaurantSummary,
    ReviewCreate,
    ReviewUpdate,
    SavedRestaurantUpdate,
    SaveMenuItemRequest,
    SaveRestaurantRequest,
    ToggleResponse,
    UploadedImage,
)

router = APIRouter(tags=["Community"])


# ── Posts ────────────────────────────────────────────────────────────────


@router.post("/posts", status_code=status.HTTP_201_CREATED)
def create_post(body: PostCreate, user: dict = Depends(require_user)) -> dict:
    return posts.create_post(user, body.model_dump())


@router.get("/restaurants/{restaurant_id}/posts")
def restaurant_posts(
    restaurant_id: str,
    limit: int = Query(default=posts.DEFAULT_LIMIT, ge=1, le=100),
    user: dict | None = Depends(get_current_user),
) -> list[dict]:
    liked = set(likes.liked_ids(likes.POST_LIKES, user["uid"])) if user else set()
    return [posts.to_menu_item(p, liked) for p in posts.get_restaurant_posts(restaurant_id, limit)]


@router.get("/posts/mine")
def my_posts(user: dict = Depends(require_user)) -> list[dict]:
    return posts.get_user_posts(user["uid"])


@router.get("/posts/liked")
def liked_posts(user: dict = Depends(require_user)) -> list[dict]:
    return posts.get_liked_posts(user["uid"])


@router.get("/posts/{post_id}")
def get_post(post_id: str) -> dict:
    return posts.get_post(post_id)


@router.patch("/posts/{post_id}")
def update_post(post_id: str, body: PostUpdate, user: dict = Depends(require_user)) -> dict:
    return posts.update_post(user, post_id, body.model_dump(exclude_unset=True))


@router.delete("/posts/{post_id}")
def delete_post(post_id: str, user: dict = Depends(require_user)) -> dict:
    posts.delete_post(user, post_id)
    return {"status": "ok", "removed": post_id}


@router.post("/posts/{post_id}/like", response_model=LikeResponse)
def like_post(
    post_id: str,
    body: LikeRequest | None = None,
    user: dict = Depends(require_user),
) -> LikeResponse:
    liked, count = likes.toggle_like(
        likes.POST_LIKES, user["uid"], post_id, body.restaurant_id if body else "",
    )
    return LikeResponse(liked=liked, likes=count)


# ── Reviews ──────────────────────────────────────────────────────────────


@router.post("/reviews", status_code=status.HTTP_201_CREATED)
def create_review(body: ReviewCreate, user: dict = Depends(require_user)) -> dict:
    return reviews.create_review(user, body.model_dump())


@router.get("/restaurants/{restaurant_id}/reviews")
def restaurant_reviews(
    restaurant_id: str,
    limit: int = Query(default=reviews.DEFAULT_LIMIT, ge=1, le=100),
    user: dict | None = Depends(get_current_user),
) -> list[dict]:
    liked = set(likes.liked_ids(likes.REVIEW_LIKES, user["uid"])) if user else set()
    return [{**r, "isLiked": r["id"] in liked} for r in reviews.get_restaurant_reviews(restaurant_id, limit)]


@router.get("/reviews/mine")
def my_reviews(user: dict = Depends(require_user)) -> list[dict]:
    return reviews.get_user_reviews(user["uid"])


@router.patch("/reviews/{review_id}")
def update_review(review_id: str, body: ReviewUpdate, user: dict = Depends(require_user)) -> dict:
    return reviews.update_review(user, review_id, body.model_dump(exclude_unset=True))


@router.delete("/reviews/{review_id}")
def delete_review(review_id: str, user: dict = Depends(require_user)) -> dict:
    reviews.delete_review(user, review_id)
    return {"status": "ok", "removed": review_id}


@router.post("/reviews/{review_id}/like", response_model=LikeResponse)
def like_review(
    review_id: str,
    body: LikeRequest | None = None,
    user: dict = Depends(require_user),
) -> LikeResponse:
    liked, count = likes.toggle_like(
        likes.REVIEW_LIKES, user["uid"], review_id, body.restaurant_id if body else "",
    )
    return LikeResponse(liked=liked, likes=count)


@router.get("/restaurants/{restaurant_id}/summary", response_model=RestaurantSummary)
def restaurant_summary(restaurant_id: str):
    return reviews.restaurant_summary(restaurant_id)


# ── Saved ────────────────────────────────────────────────────────────────


@router.post("/saved/restaurants/toggle", response_model=ToggleResponse)
def toggle_saved_restaurant(body: SaveRestaurantRequest, user: dict = Depends(require_user)):
    return ToggleResponse(saved=saved.toggle_save_restaurant(user["uid"], body.model_dump()))


@router.get("/saved/restaurants")
def saved_restaurants(user: dict = Depends(require_user)) -> list[dict]:
    return saved.get_saved_restaurants(user["uid"])


@router.patch("/saved/restaurants/{restaurant_id}")
def update_saved_restaurant(
    restaurant_id: str,
    body: SavedRestaurantUpdate,
    user: dict = Depends(require_user),
) -> dict:
    return saved.update_saved_restaurant(user["uid"], restaurant_id, body.model_dump())


@router.post("/saved/menu-items/toggle", response_model=ToggleResponse)
def toggle_saved_menu_item(body: SaveMenuItemRequest, user: dict = Depends(require_user)):
    return ToggleResponse(saved=saved.toggle_save_menu_item(user["uid"], body.model_dump()))


@router.get("/saved/menu-items")
def saved_menu_items(user: dict = Depends(require_user)) -> list[dict]:
    return saved.get_saved_menu_items(user["uid"])


# ── Clicks / uploads ─────────────────────────────────────────────────────


@router.post("/clicks", status_code=status.HTTP_201_CREATED)
def track_click(body: ClickRequest, user: dict = Depends(require_user)) -> dict:
    return clicks.track_restaurant_click(user["uid"], body.model_dump())


@router.get("/clicks")
def clicked_restaurants(user: dict = Depends(require_user)) -> list[dict]:
    return clicks.get_clicked_restaurants(user["uid"])


@router.post("/uploads/images", response_model=UploadedImage, status_code=status.HTTP_201_CREATED)
def upload_image(file: UploadFile = File(...), user: dict = Depends(require_user)):
    config = images.DEFAULT_MEDIA_CONFIG
    stored = images.save_image(user["uid"], file.content_type, images.read_upload(file.file, config), config)
    return UploadedImage(url=stored.url, content_type=stored.content_type, size=stored.size)
