from __future__ import annotations

import datetime as dt
from typing import Literal

from pydantic import BaseModel, Field, field_validator

MAX_POST_IMAGES = 12
MAX_REVIEW_PHOTOS = 5


class Dish(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = ""
    price: str | None = None


class PostCreate(BaseModel):
    restaurant_id: str = Field(..., min_length=1)
    restaurant_name: str = Field(..., min_length=1, max_length=200)
    title: str = Field(default="", max_length=200)
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default="", max_length=2000)
    price: str | None = None
    dishes: list[Dish] = Field(default_factory=list)
    image: str | None = None
    images: list[str] = Field(default_factory=list, max_length=MAX_POST_IMAGES)
    rating: int | None = Field(default=None, ge=1, le=5)
    experience: str = Field(default="", max_length=2000)


class PostUpdate(BaseModel):
    title: str | None = Field(default=None, max_length=200)
    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    price: str | None = None
    dishes: list[Dish] | None = None
    image: str | None = None
    images: list[str] | None = Field(default=None, max_length=MAX_POST_IMAGES)
    rating: int | None = Field(default=None, ge=1, le=5)
    experience: str | None = Field(default=None, max_length=2000)

    @field_validator("title", "name", "description", "dishes", "images", "experience", mode="before")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class ReviewCreate(BaseModel):
    restaurant_id: str = Field(..., min_length=1)
    restaurant_name: str = Field(..., min_length=1, max_length=200)
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=1, max_length=5000)
    photos: list[str] = Field(default_factory=list, max_length=MAX_REVIEW_PHOTOS)
    visit_date: dt.date | None = None


class ReviewUpdate(BaseModel):
    rating: int | None = Field(default=None, ge=1, le=5)
    comment: str | None = Field(default=None, min_length=1, max_length=5000)
    photos: list[str] | None = Field(default=None, max_length=MAX_REVIEW_PHOTOS)
    visit_date: dt.date | None = None

    @field_validator("rating", "comment", "photos", mode="before")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class LikeRequest(BaseModel):
    restaurant_id: str = ""


class LikeResponse(BaseModel):
    liked: bool
    likes: int


class SaveRestaurantRequest(BaseModel):
    restaurant_id: str = Field(..., min_length=1)
    restaurant_name: str = Field(..., min_length=1, max_length=200)
    restaurant_photo: str | None = None
    cuisine_types: list[str] = Field(default_factory=list)
    notes: str = ""
    tags: list[str] = Field(default_factory=list)
    rating: int | None = Field(default=None, ge=1, le=5)
    price_rating: int | None = Field(default=None, ge=1, le=4)


class SavedRestaurantUpdate(BaseModel):
    notes: str | None = None
    tags: list[str] | None = None
    rating: int | None = Field(default=None, ge=1, le=5)
    price_rating: int | None = Field(default=None, ge=1, le=4)
    visited: bool = Field(default=False, description="Count one more visit")


class SaveMenuItemRequest(BaseModel):
    menu_item_id: str = Field(..., min_length=1)
    restaurant_id: str = Field(..., min_length=1)
    restaurant_name: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    image: str | None = None
    price: str | None = None
    rating: int | None = Field(default=None, ge=1, le=5)


class ToggleResponse(BaseModel):
    saved: bool


class ClickRequest(BaseModel):
    restaurant_id: str = Field(..., min_length=1)
    restaurant_name: str = Field(..., min_length=1)
    restaurant_photo: str | None = None
    cuisine_types: list[str] = Field(default_factory=list)
    source: Literal["food_hunter", "food_gacha", "concierge", "search", "other"] = "other"


class RestaurantSummary(BaseModel):
    restaurant_id: str
    review_count: int
    post_count: int
    average_rating: float | None
    rating_distribution: dict[str, int]
    total_likes: int
    photos: list[str]


class UploadedImage(BaseModel):
    url: str
    content_type: str
    size: int
