from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class InitializeRequest(BaseModel):
    display_name: str | None = Field(default=None, max_length=100)
    picture: str | None = None


class InitializeResponse(BaseModel):
    success: bool
    message: str
    already_exists: bool


class ProfileUpdate(BaseModel):
    display_name: str | None = Field(default=None, min_length=1, max_length=100)
    bio: str | None = Field(default=None, max_length=500)
    dietary_preferences: list[str] | None = None


class PreferencesUpdate(BaseModel):
    cuisine_preferences: list[str] | None = None
    dietary_restrictions: list[str] | None = None
    price_range_preference: Literal["$", "$$", "$$$", "$$$$"] | None = None
    distance_preference: float | None = Field(default=None, gt=0, description="Kilometres")
    favorite_restaurants: list[str] | None = None
    blocked_restaurants: list[str] | None = None
    city: str | None = None


class OnboardingRequest(BaseModel):
    city: str = Field(..., min_length=1, max_length=100)
    date_of_birth: str = Field(..., description="YYYY-MM-DD")
    sex: Literal["Male", "Female", "Prefer not to say"]
    cuisine_preferences: list[str] = Field(default_factory=list)
    dietary_restrictions: list[str] = Field(default_factory=list)
    terms_accepted: bool


class OnboardingStatus(BaseModel):
    completed: bool


class WheelOptionRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)


class WheelOption(BaseModel):
    id: str
    name: str
    color: str
    timestamp: float
