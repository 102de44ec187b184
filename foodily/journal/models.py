from __future__ import annotations

import datetime as dt
from typing import Literal

from pydantic import BaseModel, Field, field_validator

MealType = Literal["Breakfast", "Lunch", "Dinner", "Snack"]


class LogItem(BaseModel):
    id: str | None = None
    food_name: str = Field(..., min_length=1, max_length=200)
    rating: int | None = Field(default=None, ge=1, le=5)


class FoodLogCreate(BaseModel):
    date: dt.date
    cuisine: str = Field(..., min_length=1, max_length=100)
    food_type: str = Field(..., min_length=1, max_length=100)
    meal_type: MealType | None = None
    restaurant_name: str = ""
    logs: list[LogItem] = Field(default_factory=list)
    rating: int | None = Field(default=None, ge=1, le=5)
    notes: str = Field(default="", max_length=2000)


class FoodLogUpdate(BaseModel):
    date: dt.date | None = None
    cuisine: str | None = Field(default=None, min_length=1, max_length=100)
    food_type: str | None = Field(default=None, min_length=1, max_length=100)
    meal_type: MealType | None = None
    restaurant_name: str | None = None
    logs: list[LogItem] | None = None
    rating: int | None = Field(default=None, ge=1, le=5)
    notes: str | None = Field(default=None, max_length=2000)

    @field_validator("date", "cuisine", "food_type", "restaurant_name", "logs", "notes", mode="before")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value


class ExploredRestaurant(BaseModel):
    id: str
    name: str
    cuisine: str
    timestamp: float


class SummaryPoint(BaseModel):
    category: str
    description: str


class HabitAnalysis(BaseModel):
    id: str
    analysis_text: str
    summary_points: list[SummaryPoint]
    next_step: str
    date_range_start: str
    date_range_end: str
    total_logs_analyzed: int
    created_at: float
