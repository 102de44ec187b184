from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class ViewEvent(BaseModel):
    restaurant_id: str = Field(..., min_length=1)
    restaurant_name: str = Field(..., min_length=1)
    cuisine_types: list[str] = Field(default_factory=list)
    time_spent: float = Field(..., ge=0, description="Milliseconds on the restaurant page")
    location: dict | None = None


class QuickExitEvent(BaseModel):
    restaurant_id: str = Field(..., min_length=1)
    restaurant_name: str = Field(..., min_length=1)
    cuisine_types: list[str] = Field(default_factory=list)
    time_spent: float = Field(..., ge=0)
    location: dict | None = None


class SearchNoClickEvent(BaseModel):
    search_query: str = Field(..., min_length=1, max_length=500)
    location: dict | None = None


class StatsResponse(BaseModel):
    period: Literal["week", "month"]
    start_date: str
    end_date: str
    stats: dict[str, int]
    rankings: dict
    nutrients: dict[str, dict[str, int]]
