from __future__ import annotations

import datetime as dt
from typing import Literal

from fastapi import APIRouter, Depends, Query, status

from ..auth.dependencies import require_user
from ..journal import logs as food_logs
from . import activity, stats, taste_profile
from .models import QuickExitEvent, SearchNoClickEvent, StatsResponse, ViewEvent

router = APIRouter(tags=["Insights"])


@router.get("/insights/stats", response_model=StatsResponse)
def user_stats(
    period: Literal["week", "month"] = Query(default="month"),
    user: dict = Depends(require_user),
) -> StatsResponse:
    today = dt.date.today()
    if period == "week":
        start, end = food_logs.week_bounds(today)
        prev_start, prev_end = food_logs.week_bounds(today - dt.timedelta(days=7))
    else:
        start, end = stats.current_month_range(today)
        prev_start, prev_end = stats.last_month_range(today)

    current = food_logs.get_food_logs(user["uid"], start, end)
    previous = food_logs.get_food_logs(user["uid"], prev_start, prev_end)
    return StatsResponse(
        period=period,
        start_date=start,
        end_date=end,
        stats=stats.calculate_user_stats(current),
        rankings=stats.calculate_rankings(current, previous),
        nutrients=stats.calculate_nutrient_analysis(current),
    )


# ── Taste profile ────────────────────────────────────────────────────────


@router.get("/taste-profile")
def get_taste_profile(user: dict = Depends(require_user)) -> dict:
    profile = taste_profile.get_taste_profile(user["uid"])
    return {
        **profile,
        "topCuisines": taste_profile.top_cuisines(profile),
        "summary": taste_profile.cuisine_preference_summary(profile),
    }


@router.post("/taste-profile/recompute")
def recompute_taste_profile(user: dict = Depends(require_user)) -> dict:
    return taste_profile.compute_taste_profile(user["uid"])


@router.delete("/taste-profile")
def reset_taste_profile(user: dict = Depends(require_user)) -> dict:
    return taste_profile.reset_taste_profile(user["uid"])


# ── Activity ─────────────────────────────────────────────────────────────


@router.post("/activity/view", status_code=status.HTTP_201_CREATED)
def track_view(body: ViewEvent, user: dict = Depends(require_user)) -> dict:
    return activity.track_restaurant_view(
        user["uid"], body.restaurant_id, body.restaurant_name,
        body.cuisine_types, body.time_spent, body.location,
    )


@router.post("/activity/quick-exit", status_code=status.HTTP_201_CREATED)
def track_quick_exit(body: QuickExitEvent, user: dict = Depends(require_user)) -> dict:
    return activity.track_quick_exit(
        user["uid"], body.restaurant_id, body.restaurant_name,
        body.time_spent, body.cuisine_types, body.location,
    )


@router.post("/activity/search-no-click", status_code=status.HTTP_201_CREATED)
def track_search_no_click(body: SearchNoClickEvent, user: dict = Depends(require_user)) -> dict:
    return activity.track_search_no_click(user["uid"], body.search_query, body.location)


@router.get("/activity")
def list_activity(
    limit: int = Query(default=100, ge=1, le=500),
    activity_type: activity.ActivityType | None = Query(default=None),
    user: dict = Depends(require_user),
) -> list[dict]:
    return activity.get_user_activity(user["uid"], limit, activity_type)
