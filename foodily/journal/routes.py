from __future__ import annotations

import datetime as dt

from fastapi import APIRouter, Depends, Query, status

from ..auth.dependencies import require_user
from . import habits, logs
from .models import ExploredRestaurant, FoodLogCreate, FoodLogUpdate, HabitAnalysis

router = APIRouter(prefix="/journal", tags=["Journal"])


@router.post("/logs", status_code=status.HTTP_201_CREATED)
def create_log(body: FoodLogCreate, user: dict = Depends(require_user)) -> dict:
    return logs.create_food_log(user["uid"], body.model_dump())


@router.get("/logs")
def list_logs(
    start_date: dt.date | None = Query(default=None),
    end_date: dt.date | None = Query(default=None),
    user: dict = Depends(require_user),
) -> list[dict]:
    return logs.get_food_logs(
        user["uid"],
        start_date.isoformat() if start_date else None,
        end_date.isoformat() if end_date else None,
    )


@router.get("/logs/week")
def weekly_logs(user: dict = Depends(require_user)) -> dict:
    start, end = logs.week_bounds()
    return {
        "start_date": start,
        "end_date": end,
        "logs": logs.get_weekly_logs(user["uid"]),
    }


@router.patch("/logs/{log_id}")
def update_log(log_id: str, body: FoodLogUpdate, user: dict = Depends(require_user)) -> dict:
    return logs.update_food_log(user, log_id, body.model_dump(exclude_unset=True))


@router.delete("/logs/{log_id}")
def delete_log(log_id: str, user: dict = Depends(require_user)) -> dict:
    logs.delete_food_log(user, log_id)
    return {"status": "ok", "removed": log_id}


@router.get("/explored", response_model=list[ExploredRestaurant])
def explored_restaurants(user: dict = Depends(require_user)):
    return logs.get_explored_restaurants(user["uid"])


# ── Habit analysis ───────────────────────────────────────────────────────


@router.post("/habits/analyze")
def analyze_habits(user: dict = Depends(require_user)) -> dict:
    analysis, text = habits.run_weekly_analysis(user["uid"])
    return {"text": text, "analysis": analysis.model_dump() if analysis else None}


@router.get("/habits/latest", response_model=HabitAnalysis | None)
def latest_analysis(user: dict = Depends(require_user)):
    return habits.get_latest_analysis(user["uid"])


@router.get("/habits/history", response_model=list[HabitAnalysis])
def analysis_history(
    limit: int = Query(default=10, ge=1, le=50),
    user: dict = Depends(require_user),
):
    return habits.get_analysis_history(user["uid"], limit)
