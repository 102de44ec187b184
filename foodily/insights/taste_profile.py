"""
Taste profile.

A per-user aggregate of what they eat and engage with, stored in the
``tasteProfiles`` collection. Weights per signal:

    food log          40 to the cuisine and the food type
    saved restaurant  30 to the restaurant and each of its cuisines
    liked post        20 to the restaurant
    click             20 to the restaurant, 10 to each of its cuisines
    quick exit        x0.8 on the restaurant and its cuisines

Cuisines last eaten long ago decay by ``max(0.5, 1 - days / 90)``. Each
score family is then normalised so its leader sits at 100.

Profiles are served from the store for up to six hours. Empty profiles,
stale ones, and ones invalidated by a food-log write are recomputed on read.
"""
from __future__ import annotations

import datetime as dt
import logging
from typing import Any

from ..community import clicks, posts, saved
from ..journal import logs as food_logs
from ..storage import documents
from . import activity
from .stats import round_half_up

logger = logging.getLogger(__name__)

COLLECTION = "tasteProfiles"
STALE_AFTER = dt.timedelta(hours=6)

FOOD_LOG_WEIGHT = 40
SAVED_WEIGHT = 30
LIKED_POST_WEIGHT = 20
CLICK_WEIGHT = 20
CLICK_CUISINE_WEIGHT = 10
QUICK_EXIT_DAMPING = 0.8
RECENCY_HORIZON_DAYS = 90
RECENCY_FLOOR = 0.5
FULL_CONFIDENCE_POINTS = 50
ACTIVITY_WINDOW = 200

DEFAULT_BUDGET = {"avgPriceRating": 2.5, "range": [1, 4]}
DEFAULT_LOCATION = {"maxDistance": 10, "preferredAreas": []}


def _empty_profile(user_id: str, now: dt.datetime) -> dict[str, Any]:
    return {
        "userId": user_id,
        "cuisineScores": {},
        "foodTypeScores": {},
        "restaurantScores": {},
        "timePatterns": {"hourOfDay": {}, "dayOfWeek": {}},
        "budgetPreference": dict(DEFAULT_BUDGET),
        "locationPreference": dict(DEFAULT_LOCATION),
        "negativeSignals": {"quickExits": {}, "repeatedSearchNoClick": {}},
        "lastComputed": now.timestamp(),
        "dataPoints": 0,
        "confidenceScore": 0,
        "stale": False,
    }


def _restaurant(scores: dict[str, dict], restaurant_id: str) -> dict[str, Any]:
    return scores.setdefault(
        restaurant_id,
        {"score": 0.0, "visitCount": 0, "avgTimeSpent": 0.0, "saved": False},
    )


def _cuisine(scores: dict[str, dict], name: str) -> dict[str, Any]:
    return scores.setdefault(name, {"score": 0.0, "frequency": 0})


def _normalise(scores: dict[str, dict]) -> None:
    top = max([s["score"] for s in scores.values()] + [1])
    for entry in scores.values():
        entry["score"] = min(100.0, entry["score"] / top * 100)


def _add_pattern(bucket: dict[str, list[str]], key: int, cuisine: str) -> None:
    seen = bucket.setdefault(str(key), [])
    if cuisine not in seen:
        seen.append(cuisine)


def _budget(saved_restaurants: list[dict[str, Any]]) -> dict[str, Any]:
    prices = [r["priceRating"] for r in saved_restaurants if r.get("priceRating")]
    if not prices:
        return dict(DEFAULT_BUDGET)
    return {"avgPriceRating": round(sum(prices) / len(prices), 2), "range": [min(prices), max(prices)]}


def compute_taste_profile(user_id: str, now: dt.datetime | None = None) -> dict[str, Any]:
    now = now or dt.datetime.now()
    logs = food_logs.get_food_logs(user_id)
    saved_restaurants = saved.get_saved_restaurants(user_id)
    liked_posts = posts.get_liked_posts(user_id)
    recent_activity = activity.get_user_activity(user_id, ACTIVITY_WINDOW)
    clicked = clicks.get_clicked_restaurants(user_id)

    profile = _empty_profile(user_id, now)
    cuisine_scores = profile["cuisineScores"]
    food_type_scores = profile["foodTypeScores"]
    restaurant_scores = profile["restaurantScores"]
    patterns = profile["timePatterns"]
    negative = profile["negativeSignals"]
    last_eaten: dict[str, dt.date] = {}
    data_points = 0

    # 1. Food logs
    for log in logs:
        cuisine, food_type = log.get("cuisine", ""), log.get("foodType", "")
        eaten_on = dt.date.fromisoformat(log["date"])

        entry = _cuisine(cuisine_scores, cuisine)
        entry["frequency"] += 1
        entry["score"] += FOOD_LOG_WEIGHT
        if cuisine not in last_eaten or eaten_on > last_eaten[cuisine]:
            last_eaten[cuisine] = eaten_on

        entry = _cuisine(food_type_scores, food_type)
        entry["frequency"] += 1
        entry["score"] += FOOD_LOG_WEIGHT

        logged_at = dt.datetime.fromtimestamp(log["createdAt"])
        _add_pattern(patterns["hourOfDay"], logged_at.hour, cuisine)
        _add_pattern(patterns["dayOfWeek"], (eaten_on.weekday() + 1) % 7, cuisine)
        data_points += 1

    # 2. Saved restaurants
    for restaurant in saved_restaurants:
        entry = _restaurant(restaurant_scores, restaurant["restaurantId"])
        entry["score"] += SAVED_WEIGHT
        entry["saved"] = True
        for cuisine in restaurant.get("cuisineTypes") or []:
            _cuisine(cuisine_scores, cuisine)["score"] += SAVED_WEIGHT
        data_points += 1

    # 3. Liked posts
    for post in liked_posts:
        _restaurant(restaurant_scores, post.get("restaurantId", ""))["score"] += LIKED_POST_WEIGHT
        data_points += 1

    # 4. Clicks (one per restaurant)
    for click in clicked:
        entry = _restaurant(restaurant_scores, click["id"])
        entry["score"] += CLICK_WEIGHT
        entry["visitCount"] += 1
        for cuisine in click.get("cuisineTypes") or []:
            _cuisine(cuisine_scores, cuisine)["score"] += CLICK_CUISINE_WEIGHT
        data_points += 1

    # 5. Activity
    for act in recent_activity:
        kind = act.get("activityType")
        restaurant_id = act.get("restaurantId")
        if kind == "quick_exit" and restaurant_id:
            negative["quickExits"][restaurant_id] = negative["quickExits"].get(restaurant_id, 0) + 1
            if restaurant_id in restaurant_scores:
                restaurant_scores[restaurant_id]["score"] *= QUICK_EXIT_DAMPING
            for cuisine in act.get("cuisineTypes") or []:
                if cuisine in cuisine_scores:
                    cuisine_scores[cuisine]["score"] *= QUICK_EXIT_DAMPING
        elif kind == "search_no_click" and act.get("searchQuery"):
            query = act["searchQuery"]
            negative["repeatedSearchNoClick"][query] = negative["repeatedSearchNoClick"].get(query, 0) + 1
        elif kind == "restaurant_view" and restaurant_id and act.get("timeSpent"):
            if restaurant_id in restaurant_scores:
                entry = restaurant_scores[restaurant_id]
                count = entry["visitCount"] or 1
                entry["avgTimeSpent"] = (entry["avgTimeSpent"] * count + act["timeSpent"]) / (count + 1)

    # 6. Recency
    for cuisine, eaten_on in last_eaten.items():
        days_since = (now - dt.datetime.combine(eaten_on, dt.time())).total_seconds() / 86400
        cuisine_scores[cuisine]["score"] *= max(RECENCY_FLOOR, 1 - days_since / RECENCY_HORIZON_DAYS)
        cuisine_scores[cuisine]["lastEaten"] = eaten_on.isoformat()

    # 7. Normalise
    for scores in (cuisine_scores, food_type_scores, restaurant_scores):
        _normalise(scores)

    profile["budgetPreference"] = _budget(saved_restaurants)
    profile["dataPoints"] = data_points
    profile["confidenceScore"] = min(100.0, data_points / FULL_CONFIDENCE_POINTS * 100)

    documents.set(COLLECTION, user_id, profile)
    logger.info(
        "Taste profile for %s: %d cuisines, %d restaurants, %d data points",
        user_id, len(cuisine_scores), len(restaurant_scores), data_points,
    )
    return documents.get(COLLECTION, user_id)


def _needs_refresh(profile: dict[str, Any], now: dt.datetime) -> bool:
    if profile.get("dataPoints", 0) == 0 or profile.get("stale"):
        return True
    return profile["lastComputed"] < (now - STALE_AFTER).timestamp()


def get_taste_profile(user_id: str, now: dt.datetime | None = None) -> dict[str, Any]:
    now = now or dt.datetime.now()
    profile = documents.get(COLLECTION, user_id)
    if profile is None or _needs_refresh(profile, now):
        return compute_taste_profile(user_id, now)
    return profile


def reset_taste_profile(user_id: str, now: dt.datetime | None = None) -> dict[str, Any]:
    logger.info("Resetting taste profile for %s", user_id)
    return documents.set(COLLECTION, user_id, _empty_profile(user_id, now or dt.datetime.now()))


def top_cuisines(profile: dict[str, Any], limit: int = 5) -> list[str]:
    ranked = sorted(profile.get("cuisineScores", {}).items(), key=lambda kv: kv[1]["score"], reverse=True)
    return [name for name, _ in ranked[:limit]]


def cuisine_preference_summary(profile: dict[str, Any]) -> str:
    """One-line preference hint appended to AI search prompts."""
    names = top_cuisines(profile)
    if not names:
        return ""
    details = [
        f"{name} (score: {round_half_up(profile['cuisineScores'][name]['score'])}, "
        f"frequency: {profile['cuisineScores'][name]['frequency']})"
        for name in names
    ]
    return f"User prefers: {', '.join(details)}"


def invalidate(user_id: str) -> None:
    if documents.exists(COLLECTION, user_id):
        documents.update(COLLECTION, user_id, {"stale": True})


def _on_food_log_change(change: dict[str, Any]) -> None:
    user_id = (change.get("data") or {}).get("userId")
    if user_id:
        invalidate(user_id)


_unsubscribe = documents.subscribe(food_logs.COLLECTION, _on_food_log_change)
