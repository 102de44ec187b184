from __future__ import annotations

import calendar
import datetime as dt
import math
import zlib
from typing import Any

import numpy as np
import pandas as pd

COINS_PER_VISIT = 15

# (keywords, lowest score, number of possible scores)
_INTENSITY_TIERS = [
    ([
        "curry", "laksa", "spicy", "szechuan", "sichuan", "kimchi", "vindaloo",
        "hot pot", "thai", "indian", "korean bbq", "wasabi", "chili", "cajun",
        "jerk", "tandoori", "buffalo", "sriracha", "gochujang", "sambal",
    ], 70, 26),
    ([
        "mexican", "taco", "burrito", "salsa", "garlic", "onion", "ginger",
        "barbecue", "bbq", "teriyaki", "pho", "ramen", "miso", "soy sauce",
        "fish sauce", "anchovy", "blue cheese", "feta", "olives",
    ], 50, 21),
    ([
        "italian", "pasta", "pizza", "tomato", "basil", "oregano", "chinese",
        "japanese", "sushi", "burger", "cheese", "bacon", "mushroom",
        "american", "french", "mediterranean",
    ], 35, 16),
    ([
        "salad", "caesar", "lettuce", "cucumber", "plain", "steamed", "boiled",
        "grilled chicken", "rice", "bread", "toast", "oatmeal", "yogurt",
        "smoothie", "soup", "broth", "mild", "bland",
    ], 10, 26),
]
_DEFAULT_TIER = (40, 21)

_HEALTHY = ["japanese", "vietnamese", "salad", "seafood", "vegan", "vegetarian", "korean"]
_UNHEALTHY = ["fast food", "burger", "pizza", "fried chicken", "dessert", "american"]

_LOG_COLUMNS = ["cuisine", "foodType", "restaurantName", "rating"]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def flavor_intensity(cuisine: str, food_type: str) -> int:
    """0-100 flavour score from keyword tiers; the same food always scores the same."""
    text = f"{cuisine.lower()} {food_type.lower()}"
    low, span = _DEFAULT_TIER
    for keywords, tier_low, tier_span in _INTENSITY_TIERS:
        if any(k in text for k in keywords):
            low, span = tier_low, tier_span
            break
    rng = np.random.default_rng(zlib.crc32(text.encode()))
    return low + int(rng.integers(0, span))


def _frame(logs: list[dict[str, Any]]) -> pd.DataFrame:
    df = pd.DataFrame(logs, columns=_LOG_COLUMNS)
    df["cuisine"] = df["cuisine"].fillna("").astype(str)
    df["foodType"] = df["foodType"].fillna("").astype(str)
    df["restaurantName"] = df["restaurantName"].fillna("").astype(str)
    df["rating"] = pd.to_numeric(df["rating"], errors="coerce")
    return df


def _health_score(cuisine: str) -> int:
    if any(c in cuisine for c in _HEALTHY):
        return 80
    if any(c in cuisine for c in _UNHEALTHY):
        return 40
    return 60


def calculate_user_stats(logs: list[dict[str, Any]]) -> dict[str, int]:
    """Hexagon stats, each 0-100."""
    if not logs:
        return {
            "healthLevel": 0,
            "exp": 0,
            "coinsSpent": 0,
            "satisfactory": 0,
            "balance": 0,
            "intensity": 0,
        }

    df = _frame(logs)
    cuisine_lower = df["cuisine"].str.lower()

    health_level = min(100, round_half_up(cuisine_lower.apply(_health_score).mean()))

    unique_cuisines = cuisine_lower.nunique()
    unique_restaurants = df["restaurantName"].str.lower().nunique()
    exp = min(100, unique_cuisines * 8 + unique_restaurants * 4)

    coins_spent = min(100, round_half_up(len(df) * COINS_PER_VISIT / 5))

    rated = df.loc[df["rating"] > 0, "rating"]
    satisfactory = round_half_up(rated.mean() * 20) if len(rated) else 0

    balance = max(0, min(100, (unique_cuisines - 1) * 25))

    # frequency-weighted flavour intensity
    keys = (df["cuisine"] + "|" + df["foodType"]).str.lower()
    counts = keys.value_counts()
    scores = np.array([flavor_intensity(*key.split("|", 1)) for key in counts.index])
    intensity = round_half_up(float((scores * counts.to_numpy()).sum() / counts.sum()))

    return {
        "healthLevel": int(health_level),
        "exp": int(exp),
        "coinsSpent": int(coins_spent),
        "satisfactory": int(satisfactory),
        "balance": int(balance),
        "intensity": int(intensity),
    }


def _trend(current: int, past: int) -> tuple[str, int]:
    if past == 0:
        return "stable", 0
    diff = current - past
    pct = round_half_up(abs(diff / past) * 100)
    return ("up" if diff > 0 else "down" if diff < 0 else "stable"), pct


def _top(counts: pd.Series) -> tuple[str, int]:
    """Most frequent label; ties go to the label seen first."""
    if counts.empty:
        return "None", 0
    ordered = counts.sort_values(ascending=False, kind="stable")
    return str(ordered.index[0]), int(ordered.iloc[0])


def calculate_rankings(
    logs: list[dict[str, Any]],
    prev_logs: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Ranking cards for ``logs`` with trends against ``prev_logs``."""
    df = _frame(logs)
    prev = _frame(prev_logs or [])
    for frame in (df, prev):
        frame["cuisineKey"] = frame["cuisine"].replace("", "Unknown")
        frame["restaurantKey"] = frame["restaurantName"].replace("", "Unknown")

    # Top cuisine
    top_cuisine, cuisine_count = _top(df.groupby("cuisineKey", sort=False).size())
    cuisine_trend, cuisine_pct = _trend(cuisine_count, int((prev["cuisineKey"] == top_cuisine).sum()))

    # Top restaurant
    top_restaurant, visit_count = _top(df.groupby("restaurantKey", sort=False).size())
    ratings = df.loc[(df["restaurantKey"] == top_restaurant) & (df["rating"] > 0), "rating"]
    top_rating = round_half_up(ratings.mean()) if len(ratings) else 0
    restaurant_trend, _ = _trend(visit_count, int((prev["restaurantKey"] == top_restaurant).sum()))

    # Eating out
    times_eaten = len(df)
    eating_trend, eating_pct = _trend(times_eaten, len(prev))

    return {
        "topCuisine": {
            "name": top_cuisine,
            "count": cuisine_count,
            "trend": cuisine_trend,
            "trendValue": cuisine_pct,
        },
        "topRestaurant": {
            "name": top_restaurant,
            "rating": int(top_rating),
            "trend": restaurant_trend,
        },
        "eatingOutStats": {
            "timesEaten": times_eaten,
            "coinsSpent": times_eaten * COINS_PER_VISIT,
            "avgPerVisit": float(COINS_PER_VISIT),
            "trend": eating_trend,
            "trendValue": eating_pct,
        },
    }


def calculate_nutrient_analysis(logs: list[dict[str, Any]]) -> dict[str, dict[str, int]]:
    """Indicative macro split derived from log volume; no real nutrient data exists."""
    seed = len(logs)
    scale = max(1, seed) / 2
    percentages = {
        "protein": min(100, 40 + seed % 40),
        "fat": min(100, 30 + (seed * 2) % 40),
        "sugar": min(100, 20 + (seed * 3) % 40),
    }
    return {
        name: {"grams": round_half_up(pct * 1.5 * scale), "percentage": pct}
        for name, pct in percentages.items()
    }


def current_month_range(today: dt.date | None = None) -> tuple[str, str]:
    today = today or dt.date.today()
    last_day = calendar.monthrange(today.year, today.month)[1]
    return today.replace(day=1).isoformat(), today.replace(day=last_day).isoformat()


def last_month_range(today: dt.date | None = None) -> tuple[str, str]:
    today = today or dt.date.today()
    end = today.replace(day=1) - dt.timedelta(days=1)
    return end.replace(day=1).isoformat(), end.isoformat()
