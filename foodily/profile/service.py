from __future__ import annotations

import logging
import random
import time
import uuid
from typing import Any

from ..exceptions import ConflictError, NotFoundError, ServiceValidationError
from ..storage import documents
from .bootstrap import default_preferences

logger = logging.getLogger(__name__)

USERS = "users"
PREFERENCES = "userPreferences"

WHEEL_COLORS = ["#FF6B35", "#FF8C42", "#FFA74F", "#FFB85C", "#FF9A56", "#FFA060"]

# request field -> stored field
_PROFILE_FIELDS = {
    "display_name": "displayName",
    "bio": "bio",
    "dietary_preferences": "dietaryPreferences",
}
_PREFERENCE_FIELDS = {
    "cuisine_preferences": "cuisinePreferences",
    "dietary_restrictions": "dietaryRestrictions",
    "price_range_preference": "priceRangePreference",
    "distance_preference": "distancePreference",
    "favorite_restaurants": "favoriteRestaurants",
    "blocked_restaurants": "blockedRestaurants",
    "city": "city",
}


def _rename(updates: dict[str, Any], mapping: dict[str, str]) -> dict[str, Any]:
    return {mapping[k]: v for k, v in updates.items() if k in mapping}


# ── Profile ──────────────────────────────────────────────────────────────


def get_profile(uid: str) -> dict[str, Any]:
    profile = documents.get(USERS, uid)
    if profile is None:
        raise NotFoundError("Profile not found", details={"uid": uid})
    return profile


def update_profile(uid: str, updates: dict[str, Any]) -> dict[str, Any]:
    changes = _rename(updates, _PROFILE_FIELDS)
    if "profile_picture_url" in updates:
        changes["profilePictureURL"] = updates["profile_picture_url"]
    return documents.update(USERS, uid, changes)


def touch_last_login(uid: str) -> None:
    if documents.exists(USERS, uid):
        documents.update(USERS, uid, {"lastLoginAt": time.time()})


# ── Preferences ──────────────────────────────────────────────────────────


def get_preferences(uid: str) -> dict[str, Any] | None:
    return documents.get(PREFERENCES, uid)


def get_dietary_restrictions(uid: str) -> list[str]:
    prefs = get_preferences(uid) or {}
    return list(prefs.get("dietaryRestrictions") or [])


def update_preferences(uid: str, updates: dict[str, Any]) -> dict[str, Any]:
    return documents.update(PREFERENCES, uid, _rename(updates, _PREFERENCE_FIELDS))


# ── Onboarding ───────────────────────────────────────────────────────────


def save_onboarding(uid: str, data: dict[str, Any]) -> dict[str, Any]:
    """Create or update the preferences document with onboarding answers."""
    fields = {
        "city": data["city"],
        "dateOfBirth": data["date_of_birth"],
        "sex": data["sex"],
        "cuisinePreferences": data.get("cuisine_preferences", []),
        "dietaryRestrictions": data.get("dietary_restrictions", []),
        "termsAccepted": data["terms_accepted"],
        "onboardingCompletedAt": time.time(),
    }
    if documents.exists(PREFERENCES, uid):
        result = documents.update(PREFERENCES, uid, fields)
    else:
        result = documents.set(PREFERENCES, uid, {**default_preferences(uid), **fields})
    logger.info("Onboarding saved for %s", uid)
    return result


def has_completed_onboarding(uid: str) -> bool:
    prefs = get_preferences(uid)
    return (
        prefs is not None
        and prefs.get("termsAccepted") is True
        and prefs.get("onboardingCompletedAt") is not None
    )


# ── Wheel ────────────────────────────────────────────────────────────────


def _require_preferences(uid: str) -> dict[str, Any]:
    prefs = get_preferences(uid)
    if prefs is None:
        raise NotFoundError("Preferences not found, initialize the account first")
    return prefs


def list_wheel_options(uid: str) -> list[dict[str, Any]]:
    prefs = get_preferences(uid) or {}
    return list(prefs.get("wheelOptions") or [])


def add_wheel_option(uid: str, name: str) -> dict[str, Any]:
    name = name.strip()
    if not name:
        raise ServiceValidationError("Wheel option name is empty")

    options = list(_require_preferences(uid).get("wheelOptions") or [])
    if any(opt["name"].lower() == name.lower() for opt in options):
        raise ConflictError(f"{name} is already on the wheel")

    option = {
        "id": uuid.uuid4().hex[:9],
        "name": name,
        "color": WHEEL_COLORS[len(options) % len(WHEEL_COLORS)],
        "timestamp": time.time(),
    }
    documents.update(PREFERENCES, uid, {"wheelOptions": options + [option]})
    return option


def remove_wheel_option(uid: str, option_id: str) -> bool:
    options = list(_require_preferences(uid).get("wheelOptions") or [])
    remaining = [opt for opt in options if opt["id"] != option_id]
    if len(remaining) == len(options):
        return False
    documents.update(PREFERENCES, uid, {"wheelOptions": remaining})
    return True


def spin_wheel(uid: str, rng: random.Random | None = None) -> dict[str, Any]:
    """Uniformly pick one wheel option."""
    options = list_wheel_options(uid)
    if not options:
        raise ServiceValidationError("Add at least one option before spinning the wheel")
    return (rng or random).choice(options)
