"""
First-login account bootstrap.

Creates the ``users/{uid}`` profile and ``userPreferences/{uid}`` documents
in a single batch. Calling it again for an existing account is a no-op.
"""
from __future__ import annotations

import logging
import time

from ..storage import documents

logger = logging.getLogger(__name__)

DEFAULT_DISPLAY_NAME = "Food Lover"


def default_display_name(email: str, display_name: str | None = None) -> str:
    if display_name:
        return display_name
    local_part = email.split("@")[0] if email else ""
    return local_part or DEFAULT_DISPLAY_NAME


def default_preferences(uid: str) -> dict:
    return {
        "userId": uid,
        "cuisinePreferences": [],
        "dietaryRestrictions": [],
        "priceRangePreference": None,
        "distancePreference": None,
        "favoriteRestaurants": [],
        "blockedRestaurants": [],
        "wheelOptions": [],
    }


def initialize_user_data(
    uid: str,
    email: str = "",
    display_name: str | None = None,
    picture: str | None = None,
) -> dict:
    if documents.exists("users", uid):
        logger.info("User data already exists for %s", uid)
        return {
            "success": True,
            "message": "User data already exists",
            "already_exists": True,
        }

    name = default_display_name(email, display_name)
    logger.info("Initializing user data for %s (%s)", uid, name)
    documents.batch_set([
        ("users", uid, {
            "uid": uid,
            "email": email,
            "displayName": name,
            "profilePictureURL": picture,
            "bio": "",
            "dietaryPreferences": [],
            "lastLoginAt": time.time(),
        }),
        ("userPreferences", uid, default_preferences(uid)),
    ])
    return {
        "success": True,
        "message": "User data created successfully",
        "already_exists": False,
    }
