from __future__ import annotations

from typing import Any

from fastapi import HTTPException, Request

from ..exceptions import ForbiddenError


def get_current_user(request: Request) -> dict | None:
    """Return the session user dict, or ``None`` for anonymous callers."""
    return request.session.get("user")


def require_user(request: Request) -> dict:
    """Raise 401 unless a user is signed in."""
    user = get_current_user(request)
    if not user:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user


def require_admin(request: Request) -> dict:
    """Raise 401 if signed out, 403 for non-admin accounts."""
    user = require_user(request)
    if user.get("role") != "admin":
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


def ensure_owner(doc: dict[str, Any], user: dict, what: str = "document") -> None:
    """Only the author of a log, post or review may change it."""
    if doc.get("userId") != user["uid"]:
        raise ForbiddenError(f"You can only modify your own {what}")
