from __future__ import annotations

import threading
from typing import Any

import bcrypt

from ..exceptions import ConflictError

_users: dict[str, dict[str, Any]] = {}
_lock = threading.Lock()


def _hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode(), bcrypt.gensalt()).decode()


def _verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode(), hashed.encode())


def _public(username: str, record: dict[str, Any]) -> dict[str, Any]:
    return {
        "uid": username,
        "username": username,
        "role": record["role"],
        "email": record.get("email", ""),
        "display_name": record.get("display_name"),
    }


def _seed_users() -> None:
    """Pre-seed demo users on import."""
    _users["user"] = {
        "password_hash": _hash_password("user123"),
        "role": "user",
        "email": "user@foodily.app",
        "display_name": "Demo Foodie",
    }
    _users["admin"] = {
        "password_hash": _hash_password("admin123"),
        "role": "admin",
        "email": "admin@foodily.app",
        "display_name": "Admin",
    }


def register(
    username: str,
    password: str,
    email: str = "",
    display_name: str | None = None,
) -> dict[str, Any]:
    """Create a ``user``-role account. Raises ``ConflictError`` if the name is taken."""
    with _lock:
        if username in _users:
            raise ConflictError("Username already taken", details={"username": username})
        _users[username] = {
            "password_hash": _hash_password(password),
            "role": "user",
            "email": email,
            "display_name": display_name,
        }
        return _public(username, _users[username])


def authenticate(username: str, password: str) -> dict[str, Any] | None:
    """Verify credentials. Returns the session user dict or ``None``."""
    record = _users.get(username)
    if record and _verify_password(password, record["password_hash"]):
        return _public(username, record)
    return None


def remove_user(username: str) -> None:
    with _lock:
        if username not in ("user", "admin"):
            _users.pop(username, None)


_seed_users()
