from __future__ import annotations

from fastapi.testclient import TestClient

from foodily.app import app
from foodily.auth.users import remove_user
from foodily.storage import documents

client = TestClient(app)


def _login_user(c):
    return c.post("/auth/login", json={"username": "user", "password": "user123"})


def _login_admin(c):
    return c.post("/auth/login", json={"username": "admin", "password": "admin123"})


def test_login_success():
    resp = _login_user(client)
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["user"]["role"] == "user"
    assert body["user"]["uid"] == "user"


def test_login_wrong_password():
    resp = client.post("/auth/login", json={"username": "user", "password": "wrong"})
    assert resp.status_code == 401


def test_login_unknown_user():
    resp = client.post("/auth/login", json={"username": "nobody", "password": "x"})
    assert resp.status_code == 401


def test_me_requires_login():
    c = TestClient(app)
    assert c.get("/auth/me").status_code == 401


def test_me_after_login():
    _login_admin(client)
    resp = client.get("/auth/me")
    assert resp.status_code == 200
    assert resp.json()["role"] == "admin"


def test_logout_clears_session():
    _login_user(client)
    client.post("/auth/logout")
    assert client.get("/auth/me").status_code == 401


def test_first_login_bootstraps_account():
    documents.clear()
    first = _login_user(client)
    assert first.json()["new_account"] is True
    assert documents.get("users", "user")["displayName"] == "Demo Foodie"
    assert documents.get("userPreferences", "user")["wheelOptions"] == []

    second = _login_user(client)
    assert second.json()["new_account"] is False


def test_signup_creates_account_and_session():
    documents.clear()
    c = TestClient(app)
    try:
        resp = c.post("/auth/signup", json={
            "username": "newbie",
            "password": "secret1",
            "email": "newbie@example.com",
        })
        assert resp.status_code == 201
        assert c.get("/auth/me").json()["uid"] == "newbie"
        # display name falls back to the email local part
        assert documents.get("users", "newbie")["displayName"] == "newbie"
    finally:
        remove_user("newbie")


def test_signup_duplicate_username():
    resp = TestClient(app).post("/auth/signup", json={"username": "user", "password": "secret1"})
    assert resp.status_code == 409


def test_signup_validates_username():
    resp = TestClient(app).post("/auth/signup", json={"username": "a b", "password": "secret1"})
    assert resp.status_code == 422


def test_admin_endpoints_forbidden_for_users():
    _login_user(client)
    assert client.get("/analytics").status_code == 403
    assert client.get("/cache/stats").status_code == 403


def test_health():
    assert client.get("/health").json() == {"status": "ok"}
