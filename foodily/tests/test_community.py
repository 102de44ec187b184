from __future__ import annotations

import io

import pytest
from fastapi.testclient import TestClient

from foodily.app import app
from foodily.community import clicks, likes
from foodily.exceptions import NotFoundError
from foodily.storage import documents, images

client = TestClient(app)


def _login_user(c):
    c.post("/auth/login", json={"username": "user", "password": "user123"})


def _login_admin(c):
    c.post("/auth/login", json={"username": "admin", "password": "admin123"})


def _post_payload(**overrides):
    payload = {
        "restaurant_id": "r1",
        "restaurant_name": "Ichiran",
        "title": "Late night ramen",
        "name": "Tonkotsu Ramen",
        "price": "$15",
        "images": ["/media/user/a.jpg", "/media/user/b.jpg"],
        "rating": 5,
    }
    payload.update(overrides)
    return payload


def _review_payload(**overrides):
    payload = {
        "restaurant_id": "r1",
        "restaurant_name": "Ichiran",
        "rating": 4,
        "comment": "Rich broth, quick service.",
    }
    payload.update(overrides)
    return payload


def setup_function():
    documents.clear()


# ── Posts ────────────────────────────────────────────────────────────────


def test_create_post_denormalises_author():
    _login_user(client)
    resp = client.post("/posts", json=_post_payload())
    assert resp.status_code == 201
    post = resp.json()
    assert post["userId"] == "user"
    assert post["userName"] == "Demo Foodie"
    assert post["likes"] == 0


def test_post_image_limit():
    _login_user(client)
    resp = client.post("/posts", json=_post_payload(images=[f"/media/{i}.jpg" for i in range(13)]))
    assert resp.status_code == 422


def test_restaurant_posts_as_menu_items():
    _login_user(client)
    first = client.post("/posts", json=_post_payload(name="A")).json()
    second = client.post("/posts", json=_post_payload(name="B", images=[])).json()
    client.post("/posts", json=_post_payload(restaurant_id="r2"))
    client.post(f"/posts/{first['id']}/like")

    items = client.get("/restaurants/r1/posts").json()
    assert [i["id"] for i in items] == [second["id"], first["id"]]
    assert items[1]["image"] == "/media/user/a.jpg"
    assert items[1]["isLiked"] is True
    assert items[0]["image"] is None
    assert items[0]["isLiked"] is False

    anonymous = TestClient(app).get("/restaurants/r1/posts").json()
    assert all(i["isLiked"] is False for i in anonymous)


def test_like_toggle_updates_counter():
    _login_user(client)
    post_id = client.post("/posts", json=_post_payload()).json()["id"]

    liked = client.post(f"/posts/{post_id}/like").json()
    assert liked == {"liked": True, "likes": 1}
    assert likes.is_liked(likes.POST_LIKES, "user", post_id)

    unliked = client.post(f"/posts/{post_id}/like").json()
    assert unliked == {"liked": False, "likes": 0}
    assert client.get(f"/posts/{post_id}").json()["likes"] == 0


def test_like_counts_per_user():
    _login_user(client)
    post_id = client.post("/posts", json=_post_payload()).json()["id"]
    client.post(f"/posts/{post_id}/like")

    other = TestClient(app)
    _login_admin(other)
    assert other.post(f"/posts/{post_id}/like").json() == {"liked": True, "likes": 2}


def test_like_missing_post():
    _login_user(client)
    assert client.post("/posts/missing/like").status_code == 404


def test_liked_posts_listing_skips_deleted():
    _login_user(client)
    keep = client.post("/posts", json=_post_payload(name="Keep")).json()["id"]
    client.post(f"/posts/{keep}/like")

    liked = client.get("/posts/liked").json()
    assert [p["postId"] for p in liked] == [keep]
    assert "likedAt" in liked[0]

    documents.delete("communityPosts", keep)
    assert client.get("/posts/liked").json() == []


def test_update_and_delete_post_ownership():
    _login_user(client)
    post_id = client.post("/posts", json=_post_payload()).json()["id"]
    client.post(f"/posts/{post_id}/like")

    other = TestClient(app)
    _login_admin(other)
    assert other.patch(f"/posts/{post_id}", json={"title": "mine now"}).status_code == 403
    assert other.delete(f"/posts/{post_id}").status_code == 403

    updated = client.patch(f"/posts/{post_id}", json={"title": "Updated"}).json()
    assert updated["title"] == "Updated"
    assert updated["name"] == "Tonkotsu Ramen"

    assert client.delete(f"/posts/{post_id}").status_code == 200
    assert client.get(f"/posts/{post_id}").status_code == 404
    assert likes.get_likes(likes.POST_LIKES, post_id) == []


def test_post_update_rejects_null_name():
    _login_user(client)
    post_id = client.post("/posts", json=_post_payload()).json()["id"]
    assert client.patch(f"/posts/{post_id}", json={"name": None}).status_code == 422
    assert client.patch(f"/posts/{post_id}", json={"images": None}).status_code == 422
    assert client.get(f"/posts/{post_id}").json()["name"] == "Tonkotsu Ramen"


def test_my_posts():
    _login_user(client)
    client.post("/posts", json=_post_payload())
    other = TestClient(app)
    _login_admin(other)
    other.post("/posts", json=_post_payload())

    mine = client.get("/posts/mine").json()
    assert len(mine) == 1
    assert mine[0]["userId"] == "user"


# ── Reviews ──────────────────────────────────────────────────────────────


def test_review_lifecycle():
    _login_user(client)
    resp = client.post("/reviews", json=_review_payload(visit_date="2024-05-01"))
    assert resp.status_code == 201
    review = resp.json()
    assert review["visitDate"] == "2024-05-01"
    assert review["likes"] == 0

    liked = client.post(f"/reviews/{review['id']}/like", json={"restaurant_id": "r1"}).json()
    assert liked == {"liked": True, "likes": 1}

    listed = client.get("/restaurants/r1/reviews").json()
    assert listed[0]["isLiked"] is True

    updated = client.patch(f"/reviews/{review['id']}", json={"rating": 5}).json()
    assert updated["rating"] == 5
    assert updated["comment"] == "Rich broth, quick service."

    assert len(client.get("/reviews/mine").json()) == 1
    assert client.delete(f"/reviews/{review['id']}").status_code == 200
    assert client.get("/restaurants/r1/reviews").json() == []
    assert likes.get_likes(likes.REVIEW_LIKES, review["id"]) == []


def test_review_rating_bounds():
    _login_user(client)
    assert client.post("/reviews", json=_review_payload(rating=0)).status_code == 422
    assert client.post("/reviews", json=_review_payload(photos=["p"] * 6)).status_code == 422


def test_review_update_rejects_null_rating_and_comment():
    _login_user(client)
    review_id = client.post("/reviews", json=_review_payload()).json()["id"]

    resp = client.patch(f"/reviews/{review_id}", json={"rating": None, "comment": None})
    assert resp.status_code == 422

    review = client.get("/restaurants/r1/reviews").json()[0]
    assert review["rating"] == 4
    assert review["comment"] == "Rich broth, quick service."


def test_review_update_forbidden_for_others():
    _login_user(client)
    review_id = client.post("/reviews", json=_review_payload()).json()["id"]
    other = TestClient(app)
    _login_admin(other)
    assert other.patch(f"/reviews/{review_id}", json={"rating": 1}).status_code == 403


def test_restaurant_summary():
    _login_user(client)
    client.post("/reviews", json=_review_payload(rating=5, photos=["/p1.jpg"]))
    client.post("/reviews", json=_review_payload(rating=4))
    client.post("/reviews", json=_review_payload(rating=4, restaurant_id="r2"))
    post_id = client.post("/posts", json=_post_payload()).json()["id"]
    client.post(f"/posts/{post_id}/like")

    summary = client.get("/restaurants/r1/summary").json()
    assert summary["review_count"] == 2
    assert summary["post_count"] == 1
    assert summary["average_rating"] == 4.5
    assert summary["rating_distribution"] == {"1": 0, "2": 0, "3": 0, "4": 1, "5": 1}
    assert summary["total_likes"] == 1
    assert sorted(summary["photos"]) == ["/media/user/a.jpg", "/media/user/b.jpg", "/p1.jpg"]


def test_restaurant_summary_empty():
    summary = TestClient(app).get("/restaurants/none/summary").json()
    assert summary["review_count"] == 0
    assert summary["average_rating"] is None


def test_toggle_like_unknown_target():
    with pytest.raises(NotFoundError):
        likes.toggle_like(likes.REVIEW_LIKES, "user", "missing")


# ── Saved ────────────────────────────────────────────────────────────────


def test_toggle_saved_restaurant():
    _login_user(client)
    body = {"restaurant_id": "r1", "restaurant_name": "Ichiran", "cuisine_types": ["Japanese"], "price_rating": 2}

    assert client.post("/saved/restaurants/toggle", json=body).json() == {"saved": True}
    saved = client.get("/saved/restaurants").json()
    assert saved[0]["restaurantName"] == "Ichiran"
    assert saved[0]["priceRating"] == 2

    assert client.post("/saved/restaurants/toggle", json=body).json() == {"saved": False}
    assert client.get("/saved/restaurants").json() == []


def test_update_saved_restaurant_visit():
    _login_user(client)
    client.post("/saved/restaurants/toggle", json={"restaurant_id": "r1", "restaurant_name": "Ichiran"})

    updated = client.patch("/saved/restaurants/r1", json={"notes": "Go at 2am", "visited": True}).json()
    assert updated["notes"] == "Go at 2am"
    assert updated["visitCount"] == 1
    assert updated["lastVisited"] is not None

    again = client.patch("/saved/restaurants/r1", json={"visited": True}).json()
    assert again["visitCount"] == 2
    assert again["notes"] == "Go at 2am"


def test_update_unsaved_restaurant_404():
    _login_user(client)
    assert client.patch("/saved/restaurants/r9", json={"notes": "x"}).status_code == 404


def test_toggle_saved_menu_item():
    _login_user(client)
    body = {"menu_item_id": "p1", "restaurant_id": "r1", "restaurant_name": "Ichiran", "title": "Ramen"}
    assert client.post("/saved/menu-items/toggle", json=body).json() == {"saved": True}
    assert client.get("/saved/menu-items").json()[0]["menuItemId"] == "p1"
    assert client.post("/saved/menu-items/toggle", json=body).json() == {"saved": False}
    assert client.get("/saved/menu-items").json() == []


# ── Clicks ───────────────────────────────────────────────────────────────


def test_clicked_restaurants_unique_newest():
    _login_user(client)
    client.post("/clicks", json={"restaurant_id": "r1", "restaurant_name": "Ichiran", "source": "search"})
    client.post("/clicks", json={"restaurant_id": "r2", "restaurant_name": "Afuri"})
    client.post("/clicks", json={"restaurant_id": "r1", "restaurant_name": "Ichiran", "source": "food_gacha"})

    clicked = client.get("/clicks").json()
    assert [c["id"] for c in clicked] == ["r1", "r2"]
    assert clicked[0]["source"] == "food_gacha"
    assert clicks.has_clicked_restaurant("user", "r2")
    assert not clicks.has_clicked_restaurant("user", "r3")


def test_click_source_validated():
    _login_user(client)
    resp = client.post("/clicks", json={"restaurant_id": "r1", "restaurant_name": "A", "source": "tv"})
    assert resp.status_code == 422


# ── Uploads ──────────────────────────────────────────────────────────────


def test_upload_image(tmp_path, monkeypatch):
    monkeypatch.setattr(images, "DEFAULT_MEDIA_CONFIG", images.MediaConfig(root=tmp_path))
    _login_user(client)

    resp = client.post("/uploads/images", files={"file": ("dish.png", b"\x89PNG data", "image/png")})

    assert resp.status_code == 201
    body = resp.json()
    assert body["url"].startswith("/media/user/")
    assert body["url"].endswith(".png")
    assert body["size"] == 9
    assert len(list((tmp_path / "user").iterdir())) == 1


def test_upload_rejects_non_images(tmp_path, monkeypatch):
    monkeypatch.setattr(images, "DEFAULT_MEDIA_CONFIG", images.MediaConfig(root=tmp_path))
    _login_user(client)
    resp = client.post("/uploads/images", files={"file": ("notes.txt", b"hello", "text/plain")})
    assert resp.status_code == 400


def test_upload_size_limit(tmp_path, monkeypatch):
    monkeypatch.setattr(images, "DEFAULT_MEDIA_CONFIG", images.MediaConfig(root=tmp_path, max_bytes=4))
    _login_user(client)
    resp = client.post("/uploads/images", files={"file": ("dish.jpg", b"12345", "image/jpeg")})
    assert resp.status_code == 400
    assert resp.json()["details"]["max_bytes"] == 4


def test_read_upload_stops_past_limit():
    stream = io.BytesIO(b"x" * 10_000)
    data = images.read_upload(stream, images.MediaConfig(max_bytes=4))
    assert data == b"xxxxx"
    assert stream.tell() == 5
