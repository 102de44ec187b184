from __future__ import annotations

from unittest.mock import patch

from fastapi.testclient import TestClient

from foodily.analytics.aggregator import compute_analytics
from foodily.analytics.store import clear_events, record_event
from foodily.app import app
from foodily.llm.cache import cache_get, cache_set, clear_cache
from foodily.search.models import SearchResult
from foodily.storage import documents

client = TestClient(app)


def _login_user(c):
    c.post("/auth/login", json={"username": "user", "password": "user123"})


def _login_admin(c):
    c.post("/auth/login", json={"username": "admin", "password": "admin123"})


def test_analytics_returns_empty_initially():
    clear_events()
    _login_admin(client)
    resp = client.get("/analytics")
    assert resp.status_code == 200
    body = resp.json()
    assert body["total_searches"] == 0
    assert body["avg_response_time_ms"] == 0.0
    assert body["location_bias_rate"] == 0.0
    assert body["top_queries"] == []


def test_compute_analytics_aggregates_searches():
    clear_cache()
    events = [
        {"type": "search", "query": "Ramen", "search_type": "dish", "has_location": True,
         "citations": 3, "logged": True, "response_time_ms": 100.0},
        {"type": "search", "query": "ramen ", "search_type": "dish", "has_location": False,
         "citations": 0, "logged": False, "response_time_ms": 300.0},
        {"type": "search", "query": "Thai", "search_type": "cuisine", "has_location": True,
         "citations": 1, "logged": False, "response_time_ms": 200.0},
        {"type": "concierge", "occasion": "Birthday"},
        {"type": "details", "restaurant": "Ichiran"},
        {"type": "details", "restaurant": "Afuri"},
    ]

    body = compute_analytics(events)

    assert body["total_searches"] == 3
    assert body["avg_response_time_ms"] == 200.0
    assert body["top_queries"] == [{"name": "ramen", "count": 2}, {"name": "thai", "count": 1}]
    assert body["search_type_usage"] == {"dish": 66.7, "cuisine": 33.3}
    assert body["location_bias_rate"] == 66.7
    assert body["grounding"] == {"total_citations": 4, "avg_citations": 1.3, "searches_without_citations": 1}
    assert body["auto_logged"] == 1
    assert body["feature_usage"] == {"concierge": 1, "details": 2}
    assert body["ai_cache"]["size"] == 0


@patch("foodily.search.routes.search_restaurants_by_maps", return_value=SearchResult(text="* **Ichiran** ramen"))
def test_analytics_tracks_search(mock_search):
    documents.clear()
    clear_events()
    _login_user(client)
    client.post("/search", json={"query": "Ramen", "location": {"latitude": 1.3, "longitude": 103.8}})
    client.post("/search", json={"query": "ramen"})

    _login_admin(client)
    body = client.get("/analytics").json()
    assert body["total_searches"] == 2
    assert body["top_queries"] == [{"name": "ramen", "count": 2}]
    assert body["location_bias_rate"] == 50.0
    assert body["grounding"]["searches_without_citations"] == 2


def test_feature_usage_counts_other_events():
    clear_events()
    record_event("concierge", {"occasion": "Date"})
    _login_admin(client)
    assert client.get("/analytics").json()["feature_usage"] == {"concierge": 1}


# ── AI answer cache ──────────────────────────────────────────────────────


def test_cache_miss_then_hit():
    clear_cache()
    assert cache_get({"target": "food", "value": "thai"}) is None
    cache_set({"target": "food", "value": "thai"}, ["Pad Thai"])
    assert cache_get({"target": "food", "value": "thai"}) == ["Pad Thai"]

    _login_admin(client)
    body = client.get("/cache/stats").json()
    assert body["hits"] == 1
    assert body["misses"] == 1
    assert body["hit_rate"] == 50.0


def test_cache_entry_expires():
    clear_cache()
    cache_set({"target": "cuisine", "value": "ramen"}, ["Japanese"])
    assert cache_get({"target": "cuisine", "value": "ramen"}, ttl=0) is None
    assert cache_get({"target": "cuisine", "value": "ramen"}) is None
