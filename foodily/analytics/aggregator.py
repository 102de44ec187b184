from __future__ import annotations

from collections import Counter
from typing import Any

from ..llm.cache import get_cache_stats


def _avg(values: list[float]) -> float:
    return round(sum(values) / len(values), 1) if values else 0.0


def compute_analytics(events: list[dict[str, Any]]) -> dict[str, Any]:
    searches = [e for e in events if e["type"] == "search"]
    total = len(searches)

    # Average response time
    avg_time = _avg([s["response_time_ms"] for s in searches if "response_time_ms" in s])

    # Top queries, case-insensitive
    query_counter: Counter[str] = Counter()
    for s in searches:
        q = (s.get("query") or "").strip().lower()
        if q:
            query_counter[q] += 1
    top_queries = [{"name": n, "count": c} for n, c in query_counter.most_common(10)]

    # Search type usage
    type_counter: Counter[str] = Counter(s.get("search_type", "dish") for s in searches)
    search_type_usage = {
        k: round(v / total * 100, 1) if total else 0.0
        for k, v in type_counter.items()
    }

    # Location bias and grounding
    with_location = sum(1 for s in searches if s.get("has_location"))
    citations = [s.get("citations", 0) for s in searches]
    zero_citation = sum(1 for c in citations if c == 0)

    # Other AI features
    feature_counts = Counter(e["type"] for e in events if e["type"] != "search")

    return {
        "total_searches": total,
        "avg_response_time_ms": avg_time,
        "top_queries": top_queries,
        "search_type_usage": search_type_usage,
        "location_bias_rate": round(with_location / total * 100, 1) if total else 0.0,
        "grounding": {
            "total_citations": sum(citations),
            "avg_citations": _avg(citations),
            "searches_without_citations": zero_citation,
        },
        "auto_logged": sum(1 for s in searches if s.get("logged")),
        "feature_usage": dict(feature_counts),
        "ai_cache": get_cache_stats(),
    }
