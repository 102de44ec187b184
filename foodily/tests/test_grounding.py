from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import patch

import pytest

from foodily.exceptions import AIServiceError, AIUnavailableError
from foodily.llm.config import GroundingConfig
from foodily.search.grounding import (
    NO_DETAILS,
    NO_RESULTS,
    build_search_prompt,
    concierge_chat,
    get_restaurant_details,
    is_retryable,
    parse_grounding_chunks,
    search_restaurants_by_maps,
)
from foodily.search.models import GeoPoint

ENABLED_CONFIG = GroundingConfig(api_key="test-key", backoff_seconds=0, max_backoff_seconds=0)
DISABLED_CONFIG = GroundingConfig(api_key="")


class _ApiError(Exception):
    def __init__(self, message: str, code: int | None = None):
        super().__init__(message)
        self.code = code


def _mock_response(text: str | None, chunks: list | None = None) -> SimpleNamespace:
    metadata = SimpleNamespace(grounding_chunks=chunks or [])
    return SimpleNamespace(text=text, candidates=[SimpleNamespace(grounding_metadata=metadata)])


def _maps_chunk(title: str, uri: str) -> SimpleNamespace:
    return SimpleNamespace(maps=SimpleNamespace(uri=uri, title=title), web=None)


# ── Prompts / parsing ────────────────────────────────────────────────────


def test_search_prompt_adds_restrictions_and_taste():
    prompt = build_search_prompt("ramen", ["Vegan", "", "Halal"], "User prefers: Japanese")
    assert prompt.startswith("ramen")
    assert "Vegan, Halal" in prompt
    assert "User prefers: Japanese" in prompt


def test_search_prompt_plain_query():
    assert build_search_prompt("  tacos  ") == "tacos"


def test_parse_grounding_chunks_keeps_maps_and_web():
    response = _mock_response("x", [
        _maps_chunk("Ichiran", "https://maps.google.com/?cid=1"),
        SimpleNamespace(maps=None, web=SimpleNamespace(uri="https://example.com", title="Guide")),
        SimpleNamespace(maps=None, web=None),
    ])
    chunks = parse_grounding_chunks(response)
    assert len(chunks) == 2
    assert chunks[0].maps.title == "Ichiran"
    assert chunks[1].web.uri == "https://example.com"


def test_parse_grounding_chunks_without_candidates():
    assert parse_grounding_chunks(SimpleNamespace(candidates=None)) == []


def test_is_retryable():
    assert is_retryable(_ApiError("503 UNAVAILABLE", code=503)) is True
    assert is_retryable(_ApiError("denied", code=403)) is False
    assert is_retryable(_ApiError("RESOURCE_EXHAUSTED: quota exceeded")) is False
    assert is_retryable(_ApiError("API key not valid")) is False


# ── Maps search ──────────────────────────────────────────────────────────


def test_search_requires_api_key():
    with pytest.raises(AIUnavailableError):
        search_restaurants_by_maps("ramen", config=DISABLED_CONFIG)


@patch("foodily.search.grounding.genai")
def test_search_returns_text_and_citations(mock_genai):
    generate = mock_genai.Client.return_value.models.generate_content
    generate.return_value = _mock_response(
        "* **Ichiran** rich tonkotsu", [_maps_chunk("Ichiran", "https://maps/1")],
    )

    result = search_restaurants_by_maps(
        "ramen", GeoPoint(latitude=1.3, longitude=103.8), ["Halal"], config=ENABLED_CONFIG,
    )

    assert result.text.startswith("* **Ichiran**")
    assert result.grounding_chunks[0].maps.uri == "https://maps/1"
    kwargs = generate.call_args.kwargs
    assert "Halal" in kwargs["contents"]
    assert kwargs["config"].tool_config.retrieval_config.lat_lng.latitude == 1.3


@patch("foodily.search.grounding.genai")
def test_search_empty_text_falls_back(mock_genai):
    mock_genai.Client.return_value.models.generate_content.return_value = _mock_response(None)
    result = search_restaurants_by_maps("ramen", config=ENABLED_CONFIG)
    assert result.text == NO_RESULTS
    assert result.grounding_chunks == []


@patch("foodily.search.grounding.genai")
def test_search_failure_raises_service_error(mock_genai):
    mock_genai.Client.return_value.models.generate_content.side_effect = _ApiError("boom", code=500)
    with pytest.raises(AIServiceError):
        search_restaurants_by_maps("ramen", config=ENABLED_CONFIG)


# ── Details with retry ───────────────────────────────────────────────────


@patch("foodily.search.grounding.genai")
def test_details_retries_transient_errors(mock_genai):
    generate = mock_genai.Client.return_value.models.generate_content
    generate.side_effect = [_ApiError("unavailable", code=503), _mock_response("Open 9-5")]

    result = get_restaurant_details("Ichiran", config=ENABLED_CONFIG)

    assert result.text == "Open 9-5"
    assert generate.call_count == 2


@patch("tenacity.nap.time.sleep")
@patch("foodily.search.grounding.genai")
def test_details_backoff_waits_one_then_two_seconds(mock_genai, mock_sleep):
    generate = mock_genai.Client.return_value.models.generate_content
    generate.side_effect = [
        _ApiError("unavailable", code=503),
        _ApiError("unavailable", code=503),
        _mock_response("Open 9-5"),
    ]

    result = get_restaurant_details("Ichiran", config=GroundingConfig(api_key="test-key"))

    assert result.text == "Open 9-5"
    assert [c.args[0] for c in mock_sleep.call_args_list] == [1.0, 2.0]


@patch("foodily.search.grounding.genai")
def test_details_gives_up_after_max_attempts(mock_genai):
    generate = mock_genai.Client.return_value.models.generate_content
    generate.side_effect = _ApiError("unavailable", code=503)

    with pytest.raises(AIServiceError):
        get_restaurant_details("Ichiran", config=ENABLED_CONFIG)
    assert generate.call_count == ENABLED_CONFIG.max_attempts


@patch("foodily.search.grounding.genai")
def test_details_does_not_retry_quota_errors(mock_genai):
    generate = mock_genai.Client.return_value.models.generate_content
    generate.side_effect = _ApiError("quota exceeded", code=429)

    with pytest.raises(AIServiceError):
        get_restaurant_details("Ichiran", config=ENABLED_CONFIG)
    assert generate.call_count == 1


@patch("foodily.search.grounding.genai")
def test_details_empty_text_falls_back(mock_genai):
    mock_genai.Client.return_value.models.generate_content.return_value = _mock_response("")
    assert get_restaurant_details("Ichiran", config=ENABLED_CONFIG).text == NO_DETAILS


# ── Concierge ────────────────────────────────────────────────────────────


@patch("foodily.search.grounding.genai")
def test_concierge_sends_occasion_and_system_prompt(mock_genai):
    generate = mock_genai.Client.return_value.models.generate_content
    generate.return_value = _mock_response("- **Odette**: fine dining")

    result = concierge_chat("anniversary", "2 people", "quiet rooftop", config=ENABLED_CONFIG)

    assert result.text == "- **Odette**: fine dining"
    kwargs = generate.call_args.kwargs
    assert '"anniversary"' in kwargs["contents"]
    assert "Dining Concierge" in str(kwargs["config"].system_instruction)
