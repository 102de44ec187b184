"""
Grounded generation against Gemini.

Responsibilities:
- Build the restaurant-search, restaurant-details and concierge prompts.
- Attach the Google Maps / Google Search grounding tools.
- Convert grounding metadata into ``GroundingChunk`` citations.
- Retry the restaurant-details call with exponential backoff, giving up
  immediately on authentication or quota errors.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable

from google import genai
from google.genai import types
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from ..exceptions import AIServiceError, AIUnavailableError
from ..llm.config import DEFAULT_GROUNDING_CONFIG, GroundingConfig
from .models import GeoPoint, GroundingChunk, GroundingSource, SearchResult

logger = logging.getLogger(__name__)

NO_RESULTS = "No results found."
NO_DETAILS = "No detailed information found."
NO_CONCIERGE_MATCH = "I couldn't find the perfect spot. Could you provide more details?"

CONCIERGE_SYSTEM_PROMPT = """\
You are the Food.ily Dining Concierge. You specialize in planning high-end, \
high-impact dining experiences. Your tone is elegant but efficient. You prefer \
brevity and clarity over flowery language. Always provide the Google Maps URI \
if found."""

_FATAL_STATUS_CODES = {401, 403, 429}
_FATAL_MARKERS = (
    "api key",
    "api_key",
    "permission_denied",
    "unauthenticated",
    "quota",
    "resource_exhausted",
)


# ── Response parsing ─────────────────────────────────────────────────────


def _as_str(value: Any) -> str | None:
    return value if isinstance(value, str) and value else None


def _source(raw: Any) -> GroundingSource | None:
    if raw is None:
        return None
    uri = _as_str(getattr(raw, "uri", None))
    title = _as_str(getattr(raw, "title", None))
    if uri is None and title is None:
        return None
    return GroundingSource(uri=uri, title=title)


def parse_grounding_chunks(response: Any) -> list[GroundingChunk]:
    """Pull Maps / web citations out of the first candidate, if any."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    metadata = getattr(candidates[0], "grounding_metadata", None)
    raw_chunks = getattr(metadata, "grounding_chunks", None) or []

    chunks: list[GroundingChunk] = []
    for raw in raw_chunks:
        maps = _source(getattr(raw, "maps", None))
        web = _source(getattr(raw, "web", None))
        if maps or web:
            chunks.append(GroundingChunk(maps=maps, web=web))
    return chunks


def _to_result(response: Any, fallback_text: str) -> SearchResult:
    text = _as_str(getattr(response, "text", None))
    return SearchResult(
        text=text or fallback_text,
        grounding_chunks=parse_grounding_chunks(response),
    )


# ── Prompts ──────────────────────────────────────────────────────────────


def build_search_prompt(
    query: str,
    dietary_restrictions: Iterable[str] = (),
    taste_summary: str = "",
) -> str:
    prompt = query.strip()
    restrictions = [r for r in dietary_restrictions if r]
    if restrictions:
        prompt += (
            " Ensure results strictly follow these dietary restrictions: "
            f"{', '.join(restrictions)}."
        )
    if taste_summary:
        prompt += f" When several places fit equally well, lean towards this taste profile. {taste_summary}."
    return prompt


def build_details_prompt(name: str) -> str:
    return (
        "Provide a very brief summary, current opening hours, and the top 3 popular "
        f'dishes for the restaurant "{name}". Format the response clearly with headings.'
    )


def build_concierge_prompt(occasion: str, people: str, request: str) -> str:
    return (
        f'I am planning a dinner for "{occasion}" with "{people}". Specifically: "{request}".\n'
        "Use Google Maps and Google Search to find real, highly-rated restaurants that fit "
        "this specific vibe and requirement perfectly.\n\n"
        "Provide a SIMPLIFIED, CONCISE summary in POINT FORM (bullet points).\n"
        "Do not write long paragraphs.\n"
        "For each suggestion, provide:\n"
        "- Name\n"
        "- Brief reason why it fits (1 sentence)\n"
        "- Key vibe/atmosphere note"
    )


# ── Calls ────────────────────────────────────────────────────────────────


def _client(config: GroundingConfig) -> Any:
    if not config.enabled or not config.api_key:
        raise AIUnavailableError("Set GEMINI_API_KEY to enable AI search")
    return genai.Client(api_key=config.api_key)


def is_retryable(exc: BaseException) -> bool:
    """Transient failures are retried; bad credentials and exhausted quota are not."""
    code = getattr(exc, "code", None)
    if isinstance(code, int) and code in _FATAL_STATUS_CODES:
        return False
    message = str(exc).lower()
    return not any(marker in message for marker in _FATAL_MARKERS)


def search_restaurants_by_maps(
    query: str,
    location: GeoPoint | None = None,
    dietary_restrictions: Iterable[str] = (),
    taste_summary: str = "",
    config: GroundingConfig = DEFAULT_GROUNDING_CONFIG,
) -> SearchResult:
    client = _client(config)

    tool_config = None
    if location is not None:
        tool_config = types.ToolConfig(
            retrieval_config=types.RetrievalConfig(
                lat_lng=types.LatLng(latitude=location.latitude, longitude=location.longitude),
            ),
        )

    try:
        response = client.models.generate_content(
            model=config.search_model,
            contents=build_search_prompt(query, dietary_restrictions, taste_summary),
            config=types.GenerateContentConfig(
                tools=[types.Tool(google_maps=types.GoogleMaps())],
                tool_config=tool_config,
            ),
        )
    except Exception as exc:
        logger.warning("Maps-grounded search failed for %r", query, exc_info=True)
        raise AIServiceError("Restaurant search failed") from exc

    return _to_result(response, NO_RESULTS)


def get_restaurant_details(
    name: str,
    config: GroundingConfig = DEFAULT_GROUNDING_CONFIG,
) -> SearchResult:
    client = _client(config)
    retrying = Retrying(
        stop=stop_after_attempt(config.max_attempts),
        wait=wait_exponential(multiplier=config.backoff_seconds, max=config.max_backoff_seconds),
        retry=retry_if_exception(is_retryable),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )

    try:
        response = retrying(
            client.models.generate_content,
            model=config.details_model,
            contents=build_details_prompt(name),
            config=types.GenerateContentConfig(
                tools=[types.Tool(google_search=types.GoogleSearch())],
            ),
        )
    except Exception as exc:
        logger.warning("Restaurant details failed for %r", name, exc_info=True)
        raise AIServiceError(f"Could not fetch details for {name}") from exc

    return _to_result(response, NO_DETAILS)


def concierge_chat(
    occasion: str,
    people: str,
    request: str,
    config: GroundingConfig = DEFAULT_GROUNDING_CONFIG,
) -> SearchResult:
    client = _client(config)
    try:
        response = client.models.generate_content(
            model=config.concierge_model,
            contents=build_concierge_prompt(occasion, people, request),
            config=types.GenerateContentConfig(
                tools=[
                    types.Tool(google_maps=types.GoogleMaps()),
                    types.Tool(google_search=types.GoogleSearch()),
                ],
                system_instruction=CONCIERGE_SYSTEM_PROMPT,
            ),
        )
    except Exception as exc:
        logger.warning("Concierge call failed", exc_info=True)
        raise AIServiceError("The concierge is unavailable right now") from exc

    return _to_result(response, NO_CONCIERGE_MATCH)
