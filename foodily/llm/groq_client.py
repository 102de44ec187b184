from __future__ import annotations

import json
import logging
from typing import Any, Literal

from groq import Groq

from .cache import cache_get, cache_set
from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)

FOOD_ASSISTANT_PROMPT = (
    "You are a world-class food assistant. Your goal is to give precise, "
    "appetizing food suggestions, explain cuisines, and help users decide "
    "what to eat. Be witty but helpful."
)

CUISINE_EXTRACTION_PROMPT = """\
Analyze this food search query and extract the cuisine type and specific food type.

Rules:
- cuisine: The broad cuisine category (e.g., "Italian", "Japanese", "Mexican", "American", "Chinese")
- foodType: The specific dish or food item (e.g., "Pizza", "Ramen", "Tacos", "Burger", "Dumplings")
- If the query is vague (e.g., "food", "restaurant"), use "General" for cuisine and "Exploring" for foodType
- If only cuisine is mentioned (e.g., "Italian food"), use that cuisine and "General" for foodType
- Be consistent with cuisine names (use standard English names)

Return ONLY a JSON object: {"cuisine": "...", "foodType": "..."}"""

HABIT_ANALYSIS_PROMPT = (
    "Analyze this user's eating habits over the past week. Provide a very "
    "concise, simplified summary in point form using bullet points formatted "
    'as "* **Category:** description". Keep each point short, punchy, and easy '
    'to read. Finish with a "**Next Step**" suggestion.'
)

NO_HABIT_DATA = "Not enough data to analyze yet!"
SLOT_OPTION_COUNT = 12

SlotType = Literal["cuisine", "food"]


def _complete(
    messages: list[dict[str, str]],
    config: LLMConfig,
    max_tokens: int | None = None,
    temperature: float = 0.3,
    json_mode: bool = False,
) -> str:
    client = Groq(api_key=config.api_key, timeout=config.timeout)
    kwargs: dict[str, Any] = {}
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}
    response = client.chat.completions.create(
        model=config.model,
        messages=messages,
        max_tokens=max_tokens or config.max_tokens,
        temperature=temperature,
        **kwargs,
    )
    return response.choices[0].message.content or ""


def _available(config: LLMConfig) -> bool:
    return config.enabled and bool(config.api_key)


def chat_reply(
    message: str,
    history: list[dict[str, str]] | None = None,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> str | None:
    """Answer a free-form food question. ``None`` means the model is unavailable."""
    if not _available(config):
        return None

    messages = [{"role": "system", "content": FOOD_ASSISTANT_PROMPT}]
    messages.extend(history or [])
    messages.append({"role": "user", "content": message})
    try:
        reply = _complete(messages, config, temperature=0.7).strip()
        return reply or None
    except Exception:
        logger.warning("Groq chat call failed", exc_info=True)
        return None


def extract_cuisine_from_search(
    search_query: str,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> dict[str, str]:
    """
    Map a search query to ``{"cuisine", "foodType"}``.

    Falls back to echoing the query (or General / Exploring when empty).
    """
    fallback = {
        "cuisine": search_query or "General",
        "foodType": search_query or "Exploring",
    }
    if not _available(config):
        return fallback

    try:
        content = _complete(
            [
                {"role": "system", "content": CUISINE_EXTRACTION_PROMPT},
                {"role": "user", "content": f'Search query: "{search_query}"'},
            ],
            config,
            max_tokens=128,
            temperature=0.1,
            json_mode=True,
        )
        parsed = json.loads(content or "{}")
        result = {
            "cuisine": str(parsed.get("cuisine") or "General"),
            "foodType": str(parsed.get("foodType") or "Exploring"),
        }
        logger.info("Cuisine extraction %r -> %s / %s", search_query, result["cuisine"], result["foodType"])
        return result
    except Exception:
        logger.warning("Cuisine extraction failed, echoing query", exc_info=True)
        return fallback


def expand_slot_options(
    target_type: SlotType,
    constraint_value: str,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> list[str]:
    """
    List dishes for a cuisine (``target_type="food"``) or cuisines known for a
    dish (``target_type="cuisine"``). Results are cached per target and value.
    """
    cache_key = {"target": target_type, "value": constraint_value.strip().lower()}
    cached = cache_get(cache_key)
    if cached is not None:
        return list(cached)

    if not _available(config):
        return []

    if target_type == "food":
        prompt = (
            f"List {SLOT_OPTION_COUNT} diverse, trending, and mouth-watering food items or "
            f'dishes that belong to the "{constraint_value}" cuisine. Include both street '
            "food and gourmet options."
        )
    else:
        prompt = (
            f"List {SLOT_OPTION_COUNT} diverse global cuisines or regional cooking styles "
            f'that are famous for serving "{constraint_value}". Be creative and include '
            "niche regional cuisines."
        )
    prompt += ' Return ONLY a JSON object: {"options": ["..."]}'

    try:
        content = _complete(
            [{"role": "user", "content": prompt}],
            config,
            max_tokens=512,
            temperature=0.8,
            json_mode=True,
        )
        parsed = json.loads(content or "{}")
        options = [str(o).strip() for o in parsed.get("options", []) if str(o).strip()]
    except Exception:
        logger.warning("Failed to expand slot options for %s", constraint_value, exc_info=True)
        return []

    if options:
        cache_set(cache_key, options)
    return options


def analyze_weekly_habits(
    history: list[dict[str, Any]],
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> str | None:
    """
    Summarise a week of food logs as bullet points plus a next step.

    Returns ``None`` when there is nothing to analyse or the model is
    unavailable, so callers can tell a real analysis from the placeholder.
    """
    if not history or not _available(config):
        return None

    summary = ", ".join(f"{h['date']}: {h['cuisine']} {h['foodType']}" for h in history)
    try:
        text = _complete(
            [
                {"role": "system", "content": HABIT_ANALYSIS_PROMPT},
                {"role": "user", "content": f"History: {summary}"},
            ],
            config,
            max_tokens=512,
            temperature=0.5,
        ).strip()
        return text or None
    except Exception:
        logger.warning("Habit analysis call failed", exc_info=True)
        return None
