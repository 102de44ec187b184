from __future__ import annotations

import re

_PATTERNS = [
    re.compile(r"cuisines?:\s*([^.\n]+)", re.IGNORECASE),
    re.compile(r"types?:\s*([^.\n]+)", re.IGNORECASE),
    re.compile(r"serves?\s+([^.\n]+?)\s+(?:food|cuisine|dishes)", re.IGNORECASE),
    re.compile(r"specializes?\s+in\s+([^.\n]+)", re.IGNORECASE),
    re.compile(
        r"\b(italian|chinese|japanese|korean|thai|vietnamese|indian|mexican|french|greek|"
        r"spanish|mediterranean|american|british|german|turkish|lebanese|moroccan|ethiopian|"
        r"brazilian|peruvian|argentinian|cuban)\b",
        re.IGNORECASE,
    ),
    re.compile(
        r"\b(sushi|ramen|pizza|pasta|burger|bbq|barbecue|steakhouse|seafood|vegan|vegetarian|"
        r"fusion|tapas|dim sum|pho|curry|noodles|dumplings|tacos|burritos|kebab|falafel|shawarma)\b",
        re.IGNORECASE,
    ),
]
_FILLER_RE = re.compile(r"\b(and|or|with|the|a|an|restaurant|food|cuisine|dishes?|style)\b", re.IGNORECASE)

_NAME_HINTS = {
    "sushi": "Japanese",
    "ramen": "Japanese",
    "pizza": "Italian",
    "pasta": "Italian",
    "taco": "Mexican",
    "burrito": "Mexican",
    "curry": "Indian",
    "pho": "Vietnamese",
    "dim sum": "Chinese",
    "bbq": "Barbecue",
    "steakhouse": "Steakhouse",
    "burger": "American",
    "cafe": "Cafe",
    "bistro": "French",
    "trattoria": "Italian",
    "izakaya": "Japanese",
}

MAX_CUISINES = 5
GENERIC_CUISINE = "Restaurant"


def infer_cuisine_from_name(name: str) -> list[str]:
    lower = name.lower()
    return [cuisine for keyword, cuisine in _NAME_HINTS.items() if keyword in lower]


def extract_cuisine_types(text: str, restaurant_name: str | None = None) -> list[str]:
    """
    Keyword scan of a restaurant write-up for cuisine labels.

    Falls back to hints in the restaurant name, then to ``GENERIC_CUISINE``.
    At most ``MAX_CUISINES`` labels, in order of first appearance.
    """
    if not text:
        return []

    found: dict[str, None] = {}
    for pattern in _PATTERNS:
        for match in pattern.finditer(text):
            captured = match.group(1) or match.group(0)
            cleaned = _FILLER_RE.sub("", captured)
            cleaned = re.sub(r"[,;]", " ", cleaned).strip()
            for word in cleaned.split():
                if len(word) > 2:
                    found[word.capitalize()] = None

    if not found and restaurant_name:
        for cuisine in infer_cuisine_from_name(restaurant_name):
            found[cuisine] = None

    if not found:
        return [GENERIC_CUISINE]
    return list(found)[:MAX_CUISINES]
