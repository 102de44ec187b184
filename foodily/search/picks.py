"""Best-effort split of AI freeform text into an intro and bullet picks."""
from __future__ import annotations

import re

from .models import GroundingChunk, ParsedPicks, Pick

_BULLET_RE = re.compile(r"^[*\-]\s+")
_NAMED_BULLET_RE = re.compile(r"^[*\-]\s+(?:\*\*(.*?)\*\*|\+\+(.*?)\+\+)(.*)")
_LEADING_SEPARATORS_RE = re.compile(r"^[:\-\s]+")
_RATING_RE = re.compile(r"(\d+(?:\.\d+)?)-star")

UNNAMED_PICK = "Restaurant Recommendation"


def parse_picks(text: str) -> ParsedPicks:
    """
    Lines before the first bullet form the intro; every bullet becomes a pick.

    ``* **Name** desc`` and ``- ++Name++: desc`` yield a named pick, other
    bullets fall back to ``UNNAMED_PICK``. Non-bullet lines after the first
    bullet are dropped. When nothing parses, the whole text is the intro.
    """
    if not text:
        return ParsedPicks()

    lines = [line.strip() for line in text.split("\n")]
    intro_lines: list[str] = []
    picks: list[Pick] = []
    parsing_picks = False

    for line in lines:
        if not line:
            continue
        if _BULLET_RE.match(line):
            parsing_picks = True
            match = _NAMED_BULLET_RE.match(line)
            if match:
                name = (match.group(1) or match.group(2) or "").strip().rstrip(":").strip()
                description = _LEADING_SEPARATORS_RE.sub("", match.group(3) or "").strip()
                rating = _RATING_RE.search(description)
                picks.append(Pick(
                    name=name or UNNAMED_PICK,
                    rating=rating.group(1) if rating else None,
                    description=description,
                ))
            else:
                picks.append(Pick(name=UNNAMED_PICK, description=_BULLET_RE.sub("", line)))
        elif not parsing_picks:
            intro_lines.append(line)

    if not intro_lines and not picks:
        return ParsedPicks(intro=text.strip())
    return ParsedPicks(intro="\n\n".join(intro_lines), picks=picks)


def attach_map_links(picks: list[Pick], chunks: list[GroundingChunk]) -> list[Pick]:
    """Fill ``maps_uri`` from the Maps citation whose title matches the pick name."""
    maps = [c.maps for c in chunks if c.maps and c.maps.uri and c.maps.title]
    linked: list[Pick] = []
    for pick in picks:
        name = pick.name.lower()
        uri = pick.maps_uri
        if uri is None and pick.name != UNNAMED_PICK:
            for source in maps:
                title = source.title.lower()
                if title == name or name in title or title in name:
                    uri = source.uri
                    break
        linked.append(pick.model_copy(update={"maps_uri": uri}))
    return linked
