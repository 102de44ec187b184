from __future__ import annotations

import datetime as dt
import logging
import re
from typing import Any

from ..llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from ..llm.groq_client import NO_HABIT_DATA, analyze_weekly_habits
from ..storage import documents
from .logs import get_weekly_logs, week_bounds
from .models import HabitAnalysis, SummaryPoint

logger = logging.getLogger(__name__)

COLLECTION = "habitAnalysis"
NEXT_STEP_MARKER = "**Next Step**"
GENERAL_OBSERVATION = "General Observation"

_BULLET_RE = re.compile(r"^[*\-]\s+")
_NAMED_BULLET_RE = re.compile(r"^[*\-]\s+(?:\*\*(.*?)\*\*|\+\+(.*?)\+\+)(.*)")
_EMPHASIS_RE = re.compile(r"\*\*(.*?)\*\*|\+\+(.*?)\+\+")


def _unemphasize(text: str) -> str:
    return _EMPHASIS_RE.sub(lambda m: m.group(1) if m.group(1) is not None else m.group(2), text)


def parse_analysis_text(text: str) -> tuple[list[SummaryPoint], str]:
    """Split AI habit text into ``(summary_points, next_step)``."""
    if not text:
        return [], ""

    summary_part, _, next_part = text.partition(NEXT_STEP_MARKER)

    points: list[SummaryPoint] = []
    for line in summary_part.split("\n"):
        line = line.strip()
        if not _BULLET_RE.match(line):
            continue
        match = _NAMED_BULLET_RE.match(line)
        if match:
            category = (match.group(1) or match.group(2) or "").replace(":", "").strip()
            description = re.sub(r"^[:\-\s]+", "", match.group(3) or "").strip()
            points.append(SummaryPoint(category=category, description=_unemphasize(description)))
        else:
            points.append(SummaryPoint(
                category=GENERAL_OBSERVATION,
                description=_unemphasize(_BULLET_RE.sub("", line)),
            ))

    next_step = _unemphasize(next_part).strip().lstrip(":").strip()
    return points, next_step


def _to_model(doc: dict[str, Any]) -> HabitAnalysis:
    return HabitAnalysis(
        id=doc["id"],
        analysis_text=doc["analysisText"],
        summary_points=[SummaryPoint(**p) for p in doc.get("summaryPoints", [])],
        next_step=doc.get("nextStep", ""),
        date_range_start=doc["dateRangeStart"],
        date_range_end=doc["dateRangeEnd"],
        total_logs_analyzed=doc.get("totalLogsAnalyzed", 0),
        created_at=doc["createdAt"],
    )


def save_habit_analysis(
    user_id: str,
    analysis_text: str,
    date_range_start: str,
    date_range_end: str,
    total_logs_analyzed: int,
) -> HabitAnalysis:
    points, next_step = parse_analysis_text(analysis_text)
    doc = documents.add(COLLECTION, {
        "userId": user_id,
        "analysisText": analysis_text,
        "summaryPoints": [p.model_dump() for p in points],
        "nextStep": next_step,
        "dateRangeStart": date_range_start,
        "dateRangeEnd": date_range_end,
        "totalLogsAnalyzed": total_logs_analyzed,
    })
    logger.info("Habit analysis %s saved for %s", doc["id"], user_id)
    return _to_model(doc)


def get_latest_analysis(user_id: str) -> HabitAnalysis | None:
    docs = documents.query(
        COLLECTION, where=[("userId", "==", user_id)],
        order_by="createdAt", descending=True, limit=1,
    )
    return _to_model(docs[0]) if docs else None


def get_analysis_history(user_id: str, limit: int = 10) -> list[HabitAnalysis]:
    docs = documents.query(
        COLLECTION, where=[("userId", "==", user_id)],
        order_by="createdAt", descending=True, limit=limit,
    )
    return [_to_model(d) for d in docs]


def run_weekly_analysis(
    user_id: str,
    today: dt.date | None = None,
    config: LLMConfig = DEFAULT_LLM_CONFIG,
) -> tuple[HabitAnalysis | None, str]:
    """
    Analyse this week's logs.

    Returns the persisted analysis plus the text to show. When there are no
    logs or the model gives no answer nothing is stored and the text is the
    placeholder message.
    """
    logs = get_weekly_logs(user_id, today)
    history = [
        {"date": log["date"], "cuisine": log.get("cuisine", ""), "foodType": log.get("foodType", "")}
        for log in logs
    ]
    text = analyze_weekly_habits(history, config)
    if not text:
        return None, NO_HABIT_DATA

    start, end = week_bounds(today)
    return save_habit_analysis(user_id, text, start, end, len(logs)), text
