"""Validate and repair raw task dicts into ``ExtractedTask`` records."""

import re
from datetime import date, datetime
from typing import Any, Mapping

from nudge.tasks.models import MAX_TITLE_CHARS, PRIORITIES, TASK_CATEGORIES, ExtractedTask
from nudge.utils.helpers import plus_minutes, today_date

DEFAULT_TITLE = "Untitled Task"

_TIME_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# First match wins.
TIME_KEYWORDS: list[tuple[tuple[str, ...], str]] = [
    (("morning", "breakfast"), "09:00"),
    (("lunch",), "12:30"),
    (("dinner", "evening"), "18:00"),
    (("night", "bedtime"), "21:00"),
    (("meeting", "call"), "14:00"),
    (("shopping", "grocery"), "15:00"),
    (("workout", "gym"), "17:00"),
    (("doctor", "appointment"), "10:00"),
]


def validate_time(value: Any) -> str | None:
    """24h ``HH:MM`` (single-digit hours are zero-padded), else None."""
    if not isinstance(value, str):
        return None
    match = _TIME_RE.match(value.strip())
    if not match:
        return None
    return f"{int(match.group(1)):02d}:{match.group(2)}"


def validate_date(value: Any) -> str | None:
    """``YYYY-MM-DD`` naming a real calendar day, else None."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not _DATE_RE.match(value):
        return None
    try:
        date.fromisoformat(value)
    except ValueError:
        return None
    return value


def validate_priority(value: Any) -> str:
    if isinstance(value, str) and value.strip().lower() in PRIORITIES:
        return value.strip().lower()
    return "medium"


def validate_category(value: Any) -> str:
    if isinstance(value, str) and value.strip().lower() in TASK_CATEGORIES:
        return value.strip().lower()
    return "personal"


def suggest_time(title: str | None, now: datetime | None = None) -> str:
    """Guess a time of day from keywords in the title, else an hour from now."""
    text = (title or "").lower()
    for keywords, clock in TIME_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return clock
    return plus_minutes(now or datetime.now(), 60)


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def validate_task(raw: Mapping[str, Any] | ExtractedTask, now: datetime | None = None) -> ExtractedTask:
    """Repair every field of ``raw`` so the result is always a valid task.

    Already-valid input comes back unchanged.
    """
    if isinstance(raw, ExtractedTask):
        raw = raw.model_dump()
    now = now or datetime.now()

    title = _text(raw.get("title"))[:MAX_TITLE_CHARS].strip() or DEFAULT_TITLE
    description = _text(raw.get("description")) or title

    return ExtractedTask(
        title=title,
        description=description,
        date=validate_date(raw.get("date")) or today_date(now),
        time=validate_time(raw.get("time")) or suggest_time(title, now),
        priority=validate_priority(raw.get("priority")),
        category=validate_category(raw.get("category")),
    )
