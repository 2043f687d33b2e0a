"""
Deterministic fallback splitter.

Used when model output yields no tasks: the input is cut on conjunction
phrases and each fragment becomes a task, half an hour apart.
"""

import re
from datetime import datetime

from nudge.tasks.models import ExtractedTask
from nudge.utils.helpers import plus_minutes, today_date

FALLBACK_TITLE_CHARS = 50
MIN_FRAGMENT_CHARS = 4
FIRST_SLOT_MINUTES = 60
SLOT_SPACING_MINUTES = 30

TASK_SEPARATORS = re.compile(
    r"\s+and\s+then\s+|\s+then\s+|\s+also\s+|\s+after\s+that\s+|\s+next\s+|,\s*and\s+|;\s*",
    re.IGNORECASE,
)

# Checked in order; first category with a matching keyword wins.
CATEGORY_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("work", ("meeting", "work", "project")),
    ("shopping", ("buy", "shop", "grocery")),
    ("health", ("doctor", "health", "gym")),
    ("family", ("family", "mom", "dad")),
    ("household", ("home", "clean", "fix")),
    ("social", ("friend", "party", "social")),
    ("education", ("study", "learn", "course")),
    ("finance", ("bank", "payment", "bill")),
    ("travel", ("travel", "trip", "flight")),
]


def infer_category(text: str | None) -> str:
    lowered = (text or "").lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return category
    return "personal"


def split_fragments(text: str | None) -> list[str]:
    """Cut ``text`` on conjunctions; fragments of three chars or fewer are dropped."""
    fragments = (part.strip() for part in TASK_SEPARATORS.split(text or ""))
    return [part for part in fragments if len(part) >= MIN_FRAGMENT_CHARS]


def _short_title(text: str) -> str:
    if len(text) > FALLBACK_TITLE_CHARS:
        return text[:FALLBACK_TITLE_CHARS] + "..."
    return text


def fallback_tasks(text: str | None, now: datetime | None = None) -> list[ExtractedTask]:
    """One task per fragment when there are several, else one for the whole input."""
    now = now or datetime.now()
    text = text or ""
    today = today_date(now)
    fragments = split_fragments(text)

    if len(fragments) < 2:
        fragments = [text.strip()]

    tasks = []
    for index, fragment in enumerate(fragments):
        tasks.append(ExtractedTask(
            title=_short_title(fragment).strip() or "Untitled Task",
            description=fragment or "Untitled Task",
            date=today,
            time=plus_minutes(now, FIRST_SLOT_MINUTES + index * SLOT_SPACING_MINUTES),
            priority="medium",
            category=infer_category(fragment),
        ))
    return tasks
