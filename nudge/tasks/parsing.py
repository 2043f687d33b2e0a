"""
Tolerant JSON-array extraction from free model output.

Models wrap JSON in prose and code fences, so instead of parsing the whole
string we scan for the first balanced ``[...]`` that decodes to a list.
Shape checks live here too; repairing field values is the job of
``nudge.tasks.validation``.
"""

import json
from typing import Any


class TaskParseError(ValueError):
    """Model output held no usable task array."""


def _matching_bracket(text: str, start: int) -> int | None:
    """Index of the ``]`` closing the ``[`` at ``start``, skipping string contents."""
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "[":
            depth += 1
        elif ch == "]":
            depth -= 1
            if depth == 0:
                return i
    return None


def find_json_array(text: str | None) -> str | None:
    """Return the first substring of ``text`` that parses as a JSON array."""
    if not text:
        return None
    start = text.find("[")
    while start != -1:
        end = _matching_bracket(text, start)
        if end is not None:
            candidate = text[start:end + 1]
            try:
                if isinstance(json.loads(candidate), list):
                    return candidate
            except (json.JSONDecodeError, ValueError):
                pass
        start = text.find("[", start + 1)
    return None


def _has_title(entry: Any) -> bool:
    if not isinstance(entry, dict):
        return False
    title = entry.get("title")
    return title is not None and bool(str(title).strip())


def parse_task_array(text: str | None) -> list[dict[str, Any]]:
    """Extract task-shaped objects (dicts with a non-blank title) from ``text``.

    Raises:
        TaskParseError: no JSON array was found, or it held no usable entries.
    """
    candidate = find_json_array(text)
    if candidate is None:
        raise TaskParseError("no JSON array found in model output")

    entries = [entry for entry in json.loads(candidate) if _has_title(entry)]
    if not entries:
        raise TaskParseError("JSON array contained no usable task entries")
    return entries
