"""
Natural-language → structured task extraction.

The orchestrator is asked to answer a strict extraction prompt;
the reply is scanned for a JSON array, every entry is repaired into a valid
task, and when nothing usable comes back the deterministic splitter takes
over. ``extract`` never raises: any unexpected failure degrades to the
splitter with a fixed low confidence.
"""

import time
from datetime import datetime
from typing import Any, Callable

from loguru import logger
from pydantic import ValidationError

from nudge.agent.orchestrator import Orchestrator
from nudge.personality.prompts import PersonalitySettings
from nudge.tasks.fallback import fallback_tasks
from nudge.tasks.models import (
    TASK_CATEGORIES,
    ContextHints,
    ExtractedTask,
    TaskExtractionResult,
    UserProfile,
)
from nudge.tasks.parsing import TaskParseError, parse_task_array
from nudge.tasks.validation import validate_task
from nudge.utils.helpers import clock_str, today_date, weekday_name

MAX_INPUT_CHARS = 1000
MAX_EXISTING_TASKS_IN_PROMPT = 10
FAILURE_CONFIDENCE = 0.3

RELATIVE_TIME_RULES = [
    ('"tonight"', "today 19:00-21:00"),
    ('"tomorrow morning"', "tomorrow 09:00-11:00"),
    ('"next week"', "next Monday"),
    ('"end of week"', "this Friday"),
    ('"weekend"', "this Saturday"),
]

OUTPUT_FORMAT_EXAMPLE = """[
  {
    "title": "Clear, actionable task title (max 60 chars)",
    "description": "Detailed description with context",
    "date": "YYYY-MM-DD",
    "time": "HH:MM",
    "priority": "low|medium|high",
    "category": "work|personal|health|shopping|etc"
  }
]"""


def build_personality_context(profile: UserProfile | None) -> str:
    """Short guidance sentence about the user; independent of the prompt tables."""
    if profile is None:
        return ""

    intensity = profile.personality.intensity_level
    style = profile.personality.style_type
    context = f"User context: {profile.name or 'User'}. "

    if intensity <= 2:
        context += "User prefers gentle, supportive task suggestions. "
    elif intensity >= 7:
        context += "User prefers direct, no-nonsense task organization. "

    if style == 2:
        context += "Focus on professional, business-oriented task structuring. "
    elif style == 6:
        context += "Consider deeper meaning and long-term implications of tasks. "

    return context.strip()


def coerce_profile(value: Any) -> UserProfile | None:
    """Accept a profile model or a plain mapping (snake or camelCase keys)."""
    if value is None or isinstance(value, UserProfile):
        return value
    try:
        return UserProfile.model_validate(value)
    except ValidationError:
        logger.warning("Unusable user profile {!r}, ignoring it", value)
        return None


def coerce_hints(value: Any) -> ContextHints | None:
    """Accept context hints as a model or a plain mapping."""
    if value is None or isinstance(value, ContextHints):
        return value
    try:
        return ContextHints.model_validate(value)
    except ValidationError:
        logger.warning("Unusable context hints {!r}, ignoring them", value)
        return None


def _existing_task_titles(existing: list[Any]) -> list[str]:
    titles = []
    for item in existing[:MAX_EXISTING_TASKS_IN_PROMPT]:
        if isinstance(item, dict):
            title = item.get("title")
        else:
            title = getattr(item, "title", item)
        if title:
            titles.append(str(title))
    return titles


def build_extraction_prompt(
    text: str,
    personality_context: str,
    now: datetime,
    existing_tasks: list[Any] | None = None,
) -> str:
    lines = [
        "You are an intelligent task extraction assistant. Extract actionable tasks "
        "from natural language input and return them as a structured JSON array.",
        "",
    ]
    if personality_context:
        lines += [personality_context, ""]

    lines += [
        "Current context:",
        f"- Today's date: {today_date(now)}",
        f"- Current time: {clock_str(now)}",
        f"- Day of week: {weekday_name(now)}",
    ]
    titles = _existing_task_titles(existing_tasks or [])
    if titles:
        lines.append(f"- Already scheduled (do not duplicate): {'; '.join(titles)}")

    lines += [
        "",
        f'User input: "{text}"',
        "",
        "Instructions:",
        "1. Extract individual, actionable tasks from the input",
        "2. Interpret relative dates/times intelligently (tomorrow, next week, tonight, etc.)",
        "3. Suggest reasonable times if not specified",
        "4. Break down compound tasks if they contain multiple actions",
        "5. Infer priority and category where possible",
        "",
        "Return ONLY a JSON array in this exact format:",
        OUTPUT_FORMAT_EXAMPLE,
        "",
        "Smart date/time interpretation:",
    ]
    lines += [f"- {phrase} = {meaning}" for phrase, meaning in RELATIVE_TIME_RULES]
    lines += ["", f"Task categories: {', '.join(TASK_CATEGORIES)}"]
    return "\n".join(lines)


def calculate_confidence(tasks: list[ExtractedTask], original_input: str, now: datetime) -> float:
    """Heuristic score in [0.1, 1.0]; not a probability."""
    today = today_date(now)
    confidence = 0.5

    if tasks:
        confidence += 0.2
    if all(len(task.title) > 5 for task in tasks):
        confidence += 0.1
    if any(task.time != "12:00" for task in tasks):
        confidence += 0.1
    if any(task.date != today for task in tasks):
        confidence += 0.1
    if len(original_input) < 10 or len(original_input) > 500:
        confidence -= 0.2

    return round(max(0.1, min(1.0, confidence)), 2)


class TaskExtractor:
    """Turns free text into validated task records via the orchestrator."""

    def __init__(
        self,
        orchestrator: Orchestrator | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        if orchestrator is None:
            from nudge.config.loader import load_config
            orchestrator = Orchestrator.from_config(load_config())
        self.orchestrator = orchestrator
        self._clock = clock or datetime.now

    def _reference_time(self, hints: ContextHints | None) -> datetime:
        if hints is not None and hints.current_time is not None:
            return hints.current_time
        return self._clock()

    def parse_response(self, response: str, text: str, now: datetime) -> list[ExtractedTask]:
        """Model reply → tasks; the splitter stands in when nothing parses."""
        try:
            entries = parse_task_array(response)
        except (TaskParseError, ValueError) as e:
            logger.warning("Could not parse tasks from model reply: {}", e)
            return [validate_task(task, now) for task in fallback_tasks(text, now)]
        return [validate_task(entry, now) for entry in entries]

    async def extract(
        self,
        text: str,
        profile: UserProfile | dict[str, Any] | None = None,
        context_hints: ContextHints | dict[str, Any] | None = None,
    ) -> TaskExtractionResult:
        """Extract structured tasks from ``text``. Never raises.

        ``profile`` and ``context_hints`` may be models or plain mappings.
        """
        started = time.perf_counter()
        original = text if isinstance(text, str) else str(text or "")
        profile = coerce_profile(profile)
        context_hints = coerce_hints(context_hints)
        now = datetime.now()

        try:
            now = self._reference_time(context_hints)
            prompt_input = original[:MAX_INPUT_CHARS]
            personality = profile.personality if profile else PersonalitySettings()
            prompt = build_extraction_prompt(
                prompt_input,
                build_personality_context(profile),
                now,
                context_hints.existing_tasks if context_hints else None,
            )

            logger.debug("Extracting tasks from {} chars of input", len(original))
            reply = await self.orchestrator.generate_response(prompt, personality)
            tasks = self.parse_response(reply, prompt_input, now)
            confidence = calculate_confidence(tasks, original, now)

        except Exception as e:
            logger.exception("Task extraction failed, using fallback splitter: {}", e)
            tasks = [
                validate_task(task, now)
                for task in fallback_tasks(original[:MAX_INPUT_CHARS], now)
            ]
            confidence = FAILURE_CONFIDENCE

        logger.info("Extracted {} task(s) (confidence {:.2f})", len(tasks), confidence)
        return TaskExtractionResult(
            tasks=tasks,
            original_input=original,
            confidence=confidence,
            processing_time_ms=int((time.perf_counter() - started) * 1000),
        )
