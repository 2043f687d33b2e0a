from __future__ import annotations

from datetime import datetime

import pytest
from loguru import logger

from nudge.agent.orchestrator import Orchestrator
from nudge.tasks.extractor import (
    FAILURE_CONFIDENCE,
    TaskExtractor,
    build_extraction_prompt,
    build_personality_context,
    calculate_confidence,
)
from nudge.tasks.models import ContextHints, ExtractedTask, UserProfile

NOW = datetime(2026, 3, 2, 8, 0)


class StubOrchestrator:
    def __init__(self, reply: str = "", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []
        self.personalities: list = []

    async def generate_response(self, message, personality=None):
        self.prompts.append(message)
        self.personalities.append(personality)
        if self.error:
            raise self.error
        return self.reply


def _extractor(orchestrator: StubOrchestrator) -> TaskExtractor:
    return TaskExtractor(orchestrator=orchestrator, clock=lambda: NOW)


def _task(**overrides) -> ExtractedTask:
    fields = dict(
        title="Dentist appointment",
        description="Checkup",
        date="2026-03-03",
        time="10:00",
        priority="high",
        category="health",
    )
    fields.update(overrides)
    return ExtractedTask(**fields)


@pytest.mark.asyncio
async def test_non_json_reply_falls_back_to_splitter() -> None:
    extractor = _extractor(StubOrchestrator("Good morning! It's a lovely date."))
    result = await extractor.extract("buy milk and then call mom")

    assert [t.title for t in result.tasks] == ["buy milk", "call mom"]
    assert [t.time for t in result.tasks] == ["09:00", "09:30"]
    assert result.confidence == 0.9
    assert result.original_input == "buy milk and then call mom"
    assert result.processing_time_ms >= 0


@pytest.mark.asyncio
async def test_json_reply_is_parsed_and_repaired() -> None:
    reply = (
        "Here you go:\n```json\n"
        '[{"title": "Dentist appointment", "date": "2026-03-03", "time": "10:00", '
        '"priority": "High", "category": "health"},'
        ' {"title": "Pick up dry cleaning", "date": "someday", "priority": "asap"}]\n```'
    )
    result = await _extractor(StubOrchestrator(reply)).extract("dentist tomorrow at 10, dry cleaning")

    first, second = result.tasks
    assert first == _task(description="Dentist appointment")
    assert second.date == "2026-03-02"
    assert second.time == "09:00"
    assert second.priority == "medium"
    assert second.category == "personal"
    assert result.confidence == 1.0


@pytest.mark.asyncio
async def test_empty_input_still_yields_a_task() -> None:
    result = await _extractor(StubOrchestrator("nothing useful")).extract("")
    assert len(result.tasks) >= 1
    assert result.tasks[0].title == "Untitled Task"


@pytest.mark.asyncio
async def test_orchestrator_failure_uses_fixed_confidence() -> None:
    orchestrator = StubOrchestrator(error=RuntimeError("boom"))
    result = await _extractor(orchestrator).extract("buy milk and then call mom")

    assert result.confidence == FAILURE_CONFIDENCE
    assert [t.title for t in result.tasks] == ["buy milk", "call mom"]


@pytest.mark.asyncio
async def test_context_hints_drive_the_prompt() -> None:
    orchestrator = StubOrchestrator("[]")
    hints = ContextHints(
        current_time=datetime(2026, 7, 4, 16, 45),
        existing_tasks=[{"title": "Team standup"}, _task(title="Gym")],
    )
    profile = UserProfile(name="Ana", intensity_level=8, style_type=2)

    result = await _extractor(orchestrator).extract("plan the week", profile, hints)

    prompt = orchestrator.prompts[0]
    assert "Today's date: 2026-07-04" in prompt
    assert "Current time: 16:45" in prompt
    assert "Day of week: Saturday" in prompt
    assert "Team standup; Gym" in prompt
    assert 'User input: "plan the week"' in prompt
    assert "User context: Ana." in prompt
    assert orchestrator.personalities[0].intensity_level == 8
    assert result.tasks[0].date == "2026-07-04"


@pytest.mark.asyncio
async def test_long_input_is_truncated_in_prompt() -> None:
    orchestrator = StubOrchestrator("no json")
    text = "a" * 1500
    result = await _extractor(orchestrator).extract(text)

    assert 'User input: "' + "a" * 1000 + '"' in orchestrator.prompts[0]
    assert "a" * 1001 not in orchestrator.prompts[0]
    assert result.original_input == text


def test_to_dict_uses_camel_case() -> None:
    from nudge.tasks.models import TaskExtractionResult

    result = TaskExtractionResult(
        tasks=[_task()], original_input="x", confidence=0.5, processing_time_ms=3
    )
    data = result.to_dict()
    assert set(data) == {"tasks", "originalInput", "confidence", "processingTimeMs"}
    assert data["tasks"][0]["title"] == "Dentist appointment"


def test_confidence_rewards_specific_results() -> None:
    text = "dentist tomorrow at ten"
    vague = [_task(title="Todo", date="2026-03-02", time="12:00")]
    specific = [_task()]

    # an empty list vacuously passes the title-length check
    assert calculate_confidence([], text, NOW) == 0.6
    assert calculate_confidence(vague, text, NOW) == 0.7
    assert calculate_confidence(specific, text, NOW) == 1.0
    assert calculate_confidence(specific, "short", NOW) == 0.8
    assert calculate_confidence(specific, "x" * 501, NOW) == 0.8


def test_confidence_non_decreasing_with_more_signal() -> None:
    text = "dentist, gym and groceries this week"
    varied = [
        _task(),
        _task(title="Gym session", time="17:00", date="2026-03-02"),
        _task(title="Groceries run", time="15:00", date="2026-03-04"),
    ]
    single_default = [_task(date="2026-03-02", time="12:00")]
    assert calculate_confidence(varied, text, NOW) >= calculate_confidence(single_default, text, NOW)


def test_personality_context() -> None:
    assert build_personality_context(None) == ""
    gentle = build_personality_context(UserProfile(intensity_level=1, style_type=6))
    assert gentle.startswith("User context: User.")
    assert "gentle" in gentle
    assert "deeper meaning" in gentle
    assert build_personality_context(UserProfile(intensity_level=5)) == "User context: User."


def test_prompt_lists_categories_and_rules() -> None:
    prompt = build_extraction_prompt("call mom", "", NOW)
    assert '"tonight" = today 19:00-21:00' in prompt
    assert "Task categories: work, personal, health" in prompt
    assert "Already scheduled" not in prompt


@pytest.mark.asyncio
async def test_null_providers_end_to_end_uses_splitter() -> None:
    # The rule-based reply to the extraction prompt holds no JSON array.
    extractor = TaskExtractor(orchestrator=Orchestrator([]), clock=lambda: NOW)
    result = await extractor.extract("buy milk and then call mom")

    assert [t.title for t in result.tasks] == ["buy milk", "call mom"]
    assert [t.time for t in result.tasks] == ["09:00", "09:30"]
    assert {t.date for t in result.tasks} == {"2026-03-02"}
    assert 0.1 <= result.confidence <= 1.0


@pytest.mark.asyncio
async def test_plain_mapping_profile_and_hints_are_accepted() -> None:
    orchestrator = StubOrchestrator('[{"title": "Call the dentist", "time": "11:00"}]')
    result = await _extractor(orchestrator).extract(
        "call the dentist",
        {"name": "Ana", "intensityLevel": 8, "styleType": "2"},
        {"currentTime": datetime(2026, 7, 4, 16, 45), "existingTasks": [{"title": "Gym"}]},
    )

    assert len(orchestrator.prompts) == 1
    assert "User context: Ana." in orchestrator.prompts[0]
    assert "Today's date: 2026-07-04" in orchestrator.prompts[0]
    assert "Already scheduled (do not duplicate): Gym" in orchestrator.prompts[0]
    assert orchestrator.personalities[0].intensity_level == 8
    assert orchestrator.personalities[0].style_type == 2
    assert result.tasks[0].title == "Call the dentist"
    assert result.tasks[0].date == "2026-07-04"
    assert result.confidence != FAILURE_CONFIDENCE


@pytest.mark.asyncio
async def test_snake_case_mappings_and_junk_inputs() -> None:
    orchestrator = StubOrchestrator('[{"title": "Water the plants"}]')
    result = await _extractor(orchestrator).extract(
        "water the plants",
        {"intensity_level": 1},
        {"current_time": "2026-07-04T16:45:00"},
    )
    assert result.tasks[0].date == "2026-07-04"
    assert orchestrator.personalities[0].intensity_level == 1

    junk = StubOrchestrator('[{"title": "Water the plants"}]')
    result = await _extractor(junk).extract("water the plants", "not a profile", 42)
    assert len(junk.prompts) == 1
    assert result.tasks[0].date == "2026-03-02"


@pytest.mark.asyncio
async def test_failure_is_logged_with_the_error() -> None:
    records: list = []
    sink_id = logger.add(lambda message: records.append(message.record), level="ERROR")
    try:
        await _extractor(StubOrchestrator(error=RuntimeError("boom {0}"))).extract("call mom")
    finally:
        logger.remove(sink_id)

    assert records[0]["message"] == "Task extraction failed, using fallback splitter: boom {0}"
    assert records[0]["exception"] is not None
