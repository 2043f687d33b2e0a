"""Natural-language task extraction."""

from nudge.tasks.extractor import TaskExtractor
from nudge.tasks.models import ContextHints, ExtractedTask, TaskExtractionResult, UserProfile
from nudge.tasks.parsing import TaskParseError, find_json_array, parse_task_array
from nudge.tasks.validation import validate_task

__all__ = [
    "ContextHints",
    "ExtractedTask",
    "TaskExtractionResult",
    "TaskExtractor",
    "TaskParseError",
    "UserProfile",
    "find_json_array",
    "parse_task_array",
    "validate_task",
]
