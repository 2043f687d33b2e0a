"""Task extraction data model."""

from datetime import datetime
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from nudge.personality.prompts import PersonalitySettings, coerce_axis

Priority = Literal["low", "medium", "high"]
Category = Literal[
    "work",
    "personal",
    "health",
    "shopping",
    "family",
    "education",
    "finance",
    "travel",
    "household",
    "social",
]

PRIORITIES: tuple[str, ...] = ("low", "medium", "high")
TASK_CATEGORIES: tuple[str, ...] = (
    "work",
    "personal",
    "health",
    "shopping",
    "family",
    "education",
    "finance",
    "travel",
    "household",
    "social",
)

MAX_TITLE_CHARS = 60


class ExtractedTask(BaseModel):
    """A structured task record; always fully valid once built by validation."""
    model_config = ConfigDict(frozen=True)

    title: str = Field(max_length=MAX_TITLE_CHARS)
    description: str
    date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")
    time: str = Field(pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    priority: Priority = "medium"
    category: Category = "personal"


class UserProfile(BaseModel):
    """The slice of a user profile that extraction cares about."""
    name: str | None = None
    intensity_level: int = Field(
        default=0, validation_alias=AliasChoices("intensity_level", "intensityLevel")
    )
    style_type: int = Field(
        default=0, validation_alias=AliasChoices("style_type", "styleType")
    )

    @field_validator("intensity_level", "style_type", mode="before")
    @classmethod
    def _clamp_axis(cls, value: Any) -> int:
        return coerce_axis(value)

    @property
    def personality(self) -> PersonalitySettings:
        return PersonalitySettings(
            intensity_level=self.intensity_level, style_type=self.style_type
        )


class ContextHints(BaseModel):
    """Optional hints from the caller."""
    current_time: datetime | None = Field(
        default=None, validation_alias=AliasChoices("current_time", "currentTime")
    )
    existing_tasks: list[Any] = Field(
        default_factory=list,
        validation_alias=AliasChoices("existing_tasks", "existingTasks"),
    )


class TaskExtractionResult(BaseModel):
    tasks: list[ExtractedTask]
    original_input: str
    confidence: float = Field(ge=0.1, le=1.0)
    processing_time_ms: int = Field(ge=0)

    def to_dict(self) -> dict[str, Any]:
        """Wire shape used by the routing layer (camelCase keys)."""
        return {
            "tasks": [task.model_dump() for task in self.tasks],
            "originalInput": self.original_input,
            "confidence": self.confidence,
            "processingTimeMs": self.processing_time_ms,
        }
