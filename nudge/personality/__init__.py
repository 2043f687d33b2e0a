"""Personality axes and prompt tables."""

from nudge.personality.prompts import (
    INTENSITY_PROMPTS,
    STYLE_PROMPTS,
    PersonalitySettings,
    coerce_axis,
    combined_prompt,
)

__all__ = [
    "INTENSITY_PROMPTS",
    "STYLE_PROMPTS",
    "PersonalitySettings",
    "coerce_axis",
    "combined_prompt",
]
