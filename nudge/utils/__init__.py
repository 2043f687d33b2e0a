"""Utility functions for nudge."""

from nudge.utils.helpers import clock_str, plus_minutes, today_date

__all__ = ["clock_str", "plus_minutes", "today_date"]
