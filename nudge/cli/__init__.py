"""CLI module for nudge."""
