"""Date and time helpers shared by task extraction."""

from datetime import datetime, timedelta


def today_date(now: datetime | None = None) -> str:
    """Get today's date in YYYY-MM-DD format."""
    return (now or datetime.now()).strftime("%Y-%m-%d")


def clock_str(now: datetime | None = None) -> str:
    """Get the wall-clock time as 24h HH:MM."""
    return (now or datetime.now()).strftime("%H:%M")


def plus_minutes(now: datetime, minutes: int) -> str:
    """HH:MM for ``now`` shifted by ``minutes`` (wraps past midnight)."""
    return clock_str(now + timedelta(minutes=minutes))


def weekday_name(now: datetime | None = None) -> str:
    return (now or datetime.now()).strftime("%A")
