"""Date manipulation utilities for epoch-second timestamps"""

from datetime import date, datetime, timezone

SECONDS_PER_DAY = 86_400


def day_key(timestamp: int) -> date:
    """UTC calendar day containing an epoch-second timestamp"""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).date()


def days_between(earlier: int, later: int) -> float:
    """Fractional days from one timestamp to another (negative if reversed)"""
    return (later - earlier) / SECONDS_PER_DAY
