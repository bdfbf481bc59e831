"""Countdown arithmetic shared by the server snapshot and polling clients.

The server stores only an absolute start timestamp and a duration; every
reader derives the remaining time from its own clock.
"""

import math
from datetime import datetime


def compute_time_remaining(
    timer_started_at: datetime | None, timer_duration: float, now: datetime
) -> float:
    """remaining = max(0, duration - (now - started_at)), in seconds."""
    if timer_started_at is None:
        return float(timer_duration)
    elapsed = (now - timer_started_at).total_seconds()
    return max(0.0, float(timer_duration) - elapsed)


def whole_seconds(remaining: float) -> int:
    """Round up for display: 19.2s left shows as 20."""
    return max(0, math.ceil(remaining))
