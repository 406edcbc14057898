"""
services/timer.py

Countdown display helpers for the exam screen.
The countdown itself lives in ExamSession.tick(); this module only formats it.
"""

from config import TIMER_WARNING_SECONDS


def format_time(seconds: int) -> str:
    """
    Remaining time as ``H:MM:SS`` (an hour or more) or ``MM:SS``.

    Negative input is shown as 00:00.
    """
    remaining = max(0, int(seconds))
    hours = remaining // 3600
    minutes = (remaining % 3600) // 60
    secs = remaining % 60

    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def is_warning(seconds: int, threshold: int = TIMER_WARNING_SECONDS) -> bool:
    """True when less than ``threshold`` seconds are left (red countdown)."""
    return seconds < threshold
