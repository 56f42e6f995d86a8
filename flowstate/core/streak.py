"""
Daily logging streaks.

Tracks consecutive calendar days with a completed daily log.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional


class StreakStatus(Enum):
    """Whether the user has ever logged."""
    NO_HISTORY = "no_history"
    ACTIVE = "active"


class DuplicateDailySubmission(Exception):
    """Raised when the daily log was already recorded for the given day."""
    def __init__(self, day: date):
        super().__init__(f"Already logged today ({day.isoformat()})")
        self.day = day


@dataclass(frozen=True)
class StreakState:
    """Persisted streak counters for one user."""
    current_streak: int = 0
    longest_streak: int = 0
    last_log_date: Optional[date] = None
    total_points: int = 0

    def __post_init__(self):
        """Validate counters are non-negative."""
        if self.current_streak < 0:
            raise ValueError("current_streak cannot be negative")
        if self.longest_streak < 0:
            raise ValueError("longest_streak cannot be negative")
        if self.total_points < 0:
            raise ValueError("total_points cannot be negative")

    @classmethod
    def no_history(cls) -> "StreakState":
        return cls()

    @property
    def status(self) -> StreakStatus:
        if self.last_log_date is None:
            return StreakStatus.NO_HISTORY
        return StreakStatus.ACTIVE


def streak_after(last_log_date: Optional[date], current_streak: int, today: date) -> int:
    """Streak length once a log for `today` is counted.

    - No previous log: 1
    - Same day: unchanged
    - Previous day: one longer
    - Any gap (or a last log dated after today): back to 1
    """
    if last_log_date is None:
        return 1

    diff_days = (today - last_log_date).days
    if diff_days == 0:
        return current_streak
    if diff_days == 1:
        return current_streak + 1
    return 1


def record_log(state: StreakState, today: date) -> StreakState:
    """Count a daily log for `today`.

    Every distinct logged day earns exactly one point. The longest streak
    only ever grows.

    Args:
        state: Current streak state
        today: Local calendar date of the submission

    Returns:
        New StreakState; the given state is not modified

    Raises:
        DuplicateDailySubmission: If `today` is already logged
    """
    if state.last_log_date == today:
        raise DuplicateDailySubmission(today)

    current = streak_after(state.last_log_date, state.current_streak, today)
    return StreakState(
        current_streak=current,
        longest_streak=max(current, state.longest_streak),
        last_log_date=today,
        total_points=state.total_points + 1,
    )
