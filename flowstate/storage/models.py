"""
Data models for storage layer.

Defines the records the persistence layer reads and writes.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional

from flowstate.core.streak import StreakState


@dataclass(frozen=True)
class UserProfile:
    """Public profile of a user."""
    user_id: str
    username: str
    household_size: int = 1
    monthly_usage: int = 0
    city: str = ""
    country: str = ""


@dataclass(frozen=True)
class PeriodLog:
    """Last submitted inputs of a daily or weekly log."""
    inputs: Dict[str, float]
    is_submitted: bool
    last_updated: datetime


@dataclass(frozen=True)
class StoredState:
    """Everything persisted for one user's dashboard.

    Missing logs or streak mean the user never submitted one.
    """
    profile: UserProfile
    daily: Optional[PeriodLog] = None
    weekly: Optional[PeriodLog] = None
    streak: Optional[StreakState] = None


@dataclass(frozen=True)
class LeaderboardEntry:
    """One ranked row of the leaderboard."""
    rank: int
    user_id: str
    username: str
    monthly_usage: int
