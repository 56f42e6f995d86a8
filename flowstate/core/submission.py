"""
Dashboard session and log submission.

Owns one user's in-memory dashboard state and submits daily and weekly
logs through the repository.

Submission order:
1. Compute the new state (streak, window, monthly estimate)
2. Write it through the repository
3. Commit it to memory only once every write succeeded

A failed write leaves the session exactly as it was.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from .footprint import FootprintResult, calculate_footprint
from .inputs import (
    DAILY_FIELDS,
    DEFAULT_DAILY_INPUTS,
    DEFAULT_WEEKLY_INPUTS,
    WEEKLY_FIELDS,
    HouseholdContext,
    UsageInputs,
)
from .streak import StreakState, record_log
from .window import PeriodType, SubmissionWindow, local_date
from flowstate.storage.repository import (
    FlowStateRepository,
    ProfileNotFound,
    StorageError,
    StreakConflict,
)

logger = logging.getLogger(__name__)


class FailureReason(Enum):
    """Why a persistence write failed."""
    WRITE_FAILED = "write_failed"
    CONFLICT = "conflict"  # Another submission changed the data first
    NOT_FOUND = "not_found"  # The user has no profile


class PersistenceFailure(Exception):
    """Raised when a submission could not be stored."""
    def __init__(self, operation: str, reason: FailureReason, message: str = ""):
        super().__init__(f"{operation} failed ({reason.value}){': ' + message if message else ''}")
        self.operation = operation
        self.reason = reason


class LogPrompt(Enum):
    """Reminders shown while a period's log is still open."""
    DAILY_LOG = "Log your daily usage to keep your streak going"
    WEEKLY_LOG = "Update your weekly household and lifestyle usage"


@dataclass
class DashboardSession:
    """In-memory dashboard state for one user.

    Only `update_*` and `submit_*` change the state; submissions write
    through the repository before changing anything.
    """
    repository: FlowStateRepository
    user_id: str
    household_size: Optional[int] = 1
    monthly_usage: int = 0
    daily_inputs: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_DAILY_INPUTS))
    weekly_inputs: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_WEEKLY_INPUTS))
    daily: SubmissionWindow = field(default_factory=lambda: SubmissionWindow(PeriodType.DAILY))
    weekly: SubmissionWindow = field(default_factory=lambda: SubmissionWindow(PeriodType.WEEKLY))
    streak: StreakState = field(default_factory=StreakState.no_history)

    @classmethod
    def load(cls, repository: FlowStateRepository, user_id: str) -> "DashboardSession":
        """Load a user's session, falling back to defaults for anything never stored.

        Args:
            repository: Persistence collaborator
            user_id: User identity

        Returns:
            DashboardSession for the user

        Raises:
            PersistenceFailure: If the stored state cannot be read
        """
        try:
            stored = repository.load_state(user_id)
        except StorageError as e:
            raise _to_failure("load_state", e) from e

        session = cls(
            repository=repository,
            user_id=user_id,
            household_size=stored.profile.household_size,
            monthly_usage=stored.profile.monthly_usage,
        )
        if stored.daily:
            session.daily_inputs.update(_pick(stored.daily.inputs, DAILY_FIELDS))
            session.daily = SubmissionWindow(
                PeriodType.DAILY, stored.daily.last_updated, stored.daily.is_submitted
            )
        if stored.weekly:
            # Weekly rows hold the combined inputs; only the weekly part is owned here
            session.weekly_inputs.update(_pick(stored.weekly.inputs, WEEKLY_FIELDS))
            session.weekly = SubmissionWindow(
                PeriodType.WEEKLY, stored.weekly.last_updated, stored.weekly.is_submitted
            )
        if stored.streak:
            session.streak = stored.streak

        logger.debug("Loaded dashboard session for %s", user_id)
        return session

    @property
    def inputs(self) -> UsageInputs:
        """Combined daily and weekly inputs."""
        return UsageInputs.combine(self.daily_inputs, self.weekly_inputs)

    @property
    def household(self) -> HouseholdContext:
        return HouseholdContext(self.household_size)

    def footprint(self) -> FootprintResult:
        """Footprint of the current inputs."""
        return calculate_footprint(self.inputs, self.household)

    def daily_window(self, now: Optional[datetime] = None) -> SubmissionWindow:
        return self.daily.effective(now or datetime.now())

    def weekly_window(self, now: Optional[datetime] = None) -> SubmissionWindow:
        return self.weekly.effective(now or datetime.now())

    def prompts(self, now: Optional[datetime] = None) -> List[LogPrompt]:
        """Log prompts that are due at `now`."""
        now = now or datetime.now()
        due = []
        if self.daily.is_open(now):
            due.append(LogPrompt.DAILY_LOG)
        if self.weekly.is_open(now):
            due.append(LogPrompt.WEEKLY_LOG)
        return due

    def update_daily(self, **values: float) -> None:
        """Change daily inputs; a submitted daily log becomes unconfirmed.

        Raises:
            ValueError: If a name is not a daily field
        """
        self.daily_inputs = _updated(self.daily_inputs, values, DAILY_FIELDS, "daily")
        if values and self.daily.is_submitted:
            self.daily = self.daily.edited()

    def update_weekly(self, **values: float) -> None:
        """Change weekly inputs; a submitted weekly log becomes unconfirmed.

        Raises:
            ValueError: If a name is not a weekly field
        """
        self.weekly_inputs = _updated(self.weekly_inputs, values, WEEKLY_FIELDS, "weekly")
        if values and self.weekly.is_submitted:
            self.weekly = self.weekly.edited()

    def submit_daily(self, now: Optional[datetime] = None) -> StreakState:
        """Submit today's daily log and advance the streak.

        Args:
            now: Submission time (defaults to the current time)

        Returns:
            The new streak state

        Raises:
            DuplicateDailySubmission: If today is already logged; nothing is written
            PersistenceFailure: If a write failed; the session is unchanged
        """
        now = now or datetime.now()
        new_streak = record_log(self.streak, local_date(now))

        try:
            self.repository.save_daily_submission(
                self.user_id, dict(self.daily_inputs), now, new_streak, self.streak.last_log_date
            )
        except StorageError as e:
            raise _to_failure("submit_daily", e) from e

        self.daily = self.daily.submitted(now)
        self.streak = new_streak
        logger.info(
            "Daily log submitted for %s: streak %d (longest %d, points %d)",
            self.user_id,
            new_streak.current_streak,
            new_streak.longest_streak,
            new_streak.total_points
        )
        return new_streak

    def submit_weekly(self, now: Optional[datetime] = None) -> int:
        """Submit the weekly log and publish the monthly usage estimate.

        Args:
            now: Submission time (defaults to the current time)

        Returns:
            Monthly usage estimate published to the leaderboard

        Raises:
            PersistenceFailure: If a write failed; the session is unchanged
        """
        now = now or datetime.now()
        combined = self.inputs
        monthly_estimate = calculate_footprint(combined, self.household).monthly_estimate

        try:
            self.repository.save_weekly_log(self.user_id, combined.to_dict(), now)
            self.repository.update_public_usage(self.user_id, monthly_estimate)
        except StorageError as e:
            raise _to_failure("submit_weekly", e) from e

        self.weekly = self.weekly.submitted(now)
        self.monthly_usage = monthly_estimate
        logger.info("Weekly log submitted for %s: %d gal/month", self.user_id, monthly_estimate)
        return monthly_estimate


def _to_failure(operation: str, error: StorageError) -> PersistenceFailure:
    if isinstance(error, StreakConflict):
        reason = FailureReason.CONFLICT
    elif isinstance(error, ProfileNotFound):
        reason = FailureReason.NOT_FOUND
    else:
        reason = FailureReason.WRITE_FAILED
    logger.warning("%s failed: %s", operation, error)
    return PersistenceFailure(operation, reason, str(error))


def _pick(values: Dict[str, float], names) -> Dict[str, float]:
    return {name: values[name] for name in names if name in values}


def _updated(current: Dict[str, float], values: Dict[str, float], allowed, group: str) -> Dict[str, float]:
    unknown = set(values) - set(allowed)
    if unknown:
        raise ValueError(f"Unknown {group} fields: {sorted(unknown)}")
    return {**current, **values}
