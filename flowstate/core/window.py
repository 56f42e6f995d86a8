"""
Submission windows for the daily and weekly logs.

Decides when a new reporting period has begun and whether the log for
the current period still counts as submitted.
"""

from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Optional


WEEKLY_PERIOD = timedelta(days=7)


class PeriodType(Enum):
    """Reporting period of a log."""
    DAILY = "daily"
    WEEKLY = "weekly"


def local_time(timestamp: datetime) -> datetime:
    """Timestamp as naive local time.

    Naive timestamps are taken to be local already.
    """
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone().replace(tzinfo=None)
    return timestamp


def local_date(timestamp: datetime) -> date:
    """Calendar date of a timestamp in local time."""
    return local_time(timestamp).date()


def is_new_period(period: PeriodType, last_updated: Optional[datetime], now: datetime) -> bool:
    """Check whether a new reporting period has begun since the last submission.

    Daily periods follow calendar days, so 23:59 and 00:01 on the next day
    are different periods. A daily log that was never submitted is always
    due. Weekly periods are a rolling seven days and a weekly log that was
    never submitted does not start a new period.

    Args:
        period: Period type
        last_updated: Timestamp of the last successful submission, if any
        now: Current time

    Returns:
        True if the current time falls in a new period
    """
    if period == PeriodType.DAILY:
        if last_updated is None:
            return True
        return local_date(last_updated) != local_date(now)

    if last_updated is None:
        return False
    return local_time(now) - local_time(last_updated) > WEEKLY_PERIOD


@dataclass(frozen=True)
class SubmissionWindow:
    """Submission state of one period for one user."""
    period: PeriodType
    last_updated: Optional[datetime] = None
    is_submitted: bool = False

    def is_new_period(self, now: datetime) -> bool:
        return is_new_period(self.period, self.last_updated, now)

    def effective(self, now: datetime) -> "SubmissionWindow":
        """Window as it applies at `now`.

        A stored submitted flag from an earlier period no longer counts.
        """
        if self.is_submitted and self.is_new_period(now):
            return replace(self, is_submitted=False)
        return self

    def is_open(self, now: datetime) -> bool:
        """True while the current period's log still needs submitting."""
        return not self.effective(now).is_submitted

    def edited(self) -> "SubmissionWindow":
        """Window after the inputs were changed; the log must be resubmitted."""
        return replace(self, is_submitted=False)

    def submitted(self, at: datetime) -> "SubmissionWindow":
        """Window after a successful submission at the given time."""
        return replace(self, last_updated=at, is_submitted=True)
