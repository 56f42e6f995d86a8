"""
Unit tests for submission windows.

Tests daily calendar boundaries, the weekly rolling window and
submitted-flag expiry.
"""

from datetime import datetime, timedelta, timezone

from flowstate.core.window import PeriodType, SubmissionWindow, is_new_period, local_date


NOW = datetime(2025, 4, 22, 0, 1)


class TestDailyPeriod:
    """Test daily periods follow calendar days."""

    def test_midnight_boundary_is_new_period(self):
        assert is_new_period(PeriodType.DAILY, datetime(2025, 4, 21, 23, 59), NOW) is True

    def test_same_day_is_not_new_period(self):
        assert is_new_period(PeriodType.DAILY, datetime(2025, 4, 22, 0, 0), datetime(2025, 4, 22, 23, 59)) is False

    def test_no_history_is_new_period(self):
        assert is_new_period(PeriodType.DAILY, None, NOW) is True

    def test_aware_timestamps_use_local_date(self):
        aware = datetime(2025, 4, 22, 12, 0, tzinfo=timezone.utc)
        assert local_date(aware) == aware.astimezone().date()


class TestWeeklyPeriod:
    """Test weekly periods are a rolling seven days."""

    def test_six_days_is_same_period(self):
        assert is_new_period(PeriodType.WEEKLY, NOW - timedelta(days=6), NOW) is False

    def test_eight_days_is_new_period(self):
        assert is_new_period(PeriodType.WEEKLY, NOW - timedelta(days=8), NOW) is True

    def test_exactly_seven_days_is_same_period(self):
        assert is_new_period(PeriodType.WEEKLY, NOW - timedelta(days=7), NOW) is False

    def test_no_history_is_not_new_period(self):
        assert is_new_period(PeriodType.WEEKLY, None, NOW) is False

    def test_naive_last_update_with_aware_now(self):
        last = datetime(2025, 4, 10, 12, 0)
        assert is_new_period(PeriodType.WEEKLY, last, datetime(2025, 4, 22, 12, 0, tzinfo=timezone.utc)) is True
        assert is_new_period(PeriodType.WEEKLY, last, datetime(2025, 4, 12, 12, 0, tzinfo=timezone.utc)) is False

    def test_aware_last_update_with_naive_now(self):
        last = datetime(2025, 4, 10, 12, 0, tzinfo=timezone.utc)
        assert is_new_period(PeriodType.WEEKLY, last, datetime(2025, 4, 22, 12, 0)) is True
        assert is_new_period(PeriodType.WEEKLY, last, datetime(2025, 4, 12, 12, 0)) is False

    def test_mixed_timestamps_in_window(self):
        window = SubmissionWindow(PeriodType.WEEKLY, datetime(2025, 4, 10, 12, 0), is_submitted=True)
        now = datetime(2025, 4, 22, 12, 0, tzinfo=timezone.utc)
        assert window.effective(now).is_submitted is False
        assert window.is_open(now) is True


class TestSubmissionWindow:
    """Test effective submitted flags."""

    def test_stale_flag_forced_false(self):
        window = SubmissionWindow(PeriodType.DAILY, datetime(2025, 4, 21, 20, 0), is_submitted=True)
        assert window.effective(NOW).is_submitted is False
        assert window.is_open(NOW) is True
        # stored flag untouched
        assert window.is_submitted is True

    def test_current_flag_kept(self):
        window = SubmissionWindow(PeriodType.DAILY, datetime(2025, 4, 22, 0, 0), is_submitted=True)
        assert window.effective(NOW).is_submitted is True
        assert window.is_open(NOW) is False

    def test_weekly_without_history_keeps_stored_flag(self):
        window = SubmissionWindow(PeriodType.WEEKLY, None, is_submitted=True)
        assert window.effective(NOW).is_submitted is True

    def test_edited_resets_flag(self):
        window = SubmissionWindow(PeriodType.WEEKLY, NOW, is_submitted=True)
        edited = window.edited()
        assert edited.is_submitted is False
        assert edited.last_updated == NOW

    def test_submitted(self):
        window = SubmissionWindow(PeriodType.DAILY).submitted(NOW)
        assert window.is_submitted is True
        assert window.last_updated == NOW
