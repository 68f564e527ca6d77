"""Unit tests for calendar windows and the overdue rule."""
from datetime import date, datetime, timedelta, timezone

import pytest

from launcharr.core.timewindow import (
    day_label, day_window, describe_prior_days, is_overdue, prior_days_window,
    resolve_window, to_local_naive, yesterday_window,
)

TODAY = date(2024, 5, 15)
MIDNIGHT = datetime(2024, 5, 15)


class TestResolveWindow:
    """Tests for resolve_window."""

    def test_empty_token_is_next_seven_days(self):
        """Empty input defaults to a week from today."""
        assert resolve_window("", TODAY) == (MIDNIGHT, MIDNIGHT + timedelta(days=7))

    def test_unrecognized_token_falls_back_to_week(self):
        """Unknown words behave like the default window."""
        assert resolve_window("someday", TODAY) == (MIDNIGHT, MIDNIGHT + timedelta(days=7))

    def test_today_ends_one_second_before_midnight(self):
        """A day window never reaches into the next day."""
        start, end = resolve_window("today", TODAY)
        assert start == MIDNIGHT
        assert end == datetime(2024, 5, 15, 23, 59, 59)

    def test_tomorrow(self):
        """Tomorrow is the full following day."""
        start, end = resolve_window("tomorrow", TODAY)
        assert start == datetime(2024, 5, 16)
        assert end == datetime(2024, 5, 16, 23, 59, 59)

    def test_today_and_tomorrow_do_not_overlap(self):
        """Consecutive day windows are disjoint."""
        _, today_end = resolve_window("today", TODAY)
        tomorrow_start, _ = resolve_window("tomorrow", TODAY)
        assert today_end < tomorrow_start

    def test_next_week(self):
        """Next week spans days 7 through 14."""
        assert resolve_window("next week", TODAY) == (
            MIDNIGHT + timedelta(days=7), MIDNIGHT + timedelta(days=14))

    def test_month_uses_calendar_months(self):
        """Month adds one calendar month, clamping short months."""
        assert resolve_window("month", TODAY)[1] == datetime(2024, 6, 15)
        assert resolve_window("month", date(2024, 1, 31))[1] == datetime(2024, 2, 29)

    def test_token_is_trimmed_and_case_insensitive(self):
        """Surrounding whitespace and case are ignored."""
        assert resolve_window("  ToDay ", TODAY) == resolve_window("today", TODAY)
        assert resolve_window("NEXT WEEK", TODAY) == resolve_window("next week", TODAY)

    @pytest.mark.parametrize("token", ["", "today", "tomorrow", "week", "next week", "month"])
    def test_end_never_before_start(self, token):
        """Every window is well formed."""
        start, end = resolve_window(token, TODAY)
        assert end >= start


class TestRefreshWindows:
    """Tests for the refresh-specific windows."""

    def test_day_window_accepts_datetime(self):
        """A datetime is truncated to its day."""
        assert day_window(datetime(2024, 5, 15, 20, 30)) == (MIDNIGHT, datetime(2024, 5, 16))

    def test_yesterday(self):
        """Yesterday ends at today's midnight."""
        assert yesterday_window(TODAY) == (datetime(2024, 5, 14), MIDNIGHT)

    def test_prior_days(self):
        """N prior days end at today's midnight."""
        assert prior_days_window(3, TODAY) == (datetime(2024, 5, 12), MIDNIGHT)

    def test_prior_days_rejects_zero(self):
        """At least one day back is required."""
        with pytest.raises(ValueError, match="Days back must be 1 or greater"):
            prior_days_window(0, TODAY)

    def test_describe_prior_days_pluralizes(self):
        assert describe_prior_days(1) == "past 1 day"
        assert describe_prior_days(4) == "past 4 days"


class TestIsOverdue:
    """Tests for is_overdue."""

    NOW = datetime(2024, 5, 15, 20, 0, 0)

    def test_unknown_air_date_is_never_overdue(self):
        assert is_overdue(None, self.NOW) is False

    def test_exact_buffer_boundary_counts(self):
        """air + buffer == now is overdue."""
        assert is_overdue(self.NOW - timedelta(minutes=10), self.NOW) is True

    def test_inside_buffer_is_not_overdue(self):
        assert is_overdue(self.NOW - timedelta(minutes=9, seconds=59), self.NOW) is False

    def test_future_is_not_overdue(self):
        assert is_overdue(self.NOW + timedelta(hours=1), self.NOW) is False

    def test_custom_buffer(self):
        aired = self.NOW - timedelta(minutes=20)
        assert is_overdue(aired, self.NOW, buffer_minutes=30) is False
        assert is_overdue(aired, self.NOW, buffer_minutes=0) is True

    def test_aware_air_date_is_converted_to_local(self):
        """An aware timestamp compares by instant against local now."""
        now_local = datetime.now().replace(microsecond=0)
        aired_utc = (now_local - timedelta(minutes=30)).astimezone(timezone.utc)
        assert is_overdue(aired_utc, now_local) is True
        future_utc = (now_local + timedelta(minutes=30)).astimezone(timezone.utc)
        assert is_overdue(future_utc, now_local) is False

    def test_to_local_naive_leaves_naive_untouched(self):
        assert to_local_naive(self.NOW) == self.NOW

    def test_latest_representable_instant_is_not_overdue(self):
        """Adding the buffer past datetime.max must not raise."""
        assert is_overdue(datetime.max, self.NOW) is False

    def test_unrepresentable_aware_instant_is_unknown(self):
        earliest = datetime(1, 1, 1, tzinfo=timezone(timedelta(hours=5)))
        assert to_local_naive(earliest) is None
        assert is_overdue(earliest, self.NOW) is False


class TestDayLabel:
    """Tests for calendar group headers."""

    def test_today_and_tomorrow(self):
        assert day_label(TODAY, TODAY) == "Today"
        assert day_label(TODAY + timedelta(days=1), TODAY) == "Tomorrow"

    def test_other_days(self):
        assert day_label(date(2024, 5, 20), TODAY) == "Monday, May 20"
