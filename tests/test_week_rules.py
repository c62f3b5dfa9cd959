"""Tests for week classification and deadline parsing."""

from __future__ import annotations

from datetime import date, datetime, timedelta

import pytest

from week_assigned_sync.errors import MalformedValueError
from week_assigned_sync.week_rules import (
    WeekStatus,
    classify_week,
    format_status_for_board,
    parse_deadline,
    parse_deadline_strict,
    week_window,
)

from conftest import TODAY

THIS_MONDAY = date(2026, 10, 19)
THIS_SUNDAY = date(2026, 10, 25)


# ---------------------------------------------------------------------------
# week_window()
# ---------------------------------------------------------------------------

class TestWeekWindow:
    def test_midweek(self):
        window = week_window(TODAY)
        assert window.start == THIS_MONDAY
        assert window.end == THIS_SUNDAY

    def test_monday_starts_its_own_week(self):
        assert week_window(THIS_MONDAY).start == THIS_MONDAY

    def test_sunday_belongs_to_preceding_monday(self):
        assert week_window(THIS_SUNDAY).start == THIS_MONDAY

    def test_datetime_time_of_day_ignored(self):
        assert week_window(datetime(2026, 10, 25, 23, 59, 59)).start == THIS_MONDAY

    def test_shifted(self):
        nxt = week_window(TODAY).shifted(7)
        assert nxt.start == date(2026, 10, 26)
        assert nxt.end == date(2026, 11, 1)


# ---------------------------------------------------------------------------
# classify_week()
# ---------------------------------------------------------------------------

class TestClassifyWeek:
    @pytest.mark.parametrize("offset", range(7))
    def test_every_day_this_week(self, offset):
        day = THIS_MONDAY + timedelta(days=offset)
        assert classify_week(day, "Working on it", today=TODAY) == WeekStatus.THIS_WEEK

    @pytest.mark.parametrize("offset", range(7))
    def test_one_week_later_is_next_week(self, offset):
        day = THIS_MONDAY + timedelta(days=offset + 7)
        assert classify_week(day, "Stuck", today=TODAY) == WeekStatus.NEXT_WEEK

    def test_after_next_week_is_future(self):
        assert classify_week(date(2026, 11, 2), None, today=TODAY) == WeekStatus.FUTURE
        assert classify_week(date(2027, 3, 1), None, today=TODAY) == WeekStatus.FUTURE

    def test_eight_days_ago_is_past_due(self):
        assert classify_week(TODAY - timedelta(days=8), "Working on it", today=TODAY) == WeekStatus.PAST_DUE

    def test_sunday_before_this_week_is_past_due(self):
        assert classify_week(date(2026, 10, 18), None, today=TODAY) == WeekStatus.PAST_DUE

    def test_earlier_this_week_is_still_this_week(self):
        # Monday has passed but is in the current window
        assert classify_week(THIS_MONDAY, None, today=TODAY) == WeekStatus.THIS_WEEK

    @pytest.mark.parametrize("status", ["Done", "done", "DONE", " Done "])
    def test_done_is_completed_regardless_of_deadline(self, status):
        assert classify_week(TODAY - timedelta(days=30), status, today=TODAY) == WeekStatus.COMPLETED
        assert classify_week(TODAY, status, today=TODAY) == WeekStatus.COMPLETED
        assert classify_week(None, status, today=TODAY) == WeekStatus.COMPLETED

    @pytest.mark.parametrize("status", [None, "", "Working on it", "Stuck", "Done-ish"])
    def test_no_deadline_is_not_assigned(self, status):
        assert classify_week(None, status, today=TODAY) == WeekStatus.NOT_ASSIGNED

    def test_custom_done_label(self):
        assert classify_week(None, "Shipped", today=TODAY, done_label="Shipped") == WeekStatus.COMPLETED
        assert classify_week(None, "Done", today=TODAY, done_label="Shipped") == WeekStatus.NOT_ASSIGNED

    def test_datetime_deadline_compares_by_date(self):
        deadline = datetime(2026, 10, 25, 23, 59, 59, 999000)
        assert classify_week(deadline, None, today=TODAY) == WeekStatus.THIS_WEEK

    def test_today_is_sunday(self):
        assert classify_week(date(2026, 10, 26), None, today=THIS_SUNDAY) == WeekStatus.NEXT_WEEK


# ---------------------------------------------------------------------------
# parse_deadline()
# ---------------------------------------------------------------------------

class TestParseDeadline:
    def test_monday_raw_json(self):
        raw = '{"date":"2026-10-26","changed_at":"2026-10-01T10:00:00.000Z"}'
        assert parse_deadline(raw) == date(2026, 10, 26)

    def test_decoded_dict_from_webhook(self):
        assert parse_deadline({"date": "2026-10-26", "icon": None, "time": None}) == date(2026, 10, 26)

    def test_plain_string(self):
        assert parse_deadline("2026-10-26") == date(2026, 10, 26)

    def test_iso_timestamp(self):
        assert parse_deadline("2026-10-26T09:30:00Z") == date(2026, 10, 26)

    def test_date_passthrough(self):
        assert parse_deadline(date(2026, 1, 2)) == date(2026, 1, 2)

    @pytest.mark.parametrize("raw", [None, "", "null", "{}", {"date": None}, {"date": ""}])
    def test_empty_values(self, raw):
        assert parse_deadline(raw) is None

    @pytest.mark.parametrize("raw", ["{not json", "next tuesday", {"date": "2026-13-40"}, 12345])
    def test_malformed_values_are_absent(self, raw):
        assert parse_deadline(raw) is None

    def test_strict_raises_on_malformed(self):
        with pytest.raises(MalformedValueError):
            parse_deadline_strict("next tuesday")


# ---------------------------------------------------------------------------
# format_status_for_board()
# ---------------------------------------------------------------------------

class TestFormatStatus:
    def test_known_labels(self):
        assert format_status_for_board(WeekStatus.NEXT_WEEK) == {"label": "Next Week"}
        assert format_status_for_board(WeekStatus.PAST_DUE) == {"label": "Past Due"}

    def test_unknown_label_passes_through(self):
        assert format_status_for_board("Someday") == {"label": "Someday"}

    def test_returns_copy(self):
        payload = format_status_for_board(WeekStatus.FUTURE)
        payload["label"] = "changed"
        assert format_status_for_board(WeekStatus.FUTURE) == {"label": "Future"}
