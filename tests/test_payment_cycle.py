from datetime import date, datetime, timedelta

import pytest

from opsboard.models.cash_flow import split_gst
from opsboard.services.payment_cycle import (
    classify_status,
    due_date,
    format_ddmmyyyy,
    parse_record_date,
    payment_due_from,
    refresh_status,
    reminder_phase,
    should_run_today,
    work_months,
)

from conftest import work_record


def test_due_date_is_first_of_month_plus_cycle():
    assert due_date(2025, 11, 45) == date(2025, 11, 1) + timedelta(days=45)
    assert due_date(2025, 11, 45) == date(2025, 12, 16)
    assert due_date(2025, 11, 45) == due_date(2025, 11, 45)


def test_march_work_is_due_mid_april():
    assert due_date(2026, 3, 45) == date(2026, 4, 15)


def test_due_date_crosses_year_end():
    assert due_date(2025, 12, 45) == date(2026, 1, 15)


@pytest.mark.parametrize(
    "elapsed, expected",
    [(0, "pending"), (17, "pending"), (45, "pending"), (46, "overdue"), (120, "overdue"), (-10, "pending")],
)
def test_status_boundaries(elapsed, expected):
    record_date = date(2026, 1, 10)
    assert classify_status(record_date, 45, record_date + timedelta(days=elapsed)) == expected


def test_status_scenario_for_march_work():
    assert classify_status(date(2026, 3, 15), 45, date(2026, 4, 1)) == "pending"
    assert classify_status(date(2026, 3, 1), 45, date(2026, 4, 16)) == "overdue"


def test_status_ignores_time_of_day():
    stamp = datetime(2026, 1, 1, 23, 59)
    assert classify_status(stamp, 45, date(2026, 2, 15)) == "pending"
    assert classify_status(stamp, 45, date(2026, 2, 16)) == "overdue"


@pytest.mark.parametrize("value", [None, "", "not a date", "31.02.2026", "12/03/2026"])
def test_unreadable_dates_are_not_yet_due(value):
    assert classify_status(value, 45, date(2030, 1, 1)) == "pending"


def test_parse_record_date_formats():
    assert parse_record_date("15.03.2026") == date(2026, 3, 15)
    assert parse_record_date("2026-03-15") == date(2026, 3, 15)
    assert parse_record_date("2026-03-15T10:30:00Z") == date(2026, 3, 15)
    assert parse_record_date(datetime(2026, 3, 15, 9)) == date(2026, 3, 15)
    assert parse_record_date(date(2026, 3, 15)) == date(2026, 3, 15)
    assert parse_record_date("garbage") is None
    assert parse_record_date(12345) is None


def test_refresh_status_keeps_settled_records():
    long_ago = date(2020, 1, 1)
    assert refresh_status("paid", long_ago, 45, date(2026, 1, 1)) == "paid"
    assert refresh_status("received", long_ago, 45, date(2026, 1, 1)) == "received"


def test_refresh_status_reclassifies_open_records():
    today = date(2026, 1, 1)
    assert refresh_status("pending", date(2025, 10, 1), 45, today) == "overdue"
    assert refresh_status("late", date(2025, 12, 20), 45, today) == "pending"
    assert refresh_status(None, date(2025, 12, 20), None, today) == "pending"


def test_payment_due_from_and_display_format():
    due = payment_due_from("01.11.2025", 45)
    assert due == date(2025, 12, 16)
    assert format_ddmmyyyy(due) == "16.12.2025"
    assert payment_due_from("", 45) is None


@pytest.mark.parametrize(
    "day, phase",
    [(1, "pending"), (2, None), (14, None), (15, "overdue"), (28, "overdue"), (31, "overdue")],
)
def test_reminder_phase_by_day_of_month(day, phase):
    today = date(2026, 1, day)
    assert reminder_phase(today) == phase
    assert should_run_today(today) is (phase is not None)


def test_work_months_keeps_completed_non_leave_records():
    records = [
        work_record("a", "u", "2026-03-02"),
        work_record("b", "u", "2026-03-28"),
        work_record("c", "u", "2026-02-10", is_leave=True),
        work_record("d", "u", "2026-01-05", clock_out_time=None),
        work_record("e", "u", "2025-12-24"),
        work_record("f", "u", "not-a-date"),
    ]
    assert work_months(records) == [(2025, 12), (2026, 3)]


def test_split_gst_is_ten_percent():
    assert split_gst(100.0) == (10.0, 110.0)
    gst, total = split_gst(1234.56)
    assert gst == round(1234.56 * 0.10, 2)
    assert total == 1234.56 + gst
