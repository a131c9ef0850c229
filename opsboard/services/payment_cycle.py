"""
Payment Cycle
Date arithmetic for payment due dates and elapsed-time status classification.

Work done in a month is paid ``cycle_days`` after the first of that month
(January work with a 45 day cycle is due on February 15th). A record stays
"pending" up to and including its due day and is "overdue" afterwards.
Nothing in here reads the wall clock; callers pass ``today`` in.
"""
from datetime import date, datetime, timedelta
from typing import Any, Iterable, List, Optional, Tuple, Union

from opsboard.config import settings
from opsboard.models.cash_flow import TERMINAL_STATUSES

DateLike = Union[date, datetime, str, None]


def due_date(work_year: int, work_month: int, cycle_days: int) -> date:
    """First day of the (1-indexed) work month plus ``cycle_days`` days."""
    return date(work_year, work_month, 1) + timedelta(days=cycle_days)


def parse_record_date(value: DateLike) -> Optional[date]:
    """
    Parse a stored record date.

    Accepts ``date``/``datetime`` objects, ``DD.MM.YYYY`` strings and ISO
    strings (``YYYY-MM-DD`` with an optional time part). Returns None for
    anything it cannot read.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if "." in text:
        parts = text.split(".")
        if len(parts) == 3:
            try:
                day, month, year = (int(p) for p in parts)
                return date(year, month, day)
            except ValueError:
                return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def elapsed_days(record_date: date, today: date) -> int:
    return (today - record_date).days


def classify_status(record_date: DateLike, cycle_days: int, today: date) -> str:
    """
    Classify a record as "pending" or "overdue" from elapsed time alone.

    The due day itself is still pending. Missing or unreadable dates are
    treated as not yet due.
    """
    parsed = parse_record_date(record_date)
    if parsed is None:
        return "pending"
    if elapsed_days(parsed, today) > cycle_days:
        return "overdue"
    return "pending"


def refresh_status(current: Optional[str], record_date: DateLike, cycle_days: Optional[int], today: date) -> str:
    """Recompute a stored status; settled states are never downgraded."""
    if current in TERMINAL_STATUSES:
        return current
    return classify_status(record_date, cycle_days or settings.payment_cycle_days, today)


def payment_due_from(record_date: DateLike, cycle_days: int) -> Optional[date]:
    parsed = parse_record_date(record_date)
    if parsed is None:
        return None
    return parsed + timedelta(days=cycle_days)


def format_ddmmyyyy(value: date) -> str:
    return value.strftime("%d.%m.%Y")


def reminder_phase(today: date) -> Optional[str]:
    """
    Which reminder pass applies today: "pending" on the first of the month,
    "overdue" from the 15th onward, None in between.
    """
    if today.day == settings.reminder_pending_day:
        return "pending"
    if today.day >= settings.reminder_overdue_from_day:
        return "overdue"
    return None


def should_run_today(today: date) -> bool:
    return reminder_phase(today) is not None


def work_months(records: Iterable[Any]) -> List[Tuple[int, int]]:
    """
    Distinct (year, month) pairs of completed, non-leave work records.

    A record counts when it has a date, a clock-in and a clock-out time.
    """
    months = set()
    for record in records:
        if getattr(record, "is_leave", False):
            continue
        if not getattr(record, "clock_in_time", None) or not getattr(record, "clock_out_time", None):
            continue
        worked_on = parse_record_date(getattr(record, "date", None))
        if worked_on is None:
            continue
        months.add((worked_on.year, worked_on.month))
    return sorted(months)
