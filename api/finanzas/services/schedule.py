"""
Calendar arithmetic for recurring rules.

Fixed-length frequencies step by whole days. Monthly and yearly steps keep the
rule's anchor day-of-month: a rule anchored on the 31st lands on the last day
of a shorter month and returns to the 31st as soon as the month allows it.
"""
import calendar
import enum
from datetime import date, timedelta


class Frequency(str, enum.Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class InvalidFrequency(ValueError):
    """A stored frequency value that is not one of ``Frequency``."""


FIXED_STEP_DAYS: dict[Frequency, int] = {
    Frequency.DAILY:    1,
    Frequency.WEEKLY:   7,
    Frequency.BIWEEKLY: 14,
}


# ─── Helpers ─────────────────────────────────────────────────────────────────

def parse_frequency(value: "Frequency | str") -> Frequency:
    if isinstance(value, Frequency):
        return value
    try:
        return Frequency(value)
    except ValueError:
        raise InvalidFrequency(f"Unknown frequency: {value!r}") from None


def _days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def _effective_anchor(current: date, anchor_day: int | None) -> int:
    """Day-of-month to aim for when stepping from ``current``.

    The anchor only applies when ``current`` is the anchor day itself or a
    month-end clamp of it. Any other day means the schedule was re-based.
    """
    if anchor_day is None or current.day == anchor_day:
        return current.day
    if current.day < anchor_day and current.day == _days_in_month(current.year, current.month):
        return anchor_day
    return current.day


# ─── Stepping ────────────────────────────────────────────────────────────────

def next_due_date(
    frequency: "Frequency | str",
    current: date,
    anchor_day: int | None = None,
) -> date:
    """Return the occurrence that follows ``current``."""
    freq = parse_frequency(frequency)

    if freq in FIXED_STEP_DAYS:
        return current + timedelta(days=FIXED_STEP_DAYS[freq])

    day = _effective_anchor(current, anchor_day)

    if freq is Frequency.MONTHLY:
        year, month = current.year, current.month + 1
        if month > 12:
            year, month = year + 1, 1
    else:
        # Feb 29 clamps to Feb 28 in non-leap years and comes back on leap years
        year, month = current.year + 1, current.month

    return date(year, month, min(day, _days_in_month(year, month)))


def due_dates(
    frequency: "Frequency | str",
    next_due: date,
    until: date,
    end_date: date | None = None,
    anchor_day: int | None = None,
    limit: int = 365,
) -> list[date]:
    """
    All occurrences from ``next_due`` (inclusive) up to ``until`` and
    ``end_date`` (both inclusive), oldest first. ``limit`` caps the list.
    """
    freq = parse_frequency(frequency)
    dates: list[date] = []
    current = next_due

    while current <= until and (end_date is None or current <= end_date):
        if len(dates) >= limit:
            break
        dates.append(current)
        current = next_due_date(freq, current, anchor_day)

    return dates
