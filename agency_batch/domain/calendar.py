"""
Working-day calculation (pure).

Contract:
    ``working_days(start, end, holidays)`` returns every day in the inclusive
    range that is neither a Sunday nor a listed holiday, ascending.  A
    reversed range yields an empty tuple rather than an error.

Architecture: agency_batch/domain.  ZERO I/O.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from datetime import date, timedelta
from fractions import Fraction

from agency_batch.domain.types import RangeSummary

SUNDAY = 6  # date.weekday(): Monday=0 ... Sunday=6


def is_sunday(day: date) -> bool:
    return day.weekday() == SUNDAY


def parse_iso_date(value: str | date) -> date:
    """Parse ``YYYY-MM-DD`` (dates pass through unchanged)."""
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip())


def iter_days(start: date, end: date) -> Iterator[date]:
    """Every calendar day from ``start`` to ``end`` inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def working_days(
    start: date,
    end: date,
    holidays: Iterable[date] = (),
) -> tuple[date, ...]:
    """Days in ``[start, end]`` that are not Sundays and not holidays."""
    holiday_set = frozenset(holidays)
    return tuple(
        day
        for day in iter_days(start, end)
        if not is_sunday(day) and day not in holiday_set
    )


def production_days(start: date, end: date) -> tuple[date, ...]:
    """Nominal schedule: every non-Sunday day in the range, holidays included."""
    return working_days(start, end, ())


def holidays_in_range(
    holidays: Iterable[date],
    start: date,
    end: date,
) -> tuple[date, ...]:
    """Sorted, de-duplicated holidays inside the inclusive range."""
    return tuple(sorted({h for h in holidays if start <= h <= end}))


def count_sundays(start: date, end: date) -> int:
    return sum(1 for day in iter_days(start, end) if is_sunday(day))


def summarize_range(
    start: date | None,
    end: date | None,
    holidays: Iterable[date],
    quantity: int,
) -> RangeSummary | None:
    """Summarize a date range for a line item of ``quantity`` units.

    Returns ``None`` when a bound is missing or the range is reversed.
    """
    if start is None or end is None or start > end:
        return None

    holidays = tuple(holidays)
    working = working_days(start, end, holidays)
    count = len(working)
    raw_per_day = Fraction(quantity, count) if count else Fraction(0)
    return RangeSummary(
        total_calendar_days=(end - start).days + 1,
        sundays=count_sundays(start, end),
        holidays_in_range=len(holidays_in_range(holidays, start, end)),
        working_days=count,
        raw_per_day=raw_per_day,
        is_valid=count > 0 and raw_per_day.denominator == 1 and raw_per_day > 0,
    )
