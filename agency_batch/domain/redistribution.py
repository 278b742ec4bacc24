"""
Holiday redistribution (pure).

Contract:
    ``redistribute(days, units_per_day, holidays)`` moves the quota each
    holiday would have carried onto the surrounding non-holiday days and
    returns the extra units per target day.

    Per holiday ``h`` (processed independently, in the order given):
        load <= 2  -> everything to the closest earlier day, or to the
                      closest later day when there is no earlier one.
        load >= 3  -> one unit per earlier day walking backwards from
                      ``h``, then one unit per later day walking forwards.

    Only holidays that are members of ``days`` carry a load.  A holiday
    outside the schedule (already excluded, e.g. a Sunday) moves nothing.

Invariants enforced:
    Conservation -- for a schedule with at least one non-holiday day,
        sum(units_per_day + extras[d] for d in non-holiday days)
            == len(days) * units_per_day

Architecture: agency_batch/domain.  ZERO I/O.
"""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from collections.abc import Iterable, Sequence
from datetime import date
from fractions import Fraction

from agency_batch.domain.types import DayAllocation
from agency_kernel.exceptions import FractionalLoadError

# Loads at or below this size go to a single neighbouring day.
SINGLE_TARGET_MAX_LOAD = 2


def whole_units(units_per_day: int | Fraction) -> int:
    """Return ``units_per_day`` as an int, rejecting fractional loads."""
    if isinstance(units_per_day, Fraction):
        if units_per_day.denominator != 1:
            raise FractionalLoadError(units_per_day)
        return int(units_per_day)
    if isinstance(units_per_day, bool) or not isinstance(units_per_day, int):
        raise FractionalLoadError(units_per_day)
    return units_per_day


def redistribute(
    days: Sequence[date],
    units_per_day: int | Fraction,
    holidays: Iterable[date],
) -> dict[date, int]:
    """Extra units per non-holiday day caused by the holidays in ``days``."""
    load = whole_units(units_per_day)
    holidays = list(dict.fromkeys(holidays))  # a repeated holiday moves its load once
    holiday_set = frozenset(holidays)
    scheduled = frozenset(days)
    targets = sorted(d for d in scheduled if d not in holiday_set)

    extras: dict[date, int] = {}
    if load <= 0 or not targets:
        return extras

    for holiday in holidays:
        if holiday not in scheduled:
            continue

        before = targets[: bisect_left(targets, holiday)]
        after = targets[bisect_right(targets, holiday):]

        if load <= SINGLE_TARGET_MAX_LOAD:
            target = before[-1] if before else after[0]
            extras[target] = extras.get(target, 0) + load
            continue

        remaining = load
        for day in reversed(before):
            if remaining == 0:
                break
            extras[day] = extras.get(day, 0) + 1
            remaining -= 1
        for day in after:
            if remaining == 0:
                break
            extras[day] = extras.get(day, 0) + 1
            remaining -= 1

        # Fewer neighbours than units: the walk wraps round the schedule
        # until the load is placed.
        while remaining > 0:
            for day in reversed(before):
                if remaining == 0:
                    break
                extras[day] += 1
                remaining -= 1
            for day in after:
                if remaining == 0:
                    break
                extras[day] += 1
                remaining -= 1

    return extras


def day_counts(
    days: Sequence[date],
    units_per_day: int | Fraction,
    holidays: Iterable[date],
) -> tuple[DayAllocation, ...]:
    """Final per-day units over the non-holiday days of ``days``."""
    load = whole_units(units_per_day)
    holidays = tuple(holidays)
    holiday_set = frozenset(holidays)
    extras = redistribute(days, load, holidays)
    return tuple(
        DayAllocation(day=d, units=load + extras.get(d, 0))
        for d in sorted(set(days))
        if d not in holiday_set
    )
