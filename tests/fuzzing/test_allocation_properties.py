"""
Property-based tests for bulk allocation and milestone billing.

Properties:
- Working days never contain Sundays or holidays and stay ascending.
- Redistribution conserves units for any schedule with a working day.
- Accepted date-range plans number their entries 1..N without gaps.
- Milestone amounts match half-up rounding of pct/100 x total.
"""

from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal

from hypothesis import assume, given, settings
from hypothesis import strategies as st

from agency_batch.domain.calendar import is_sunday, production_days, working_days
from agency_batch.domain.entries import build_plan_entries
from agency_batch.domain.plan import plan_allocation
from agency_batch.domain.redistribution import day_counts
from agency_batch.domain.types import BulkLineItemConfig, TaskTemplate
from agency_kernel.exceptions import UnevenAllocationError
from agency_modules.packages.billing import milestone_amount

BASE = date(2026, 1, 1)

dates = st.integers(min_value=0, max_value=120).map(lambda n: BASE + timedelta(days=n))


@st.composite
def schedules(draw):
    start = draw(dates)
    length = draw(st.integers(min_value=1, max_value=40))
    end = start + timedelta(days=length - 1)
    days = production_days(start, end)
    holidays = draw(st.lists(st.sampled_from(days), max_size=len(days))) if days else []
    return start, end, days, holidays


@settings(max_examples=200, deadline=None)
@given(schedules())
def test_working_days_exclude_sundays_and_holidays(schedule):
    start, end, _, holidays = schedule
    result = working_days(start, end, holidays)
    assert list(result) == sorted(result)
    for day in result:
        assert start <= day <= end
        assert not is_sunday(day)
        assert day not in holidays


@settings(max_examples=300, deadline=None)
@given(schedules(), st.integers(min_value=0, max_value=12))
def test_redistribution_conserves_units(schedule, per_day):
    _, _, days, holidays = schedule
    assume(any(d not in holidays for d in days))
    counts = day_counts(days, per_day, holidays)
    assert sum(a.units for a in counts) == len(days) * per_day
    assert all(a.day not in holidays for a in counts)


@settings(max_examples=150, deadline=None)
@given(schedules(), st.integers(min_value=1, max_value=120))
def test_accepted_plans_number_entries_without_gaps(schedule, quantity):
    start, end, _, holidays = schedule
    config = BulkLineItemConfig(
        line_item_index=0,
        service_name="Poster",
        quantity=quantity,
        assigned_employee_id="emp-042",
        start_date=start,
        end_date=end,
        holidays=tuple(holidays),
    )
    try:
        plan = plan_allocation(config)
    except UnevenAllocationError:
        count = len(working_days(start, end, holidays))
        assert count == 0 or quantity % count != 0
        return

    entries = build_plan_entries(plan, TaskTemplate(client_id="c"), "Poster")
    total = plan.total_units
    assert total >= quantity
    assert [e.description for e in entries] == [f"Poster {k}/{total}" for k in range(1, total + 1)]
    assert [e.start_date for e in entries] == sorted(e.start_date for e in entries)


@given(
    st.decimals(min_value=0, max_value=100, places=2),
    st.integers(min_value=0, max_value=10_000_000),
)
def test_milestone_amount_rounds_half_up(pct, total):
    expected = (pct * total / 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    amount = milestone_amount(pct, total)
    assert amount == int(expected)
    assert 0 <= amount <= total
