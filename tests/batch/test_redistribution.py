"""
Tests for holiday redistribution.

Validates the <=2 single-target rule, the >=3 backward/forward walk,
adjacent holidays and unit conservation.
"""

from datetime import date, timedelta
from fractions import Fraction

import pytest

from agency_batch.domain.redistribution import day_counts, redistribute
from agency_kernel.exceptions import FractionalLoadError

MON = date(2026, 2, 2)
TUE, WED, THU, FRI = (MON + timedelta(days=i) for i in range(1, 5))
WEEK = (MON, TUE, WED, THU, FRI)


def _total(days, per_day, holidays):
    return sum(a.units for a in day_counts(days, per_day, holidays))


# =============================================================================
# Small loads
# =============================================================================


class TestSingleTarget:
    def test_midweek_holiday_moves_to_previous_day(self):
        assert redistribute(WEEK, 2, [WED]) == {TUE: 2}

    def test_final_counts(self):
        counts = {a.day: a.units for a in day_counts(WEEK, 2, [WED])}
        assert counts == {MON: 2, TUE: 4, THU: 2, FRI: 2}

    def test_first_day_holiday_moves_forward(self):
        assert redistribute(WEEK, 1, [MON]) == {TUE: 1}

    def test_adjacent_holidays_both_land_before(self):
        assert redistribute(WEEK, 2, [TUE, WED]) == {MON: 4}
        assert _total(WEEK, 2, [TUE, WED]) == 10


# =============================================================================
# Walked loads
# =============================================================================


class TestWalk:
    def test_load_of_three_walks_back_then_forward(self):
        assert redistribute(WEEK, 3, [WED]) == {TUE: 1, MON: 1, THU: 1}

    def test_load_exceeding_neighbours_wraps(self):
        extras = redistribute((MON, TUE, WED), 5, [TUE])
        assert extras == {MON: 3, WED: 2}
        assert _total((MON, TUE, WED), 5, [TUE]) == 15

    def test_holiday_at_end_walks_backwards_only(self):
        assert redistribute(WEEK, 4, [FRI]) == {THU: 1, WED: 1, TUE: 1, MON: 1}


# =============================================================================
# Edge cases
# =============================================================================


class TestEdgeCases:
    def test_holiday_outside_schedule_moves_nothing(self):
        sunday = date(2026, 2, 8)
        assert redistribute(WEEK, 2, [sunday]) == {}

    def test_repeated_holiday_counts_once(self):
        assert redistribute(WEEK, 2, [WED, WED]) == {TUE: 2}

    def test_all_days_holidays(self):
        assert redistribute(WEEK, 2, WEEK) == {}
        assert day_counts(WEEK, 2, WEEK) == ()

    def test_zero_load(self):
        assert redistribute(WEEK, 0, [WED]) == {}

    def test_integral_fraction_accepted(self):
        assert redistribute(WEEK, Fraction(4, 2), [WED]) == {TUE: 2}

    @pytest.mark.parametrize("load", [Fraction(3, 2), 1.5])
    def test_fractional_load_rejected(self, load):
        with pytest.raises(FractionalLoadError):
            redistribute(WEEK, load, [WED])

    def test_does_not_mutate_inputs(self):
        days = list(WEEK)
        holidays = [WED]
        redistribute(days, 3, holidays)
        assert days == list(WEEK)
        assert holidays == [WED]


@pytest.mark.parametrize("per_day", [1, 2, 3, 4, 7])
@pytest.mark.parametrize(
    "holidays",
    [[WED], [MON], [FRI], [TUE, WED], [MON, FRI], [TUE, WED, THU]],
)
def test_units_are_conserved(per_day, holidays):
    assert _total(WEEK, per_day, holidays) == len(WEEK) * per_day
