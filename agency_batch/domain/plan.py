"""
Allocation planning (pure).

Contract:
    ``validate_config(config)`` applies every queue-entry rule and returns
    the derived ``AllocationPlan``; ``plan_allocation(config)`` derives the
    plan without the assignee check (used again at commit time).

Rules:
    dateRange     quantity / working days must be a positive whole number.
                  The nominal schedule is every non-Sunday day in the range;
                  the quota of each holiday inside it is moved onto the
                  working days by the redistribution engine.
    specificDays  one unit per selected date; Sundays are dropped.

Architecture: agency_batch/domain.  ZERO I/O.
"""

from __future__ import annotations

from types import MappingProxyType

from agency_batch.domain.calendar import (
    holidays_in_range,
    is_sunday,
    production_days,
    working_days,
)
from agency_batch.domain.redistribution import redistribute
from agency_batch.domain.types import AllocationPlan, BulkLineItemConfig
from agency_kernel.domain.values import AllocationMethod
from agency_kernel.exceptions import (
    EmptyDateSelectionError,
    MissingAssigneeError,
    MissingDateRangeError,
    UnevenAllocationError,
)


def plan_allocation(config: BulkLineItemConfig) -> AllocationPlan:
    """Derive the day plan for ``config``.

    Raises:
        MissingDateRangeError: dateRange without both bounds.
        UnevenAllocationError: quantity does not divide into whole units/day.
        EmptyDateSelectionError: specificDays with no usable dates.
    """
    if config.method is AllocationMethod.SPECIFIC_DAYS:
        return _plan_specific_days(config)
    return _plan_date_range(config)


def validate_config(config: BulkLineItemConfig) -> AllocationPlan:
    """All queue-entry checks, in the order the configuration panel runs them."""
    if not (config.assigned_employee_id or "").strip():
        raise MissingAssigneeError(config.line_item_index)
    return plan_allocation(config)


def _plan_date_range(config: BulkLineItemConfig) -> AllocationPlan:
    start, end = config.start_date, config.end_date
    if start is None or end is None:
        raise MissingDateRangeError(config.line_item_index, start, end)

    working = working_days(start, end, config.holidays)
    count = len(working)
    if count == 0 or config.quantity <= 0 or config.quantity % count != 0:
        raise UnevenAllocationError(config.line_item_index, config.quantity, count)

    per_day = config.quantity // count
    extras = redistribute(
        production_days(start, end),
        per_day,
        holidays_in_range(config.holidays, start, end),
    )
    return AllocationPlan(
        line_item_index=config.line_item_index,
        method=AllocationMethod.DATE_RANGE,
        dates=working,
        base_units_per_day=per_day,
        extras=MappingProxyType(extras),
    )


def _plan_specific_days(config: BulkLineItemConfig) -> AllocationPlan:
    dates = tuple(sorted({d for d in config.selected_dates if not is_sunday(d)}))
    if not dates:
        raise EmptyDateSelectionError(config.line_item_index)
    return AllocationPlan(
        line_item_index=config.line_item_index,
        method=AllocationMethod.SPECIFIC_DAYS,
        dates=dates,
        base_units_per_day=1,
    )
