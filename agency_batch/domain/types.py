"""
agency_batch.domain.types -- Pure frozen dataclasses for bulk allocation.

ZERO I/O.  Frozen dataclasses with enum fields and tuples for immutable
collections.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from fractions import Fraction
from types import MappingProxyType
from typing import Mapping
from uuid import UUID

from agency_kernel.domain.values import AllocationMethod, Priority


# =============================================================================
# Line-item configuration (queue entry)
# =============================================================================


@dataclass(frozen=True)
class BulkLineItemConfig:
    """One line item's allocation settings, as staged in the queue.

    Ephemeral: created when a line item is configured, consumed on commit
    or discarded when the session is closed.  Never persisted.
    """

    line_item_index: int
    service_name: str
    quantity: int
    method: AllocationMethod = AllocationMethod.DATE_RANGE
    assigned_employee_id: str | None = None
    priority: Priority = Priority.MEDIUM
    description: str = ""
    # dateRange
    start_date: date | None = None
    end_date: date | None = None
    holidays: tuple[date, ...] = ()
    # specificDays
    selected_dates: tuple[date, ...] = ()


# =============================================================================
# Plans
# =============================================================================


@dataclass(frozen=True)
class DayAllocation:
    """Units scheduled on a single production day."""

    day: date
    units: int


@dataclass(frozen=True)
class RangeSummary:
    """Breakdown of a date range, as shown next to the range picker."""

    total_calendar_days: int
    sundays: int
    holidays_in_range: int
    working_days: int
    raw_per_day: Fraction
    is_valid: bool  # quantity / working_days is a positive whole number


@dataclass(frozen=True)
class AllocationPlan:
    """Day-by-day production plan for one line item."""

    line_item_index: int
    method: AllocationMethod
    dates: tuple[date, ...]  # Days that receive units, ascending
    base_units_per_day: int
    extras: Mapping[date, int] = field(default_factory=lambda: MappingProxyType({}))

    def units_on(self, day: date) -> int:
        if day not in self.dates:
            return 0
        return self.base_units_per_day + self.extras.get(day, 0)

    @property
    def days(self) -> tuple[DayAllocation, ...]:
        return tuple(DayAllocation(day=d, units=self.units_on(d)) for d in self.dates)

    @property
    def total_units(self) -> int:
        return sum(self.units_on(d) for d in self.dates)


# =============================================================================
# Task creation
# =============================================================================


@dataclass(frozen=True)
class TaskTemplate:
    """Fields every generated task inherits."""

    client_id: str
    service_id: str = ""
    client_name: str = ""
    service_name: str = ""
    task_type: str = "Graphic"
    priority: Priority = Priority.MEDIUM
    assigned_employee_id: str | None = None
    package_id: UUID | None = None
    package_line_item_index: int | None = None


@dataclass(frozen=True)
class TaskPayload:
    """Creation payload for a single task record.

    Bulk-generated units carry a zero financial footprint; amounts are
    tracked on the package, not per task.
    """

    client_id: str
    service_id: str
    client_name: str
    service_name: str
    task_type: str
    priority: Priority
    start_date: date
    deadline: date
    description: str
    status: str = "Allocated"
    progress: int = 0
    assigned_employee_id: str | None = None
    package_id: UUID | None = None
    package_line_item_index: int | None = None
    total_amount: int = 0
    advance: int = 0
    received_amount: int = 0


# =============================================================================
# Commit results
# =============================================================================


@dataclass(frozen=True)
class BulkCommitResult:
    """Immutable result of committing the whole line-item queue."""

    total_units: int
    task_ids: tuple[UUID, ...] = ()
    units_by_line_item: Mapping[int, int] = field(
        default_factory=lambda: MappingProxyType({})
    )
    started_at: datetime | None = None
    completed_at: datetime | None = None
    duration_ms: int = 0
