"""
agency_batch.domain -- Pure types and functions for bulk allocation.

ZERO I/O.  All types are frozen dataclasses.
"""

from agency_batch.domain.calendar import (
    holidays_in_range,
    production_days,
    summarize_range,
    working_days,
)
from agency_batch.domain.entries import build_entries, build_plan_entries
from agency_batch.domain.plan import plan_allocation, validate_config
from agency_batch.domain.redistribution import day_counts, redistribute
from agency_batch.domain.types import (
    AllocationPlan,
    BulkCommitResult,
    BulkLineItemConfig,
    DayAllocation,
    RangeSummary,
    TaskPayload,
    TaskTemplate,
)

__all__ = [
    "AllocationPlan",
    "BulkCommitResult",
    "BulkLineItemConfig",
    "DayAllocation",
    "RangeSummary",
    "TaskPayload",
    "TaskTemplate",
    "build_entries",
    "build_plan_entries",
    "day_counts",
    "holidays_in_range",
    "plan_allocation",
    "production_days",
    "redistribute",
    "summarize_range",
    "validate_config",
    "working_days",
]
