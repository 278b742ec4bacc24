"""
Typed Exception Hierarchy for the Agency Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers must be able to tell a rejected allocation from a missing package
without parsing message strings.  Every error therefore:
  1. Has a TYPED exception class (catch by type, not message)
  2. Has a CODE attribute (machine-readable, API-safe)
  3. Carries structured DATA (not just a message string)

Example:
    try:
        queue.add_or_replace(config)
    except UnevenAllocationError as e:
        show(f"{e.quantity} units over {e.working_days} days")

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from AgencyKernelError:

    AgencyKernelError (base)
    |
    +-- AllocationError
    |   +-- AllocationValidationError
    |   |   +-- MissingAssigneeError
    |   |   +-- MissingDateRangeError
    |   |   +-- UnevenAllocationError
    |   |   +-- EmptyDateSelectionError
    |   +-- FractionalLoadError
    |   +-- EmptyQueueError
    |
    +-- PackageError
    |   +-- PackageNotFoundError
    |   +-- PackageValidationError
    |   +-- PackageHasLinkedTasksError
    |   +-- MilestoneNotFoundError
    |   +-- InvalidMilestoneTransitionError
    |
    +-- TaskError
    |   +-- TaskNotFoundError
    |
    +-- PaymentAlertError
        +-- PaymentAlertNotFoundError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                          | When Raised
----------------|-------------------------------|---------------------------------------
Allocation      | MISSING_ASSIGNEE              | Queue entry without a staff member
                | MISSING_DATE_RANGE            | dateRange config without both bounds
                | UNEVEN_ALLOCATION             | quantity / working days not a positive int
                | EMPTY_DATE_SELECTION          | specificDays config with no dates
                | FRACTIONAL_LOAD               | Non-integral per-day load redistributed
                | EMPTY_QUEUE                   | Commit requested with nothing queued
----------------|-------------------------------|---------------------------------------
Package         | PACKAGE_NOT_FOUND             | Package ID doesn't exist
                | PACKAGE_VALIDATION            | Blank client/name, bad percentage, ...
                | PACKAGE_HAS_LINKED_TASKS      | Delete refused while tasks reference it
                | MILESTONE_NOT_FOUND           | Milestone index out of range
                | INVALID_MILESTONE_TRANSITION  | e.g. upcoming -> received
----------------|-------------------------------|---------------------------------------
Task            | TASK_NOT_FOUND                | Task ID doesn't exist
----------------|-------------------------------|---------------------------------------
Payment alert   | PAYMENT_ALERT_NOT_FOUND       | Alert ID doesn't exist
"""

from __future__ import annotations

from datetime import date
from fractions import Fraction


class AgencyKernelError(Exception):
    """
    Base exception for all agency kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "AGENCY_KERNEL_ERROR"


# =============================================================================
# Allocation (bulk scheduling) errors
# =============================================================================


class AllocationError(AgencyKernelError):
    """Base exception for bulk allocation errors."""

    code: str = "ALLOCATION_ERROR"


class AllocationValidationError(AllocationError):
    """A line-item configuration was rejected before any write happened."""

    code: str = "ALLOCATION_VALIDATION_ERROR"

    def __init__(self, line_item_index: int, message: str):
        self.line_item_index = line_item_index
        super().__init__(message)


class MissingAssigneeError(AllocationValidationError):
    """No staff member was assigned to the line item."""

    code: str = "MISSING_ASSIGNEE"

    def __init__(self, line_item_index: int):
        super().__init__(
            line_item_index,
            f"Line item {line_item_index}: please select a staff member",
        )


class MissingDateRangeError(AllocationValidationError):
    """Date-range allocation without a start or end date."""

    code: str = "MISSING_DATE_RANGE"

    def __init__(
        self,
        line_item_index: int,
        start_date: date | None,
        end_date: date | None,
    ):
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(
            line_item_index,
            f"Line item {line_item_index}: start and end date are required",
        )


class UnevenAllocationError(AllocationValidationError):
    """Working days do not divide the line-item quantity into whole units."""

    code: str = "UNEVEN_ALLOCATION"

    def __init__(self, line_item_index: int, quantity: int, working_days: int):
        self.quantity = quantity
        self.working_days = working_days
        if working_days > 0:
            raw = Fraction(quantity, working_days)
            per_day = f"{float(raw):.2f}"
        else:
            per_day = "n/a"
        self.raw_per_day = per_day
        super().__init__(
            line_item_index,
            f"Line item {line_item_index}: {quantity} items / {working_days} "
            f"working days = {per_day} per day. Working days do not divide "
            f"evenly into the item quantity; adjust the date range or holidays",
        )


class EmptyDateSelectionError(AllocationValidationError):
    """Specific-days allocation with no dates selected."""

    code: str = "EMPTY_DATE_SELECTION"

    def __init__(self, line_item_index: int):
        super().__init__(
            line_item_index,
            f"Line item {line_item_index}: please select at least one date",
        )


class FractionalLoadError(AllocationError):
    """A per-day load that is not a whole number cannot be redistributed."""

    code: str = "FRACTIONAL_LOAD"

    def __init__(self, units_per_day: Fraction | int):
        self.units_per_day = units_per_day
        super().__init__(
            f"Per-day load {units_per_day} is not a whole number of units"
        )


class EmptyQueueError(AllocationError):
    """Commit requested on an empty line-item queue."""

    code: str = "EMPTY_QUEUE"

    def __init__(self):
        super().__init__(
            "No items in queue. Configure and add at least one line item"
        )


# =============================================================================
# Package / billing errors
# =============================================================================


class PackageError(AgencyKernelError):
    """Base exception for package and milestone errors."""

    code: str = "PACKAGE_ERROR"


class PackageNotFoundError(PackageError):
    """Package ID does not exist in the store."""

    code: str = "PACKAGE_NOT_FOUND"

    def __init__(self, package_id: str):
        self.package_id = package_id
        super().__init__(f"Package not found: {package_id}")


class PackageValidationError(PackageError):
    """Package create/edit input was rejected."""

    code: str = "PACKAGE_VALIDATION"

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")


class PackageHasLinkedTasksError(PackageError):
    """Delete refused because tasks still reference the package."""

    code: str = "PACKAGE_HAS_LINKED_TASKS"

    def __init__(self, package_id: str, linked_tasks: int):
        self.package_id = package_id
        self.linked_tasks = linked_tasks
        super().__init__(
            f"Package {package_id} is referenced by {linked_tasks} task(s)"
        )


class MilestoneNotFoundError(PackageError):
    """Milestone index out of range for the package."""

    code: str = "MILESTONE_NOT_FOUND"

    def __init__(self, package_id: str, milestone_index: int):
        self.package_id = package_id
        self.milestone_index = milestone_index
        super().__init__(
            f"Package {package_id} has no milestone at index {milestone_index}"
        )


class InvalidMilestoneTransitionError(PackageError):
    """Requested milestone status change is not allowed."""

    code: str = "INVALID_MILESTONE_TRANSITION"

    def __init__(self, milestone_label: str, from_status: str, to_status: str):
        self.milestone_label = milestone_label
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(
            f"Milestone '{milestone_label}' cannot move from "
            f"{from_status} to {to_status}"
        )


# =============================================================================
# Task errors
# =============================================================================


class TaskError(AgencyKernelError):
    """Base exception for task errors."""

    code: str = "TASK_ERROR"


class TaskNotFoundError(TaskError):
    """Task ID does not exist in the store."""

    code: str = "TASK_NOT_FOUND"

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task not found: {task_id}")


# =============================================================================
# Payment alert errors
# =============================================================================


class PaymentAlertError(AgencyKernelError):
    """Base exception for payment alert errors."""

    code: str = "PAYMENT_ALERT_ERROR"


class PaymentAlertNotFoundError(PaymentAlertError):
    """Payment alert ID does not exist in the store."""

    code: str = "PAYMENT_ALERT_NOT_FOUND"

    def __init__(self, alert_id: str):
        self.alert_id = alert_id
        super().__init__(f"Payment alert not found: {alert_id}")
