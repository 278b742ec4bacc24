"""
Tests for the agency exception hierarchy.

Validates inheritance, machine-readable codes and structured attributes.
"""

from datetime import date
from fractions import Fraction

import pytest

from agency_kernel.exceptions import (
    AgencyKernelError,
    AllocationError,
    AllocationValidationError,
    EmptyDateSelectionError,
    EmptyQueueError,
    FractionalLoadError,
    InvalidMilestoneTransitionError,
    MilestoneNotFoundError,
    MissingAssigneeError,
    MissingDateRangeError,
    PackageError,
    PackageHasLinkedTasksError,
    PackageNotFoundError,
    PackageValidationError,
    PaymentAlertError,
    PaymentAlertNotFoundError,
    TaskError,
    TaskNotFoundError,
    UnevenAllocationError,
)


# =============================================================================
# Hierarchy
# =============================================================================


class TestExceptionHierarchy:
    @pytest.mark.parametrize(
        "exc_type",
        [
            MissingAssigneeError,
            MissingDateRangeError,
            UnevenAllocationError,
            EmptyDateSelectionError,
        ],
    )
    def test_validation_errors_share_a_base(self, exc_type):
        assert issubclass(exc_type, AllocationValidationError)
        assert issubclass(exc_type, AllocationError)

    def test_load_and_queue_errors_are_allocation_errors(self):
        assert issubclass(FractionalLoadError, AllocationError)
        assert issubclass(EmptyQueueError, AllocationError)
        assert not issubclass(EmptyQueueError, AllocationValidationError)

    @pytest.mark.parametrize(
        "exc_type",
        [
            PackageNotFoundError,
            PackageValidationError,
            PackageHasLinkedTasksError,
            MilestoneNotFoundError,
            InvalidMilestoneTransitionError,
        ],
    )
    def test_package_errors(self, exc_type):
        assert issubclass(exc_type, PackageError)

    @pytest.mark.parametrize(
        "exc_type",
        [AllocationError, PackageError, TaskError, PaymentAlertError],
    )
    def test_families_are_kernel_errors(self, exc_type):
        assert issubclass(exc_type, AgencyKernelError)

    def test_not_found_errors(self):
        assert issubclass(TaskNotFoundError, TaskError)
        assert issubclass(PaymentAlertNotFoundError, PaymentAlertError)


# =============================================================================
# Codes and attributes
# =============================================================================


class TestExceptionConstruction:
    def test_uneven_allocation_message(self):
        exc = UnevenAllocationError(0, 31, 30)
        assert exc.code == "UNEVEN_ALLOCATION"
        assert exc.quantity == 31
        assert exc.working_days == 30
        assert exc.raw_per_day == "1.03"
        assert "do not divide evenly" in str(exc)
        assert "31 items / 30 working days" in str(exc)

    def test_uneven_allocation_without_working_days(self):
        exc = UnevenAllocationError(2, 10, 0)
        assert exc.raw_per_day == "n/a"
        assert exc.line_item_index == 2

    def test_missing_date_range_keeps_bounds(self):
        exc = MissingDateRangeError(1, date(2026, 3, 2), None)
        assert exc.code == "MISSING_DATE_RANGE"
        assert exc.start_date == date(2026, 3, 2)
        assert exc.end_date is None

    def test_missing_assignee(self):
        exc = MissingAssigneeError(3)
        assert exc.code == "MISSING_ASSIGNEE"
        assert "staff member" in str(exc)

    def test_fractional_load(self):
        exc = FractionalLoadError(Fraction(3, 2))
        assert exc.code == "FRACTIONAL_LOAD"
        assert exc.units_per_day == Fraction(3, 2)

    def test_empty_queue(self):
        exc = EmptyQueueError()
        assert exc.code == "EMPTY_QUEUE"
        assert str(exc).startswith("No items in queue")

    def test_package_has_linked_tasks(self):
        exc = PackageHasLinkedTasksError("pkg-1", 4)
        assert exc.code == "PACKAGE_HAS_LINKED_TASKS"
        assert exc.linked_tasks == 4

    def test_invalid_transition(self):
        exc = InvalidMilestoneTransitionError("Final", "upcoming", "received")
        assert exc.code == "INVALID_MILESTONE_TRANSITION"
        assert exc.from_status == "upcoming"
        assert "Final" in str(exc)

    def test_validation_error_names_field(self):
        exc = PackageValidationError("name", "please enter a package name")
        assert exc.field == "name"
        assert str(exc) == "name: please enter a package name"
