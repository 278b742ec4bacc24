"""
Tests for closed enumerations and the injectable clock.
"""

from datetime import UTC, date, datetime

import pytest

from agency_kernel.domain.clock import DeterministicClock, SystemClock
from agency_kernel.domain.values import (
    TERMINAL_TASK_STATUSES,
    AllocationMethod,
    MilestoneStatus,
    Priority,
    TaskStatus,
)


class TestTaskStatus:
    def test_known_status_parses(self):
        assert TaskStatus.parse("In Progress") is TaskStatus.IN_PROGRESS

    def test_parse_is_case_insensitive(self):
        assert TaskStatus.parse("finished") is TaskStatus.FINISHED
        assert TaskStatus.parse(" Closed ") is TaskStatus.CLOSED

    @pytest.mark.parametrize("raw", ["Finshed", "done", "", None])
    def test_unknown_status_is_never_terminal(self, raw):
        status = TaskStatus.parse(raw)
        assert status is TaskStatus.UNKNOWN
        assert not status.is_terminal

    def test_terminal_set(self):
        assert TERMINAL_TASK_STATUSES == {
            TaskStatus.FINISHED,
            TaskStatus.COMPLETED,
            TaskStatus.CLOSED,
        }
        assert not TaskStatus.TESTING.is_terminal


class TestPriority:
    def test_blank_defaults_to_medium(self):
        assert Priority.parse("") is Priority.MEDIUM
        assert Priority.parse(None) is Priority.MEDIUM

    def test_parse_case_insensitive(self):
        assert Priority.parse("urgent") is Priority.URGENT

    def test_unknown_priority_rejected(self):
        with pytest.raises(ValueError, match="Unknown priority"):
            Priority.parse("Critical")


class TestMilestoneStatus:
    def test_legacy_statuses_are_outstanding(self):
        assert MilestoneStatus.PENDING.is_legacy
        assert MilestoneStatus.WAITING.is_outstanding
        assert MilestoneStatus.DUE.is_outstanding

    def test_received_and_upcoming_are_not_outstanding(self):
        assert not MilestoneStatus.RECEIVED.is_outstanding
        assert not MilestoneStatus.UPCOMING.is_outstanding

    @pytest.mark.parametrize("raw", ["Paid", "overdue", ""])
    def test_unrecognised_value_maps_to_unknown(self, raw):
        status = MilestoneStatus(raw)
        assert status is MilestoneStatus.UNKNOWN
        assert not status.is_outstanding

    def test_value_lookup_is_case_insensitive(self):
        assert MilestoneStatus(" Received ") is MilestoneStatus.RECEIVED


def test_allocation_method_values():
    assert AllocationMethod("dateRange") is AllocationMethod.DATE_RANGE
    assert AllocationMethod("specificDays") is AllocationMethod.SPECIFIC_DAYS


class TestClock:
    def test_deterministic_clock_default(self):
        clock = DeterministicClock()
        assert clock.today() == date(2026, 2, 2)
        assert clock.now().tzinfo is not None

    def test_advance(self):
        clock = DeterministicClock(datetime(2026, 3, 1, 12, 0, tzinfo=UTC))
        clock.advance(60)
        assert clock.now() == datetime(2026, 3, 1, 12, 1, tzinfo=UTC)

    def test_system_clock_is_timezone_aware(self):
        assert SystemClock().now().tzinfo is not None
