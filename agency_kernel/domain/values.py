"""
Values -- Closed enumerations shared across the agency back-end.

Responsibility:
    Replaces the free-form status strings of the dashboard with closed
    enumerations.  Unrecognized inputs parse to an explicit ``UNKNOWN``
    variant instead of silently failing a comparison, so a typo in a task
    status can never be mistaken for (or hidden from) a terminal state.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - ``TERMINAL_TASK_STATUSES`` is the single definition of "done" used by
      every completion count.
    - Legacy milestone statuses (``pending``, ``waiting``) are accepted on
      read and classified as owed-but-not-received.
"""

from __future__ import annotations

from enum import Enum


class Priority(str, Enum):
    """Task priority."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    URGENT = "Urgent"

    @classmethod
    def parse(cls, value: "str | Priority | None") -> "Priority":
        """Parse a priority, defaulting to MEDIUM when blank."""
        if isinstance(value, Priority):
            return value
        if not value:
            return cls.MEDIUM
        for member in cls:
            if member.value.lower() == value.strip().lower():
                return member
        raise ValueError(f"Unknown priority: {value!r}")


class TaskStatus(str, Enum):
    """Task workflow state."""

    PENDING = "Pending"
    ALLOCATED = "Allocated"
    WORKING = "Working"
    WAITING = "Waiting"
    IN_PROGRESS = "In Progress"
    CLIENT_FEEDBACK = "Client Feedback"
    TESTING = "Testing"
    FINISHED = "Finished"
    COMPLETED = "Completed"
    CLOSED = "Closed"
    UNKNOWN = "Unknown"  # Anything the dashboard wrote that we don't recognise

    @classmethod
    def _missing_(cls, value: object) -> "TaskStatus":
        if isinstance(value, str):
            folded = value.strip().lower()
            for member in cls:
                if member.value.lower() == folded:
                    return member
        return cls.UNKNOWN

    @classmethod
    def parse(cls, value: "str | TaskStatus | None") -> "TaskStatus":
        """Classify a raw status string. Never raises."""
        if value is None:
            return cls.UNKNOWN
        return cls(value)

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_TASK_STATUSES


TERMINAL_TASK_STATUSES: frozenset[TaskStatus] = frozenset({
    TaskStatus.FINISHED,
    TaskStatus.COMPLETED,
    TaskStatus.CLOSED,
})


class MilestoneStatus(str, Enum):
    """Payment milestone status."""

    UPCOMING = "upcoming"  # Threshold not reached yet
    DUE = "due"  # Owed by the client
    RECEIVED = "received"  # Paid
    PENDING = "pending"  # Legacy: owed, follow-up pending
    WAITING = "waiting"  # Legacy: owed, waiting on client
    UNKNOWN = "unknown"  # Stored value we do not recognise; never transitions

    @classmethod
    def _missing_(cls, value: object) -> "MilestoneStatus":
        if isinstance(value, str):
            folded = value.strip().lower()
            for member in cls:
                if member.value == folded:
                    return member
        return cls.UNKNOWN

    @property
    def is_legacy(self) -> bool:
        return self in (MilestoneStatus.PENDING, MilestoneStatus.WAITING)

    @property
    def is_outstanding(self) -> bool:
        """Owed but not received (due or one of the legacy states)."""
        return self in (
            MilestoneStatus.DUE,
            MilestoneStatus.PENDING,
            MilestoneStatus.WAITING,
        )


class AllocationMethod(str, Enum):
    """How a line item's units are spread over the calendar."""

    DATE_RANGE = "dateRange"
    SPECIFIC_DAYS = "specificDays"
