"""
Task Domain Model (``agency_modules.tasks.models``).

Frozen value object for a task record.  ``status`` keeps the raw workflow
string written by the dashboard; ``status_kind`` classifies it through the
closed ``TaskStatus`` enumeration.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from uuid import UUID

from agency_kernel.domain.values import Priority, TaskStatus


@dataclass(frozen=True)
class Task:
    """A unit of production work (called a project on the dashboard)."""
    id: UUID
    client_id: str
    service_id: str
    task_type: str
    priority: Priority
    start_date: date | None
    deadline: date | None
    description: str
    status: str
    progress: int = 0
    client_name: str = ""
    service_name: str = ""
    assigned_employee_id: str | None = None
    package_id: UUID | None = None  # Weak reference, may dangle
    package_line_item_index: int | None = None
    total_amount: int = 0
    advance: int = 0
    received_amount: int = 0
    created_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def status_kind(self) -> TaskStatus:
        return TaskStatus.parse(self.status)
