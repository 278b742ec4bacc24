"""
SQLAlchemy ORM persistence model for tasks.

``TaskModel`` maps to the ``Task`` DTO.  ``package_id`` is a weak reference
(no foreign key): package deletion does not touch linked tasks.
``status`` keeps the raw workflow string so unrecognised values written by
other tools survive a round trip.
"""

from datetime import date, datetime
from uuid import UUID

from sqlalchemy import Date, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from agency_kernel.db.base import TrackedBase, UUIDString


class TaskModel(TrackedBase):
    """A production task (one unit of a service)."""

    __tablename__ = "agency_tasks"

    __table_args__ = (
        Index("idx_task_package", "package_id", "package_line_item_index"),
        Index("idx_task_assignee", "assigned_employee_id"),
        Index("idx_task_status", "status"),
    )

    client_id: Mapped[str] = mapped_column(String(100), nullable=False)
    client_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    service_id: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    service_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    task_type: Mapped[str] = mapped_column(String(50), nullable=False, default="Graphic")
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default="Medium")
    start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    deadline: Mapped[date | None] = mapped_column(Date, nullable=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="Allocated")
    progress: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    assigned_employee_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    package_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    package_line_item_index: Mapped[int | None] = mapped_column(Integer, nullable=True)
    total_amount: Mapped[int] = mapped_column(nullable=False, default=0)
    advance: Mapped[int] = mapped_column(nullable=False, default=0)
    received_amount: Mapped[int] = mapped_column(nullable=False, default=0)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def to_dto(self):
        from agency_kernel.domain.values import Priority
        from agency_modules.tasks.models import Task

        return Task(
            id=self.id,
            client_id=self.client_id,
            client_name=self.client_name,
            service_id=self.service_id,
            service_name=self.service_name,
            task_type=self.task_type,
            priority=Priority.parse(self.priority),
            start_date=self.start_date,
            deadline=self.deadline,
            description=self.description,
            status=self.status,
            progress=self.progress,
            assigned_employee_id=self.assigned_employee_id,
            package_id=self.package_id,
            package_line_item_index=self.package_line_item_index,
            total_amount=self.total_amount,
            advance=self.advance,
            received_amount=self.received_amount,
            created_at=self.created_at,
            completed_at=self.completed_at,
        )

    @classmethod
    def from_payload(cls, payload, created_by_id: UUID | None = None) -> "TaskModel":
        """Build a row from an ``agency_batch`` ``TaskPayload``."""
        return cls(
            client_id=payload.client_id,
            client_name=payload.client_name,
            service_id=payload.service_id,
            service_name=payload.service_name,
            task_type=payload.task_type,
            priority=payload.priority.value,
            start_date=payload.start_date,
            deadline=payload.deadline,
            description=payload.description,
            status=payload.status,
            progress=payload.progress,
            assigned_employee_id=payload.assigned_employee_id,
            package_id=payload.package_id,
            package_line_item_index=payload.package_line_item_index,
            total_amount=payload.total_amount,
            advance=payload.advance,
            received_amount=payload.received_amount,
            created_by_id=created_by_id,
        )

    def apply_dto(self, dto) -> None:
        """Overwrite the mutable fields from a ``Task`` DTO."""
        self.client_id = dto.client_id
        self.client_name = dto.client_name
        self.service_id = dto.service_id
        self.service_name = dto.service_name
        self.task_type = dto.task_type
        self.priority = dto.priority.value
        self.start_date = dto.start_date
        self.deadline = dto.deadline
        self.description = dto.description
        self.status = dto.status
        self.progress = dto.progress
        self.assigned_employee_id = dto.assigned_employee_id
        self.package_id = dto.package_id
        self.package_line_item_index = dto.package_line_item_index
        self.total_amount = dto.total_amount
        self.advance = dto.advance
        self.received_amount = dto.received_amount
        self.completed_at = dto.completed_at

    def __repr__(self) -> str:
        return f"<TaskModel {self.service_name} [{self.status}]>"
