"""
SQLAlchemy ORM persistence models for the Service Packages module.

Responsibility
--------------
Persist packages as documents: line items and milestones are embedded JSON
arrays on the package row, mirroring how the dashboard reads and writes
them.  Payment alert events get their own table.

Architecture position
---------------------
**Modules layer** -- ORM models consumed by ``SqlAlchemyDocumentStore``.
Inherits from ``TrackedBase`` (kernel db layer).

Invariants enforced
-------------------
* Amounts are whole currency units (BigInteger).
* Percentages are serialized as strings inside the JSON so that
  ``Decimal`` values survive the round trip exactly.
* Enum fields stored as String(50).
* ``PaymentAlertModel.package_id`` / ``task_id`` are weak references
  (no foreign key): deleting a package leaves its alerts in place.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from agency_kernel.db.base import TrackedBase, UUIDString
from agency_kernel.domain.values import MilestoneStatus


def _line_item_to_json(item) -> dict[str, Any]:
    return {
        "service_name": item.service_name,
        "quantity": item.quantity,
        "completed_count": item.completed_count,
    }


def _line_item_from_json(data: dict[str, Any]):
    from agency_modules.packages.models import LineItem

    return LineItem(
        service_name=data["service_name"],
        quantity=int(data["quantity"]),
        completed_count=int(data.get("completed_count", 0)),
    )


def _milestone_to_json(milestone) -> dict[str, Any]:
    return {
        "label": milestone.label,
        "percentage": str(milestone.percentage),
        "amount_due": milestone.amount_due,
        "trigger_at_quantity": milestone.trigger_at_quantity,
        "status": milestone.status.value,
        "paid_date": milestone.paid_date.isoformat() if milestone.paid_date else None,
    }


def _milestone_from_json(data: dict[str, Any]):
    from agency_modules.packages.models import PaymentMilestone

    paid = data.get("paid_date")
    return PaymentMilestone(
        label=data["label"],
        percentage=Decimal(str(data["percentage"])),
        amount_due=int(data["amount_due"]),
        trigger_at_quantity=int(data.get("trigger_at_quantity", 0)),
        status=MilestoneStatus(data.get("status", MilestoneStatus.UPCOMING.value)),
        paid_date=datetime.fromisoformat(paid) if paid else None,
    )


# ---------------------------------------------------------------------------
# PackageModel
# ---------------------------------------------------------------------------


class PackageModel(TrackedBase):
    """
    A service package with embedded line items and milestones.

    Maps to the ``Package`` DTO in ``agency_modules.packages.models``.
    """

    __tablename__ = "agency_packages"

    __table_args__ = (
        Index("idx_package_client", "client_id"),
        Index("idx_package_status", "status"),
    )

    client_id: Mapped[str] = mapped_column(String(100), nullable=False)
    client_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    period: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    line_items: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    total_amount: Mapped[int] = mapped_column(nullable=False, default=0)
    received_amount: Mapped[int] = mapped_column(nullable=False, default=0)
    milestones: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    status: Mapped[str] = mapped_column(String(50), nullable=False, default="active")
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def to_dto(self):
        from agency_modules.packages.models import Package, PackageStatus

        return Package(
            id=self.id,
            client_id=self.client_id,
            client_name=self.client_name,
            name=self.name,
            period=self.period,
            line_items=tuple(_line_item_from_json(d) for d in self.line_items or ()),
            total_amount=self.total_amount,
            received_amount=self.received_amount,
            milestones=tuple(_milestone_from_json(d) for d in self.milestones or ()),
            status=PackageStatus(self.status),
            created_at=self.created_at,
            completed_at=self.completed_at,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID | None = None) -> "PackageModel":
        model = cls(created_by_id=created_by_id)
        if dto.id is not None:
            model.id = dto.id
        model.apply_dto(dto)
        return model

    def apply_dto(self, dto) -> None:
        """Overwrite every document field from ``dto`` (id excluded)."""
        self.client_id = dto.client_id
        self.client_name = dto.client_name
        self.name = dto.name
        self.period = dto.period
        self.line_items = [_line_item_to_json(li) for li in dto.line_items]
        self.total_amount = dto.total_amount
        self.received_amount = dto.received_amount
        self.milestones = [_milestone_to_json(m) for m in dto.milestones]
        self.status = dto.status.value
        self.completed_at = dto.completed_at

    def __repr__(self) -> str:
        return f"<PackageModel {self.name} [{self.status}]>"


# ---------------------------------------------------------------------------
# PaymentAlertModel
# ---------------------------------------------------------------------------


class PaymentAlertModel(TrackedBase):
    """
    A payment alert event shown on the Payments screen.

    Maps to the ``PaymentAlertEvent`` DTO.
    """

    __tablename__ = "agency_payment_alerts"

    __table_args__ = (
        Index("idx_alert_package_label", "package_id", "milestone_label"),
        Index("idx_alert_status", "status"),
    )

    alert_type: Mapped[str] = mapped_column(String(50), nullable=False, default="package")
    package_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    package_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    task_id: Mapped[UUID | None] = mapped_column(UUIDString(), nullable=True)
    task_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    client_id: Mapped[str] = mapped_column(String(100), nullable=False)
    client_name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    milestone_label: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[int] = mapped_column(nullable=False, default=0)
    status: Mapped[str] = mapped_column(String(50), nullable=False)
    triggered_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    resolved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def to_dto(self):
        from agency_modules.packages.models import AlertStatus, AlertType, PaymentAlertEvent

        return PaymentAlertEvent(
            id=self.id,
            alert_type=AlertType(self.alert_type),
            package_id=self.package_id,
            package_name=self.package_name,
            task_id=self.task_id,
            task_name=self.task_name,
            client_id=self.client_id,
            client_name=self.client_name,
            milestone_label=self.milestone_label,
            amount=self.amount,
            status=AlertStatus(self.status),
            triggered_at=self.triggered_at,
            resolved_at=self.resolved_at,
        )

    @classmethod
    def from_dto(cls, dto, created_by_id: UUID | None = None) -> "PaymentAlertModel":
        model = cls(
            alert_type=dto.alert_type.value,
            package_id=dto.package_id,
            package_name=dto.package_name,
            task_id=dto.task_id,
            task_name=dto.task_name,
            client_id=dto.client_id,
            client_name=dto.client_name,
            milestone_label=dto.milestone_label,
            amount=dto.amount,
            status=dto.status.value,
            triggered_at=dto.triggered_at,
            resolved_at=dto.resolved_at,
            created_by_id=created_by_id,
        )
        if dto.id is not None:
            model.id = dto.id
        return model

    def __repr__(self) -> str:
        return f"<PaymentAlertModel {self.milestone_label} [{self.status}]>"
