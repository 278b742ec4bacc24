"""
Package Billing Domain Models (``agency_modules.packages.models``).

Responsibility
--------------
Frozen dataclass value objects for service packages: line items, payment
milestones, the package itself and the payment-alert events emitted when a
milestone becomes due or is received.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Consumed by
``PackageBillingService`` and ``agency_services``.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* Amounts are whole currency units (``int``); percentages are ``Decimal``.
* ``Package.received_amount`` is a cached figure; the billing rules always
  recompute it from the received milestones before persisting.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from uuid import UUID

from agency_kernel.domain.values import MilestoneStatus


class PackageStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"
    PAUSED = "paused"


class AlertStatus(str, Enum):
    RECEIVED = "received"
    DUE = "due"
    PENDING = "pending"
    WAITING = "waiting"

    @property
    def is_open(self) -> bool:
        return self is not AlertStatus.RECEIVED


class AlertType(str, Enum):
    PACKAGE = "package"
    STANDALONE = "standalone"


@dataclass(frozen=True)
class LineItem:
    """One service within a package."""
    service_name: str
    quantity: int
    completed_count: int = 0  # Stored snapshot only; display uses the live count


@dataclass(frozen=True)
class MilestoneSpec:
    """Milestone as entered on the create/edit form."""
    label: str
    percentage: Decimal
    trigger_at_quantity: int = 0
    is_advance: bool = False


@dataclass(frozen=True)
class PaymentMilestone:
    """A payment checkpoint of a package."""
    label: str
    percentage: Decimal
    amount_due: int
    trigger_at_quantity: int = 0
    status: MilestoneStatus = MilestoneStatus.UPCOMING
    paid_date: datetime | None = None


@dataclass(frozen=True)
class Package:
    """A bundle of service units sold to one client with a staged payment plan."""
    id: UUID | None
    client_id: str
    client_name: str
    name: str
    period: str
    line_items: tuple[LineItem, ...]
    total_amount: int
    received_amount: int
    milestones: tuple[PaymentMilestone, ...]
    status: PackageStatus = PackageStatus.ACTIVE
    created_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def total_quantity(self) -> int:
        return sum(li.quantity for li in self.line_items)

    @property
    def balance(self) -> int:
        return self.total_amount - self.received_amount


@dataclass(frozen=True)
class PaymentAlertEvent:
    """A due/received financial event recorded for the Payments screen."""
    client_id: str
    client_name: str
    milestone_label: str
    amount: int
    status: AlertStatus
    triggered_at: datetime
    alert_type: AlertType = AlertType.PACKAGE
    resolved_at: datetime | None = None
    package_id: UUID | None = None
    package_name: str | None = None
    task_id: UUID | None = None
    task_name: str | None = None
    id: UUID | None = None
