"""
Package Billing Service (``agency_modules.packages.service``).

Responsibility
--------------
Orchestrates the package milestone billing lifecycle: creation, editing,
threshold-triggered transitions, payment receipt and its reversal, alert
bookkeeping and deletion.  Pure rules live in
``agency_modules.packages.billing``; persistence goes through
``DocumentStore``; alerts through ``PaymentAlertEmitter``.

Architecture position
---------------------
**Modules layer** -- ``PackageBillingService`` is the sole public entry
point for package billing.  Composes ``agency_services`` (store, emitter,
selector) with the pure billing rules.

Invariants enforced
-------------------
* Validation runs before any write.
* ``received_amount`` always equals the sum of received milestone amounts
  at the time it is written.
* Milestone transitions are monotonic except for the explicit
  ``revert_milestone_receipt`` correction.
* Alert failures never abort a package write.

Failure modes
-------------
* Invalid input  -> ``PackageValidationError`` (nothing persisted).
* Unknown package -> ``PackageNotFoundError``.
* Bad milestone index / transition -> ``MilestoneNotFoundError`` /
  ``InvalidMilestoneTransitionError``.
* Store failure on a package write -> propagated unchanged.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from uuid import UUID

from agency_config.schema import BillingConfig
from agency_kernel.domain.clock import Clock, SystemClock
from agency_kernel.domain.values import MilestoneStatus
from agency_kernel.exceptions import (
    InvalidMilestoneTransitionError,
    MilestoneNotFoundError,
    PackageHasLinkedTasksError,
    PackageNotFoundError,
    PaymentAlertNotFoundError,
)
from agency_kernel.logging_config import LogContext, get_logger
from agency_modules.packages import billing
from agency_modules.packages.models import (
    AlertStatus,
    AlertType,
    LineItem,
    MilestoneSpec,
    Package,
    PackageStatus,
    PaymentAlertEvent,
    PaymentMilestone,
)
from agency_services.alerts import PaymentAlertEmitter
from agency_services.selectors import PackageSelector
from agency_services.store import DocumentStore

logger = get_logger("modules.packages.service")


class PackageBillingService:
    """
    Orchestrates package billing through the document store.

    Contract:
        Each public method reads the current package, applies a pure rule
        from ``billing`` and writes the result back in one store call.
        Payment alerts are emitted after the package write succeeds.

    Non-goals:
        - Does NOT cascade deletes to tasks or alerts.
        - Does NOT cache derived figures; use ``PackageSelector``.
    """

    def __init__(
        self,
        store: DocumentStore,
        emitter: PaymentAlertEmitter | None = None,
        selector: PackageSelector | None = None,
        clock: Clock | None = None,
        config: BillingConfig | None = None,
    ):
        self._clock = clock or SystemClock()
        self._config = config or BillingConfig()
        self._store = store
        self._emitter = emitter or PaymentAlertEmitter(store, self._clock)
        self._selector = selector or PackageSelector(
            store, self._config.terminal_statuses,
        )

    @property
    def selector(self) -> PackageSelector:
        return self._selector

    # =========================================================================
    # Create / edit
    # =========================================================================

    def create_package(
        self,
        client_id: str,
        client_name: str,
        name: str,
        period: str,
        total_amount: int,
        line_items: Sequence[LineItem],
        milestones: Sequence[MilestoneSpec],
    ) -> Package:
        """Create a package; advance milestones are received immediately."""
        billing.validate_package_fields(client_id, name, total_amount)
        billing.validate_milestone_specs(milestones)
        items = billing.clean_line_items(line_items)

        now = self._clock.now()
        built = billing.build_milestones(milestones, total_amount, now)
        package = Package(
            id=None,
            client_id=client_id,
            client_name=client_name,
            name=name.strip(),
            period=period,
            line_items=items,
            total_amount=total_amount,
            received_amount=billing.received_total(built),
            milestones=built,
            status=PackageStatus.ACTIVE,
        )
        package_id = self._store.create_package(package)
        package = replace(package, id=package_id)

        with LogContext.bind(package_id=str(package_id)):
            logger.info(
                "package_created",
                extra={
                    "client_id": client_id,
                    "total_amount": total_amount,
                    "line_items": len(items),
                    "milestones": len(built),
                    "received_amount": package.received_amount,
                },
            )
            for index in billing.newly_announced(built):
                self._announce(package, built[index])
        return package

    def edit_package(
        self,
        package_id: UUID,
        name: str,
        period: str,
        total_amount: int,
        line_items: Sequence[LineItem],
        milestones: Sequence[MilestoneSpec],
    ) -> Package:
        """Edit a package, keeping milestone statuses by position."""
        existing = self._require_package(package_id)
        billing.validate_package_fields(existing.client_id, name, total_amount)
        billing.validate_milestone_specs(milestones)
        items = billing.clean_line_items(line_items)

        now = self._clock.now()
        rebuilt = billing.rebuild_milestones(
            milestones, total_amount, existing.milestones, now,
        )
        rebuilt, received = billing.recalculate_received_amount(
            rebuilt,
            existing.milestones,
            freeze_received=self._config.freeze_received_amounts,
        )
        updated = self._store.update_package(
            package_id,
            {
                "name": name.strip(),
                "period": period,
                "total_amount": total_amount,
                "line_items": items,
                "milestones": rebuilt,
                "received_amount": received,
            },
        )

        with LogContext.bind(package_id=str(package_id)):
            logger.info(
                "package_updated",
                extra={
                    "previous_total": existing.total_amount,
                    "total_amount": total_amount,
                    "previous_received": existing.received_amount,
                    "received_amount": received,
                    "freeze_received_amounts": self._config.freeze_received_amounts,
                },
            )
            for index in billing.newly_announced(rebuilt, len(existing.milestones)):
                self._announce(updated, rebuilt[index])
        return updated

    # =========================================================================
    # Triggering
    # =========================================================================

    def evaluate_milestones(self, package_id: UUID) -> list[PaymentMilestone]:
        """Promote upcoming milestones whose threshold is reached.

        Also refreshes each line item's stored ``completed_count`` and marks
        the package completed once every line item is delivered.

        Returns:
            The milestones that became due in this call.
        """
        package = self._require_package(package_id)
        counts = self._selector.completed_counts(package)
        items = tuple(
            replace(item, completed_count=counts.get(i, 0))
            for i, item in enumerate(package.line_items)
        )
        completed_total = sum(item.completed_count for item in items)

        milestones = list(package.milestones)
        triggered: list[PaymentMilestone] = []
        for index in billing.triggered_indexes(milestones, completed_total):
            milestones[index] = replace(milestones[index], status=MilestoneStatus.DUE)
            triggered.append(milestones[index])

        fields: dict = {"line_items": items, "milestones": tuple(milestones)}
        delivered = bool(items) and all(i.completed_count >= i.quantity for i in items)
        if delivered and package.status is not PackageStatus.COMPLETED:
            fields["status"] = PackageStatus.COMPLETED
            fields["completed_at"] = self._clock.now()

        updated = self._store.update_package(package_id, fields)

        with LogContext.bind(package_id=str(package_id)):
            for milestone in triggered:
                logger.info(
                    "milestone_triggered",
                    extra={
                        "milestone_label": milestone.label,
                        "trigger_at_quantity": milestone.trigger_at_quantity,
                        "completed_units": completed_total,
                        "amount_due": milestone.amount_due,
                    },
                )
                self._announce(updated, milestone)
            if "status" in fields:
                logger.info(
                    "package_completed",
                    extra={"completed_units": completed_total},
                )
        return triggered

    # =========================================================================
    # Payments
    # =========================================================================

    def mark_milestone_received(self, package_id: UUID, index: int) -> Package:
        """Record payment of an outstanding milestone."""
        package = self._require_package(package_id)
        milestone = self._require_milestone(package, index)
        if not milestone.status.is_outstanding:
            raise InvalidMilestoneTransitionError(
                milestone.label, milestone.status.value, MilestoneStatus.RECEIVED.value,
            )

        now = self._clock.now()
        milestones = list(package.milestones)
        milestones[index] = replace(
            milestone, status=MilestoneStatus.RECEIVED, paid_date=now,
        )
        updated = self._store.update_package(
            package_id,
            {
                "milestones": tuple(milestones),
                "received_amount": billing.received_total(milestones),
            },
        )

        with LogContext.bind(package_id=str(package_id)):
            logger.info(
                "milestone_received",
                extra={
                    "milestone_label": milestone.label,
                    "amount": milestone.amount_due,
                    "received_amount": updated.received_amount,
                },
            )
            if self._emitter.resolve(package_id, milestone.label) == 0:
                self._announce(updated, milestones[index])
        return updated

    def revert_milestone_receipt(self, package_id: UUID, index: int) -> Package:
        """Correction: put a received milestone back to due."""
        package = self._require_package(package_id)
        milestone = self._require_milestone(package, index)
        if milestone.status is not MilestoneStatus.RECEIVED:
            raise InvalidMilestoneTransitionError(
                milestone.label, milestone.status.value, MilestoneStatus.DUE.value,
            )

        milestones = list(package.milestones)
        milestones[index] = replace(milestone, status=MilestoneStatus.DUE, paid_date=None)
        updated = self._store.update_package(
            package_id,
            {
                "milestones": tuple(milestones),
                "received_amount": billing.received_total(milestones),
            },
        )

        with LogContext.bind(package_id=str(package_id)):
            logger.warning(
                "milestone_receipt_reverted",
                extra={
                    "milestone_label": milestone.label,
                    "amount": milestone.amount_due,
                    "received_amount": updated.received_amount,
                },
            )
            self._emitter.reopen(package_id, milestone.label)
        return updated

    def set_alert_status(self, alert_id: UUID, status: AlertStatus) -> PaymentAlertEvent:
        """Change an alert's status from the Payments screen.

        ``received`` and ``due`` on a package alert move the milestone too;
        ``pending`` and ``waiting`` only touch the alert.
        """
        status = AlertStatus(status)
        alert = self._store.get_payment_alert(alert_id)
        if alert is None:
            raise PaymentAlertNotFoundError(str(alert_id))

        if alert.alert_type is AlertType.PACKAGE and alert.package_id is not None:
            package = self._store.get_package(alert.package_id)
            index = _milestone_index(package, alert.milestone_label) if package else None
            if index is not None:
                current = package.milestones[index].status
                if status is AlertStatus.RECEIVED and current.is_outstanding:
                    self.mark_milestone_received(package.id, index)
                    return self._store.get_payment_alert(alert_id)
                if status is AlertStatus.DUE and current is MilestoneStatus.RECEIVED:
                    self.revert_milestone_receipt(package.id, index)
                    return self._store.get_payment_alert(alert_id)

        resolved_at = self._clock.now() if status is AlertStatus.RECEIVED else None
        logger.info(
            "payment_alert_status_set",
            extra={
                "alert_id": str(alert_id),
                "from_status": alert.status.value,
                "to_status": status.value,
            },
        )
        return self._store.update_payment_alert(
            alert_id, {"status": status, "resolved_at": resolved_at},
        )

    # =========================================================================
    # Delete
    # =========================================================================

    def delete_package(self, package_id: UUID) -> None:
        """Hard delete.  Linked tasks keep their (now dangling) reference."""
        self._require_package(package_id)
        linked = len(self._store.list_package_tasks(package_id))

        with LogContext.bind(package_id=str(package_id)):
            if linked:
                logger.warning(
                    "package_delete_with_linked_tasks",
                    extra={
                        "linked_tasks": linked,
                        "forbidden": self._config.forbid_delete_with_linked_tasks,
                    },
                )
                if self._config.forbid_delete_with_linked_tasks:
                    raise PackageHasLinkedTasksError(str(package_id), linked)
            self._store.delete_package(package_id)
            logger.info("package_deleted", extra={"linked_tasks": linked})

    # =========================================================================
    # Internal
    # =========================================================================

    def _require_package(self, package_id: UUID) -> Package:
        package = self._store.get_package(package_id)
        if package is None:
            raise PackageNotFoundError(str(package_id))
        return package

    @staticmethod
    def _require_milestone(package: Package, index: int) -> PaymentMilestone:
        if not 0 <= index < len(package.milestones):
            raise MilestoneNotFoundError(str(package.id), index)
        return package.milestones[index]

    def _announce(self, package: Package, milestone: PaymentMilestone) -> UUID | None:
        received = milestone.status is MilestoneStatus.RECEIVED
        now = self._clock.now()
        return self._emitter.emit(
            PaymentAlertEvent(
                alert_type=AlertType.PACKAGE,
                package_id=package.id,
                package_name=package.name,
                client_id=package.client_id,
                client_name=package.client_name,
                milestone_label=milestone.label,
                amount=milestone.amount_due,
                status=AlertStatus.RECEIVED if received else AlertStatus.DUE,
                triggered_at=now,
                resolved_at=now if received else None,
            )
        )


def _milestone_index(package: Package, label: str) -> int | None:
    for index, milestone in enumerate(package.milestones):
        if milestone.label == label:
            return index
    return None
