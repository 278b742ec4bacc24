"""
Task Service (``agency_modules.tasks.service``).

Status updates from the employee panel.  Moving a task into a terminal
status completes it (progress 100, ``completed_at``, full amount received)
and then either re-evaluates the linked package's milestones or, for a
task outside any package, records a standalone "Full Payment" alert.
"""

from __future__ import annotations

from uuid import UUID

from agency_config.schema import BillingConfig
from agency_kernel.domain.clock import Clock, SystemClock
from agency_kernel.domain.values import TaskStatus
from agency_kernel.exceptions import PackageNotFoundError, TaskNotFoundError
from agency_kernel.logging_config import get_logger
from agency_modules.packages.models import AlertStatus, AlertType, PaymentAlertEvent
from agency_modules.packages.service import PackageBillingService
from agency_modules.tasks.models import Task
from agency_services.alerts import PaymentAlertEmitter
from agency_services.store import DocumentStore

logger = get_logger("modules.tasks.service")


class TaskService:
    """Task status transitions and their billing side effects."""

    def __init__(
        self,
        store: DocumentStore,
        billing_service: PackageBillingService | None = None,
        emitter: PaymentAlertEmitter | None = None,
        clock: Clock | None = None,
        config: BillingConfig | None = None,
    ):
        self._store = store
        self._clock = clock or SystemClock()
        self._config = config or BillingConfig()
        self._emitter = emitter or PaymentAlertEmitter(store, self._clock)
        self._billing = billing_service or PackageBillingService(
            store, self._emitter, clock=self._clock, config=self._config,
        )

    def is_terminal(self, status: str | TaskStatus) -> bool:
        return TaskStatus.parse(status) in self._config.terminal_statuses

    def update_status(self, task_id: UUID, new_status: str | TaskStatus) -> Task:
        """Persist ``new_status``; complete the task when it is terminal."""
        task = self._store.get_task(task_id)
        if task is None:
            raise TaskNotFoundError(str(task_id))

        raw = new_status.value if isinstance(new_status, TaskStatus) else new_status
        fields: dict = {"status": raw}
        terminal = self.is_terminal(raw)
        # Re-completing an already terminal task must not re-announce payment.
        newly_completed = terminal and not self.is_terminal(task.status)
        if terminal:
            fields["progress"] = 100
            fields["received_amount"] = task.total_amount
            if newly_completed or task.completed_at is None:
                fields["completed_at"] = self._clock.now()

        updated = self._store.update_task(task_id, fields)
        logger.info(
            "task_status_updated",
            extra={
                "task_id": str(task_id),
                "from_status": task.status,
                "to_status": raw,
                "status_kind": TaskStatus.parse(raw).value,
                "terminal": terminal,
            },
        )

        if updated.package_id is not None:
            self._evaluate_package(updated)
        elif newly_completed and updated.total_amount > 0:
            self._emit_full_payment(updated)
        return updated

    def _evaluate_package(self, task: Task) -> None:
        try:
            self._billing.evaluate_milestones(task.package_id)
        except PackageNotFoundError:
            logger.warning(
                "task_package_missing",
                extra={
                    "task_id": str(task.id),
                    "package_id": str(task.package_id),
                },
            )

    def _emit_full_payment(self, task: Task) -> None:
        now = self._clock.now()
        self._emitter.emit(
            PaymentAlertEvent(
                alert_type=AlertType.STANDALONE,
                task_id=task.id,
                task_name=task.service_name or task.description,
                client_id=task.client_id,
                client_name=task.client_name,
                milestone_label=self._config.standalone_payment_label,
                amount=task.total_amount,
                status=AlertStatus.RECEIVED,
                triggered_at=now,
                resolved_at=now,
            )
        )
