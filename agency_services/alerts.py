"""
Payment Alert Emitter (``agency_services.alerts``).

Records due/received events for the Payments screen.  Alert writes are
best-effort: a failure is logged as ``payment_alert_failed`` and swallowed,
so the package or task update that triggered it stands regardless.
"""

from __future__ import annotations

from uuid import UUID

from agency_kernel.domain.clock import Clock, SystemClock
from agency_kernel.logging_config import get_logger
from agency_modules.packages.models import AlertStatus, PaymentAlertEvent
from agency_services.store import DocumentStore

logger = get_logger("services.alerts")


class PaymentAlertEmitter:
    """Best-effort writer of ``PaymentAlertEvent`` records."""

    def __init__(self, store: DocumentStore, clock: Clock | None = None):
        self._store = store
        self._clock = clock or SystemClock()

    def emit(self, event: PaymentAlertEvent) -> UUID | None:
        """Persist ``event``; returns its id, or ``None`` when the write failed."""
        try:
            alert_id = self._store.create_payment_alert_event(event)
        except Exception as exc:
            self._log_failure("emit", exc, event.package_id, event.milestone_label)
            return None
        logger.info(
            "payment_alert_emitted",
            extra={
                "alert_id": str(alert_id),
                "alert_type": event.alert_type.value,
                "package_id": str(event.package_id) if event.package_id else None,
                "task_id": str(event.task_id) if event.task_id else None,
                "milestone_label": event.milestone_label,
                "status": event.status.value,
                "amount": event.amount,
            },
        )
        return alert_id

    def resolve(self, package_id: UUID, milestone_label: str) -> int:
        """Mark every open alert for the milestone as received.

        Returns the number of alerts updated (0 on failure).
        """
        now = self._clock.now()
        return self._transition(
            package_id,
            milestone_label,
            from_statuses=tuple(s for s in AlertStatus if s.is_open),
            fields={"status": AlertStatus.RECEIVED, "resolved_at": now},
            operation="resolve",
        )

    def reopen(self, package_id: UUID, milestone_label: str) -> int:
        """Undo a receipt: received alerts for the milestone go back to due."""
        return self._transition(
            package_id,
            milestone_label,
            from_statuses=(AlertStatus.RECEIVED,),
            fields={"status": AlertStatus.DUE, "resolved_at": None},
            operation="reopen",
        )

    def set_status(self, alert_id: UUID, status: AlertStatus) -> PaymentAlertEvent | None:
        """Bookkeeping status change on a single alert."""
        fields: dict = {"status": status}
        fields["resolved_at"] = self._clock.now() if status is AlertStatus.RECEIVED else None
        try:
            return self._store.update_payment_alert(alert_id, fields)
        except Exception as exc:
            self._log_failure("set_status", exc, None, None, alert_id=alert_id)
            return None

    def _transition(
        self,
        package_id: UUID,
        milestone_label: str,
        from_statuses: tuple[AlertStatus, ...],
        fields: dict,
        operation: str,
    ) -> int:
        try:
            alerts = self._store.find_payment_alerts(
                package_id, milestone_label, from_statuses,
            )
            for alert in alerts:
                self._store.update_payment_alert(alert.id, fields)
        except Exception as exc:
            self._log_failure(operation, exc, package_id, milestone_label)
            return 0
        return len(alerts)

    @staticmethod
    def _log_failure(
        operation: str,
        exc: Exception,
        package_id: UUID | None,
        milestone_label: str | None,
        alert_id: UUID | None = None,
    ) -> None:
        logger.warning(
            "payment_alert_failed",
            extra={
                "operation": operation,
                "package_id": str(package_id) if package_id else None,
                "milestone_label": milestone_label,
                "alert_id": str(alert_id) if alert_id else None,
                "error_type": type(exc).__name__,
                "error": str(exc),
            },
        )
