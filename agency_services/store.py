"""
Document store (``agency_services.store``).

Responsibility
--------------
The persistence seam for every agency workflow.  ``DocumentStore`` is the
protocol services depend on; ``SqlAlchemyDocumentStore`` implements it over
the ORM models in ``agency_modules.*.orm``.

Architecture position
---------------------
**Services layer** -- may import ``agency_modules.*.models`` and
``agency_modules.*.orm``; MUST NOT import module services.

Invariants enforced
-------------------
* Every write commits immediately; a failed write rolls back only itself
  and re-raises.  Earlier writes stay committed.
* Reads return frozen DTOs, never live ORM objects.
* ``get_*`` returns ``None`` for unknown ids; ``update_*`` and ``delete_*``
  raise the matching ``*NotFoundError``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import replace
from typing import Any, Protocol, runtime_checkable
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from agency_kernel.exceptions import (
    PackageNotFoundError,
    PaymentAlertNotFoundError,
    TaskNotFoundError,
)
from agency_kernel.logging_config import get_logger
from agency_modules.packages.models import AlertStatus, Package, PaymentAlertEvent
from agency_modules.packages.orm import PackageModel, PaymentAlertModel
from agency_modules.tasks.models import Task
from agency_modules.tasks.orm import TaskModel

logger = get_logger("services.store")


@runtime_checkable
class DocumentStore(Protocol):
    """Minimal document-store contract used by the agency services."""

    # Tasks
    def create_task(self, payload: Any) -> UUID: ...

    def get_task(self, task_id: UUID) -> Task | None: ...

    def update_task(self, task_id: UUID, fields: Mapping[str, Any]) -> Task: ...

    def list_package_tasks(self, package_id: UUID) -> list[Task]: ...

    # Packages
    def create_package(self, package: Package) -> UUID: ...

    def get_package(self, package_id: UUID) -> Package | None: ...

    def update_package(self, package_id: UUID, fields: Mapping[str, Any]) -> Package: ...

    def delete_package(self, package_id: UUID) -> None: ...

    # Payment alerts
    def create_payment_alert_event(self, event: PaymentAlertEvent) -> UUID: ...

    def update_payment_alert(
        self, alert_id: UUID, fields: Mapping[str, Any],
    ) -> PaymentAlertEvent: ...

    def find_payment_alerts(
        self,
        package_id: UUID,
        milestone_label: str,
        statuses: Iterable[AlertStatus] | None = None,
    ) -> list[PaymentAlertEvent]: ...

    def get_payment_alert(self, alert_id: UUID) -> PaymentAlertEvent | None: ...


class SqlAlchemyDocumentStore:
    """``DocumentStore`` over a SQLAlchemy session.

    The session is owned by the caller; this class only commits and rolls
    back around its own writes.
    """

    def __init__(self, session: Session, actor_id: UUID | None = None):
        self._session = session
        self._actor_id = actor_id

    # =========================================================================
    # Tasks
    # =========================================================================

    def create_task(self, payload: Any) -> UUID:
        model = TaskModel.from_payload(payload, created_by_id=self._actor_id)
        self._write(model)
        return model.id

    def get_task(self, task_id: UUID) -> Task | None:
        model = self._session.get(TaskModel, task_id)
        return model.to_dto() if model is not None else None

    def update_task(self, task_id: UUID, fields: Mapping[str, Any]) -> Task:
        model = self._session.get(TaskModel, task_id)
        if model is None:
            raise TaskNotFoundError(str(task_id))
        updated = replace(model.to_dto(), **fields)
        model.apply_dto(updated)
        model.updated_by_id = self._actor_id
        self._write(model)
        return model.to_dto()

    def list_package_tasks(self, package_id: UUID) -> list[Task]:
        rows = self._session.scalars(
            select(TaskModel)
            .where(TaskModel.package_id == package_id)
            .order_by(TaskModel.start_date, TaskModel.created_at)
        )
        return [row.to_dto() for row in rows]

    # =========================================================================
    # Packages
    # =========================================================================

    def create_package(self, package: Package) -> UUID:
        model = PackageModel.from_dto(package, created_by_id=self._actor_id)
        self._write(model)
        return model.id

    def get_package(self, package_id: UUID) -> Package | None:
        model = self._session.get(PackageModel, package_id)
        return model.to_dto() if model is not None else None

    def update_package(self, package_id: UUID, fields: Mapping[str, Any]) -> Package:
        model = self._session.get(PackageModel, package_id)
        if model is None:
            raise PackageNotFoundError(str(package_id))
        model.apply_dto(replace(model.to_dto(), **fields))
        model.updated_by_id = self._actor_id
        self._write(model)
        return model.to_dto()

    def delete_package(self, package_id: UUID) -> None:
        model = self._session.get(PackageModel, package_id)
        if model is None:
            raise PackageNotFoundError(str(package_id))
        try:
            self._session.delete(model)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

    # =========================================================================
    # Payment alerts
    # =========================================================================

    def create_payment_alert_event(self, event: PaymentAlertEvent) -> UUID:
        model = PaymentAlertModel.from_dto(event, created_by_id=self._actor_id)
        self._write(model)
        return model.id

    def update_payment_alert(
        self, alert_id: UUID, fields: Mapping[str, Any],
    ) -> PaymentAlertEvent:
        model = self._session.get(PaymentAlertModel, alert_id)
        if model is None:
            raise PaymentAlertNotFoundError(str(alert_id))
        updated = replace(model.to_dto(), **fields)
        model.status = updated.status.value
        model.amount = updated.amount
        model.resolved_at = updated.resolved_at
        model.updated_by_id = self._actor_id
        self._write(model)
        return model.to_dto()

    def find_payment_alerts(
        self,
        package_id: UUID,
        milestone_label: str,
        statuses: Iterable[AlertStatus] | None = None,
    ) -> list[PaymentAlertEvent]:
        stmt = select(PaymentAlertModel).where(
            PaymentAlertModel.package_id == package_id,
            PaymentAlertModel.milestone_label == milestone_label,
        )
        if statuses is not None:
            stmt = stmt.where(
                PaymentAlertModel.status.in_([AlertStatus(s).value for s in statuses])
            )
        stmt = stmt.order_by(PaymentAlertModel.triggered_at)
        return [row.to_dto() for row in self._session.scalars(stmt)]

    def get_payment_alert(self, alert_id: UUID) -> PaymentAlertEvent | None:
        model = self._session.get(PaymentAlertModel, alert_id)
        return model.to_dto() if model is not None else None

    # =========================================================================
    # Internal
    # =========================================================================

    def _write(self, model: Any) -> None:
        try:
            self._session.add(model)
            self._session.commit()
        except Exception:
            self._session.rollback()
            logger.error(
                "store_write_failed",
                extra={"model": type(model).__name__},
            )
            raise
        self._session.refresh(model)
