"""
Package read selectors (``agency_services.selectors``).

Derived figures are recomputed from live task state on every call and never
cached.  A task counts as delivered when its status is in the configured
terminal set; unrecognised statuses parse to ``TaskStatus.UNKNOWN`` and
never count.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from agency_kernel.domain.values import (
    TERMINAL_TASK_STATUSES,
    MilestoneStatus,
    TaskStatus,
)
from agency_modules.packages.models import LineItem, Package
from agency_modules.tasks.models import Task
from agency_services.store import DocumentStore


@dataclass(frozen=True)
class LineItemRef:
    """A task's resolved package line item."""
    package: Package
    index: int
    line_item: LineItem


@dataclass(frozen=True)
class MilestoneSummary:
    total_amount: int
    received_amount: int
    balance: int
    received_count: int
    outstanding_count: int  # due plus legacy pending/waiting
    upcoming_count: int


class PackageSelector:
    """Read-side queries over packages and their linked tasks."""

    def __init__(
        self,
        store: DocumentStore,
        terminal_statuses: Iterable[TaskStatus] = TERMINAL_TASK_STATUSES,
    ):
        self._store = store
        self._terminal = frozenset(terminal_statuses)

    def is_delivered(self, task: Task) -> bool:
        return task.status_kind in self._terminal

    def completed_counts(self, package: Package) -> dict[int, int]:
        """Delivered task count per line-item index."""
        counts: Counter[int] = Counter()
        for task in self._store.list_package_tasks(package.id):
            if task.package_line_item_index is not None and self.is_delivered(task):
                counts[task.package_line_item_index] += 1
        return dict(counts)

    def line_item_completed_count(self, package: Package, index: int) -> int:
        return self.completed_counts(package).get(index, 0)

    def package_completed_total(self, package: Package) -> int:
        """Delivered units summed over the package line items."""
        counts = self.completed_counts(package)
        return sum(counts.get(i, 0) for i in range(len(package.line_items)))

    def package_progress_percent(self, package: Package) -> int:
        """``round(100 * done / total_qty)``; 0 for an empty package."""
        total_qty = package.total_quantity
        if total_qty <= 0:
            return 0
        done = self.package_completed_total(package)
        pct = Decimal(100 * done) / Decimal(total_qty)
        return int(pct.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    @staticmethod
    def balance(package: Package) -> int:
        return package.total_amount - package.received_amount

    @staticmethod
    def milestone_summary(package: Package) -> MilestoneSummary:
        statuses = [m.status for m in package.milestones]
        return MilestoneSummary(
            total_amount=package.total_amount,
            received_amount=package.received_amount,
            balance=package.total_amount - package.received_amount,
            received_count=statuses.count(MilestoneStatus.RECEIVED),
            outstanding_count=sum(1 for s in statuses if s.is_outstanding),
            upcoming_count=statuses.count(MilestoneStatus.UPCOMING),
        )

    def resolve_line_item(self, task: Task) -> LineItemRef | None:
        """The line item a task was generated for; ``None`` if the link dangles."""
        if task.package_id is None or task.package_line_item_index is None:
            return None
        package = self._store.get_package(task.package_id)
        if package is None:
            return None
        index = task.package_line_item_index
        if not 0 <= index < len(package.line_items):
            return None
        return LineItemRef(package=package, index=index, line_item=package.line_items[index])
