"""
BulkCommitter -- writes every queued line item as individual tasks.

Contract:
    ``commit_all(queue, template, on_progress=None)`` re-derives each
    line item's plan, computes the grand total, then creates one task per
    unit through ``DocumentStore.create_task``, strictly in sequence.

Invariants enforced:
    - Plans are recomputed at commit time; nothing cached on the queue is
      trusted.
    - ``on_progress(current, total)`` is called after every write;
      ``current`` counts across the whole queue.
    - A store failure propagates unchanged.  Tasks already written stay
      written (no retry, no rollback); the queue is kept for inspection.
    - All timestamps from the injected Clock.

Architecture: agency_batch/services.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import replace
from types import MappingProxyType
from uuid import UUID, uuid4

from agency_batch.domain.entries import build_plan_entries
from agency_batch.domain.plan import plan_allocation
from agency_batch.domain.types import BulkCommitResult, TaskPayload, TaskTemplate
from agency_batch.services.queue import LineItemQueue
from agency_kernel.domain.clock import Clock, SystemClock
from agency_kernel.exceptions import EmptyQueueError
from agency_kernel.logging_config import LogContext, get_logger
from agency_services.store import DocumentStore

logger = get_logger("batch.committer")

ProgressCallback = Callable[[int, int], None]


class BulkCommitter:
    """Sequential bulk task writer.

    Non-goals:
        - Does NOT batch or parallelise writes.
        - Does NOT undo a partial commit.
    """

    def __init__(self, store: DocumentStore, clock: Clock | None = None):
        self._store = store
        self._clock = clock or SystemClock()

    def expand(
        self,
        queue: LineItemQueue,
        template: TaskTemplate,
    ) -> list[tuple[int, tuple[TaskPayload, ...]]]:
        """Payloads per line item, re-planned from the queued configs."""
        expanded = []
        for config in queue.entries():
            plan = plan_allocation(config)
            item_template = replace(
                template,
                service_name=config.service_name or template.service_name,
                priority=config.priority,
                assigned_employee_id=config.assigned_employee_id,
                package_line_item_index=config.line_item_index,
            )
            expanded.append(
                (config.line_item_index, build_plan_entries(plan, item_template, config.description))
            )
        return expanded

    def commit_all(
        self,
        queue: LineItemQueue,
        template: TaskTemplate,
        on_progress: ProgressCallback | None = None,
    ) -> BulkCommitResult:
        """Create every queued task.

        Raises:
            EmptyQueueError: nothing queued.
            Any store exception, after the committed prefix is logged.
        """
        if len(queue) == 0:
            raise EmptyQueueError()

        batch_id = str(uuid4())
        with LogContext.bind(
            batch_id=batch_id,
            package_id=str(template.package_id) if template.package_id else None,
        ):
            expanded = self.expand(queue, template)
            total = sum(len(payloads) for _, payloads in expanded)
            started_at = self._clock.now()
            t0 = time.monotonic()

            logger.info(
                "bulk_commit_started",
                extra={
                    "client_id": template.client_id,
                    "line_items": len(expanded),
                    "total_units": total,
                },
            )

            task_ids: list[UUID] = []
            units_by_line_item: dict[int, int] = {}
            current = 0
            for line_item_index, payloads in expanded:
                for payload in payloads:
                    try:
                        task_ids.append(self._store.create_task(payload))
                    except Exception:
                        logger.error(
                            "bulk_commit_failed",
                            extra={
                                "committed": current,
                                "total_units": total,
                                "line_item_index": line_item_index,
                                "start_date": payload.start_date,
                            },
                            exc_info=True,
                        )
                        raise
                    current += 1
                    units_by_line_item[line_item_index] = (
                        units_by_line_item.get(line_item_index, 0) + 1
                    )
                    if on_progress is not None:
                        on_progress(current, total)
                    logger.debug(
                        "bulk_commit_progress",
                        extra={"current": current, "total_units": total},
                    )

            duration_ms = int((time.monotonic() - t0) * 1000)
            queue.clear()
            logger.info(
                "bulk_commit_completed",
                extra={
                    "total_units": total,
                    "units_by_line_item": units_by_line_item,
                    "duration_ms": duration_ms,
                },
            )
            return BulkCommitResult(
                total_units=total,
                task_ids=tuple(task_ids),
                units_by_line_item=MappingProxyType(units_by_line_item),
                started_at=started_at,
                completed_at=self._clock.now(),
                duration_ms=duration_ms,
            )
