"""
LineItemQueue -- session-scoped holding area for configured line items.

Contract:
    At most one ``BulkLineItemConfig`` per line-item index, kept in the order
    indexes were first added.  ``add_or_replace`` validates before mutating,
    so a rejected config leaves the queue untouched.

Also provides the draft-editing helpers used while a line item is being
configured (date toggling, holiday list, method switch).  Each returns a
new frozen config.

Architecture: agency_batch/services.  No I/O.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import replace
from datetime import date

from agency_batch.domain.calendar import is_sunday
from agency_batch.domain.plan import validate_config
from agency_batch.domain.types import AllocationPlan, BulkLineItemConfig
from agency_config.schema import SchedulingConfig
from agency_kernel.domain.values import AllocationMethod
from agency_kernel.logging_config import get_logger

logger = get_logger("batch.queue")


class LineItemQueue:
    """Validated line-item configurations awaiting a bulk commit."""

    def __init__(self) -> None:
        self._entries: dict[int, BulkLineItemConfig] = {}

    def add_or_replace(self, config: BulkLineItemConfig) -> AllocationPlan:
        """Validate ``config`` and store it under its line-item index.

        Raises:
            AllocationValidationError: any subclass; the queue is unchanged.
        """
        plan = validate_config(config)
        replaced = config.line_item_index in self._entries
        self._entries[config.line_item_index] = config
        logger.info(
            "queue_item_saved",
            extra={
                "line_item_index": config.line_item_index,
                "service_name": config.service_name,
                "method": config.method.value,
                "units": plan.total_units,
                "replaced": replaced,
            },
        )
        return plan

    def remove(self, line_item_index: int) -> BulkLineItemConfig | None:
        return self._entries.pop(line_item_index, None)

    def get(self, line_item_index: int) -> BulkLineItemConfig | None:
        return self._entries.get(line_item_index)

    def entries(self) -> list[BulkLineItemConfig]:
        return list(self._entries.values())

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, line_item_index: object) -> bool:
        return line_item_index in self._entries

    def __iter__(self) -> Iterator[BulkLineItemConfig]:
        return iter(list(self._entries.values()))


# =============================================================================
# Draft editing helpers
# =============================================================================


def draft_config(
    line_item_index: int,
    service_name: str,
    quantity: int,
    scheduling: SchedulingConfig | None = None,
) -> BulkLineItemConfig:
    """A fresh date-range config seeded with the configured defaults."""
    scheduling = scheduling or SchedulingConfig()
    return BulkLineItemConfig(
        line_item_index=line_item_index,
        service_name=service_name,
        quantity=quantity,
        priority=scheduling.default_priority,
        holidays=scheduling.holidays,
    )


def toggle_date(config: BulkLineItemConfig, day: date) -> BulkLineItemConfig:
    """Add or remove ``day`` from the selection; Sundays are ignored."""
    if is_sunday(day):
        return config
    if day in config.selected_dates:
        selected = tuple(d for d in config.selected_dates if d != day)
    else:
        selected = tuple(sorted((*config.selected_dates, day)))
    return replace(config, selected_dates=selected)


def add_holiday(config: BulkLineItemConfig, day: date) -> BulkLineItemConfig:
    if day in config.holidays:
        return config
    return replace(config, holidays=tuple(sorted((*config.holidays, day))))


def remove_holiday(config: BulkLineItemConfig, day: date) -> BulkLineItemConfig:
    return replace(config, holidays=tuple(d for d in config.holidays if d != day))


def switch_method(
    config: BulkLineItemConfig,
    method: AllocationMethod,
) -> BulkLineItemConfig:
    """Change allocation method; dates and holidays are reset."""
    return replace(
        config,
        method=AllocationMethod(method),
        start_date=None,
        end_date=None,
        holidays=(),
        selected_dates=(),
    )
