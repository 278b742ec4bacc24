"""
Bulk entry builder (pure).

Contract:
    ``build_entries`` expands a day plan into one ``TaskPayload`` per unit.
    Numbering is global across the whole date sequence: entry ``k`` of
    ``N`` is described as ``"<text> k/N"`` (``"Entry k/N"`` without text).

Architecture: agency_batch/domain.  ZERO I/O.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date

from agency_batch.domain.types import AllocationPlan, TaskPayload, TaskTemplate

DEFAULT_ENTRY_LABEL = "Entry"


def describe_unit(description_text: str, k: int, total: int) -> str:
    text = description_text.strip()
    return f"{text or DEFAULT_ENTRY_LABEL} {k}/{total}"


def build_entries(
    dates: Sequence[date],
    base_units_per_day: int,
    extra_map: Mapping[date, int],
    template: TaskTemplate,
    total_unit_count: int,
    description_text: str = "",
) -> tuple[TaskPayload, ...]:
    """One payload per production unit, in date order."""
    entries: list[TaskPayload] = []
    counter = 1
    for day in dates:
        day_count = base_units_per_day + extra_map.get(day, 0)
        for _ in range(day_count):
            entries.append(
                TaskPayload(
                    client_id=template.client_id,
                    service_id=template.service_id,
                    client_name=template.client_name,
                    service_name=template.service_name,
                    task_type=template.task_type,
                    priority=template.priority,
                    start_date=day,
                    deadline=day,
                    description=describe_unit(description_text, counter, total_unit_count),
                    assigned_employee_id=template.assigned_employee_id,
                    package_id=template.package_id,
                    package_line_item_index=(
                        template.package_line_item_index
                        if template.package_id is not None
                        else None
                    ),
                )
            )
            counter += 1
    return tuple(entries)


def build_plan_entries(
    plan: AllocationPlan,
    template: TaskTemplate,
    description_text: str = "",
) -> tuple[TaskPayload, ...]:
    """Expand an ``AllocationPlan``; the denominator is the plan's total."""
    return build_entries(
        plan.dates,
        plan.base_units_per_day,
        plan.extras,
        template,
        plan.total_units,
        description_text,
    )
