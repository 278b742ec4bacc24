"""
Configuration schema (``agency_config.schema``).

Frozen dataclasses describing the runtime configuration.  Parsed from YAML
by ``agency_config.loader``; consumed by services through
``agency_config.get_active_config()``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from agency_kernel.domain.values import Priority, TaskStatus, TERMINAL_TASK_STATUSES


@dataclass(frozen=True)
class SchedulingConfig:
    """Bulk allocation defaults."""

    default_priority: Priority = Priority.MEDIUM
    task_type: str = "Graphic"
    holidays: tuple[date, ...] = ()


@dataclass(frozen=True)
class BillingConfig:
    """Package billing policy switches."""

    terminal_statuses: frozenset[TaskStatus] = TERMINAL_TASK_STATUSES
    standalone_payment_label: str = "Full Payment"
    freeze_received_amounts: bool = False
    forbid_delete_with_linked_tasks: bool = False


@dataclass(frozen=True)
class AgencyConfig:
    """Top-level runtime configuration."""

    database_url: str
    log_level: str = "INFO"
    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    billing: BillingConfig = field(default_factory=BillingConfig)
    checksum: str = ""
