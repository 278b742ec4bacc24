"""
Configuration Loader (``agency_config.loader``).

Responsibility
--------------
Loads YAML configuration files and parses them into the typed
``agency_config.schema`` dataclasses.  Services never call this directly;
the single public entry point is ``agency_config.get_active_config()``.

Invariants enforced
-------------------
* All parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; no silent defaults for required fields.
* Every parsed object is a frozen dataclass from ``schema.py``.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the merged
  raw configuration.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing ``database_url``  -> ``KeyError``.
* Unknown priority or terminal status  -> ``ValueError``.
* Invalid holiday date  -> ``ValueError`` from ``date.fromisoformat``.
"""

from __future__ import annotations

import hashlib
import json
import os
from collections.abc import Mapping
from datetime import date
from pathlib import Path
from typing import Any

import yaml

from agency_config.schema import AgencyConfig, BillingConfig, SchedulingConfig
from agency_kernel.domain.values import Priority, TaskStatus

ENV_PREFIX = "AGENCY_"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top level is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level must be a mapping, got {type(data).__name__}")
    return data


def merge_dicts(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` onto ``base`` (override wins)."""
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged


def apply_env_overrides(
    data: Mapping[str, Any],
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Apply ``AGENCY_DATABASE_URL`` / ``AGENCY_LOG_LEVEL`` overrides."""
    env = os.environ if environ is None else environ
    result = dict(data)
    for key in ("database_url", "log_level"):
        env_value = env.get(f"{ENV_PREFIX}{key.upper()}")
        if env_value:
            result[key] = env_value
    return result


def parse_date(value: Any) -> date:
    """
    Parse a date from YAML (string or date object).

    Raises:
        ValueError: if ``value`` is not a valid date representation.
    """
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return date.fromisoformat(value)
    raise ValueError(f"Cannot parse date from {value!r}")


def parse_terminal_statuses(values: list[str]) -> frozenset[TaskStatus]:
    """Parse the terminal status list. Unknown statuses are rejected."""
    statuses = set()
    for raw in values:
        status = TaskStatus.parse(raw)
        if status is TaskStatus.UNKNOWN:
            raise ValueError(f"Unknown terminal task status: {raw!r}")
        statuses.add(status)
    if not statuses:
        raise ValueError("billing.terminal_statuses must not be empty")
    return frozenset(statuses)


def parse_scheduling(data: Mapping[str, Any]) -> SchedulingConfig:
    """Parse the ``scheduling`` section."""
    return SchedulingConfig(
        default_priority=Priority.parse(data.get("default_priority")),
        task_type=str(data.get("task_type", "Graphic")),
        holidays=tuple(sorted({parse_date(h) for h in data.get("holidays") or ()})),
    )


def parse_billing(data: Mapping[str, Any]) -> BillingConfig:
    """Parse the ``billing`` section."""
    defaults = BillingConfig()
    raw_terminal = data.get("terminal_statuses")
    return BillingConfig(
        terminal_statuses=(
            parse_terminal_statuses(raw_terminal)
            if raw_terminal is not None
            else defaults.terminal_statuses
        ),
        standalone_payment_label=str(
            data.get("standalone_payment_label", defaults.standalone_payment_label)
        ),
        freeze_received_amounts=bool(data.get("freeze_received_amounts", False)),
        forbid_delete_with_linked_tasks=bool(
            data.get("forbid_delete_with_linked_tasks", False)
        ),
    )


def compute_checksum(data: Mapping[str, Any]) -> str:
    """Deterministic SHA-256 over the canonical JSON form of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def parse_config(data: Mapping[str, Any]) -> AgencyConfig:
    """
    Parse a merged configuration mapping into ``AgencyConfig``.

    Raises:
        KeyError: if ``database_url`` is missing.
        ValueError: on invalid field values.
    """
    return AgencyConfig(
        database_url=data["database_url"],
        log_level=str(data.get("log_level", "INFO")).upper(),
        scheduling=parse_scheduling(data.get("scheduling") or {}),
        billing=parse_billing(data.get("billing") or {}),
        checksum=compute_checksum(data),
    )
