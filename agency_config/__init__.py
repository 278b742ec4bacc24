"""
agency_config -- single public entrypoint for runtime configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  No other component reads configuration files
    or environment variables directly.

Resolution order (later wins):
    1. ``agency_config/defaults.yaml`` shipped with the package
    2. An optional override YAML file passed by the caller
    3. ``AGENCY_DATABASE_URL`` / ``AGENCY_LOG_LEVEL`` environment variables

Failure modes:
    - ``FileNotFoundError`` -- override file does not exist.
    - ``ValueError`` / ``KeyError`` -- schema validation failures.

Audit relevance:
    Every successful ``get_active_config()`` call emits an
    ``agency_config_loaded`` log entry carrying the configuration checksum.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path

from agency_config.loader import (
    apply_env_overrides,
    load_yaml_file,
    merge_dicts,
    parse_config,
)
from agency_config.schema import AgencyConfig, BillingConfig, SchedulingConfig
from agency_kernel.logging_config import get_logger

_logger = get_logger("config")

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"

__all__ = [
    "AgencyConfig",
    "BillingConfig",
    "SchedulingConfig",
    "get_active_config",
]


def get_active_config(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> AgencyConfig:
    """The ONLY public configuration entrypoint.

    Args:
        path: Optional YAML file whose values override the defaults.
        environ: Environment mapping (defaults to ``os.environ``).

    Returns:
        Frozen ``AgencyConfig``.
    """
    data = load_yaml_file(DEFAULTS_PATH)
    if path is not None:
        data = merge_dicts(data, load_yaml_file(path))
    data = apply_env_overrides(data, environ)

    config = parse_config(data)
    _logger.info(
        "agency_config_loaded",
        extra={
            "override_path": str(path) if path else None,
            "checksum": config.checksum,
            "freeze_received_amounts": config.billing.freeze_received_amounts,
            "forbid_delete_with_linked_tasks": (
                config.billing.forbid_delete_with_linked_tasks
            ),
        },
    )
    return config
