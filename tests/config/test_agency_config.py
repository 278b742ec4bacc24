"""
Tests for configuration loading: defaults, override files, environment.
"""

from datetime import date

import pytest

from agency_config import DEFAULTS_PATH, get_active_config
from agency_config.loader import (
    apply_env_overrides,
    compute_checksum,
    load_yaml_file,
    merge_dicts,
    parse_billing,
    parse_config,
    parse_scheduling,
    parse_terminal_statuses,
)
from agency_kernel.domain.values import Priority, TaskStatus


# =============================================================================
# Defaults
# =============================================================================


class TestDefaults:
    def test_defaults_file_parses(self):
        config = get_active_config(environ={})
        assert config.database_url.startswith("postgresql://")
        assert config.log_level == "INFO"
        assert config.scheduling.default_priority is Priority.MEDIUM
        assert config.scheduling.task_type == "Graphic"
        assert config.billing.standalone_payment_label == "Full Payment"
        assert config.billing.freeze_received_amounts is False
        assert config.billing.forbid_delete_with_linked_tasks is False
        assert config.billing.terminal_statuses == {
            TaskStatus.FINISHED,
            TaskStatus.COMPLETED,
            TaskStatus.CLOSED,
        }

    def test_load_logs_checksum(self, captured_logs):
        config = get_active_config(environ={})
        record = next(r for r in captured_logs() if r["message"] == "agency_config_loaded")
        assert record["checksum"] == config.checksum


# =============================================================================
# Overrides
# =============================================================================


class TestOverrides:
    def test_override_file_wins(self, tmp_path):
        override = tmp_path / "site.yaml"
        override.write_text(
            "scheduling:\n"
            "  holidays: ['2026-03-10', '2026-03-05', '2026-03-10']\n"
            "billing:\n"
            "  freeze_received_amounts: true\n"
        )
        config = get_active_config(override, environ={})
        assert config.scheduling.holidays == (date(2026, 3, 5), date(2026, 3, 10))
        assert config.billing.freeze_received_amounts is True
        # Untouched keys keep their defaults after the deep merge.
        assert config.billing.standalone_payment_label == "Full Payment"

    def test_environment_overrides(self):
        config = get_active_config(
            environ={
                "AGENCY_DATABASE_URL": "sqlite:///:memory:",
                "AGENCY_LOG_LEVEL": "debug",
            }
        )
        assert config.database_url == "sqlite:///:memory:"
        assert config.log_level == "DEBUG"

    def test_empty_env_value_is_ignored(self):
        data = apply_env_overrides({"database_url": "x"}, {"AGENCY_DATABASE_URL": ""})
        assert data["database_url"] == "x"

    def test_missing_override_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "nope.yaml", environ={})


# =============================================================================
# Parsing
# =============================================================================


class TestParsing:
    def test_merge_is_recursive(self):
        merged = merge_dicts({"a": {"b": 1, "c": 2}}, {"a": {"c": 3}})
        assert merged == {"a": {"b": 1, "c": 3}}

    def test_missing_database_url(self):
        with pytest.raises(KeyError):
            parse_config({"log_level": "INFO"})

    def test_unknown_terminal_status_rejected(self):
        with pytest.raises(ValueError, match="Unknown terminal task status"):
            parse_terminal_statuses(["Finished", "Shipped"])

    def test_empty_terminal_status_list_rejected(self):
        with pytest.raises(ValueError, match="must not be empty"):
            parse_billing({"terminal_statuses": []})

    def test_unknown_priority_rejected(self):
        with pytest.raises(ValueError):
            parse_scheduling({"default_priority": "Whenever"})

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ValueError, match="top level must be a mapping"):
            load_yaml_file(path)

    def test_checksum_is_order_independent(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})

    def test_defaults_path_exists(self):
        assert DEFAULTS_PATH.is_file()
