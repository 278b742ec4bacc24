"""
Tests for the line-item queue, draft helpers and the bulk committer.
"""

from datetime import date
from uuid import uuid4

import pytest

from agency_batch.domain.types import BulkLineItemConfig, TaskTemplate
from agency_batch.services.committer import BulkCommitter
from agency_batch.services.queue import (
    LineItemQueue,
    add_holiday,
    draft_config,
    remove_holiday,
    switch_method,
    toggle_date,
)
from agency_config.schema import SchedulingConfig
from agency_kernel.domain.values import AllocationMethod, Priority
from agency_kernel.exceptions import (
    EmptyQueueError,
    MissingAssigneeError,
    UnevenAllocationError,
)
from agency_services.store import SqlAlchemyDocumentStore

MON = date(2026, 2, 2)
TUE = date(2026, 2, 3)
WED = date(2026, 2, 4)
SAT = date(2026, 2, 7)
SUN = date(2026, 2, 8)


def _config(index=0, quantity=6, **overrides):
    fields = dict(
        line_item_index=index,
        service_name="Poster",
        quantity=quantity,
        assigned_employee_id="emp-042",
        description="Poster",
        start_date=MON,
        end_date=SAT,
    )
    fields.update(overrides)
    return BulkLineItemConfig(**fields)


@pytest.fixture
def template():
    return TaskTemplate(client_id="client-001", client_name="Acme Bakery", package_id=uuid4())


class FailingStore(SqlAlchemyDocumentStore):
    """Fails on the N-th ``create_task`` call (1-based)."""

    def __init__(self, session, fail_on: int):
        super().__init__(session)
        self._fail_on = fail_on
        self.calls = 0

    def create_task(self, payload):
        self.calls += 1
        if self.calls == self._fail_on:
            raise ConnectionError("store unavailable")
        return super().create_task(payload)


# =============================================================================
# Queue
# =============================================================================


class TestLineItemQueue:
    def test_add_returns_plan(self):
        queue = LineItemQueue()
        plan = queue.add_or_replace(_config())
        assert plan.total_units == 6
        assert 0 in queue
        assert len(queue) == 1

    def test_replace_keeps_single_entry_per_index(self):
        queue = LineItemQueue()
        queue.add_or_replace(_config(quantity=6))
        queue.add_or_replace(_config(quantity=12))
        assert len(queue) == 1
        assert queue.get(0).quantity == 12

    def test_insertion_order(self):
        queue = LineItemQueue()
        queue.add_or_replace(_config(index=2))
        queue.add_or_replace(_config(index=0))
        queue.add_or_replace(_config(index=2, quantity=12))
        assert [c.line_item_index for c in queue.entries()] == [2, 0]

    def test_rejected_config_leaves_queue_untouched(self):
        queue = LineItemQueue()
        queue.add_or_replace(_config(quantity=6))
        with pytest.raises(UnevenAllocationError):
            queue.add_or_replace(_config(quantity=7))
        with pytest.raises(MissingAssigneeError):
            queue.add_or_replace(_config(assigned_employee_id=None))
        assert queue.get(0).quantity == 6

    def test_remove_and_clear(self):
        queue = LineItemQueue()
        queue.add_or_replace(_config(index=0))
        queue.add_or_replace(_config(index=1))
        assert queue.remove(0).line_item_index == 0
        assert queue.remove(0) is None
        queue.clear()
        assert len(queue) == 0


class TestDraftHelpers:
    def test_draft_uses_configured_defaults(self):
        scheduling = SchedulingConfig(default_priority=Priority.HIGH, holidays=(WED,))
        config = draft_config(3, "Poster", 10, scheduling)
        assert config.priority is Priority.HIGH
        assert config.holidays == (WED,)
        assert config.method is AllocationMethod.DATE_RANGE

    def test_toggle_date(self):
        config = _config(method=AllocationMethod.SPECIFIC_DAYS)
        config = toggle_date(config, WED)
        config = toggle_date(config, MON)
        assert config.selected_dates == (MON, WED)
        assert toggle_date(config, WED).selected_dates == (MON,)

    def test_toggle_sunday_is_a_no_op(self):
        config = _config(method=AllocationMethod.SPECIFIC_DAYS)
        assert toggle_date(config, SUN) is config

    def test_holidays_sorted_and_unique(self):
        config = add_holiday(add_holiday(_config(), WED), TUE)
        assert add_holiday(config, WED).holidays == (TUE, WED)
        assert remove_holiday(config, TUE).holidays == (WED,)

    def test_switch_method_resets_dates(self):
        config = switch_method(_config(holidays=(WED,)), AllocationMethod.SPECIFIC_DAYS)
        assert config.method is AllocationMethod.SPECIFIC_DAYS
        assert config.start_date is None and config.end_date is None
        assert config.holidays == () and config.selected_dates == ()


# =============================================================================
# Commit
# =============================================================================


class TestBulkCommitter:
    def test_empty_queue(self, store, clock, template):
        with pytest.raises(EmptyQueueError):
            BulkCommitter(store, clock).commit_all(LineItemQueue(), template)

    def test_commit_writes_every_unit(self, store, clock, template):
        queue = LineItemQueue()
        queue.add_or_replace(_config(index=0, quantity=6))
        queue.add_or_replace(
            _config(
                index=1,
                quantity=2,
                service_name="Reel",
                description="Reel",
                method=AllocationMethod.SPECIFIC_DAYS,
                selected_dates=(MON, TUE),
            )
        )
        progress = []

        result = BulkCommitter(store, clock).commit_all(
            queue, template, on_progress=lambda cur, total: progress.append((cur, total)),
        )

        assert result.total_units == 8
        assert dict(result.units_by_line_item) == {0: 6, 1: 2}
        assert progress == [(k, 8) for k in range(1, 9)]
        assert len(queue) == 0

        tasks = store.list_package_tasks(template.package_id)
        assert len(tasks) == 8
        reels = [t for t in tasks if t.service_name == "Reel"]
        assert sorted(t.description for t in reels) == ["Reel 1/2", "Reel 2/2"]
        assert {t.package_line_item_index for t in reels} == {1}

    def test_commit_replans_from_config(self, store, clock, template):
        queue = LineItemQueue()
        queue.add_or_replace(_config(quantity=5, holidays=(WED,)))
        result = BulkCommitter(store, clock).commit_all(queue, template)
        assert result.total_units == 6

        tasks = store.list_package_tasks(template.package_id)
        assert not any(t.start_date == WED for t in tasks)
        assert sum(1 for t in tasks if t.start_date == TUE) == 2

    def test_failure_keeps_committed_prefix(self, session, clock, template, captured_logs):
        store = FailingStore(session, fail_on=4)
        queue = LineItemQueue()
        queue.add_or_replace(_config(quantity=6))
        progress = []

        with pytest.raises(ConnectionError):
            BulkCommitter(store, clock).commit_all(
                queue, template, on_progress=lambda cur, total: progress.append(cur),
            )

        tasks = store.list_package_tasks(template.package_id)
        assert [t.description for t in tasks] == ["Poster 1/6", "Poster 2/6", "Poster 3/6"]
        assert progress == [1, 2, 3]
        assert len(queue) == 1

        failure = next(r for r in captured_logs() if r["message"] == "bulk_commit_failed")
        assert failure["committed"] == 3
        assert failure["total_units"] == 6
        assert "batch_id" in failure

    def test_commit_logs_completion(self, store, clock, template, captured_logs):
        queue = LineItemQueue()
        queue.add_or_replace(_config())
        BulkCommitter(store, clock).commit_all(queue, template)
        messages = [r["message"] for r in captured_logs()]
        assert "bulk_commit_started" in messages
        assert "bulk_commit_completed" in messages
        assert messages.count("bulk_commit_progress") == 6
