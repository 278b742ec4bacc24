"""
Pytest fixtures for the agency test suite.

Provides:
- An in-memory SQLite database per test (fresh schema every time)
- A ``SqlAlchemyDocumentStore`` over that database
- A deterministic clock
- Structured log capture

Production runs on PostgreSQL; the store only uses portable column types,
so the suite runs without a database server.
"""

import json
import logging
from datetime import date
from io import StringIO

import pytest

from agency_batch.domain.types import TaskPayload
from agency_kernel.db.engine import (
    get_session,
    init_engine_from_url,
    reset_engine,
)
from agency_kernel.domain.clock import DeterministicClock
from agency_kernel.domain.values import Priority
from agency_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from agency_modules._orm_registry import create_all_tables
from agency_services.store import SqlAlchemyDocumentStore

TEST_DATABASE_URL = "sqlite:///:memory:"
TEST_CLIENT_ID = "client-001"
TEST_EMPLOYEE_ID = "emp-042"


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture agency_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, billing_service):
            billing_service.create_package(...)
            logs = captured_logs()
            assert any(r["message"] == "package_created" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("agency_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def engine():
    engine = init_engine_from_url(TEST_DATABASE_URL)
    create_all_tables()
    yield engine
    reset_engine()


@pytest.fixture
def session(engine):
    session = get_session()
    yield session
    session.close()


@pytest.fixture
def store(session):
    return SqlAlchemyDocumentStore(session)


@pytest.fixture
def clock():
    return DeterministicClock()


# =============================================================================
# Builders
# =============================================================================


@pytest.fixture
def make_payload():
    """Factory for ``TaskPayload`` records."""

    def _make(day: date = date(2026, 2, 2), **overrides) -> TaskPayload:
        fields = dict(
            client_id=TEST_CLIENT_ID,
            service_id="svc-poster",
            client_name="Acme Bakery",
            service_name="Poster",
            task_type="Graphic",
            priority=Priority.MEDIUM,
            start_date=day,
            deadline=day,
            description="Poster 1/1",
            assigned_employee_id=TEST_EMPLOYEE_ID,
        )
        fields.update(overrides)
        return TaskPayload(**fields)

    return _make
