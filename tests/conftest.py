"""
Pytest fixtures for the solar proposal test suite.

Provides:
- Structured-logging setup and a JSON log capture fixture
- An in-memory SQLite database shared by the whole session, with
  per-test isolation via rollback
- A deterministic clock and a test actor ID
"""

import json
import logging
from datetime import datetime, timezone
from io import StringIO
from uuid import uuid4

import pytest

from solar_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from solar_kernel.domain.clock import DeterministicClock
from solar_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

# Test actor ID for all test operations
TEST_ACTOR_ID = uuid4()

TEST_DATABASE_URL = "sqlite:///:memory:"


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
    Capture solar_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            generate_proposal(...)
            logs = captured_logs()
            assert any(r["message"] == "SOLAR_ENGINE_TRACE" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("solar_kernel")
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture(scope="session")
def db_engine():
    """Single in-memory engine for the whole session; tables created once."""
    eng = init_engine_from_url(TEST_DATABASE_URL)
    create_tables()
    yield eng
    drop_tables()
    reset_engine()


@pytest.fixture
def session(db_engine):
    """Session whose work is rolled back after each test."""
    sess = get_session()
    yield sess
    sess.rollback()
    sess.close()


# =============================================================================
# Common values
# =============================================================================


@pytest.fixture
def test_actor_id():
    return TEST_ACTOR_ID


@pytest.fixture
def deterministic_clock():
    return DeterministicClock(datetime(2024, 6, 1, 9, 0, 0, tzinfo=timezone.utc))
