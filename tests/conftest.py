"""
Pytest fixtures for the fiscal pipeline test suite.

Provides:
- Structured logging configured once per session, LogContext cleared per test
- ``captured_logs`` to assert on emitted JSON log records
- Default contexts for the French artist-author ruleset (builders in tests/builders.py)
"""

import json
import logging
from io import StringIO

import pytest

from fiscal_kernel.domain.values import FiscalContext, FiscalRegime, VatRegime
from fiscal_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from tests.builders import make_context


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG, stream=StringIO())
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
    Capture fiscal_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            compute_fiscal(entries, context)
            logs = captured_logs()
            assert any(r["message"] == "fiscal_computed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("fiscal_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Context fixtures
# =============================================================================


@pytest.fixture
def micro_context() -> FiscalContext:
    return make_context()


@pytest.fixture
def reel_vat_context() -> FiscalContext:
    return make_context(
        fiscal_regime=FiscalRegime.REEL, vat_regime=VatRegime.REEL_MENSUEL
    )
