"""
Typed Exception Hierarchy for the Fiscal Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Every figure produced by the fiscal pipeline must be auditable. Callers that
react to failures (a CLI, a UI adapter, a test) catch by type and read
structured attributes; they never parse message strings.

  1. Every error has a TYPED exception class
  2. Every exception has a CODE class attribute (machine-readable)
  3. Exceptions carry structured DATA (offending value, call site, field)

Example:
    try:
        snapshot = compute_fiscal_snapshot(entries, context)
    except NonIntegerAmountError as e:
        log.error("upstream bug", extra={"value": e.value, "site": e.call_site})

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    FiscalKernelError (base)
    |
    +-- MonetaryError
    |   +-- NonIntegerAmountError
    |   +-- NonIntegerRateError
    |   +-- InvalidRateError
    |
    +-- InputValidationError
    +-- DuplicateEntryIdError
    |
    +-- ProjectionError
    |   +-- InvalidAnchorError
    |
    +-- PresenterError
        +-- DashboardInvariantError
        +-- VatSummaryInconsistentError

``fiscal_config.integrity.ConfigIntegrityError`` lives in the config layer
(the kernel never imports configuration code).

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category    | Code                        | When Raised
------------|-----------------------------|---------------------------------------
Monetary    | NON_INTEGER_AMOUNT          | A cent value is not a plain int
            | NON_INTEGER_RATE            | A bps rate is not a plain int
            | INVALID_RATE                | Gross split with 10000 + rate <= 0
------------|-----------------------------|---------------------------------------
Input       | INPUT_VALIDATION_FAILED     | Malformed Entry / context / anchor
------------|-----------------------------|---------------------------------------
Projection  | INVALID_ANCHOR              | Anchor month outside [-1, 11]
------------|-----------------------------|---------------------------------------
Presenter   | DASHBOARD_INVARIANT         | Breakdown sum != total, bad field
            | VAT_SUMMARY_INCONSISTENT    | due/credit/status disagree

===============================================================================
HANDLING PATTERNS
===============================================================================

Monetary errors are programming defects upstream: they are never caught
inside the pipeline. Input validation errors are rejected at the boundary
before the pipeline runs. Presenter errors mean the engine output is
inconsistent; they are surfaced to the immediate caller.
"""

from __future__ import annotations

from typing import Any


class FiscalKernelError(Exception):
    """
    Base exception for all fiscal kernel errors.

    All subclasses must have a `code` class attribute for
    machine-readable error identification.
    """

    code: str = "FISCAL_KERNEL_ERROR"


# Monetary exceptions


class MonetaryError(FiscalKernelError):
    """Base exception for monetary-kernel precondition violations."""

    code: str = "MONETARY_ERROR"


class NonIntegerAmountError(MonetaryError):
    """A monetary value that is not an integer number of cents."""

    code: str = "NON_INTEGER_AMOUNT"

    def __init__(self, value: Any, call_site: str):
        self.value = value
        self.call_site = call_site
        super().__init__(
            f"Non-integer cents value {value!r} "
            f"({type(value).__name__}) in {call_site}"
        )


class NonIntegerRateError(MonetaryError):
    """A rate that is not an integer number of basis points."""

    code: str = "NON_INTEGER_RATE"

    def __init__(self, value: Any, call_site: str):
        self.value = value
        self.call_site = call_site
        super().__init__(
            f"Non-integer basis-point rate {value!r} "
            f"({type(value).__name__}) in {call_site}"
        )


class InvalidRateError(MonetaryError):
    """A rate that makes the requested operation undefined."""

    code: str = "INVALID_RATE"

    def __init__(self, rate_bps: int, call_site: str, reason: str):
        self.rate_bps = rate_bps
        self.call_site = call_site
        self.reason = reason
        super().__init__(f"Invalid rate {rate_bps} bps in {call_site}: {reason}")


# Boundary validation


class InputValidationError(FiscalKernelError):
    """
    A caller-supplied record failed boundary validation.

    Carries every field-level issue found on the record, not just the
    first one.
    """

    code: str = "INPUT_VALIDATION_FAILED"

    def __init__(self, record_type: str, issues: tuple[Any, ...]):
        self.record_type = record_type
        self.issues = issues
        summary = "; ".join(str(issue) for issue in issues[:5])
        super().__init__(
            f"Invalid {record_type}: {len(issues)} issue(s): {summary}"
        )


class DuplicateEntryIdError(FiscalKernelError):
    """Two entries of one computation share an id."""

    code: str = "DUPLICATE_ENTRY_ID"

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(
            f"Duplicate entry id {entry_id!r}: ids must be unique per ledger"
        )


# Projection exceptions


class ProjectionError(FiscalKernelError):
    """Base exception for treasury projection errors."""

    code: str = "PROJECTION_ERROR"


class InvalidAnchorError(ProjectionError):
    """Treasury anchor references a month outside the fiscal year."""

    code: str = "INVALID_ANCHOR"

    def __init__(self, month_index: int):
        self.month_index = month_index
        super().__init__(
            f"Treasury anchor month index {month_index} is outside [-1, 11]"
        )


# Presenter exceptions


class PresenterError(FiscalKernelError):
    """Base exception for view-model compilation errors."""

    code: str = "PRESENTER_ERROR"


class DashboardInvariantError(PresenterError):
    """
    The compiled dashboard does not reconcile with the engine output.

    This is a defect in the engine output, never a display concern.
    """

    code: str = "DASHBOARD_INVARIANT"

    def __init__(self, invariant: str, expected: Any, actual: Any):
        self.invariant = invariant
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Dashboard invariant '{invariant}' violated: "
            f"expected {expected!r}, got {actual!r}"
        )


class VatSummaryInconsistentError(PresenterError):
    """VAT due / credit / status combination disagrees with the balance."""

    code: str = "VAT_SUMMARY_INCONSISTENT"

    def __init__(self, balance: int, due: int, credit: int, status: str):
        self.balance = balance
        self.due = due
        self.credit = credit
        self.status = status
        super().__init__(
            f"Inconsistent VAT summary: balance={balance} due={due} "
            f"credit={credit} status={status}"
        )
