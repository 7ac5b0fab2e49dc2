"""
Kernel Invariants Contract.

These invariants are structural law for every computation. No ruleset
parameter file, feature flag or context option may override them.

This module exists solely to declare these invariants explicitly. The
enforcement is distributed across the monetary kernel, the normalizer,
the dispatcher, the treasury projector and the dashboard compiler.
"""

from enum import Enum, unique


@unique
class KernelInvariant(str, Enum):
    """Non-configurable invariants enforced by the kernel.

    Configuration may influence *what* gets computed, but never *whether*
    these rules apply.
    """

    INTEGER_MONEY = "integer_money"
    """Amounts are integer cents and rates integer basis points. Enforced
    by fiscal_kernel.domain.money and record constructors."""

    SINGLE_ROUNDING_RULE = "single_rounding_rule"
    """All rounding is half away from zero, negative values included.
    Enforced by money.round_half_away."""

    SORTED_LEDGER = "sorted_ledger"
    """The normalized ledger is sorted by (date, id) before hashing or
    projection. Enforced by the normalizer and the dispatcher."""

    ORDER_INDEPENDENT_HASH = "order_independent_hash"
    """Canonical serialization sorts mapping keys at every depth and keeps
    sequence order. Enforced by fiscal_kernel.utils.hashing."""

    BREAKDOWN_RECONCILIATION = "breakdown_reconciliation"
    """Every breakdown sums exactly to its total. Enforced by the
    dashboard compiler at construction time."""

    VAT_EXCLUSIVITY = "vat_exclusivity"
    """VAT due and VAT credit are mutually exclusive and follow the sign of
    the balance. Enforced by VatSummary.from_balance."""

    TREASURY_RECONCILIATION = "treasury_reconciliation"
    """Replaying the solved opening balance plus monthly net cashflows
    reproduces the anchor exactly. Enforced by the treasury projector."""


# All invariants as a frozenset for programmatic checks.
ALL_KERNEL_INVARIANTS: frozenset[KernelInvariant] = frozenset(KernelInvariant)

# The kernel package may not import from these packages.
# This is enforced by tests/architecture/test_kernel_boundary.py.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = (
    "fiscal_config",
    "fiscal_engines",
    "fiscal_modules",
    "fiscal_services",
    "fiscal_presenters",
)
