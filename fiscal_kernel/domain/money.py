"""
Monetary kernel -- integer cents and basis points.

Responsibility:
    Every monetary computation in the fiscal pipeline goes through this
    module. Amounts are integer cents, rates are integer basis points
    (10000 = 100%), and the single rounding rule is half away from zero.

Architecture position:
    Kernel > Domain -- pure functions, zero I/O, no upward imports.

Invariants enforced:
    - No non-integer value ever enters a calculation: ``require_cents`` and
      ``require_bps`` fail fast with the offending value and call site.
      ``bool`` is rejected even though it subclasses ``int``.
    - ``split_gross_by_rate`` returns (net, tax) with ``net + tax == gross``.
    - ``split_evenly`` returns installments summing exactly to the total.

Failure modes:
    - NonIntegerAmountError / NonIntegerRateError on bad inputs.
    - InvalidRateError when ``10000 + rate <= 0`` in a gross split.

Audit relevance:
    Rounding uses ``Decimal`` with ``ROUND_HALF_UP`` which rounds half away
    from zero for negative values too (-2.5 -> -3). Refunds and VAT credits
    are therefore rounded symmetrically with their positive counterparts.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal, localcontext

from fiscal_kernel.exceptions import (
    InvalidRateError,
    NonIntegerAmountError,
    NonIntegerRateError,
)

BPS_SCALE = 10_000

# Enough digits for any realistic cents * bps product without inexact division.
_PRECISION = 50


def _is_plain_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def require_cents(value: object, call_site: str) -> int:
    """Return ``value`` if it is an integer number of cents, else raise."""
    if not _is_plain_int(value):
        raise NonIntegerAmountError(value, call_site)
    return value  # type: ignore[return-value]


def require_bps(value: object, call_site: str) -> int:
    """Return ``value`` if it is an integer number of basis points, else raise."""
    if not _is_plain_int(value):
        raise NonIntegerRateError(value, call_site)
    return value  # type: ignore[return-value]


def round_half_away(numerator: int, denominator: int) -> int:
    """
    Divide two integers and round half away from zero.

    Preconditions:
        denominator != 0.
    Postconditions:
        Returns the nearest integer to numerator / denominator; exact
        halves go away from zero.
    """
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        quotient = Decimal(numerator) / Decimal(denominator)
        return int(quotient.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def multiply_by_rate(amount_cents: int, rate_bps: int) -> int:
    """
    Apply a basis-point rate to an amount: ``round(amount * rate / 10000)``.

    >>> multiply_by_rate(1_000_000, 3400)
    340000
    >>> multiply_by_rate(-5, 5000)
    -3
    """
    require_cents(amount_cents, "multiply_by_rate.amount_cents")
    require_bps(rate_bps, "multiply_by_rate.rate_bps")
    return round_half_away(amount_cents * rate_bps, BPS_SCALE)


def split_gross_by_rate(amount_gross_cents: int, rate_bps: int) -> tuple[int, int]:
    """
    Split a tax-inclusive amount into (net, tax).

    ``net = round(gross * 10000 / (10000 + rate))`` and ``tax = gross - net``
    so the two parts always add back to the gross amount.
    """
    require_cents(amount_gross_cents, "split_gross_by_rate.amount_gross_cents")
    require_bps(rate_bps, "split_gross_by_rate.rate_bps")
    divisor = BPS_SCALE + rate_bps
    if divisor <= 0:
        raise InvalidRateError(
            rate_bps, "split_gross_by_rate", "10000 + rate must be positive"
        )
    net = round_half_away(amount_gross_cents * BPS_SCALE, divisor)
    return net, amount_gross_cents - net


def sum_cents(values: Iterable[int]) -> int:
    """Sum cent values, asserting each one is an integer."""
    total = 0
    for value in values:
        total += require_cents(value, "sum_cents")
    return total


def split_evenly(total_cents: int, parts: int) -> tuple[int, ...]:
    """
    Divide ``total_cents`` into ``parts`` installments summing to the total.

    The first ``total mod parts`` installments carry one extra cent.
    """
    require_cents(total_cents, "split_evenly.total_cents")
    if not _is_plain_int(parts) or parts <= 0:
        raise NonIntegerAmountError(parts, "split_evenly.parts")
    sign = -1 if total_cents < 0 else 1
    base, remainder = divmod(abs(total_cents), parts)
    return tuple(
        sign * (base + (1 if i < remainder else 0)) for i in range(parts)
    )


def percentage_bps(part_cents: int, total_cents: int) -> int:
    """Share of ``part`` in ``total`` as basis points, clamped to [0, 10000]."""
    require_cents(part_cents, "percentage_bps.part_cents")
    require_cents(total_cents, "percentage_bps.total_cents")
    if total_cents <= 0:
        return 0
    share = round_half_away(part_cents * BPS_SCALE, total_cents)
    return max(0, min(BPS_SCALE, share))
