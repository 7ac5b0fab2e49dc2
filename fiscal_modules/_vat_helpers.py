"""
VAT aggregation shared by every ruleset module (including the fallback).

Only professional operations count. Collected VAT comes from collectable
revenue, deductible VAT from deductible expenses; both are also tracked per
``YYYY-MM`` period.
"""

from __future__ import annotations

from collections.abc import Sequence

from fiscal_kernel.domain.outputs import (
    Confidence,
    Organization,
    TaxCategory,
    TaxLineItem,
    VatBases,
    VatPeriod,
)
from fiscal_kernel.domain.values import (
    MONTH_LABELS,
    Direction,
    FiscalContext,
    OperationKind,
    QualifiedOperation,
    VatRegime,
    period_key,
)

DEFAULT_VAT_LABEL_PREFIX = "TVA Due"
DEFAULT_VAT_RATE_BPS = 2000


def compute_vat_bases(ledger: Sequence[QualifiedOperation]) -> VatBases:
    """VAT collected / deductible / balance with the per-period breakdown."""
    collected = 0
    deductible = 0
    periods: dict[str, list[int]] = {}

    for qualified in ledger:
        op, flags = qualified.operation, qualified.flags
        if not flags.is_pro:
            continue
        bucket = periods.setdefault(period_key(op.date), [0, 0])
        if op.direction == Direction.IN and op.kind == OperationKind.REVENUE:
            if flags.is_vat_collectable:
                collected += op.amount_vat
                bucket[0] += op.amount_vat
        elif op.direction == Direction.OUT and op.kind == OperationKind.EXPENSE:
            if flags.is_vat_deductible:
                deductible += op.amount_vat
                bucket[1] += op.amount_vat

    return VatBases(
        collected=collected,
        deductible=deductible,
        balance=collected - deductible,
        by_period={
            key: VatPeriod.of(values[0], values[1])
            for key, values in sorted(periods.items())
        },
    )


def monthly_vat_lines(
    ledger: Sequence[QualifiedOperation],
    context: FiscalContext,
    *,
    label_prefix: str = DEFAULT_VAT_LABEL_PREFIX,
    rate_bps: int = DEFAULT_VAT_RATE_BPS,
) -> tuple[TaxLineItem, ...]:
    """
    One VAT liability line per month whose collected - deductible is positive.

    No lines at all under the exemption regime.
    """
    if context.vat_regime == VatRegime.FRANCHISE:
        return ()

    collected = [0] * 12
    deductible = [0] * 12
    for qualified in ledger:
        op, flags = qualified.operation, qualified.flags
        if not flags.is_pro:
            continue
        if flags.is_vat_collectable:
            collected[op.month_index] += op.amount_vat
        if flags.is_vat_deductible:
            deductible[op.month_index] += op.amount_vat

    confidence = (
        Confidence.ESTIMATED if context.options.estimate_mode else Confidence.CERTIFIED
    )
    lines = []
    for index, month in enumerate(MONTH_LABELS):
        balance = collected[index] - deductible[index]
        if balance <= 0:
            continue
        lines.append(
            TaxLineItem(
                code=f"VAT_{month.upper()}",
                label=f"{label_prefix} {month}",
                base=0,
                rate_bps=rate_bps,
                amount=balance,
                organization=Organization.DGFIP,
                category=TaxCategory.VAT,
                confidence=confidence,
                metadata={"month": month, "month_index": index},
            )
        )
    return tuple(lines)
