"""
Qualifier -- tax-relevance flags for normalized operations.

Pure function ``(NormalizedOperation, FiscalContext) -> QualifiedOperation``.
Flags are derived from scope, kind and category under the active fiscal
regime; they never alter the underlying financial facts. Non-professional
operations receive all flags False.
"""

from __future__ import annotations

from collections.abc import Sequence

from fiscal_engines.tracer import traced_engine
from fiscal_kernel.domain.values import (
    CATEGORY_ARTISTIC_REVENUE,
    CATEGORY_NON_DEDUCTIBLE,
    TAX_PAYMENT_CATEGORIES,
    FiscalContext,
    FiscalRegime,
    NormalizedOperation,
    OperationKind,
    QualificationFlags,
    QualifiedOperation,
    Scope,
)

_NOT_RELEVANT = QualificationFlags()


def qualify_operation(op: NormalizedOperation, context: FiscalContext) -> QualifiedOperation:
    if op.scope != Scope.PRO:
        return QualifiedOperation(operation=op, flags=_NOT_RELEVANT)

    is_real_regime = context.fiscal_regime == FiscalRegime.REEL

    if op.kind == OperationKind.REVENUE:
        is_artistic = op.category == CATEGORY_ARTISTIC_REVENUE
        flags = QualificationFlags(
            is_pro=True,
            is_artistic=is_artistic,
            is_social_current_year=is_artistic,
            is_vat_collectable=op.amount_vat != 0,
        )
    elif op.kind == OperationKind.EXPENSE and op.category in TAX_PAYMENT_CATEGORIES:
        # Social/tax payments reduce the base only under the real regime.
        flags = QualificationFlags(is_pro=True, is_tax_deductible=is_real_regime)
    elif op.kind == OperationKind.EXPENSE:
        flags = QualificationFlags(
            is_pro=True,
            is_vat_deductible=op.amount_vat != 0,
            is_tax_deductible=is_real_regime and op.category != CATEGORY_NON_DEDUCTIBLE,
        )
    else:
        flags = QualificationFlags(is_pro=True)

    return QualifiedOperation(operation=op, flags=flags)


@traced_engine("qualifier", "2.0", fingerprint_fields=("operations",))
def qualify_ledger(
    operations: Sequence[NormalizedOperation],
    context: FiscalContext,
) -> tuple[QualifiedOperation, ...]:
    """Qualify every operation, keeping the (date, id) order."""
    return tuple(
        sorted(
            (qualify_operation(op, context) for op in operations),
            key=lambda q: q.sort_key,
        )
    )
