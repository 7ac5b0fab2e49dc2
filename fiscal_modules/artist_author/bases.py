"""
Taxable bases for the artist-author status.

Responsibility:
    Sum qualified professional revenue and deductible expenses (HT), derive
    the net taxable income (flat-rate abatement or real expenses) and the
    social base (net taxable uplifted by a fixed factor).

Invariants enforced:
    - Flat-rate: abatement = max(revenue * rate, minimum abatement) and the
      net taxable income is never negative.
    - Real-expense: net taxable = max(0, revenue - deductible expenses).
    - The whole social base is artistic for this status.
"""

from __future__ import annotations

from collections.abc import Sequence

from fiscal_config.schema import RulesetParams
from fiscal_kernel.domain.money import multiply_by_rate, sum_cents
from fiscal_kernel.domain.outputs import ComputedBases, FiscalBases, SocialBases
from fiscal_kernel.domain.values import (
    Direction,
    FiscalContext,
    FiscalRegime,
    OperationKind,
    QualifiedOperation,
)
from fiscal_modules._vat_helpers import compute_vat_bases


def flat_rate_abatement(revenue: int, params: RulesetParams) -> int:
    return max(
        multiply_by_rate(revenue, params.constant("MICRO_BNC_ABATEMENT_BPS")),
        params.constant("MICRO_BNC_ABATEMENT_MIN"),
    )


def compute_bases(
    ledger: Sequence[QualifiedOperation],
    context: FiscalContext,
    params: RulesetParams,
) -> ComputedBases:
    pro = [q for q in ledger if q.flags.is_pro]
    revenue = sum_cents(
        q.operation.amount_ht
        for q in pro
        if q.operation.direction == Direction.IN and q.operation.kind == OperationKind.REVENUE
    )
    deductible = sum_cents(
        q.operation.amount_ht
        for q in pro
        if q.operation.direction == Direction.OUT
        and q.operation.kind == OperationKind.EXPENSE
        and q.flags.is_tax_deductible
    )

    if context.fiscal_regime == FiscalRegime.MICRO:
        net_taxable = max(0, revenue - flat_rate_abatement(revenue, params))
    else:
        net_taxable = max(0, revenue - deductible)

    social_total = multiply_by_rate(net_taxable, params.constant("SOCIAL_BASE_UPLIFT_BPS"))

    return ComputedBases(
        social=SocialBases(total=social_total, artistic=social_total, other=0),
        fiscal=FiscalBases(
            total_net_taxable=net_taxable,
            revenue=revenue,
            deductible_expenses=deductible,
        ),
        vat=compute_vat_bases(ledger),
    )
