"""
Progressive income tax on the net taxable income.

The household quotient divides the income by the number of parts, the
brackets apply per part, and the gross tax is the per-part tax multiplied
back by the parts (rounded down to the cent). A low-tax discount (decote)
then reduces small amounts.

Only the single-person discount thresholds are modelled, and the cap on
the benefit of extra household parts is not applied.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_FLOOR, Decimal

from fiscal_config.schema import IncomeTaxDef, RulesetParams
from fiscal_kernel.domain.money import BPS_SCALE, require_cents, round_half_away
from fiscal_kernel.domain.outputs import (
    ComputedBases,
    Confidence,
    JuridicalBasis,
    Organization,
    TaxCategory,
    TaxLineItem,
)
from fiscal_kernel.domain.values import FiscalContext


@dataclass(frozen=True)
class IncomeTaxResult:
    quotient: int
    gross_tax: int
    decote: int
    net_tax: int
    marginal_rate_bps: int


def _tax_per_part_scaled(quotient: int, definition: IncomeTaxDef) -> tuple[int, int]:
    """(tax per part in cents * 10000, marginal rate in bps)."""
    scaled = 0
    marginal = 0
    lower = 0
    for bracket in definition.brackets:
        if quotient <= lower:
            break
        upper = quotient if bracket.upper is None else min(quotient, bracket.upper)
        scaled += (upper - lower) * bracket.rate_bps
        marginal = bracket.rate_bps
        if bracket.upper is None:
            break
        lower = bracket.upper
    return scaled, marginal


def calculate_income_tax(
    net_taxable: int, parts: Decimal, definition: IncomeTaxDef
) -> IncomeTaxResult:
    """Income tax of a household, all amounts in cents."""
    require_cents(net_taxable, "calculate_income_tax.net_taxable")
    taxable = max(0, net_taxable)
    quotient = int((Decimal(taxable) / parts).to_integral_value(rounding=ROUND_FLOOR))

    scaled, marginal = _tax_per_part_scaled(quotient, definition)
    gross = int(
        (Decimal(scaled) * parts / BPS_SCALE).to_integral_value(rounding=ROUND_FLOOR)
    )

    decote = 0
    if gross < definition.decote_threshold:
        theoretical = round_half_away(
            definition.decote_ceiling * BPS_SCALE - gross * definition.decote_rate_bps,
            BPS_SCALE,
        )
        decote = min(max(0, theoretical), gross)

    return IncomeTaxResult(
        quotient=quotient,
        gross_tax=gross,
        decote=decote,
        net_tax=max(0, gross - decote),
        marginal_rate_bps=marginal,
    )


def compute_income_tax(
    bases: ComputedBases, context: FiscalContext, params: RulesetParams
) -> tuple[TaxLineItem, ...]:
    definition = params.income_tax
    result = calculate_income_tax(
        bases.fiscal.total_net_taxable, context.household.parts, definition
    )
    if result.net_tax <= 0:
        return ()
    return (
        TaxLineItem(
            code=definition.code,
            label=definition.label,
            base=bases.fiscal.total_net_taxable,
            rate_bps=result.marginal_rate_bps,
            amount=result.net_tax,
            organization=Organization.DGFIP,
            category=TaxCategory.FISCAL,
            confidence=Confidence.ESTIMATED,
            formula="floor(bracket_tax(floor(base / parts)) * parts) - decote",
            juridical_basis=JuridicalBasis(source=definition.source, ref=definition.ref),
            metadata={
                "parts": str(context.household.parts),
                "quotient": result.quotient,
                "gross_tax": result.gross_tax,
                "decote": result.decote,
                "marginal_rate_bps": result.marginal_rate_bps,
            },
        ),
    )
