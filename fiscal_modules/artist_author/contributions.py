"""
Social contributions (URSSAF) and supplementary pension (IRCEC RAAP).

Every contribution line is described in the ruleset parameters; this
module only applies them. The CSG and CRDS lines use a two-step rounding:
the intermediate base ``round(social base * factor)`` is rounded first and
the final rate applies to that rounded value.
"""

from __future__ import annotations

from fiscal_config.schema import ContributionDef, RulesetParams
from fiscal_kernel.domain.money import multiply_by_rate
from fiscal_kernel.domain.outputs import (
    CapApplied,
    ComputedBases,
    Confidence,
    JuridicalBasis,
    Organization,
    TaxCategory,
    TaxLineItem,
)
from fiscal_kernel.domain.values import FiscalContext
from fiscal_kernel.logging_config import get_logger

logger = get_logger("modules.artist_author.contributions")


def csg_crds_base(social_base: int, params: RulesetParams) -> int:
    """Rounded intermediate base for CSG / CRDS."""
    return multiply_by_rate(social_base, params.bases["CSG_CRDS_BASE_FACTOR_BPS"])


def _contribution_line(
    definition: ContributionDef, social_base: int, params: RulesetParams
) -> TaxLineItem:
    base = social_base if definition.base == "social" else csg_crds_base(social_base, params)

    cap_applied = None
    if definition.cap is not None:
        cap_value = params.constant(definition.cap)
        if base > cap_value:
            cap_applied = CapApplied(name=definition.cap, value=cap_value)
        base = min(base, cap_value)

    return TaxLineItem(
        code=definition.code,
        label=definition.label,
        base=base,
        rate_bps=definition.rate_bps,
        amount=multiply_by_rate(base, definition.rate_bps),
        organization=Organization.URSSAF_AA,
        category=TaxCategory.SOCIAL,
        confidence=Confidence.CERTIFIED,
        formula=definition.formula,
        cap_applied=cap_applied,
        juridical_basis=JuridicalBasis(source=definition.source, ref=definition.ref),
    )


def compute_social_contributions(
    bases: ComputedBases, context: FiscalContext, params: RulesetParams
) -> tuple[TaxLineItem, ...]:
    social_base = bases.social.total
    return tuple(
        _contribution_line(definition, social_base, params)
        for definition in params.social_contributions
    )


def compute_supplementary_pension(
    bases: ComputedBases, context: FiscalContext, params: RulesetParams
) -> tuple[TaxLineItem, ...]:
    """RAAP: nothing below the affiliation threshold, else rate on the capped base."""
    social_base = bases.social.total
    threshold = params.constant("RAAP_THRESHOLD")
    if social_base < threshold:
        logger.debug(
            "pension_below_threshold",
            extra={"social_base": social_base, "threshold": threshold},
        )
        return ()

    pension = params.supplementary_pension
    ceiling = params.constant("RAAP_CEILING")
    base = min(social_base, ceiling)
    return (
        TaxLineItem(
            code=pension.code,
            label=pension.label,
            base=base,
            rate_bps=pension.rate_bps,
            amount=multiply_by_rate(base, pension.rate_bps),
            organization=Organization.IRCEC,
            category=TaxCategory.SOCIAL,
            confidence=Confidence.CERTIFIED,
            formula=pension.formula,
            cap_applied=(
                CapApplied(name=pension.cap_name, value=ceiling)
                if social_base > ceiling
                else None
            ),
            juridical_basis=JuridicalBasis(source=pension.source, ref=pension.ref),
            metadata={"threshold": threshold, "ceiling": ceiling, "is_liable": True},
        ),
    )
