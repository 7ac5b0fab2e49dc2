"""Threshold alerts for the artist-author status. Alerts never change amounts."""

from __future__ import annotations

from collections.abc import Sequence

from fiscal_config.schema import RulesetParams
from fiscal_kernel.domain.outputs import (
    AlertSeverity,
    ComputedBases,
    FiscalAlert,
    TaxLineItem,
)
from fiscal_kernel.domain.values import FiscalContext

ALERT_PASS_CAP = "ALERT_PASS_CAP"
ALERT_CSG_APPROXIMATION = "ALERT_CSG_APPROXIMATION"
ALERT_RAAP_LIABILITY = "ALERT_RAAP_LIABILITY"


def _euros(cents: int) -> str:
    return f"{cents // 100} EUR"


def compute_alerts(
    bases: ComputedBases,
    taxes: Sequence[TaxLineItem],
    context: FiscalContext,
    params: RulesetParams,
) -> tuple[FiscalAlert, ...]:
    social_base = bases.social.total
    pass_value = params.constant("PASS")
    alerts: list[FiscalAlert] = []

    if social_base > pass_value:
        alerts.append(
            FiscalAlert(
                code=ALERT_PASS_CAP,
                severity=AlertSeverity.INFO,
                message=(
                    f"Social base above the annual social security ceiling "
                    f"({_euros(pass_value)}); capped contributions stop growing."
                ),
                trigger_value=social_base,
                threshold_value=pass_value,
            )
        )

    csg_threshold = pass_value * params.constant("CSG_SIMPLIFICATION_PASS_MULTIPLE")
    if social_base > csg_threshold and context.options.flag(
        params.alerts.csg_simplification_flag
    ):
        alerts.append(
            FiscalAlert(
                code=ALERT_CSG_APPROXIMATION,
                severity=AlertSeverity.WARNING,
                message=(
                    "CSG/CRDS base computed with the simplified factor above "
                    f"{_euros(csg_threshold)}; the declared amount may differ."
                ),
                trigger_value=social_base,
                threshold_value=csg_threshold,
                recommended_action="Check the CSG/CRDS base with an accountant.",
            )
        )

    raap_threshold = params.constant("RAAP_THRESHOLD")
    if social_base >= raap_threshold:
        alerts.append(
            FiscalAlert(
                code=ALERT_RAAP_LIABILITY,
                severity=AlertSeverity.WARNING,
                message=(
                    f"Social base at or above {_euros(raap_threshold)}: the RAAP "
                    "supplementary pension is due to IRCEC."
                ),
                trigger_value=social_base,
                threshold_value=raap_threshold,
                recommended_action="Provision the IRCEC contribution before year end.",
            )
        )

    return tuple(alerts)
