"""
FallbackModule -- degraded ruleset for unsupported (jurisdiction, year, status).

Only VAT is computed, since it does not depend on the social status.
Social, fiscal and pension figures stay at zero and a single warning alert
tells the caller the result is incomplete.
"""

from __future__ import annotations

from collections.abc import Sequence

from fiscal_kernel.domain.outputs import (
    AlertSeverity,
    ComputedBases,
    FiscalAlert,
    ScheduleItem,
    TaxLineItem,
)
from fiscal_kernel.domain.values import FiscalContext, QualifiedOperation
from fiscal_kernel.utils.hashing import fingerprint
from fiscal_modules._vat_helpers import compute_vat_bases, monthly_vat_lines
from fiscal_modules.base import RulesetModule

FALLBACK_REVISION = "fallback-1"
ALERT_RULESET_FALLBACK = "ALERT_RULESET_FALLBACK"


class FallbackModule(RulesetModule):
    def __init__(self, requested_key: str):
        self._requested_key = requested_key

    @property
    def key(self) -> str:
        return f"fallback:{self._requested_key}"

    @property
    def revision(self) -> str:
        return FALLBACK_REVISION

    @property
    def params_fingerprint(self) -> str:
        return fingerprint(
            {
                "module": "fallback",
                "revision": FALLBACK_REVISION,
                "requested": self._requested_key,
            }
        )

    def compute_bases(
        self, ledger: Sequence[QualifiedOperation], context: FiscalContext
    ) -> ComputedBases:
        return ComputedBases(vat=compute_vat_bases(ledger))

    def compute_social_contributions(
        self, bases: ComputedBases, context: FiscalContext
    ) -> tuple[TaxLineItem, ...]:
        return ()

    def compute_supplementary_pension(
        self, bases: ComputedBases, context: FiscalContext
    ) -> tuple[TaxLineItem, ...]:
        return ()

    def compute_vat(
        self, ledger: Sequence[QualifiedOperation], context: FiscalContext
    ) -> tuple[TaxLineItem, ...]:
        return monthly_vat_lines(ledger, context)

    def compute_income_tax(
        self, bases: ComputedBases, context: FiscalContext
    ) -> tuple[TaxLineItem, ...]:
        return ()

    def compute_schedule(
        self, taxes: Sequence[TaxLineItem], context: FiscalContext
    ) -> tuple[ScheduleItem, ...]:
        return ()

    def compute_alerts(
        self,
        bases: ComputedBases,
        taxes: Sequence[TaxLineItem],
        context: FiscalContext,
    ) -> tuple[FiscalAlert, ...]:
        return (
            FiscalAlert(
                code=ALERT_RULESET_FALLBACK,
                severity=AlertSeverity.WARNING,
                message=(
                    f"No ruleset for {self._requested_key}; social contributions "
                    "and income tax are not computed."
                ),
                recommended_action="Treat social and tax figures as unknown.",
            ),
        )
