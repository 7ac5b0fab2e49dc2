"""ArtistAuthorModule -- the French artist-author ruleset bound to its parameters."""

from __future__ import annotations

from collections.abc import Sequence

from fiscal_config.schema import RulesetParams
from fiscal_kernel.domain.outputs import (
    ComputedBases,
    FiscalAlert,
    ScheduleItem,
    TaxLineItem,
)
from fiscal_kernel.domain.values import FiscalContext, QualifiedOperation
from fiscal_modules._vat_helpers import monthly_vat_lines
from fiscal_modules.artist_author import alerts, contributions, income_tax, schedule
from fiscal_modules.artist_author import bases as taxable_bases
from fiscal_modules.base import RulesetModule


class ArtistAuthorModule(RulesetModule):
    """
    Artist-author ruleset.

    All business constants come from ``params``; the module holds no other
    state, so one instance can serve any number of computations.
    """

    def __init__(self, params: RulesetParams):
        self._params = params

    @property
    def params(self) -> RulesetParams:
        return self._params

    @property
    def key(self) -> str:
        return self._params.identity.key

    @property
    def revision(self) -> str:
        return self._params.identity.revision

    @property
    def params_fingerprint(self) -> str:
        return self._params.fingerprint

    def compute_bases(
        self, ledger: Sequence[QualifiedOperation], context: FiscalContext
    ) -> ComputedBases:
        return taxable_bases.compute_bases(ledger, context, self._params)

    def compute_social_contributions(
        self, bases: ComputedBases, context: FiscalContext
    ) -> tuple[TaxLineItem, ...]:
        return contributions.compute_social_contributions(bases, context, self._params)

    def compute_supplementary_pension(
        self, bases: ComputedBases, context: FiscalContext
    ) -> tuple[TaxLineItem, ...]:
        return contributions.compute_supplementary_pension(bases, context, self._params)

    def compute_vat(
        self, ledger: Sequence[QualifiedOperation], context: FiscalContext
    ) -> tuple[TaxLineItem, ...]:
        return monthly_vat_lines(
            ledger,
            context,
            label_prefix=self._params.vat.label_prefix,
            rate_bps=self._params.vat.standard_rate_bps,
        )

    def compute_income_tax(
        self, bases: ComputedBases, context: FiscalContext
    ) -> tuple[TaxLineItem, ...]:
        return income_tax.compute_income_tax(bases, context, self._params)

    def compute_schedule(
        self, taxes: Sequence[TaxLineItem], context: FiscalContext
    ) -> tuple[ScheduleItem, ...]:
        return schedule.compute_schedule(taxes, context, self._params)

    def compute_alerts(
        self,
        bases: ComputedBases,
        taxes: Sequence[TaxLineItem],
        context: FiscalContext,
    ) -> tuple[FiscalAlert, ...]:
        return alerts.compute_alerts(bases, taxes, context, self._params)
