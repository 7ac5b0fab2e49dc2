"""Fiscal output plus the projected treasury ledger, in one call."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from fiscal_engines import normalize_entries, project_ledger
from fiscal_kernel.domain.outputs import FiscalSnapshot, TreasuryAnchor
from fiscal_kernel.domain.values import Entry, FiscalContext
from fiscal_services.dispatcher import compute_fiscal


def compute_fiscal_snapshot(
    entries: Sequence[Entry],
    context: FiscalContext,
    anchor: TreasuryAnchor = TreasuryAnchor(0, -1),
    *,
    rulesets_dir: Path | None = None,
    correlation_id: str | None = None,
) -> FiscalSnapshot:
    output = compute_fiscal(
        entries, context, rulesets_dir=rulesets_dir, correlation_id=correlation_id
    )
    operations = normalize_entries(
        entries,
        tax_year=context.tax_year,
        tax_payments_as_company_expense=context.tax_payments_as_company_expense,
        default_vat_rate_bps=context.options.default_vat_rate_bps,
    )
    ledger = project_ledger(output, operations, anchor)
    return FiscalSnapshot(output=output, ledger=ledger, projected_operations=operations)
