"""
fiscal_services.dispatcher -- the fiscal computation pipeline.

Responsibility:
    Run one computation end to end: normalize the entries, qualify the
    ledger, select the ruleset, compute bases, tax lines, schedule and
    alerts, then fingerprint and assemble the FiscalOutput.

Architecture position:
    Services -- orchestration over engines, config-backed modules and the
    kernel. The only place where the pipeline stages are composed.

Invariants enforced:
    - Determinism: the same entries (in any order) and the same context
      yield the same output and the same fiscal hash.
    - The fiscal hash covers the engine version, the ruleset year and
      revision, the params fingerprint, the context fingerprint and the
      fingerprint of the sorted qualified ledger.
    - Unknown rulesets never fail: the explicit fallback is used and a
      warning is logged.

Failure modes:
    - MonetaryError from any stage on a non-integer amount.
    - ConfigIntegrityError / FileNotFoundError when a supported ruleset's
      parameters cannot be loaded or no longer match their pin.

Audit relevance:
    The ``fiscal_computed`` record carries every fingerprint, so a stored
    output can be matched with the exact inputs and parameters behind it.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from fiscal_engines import normalize_entries, qualify_ledger
from fiscal_kernel import __version__ as ENGINE_VERSION
from fiscal_kernel.domain.outputs import (
    FiscalMode,
    FiscalOutput,
    OutputMetadata,
    TaxesByOrganization,
)
from fiscal_kernel.domain.values import Entry, FiscalContext, QualifiedOperation
from fiscal_kernel.logging_config import LogContext, get_logger
from fiscal_kernel.utils.hashing import fingerprint, fiscal_fingerprint
from fiscal_modules import FallbackRuleset, RulesetModule, select_ruleset

logger = get_logger("services.dispatcher")


def ledger_fingerprint(ledger: Sequence[QualifiedOperation]) -> str:
    """Fingerprint of the qualified ledger, flags included, in (date, id) order."""
    return fingerprint(sorted(ledger, key=lambda q: q.sort_key))


def context_fingerprint(context: FiscalContext) -> str:
    return fingerprint(context.fingerprint_payload())


def _resolve_module(context: FiscalContext, rulesets_dir: Path | None) -> RulesetModule:
    selection = select_ruleset(context, rulesets_dir)
    if isinstance(selection, FallbackRuleset):
        logger.warning(
            "ruleset_fallback_selected",
            extra={
                "reason": selection.reason,
                "fallback_key": selection.module.key,
            },
        )
    return selection.module


def compute_fiscal(
    entries: Sequence[Entry],
    context: FiscalContext,
    *,
    rulesets_dir: Path | None = None,
    correlation_id: str | None = None,
) -> FiscalOutput:
    """
    Compute the fiscal output of one tax year.

    Preconditions:
        - ``entries`` are validated records (see fiscal_kernel.domain.validation).
    Postconditions:
        - ``metadata.fiscal_hash`` is 64 lowercase hex characters.
        - ``metadata.mode`` is ESTIMATED iff ``context.options.estimate_mode``.
        - The schedule is sorted by (date, id).
    """
    with LogContext.bind(
        correlation_id=correlation_id,
        tax_year=str(context.tax_year),
        user_status=context.user_status.value,
    ):
        operations = normalize_entries(
            entries,
            tax_year=context.tax_year,
            tax_payments_as_company_expense=context.tax_payments_as_company_expense,
            default_vat_rate_bps=context.options.default_vat_rate_bps,
        )
        ledger = qualify_ledger(operations, context)

        module = _resolve_module(context, rulesets_dir)
        with LogContext.bind(ruleset=module.key):
            bases = module.compute_bases(ledger, context)
            taxes = TaxesByOrganization(
                urssaf=module.compute_social_contributions(bases, context),
                ircec=module.compute_supplementary_pension(bases, context),
                vat=module.compute_vat(ledger, context),
                income_tax=module.compute_income_tax(bases, context),
            )
            all_lines = taxes.all_lines()
            schedule = module.compute_schedule(all_lines, context)
            alerts = module.compute_alerts(bases, all_lines, context)

            ledger_fp = ledger_fingerprint(ledger)
            context_fp = context_fingerprint(context)
            fiscal_hash = fiscal_fingerprint(
                engine_version=ENGINE_VERSION,
                ruleset_year=context.tax_year,
                ruleset_revision=module.revision,
                params_fingerprint=module.params_fingerprint,
                context_fingerprint=context_fp,
                ledger_fingerprint=ledger_fp,
            )

            metadata = OutputMetadata(
                engine_version=ENGINE_VERSION,
                ruleset_year=context.tax_year,
                ruleset_revision=module.revision,
                fiscal_hash=fiscal_hash,
                computed_at=context.as_of.isoformat(),
                params_fingerprint=module.params_fingerprint,
                context_fingerprint=context_fp,
                ledger_fingerprint=ledger_fp,
                mode=(
                    FiscalMode.ESTIMATED
                    if context.options.estimate_mode
                    else FiscalMode.CERTIFIED
                ),
            )

            with LogContext.bind(fiscal_hash=fiscal_hash):
                logger.info(
                    "fiscal_computed",
                    extra={
                        "operation_count": len(ledger),
                        "tax_line_count": len(all_lines),
                        "schedule_item_count": len(schedule),
                        "alert_count": len(alerts),
                        "params_fingerprint": module.params_fingerprint,
                        "context_fingerprint": context_fp,
                        "ledger_fingerprint": ledger_fp,
                    },
                )

    return FiscalOutput(
        metadata=metadata,
        bases=bases,
        taxes=taxes,
        schedule=schedule,
        alerts=alerts,
    )
