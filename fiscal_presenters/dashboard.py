"""
Dashboard compiler -- FiscalOutput to DashboardModel.

Responsibility:
    Derive the KPIs, breakdowns, next-due payment, VAT summary and monthly
    cash-due buckets from an already computed FiscalOutput.

Architecture position:
    Presenters -- read-only consumers of fiscal_kernel records. No business
    rule is evaluated here; every figure is a sum or a selection of engine
    results.

Invariants enforced:
    - Two views of taxes: the load (sum of all tax lines) and the cash due
      (pending schedule items on or after the reference date).
    - Breakdowns by organization and by category each sum to the load.

Failure modes:
    - DashboardInvariantError / VatSummaryInconsistentError when the
      engine output does not reconcile.
"""

from __future__ import annotations

from datetime import datetime, timezone

from fiscal_kernel.domain.money import percentage_bps
from fiscal_kernel.domain.outputs import (
    FiscalOutput,
    Organization,
    ScheduleItem,
    TaxCategory,
    TaxLineItem,
)
from fiscal_kernel.domain.values import period_key
from fiscal_kernel.logging_config import get_logger
from fiscal_presenters import selectors as sel
from fiscal_presenters.models import (
    DASHBOARD_MODEL_VERSION,
    BreakdownItem,
    Breakdowns,
    DashboardMeta,
    DashboardModel,
    Explanation,
    Kpis,
    MonthlyTaxFlow,
    MonthlyTaxFlowItem,
    MonthStatus,
    NextDue,
    VatSummary,
)

logger = get_logger("presenters.dashboard")

ORGANIZATION_LABELS: dict[Organization, str] = {
    Organization.URSSAF_AA: "URSSAF",
    Organization.IRCEC: "IRCEC",
    Organization.DGFIP: "DGFIP",
    Organization.OTHER: "OTHER",
}


def _organization_breakdown(
    lines: tuple[TaxLineItem, ...], total: int
) -> tuple[BreakdownItem, ...]:
    items = []
    for organization in Organization:
        amount = sel.sum_by_organization(lines, organization)
        items.append(
            BreakdownItem(
                key=organization.value,
                label=ORGANIZATION_LABELS[organization],
                amount=amount,
                percentage_bps=percentage_bps(amount, total),
                line_codes=sel.codes_where(lines, lambda l, o=organization: l.organization == o),
            )
        )
    return tuple(items)


def _category_breakdown(
    lines: tuple[TaxLineItem, ...], total: int
) -> tuple[BreakdownItem, ...]:
    items = []
    for category in TaxCategory:
        amount = sel.sum_by_category(lines, category)
        items.append(
            BreakdownItem(
                key=category.value,
                label=category.value,
                amount=amount,
                percentage_bps=percentage_bps(amount, total),
                line_codes=sel.codes_where(lines, lambda l, c=category: l.category == c),
            )
        )
    return tuple(items)


def _explanations(
    lines: tuple[TaxLineItem, ...], schedule: tuple[ScheduleItem, ...], as_of: datetime
) -> dict[str, Explanation]:
    candidates = {
        "urssaf_total": (
            "SUM(lines WHERE organization=URSSAF_AA)",
            sel.codes_where(lines, lambda l: l.organization == Organization.URSSAF_AA),
            (),
        ),
        "raap_total": (
            "SUM(lines WHERE organization=IRCEC)",
            sel.codes_where(lines, lambda l: l.organization == Organization.IRCEC),
            (),
        ),
        "total_taxes": (
            "SUM(all tax lines)",
            sel.unique_sorted(line.code for line in lines),
            (),
        ),
        "taxes_due": (
            "SUM(schedule.amount WHERE status=PENDING AND date>=as_of)",
            (),
            sel.ids_where(schedule, lambda s: sel.is_due(s, as_of.date())),
        ),
    }
    # A KPI without any source has nothing to explain.
    return {
        name: Explanation(formula=formula, source_line_codes=codes, schedule_ids=ids)
        for name, (formula, codes, ids) in candidates.items()
        if codes or ids
    }


def _monthly_flows(
    schedule: tuple[ScheduleItem, ...], as_of: datetime
) -> tuple[MonthlyTaxFlow, ...]:
    current = period_key(as_of.date())
    flows = []
    for month, items in sel.group_schedule_by_month(schedule).items():
        grouped: dict[Organization, list[ScheduleItem]] = {}
        for item in items:
            grouped.setdefault(item.organization, []).append(item)
        flow_items = tuple(
            MonthlyTaxFlowItem(
                organization=organization,
                amount=sum(item.amount for item in members),
                schedule_ids=sel.unique_sorted(item.id for item in members),
            )
            for organization, members in sorted(grouped.items(), key=lambda kv: kv[0].value)
        )
        if month < current:
            status = MonthStatus.PAST
        elif month == current:
            status = MonthStatus.CURRENT
        else:
            status = MonthStatus.FUTURE
        flows.append(
            MonthlyTaxFlow(
                month=month,
                total_due=sum(item.amount for item in flow_items),
                items=flow_items,
                status=status,
            )
        )
    return tuple(flows)


def compile_dashboard(output: FiscalOutput, as_of: datetime) -> DashboardModel:
    """
    Build the dashboard view model of ``output`` as seen on ``as_of``.

    A naive ``as_of`` is taken as UTC. Only its calendar date matters for
    due-date comparisons.
    """
    if as_of.tzinfo is None:
        as_of = as_of.replace(tzinfo=timezone.utc)
    today = as_of.date()

    lines = output.taxes.all_lines()
    schedule = output.schedule
    total = sel.sum_line_amounts(lines)

    next_item = sel.select_next_due(schedule, today)
    next_due = None
    if next_item is not None:
        next_due = NextDue(
            date=next_item.date,
            amount=next_item.amount,
            organization=next_item.organization,
            label=next_item.label,
            confidence=next_item.confidence,
            days_remaining=sel.days_between(today, next_item.date),
        )

    model = DashboardModel(
        meta=DashboardMeta(
            dashboard_model_version=DASHBOARD_MODEL_VERSION,
            as_of=as_of.isoformat(),
            engine_version=output.metadata.engine_version,
            ruleset_year=output.metadata.ruleset_year,
            ruleset_revision=output.metadata.ruleset_revision,
            params_fingerprint=output.metadata.params_fingerprint,
            fiscal_output_hash=output.metadata.fiscal_hash,
            mode=output.metadata.mode,
        ),
        kpis=Kpis(
            fiscal_base=output.bases.fiscal.total_net_taxable,
            social_base=output.bases.social.total,
            urssaf_total=sel.sum_by_organization(lines, Organization.URSSAF_AA),
            raap_total=sel.sum_by_organization(lines, Organization.IRCEC),
            total_taxes=total,
            taxes_due=sel.sum_due_schedule(schedule, today),
            explain=_explanations(lines, schedule, as_of),
        ),
        next_due=next_due,
        breakdowns=Breakdowns(
            by_organization=_organization_breakdown(lines, total),
            by_category=_category_breakdown(lines, total),
            vat=VatSummary.from_balance(output.bases.vat.collected, output.bases.vat.deductible),
        ),
        taxes_due_by_month=_monthly_flows(schedule, as_of),
        line_items=lines,
        schedule=schedule,
    )
    logger.debug(
        "dashboard_compiled",
        extra={
            "fiscal_hash": output.metadata.fiscal_hash,
            "total_taxes": total,
            "taxes_due": model.kpis.taxes_due,
        },
    )
    return model
