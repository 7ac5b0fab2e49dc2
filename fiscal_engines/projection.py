"""
Treasury Projector -- month-by-month ledger with provisions and anchor.

Responsibility:
    Merge the normalized cashflow ledger with the payment schedule into
    twelve LedgerMonth rows, derive non-negative provisions (accrued but
    unpaid liability) and reconcile the treasury against a caller anchor.

Architecture position:
    Engines -- pure function over kernel records, no I/O.

Invariants enforced:
    - A manual cash payment for a category in a month suppresses the
      scheduled amount of that same category and month.
    - Schedule items dated outside the ruleset year are ignored.
    - Replaying the solved opening balance plus the monthly net cashflows
      reproduces the anchor amount exactly at the anchor month.

Failure modes:
    - InvalidAnchorError when the anchor month is outside [-1, 11].
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from fiscal_engines.tracer import traced_engine
from fiscal_kernel.domain.outputs import (
    FiscalOutput,
    LedgerFinal,
    LedgerMonth,
    Organization,
    ScheduleItem,
    TaxCategory,
    TreasuryAnchor,
)
from fiscal_kernel.domain.values import (
    CATEGORY_FISCAL,
    CATEGORY_NON_DEDUCTIBLE,
    CATEGORY_SOCIAL,
    CATEGORY_VAT,
    MONTH_LABELS,
    SUBCATEGORY_INCOME_TAX,
    SUBCATEGORY_IRCEC,
    SUBCATEGORY_URSSAF,
    Direction,
    NormalizedOperation,
    OperationKind,
    Scope,
)
from fiscal_kernel.exceptions import InvalidAnchorError
from fiscal_kernel.logging_config import get_logger

logger = get_logger("engines.projection")

# Cash columns that a manual payment can pre-empt.
URSSAF_CASH = "urssaf_cash"
IRCEC_CASH = "ircec_cash"
INCOME_TAX_CASH = "income_tax_cash"
VAT_CASH = "vat_cash"
OTHER_TAXES_CASH = "other_taxes_cash"


@dataclass
class _MonthAccumulator:
    income_ttc: int = 0
    expense_perso_ttc: int = 0
    expense_pro_ttc: int = 0
    expense_other_ttc: int = 0
    vat_collected: int = 0
    vat_deductible: int = 0
    urssaf_cash: int = 0
    ircec_cash: int = 0
    income_tax_cash: int = 0
    vat_cash: int = 0
    other_taxes_cash: int = 0

    def __post_init__(self) -> None:
        self.manual_columns: set[str] = set()

    def add_cash(self, column: str, amount: int, *, manual: bool) -> None:
        setattr(self, column, getattr(self, column) + amount)
        if manual:
            self.manual_columns.add(column)

    @property
    def inflow(self) -> int:
        return self.income_ttc

    @property
    def outflow(self) -> int:
        return (
            self.expense_pro_ttc
            + self.expense_perso_ttc
            + self.expense_other_ttc
            + self.urssaf_cash
            + self.ircec_cash
            + self.income_tax_cash
            + self.vat_cash
            + self.other_taxes_cash
        )


def _operation_column(op: NormalizedOperation) -> str | None:
    """Cash column of a manual tax payment, or None for ordinary flows."""
    if op.category == CATEGORY_SOCIAL:
        if op.subcategory == SUBCATEGORY_URSSAF:
            return URSSAF_CASH
        if op.subcategory == SUBCATEGORY_IRCEC:
            return IRCEC_CASH
        return OTHER_TAXES_CASH
    if op.category == CATEGORY_FISCAL:
        if op.subcategory == SUBCATEGORY_INCOME_TAX:
            return INCOME_TAX_CASH
        return OTHER_TAXES_CASH
    if op.category == CATEGORY_VAT:
        return VAT_CASH
    return None


def _schedule_column(item: ScheduleItem) -> str:
    if item.organization == Organization.URSSAF_AA:
        return URSSAF_CASH
    if item.organization == Organization.IRCEC:
        return IRCEC_CASH
    if item.organization == Organization.DGFIP and item.category == TaxCategory.FISCAL:
        return INCOME_TAX_CASH
    if item.organization == Organization.DGFIP and item.category == TaxCategory.VAT:
        return VAT_CASH
    return OTHER_TAXES_CASH


def _book_operation(row: _MonthAccumulator, op: NormalizedOperation) -> None:
    if op.direction == Direction.IN:
        if op.kind == OperationKind.REVENUE:
            row.income_ttc += op.amount_ttc
            row.vat_collected += op.amount_vat
        return

    is_income_tax = op.category == CATEGORY_FISCAL and op.subcategory == SUBCATEGORY_INCOME_TAX
    if op.scope == Scope.PERSO and not is_income_tax:
        row.expense_perso_ttc += op.amount_ttc
        return

    column = _operation_column(op)
    if column is not None:
        row.add_cash(column, op.amount_ttc, manual=True)
    elif op.category == CATEGORY_NON_DEDUCTIBLE:
        row.expense_other_ttc += op.amount_ttc
    else:
        row.expense_pro_ttc += op.amount_ttc
        row.vat_deductible += op.amount_vat


def solve_initial_treasury(anchor: TreasuryAnchor, net_cashflows: Sequence[int]) -> int:
    """Back-solve the January 1st balance from an anchor.

    ``month_index == -1`` means the anchor already is the opening balance;
    otherwise the balance is the anchor minus the net cashflows of the
    months before the anchor month.
    """
    if not -1 <= anchor.month_index <= 11:
        raise InvalidAnchorError(anchor.month_index)
    if anchor.month_index == -1:
        return anchor.amount_cents
    return anchor.amount_cents - sum(net_cashflows[: anchor.month_index])


@traced_engine("treasury_projector", "2.0", fingerprint_fields=("anchor",))
def project_ledger(
    output: FiscalOutput,
    operations: Sequence[NormalizedOperation],
    anchor: TreasuryAnchor,
) -> LedgerFinal:
    """
    Project the fiscal year month by month.

    Preconditions:
        - ``operations`` belong to the ruleset year of ``output``.
    Postconditions:
        - Exactly twelve rows, January first.
        - The balance at the start of the anchor month (the previous
          month's closing treasury) equals the anchor amount.
    """
    rows = [_MonthAccumulator() for _ in range(12)]

    for op in operations:
        _book_operation(rows[op.month_index], op)

    year = output.metadata.ruleset_year
    ignored = 0
    suppressed = 0
    for item in output.schedule:
        if item.date.year != year:
            ignored += 1
            continue
        row = rows[item.date.month - 1]
        column = _schedule_column(item)
        if column in row.manual_columns:
            suppressed += 1
            continue
        row.add_cash(column, item.amount, manual=False)

    social_liability = sum(t.amount for t in output.taxes.urssaf + output.taxes.ircec)
    tax_liability = sum(t.amount for t in output.taxes.income_tax)
    vat_liability = output.bases.vat.balance

    net_cashflows = [row.inflow - row.outflow for row in rows]
    initial = solve_initial_treasury(anchor, net_cashflows)

    months: list[LedgerMonth] = []
    social_paid = tax_paid = vat_paid = 0
    running = initial
    for index, row in enumerate(rows):
        social_paid += row.urssaf_cash + row.ircec_cash
        tax_paid += row.income_tax_cash
        vat_paid += row.vat_cash
        running += net_cashflows[index]
        months.append(
            LedgerMonth(
                month=MONTH_LABELS[index],
                month_index=index,
                income_ttc=row.income_ttc,
                expense_perso_ttc=row.expense_perso_ttc,
                expense_pro_ttc=row.expense_pro_ttc,
                expense_other_ttc=row.expense_other_ttc,
                vat_collected=row.vat_collected,
                vat_deductible=row.vat_deductible,
                vat_due=max(0, row.vat_collected - row.vat_deductible),
                urssaf_cash=row.urssaf_cash,
                ircec_cash=row.ircec_cash,
                income_tax_cash=row.income_tax_cash,
                vat_cash=row.vat_cash,
                other_taxes_cash=row.other_taxes_cash,
                net_cashflow=net_cashflows[index],
                closing_treasury=running,
                provision_social=max(0, social_liability - social_paid),
                provision_tax=max(0, tax_liability - tax_paid),
                provision_vat=max(0, vat_liability - vat_paid),
            )
        )

    logger.info(
        "ledger_projected",
        extra={
            "initial_treasury": initial,
            "projected_treasury": running,
            "anchor_month_index": anchor.month_index,
            "schedule_items_outside_year": ignored,
            "schedule_items_suppressed": suppressed,
        },
    )

    return LedgerFinal(
        months=tuple(months),
        initial_treasury=initial,
        projected_treasury=running,
        current_year_provision_social=social_liability,
        current_year_provision_tax=tax_liability,
        current_year_provision_vat=vat_liability,
    )


def replay_treasury(ledger: LedgerFinal, month_index: int) -> int:
    """Balance at the start of ``month_index`` rebuilt from the opening balance."""
    return ledger.initial_treasury + sum(
        m.net_cashflow for m in ledger.months[:month_index]
    )


__all__ = [
    "project_ledger",
    "replay_treasury",
    "solve_initial_treasury",
]