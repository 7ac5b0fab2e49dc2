"""
Dashboard view-model records.

Every record validates itself at construction: a breakdown that does not
sum to its total, an unsorted code list or a VAT summary whose status
disagrees with its balance can never be built. Such failures are defects
in the engine output and raise PresenterError subclasses.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from fiscal_kernel.domain.money import BPS_SCALE, sum_cents
from fiscal_kernel.domain.outputs import (
    Confidence,
    FiscalMode,
    Organization,
    ScheduleItem,
    TaxCategory,
    TaxLineItem,
)
from fiscal_kernel.exceptions import DashboardInvariantError, VatSummaryInconsistentError
from fiscal_kernel.utils.hashing import canonicalize

# Any change to the field set of these records requires bumping this literal.
DASHBOARD_MODEL_VERSION = "1.0"

_YEAR_MONTH = re.compile(r"^\d{4}-\d{2}$")


def _require_unique_sorted(values: Sequence[str], invariant: str) -> None:
    expected = tuple(sorted(set(values)))
    if tuple(values) != expected:
        raise DashboardInvariantError(invariant, expected, tuple(values))


class VatStatus(str, Enum):
    PAYMENT_DUE = "PAYMENT_DUE"
    CREDIT_CARRY_FORWARD = "CREDIT_CARRY_FORWARD"
    BALANCED = "BALANCED"


class MonthStatus(str, Enum):
    PAST = "PAST"
    CURRENT = "CURRENT"
    FUTURE = "FUTURE"


@dataclass(frozen=True)
class VatSummary:
    """
    VAT position split into the amount to pay and the credit to carry.

    Exactly one of ``due`` / ``credit`` is non-zero unless the balance is
    zero. Build it with ``from_balance``; the constructor rejects any other
    combination.
    """

    collected: int
    deductible: int
    balance: int
    due: int
    credit: int
    status: VatStatus

    def __post_init__(self) -> None:
        object.__setattr__(self, "status", VatStatus(self.status))
        if self.balance > 0:
            expected_status = VatStatus.PAYMENT_DUE
        elif self.balance < 0:
            expected_status = VatStatus.CREDIT_CARRY_FORWARD
        else:
            expected_status = VatStatus.BALANCED
        if (
            self.due != max(0, self.balance)
            or self.credit != max(0, -self.balance)
            or self.status != expected_status
            or self.balance != self.collected - self.deductible
        ):
            raise VatSummaryInconsistentError(
                self.balance, self.due, self.credit, self.status.value
            )

    @classmethod
    def from_balance(cls, collected: int, deductible: int) -> VatSummary:
        balance = collected - deductible
        if balance > 0:
            status = VatStatus.PAYMENT_DUE
        elif balance < 0:
            status = VatStatus.CREDIT_CARRY_FORWARD
        else:
            status = VatStatus.BALANCED
        return cls(
            collected=collected,
            deductible=deductible,
            balance=balance,
            due=max(0, balance),
            credit=max(0, -balance),
            status=status,
        )


@dataclass(frozen=True)
class Explanation:
    """How a KPI was derived; must reference at least one line code or schedule id."""

    formula: str
    source_line_codes: tuple[str, ...] = ()
    schedule_ids: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not self.source_line_codes and not self.schedule_ids:
            raise DashboardInvariantError(
                "explanation_has_source", "line codes or schedule ids", "none"
            )
        _require_unique_sorted(self.source_line_codes, "explanation_line_codes_sorted")
        _require_unique_sorted(self.schedule_ids, "explanation_schedule_ids_sorted")


@dataclass(frozen=True)
class NextDue:
    date: date
    amount: int
    organization: Organization
    label: str
    confidence: Confidence
    days_remaining: int


@dataclass(frozen=True)
class BreakdownItem:
    key: str
    label: str
    amount: int
    percentage_bps: int
    line_codes: tuple[str, ...]

    def __post_init__(self) -> None:
        if not 0 <= self.percentage_bps <= BPS_SCALE:
            raise DashboardInvariantError(
                f"breakdown_percentage_range[{self.key}]",
                f"0..{BPS_SCALE}",
                self.percentage_bps,
            )
        _require_unique_sorted(self.line_codes, f"breakdown_line_codes_sorted[{self.key}]")


@dataclass(frozen=True)
class Breakdowns:
    by_organization: tuple[BreakdownItem, ...]
    by_category: tuple[BreakdownItem, ...]
    vat: VatSummary


@dataclass(frozen=True)
class MonthlyTaxFlowItem:
    organization: Organization
    amount: int
    schedule_ids: tuple[str, ...]

    def __post_init__(self) -> None:
        _require_unique_sorted(self.schedule_ids, "monthly_flow_schedule_ids_sorted")


@dataclass(frozen=True)
class MonthlyTaxFlow:
    """Scheduled tax cash of one ``YYYY-MM`` month, grouped by organization."""

    month: str
    total_due: int
    items: tuple[MonthlyTaxFlowItem, ...]
    status: MonthStatus

    def __post_init__(self) -> None:
        if not _YEAR_MONTH.match(self.month):
            raise DashboardInvariantError("monthly_flow_month_format", "YYYY-MM", self.month)
        items_total = sum_cents(item.amount for item in self.items)
        if items_total != self.total_due:
            raise DashboardInvariantError(
                f"monthly_flow_total[{self.month}]", items_total, self.total_due
            )


@dataclass(frozen=True)
class DashboardMeta:
    dashboard_model_version: str
    as_of: str
    engine_version: str
    ruleset_year: int
    ruleset_revision: str
    params_fingerprint: str
    fiscal_output_hash: str
    mode: FiscalMode

    def __post_init__(self) -> None:
        if self.dashboard_model_version != DASHBOARD_MODEL_VERSION:
            raise DashboardInvariantError(
                "dashboard_model_version",
                DASHBOARD_MODEL_VERSION,
                self.dashboard_model_version,
            )


@dataclass(frozen=True)
class Kpis:
    fiscal_base: int
    social_base: int
    urssaf_total: int
    raap_total: int
    total_taxes: int
    taxes_due: int
    explain: Mapping[str, Explanation] = field(default_factory=dict)


@dataclass(frozen=True)
class DashboardModel:
    """
    The read-only summary handed to presentation layers.

    Invariants (checked here, at construction):
        - sum(by_organization) == kpis.total_taxes
        - sum(by_category) == kpis.total_taxes
        - the raw line items sum to kpis.total_taxes
    """

    meta: DashboardMeta
    kpis: Kpis
    next_due: NextDue | None
    breakdowns: Breakdowns
    taxes_due_by_month: tuple[MonthlyTaxFlow, ...]
    line_items: tuple[TaxLineItem, ...]
    schedule: tuple[ScheduleItem, ...]

    def __post_init__(self) -> None:
        total = self.kpis.total_taxes
        by_org = sum_cents(item.amount for item in self.breakdowns.by_organization)
        if by_org != total:
            raise DashboardInvariantError("sum_by_organization", total, by_org)
        by_cat = sum_cents(item.amount for item in self.breakdowns.by_category)
        if by_cat != total:
            raise DashboardInvariantError("sum_by_category", total, by_cat)
        lines = sum_cents(line.amount for line in self.line_items)
        if lines != total:
            raise DashboardInvariantError("sum_line_items", total, lines)
        months = [flow.month for flow in self.taxes_due_by_month]
        _require_unique_sorted(months, "monthly_flows_sorted")

    def to_dict(self) -> dict[str, Any]:
        return json.loads(canonicalize(self))
