"""
Result records produced by ruleset modules, the dispatcher and the projector.

Responsibility:
    Immutable, fingerprintable records for tax lines, the payment schedule,
    taxable bases, alerts, the fiscal output and the treasury ledger.

Architecture position:
    Kernel > Domain -- pure data, no I/O.

Invariants enforced:
    - Every amount is an integer number of cents (checked at construction).
    - ``VatPeriod`` / ``VatBases`` enforce ``balance == collected - deductible``.
    - ``TreasuryAnchor.month_index`` is within [-1, 11].
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from fiscal_kernel.domain.money import require_bps, require_cents
from fiscal_kernel.domain.values import NormalizedOperation
from fiscal_kernel.exceptions import InvalidAnchorError
from fiscal_kernel.utils.hashing import canonicalize


class Organization(str, Enum):
    """Collecting organization owning a tax line."""

    URSSAF_AA = "URSSAF_AA"
    IRCEC = "IRCEC"
    DGFIP = "DGFIP"
    OTHER = "OTHER"


class TaxCategory(str, Enum):
    SOCIAL = "SOCIAL"
    FISCAL = "FISCAL"
    VAT = "VAT"


class Confidence(str, Enum):
    ESTIMATED = "ESTIMATED"
    CERTIFIED = "CERTIFIED"


class ScheduleType(str, Enum):
    PROVISION = "PROVISION"
    REGULARIZATION = "REGULARIZATION"
    BALANCE = "BALANCE"


class ScheduleStatus(str, Enum):
    PENDING = "PENDING"
    LOCKED = "LOCKED"


class AlertSeverity(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


class FiscalMode(str, Enum):
    ESTIMATED = "ESTIMATED"
    CERTIFIED = "CERTIFIED"


# ---------------------------------------------------------------------------
# Tax lines and schedule
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CapApplied:
    name: str
    value: int


@dataclass(frozen=True)
class JuridicalBasis:
    source: str
    ref: str


@dataclass(frozen=True)
class TaxLineItem:
    """
    One computed contribution or tax amount.

    Produced by ruleset modules; never mutated afterward.
    """

    code: str
    label: str
    base: int
    rate_bps: int
    amount: int
    organization: Organization
    category: TaxCategory
    confidence: Confidence
    formula: str | None = None
    cap_applied: CapApplied | None = None
    juridical_basis: JuridicalBasis | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        require_cents(self.base, f"TaxLineItem[{self.code}].base")
        require_cents(self.amount, f"TaxLineItem[{self.code}].amount")
        require_bps(self.rate_bps, f"TaxLineItem[{self.code}].rate_bps")


@dataclass(frozen=True)
class ScheduleItem:
    """One dated payable obligation, traceable to the lines it aggregates."""

    id: str
    date: date
    label: str
    amount: int
    organization: Organization
    category: TaxCategory
    type: ScheduleType
    confidence: Confidence
    status: ScheduleStatus = ScheduleStatus.PENDING
    source_line_codes: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        require_cents(self.amount, f"ScheduleItem[{self.id}].amount")


# ---------------------------------------------------------------------------
# Bases
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class VatPeriod:
    collected: int
    deductible: int
    balance: int

    def __post_init__(self) -> None:
        if self.balance != self.collected - self.deductible:
            raise ValueError(
                f"VAT period balance {self.balance} != "
                f"{self.collected} - {self.deductible}"
            )

    @classmethod
    def of(cls, collected: int, deductible: int) -> VatPeriod:
        return cls(collected, deductible, collected - deductible)


@dataclass(frozen=True)
class SocialBases:
    total: int = 0
    artistic: int = 0
    other: int = 0


@dataclass(frozen=True)
class FiscalBases:
    total_net_taxable: int = 0
    revenue: int = 0
    deductible_expenses: int = 0


@dataclass(frozen=True)
class VatBases:
    collected: int = 0
    deductible: int = 0
    balance: int = 0
    by_period: Mapping[str, VatPeriod] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.balance != self.collected - self.deductible:
            raise ValueError(
                f"VAT balance {self.balance} != {self.collected} - {self.deductible}"
            )


@dataclass(frozen=True)
class ComputedBases:
    social: SocialBases = field(default_factory=SocialBases)
    fiscal: FiscalBases = field(default_factory=FiscalBases)
    vat: VatBases = field(default_factory=VatBases)


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FiscalAlert:
    """Advisory diagnostic. Alerts never change computed amounts."""

    code: str
    severity: AlertSeverity
    message: str
    trigger_value: int | None = None
    threshold_value: int | None = None
    recommended_action: str | None = None


@dataclass(frozen=True)
class OutputMetadata:
    engine_version: str
    ruleset_year: int
    ruleset_revision: str
    fiscal_hash: str
    computed_at: str
    params_fingerprint: str
    context_fingerprint: str
    ledger_fingerprint: str
    mode: FiscalMode


@dataclass(frozen=True)
class TaxesByOrganization:
    urssaf: tuple[TaxLineItem, ...] = ()
    ircec: tuple[TaxLineItem, ...] = ()
    vat: tuple[TaxLineItem, ...] = ()
    income_tax: tuple[TaxLineItem, ...] = ()

    def all_lines(self) -> tuple[TaxLineItem, ...]:
        return self.urssaf + self.ircec + self.vat + self.income_tax


@dataclass(frozen=True)
class FiscalOutput:
    """The canonical, fingerprinted result of one computation."""

    metadata: OutputMetadata
    bases: ComputedBases
    taxes: TaxesByOrganization
    schedule: tuple[ScheduleItem, ...]
    alerts: tuple[FiscalAlert, ...]


# ---------------------------------------------------------------------------
# Treasury ledger
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TreasuryAnchor:
    """A known treasury balance at the start of month ``month_index``.

    ``month_index == -1`` means the amount is the January 1st opening balance.
    """

    amount_cents: int = 0
    month_index: int = -1

    def __post_init__(self) -> None:
        require_cents(self.amount_cents, "TreasuryAnchor.amount_cents")
        if isinstance(self.month_index, bool) or not isinstance(self.month_index, int):
            raise InvalidAnchorError(self.month_index)
        if not -1 <= self.month_index <= 11:
            raise InvalidAnchorError(self.month_index)


@dataclass(frozen=True)
class LedgerMonth:
    month: str
    month_index: int
    income_ttc: int = 0
    expense_perso_ttc: int = 0
    expense_pro_ttc: int = 0
    expense_other_ttc: int = 0
    vat_collected: int = 0
    vat_deductible: int = 0
    vat_due: int = 0
    urssaf_cash: int = 0
    ircec_cash: int = 0
    income_tax_cash: int = 0
    vat_cash: int = 0
    other_taxes_cash: int = 0
    net_cashflow: int = 0
    closing_treasury: int = 0
    provision_social: int = 0
    provision_tax: int = 0
    provision_vat: int = 0

    @property
    def total_outflow(self) -> int:
        return (
            self.expense_perso_ttc
            + self.expense_pro_ttc
            + self.expense_other_ttc
            + self.urssaf_cash
            + self.ircec_cash
            + self.income_tax_cash
            + self.vat_cash
            + self.other_taxes_cash
        )


@dataclass(frozen=True)
class LedgerFinal:
    months: tuple[LedgerMonth, ...]
    initial_treasury: int
    projected_treasury: int
    current_year_provision_social: int
    current_year_provision_tax: int
    current_year_provision_vat: int


@dataclass(frozen=True)
class FiscalSnapshot:
    """Output + ledger + the granular operations used to build them."""

    output: FiscalOutput
    ledger: LedgerFinal
    projected_operations: tuple[NormalizedOperation, ...]

    def to_dict(self) -> dict[str, Any]:
        """Stable JSON-compatible structure (enum values, ISO dates)."""
        return json.loads(canonicalize(self))
