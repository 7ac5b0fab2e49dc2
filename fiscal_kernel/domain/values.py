"""
Domain value types for the fiscal pipeline inputs and intermediate ledger.

All records are frozen dataclasses; enumerations are ``str`` enums so they
canonicalize as their value. Constructors validate integer cents / bps so
that a malformed value can never reach a calculation silently.
"""

from __future__ import annotations

import calendar
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from fiscal_kernel.domain.money import require_bps, require_cents


class EntryNature(str, Enum):
    """What kind of financial fact an entry records."""

    INCOME = "INCOME"
    EXPENSE_PRO = "EXPENSE_PRO"
    EXPENSE_PERSO = "EXPENSE_PERSO"
    TAX_SOCIAL = "TAX_SOCIAL"
    TRANSFER = "TRANSFER"


class Scope(str, Enum):
    PRO = "pro"
    PERSO = "perso"


class Periodicity(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class Direction(str, Enum):
    IN = "in"
    OUT = "out"


class OperationKind(str, Enum):
    REVENUE = "REVENUE"
    EXPENSE = "EXPENSE"
    TAX_PAYMENT = "TAX_PAYMENT"
    TRANSFER = "TRANSFER"


class UserStatus(str, Enum):
    """Legal/tax status of the self-employed worker."""

    ARTIST_AUTHOR = "artist_author"
    FREELANCE = "freelance"
    SASU = "sasu"


class FiscalRegime(str, Enum):
    MICRO = "micro"  # flat-rate abatement
    REEL = "reel"  # real deductible expenses


class VatRegime(str, Enum):
    FRANCHISE = "franchise"  # exemption
    REEL_MENSUEL = "reel_mensuel"
    REEL_TRIMESTRIEL = "reel_trimestriel"


class PaymentFrequency(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"


class VatPaymentFrequency(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


# Well-known categories and subcategories.
CATEGORY_ARTISTIC_REVENUE = "REVENU_ARTISTIQUE"
CATEGORY_SOCIAL = "SOCIAL"
CATEGORY_FISCAL = "FISCAL"
CATEGORY_VAT = "VAT"
CATEGORY_NON_DEDUCTIBLE = "AUTRE"
CATEGORY_DEFAULT = "OTHER"

SUBCATEGORY_URSSAF = "URSSAF"
SUBCATEGORY_IRCEC = "IRCEC"
SUBCATEGORY_INCOME_TAX = "IR"

TAX_PAYMENT_CATEGORIES: frozenset[str] = frozenset({CATEGORY_SOCIAL, CATEGORY_FISCAL})

MONTH_LABELS: tuple[str, ...] = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def period_key(on: date) -> str:
    """``YYYY-MM`` key of the month containing ``on``."""
    return f"{on.year:04d}-{on.month:02d}"


def clamp_day(year: int, month: int, day: int) -> date:
    """Build a date, clamping ``day`` to the length of the month."""
    last = calendar.monthrange(year, month)[1]
    return date(year, month, max(1, min(day, last)))


# ---------------------------------------------------------------------------
# Input records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Entry:
    """
    One recurring or one-off financial fact, as submitted by the caller.

    ``vat_rate_bps`` of ``None`` means "use the context default rate".
    ``date`` is kept as the submitted ``YYYY-MM-DD`` string; the normalizer
    decides how to anchor it into the fiscal year.
    """

    id: str
    nature: EntryNature
    label: str
    amount_ttc_cents: int
    date: str
    scope: Scope
    vat_rate_bps: int | None = None
    category: str = CATEGORY_DEFAULT
    subcategory: str | None = None
    periodicity: Periodicity = Periodicity.YEARLY

    def __post_init__(self) -> None:
        require_cents(self.amount_ttc_cents, f"Entry[{self.id}].amount_ttc_cents")
        if self.vat_rate_bps is not None:
            require_bps(self.vat_rate_bps, f"Entry[{self.id}].vat_rate_bps")
        object.__setattr__(self, "nature", EntryNature(self.nature))
        object.__setattr__(self, "scope", Scope(self.scope))
        object.__setattr__(self, "periodicity", Periodicity(self.periodicity))


@dataclass(frozen=True)
class Household:
    """Household composition used for the income-tax quotient."""

    parts: Decimal = Decimal("1")
    children: int = 0

    def __post_init__(self) -> None:
        if not self.parts.is_finite():
            raise ValueError(f"Household parts must be finite: {self.parts}")
        if self.parts < 1 or (self.parts * 2) % 1 != 0:
            raise ValueError(f"Household parts must be >= 1 in half steps: {self.parts}")
        if self.children < 0:
            raise ValueError(f"Household children cannot be negative: {self.children}")


@dataclass(frozen=True)
class FiscalOptions:
    """Feature and option toggles for one computation."""

    estimate_mode: bool = False
    urssaf_frequency: PaymentFrequency = PaymentFrequency.QUARTERLY
    vat_payment_frequency: VatPaymentFrequency = VatPaymentFrequency.YEARLY
    default_vat_rate_bps: int = 0
    feature_flags: Mapping[str, bool] = field(default_factory=dict)

    def __post_init__(self) -> None:
        require_bps(self.default_vat_rate_bps, "FiscalOptions.default_vat_rate_bps")

    def flag(self, name: str) -> bool:
        return bool(self.feature_flags.get(name, False))


@dataclass(frozen=True)
class FiscalContext:
    """
    Everything about the taxpayer that is constant for one computation.

    Immutable for the duration of the call.
    """

    tax_year: int
    as_of: date
    user_status: UserStatus
    fiscal_regime: FiscalRegime
    vat_regime: VatRegime
    household: Household = field(default_factory=Household)
    options: FiscalOptions = field(default_factory=FiscalOptions)
    jurisdiction: str = "FR"

    @property
    def tax_payments_as_company_expense(self) -> bool:
        """Corporate statuses pay social/tax charges from the company."""
        return self.user_status == UserStatus.SASU

    def fingerprint_payload(self) -> dict[str, Any]:
        """Fields that influence computed figures.

        ``as_of`` only drives presentation, so it is excluded: recomputing
        the same year on a different day yields the same fiscal hash.
        """
        return {
            "jurisdiction": self.jurisdiction,
            "tax_year": self.tax_year,
            "user_status": self.user_status,
            "fiscal_regime": self.fiscal_regime,
            "vat_regime": self.vat_regime,
            "household": self.household,
            "estimate_mode": self.options.estimate_mode,
            "urssaf_frequency": self.options.urssaf_frequency,
            "vat_payment_frequency": self.options.vat_payment_frequency,
            "default_vat_rate_bps": self.options.default_vat_rate_bps,
            "feature_flags": dict(self.options.feature_flags),
        }


# ---------------------------------------------------------------------------
# Derived ledger records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NormalizedOperation:
    """One dated occurrence of an entry, with its HT / VAT / TTC split."""

    id: str
    entry_id: str
    date: date
    label: str
    amount_ht: int
    vat_rate_bps: int
    amount_vat: int
    amount_ttc: int
    direction: Direction
    scope: Scope
    kind: OperationKind
    category: str
    subcategory: str | None = None

    def __post_init__(self) -> None:
        site = f"NormalizedOperation[{self.id}]"
        require_cents(self.amount_ht, f"{site}.amount_ht")
        require_cents(self.amount_vat, f"{site}.amount_vat")
        require_cents(self.amount_ttc, f"{site}.amount_ttc")
        if self.amount_ht + self.amount_vat != self.amount_ttc:
            raise ValueError(
                f"{site}: HT {self.amount_ht} + VAT {self.amount_vat} "
                f"!= TTC {self.amount_ttc}"
            )

    @property
    def month_index(self) -> int:
        return self.date.month - 1

    @property
    def sort_key(self) -> tuple[date, str]:
        return (self.date, self.id)


@dataclass(frozen=True)
class QualificationFlags:
    is_pro: bool = False
    is_artistic: bool = False
    is_social_current_year: bool = False
    is_vat_collectable: bool = False
    is_vat_deductible: bool = False
    is_tax_deductible: bool = False


@dataclass(frozen=True)
class QualifiedOperation:
    """A normalized operation plus its tax-relevance flags.

    Flags never alter the underlying financial facts.
    """

    operation: NormalizedOperation
    flags: QualificationFlags

    @property
    def sort_key(self) -> tuple[date, str]:
        return self.operation.sort_key
