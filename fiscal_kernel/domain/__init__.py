"""
Pure domain layer.

This module contains immutable records and pure functions with NO
dependencies on:
- Configuration files
- Ruleset modules
- Time/clock
- I/O

All domain objects are immutable and deterministic.
"""

from fiscal_kernel.domain.money import (
    multiply_by_rate,
    percentage_bps,
    split_evenly,
    split_gross_by_rate,
    sum_cents,
)
from fiscal_kernel.domain.outputs import (
    AlertSeverity,
    CapApplied,
    ComputedBases,
    Confidence,
    FiscalAlert,
    FiscalBases,
    FiscalMode,
    FiscalOutput,
    FiscalSnapshot,
    JuridicalBasis,
    LedgerFinal,
    LedgerMonth,
    Organization,
    OutputMetadata,
    ScheduleItem,
    ScheduleStatus,
    ScheduleType,
    SocialBases,
    TaxCategory,
    TaxesByOrganization,
    TaxLineItem,
    TreasuryAnchor,
    VatBases,
    VatPeriod,
)
from fiscal_kernel.domain.values import (
    Direction,
    Entry,
    EntryNature,
    FiscalContext,
    FiscalOptions,
    FiscalRegime,
    Household,
    NormalizedOperation,
    OperationKind,
    PaymentFrequency,
    Periodicity,
    QualificationFlags,
    QualifiedOperation,
    Scope,
    UserStatus,
    VatPaymentFrequency,
    VatRegime,
)

__all__ = [
    "AlertSeverity",
    "CapApplied",
    "ComputedBases",
    "Confidence",
    "Direction",
    "Entry",
    "EntryNature",
    "FiscalAlert",
    "FiscalBases",
    "FiscalContext",
    "FiscalMode",
    "FiscalOptions",
    "FiscalOutput",
    "FiscalRegime",
    "FiscalSnapshot",
    "Household",
    "JuridicalBasis",
    "LedgerFinal",
    "LedgerMonth",
    "NormalizedOperation",
    "OperationKind",
    "Organization",
    "OutputMetadata",
    "PaymentFrequency",
    "Periodicity",
    "QualificationFlags",
    "QualifiedOperation",
    "ScheduleItem",
    "ScheduleStatus",
    "ScheduleType",
    "Scope",
    "SocialBases",
    "TaxCategory",
    "TaxLineItem",
    "TaxesByOrganization",
    "TreasuryAnchor",
    "UserStatus",
    "VatBases",
    "VatPaymentFrequency",
    "VatPeriod",
    "VatRegime",
    "multiply_by_rate",
    "percentage_bps",
    "split_evenly",
    "split_gross_by_rate",
    "sum_cents",
]
