"""
Ruleset module capability interface.

A ruleset module computes taxable bases, tax lines, the payment schedule
and alerts for one (jurisdiction, year, status). Each module is:
- Deterministic: same qualified ledger and context, same results
- Versioned: its revision and params fingerprint enter the fiscal hash
- Stateless: no side effects during computation
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from fiscal_kernel.domain.outputs import (
    ComputedBases,
    FiscalAlert,
    ScheduleItem,
    TaxLineItem,
)
from fiscal_kernel.domain.values import FiscalContext, QualifiedOperation


class RulesetModule(ABC):
    """
    Abstract base class for ruleset modules.

    The dispatcher calls the compute methods in a fixed order:
    bases -> social -> pension -> VAT -> income tax -> schedule -> alerts.
    """

    @property
    @abstractmethod
    def key(self) -> str:
        """Ruleset identifier, e.g. ``FR/2026/artist_author``."""

    @property
    @abstractmethod
    def revision(self) -> str:
        """Revision of the parameter set."""

    @property
    @abstractmethod
    def params_fingerprint(self) -> str:
        """SHA-256 identifying the exact parameters in force."""

    @abstractmethod
    def compute_bases(
        self, ledger: Sequence[QualifiedOperation], context: FiscalContext
    ) -> ComputedBases:
        """Social, fiscal and VAT bases of the qualified ledger."""

    @abstractmethod
    def compute_social_contributions(
        self, bases: ComputedBases, context: FiscalContext
    ) -> tuple[TaxLineItem, ...]:
        """Social contribution lines."""

    @abstractmethod
    def compute_supplementary_pension(
        self, bases: ComputedBases, context: FiscalContext
    ) -> tuple[TaxLineItem, ...]:
        """Supplementary pension lines (possibly none)."""

    @abstractmethod
    def compute_vat(
        self, ledger: Sequence[QualifiedOperation], context: FiscalContext
    ) -> tuple[TaxLineItem, ...]:
        """Monthly VAT liability lines."""

    @abstractmethod
    def compute_income_tax(
        self, bases: ComputedBases, context: FiscalContext
    ) -> tuple[TaxLineItem, ...]:
        """Income tax lines (possibly none)."""

    @abstractmethod
    def compute_schedule(
        self, taxes: Sequence[TaxLineItem], context: FiscalContext
    ) -> tuple[ScheduleItem, ...]:
        """Dated payable obligations, sorted by (date, id)."""

    @abstractmethod
    def compute_alerts(
        self,
        bases: ComputedBases,
        taxes: Sequence[TaxLineItem],
        context: FiscalContext,
    ) -> tuple[FiscalAlert, ...]:
        """Advisory alerts; never change amounts."""
