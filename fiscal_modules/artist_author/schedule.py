"""
Payment schedule for the artist-author status.

URSSAF contributions are paid in 12 monthly or 4 quarterly installments,
the RAAP pension once at year end, income tax in 12 monthly withholdings
and VAT either monthly (month + 1, rolling into January of the following
year) or once in the following year.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from fiscal_config.schema import RulesetParams
from fiscal_kernel.domain.money import split_evenly, sum_cents
from fiscal_kernel.domain.outputs import (
    Confidence,
    Organization,
    ScheduleItem,
    ScheduleStatus,
    ScheduleType,
    TaxCategory,
    TaxLineItem,
)
from fiscal_kernel.domain.values import (
    FiscalContext,
    PaymentFrequency,
    VatPaymentFrequency,
)


def _urssaf_items(
    lines: Sequence[TaxLineItem], context: FiscalContext, params: RulesetParams
) -> list[ScheduleItem]:
    total = sum_cents(line.amount for line in lines)
    if total <= 0:
        return []

    year = context.tax_year
    day = params.schedule.urssaf_day
    if context.options.urssaf_frequency == PaymentFrequency.MONTHLY:
        dates = [date(year, month, day) for month in range(1, 13)]
        prefix = "M"
    else:
        dates = [date(year, month, day) for month in params.schedule.quarterly_months]
        prefix = "T"

    confidence = (
        Confidence.ESTIMATED if context.options.estimate_mode else Confidence.CERTIFIED
    )
    codes = tuple(line.code for line in lines)
    return [
        ScheduleItem(
            id=f"URSSAF-{year}-{due.isoformat()}",
            date=due,
            label=f"URSSAF Acompte {prefix}{index + 1}",
            amount=amount,
            organization=Organization.URSSAF_AA,
            category=TaxCategory.SOCIAL,
            type=ScheduleType.PROVISION,
            confidence=confidence,
            status=ScheduleStatus.PENDING,
            source_line_codes=codes,
        )
        for index, (due, amount) in enumerate(zip(dates, split_evenly(total, len(dates))))
    ]


def _ircec_items(
    lines: Sequence[TaxLineItem], context: FiscalContext, params: RulesetParams
) -> list[ScheduleItem]:
    total = sum_cents(line.amount for line in lines)
    if total <= 0:
        return []
    due = date(context.tax_year, params.schedule.ircec_due_month, params.schedule.ircec_due_day)
    return [
        ScheduleItem(
            id=f"IRCEC-{context.tax_year}-{due.isoformat()}",
            date=due,
            label="IRCEC cotisation annuelle",
            amount=total,
            organization=Organization.IRCEC,
            category=TaxCategory.SOCIAL,
            type=ScheduleType.PROVISION,
            confidence=Confidence.ESTIMATED,
            status=ScheduleStatus.PENDING,
            source_line_codes=tuple(line.code for line in lines),
        )
    ]


def _income_tax_items(
    lines: Sequence[TaxLineItem], context: FiscalContext, params: RulesetParams
) -> list[ScheduleItem]:
    total = sum_cents(line.amount for line in lines)
    if total <= 0:
        return []
    year = context.tax_year
    dates = [date(year, month, params.schedule.income_tax_day) for month in range(1, 13)]
    codes = tuple(line.code for line in lines)
    return [
        ScheduleItem(
            id=f"IR-{year}-{due.isoformat()}",
            date=due,
            label=f"Impot sur le revenu M{index + 1}",
            amount=amount,
            organization=Organization.DGFIP,
            category=TaxCategory.FISCAL,
            type=ScheduleType.PROVISION,
            confidence=Confidence.ESTIMATED,
            status=ScheduleStatus.PENDING,
            source_line_codes=codes,
        )
        for index, (due, amount) in enumerate(zip(dates, split_evenly(total, 12)))
    ]


def vat_payment_date(tax_year: int, month_index: int, day: int) -> date:
    """Payment date of a monthly VAT liability: ``day`` of month + 1."""
    pay_month = month_index + 2
    pay_year = tax_year
    if pay_month > 12:
        pay_month = 1
        pay_year += 1
    return date(pay_year, pay_month, day)


def _vat_items(
    lines: Sequence[TaxLineItem], context: FiscalContext, params: RulesetParams
) -> list[ScheduleItem]:
    total = sum_cents(line.amount for line in lines)
    if total <= 0:
        return []
    year = context.tax_year

    if context.options.vat_payment_frequency == VatPaymentFrequency.MONTHLY:
        return [
            ScheduleItem(
                id=f"VAT-{year}-{line.code}",
                date=vat_payment_date(
                    year, line.metadata["month_index"], params.vat.monthly_payment_day
                ),
                label=f"TVA (Solde {line.metadata['month']})",
                amount=line.amount,
                organization=Organization.DGFIP,
                category=TaxCategory.VAT,
                type=ScheduleType.PROVISION,
                confidence=Confidence.ESTIMATED,
                status=ScheduleStatus.PENDING,
                source_line_codes=(line.code,),
            )
            for line in lines
            if "month_index" in line.metadata
        ]

    return [
        ScheduleItem(
            id=f"VAT-{year}-ANNUAL",
            date=date(year + 1, params.vat.annual_due_month, params.vat.annual_due_day),
            label=f"TVA Solde Annuel ({year})",
            amount=total,
            organization=Organization.DGFIP,
            category=TaxCategory.VAT,
            type=ScheduleType.BALANCE,
            confidence=Confidence.ESTIMATED,
            status=ScheduleStatus.PENDING,
            source_line_codes=tuple(line.code for line in lines),
        )
    ]


def compute_schedule(
    taxes: Sequence[TaxLineItem], context: FiscalContext, params: RulesetParams
) -> tuple[ScheduleItem, ...]:
    """All payable obligations, sorted by (date, id)."""
    urssaf = [t for t in taxes if t.organization == Organization.URSSAF_AA]
    ircec = [t for t in taxes if t.organization == Organization.IRCEC]
    income_tax = [
        t for t in taxes
        if t.organization == Organization.DGFIP and t.category == TaxCategory.FISCAL
    ]
    vat = [t for t in taxes if t.category == TaxCategory.VAT]

    items = (
        _urssaf_items(urssaf, context, params)
        + _ircec_items(ircec, context, params)
        + _income_tax_items(income_tax, context, params)
        + _vat_items(vat, context, params)
    )
    return tuple(sorted(items, key=lambda item: (item.date, item.id)))
