"""
Normalizer -- expand entries into a dated, one-operation-per-occurrence ledger.

Responsibility:
    Turn caller entries (with periodicity and scope) into NormalizedOperations
    carrying their HT / VAT / TTC split, one per target month of the fiscal
    year, sorted by (date, id).

Architecture position:
    Engines -- pure function over kernel records, no I/O, no config access.

Invariants enforced:
    - The HT / VAT split is computed once per entry, so every occurrence of
      a recurring entry carries identical amounts and ht + vat == ttc.
    - Zero-amount entries never produce an operation.
    - Output order is (date, id) whatever the input order.
    - Entry ids are unique, so (date, id) is a total order.

Failure modes:
    - Non-integer amounts are rejected by the Entry constructor and the
      monetary kernel; nothing here truncates.
    - An unparseable entry date anchors to January, day 15.
    - A repeated entry id raises DuplicateEntryIdError.
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from fiscal_engines.tracer import traced_engine
from fiscal_kernel.domain.money import split_gross_by_rate
from fiscal_kernel.domain.values import (
    MONTH_LABELS,
    Direction,
    Entry,
    EntryNature,
    NormalizedOperation,
    OperationKind,
    Periodicity,
    Scope,
    clamp_day,
)
from fiscal_kernel.exceptions import DuplicateEntryIdError
from fiscal_kernel.logging_config import get_logger

logger = get_logger("engines.normalization")

QUARTER_START_MONTHS: tuple[int, ...] = (0, 3, 6, 9)
FALLBACK_DAY = 15

_NATURE_MAPPING: dict[EntryNature, tuple[Direction, OperationKind]] = {
    EntryNature.INCOME: (Direction.IN, OperationKind.REVENUE),
    EntryNature.EXPENSE_PRO: (Direction.OUT, OperationKind.EXPENSE),
    EntryNature.EXPENSE_PERSO: (Direction.OUT, OperationKind.EXPENSE),
    EntryNature.TAX_SOCIAL: (Direction.OUT, OperationKind.TAX_PAYMENT),
    EntryNature.TRANSFER: (Direction.OUT, OperationKind.TRANSFER),
}


def _anchor(raw_date: str) -> tuple[int, int]:
    """(month index, day) of an entry date; (0, 15) when unparseable."""
    try:
        parsed = date.fromisoformat(raw_date)
    except (TypeError, ValueError):
        return 0, FALLBACK_DAY
    return parsed.month - 1, parsed.day


def target_months(periodicity: Periodicity, anchor_month: int) -> tuple[int, ...]:
    """Month indexes (0-11) in which an entry occurs."""
    if periodicity == Periodicity.MONTHLY:
        return tuple(range(anchor_month, 12))
    if periodicity == Periodicity.QUARTERLY:
        return tuple(m for m in QUARTER_START_MONTHS if m >= anchor_month)
    return (anchor_month,)


def normalize_entry(
    entry: Entry,
    *,
    tax_year: int,
    tax_payments_as_company_expense: bool = False,
    default_vat_rate_bps: int = 0,
) -> tuple[NormalizedOperation, ...]:
    """Expand one entry into its occurrences (unsorted)."""
    if entry.amount_ttc_cents == 0:
        return ()

    rate = entry.vat_rate_bps if entry.vat_rate_bps is not None else default_vat_rate_bps
    amount_ht, amount_vat = split_gross_by_rate(entry.amount_ttc_cents, rate)
    direction, kind = _NATURE_MAPPING[entry.nature]

    scope = entry.scope
    if entry.nature == EntryNature.TAX_SOCIAL and tax_payments_as_company_expense:
        scope = Scope.PRO

    anchor_month, day = _anchor(entry.date)
    operations = []
    for month_index in target_months(entry.periodicity, anchor_month):
        label = entry.label
        if entry.periodicity != Periodicity.YEARLY:
            label = f"{label} ({MONTH_LABELS[month_index]})"
        operations.append(
            NormalizedOperation(
                id=f"{entry.id}-{month_index}",
                entry_id=entry.id,
                date=clamp_day(tax_year, month_index + 1, day),
                label=label,
                amount_ht=amount_ht,
                vat_rate_bps=rate,
                amount_vat=amount_vat,
                amount_ttc=entry.amount_ttc_cents,
                direction=direction,
                scope=scope,
                kind=kind,
                category=entry.category,
                subcategory=entry.subcategory,
            )
        )
    return tuple(operations)


@traced_engine("normalizer", "2.0", fingerprint_fields=("entries", "tax_year"))
def normalize_entries(
    entries: Sequence[Entry],
    *,
    tax_year: int,
    tax_payments_as_company_expense: bool = False,
    default_vat_rate_bps: int = 0,
) -> tuple[NormalizedOperation, ...]:
    """
    Expand entries into the normalized ledger of one fiscal year.

    Postconditions:
        - Sorted by (date, id).
        - No zero-amount operation.

    Raises:
        DuplicateEntryIdError: if two entries share an id.
    """
    operations: list[NormalizedOperation] = []
    seen: set[str] = set()
    skipped = 0
    for entry in entries:
        if entry.id in seen:
            raise DuplicateEntryIdError(entry.id)
        seen.add(entry.id)
        expanded = normalize_entry(
            entry,
            tax_year=tax_year,
            tax_payments_as_company_expense=tax_payments_as_company_expense,
            default_vat_rate_bps=default_vat_rate_bps,
        )
        if not expanded:
            skipped += 1
        operations.extend(expanded)

    operations.sort(key=lambda op: op.sort_key)
    logger.debug(
        "entries_normalized",
        extra={"operation_count": len(operations), "skipped_entries": skipped},
    )
    return tuple(operations)
