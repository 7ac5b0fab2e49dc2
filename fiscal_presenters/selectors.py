"""
Read-only selectors over a FiscalOutput.

Every function here is a pure projection of engine results; none of them
computes a new business figure.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import date

from fiscal_kernel.domain.money import sum_cents
from fiscal_kernel.domain.outputs import (
    Confidence,
    Organization,
    ScheduleItem,
    ScheduleStatus,
    TaxCategory,
    TaxLineItem,
)
from fiscal_kernel.domain.values import period_key


def unique_sorted(values: Iterable[str]) -> tuple[str, ...]:
    return tuple(sorted(set(values)))


def sum_line_amounts(lines: Iterable[TaxLineItem]) -> int:
    return sum_cents(line.amount for line in lines)


def sum_by_organization(lines: Iterable[TaxLineItem], organization: Organization) -> int:
    return sum_cents(line.amount for line in lines if line.organization == organization)


def sum_by_category(lines: Iterable[TaxLineItem], category: TaxCategory) -> int:
    return sum_cents(line.amount for line in lines if line.category == category)


def codes_where(
    lines: Iterable[TaxLineItem], predicate: Callable[[TaxLineItem], bool]
) -> tuple[str, ...]:
    return unique_sorted(line.code for line in lines if predicate(line))


def ids_where(
    schedule: Iterable[ScheduleItem], predicate: Callable[[ScheduleItem], bool]
) -> tuple[str, ...]:
    return unique_sorted(item.id for item in schedule if predicate(item))


def is_due(item: ScheduleItem, as_of: date) -> bool:
    """Pending, strictly positive and due on or after ``as_of``."""
    return (
        item.status == ScheduleStatus.PENDING
        and item.amount > 0
        and item.date >= as_of
    )


def sum_due_schedule(schedule: Iterable[ScheduleItem], as_of: date) -> int:
    return sum_cents(item.amount for item in schedule if is_due(item, as_of))


def _next_due_key(item: ScheduleItem) -> tuple[date, int, str]:
    return (item.date, 0 if item.confidence == Confidence.CERTIFIED else 1, item.id)


def select_next_due(schedule: Iterable[ScheduleItem], as_of: date) -> ScheduleItem | None:
    """Earliest due item; CERTIFIED wins a same-day tie, then the lowest id."""
    due = [item for item in schedule if is_due(item, as_of)]
    if not due:
        return None
    return min(due, key=_next_due_key)


def group_schedule_by_month(
    schedule: Iterable[ScheduleItem],
) -> dict[str, list[ScheduleItem]]:
    """Positive schedule items keyed by ``YYYY-MM``, each month in (date, id) order."""
    groups: dict[str, list[ScheduleItem]] = {}
    for item in schedule:
        if item.amount <= 0:
            continue
        groups.setdefault(period_key(item.date), []).append(item)
    for items in groups.values():
        items.sort(key=lambda item: (item.date, item.id))
    return dict(sorted(groups.items()))


def days_between(start: date, end: date) -> int:
    return (end - start).days

