"""Month-by-month cash events of a snapshot, for timeline views."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum

from fiscal_kernel.domain.outputs import FiscalSnapshot, LedgerMonth


class EventType(str, Enum):
    INCOME = "income"
    PRO = "pro"
    SOCIAL = "social"
    TAX = "tax"
    VAT = "vat"
    PERSONAL = "personal"
    OTHER = "other"


class EventStatus(str, Enum):
    REALIZED = "realized"
    PROJECTED = "projected"


@dataclass(frozen=True)
class TimelineEvent:
    id: str
    month: str
    label: str
    amount: int
    type: EventType
    status: EventStatus


# (id prefix, label, type, ledger column), in display order within a month.
_EVENT_COLUMNS: tuple[tuple[str, str, EventType, str], ...] = (
    ("inc", "Encaissements", EventType.INCOME, "income_ttc"),
    ("pro", "Depenses Pro", EventType.PRO, "expense_pro_ttc"),
    ("urssaf", "URSSAF", EventType.SOCIAL, "urssaf_cash"),
    ("ircec", "IRCEC", EventType.SOCIAL, "ircec_cash"),
    ("ir", "Impot Revenu", EventType.TAX, "income_tax_cash"),
    ("vat", "TVA", EventType.VAT, "vat_cash"),
    ("tax-other", "Autres Taxes", EventType.TAX, "other_taxes_cash"),
    ("perso", "Depenses Perso", EventType.PERSONAL, "expense_perso_ttc"),
    ("other", "Autres Sorties", EventType.OTHER, "expense_other_ttc"),
)


def _month_status(target_year: int, month_index: int, computed_on: date) -> EventStatus:
    """Months up to and including the computation month are realized."""
    if target_year < computed_on.year:
        return EventStatus.REALIZED
    if target_year == computed_on.year and month_index <= computed_on.month - 1:
        return EventStatus.REALIZED
    return EventStatus.PROJECTED


def _month_events(row: LedgerMonth, status: EventStatus) -> list[TimelineEvent]:
    events = []
    for prefix, label, event_type, column in _EVENT_COLUMNS:
        amount = getattr(row, column)
        if amount > 0:
            events.append(
                TimelineEvent(
                    id=f"{prefix}-{row.month}",
                    month=row.month,
                    label=label,
                    amount=amount,
                    type=event_type,
                    status=status,
                )
            )
    return events


def timeline_events(snapshot: FiscalSnapshot) -> tuple[TimelineEvent, ...]:
    """
    Aggregated positive cash events, January first.

    Realized/projected status is relative to the snapshot's ``computed_at``
    date, never to the wall clock.
    """
    computed_on = date.fromisoformat(snapshot.output.metadata.computed_at[:10])
    year = snapshot.output.metadata.ruleset_year
    events: list[TimelineEvent] = []
    for row in snapshot.ledger.months:
        events.extend(_month_events(row, _month_status(year, row.month_index, computed_on)))
    return tuple(events)
