"""Side-by-side comparison of a baseline snapshot and a simulated one."""

from __future__ import annotations

from dataclasses import dataclass

from fiscal_kernel.domain.money import sum_cents
from fiscal_kernel.domain.outputs import FiscalSnapshot


@dataclass(frozen=True)
class SnapshotStats:
    """
    Theoretical liabilities of a snapshot and what is left after them.

    ``net_pocket`` = revenue - professional expenses - social - income tax
    - VAT balance (TTC amounts from the ledger, liabilities from the lines).
    """

    net_pocket: int
    total_social: int
    total_tax: int
    total_vat: int


@dataclass(frozen=True)
class SimulationDelta:
    real_cost: int
    saved_vat: int
    saved_tax: int
    saved_social: int


@dataclass(frozen=True)
class SimulationComparison:
    base: SnapshotStats
    simulated: SnapshotStats
    delta: SimulationDelta


def snapshot_stats(snapshot: FiscalSnapshot) -> SnapshotStats:
    months = snapshot.ledger.months
    taxes = snapshot.output.taxes
    revenue = sum_cents(m.income_ttc for m in months)
    pro_expenses = sum_cents(m.expense_pro_ttc for m in months)
    social = sum_cents(t.amount for t in taxes.urssaf + taxes.ircec)
    income_tax = sum_cents(t.amount for t in taxes.income_tax)
    vat = snapshot.output.bases.vat.balance
    return SnapshotStats(
        net_pocket=revenue - pro_expenses - social - income_tax - vat,
        total_social=social,
        total_tax=income_tax,
        total_vat=vat,
    )


def compare_snapshots(base: FiscalSnapshot, simulated: FiscalSnapshot) -> SimulationComparison:
    """
    Compare a baseline with a what-if snapshot.

    ``real_cost`` is what the simulated change removes from the net pocket;
    the ``saved_*`` deltas are positive when the simulation lowers the
    liability (for VAT, when the balance drops).
    """
    base_stats = snapshot_stats(base)
    sim_stats = snapshot_stats(simulated)
    return SimulationComparison(
        base=base_stats,
        simulated=sim_stats,
        delta=SimulationDelta(
            real_cost=base_stats.net_pocket - sim_stats.net_pocket,
            saved_vat=base_stats.total_vat - sim_stats.total_vat,
            saved_tax=base_stats.total_tax - sim_stats.total_tax,
            saved_social=base_stats.total_social - sim_stats.total_social,
        ),
    )
