"""Cash timeline events and what-if snapshot comparison."""

from fiscal_kernel.domain.values import FiscalRegime, VatRegime
from fiscal_presenters import (
    EventStatus,
    EventType,
    compare_snapshots,
    snapshot_stats,
    timeline_events,
)
from fiscal_services import compute_fiscal_snapshot
from tests.builders import expense_entry, make_context, revenue_entry


class TestTimeline:
    def setup_method(self):
        snapshot = compute_fiscal_snapshot([revenue_entry(1_000_000)], make_context())
        self.events = {event.id: event for event in timeline_events(snapshot)}

    def test_income_event(self):
        income = self.events["inc-Mar"]
        assert income.amount == 1_000_000
        assert income.type == EventType.INCOME
        assert income.month == "Mar"

    def test_status_relative_to_computation_date(self):
        assert self.events["urssaf-Jan"].status == EventStatus.REALIZED
        assert self.events["urssaf-Jul"].status == EventStatus.PROJECTED

    def test_only_positive_amounts(self):
        assert all(event.amount > 0 for event in self.events.values())
        assert "urssaf-Feb" not in self.events
        assert "ircec-Dec" not in self.events

    def test_january_first(self):
        snapshot = compute_fiscal_snapshot(
            [revenue_entry(1_000_000, entry_date="2026-11-02")], make_context()
        )
        months = [event.month for event in timeline_events(snapshot)]
        assert months[0] == "Jan"
        assert months[-1] == "Nov"


class TestSimulator:
    def test_identical_snapshots_have_zero_delta(self):
        snapshot = compute_fiscal_snapshot([revenue_entry(1_000_000)], make_context())
        comparison = compare_snapshots(snapshot, snapshot)
        assert comparison.delta.real_cost == 0
        assert comparison.delta.saved_social == 0

    def test_micro_stats(self):
        stats = snapshot_stats(
            compute_fiscal_snapshot([revenue_entry(1_000_000)], make_context())
        )
        assert stats.total_social == 130_399
        assert stats.total_tax == 0
        assert stats.total_vat == 0
        assert stats.net_pocket == 1_000_000 - 130_399

    def test_deductible_expense_in_real_regime(self):
        context = make_context(
            fiscal_regime=FiscalRegime.REEL, vat_regime=VatRegime.REEL_MENSUEL
        )
        revenue = revenue_entry(3_000_000, vat_rate_bps=2000)
        base = compute_fiscal_snapshot([revenue], context)
        simulated = compute_fiscal_snapshot(
            [revenue, expense_entry(120_000, vat_rate_bps=2000)], context
        )
        delta = compare_snapshots(base, simulated).delta

        assert delta.saved_vat == 20_000
        assert delta.saved_social > 0
        assert delta.real_cost == 120_000 - delta.saved_vat - delta.saved_tax - delta.saved_social
