"""Treasury projector: bucketing, manual-payment suppression, provisions, anchor."""

from datetime import date

import pytest
from hypothesis import given
from hypothesis import strategies as st

from fiscal_engines.projection import project_ledger, replay_treasury, solve_initial_treasury
from fiscal_kernel.domain.outputs import (
    ComputedBases,
    Confidence,
    FiscalMode,
    FiscalOutput,
    Organization,
    OutputMetadata,
    ScheduleItem,
    ScheduleType,
    TaxCategory,
    TaxesByOrganization,
    TaxLineItem,
    TreasuryAnchor,
    VatBases,
)
from fiscal_kernel.domain.values import (
    CATEGORY_SOCIAL,
    SUBCATEGORY_URSSAF,
    Direction,
    NormalizedOperation,
    OperationKind,
    Scope,
)
from fiscal_kernel.exceptions import InvalidAnchorError


def _output(schedule=(), urssaf=(), vat_balance=0):
    return FiscalOutput(
        metadata=OutputMetadata(
            engine_version="2.0.0",
            ruleset_year=2026,
            ruleset_revision="test",
            fiscal_hash="0" * 64,
            computed_at="2026-06-01",
            params_fingerprint="p",
            context_fingerprint="c",
            ledger_fingerprint="l",
            mode=FiscalMode.CERTIFIED,
        ),
        bases=ComputedBases(
            vat=VatBases(collected=max(0, vat_balance), deductible=max(0, -vat_balance),
                         balance=vat_balance)
        ),
        taxes=TaxesByOrganization(urssaf=tuple(urssaf)),
        schedule=tuple(schedule),
        alerts=(),
    )


def _urssaf_line(amount):
    return TaxLineItem(
        code="URSSAF_CSG",
        label="CSG",
        base=amount,
        rate_bps=10_000,
        amount=amount,
        organization=Organization.URSSAF_AA,
        category=TaxCategory.SOCIAL,
        confidence=Confidence.CERTIFIED,
    )


def _urssaf_item(on, amount):
    return ScheduleItem(
        id=f"URSSAF-{on.isoformat()}",
        date=on,
        label="URSSAF",
        amount=amount,
        organization=Organization.URSSAF_AA,
        category=TaxCategory.SOCIAL,
        type=ScheduleType.PROVISION,
        confidence=Confidence.CERTIFIED,
    )


def _cash(op_id, on, amount, *, direction=Direction.IN, scope=Scope.PRO,
          kind=OperationKind.REVENUE, category="REVENU_ARTISTIQUE", subcategory=None):
    return NormalizedOperation(
        id=op_id,
        entry_id=op_id,
        date=on,
        label=op_id,
        amount_ht=amount,
        vat_rate_bps=0,
        amount_vat=0,
        amount_ttc=amount,
        direction=direction,
        scope=scope,
        kind=kind,
        category=category,
        subcategory=subcategory,
    )


class TestAnchor:
    def test_january_first_anchor(self):
        assert solve_initial_treasury(TreasuryAnchor(500_000, -1), [10] * 12) == 500_000

    def test_mid_year_anchor_back_solves(self):
        ops = [
            _cash("jan-in", date(2026, 1, 5), 80_000),
            _cash("feb-out", date(2026, 2, 5), 20_000, direction=Direction.OUT,
                  kind=OperationKind.EXPENSE, category="MATERIEL"),
        ]
        ledger = project_ledger(_output(), ops, TreasuryAnchor(500_000, 2))
        assert ledger.months[0].net_cashflow == 80_000
        assert ledger.months[1].net_cashflow == -20_000
        assert ledger.initial_treasury == 440_000
        assert ledger.months[1].closing_treasury == 500_000
        assert replay_treasury(ledger, 2) == 500_000

    @pytest.mark.parametrize("month_index", [-2, 12])
    def test_out_of_range_anchor(self, month_index):
        with pytest.raises(InvalidAnchorError):
            TreasuryAnchor(0, month_index)

    @given(
        amount=st.integers(min_value=-10**9, max_value=10**9),
        month_index=st.integers(min_value=-1, max_value=11),
        flows=st.lists(st.integers(min_value=0, max_value=10**7), min_size=12, max_size=12),
    )
    def test_replay_reproduces_anchor(self, amount, month_index, flows):
        ops = [
            _cash(f"in-{i}", date(2026, i + 1, 1), flow)
            for i, flow in enumerate(flows)
            if flow
        ]
        ledger = project_ledger(_output(), ops, TreasuryAnchor(amount, month_index))
        assert replay_treasury(ledger, max(month_index, 0)) == amount
        assert ledger.projected_treasury == ledger.initial_treasury + sum(flows)


class TestScheduleBucketing:
    def test_scheduled_installment_booked_in_its_month(self):
        output = _output(schedule=[_urssaf_item(date(2026, 4, 15), 30_000)],
                         urssaf=[_urssaf_line(30_000)])
        ledger = project_ledger(output, [], TreasuryAnchor())
        assert ledger.months[3].urssaf_cash == 30_000
        assert ledger.months[3].net_cashflow == -30_000

    def test_manual_payment_suppresses_same_month_schedule(self):
        output = _output(schedule=[_urssaf_item(date(2026, 4, 15), 30_000),
                                   _urssaf_item(date(2026, 7, 15), 30_000)],
                         urssaf=[_urssaf_line(60_000)])
        manual = _cash("paid", date(2026, 4, 2), 25_000, direction=Direction.OUT,
                       kind=OperationKind.TAX_PAYMENT, category=CATEGORY_SOCIAL,
                       subcategory=SUBCATEGORY_URSSAF)
        ledger = project_ledger(output, [manual], TreasuryAnchor())
        assert ledger.months[3].urssaf_cash == 25_000
        assert ledger.months[6].urssaf_cash == 30_000

    def test_items_outside_the_year_ignored(self):
        output = _output(schedule=[_urssaf_item(date(2027, 1, 15), 30_000)])
        ledger = project_ledger(output, [], TreasuryAnchor())
        assert sum(m.urssaf_cash for m in ledger.months) == 0

    def test_provision_is_liability_minus_cumulative_paid(self):
        output = _output(schedule=[_urssaf_item(date(2026, 1, 15), 40_000),
                                   _urssaf_item(date(2026, 4, 15), 40_000)],
                         urssaf=[_urssaf_line(100_000)])
        ledger = project_ledger(output, [], TreasuryAnchor())
        assert ledger.months[0].provision_social == 60_000
        assert ledger.months[3].provision_social == 20_000
        assert ledger.current_year_provision_social == 100_000

    def test_provision_never_negative(self):
        output = _output(schedule=[_urssaf_item(date(2026, 1, 15), 90_000)],
                         urssaf=[_urssaf_line(50_000)])
        ledger = project_ledger(output, [], TreasuryAnchor())
        assert all(m.provision_social == 0 for m in ledger.months)

    def test_personal_expense_column(self):
        op = _cash("rent", date(2026, 5, 1), 70_000, direction=Direction.OUT,
                   kind=OperationKind.EXPENSE, scope=Scope.PERSO, category="LOYER")
        ledger = project_ledger(_output(), [op], TreasuryAnchor())
        assert ledger.months[4].expense_perso_ttc == 70_000
        assert ledger.months[4].total_outflow == 70_000
