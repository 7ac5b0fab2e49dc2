"""Qualifier: flags by scope, kind, category and regime."""

from datetime import date

import pytest

from fiscal_engines.qualification import qualify_ledger, qualify_operation
from fiscal_kernel.domain.values import (
    CATEGORY_ARTISTIC_REVENUE,
    CATEGORY_NON_DEDUCTIBLE,
    CATEGORY_SOCIAL,
    Direction,
    FiscalRegime,
    NormalizedOperation,
    OperationKind,
    QualificationFlags,
    Scope,
)
from tests.builders import make_context


def _op(
    *,
    kind=OperationKind.EXPENSE,
    scope=Scope.PRO,
    category="MATERIEL",
    vat=0,
    op_id="op-0",
    on=date(2026, 1, 10),
):
    direction = Direction.IN if kind == OperationKind.REVENUE else Direction.OUT
    return NormalizedOperation(
        id=op_id,
        entry_id=op_id.split("-")[0],
        date=on,
        label="op",
        amount_ht=10_000,
        vat_rate_bps=2000 if vat else 0,
        amount_vat=vat,
        amount_ttc=10_000 + vat,
        direction=direction,
        scope=scope,
        kind=kind,
        category=category,
    )


class TestQualifyOperation:
    def setup_method(self):
        self.micro = make_context(fiscal_regime=FiscalRegime.MICRO)
        self.reel = make_context(fiscal_regime=FiscalRegime.REEL)

    def test_personal_operations_have_no_flags(self):
        q = qualify_operation(_op(scope=Scope.PERSO, vat=2_000), self.reel)
        assert q.flags == QualificationFlags()

    def test_artistic_revenue(self):
        q = qualify_operation(
            _op(kind=OperationKind.REVENUE, category=CATEGORY_ARTISTIC_REVENUE, vat=2_000),
            self.micro,
        )
        assert q.flags.is_pro
        assert q.flags.is_artistic
        assert q.flags.is_social_current_year
        assert q.flags.is_vat_collectable

    def test_other_revenue_is_not_artistic(self):
        q = qualify_operation(_op(kind=OperationKind.REVENUE, category="CONSEIL"), self.micro)
        assert q.flags.is_pro
        assert not q.flags.is_artistic
        assert not q.flags.is_vat_collectable

    @pytest.mark.parametrize("regime, deductible", [(FiscalRegime.MICRO, False), (FiscalRegime.REEL, True)])
    def test_expense_tax_deductibility_follows_regime(self, regime, deductible):
        q = qualify_operation(_op(vat=2_000), make_context(fiscal_regime=regime))
        assert q.flags.is_tax_deductible is deductible
        assert q.flags.is_vat_deductible

    def test_non_deductible_category(self):
        q = qualify_operation(_op(category=CATEGORY_NON_DEDUCTIBLE), self.reel)
        assert not q.flags.is_tax_deductible

    def test_social_expense_only_deductible_under_real_regime(self):
        op = _op(category=CATEGORY_SOCIAL, vat=2_000)
        assert qualify_operation(op, self.reel).flags.is_tax_deductible
        assert not qualify_operation(op, self.micro).flags.is_tax_deductible
        assert not qualify_operation(op, self.reel).flags.is_vat_deductible

    def test_tax_payment_is_pro_only(self):
        q = qualify_operation(_op(kind=OperationKind.TAX_PAYMENT), self.reel)
        assert q.flags == QualificationFlags(is_pro=True)

    def test_operation_untouched(self):
        op = _op(vat=2_000)
        assert qualify_operation(op, self.reel).operation is op


class TestQualifyLedger:
    def test_sorted_by_date_then_id(self):
        ops = [
            _op(op_id="b-1", on=date(2026, 2, 1)),
            _op(op_id="a-1", on=date(2026, 2, 1)),
            _op(op_id="z-0", on=date(2026, 1, 1)),
        ]
        ledger = qualify_ledger(ops, make_context())
        assert [q.operation.id for q in ledger] == ["z-0", "a-1", "b-1"]
