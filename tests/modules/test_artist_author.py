"""Artist-author ruleset: bases, URSSAF lines, RAAP and threshold alerts."""

import pytest

from fiscal_kernel.domain.outputs import AlertSeverity, Organization, TaxCategory
from fiscal_kernel.domain.values import FiscalRegime, Scope
from fiscal_modules.artist_author import ArtistAuthorModule
from fiscal_modules.artist_author.alerts import (
    ALERT_CSG_APPROXIMATION,
    ALERT_PASS_CAP,
    ALERT_RAAP_LIABILITY,
)
from fiscal_modules.artist_author.bases import flat_rate_abatement
from tests.builders import (
    artist_author_params,
    expense_entry,
    make_context,
    qualified_ledger,
    revenue_entry,
)


@pytest.fixture(scope="module")
def module():
    return ArtistAuthorModule(artist_author_params())


def _run(module, entries, context):
    ledger = qualified_ledger(entries, context)
    bases = module.compute_bases(ledger, context)
    social = module.compute_social_contributions(bases, context)
    pension = module.compute_supplementary_pension(bases, context)
    return bases, social, pension


class TestIdentity:
    def test_key_and_revision(self, module):
        assert module.key == "FR/2026/artist_author"
        assert module.revision == "2026.1"
        assert len(module.params_fingerprint) == 64


class TestBases:
    def test_micro_abatement_and_uplift(self, module, micro_context):
        bases, _, _ = _run(module, [revenue_entry(1_000_000)], micro_context)
        assert bases.fiscal.revenue == 1_000_000
        assert bases.fiscal.total_net_taxable == 660_000
        assert bases.social.total == 759_000
        assert bases.social.artistic == 759_000
        assert bases.social.other == 0

    def test_minimum_abatement(self, module):
        params = artist_author_params()
        assert flat_rate_abatement(50_000, params) == 30_500
        assert flat_rate_abatement(1_000_000, params) == 340_000

    def test_small_revenue_never_negative(self, module, micro_context):
        bases, _, _ = _run(module, [revenue_entry(20_000)], micro_context)
        assert bases.fiscal.total_net_taxable == 0
        assert bases.social.total == 0

    def test_micro_ignores_expenses(self, module, micro_context):
        entries = [revenue_entry(1_000_000), expense_entry(200_000)]
        bases, _, _ = _run(module, entries, micro_context)
        assert bases.fiscal.total_net_taxable == 660_000
        assert bases.fiscal.deductible_expenses == 0

    def test_reel_deducts_expenses(self, module):
        context = make_context(fiscal_regime=FiscalRegime.REEL)
        entries = [revenue_entry(8_000_000), expense_entry(2_000_000)]
        bases, _, _ = _run(module, entries, context)
        assert bases.fiscal.deductible_expenses == 2_000_000
        assert bases.fiscal.total_net_taxable == 6_000_000
        assert bases.social.total == 6_900_000

    def test_reel_non_deductible_category(self, module):
        context = make_context(fiscal_regime=FiscalRegime.REEL)
        entries = [revenue_entry(1_000_000), expense_entry(300_000, category="AUTRE")]
        bases, _, _ = _run(module, entries, context)
        assert bases.fiscal.total_net_taxable == 1_000_000

    def test_personal_expenses_ignored(self, module):
        context = make_context(fiscal_regime=FiscalRegime.REEL)
        entries = [revenue_entry(1_000_000), expense_entry(300_000, scope=Scope.PERSO)]
        bases, _, _ = _run(module, entries, context)
        assert bases.fiscal.total_net_taxable == 1_000_000


class TestSocialContributions:
    def test_reference_urssaf_lines(self, module, micro_context):
        _, social, pension = _run(module, [revenue_entry(1_000_000)], micro_context)
        amounts = {line.code: line.amount for line in social}
        assert amounts == {
            "URSSAF_RETRAITE_BASIC_PLAF": 52_371,
            "URSSAF_RETRAITE_BASIC_DEPLAF": 3_036,
            "URSSAF_CSG": 68_606,
            "URSSAF_CRDS": 3_729,
            "URSSAF_CFP": 2_657,
        }
        assert sum(amounts.values()) == 130_399
        assert pension == ()

    def test_csg_crds_two_step_base(self, module, micro_context):
        _, social, _ = _run(module, [revenue_entry(1_000_000)], micro_context)
        by_code = {line.code: line for line in social}
        assert by_code["URSSAF_CSG"].base == 745_718
        assert by_code["URSSAF_CRDS"].base == 745_718

    def test_lines_are_traceable(self, module, micro_context):
        _, social, _ = _run(module, [revenue_entry(1_000_000)], micro_context)
        for line in social:
            assert line.organization == Organization.URSSAF_AA
            assert line.category == TaxCategory.SOCIAL
            assert line.formula
            assert line.juridical_basis is not None

    def test_pass_cap_metadata(self, module):
        context = make_context(fiscal_regime=FiscalRegime.REEL)
        entries = [revenue_entry(8_000_000), expense_entry(2_000_000)]
        _, social, _ = _run(module, entries, context)
        by_code = {line.code: line for line in social}
        plaf = by_code["URSSAF_RETRAITE_BASIC_PLAF"]
        assert plaf.base == 4_806_000
        assert plaf.amount == 331_614
        assert plaf.cap_applied.name == "PASS"
        assert plaf.cap_applied.value == 4_806_000
        assert by_code["URSSAF_RETRAITE_BASIC_DEPLAF"].base == 6_900_000
        assert by_code["URSSAF_RETRAITE_BASIC_DEPLAF"].cap_applied is None

    def test_under_cap_has_no_cap_metadata(self, module, micro_context):
        _, social, _ = _run(module, [revenue_entry(1_000_000)], micro_context)
        assert all(line.cap_applied is None for line in social)


class TestSupplementaryPension:
    def test_raap_above_threshold(self, module, micro_context):
        bases, _, pension = _run(module, [revenue_entry(2_000_000)], micro_context)
        assert bases.social.total == 1_518_000
        (raap,) = pension
        assert raap.code == "IRCEC_RAAP"
        assert raap.amount == 121_440
        assert raap.organization == Organization.IRCEC
        assert raap.metadata["is_liable"] is True
        assert raap.cap_applied is None

    def test_raap_below_threshold_logs(self, module, micro_context, captured_logs):
        _, _, pension = _run(module, [revenue_entry(1_000_000)], micro_context)
        assert pension == ()
        assert any(r["message"] == "pension_below_threshold" for r in captured_logs())

    def test_raap_due_exactly_at_threshold(self, module):
        context = make_context(fiscal_regime=FiscalRegime.REEL)
        bases, _, pension = _run(module, [revenue_entry(929_739)], context)
        assert bases.social.total == 1_069_200
        (raap,) = pension
        assert raap.amount == 85_536


class TestAlerts:
    def _alerts(self, module, entries, context):
        ledger = qualified_ledger(entries, context)
        bases = module.compute_bases(ledger, context)
        return {a.code: a for a in module.compute_alerts(bases, (), context)}

    def test_no_alert_for_small_base(self, module, micro_context):
        assert self._alerts(module, [revenue_entry(1_000_000)], micro_context) == {}

    def test_raap_alert(self, module, micro_context):
        alerts = self._alerts(module, [revenue_entry(2_000_000)], micro_context)
        alert = alerts[ALERT_RAAP_LIABILITY]
        assert alert.severity == AlertSeverity.WARNING
        assert alert.trigger_value == 1_518_000
        assert alert.threshold_value == 1_069_200
        assert alert.recommended_action

    def test_raap_alert_matches_pension_line_at_threshold(self, module):
        context = make_context(fiscal_regime=FiscalRegime.REEL)
        entries = [revenue_entry(929_739)]
        ledger = qualified_ledger(entries, context)
        bases = module.compute_bases(ledger, context)
        assert bases.social.total == 1_069_200
        assert module.compute_supplementary_pension(bases, context)
        alerts = self._alerts(module, entries, context)
        assert alerts[ALERT_RAAP_LIABILITY].trigger_value == 1_069_200

    def test_no_raap_alert_one_cent_below_threshold(self, module):
        context = make_context(fiscal_regime=FiscalRegime.REEL)
        entries = [revenue_entry(929_738)]
        ledger = qualified_ledger(entries, context)
        bases = module.compute_bases(ledger, context)
        assert bases.social.total < 1_069_200
        assert module.compute_supplementary_pension(bases, context) == ()
        assert ALERT_RAAP_LIABILITY not in self._alerts(module, entries, context)

    def test_pass_alert(self, module):
        context = make_context(fiscal_regime=FiscalRegime.REEL)
        alerts = self._alerts(
            module, [revenue_entry(8_000_000), expense_entry(2_000_000)], context
        )
        assert alerts[ALERT_PASS_CAP].severity == AlertSeverity.INFO
        assert alerts[ALERT_PASS_CAP].threshold_value == 4_806_000
        assert ALERT_CSG_APPROXIMATION not in alerts

    def test_csg_alert_requires_flag(self, module):
        entries = [revenue_entry(40_000_000)]
        plain = self._alerts(module, entries, make_context())
        assert ALERT_CSG_APPROXIMATION not in plain

        flagged = self._alerts(
            module,
            entries,
            make_context(feature_flags={"CSG_ABOVE_4PASS_SIMPLIFIED": True}),
        )
        alert = flagged[ALERT_CSG_APPROXIMATION]
        assert alert.severity == AlertSeverity.WARNING
        assert alert.threshold_value == 4 * 4_806_000
