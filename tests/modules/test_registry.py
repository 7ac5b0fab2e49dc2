"""Ruleset selection and the degraded fallback module."""

import shutil

import pytest

from fiscal_config import ConfigIntegrityError, ruleset_dir
from fiscal_kernel.domain.outputs import AlertSeverity, ComputedBases
from fiscal_kernel.domain.values import UserStatus, VatRegime
from fiscal_modules import (
    FallbackModule,
    FallbackRuleset,
    SupportedRuleset,
    select_ruleset,
    supported_keys,
)
from fiscal_modules.artist_author import ArtistAuthorModule
from fiscal_modules.fallback import ALERT_RULESET_FALLBACK, FALLBACK_REVISION
from tests.builders import make_context, qualified_ledger, revenue_entry

RULESET_SRC = ruleset_dir("FR", 2026, "artist_author")


class TestSelectRuleset:
    def test_supported_key(self, micro_context):
        selection = select_ruleset(micro_context)
        assert isinstance(selection, SupportedRuleset)
        assert isinstance(selection.module, ArtistAuthorModule)

    def test_supported_keys(self):
        assert supported_keys() == ("FR/2026/artist_author",)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"tax_year": 2025},
            {"user_status": UserStatus.FREELANCE},
            {"user_status": UserStatus.SASU},
        ],
    )
    def test_unsupported_falls_back(self, overrides):
        selection = select_ruleset(make_context(**overrides))
        assert isinstance(selection, FallbackRuleset)
        assert isinstance(selection.module, FallbackModule)
        assert "no ruleset registered" in selection.reason

    def test_tampered_params_propagate(self, tmp_path, micro_context):
        target = tmp_path / "fr" / "2026" / "artist_author"
        shutil.copytree(RULESET_SRC, target)
        params_file = target / "params.yaml"
        params_file.write_text(
            params_file.read_text().replace("PASS: 4806000", "PASS: 4806100")
        )
        with pytest.raises(ConfigIntegrityError):
            select_ruleset(micro_context, rulesets_dir=tmp_path)

    def test_missing_params_propagate(self, tmp_path, micro_context):
        with pytest.raises(FileNotFoundError):
            select_ruleset(micro_context, rulesets_dir=tmp_path)


class TestFallbackModule:
    def setup_method(self):
        self.module = FallbackModule("FR/2026/freelance")
        self.context = make_context(
            user_status=UserStatus.FREELANCE, vat_regime=VatRegime.REEL_MENSUEL
        )

    def test_identity(self):
        assert self.module.key == "fallback:FR/2026/freelance"
        assert self.module.revision == FALLBACK_REVISION
        assert self.module.params_fingerprint == FallbackModule("FR/2026/freelance").params_fingerprint
        assert self.module.params_fingerprint != FallbackModule("FR/2027/freelance").params_fingerprint

    def test_vat_only(self):
        ledger = qualified_ledger(
            [revenue_entry(120_000, entry_date="2026-01-10", vat_rate_bps=2000)], self.context
        )
        bases = self.module.compute_bases(ledger, self.context)
        assert bases.vat.collected == 20_000
        assert bases.social.total == 0
        assert bases.fiscal.total_net_taxable == 0

        (vat_line,) = self.module.compute_vat(ledger, self.context)
        assert vat_line.amount == 20_000
        assert self.module.compute_social_contributions(bases, self.context) == ()
        assert self.module.compute_supplementary_pension(bases, self.context) == ()
        assert self.module.compute_income_tax(bases, self.context) == ()
        assert self.module.compute_schedule((vat_line,), self.context) == ()

    def test_single_warning(self):
        (alert,) = self.module.compute_alerts(ComputedBases(), (), self.context)
        assert alert.code == ALERT_RULESET_FALLBACK
        assert alert.severity == AlertSeverity.WARNING
