"""
Ruleset parameters: loading, parsing, fingerprint pinning.

The pinned fingerprint below is a tripwire: editing the approved parameter
file must be a deliberate, reviewed act (re-approve, then update here).
"""

import copy
import shutil

import pytest

from fiscal_config import (
    ConfigIntegrityError,
    available_rulesets,
    get_ruleset_params,
    ruleset_dir,
)
from fiscal_config.integrity import (
    PINFILE_NAME,
    MalformedPinError,
    PinStatus,
    read_pinned_fingerprint,
    verify_fingerprint_pin,
    write_pinned_fingerprint,
)
from fiscal_config.loader import (
    PARAMS_FILE_NAME,
    compute_params_fingerprint,
    load_yaml_file,
    parse_params,
)

APPROVED_FINGERPRINT = "62ec08045bf85543adfd755cdade1e420fc0b1688821e2e359d794966ccdd941"
SOURCE_DIR = ruleset_dir("FR", 2026, "artist_author")


@pytest.fixture
def ruleset_copy(tmp_path):
    """A writable copy of the approved ruleset under ``tmp_path``."""
    target = tmp_path / "fr" / "2026" / "artist_author"
    shutil.copytree(SOURCE_DIR, target)
    return tmp_path, target


def _edit(target, old, new):
    params_file = target / PARAMS_FILE_NAME
    text = params_file.read_text()
    assert old in text
    params_file.write_text(text.replace(old, new))


class TestApprovedRuleset:
    def test_fingerprint_tripwire(self):
        params = get_ruleset_params("FR", 2026, "artist_author")
        assert params.fingerprint == APPROVED_FINGERPRINT
        assert read_pinned_fingerprint(SOURCE_DIR) == APPROVED_FINGERPRINT

    def test_parsed_values(self):
        params = get_ruleset_params("FR", 2026, "artist_author")
        assert params.identity.key == "FR/2026/artist_author"
        assert params.constant("PASS") == 4_806_000
        assert params.bases["CSG_CRDS_BASE_FACTOR_BPS"] == 9825
        assert [c.code for c in params.social_contributions] == [
            "URSSAF_RETRAITE_BASIC_PLAF",
            "URSSAF_RETRAITE_BASIC_DEPLAF",
            "URSSAF_CSG",
            "URSSAF_CRDS",
            "URSSAF_CFP",
        ]
        assert params.income_tax.brackets[-1].upper is None
        assert params.schedule.quarterly_months == (1, 4, 7, 10)

    def test_unknown_constant_is_an_error(self):
        params = get_ruleset_params("FR", 2026, "artist_author")
        with pytest.raises(KeyError):
            params.constant("SMIC_MONTHLY")

    def test_config_trace_logged(self, captured_logs):
        get_ruleset_params("FR", 2026, "artist_author")
        (trace,) = [r for r in captured_logs() if r["message"] == "FISCAL_CONFIG_TRACE"]
        assert trace["params_fingerprint"] == APPROVED_FINGERPRINT
        assert trace["ruleset_key"] == "FR/2026/artist_author"
        assert trace["pin_status"] == "pinned"

    def test_available_rulesets(self):
        assert available_rulesets() == (("FR", 2026, "artist_author"),)


class TestPinning:
    def test_tampered_parameter_rejected(self, ruleset_copy):
        root, target = ruleset_copy
        _edit(target, "rate_bps: 690", "rate_bps: 700")
        with pytest.raises(ConfigIntegrityError) as exc_info:
            get_ruleset_params("FR", 2026, "artist_author", root)
        assert exc_info.value.expected == APPROVED_FINGERPRINT
        assert exc_info.value.actual != APPROVED_FINGERPRINT
        assert exc_info.value.code == "CONFIG_INTEGRITY_MISMATCH"

    def test_comments_do_not_change_fingerprint(self, ruleset_copy):
        root, target = ruleset_copy
        _edit(target, "# French artist-author ruleset", "# Reviewed copy of the ruleset")
        params = get_ruleset_params("FR", 2026, "artist_author", root)
        assert params.fingerprint == APPROVED_FINGERPRINT

    def test_draft_without_pin_is_accepted(self, ruleset_copy):
        root, target = ruleset_copy
        (target / PINFILE_NAME).unlink()
        _edit(target, "PASS: 4806000", "PASS: 4900000")
        params = get_ruleset_params("FR", 2026, "artist_author", root)
        assert params.constant("PASS") == 4_900_000
        assert params.fingerprint != APPROVED_FINGERPRINT

    def test_draft_reported_in_trace(self, ruleset_copy, captured_logs):
        root, target = ruleset_copy
        (target / PINFILE_NAME).unlink()
        get_ruleset_params("FR", 2026, "artist_author", root)
        (trace,) = [r for r in captured_logs() if r["message"] == "FISCAL_CONFIG_TRACE"]
        assert trace["pin_status"] == "draft"

    def test_mismatch_names_the_ruleset(self, ruleset_copy):
        root, target = ruleset_copy
        _edit(target, "RAAP_THRESHOLD: 1069200", "RAAP_THRESHOLD: 1069300")
        with pytest.raises(ConfigIntegrityError) as exc_info:
            get_ruleset_params("FR", 2026, "artist_author", root)
        assert exc_info.value.ruleset_key == "FR/2026/artist_author"
        assert exc_info.value.pin_path == target / PINFILE_NAME

    def test_malformed_pin_rejected(self, ruleset_copy):
        root, target = ruleset_copy
        (target / PINFILE_NAME).write_text("approved by accounting\n")
        with pytest.raises(MalformedPinError) as exc_info:
            get_ruleset_params("FR", 2026, "artist_author", root)
        assert exc_info.value.code == "CONFIG_PIN_MALFORMED"

    def test_identity_must_match_directory(self, ruleset_copy):
        root, target = ruleset_copy
        shutil.copytree(target, root / "fr" / "2027" / "artist_author")
        with pytest.raises(ValueError, match="declares"):
            get_ruleset_params("FR", 2027, "artist_author", root)

    def test_missing_ruleset(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_ruleset_params("FR", 2026, "artist_author", tmp_path)


class TestParsing:
    def setup_method(self):
        self.raw = load_yaml_file(SOURCE_DIR / PARAMS_FILE_NAME)

    def test_fingerprint_ignores_key_order(self):
        reordered = dict(reversed(list(self.raw.items())))
        assert compute_params_fingerprint(reordered) == compute_params_fingerprint(self.raw)

    def test_float_rate_rejected(self):
        raw = copy.deepcopy(self.raw)
        raw["social_contributions"][0]["rate_bps"] = 6.9
        with pytest.raises(ValueError, match="must be an integer"):
            parse_params(raw)

    def test_unknown_contribution_base(self):
        raw = copy.deepcopy(self.raw)
        raw["social_contributions"][2]["base"] = "gross"
        with pytest.raises(ValueError, match="Unknown contribution base"):
            parse_params(raw)

    def test_brackets_must_increase(self):
        raw = copy.deepcopy(self.raw)
        raw["income_tax"]["brackets"][1]["upper"] = 1_000_000
        with pytest.raises(ValueError, match="must increase"):
            parse_params(raw)

    def test_brackets_must_end_unbounded(self):
        raw = copy.deepcopy(self.raw)
        raw["income_tax"]["brackets"] = raw["income_tax"]["brackets"][:-1]
        with pytest.raises(ValueError, match="unbounded"):
            parse_params(raw)

    def test_missing_section(self):
        raw = copy.deepcopy(self.raw)
        del raw["vat"]
        with pytest.raises(KeyError):
            parse_params(raw)


class TestPinFile:
    def test_verify_returns_status(self, ruleset_copy):
        _, target = ruleset_copy
        params = get_ruleset_params("FR", 2026, "artist_author")
        assert verify_fingerprint_pin(params, target) == PinStatus.PINNED
        (target / PINFILE_NAME).unlink()
        assert verify_fingerprint_pin(params, target) == PinStatus.DRAFT

    def test_write_rejects_non_digest(self, tmp_path):
        with pytest.raises(ValueError):
            write_pinned_fingerprint(tmp_path, APPROVED_FINGERPRINT.upper())
        assert not (tmp_path / PINFILE_NAME).exists()

    def test_write_then_read(self, tmp_path):
        write_pinned_fingerprint(tmp_path, APPROVED_FINGERPRINT)
        assert read_pinned_fingerprint(tmp_path) == APPROVED_FINGERPRINT
