"""
Approval pins for ruleset parameter files.

A ruleset directory such as ``rulesets/fr/2026/artist_author/`` is
*approved* once it holds an ``APPROVED_FINGERPRINT`` file: one line, the
64-character lowercase SHA-256 of the canonical ``params.yaml`` mapping.
Any later edit to a rate, threshold or bracket changes the params
fingerprint, and therefore every fiscal hash computed with it, so an
approved ruleset whose parameters no longer match its pin is refused.

A directory without a pin is a *draft*: it loads, and the config trace
records ``pin_status="draft"``.
"""

from __future__ import annotations

import re
from enum import Enum
from pathlib import Path

from fiscal_config.schema import RulesetParams

PINFILE_NAME = "APPROVED_FINGERPRINT"

_PIN_RE = re.compile(r"^[0-9a-f]{64}$")


class PinStatus(str, Enum):
    PINNED = "pinned"
    DRAFT = "draft"


class ConfigIntegrityError(Exception):
    """The parameters of an approved ruleset differ from its pin.

    Attributes:
        ruleset_key: ``JURISDICTION/YEAR/status`` of the ruleset.
        expected: Fingerprint recorded at approval time.
        actual: Fingerprint of the parameters on disk.
        pin_path: The ``APPROVED_FINGERPRINT`` file.
    """

    code: str = "CONFIG_INTEGRITY_MISMATCH"

    def __init__(self, ruleset_key: str, expected: str, actual: str, pin_path: Path):
        self.ruleset_key = ruleset_key
        self.expected = expected
        self.actual = actual
        self.pin_path = pin_path
        super().__init__(
            f"Parameters of {ruleset_key} changed since approval: "
            f"pin {expected[:16]}... != params {actual[:16]}... ({pin_path}). "
            "Review the change and re-approve the ruleset."
        )


class MalformedPinError(ValueError):
    """The pin file exists but does not hold a SHA-256 hex digest."""

    code: str = "CONFIG_PIN_MALFORMED"

    def __init__(self, pin_path: Path, content: str):
        self.pin_path = pin_path
        self.content = content
        super().__init__(
            f"Pin file {pin_path} does not hold a SHA-256 hex digest: {content[:70]!r}"
        )


def read_pinned_fingerprint(ruleset_dir: Path) -> str | None:
    """The approved fingerprint of a ruleset directory, or None for a draft."""
    pin_path = ruleset_dir / PINFILE_NAME
    if not pin_path.is_file():
        return None
    content = pin_path.read_text().strip()
    if not _PIN_RE.match(content):
        raise MalformedPinError(pin_path, content)
    return content


def write_pinned_fingerprint(ruleset_dir: Path, params_fingerprint: str) -> Path:
    if not _PIN_RE.match(params_fingerprint):
        raise ValueError(f"Not a SHA-256 hex digest: {params_fingerprint!r}")
    pin_path = ruleset_dir / PINFILE_NAME
    pin_path.write_text(params_fingerprint + "\n")
    return pin_path


def verify_fingerprint_pin(params: RulesetParams, ruleset_dir: Path) -> PinStatus:
    """Check loaded parameters against the pin of their directory.

    Raises:
        ConfigIntegrityError: the ruleset is pinned to another fingerprint.
        MalformedPinError: the pin file is not a hex digest.
    """
    pinned = read_pinned_fingerprint(ruleset_dir)
    if pinned is None:
        return PinStatus.DRAFT
    if params.fingerprint != pinned:
        raise ConfigIntegrityError(
            ruleset_key=params.identity.key,
            expected=pinned,
            actual=params.fingerprint,
            pin_path=ruleset_dir / PINFILE_NAME,
        )
    return PinStatus.PINNED
