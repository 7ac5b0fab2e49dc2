"""
fiscal_config -- single public entrypoint for ruleset parameters.

Responsibility:
    Provides the ONLY way to obtain ruleset parameters at runtime through
    ``get_ruleset_params()``.  No ruleset module reads YAML files or
    hard-codes business constants directly.  YAML loading is internal
    tooling and never exposed to callers.

Architecture position:
    Configuration -- YAML-driven parameter sets, one directory per
    (jurisdiction, year, status) under ``fiscal_config/rulesets``.
    This package sits above ``fiscal_kernel`` and below
    ``fiscal_modules`` / ``fiscal_services``.  The kernel MUST NEVER
    import from ``fiscal_config``.

Invariants enforced:
    - Single entrypoint: all runtime parameters flow through
      ``get_ruleset_params()``.
    - Fingerprint pinning: when an APPROVED_FINGERPRINT file exists, the
      params fingerprint must match the pinned value.
    - Deterministic fingerprint: the same YAML mapping always produces the
      same params fingerprint, whatever its key order or formatting.

Failure modes:
    - ``FileNotFoundError`` -- no parameter directory for the requested
      ruleset.
    - ``KeyError`` / ``ValueError`` -- structural parse failures, including
      a pin file that is not a SHA-256 hex digest (``MalformedPinError``).
    - ``ConfigIntegrityError`` -- fingerprint mismatch against an approved
      pin file.

Audit relevance:
    Every successful ``get_ruleset_params()`` call emits a
    ``FISCAL_CONFIG_TRACE`` log entry containing the ruleset key, revision,
    fingerprint and pin status (pinned or draft).  The fingerprint is folded into every fiscal hash.
"""

from __future__ import annotations

import logging
from pathlib import Path

from fiscal_config.integrity import ConfigIntegrityError, verify_fingerprint_pin
from fiscal_config.loader import PARAMS_FILE_NAME, load_params
from fiscal_config.schema import RulesetParams

_logger = logging.getLogger("fiscal_kernel.config")

# Default ruleset parameters directory
_DEFAULT_RULESETS_DIR = Path(__file__).parent / "rulesets"

__all__ = [
    "ConfigIntegrityError",
    "RulesetParams",
    "available_rulesets",
    "get_ruleset_params",
    "ruleset_dir",
]


def ruleset_dir(
    jurisdiction: str,
    year: int,
    status: str,
    rulesets_dir: Path | None = None,
) -> Path:
    """Directory holding the parameter file of one ruleset."""
    root = rulesets_dir or _DEFAULT_RULESETS_DIR
    return root / jurisdiction.lower() / str(year) / status


def available_rulesets(rulesets_dir: Path | None = None) -> tuple[tuple[str, int, str], ...]:
    """All (jurisdiction, year, status) triples with a parameter file, sorted."""
    root = rulesets_dir or _DEFAULT_RULESETS_DIR
    found: list[tuple[str, int, str]] = []
    for params_file in sorted(root.glob(f"*/*/*/{PARAMS_FILE_NAME}")):
        status_dir = params_file.parent
        year_dir = status_dir.parent
        found.append((year_dir.parent.name.upper(), int(year_dir.name), status_dir.name))
    return tuple(found)


def get_ruleset_params(
    jurisdiction: str,
    year: int,
    status: str,
    rulesets_dir: Path | None = None,
) -> RulesetParams:
    """The ONLY public ruleset-parameter entrypoint.

    Guarantees:
        - The returned ``RulesetParams`` has been fully parsed into frozen
          records and (when applicable) verified against its pin.
        - A ``FISCAL_CONFIG_TRACE`` log entry is emitted on every
          successful call.

    Non-goals:
        - This function does NOT cache parameters across calls.

    Raises:
        FileNotFoundError: If no parameter file exists for the ruleset.
        KeyError / ValueError: If the parameter file or its pin file is
            malformed (``MalformedPinError`` for the latter).
        ConfigIntegrityError: If APPROVED_FINGERPRINT exists and does not
            match the computed params fingerprint.
    """
    directory = ruleset_dir(jurisdiction, year, status, rulesets_dir)
    params = load_params(directory)

    identity = params.identity
    if (identity.jurisdiction, identity.year, identity.status) != (
        jurisdiction.upper(),
        year,
        status,
    ):
        raise ValueError(
            f"Parameter file in {directory} declares {identity.key}, "
            f"expected {jurisdiction.upper()}/{year}/{status}"
        )

    pin_status = verify_fingerprint_pin(params, directory)

    _logger.info(
        "FISCAL_CONFIG_TRACE",
        extra={
            "trace_type": "FISCAL_CONFIG_TRACE",
            "ruleset_key": identity.key,
            "ruleset_revision": identity.revision,
            "params_fingerprint": params.fingerprint,
            "pin_status": pin_status.value,
            "contribution_count": len(params.social_contributions),
        },
    )
    return params
