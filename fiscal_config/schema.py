"""
Ruleset parameter schema.

Defines the human-authored, reviewable parameter set of one ruleset
(jurisdiction x year x status). YAML files are parsed into these types by
the loader; ruleset modules only ever see these frozen records.

Key distinction:
  params.yaml    = source artifact (human-authored, versioned, pinned)
  RulesetParams  = runtime artifact (typed, frozen, fingerprinted)
"""

from __future__ import annotations

from dataclasses import dataclass

# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RulesetIdentity:
    """Which (jurisdiction, year, status) a parameter set governs."""

    jurisdiction: str
    year: int
    status: str
    revision: str

    @property
    def key(self) -> str:
        return f"{self.jurisdiction}/{self.year}/{self.status}"


# ---------------------------------------------------------------------------
# Business parameters (declarative data, no executable logic)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ContributionDef:
    """One social contribution line.

    ``base`` is ``"social"`` (the uplifted social base) or ``"csg_crds"``
    (the rounded CSG/CRDS intermediate base). ``cap`` names a constant that
    clamps the base, or is None.
    """

    code: str
    label: str
    rate_bps: int
    base: str
    cap: str | None
    formula: str
    source: str
    ref: str


@dataclass(frozen=True)
class PensionDef:
    code: str
    label: str
    rate_bps: int
    cap_name: str
    formula: str
    source: str
    ref: str


@dataclass(frozen=True)
class VatDef:
    label_prefix: str
    standard_rate_bps: int
    monthly_payment_day: int
    annual_due_month: int
    annual_due_day: int


@dataclass(frozen=True)
class TaxBracket:
    """A progressive bracket; ``upper`` None means unbounded."""

    upper: int | None
    rate_bps: int


@dataclass(frozen=True)
class IncomeTaxDef:
    code: str
    label: str
    brackets: tuple[TaxBracket, ...]
    decote_threshold: int
    decote_ceiling: int
    decote_rate_bps: int
    source: str
    ref: str


@dataclass(frozen=True)
class ScheduleDef:
    urssaf_day: int
    quarterly_months: tuple[int, ...]
    ircec_due_month: int
    ircec_due_day: int
    income_tax_day: int


@dataclass(frozen=True)
class AlertsDef:
    csg_simplification_flag: str


@dataclass(frozen=True)
class RulesetParams:
    """The complete, typed parameter set of one ruleset.

    ``fingerprint`` is the SHA-256 of the canonical raw YAML mapping, so any
    edit to a business parameter changes it.
    """

    identity: RulesetIdentity
    constants: dict[str, int]
    bases: dict[str, int]
    social_contributions: tuple[ContributionDef, ...]
    supplementary_pension: PensionDef
    vat: VatDef
    income_tax: IncomeTaxDef
    schedule: ScheduleDef
    alerts: AlertsDef
    fingerprint: str

    def constant(self, name: str) -> int:
        """Named constant; ``KeyError`` if absent (no silent defaults)."""
        return self.constants[name]
