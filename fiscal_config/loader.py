"""
Ruleset Parameter Loader (``fiscal_config.loader``).

Responsibility
--------------
Loads a ruleset ``params.yaml`` file and parses it into typed
``fiscal_config.schema`` dataclass instances.  This is **internal
tooling** -- the single public entry point for runtime parameters is
``fiscal_config.get_ruleset_params()``.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Depends only on the kernel's
hashing utilities; no dependency on modules, engines or services.

Invariants enforced
-------------------
* All parse errors raise ``ValueError`` or ``KeyError`` with descriptive
  messages; no silent defaults for required fields.
* Every parsed object is a frozen dataclass from ``schema.py``.
* Money and rate parameters must be plain integers.
* ``compute_params_fingerprint`` is the SHA-256 of the canonical JSON of
  the raw mapping (sorted keys, no whitespace).

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys in parsed dict  -> ``KeyError`` propagates.
* Non-integer amount or rate  -> ``ValueError``.

Audit relevance
---------------
The params fingerprint is folded into every fiscal hash, tying each
computed figure back to the exact parameter file that governed it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from fiscal_config.schema import (
    AlertsDef,
    ContributionDef,
    IncomeTaxDef,
    PensionDef,
    RulesetIdentity,
    RulesetParams,
    ScheduleDef,
    TaxBracket,
    VatDef,
)
from fiscal_kernel.utils.hashing import fingerprint

PARAMS_FILE_NAME = "params.yaml"


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def compute_params_fingerprint(raw: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON of a raw parameter mapping."""
    return fingerprint(raw)


def _int(data: dict[str, Any], key: str, where: str) -> int:
    value = data[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{where}.{key} must be an integer, got {value!r}")
    return value


def _int_mapping(data: dict[str, Any], where: str) -> dict[str, int]:
    return {key: _int(data, key, where) for key in data}


def parse_identity(data: dict[str, Any]) -> RulesetIdentity:
    return RulesetIdentity(
        jurisdiction=str(data["jurisdiction"]),
        year=_int(data, "year", "ruleset"),
        status=str(data["status"]),
        revision=str(data["revision"]),
    )


def parse_contribution(data: dict[str, Any]) -> ContributionDef:
    base = data["base"]
    if base not in ("social", "csg_crds"):
        raise ValueError(f"Unknown contribution base {base!r} for {data.get('code')}")
    return ContributionDef(
        code=data["code"],
        label=data["label"],
        rate_bps=_int(data, "rate_bps", data["code"]),
        base=base,
        cap=data.get("cap"),
        formula=data["formula"],
        source=data["source"],
        ref=data["ref"],
    )


def parse_pension(data: dict[str, Any]) -> PensionDef:
    return PensionDef(
        code=data["code"],
        label=data["label"],
        rate_bps=_int(data, "rate_bps", "supplementary_pension"),
        cap_name=data["cap_name"],
        formula=data["formula"],
        source=data["source"],
        ref=data["ref"],
    )


def parse_vat(data: dict[str, Any]) -> VatDef:
    return VatDef(
        label_prefix=data["label_prefix"],
        standard_rate_bps=_int(data, "standard_rate_bps", "vat"),
        monthly_payment_day=_int(data, "monthly_payment_day", "vat"),
        annual_due_month=_int(data, "annual_due_month", "vat"),
        annual_due_day=_int(data, "annual_due_day", "vat"),
    )


def parse_income_tax(data: dict[str, Any]) -> IncomeTaxDef:
    brackets: list[TaxBracket] = []
    previous = 0
    for raw in data["brackets"]:
        upper = raw.get("upper")
        if upper is not None:
            upper = _int(raw, "upper", "income_tax.brackets")
            if upper <= previous:
                raise ValueError(f"Income tax brackets must increase: {upper} <= {previous}")
            previous = upper
        brackets.append(TaxBracket(upper=upper, rate_bps=_int(raw, "rate_bps", "income_tax.brackets")))
    if not brackets or brackets[-1].upper is not None:
        raise ValueError("Income tax brackets must end with an unbounded bracket")
    return IncomeTaxDef(
        code=data["code"],
        label=data["label"],
        brackets=tuple(brackets),
        decote_threshold=_int(data, "decote_threshold", "income_tax"),
        decote_ceiling=_int(data, "decote_ceiling", "income_tax"),
        decote_rate_bps=_int(data, "decote_rate_bps", "income_tax"),
        source=data["source"],
        ref=data["ref"],
    )


def parse_schedule(data: dict[str, Any]) -> ScheduleDef:
    return ScheduleDef(
        urssaf_day=_int(data, "urssaf_day", "schedule"),
        quarterly_months=tuple(int(m) for m in data["quarterly_months"]),
        ircec_due_month=_int(data, "ircec_due_month", "schedule"),
        ircec_due_day=_int(data, "ircec_due_day", "schedule"),
        income_tax_day=_int(data, "income_tax_day", "schedule"),
    )


def parse_params(raw: dict[str, Any]) -> RulesetParams:
    """
    Parse a raw parameter mapping into ``RulesetParams``.

    Raises:
        KeyError: if a required section or key is missing.
        ValueError: if a value has the wrong type or shape.
    """
    return RulesetParams(
        identity=parse_identity(raw["ruleset"]),
        constants=_int_mapping(raw["constants"], "constants"),
        bases=_int_mapping(raw["bases"], "bases"),
        social_contributions=tuple(
            parse_contribution(c) for c in raw["social_contributions"]
        ),
        supplementary_pension=parse_pension(raw["supplementary_pension"]),
        vat=parse_vat(raw["vat"]),
        income_tax=parse_income_tax(raw["income_tax"]),
        schedule=parse_schedule(raw["schedule"]),
        alerts=AlertsDef(csg_simplification_flag=raw["alerts"]["csg_simplification_flag"]),
        fingerprint=compute_params_fingerprint(raw),
    )


def load_params(ruleset_dir: Path) -> RulesetParams:
    """Load and parse ``params.yaml`` from a ruleset directory."""
    return parse_params(load_yaml_file(ruleset_dir / PARAMS_FILE_NAME))
