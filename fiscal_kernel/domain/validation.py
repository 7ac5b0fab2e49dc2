"""
Boundary validation of caller-supplied records.

Pure checks with no I/O. Raw mappings (decoded JSON, UI payloads) are
turned into typed domain records here, or rejected with every field-level
issue collected in one ``InputValidationError``. The pipeline is never
invoked with partially-valid data.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, TypeVar

from fiscal_kernel.domain.outputs import TreasuryAnchor
from fiscal_kernel.domain.values import (
    CATEGORY_DEFAULT,
    Entry,
    EntryNature,
    FiscalContext,
    FiscalOptions,
    FiscalRegime,
    Household,
    PaymentFrequency,
    Periodicity,
    Scope,
    UserStatus,
    VatPaymentFrequency,
    VatRegime,
)
from fiscal_kernel.exceptions import InputValidationError
from fiscal_kernel.logging_config import get_logger

logger = get_logger("domain.validation")

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

E = TypeVar("E", bound=Enum)


@dataclass(frozen=True)
class FieldIssue:
    """One field-level validation failure."""

    path: str
    code: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


class _Collector:
    def __init__(self, prefix: str = ""):
        self.prefix = prefix
        self.issues: list[FieldIssue] = []

    def add(self, name: str, code: str, message: str) -> None:
        self.issues.append(FieldIssue(f"{self.prefix}{name}", code, message))

    def required(self, data: Mapping[str, Any], name: str) -> Any:
        if name not in data or data[name] is None:
            self.add(name, "REQUIRED", "field is required")
            return None
        return data[name]

    def string(self, data: Mapping[str, Any], name: str, *, required: bool = True,
               default: str | None = None) -> str | None:
        value = self.required(data, name) if required else data.get(name, default)
        if value is None:
            return default
        if not isinstance(value, str):
            self.add(name, "INVALID_TYPE", f"expected string, got {type(value).__name__}")
            return None
        return value

    def integer(self, data: Mapping[str, Any], name: str, *, required: bool = True,
                default: int | None = None) -> int | None:
        value = self.required(data, name) if required else data.get(name, default)
        if value is None:
            return default
        if isinstance(value, bool) or not isinstance(value, int):
            self.add(name, "NOT_INTEGER", f"expected integer cents/bps, got {value!r}")
            return None
        return value

    def rate_bps(self, data: Mapping[str, Any], name: str, *, required: bool = True,
                 default: int | None = None) -> int | None:
        value = self.integer(data, name, required=required, default=default)
        if value is not None and value < 0:
            self.add(name, "OUT_OF_RANGE", f"rate cannot be negative, got {value} bps")
            return None
        return value

    def enum(self, data: Mapping[str, Any], name: str, enum_type: type[E], *,
             required: bool = True, default: E | None = None) -> E | None:
        value = self.required(data, name) if required else data.get(name)
        if value is None:
            return default
        try:
            return enum_type(value)
        except ValueError:
            allowed = ", ".join(m.value for m in enum_type)
            self.add(name, "UNKNOWN_ENUM", f"{value!r} not in [{allowed}]")
            return None

    def iso_date(self, data: Mapping[str, Any], name: str) -> str | None:
        value = self.string(data, name)
        if value is None:
            return None
        if not _DATE_RE.match(value):
            self.add(name, "MALFORMED_DATE", f"expected YYYY-MM-DD, got {value!r}")
            return None
        try:
            date.fromisoformat(value)
        except ValueError:
            self.add(name, "MALFORMED_DATE", f"not a calendar date: {value!r}")
            return None
        return value

    def fail_if_any(self, record_type: str) -> None:
        if self.issues:
            logger.warning(
                "input_validation_failed",
                extra={
                    "record_type": record_type,
                    "issue_count": len(self.issues),
                    "issue_paths": [i.path for i in self.issues],
                },
            )
            raise InputValidationError(record_type, tuple(self.issues))


def parse_entry(data: Mapping[str, Any], *, prefix: str = "") -> Entry:
    """Parse one raw entry mapping into an ``Entry``.

    Raises:
        InputValidationError: with every issue found on the record.
    """
    c = _Collector(prefix)
    if not isinstance(data, Mapping):
        c.add("", "INVALID_TYPE", "entry must be a mapping")
        c.fail_if_any("Entry")

    entry_id = c.string(data, "id")
    nature = c.enum(data, "nature", EntryNature)
    label = c.string(data, "label", required=False, default="")
    amount = c.integer(data, "amount_ttc_cents")
    vat_rate = c.rate_bps(data, "vat_rate_bps", required=False)
    raw_date = c.iso_date(data, "date")
    scope = c.enum(data, "scope", Scope)
    category = c.string(data, "category", required=False, default=CATEGORY_DEFAULT)
    subcategory = c.string(data, "subcategory", required=False)
    periodicity = c.enum(
        data, "periodicity", Periodicity, required=False, default=Periodicity.YEARLY
    )
    c.fail_if_any("Entry")

    return Entry(
        id=entry_id,
        nature=nature,
        label=label,
        amount_ttc_cents=amount,
        date=raw_date,
        scope=scope,
        vat_rate_bps=vat_rate,
        category=category,
        subcategory=subcategory,
        periodicity=periodicity,
    )


def parse_entries(items: Iterable[Mapping[str, Any]]) -> tuple[Entry, ...]:
    """Parse a list of entries, reporting issues of every bad record at once."""
    entries: list[Entry] = []
    issues: list[FieldIssue] = []
    seen: set[str] = set()
    for index, item in enumerate(items):
        try:
            entry = parse_entry(item, prefix=f"entries[{index}].")
        except InputValidationError as exc:
            issues.extend(exc.issues)
            continue
        if entry.id in seen:
            issues.append(
                FieldIssue(f"entries[{index}].id", "DUPLICATE_ID", f"duplicate id {entry.id!r}")
            )
            continue
        seen.add(entry.id)
        entries.append(entry)
    if issues:
        raise InputValidationError("EntryList", tuple(issues))
    return tuple(entries)


def _parse_household(data: Any, c: _Collector) -> Household:
    if data is None:
        return Household()
    if not isinstance(data, Mapping):
        c.add("household", "INVALID_TYPE", "household must be a mapping")
        return Household()
    try:
        parts = Decimal(str(data.get("parts", "1")))
    except InvalidOperation:
        c.add("household.parts", "INVALID_NUMBER", f"not a number: {data.get('parts')!r}")
        return Household()
    if not parts.is_finite():
        c.add("household.parts", "INVALID_NUMBER", f"not a finite number: {data.get('parts')!r}")
        return Household()
    children = data.get("children", 0)
    if isinstance(children, bool) or not isinstance(children, int):
        c.add("household.children", "NOT_INTEGER", f"expected integer, got {children!r}")
        return Household()
    try:
        return Household(parts=parts, children=children)
    except ValueError as exc:
        c.add("household", "OUT_OF_RANGE", str(exc))
        return Household()


def _parse_options(data: Any, c: _Collector) -> FiscalOptions:
    if data is None:
        return FiscalOptions()
    if not isinstance(data, Mapping):
        c.add("options", "INVALID_TYPE", "options must be a mapping")
        return FiscalOptions()
    oc = _Collector("options.")
    estimate = data.get("estimate_mode", False)
    if not isinstance(estimate, bool):
        oc.add("estimate_mode", "INVALID_TYPE", "expected boolean")
        estimate = False
    urssaf = oc.enum(data, "urssaf_frequency", PaymentFrequency, required=False,
                     default=PaymentFrequency.QUARTERLY)
    vat_freq = oc.enum(data, "vat_payment_frequency", VatPaymentFrequency,
                       required=False, default=VatPaymentFrequency.YEARLY)
    default_rate = oc.rate_bps(data, "default_vat_rate_bps", required=False, default=0)
    flags = data.get("feature_flags", {}) or {}
    if not isinstance(flags, Mapping) or not all(isinstance(v, bool) for v in flags.values()):
        oc.add("feature_flags", "INVALID_TYPE", "expected mapping of booleans")
        flags = {}
    c.issues.extend(oc.issues)
    if oc.issues:
        return FiscalOptions()
    return FiscalOptions(
        estimate_mode=estimate,
        urssaf_frequency=urssaf,
        vat_payment_frequency=vat_freq,
        default_vat_rate_bps=default_rate,
        feature_flags=dict(flags),
    )


def parse_context(data: Mapping[str, Any]) -> FiscalContext:
    """Parse a raw fiscal context mapping.

    Raises:
        InputValidationError: with every issue found on the record.
    """
    c = _Collector()
    tax_year = c.integer(data, "tax_year")
    as_of_raw = c.iso_date(data, "as_of")
    status = c.enum(data, "user_status", UserStatus)
    regime = c.enum(data, "fiscal_regime", FiscalRegime)
    vat_regime = c.enum(data, "vat_regime", VatRegime)
    jurisdiction = c.string(data, "jurisdiction", required=False, default="FR")
    household = _parse_household(data.get("household"), c)
    options = _parse_options(data.get("options"), c)
    c.fail_if_any("FiscalContext")

    return FiscalContext(
        tax_year=tax_year,
        as_of=date.fromisoformat(as_of_raw),
        user_status=status,
        fiscal_regime=regime,
        vat_regime=vat_regime,
        household=household,
        options=options,
        jurisdiction=jurisdiction,
    )


def parse_anchor(data: Mapping[str, Any] | None) -> TreasuryAnchor:
    """Parse a treasury anchor; ``None`` yields the zero January 1st anchor."""
    if data is None:
        return TreasuryAnchor()
    c = _Collector("anchor.")
    amount = c.integer(data, "amount_cents")
    month_index = c.integer(data, "month_index", required=False, default=-1)
    if month_index is not None and not -1 <= month_index <= 11:
        c.add("month_index", "OUT_OF_RANGE", f"{month_index} not in [-1, 11]")
    c.fail_if_any("TreasuryAnchor")
    return TreasuryAnchor(amount_cents=amount, month_index=month_index)
