"""
Deterministic hashing utilities.

All fingerprints in the fiscal pipeline must be deterministic and
reproducible. Mapping keys are sorted at every depth; sequence order is
preserved because it carries meaning (rate tiers, installment order).
"""

import dataclasses
import hashlib
import json
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any


def _json_serializer(obj: Any) -> Any:
    """
    Custom JSON serializer for types not natively supported.

    Args:
        obj: Object to serialize.

    Returns:
        JSON-serializable representation.

    Raises:
        TypeError: If object type is not supported.
    """
    if isinstance(obj, Decimal):
        # Normalize Decimal to string representation
        # Remove trailing zeros for consistency
        return str(obj.normalize())
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {f.name: getattr(obj, f.name) for f in dataclasses.fields(obj)}
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (set, frozenset)):
        return sorted(obj)
    if hasattr(obj, "items"):
        return dict(obj.items())

    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def canonicalize(value: Any) -> str:
    """
    Convert a value to its canonical JSON string.

    Produces a deterministic JSON representation:
    - Keys are sorted lexicographically at every depth
    - Sequences keep their order
    - No whitespace
    - Consistent handling of Decimal, date/datetime, dataclasses, mappings

    >>> canonicalize({"z": 1, "a": {"d": 4, "c": [3, 2, 1]}, "b": 2})
    '{"a":{"c":[3,2,1],"d":4},"b":2,"z":1}'
    """
    return json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=_json_serializer,
    )


def digest(text: str) -> str:
    """
    Compute the SHA-256 of a string's UTF-8 bytes.

    Returns:
        Hex-encoded SHA-256 hash (64 lowercase characters).
    """
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def fingerprint(value: Any) -> str:
    """``digest(canonicalize(value))``."""
    return digest(canonicalize(value))


def fiscal_fingerprint(
    *,
    engine_version: str,
    ruleset_year: int,
    ruleset_revision: str,
    params_fingerprint: str,
    context_fingerprint: str,
    ledger_fingerprint: str,
) -> str:
    """
    Compute the fiscal fingerprint of one computation.

    Identifies exactly which engine, ruleset parameters, context and
    (sorted) ledger produced a given output.
    """
    return fingerprint(
        {
            "engine_version": engine_version,
            "ruleset_year": ruleset_year,
            "ruleset_revision": ruleset_revision,
            "params_fingerprint": params_fingerprint,
            "context_fingerprint": context_fingerprint,
            "ledger_fingerprint": ledger_fingerprint,
        }
    )
