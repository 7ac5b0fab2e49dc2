"""
fiscal_engines.tracer -- Engine invocation tracer emitting FISCAL_ENGINE_TRACE.

Responsibility:
    Provide a lightweight decorator (``@traced_engine``) that wraps pure
    pipeline stages with structured trace logging.  The trace captures
    engine_name, engine_version, input_fingerprint (SHA-256 prefix of the
    canonical form of selected arguments), and duration_ms.

Architecture position:
    Engines -- infrastructure support for the pure calculation layer.
    Does NOT introduce I/O into engines; emits a log record only.

Invariants enforced:
    - Fingerprints reuse the kernel canonicalizer, so they are as
      order-independent as the fiscal hash itself.
    - Engine purity: the decorator only reads arguments and emits a log
      record; it does not mutate inputs or inject side effects.

Failure modes:
    - Fingerprint fields naming parameters that were not supplied are
      recorded as null.

Usage:
    from fiscal_engines.tracer import traced_engine

    @traced_engine("normalizer", "2.0", fingerprint_fields=("entries",))
    def normalize_entries(entries, *, tax_year, ...):
        ...
"""

from __future__ import annotations

import functools
import inspect
import logging
import time
from collections.abc import Callable
from typing import Any

from fiscal_kernel.utils.hashing import fingerprint

_logger = logging.getLogger("fiscal_kernel.engines.tracer")


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: dict[str, Any],
) -> str:
    """Deterministic 16-char SHA-256 prefix over selected arguments.

    Missing fields are recorded as null.
    """
    selected = {name: arguments.get(name) for name in fingerprint_fields}
    return fingerprint(selected)[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Decorator that emits FISCAL_ENGINE_TRACE for pure engine invocations.

    Args:
        engine_name: Engine identifier (e.g., "normalizer").
        engine_version: Engine version (e.g., "2.0").
        fingerprint_fields: Parameter names to include in the input
            fingerprint hash.
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fp = ""
            if fingerprint_fields:
                bound = signature.bind_partial(*args, **kwargs)
                fp = compute_input_fingerprint(fingerprint_fields, dict(bound.arguments))

            t0 = time.monotonic()
            result = func(*args, **kwargs)
            duration_ms = round((time.monotonic() - t0) * 1000, 2)

            _logger.info(
                "FISCAL_ENGINE_TRACE",
                extra={
                    "trace_type": "FISCAL_ENGINE_TRACE",
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": fp,
                    "duration_ms": duration_ms,
                    "function": func.__qualname__,
                },
            )
            return result

        return wrapper

    return decorator
