"""
Module: fiscal_engines
Responsibility:
    Package entrypoint that re-exports the pure pipeline stages: the
    normalizer, the qualifier and the treasury projector.  This is the
    canonical import surface for higher layers (fiscal_modules,
    fiscal_services).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import fiscal_kernel (and sibling engine modules).
    MUST NOT import fiscal_config, fiscal_modules, fiscal_services or
    fiscal_presenters.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
      The fiscal year and reference dates are passed in explicitly.
    - Integer-only arithmetic: all monetary amounts are integer cents
      routed through ``fiscal_kernel.domain.money``.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Every stage invocation is traced via the ``@traced_engine`` decorator
    (see ``fiscal_engines.tracer``), emitting FISCAL_ENGINE_TRACE log
    records with engine name, version, input fingerprint and duration.
"""

from fiscal_engines.normalization import normalize_entries, normalize_entry, target_months
from fiscal_engines.projection import project_ledger, replay_treasury, solve_initial_treasury
from fiscal_engines.qualification import qualify_ledger, qualify_operation
from fiscal_engines.tracer import traced_engine

__all__ = [
    "normalize_entries",
    "normalize_entry",
    "project_ledger",
    "qualify_ledger",
    "qualify_operation",
    "replay_treasury",
    "solve_initial_treasury",
    "target_months",
    "traced_engine",
]
