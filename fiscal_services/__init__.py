"""
Module: fiscal_services
Responsibility:
    Orchestration of the fiscal pipeline: ``compute_fiscal`` for the
    fingerprinted fiscal output and ``compute_fiscal_snapshot`` for the
    output plus the twelve-month treasury projection.

Architecture position:
    Services -- composes engines, modules and config. Presenters consume
    its results; nothing below imports it.
"""

from fiscal_services.dispatcher import (
    compute_fiscal,
    context_fingerprint,
    ledger_fingerprint,
)
from fiscal_services.snapshot import compute_fiscal_snapshot

__all__ = [
    "compute_fiscal",
    "compute_fiscal_snapshot",
    "context_fingerprint",
    "ledger_fingerprint",
]
