"""Utility modules for the fiscal kernel."""

from fiscal_kernel.utils.hashing import (
    canonicalize,
    digest,
    fingerprint,
    fiscal_fingerprint,
)

__all__ = [
    "canonicalize",
    "digest",
    "fingerprint",
    "fiscal_fingerprint",
]
