"""
Fiscal Kernel - deterministic primitives for the fiscal pipeline.

A pure, dependency-free layer providing:
- Integer-cent / basis-point arithmetic with one fixed rounding rule
- Canonical serialization and SHA-256 fingerprints
- Immutable domain records (entries, operations, tax lines, schedule)
- Boundary validation of caller-supplied records
- Structured JSON logging and the typed exception hierarchy
"""

__version__ = "2.0.0"
