#!/usr/bin/env python3
"""
Compute the fiscal snapshot of one tax year from a JSON input file.

Usage:
    python scripts/compute_snapshot.py INPUT.json [options]

The input file holds one object:
    {
      "context": {"tax_year": 2026, "as_of": "2026-06-01", ...},
      "entries": [{"id": "e1", "nature": "INCOME", ...}, ...],
      "anchor":  {"amount_cents": 500000, "month_index": 2}     (optional)
    }

Examples:
    # Full snapshot (output, ledger, projected operations) as canonical JSON
    python scripts/compute_snapshot.py year.json

    # Dashboard view as of a given instant
    python scripts/compute_snapshot.py year.json --dashboard --as-of 2026-06-01T09:00:00+02:00

    # Override the treasury anchor: 5,000.00 EUR at the start of March
    python scripts/compute_snapshot.py year.json --anchor-amount 500000 --anchor-month 2
"""

from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime, time, timezone
from pathlib import Path

# Project root on sys.path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from fiscal_kernel.domain.outputs import TreasuryAnchor
from fiscal_kernel.domain.validation import parse_anchor, parse_context, parse_entries
from fiscal_kernel.exceptions import FiscalKernelError, InputValidationError
from fiscal_kernel.logging_config import configure_logging
from fiscal_kernel.utils.hashing import canonicalize
from fiscal_presenters import compile_dashboard
from fiscal_services import compute_fiscal_snapshot


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compute a fiscal snapshot (or its dashboard) from a JSON input file.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("input", type=Path, help="Path to the JSON input file.")
    parser.add_argument(
        "--as-of",
        type=datetime.fromisoformat,
        default=None,
        help="Dashboard reference instant, ISO-8601 (default: context as_of, 00:00 UTC).",
    )
    parser.add_argument(
        "--anchor-amount",
        type=int,
        default=None,
        help="Known treasury balance in cents (overrides the input anchor).",
    )
    parser.add_argument(
        "--anchor-month",
        type=int,
        default=-1,
        help="Month index (0-11) at whose start the balance is known; -1 = January 1st.",
    )
    parser.add_argument(
        "--dashboard",
        action="store_true",
        help="Print the dashboard view model instead of the full snapshot.",
    )
    parser.add_argument(
        "--log-json",
        action="store_true",
        help="Emit structured JSON logs on stderr.",
    )
    return parser.parse_args(argv)


def run(args: argparse.Namespace) -> str:
    payload = json.loads(args.input.read_text(encoding="utf-8"))
    context = parse_context(payload.get("context") or {})
    entries = parse_entries(payload.get("entries") or [])
    if args.anchor_amount is not None:
        anchor = TreasuryAnchor(amount_cents=args.anchor_amount, month_index=args.anchor_month)
    else:
        anchor = parse_anchor(payload.get("anchor"))

    snapshot = compute_fiscal_snapshot(entries, context, anchor)
    if not args.dashboard:
        return canonicalize(snapshot.to_dict())

    as_of = args.as_of or datetime.combine(context.as_of, time(0, 0), tzinfo=timezone.utc)
    return canonicalize(compile_dashboard(snapshot.output, as_of).to_dict())


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    if args.log_json:
        configure_logging()

    if not args.input.is_file():
        print(f"Error: file not found: {args.input}", file=sys.stderr)
        return 1

    try:
        print(run(args))
    except InputValidationError as exc:
        print(f"Invalid {exc.record_type}:", file=sys.stderr)
        for issue in exc.issues:
            print(f"  {issue}", file=sys.stderr)
        return 2
    except FiscalKernelError as exc:
        print(f"Error [{exc.code}]: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
