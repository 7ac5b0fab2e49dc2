#!/usr/bin/env python3
"""
Approve a ruleset parameter file by writing its params fingerprint to
APPROVED_FINGERPRINT.

Usage:
    python scripts/approve_ruleset.py [ruleset_directory]

If no directory is given, defaults to
fiscal_config/rulesets/fr/2026/artist_author/

The APPROVED_FINGERPRINT file is reviewed separately from params.yaml:
changing any business parameter without re-running approval makes
get_ruleset_params() raise ConfigIntegrityError.
"""

import sys
from pathlib import Path

# Add project root to path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from fiscal_config.integrity import write_pinned_fingerprint
from fiscal_config.loader import load_params


def approve(ruleset_dir: Path) -> str:
    """Parse the parameter file and write the pin file.

    Returns the params fingerprint that was written.
    """
    print(f"Loading parameters from: {ruleset_dir}")
    params = load_params(ruleset_dir)
    print(f"  ruleset:   {params.identity.key}")
    print(f"  revision:  {params.identity.revision}")
    print(f"  contributions: {len(params.social_contributions)}")
    print(f"  params_fingerprint: {params.fingerprint}")

    pin_path = write_pinned_fingerprint(ruleset_dir, params.fingerprint)
    print(f"Wrote {pin_path}")
    return params.fingerprint


def main():
    if len(sys.argv) > 1:
        target = Path(sys.argv[1])
    else:
        target = ROOT / "fiscal_config" / "rulesets" / "fr" / "2026" / "artist_author"

    if not target.is_dir():
        print(f"Error: directory not found: {target}", file=sys.stderr)
        sys.exit(1)

    approve(target)
    print("Done. Ruleset is now pinned.")


if __name__ == "__main__":
    main()
