"""
Ruleset selection.

Responsibility:
    Map a fiscal context to the ruleset module that governs it. The result
    is a closed variant: either a supported ruleset bound to its approved
    parameters, or the explicit fallback with the reason it was chosen.

Failure modes:
    - An unsupported (jurisdiction, year, status) is not an error; it
      selects the fallback.
    - A supported ruleset whose parameters are missing, malformed or fail
      their pin propagates the configuration error unchanged.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from fiscal_config import get_ruleset_params
from fiscal_config.schema import RulesetParams
from fiscal_kernel.domain.values import FiscalContext, UserStatus
from fiscal_modules.artist_author import ArtistAuthorModule
from fiscal_modules.base import RulesetModule
from fiscal_modules.fallback import FallbackModule


@dataclass(frozen=True)
class SupportedRuleset:
    module: RulesetModule


@dataclass(frozen=True)
class FallbackRuleset:
    module: RulesetModule
    reason: str


RulesetSelection = SupportedRuleset | FallbackRuleset

# (jurisdiction, year, status) -> module factory over the loaded parameters.
SUPPORTED_RULESETS: dict[tuple[str, int, UserStatus], Callable[[RulesetParams], RulesetModule]] = {
    ("FR", 2026, UserStatus.ARTIST_AUTHOR): ArtistAuthorModule,
}


def supported_keys() -> tuple[str, ...]:
    return tuple(
        f"{jurisdiction}/{year}/{status.value}"
        for jurisdiction, year, status in sorted(SUPPORTED_RULESETS, key=str)
    )


def select_ruleset(
    context: FiscalContext, rulesets_dir: Path | None = None
) -> RulesetSelection:
    """Pick the module for ``context``; never raises for unknown rulesets."""
    jurisdiction = context.jurisdiction.upper()
    lookup = (jurisdiction, context.tax_year, context.user_status)
    factory = SUPPORTED_RULESETS.get(lookup)
    requested = f"{jurisdiction}/{context.tax_year}/{context.user_status.value}"

    if factory is None:
        return FallbackRuleset(
            module=FallbackModule(requested),
            reason=f"no ruleset registered for {requested}",
        )

    params = get_ruleset_params(
        jurisdiction, context.tax_year, context.user_status.value, rulesets_dir
    )
    return SupportedRuleset(module=factory(params))
