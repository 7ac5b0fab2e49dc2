"""
Module: fiscal_modules
Responsibility:
    Ruleset modules: the per-(jurisdiction, year, status) computation of
    taxable bases, tax lines, payment schedule and alerts, plus the
    explicit fallback and the registry that selects between them.

Architecture position:
    Modules -- may import fiscal_kernel and fiscal_config.
    MUST NOT import fiscal_engines internals, fiscal_services or
    fiscal_presenters.
"""

from fiscal_modules.base import RulesetModule
from fiscal_modules.fallback import ALERT_RULESET_FALLBACK, FallbackModule
from fiscal_modules.registry import (
    FallbackRuleset,
    RulesetSelection,
    SupportedRuleset,
    select_ruleset,
    supported_keys,
)

__all__ = [
    "ALERT_RULESET_FALLBACK",
    "FallbackModule",
    "FallbackRuleset",
    "RulesetModule",
    "RulesetSelection",
    "SupportedRuleset",
    "select_ruleset",
    "supported_keys",
]
