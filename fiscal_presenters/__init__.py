"""
Module: fiscal_presenters
Responsibility:
    Read-only view models derived from engine results: the dashboard,
    the cash timeline and the simulation comparison.

Architecture position:
    Presenters -- may import fiscal_kernel only. Nothing imports them
    except the CLI.
"""

from fiscal_presenters.dashboard import compile_dashboard
from fiscal_presenters.models import (
    DASHBOARD_MODEL_VERSION,
    BreakdownItem,
    DashboardModel,
    MonthlyTaxFlow,
    MonthStatus,
    NextDue,
    VatStatus,
    VatSummary,
)
from fiscal_presenters.simulator import SimulationComparison, compare_snapshots, snapshot_stats
from fiscal_presenters.timeline import EventStatus, EventType, TimelineEvent, timeline_events

__all__ = [
    "DASHBOARD_MODEL_VERSION",
    "BreakdownItem",
    "DashboardModel",
    "EventStatus",
    "EventType",
    "MonthStatus",
    "MonthlyTaxFlow",
    "NextDue",
    "SimulationComparison",
    "TimelineEvent",
    "VatStatus",
    "VatSummary",
    "compare_snapshots",
    "compile_dashboard",
    "snapshot_stats",
    "timeline_events",
]
