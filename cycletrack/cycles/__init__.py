"""Period entry rules and cycle insights for CycleTrack.

Everything in this subpackage is storage-agnostic; the store in
``cycletrack.services.entry_store`` wires it to a repository.

Modules:
    calendar  — UTC day arithmetic and half-up rounding
    entry     — PeriodEntry record, flow and symptom enums
    overlap   — Closed-interval overlap gate for writes
    phase     — Days-since-period to phase bucket and guidance
    insights  — Cycle statistics, regularity, and predictions
"""

from cycletrack.cycles.entry import Flow, PeriodEntry, Symptom
from cycletrack.cycles.insights import CycleInsights, CycleRegularity, compute_insights
from cycletrack.cycles.overlap import OverlapResult, OverlapValidator, intervals_overlap
from cycletrack.cycles.phase import CyclePhase, phase_for_day, phase_tip

__all__ = [
    "Flow",
    "PeriodEntry",
    "Symptom",
    "CycleInsights",
    "CycleRegularity",
    "compute_insights",
    "OverlapResult",
    "OverlapValidator",
    "intervals_overlap",
    "CyclePhase",
    "phase_for_day",
    "phase_tip",
]
