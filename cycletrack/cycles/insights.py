"""Cycle statistics and predictions derived from a user's period history.

Given up to the 12 most recent entries (newest start date first), compute:
- Cycle lengths between consecutive starts and their rounded mean
- Period durations and their rounded mean
- A regularity class from the variance of cycle lengths
- The next predicted start, fertile window, and ovulation day
- The current phase and a list of prose insights and tips

The report is a pure function of its input and is never stored.  Fertile
window and ovulation indices are reported as computed, even when a very short
average cycle makes them zero or negative.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Sequence

from cycletrack.cycles.calendar import (
    add_days,
    days_between,
    inclusive_span,
    round_half_up,
)
from cycletrack.cycles.entry import PeriodEntry, utc_now
from cycletrack.cycles.phase import CyclePhase, phase_for_day, phase_tip

logger = logging.getLogger("cycletrack.cycles.insights")

HISTORY_LIMIT = 12
MIN_ENTRIES = 2

REGULAR_MAX_VARIANCE = 7
SLIGHTLY_IRREGULAR_MAX_VARIANCE = 14

# Luteal phase length used for ovulation and fertile window estimates
LUTEAL_DAYS = 14
FERTILE_WINDOW_END_OFFSET = 10

SHORT_PERIOD_DAYS = 3
LONG_PERIOD_DAYS = 7
SHORT_CYCLE_DAYS = 21
LONG_CYCLE_DAYS = 35

WELL_TRACKED_CYCLES = 6
SOME_TRACKED_CYCLES = 3

INSUFFICIENT_DATA_MESSAGE = "Add more period entries to get cycle insights"


class CycleRegularity(str, Enum):
    insufficient_data = "insufficient_data"
    regular = "regular"
    slightly_irregular = "slightly_irregular"
    irregular = "irregular"


@dataclass(frozen=True)
class FertileWindow:
    """Estimated fertile days as 1-indexed day-of-cycle numbers (unclamped)."""

    start_day: int
    end_day: int


@dataclass
class CycleInsights:
    """Derived report over a user's recent entries.

    Numeric fields are None when fewer than two entries exist.

    Attributes:
        average_cycle_length:    Rounded mean of ``cycle_lengths``.
        average_period_duration: Rounded mean of ``period_durations``.
        next_predicted_period:   Latest start plus the average cycle length.
        cycle_regularity:        Bucket from the variance of cycle lengths.
        insights:                Observations, most important first.
        tips:                    Suggestions, in fixed section order.
        total_cycles:            Number of entries the report was built from.
        cycle_lengths:           Days between consecutive starts, newest first.
        period_durations:        Inclusive span of each entry, newest first.
        fertile_window:          Estimated fertile day-of-cycle range.
        ovulation_day:           Estimated ovulation day-of-cycle.
        days_since_last_period:  Days from the latest start until now.
        current_phase:           Phase bucket for ``days_since_last_period``.
    """

    average_cycle_length: int | None = None
    average_period_duration: int | None = None
    next_predicted_period: date | None = None
    cycle_regularity: CycleRegularity = CycleRegularity.insufficient_data
    insights: list[str] = field(default_factory=list)
    tips: list[str] = field(default_factory=list)
    total_cycles: int = 0
    cycle_lengths: list[int] = field(default_factory=list)
    period_durations: list[int] = field(default_factory=list)
    fertile_window: FertileWindow | None = None
    ovulation_day: int | None = None
    days_since_last_period: int | None = None
    current_phase: CyclePhase | None = None


def cycle_lengths(entries: Sequence[PeriodEntry]) -> list[int]:
    """Days from each start back to the next-older start.

    Args:
        entries: Entries ordered newest start date first.

    Returns:
        ``len(entries) - 1`` lengths, newest cycle first.
    """
    return [
        days_between(newer.start_date, older.start_date)
        for newer, older in zip(entries, entries[1:])
    ]


def period_durations(entries: Sequence[PeriodEntry]) -> list[int]:
    return [inclusive_span(e.start_date, e.end_date) for e in entries]


def classify_regularity(lengths: Sequence[int], average: int) -> CycleRegularity:
    """Bucket cycle lengths by their population variance around ``average``.

    ``average`` is the already-rounded mean, so a run of identical lengths
    always has zero variance.
    """
    if not lengths:
        return CycleRegularity.insufficient_data
    variance = sum((length - average) ** 2 for length in lengths) / len(lengths)
    if variance <= REGULAR_MAX_VARIANCE:
        return CycleRegularity.regular
    if variance <= SLIGHTLY_IRREGULAR_MAX_VARIANCE:
        return CycleRegularity.slightly_irregular
    return CycleRegularity.irregular


def estimate_fertility(average_cycle_length: int) -> tuple[FertileWindow, int]:
    """Return the fertile window and ovulation day for an average cycle."""
    ovulation_day = average_cycle_length - LUTEAL_DAYS
    window = FertileWindow(
        start_day=ovulation_day,
        end_day=average_cycle_length - FERTILE_WINDOW_END_OFFSET,
    )
    return window, ovulation_day


def _regularity_notes(regularity: CycleRegularity) -> tuple[str, str]:
    if regularity is CycleRegularity.regular:
        return (
            "Your cycle is very regular!",
            "💡 Great! Your regular cycle makes it easier to predict your next "
            "period and plan activities.",
        )
    if regularity is CycleRegularity.slightly_irregular:
        return (
            "Your cycle is slightly irregular but within normal range.",
            "💡 Slight variations are normal. Stress, diet, and lifestyle can "
            "affect cycle length.",
        )
    return (
        "Your cycle shows some irregularity. Consider consulting a healthcare "
        "provider.",
        "💡 Track symptoms and lifestyle factors to help identify patterns "
        "with your healthcare provider.",
    )


def _duration_notes(average_duration: int) -> tuple[str | None, str]:
    if average_duration < SHORT_PERIOD_DAYS:
        return (
            "Your periods are quite short. This is normal for some women.",
            "💡 Short periods can be normal, but ensure you're getting enough "
            "iron and nutrients.",
        )
    if average_duration > LONG_PERIOD_DAYS:
        return (
            "Your periods are longer than average. Consider discussing with a "
            "healthcare provider.",
            "💡 Longer periods may require monitoring for iron levels and "
            "overall health.",
        )
    return None, "💡 Your period length is within the typical range of 3-7 days."


def _cycle_length_tip(average_length: int) -> str:
    if average_length < SHORT_CYCLE_DAYS:
        return (
            "💡 Your short cycle may mean more frequent periods. Consider "
            "tracking symptoms for patterns."
        )
    if average_length > LONG_CYCLE_DAYS:
        return (
            "💡 Longer cycles are normal for some women. Track any changes in "
            "symptoms or flow."
        )
    return "💡 Your cycle length is within the typical 21-35 day range."


def _tracking_tip(total_cycles: int) -> str | None:
    if total_cycles >= WELL_TRACKED_CYCLES:
        return (
            "💡 Excellent tracking! You have enough data for reliable "
            "predictions and insights."
        )
    if total_cycles >= SOME_TRACKED_CYCLES:
        return (
            "💡 Keep tracking! More data will improve the accuracy of your "
            "cycle predictions."
        )
    return None


def _symptom_tip(entries: Sequence[PeriodEntry]) -> str:
    if any(e.has_symptoms for e in entries):
        return (
            "💡 Consider tracking symptoms like mood, energy, and sleep to "
            "identify patterns."
        )
    return (
        "💡 Try logging symptoms like cramps, mood, and energy levels for "
        "better insights."
    )


def compute_insights(
    entries: Sequence[PeriodEntry],
    now: datetime | None = None,
) -> CycleInsights:
    """Build a ``CycleInsights`` report.

    Args:
        entries: A user's entries, newest start date first.  Only the first
                 ``HISTORY_LIMIT`` are used.
        now:     Reference instant for the phase estimate (defaults to the
                 current UTC time).

    Returns:
        The full report, or the ``insufficient_data`` report when fewer than
        two entries are available.
    """
    recent = list(entries[:HISTORY_LIMIT])

    if len(recent) < MIN_ENTRIES:
        return CycleInsights(
            insights=[INSUFFICIENT_DATA_MESSAGE],
            total_cycles=len(recent),
        )

    lengths = cycle_lengths(recent)
    durations = period_durations(recent)

    average_length = round_half_up(sum(lengths) / len(lengths))
    average_duration = round_half_up(sum(durations) / len(durations))

    latest_start = recent[0].start_date
    regularity = classify_regularity(lengths, average_length)
    window, ovulation_day = estimate_fertility(average_length)
    days_since = days_between(now or utc_now(), latest_start)

    insights: list[str] = []
    tips: list[str] = []

    regularity_insight, regularity_tip = _regularity_notes(regularity)
    insights.append(regularity_insight)
    tips.append(regularity_tip)

    duration_insight, duration_tip = _duration_notes(average_duration)
    if duration_insight:
        insights.append(duration_insight)
    tips.append(duration_tip)

    tips.append(_cycle_length_tip(average_length))
    tips.append(
        f"💡 Your fertile window is typically around days "
        f"{window.start_day}-{window.end_day} of your cycle."
    )
    tips.append(f"💡 You likely ovulate around day {ovulation_day} of your cycle.")
    tips.append(phase_tip(days_since))

    tracking_tip = _tracking_tip(len(recent))
    if tracking_tip:
        tips.append(tracking_tip)
    tips.append(_symptom_tip(recent))

    logger.debug(
        "Insights over %d entries: avg_cycle=%d variance_class=%s",
        len(recent), average_length, regularity.value,
    )

    return CycleInsights(
        average_cycle_length=average_length,
        average_period_duration=average_duration,
        next_predicted_period=add_days(latest_start, average_length),
        cycle_regularity=regularity,
        insights=insights,
        tips=tips,
        total_cycles=len(recent),
        cycle_lengths=lengths,
        period_durations=durations,
        fertile_window=window,
        ovulation_day=ovulation_day,
        days_since_last_period=days_since,
        current_phase=phase_for_day(days_since),
    )
