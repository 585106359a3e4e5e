"""Map days since the last period start to a cycle phase and its guidance.

Four fixed buckets, each inclusive on its upper end:

    0-7    menstrual
    8-14   follicular (post-period)
    15-21  ovulatory
    22+    luteal (pre-menstrual)

The boundaries are calendar approximations, not detections.  They are fixed
constants and deliberately not configurable.
"""

from __future__ import annotations

from enum import Enum

MENSTRUAL_PHASE_LAST_DAY = 7
FOLLICULAR_PHASE_LAST_DAY = 14
OVULATORY_PHASE_LAST_DAY = 21


class CyclePhase(str, Enum):
    menstrual = "menstrual"
    follicular = "follicular"
    ovulatory = "ovulatory"
    luteal = "luteal"


PHASE_TIPS: dict[CyclePhase, str] = {
    CyclePhase.menstrual: (
        "💡 During your period: Focus on rest, iron-rich foods, and gentle "
        "exercise like yoga or walking."
    ),
    CyclePhase.follicular: (
        "💡 Post-period phase: Great time for intense workouts and trying "
        "new activities!"
    ),
    CyclePhase.ovulatory: (
        "💡 Ovulation phase: You may feel more energetic and confident. "
        "Perfect for important meetings or dates!"
    ),
    CyclePhase.luteal: (
        "💡 Pre-menstrual phase: Be gentle with yourself. Consider "
        "magnesium-rich foods and stress management."
    ),
}


def phase_for_day(days_since_last_period: int) -> CyclePhase:
    """Return the phase bucket for a day count.

    Counts below zero (a start date in the future) fall in the menstrual
    bucket alongside day 0.
    """
    if days_since_last_period <= MENSTRUAL_PHASE_LAST_DAY:
        return CyclePhase.menstrual
    if days_since_last_period <= FOLLICULAR_PHASE_LAST_DAY:
        return CyclePhase.follicular
    if days_since_last_period <= OVULATORY_PHASE_LAST_DAY:
        return CyclePhase.ovulatory
    return CyclePhase.luteal


def phase_tip(days_since_last_period: int) -> str:
    return PHASE_TIPS[phase_for_day(days_since_last_period)]
