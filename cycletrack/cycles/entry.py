"""Domain record for a single logged period.

``PeriodEntry`` is what the store persists and what the insights engine
consumes.  HTTP schemas in ``cycletrack.models.periods`` are built from it.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from enum import Enum
from uuid import UUID, uuid4

from cycletrack.cycles.calendar import inclusive_span

MAX_NOTES_LENGTH = 500
MAX_PERIOD_DAYS = 10


class Flow(str, Enum):
    light = "light"
    medium = "medium"
    heavy = "heavy"


class Symptom(str, Enum):
    cramps = "cramps"
    bloating = "bloating"
    headache = "headache"
    mood_swings = "mood_swings"
    fatigue = "fatigue"
    nausea = "nausea"
    back_pain = "back_pain"
    breast_tenderness = "breast_tenderness"
    acne = "acne"
    food_cravings = "food_cravings"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def unique_symptoms(symptoms: list[Symptom] | None) -> list[Symptom]:
    """Drop repeats, keeping first-seen order."""
    return list(dict.fromkeys(symptoms or []))


@dataclass
class PeriodEntry:
    """One bleeding episode reported by a user.

    Attributes:
        user_id:         Opaque owner id supplied by the auth layer.  Never
                         changes after creation.
        start_date:      First day of bleeding.
        end_date:        Last day of bleeding (inclusive).
        flow:            Reported flow intensity.
        symptoms:        Reported symptoms, no repeats.
        notes:           Free text, at most 500 characters.
        entry_id:        Primary key.
        period_duration: Inclusive day span of ``[start_date, end_date]``.
                         Derived; recomputed whenever the entry is built.
    """

    user_id: str
    start_date: date
    end_date: date
    flow: Flow = Flow.medium
    symptoms: list[Symptom] = field(default_factory=list)
    notes: str | None = None
    entry_id: UUID = field(default_factory=uuid4)
    period_duration: int = field(init=False, default=0)
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        self.symptoms = unique_symptoms(self.symptoms)
        self.period_duration = inclusive_span(self.start_date, self.end_date)

    @property
    def has_symptoms(self) -> bool:
        return bool(self.symptoms)

    def with_changes(self, **changes) -> PeriodEntry:
        """Copy with ``changes`` applied; ``period_duration`` is recomputed."""
        return replace(self, updated_at=utc_now(), **changes)
