"""Pydantic models for period entries and the cycle insights report."""

from __future__ import annotations

import uuid
from datetime import date, datetime

from pydantic import Field, model_validator

from cycletrack.cycles.entry import MAX_NOTES_LENGTH, Flow, PeriodEntry, Symptom
from cycletrack.cycles.insights import CycleInsights, CycleRegularity
from cycletrack.cycles.phase import CyclePhase
from cycletrack.models.base import CycleTrackBase, PaginationMeta


# ---------- Period entries ----------

class PeriodEntryBase(CycleTrackBase):
    start_date: date
    end_date: date
    flow: Flow = Flow.medium
    symptoms: list[Symptom] = Field(default_factory=list)
    notes: str | None = Field(default=None, max_length=MAX_NOTES_LENGTH)


class PeriodEntryCreate(PeriodEntryBase):
    @model_validator(mode="after")
    def check_date_order(self) -> PeriodEntryCreate:
        if self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self


class PeriodEntryUpdate(CycleTrackBase):
    start_date: date | None = None
    end_date: date | None = None
    flow: Flow | None = None
    symptoms: list[Symptom] | None = None
    notes: str | None = Field(default=None, max_length=MAX_NOTES_LENGTH)


class PeriodEntryRead(PeriodEntryBase):
    id: uuid.UUID
    user_id: str
    period_duration: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entry(cls, entry: PeriodEntry) -> PeriodEntryRead:
        return cls(
            id=entry.entry_id,
            user_id=entry.user_id,
            start_date=entry.start_date,
            end_date=entry.end_date,
            flow=entry.flow,
            symptoms=entry.symptoms,
            notes=entry.notes,
            period_duration=entry.period_duration,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )


class PeriodEntryPage(CycleTrackBase):
    data: list[PeriodEntryRead]
    pagination: PaginationMeta


# ---------- Insights ----------

class FertileWindowRead(CycleTrackBase):
    start_day: int
    end_day: int


class CycleInsightsRead(CycleTrackBase):
    average_cycle_length: int | None = None
    average_period_duration: int | None = None
    next_predicted_period: date | None = None
    cycle_regularity: CycleRegularity
    insights: list[str]
    tips: list[str] = Field(default_factory=list)
    total_cycles: int = 0
    cycle_lengths: list[int] = Field(default_factory=list)
    period_durations: list[int] = Field(default_factory=list)
    fertile_window: FertileWindowRead | None = None
    ovulation_day: int | None = None
    days_since_last_period: int | None = None
    current_phase: CyclePhase | None = None

    @classmethod
    def from_report(cls, report: CycleInsights) -> CycleInsightsRead:
        window = report.fertile_window
        return cls(
            average_cycle_length=report.average_cycle_length,
            average_period_duration=report.average_period_duration,
            next_predicted_period=report.next_predicted_period,
            cycle_regularity=report.cycle_regularity,
            insights=report.insights,
            tips=report.tips,
            total_cycles=report.total_cycles,
            cycle_lengths=report.cycle_lengths,
            period_durations=report.period_durations,
            fertile_window=(
                FertileWindowRead(start_day=window.start_day, end_day=window.end_day)
                if window else None
            ),
            ovulation_day=report.ovulation_day,
            days_since_last_period=report.days_since_last_period,
            current_phase=report.current_phase,
        )
