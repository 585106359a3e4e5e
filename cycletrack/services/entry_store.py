"""Owner-scoped storage of period entries with the non-overlap rule enforced.

The store is the single write path for entries.  Every create and update
runs the overlap check and the write under one per-user lock, so two
concurrent requests from the same user cannot both pass the check and commit
intersecting ranges.  Reads take no lock.

Usage::

    store = EntryStore(InMemoryPeriodRepository())
    entry = await store.create("user_1", date(2024, 1, 1), date(2024, 1, 5))
    page = await store.list("user_1", page=1, limit=10)
    report = await store.insights("user_1")
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections import Counter
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, AsyncIterator, Iterable
from uuid import UUID

from cycletrack.cycles.calendar import inclusive_span
from cycletrack.cycles.entry import (
    MAX_NOTES_LENGTH,
    MAX_PERIOD_DAYS,
    Flow,
    PeriodEntry,
    Symptom,
)
from cycletrack.cycles.insights import HISTORY_LIMIT, CycleInsights, compute_insights
from cycletrack.cycles.overlap import OverlapValidator
from cycletrack.errors import NotFoundError, OverlapError, ValidationError
from cycletrack.services.repository import PeriodRepository

logger = logging.getLogger("cycletrack.periods")

UPDATABLE_FIELDS = frozenset({"start_date", "end_date", "flow", "symptoms", "notes"})


@dataclass
class EntryPage:
    """One page of a user's entries, newest start date first."""

    items: list[PeriodEntry]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit)


def _parse_flow(value: Any) -> Flow:
    try:
        return Flow(value)
    except ValueError as exc:
        raise ValidationError("Flow must be light, medium, or heavy") from exc


def _parse_symptoms(values: Iterable[Any] | None) -> list[Symptom]:
    if values is None:
        return []
    if isinstance(values, str):
        raise ValidationError("Symptoms must be an array")
    try:
        return [Symptom(v) for v in values]
    except TypeError as exc:
        raise ValidationError("Symptoms must be an array") from exc
    except ValueError as exc:
        raise ValidationError(f"Unknown symptom: {exc}") from exc


def _check_dates(start: Any, end: Any) -> None:
    if not isinstance(start, date) or isinstance(start, datetime):
        raise ValidationError("Start date must be a valid date")
    if not isinstance(end, date) or isinstance(end, datetime):
        raise ValidationError("End date must be a valid date")
    if end < start:
        raise ValidationError("End date cannot be before start date")
    if inclusive_span(start, end) > MAX_PERIOD_DAYS:
        raise ValidationError(
            f"Period duration must be at most {MAX_PERIOD_DAYS} days"
        )


def _check_notes(notes: Any) -> None:
    if notes is None:
        return
    if not isinstance(notes, str):
        raise ValidationError("Notes must be a string")
    if len(notes) > MAX_NOTES_LENGTH:
        raise ValidationError(f"Notes cannot exceed {MAX_NOTES_LENGTH} characters")


class EntryStore:
    """Create, read, update, and delete a user's period entries.

    Args:
        repository: Persistence backend.
        max_limit:  Largest page size ``list`` will honour.
    """

    def __init__(self, repository: PeriodRepository, max_limit: int = 100) -> None:
        self._repository = repository
        self._validator = OverlapValidator(repository)
        self._max_limit = max_limit
        # user_id -> write lock, dropped once no task holds or awaits it
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: Counter[str] = Counter()

    @asynccontextmanager
    async def _write_lock(self, user_id: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(user_id, asyncio.Lock())
        self._lock_users[user_id] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[user_id] -= 1
            if not self._lock_users[user_id]:
                del self._lock_users[user_id]
                del self._locks[user_id]

    @property
    def repository(self) -> PeriodRepository:
        return self._repository

    async def _ensure_free(
        self, user_id: str, start: date, end: date, exclude_id: UUID | None = None
    ) -> None:
        result = await self._validator.check(user_id, start, end, exclude_id=exclude_id)
        if not result.ok:
            raise OverlapError()

    async def create(
        self,
        user_id: str,
        start_date: date,
        end_date: date,
        flow: Flow | str = Flow.medium,
        symptoms: Iterable[Symptom | str] | None = None,
        notes: str | None = None,
    ) -> PeriodEntry:
        """Persist a new entry owned by ``user_id``.

        Raises:
            ValidationError: bad dates, flow, symptoms, or notes.
            OverlapError:    the range meets an existing entry of this user.
        """
        _check_dates(start_date, end_date)
        _check_notes(notes)
        entry = PeriodEntry(
            user_id=user_id,
            start_date=start_date,
            end_date=end_date,
            flow=_parse_flow(flow),
            symptoms=_parse_symptoms(symptoms),
            notes=notes,
        )

        async with self._write_lock(user_id):
            await self._ensure_free(user_id, start_date, end_date)
            stored = await self._repository.insert(entry)

        logger.info(
            "Created period entry %s for user %s (%s..%s)",
            stored.entry_id, user_id, start_date, end_date,
        )
        return stored

    async def get(self, user_id: str, entry_id: UUID) -> PeriodEntry:
        entry = await self._repository.get(user_id, entry_id)
        if entry is None:
            raise NotFoundError()
        return entry

    async def update(
        self, user_id: str, entry_id: UUID, patch: dict[str, Any]
    ) -> PeriodEntry:
        """Apply a partial update to an owned entry.

        Fields absent from ``patch`` keep their stored values.  The merged
        range is re-checked for overlaps against every other entry of the
        user, and ``period_duration`` is recomputed.

        Raises:
            ValidationError: empty or unknown patch fields, or invalid values.
            NotFoundError:   no such entry for this user.
            OverlapError:    the merged range meets another entry.
        """
        if not patch:
            raise ValidationError("No fields to update")
        unknown = set(patch) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        changes: dict[str, Any] = dict(patch)
        if "flow" in changes:
            changes["flow"] = _parse_flow(changes["flow"])
        if "symptoms" in changes:
            changes["symptoms"] = _parse_symptoms(changes["symptoms"])
        if "notes" in changes:
            _check_notes(changes["notes"])

        async with self._write_lock(user_id):
            current = await self.get(user_id, entry_id)
            start = changes.get("start_date", current.start_date)
            end = changes.get("end_date", current.end_date)
            _check_dates(start, end)
            await self._ensure_free(user_id, start, end, exclude_id=entry_id)

            updated = await self._repository.update(current.with_changes(**changes))
            if updated is None:
                raise NotFoundError()

        logger.info(
            "Updated period entry %s for user %s (%s)",
            entry_id, user_id, ", ".join(sorted(changes)),
        )
        return updated

    async def delete(self, user_id: str, entry_id: UUID) -> None:
        async with self._write_lock(user_id):
            deleted = await self._repository.delete(user_id, entry_id)
        if not deleted:
            raise NotFoundError()
        logger.info("Deleted period entry %s for user %s", entry_id, user_id)

    async def list(self, user_id: str, page: int = 1, limit: int = 10) -> EntryPage:
        """Return page ``page`` (1-based) of the user's entries."""
        if page < 1:
            raise ValidationError("Page must be at least 1")
        if limit < 1:
            raise ValidationError("Limit must be at least 1")
        limit = min(limit, self._max_limit)

        items = await self._repository.latest(user_id, limit, offset=(page - 1) * limit)
        total = await self._repository.count(user_id)
        return EntryPage(items=items, page=page, limit=limit, total=total)

    async def latest(self, user_id: str, n: int = HISTORY_LIMIT) -> list[PeriodEntry]:
        return await self._repository.latest(user_id, n)

    async def insights(self, user_id: str, now: datetime | None = None) -> CycleInsights:
        """Compute a fresh report from the user's most recent entries."""
        entries = await self.latest(user_id, HISTORY_LIMIT)
        return compute_insights(entries, now=now)
