"""Persistence contract for period entries, plus an in-process backend.

Every query is scoped by ``user_id``.  Implementations return
``PeriodEntry`` records and never apply business rules; overlap gating,
duration derivation, and pagination math live in the entry store.

Backends:
    InMemoryPeriodRepository  — dict-backed, for local development and tests
    PostgresPeriodRepository  — asyncpg, in ``cycletrack.services.postgres``
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import date
from uuid import UUID

from cycletrack.cycles.entry import PeriodEntry
from cycletrack.cycles.overlap import intervals_overlap


class PeriodRepository(ABC):
    """Storage operations the entry store relies on."""

    @abstractmethod
    async def insert(self, entry: PeriodEntry) -> PeriodEntry:
        """Persist a new entry and return it as stored.

        Raises:
            OverlapError: if the storage layer's own exclusion rule rejects it.
        """

    @abstractmethod
    async def get(self, user_id: str, entry_id: UUID) -> PeriodEntry | None:
        """Return the entry if it exists and belongs to ``user_id``."""

    @abstractmethod
    async def update(self, entry: PeriodEntry) -> PeriodEntry | None:
        """Overwrite the mutable fields of an owned entry.

        Returns None when the entry no longer exists for its owner.

        Raises:
            OverlapError: if the storage layer's own exclusion rule rejects it.
        """

    @abstractmethod
    async def delete(self, user_id: str, entry_id: UUID) -> bool:
        """Remove an owned entry; False if nothing matched."""

    @abstractmethod
    async def find_overlapping(
        self,
        user_id: str,
        start: date,
        end: date,
        exclude_id: UUID | None = None,
    ) -> PeriodEntry | None:
        """Return one entry whose closed interval meets ``[start, end]``."""

    @abstractmethod
    async def latest(
        self, user_id: str, limit: int, offset: int = 0
    ) -> list[PeriodEntry]:
        """Entries ordered by start date, newest first, after skipping ``offset``."""

    @abstractmethod
    async def count(self, user_id: str) -> int:
        """Number of entries owned by ``user_id``."""

    @abstractmethod
    async def ping(self) -> None:
        """Raise if the backend is unreachable."""


class InMemoryPeriodRepository(PeriodRepository):
    """Dict-backed repository keyed by ``(user_id, entry_id)``.

    State lives for the lifetime of the process.  Records are copied on the
    way in and out so callers can never mutate stored state in place.
    """

    def __init__(self) -> None:
        self._entries: dict[tuple[str, UUID], PeriodEntry] = {}

    def _owned(self, user_id: str) -> list[PeriodEntry]:
        return [e for (owner, _), e in self._entries.items() if owner == user_id]

    async def insert(self, entry: PeriodEntry) -> PeriodEntry:
        self._entries[(entry.user_id, entry.entry_id)] = replace(entry)
        return replace(entry)

    async def get(self, user_id: str, entry_id: UUID) -> PeriodEntry | None:
        entry = self._entries.get((user_id, entry_id))
        return replace(entry) if entry else None

    async def update(self, entry: PeriodEntry) -> PeriodEntry | None:
        key = (entry.user_id, entry.entry_id)
        if key not in self._entries:
            return None
        self._entries[key] = replace(entry)
        return replace(entry)

    async def delete(self, user_id: str, entry_id: UUID) -> bool:
        return self._entries.pop((user_id, entry_id), None) is not None

    async def find_overlapping(
        self,
        user_id: str,
        start: date,
        end: date,
        exclude_id: UUID | None = None,
    ) -> PeriodEntry | None:
        for entry in self._owned(user_id):
            if entry.entry_id == exclude_id:
                continue
            if intervals_overlap(entry.start_date, entry.end_date, start, end):
                return replace(entry)
        return None

    async def latest(
        self, user_id: str, limit: int, offset: int = 0
    ) -> list[PeriodEntry]:
        ordered = sorted(
            self._owned(user_id), key=lambda e: e.start_date, reverse=True
        )
        return [replace(e) for e in ordered[offset:offset + limit]]

    async def count(self, user_id: str) -> int:
        return len(self._owned(user_id))

    async def ping(self) -> None:
        return None
