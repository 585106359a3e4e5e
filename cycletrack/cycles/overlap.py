"""Interval-intersection gate run before every period entry write.

Two entries overlap when their closed date intervals share at least one day.
The rule is boundary-inclusive: an entry ending on the 5th conflicts with one
starting on the 5th.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING
from uuid import UUID

from cycletrack.cycles.entry import PeriodEntry

if TYPE_CHECKING:
    from cycletrack.services.repository import PeriodRepository

logger = logging.getLogger("cycletrack.cycles.overlap")


def intervals_overlap(
    a_start: date, a_end: date, b_start: date, b_end: date
) -> bool:
    """True when closed intervals ``[a_start, a_end]`` and ``[b_start, b_end]`` meet."""
    return a_start <= b_end and a_end >= b_start


@dataclass(frozen=True)
class OverlapResult:
    """Outcome of an overlap check.

    Attributes:
        conflict: The first existing entry that intersects the candidate
                  range, or None when the range is free.
    """

    conflict: PeriodEntry | None = None

    @property
    def ok(self) -> bool:
        return self.conflict is None


class OverlapValidator:
    """Check a candidate range against a user's stored entries.

    Usage::

        validator = OverlapValidator(repository)
        result = await validator.check(user_id, date(2024, 1, 1), date(2024, 1, 5))
        if not result.ok:
            ...
    """

    def __init__(self, repository: PeriodRepository) -> None:
        self._repository = repository

    async def check(
        self,
        user_id: str,
        start: date,
        end: date,
        exclude_id: UUID | None = None,
    ) -> OverlapResult:
        conflict = await self._repository.find_overlapping(
            user_id, start, end, exclude_id=exclude_id
        )
        if conflict is not None:
            logger.info(
                "Range %s..%s for user %s conflicts with entry %s",
                start, end, user_id, conflict.entry_id,
            )
        return OverlapResult(conflict=conflict)
