"""Postgres storage for period entries via asyncpg.

A module-level pool is created once at app startup.  Each repository call
runs in its own transaction.  The ``period_entries`` table carries an
exclusion constraint (see ``schema.sql``) so overlapping ranges are rejected
by the database even when two API workers race past the application check;
the violation is surfaced as ``OverlapError``.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import date
from pathlib import Path
from typing import AsyncGenerator
from uuid import UUID

import asyncpg

from cycletrack.config import Settings, get_settings
from cycletrack.cycles.entry import Flow, PeriodEntry, Symptom
from cycletrack.errors import OverlapError
from cycletrack.services.repository import PeriodRepository

logger = logging.getLogger("cycletrack.db")

_SCHEMA_PATH = Path(__file__).parent / "schema.sql"

# Module-level connection pool, initialized once at app startup
_pool: asyncpg.Pool | None = None

_COLUMNS = (
    "entry_id, user_id, start_date, end_date, flow, symptoms, notes, "
    "period_duration, created_at, updated_at"
)


async def init_pool(settings: Settings | None = None) -> asyncpg.Pool:
    """Create the asyncpg connection pool. Call once at app startup."""
    global _pool
    s = settings or get_settings()
    _pool = await asyncpg.create_pool(
        s.database_url,
        min_size=s.db_pool_min_size,
        max_size=s.db_pool_max_size,
        command_timeout=s.db_command_timeout,
    )
    logger.info(
        "Database pool initialized (min=%d, max=%d)",
        s.db_pool_min_size, s.db_pool_max_size,
    )
    return _pool


async def close_pool() -> None:
    """Drain the pool. Call at app shutdown."""
    global _pool
    if _pool:
        await _pool.close()
        _pool = None
        logger.info("Database pool closed")


def get_pool() -> asyncpg.Pool:
    if _pool is None:
        raise RuntimeError("Database pool not initialized — call init_pool() first")
    return _pool


@asynccontextmanager
async def get_connection() -> AsyncGenerator[asyncpg.Connection, None]:
    """Acquire a pooled connection inside a transaction.

    Usage::

        async with get_connection() as conn:
            rows = await conn.fetch("SELECT * FROM period_entries WHERE user_id = $1", uid)
    """
    pool = get_pool()
    async with pool.acquire() as conn:
        async with conn.transaction():
            yield conn


async def ensure_schema() -> None:
    """Create the table, index, and exclusion constraint if missing."""
    async with get_connection() as conn:
        await conn.execute(_SCHEMA_PATH.read_text())
    logger.info("period_entries schema ensured")


def _to_entry(row: asyncpg.Record) -> PeriodEntry:
    return PeriodEntry(
        user_id=row["user_id"],
        start_date=row["start_date"],
        end_date=row["end_date"],
        flow=Flow(row["flow"]),
        symptoms=[Symptom(s) for s in row["symptoms"]],
        notes=row["notes"],
        entry_id=row["entry_id"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class PostgresPeriodRepository(PeriodRepository):
    """``PeriodRepository`` over the shared asyncpg pool."""

    async def insert(self, entry: PeriodEntry) -> PeriodEntry:
        try:
            async with get_connection() as conn:
                row = await conn.fetchrow(
                    f"""
                    INSERT INTO period_entries ({_COLUMNS})
                    VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10)
                    RETURNING {_COLUMNS}
                    """,
                    entry.entry_id, entry.user_id, entry.start_date, entry.end_date,
                    entry.flow.value, [s.value for s in entry.symptoms], entry.notes,
                    entry.period_duration, entry.created_at, entry.updated_at,
                )
        except asyncpg.exceptions.ExclusionViolationError as exc:
            logger.info("Exclusion constraint rejected insert for user %s", entry.user_id)
            raise OverlapError() from exc
        return _to_entry(row)

    async def get(self, user_id: str, entry_id: UUID) -> PeriodEntry | None:
        async with get_connection() as conn:
            row = await conn.fetchrow(
                f"SELECT {_COLUMNS} FROM period_entries WHERE entry_id = $1 AND user_id = $2",
                entry_id, user_id,
            )
        return _to_entry(row) if row else None

    async def update(self, entry: PeriodEntry) -> PeriodEntry | None:
        try:
            async with get_connection() as conn:
                row = await conn.fetchrow(
                    f"""
                    UPDATE period_entries SET
                        start_date = $3, end_date = $4, flow = $5, symptoms = $6,
                        notes = $7, period_duration = $8, updated_at = $9
                    WHERE entry_id = $1 AND user_id = $2
                    RETURNING {_COLUMNS}
                    """,
                    entry.entry_id, entry.user_id, entry.start_date, entry.end_date,
                    entry.flow.value, [s.value for s in entry.symptoms], entry.notes,
                    entry.period_duration, entry.updated_at,
                )
        except asyncpg.exceptions.ExclusionViolationError as exc:
            logger.info("Exclusion constraint rejected update of entry %s", entry.entry_id)
            raise OverlapError() from exc
        return _to_entry(row) if row else None

    async def delete(self, user_id: str, entry_id: UUID) -> bool:
        async with get_connection() as conn:
            result = await conn.execute(
                "DELETE FROM period_entries WHERE entry_id = $1 AND user_id = $2",
                entry_id, user_id,
            )
        return result != "DELETE 0"

    async def find_overlapping(
        self,
        user_id: str,
        start: date,
        end: date,
        exclude_id: UUID | None = None,
    ) -> PeriodEntry | None:
        async with get_connection() as conn:
            row = await conn.fetchrow(
                f"""
                SELECT {_COLUMNS} FROM period_entries
                WHERE user_id = $1
                  AND start_date <= $3
                  AND end_date >= $2
                  AND ($4::uuid IS NULL OR entry_id <> $4)
                ORDER BY start_date
                LIMIT 1
                """,
                user_id, start, end, exclude_id,
            )
        return _to_entry(row) if row else None

    async def latest(
        self, user_id: str, limit: int, offset: int = 0
    ) -> list[PeriodEntry]:
        async with get_connection() as conn:
            rows = await conn.fetch(
                f"""
                SELECT {_COLUMNS} FROM period_entries
                WHERE user_id = $1
                ORDER BY start_date DESC
                LIMIT $2 OFFSET $3
                """,
                user_id, limit, offset,
            )
        return [_to_entry(r) for r in rows]

    async def count(self, user_id: str) -> int:
        async with get_connection() as conn:
            return await conn.fetchval(
                "SELECT COUNT(*) FROM period_entries WHERE user_id = $1", user_id
            )

    async def ping(self) -> None:
        async with get_pool().acquire() as conn:
            await conn.fetchval("SELECT 1")
