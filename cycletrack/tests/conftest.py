"""Shared fixtures for period tracking tests."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Callable, Iterator

import jwt as pyjwt
import pytest
from fastapi.testclient import TestClient

from cycletrack.config import Settings
from cycletrack.cycles.entry import PeriodEntry, Symptom
from cycletrack.main import create_app
from cycletrack.services.entry_store import EntryStore
from cycletrack.services.repository import InMemoryPeriodRepository

# Canonical test users
TEST_USER_ID = "user_5f1a2b3c"
OTHER_USER_ID = "user_9e8d7c6b"

TEST_SECRET = "test-secret-key-for-hs256-signing-only"

# Reference instant for phase estimates: midnight UTC, so day counts are exact
TEST_NOW = datetime(2024, 3, 10, tzinfo=timezone.utc)


def make_entry(
    start: date,
    days: int = 5,
    user_id: str = TEST_USER_ID,
    symptoms: list[Symptom] | None = None,
) -> PeriodEntry:
    """An entry starting on ``start`` and lasting ``days`` calendar days."""
    return PeriodEntry(
        user_id=user_id,
        start_date=start,
        end_date=start + timedelta(days=days - 1),
        symptoms=symptoms or [],
    )


def entries_from_starts(*starts: date, days: int = 5) -> list[PeriodEntry]:
    """Entries for the given starts, returned newest first."""
    return sorted(
        (make_entry(s, days=days) for s in starts),
        key=lambda e: e.start_date,
        reverse=True,
    )


# ---------------------------------------------------------------------------
# Store fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def repository() -> InMemoryPeriodRepository:
    return InMemoryPeriodRepository()


@pytest.fixture
def store(repository: InMemoryPeriodRepository) -> EntryStore:
    return EntryStore(repository, max_limit=50)


# ---------------------------------------------------------------------------
# HTTP fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url=None,
        jwt_secret=TEST_SECRET,
        environment="test",
        default_page_size=10,
        max_page_size=50,
    )


@pytest.fixture
def make_token() -> Callable[..., str]:
    def _make(user_id: str = TEST_USER_ID, **claims) -> str:
        return pyjwt.encode({"userId": user_id, **claims}, TEST_SECRET, algorithm="HS256")

    return _make


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest.fixture
def auth_headers(make_token: Callable[..., str]) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token()}"}
