"""CRUD endpoints for period entries plus the derived cycle insights."""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Query

from cycletrack.dependencies import AppSettings, CurrentUser, Store
from cycletrack.models.base import ErrorDetail, PaginationMeta
from cycletrack.models.periods import (
    CycleInsightsRead,
    PeriodEntryCreate,
    PeriodEntryPage,
    PeriodEntryRead,
    PeriodEntryUpdate,
)

router = APIRouter(prefix="/periods", tags=["periods"])

_WRITE_ERRORS: dict[int | str, dict] = {
    404: {"model": ErrorDetail},
    409: {"model": ErrorDetail},
    422: {"model": ErrorDetail},
}


@router.get("", response_model=PeriodEntryPage)
async def list_entries(
    user: CurrentUser,
    store: Store,
    settings: AppSettings,
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
) -> Any:
    result = await store.list(
        user.user_id, page=page, limit=limit or settings.default_page_size
    )
    return PeriodEntryPage(
        data=[PeriodEntryRead.from_entry(e) for e in result.items],
        pagination=PaginationMeta(
            current=result.page, pages=result.pages, total=result.total
        ),
    )


@router.post(
    "", response_model=PeriodEntryRead, status_code=201,
    responses={409: {"model": ErrorDetail}},
)
async def create_entry(user: CurrentUser, store: Store, body: PeriodEntryCreate) -> Any:
    entry = await store.create(
        user.user_id,
        body.start_date,
        body.end_date,
        flow=body.flow,
        symptoms=body.symptoms,
        notes=body.notes,
    )
    return PeriodEntryRead.from_entry(entry)


# Registered before /{entry_id} so "insights" is never parsed as an id
@router.get("/insights", response_model=CycleInsightsRead)
async def get_insights(user: CurrentUser, store: Store) -> Any:
    report = await store.insights(user.user_id)
    return CycleInsightsRead.from_report(report)


@router.get(
    "/{entry_id}", response_model=PeriodEntryRead,
    responses={404: {"model": ErrorDetail}},
)
async def get_entry(entry_id: uuid.UUID, user: CurrentUser, store: Store) -> Any:
    return PeriodEntryRead.from_entry(await store.get(user.user_id, entry_id))


@router.put("/{entry_id}", response_model=PeriodEntryRead, responses=_WRITE_ERRORS)
async def replace_entry(
    entry_id: uuid.UUID, user: CurrentUser, store: Store, body: PeriodEntryCreate
) -> Any:
    entry = await store.update(user.user_id, entry_id, body.model_dump())
    return PeriodEntryRead.from_entry(entry)


@router.patch("/{entry_id}", response_model=PeriodEntryRead, responses=_WRITE_ERRORS)
async def update_entry(
    entry_id: uuid.UUID, user: CurrentUser, store: Store, body: PeriodEntryUpdate
) -> Any:
    entry = await store.update(
        user.user_id, entry_id, body.model_dump(exclude_unset=True)
    )
    return PeriodEntryRead.from_entry(entry)


@router.delete("/{entry_id}", status_code=204)
async def delete_entry(entry_id: uuid.UUID, user: CurrentUser, store: Store) -> None:
    await store.delete(user.user_id, entry_id)
