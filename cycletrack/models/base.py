"""Shared Pydantic base models and utilities."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CycleTrackBase(BaseModel):
    """Base model with shared config for all CycleTrack schemas.

    Fields are snake_case in Python and camelCase on the wire; input accepts
    either spelling.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        str_strip_whitespace=True,
        alias_generator=to_camel,
    )


# ---------- Generic pagination / response wrappers ----------


class PaginationMeta(CycleTrackBase):
    current: int = Field(ge=1)
    pages: int = Field(ge=0)
    total: int = Field(ge=0)


class ErrorDetail(BaseModel):
    detail: str
