from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict

from app.schemas.quote import FetchState

SortField = Literal["symbol", "price", "change", "change_percent"]
SortDirection = Literal["asc", "desc"]


class SortSpec(BaseModel):
    model_config = ConfigDict(frozen=True)

    field: SortField | None = None
    direction: SortDirection = "asc"


class TrackerRow(BaseModel):
    ticker: str
    state: FetchState


class TrackerSnapshot(BaseModel):
    rows: list[TrackerRow]
    sort: SortSpec


class AddTickerRequest(BaseModel):
    text: str


class AddTickerResult(BaseModel):
    accepted: bool
    ticker: str | None = None


class SetSortRequest(BaseModel):
    field: SortField | None = None
