from __future__ import annotations

from decimal import Decimal
from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict, model_validator

from app.errors import FetchError

FetchStatus = Literal["IDLE", "LOADING", "SUCCESS", "FAILURE"]
FetchErrorKind = Literal["RATE_LIMITED", "SOURCE_ERROR", "NO_DATA", "TRANSPORT_ERROR"]
_KNOWN_ERROR_KINDS = frozenset(get_args(FetchErrorKind))


class Quote(BaseModel):
    model_config = ConfigDict(frozen=True)

    symbol: str
    price: Decimal
    change: Decimal
    change_percent: Decimal

    @model_validator(mode="after")
    def check_invariants(self) -> "Quote":
        if self.price.is_signed():
            raise ValueError("price must be non-negative")
        if self.change.is_signed() != self.change_percent.is_signed():
            raise ValueError("change and change_percent must share the same sign")
        return self


class FetchErrorInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: FetchErrorKind
    message: str | None = None

    @classmethod
    def from_error(cls, exc: FetchError) -> "FetchErrorInfo":
        kind = exc.kind if exc.kind in _KNOWN_ERROR_KINDS else "TRANSPORT_ERROR"
        return cls(kind=kind, message=exc.message)


class FetchState(BaseModel):
    """Tagged per-ticker fetch state; exactly one tag is active."""

    model_config = ConfigDict(frozen=True)

    status: FetchStatus = "IDLE"
    quote: Quote | None = None
    error: FetchErrorInfo | None = None

    @model_validator(mode="after")
    def check_tag(self) -> "FetchState":
        if (self.quote is not None) != (self.status == "SUCCESS"):
            raise ValueError("quote is required for SUCCESS and forbidden otherwise")
        if (self.error is not None) != (self.status == "FAILURE"):
            raise ValueError("error is required for FAILURE and forbidden otherwise")
        return self

    @classmethod
    def idle(cls) -> "FetchState":
        return cls(status="IDLE")

    @classmethod
    def loading(cls) -> "FetchState":
        return cls(status="LOADING")

    @classmethod
    def success(cls, quote: Quote) -> "FetchState":
        return cls(status="SUCCESS", quote=quote)

    @classmethod
    def failure(cls, exc: FetchError) -> "FetchState":
        return cls(status="FAILURE", error=FetchErrorInfo.from_error(exc))
