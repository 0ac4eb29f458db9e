import os
from functools import lru_cache

from pydantic import BaseModel, field_validator

DEFAULT_QUOTE_API_BASE_URL = "https://www.alphavantage.co/query"
DEFAULT_TRACKER_TICKERS = ["AAPL", "GOOGL", "MSFT"]


class Settings(BaseModel):
    QUOTE_API_KEY: str | None = None
    QUOTE_API_BASE_URL: str = DEFAULT_QUOTE_API_BASE_URL
    QUOTE_HTTP_TIMEOUT_SEC: float | None = None
    TRACKER_DEFAULT_TICKERS: list[str] = DEFAULT_TRACKER_TICKERS

    @field_validator("QUOTE_HTTP_TIMEOUT_SEC")
    @classmethod
    def positive_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            raise ValueError("QUOTE_HTTP_TIMEOUT_SEC must be greater than 0")
        return value

    @classmethod
    def from_env(cls) -> "Settings":
        raw_tickers = os.getenv("TRACKER_DEFAULT_TICKERS")
        if raw_tickers is None:
            tickers = list(DEFAULT_TRACKER_TICKERS)
        else:
            tickers = [s.strip().upper() for s in raw_tickers.split(",") if s.strip()]

        return cls.model_validate(
            {
                "QUOTE_API_KEY": os.getenv("QUOTE_API_KEY") or None,
                "QUOTE_API_BASE_URL": os.getenv("QUOTE_API_BASE_URL") or DEFAULT_QUOTE_API_BASE_URL,
                "QUOTE_HTTP_TIMEOUT_SEC": os.getenv("QUOTE_HTTP_TIMEOUT_SEC") or None,
                "TRACKER_DEFAULT_TICKERS": tickers,
            }
        )


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
