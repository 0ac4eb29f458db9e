from __future__ import annotations

from typing import Any, Dict, Mapping

from app.errors import NoDataError

DEFAULT_FIXTURE_QUOTES: Dict[str, Dict[str, str]] = {
    "AAPL": {"symbol": "AAPL", "price": "175.43", "change": "2.15", "change_percent": "1.24"},
    "GOOGL": {"symbol": "GOOGL", "price": "142.56", "change": "-1.23", "change_percent": "-0.86"},
    "MSFT": {"symbol": "MSFT", "price": "378.85", "change": "3.42", "change_percent": "0.91"},
    "TSLA": {"symbol": "TSLA", "price": "248.50", "change": "-5.20", "change_percent": "-2.05"},
    "AMZN": {"symbol": "AMZN", "price": "155.20", "change": "1.85", "change_percent": "1.21"},
    "NVDA": {"symbol": "NVDA", "price": "875.30", "change": "12.45", "change_percent": "1.44"},
    "META": {"symbol": "META", "price": "485.20", "change": "-2.10", "change_percent": "-0.43"},
    "NFLX": {"symbol": "NFLX", "price": "612.15", "change": "8.30", "change_percent": "1.37"},
}


class FixtureQuoteSource:
    """Offline canned quotes for a closed set of symbols."""

    name = "fixture"

    def __init__(self, quotes: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        source = DEFAULT_FIXTURE_QUOTES if quotes is None else quotes
        self._quotes = {symbol: dict(payload) for symbol, payload in source.items()}

    def symbols(self) -> list[str]:
        return list(self._quotes)

    async def fetch(self, symbol: str) -> Dict[str, Any]:
        payload = self._quotes.get(symbol)
        if payload is None:
            raise NoDataError(f"no fixture quote for {symbol}")
        data = dict(payload)
        data.setdefault("source", self.name)
        return data
