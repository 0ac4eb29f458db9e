from __future__ import annotations

import asyncio
import threading
from typing import Any, Dict, Optional

import requests

from app.errors import NoDataError, RateLimitedError, SourceError, TransportError


class AlphaVantageRestClient:
    """Single-attempt GLOBAL_QUOTE client; provider errors are classified here."""

    name = "alphavantage-rest"
    _BASE_URL = "https://www.alphavantage.co/query"

    def __init__(
        self,
        api_key: str,
        session: Optional[Any] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        if not api_key:
            raise ValueError("api_key is required")

        self.api_key = api_key
        self.base_url = base_url or self._BASE_URL
        self.session = session or requests
        self.timeout = timeout

    def get_global_quote(self, symbol: str) -> Dict[str, Any]:
        print(f"[QUOTE][remote_request] symbol={symbol} source={self.name}", flush=True)
        try:
            response = self.session.get(
                self.base_url,
                params={"function": "GLOBAL_QUOTE", "symbol": symbol, "apikey": self.api_key},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            status_code = getattr(exc.response, "status_code", None)
            raise TransportError(f"HTTP error! status: {status_code}") from exc
        except requests.RequestException as exc:
            raise TransportError(f"Error fetching data: {exc}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise SourceError("response body is not valid JSON") from exc
        if not isinstance(payload, dict):
            raise SourceError("response body must be a JSON object")

        if payload.get("Note"):
            raise RateLimitedError(f"API Rate Limit: {payload['Note']}")
        if payload.get("Error Message"):
            raise SourceError(f"API Error: {payload['Error Message']}")

        quote = payload.get("Global Quote")
        if not isinstance(quote, dict) or not quote.get("05. price"):
            raise NoDataError("No data available. Try a popular ticker like AAPL, GOOGL, MSFT")

        return {
            "symbol": quote.get("01. symbol"),
            "price": quote.get("05. price"),
            "change": quote.get("09. change"),
            "change_percent": quote.get("10. change percent"),
            "source": self.name,
        }

    async def fetch(self, symbol: str) -> Dict[str, Any]:
        # one daemon thread per call; a hung request must not starve later symbols
        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()

        def _deliver(payload: Dict[str, Any] | None, error: Exception | None) -> None:
            if future.done():
                return
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(payload)

        def _worker() -> None:
            payload = None
            error = None
            try:
                payload = self.get_global_quote(symbol)
            except Exception as exc:
                error = exc
            try:
                loop.call_soon_threadsafe(_deliver, payload, error)
            except RuntimeError:
                print(f"[QUOTE][remote_result_dropped] symbol={symbol} reason=loop_closed", flush=True)

        threading.Thread(target=_worker, daemon=True, name=f"quote-fetch-{symbol}").start()
        return await future


class UnconfiguredRemoteSource:
    """Remote tier placeholder used until QUOTE_API_KEY is bound."""

    name = "unconfigured-remote"

    async def fetch(self, symbol: str) -> Dict[str, Any]:
        raise SourceError("QUOTE_API_KEY_NOT_CONFIGURED")
