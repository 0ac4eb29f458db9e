from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Protocol

from app.errors import FetchError, NoDataError
from app.schemas.quote import Quote
from app.services.quote_normalizer import normalize_quote


class QuoteSource(Protocol):
    name: str

    async def fetch(self, symbol: str) -> Dict[str, Any]: ...


class QuoteResolver:
    """Fixture-first quote resolver with a single remote fallback tier.

    The fixture tier is authoritative for its symbols, so a known symbol
    never spends remote quota. Remote errors propagate unchanged.
    """

    def __init__(
        self,
        *,
        fixture_source: QuoteSource,
        remote_source: QuoteSource,
        normalizer: Callable[[Mapping[str, Any]], Quote] = normalize_quote,
    ) -> None:
        self.fixture_source = fixture_source
        self.remote_source = remote_source
        self.normalizer = normalizer

        self.fixture_hits = 0
        self.remote_calls = 0
        self.remote_errors: dict[str, int] = {}

    async def resolve(self, symbol: str) -> Quote:
        try:
            payload = await self.fixture_source.fetch(symbol)
        except NoDataError:
            return await self._resolve_remote(symbol)

        self.fixture_hits += 1
        print(f"[QUOTE][fixture_hit] symbol={symbol}", flush=True)
        return self.normalizer(payload)

    async def _resolve_remote(self, symbol: str) -> Quote:
        self.remote_calls += 1
        print(f"[QUOTE][remote_fallback] symbol={symbol} source={self.remote_source.name}", flush=True)
        try:
            payload = await self.remote_source.fetch(symbol)
        except FetchError as exc:
            self.remote_errors[exc.kind] = self.remote_errors.get(exc.kind, 0) + 1
            print(f"[QUOTE][remote_error] symbol={symbol} kind={exc.kind} error={exc}", flush=True)
            raise
        return self.normalizer(payload)

    def metrics(self) -> dict[str, Any]:
        return {
            "fixture_hits": self.fixture_hits,
            "remote_calls": self.remote_calls,
            "remote_errors": dict(self.remote_errors),
            "remote_source": self.remote_source.name,
        }
