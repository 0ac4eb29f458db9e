from __future__ import annotations

from typing import Any, Iterable

from app.schemas.tracker import SortField, SortSpec, TrackerRow, TrackerSnapshot
from app.services.sort_engine import SortEngine
from app.services.ticker_set import TickerSet


class TrackerService:
    """Presentation boundary: ordered rows plus the add/remove/sort operations."""

    def __init__(self, ticker_set: TickerSet, sort_engine: SortEngine | None = None) -> None:
        self.ticker_set = ticker_set
        self.sort_engine = sort_engine or SortEngine()

    @property
    def resolver(self):
        return self.ticker_set.resolver

    @property
    def sort_spec(self) -> SortSpec:
        return self.sort_engine.spec

    def seed(self, tickers: Iterable[str]) -> list[str]:
        return [t for t in (self.add_ticker(raw) for raw in tickers) if t is not None]

    def add_ticker(self, text: str) -> str | None:
        return self.ticker_set.add(text)

    def remove_ticker(self, ticker: str) -> bool:
        return self.ticker_set.remove(ticker)

    def set_sort(self, field: SortField | None) -> SortSpec:
        spec = self.sort_engine.select(field)
        print(f"[TICKERS][sort] field={spec.field} direction={spec.direction}", flush=True)
        return spec

    async def shutdown(self) -> int:
        return await self.ticker_set.shutdown()

    def rows(self) -> list[TrackerRow]:
        ordered = self.sort_engine.order(self.ticker_set.rows())
        return [TrackerRow(ticker=ticker, state=state) for ticker, state in ordered]

    def snapshot(self) -> TrackerSnapshot:
        return TrackerSnapshot(rows=self.rows(), sort=self.sort_spec)

    def metrics(self) -> dict[str, Any]:
        counts = {"IDLE": 0, "LOADING": 0, "SUCCESS": 0, "FAILURE": 0}
        for _, state in self.ticker_set.rows():
            counts[state.status] += 1
        out: dict[str, Any] = {"tracked_count": len(self.ticker_set)}
        out.update({f"{status.lower()}_count": n for status, n in counts.items()})
        out.update(self.resolver.metrics())
        return out
