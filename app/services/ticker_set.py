from __future__ import annotations

import asyncio
import re
from typing import Callable, Iterator

from app.schemas.quote import FetchState
from app.services.fetch_session import FetchSession

TICKER_PATTERN = re.compile(r"^[A-Z0-9]{1,10}$")


def schedule_on_running_loop(session: FetchSession) -> None:
    loop = asyncio.get_running_loop()
    session.task = loop.create_task(session.start(), name=f"fetch-{session.symbol}")


class TickerSet:
    """Insertion-ordered unique tickers, each owning one FetchSession."""

    def __init__(
        self,
        resolver,
        *,
        spawn: Callable[[FetchSession], None] | None = None,
    ) -> None:
        self.resolver = resolver
        self._spawn = spawn or schedule_on_running_loop
        self._sessions: dict[str, FetchSession] = {}
        self._inflight: set[asyncio.Task] = set()

    @staticmethod
    def normalize(raw_input: str) -> str:
        return str(raw_input).strip().upper()

    def add(self, raw_input: str) -> str | None:
        ticker = self.normalize(raw_input)
        if not TICKER_PATTERN.match(ticker) or ticker in self._sessions:
            print(f"[TICKERS][add_rejected] input={raw_input!r}", flush=True)
            return None

        session = FetchSession(ticker, self.resolver)
        self._spawn(session)
        if session.task is not None:
            self._inflight.add(session.task)
            session.task.add_done_callback(self._inflight.discard)
        self._sessions[ticker] = session
        print(f"[TICKERS][add] ticker={ticker} session={session.session_id}", flush=True)
        return ticker

    def remove(self, ticker: str) -> bool:
        session = self._sessions.pop(ticker, None)
        if session is None:
            return False
        session.destroy()
        print(f"[TICKERS][remove] ticker={ticker} session={session.session_id}", flush=True)
        return True

    async def shutdown(self) -> int:
        """Cancel fetches still in flight, including those of removed tickers."""
        pending = [task for task in self._inflight if not task.done()]
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        print(f"[TICKERS][shutdown] cancelled={len(pending)}", flush=True)
        return len(pending)

    def tickers(self) -> list[str]:
        return list(self._sessions)

    def state_of(self, ticker: str) -> FetchState | None:
        session = self._sessions.get(ticker)
        return session.state if session is not None else None

    def rows(self) -> list[tuple[str, FetchState]]:
        return [(ticker, session.state) for ticker, session in self._sessions.items()]

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, ticker: object) -> bool:
        return ticker in self._sessions

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._sessions))
