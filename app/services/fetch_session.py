from __future__ import annotations

import asyncio
import uuid

from app.errors import FetchError, TransportError
from app.schemas.quote import FetchState


class FetchSession:
    """Quote fetch lifecycle for one ticker lifetime.

    IDLE -> LOADING -> SUCCESS | FAILURE, one start per instance. Once
    destroyed, a late completion is dropped instead of published.
    """

    def __init__(self, symbol: str, resolver) -> None:
        self.session_id = uuid.uuid4().hex
        self.symbol = symbol
        self.resolver = resolver
        self.state = FetchState.idle()
        self.alive = True
        self.task: asyncio.Task | None = None
        self._started = False

    async def start(self) -> None:
        if self._started:
            raise RuntimeError("SESSION_ALREADY_STARTED")
        self._started = True
        self.state = FetchState.loading()
        print(f"[SESSION][start] symbol={self.symbol} session={self.session_id}", flush=True)

        try:
            quote = await self.resolver.resolve(self.symbol)
        except FetchError as exc:
            self._complete(FetchState.failure(exc))
        except Exception as exc:
            self._complete(FetchState.failure(TransportError(f"Error fetching data: {exc}")))
        else:
            self._complete(FetchState.success(quote))

    def _complete(self, state: FetchState) -> None:
        if not self.alive:
            print(
                f"[SESSION][stale_discard] symbol={self.symbol} session={self.session_id} status={state.status}",
                flush=True,
            )
            return
        self.state = state
        print(
            f"[SESSION][complete] symbol={self.symbol} session={self.session_id} status={state.status}",
            flush=True,
        )

    def destroy(self) -> None:
        self.alive = False
