from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.routes import router
from app.config.settings import get_settings
from app.integrations.alphavantage_rest import AlphaVantageRestClient, UnconfiguredRemoteSource
from app.services.fixture_source import FixtureQuoteSource
from app.services.quote_resolver import QuoteResolver
from app.services.ticker_set import TickerSet
from app.services.tracker import TrackerService


def build_tracker(remote_source=None) -> TrackerService:
    resolver = QuoteResolver(
        fixture_source=FixtureQuoteSource(),
        remote_source=remote_source or UnconfiguredRemoteSource(),
    )
    return TrackerService(TickerSet(resolver))


def _bind_runtime_clients(app: FastAPI):
    settings = app.state.get_settings()
    if settings.QUOTE_API_KEY:
        app.state.tracker.resolver.remote_source = AlphaVantageRestClient(
            api_key=settings.QUOTE_API_KEY,
            base_url=settings.QUOTE_API_BASE_URL,
            timeout=settings.QUOTE_HTTP_TIMEOUT_SEC,
        )
        print(f"[CONFIG][remote_bound] base_url={settings.QUOTE_API_BASE_URL}", flush=True)
    else:
        print("[CONFIG][remote_unconfigured] reason=QUOTE_API_KEY missing", flush=True)
    return settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = _bind_runtime_clients(app)
    seeded = app.state.tracker.seed(settings.TRACKER_DEFAULT_TICKERS)
    print(f"[TICKERS][seed] tickers={','.join(seeded)}", flush=True)

    try:
        yield
    finally:
        cancelled = await app.state.tracker.shutdown()
        print(f"[TICKERS][lifespan_stop] cancelled={cancelled}", flush=True)


app = FastAPI(title="Stock Price Tracker", version="0.1.0", lifespan=lifespan)
app.include_router(router, prefix="/v1")

# NOTE: settings are resolved in lifespan so app import does not require env.
app.state.get_settings = get_settings
app.state.tracker = build_tracker()
