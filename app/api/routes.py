from fastapi import APIRouter, HTTPException, Request

from app.errors import FetchError
from app.schemas.tracker import AddTickerRequest, AddTickerResult, SetSortRequest

router = APIRouter()

_QUOTE_ERROR_STATUS = {
    "RATE_LIMITED": 503,
    "NO_DATA": 404,
    "SOURCE_ERROR": 502,
    "TRANSPORT_ERROR": 502,
}


@router.get('/tickers')
async def get_tickers(request: Request):
    return request.app.state.tracker.snapshot().model_dump(mode='json')


@router.post('/tickers', response_model=AddTickerResult)
async def add_ticker(req: AddTickerRequest, request: Request):
    ticker = request.app.state.tracker.add_ticker(req.text)
    return AddTickerResult(accepted=ticker is not None, ticker=ticker)


@router.delete('/tickers/{ticker}')
async def remove_ticker(ticker: str, request: Request):
    return {'removed': request.app.state.tracker.remove_ticker(ticker)}


@router.get('/sort')
async def get_sort(request: Request):
    return request.app.state.tracker.sort_spec.model_dump()


@router.post('/sort')
async def set_sort(req: SetSortRequest, request: Request):
    return request.app.state.tracker.set_sort(req.field).model_dump()


@router.get('/quotes/{symbol}')
async def get_quote(symbol: str, request: Request):
    resolver = request.app.state.tracker.resolver
    try:
        quote = await resolver.resolve(symbol.strip().upper())
    except FetchError as exc:
        raise HTTPException(status_code=_QUOTE_ERROR_STATUS.get(exc.kind, 502), detail=exc.kind) from exc
    return quote.model_dump(mode='json')


@router.get('/metrics/quote')
async def quote_metrics(request: Request):
    return request.app.state.tracker.metrics()
