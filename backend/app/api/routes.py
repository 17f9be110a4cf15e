from fastapi import APIRouter, Depends, HTTPException, status

from app.errors import BatchQuoteError, InvalidSymbolError, QuoteUnavailableError
from app.schemas.health import HealthStatus
from app.schemas.quote import QuoteResponse, QuotesRequest, QuotesResponse
from app.services.quote_service import QuoteService, get_quote_service

router = APIRouter()


def _invalid_symbol(exc: InvalidSymbolError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"message": str(exc), "symbol": exc.symbol},
    )


@router.get("/health", response_model=HealthStatus)
async def health(service: QuoteService = Depends(get_quote_service)) -> HealthStatus:
    return service.health()


@router.get("/quote/{symbol}", response_model=QuoteResponse)
async def get_quote_endpoint(
    symbol: str,
    refresh: bool = False,
    service: QuoteService = Depends(get_quote_service),
) -> QuoteResponse:
    try:
        quote = await service.get_quote(symbol, force_refresh=refresh)
    except InvalidSymbolError as exc:
        raise _invalid_symbol(exc) from exc
    except QuoteUnavailableError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "message": str(exc),
                "symbol": exc.symbol,
                "attempted": exc.attempted,
            },
        ) from exc
    return QuoteResponse(quote=quote)


@router.post("/quotes", response_model=QuotesResponse)
async def get_quotes_endpoint(
    payload: QuotesRequest, service: QuoteService = Depends(get_quote_service)
) -> QuotesResponse:
    symbols = [symbol.strip().upper() for symbol in payload.symbols]
    if not symbols:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "symbols must be a non-empty list."},
        )
    try:
        quotes = await service.get_quotes(symbols, force_refresh=payload.force_refresh)
    except BatchQuoteError as exc:
        invalid = [
            symbol
            for symbol, error in exc.failures.items()
            if isinstance(error, InvalidSymbolError)
        ]
        if invalid:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail={"message": "Invalid ticker symbols.", "failed_symbols": invalid},
            ) from exc
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"message": str(exc), "failed_symbols": exc.failed_symbols},
        ) from exc
    return QuotesResponse(quotes=quotes)
