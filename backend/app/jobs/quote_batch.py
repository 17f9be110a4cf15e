from __future__ import annotations

import asyncio
import logging

from app.errors import BatchQuoteError, QuoteServiceError
from app.providers.selector import QuoteOrchestrator
from app.schemas.quote import Quote

logger = logging.getLogger(__name__)


async def fetch_quotes(
    orchestrator: QuoteOrchestrator, symbols: list[str], force_refresh: bool = False
) -> list[Quote]:
    """Fetch every symbol concurrently and return quotes in input order.

    Raises BatchQuoteError naming each symbol that could not be served; a
    successful result never contains a gap or a placeholder.
    """
    if not symbols:
        return []

    results = await asyncio.gather(
        *(orchestrator.get_quote(symbol, force_refresh=force_refresh) for symbol in symbols),
        return_exceptions=True,
    )

    quotes: list[Quote] = []
    failures: dict[str, QuoteServiceError] = {}
    for symbol, result in zip(symbols, results):
        if isinstance(result, QuoteServiceError):
            failures[symbol] = result
            continue
        if isinstance(result, BaseException):
            raise result
        quotes.append(result)

    if failures:
        logger.warning(
            "batch of %d symbols failed for: %s", len(symbols), ", ".join(failures)
        )
        raise BatchQuoteError(failures)
    return quotes
