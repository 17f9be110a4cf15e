from __future__ import annotations

import logging
from decimal import Decimal

from app.providers.base import ProviderRole, QuoteProvider, price_range, to_decimal, to_int
from app.providers.symbols import strip_regional_suffix
from app.schemas.quote import Quote

logger = logging.getLogger(__name__)

_ZERO = Decimal(0)
_QUOTE_PATH = "/api/quote"


class BrapiProvider(QuoteProvider):
    name = "brapi"
    role = ProviderRole.REGIONAL
    priority = 1
    description = "Brazilian equities (.SA, XXXX4), no call quota"

    def _build_url(self, ticker: str) -> str:
        base_url = self.settings.providers.brapi_base_url.rstrip("/")
        return f"{base_url}{_QUOTE_PATH}/{ticker}"

    async def fetch(self, symbol: str, credential: str) -> Quote | None:
        # BRAPI addresses B3 tickers without the exchange suffix.
        ticker = strip_regional_suffix(symbol)
        payload = await self._get_json(
            self._build_url(ticker), symbol, params={"token": credential}
        )
        if not isinstance(payload, dict):
            return None
        if payload.get("error"):
            logger.warning("brapi error for %s: %s", symbol, payload.get("message"))
            return None

        results = payload.get("results")
        if not isinstance(results, list) or not results or not isinstance(results[0], dict):
            logger.info("brapi returned no results for %s", symbol)
            return None
        result = results[0]

        price = to_decimal(result.get("regularMarketPrice"))
        if price is None or price <= 0:
            logger.info("brapi has no price for %s", symbol)
            return None

        change = to_decimal(result.get("regularMarketChange"))
        change_percent = to_decimal(result.get("regularMarketChangePercent"))
        return self._build_quote(
            symbol,
            price=price,
            change=change if change is not None else _ZERO,
            change_percent=change_percent if change_percent is not None else _ZERO,
            name=self._display_name(symbol, result.get("longName"), result.get("shortName")),
            day_range=price_range(
                price, result.get("regularMarketDayLow"), result.get("regularMarketDayHigh")
            ),
            fifty_two_week_range=price_range(
                price, result.get("fiftyTwoWeekLow"), result.get("fiftyTwoWeekHigh")
            ),
            volume=to_int(result.get("regularMarketVolume")),
            market_cap=to_decimal(result.get("marketCap")),
            pe_ratio=to_decimal(result.get("priceEarnings")),
            dividend_yield=to_decimal(result.get("dividendYield")),
        )
