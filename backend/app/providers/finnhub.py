from __future__ import annotations

import logging

from app.providers.base import ProviderRole, QuoteProvider, price_range, to_decimal
from app.schemas.quote import Quote

logger = logging.getLogger(__name__)

_QUOTE_PATH = "/api/v1/quote"


class FinnhubProvider(QuoteProvider):
    name = "finnhub"
    role = ProviderRole.GENERAL
    priority = 2
    description = "US/international equities, no call quota"

    def _build_url(self) -> str:
        base_url = self.settings.providers.finnhub_base_url.rstrip("/")
        return f"{base_url}{_QUOTE_PATH}"

    async def fetch(self, symbol: str, credential: str) -> Quote | None:
        payload = await self._get_json(
            self._build_url(), symbol, params={"symbol": symbol, "token": credential}
        )
        if not isinstance(payload, dict):
            return None
        if payload.get("error"):
            logger.warning("finnhub error for %s: %s", symbol, payload["error"])
            return None

        # Unknown symbols come back as an all-zero quote.
        price = to_decimal(payload.get("c"))
        if price is None or price <= 0:
            logger.info("finnhub has no price for %s", symbol)
            return None

        previous_close = to_decimal(payload.get("pc"))
        if previous_close is None or previous_close <= 0:
            previous_close = price
        change = to_decimal(payload.get("d"))
        if change is None:
            change = price - previous_close
        change_percent = to_decimal(payload.get("dp"))
        if change_percent is None:
            change_percent = change / previous_close * 100

        return self._build_quote(
            symbol,
            price=price,
            change=change,
            change_percent=change_percent,
            name=self._display_name(symbol),
            day_range=price_range(price, payload.get("l"), payload.get("h")),
            fifty_two_week_range=price_range(price),
        )
