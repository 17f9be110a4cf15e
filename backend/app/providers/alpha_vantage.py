from __future__ import annotations

import logging
from decimal import Decimal

from app.providers.base import ProviderRole, QuoteProvider, price_range, to_decimal, to_int
from app.schemas.quote import Quote

logger = logging.getLogger(__name__)

_ZERO = Decimal(0)
_QUERY_PATH = "/query"
_NOTICE_KEYS = ("Information", "Note", "Error Message")


class AlphaVantageProvider(QuoteProvider):
    name = "alpha_vantage"
    role = ProviderRole.QUOTA_LIMITED
    priority = 3
    quota_limited = True
    description = "Fallback for all symbols, per-minute call quota"

    def _build_url(self) -> str:
        base_url = self.settings.providers.alpha_vantage_base_url.rstrip("/")
        return f"{base_url}{_QUERY_PATH}"

    async def fetch(self, symbol: str, credential: str) -> Quote | None:
        payload = await self._get_json(
            self._build_url(),
            symbol,
            params={"function": "GLOBAL_QUOTE", "symbol": symbol, "apikey": credential},
            headers={"User-Agent": self.settings.user_agent},
        )
        if not isinstance(payload, dict):
            return None

        # Quota exhaustion and bad symbols arrive as HTTP 200 with a notice.
        for key in _NOTICE_KEYS:
            if payload.get(key):
                logger.warning("alpha_vantage notice for %s: %s", symbol, payload[key])
                return None

        quote = payload.get("Global Quote")
        if not isinstance(quote, dict) or not quote:
            logger.info("alpha_vantage returned no quote for %s", symbol)
            return None

        price = to_decimal(quote.get("05. price"))
        if price is None or price <= 0:
            logger.info("alpha_vantage has no price for %s", symbol)
            return None

        change = to_decimal(quote.get("09. change"))
        if change is None:
            previous_close = to_decimal(quote.get("08. previous close"))
            change = price - previous_close if previous_close else _ZERO
        change_percent = to_decimal(quote.get("10. change percent"))
        if change_percent is None:
            change_percent = _ZERO

        return self._build_quote(
            symbol,
            price=price,
            change=change,
            change_percent=change_percent,
            name=self._display_name(symbol),
            day_range=price_range(price, quote.get("04. low"), quote.get("03. high")),
            fifty_two_week_range=price_range(price),
            volume=to_int(quote.get("06. volume")),
        )
