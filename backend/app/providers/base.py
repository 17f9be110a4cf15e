from __future__ import annotations

import datetime
import logging
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

import httpx

from app.config.settings import Settings
from app.schemas.quote import PriceRange, Quote

logger = logging.getLogger(__name__)

_RANGE_BAND = Decimal("0.02")


class ProviderRole(str, Enum):
    REGIONAL = "regional"
    GENERAL = "general"
    QUOTA_LIMITED = "quota_limited"


def to_decimal(value: Any) -> Decimal | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip().rstrip("%").strip()
        if not value:
            return None
    try:
        result = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        return None
    if not result.is_finite():
        return None
    return result


def to_int(value: Any) -> int:
    number = to_decimal(value)
    if number is None or number < 0:
        return 0
    return int(number)


def price_range(price: Decimal, low: Any = None, high: Any = None) -> PriceRange:
    """Vendor bounds when present, otherwise a +/-2% placeholder band around price."""
    low_value = to_decimal(low)
    high_value = to_decimal(high)
    if low_value is None or low_value <= 0:
        low_value = price * (1 - _RANGE_BAND)
    if high_value is None or high_value <= 0:
        high_value = price * (1 + _RANGE_BAND)
    return PriceRange(low=low_value, high=high_value)


class QuoteProvider:
    name: str
    role: ProviderRole
    priority: int
    quota_limited: bool = False
    description: str = ""

    def __init__(self, client: httpx.AsyncClient, settings: Settings) -> None:
        self.client = client
        self.settings = settings

    async def fetch(self, symbol: str, credential: str) -> Quote | None:
        """
        Fetch one quote for ``symbol``.

        Returns None whenever the vendor has no usable price; never raises for
        vendor or transport failures.
        """
        raise NotImplementedError

    async def _get_json(
        self,
        url: str,
        symbol: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any | None:
        try:
            response = await self.client.get(url, params=params, headers=headers)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            status = "rate_limited" if exc.response.status_code == 429 else "error"
            logger.warning(
                "%s %s for %s: HTTP %s", self.name, status, symbol, exc.response.status_code
            )
        except httpx.TimeoutException:
            logger.warning("%s timed out for %s", self.name, symbol)
        except httpx.HTTPError as exc:
            logger.warning("%s request failed for %s: %s", self.name, symbol, type(exc).__name__)
        except ValueError:
            logger.warning("%s returned malformed JSON for %s", self.name, symbol)
        return None

    def _display_name(self, symbol: str, *candidates: Any) -> str:
        for candidate in candidates:
            if isinstance(candidate, str) and candidate.strip():
                return candidate.strip()
        return self.settings.company_names.get(symbol, symbol)

    def _build_quote(
        self,
        symbol: str,
        price: Decimal,
        change: Decimal,
        change_percent: Decimal,
        name: str,
        day_range: PriceRange,
        fifty_two_week_range: PriceRange,
        volume: int = 0,
        market_cap: Decimal | None = None,
        pe_ratio: Decimal | None = None,
        dividend_yield: Decimal | None = None,
    ) -> Quote:
        return Quote(
            symbol=symbol,
            name=name,
            price=price,
            change=change,
            change_percent=change_percent,
            day_range=day_range,
            fifty_two_week_range=fifty_two_week_range,
            volume=volume,
            market_cap=market_cap,
            pe_ratio=pe_ratio,
            dividend_yield=dividend_yield,
            last_updated=datetime.datetime.now(datetime.UTC),
            provider=self.name,
            is_real_data=True,
        )
