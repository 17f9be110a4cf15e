from __future__ import annotations

import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, Field, PlainSerializer

Price = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class PriceRange(BaseModel):
    low: Price
    high: Price


class Quote(BaseModel):
    symbol: str
    name: str
    price: Price
    change: Price
    change_percent: Price
    day_range: PriceRange
    fifty_two_week_range: PriceRange
    volume: int = Field(default=0, ge=0)
    market_cap: Price | None = None
    pe_ratio: Price | None = None
    dividend_yield: Price | None = None
    last_updated: datetime.datetime
    provider: str
    # Covers price and change fields only; ranges may be placeholders.
    is_real_data: bool = False


class QuoteResponse(BaseModel):
    quote: Quote


class QuotesRequest(BaseModel):
    symbols: list[str] = Field(default_factory=list)
    force_refresh: bool = False


class QuotesResponse(BaseModel):
    quotes: list[Quote] = Field(default_factory=list)
