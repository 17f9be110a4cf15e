from __future__ import annotations

import re
from enum import Enum

from app.errors import InvalidSymbolError

_BRAZIL_SUFFIX = ".SA"
# B3 tickers: four letters followed by the share-class digit (PETR4, VALE3, BBAS3).
_BRAZIL_TICKER_RE = re.compile(r"^[A-Z]{4}\d")
_SYMBOL_RE = re.compile(r"^\^?[A-Z0-9][A-Z0-9.\-=]{0,19}$")


class SymbolRegion(str, Enum):
    BRAZIL = "brazil"
    GLOBAL = "global"


def normalize_symbol(symbol: str) -> str:
    normalized = (symbol or "").strip().upper()
    if not _SYMBOL_RE.match(normalized):
        raise InvalidSymbolError(symbol)
    return normalized


def classify_symbol(symbol: str) -> SymbolRegion:
    normalized = symbol.strip().upper()
    if normalized.endswith(_BRAZIL_SUFFIX) or _BRAZIL_TICKER_RE.match(normalized):
        return SymbolRegion.BRAZIL
    return SymbolRegion.GLOBAL


def strip_regional_suffix(symbol: str) -> str:
    if symbol.upper().endswith(_BRAZIL_SUFFIX):
        return symbol[: -len(_BRAZIL_SUFFIX)]
    return symbol
