import asyncio
from decimal import Decimal

import httpx

from app.config.settings import Settings
from app.providers.alpha_vantage import AlphaVantageProvider
from app.providers.brapi import BrapiProvider
from app.providers.finnhub import FinnhubProvider

API_KEY = "secret-key-123"


def run_fetch(provider_cls, handler, symbol: str):
    requests: list[httpx.Request] = []

    def recording_handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    async def _run():
        transport = httpx.MockTransport(recording_handler)
        async with httpx.AsyncClient(transport=transport) as client:
            provider = provider_cls(client, Settings())
            return await provider.fetch(symbol, API_KEY)

    return asyncio.run(_run()), requests


def test_finnhub_parses_quote() -> None:
    payload = {"c": 190.5, "d": 1.5, "dp": 0.79, "h": 191, "l": 188, "o": 189, "pc": 189}
    quote, requests = run_fetch(
        FinnhubProvider, lambda request: httpx.Response(200, json=payload), "AAPL"
    )

    assert quote is not None
    assert quote.is_real_data is True
    assert quote.provider == "finnhub"
    assert quote.name == "Apple Inc."
    assert quote.price == Decimal("190.5")
    assert quote.change == Decimal("1.5")
    assert quote.change_percent == Decimal("0.79")
    assert quote.day_range.low == Decimal("188")
    assert quote.day_range.high == Decimal("191")
    # Finnhub has no 52-week data in the quote endpoint.
    assert quote.fifty_two_week_range.low == Decimal("186.69")
    assert quote.fifty_two_week_range.high == Decimal("194.31")

    assert requests[0].url.path == "/api/v1/quote"
    assert requests[0].url.params["symbol"] == "AAPL"
    assert requests[0].url.params["token"] == API_KEY


def test_finnhub_derives_change_from_previous_close() -> None:
    payload = {"c": 110, "pc": 100}
    quote, _ = run_fetch(
        FinnhubProvider, lambda request: httpx.Response(200, json=payload), "XYZ"
    )

    assert quote is not None
    assert quote.name == "XYZ"
    assert quote.change == Decimal("10")
    assert quote.change_percent == Decimal("10")
    assert quote.day_range.low == Decimal("107.8")


def test_finnhub_unknown_symbol_is_absent() -> None:
    payload = {"c": 0, "d": None, "dp": None, "h": 0, "l": 0, "o": 0, "pc": 0, "t": 0}
    quote, _ = run_fetch(
        FinnhubProvider, lambda request: httpx.Response(200, json=payload), "NOPE"
    )

    assert quote is None


def test_finnhub_error_payload_is_absent() -> None:
    quote, _ = run_fetch(
        FinnhubProvider,
        lambda request: httpx.Response(200, json={"error": "Invalid API key"}),
        "AAPL",
    )

    assert quote is None


def test_finnhub_rate_limited_response_is_absent() -> None:
    quote, _ = run_fetch(
        FinnhubProvider,
        lambda request: httpx.Response(429, json={"error": "API limit reached"}),
        "AAPL",
    )

    assert quote is None


def test_finnhub_timeout_is_absent() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    quote, _ = run_fetch(FinnhubProvider, handler, "AAPL")

    assert quote is None


def test_finnhub_malformed_json_is_absent() -> None:
    quote, _ = run_fetch(
        FinnhubProvider,
        lambda request: httpx.Response(200, content=b"<html>gateway</html>"),
        "AAPL",
    )

    assert quote is None


def test_brapi_parses_quote_and_drops_exchange_suffix() -> None:
    payload = {
        "results": [
            {
                "symbol": "PETR4",
                "shortName": "PETROBRAS PN",
                "longName": "Petróleo Brasileiro S.A. - Petrobras",
                "regularMarketPrice": 38.12,
                "regularMarketChange": -0.3,
                "regularMarketChangePercent": -0.78,
                "regularMarketDayLow": 37.9,
                "regularMarketDayHigh": 38.6,
                "fiftyTwoWeekLow": 30.1,
                "fiftyTwoWeekHigh": 42.4,
                "regularMarketVolume": 45000000,
                "marketCap": 496000000000,
                "priceEarnings": 4.2,
            }
        ]
    }
    quote, requests = run_fetch(
        BrapiProvider, lambda request: httpx.Response(200, json=payload), "PETR4.SA"
    )

    assert quote is not None
    assert quote.symbol == "PETR4.SA"
    assert quote.provider == "brapi"
    assert quote.name == "Petróleo Brasileiro S.A. - Petrobras"
    assert quote.price == Decimal("38.12")
    assert quote.change == Decimal("-0.3")
    assert quote.fifty_two_week_range.low == Decimal("30.1")
    assert quote.fifty_two_week_range.high == Decimal("42.4")
    assert quote.volume == 45000000
    assert quote.market_cap == Decimal("496000000000")
    assert quote.pe_ratio == Decimal("4.2")
    assert quote.dividend_yield is None

    assert requests[0].url.path == "/api/quote/PETR4"
    assert requests[0].url.params["token"] == API_KEY


def test_brapi_missing_bounds_use_placeholder_band() -> None:
    payload = {"results": [{"regularMarketPrice": 50}]}
    quote, _ = run_fetch(
        BrapiProvider, lambda request: httpx.Response(200, json=payload), "VALE3.SA"
    )

    assert quote is not None
    assert quote.name == "Vale S.A."
    assert quote.change == Decimal("0")
    assert quote.day_range.low == Decimal("49")
    assert quote.day_range.high == Decimal("51")
    assert quote.fifty_two_week_range.low == Decimal("49")


def test_brapi_error_and_empty_results_are_absent() -> None:
    error_quote, _ = run_fetch(
        BrapiProvider,
        lambda request: httpx.Response(200, json={"error": True, "message": "not found"}),
        "XXXX4",
    )
    empty_quote, _ = run_fetch(
        BrapiProvider, lambda request: httpx.Response(200, json={"results": []}), "XXXX4"
    )
    not_found_quote, _ = run_fetch(
        BrapiProvider,
        lambda request: httpx.Response(404, json={"error": True, "message": "not found"}),
        "XXXX4",
    )

    assert error_quote is None
    assert empty_quote is None
    assert not_found_quote is None


def test_alpha_vantage_parses_global_quote() -> None:
    payload = {
        "Global Quote": {
            "01. symbol": "IBM",
            "02. open": "169.10",
            "03. high": "172.00",
            "04. low": "168.50",
            "05. price": "170.25",
            "06. volume": "3456789",
            "07. latest trading day": "2026-10-16",
            "08. previous close": "169.00",
            "09. change": "1.25",
            "10. change percent": "0.7396%",
        }
    }
    quote, requests = run_fetch(
        AlphaVantageProvider, lambda request: httpx.Response(200, json=payload), "IBM"
    )

    assert quote is not None
    assert quote.provider == "alpha_vantage"
    assert quote.price == Decimal("170.25")
    assert quote.change == Decimal("1.25")
    assert quote.change_percent == Decimal("0.7396")
    assert quote.day_range.low == Decimal("168.50")
    assert quote.day_range.high == Decimal("172.00")
    assert quote.volume == 3456789

    request = requests[0]
    assert request.url.path == "/query"
    assert request.url.params["function"] == "GLOBAL_QUOTE"
    assert request.url.params["apikey"] == API_KEY
    assert request.headers["User-Agent"] == Settings().user_agent


def test_alpha_vantage_quota_notice_is_absent() -> None:
    payload = {
        "Note": "Thank you for using Alpha Vantage! Our standard API call frequency is 5 calls per minute."
    }
    quote, _ = run_fetch(
        AlphaVantageProvider, lambda request: httpx.Response(200, json=payload), "IBM"
    )

    assert quote is None


def test_alpha_vantage_empty_quote_is_absent() -> None:
    quote, _ = run_fetch(
        AlphaVantageProvider,
        lambda request: httpx.Response(200, json={"Global Quote": {}}),
        "NOPE",
    )

    assert quote is None
