from __future__ import annotations


class QuoteServiceError(Exception):
    """Base class for errors surfaced by the quote service."""


class InvalidSymbolError(QuoteServiceError, ValueError):
    def __init__(self, symbol: str) -> None:
        super().__init__(f"Invalid ticker symbol: {symbol!r}")
        self.symbol = symbol


class QuoteUnavailableError(QuoteServiceError):
    """No configured provider returned real market data for a symbol."""

    def __init__(self, symbol: str, attempted: list[str] | None = None) -> None:
        self.symbol = symbol
        self.attempted = list(attempted or [])
        if self.attempted:
            detail = f"tried {', '.join(self.attempted)}"
        else:
            detail = "no provider configured or admitted"
        super().__init__(f"No real market data available for {symbol} ({detail})")


class BatchQuoteError(QuoteServiceError):
    """One or more symbols of a batch request could not be served."""

    def __init__(self, failures: dict[str, QuoteServiceError]) -> None:
        self.failures = dict(failures)
        super().__init__(
            f"No real market data available for: {', '.join(self.failed_symbols)}"
        )

    @property
    def failed_symbols(self) -> list[str]:
        return list(self.failures)
