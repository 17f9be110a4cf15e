from __future__ import annotations

import time
from collections.abc import Callable

from app.schemas.quote import Quote

Clock = Callable[[], float]


class QuoteCache:
    """In-memory symbol -> quote store with a time-to-live.

    Stale entries are skipped on read but left in place; the next successful
    fetch for the symbol overwrites them.
    """

    def __init__(self, ttl_seconds: float, clock: Clock = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[Quote, float]] = {}

    def _is_fresh(self, fetched_at: float) -> bool:
        return self._clock() - fetched_at <= self.ttl_seconds

    def get(self, symbol: str) -> Quote | None:
        entry = self._entries.get(symbol)
        if entry is None:
            return None
        quote, fetched_at = entry
        if not self._is_fresh(fetched_at):
            return None
        return quote

    def put(self, symbol: str, quote: Quote) -> None:
        # Only genuine upstream readings are servable.
        if not quote.is_real_data:
            return None
        self._entries[symbol] = (quote, self._clock())

    def age(self, symbol: str) -> float | None:
        entry = self._entries.get(symbol)
        if entry is None:
            return None
        return self._clock() - entry[1]

    def fresh_count(self) -> int:
        return sum(1 for _, fetched_at in self._entries.values() if self._is_fresh(fetched_at))

    def __len__(self) -> int:
        return len(self._entries)
