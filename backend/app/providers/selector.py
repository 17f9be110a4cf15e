from __future__ import annotations

import asyncio
import logging
from collections.abc import Collection, Mapping
from dataclasses import dataclass
from enum import Enum

import httpx

from app.cache import QuoteCache
from app.config.settings import Settings
from app.errors import QuoteUnavailableError
from app.providers.alpha_vantage import AlphaVantageProvider
from app.providers.base import ProviderRole, QuoteProvider
from app.providers.brapi import BrapiProvider
from app.providers.finnhub import FinnhubProvider
from app.providers.symbols import SymbolRegion, classify_symbol, normalize_symbol
from app.rate_limit import SlidingWindowRateLimiter
from app.schemas.quote import Quote

logger = logging.getLogger(__name__)


class AttemptReason(str, Enum):
    REGIONAL_SPECIALIST = "regional_specialist"
    GENERAL = "general"
    QUOTA_LIMITED = "quota_limited"
    LAST_RESORT = "last_resort"


@dataclass(frozen=True)
class PlannedAttempt:
    role: ProviderRole
    reason: AttemptReason


def build_attempt_plan(
    region: SymbolRegion, configured: Collection[ProviderRole]
) -> list[PlannedAttempt]:
    """Order the configured providers for one symbol.

    The quota-limited step is only a candidate; whether the rate limiter
    admits it is decided when the step is reached.
    """
    plan: list[PlannedAttempt] = []
    if region is SymbolRegion.BRAZIL and ProviderRole.REGIONAL in configured:
        plan.append(PlannedAttempt(ProviderRole.REGIONAL, AttemptReason.REGIONAL_SPECIALIST))
    if ProviderRole.GENERAL in configured:
        plan.append(PlannedAttempt(ProviderRole.GENERAL, AttemptReason.GENERAL))
    if ProviderRole.QUOTA_LIMITED in configured:
        plan.append(PlannedAttempt(ProviderRole.QUOTA_LIMITED, AttemptReason.QUOTA_LIMITED))
    if region is not SymbolRegion.BRAZIL and ProviderRole.REGIONAL in configured:
        plan.append(PlannedAttempt(ProviderRole.REGIONAL, AttemptReason.LAST_RESORT))
    return plan


def default_providers(
    client: httpx.AsyncClient, settings: Settings
) -> dict[ProviderRole, QuoteProvider]:
    providers = (
        BrapiProvider(client, settings),
        FinnhubProvider(client, settings),
        AlphaVantageProvider(client, settings),
    )
    return {provider.role: provider for provider in providers}


class QuoteOrchestrator:
    """Walks the attempt plan until one provider returns real data."""

    def __init__(
        self,
        providers: Mapping[ProviderRole, QuoteProvider],
        credentials: Mapping[ProviderRole, str],
        cache: QuoteCache,
        limiter: SlidingWindowRateLimiter,
        attempt_timeout: float,
    ) -> None:
        self._providers = dict(providers)
        self._credentials = dict(credentials)
        self._cache = cache
        self._limiter = limiter
        self._attempt_timeout = attempt_timeout
        self._inflight: dict[str, asyncio.Task[Quote]] = {}

    def configured_roles(self) -> set[ProviderRole]:
        return {role for role in self._credentials if role in self._providers}

    def plan_for(self, symbol: str) -> list[PlannedAttempt]:
        return build_attempt_plan(classify_symbol(symbol), self.configured_roles())

    async def get_quote(self, symbol: str, force_refresh: bool = False) -> Quote:
        normalized = normalize_symbol(symbol)
        if not force_refresh:
            cached = self._cache.get(normalized)
            if cached is not None:
                logger.debug(
                    "cache hit for %s (%.1fs old)", normalized, self._cache.age(normalized) or 0.0
                )
                return cached

        # Concurrent lookups of one symbol share a single provider walk.
        task = self._inflight.get(normalized)
        if task is None:
            task = asyncio.ensure_future(self._fetch(normalized))
            self._inflight[normalized] = task
            task.add_done_callback(lambda done: self._forget(normalized, done))
        return await asyncio.shield(task)

    def _forget(self, symbol: str, task: asyncio.Task[Quote]) -> None:
        if self._inflight.get(symbol) is task:
            del self._inflight[symbol]
        # Mark the outcome as retrieved when every caller has gone away.
        if not task.cancelled():
            task.exception()

    async def _fetch(self, symbol: str) -> Quote:
        plan = self.plan_for(symbol)
        attempted: list[str] = []
        for attempt in plan:
            provider = self._providers[attempt.role]
            if provider.quota_limited and not self._limiter.try_acquire():
                logger.info("%s skipped for %s: call budget exhausted", provider.name, symbol)
                continue
            attempted.append(provider.name)
            logger.debug("trying %s for %s (%s)", provider.name, symbol, attempt.reason.value)
            quote = await self._attempt(provider, symbol, self._credentials[attempt.role])
            if quote is None:
                continue
            if not quote.is_real_data:
                logger.warning("%s returned placeholder data for %s; ignored", provider.name, symbol)
                continue
            self._cache.put(symbol, quote)
            logger.info("real data for %s from %s", symbol, provider.name)
            return quote

        logger.error(
            "no real data for %s; tried %s", symbol, ", ".join(attempted) or "no provider"
        )
        raise QuoteUnavailableError(symbol, attempted)

    async def _attempt(self, provider: QuoteProvider, symbol: str, credential: str) -> Quote | None:
        try:
            return await asyncio.wait_for(
                provider.fetch(symbol, credential), timeout=self._attempt_timeout
            )
        except asyncio.TimeoutError:
            logger.warning(
                "%s exceeded %.1fs for %s", provider.name, self._attempt_timeout, symbol
            )
            return None
