from __future__ import annotations

import datetime
import time
from collections.abc import Mapping

import httpx
from fastapi import Request

from app.cache import Clock, QuoteCache
from app.config.settings import Settings
from app.jobs.quote_batch import fetch_quotes
from app.providers.base import ProviderRole, QuoteProvider
from app.providers.credentials import credential_sources, resolve_credentials
from app.providers.selector import QuoteOrchestrator, default_providers
from app.rate_limit import SlidingWindowRateLimiter
from app.schemas.health import HealthStatus, ProviderStatus
from app.schemas.quote import Quote


class QuoteService:
    """Entry point for quotes: owns the cache, the call budget and the providers.

    Credentials are resolved once, when the service is built.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        providers: Mapping[ProviderRole, QuoteProvider] | None = None,
        credentials: Mapping[ProviderRole, str] | None = None,
        client: httpx.AsyncClient | None = None,
        clock: Clock = time.monotonic,
    ) -> None:
        self.settings = settings
        self._client: httpx.AsyncClient | None = None
        self._owns_client = False
        if providers is None:
            if client is None:
                client = httpx.AsyncClient(
                    timeout=settings.provider_timeout_seconds,
                    headers={"User-Agent": settings.user_agent},
                )
                self._owns_client = True
            self._client = client
            providers = default_providers(client, settings)
        self.providers = dict(providers)
        if credentials is None:
            self.credentials = resolve_credentials(settings.providers)
            self.credential_sources = credential_sources(self.credentials)
        else:
            self.credentials = dict(credentials)
            self.credential_sources = {role: "explicit" for role in self.credentials}

        self.cache = QuoteCache(settings.quote_cache_ttl_seconds, clock=clock)
        self.limiter = SlidingWindowRateLimiter(
            settings.providers.alpha_vantage_calls_per_minute,
            window_seconds=settings.rate_limit_window_seconds,
            clock=clock,
        )
        self.orchestrator = QuoteOrchestrator(
            self.providers,
            self.credentials,
            self.cache,
            self.limiter,
            attempt_timeout=settings.provider_timeout_seconds,
        )

    async def get_quote(self, symbol: str, force_refresh: bool = False) -> Quote:
        return await self.orchestrator.get_quote(symbol, force_refresh=force_refresh)

    async def get_quotes(self, symbols: list[str], force_refresh: bool = False) -> list[Quote]:
        return await fetch_quotes(self.orchestrator, symbols, force_refresh=force_refresh)

    def health(self) -> HealthStatus:
        configured = self.orchestrator.configured_roles()
        providers: dict[str, ProviderStatus] = {}
        for provider in sorted(self.providers.values(), key=lambda item: item.priority):
            providers[provider.name] = ProviderStatus(
                configured=provider.role in configured,
                priority=provider.priority,
                quota_limited=provider.quota_limited,
                description=provider.description,
                source=self.credential_sources.get(provider.role, "none"),
                key_length=len(self.credentials.get(provider.role, "")),
            )

        ready = bool(configured)
        if ready:
            message = f"{len(configured)} provider(s) configured; real data available"
        else:
            message = "No provider configured; add API keys to the environment or secrets"
        return HealthStatus(
            status="ok" if ready else "warning",
            ready=ready,
            message=message,
            timestamp=datetime.datetime.now(datetime.UTC),
            cache_entries=len(self.cache),
            cache_fresh_entries=self.cache.fresh_count(),
            cache_ttl_seconds=self.cache.ttl_seconds,
            rate_limit_remaining=self.limiter.remaining(),
            rate_limit_total=self.limiter.limit,
            providers=providers,
        )

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()


def get_quote_service(request: Request) -> QuoteService:
    """FastAPI dependency returning the service built at startup."""
    return request.app.state.quote_service
