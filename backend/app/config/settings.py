from __future__ import annotations

import os
from typing import Dict, List

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


_SECRETS_DIR = os.environ.get("QUOTEDESK_SECRETS_DIR", "/run/secrets")


def _secrets_dir() -> str | None:
    return _SECRETS_DIR if os.path.isdir(_SECRETS_DIR) else None


class ProviderSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="QUOTEDESK_",
        env_file=("../.env", ".env"),
        env_file_encoding="utf-8",
        secrets_dir=_secrets_dir(),
        populate_by_name=True,
        extra="ignore",
    )

    brapi_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("QUOTEDESK_BRAPI_API_KEY", "BRAPI_API_KEY", "BRAPI"),
    )
    finnhub_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "QUOTEDESK_FINNHUB_API_KEY", "FINNHUB_API_KEY", "FINNHUB"
        ),
    )
    alpha_vantage_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "QUOTEDESK_ALPHA_VANTAGE_API_KEY", "ALPHA_VANTAGE_API_KEY", "ALPHAADVANTAGE"
        ),
    )

    brapi_base_url: str = "https://brapi.dev"
    finnhub_base_url: str = "https://finnhub.io"
    alpha_vantage_base_url: str = "https://www.alphavantage.co"

    # Alpha Vantage free tier.
    alpha_vantage_calls_per_minute: int = 5

    placeholder_tokens: List[str] = Field(default_factory=lambda: ["demo"])
    min_key_length: int = 8


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="QUOTEDESK_",
        env_file=("../.env", ".env"),
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    quote_cache_ttl_seconds: float = 60.0
    rate_limit_window_seconds: float = 60.0
    provider_timeout_seconds: float = 10.0
    user_agent: str = "quotedesk/0.1"
    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("LOG_LEVEL", "QUOTEDESK_LOG_LEVEL"),
    )

    company_names: Dict[str, str] = Field(
        default_factory=lambda: {
            "AAPL": "Apple Inc.",
            "MSFT": "Microsoft Corporation",
            "GOOGL": "Alphabet Inc.",
            "AMZN": "Amazon.com Inc.",
            "TSLA": "Tesla Inc.",
            "META": "Meta Platforms Inc.",
            "NVDA": "NVIDIA Corporation",
            "NFLX": "Netflix Inc.",
            "VALE3.SA": "Vale S.A.",
            "PETR4.SA": "Petrobras",
            "BBAS3": "Banco do Brasil",
            "ITUB4.SA": "Itaú Unibanco",
        }
    )

    providers: ProviderSettings = Field(default_factory=ProviderSettings)


settings = Settings()
