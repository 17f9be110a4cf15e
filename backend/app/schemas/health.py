import datetime

from pydantic import BaseModel, Field


class ProviderStatus(BaseModel):
    configured: bool
    priority: int
    quota_limited: bool = False
    description: str = ""
    source: str = "none"
    key_length: int = 0


class HealthStatus(BaseModel):
    status: str
    ready: bool
    message: str
    timestamp: datetime.datetime
    cache_entries: int
    cache_fresh_entries: int
    cache_ttl_seconds: float
    rate_limit_remaining: int
    rate_limit_total: int
    providers: dict[str, ProviderStatus] = Field(default_factory=dict)
