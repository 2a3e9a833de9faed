from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GatewaySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    redis_url: str = Field(default="redis://localhost:6379/0", alias="REDIS_URL")
    cache_namespace: str = Field(default="valuation_cache", alias="CACHE_NAMESPACE")
    insight_cache_ttl_seconds: int = Field(default=86_400, alias="INSIGHT_CACHE_TTL_SECONDS")

    # Summary pipeline
    max_records: int = Field(default=50, alias="MAX_RECORDS")
    max_ledger_bytes: int = Field(default=5_000_000, alias="MAX_LEDGER_BYTES")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="json", alias="LOG_FORMAT")
