"""Runtime configuration for the InsightForge services."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed configuration model."""

    model_config = SettingsConfigDict(
        env_prefix="insightforge_",
        env_file=".env",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    environment: Literal["dev", "test", "prod"] = "dev"

    # External generative-text service
    cloudflare_account_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("insightforge_cloudflare_account_id", "cloudflare_account_id"),
    )
    cloudflare_api_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("insightforge_cloudflare_api_token", "cloudflare_api_token"),
    )
    ai_base_url_template: str = "https://api.cloudflare.com/client/v4/accounts/{account_id}/ai/run/{model}"
    text_model: str = "@cf/meta/llama-3.1-8b-instruct"
    request_timeout_seconds: float = 30.0

    summary_max_tokens: int = 200
    summary_temperature: float = 0.3
    extraction_max_tokens: int = 1500
    extraction_temperature: float = 0.2

    # Pipeline tunables
    chunk_size: int = 3500
    max_chunks: int = 2
    merge_conflict_policy: Literal["keep_first", "prefer_source"] = "keep_first"
    summary_input_chars: int = 2000
    min_words: int = 5
    max_characters: int = 50_000
    field_max_depth: int = 3

    # CORS
    cors_allow_origins: tuple[str, ...] = ()
    cors_allow_credentials: bool = False
    cors_allow_methods: tuple[str, ...] = ("GET", "POST", "OPTIONS")
    cors_allow_headers: tuple[str, ...] = ("*",)

    # Security
    api_key: str | None = None  # if set, required in X-API-Key header
    rate_limit_requests: int = 60  # per window per client
    rate_limit_window_seconds: int = 60

    @property
    def is_test(self) -> bool:
        return self.environment == "test"

    @property
    def has_credentials(self) -> bool:
        return bool(self.cloudflare_account_id and self.cloudflare_api_token)


@lru_cache(maxsize=1)
def _cached_settings() -> Settings:
    return Settings()


def get_settings(override: Optional[dict[str, object]] = None) -> Settings:
    """Return settings, optionally overriding values without mutating cache."""

    if override:
        return Settings(**override)
    return _cached_settings()
