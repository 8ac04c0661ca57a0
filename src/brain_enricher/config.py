"""Application configuration via pydantic-settings.

Settings are read once by the entry points (``app`` lifespan, ``worker``)
and handed to every component explicitly.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Storage ("memory://" selects the in-process store)
    database_url: str = "sqlite+aiosqlite:///./brain.db"

    # Enrichment scheduler
    enrichment_enabled: bool = True
    enrichment_poll_interval_seconds: float = 30.0
    enrichment_max_retries: int = 3
    enrichment_retry_delay_seconds: float = 60.0
    enrichment_retry_backoff: Literal["fixed", "exponential"] = "fixed"
    enrichment_batch_size: int = 5
    enrichment_concurrency: int = 3
    enrichment_extraction_timeout_seconds: float = 60.0
    enrichment_stale_after_seconds: float = 600.0

    # Outbound fetch
    fetch_timeout_seconds: float = 15.0
    fetch_max_body_bytes: int = 5 * 1024 * 1024
    fetch_max_redirects: int = 5
    fetch_user_agent: str = "Mozilla/5.0 (compatible; BrainEnricher/1.0)"

    # Provider feature flags (the generic link provider is always on)
    provider_youtube_enabled: bool = True
    provider_twitter_enabled: bool = True
    provider_instagram_enabled: bool = True
    provider_github_enabled: bool = True
    provider_medium_enabled: bool = True
    provider_notion_enabled: bool = True

    # Provider credentials
    youtube_api_key: str = ""
    youtube_transcript_language: str = "en"
    github_token: str = ""

    # Scheduler-triggered endpoints
    scheduler_secret: str = ""

    # App
    environment: str = "development"
    log_level: str = "INFO"
    port: int = 8080

    def provider_enabled(self, provider_type: str) -> bool:
        """Return the feature flag for a provider type. Unknown types are enabled."""
        return bool(getattr(self, f"provider_{provider_type}_enabled", True))


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings. Lazy initialization to avoid import-time errors."""
    return Settings()
