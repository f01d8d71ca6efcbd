"""Application settings and configuration."""
import json
from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.options import DEFAULT_HAZARDOUS_KEYWORDS


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Article Pipeline"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: str = "development"  # development, staging, production
    log_level: str = "INFO"
    log_json: bool = False

    # Anthropic (AI Content Generation)
    anthropic_api_key: Optional[str] = None
    anthropic_model: str = "claude-sonnet-4-20250514"
    anthropic_max_tokens: int = 8000
    anthropic_timeout: int = 300
    anthropic_temperature: float = 0.3

    # Quality gate defaults
    validation_min_total_words: int = 1000
    validation_min_section_words: int = 120
    validation_min_faqs: int = 2
    validation_min_internal_links: int = 2
    validation_hero_min_sentences: int = 2
    validation_hero_max_sentences: int = 4
    validation_require_end_cta: bool = True
    validation_require_safety_callouts: bool = True

    # Stored as str to prevent pydantic-settings auto-JSON-parse failures
    validation_hazardous_keywords: str = ",".join(DEFAULT_HAZARDOUS_KEYWORDS)

    @property
    def hazardous_keywords_list(self) -> list[str]:
        """Parse hazardous keywords into a lowercased list."""
        v = self.validation_hazardous_keywords.strip()
        if v.startswith("["):
            try:
                return [k.strip().lower() for k in json.loads(v) if k.strip()]
            except json.JSONDecodeError:
                pass
        return [k.strip().strip("'\"").lower() for k in v.split(",") if k.strip()]

    # Pipeline
    max_repair_attempts: int = 2  # hard cap of 2 is enforced by the repair dispatcher
    collaborator_timeout_seconds: float = 300.0  # 0 disables the per-call deadline
    batch_concurrency: int = 3
    batch_item_delay_seconds: float = 0.0
    style_cache_ttl_seconds: int = 3600

    @field_validator("max_repair_attempts", mode="before")
    @classmethod
    def non_negative_int(cls, v):
        if isinstance(v, str) and v.strip():
            v = int(v)
        if isinstance(v, int) and v < 0:
            raise ValueError("must be zero or greater")
        return v

    @field_validator("batch_concurrency", mode="before")
    @classmethod
    def positive_int(cls, v):
        if isinstance(v, str) and v.strip():
            v = int(v)
        if isinstance(v, int) and v < 1:
            raise ValueError("must be at least 1")
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.environment == "development"

    def validate_production_secrets(self) -> None:
        """Validate that critical API keys are configured.

        Called automatically by get_settings(). In production/staging the
        pipeline refuses to start without an Anthropic key, since the
        offline mock outputs are only meant for development and tests.
        """
        if self.environment in ("production", "staging"):
            if not self.anthropic_api_key:
                raise ValueError("ANTHROPIC_API_KEY is required in production!")
            if self.debug:
                raise ValueError("DEBUG must be False in production")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Automatically validates that production/staging deployments have
    proper secrets configured.
    """
    s = Settings()
    s.validate_production_secrets()
    return s


# Global settings instance
settings = get_settings()
