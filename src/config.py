"""Configuration management for the restaurant operations engine."""

from decimal import Decimal
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Anthropic API Configuration (assistant is disabled without a key)
    anthropic_api_key: str | None = Field(default=None, description="Anthropic API key")
    anthropic_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Claude model to use",
    )

    # Storage Configuration
    storage_backend: Literal["memory", "redis"] = Field(
        default="memory", description="Entity store backend"
    )
    redis_url: str = Field(default="redis://localhost:6379/0", description="Redis URL")
    redis_key_prefix: str = Field(default="restaurant", description="Redis key namespace")
    redis_lock_timeout: float = Field(
        default=10.0, description="Max seconds a mutation may hold the store lock"
    )

    # API Configuration
    api_port: int = Field(default=8000, description="API server port")
    api_host: str = Field(default="0.0.0.0", description="API server host")

    # Environment
    environment: Literal["development", "staging", "production"] = Field(
        default="development"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["json", "text"] = Field(default="json", description="Log format")

    # Assistant Configuration
    max_retries: int = Field(default=3, description="Max retries for LLM calls")
    retry_delay: float = Field(default=1.0, description="Initial retry delay in seconds")
    max_tokens: int = Field(default=1024, description="Max tokens for LLM responses")
    max_conversation_length: int = Field(
        default=20, description="Messages of history sent to the assistant"
    )
    max_tool_rounds: int = Field(
        default=3, description="Tool call round trips allowed per assistant turn"
    )

    # Funds Settings
    initial_operating_funds: Decimal = Field(
        default=Decimal("5000.00"), description="Operating budget on first seed"
    )
    funds_critical_threshold: Decimal = Field(
        default=Decimal("1000.00"), description="Funds below this are critical"
    )
    addon_surcharge: Decimal = Field(
        default=Decimal("2.00"), description="Flat price per added ingredient"
    )

    # Inventory Settings
    alert_dedup_window: int = Field(
        default=5, description="Recent log entries checked before re-alerting"
    )
    max_log_entries: int = Field(default=500, description="Activity log retention")

    # Order Analysis Settings
    batch_size: int = Field(default=10, description="Orders per batch analysis")
    max_insights: int = Field(default=5, description="Insights kept in the feed")

    # Rating / Forecast Settings
    high_rating_cutoff: int = Field(
        default=4, description="Ratings at or above this raise safety thresholds"
    )
    threshold_boost_factor: float = Field(
        default=1.05, description="Multiplier applied to thresholds on high ratings"
    )
    popular_rating: float = Field(default=4.5, description="Rating that marks a dish popular")
    popular_rating_count: int = Field(
        default=100, description="Rating count above which a dish is popular"
    )
    forecast_multiplier: float = Field(
        default=2.5, description="Suggested stock as a multiple of threshold"
    )
    chef_raise_rating: float = Field(default=4.6, description="Chef rating for a raise")
    chef_raise_sales: Decimal = Field(
        default=Decimal("2000"), description="Chef sales estimate for a raise"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v_upper


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
