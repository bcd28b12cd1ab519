"""Application configuration using pydantic-settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application settings
    app_name: str = Field(default="fintrack", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="text", description="Log format (text or json)")

    # API settings
    api_prefix: str = Field(default="/api/v1", description="API route prefix")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Allowed CORS origins",
    )

    # Gemini AI configuration
    gemini_api_key: str = Field(
        default="",
        description="Google Gemini API key (empty disables AI extraction)",
    )
    gemini_model: str = Field(
        default="gemini-flash-lite-latest",
        description="Gemini model to use",
    )
    gemini_temperature: float = Field(
        default=0.1,
        description="Temperature for Gemini (lower for consistency)",
    )
    gemini_max_output_tokens: int = Field(
        default=4096,
        description="Maximum tokens for Gemini responses",
    )

    # Extraction behaviour
    offline_fallback_enabled: bool = Field(
        default=True,
        description="Fall back to the offline heuristic when AI extraction fails",
    )

    model_config = SettingsConfigDict(
        env_file=[".env", ".env.local"],  # Local overrides
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def ai_enabled(self) -> bool:
        """Whether an AI provider is configured."""
        return bool(self.gemini_api_key.strip())


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
