"""
Configuration management for Trade Journal using Pydantic Settings.

Loads configuration from environment variables with type validation and sane defaults.
"""

from typing import List
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_env: str = Field(default="development", description="Environment: development, staging, production")
    debug: bool = Field(default=False, description="Debug mode")
    allowed_origins: str = Field(default="http://localhost:3000", description="CORS allowed origins (comma-separated)")

    # Database
    database_url: str = Field(default="sqlite:///./tradejournal.db", description="SQLAlchemy connection URL")

    # Hosted backend credentials (kept under the names the web client exports)
    backend_url: str = Field(
        default="",
        validation_alias=AliasChoices("NEXT_PUBLIC_SUPABASE_URL", "BACKEND_URL"),
        description="Base URL of the journal backend",
    )
    backend_anon_key: str = Field(
        default="",
        validation_alias=AliasChoices("NEXT_PUBLIC_SUPABASE_ANON_KEY", "BACKEND_ANON_KEY"),
        description="Public (anon) API key, JWT formatted",
    )
    backend_service_role_key: str = Field(
        default="",
        validation_alias=AliasChoices("SUPABASE_SERVICE_ROLE_KEY", "BACKEND_SERVICE_ROLE_KEY"),
        description="Service role key, JWT formatted. Server side only.",
    )

    # Rate Limiting
    rate_limit_enabled: bool = Field(default=True, description="Enable rate limiting on auth endpoints")

    # Logging
    log_level: str = Field(default="INFO", description="Log level: DEBUG, INFO, WARNING, ERROR")
    log_format: str = Field(default="json", description="Log format: json or text")
    log_file: str = Field(default="", description="Log file path (empty disables file logging)")

    @field_validator("allowed_origins")
    @classmethod
    def parse_allowed_origins(cls, v: str) -> str:
        """Normalise whitespace around comma-separated origins."""
        return ",".join(origin.strip() for origin in v.split(",") if origin.strip())

    @property
    def origins(self) -> List[str]:
        return self.allowed_origins.split(",") if self.allowed_origins else []

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.app_env == "development"


# Global settings instance
settings = Settings()
