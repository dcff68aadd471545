"""Application configuration using pydantic-settings."""
from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/bookmarks.db",
        validation_alias="DATABASE_URL",
    )
    db_echo: bool = Field(default=False, validation_alias="DB_ECHO")

    # Token signing
    jwt_secret: str = Field(validation_alias="JWT_SECRET")
    token_ttl_seconds: int = Field(
        default=7 * 24 * 60 * 60, validation_alias="TOKEN_TTL_SECONDS",
    )

    # Default Access-Control-Allow-Origin when the request has no Origin header
    cors_origin: str = Field(default="*", validation_alias="CORS_ORIGIN")

    # Global rate limit, keyed by client IP
    rate_limit_requests: int = Field(default=100, validation_alias="RATE_LIMIT_REQUESTS")
    rate_limit_window_ms: int = Field(default=60_000, validation_alias="RATE_LIMIT_WINDOW_MS")

    # Field length limits
    max_title_length: int = Field(default=500, validation_alias="MAX_TITLE_LENGTH")
    max_url_length: int = Field(default=2000, validation_alias="MAX_URL_LENGTH")

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    host: str = Field(default="127.0.0.1", validation_alias="HOST")
    port: int = Field(default=8000, validation_alias="PORT")

    @model_validator(mode="after")
    def validate_secret_and_limits(self) -> "Settings":
        """Reject a blank signing secret and non-positive TTL or rate limit values."""
        if not self.jwt_secret.strip():
            raise ValueError("JWT_SECRET must not be blank")
        if self.token_ttl_seconds <= 0:
            raise ValueError("TOKEN_TTL_SECONDS must be positive")
        if self.rate_limit_requests <= 0 or self.rate_limit_window_ms <= 0:
            raise ValueError("RATE_LIMIT_REQUESTS and RATE_LIMIT_WINDOW_MS must be positive")
        return self

    @property
    def is_sqlite(self) -> bool:
        """True when the configured database is SQLite."""
        return self.database_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
