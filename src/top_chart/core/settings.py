"""Application settings and configuration.

This module defines all configuration options for the Top Chart application.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Instances are frozen: the voter hash salt and admin key are process-wide
    configuration and must not change at runtime. Components that need them
    receive the values at construction.
    """

    # Application metadata
    app_name: str = Field(default="Top Chart", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./top_chart.db", alias="DATABASE_URL")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Voter identity and admin access
    voter_hash_salt: str = Field(default="change-me", alias="VOTER_HASH_SALT")
    admin_api_key: str = Field(default="change-me", alias="ADMIN_API_KEY")
    # Use the first X-Forwarded-For entry as the client address (behind a proxy).
    trust_forwarded_for: bool = Field(default=True, alias="TRUST_FORWARDED_FOR")

    # Optional captcha for public submissions ("hcaptcha" or "recaptcha")
    captcha_provider: str = Field(default="", alias="CAPTCHA_PROVIDER")
    captcha_secret: str = Field(default="", alias="CAPTCHA_SECRET")
    captcha_timeout_seconds: float = Field(default=5.0, alias="CAPTCHA_TIMEOUT_SECONDS")

    # Live ranking fan-out
    broadcast_queue_size: int = Field(default=4, alias="BROADCAST_QUEUE_SIZE")
    rank_reconcile_interval_seconds: float = Field(
        default=30.0,
        alias="RANK_RECONCILE_INTERVAL_SECONDS",
    )

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["http://localhost:5173"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        frozen=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def captcha_enabled(self) -> bool:
        """Return True when both a captcha provider and secret are configured."""
        return bool(self.captcha_provider and self.captcha_secret)


settings = Settings()
