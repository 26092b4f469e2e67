"""Application settings and configuration.

This module defines all configuration options for the Campus Mood service.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files. List
    values (``ALLOWED_EMAIL_DOMAINS``, ``CORS_ORIGINS``) are given as JSON arrays.
    """

    # Application metadata
    app_name: str = Field(default="Campus Mood", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    debug: bool = Field(default=False, alias="DEBUG")

    # Database configuration
    database_url: str = Field(
        default="sqlite+aiosqlite:///./campus_mood.db",
        alias="DATABASE_URL",
    )
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Identity provider tokens
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 30,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )
    # Empty list means every domain is accepted (development only).
    allowed_email_domains: list[str] = Field(default=[], alias="ALLOWED_EMAIL_DOMAINS")
    inactive_days_limit: int = Field(default=7, alias="INACTIVE_DAYS_LIMIT")

    # Posting rules
    daily_post_limit: int = Field(default=10, alias="DAILY_POST_LIMIT")
    max_text_length: int = Field(default=100, alias="MAX_TEXT_LENGTH")
    posts_per_page: int = Field(default=20, alias="POSTS_PER_PAGE")
    post_retention_days: int = Field(default=7, alias="POST_RETENTION_DAYS")
    calendar_timezone: str | None = Field(default=None, alias="CALENDAR_TIMEZONE")

    # Reaction batching
    reaction_batch_interval_seconds: float = Field(
        default=30.0,
        alias="REACTION_BATCH_INTERVAL_SECONDS",
    )

    # Retention sweep
    cleanup_interval_seconds: float = Field(default=3600.0, alias="CLEANUP_INTERVAL_SECONDS")
    cleanup_batch_size: int = Field(default=100, alias="CLEANUP_BATCH_SIZE")
    maintenance_enabled: bool = Field(default=True, alias="MAINTENANCE_ENABLED")
    create_tables_on_startup: bool = Field(default=True, alias="CREATE_TABLES_ON_STARTUP")

    # Backing store quotas (free tier)
    daily_read_limit: int = Field(default=50_000, alias="DAILY_READ_LIMIT")
    daily_write_limit: int = Field(default=20_000, alias="DAILY_WRITE_LIMIT")
    usage_warning_threshold: float = Field(default=0.8, alias="USAGE_WARNING_THRESHOLD")
    usage_critical_threshold: float = Field(default=0.95, alias="USAGE_CRITICAL_THRESHOLD")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
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
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides.

        Returns:
            The active database URL (test database if in testing mode, otherwise production)
        """
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def dev_mode_email_policy(self) -> bool:
        """Return True when no email domain allow-list is configured."""
        return not self.allowed_email_domains


settings = Settings()  # type: ignore[call-arg]
