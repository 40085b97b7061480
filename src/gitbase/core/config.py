"""Configuration management for GitBase.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. Connection parameters for the remote
content repository are the only configuration the store needs; everything
else has working defaults.
"""

from functools import lru_cache
from typing import TYPE_CHECKING, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from gitbase.domain.services.retry_policy import RetryPolicy

DEFAULT_SEED_COLLECTIONS = [
    "users",
    "websites",
    "pages",
    "blocks",
    "blog_posts",
    "products",
    "faqs",
    "customers",
    "forms",
    "form_submissions",
    "invoices",
    "chat_conversations",
    "email_campaigns",
]


class Settings(BaseSettings):
    """Application configuration settings.

    Settings are loaded from environment variables prefixed with
    ``GITBASE_`` and from an optional .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="GITBASE_",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "testing"] = "development"

    # Remote content repository
    github_owner: str = ""
    github_repo: str = ""
    github_token: str = Field(default="", description="Token used for the Contents API")
    github_branch: str = "main"
    github_api_url: str = "https://api.github.com"
    github_timeout_seconds: float = 30.0

    # Collection layout
    base_path: str = "db"
    file_extension: str = "json"
    seed_collections: list[str] = Field(default_factory=lambda: list(DEFAULT_SEED_COLLECTIONS))

    # Cache and write retry
    cache_ttl_seconds: float = 30
    write_max_attempts: int = 3
    write_backoff_seconds: float = 0.5

    # Sessions
    session_ttl_hours: int = 24
    enforce_session_expiry: bool = False

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    @field_validator("seed_collections", mode="before")
    @classmethod
    def parse_seed_collections(cls, v: str | list[str]) -> list[str]:
        """Parse seed collections from comma-separated string or list."""
        if isinstance(v, str):
            return [name.strip() for name in v.split(",") if name.strip()]
        return v

    @field_validator("base_path")
    @classmethod
    def normalize_base_path(cls, v: str) -> str:
        return v.strip("/")

    @field_validator("file_extension")
    @classmethod
    def normalize_file_extension(cls, v: str) -> str:
        return v.lstrip(".")

    @field_validator("write_max_attempts")
    @classmethod
    def validate_write_max_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("write_max_attempts must be at least 1")
        return v

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == "testing"

    def retry_policy(self) -> "RetryPolicy":
        """Build the write retry policy from the configured values."""
        from gitbase.domain.services.retry_policy import RetryPolicy

        return RetryPolicy(
            max_attempts=self.write_max_attempts,
            base_delay=self.write_backoff_seconds,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Cached application settings instance.
    """
    return Settings()
