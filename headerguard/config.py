"""Application configuration using pydantic-settings for 12-factor app compliance."""

from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    environment: str = Field(default="development")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")
    api_prefix: str = Field(default="/api/v1")
    allowed_hosts: list[str] = Field(default=["localhost", "127.0.0.1"])

    # Header fetching
    http_timeout: int = Field(default=10, description="Header fetch timeout (s)")
    max_redirects: int = Field(default=5, description="Redirects followed per fetch")
    max_retries: int = Field(default=3, description="Fetch attempts before giving up")
    user_agent: str = Field(
        default="HeaderGuard/1.0 (+https://github.com/headerguard/headerguard)"
    )

    # GitHub patch publisher
    github_api_url: str = Field(default="https://api.github.com")
    github_timeout: int = Field(default=30, description="GitHub API timeout (s)")

    # Rate Limiting
    rate_limit_requests_per_minute: int = Field(default=10)
    github_rate_limit_requests: int = Field(default=5)
    github_rate_limit_window: int = Field(default=300)

    # Caching
    cache_ttl_seconds: int = Field(default=3600)
    cache_max_entries: int = Field(default=1024)

    # Observability
    metrics_endpoint: str = Field(default="/metrics")

    @field_validator("allowed_hosts", mode="before")
    @classmethod
    def parse_allowed_hosts(cls, v: Any) -> list[str]:
        """Parse allowed hosts from string or list."""
        if isinstance(v, str):
            # Handle JSON-like string format
            v = v.strip('[]"')
            return [host.strip(" \"'") for host in v.split(",") if host.strip()]
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()


# Global settings instance
settings = Settings()
