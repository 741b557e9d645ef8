"""Configuration settings for the GitHub PR bot."""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class GitHubApiConfig(BaseModel):
    """Configuration for GitHub API access.

    Controls the transport identity and the retry policy applied to
    every REST and GraphQL call.
    """

    base_url: str = Field(
        default="https://api.github.com",
        description="GitHub API base URL",
    )
    user_agent: str = Field(
        default="github-pr-bot",
        description="Fixed client identifier sent with every request",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Per-request timeout",
    )

    # Retry policy
    retry_on_502_attempts: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Retries for a request answered with 502 Bad Gateway",
    )
    retry_backoff_seconds: float = Field(
        default=2.0,
        ge=0.0,
        description="Backoff unit; the delay before retry N is unit * N",
    )

    # Pagination
    page_size: int = Field(
        default=100,
        ge=1,
        le=100,
        description="Page size for GraphQL searches and file pages",
    )


class RateLimitLogConfig(BaseModel):
    """Configuration for rate limit logging."""

    log_interval_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Window in which rate limit updates are coalesced into one log line",
    )


class LoggingConfig(BaseModel):
    """Configuration for logging behavior.

    Controls file logging, rotation, and output format.
    """

    log_file: str | None = Field(
        default=None,
        description="Optional path for file logging (enables rotation)",
    )
    rotation: str = Field(
        default="10 MB",
        description="When to rotate log file (e.g., '10 MB', '1 day')",
    )
    retention: str = Field(
        default="7 days",
        description="How long to keep rotated logs",
    )
    serialize: bool = Field(
        default=False,
        description="If True, output JSON format to file",
    )


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # --------------------------------------------------------------------------
    # GitHub API
    # --------------------------------------------------------------------------
    github_token: str = Field(
        default="",
        description="GitHub personal access token",
    )
    github_owner: str = Field(
        default="elastic",
        description="Owner of the repository the bot works on",
    )
    github_repo: str = Field(
        default="kibana",
        description="Name of the repository the bot works on",
    )
    github: GitHubApiConfig = Field(
        default_factory=GitHubApiConfig,
        description="GitHub transport and retry configuration",
    )

    # --------------------------------------------------------------------------
    # Application
    # --------------------------------------------------------------------------
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # --------------------------------------------------------------------------
    # Rate Limiting
    # --------------------------------------------------------------------------
    rate_limit: RateLimitLogConfig = Field(
        default_factory=RateLimitLogConfig,
        description="Rate limit logging configuration",
    )

    # --------------------------------------------------------------------------
    # Logging Configuration
    # --------------------------------------------------------------------------
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration (file output, rotation)",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
