"""Application settings using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="commentstore", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    environment: Literal["development", "staging", "production", "testing"] = Field(
        default="development", description="Environment name"
    )
    debug: bool = Field(default=True, description="Debug mode")

    # API Server
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="DEBUG", description="Log level"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", description="Log format"
    )
    log_include_caller_info: bool = Field(
        default=True, description="Include caller info"
    )
    log_dir: str = Field(default="logs", description="Directory for log files")
    log_file_max_bytes: int = Field(
        default=10 * 1024 * 1024, description="Max size per log file (10MB default)"
    )
    log_file_backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )
    log_requests: bool = Field(
        default=True, description="Log HTTP request start/finish"
    )
    log_exclude_paths: list[str] = Field(
        default=["/health", "/health/live", "/health/ready"],
        description="Paths to exclude from request logging",
    )

    # Object storage
    storage_backend: Literal["memory", "gcs"] = Field(
        default="memory", description="Object store implementation"
    )
    storage_bucket: str = Field(
        default="comments", description="Bucket holding comment objects"
    )
    storage_prefix: str = Field(
        default="", description="Key prefix joined before every object key"
    )
    storage_gzip: bool = Field(
        default=False, description="Gzip object payloads before storing them"
    )
    gcs_project: str | None = Field(
        default=None, description="Google Cloud project for the storage client"
    )

    # Post existence oracle
    posts_backend: Literal["static", "http"] = Field(
        default="static", description="Post existence implementation"
    )
    posts_known: list[str] = Field(
        default=[], description="Post IDs accepted by the static post store"
    )
    posts_base_url: str | None = Field(
        default=None,
        description="Base URL of the blog; posts are probed at {base}/{post}",
    )
    posts_timeout_seconds: float = Field(
        default=5.0, description="Timeout for post existence requests"
    )

    # Comment limits (web layer)
    comment_body_min_length: int = Field(
        default=8, description="Minimum comment body length"
    )
    comment_body_max_length: int = Field(
        default=2056, description="Maximum comment body length"
    )

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == "testing"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
