"""Application configuration.

Uses pydantic-settings for environment variable support.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables.
    Example: IFC_FLOW_LOG_LEVEL, IFC_FLOW_MAX_CONCURRENCY
    """

    model_config = SettingsConfigDict(
        env_prefix="IFC_FLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Application
    # =========================================================================
    app_name: str = Field(default="ifc_flow", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Environment name",
    )

    # =========================================================================
    # Execution
    # =========================================================================
    max_concurrency: int = Field(
        default=4,
        ge=1,
        le=64,
        description="Maximum number of node invocations running at once",
    )
    node_timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Optional per-node timeout; unset means no timeout",
    )

    # =========================================================================
    # IFC Import / Export
    # =========================================================================
    max_file_size_mb: int = Field(
        default=500,
        ge=10,
        le=2000,
        description="Maximum IFC file size in MB",
    )
    upload_dir: str = Field(
        default="/tmp/ifc_flow_uploads",
        description="Directory for IFC file uploads",
    )
    export_dir: str = Field(
        default="/tmp/ifc_flow_exports",
        description="Directory for native export payloads written to disk",
    )

    # =========================================================================
    # REST API
    # =========================================================================
    api_host: str = Field(default="127.0.0.1", description="REST API bind address")
    api_port: int = Field(default=8080, ge=1, le=65535, description="REST API port")

    # =========================================================================
    # Logging
    # =========================================================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format",
    )
    log_file: str | None = Field(
        default=None,
        description="Optional log file path",
    )

    # =========================================================================
    # Validators
    # =========================================================================
    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept lower-case level names."""
        if isinstance(v, str):
            return v.upper()
        return v

    @property
    def max_file_size_bytes(self) -> int:
        """Maximum upload size in bytes."""
        return self.max_file_size_mb * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()
