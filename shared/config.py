"""
Type-safe configuration for the resource runtime using Pydantic Settings.

Settings are loaded from environment variables (prefix `RESOURCE_RUNTIME_`)
and an optional .env file.

Usage:
    from shared.config import config

    app = ResourceApp(config.app_name, registry)
"""
import logging

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RuntimeConfig(BaseSettings):
    """
    Central configuration for the resource runtime.

    Validated once at startup.
    """
    model_config = SettingsConfigDict(
        env_prefix="RESOURCE_RUNTIME_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # ============================================================================
    # Application
    # ============================================================================

    app_name: str = Field(default="resource-runtime", description="Name reported by the application facade")
    log_level: str = Field(default="INFO", description="Level for loggers created through shared.logger")

    # ============================================================================
    # HTTP adapter
    # ============================================================================

    api_prefix: str = Field(default="/api", description="Path prefix for the resource routes")
    redact_internal_errors: bool = Field(
        default=False,
        description="If True, internal errors are returned with a generic detail instead of the failure message",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level '{value}'")
        return level

    @field_validator("api_prefix")
    @classmethod
    def _normalize_api_prefix(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if value and not value.startswith("/"):
            value = f"/{value}"
        return value

    # ============================================================================
    # Computed Properties
    # ============================================================================

    @property
    def log_level_value(self) -> int:
        """Numeric logging level."""
        return logging.getLevelName(self.log_level)


# ============================================================================
# Global Config Instance
# ============================================================================

config = RuntimeConfig()
