"""Centralized configuration management for the Batch Operations MCP server.

This module provides a single source of truth for configuration including
logging, retry timing, server transport and metrics settings.
"""

from __future__ import annotations

from dotenv import load_dotenv
from pydantic import AliasChoices
from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Centralized settings for the Batch Operations MCP server."""

    # === Logging Configuration ===
    log_level: str = Field(
        default="INFO",
        validation_alias=AliasChoices("BATCH_OPS_LOG_LEVEL", "LOG_LEVEL"),
        description="Logging level",
    )
    log_file: str = Field(default="batch-operations.log", description="Batch operations log file")
    structured_logging: bool = Field(default=True, description="Enable structured JSON logging")

    # === Batch Engine Configuration ===
    retry_delay_ms: int = Field(default=1000, ge=0, description="Base unit of the linear retry backoff")
    analysis_max_concurrent: int = Field(
        default=5, ge=1, le=100, description="Default concurrency for batch_code_analysis"
    )

    # === HTTP SSE Server Configuration ===
    sse_host: str = Field(default="localhost", description="SSE server host")
    sse_port: int = Field(default=3001, description="SSE server port")

    # === Performance Configuration ===
    enable_metrics: bool = Field(default=False, description="Enable metrics collection")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
        "populate_by_name": True,
    }

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        """Accept lower-case level names."""
        return value.upper()


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance (singleton pattern)."""
    global _settings
    if _settings is None:
        load_dotenv()
        _settings = Settings()
    return _settings


def reset_settings():
    """Reset the global settings instance (primarily for testing)."""
    global _settings
    _settings = None
