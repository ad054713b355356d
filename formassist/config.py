"""
Configuration management for FormAssist.

Loads configuration from environment variables with support for .env files.
Uses Pydantic Settings for validation and type coercion.

Library classes never read these settings on their own; only the
``from_settings`` factories and the CLI/API shells do.
"""

import os
from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SUPPORTED_MODELS = ["gpt-3.5-turbo", "gpt-4", "gpt-4o"]


def _env_file() -> str:
    return os.environ.get("ENV_FILE", ".env")


class TableApiConfig(BaseSettings):
    """Connection settings for the form platform's table REST API."""

    model_config = SettingsConfigDict(
        env_prefix="TABLE_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    base_url: str = Field(default="", description="Host base URL, without /api/v1")
    token: str | None = Field(default=None, description="Bearer token for the table API")
    timeout: float = Field(default=60.0, description="HTTP timeout in seconds")

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.strip().rstrip("/")

    def is_configured(self) -> bool:
        return bool(self.base_url)


class LLMConfig(BaseSettings):
    """Chat-completion endpoint settings."""

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        populate_by_name=True,
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("LLM_API_KEY", "OPENAI_API_KEY"),
        description="API key for the completion endpoint",
    )
    api_base: str = Field(
        default="https://api.openai.com/v1",
        validation_alias=AliasChoices("LLM_API_BASE", "OPENAI_API_BASE"),
        description="Completion API base URL",
    )
    default_model: str = Field(default="gpt-3.5-turbo", description="Model used when none is given")
    supported_models: str = Field(
        default=",".join(DEFAULT_SUPPORTED_MODELS),
        description="Comma-separated models a caller may select",
    )
    timeout: float = Field(default=60.0, description="HTTP timeout in seconds")

    @field_validator("api_base")
    @classmethod
    def normalize_api_base(cls, v: str) -> str:
        return v.strip().rstrip("/")

    @property
    def models(self) -> list[str]:
        return [m.strip() for m in self.supported_models.split(",") if m.strip()]

    def resolve_model(self, model: str | None) -> str:
        return (model or "").strip() or self.default_model

    def is_supported(self, model: str) -> bool:
        return model in self.models


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Table API settings use the TABLE_API_* prefix, LLM settings LLM_*.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    table_api: TableApiConfig = Field(default_factory=TableApiConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)

    # JSON array of table references, e.g. [{"tableName": "Orders", "alias": "o"}]
    default_table_references: str = Field(
        default="[]", description="Tables loaded when a caller declares none"
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: str | None = Field(default=None, description="Log file path")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return upper_v


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application settings instance
    """
    env_file = _env_file()
    return Settings(
        _env_file=env_file,
        table_api=TableApiConfig(_env_file=env_file),
        llm=LLMConfig(_env_file=env_file),
    )


def load_settings(env_file: str | Path | None = None) -> Settings:
    """
    Load settings from a specific .env file.

    Args:
        env_file: Path to .env file (optional)

    Returns:
        Settings: Application settings instance
    """
    if env_file:
        os.environ["ENV_FILE"] = str(env_file)
    # Clear cache to reload
    get_settings.cache_clear()
    return get_settings()
