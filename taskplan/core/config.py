"""Configuration management using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )

    # Anthropic API
    anthropic_api_key: SecretStr | None = Field(
        default=None,
        description="Anthropic API key, required only for live generation",
    )
    taskplan_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Model used to generate task decompositions",
    )
    taskplan_max_tokens: int = Field(
        default=8000,
        ge=256,
        description="Maximum tokens in a generated decomposition",
    )
    taskplan_input_cost_per_mtok: float = Field(
        default=3.0,
        ge=0.0,
        description="USD per million input tokens",
    )
    taskplan_output_cost_per_mtok: float = Field(
        default=15.0,
        ge=0.0,
        description="USD per million output tokens",
    )

    # Decomposer
    taskplan_task_dir: str = Field(
        default=".claude/tasks",
        description="Directory for task files",
    )
    taskplan_max_retries: int = Field(
        default=3,
        ge=0,
        description="Max generation attempts (accepted, not used)",
    )
    taskplan_validate_output: bool = Field(
        default=True,
        description="Validate parsed tasks before scheduling",
    )

    # Logging
    taskplan_log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    taskplan_debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    taskplan_log_file: str | None = Field(
        default=None,
        description="Optional rotating log file path",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings instance loaded from environment.

    Example:
        >>> settings = get_settings()
        >>> settings.taskplan_task_dir
        '.claude/tasks'
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
