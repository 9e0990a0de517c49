"""Configuration settings for the hybrid-tailor CLI."""

from pathlib import Path
from typing import Annotated, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """CLI settings loaded from environment variables or a .env file.

    Tailoring and scoring have their own settings classes
    (``TAILORING_*`` and ``READINESS_*``); these cover where runs are
    written and how they are logged.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Run artifacts
    output_dir: Path = Field(
        default=Path("./artifacts"),
        description="Root for run directories (<output_dir>/runs/<mode>_<timestamp>)",
    )
    json_indent: Annotated[int, Field(ge=0, le=8)] = Field(
        default=2,
        description="Indentation of the JSON artifacts written per run",
    )

    # Logging
    log_level: LogLevel = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    run_log: bool = Field(
        default=True,
        description="Also write log records to run.log in each run directory",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept log levels in any case."""
        return v.upper() if isinstance(v, str) else v


# Singleton instance for easy import
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the application settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset the settings singleton (useful for testing)."""
    global _settings
    _settings = None
