"""Configuration settings for the Tailoring module.

Provides settings for the LLM provider, the rule set and instruction
compilation.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_RULES_DIR = Path(__file__).parent / "rules"


class TailoringConfig(BaseSettings):
    """Configuration for the tailoring system.

    Settings can be overridden via environment variables prefixed with TAILORING_.

    Example: TAILORING_LLM_PROVIDER=anthropic
    """

    model_config = SettingsConfigDict(
        env_prefix="TAILORING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # LLM settings
    llm_provider: str = Field(
        default="openai",
        description="LLM provider (openai, anthropic, azure, etc.)",
    )
    llm_model: str = Field(
        default="gpt-4o",
        description="LLM model name",
    )
    llm_api_key: str | None = Field(
        default=None,
        description="API key for LLM provider",
    )
    llm_base_url: str | None = Field(
        default=None,
        description="Base URL for OpenAI-compatible endpoints",
    )
    llm_max_retries: Annotated[int, Field(ge=0)] = Field(
        default=1,
        description="Maximum retry attempts for LLM calls",
    )
    llm_timeout: Annotated[float, Field(gt=0)] = Field(
        default=180.0,
        description="Timeout in seconds for LLM calls",
    )
    llm_reasoning_effort: str | None = Field(
        default=None,
        description="Reasoning effort hint passed through to LiteLLM",
    )

    # Rule set settings
    rules_dir: Path = Field(
        default=DEFAULT_RULES_DIR,
        description="Directory containing transformation rule YAML files",
    )
    max_condition_depth: Annotated[int, Field(ge=1)] = Field(
        default=8,
        description="Deepest condition tree accepted when loading rules",
    )

    # Instruction compilation settings
    max_keywords_per_bullet: Annotated[int, Field(ge=0)] = Field(
        default=2,
        description="Missing job keywords suggested per bullet",
    )
    why_fit_max_bullets: Annotated[int, Field(ge=0)] = Field(
        default=4,
        description="Maximum entries in the 'Why I'm the Right Fit' section",
    )

    # Token accounting
    pure_ai_token_estimate: Annotated[int, Field(ge=0)] = Field(
        default=12000,
        description="Estimated tokens a pure-AI tailoring run would use",
    )

    @field_validator("rules_dir", mode="before")
    @classmethod
    def convert_to_path(cls, v: str | Path) -> Path:
        """Convert string paths to Path objects."""
        if isinstance(v, str):
            return Path(v)
        return v


# Singleton instance
_tailoring_config: TailoringConfig | None = None


def get_tailoring_config() -> TailoringConfig:
    """Get the tailoring configuration singleton."""
    global _tailoring_config
    if _tailoring_config is None:
        _tailoring_config = TailoringConfig()
    return _tailoring_config


def reset_tailoring_config() -> None:
    """Reset the configuration singleton (useful for testing)."""
    global _tailoring_config
    _tailoring_config = None
