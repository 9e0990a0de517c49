"""Configuration settings for the Recruiter-Readiness scorer."""

from __future__ import annotations

from typing import Annotated

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

WEIGHT_TOLERANCE = 1e-6


class ScoringConfig(BaseSettings):
    """Recruiter-readiness scoring configuration settings.

    All settings have sensible defaults and can be overridden via
    environment variables with `READINESS_` prefix or a .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="READINESS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Dimension weights (must sum to 1.0)
    weight_uniqueness: Annotated[float, Field(ge=0.0, le=1.0)] = Field(
        default=0.20,
        description="Weight for the uniqueness dimension",
    )
    weight_impact: Annotated[float, Field(ge=0.0, le=1.0)] = Field(
        default=0.30,
        description="Weight for the impact dimension",
    )
    weight_context_translation: Annotated[float, Field(ge=0.0, le=1.0)] = Field(
        default=0.15,
        description="Weight for the U.S. context translation dimension",
    )
    weight_cultural_fit: Annotated[float, Field(ge=0.0, le=1.0)] = Field(
        default=0.10,
        description="Weight for the cultural fit dimension",
    )
    weight_customization: Annotated[float, Field(ge=0.0, le=1.0)] = Field(
        default=0.25,
        description="Weight for the customization dimension",
    )

    # Context translation credit
    well_known_company_credit: Annotated[float, Field(ge=0.0, le=100.0)] = Field(
        default=70.0,
        description="Raw context score when the company needs no translation",
    )

    # Suggestions
    max_suggestions: Annotated[int, Field(ge=1, le=5)] = Field(
        default=3,
        description="Maximum number of top suggestions",
    )

    @model_validator(mode="after")
    def validate_weights_sum_to_one(self) -> ScoringConfig:
        """Ensure dimension weights sum to 1.0 (within tolerance)."""
        weight_sum = sum(self.weights().values())
        if abs(weight_sum - 1.0) > WEIGHT_TOLERANCE:
            raise ValueError(
                "Readiness weights must sum to 1.0. "
                f"Got {weight_sum:.6f} "
                f"(uniqueness={self.weight_uniqueness}, impact={self.weight_impact}, "
                f"context_translation={self.weight_context_translation}, "
                f"cultural_fit={self.weight_cultural_fit}, "
                f"customization={self.weight_customization})."
            )
        return self

    def weights(self) -> dict[str, float]:
        """Dimension weights keyed by dimension name, in dimension order."""
        return {
            "uniqueness": self.weight_uniqueness,
            "impact": self.weight_impact,
            "context_translation": self.weight_context_translation,
            "cultural_fit": self.weight_cultural_fit,
            "customization": self.weight_customization,
        }


# Singleton instance for easy import
_scoring_config: ScoringConfig | None = None


def get_scoring_config() -> ScoringConfig:
    """Get the scoring configuration singleton."""
    global _scoring_config
    if _scoring_config is None:
        _scoring_config = ScoringConfig()
    return _scoring_config


def reset_scoring_config() -> None:
    """Reset the scoring configuration singleton (useful for testing)."""
    global _scoring_config
    _scoring_config = None
