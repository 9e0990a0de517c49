"""Data models for the Recruiter-Readiness scorer."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

ReadinessLabel = Literal["needs_work", "getting_there", "good", "strong", "exceptional"]
DimensionName = Literal[
    "uniqueness", "impact", "context_translation", "cultural_fit", "customization"
]
SuggestionImpact = Literal["high", "medium", "low"]

# Fixed dimension order; ties in suggestion ranking follow it.
DIMENSION_ORDER: tuple[DimensionName, ...] = (
    "uniqueness",
    "impact",
    "context_translation",
    "cultural_fit",
    "customization",
)


class DimensionScore(BaseModel):
    """Score for one readiness dimension."""

    model_config = ConfigDict(frozen=True)

    raw: float = Field(..., ge=0, le=100, description="Raw score (0-100)")
    weighted: float = Field(..., ge=0, description="raw x weight")
    weight: float = Field(..., ge=0, le=1, description="Dimension weight")
    label: ReadinessLabel = Field(..., description="Band of the raw score")
    color: str = Field(..., description="Display color for the raw score")
    suggestions: list[str] = Field(default_factory=list)

    @property
    def potential_gain(self) -> float:
        """Composite points available if this dimension reached 100."""
        return (100 - self.raw) * self.weight


class ReadinessDimensions(BaseModel):
    """The five readiness dimensions."""

    model_config = ConfigDict(frozen=True)

    uniqueness: DimensionScore
    impact: DimensionScore
    context_translation: DimensionScore
    cultural_fit: DimensionScore
    customization: DimensionScore

    def items(self) -> list[tuple[DimensionName, DimensionScore]]:
        """``(name, score)`` pairs in dimension order."""
        return [(name, getattr(self, name)) for name in DIMENSION_ORDER]


class Suggestion(BaseModel):
    """One actionable improvement, ranked by potential composite gain."""

    model_config = ConfigDict(frozen=True)

    dimension: DimensionName
    action: str
    impact: SuggestionImpact
    potential_gain: float = Field(..., ge=0)


class RecruiterReadinessScore(BaseModel):
    """Weighted composite across the five dimensions."""

    model_config = ConfigDict(frozen=True)

    composite: int = Field(..., ge=0, le=100, description="Composite score (0-100)")
    label: ReadinessLabel
    color: str
    dimensions: ReadinessDimensions
    top_suggestions: list[Suggestion] = Field(default_factory=list, max_length=5)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RecruiterReadinessScore:
        """Deserialize from dictionary."""
        return cls.model_validate(data)


class ScoreComparison(BaseModel):
    """Before/after comparison of two readiness scores."""

    model_config = ConfigDict(frozen=True)

    before: int
    after: int
    composite_delta: int
    dimension_deltas: dict[str, float] = Field(default_factory=dict)
    improved_dimensions: list[DimensionName] = Field(default_factory=list)
    regressed_dimensions: list[DimensionName] = Field(default_factory=list)

    @property
    def improved(self) -> bool:
        return self.composite_delta > 0
