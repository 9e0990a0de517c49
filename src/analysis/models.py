"""Data models for the sub-analyses consumed by the tailoring pipeline.

Each sub-analysis (impact, uniqueness, context match, company research,
soft-skill evidence) is produced by an AI-backed analyzer and consumed here as
an immutable typed value. ``PreAnalysisResult`` bundles them for one tailoring
request.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

ImprovementLevel = Literal["none", "minor", "major", "transformed"]
Rarity = Literal["uncommon", "rare", "very_rare"]
Strength = Literal["weak", "moderate", "strong"]


class AnalysisSuggestion(BaseModel):
    """Free-form improvement suggestion returned by an analyzer."""

    model_config = ConfigDict(frozen=True)

    area: str = Field(..., description="Area of the résumé the suggestion covers")
    recommendation: str = Field(..., description="Recommended change")


# =============================================================================
# Impact
# =============================================================================


class ImpactBullet(BaseModel):
    """Impact analysis of a single bullet."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Bullet id in the analyzed résumé")
    experience_id: str = Field(..., description="Owning experience id")
    experience_title: str = Field(default="", description="Owning experience title")
    company_name: str = Field(default="", description="Owning experience company")
    original: str = Field(..., description="Original bullet text")
    improved: str = Field(default="", description="Suggested quantified rewrite")
    metrics: list[str] = Field(
        default_factory=list, description="Metrics suggested for this bullet"
    )
    improvement: ImprovementLevel = Field(
        ..., description="How much the bullet needed to change"
    )
    explanation: str = Field(default="", description="Why the change was suggested")


class MetricCategories(BaseModel):
    """Counts of quantified metrics by category."""

    model_config = ConfigDict(frozen=True)

    percentage: int = Field(default=0, ge=0)
    monetary: int = Field(default=0, ge=0)
    time: int = Field(default=0, ge=0)
    scale: int = Field(default=0, ge=0)
    other: int = Field(default=0, ge=0)


class ImpactResult(BaseModel):
    """Impact quantification analysis."""

    model_config = ConfigDict(frozen=True)

    score: float = Field(..., ge=0, le=100, description="Impact score (0-100)")
    score_label: Literal["weak", "moderate", "strong", "exceptional"] = Field(
        ..., description="Impact score band"
    )
    summary: str = Field(default="", description="Narrative summary")
    total_bullets: int = Field(..., ge=0, description="Bullets analyzed")
    bullets_improved: int = Field(
        ..., ge=0, description="Bullets lacking quantified outcomes"
    )
    bullets: list[ImpactBullet] = Field(default_factory=list)
    metric_categories: MetricCategories = Field(default_factory=MetricCategories)
    suggestions: list[AnalysisSuggestion] = Field(default_factory=list)


# =============================================================================
# Uniqueness
# =============================================================================


class UniquenessFactor(BaseModel):
    """A differentiator that sets the candidate apart."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Factor identifier")
    type: Literal[
        "skill_combination",
        "career_transition",
        "unique_experience",
        "domain_expertise",
        "achievement",
        "education",
    ] = Field(..., description="Kind of differentiator")
    title: str = Field(..., description="Short title")
    description: str = Field(default="", description="Description")
    rarity: Rarity = Field(..., description="How rare the factor is")
    evidence: list[str] = Field(
        default_factory=list, description="Résumé text supporting the factor"
    )
    suggestion: str = Field(default="", description="How to feature it")


class UniquenessResult(BaseModel):
    """Uniqueness analysis."""

    model_config = ConfigDict(frozen=True)

    score: float = Field(..., ge=0, le=100, description="Uniqueness score (0-100)")
    score_label: Literal["low", "moderate", "high", "exceptional"] = Field(...)
    factors: list[UniquenessFactor] = Field(default_factory=list)
    summary: str = Field(default="")
    differentiators: list[str] = Field(default_factory=list)
    suggestions: list[AnalysisSuggestion] = Field(default_factory=list)


# =============================================================================
# Context (résumé vs job alignment)
# =============================================================================


class MatchedSkill(BaseModel):
    """A job skill the résumé demonstrates."""

    model_config = ConfigDict(frozen=True)

    skill: str
    source: Literal["technical", "soft", "experience", "education"]
    strength: Literal["exact", "related", "transferable"]
    evidence: str = ""


class MissingRequirement(BaseModel):
    """A job requirement the résumé does not show."""

    model_config = ConfigDict(frozen=True)

    requirement: str
    importance: Literal["critical", "important", "nice_to_have"]
    suggestion: str = ""


class ExperienceAlignment(BaseModel):
    """How relevant one experience is to the job."""

    model_config = ConfigDict(frozen=True)

    experience_id: str
    experience_title: str = ""
    company_name: str = ""
    relevance: Literal["high", "medium", "low"]
    matched_aspects: list[str] = Field(default_factory=list)
    explanation: str = ""


class KeywordHit(BaseModel):
    """A job keyword and whether the résumé contains it."""

    model_config = ConfigDict(frozen=True)

    keyword: str
    found: bool
    location: str | None = None


class KeywordCoverage(BaseModel):
    """Job keyword coverage."""

    model_config = ConfigDict(frozen=True)

    matched: int = Field(default=0, ge=0)
    total: int = Field(default=0, ge=0)
    percentage: float = Field(default=0.0, ge=0, le=100)
    keywords: list[KeywordHit] = Field(default_factory=list)

    def missing_keywords(self) -> list[str]:
        """Keywords not yet present in the résumé, in analysis order."""
        return [hit.keyword for hit in self.keywords if not hit.found]


class ContextSuggestion(BaseModel):
    """Context-analysis recommendation."""

    model_config = ConfigDict(frozen=True)

    category: Literal["skills", "experience", "keywords", "tailoring"]
    priority: Literal["high", "medium", "low"]
    recommendation: str


class FitAssessment(BaseModel):
    """Overall fit narrative."""

    model_config = ConfigDict(frozen=True)

    strengths: list[str] = Field(default_factory=list)
    gaps: list[str] = Field(default_factory=list)
    overall_fit: str = ""


class ContextResult(BaseModel):
    """Résumé/job context alignment analysis."""

    model_config = ConfigDict(frozen=True)

    score: float = Field(..., ge=0, le=100, description="Alignment score (0-100)")
    score_label: Literal["excellent", "good", "moderate", "weak", "poor"] = Field(...)
    summary: str = Field(default="")
    matched_skills: list[MatchedSkill] = Field(default_factory=list)
    missing_requirements: list[MissingRequirement] = Field(default_factory=list)
    experience_alignments: list[ExperienceAlignment] = Field(default_factory=list)
    keyword_coverage: KeywordCoverage = Field(default_factory=KeywordCoverage)
    suggestions: list[ContextSuggestion] = Field(default_factory=list)
    fit_assessment: FitAssessment = Field(default_factory=FitAssessment)


# =============================================================================
# Company research and soft skills
# =============================================================================


class CompanyResearchResult(BaseModel):
    """Research on one of the candidate's employers, for U.S. context."""

    model_config = ConfigDict(frozen=True)

    company_name: str = Field(..., description="Researched company")
    is_well_known: bool = Field(
        ..., description="Whether U.S. recruiters are likely to recognize it"
    )
    industry: str | None = Field(default=None, description="Industry")
    size: Literal["startup", "growth", "enterprise", "unknown"] = Field(
        default="unknown", description="Company size band"
    )
    funding_stage: str | None = Field(default=None, description="Funding stage")
    comparable: str | None = Field(
        default=None, description="Well-known company it compares to"
    )
    context: str = Field(default="", description="Generated context sentence")


class SoftSkillAssessment(BaseModel):
    """Evidence of one soft skill, from résumé text or an interview simulation."""

    model_config = ConfigDict(frozen=True)

    skill: str = Field(..., description="Soft skill name (e.g. 'leadership')")
    evidence: list[str] = Field(default_factory=list, description="Supporting quotes")
    strength: Strength = Field(..., description="Strength of the evidence")
    bullet_ids: list[str] = Field(
        default_factory=list, description="Bullets where the skill was demonstrated"
    )
    evidence_score: int | None = Field(
        default=None, ge=1, le=5, description="Interview evidence score (1-5)"
    )


# =============================================================================
# Aggregate
# =============================================================================


class PreAnalysisResult(BaseModel):
    """Immutable bundle of every sub-analysis for one tailoring request."""

    model_config = ConfigDict(frozen=True)

    impact: ImpactResult
    uniqueness: UniquenessResult
    context: ContextResult
    company: CompanyResearchResult | None = None
    soft_skills: list[SoftSkillAssessment] = Field(default_factory=list)

    analyzed_at: datetime = Field(..., description="When the bundle was assembled")
    resume_id: str = Field(..., description="Analyzed résumé id")
    job_id: str = Field(..., description="Target job id")

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PreAnalysisResult:
        """Deserialize from dictionary."""
        return cls.model_validate(data)
