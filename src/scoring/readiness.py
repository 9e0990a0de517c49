"""Recruiter-Readiness scoring.

Scores a pre-analysis bundle on the five recruiter issues:

1. Uniqueness (20%): standing out from other candidates
2. Impact (30%): quantified achievements
3. Context translation (15%): U.S. context for unfamiliar companies
4. Cultural fit (10%): soft-skill evidence
5. Customization (25%): job-specific alignment

Scoring is a pure function of the bundle and the configured weights, so the
same bundle always yields the same score. That is what makes before/after
comparisons meaningful.
"""

from __future__ import annotations

import logging
import math

from src.analysis.models import PreAnalysisResult
from src.scoring.config import WEIGHT_TOLERANCE, ScoringConfig, get_scoring_config
from src.scoring.models import (
    DIMENSION_ORDER,
    DimensionName,
    DimensionScore,
    ReadinessDimensions,
    RecruiterReadinessScore,
    ScoreComparison,
    Suggestion,
    SuggestionImpact,
)
from src.scoring.thresholds import dimension_color, label_color, score_label

logger = logging.getLogger(__name__)

STRENGTH_SCORES = {"weak": 30.0, "moderate": 65.0, "strong": 100.0}

# Context translation credit for an unfamiliar company, by research quality.
CONTEXT_SENTENCE_CREDIT = 50.0
COMPARABLE_CREDIT = 30.0
INDUSTRY_CREDIT = 20.0

MAX_DIMENSION_SUGGESTIONS = 2

# Fallback action when a dimension has gain left but no rule-based suggestion.
DEFAULT_ACTIONS: dict[DimensionName, str] = {
    "uniqueness": "Lead with the qualifications that set you apart",
    "impact": "Quantify the outcomes of your remaining achievement bullets",
    "context_translation": "Add a short description of each employer for U.S. recruiters",
    "cultural_fit": "Show how you work with others in your achievement bullets",
    "customization": "Mirror the job description's language in your summary and skills",
}


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up."""
    return int(math.floor(round(value, 6) + 0.5))


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def suggestion_impact(weight: float) -> SuggestionImpact:
    """Classify a dimension's suggestion impact by its weight."""
    if weight >= 0.25:
        return "high"
    if weight >= 0.15:
        return "medium"
    return "low"


class RecruiterReadinessScorer:
    """Computes the composite recruiter-readiness score."""

    def __init__(self, config: ScoringConfig | None = None) -> None:
        self.config = config or get_scoring_config()
        self.weights = self.config.weights()

        weight_sum = math.fsum(self.weights.values())
        if abs(weight_sum - 1.0) > WEIGHT_TOLERANCE:
            raise ValueError(
                f"Readiness weights must sum to 1.0 (got {weight_sum:.6f})"
            )

    # -------------------------------------------------------------------------
    # Raw scores
    # -------------------------------------------------------------------------

    def _uniqueness(self, analysis: PreAnalysisResult) -> tuple[float, list[str]]:
        uniqueness = analysis.uniqueness
        raw = clamp(uniqueness.score)

        suggestions: list[str] = []
        if raw < 50:
            suggestions.append("Highlight unique skill combinations that set you apart")
        if not any(f.rarity == "very_rare" for f in uniqueness.factors):
            suggestions.append("Identify and emphasize your rarest qualifications")
        if raw < 70:
            suggestions.append(
                "Add career transitions or cross-domain expertise to your narrative"
            )
        return raw, suggestions

    def _impact(self, analysis: PreAnalysisResult) -> tuple[float, list[str]]:
        impact = analysis.impact
        total = impact.total_bullets
        if total > 0:
            quantified = max(0, total - min(impact.bullets_improved, total))
            raw = 100.0 * quantified / total
        else:
            raw = clamp(impact.score)

        suggestions: list[str] = []
        if raw < 50:
            suggestions.append(
                "Add specific metrics to your achievement statements (%, $, #)"
            )
        if impact.metric_categories.percentage < 2:
            suggestions.append(
                "Include improvement percentages (increased by X%, reduced by Y%)"
            )
        if impact.metric_categories.scale < 2:
            suggestions.append(
                "Add scale context (team size, user base, transaction volume)"
            )
        if total and impact.bullets_improved > total * 0.5:
            suggestions.append("Most bullets need stronger quantification")
        return raw, suggestions

    def _context_translation(
        self, analysis: PreAnalysisResult
    ) -> tuple[float, list[str]]:
        company = analysis.company
        suggestions: list[str] = []

        if company is None:
            raw = 0.0
            suggestions.append(
                "Research your past employers so unfamiliar companies can be explained"
            )
        elif company.is_well_known:
            raw = self.config.well_known_company_credit
        else:
            raw = 0.0
            if company.context.strip():
                raw += CONTEXT_SENTENCE_CREDIT
            if company.comparable:
                raw += COMPARABLE_CREDIT
            if company.industry:
                raw += INDUSTRY_CREDIT
            raw = clamp(raw)
            suggestions.append(
                "Add context for unfamiliar companies (size, industry, comparable companies)"
            )

        if raw < 70:
            suggestions.append(
                "Include company descriptions that U.S. recruiters will understand"
            )
        return raw, suggestions

    def _cultural_fit(self, analysis: PreAnalysisResult) -> tuple[float, list[str]]:
        assessments = analysis.soft_skills
        if assessments:
            raw = math.fsum(STRENGTH_SCORES[a.strength] for a in assessments) / len(
                assessments
            )
        else:
            raw = 0.0

        skills = {a.skill.lower() for a in assessments}
        suggestions: list[str] = []
        if raw < 50:
            suggestions.append(
                "Add evidence of soft skills like leadership, collaboration, communication"
            )
        if "leadership" not in skills:
            suggestions.append(
                "Highlight leadership experiences (led, mentored, coached)"
            )
        if "collaboration" not in skills:
            suggestions.append(
                "Show collaboration evidence (partnered, cross-functional, stakeholders)"
            )
        return raw, suggestions

    def _customization(self, analysis: PreAnalysisResult) -> tuple[float, list[str]]:
        context = analysis.context
        raw = clamp(context.score)

        suggestions: list[str] = []
        if context.keyword_coverage.percentage < 60:
            suggestions.append(
                "Include more keywords from the job description naturally"
            )
        if any(r.importance == "critical" for r in context.missing_requirements):
            suggestions.append("Address critical missing requirements in your resume")
        if not any(a.relevance == "high" for a in context.experience_alignments):
            suggestions.append(
                "Tailor experience descriptions to highlight relevant aspects"
            )
        if raw < 70:
            suggestions.append(
                "Customize your summary and skills section for this specific role"
            )
        return raw, suggestions

    # -------------------------------------------------------------------------
    # Composite
    # -------------------------------------------------------------------------

    def _dimension(
        self, name: DimensionName, raw: float, suggestions: list[str]
    ) -> DimensionScore:
        weight = self.weights[name]
        return DimensionScore(
            raw=raw,
            weighted=raw * weight,
            weight=weight,
            label=score_label(raw),
            color=dimension_color(raw),
            suggestions=suggestions[:MAX_DIMENSION_SUGGESTIONS],
        )

    def _top_suggestions(self, dimensions: ReadinessDimensions) -> list[Suggestion]:
        ranked = sorted(
            (
                (name, dim)
                for name, dim in dimensions.items()
                if dim.potential_gain > 0
            ),
            key=lambda item: item[1].potential_gain,
            reverse=True,
        )

        top: list[Suggestion] = []
        for name, dim in ranked[: self.config.max_suggestions]:
            action = dim.suggestions[0] if dim.suggestions else DEFAULT_ACTIONS[name]
            top.append(
                Suggestion(
                    dimension=name,
                    action=action,
                    impact=suggestion_impact(dim.weight),
                    potential_gain=dim.potential_gain,
                )
            )
        return top

    def score(self, analysis: PreAnalysisResult) -> RecruiterReadinessScore:
        """Score a pre-analysis bundle."""
        calculators = {
            "uniqueness": self._uniqueness,
            "impact": self._impact,
            "context_translation": self._context_translation,
            "cultural_fit": self._cultural_fit,
            "customization": self._customization,
        }
        scored: dict[str, DimensionScore] = {}
        for name in DIMENSION_ORDER:
            raw, suggestions = calculators[name](analysis)
            scored[name] = self._dimension(name, raw, suggestions)

        dimensions = ReadinessDimensions(**scored)
        composite = int(
            clamp(round_half_up(math.fsum(d.weighted for _, d in dimensions.items())))
        )
        label = score_label(composite)

        logger.info(
            "Readiness score for resume %s / job %s: %d (%s)",
            analysis.resume_id,
            analysis.job_id,
            composite,
            label,
        )
        return RecruiterReadinessScore(
            composite=composite,
            label=label,
            color=label_color(label),
            dimensions=dimensions,
            top_suggestions=self._top_suggestions(dimensions),
        )


# =============================================================================
# Utilities
# =============================================================================


def score_summary(score: RecruiterReadinessScore) -> str:
    """One-sentence summary of a readiness score."""
    if score.composite >= 90:
        return "Exceptional match! Your resume is well-optimized for this role."
    if score.composite >= 75:
        return (
            "Strong match! A few targeted improvements could make your "
            "application even stronger."
        )
    if score.composite >= 60:
        return "Good potential. Focus on the suggested improvements to stand out."
    if score.composite >= 40:
        return (
            "Room for improvement. Your resume needs more tailoring for this "
            "specific role."
        )
    return "Significant work needed. Consider major revisions to improve your match."


def most_impactful_dimension(score: RecruiterReadinessScore) -> DimensionName:
    """Dimension with the largest potential composite gain (first wins ties)."""
    best_name, best = score.dimensions.items()[0]
    for name, dim in score.dimensions.items()[1:]:
        if dim.potential_gain > best.potential_gain:
            best_name, best = name, dim
    return best_name


def compare_scores(
    before: RecruiterReadinessScore, after: RecruiterReadinessScore
) -> ScoreComparison:
    """Per-dimension and composite deltas between two scores."""
    deltas: dict[str, float] = {}
    improved: list[DimensionName] = []
    regressed: list[DimensionName] = []
    for name, after_dim in after.dimensions.items():
        delta = after_dim.raw - getattr(before.dimensions, name).raw
        deltas[name] = delta
        if delta > 0:
            improved.append(name)
        elif delta < 0:
            regressed.append(name)

    return ScoreComparison(
        before=before.composite,
        after=after.composite,
        composite_delta=after.composite - before.composite,
        dimension_deltas=deltas,
        improved_dimensions=improved,
        regressed_dimensions=regressed,
    )
