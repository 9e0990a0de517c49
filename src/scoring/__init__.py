"""Recruiter-readiness scoring.

This module turns a pre-analysis bundle into a weighted 0-100 readiness
score across five dimensions, with labels, colors and improvement
suggestions.

Public API:
    - RecruiterReadinessScorer: Computes the score
    - RecruiterReadinessScore: Score output model
    - compare_scores: Before/after comparison of two scores
    - ScoringConfig: Configuration settings
"""

from src.scoring.config import ScoringConfig, get_scoring_config, reset_scoring_config
from src.scoring.models import (
    DimensionScore,
    ReadinessDimensions,
    RecruiterReadinessScore,
    ScoreComparison,
    Suggestion,
)
from src.scoring.readiness import (
    RecruiterReadinessScorer,
    compare_scores,
    most_impactful_dimension,
    score_summary,
)
from src.scoring.thresholds import label_color, readable_label, score_label

__all__ = [
    "RecruiterReadinessScorer",
    "RecruiterReadinessScore",
    "DimensionScore",
    "ReadinessDimensions",
    "Suggestion",
    "ScoreComparison",
    "compare_scores",
    "most_impactful_dimension",
    "score_summary",
    "score_label",
    "label_color",
    "readable_label",
    "ScoringConfig",
    "get_scoring_config",
    "reset_scoring_config",
]
