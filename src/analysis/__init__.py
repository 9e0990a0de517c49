"""Sub-analysis models and the pre-analysis aggregator.

Public API:
    - PreAnalysisResult: Immutable bundle of every sub-analysis
    - aggregate: Build a bundle from sub-analysis results
    - PreAnalysisService: Run an injected analyzer concurrently and aggregate
    - ResumeAnalyzer: Protocol for the AI capability producing sub-analyses
    - metered / record_tokens: Per-run token accounting for analyzer calls
"""

from src.analysis.aggregator import (
    PreAnalysisService,
    ResumeAnalyzer,
    aggregate,
    researched_company_name,
)
from src.analysis.models import (
    CompanyResearchResult,
    ContextResult,
    ImpactResult,
    PreAnalysisResult,
    SoftSkillAssessment,
    UniquenessResult,
)
from src.analysis.usage import TokenMeter, metered, record_tokens

__all__ = [
    "PreAnalysisService",
    "ResumeAnalyzer",
    "aggregate",
    "researched_company_name",
    "PreAnalysisResult",
    "ImpactResult",
    "UniquenessResult",
    "ContextResult",
    "CompanyResearchResult",
    "SoftSkillAssessment",
    "TokenMeter",
    "metered",
    "record_tokens",
]
