"""Hybrid résumé tailoring.

This module provides functionality for:
- Evaluating declarative transformation rules against a pre-analysis bundle
- Compiling matched rules into per-bullet rewrite instructions
- Applying an AI rewrite of those instructions to a résumé
- Reporting what changed and how recruiter readiness moved

Main Entry Point:
    HybridTailoringService - Orchestrates the complete tailoring pipeline

Example:
    from src.tailoring import HybridTailoringService

    service = HybridTailoringService()
    run = await service.tailor(resume, job, resume_id="r-1")

    if run.success:
        print(run.result.quality_score.composite)
"""

from src.tailoring.analyzer import LLMResumeAnalyzer
from src.tailoring.changes import detect_changes
from src.tailoring.compiler import (
    InstructionCompiler,
    classify_improvement_level,
    overall_tone,
)
from src.tailoring.config import (
    TailoringConfig,
    get_tailoring_config,
    reset_tailoring_config,
)
from src.tailoring.llm import LLMError, TailoringLLM
from src.tailoring.models import (
    HybridTailorResult,
    RuleEvaluationResult,
    TailoringChanges,
    TokenUsage,
    TransformationInstructions,
    TransformationRule,
)
from src.tailoring.rewrite import (
    LLMResumeRewriter,
    ResumeRewriter,
    RewriteResult,
    apply_rewrite,
)
from src.tailoring.rules import RuleEngine, get_rule_set, load_rules
from src.tailoring.service import HybridTailoringService, TailoringRunResult

__all__ = [
    # Main service
    "HybridTailoringService",
    "TailoringRunResult",
    # Deterministic core
    "RuleEngine",
    "InstructionCompiler",
    "classify_improvement_level",
    "overall_tone",
    "load_rules",
    "get_rule_set",
    # AI boundary
    "LLMResumeAnalyzer",
    "LLMResumeRewriter",
    "ResumeRewriter",
    "RewriteResult",
    "apply_rewrite",
    "detect_changes",
    "TailoringLLM",
    "LLMError",
    # Config
    "TailoringConfig",
    "get_tailoring_config",
    "reset_tailoring_config",
    # Models
    "TransformationRule",
    "RuleEvaluationResult",
    "TransformationInstructions",
    "TailoringChanges",
    "TokenUsage",
    "HybridTailorResult",
]
