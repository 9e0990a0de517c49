"""Hybrid tailoring service.

Orchestrates the complete pipeline for one résumé/job pair: pre-analysis,
rule evaluation, instruction compilation, AI rewrite, optional post-analysis
and readiness scoring.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import UTC, datetime

from src.analysis.aggregator import PreAnalysisService, ResumeAnalyzer, aggregate
from src.analysis.models import PreAnalysisResult, SoftSkillAssessment
from src.analysis.usage import metered
from src.resume.models import JobData, ResumeContent
from src.scoring.config import ScoringConfig, get_scoring_config
from src.scoring.readiness import RecruiterReadinessScorer
from src.tailoring.analyzer import LLMResumeAnalyzer
from src.tailoring.changes import detect_changes
from src.tailoring.compiler import InstructionCompiler
from src.tailoring.config import TailoringConfig, get_tailoring_config
from src.tailoring.models import (
    HybridTailorResult,
    TokenUsage,
    TransformationInstructions,
    TransformationRule,
)
from src.tailoring.rewrite import LLMResumeRewriter, ResumeRewriter, apply_rewrite
from src.tailoring.rules import RuleEngine, get_rule_set, load_rules

logger = logging.getLogger(__name__)


@dataclass
class TailoringRunResult:
    """Result of a complete tailoring run."""

    success: bool
    error: str | None = None

    result: HybridTailorResult | None = None
    instructions: TransformationInstructions | None = None

    completed_at: datetime = field(default_factory=lambda: datetime.now(UTC))


class HybridTailoringService:
    """Main service for hybrid résumé tailoring.

    Deterministic stages (engine, compiler, scorer) run locally; only the
    analyzer and rewriter touch the LLM. Both are injectable.
    """

    def __init__(
        self,
        config: TailoringConfig | None = None,
        scoring_config: ScoringConfig | None = None,
        analyzer: ResumeAnalyzer | None = None,
        rewriter: ResumeRewriter | None = None,
        rules: list[TransformationRule] | tuple[TransformationRule, ...] | None = None,
    ):
        """Initialize the tailoring service.

        Args:
            config: Optional TailoringConfig. Uses global config if not provided.
            scoring_config: Optional ScoringConfig. Uses global config if not provided.
            analyzer: AI analysis capability. Defaults to the LLM analyzer.
            rewriter: AI rewrite capability. Defaults to the LLM rewriter.
            rules: Rule set. Defaults to the YAML rules of ``config.rules_dir``.
        """
        self.config = config or get_tailoring_config()
        self.scoring_config = scoring_config or get_scoring_config()

        self.analyzer = analyzer or LLMResumeAnalyzer(self.config)
        self.rewriter = rewriter or LLMResumeRewriter(self.config)

        if rules is None:
            rules = get_rule_set() if config is None else load_rules(config=self.config)
        self.engine = RuleEngine(rules)
        self.compiler = InstructionCompiler(self.config)
        self.scorer = RecruiterReadinessScorer(self.scoring_config)
        self.pre_analysis = PreAnalysisService(self.analyzer)

    async def _post_analyze(
        self,
        tailored: ResumeContent,
        job: JobData,
        pre: PreAnalysisResult,
    ) -> PreAnalysisResult:
        """Re-analyze the tailored résumé, reusing company and soft-skill results."""
        impact, uniqueness, context = await asyncio.gather(
            self.analyzer.analyze_impact(tailored),
            self.analyzer.analyze_uniqueness(tailored, job),
            self.analyzer.analyze_context(tailored, job),
        )
        return aggregate(
            impact=impact,
            uniqueness=uniqueness,
            context=context,
            company=pre.company,
            soft_skills=pre.soft_skills,
            resume_id=pre.resume_id,
            job_id=pre.job_id,
        )

    async def tailor(
        self,
        resume: ResumeContent,
        job: JobData,
        *,
        resume_id: str,
        soft_skills: list[SoftSkillAssessment] | None = None,
        post_analysis: bool = True,
    ) -> TailoringRunResult:
        """Run the complete tailoring pipeline.

        Args:
            resume: Résumé to tailor.
            job: Job to tailor for.
            resume_id: Identifier recorded on the analysis bundle.
            soft_skills: Assessments from interview simulations, if any.
            post_analysis: Re-analyze the tailored résumé before the final
                score. When disabled the final score equals the baseline.

        Returns:
            TailoringRunResult with the tailored résumé or an error.
        """
        logger.info(f"Starting hybrid tailoring for resume {resume_id} / job {job.id}")
        started = time.monotonic()
        instructions: TransformationInstructions | None = None

        try:
            # Step 1: Pre-analysis
            logger.info("Step 1: Running pre-analysis...")
            with metered() as analysis_meter:
                pre = await self.pre_analysis.run(
                    resume, job, resume_id=resume_id, soft_skills=soft_skills
                )
            analysis_tokens = analysis_meter.tokens
            baseline = self.scorer.score(pre)
            logger.info(f"Baseline readiness: {baseline.composite} ({baseline.label})")

            # Step 2: Rule evaluation
            logger.info("Step 2: Evaluating rules...")
            matched = self.engine.evaluate(pre, resume, job)
            logger.info(f"{len(matched)} of {len(self.engine.rules)} rules matched")

            # Step 3: Compile instructions
            logger.info("Step 3: Compiling instructions...")
            instructions = self.compiler.compile(matched, pre, resume, job)

            # Step 4: Rewrite
            logger.info("Step 4: Rewriting resume...")
            rewrite = await self.rewriter.rewrite(resume, job, instructions)
            tailored = apply_rewrite(resume, rewrite)
            changes = detect_changes(resume, tailored, instructions)

            # Step 5: Score
            if post_analysis:
                logger.info("Step 5: Re-analyzing tailored resume...")
                with metered() as post_meter:
                    post = await self._post_analyze(tailored, job, pre)
                analysis_tokens += post_meter.tokens
                quality = self.scorer.score(post)
            else:
                quality = baseline

            total = analysis_tokens + rewrite.tokens_used
            usage = TokenUsage(
                pre_analysis=analysis_tokens,
                rewriting=rewrite.tokens_used,
                total=total,
                saved_vs_pure_ai=max(0, self.config.pure_ai_token_estimate - total),
            )

            result = HybridTailorResult(
                tailored_resume=tailored,
                pre_analysis=pre,
                applied_rules=matched,
                changes=changes,
                quality_score=quality,
                baseline_score=baseline,
                token_usage=usage,
                tailored_at=datetime.now(UTC),
                processing_time_ms=int((time.monotonic() - started) * 1000),
            )

            logger.info(
                f"Tailoring completed: readiness {baseline.composite} -> {quality.composite}"
            )
            return TailoringRunResult(success=True, result=result, instructions=instructions)

        except Exception as e:
            logger.error(f"Tailoring pipeline failed: {e}")
            return TailoringRunResult(success=False, error=str(e), instructions=instructions)
