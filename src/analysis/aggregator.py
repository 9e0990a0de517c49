"""Pre-analysis aggregation.

``aggregate`` bundles independently computed sub-analyses into one immutable
``PreAnalysisResult``. ``PreAnalysisService`` runs the sub-analyses through an
injected ``ResumeAnalyzer`` concurrently and aggregates them.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import Protocol, runtime_checkable

from src.analysis.models import (
    CompanyResearchResult,
    ContextResult,
    ImpactResult,
    PreAnalysisResult,
    SoftSkillAssessment,
    UniquenessResult,
)
from src.analysis.usage import metered
from src.resume.models import JobData, ResumeContent

logger = logging.getLogger(__name__)


@runtime_checkable
class ResumeAnalyzer(Protocol):
    """AI capability producing the sub-analyses the pipeline consumes.

    Implementations charge each call's LLM usage with
    ``src.analysis.usage.record_tokens``.
    """

    async def analyze_impact(self, resume: ResumeContent) -> ImpactResult: ...

    async def analyze_uniqueness(
        self, resume: ResumeContent, job: JobData | None = None
    ) -> UniquenessResult: ...

    async def analyze_context(
        self, resume: ResumeContent, job: JobData
    ) -> ContextResult: ...

    async def research_company(
        self, company_name: str
    ) -> CompanyResearchResult | None: ...

    async def assess_soft_skills(
        self, resume: ResumeContent
    ) -> list[SoftSkillAssessment]: ...


def aggregate(
    *,
    impact: ImpactResult,
    uniqueness: UniquenessResult,
    context: ContextResult,
    company: CompanyResearchResult | None,
    soft_skills: list[SoftSkillAssessment] | None,
    resume_id: str,
    job_id: str,
    analyzed_at: datetime | None = None,
) -> PreAnalysisResult:
    """Bundle sub-analysis results for one tailoring request."""
    return PreAnalysisResult(
        impact=impact,
        uniqueness=uniqueness,
        context=context,
        company=company,
        soft_skills=list(soft_skills or []),
        analyzed_at=analyzed_at or datetime.now(UTC),
        resume_id=resume_id,
        job_id=job_id,
    )


def researched_company_name(resume: ResumeContent) -> str | None:
    """The employer to research: the most recent experience's company."""
    for experience in resume.experiences:
        if experience.company.strip():
            return experience.company
    return None


class PreAnalysisService:
    """Runs the sub-analyses concurrently and aggregates them."""

    def __init__(self, analyzer: ResumeAnalyzer):
        self.analyzer = analyzer

    async def run(
        self,
        resume: ResumeContent,
        job: JobData,
        *,
        resume_id: str,
        soft_skills: list[SoftSkillAssessment] | None = None,
        company_name: str | None = None,
    ) -> PreAnalysisResult:
        """Analyze a résumé against a job.

        Args:
            resume: Résumé to analyze.
            job: Target job.
            resume_id: Identifier recorded on the bundle.
            soft_skills: Assessments from an interview simulation. When given
                they take precedence and the analyzer's own soft-skill pass is
                skipped.
            company_name: Employer to research. Defaults to the most recent
                experience's company.

        Raises:
            Whatever the analyzer raises; callers decide how to report it.
        """
        company_name = company_name or researched_company_name(resume)
        logger.info(
            f"Running pre-analysis for resume {resume_id} / job {job.id} "
            f"(company research: {company_name or 'none'})"
        )

        async def no_company() -> None:
            return None

        async def given_soft_skills() -> list[SoftSkillAssessment]:
            return list(soft_skills or [])

        with metered() as meter:
            impact, uniqueness, context, company, assessed = await asyncio.gather(
                self.analyzer.analyze_impact(resume),
                self.analyzer.analyze_uniqueness(resume, job),
                self.analyzer.analyze_context(resume, job),
                self.analyzer.research_company(company_name) if company_name else no_company(),
                given_soft_skills() if soft_skills else self.analyzer.assess_soft_skills(resume),
            )
        logger.info(f"Pre-analysis for resume {resume_id} used {meter.tokens} tokens")

        return aggregate(
            impact=impact,
            uniqueness=uniqueness,
            context=context,
            company=company,
            soft_skills=assessed,
            resume_id=resume_id,
            job_id=job.id,
        )
