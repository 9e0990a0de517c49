"""LiteLLM-backed implementation of the ``ResumeAnalyzer`` capability."""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from src.analysis.models import (
    CompanyResearchResult,
    ContextResult,
    ImpactResult,
    SoftSkillAssessment,
    UniquenessResult,
)
from src.analysis.usage import record_tokens
from src.resume.models import JobData, ResumeContent
from src.tailoring.config import TailoringConfig, get_tailoring_config
from src.tailoring.llm import TailoringLLM
from src.tailoring.prompts import (
    ANALYSIS_SYSTEM_PROMPT,
    build_company_prompt,
    build_context_prompt,
    build_impact_prompt,
    build_soft_skills_prompt,
    build_uniqueness_prompt,
)

logger = logging.getLogger(__name__)


class SoftSkillsResponse(BaseModel):
    """LLM response wrapper for soft-skill assessments."""

    assessments: list[SoftSkillAssessment] = Field(default_factory=list)


class LLMResumeAnalyzer:
    """Produces sub-analyses with structured LLM calls.

    ``tokens_used`` accumulates over the analyzer's lifetime. Each call is also
    charged to the active token meter, which is how runs sharing one analyzer
    are accounted separately.
    """

    def __init__(
        self,
        config: TailoringConfig | None = None,
        llm: TailoringLLM | None = None,
    ):
        self.config = config or get_tailoring_config()
        self.llm = llm or TailoringLLM(self.config)
        self.tokens_used = 0

    async def _generate(self, prompt: str, output_model: type[BaseModel]):
        result, tokens = await self.llm.generate_structured_with_usage(
            prompt, output_model, system_prompt=ANALYSIS_SYSTEM_PROMPT
        )
        self.tokens_used += tokens
        record_tokens(tokens)
        return result

    async def analyze_impact(self, resume: ResumeContent) -> ImpactResult:
        return await self._generate(build_impact_prompt(resume=resume), ImpactResult)

    async def analyze_uniqueness(
        self, resume: ResumeContent, job: JobData | None = None
    ) -> UniquenessResult:
        return await self._generate(
            build_uniqueness_prompt(resume=resume, job=job), UniquenessResult
        )

    async def analyze_context(self, resume: ResumeContent, job: JobData) -> ContextResult:
        return await self._generate(build_context_prompt(resume=resume, job=job), ContextResult)

    async def research_company(self, company_name: str) -> CompanyResearchResult | None:
        result = await self._generate(
            build_company_prompt(company_name=company_name), CompanyResearchResult
        )
        # Keep the name as written on the résumé so experiences can be matched.
        return result.model_copy(update={"company_name": company_name})

    async def assess_soft_skills(self, resume: ResumeContent) -> list[SoftSkillAssessment]:
        response = await self._generate(
            build_soft_skills_prompt(resume=resume), SoftSkillsResponse
        )
        known = resume.bullet_index()
        assessments: list[SoftSkillAssessment] = []
        for assessment in response.assessments:
            cited = [b for b in assessment.bullet_ids if b in known]
            if len(cited) != len(assessment.bullet_ids):
                logger.warning(
                    f"Dropped unknown bullet ids from '{assessment.skill}' evidence"
                )
            assessments.append(assessment.model_copy(update={"bullet_ids": cited}))
        return assessments
