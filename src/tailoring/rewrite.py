"""AI rewrite boundary and pure application of its response.

The rewrite itself is an injected ``ResumeRewriter``; its response is a plain
``RewriteResult`` value. ``apply_rewrite`` folds that value into a copy of the
résumé, matching everything by id, so the pipeline can be tested without any
network access.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field

from src.resume.models import JobData, ResumeContent
from src.tailoring.config import TailoringConfig, get_tailoring_config
from src.tailoring.llm import TailoringLLM
from src.tailoring.models import TransformationInstructions
from src.tailoring.prompts import REWRITE_SYSTEM_PROMPT, build_rewrite_prompt

logger = logging.getLogger(__name__)


class RewrittenBullet(BaseModel):
    id: str = Field(..., description="Bullet id from the edit plan")
    text: str = Field(..., description="Rewritten bullet text")


class RewrittenExperience(BaseModel):
    id: str = Field(..., description="Experience id from the edit plan")
    title: str | None = Field(default=None, description="Translated title")
    company_context: str | None = Field(default=None, description="Company description")


class RewriteResult(BaseModel):
    """Response of the rewrite capability."""

    summary: str | None = Field(default=None, description="Rewritten summary")
    bullets: list[RewrittenBullet] = Field(default_factory=list)
    experiences: list[RewrittenExperience] = Field(default_factory=list)
    technical_skills: list[str] | None = Field(
        default=None, description="Technical skills in the new order"
    )
    soft_skills: list[str] | None = Field(
        default=None, description="Soft skills in the new order"
    )
    experience_order: list[str] | None = Field(
        default=None, description="Experience ids in the new order"
    )
    why_fit: list[str] = Field(default_factory=list)
    competencies: list[str] = Field(default_factory=list)
    tokens_used: int = Field(default=0, ge=0, description="Tokens spent on the rewrite")


@runtime_checkable
class ResumeRewriter(Protocol):
    """AI capability that applies compiled instructions to a résumé."""

    async def rewrite(
        self,
        resume: ResumeContent,
        job: JobData,
        instructions: TransformationInstructions,
    ) -> RewriteResult: ...


class LLMResumeRewriter:
    """Rewrites a résumé with one structured LLM call."""

    def __init__(
        self,
        config: TailoringConfig | None = None,
        llm: TailoringLLM | None = None,
    ):
        self.config = config or get_tailoring_config()
        self.llm = llm or TailoringLLM(self.config)

    async def rewrite(
        self,
        resume: ResumeContent,
        job: JobData,
        instructions: TransformationInstructions,
    ) -> RewriteResult:
        """Apply instructions through the LLM.

        Raises:
            LLMError: If the call fails or the response does not validate.
        """
        result, tokens = await self.llm.generate_structured_with_usage(
            build_rewrite_prompt(resume=resume, job=job, instructions=instructions),
            RewriteResult,
            system_prompt=REWRITE_SYSTEM_PROMPT,
        )
        return result.model_copy(update={"tokens_used": tokens})


def _same_items(original: list[str], proposed: list[str]) -> bool:
    return sorted(s.lower() for s in original) == sorted(s.lower() for s in proposed)


def apply_rewrite(resume: ResumeContent, rewrite: RewriteResult) -> ResumeContent:
    """Return a tailored copy of ``resume`` with the rewrite applied.

    Unknown bullet/experience ids are dropped and logged. Skill and
    experience orders are applied only when they are permutations of the
    originals, so nothing is silently added or lost.
    """
    tailored = resume.model_copy(deep=True)
    bullet_ids = tailored.bullet_index()

    if rewrite.summary and rewrite.summary.strip():
        tailored.summary = rewrite.summary.strip()

    new_text: dict[str, str] = {}
    for item in rewrite.bullets:
        if item.id not in bullet_ids:
            logger.warning(f"Rewrite references unknown bullet {item.id!r}; dropped")
            continue
        if item.text.strip():
            new_text[item.id] = item.text.strip()

    for _experience, bullet in tailored.iter_bullets():
        text = new_text.get(bullet.id)
        if text is not None and text != bullet.text:
            bullet.text = text
            bullet.is_modified = True

    for item in rewrite.experiences:
        experience = tailored.get_experience(item.id)
        if experience is None:
            logger.warning(f"Rewrite references unknown experience {item.id!r}; dropped")
            continue
        if item.title and item.title.strip():
            experience.title = item.title.strip()
        if item.company_context and item.company_context.strip():
            experience.company_context = item.company_context.strip()

    if rewrite.technical_skills is not None:
        if _same_items(tailored.skills.technical, rewrite.technical_skills):
            tailored.skills.technical = list(rewrite.technical_skills)
        else:
            logger.warning("Rewrite changed the technical skill set; order not applied")
    if rewrite.soft_skills is not None:
        if _same_items(tailored.skills.soft, rewrite.soft_skills):
            tailored.skills.soft = list(rewrite.soft_skills)
        else:
            logger.warning("Rewrite changed the soft skill set; order not applied")

    if rewrite.experience_order is not None:
        current = [e.id for e in tailored.experiences]
        if sorted(current) == sorted(rewrite.experience_order):
            by_id = {e.id: e for e in tailored.experiences}
            tailored.experiences = [by_id[i] for i in rewrite.experience_order]
        else:
            logger.warning("Rewrite experience order is not a permutation; ignored")

    why_fit = [line.strip() for line in rewrite.why_fit if line.strip()]
    if why_fit:
        tailored.why_fit = why_fit
    competencies = [c.strip() for c in rewrite.competencies if c.strip()]
    if competencies:
        tailored.competencies = competencies

    return tailored
