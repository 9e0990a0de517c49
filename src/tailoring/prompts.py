"""Prompt builders for the AI-backed analysis and rewrite calls."""

from __future__ import annotations

import json

from src.resume.models import JobData, ResumeContent
from src.tailoring.models import TransformationInstructions

ANALYSIS_SYSTEM_PROMPT = """You are a senior technical recruiter reviewing a resume.

You must follow these rules:
- Be truthful. Only report what the resume text supports.
- Refer to bullets and experiences by the ids given in the resume JSON.
- Output MUST be valid JSON only (no markdown), matching the required schema.
"""

REWRITE_SYSTEM_PROMPT = """You are an expert resume writer applying a precise edit plan.

You must follow these rules:
- Apply ONLY the instructions you are given; leave everything else as written.
- Never invent employers, titles, dates, credentials or achievements.
- When asked for a metric the resume does not state, use a clearly plausible
  placeholder form (e.g. "X%") rather than a fabricated number.
- Keep every bullet id exactly as given.
- Output MUST be valid JSON only (no markdown), matching the required schema.
"""


def _resume_json(resume: ResumeContent) -> str:
    return json.dumps(resume.to_dict(), ensure_ascii=True)


def _job_json(job: JobData) -> str:
    return json.dumps(job.to_dict(), ensure_ascii=True)


def build_impact_prompt(*, resume: ResumeContent) -> str:
    """Prompt for the impact (quantification) analysis."""
    return "\n".join(
        [
            "Assess how well each bullet shows quantified impact.",
            "",
            "For every bullet:",
            "- improvement: none (already quantified), minor, major, or transformed",
            "- improved: a quantified rewrite suggestion",
            "- metrics: the metrics you would add",
            "",
            "Also return:",
            "- total_bullets and bullets_improved (bullets whose improvement is not none)",
            "- metric_categories: counts of percentage, monetary, time, scale, other",
            "  metrics already present in the resume",
            "- score (0-100) and score_label (weak, moderate, strong, exceptional)",
            "",
            "Resume (JSON):",
            _resume_json(resume),
        ]
    )


def build_uniqueness_prompt(*, resume: ResumeContent, job: JobData | None) -> str:
    """Prompt for the uniqueness (differentiator) analysis."""
    lines = [
        "Identify what makes this candidate different from other applicants.",
        "",
        "Return factors with a type (skill_combination, career_transition,",
        "unique_experience, domain_expertise, achievement, education), a rarity",
        "(uncommon, rare, very_rare) and evidence quoted verbatim from bullets.",
        "Order factors from most to least distinctive.",
        "Also return differentiators (short phrases), score (0-100) and",
        "score_label (low, moderate, high, exceptional).",
        "",
        "Resume (JSON):",
        _resume_json(resume),
    ]
    if job is not None:
        lines += ["", "Target job (JSON):", _job_json(job)]
    return "\n".join(lines)


def build_context_prompt(*, resume: ResumeContent, job: JobData) -> str:
    """Prompt for the résumé/job alignment analysis."""
    return "\n".join(
        [
            "Compare the resume with the job.",
            "",
            "Return:",
            "- matched_skills with source and strength (exact, related, transferable)",
            "- missing_requirements with importance (critical, important, nice_to_have)",
            "- experience_alignments for every experience id with relevance",
            "  (high, medium, low) and matched_aspects",
            "- keyword_coverage: every important job keyword and whether the resume",
            "  contains it, plus matched, total and percentage",
            "- fit_assessment: strengths, gaps, overall_fit",
            "- score (0-100) and score_label (excellent, good, moderate, weak, poor)",
            "",
            "Job (JSON):",
            _job_json(job),
            "",
            "Resume (JSON):",
            _resume_json(resume),
        ]
    )


def build_company_prompt(*, company_name: str) -> str:
    """Prompt for researching an employer for U.S. recruiters."""
    return "\n".join(
        [
            f"Research the company '{company_name}' for a U.S. recruiter.",
            "",
            "Return:",
            "- is_well_known: would a typical U.S. tech recruiter recognize it?",
            "- industry, size (startup, growth, enterprise, unknown), funding_stage",
            "- comparable: a well-known U.S. company it resembles, if any",
            "- context: one short sentence describing the company",
            "If you are not confident about a fact, leave it null.",
        ]
    )


def build_soft_skills_prompt(*, resume: ResumeContent) -> str:
    """Prompt for soft-skill evidence extraction."""
    return "\n".join(
        [
            "Find evidence of soft skills (leadership, collaboration, communication,",
            "initiative, problem solving, ...) in the resume bullets.",
            "",
            "For each skill return the quoted evidence, the bullet_ids it came from",
            "and a strength (weak, moderate, strong).",
            "",
            "Resume (JSON):",
            _resume_json(resume),
        ]
    )


def build_rewrite_prompt(
    *,
    resume: ResumeContent,
    job: JobData,
    instructions: TransformationInstructions,
) -> str:
    """Prompt for applying compiled instructions to a résumé."""
    return "\n".join(
        [
            f"Tailor the resume for the {job.title} role"
            + (f" at {job.company_name}." if job.company_name else "."),
            "",
            "Apply the edit plan below:",
            "- bullets: rewrite each listed bullet following its rewrite_instruction",
            "- summary: follow summary.rewrite_instruction",
            "- why_fit: turn each entry into one concise line",
            "- skills: return technical skills in skills.technical.reordered order",
            "- experiences: apply company_context and suggested_title where given",
            "Bullets not listed in the plan must be returned unchanged or omitted.",
            "",
            "Edit plan (JSON):",
            instructions.to_json(),
            "",
            "Resume (JSON):",
            _resume_json(resume),
        ]
    )
