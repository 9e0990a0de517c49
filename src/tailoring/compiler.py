"""Instruction compiler: turns matched rules into one rewrite payload.

Rules are applied in priority order to explicit per-bullet, per-experience
and summary accumulators. Each rule only adds to an accumulator (flags turn
on, lists append without duplicates); the first rule to touch a bullet sets
its tone, and the first templated action sets its template. Instruction
strings are synthesized once, after every rule has been applied.

Action ``data`` vocabulary understood here:

- bullet actions: ``category``, ``examples``, ``max_per_bullet``, ``skill``,
  ``focus_on``, ``context_hint``, ``industry_format``
- summary actions: ``lead_with_differentiators``, ``include_matched_skills``,
  ``include_soft_skills``, ``focus_points``
- skills actions: ``promote_rare``
- experience actions: ``add_company_description``, ``add_comparable``,
  ``comparable_format``, ``industry_mappings``, ``title_mappings``,
  ``highlight_relevant``
- section actions: ``section`` (``why_fit`` or ``competencies``),
  ``filter_rarity``, ``create_expertise_category``

The compiler is deterministic: no clocks, no randomness, and no set
iteration leaks into the output.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from src.analysis.models import ImprovementLevel, PreAnalysisResult
from src.resume.models import Experience, JobData, ResumeContent
from src.tailoring.config import TailoringConfig, get_tailoring_config
from src.tailoring.models import (
    ENHANCEMENT_ORDER,
    BulletTransformInstruction,
    EnhancementCategory,
    ExperienceReorderInstruction,
    ExperienceTransformInstruction,
    RuleEvaluationResult,
    SkillsReorderInstruction,
    SoftSkillsReorder,
    StrategicTone,
    SummaryTransformInstruction,
    TechnicalSkillsReorder,
    TransformationAction,
    TransformationInstructions,
    WhyFitBullet,
    WhyFitInstruction,
)
from src.tailoring.templates import (
    get_bullet_template,
    get_summary_template,
    suggest_summary_template,
    tone_guidance,
)

logger = logging.getLogger(__name__)

RELEVANCE_SCORES = {"high": 1.0, "medium": 0.6, "low": 0.3}
ASPECT_BONUS = 0.05
STRENGTH_RANK = {"strong": 0, "moderate": 1, "weak": 2}
RARITY_RANK = {"very_rare": 0, "rare": 1, "uncommon": 2}
MAX_SUMMARY_SKILLS = 5
MAX_COMPETENCIES = 8
MAX_METRIC_HINTS = 3

_YEAR_RE = re.compile(r"\b(19\d{2}|20\d{2})\b")


def classify_improvement_level(active_categories: int) -> ImprovementLevel:
    """Map the number of active enhancement categories to an improvement level.

    0 -> none, 1 -> minor, 2 -> major, 3 or more -> transformed.
    """
    if active_categories <= 0:
        return "none"
    if active_categories == 1:
        return "minor"
    if active_categories == 2:
        return "major"
    return "transformed"


def overall_tone(results: list[RuleEvaluationResult]) -> StrategicTone:
    """Most frequent tone among matched rules; ties and no rules give measured."""
    counts = Counter(r.strategic_tone for r in results if r.matched)
    if not counts:
        return "measured"
    ranked = counts.most_common()
    top_count = ranked[0][1]
    leaders = [tone for tone, count in ranked if count == top_count]
    if len(leaders) > 1:
        return "measured"
    return leaders[0]


def _norm(text: str) -> str:
    return " ".join(text.lower().split())


def _append_unique(target: list[str], items: list[str] | tuple[str, ...]) -> None:
    seen = {_norm(existing) for existing in target}
    for item in items:
        if not isinstance(item, str) or not item.strip():
            continue
        key = _norm(item)
        if key not in seen:
            seen.add(key)
            target.append(item)


def _fill(template: str, **values: str) -> str | None:
    """Substitute ``values`` into rule-supplied format text, or None if it does not fit."""
    try:
        return template.format(**values)
    except (KeyError, IndexError, ValueError) as e:
        logger.warning(f"Ignoring malformed format text {template!r}: {e!r}")
        return None


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [item for item in value if isinstance(item, str)]
    return []


def _mentions(text: str, term: str) -> bool:
    """Whole-word, case-insensitive mention of ``term`` in ``text``."""
    pattern = r"(?<![\w])" + re.escape(term.lower()) + r"(?![\w])"
    return re.search(pattern, text.lower()) is not None


@dataclass
class _BulletDraft:
    bullet_id: str
    experience_id: str
    original_text: str
    position: int
    categories: set[str] = field(default_factory=set)
    suggested_metrics: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    context: list[str] = field(default_factory=list)
    soft_skills: list[str] = field(default_factory=list)
    template_id: str | None = None
    tone: StrategicTone | None = None
    rule_ids: list[str] = field(default_factory=list)


@dataclass
class _ExperienceDraft:
    experience: Experience
    context: list[str] = field(default_factory=list)
    suggested_title: str | None = None
    highlight: bool = False
    rule_ids: list[str] = field(default_factory=list)


@dataclass
class _SummaryDraft:
    template_id: str | None = None
    tone: StrategicTone | None = None
    differentiators: list[str] = field(default_factory=list)
    matched_skills: list[str] = field(default_factory=list)
    focus_points: list[str] = field(default_factory=list)
    rule_ids: list[str] = field(default_factory=list)


@dataclass
class _CompileState:
    analysis: PreAnalysisResult
    resume: ResumeContent
    job: JobData
    bullets: dict[str, _BulletDraft] = field(default_factory=dict)
    experiences: dict[str, _ExperienceDraft] = field(default_factory=dict)
    summary: _SummaryDraft = field(default_factory=_SummaryDraft)
    why_fit: list[WhyFitBullet] = field(default_factory=list)
    competencies: list[str] = field(default_factory=list)
    promote_rare: bool = False


class InstructionCompiler:
    """Compiles matched rules into ``TransformationInstructions``."""

    def __init__(self, config: TailoringConfig | None = None):
        self.config = config or get_tailoring_config()

    def compile(
        self,
        matched_rules: list[RuleEvaluationResult],
        analysis: PreAnalysisResult,
        resume: ResumeContent,
        job: JobData,
    ) -> TransformationInstructions:
        """Compile matched rules into one instruction payload."""
        state = _CompileState(analysis=analysis, resume=resume, job=job)
        applied = sorted(
            (r for r in matched_rules if r.matched), key=lambda r: r.priority
        )

        for result in applied:
            for action in result.actions:
                self._apply_action(state, result, action)

        tone = overall_tone(applied)
        instructions = TransformationInstructions(
            bullets=self._build_bullets(state),
            summary=self._build_summary(state, applied, tone),
            why_fit=WhyFitInstruction(bullets=state.why_fit),
            skills=self._build_skills(state),
            experience_order=self._build_experience_order(state),
            experiences=self._build_experiences(state),
            competencies=state.competencies,
            applied_rules=applied,
            overall_tone=tone,
        )
        logger.info(
            f"Compiled {len(instructions.bullets)} bullet instructions "
            f"from {len(applied)} rules"
        )
        return instructions

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def _apply_action(
        self,
        state: _CompileState,
        result: RuleEvaluationResult,
        action: TransformationAction,
    ) -> None:
        if action.target == "bullet":
            for bullet_id in self._bullet_targets(state, result):
                self._apply_bullet_action(state, result, action, bullet_id)
        elif action.target == "summary":
            self._apply_summary_action(state, result, action)
        elif action.target == "skills":
            if action.data.get("promote_rare"):
                state.promote_rare = True
        elif action.target == "experience":
            for experience_id in self._experience_targets(state, result):
                self._apply_experience_action(state, result, action, experience_id)
        elif action.target == "section":
            self._apply_section_action(state, action)

    def _bullet_targets(
        self, state: _CompileState, result: RuleEvaluationResult
    ) -> list[str]:
        """Bullet ids a rule's bullet actions apply to, in résumé order."""
        all_bullets = [b.id for _e, b in state.resume.iter_bullets()]
        if not result.matched_targets:
            return all_bullets

        wanted: set[str] = set()
        for target in result.matched_targets:
            experience = state.resume.get_experience(target)
            if experience is not None:
                wanted.update(b.id for b in experience.bullets)
            elif state.resume.get_bullet(target) is not None:
                wanted.add(target)
            else:
                logger.warning(
                    f"Rule {result.rule_id} targets unknown id {target!r}; dropped"
                )
        return [bullet_id for bullet_id in all_bullets if bullet_id in wanted]

    def _experience_targets(
        self, state: _CompileState, result: RuleEvaluationResult
    ) -> list[str]:
        """Experience ids a rule's experience actions apply to, in résumé order."""
        all_experiences = [e.id for e in state.resume.experiences]
        if not result.matched_targets:
            return all_experiences

        index = state.resume.bullet_index()
        wanted: set[str] = set()
        for target in result.matched_targets:
            if target in all_experiences:
                wanted.add(target)
            elif target in index:
                wanted.add(index[target])
            else:
                logger.warning(
                    f"Rule {result.rule_id} targets unknown id {target!r}; dropped"
                )
        return [e for e in all_experiences if e in wanted]

    # -------------------------------------------------------------------------
    # Bullets
    # -------------------------------------------------------------------------

    def _draft_for(self, state: _CompileState, bullet_id: str) -> _BulletDraft | None:
        draft = state.bullets.get(bullet_id)
        if draft is not None:
            return draft
        for position, (experience, bullet) in enumerate(state.resume.iter_bullets()):
            if bullet.id == bullet_id:
                draft = _BulletDraft(
                    bullet_id=bullet.id,
                    experience_id=experience.id,
                    original_text=bullet.text,
                    position=position,
                )
                state.bullets[bullet_id] = draft
                return draft
        logger.warning(f"Dropping action for unknown bullet {bullet_id!r}")
        return None

    def _action_categories(self, action: TransformationAction) -> list[str]:
        if action.type == "inject_keywords":
            return ["keywords"]
        if action.type == "add_soft_skills":
            return ["soft_skills"]
        if action.type == "contextualize":
            return ["context"]

        declared = action.data.get("category")
        if declared in ENHANCEMENT_ORDER:
            return [declared]
        template = get_bullet_template(action.template_id) if action.template_id else None
        if template is not None and template.applicable_to:
            return list(template.applicable_to)
        return ["metrics"]

    def _apply_bullet_action(
        self,
        state: _CompileState,
        result: RuleEvaluationResult,
        action: TransformationAction,
        bullet_id: str,
    ) -> None:
        draft = self._draft_for(state, bullet_id)
        if draft is None:
            return
        activated = False

        for category in self._action_categories(action):
            if category == "metrics":
                activated |= self._add_metrics(state, draft, action)
            elif category == "keywords":
                activated |= self._add_keywords(state, draft, action)
            elif category == "context":
                activated |= self._add_context(state, draft, action)
            elif category == "soft_skills":
                activated |= self._add_soft_skills(state, draft, action)

        if not activated:
            return
        if draft.tone is None:
            draft.tone = result.strategic_tone
        if draft.template_id is None and get_bullet_template(action.template_id or ""):
            draft.template_id = action.template_id
        _append_unique(draft.rule_ids, [result.rule_id])

    def _add_metrics(
        self, state: _CompileState, draft: _BulletDraft, action: TransformationAction
    ) -> bool:
        for impact_bullet in state.analysis.impact.bullets:
            if impact_bullet.id == draft.bullet_id:
                _append_unique(draft.suggested_metrics, impact_bullet.metrics)
        _append_unique(draft.suggested_metrics, _as_list(action.data.get("examples")))
        draft.categories.add("metrics")
        return True

    def _add_keywords(
        self, state: _CompileState, draft: _BulletDraft, action: TransformationAction
    ) -> bool:
        missing = state.analysis.context.keyword_coverage.missing_keywords()
        limit = action.data.get("max_per_bullet")
        if not isinstance(limit, int) or isinstance(limit, bool):
            limit = self.config.max_keywords_per_bullet
        limit = min(limit, self.config.max_keywords_per_bullet)
        if not missing or limit <= 0:
            return False

        # Rotate by bullet position so keywords spread across bullets.
        offset = draft.position % len(missing)
        candidates = missing[offset:] + missing[:offset]
        picked = [
            keyword
            for keyword in candidates
            if not _mentions(draft.original_text, keyword)
        ][:limit]
        if not picked:
            return False

        _append_unique(draft.keywords, picked)
        draft.categories.add("keywords")
        return True

    def _add_context(
        self, state: _CompileState, draft: _BulletDraft, action: TransformationAction
    ) -> bool:
        company = state.analysis.company
        experience = state.resume.get_experience(draft.experience_id)
        at_company = (
            company is not None
            and experience is not None
            and _norm(experience.company) == _norm(company.company_name)
        )

        fragments: list[str] = []
        if at_company and action.type == "contextualize" and company.context.strip():
            fragments.append(company.context.strip())
        industry_format = action.data.get("industry_format")
        if at_company and company.industry and isinstance(industry_format, str):
            fragment = _fill(industry_format, industry=company.industry)
            if fragment:
                fragments.append(fragment)
        _append_unique(fragments, _as_list(action.data.get("context_hint")))

        _append_unique(draft.context, fragments)
        draft.categories.add("context")
        return True

    def _add_soft_skills(
        self, state: _CompileState, draft: _BulletDraft, action: TransformationAction
    ) -> bool:
        named = _as_list(action.data.get("skill"))
        if named:
            # A named skill is only woven into bullets that evidence it.
            evidenced = {
                _norm(a.skill)
                for a in state.analysis.soft_skills
                if draft.bullet_id in a.bullet_ids
            }
            named = [skill for skill in named if _norm(skill) in evidenced]
        skills = named + _as_list(action.data.get("focus_on"))
        if not skills and not _as_list(action.data.get("skill")):
            skills = [
                a.skill
                for a in state.analysis.soft_skills
                if draft.bullet_id in a.bullet_ids
            ]
        if not skills:
            return False

        _append_unique(draft.soft_skills, skills)
        draft.categories.add("soft_skills")
        return True

    def _bullet_instruction_text(
        self,
        draft: _BulletDraft,
        categories: list[EnhancementCategory],
        tone: StrategicTone,
    ) -> str:
        parts: list[str] = []
        for category in categories:
            if category == "metrics":
                hint = ""
                if draft.suggested_metrics:
                    hint = f" (e.g. {'; '.join(draft.suggested_metrics[:MAX_METRIC_HINTS])})"
                parts.append(f"Quantify the outcome with a concrete metric{hint}.")
            elif category == "keywords":
                parts.append(
                    f"Work in the keywords {', '.join(draft.keywords)} naturally."
                )
            elif category == "context":
                if draft.context:
                    parts.append(f"Add context: {'; '.join(draft.context)}.")
                else:
                    parts.append("Add context a U.S. recruiter needs to place this work.")
            elif category == "soft_skills":
                parts.append(
                    f"Show {', '.join(draft.soft_skills)} through the actions described."
                )

        template = get_bullet_template(draft.template_id or "")
        if template is not None:
            parts.append(f"Follow the {template.name} pattern: {template.pattern}.")
        parts.append(f"Use a {tone} tone.")
        parts.append("Keep the original meaning and do not invent facts.")
        return " ".join(parts)

    def _build_bullets(self, state: _CompileState) -> list[BulletTransformInstruction]:
        index = state.resume.bullet_index()
        instructions: list[BulletTransformInstruction] = []
        for draft in sorted(state.bullets.values(), key=lambda d: d.position):
            if not draft.categories:
                continue
            if index.get(draft.bullet_id) != draft.experience_id:
                logger.warning(
                    f"Dropping instruction for unknown bullet {draft.bullet_id!r}"
                )
                continue

            categories = [c for c in ENHANCEMENT_ORDER if c in draft.categories]
            tone = draft.tone or "measured"
            instructions.append(
                BulletTransformInstruction(
                    bullet_id=draft.bullet_id,
                    experience_id=draft.experience_id,
                    original_text=draft.original_text,
                    add_metrics="metrics" in draft.categories,
                    suggested_metrics=draft.suggested_metrics,
                    add_keywords="keywords" in draft.categories,
                    keywords_to_add=draft.keywords,
                    add_context="context" in draft.categories,
                    context_to_add="; ".join(draft.context),
                    add_soft_skills="soft_skills" in draft.categories,
                    soft_skills_to_weave=draft.soft_skills,
                    template_id=draft.template_id,
                    tone=tone,
                    improvement_level=classify_improvement_level(len(categories)),
                    applied_rule_ids=draft.rule_ids,
                    rewrite_instruction=self._bullet_instruction_text(
                        draft, categories, tone
                    ),
                )
            )
        return instructions

    # -------------------------------------------------------------------------
    # Summary
    # -------------------------------------------------------------------------

    def _ranked_soft_skills(self, state: _CompileState) -> list[str]:
        ranked = sorted(
            state.analysis.soft_skills, key=lambda a: STRENGTH_RANK[a.strength]
        )
        skills: list[str] = []
        _append_unique(skills, [a.skill for a in ranked])
        return skills

    def _apply_summary_action(
        self,
        state: _CompileState,
        result: RuleEvaluationResult,
        action: TransformationAction,
    ) -> None:
        summary = state.summary
        data = action.data

        lead = data.get("lead_with_differentiators")
        if isinstance(lead, int) and not isinstance(lead, bool) and lead > 0:
            _append_unique(
                summary.differentiators, state.analysis.uniqueness.differentiators[:lead]
            )
        if data.get("include_matched_skills"):
            _append_unique(
                summary.matched_skills,
                [m.skill for m in state.analysis.context.matched_skills][
                    :MAX_SUMMARY_SKILLS
                ],
            )
        soft_count = data.get("include_soft_skills")
        if isinstance(soft_count, int) and not isinstance(soft_count, bool):
            top = self._ranked_soft_skills(state)[:soft_count]
            if top:
                _append_unique(
                    summary.focus_points, [f"Signal {' and '.join(top)} naturally"]
                )
        _append_unique(summary.focus_points, _as_list(data.get("focus_points")))

        if summary.tone is None:
            summary.tone = result.strategic_tone
        if summary.template_id is None and get_summary_template(action.template_id or ""):
            summary.template_id = action.template_id
        _append_unique(summary.rule_ids, [result.rule_id])

    def _years_of_experience(self, resume: ResumeContent) -> int:
        starts: list[int] = []
        every: list[int] = []
        for experience in resume.experiences:
            start_years = [int(y) for y in _YEAR_RE.findall(experience.start_date)]
            end_years = [int(y) for y in _YEAR_RE.findall(experience.end_date or "")]
            starts.extend(start_years)
            every.extend(start_years + end_years)
        if not starts:
            return 0
        return max(every) - min(starts)

    def _suggested_summary_template(self, state: _CompileState) -> str:
        analysis = state.analysis
        factor_types = {f.type for f in analysis.uniqueness.factors}
        template = suggest_summary_template(
            years_experience=self._years_of_experience(state.resume),
            is_career_changer="career_transition" in factor_types,
            is_leader=any(
                _norm(a.skill) == "leadership" and a.strength == "strong"
                for a in analysis.soft_skills
            ),
            is_international=(
                analysis.company is not None and not analysis.company.is_well_known
            ),
            is_specialist="domain_expertise" in factor_types,
        )
        return template.id

    def _build_summary(
        self,
        state: _CompileState,
        applied: list[RuleEvaluationResult],
        tone: StrategicTone,
    ) -> SummaryTransformInstruction:
        job = state.job
        summary = state.summary
        company = job.company_name or ""

        if not summary.rule_ids:
            return SummaryTransformInstruction(
                original_summary=state.resume.summary,
                target_role=job.title,
                target_company=company,
                tone=tone,
                rewrite_instruction="Keep the original summary unchanged.",
            )

        template_id = summary.template_id or self._suggested_summary_template(state)
        summary_tone = summary.tone or tone
        alignment = state.analysis.context.fit_assessment.overall_fit or None

        at = f" at {company}" if company else ""
        lines = [f"Rewrite the professional summary for the {job.title} role{at}."]
        if summary.differentiators:
            lines.append(f"Lead with: {'; '.join(summary.differentiators)}.")
        if summary.matched_skills:
            lines.append(f"Mention: {', '.join(summary.matched_skills)}.")
        for point in summary.focus_points:
            lines.append(point.rstrip(".") + ".")
        template = get_summary_template(template_id)
        if template is not None:
            lines.append(f"Structure: {template.structure}")
            guidance = tone_guidance(template_id, summary_tone)
            if guidance:
                lines.append(f"Tone ({summary_tone}): {guidance}")
        lines.append("Keep every claim supported by the resume.")

        return SummaryTransformInstruction(
            original_summary=state.resume.summary,
            target_role=job.title,
            target_company=company,
            unique_differentiators=summary.differentiators,
            matched_skills=summary.matched_skills,
            company_alignment=alignment,
            focus_points=summary.focus_points,
            template_id=template_id,
            tone=summary_tone,
            applied_rule_ids=summary.rule_ids,
            rewrite_instruction=" ".join(lines),
        )

    # -------------------------------------------------------------------------
    # Skills and experience order
    # -------------------------------------------------------------------------

    def _build_skills(self, state: _CompileState) -> SkillsReorderInstruction:
        resume, job, analysis = state.resume, state.job, state.analysis
        technical = list(resume.skills.technical)
        job_skills = [s for s in (job.skills or []) if s.strip()]
        job_skill_keys = {_norm(s) for s in job_skills}
        requirements = " \n ".join(job.requirements or [])

        matched = [
            skill
            for skill in technical
            if _norm(skill) in job_skill_keys
            or (requirements and _mentions(requirements, skill))
        ]

        rare: list[str] = []
        if state.promote_rare:
            rare_text = " \n ".join(
                " ".join([f.title, f.description, *f.evidence])
                for f in analysis.uniqueness.factors
                if f.rarity in ("rare", "very_rare")
            )
            rare = [
                skill
                for skill in technical
                if skill not in matched and rare_text and _mentions(rare_text, skill)
            ]

        rest = [skill for skill in technical if skill not in matched and skill not in rare]
        present = {_norm(s) for s in technical}
        to_add: list[str] = []
        _append_unique(to_add, [s for s in job_skills if _norm(s) not in present])

        soft = list(resume.skills.soft)
        evidenced = {
            _norm(a.skill)
            for a in analysis.soft_skills
            if a.strength in ("strong", "moderate")
        }
        emphasized = [s for s in soft if _norm(s) in evidenced]

        return SkillsReorderInstruction(
            technical=TechnicalSkillsReorder(
                original=technical,
                reordered=matched + rare + rest,
                matched_first=matched,
                to_add=to_add,
            ),
            soft=SoftSkillsReorder(
                original=soft,
                reordered=emphasized + [s for s in soft if s not in emphasized],
                emphasized=emphasized,
            ),
        )

    def _relevance_scores(self, state: _CompileState) -> dict[str, float]:
        known = {e.id for e in state.resume.experiences}
        scores: dict[str, float] = {}
        for alignment in state.analysis.context.experience_alignments:
            if alignment.experience_id not in known:
                logger.warning(
                    f"Ignoring alignment for unknown experience {alignment.experience_id!r}"
                )
                continue
            score = RELEVANCE_SCORES[alignment.relevance] + ASPECT_BONUS * len(
                alignment.matched_aspects
            )
            scores[alignment.experience_id] = max(
                scores.get(alignment.experience_id, 0.0), round(score, 4)
            )
        return scores

    def _build_experience_order(
        self, state: _CompileState
    ) -> ExperienceReorderInstruction:
        ids = [e.id for e in state.resume.experiences]
        found = self._relevance_scores(state)
        scores = {experience_id: found.get(experience_id, 0.0) for experience_id in ids}
        return ExperienceReorderInstruction(
            experience_ids=ids,
            relevance_scores=scores,
            new_order=sorted(ids, key=lambda i: scores[i], reverse=True),
        )

    # -------------------------------------------------------------------------
    # Experiences and sections
    # -------------------------------------------------------------------------

    def _company_description(self, state: _CompileState) -> str | None:
        company = state.analysis.company
        if company is None:
            return None
        if company.context.strip():
            return company.context.strip()
        descriptors = [
            part
            for part in (
                company.funding_stage,
                company.industry,
                company.size if company.size != "unknown" else None,
            )
            if part
        ]
        if not descriptors:
            return None
        return f"{' '.join(descriptors)} company"

    def _apply_experience_action(
        self,
        state: _CompileState,
        result: RuleEvaluationResult,
        action: TransformationAction,
        experience_id: str,
    ) -> None:
        experience = state.resume.get_experience(experience_id)
        draft = state.experiences.get(experience_id) or _ExperienceDraft(experience)
        data = action.data
        company = state.analysis.company
        at_company = company is not None and _norm(experience.company) == _norm(
            company.company_name
        )
        changed = False

        if data.get("add_company_description") and at_company:
            description = self._company_description(state)
            if description:
                _append_unique(draft.context, [description])
                changed = True

        if data.get("add_comparable") and at_company:
            comparable = company.comparable
            mappings = data.get("industry_mappings") or {}
            if not comparable and company.industry and isinstance(mappings, dict):
                options = _as_list(mappings.get(company.industry.lower()))
                comparable = options[0] if options else None
            fmt = data.get("comparable_format") or "Similar to {comparable}"
            line = _fill(str(fmt), comparable=comparable) if comparable else None
            if line:
                _append_unique(draft.context, [line])
                changed = True

        mappings = data.get("title_mappings")
        if isinstance(mappings, dict) and draft.suggested_title is None:
            suggested = mappings.get(_norm(experience.title))
            if isinstance(suggested, str) and suggested != experience.title:
                draft.suggested_title = suggested
                changed = True

        if data.get("highlight_relevant") and not draft.highlight:
            for alignment in state.analysis.context.experience_alignments:
                if alignment.experience_id == experience_id and alignment.relevance == "high":
                    draft.highlight = True
                    changed = True

        if changed:
            _append_unique(draft.rule_ids, [result.rule_id])
            state.experiences[experience_id] = draft

    def _build_experiences(
        self, state: _CompileState
    ) -> list[ExperienceTransformInstruction]:
        instructions: list[ExperienceTransformInstruction] = []
        for experience in state.resume.experiences:
            draft = state.experiences.get(experience.id)
            if draft is None:
                continue

            parts: list[str] = []
            if draft.context:
                parts.append(
                    f"Introduce {experience.company} as: {'; '.join(draft.context)}."
                )
            if draft.suggested_title:
                parts.append(f"Use the U.S. title '{draft.suggested_title}'.")
            if draft.highlight:
                parts.append("Emphasize this role; it is highly relevant to the target job.")

            instructions.append(
                ExperienceTransformInstruction(
                    experience_id=experience.id,
                    company=experience.company,
                    title=experience.title,
                    company_context="; ".join(draft.context) or None,
                    suggested_title=draft.suggested_title,
                    highlight=draft.highlight,
                    applied_rule_ids=draft.rule_ids,
                    rewrite_instruction=" ".join(parts),
                )
            )
        return instructions

    def _apply_section_action(
        self, state: _CompileState, action: TransformationAction
    ) -> None:
        section = action.data.get("section")
        factors = state.analysis.uniqueness.factors

        if section == "why_fit":
            rarities = _as_list(action.data.get("filter_rarity")) or ["rare", "very_rare"]
            eligible = sorted(
                (f for f in factors if f.rarity in rarities),
                key=lambda f: RARITY_RANK[f.rarity],
            )
            labels = {_norm(b.label) for b in state.why_fit}
            for factor in eligible:
                if len(state.why_fit) >= self.config.why_fit_max_bullets:
                    break
                if _norm(factor.title) in labels:
                    continue
                labels.add(_norm(factor.title))
                state.why_fit.append(
                    WhyFitBullet(
                        label=factor.title,
                        text=factor.description or factor.suggestion or factor.title,
                        source="uniqueness",
                        rarity=factor.rarity,
                    )
                )
        elif section == "competencies" and action.data.get("create_expertise_category"):
            entries = [f.title for f in factors if f.type == "domain_expertise"]
            entries += [
                m.skill
                for m in state.analysis.context.matched_skills
                if m.strength == "exact"
            ]
            _append_unique(state.competencies, entries)
            del state.competencies[MAX_COMPETENCIES:]
        else:
            logger.warning(f"Ignoring highlight for unknown section {section!r}")
