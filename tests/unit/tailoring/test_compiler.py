"""Unit tests for the instruction compiler.

Rule results are built by hand so each test controls exactly which actions
reach the compiler.
"""

from itertools import product

import pytest

from src.analysis.models import ExperienceAlignment, UniquenessFactor
from src.resume.models import JobData, Skills
from src.tailoring.compiler import (
    InstructionCompiler,
    classify_improvement_level,
    overall_tone,
)
from src.tailoring.config import TailoringConfig
from src.tailoring.models import (
    ENHANCEMENT_ORDER,
    BulletTransformInstruction,
    RuleEvaluationResult,
)

LEVEL_BY_COUNT = {0: "none", 1: "minor", 2: "major", 3: "transformed", 4: "transformed"}


def rule_result(
    rule_id: str,
    actions: list[dict],
    *,
    priority: int = 10,
    tone: str = "confident",
    targets: list[str] | None = None,
    issue: int = 2,
    matched: bool = True,
) -> RuleEvaluationResult:
    return RuleEvaluationResult(
        rule_id=rule_id,
        rule_name=rule_id,
        matched=matched,
        priority=priority,
        recruiter_issue=issue,
        matched_targets=targets or [],
        actions=actions,
        strategic_tone=tone,
    )


@pytest.fixture
def config():
    return TailoringConfig(_env_file=None)  # type: ignore[call-arg]


@pytest.fixture
def compiler(config):
    return InstructionCompiler(config)


class TestImprovementLevel:
    @pytest.mark.parametrize(
        ("count", "level"),
        [(0, "none"), (1, "minor"), (2, "major"), (3, "transformed"), (4, "transformed")],
    )
    def test_classify(self, count, level):
        assert classify_improvement_level(count) == level

    @pytest.mark.parametrize("flags", list(product([False, True], repeat=4)))
    def test_level_follows_active_flags(self, flags):
        add_metrics, add_keywords, add_context, add_soft_skills = flags
        instruction = BulletTransformInstruction(
            bullet_id="b1",
            experience_id="exp-1",
            original_text="Built payment reconciliation service in Python",
            add_metrics=add_metrics,
            add_keywords=add_keywords,
            add_context=add_context,
            add_soft_skills=add_soft_skills,
        )

        active = instruction.active_categories()

        assert len(active) == sum(flags)
        assert active == [c for c in ENHANCEMENT_ORDER if c in active]
        expected = LEVEL_BY_COUNT[sum(flags)]
        assert classify_improvement_level(len(active)) == expected

    @pytest.mark.parametrize(
        ("categories", "level"),
        [
            (["metrics"], "minor"),
            (["soft_skills"], "minor"),
            (["metrics", "context"], "major"),
            (["keywords", "soft_skills"], "major"),
            (["metrics", "keywords", "soft_skills"], "transformed"),
            (["metrics", "keywords", "context", "soft_skills"], "transformed"),
        ],
    )
    def test_compiled_level_matches_flags(
        self, compiler, sample_analysis, sample_resume, sample_job, categories, level
    ):
        actions = {
            "metrics": {"type": "enhance", "target": "bullet"},
            "keywords": {"type": "inject_keywords", "target": "bullet"},
            "context": {"type": "contextualize", "target": "bullet"},
            "soft_skills": {"type": "add_soft_skills", "target": "bullet"},
        }
        result = rule_result("r", [actions[c] for c in categories], targets=["b2"])

        instructions = compiler.compile([result], sample_analysis, sample_resume, sample_job)

        bullet = instructions.get_bullet("b2")
        assert bullet.active_categories() == [c for c in ENHANCEMENT_ORDER if c in categories]
        assert bullet.improvement_level == level


class TestOverallTone:
    def test_most_frequent_tone(self):
        results = [
            rule_result("a", [], tone="confident"),
            rule_result("b", [], tone="confident"),
            rule_result("c", [], tone="humble"),
        ]

        assert overall_tone(results) == "confident"

    def test_tie_is_measured(self):
        results = [rule_result("a", [], tone="confident"), rule_result("b", [], tone="humble")]

        assert overall_tone(results) == "measured"

    def test_no_rules_is_measured(self):
        assert overall_tone([]) == "measured"


class TestBulletInstructions:
    """Tests for per-bullet directives."""

    def test_metrics_action_on_target_bullet(
        self, compiler, sample_analysis, sample_resume, sample_job
    ):
        result = rule_result(
            "impact-car",
            [
                {
                    "type": "apply_template",
                    "target": "bullet",
                    "template_id": "CAR_FORMAT",
                    "data": {"examples": ["saved $X per month"]},
                }
            ],
            targets=["b1"],
        )

        instructions = compiler.compile([result], sample_analysis, sample_resume, sample_job)

        assert [b.bullet_id for b in instructions.bullets] == ["b1"]
        bullet = instructions.bullets[0]
        assert bullet.experience_id == "exp-1"
        assert bullet.add_metrics is True
        assert bullet.suggested_metrics == ["$X processed daily", "saved $X per month"]
        assert bullet.template_id == "CAR_FORMAT"
        assert bullet.tone == "confident"
        assert bullet.improvement_level == "minor"
        assert bullet.applied_rule_ids == ["impact-car"]
        assert bullet.rewrite_instruction.startswith("Quantify the outcome")

    def test_experience_target_expands_to_its_bullets(
        self, compiler, sample_analysis, sample_resume, sample_job
    ):
        result = rule_result(
            "r", [{"type": "enhance", "target": "bullet"}], targets=["exp-2"]
        )

        instructions = compiler.compile([result], sample_analysis, sample_resume, sample_job)

        assert [b.bullet_id for b in instructions.bullets] == ["b4", "b5"]

    def test_no_targets_means_every_bullet(
        self, compiler, sample_analysis, sample_resume, sample_job
    ):
        result = rule_result("r", [{"type": "enhance", "target": "bullet"}])

        instructions = compiler.compile([result], sample_analysis, sample_resume, sample_job)

        assert [b.bullet_id for b in instructions.bullets] == ["b1", "b2", "b3", "b4", "b5"]

    def test_unknown_target_is_dropped(
        self, compiler, sample_analysis, sample_resume, sample_job
    ):
        result = rule_result(
            "r", [{"type": "enhance", "target": "bullet"}], targets=["ghost", "b3"]
        )

        instructions = compiler.compile([result], sample_analysis, sample_resume, sample_job)

        assert [b.bullet_id for b in instructions.bullets] == ["b3"]

    def test_every_bullet_id_exists_in_resume(
        self, compiler, sample_analysis, sample_resume, sample_job
    ):
        result = rule_result("r", [{"type": "enhance", "target": "bullet"}])

        instructions = compiler.compile([result], sample_analysis, sample_resume, sample_job)

        index = sample_resume.bullet_index()
        for bullet in instructions.bullets:
            assert index[bullet.bullet_id] == bullet.experience_id

    def test_keywords_rotate_across_bullets(
        self, compiler, sample_analysis, sample_resume, sample_job
    ):
        result = rule_result(
            "kw",
            [{"type": "inject_keywords", "target": "bullet", "data": {"max_per_bullet": 1}}],
            targets=["b1", "b2"],
        )

        instructions = compiler.compile([result], sample_analysis, sample_resume, sample_job)

        assert [b.keywords_to_add for b in instructions.bullets] == [
            ["Kubernetes"],
            ["PostgreSQL"],
        ]
        assert all(b.add_keywords for b in instructions.bullets)

    def test_keyword_limit_is_capped_by_config(
        self, sample_analysis, sample_resume, sample_job
    ):
        compiler = InstructionCompiler(
            TailoringConfig(_env_file=None, max_keywords_per_bullet=1)  # type: ignore[call-arg]
        )
        result = rule_result(
            "kw",
            [{"type": "inject_keywords", "target": "bullet", "data": {"max_per_bullet": 5}}],
            targets=["b1"],
        )

        instructions = compiler.compile([result], sample_analysis, sample_resume, sample_job)

        assert instructions.bullets[0].keywords_to_add == ["Kubernetes"]

    def test_keywords_already_in_bullet_are_skipped(
        self, compiler, sample_analysis, sample_resume, sample_job
    ):
        bullet_text = "Ran Kubernetes clusters for payment services"
        resume = sample_resume.model_copy(deep=True)
        resume.experiences[0].bullets[0].text = bullet_text
        result = rule_result(
            "kw", [{"type": "inject_keywords", "target": "bullet"}], targets=["b1"]
        )

        instructions = compiler.compile([result], sample_analysis, resume, sample_job)

        assert instructions.bullets[0].keywords_to_add == ["PostgreSQL"]

    def test_no_missing_keywords_means_no_instruction(
        self, compiler, sample_analysis, sample_resume, sample_job
    ):
        coverage = sample_analysis.context.keyword_coverage.model_copy(
            update={"keywords": []}
        )
        context = sample_analysis.context.model_copy(update={"keyword_coverage": coverage})
        analysis = sample_analysis.model_copy(update={"context": context})
        result = rule_result("kw", [{"type": "inject_keywords", "target": "bullet"}])

        instructions = compiler.compile([result], analysis, sample_resume, sample_job)

        assert instructions.bullets == []

    def test_soft_skills_fall_back_to_cited_assessments(
        self, compiler, sample_analysis, sample_resume, sample_job
    ):
        result = rule_result(
            "soft", [{"type": "add_soft_skills", "target": "bullet"}], targets=["b2", "b3"]
        )

        instructions = compiler.compile([result], sample_analysis, sample_resume, sample_job)

        assert [b.soft_skills_to_weave for b in instructions.bullets] == [
            ["leadership", "collaboration"],
            ["leadership"],
        ]

    def test_named_soft_skill(self, compiler, sample_analysis, sample_resume, sample_job):
        result = rule_result(
            "soft",
            [{"type": "add_soft_skills", "target": "bullet", "data": {"skill": "leadership"}}],
            targets=["b3"],
        )

        instructions = compiler.compile([result], sample_analysis, sample_resume, sample_job)

        assert instructions.bullets[0].bullet_id == "b3"
        assert instructions.bullets[0].soft_skills_to_weave == ["leadership"]

    def test_named_soft_skill_skips_bullets_without_evidence(
        self, compiler, sample_analysis, sample_resume, sample_job
    ):
        result = rule_result(
            "soft",
            [{"type": "add_soft_skills", "target": "bullet", "data": {"skill": "Leadership"}}],
            targets=["b2", "b4"],
        )

        instructions = compiler.compile([result], sample_analysis, sample_resume, sample_job)

        assert [b.bullet_id for b in instructions.bullets] == ["b2"]
        assert instructions.bullets[0].soft_skills_to_weave == ["Leadership"]

    def test_named_soft_skill_without_any_evidence(
        self, compiler, sample_analysis, sample_resume, sample_job
    ):
        result = rule_result(
            "soft",
            [{"type": "add_soft_skills", "target": "bullet", "data": {"skill": "communication"}}],
            targets=["b4"],
        )

        instructions = compiler.compile([result], sample_analysis, sample_resume, sample_job)

        assert instructions.bullets == []

    def test_context_at_researched_company(
        self, compiler, sample_analysis, sample_resume, sample_job
    ):
        result = rule_result(
            "ctx",
            [
                {
                    "type": "contextualize",
                    "target": "bullet",
                    "data": {"industry_format": "at a {industry} company"},
                }
            ],
            targets=["b1"],
        )

        instructions = compiler.compile([result], sample_analysis, sample_resume, sample_job)

        bullet = instructions.bullets[0]
        assert bullet.add_context is True
        assert bullet.context_to_add == (
            "Nigerian payments startup processing card transactions; at a fintech company"
        )

    def test_combined_categories_are_transformed(
        self, compiler, sample_analysis, sample_resume, sample_job
    ):
        results = [
            rule_result(
                "full",
                [{"type": "apply_template", "target": "bullet", "template_id": "FULL_CAR_TRANSFORM"}],
                priority=5,
                tone="measured",
                targets=["b2"],
            ),
            rule_result(
                "kw", [{"type": "inject_keywords", "target": "bullet"}], targets=["b2"]
            ),
            rule_result(
                "soft", [{"type": "add_soft_skills", "target": "bullet"}], targets=["b2"]
            ),
        ]

        instructions = compiler.compile(results, sample_analysis, sample_resume, sample_job)

        bullet = instructions.bullets[0]
        assert bullet.active_categories() == ["metrics", "keywords", "context", "soft_skills"]
        assert bullet.improvement_level == "transformed"
        assert bullet.template_id == "FULL_CAR_TRANSFORM"
        # The first rule to touch the bullet sets its tone.
        assert bullet.tone == "measured"
        assert bullet.applied_rule_ids == ["full", "kw", "soft"]

    def test_rules_apply_in_priority_order(
        self, compiler, sample_analysis, sample_resume, sample_job
    ):
        results = [
            rule_result(
                "late",
                [{"type": "apply_template", "target": "bullet", "template_id": "TIME_SAVINGS"}],
                priority=25,
                tone="humble",
                targets=["b1"],
            ),
            rule_result(
                "early",
                [{"type": "apply_template", "target": "bullet", "template_id": "CAR_FORMAT"}],
                priority=5,
                tone="confident",
                targets=["b1"],
            ),
        ]

        instructions = compiler.compile(results, sample_analysis, sample_resume, sample_job)

        bullet = instructions.bullets[0]
        assert bullet.template_id == "CAR_FORMAT"
        assert bullet.tone == "confident"
        assert [r.rule_id for r in instructions.applied_rules] == ["early", "late"]

    def test_unmatched_results_are_ignored(
        self, compiler, sample_analysis, sample_resume, sample_job
    ):
        result = rule_result(
            "r", [{"type": "enhance", "target": "bullet"}], matched=False
        )

        instructions = compiler.compile([result], sample_analysis, sample_resume, sample_job)

        assert instructions.bullets == []
        assert instructions.applied_rules == []


class TestSummaryInstruction:
    def test_no_summary_rule_keeps_summary(
        self, compiler, sample_analysis, sample_resume, sample_job
    ):
        instructions = compiler.compile([], sample_analysis, sample_resume, sample_job)

        summary = instructions.summary
        assert summary.rewrite_instruction == "Keep the original summary unchanged."
        assert summary.original_summary == sample_resume.summary
        assert summary.target_role == "Senior Backend Engineer"
        assert summary.target_company == "Stripe"
        assert summary.template_id is None

    def test_summary_rule_collects_differentiators_and_skills(
        self, compiler, sample_analysis, sample_resume, sample_job
    ):
        result = rule_result(
            "summary",
            [
                {
                    "type": "enhance",
                    "target": "summary",
                    "data": {"lead_with_differentiators": 1, "include_matched_skills": True},
                }
            ],
            issue=1,
        )

        instructions = compiler.compile([result], sample_analysis, sample_resume, sample_job)

        summary = instructions.summary
        assert summary.unique_differentiators == ["Payments domain depth"]
        assert summary.matched_skills == ["Go", "Python"]
        assert summary.company_alignment == "Strong backend fit with a Kubernetes gap"
        # Unfamiliar employer and under five years: international template.
        assert summary.template_id == "INTERNATIONAL_CANDIDATE"
        assert summary.applied_rule_ids == ["summary"]
        assert "Payments domain depth" in summary.rewrite_instruction

    def test_explicit_summary_template_wins(
        self, compiler, sample_analysis, sample_resume, sample_job
    ):
        result = rule_result(
            "summary",
            [{"type": "apply_template", "target": "summary", "template_id": "LEADER_MANAGER"}],
        )

        instructions = compiler.compile([result], sample_analysis, sample_resume, sample_job)

        assert instructions.summary.template_id == "LEADER_MANAGER"

    def test_soft_skill_focus_point(
        self, compiler, sample_analysis, sample_resume, sample_job
    ):
        result = rule_result(
            "summary",
            [{"type": "enhance", "target": "summary", "data": {"include_soft_skills": 1}}],
        )

        instructions = compiler.compile([result], sample_analysis, sample_resume, sample_job)

        assert instructions.summary.focus_points == ["Signal leadership naturally"]


class TestSkillsInstruction:
    def test_matched_skills_move_first(self, compiler, sample_analysis, sample_resume):
        resume = sample_resume.model_copy(
            update={"skills": Skills(technical=["Python", "Go", "SQL"])}
        )
        job = JobData(id="job-2", title="Engineer", skills=["Go"])

        instructions = compiler.compile([], sample_analysis, resume, job)

        technical = instructions.skills.technical
        assert technical.reordered == ["Go", "Python", "SQL"]
        assert technical.matched_first == ["Go"]
        assert technical.to_add == []

    def test_reorder_is_a_permutation(self, compiler, sample_analysis, sample_resume, sample_job):
        instructions = compiler.compile([], sample_analysis, sample_resume, sample_job)

        technical = instructions.skills.technical
        assert sorted(technical.reordered) == sorted(sample_resume.skills.technical)
        assert technical.reordered == ["Go", "Python", "SQL", "Docker"]
        assert technical.to_add == ["Kubernetes", "PostgreSQL"]

    def test_requirements_text_matches_whole_words(
        self, compiler, sample_analysis, sample_resume
    ):
        job = JobData(
            id="job-3",
            title="Engineer",
            requirements=["Strong SQL and Docker experience", "Good communication"],
        )

        instructions = compiler.compile([], sample_analysis, sample_resume, job)

        assert instructions.skills.technical.reordered == ["SQL", "Docker", "Python", "Go"]

    def test_promote_rare_places_rare_skills_after_matches(
        self, compiler, sample_analysis, sample_resume, sample_job
    ):
        factor = UniquenessFactor(
            id="f3",
            type="skill_combination",
            title="Ledger sharding",
            rarity="rare",
            evidence=["Designed SQL sharding for double-entry ledgers"],
        )
        uniqueness = sample_analysis.uniqueness.model_copy(update={"factors": [factor]})
        analysis = sample_analysis.model_copy(update={"uniqueness": uniqueness})
        result = rule_result(
            "rare", [{"type": "reorder", "target": "skills", "data": {"promote_rare": True}}]
        )

        instructions = compiler.compile([result], analysis, sample_resume, sample_job)

        assert instructions.skills.technical.reordered == ["Go", "SQL", "Python", "Docker"]

    def test_evidenced_soft_skills_first(
        self, compiler, sample_analysis, sample_resume, sample_job
    ):
        resume = sample_resume.model_copy(
            update={"skills": Skills(technical=[], soft=["Communication", "Leadership"])}
        )

        instructions = compiler.compile([], sample_analysis, resume, sample_job)

        soft = instructions.skills.soft
        assert soft.emphasized == ["Leadership"]
        assert soft.reordered == ["Leadership", "Communication"]


class TestExperienceOrder:
    def test_relevance_scores_and_order(
        self, compiler, sample_analysis, sample_resume, sample_job
    ):
        instructions = compiler.compile([], sample_analysis, sample_resume, sample_job)

        order = instructions.experience_order
        assert order.experience_ids == ["exp-1", "exp-2"]
        assert order.relevance_scores == {"exp-1": 1.1, "exp-2": 0.65}
        assert order.new_order == ["exp-1", "exp-2"]

    def test_more_relevant_older_role_moves_up(
        self, compiler, sample_analysis, sample_resume, sample_job
    ):
        context = sample_analysis.context.model_copy(
            update={
                "experience_alignments": [
                    ExperienceAlignment(experience_id="exp-1", relevance="low"),
                    ExperienceAlignment(experience_id="exp-2", relevance="high"),
                    ExperienceAlignment(experience_id="exp-9", relevance="high"),
                ]
            }
        )
        analysis = sample_analysis.model_copy(update={"context": context})

        instructions = compiler.compile([], analysis, sample_resume, sample_job)

        order = instructions.experience_order
        assert order.new_order == ["exp-2", "exp-1"]
        assert set(order.relevance_scores) == {"exp-1", "exp-2"}

    def test_order_is_only_suggested(
        self, compiler, sample_analysis, sample_resume, sample_job
    ):
        compiler.compile([], sample_analysis, sample_resume, sample_job)

        assert [e.id for e in sample_resume.experiences] == ["exp-1", "exp-2"]


class TestExperienceAndSections:
    def test_company_context_and_comparable(
        self, compiler, sample_analysis, sample_resume, sample_job
    ):
        result = rule_result(
            "us-context",
            [
                {
                    "type": "contextualize",
                    "target": "experience",
                    "data": {
                        "add_company_description": True,
                        "add_comparable": True,
                        "comparable_format": "Comparable to {comparable}",
                        "highlight_relevant": True,
                    },
                }
            ],
            issue=3,
        )

        instructions = compiler.compile([result], sample_analysis, sample_resume, sample_job)

        assert [e.experience_id for e in instructions.experiences] == ["exp-1"]
        experience = instructions.experiences[0]
        assert experience.company_context == (
            "Nigerian payments startup processing card transactions; Comparable to Stripe"
        )
        assert experience.highlight is True
        assert experience.applied_rule_ids == ["us-context"]

    def test_malformed_format_text_is_isolated(
        self, compiler, sample_analysis, sample_resume, sample_job
    ):
        broken_experience = rule_result(
            "broken-experience",
            [
                {
                    "type": "contextualize",
                    "target": "experience",
                    "data": {"add_comparable": True, "comparable_format": "Like {peer}"},
                }
            ],
            priority=1,
        )
        broken_bullet = rule_result(
            "broken-bullet",
            [
                {
                    "type": "enhance",
                    "target": "bullet",
                    "data": {
                        "category": "context",
                        "industry_format": "a {sector} firm",
                        "context_hint": "regulated payments",
                    },
                }
            ],
            targets=["b1"],
            priority=2,
        )
        working = rule_result(
            "working",
            [{"type": "contextualize", "target": "experience", "data": {"add_comparable": True}}],
            priority=3,
        )

        instructions = compiler.compile(
            [broken_experience, broken_bullet, working],
            sample_analysis,
            sample_resume,
            sample_job,
        )

        assert instructions.experiences[0].company_context == "Similar to Stripe"
        assert instructions.get_bullet("b1").context_to_add == "regulated payments"

    def test_title_mapping(self, compiler, sample_analysis, sample_resume, sample_job):
        result = rule_result(
            "titles",
            [
                {
                    "type": "contextualize",
                    "target": "experience",
                    "data": {"title_mappings": {"software engineer": "Software Engineer II"}},
                }
            ],
            issue=3,
        )

        instructions = compiler.compile([result], sample_analysis, sample_resume, sample_job)

        assert [(e.experience_id, e.suggested_title) for e in instructions.experiences] == [
            ("exp-2", "Software Engineer II")
        ]

    def test_why_fit_prefers_rarest_factors(
        self, sample_analysis, sample_resume, sample_job
    ):
        compiler = InstructionCompiler(
            TailoringConfig(_env_file=None, why_fit_max_bullets=1)  # type: ignore[call-arg]
        )
        result = rule_result(
            "why-fit",
            [{"type": "highlight", "target": "section", "data": {"section": "why_fit"}}],
            issue=1,
        )

        instructions = compiler.compile([result], sample_analysis, sample_resume, sample_job)

        assert [b.label for b in instructions.why_fit.bullets] == ["Fintech compliance"]
        assert instructions.why_fit.bullets[0].rarity == "very_rare"

    def test_why_fit_lists_every_eligible_factor(
        self, compiler, sample_analysis, sample_resume, sample_job
    ):
        result = rule_result(
            "why-fit",
            [{"type": "highlight", "target": "section", "data": {"section": "why_fit"}}],
        )

        instructions = compiler.compile(
            [result, result], sample_analysis, sample_resume, sample_job
        )

        assert [b.label for b in instructions.why_fit.bullets] == [
            "Fintech compliance",
            "Payments and platform engineering",
        ]

    def test_competencies(self, compiler, sample_analysis, sample_resume, sample_job):
        result = rule_result(
            "competencies",
            [
                {
                    "type": "highlight",
                    "target": "section",
                    "data": {"section": "competencies", "create_expertise_category": True},
                }
            ],
        )

        instructions = compiler.compile([result], sample_analysis, sample_resume, sample_job)

        assert instructions.competencies == ["Fintech compliance", "Go"]


class TestDeterminism:
    def test_compile_is_idempotent(self, compiler, sample_analysis, sample_resume, sample_job):
        results = [
            rule_result("a", [{"type": "inject_keywords", "target": "bullet"}], priority=5),
            rule_result("b", [{"type": "add_soft_skills", "target": "bullet"}], tone="humble"),
            rule_result(
                "c",
                [{"type": "enhance", "target": "summary", "data": {"include_matched_skills": True}}],
            ),
        ]

        first = compiler.compile(results, sample_analysis, sample_resume, sample_job)
        second = compiler.compile(results, sample_analysis, sample_resume, sample_job)

        assert first == second
        assert first.to_json() == second.to_json()

    def test_instructions_round_trip(self, compiler, sample_analysis, sample_resume, sample_job):
        from src.tailoring.models import TransformationInstructions

        result = rule_result("a", [{"type": "enhance", "target": "bullet"}])
        instructions = compiler.compile([result], sample_analysis, sample_resume, sample_job)

        assert TransformationInstructions.from_dict(instructions.to_dict()) == instructions
