"""Data models for the Tailoring module.

Contains Pydantic models for:
- TransformationRule: Declarative rule (condition tree + actions)
- RuleEvaluationResult: Outcome of evaluating one rule
- TransformationInstructions: Compiled, résumé-specific rewrite payload
- TailoringChanges: Diff between the original and tailored résumé
- HybridTailorResult: Audit trail of one tailoring run
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from src.analysis.models import ImprovementLevel, PreAnalysisResult, Rarity
from src.resume.models import ResumeContent
from src.scoring.models import RecruiterReadinessScore

StrategicTone = Literal["confident", "measured", "humble"]
RecruiterIssue = Literal[1, 2, 3, 4, 5]
EnhancementCategory = Literal["metrics", "keywords", "context", "soft_skills"]

RECRUITER_ISSUES: dict[int, dict[str, str]] = {
    1: {"name": "Uniqueness", "description": "Resumes look identical"},
    2: {"name": "Impact", "description": "Lists duties, not impact"},
    3: {"name": "US Context", "description": "Unknown companies need context"},
    4: {"name": "Cultural Fit", "description": "Not showing cultural fit"},
    5: {"name": "Customization", "description": "Generic applications"},
}

# Canonical order used whenever enhancement categories are listed.
ENHANCEMENT_ORDER: tuple[EnhancementCategory, ...] = (
    "metrics",
    "keywords",
    "context",
    "soft_skills",
)


# =============================================================================
# Rule conditions
# =============================================================================


class AndCondition(BaseModel):
    """True when every child is true (vacuously true with no children)."""

    model_config = ConfigDict(frozen=True)

    type: Literal["AND"] = "AND"
    conditions: list[RuleCondition] = Field(default_factory=list)


class OrCondition(BaseModel):
    """True when any child is true (false with no children)."""

    model_config = ConfigDict(frozen=True)

    type: Literal["OR"] = "OR"
    conditions: list[RuleCondition] = Field(default_factory=list)


class NotCondition(BaseModel):
    """Negates exactly one child."""

    model_config = ConfigDict(frozen=True)

    type: Literal["NOT"] = "NOT"
    conditions: list[RuleCondition] = Field(...)

    @field_validator("conditions")
    @classmethod
    def require_single_child(cls, v: list) -> list:
        if len(v) != 1:
            raise ValueError(f"NOT takes exactly one child condition (got {len(v)})")
        return v


class ThresholdCondition(BaseModel):
    """Numeric comparison of a bundle field against a constant."""

    model_config = ConfigDict(frozen=True)

    type: Literal["THRESHOLD"] = "THRESHOLD"
    field: str = Field(..., min_length=1, description="Dot path into the bundle")
    operator: Literal["<", "<=", "=", ">=", ">"]
    value: float

    @field_validator("value", mode="before")
    @classmethod
    def require_number(cls, v: Any) -> Any:
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError(f"THRESHOLD value must be a number (got {v!r})")
        return v


class MatchCondition(BaseModel):
    """Equality, membership or containment test on a bundle field."""

    model_config = ConfigDict(frozen=True)

    type: Literal["MATCH"] = "MATCH"
    field: str = Field(..., min_length=1, description="Dot path into the bundle")
    operator: Literal["=", "in", "contains"] = "="
    value: Union[bool, int, float, str, list[str]]

    @model_validator(mode="after")
    def check_operator_value(self) -> MatchCondition:
        if self.operator == "in" and not isinstance(self.value, list):
            raise ValueError("MATCH with operator 'in' requires a list value")
        return self


class ExistsCondition(BaseModel):
    """True when a bundle field is present and non-empty."""

    model_config = ConfigDict(frozen=True)

    type: Literal["EXISTS"] = "EXISTS"
    field: str = Field(..., min_length=1, description="Dot path into the bundle")


RuleCondition = Annotated[
    Union[
        AndCondition,
        OrCondition,
        NotCondition,
        ThresholdCondition,
        MatchCondition,
        ExistsCondition,
    ],
    Field(discriminator="type"),
]

AndCondition.model_rebuild()
OrCondition.model_rebuild()
NotCondition.model_rebuild()

LEAF_CONDITIONS = (ThresholdCondition, MatchCondition, ExistsCondition)


def condition_depth(condition: BaseModel) -> int:
    """Depth of a condition tree (a single leaf has depth 1)."""
    children = getattr(condition, "conditions", None)
    if not children:
        return 1
    return 1 + max(condition_depth(child) for child in children)


def condition_fields(condition: BaseModel) -> list[str]:
    """Every field path referenced by a condition tree, in declaration order."""
    if isinstance(condition, LEAF_CONDITIONS):
        return [condition.field]
    fields: list[str] = []
    for child in getattr(condition, "conditions", None) or []:
        for path in condition_fields(child):
            if path not in fields:
                fields.append(path)
    return fields


# =============================================================================
# Rules
# =============================================================================


class TransformationAction(BaseModel):
    """Declares what should change; carries no résumé data until compiled."""

    model_config = ConfigDict(frozen=True)

    type: Literal[
        "apply_template",
        "reorder",
        "enhance",
        "contextualize",
        "highlight",
        "inject_keywords",
        "add_soft_skills",
    ]
    target: Literal["bullet", "summary", "skills", "experience", "section"]
    template_id: str | None = Field(default=None)
    data: dict[str, Any] = Field(default_factory=dict)
    preserve_original_meaning: bool = Field(default=True)


class TransformationRule(BaseModel):
    """Static, versioned rule configuration."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    name: str = Field(...)
    description: str = Field(default="")
    priority: int = Field(..., description="Lower is evaluated first")
    recruiter_issue: RecruiterIssue = Field(...)
    condition: RuleCondition = Field(...)
    actions: list[TransformationAction] = Field(..., min_length=1)
    strategic_tone: StrategicTone = Field(default="measured")
    enabled: bool = Field(default=True)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TransformationRule:
        """Deserialize from dictionary."""
        return cls.model_validate(data)


class RuleEvaluationResult(BaseModel):
    """Outcome of evaluating one rule against one bundle."""

    model_config = ConfigDict(frozen=True)

    rule_id: str
    rule_name: str
    matched: bool
    priority: int
    recruiter_issue: RecruiterIssue
    matched_targets: list[str] = Field(
        default_factory=list, description="Bullet/experience ids the rule refers to"
    )
    actions: list[TransformationAction] = Field(default_factory=list)
    strategic_tone: StrategicTone


# =============================================================================
# Transformation instructions
# =============================================================================


class BulletTransformInstruction(BaseModel):
    """Per-bullet rewrite directive."""

    bullet_id: str
    experience_id: str
    original_text: str

    add_metrics: bool = False
    suggested_metrics: list[str] = Field(default_factory=list)

    add_keywords: bool = False
    keywords_to_add: list[str] = Field(default_factory=list)

    add_context: bool = False
    context_to_add: str = ""

    add_soft_skills: bool = False
    soft_skills_to_weave: list[str] = Field(default_factory=list)

    template_id: str | None = None
    tone: StrategicTone = "measured"
    improvement_level: ImprovementLevel = "none"
    applied_rule_ids: list[str] = Field(default_factory=list)
    rewrite_instruction: str = ""

    def active_categories(self) -> list[EnhancementCategory]:
        """Active enhancement categories in canonical order."""
        flags = {
            "metrics": self.add_metrics,
            "keywords": self.add_keywords,
            "context": self.add_context,
            "soft_skills": self.add_soft_skills,
        }
        return [category for category in ENHANCEMENT_ORDER if flags[category]]


class SummaryTransformInstruction(BaseModel):
    """Directive for rewriting the professional summary."""

    original_summary: str | None = None
    target_role: str
    target_company: str

    unique_differentiators: list[str] = Field(default_factory=list)
    matched_skills: list[str] = Field(default_factory=list)
    company_alignment: str | None = None
    focus_points: list[str] = Field(default_factory=list)

    template_id: str | None = None
    tone: StrategicTone = "measured"
    applied_rule_ids: list[str] = Field(default_factory=list)
    rewrite_instruction: str = ""


class WhyFitBullet(BaseModel):
    """One entry of the "Why I'm the Right Fit" section."""

    label: str
    text: str
    source: Literal["uniqueness", "experience", "skill", "achievement"]
    rarity: Rarity


class WhyFitInstruction(BaseModel):
    """Directive for the "Why I'm the Right Fit" section."""

    bullets: list[WhyFitBullet] = Field(default_factory=list)


class TechnicalSkillsReorder(BaseModel):
    original: list[str] = Field(default_factory=list)
    reordered: list[str] = Field(default_factory=list)
    matched_first: list[str] = Field(default_factory=list)
    to_add: list[str] = Field(default_factory=list)


class SoftSkillsReorder(BaseModel):
    original: list[str] = Field(default_factory=list)
    reordered: list[str] = Field(default_factory=list)
    emphasized: list[str] = Field(default_factory=list)


class SkillsReorderInstruction(BaseModel):
    """Suggested skills ordering."""

    technical: TechnicalSkillsReorder = Field(default_factory=TechnicalSkillsReorder)
    soft: SoftSkillsReorder = Field(default_factory=SoftSkillsReorder)


class ExperienceReorderInstruction(BaseModel):
    """Suggested experience order; never applied by the compiler itself."""

    experience_ids: list[str] = Field(default_factory=list)
    relevance_scores: dict[str, float] = Field(default_factory=dict)
    new_order: list[str] = Field(default_factory=list)


class ExperienceTransformInstruction(BaseModel):
    """Experience-level directive (company context, title, emphasis)."""

    experience_id: str
    company: str
    title: str
    company_context: str | None = None
    suggested_title: str | None = None
    highlight: bool = False
    applied_rule_ids: list[str] = Field(default_factory=list)
    rewrite_instruction: str = ""


class TransformationInstructions(BaseModel):
    """Complete, self-describing payload for the external rewrite step."""

    bullets: list[BulletTransformInstruction] = Field(default_factory=list)
    summary: SummaryTransformInstruction
    why_fit: WhyFitInstruction = Field(default_factory=WhyFitInstruction)
    skills: SkillsReorderInstruction = Field(default_factory=SkillsReorderInstruction)
    experience_order: ExperienceReorderInstruction = Field(
        default_factory=ExperienceReorderInstruction
    )
    experiences: list[ExperienceTransformInstruction] = Field(default_factory=list)
    competencies: list[str] = Field(default_factory=list)

    applied_rules: list[RuleEvaluationResult] = Field(default_factory=list)
    overall_tone: StrategicTone = "measured"

    def get_bullet(self, bullet_id: str) -> BulletTransformInstruction | None:
        """Look up the instruction for a bullet."""
        for instruction in self.bullets:
            if instruction.bullet_id == bullet_id:
                return instruction
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return self.model_dump(mode="json")

    def to_json(self) -> str:
        """Serialize to a JSON string."""
        return self.model_dump_json()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TransformationInstructions:
        """Deserialize from dictionary."""
        return cls.model_validate(data)


# =============================================================================
# Tailoring output
# =============================================================================


class SummaryDiff(BaseModel):
    before: str | None = None
    after: str


class BulletDiff(BaseModel):
    bullet_id: str
    experience_id: str
    before: str
    after: str
    change_type: Literal["metrics", "keywords", "context", "soft_skills", "combined"]


class TailoringChanges(BaseModel):
    """What the pipeline actually changed, for display and audit."""

    summary_modified: bool = False
    summary_diff: SummaryDiff | None = None

    experience_bullets_modified: int = 0
    bullet_diffs: list[BulletDiff] = Field(default_factory=list)

    skills_reordered: bool = False
    skills_added: list[str] = Field(default_factory=list)

    experiences_reordered: bool = False

    why_fit_section_added: bool = False
    why_fit_bullet_count: int = 0

    competencies_generated: bool = False


class TokenUsage(BaseModel):
    """Token accounting for one tailoring run."""

    pre_analysis: int = 0
    rewriting: int = 0
    total: int = 0
    saved_vs_pure_ai: int = 0


class HybridTailorResult(BaseModel):
    """Full audit trail of one tailoring run, for persistence by the caller."""

    tailored_resume: ResumeContent
    pre_analysis: PreAnalysisResult
    applied_rules: list[RuleEvaluationResult] = Field(default_factory=list)
    changes: TailoringChanges
    quality_score: RecruiterReadinessScore
    baseline_score: RecruiterReadinessScore | None = None
    token_usage: TokenUsage = Field(default_factory=TokenUsage)

    tailored_at: datetime
    processing_time_ms: int = Field(default=0, ge=0)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HybridTailorResult:
        """Deserialize from dictionary."""
        return cls.model_validate(data)
