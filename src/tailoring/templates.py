"""Bullet and summary rewrite templates.

Templates are referenced by id from rule actions and carried into the
compiled instructions, so the rewrite step can follow a proven pattern
(CAR format, scale context, company context, ...) instead of free-form text.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from src.tailoring.models import EnhancementCategory, StrategicTone


class TemplateExample(BaseModel):
    model_config = ConfigDict(frozen=True)

    before: str
    after: str


class BulletTemplate(BaseModel):
    """Pattern for rewriting a single bullet."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    pattern: str
    variables: list[str] = Field(default_factory=list)
    examples: list[TemplateExample] = Field(default_factory=list)
    applicable_to: list[EnhancementCategory] = Field(default_factory=list)


class SummaryTemplate(BaseModel):
    """Structure for a professional summary, with per-tone guidance."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    structure: str
    variables: list[str] = Field(default_factory=list)
    tone_guidelines: dict[StrategicTone, str] = Field(default_factory=dict)


def _bullet(
    id: str,
    name: str,
    pattern: str,
    variables: list[str],
    before: str,
    after: str,
    applicable_to: list[EnhancementCategory],
) -> BulletTemplate:
    return BulletTemplate(
        id=id,
        name=name,
        pattern=pattern,
        variables=variables,
        examples=[TemplateExample(before=before, after=after)],
        applicable_to=applicable_to,
    )


BULLET_TEMPLATES: tuple[BulletTemplate, ...] = (
    # CAR (Challenge-Action-Result)
    _bullet(
        "CAR_FORMAT",
        "CAR Format",
        "{action_verb} {what} by {how}, resulting in {metric} {improvement}",
        ["action_verb", "what", "how", "metric", "improvement"],
        "Worked on ML model for processing data",
        "Engineered ML pipeline processing 10M+ daily transactions, "
        "reducing data latency by 40%",
        ["metrics"],
    ),
    _bullet(
        "FULL_CAR_TRANSFORM",
        "Full CAR Transformation",
        "{challenge_context}: {action_verb} {solution} resulting in {quantified_result}",
        ["challenge_context", "action_verb", "solution", "quantified_result"],
        "Managed cloud infrastructure",
        "Facing 99.5% uptime requirements: Architected fault-tolerant cloud "
        "infrastructure across 3 AWS regions, achieving 99.99% uptime",
        ["metrics", "context"],
    ),
    # Scale
    _bullet(
        "SCALE_ENHANCEMENT",
        "Scale Context Addition",
        "{original} ({scale_context})",
        ["original", "scale_context"],
        "Managed cloud infrastructure",
        "Managed cloud infrastructure serving 2M+ daily active users across 3 AWS regions",
        ["metrics"],
    ),
    _bullet(
        "TEAM_SCALE",
        "Team Scale Addition",
        "{action} {responsibility} across a team of {team_size} {role_type}",
        ["action", "responsibility", "team_size", "role_type"],
        "Led frontend development",
        "Led frontend development across a team of 8 engineers, "
        "delivering 15+ features per quarter",
        ["metrics"],
    ),
    # Percentage
    _bullet(
        "PERCENTAGE_IMPROVEMENT",
        "Percentage Improvement",
        "{action_verb} {what}, {direction} {metric} by {percentage}%",
        ["action_verb", "what", "direction", "metric", "percentage"],
        "Improved database queries",
        "Optimized database queries, reducing query latency by 75%",
        ["metrics"],
    ),
    _bullet(
        "BEFORE_AFTER",
        "Before/After Comparison",
        "{action_verb} {what}, improving {metric} from {before} to {after}",
        ["action_verb", "what", "metric", "before", "after"],
        "Fixed slow page loads",
        "Refactored rendering pipeline, improving page load time from 4.2s to 1.1s",
        ["metrics"],
    ),
    # Time
    _bullet(
        "TIME_SAVINGS",
        "Time Savings",
        "{action_verb} {what}, saving {time_amount} {time_unit} per {period}",
        ["action_verb", "what", "time_amount", "time_unit", "period"],
        "Automated deployment process",
        "Automated CI/CD pipeline, saving 15 hours per week in manual deployment time",
        ["metrics"],
    ),
    _bullet(
        "TIME_ACCELERATION",
        "Time Acceleration",
        "{action_verb} {process}, reducing {what} from {before} to {after}",
        ["action_verb", "process", "what", "before", "after"],
        "Sped up onboarding process",
        "Streamlined developer onboarding, reducing setup time from 2 days to 2 hours",
        ["metrics"],
    ),
    # Company context
    _bullet(
        "COMPANY_CONTEXT_ENTERPRISE",
        "Enterprise Company Context",
        "At {company} (Fortune 500 {industry} leader), {rest_of_bullet}",
        ["company", "industry", "rest_of_bullet"],
        "Led infrastructure team",
        "At Acme Corp (Fortune 500 fintech leader), led infrastructure team "
        "supporting $2B+ in daily transactions",
        ["context"],
    ),
    _bullet(
        "COMPANY_CONTEXT_STARTUP",
        "Startup Company Context",
        "At {company} ({funding_stage} {industry} startup), {rest_of_bullet}",
        ["company", "funding_stage", "industry", "rest_of_bullet"],
        "Built payment system",
        "At PayFlow (Series B fintech startup), built payment system "
        "processing 100K+ transactions monthly",
        ["context"],
    ),
    _bullet(
        "COMPANY_CONTEXT_COMPARABLE",
        "Comparable Company Context",
        "At {company} (similar to early-stage {well_known_company}), {rest_of_bullet}",
        ["company", "well_known_company", "rest_of_bullet"],
        "Developed ML features",
        "At DataMind (similar to early-stage Databricks), developed ML features "
        "powering 50+ enterprise clients",
        ["context"],
    ),
    # Soft skills
    _bullet(
        "LEADERSHIP_INTEGRATION",
        "Leadership Integration",
        "{led_verb} {team_desc} to {achievement}, {result}",
        ["led_verb", "team_desc", "achievement", "result"],
        "Worked on new feature launch",
        "Led cross-functional team of 6 to launch new feature, "
        "driving 25% increase in user engagement",
        ["soft_skills"],
    ),
    _bullet(
        "COLLABORATION_INTEGRATION",
        "Collaboration Integration",
        "{collab_verb} with {teams} to {action}, resulting in {outcome}",
        ["collab_verb", "teams", "action", "outcome"],
        "Improved API performance",
        "Collaborated with backend and DevOps teams to optimize API performance, "
        "reducing latency by 60%",
        ["soft_skills"],
    ),
    _bullet(
        "COMMUNICATION_INTEGRATION",
        "Communication Integration",
        "{comm_verb} {what} to {audience}, {outcome}",
        ["comm_verb", "what", "audience", "outcome"],
        "Created technical documentation",
        "Authored technical documentation and presented architecture decisions "
        "to VP-level stakeholders, securing $500K budget approval",
        ["soft_skills"],
    ),
    # Keywords
    _bullet(
        "NATURAL_KEYWORD_INSERT",
        "Natural Keyword Insertion",
        "{original_bullet} using {keywords}",
        ["original_bullet", "keywords"],
        "Built data pipeline",
        "Built data pipeline using Apache Kafka and Spark, "
        "processing 1M+ events per second",
        ["keywords"],
    ),
    _bullet(
        "KEYWORD_LEAD",
        "Keyword-Led Bullet",
        "Leveraging {keyword}, {action} to {result}",
        ["keyword", "action", "result"],
        "Created machine learning model",
        "Leveraging TensorFlow and PyTorch, developed ML model achieving "
        "95% accuracy in fraud detection",
        ["keywords"],
    ),
)


SUMMARY_TEMPLATES: tuple[SummaryTemplate, ...] = (
    SummaryTemplate(
        id="EXPERIENCED_PROFESSIONAL",
        name="Experienced Professional",
        structure=(
            "{years_experience}+ years of experience in {domain} with proven "
            "expertise in {top_skills}. {unique_differentiator}. Seeking to "
            "leverage {key_strength} as {target_role} at {target_company}."
        ),
        variables=[
            "years_experience",
            "domain",
            "top_skills",
            "unique_differentiator",
            "key_strength",
            "target_role",
            "target_company",
        ],
        tone_guidelines={
            "confident": (
                "Lead with 'Senior' or 'Staff-level' if applicable. Use 'delivered', "
                "'drove', 'led'. Position as the ideal candidate."
            ),
            "measured": (
                "Balance experience with continued learning. Use 'developed', "
                "'contributed', 'grew'."
            ),
            "humble": (
                "Focus on eagerness and potential. Use 'passionate about', "
                "'eager to', 'excited to contribute'."
            ),
        },
    ),
    SummaryTemplate(
        id="CAREER_CHANGER",
        name="Career Transition",
        structure=(
            "{background_domain} professional transitioning to {target_domain}, "
            "bringing unique perspective from {unique_experience}. "
            "{transferable_value}. Seeking {target_role} where "
            "{contribution_statement}."
        ),
        variables=[
            "background_domain",
            "target_domain",
            "unique_experience",
            "transferable_value",
            "target_role",
            "contribution_statement",
        ],
        tone_guidelines={
            "confident": (
                "Frame transition as strategic advantage. Emphasize transferable "
                "achievements."
            ),
            "measured": "Acknowledge learning while highlighting relevant skills.",
            "humble": "Focus on enthusiasm and quick learning ability.",
        },
    ),
    SummaryTemplate(
        id="TECHNICAL_SPECIALIST",
        name="Technical Specialist",
        structure=(
            "{specialization} specialist with deep expertise in {technologies}. "
            "{quantified_achievement}. Passionate about {technical_passion} and "
            "seeking to {contribution} as {target_role}."
        ),
        variables=[
            "specialization",
            "technologies",
            "quantified_achievement",
            "technical_passion",
            "contribution",
            "target_role",
        ],
        tone_guidelines={
            "confident": (
                "Lead with 'Expert in' or 'Specialist in'. Cite specific achievements."
            ),
            "measured": "Use 'Strong background in'. Balance depth with breadth.",
            "humble": "Focus on continuous learning and problem-solving passion.",
        },
    ),
    SummaryTemplate(
        id="LEADER_MANAGER",
        name="Technical Leader",
        structure=(
            "{leadership_type} leader with {years} years building and scaling "
            "{team_type} teams. {leadership_achievement}. Seeking to drive "
            "{impact_area} as {target_role} at {target_company}."
        ),
        variables=[
            "leadership_type",
            "years",
            "team_type",
            "leadership_achievement",
            "impact_area",
            "target_role",
            "target_company",
        ],
        tone_guidelines={
            "confident": (
                "Use 'Proven leader', 'Track record of'. Cite team sizes and outcomes."
            ),
            "measured": (
                "Use 'Experienced in leading'. Balance technical and people skills."
            ),
            "humble": "Focus on servant leadership and team development.",
        },
    ),
    SummaryTemplate(
        id="INTERNATIONAL_CANDIDATE",
        name="International Background",
        structure=(
            "{domain} professional with {international_context}, bringing global "
            "perspective to {specialization}. {key_achievement}. Seeking "
            "{target_role} to apply {unique_value} at {target_company}."
        ),
        variables=[
            "domain",
            "international_context",
            "specialization",
            "key_achievement",
            "target_role",
            "unique_value",
            "target_company",
        ],
        tone_guidelines={
            "confident": "Position international experience as competitive advantage.",
            "measured": "Emphasize adaptability and diverse perspective.",
            "humble": "Focus on cultural awareness and learning orientation.",
        },
    ),
)

_BULLET_TEMPLATES_BY_ID = {t.id: t for t in BULLET_TEMPLATES}
_SUMMARY_TEMPLATES_BY_ID = {t.id: t for t in SUMMARY_TEMPLATES}


def get_bullet_template(template_id: str) -> BulletTemplate | None:
    return _BULLET_TEMPLATES_BY_ID.get(template_id)


def get_summary_template(template_id: str) -> SummaryTemplate | None:
    return _SUMMARY_TEMPLATES_BY_ID.get(template_id)


def templates_for_category(category: EnhancementCategory) -> list[BulletTemplate]:
    """Bullet templates applicable to an enhancement category."""
    return [t for t in BULLET_TEMPLATES if category in t.applicable_to]


def tone_guidance(template_id: str, tone: StrategicTone) -> str | None:
    template = get_summary_template(template_id)
    if template is None:
        return None
    return template.tone_guidelines.get(tone)


def suggest_summary_template(
    *,
    years_experience: int,
    is_career_changer: bool = False,
    is_leader: bool = False,
    is_international: bool = False,
    is_specialist: bool = False,
) -> SummaryTemplate:
    """Pick the summary template that best fits a candidate profile."""
    if is_career_changer:
        return _SUMMARY_TEMPLATES_BY_ID["CAREER_CHANGER"]
    if is_leader and years_experience >= 5:
        return _SUMMARY_TEMPLATES_BY_ID["LEADER_MANAGER"]
    if is_international:
        return _SUMMARY_TEMPLATES_BY_ID["INTERNATIONAL_CANDIDATE"]
    if is_specialist:
        return _SUMMARY_TEMPLATES_BY_ID["TECHNICAL_SPECIALIST"]
    return _SUMMARY_TEMPLATES_BY_ID["EXPERIENCED_PROFESSIONAL"]
