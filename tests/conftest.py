"""Pytest configuration and shared fixtures."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.analysis.models import (
    CompanyResearchResult,
    ContextResult,
    ExperienceAlignment,
    FitAssessment,
    ImpactBullet,
    ImpactResult,
    KeywordCoverage,
    KeywordHit,
    MatchedSkill,
    MetricCategories,
    MissingRequirement,
    PreAnalysisResult,
    SoftSkillAssessment,
    UniquenessFactor,
    UniquenessResult,
)
from src.resume.models import (
    Bullet,
    Contact,
    EducationEntry,
    Experience,
    JobData,
    ResumeContent,
    Skills,
)

ANALYZED_AT = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)


@pytest.fixture
def sample_resume() -> ResumeContent:
    """Two experiences with five bullets; the last bullet is already quantified."""
    return ResumeContent(
        contact=Contact(name="Ada Obi", email="ada@example.com", location="Lagos, NG"),
        summary="Backend engineer building payment systems.",
        experiences=[
            Experience(
                id="exp-1",
                title="Senior Software Engineer",
                company="Kora Payments",
                start_date="Jan 2020",
                end_date=None,
                bullets=[
                    Bullet(id="b1", text="Built payment reconciliation service in Python"),
                    Bullet(id="b2", text="Led migration of legacy billing to microservices"),
                    Bullet(id="b3", text="Mentored junior engineers on code review"),
                ],
            ),
            Experience(
                id="exp-2",
                title="Software Engineer",
                company="Lagos Fintech Labs",
                start_date="Jun 2017",
                end_date="Dec 2019",
                bullets=[
                    Bullet(id="b4", text="Developed REST APIs for a mobile banking app"),
                    Bullet(id="b5", text="Reduced deployment time by 40% with CI pipelines"),
                ],
            ),
        ],
        education=[
            EducationEntry(
                id="edu-1",
                institution="University of Lagos",
                degree="BSc",
                field="Computer Science",
                graduation_date="2017",
            )
        ],
        skills=Skills(
            technical=["Python", "Go", "SQL", "Docker"],
            soft=["Leadership", "Communication"],
        ),
    )


@pytest.fixture
def sample_job() -> JobData:
    """Target job at a well-known U.S. company."""
    return JobData(
        id="job-1",
        title="Senior Backend Engineer",
        company_name="Stripe",
        description="Build reliable payment infrastructure.",
        requirements=["5+ years of backend development", "Experience with Kubernetes"],
        skills=["Go", "Kubernetes", "PostgreSQL"],
    )


@pytest.fixture
def sample_impact() -> ImpactResult:
    return ImpactResult(
        score=35,
        score_label="weak",
        total_bullets=5,
        bullets_improved=4,
        bullets=[
            ImpactBullet(
                id="b1",
                experience_id="exp-1",
                original="Built payment reconciliation service in Python",
                improved="Built a Python reconciliation service processing $2M daily",
                metrics=["$X processed daily"],
                improvement="major",
            ),
            ImpactBullet(
                id="b2",
                experience_id="exp-1",
                original="Led migration of legacy billing to microservices",
                metrics=["X services migrated"],
                improvement="major",
            ),
            ImpactBullet(
                id="b3",
                experience_id="exp-1",
                original="Mentored junior engineers on code review",
                improvement="minor",
            ),
            ImpactBullet(
                id="b4",
                experience_id="exp-2",
                original="Developed REST APIs for a mobile banking app",
                improvement="minor",
            ),
            ImpactBullet(
                id="b5",
                experience_id="exp-2",
                original="Reduced deployment time by 40% with CI pipelines",
                improvement="none",
            ),
        ],
        metric_categories=MetricCategories(percentage=1),
    )


@pytest.fixture
def sample_uniqueness() -> UniquenessResult:
    return UniquenessResult(
        score=55,
        score_label="moderate",
        factors=[
            UniquenessFactor(
                id="f1",
                type="skill_combination",
                title="Payments and platform engineering",
                description="Combines payments domain depth with platform work",
                rarity="rare",
                evidence=["Built payment reconciliation service"],
            ),
            UniquenessFactor(
                id="f2",
                type="domain_expertise",
                title="Fintech compliance",
                description="Shipped PCI-compliant systems in an emerging market",
                rarity="very_rare",
            ),
        ],
        differentiators=["Payments domain depth", "Legacy migration experience"],
    )


@pytest.fixture
def sample_context() -> ContextResult:
    return ContextResult(
        score=58,
        score_label="moderate",
        matched_skills=[
            MatchedSkill(skill="Go", source="technical", strength="exact"),
            MatchedSkill(skill="Python", source="technical", strength="related"),
        ],
        missing_requirements=[
            MissingRequirement(requirement="Kubernetes", importance="critical"),
        ],
        experience_alignments=[
            ExperienceAlignment(
                experience_id="exp-1",
                relevance="high",
                matched_aspects=["payments", "backend"],
            ),
            ExperienceAlignment(
                experience_id="exp-2",
                relevance="medium",
                matched_aspects=["apis"],
            ),
        ],
        keyword_coverage=KeywordCoverage(
            matched=2,
            total=4,
            percentage=50,
            keywords=[
                KeywordHit(keyword="Go", found=True),
                KeywordHit(keyword="Python", found=True),
                KeywordHit(keyword="Kubernetes", found=False),
                KeywordHit(keyword="PostgreSQL", found=False),
            ],
        ),
        fit_assessment=FitAssessment(
            strengths=["Payments backend"],
            gaps=["Kubernetes"],
            overall_fit="Strong backend fit with a Kubernetes gap",
        ),
    )


@pytest.fixture
def sample_company() -> CompanyResearchResult:
    return CompanyResearchResult(
        company_name="Kora Payments",
        is_well_known=False,
        industry="fintech",
        size="startup",
        comparable="Stripe",
        context="Nigerian payments startup processing card transactions",
    )


@pytest.fixture
def sample_soft_skills() -> list[SoftSkillAssessment]:
    return [
        SoftSkillAssessment(
            skill="leadership",
            evidence=["Led migration", "Mentored junior engineers"],
            strength="strong",
            bullet_ids=["b2", "b3"],
        ),
        SoftSkillAssessment(
            skill="collaboration",
            evidence=["Led migration of legacy billing"],
            strength="moderate",
            bullet_ids=["b2"],
        ),
    ]


@pytest.fixture
def sample_analysis(
    sample_impact,
    sample_uniqueness,
    sample_context,
    sample_company,
    sample_soft_skills,
) -> PreAnalysisResult:
    """Pre-analysis bundle for ``sample_resume`` against ``sample_job``."""
    return PreAnalysisResult(
        impact=sample_impact,
        uniqueness=sample_uniqueness,
        context=sample_context,
        company=sample_company,
        soft_skills=sample_soft_skills,
        analyzed_at=ANALYZED_AT,
        resume_id="resume-1",
        job_id="job-1",
    )


@pytest.fixture
def mock_analyzer(
    sample_impact,
    sample_uniqueness,
    sample_context,
    sample_company,
    sample_soft_skills,
):
    """Analyzer double returning the sample sub-analyses."""
    analyzer = MagicMock()
    analyzer.analyze_impact = AsyncMock(return_value=sample_impact)
    analyzer.analyze_uniqueness = AsyncMock(return_value=sample_uniqueness)
    analyzer.analyze_context = AsyncMock(return_value=sample_context)
    analyzer.research_company = AsyncMock(return_value=sample_company)
    analyzer.assess_soft_skills = AsyncMock(return_value=sample_soft_skills)
    analyzer.tokens_used = 0
    return analyzer
