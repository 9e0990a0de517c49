"""Data models for résumé content and target jobs.

Contains Pydantic models for:
- ResumeContent: Structured résumé (contact, experiences with bullets, skills)
- JobData: The job a résumé is tailored for
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class Contact(BaseModel):
    """Candidate contact block."""

    name: str = Field(..., description="Candidate full name")
    email: str = Field(..., description="Contact email")
    phone: str | None = Field(default=None, description="Contact phone")
    linkedin: str | None = Field(default=None, description="LinkedIn profile URL")
    github: str | None = Field(default=None, description="GitHub profile URL")
    location: str | None = Field(default=None, description="Location")


class Bullet(BaseModel):
    """A single achievement bullet within an experience."""

    id: str = Field(..., description="Stable bullet identifier")
    text: str = Field(..., description="Bullet text")
    is_modified: bool | None = Field(
        default=None, description="Whether tailoring rewrote this bullet"
    )


class Experience(BaseModel):
    """A work experience entry."""

    id: str = Field(..., description="Stable experience identifier")
    title: str = Field(..., description="Job title")
    company: str = Field(..., description="Company name")
    location: str | None = Field(default=None, description="Location")
    start_date: str = Field(..., description="Start date as written on the résumé")
    end_date: str | None = Field(default=None, description="End date (None = present)")
    company_context: str | None = Field(
        default=None, description="Short description of the company for recruiters"
    )
    bullets: list[Bullet] = Field(default_factory=list, description="Bullet points")


class EducationEntry(BaseModel):
    """An education entry."""

    id: str = Field(..., description="Stable education identifier")
    institution: str = Field(..., description="Institution name")
    degree: str = Field(..., description="Degree")
    field: str = Field(..., description="Field of study")
    graduation_date: str = Field(..., description="Graduation date")
    gpa: str | None = Field(default=None, description="GPA")


class Skills(BaseModel):
    """Skills section."""

    technical: list[str] = Field(default_factory=list, description="Technical skills")
    soft: list[str] = Field(default_factory=list, description="Soft skills")
    languages: list[str] | None = Field(default=None, description="Spoken languages")
    certifications: list[str] | None = Field(
        default=None, description="Certifications"
    )


class Project(BaseModel):
    """A side or portfolio project."""

    id: str = Field(..., description="Stable project identifier")
    name: str = Field(..., description="Project name")
    description: str = Field(..., description="Project description")
    technologies: list[str] = Field(default_factory=list, description="Technologies")
    link: str | None = Field(default=None, description="Project URL")


class ResumeContent(BaseModel):
    """Complete structured résumé.

    Treated as read-only input by the tailoring pipeline; tailored copies are
    produced with ``model_copy`` rather than by mutating the original.
    """

    contact: Contact = Field(..., description="Contact information")
    summary: str | None = Field(default=None, description="Professional summary")
    experiences: list[Experience] = Field(
        default_factory=list, description="Work experiences in résumé order"
    )
    education: list[EducationEntry] = Field(
        default_factory=list, description="Education history"
    )
    skills: Skills = Field(default_factory=Skills, description="Skills section")
    projects: list[Project] | None = Field(default=None, description="Projects")
    why_fit: list[str] | None = Field(
        default=None, description="'Why I'm the Right Fit' entries"
    )
    competencies: list[str] | None = Field(
        default=None, description="Core competencies section"
    )

    def iter_bullets(self):
        """Yield ``(experience, bullet)`` pairs in résumé order."""
        for experience in self.experiences:
            for bullet in experience.bullets:
                yield experience, bullet

    def bullet_index(self) -> dict[str, str]:
        """Map every bullet id to the id of the experience that owns it."""
        return {bullet.id: experience.id for experience, bullet in self.iter_bullets()}

    def get_bullet(self, bullet_id: str) -> Bullet | None:
        """Look up a bullet by id."""
        for _experience, bullet in self.iter_bullets():
            if bullet.id == bullet_id:
                return bullet
        return None

    def get_experience(self, experience_id: str) -> Experience | None:
        """Look up an experience by id."""
        for experience in self.experiences:
            if experience.id == experience_id:
                return experience
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ResumeContent:
        """Deserialize from dictionary."""
        return cls.model_validate(data)


class JobData(BaseModel):
    """Target job for tailoring."""

    id: str = Field(..., description="Job identifier")
    title: str = Field(..., description="Job title")
    company_name: str | None = Field(default=None, description="Hiring company")
    description: str | None = Field(default=None, description="Full job description")
    requirements: list[str] | None = Field(
        default=None, description="Listed requirements"
    )
    skills: list[str] | None = Field(default=None, description="Required skills")

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> JobData:
        """Deserialize from dictionary."""
        return cls.model_validate(data)
