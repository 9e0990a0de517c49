"""Résumé and job input models."""

from src.resume.models import (
    Bullet,
    Contact,
    EducationEntry,
    Experience,
    JobData,
    Project,
    ResumeContent,
    Skills,
)

__all__ = [
    "Bullet",
    "Contact",
    "EducationEntry",
    "Experience",
    "JobData",
    "Project",
    "ResumeContent",
    "Skills",
]
