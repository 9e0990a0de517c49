"""Diff between an original and a tailored résumé."""

from __future__ import annotations

from src.resume.models import ResumeContent
from src.tailoring.models import (
    BulletDiff,
    SummaryDiff,
    TailoringChanges,
    TransformationInstructions,
)


def _change_type(instructions: TransformationInstructions | None, bullet_id: str) -> str:
    instruction = instructions.get_bullet(bullet_id) if instructions else None
    if instruction is None:
        return "combined"
    categories = instruction.active_categories()
    if len(categories) == 1:
        return categories[0]
    return "combined"


def detect_changes(
    original: ResumeContent,
    tailored: ResumeContent,
    instructions: TransformationInstructions | None = None,
) -> TailoringChanges:
    """Summarize what tailoring actually changed, matching entities by id."""
    summary_modified = (original.summary or "") != (tailored.summary or "")
    summary_diff = (
        SummaryDiff(before=original.summary, after=tailored.summary or "")
        if summary_modified
        else None
    )

    original_text = {b.id: b.text for _e, b in original.iter_bullets()}
    diffs: list[BulletDiff] = []
    added = 0
    for experience, bullet in tailored.iter_bullets():
        before = original_text.get(bullet.id)
        if before is None:
            added += 1
        elif before != bullet.text:
            diffs.append(
                BulletDiff(
                    bullet_id=bullet.id,
                    experience_id=experience.id,
                    before=before,
                    after=bullet.text,
                    change_type=_change_type(instructions, bullet.id),
                )
            )

    present = {s.lower() for s in original.skills.technical}
    skills_added = [s for s in tailored.skills.technical if s.lower() not in present]

    original_why_fit = original.why_fit or []
    tailored_why_fit = tailored.why_fit or []

    return TailoringChanges(
        summary_modified=summary_modified,
        summary_diff=summary_diff,
        experience_bullets_modified=len(diffs) + added,
        bullet_diffs=diffs,
        skills_reordered=(
            original.skills.technical != tailored.skills.technical
            or original.skills.soft != tailored.skills.soft
        ),
        skills_added=skills_added,
        experiences_reordered=(
            [e.id for e in original.experiences] != [e.id for e in tailored.experiences]
        ),
        why_fit_section_added=bool(tailored_why_fit) and tailored_why_fit != original_why_fit,
        why_fit_bullet_count=len(tailored_why_fit),
        competencies_generated=(
            bool(tailored.competencies) and tailored.competencies != original.competencies
        ),
    )
