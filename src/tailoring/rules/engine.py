"""Rule engine: decides which transformation rules apply to a résumé.

Conditions are evaluated against a plain-data view of the pre-analysis bundle
(``PreAnalysisResult.model_dump()``). Field paths are dot-separated snake_case
segments with optional list indices and a trailing ``length``::

    impact.bullets_improved
    uniqueness.factors[0].type
    soft_skills.length

A missing or null field never matches. A malformed condition (type mismatch,
unknown operator) raises ``RuleConfigurationError``; ``RuleEngine.evaluate``
isolates that to the offending rule.
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from collections.abc import Callable, Iterable
from typing import Any

from pydantic import BaseModel

from src.analysis.models import PreAnalysisResult
from src.resume.models import JobData, ResumeContent
from src.tailoring.models import (
    AndCondition,
    ExistsCondition,
    MatchCondition,
    NotCondition,
    OrCondition,
    RuleEvaluationResult,
    ThresholdCondition,
    TransformationRule,
    condition_fields,
)

logger = logging.getLogger(__name__)

_SEGMENT_RE = re.compile(r"^([a-z_][a-z0-9_]*)((?:\[\d+\])*)$")
_INDEX_RE = re.compile(r"\[(\d+)\]")


class RuleConfigurationError(Exception):
    """Raised when a rule cannot be evaluated as written."""

    def __init__(self, message: str, rule_id: str | None = None):
        super().__init__(message)
        self.rule_id = rule_id


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


# =============================================================================
# Field resolution
# =============================================================================


def resolve_field(data: dict[str, Any], path: str) -> Any:
    """Resolve a field path against bundle data.

    Returns ``MISSING`` for absent or null values.

    Raises:
        RuleConfigurationError: If the path is syntactically invalid.
    """
    current: Any = data
    segments = path.split(".")
    for position, segment in enumerate(segments):
        if segment == "length" and position == len(segments) - 1 and position > 0:
            if isinstance(current, (list, tuple, str, dict)):
                return len(current)
            return MISSING

        match = _SEGMENT_RE.match(segment)
        if match is None:
            raise RuleConfigurationError(f"Invalid field path segment {segment!r} in {path!r}")

        name, indices = match.group(1), match.group(2)
        if not isinstance(current, dict) or current.get(name) is None:
            return MISSING
        current = current[name]

        for index in _INDEX_RE.findall(indices):
            if not isinstance(current, list) or int(index) >= len(current):
                return MISSING
            current = current[int(index)]
            if current is None:
                return MISSING

    return current


def _normalize(text: str) -> str:
    return " ".join(text.lower().replace("-", " ").replace("_", " ").split())


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# =============================================================================
# Condition evaluation
# =============================================================================


def _evaluate_threshold(condition: ThresholdCondition, data: dict[str, Any]) -> bool:
    actual = resolve_field(data, condition.field)
    if actual is MISSING:
        return False
    if not _is_number(actual):
        raise RuleConfigurationError(
            f"THRESHOLD field {condition.field!r} is not numeric (got {type(actual).__name__})"
        )

    expected = condition.value
    operator = condition.operator
    if operator == "<":
        return actual < expected
    if operator == "<=":
        return actual <= expected
    if operator == "=":
        return actual == expected
    if operator == ">=":
        return actual >= expected
    if operator == ">":
        return actual > expected
    raise RuleConfigurationError(f"Unknown THRESHOLD operator {operator!r}")


def _scalars_equal(actual: Any, expected: Any, field: str) -> bool:
    if isinstance(actual, bool) or isinstance(expected, bool):
        if not (isinstance(actual, bool) and isinstance(expected, bool)):
            raise RuleConfigurationError(
                f"MATCH on {field!r} compares {type(actual).__name__} with "
                f"{type(expected).__name__}"
            )
        return actual == expected
    if _is_number(actual) and _is_number(expected):
        return actual == expected
    if isinstance(actual, str) and isinstance(expected, str):
        return _normalize(actual) == _normalize(expected)
    raise RuleConfigurationError(
        f"MATCH on {field!r} compares {type(actual).__name__} with {type(expected).__name__}"
    )


def _item_contains(item: Any, expected: Any) -> bool:
    if isinstance(item, dict):
        return any(
            isinstance(value, str) and isinstance(expected, str)
            and _normalize(value) == _normalize(expected)
            for value in item.values()
        )
    if isinstance(item, str) and isinstance(expected, str):
        return _normalize(item) == _normalize(expected)
    return item == expected and type(item) is type(expected)


def _evaluate_match(condition: MatchCondition, data: dict[str, Any]) -> bool:
    actual = resolve_field(data, condition.field)
    if actual is MISSING:
        return False

    expected = condition.value
    operator = condition.operator

    if operator == "=":
        if isinstance(actual, (list, dict)):
            raise RuleConfigurationError(
                f"MATCH '=' on {condition.field!r} needs a scalar field"
            )
        return _scalars_equal(actual, expected, condition.field)

    if operator == "in":
        if not isinstance(expected, list) or isinstance(actual, (list, dict)):
            raise RuleConfigurationError(
                f"MATCH 'in' on {condition.field!r} needs a scalar field and a list value"
            )
        return any(_scalars_equal(actual, option, condition.field) for option in expected)

    if operator == "contains":
        if isinstance(actual, list):
            return any(_item_contains(item, expected) for item in actual)
        if isinstance(actual, str) and isinstance(expected, str):
            return _normalize(expected) in _normalize(actual)
        raise RuleConfigurationError(
            f"MATCH 'contains' on {condition.field!r} needs a list or string field"
        )

    raise RuleConfigurationError(f"Unknown MATCH operator {operator!r}")


def _evaluate_exists(condition: ExistsCondition, data: dict[str, Any]) -> bool:
    actual = resolve_field(data, condition.field)
    if actual is MISSING:
        return False
    if isinstance(actual, (list, dict, str)):
        return len(actual) > 0
    return True


def evaluate_condition(condition: BaseModel, data: dict[str, Any]) -> bool:
    """Evaluate a condition tree against bundle data.

    Raises:
        RuleConfigurationError: On type mismatches or unknown condition types.
    """
    if isinstance(condition, AndCondition):
        return all(evaluate_condition(child, data) for child in condition.conditions)
    if isinstance(condition, OrCondition):
        return any(evaluate_condition(child, data) for child in condition.conditions)
    if isinstance(condition, NotCondition):
        if len(condition.conditions) != 1:
            raise RuleConfigurationError("NOT takes exactly one child condition")
        return not evaluate_condition(condition.conditions[0], data)
    if isinstance(condition, ThresholdCondition):
        return _evaluate_threshold(condition, data)
    if isinstance(condition, MatchCondition):
        return _evaluate_match(condition, data)
    if isinstance(condition, ExistsCondition):
        return _evaluate_exists(condition, data)
    raise RuleConfigurationError(
        f"Unknown condition type {type(condition).__name__}"
    )


# =============================================================================
# Target resolution
# =============================================================================


def _impact_targets(analysis: PreAnalysisResult, resume: ResumeContent) -> set[str]:
    return {b.id for b in analysis.impact.bullets if b.improvement != "none"}


def _soft_skill_targets(
    analysis: PreAnalysisResult,
    resume: ResumeContent,
    skills: list[str] | None = None,
) -> set[str]:
    wanted = {_normalize(skill) for skill in skills or []}
    return {
        bullet_id
        for a in analysis.soft_skills
        if not wanted or _normalize(a.skill) in wanted
        for bullet_id in a.bullet_ids
    }


def _uniqueness_targets(analysis: PreAnalysisResult, resume: ResumeContent) -> set[str]:
    quotes = [
        _normalize(quote)
        for factor in analysis.uniqueness.factors
        for quote in factor.evidence
        if quote.strip()
    ]
    targets: set[str] = set()
    for _experience, bullet in resume.iter_bullets():
        text = _normalize(bullet.text)
        if text and any(quote in text or text in quote for quote in quotes):
            targets.add(bullet.id)
    return targets


def _context_targets(analysis: PreAnalysisResult, resume: ResumeContent) -> set[str]:
    aligned = {
        a.experience_id
        for a in analysis.context.experience_alignments
        if a.relevance in ("high", "medium")
    }
    return aligned or {experience.id for experience in resume.experiences}


def _company_targets(analysis: PreAnalysisResult, resume: ResumeContent) -> set[str]:
    if analysis.company is None:
        return set()
    name = _normalize(analysis.company.company_name)
    return {e.id for e in resume.experiences if _normalize(e.company) == name}


TARGET_RESOLVERS: dict[str, Callable[[PreAnalysisResult, ResumeContent], set[str]]] = {
    "impact": _impact_targets,
    "uniqueness": _uniqueness_targets,
    "context": _context_targets,
    "company": _company_targets,
}


def field_root(path: str) -> str:
    """Top-level bundle key a field path starts from."""
    return path.split(".", 1)[0].split("[", 1)[0]


def contained_values(condition: BaseModel, field: str) -> list[str]:
    """String values a condition requires the ``field`` collection to contain.

    Only MATCH ``contains`` leaves reached through AND/OR count; leaves under
    NOT describe what must be absent.
    """
    if isinstance(condition, (AndCondition, OrCondition)):
        return [
            value
            for child in condition.conditions
            for value in contained_values(child, field)
        ]
    if (
        isinstance(condition, MatchCondition)
        and condition.operator == "contains"
        and condition.field == field
        and isinstance(condition.value, str)
    ):
        return [condition.value]
    return []


def resolve_targets(
    rule: TransformationRule, analysis: PreAnalysisResult, resume: ResumeContent
) -> list[str]:
    """Experience and bullet ids the rule's condition refers to, in résumé order."""
    wanted: set[str] = set()
    for root in dict.fromkeys(field_root(path) for path in condition_fields(rule.condition)):
        if root == "soft_skills":
            # Only bullets evidencing the skills the condition asks for
            skills = contained_values(rule.condition, "soft_skills")
            wanted |= _soft_skill_targets(analysis, resume, skills)
            continue
        resolver = TARGET_RESOLVERS.get(root)
        if resolver is not None:
            wanted |= resolver(analysis, resume)

    targets: list[str] = []
    for experience in resume.experiences:
        if experience.id in wanted and experience.id not in targets:
            targets.append(experience.id)
        for bullet in experience.bullets:
            if bullet.id in wanted and bullet.id not in targets:
                targets.append(bullet.id)
    return targets


# =============================================================================
# Engine
# =============================================================================


class RuleEngine:
    """Evaluates a read-only rule set against pre-analysis bundles.

    The engine holds no per-request state and may be shared across
    concurrent tailoring runs.
    """

    def __init__(self, rules: Iterable[TransformationRule]):
        self.rules: tuple[TransformationRule, ...] = tuple(rules)

    def evaluate_rule(
        self,
        rule: TransformationRule,
        analysis: PreAnalysisResult,
        resume: ResumeContent,
        job: JobData | None = None,
        data: dict[str, Any] | None = None,
    ) -> RuleEvaluationResult:
        """Evaluate a single rule.

        Raises:
            RuleConfigurationError: If the rule's condition is malformed.
        """
        matched = False
        targets: list[str] = []
        if rule.enabled:
            bundle = data if data is not None else analysis.model_dump()
            try:
                matched = evaluate_condition(rule.condition, bundle)
            except RuleConfigurationError as e:
                e.rule_id = rule.id
                raise
            if matched:
                targets = resolve_targets(rule, analysis, resume)

        return RuleEvaluationResult(
            rule_id=rule.id,
            rule_name=rule.name,
            matched=matched,
            priority=rule.priority,
            recruiter_issue=rule.recruiter_issue,
            matched_targets=targets,
            actions=list(rule.actions) if matched else [],
            strategic_tone=rule.strategic_tone,
        )

    def evaluate(
        self,
        analysis: PreAnalysisResult,
        resume: ResumeContent,
        job: JobData | None = None,
    ) -> list[RuleEvaluationResult]:
        """Enabled, matching rules sorted by ascending priority (stable)."""
        data = analysis.model_dump()
        results: list[RuleEvaluationResult] = []
        for rule in self.rules:
            if not rule.enabled:
                continue
            try:
                result = self.evaluate_rule(rule, analysis, resume, job, data=data)
            except RuleConfigurationError as e:
                logger.error(f"Skipping rule {rule.id}: {e}")
                continue
            if result.matched:
                results.append(result)

        results.sort(key=lambda r: r.priority)
        logger.info(f"Matched {len(results)} of {len(self.rules)} rules")
        logger.debug("Matched rules: %s", ", ".join(r.rule_id for r in results))
        return results


# =============================================================================
# Statistics
# =============================================================================


def priority_band(priority: int) -> str:
    if priority < 10:
        return "high"
    if priority < 20:
        return "medium"
    return "low"


def rule_stats(rules: Iterable[TransformationRule]) -> dict[str, Any]:
    """Counts per recruiter issue and priority band."""
    rules = list(rules)
    by_issue = Counter(rule.recruiter_issue for rule in rules)
    by_band = Counter(priority_band(rule.priority) for rule in rules)
    return {
        "total": len(rules),
        "enabled": sum(1 for rule in rules if rule.enabled),
        "by_issue": {issue: by_issue.get(issue, 0) for issue in range(1, 6)},
        "by_priority": {band: by_band.get(band, 0) for band in ("high", "medium", "low")},
    }


def rules_by_issue(
    rules: Iterable[TransformationRule], issue: int
) -> list[TransformationRule]:
    return [rule for rule in rules if rule.recruiter_issue == issue]
