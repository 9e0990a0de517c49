"""Load and validate the transformation rule set from YAML files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from src.tailoring.config import TailoringConfig, get_tailoring_config
from src.tailoring.models import TransformationRule, condition_depth

logger = logging.getLogger(__name__)

# Rule data keys holding format text, and the one placeholder each may use
FORMAT_FIELDS = {"industry_format": "industry", "comparable_format": "comparable"}


class RuleSetError(Exception):
    """Raised when a rule file cannot be read at all."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error


def _read_rule_file(path: Path) -> list[Any]:
    try:
        with path.open(encoding="utf-8") as f:
            document = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise RuleSetError(f"Failed to read rule file {path}: {e}", e) from e

    if document is None:
        return []
    if isinstance(document, dict):
        document = document.get("rules") or []
    if not isinstance(document, list):
        raise RuleSetError(f"Rule file {path} must contain a list of rules")
    return document


def format_problem(rule: TransformationRule) -> str | None:
    """Describe the first action whose format text cannot be filled, if any."""
    for action in rule.actions:
        for key, placeholder in FORMAT_FIELDS.items():
            text = action.data.get(key)
            if text is None:
                continue
            if not isinstance(text, str):
                return f"{key} must be a string"
            try:
                text.format(**{placeholder: ""})
            except (KeyError, IndexError, ValueError) as e:
                return f"{key} {text!r} may only use {{{placeholder}}} ({e!r})"
    return None


def parse_rules(
    entries: list[Any],
    *,
    max_depth: int,
    source: str = "<memory>",
    seen_ids: set[str] | None = None,
    errors: list[str] | None = None,
) -> list[TransformationRule]:
    """Validate raw rule entries, skipping (and logging) invalid ones.

    Messages for skipped entries are also appended to ``errors`` when given.
    """
    seen_ids = seen_ids if seen_ids is not None else set()

    def skip(message: str) -> None:
        logger.error(message)
        if errors is not None:
            errors.append(message)

    rules: list[TransformationRule] = []

    for position, entry in enumerate(entries):
        label = entry.get("id", f"#{position}") if isinstance(entry, dict) else f"#{position}"
        try:
            rule = TransformationRule.model_validate(entry)
        except (ValidationError, RecursionError) as e:
            skip(f"Skipping invalid rule {label} in {source}: {e}")
            continue

        depth = condition_depth(rule.condition)
        if depth > max_depth:
            skip(
                f"Skipping rule {rule.id} in {source}: condition depth {depth} "
                f"exceeds {max_depth}"
            )
            continue
        problem = format_problem(rule)
        if problem:
            skip(f"Skipping rule {rule.id} in {source}: {problem}")
            continue
        if rule.id in seen_ids:
            skip(f"Skipping duplicate rule id {rule.id} in {source}")
            continue

        seen_ids.add(rule.id)
        rules.append(rule)

    return rules


def load_rules(
    directory: Path | None = None,
    config: TailoringConfig | None = None,
    errors: list[str] | None = None,
) -> list[TransformationRule]:
    """Load every ``*.yaml`` rule file in a directory, in file-name order.

    Declaration order (file name, then position in file) is kept so that
    priority ties resolve deterministically.

    Raises:
        RuleSetError: If the directory or a file cannot be read.
    """
    config = config or get_tailoring_config()
    directory = Path(directory) if directory is not None else config.rules_dir
    if not directory.is_dir():
        raise RuleSetError(f"Rules directory not found: {directory}")

    seen_ids: set[str] = set()
    rules: list[TransformationRule] = []
    for path in sorted(directory.glob("*.yaml")):
        entries = _read_rule_file(path)
        rules.extend(
            parse_rules(
                entries,
                max_depth=config.max_condition_depth,
                source=path.name,
                seen_ids=seen_ids,
                errors=errors,
            )
        )

    logger.info(f"Loaded {len(rules)} transformation rules from {directory}")
    return rules


# Process-wide rule set
_rule_set: tuple[TransformationRule, ...] | None = None


def get_rule_set() -> tuple[TransformationRule, ...]:
    """Get the rule set singleton, loading it on first use."""
    global _rule_set
    if _rule_set is None:
        _rule_set = tuple(load_rules())
    return _rule_set


def reset_rule_set() -> None:
    """Reset the rule set singleton (useful for testing)."""
    global _rule_set
    _rule_set = None
