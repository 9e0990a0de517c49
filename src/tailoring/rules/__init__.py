"""Declarative transformation rules and the engine that evaluates them."""

from src.tailoring.rules.engine import (
    RuleConfigurationError,
    RuleEngine,
    evaluate_condition,
    resolve_field,
    resolve_targets,
    rule_stats,
    rules_by_issue,
)
from src.tailoring.rules.loader import (
    RuleSetError,
    get_rule_set,
    load_rules,
    parse_rules,
    reset_rule_set,
)

__all__ = [
    "RuleEngine",
    "RuleConfigurationError",
    "RuleSetError",
    "evaluate_condition",
    "resolve_field",
    "resolve_targets",
    "rule_stats",
    "rules_by_issue",
    "load_rules",
    "parse_rules",
    "get_rule_set",
    "reset_rule_set",
]
