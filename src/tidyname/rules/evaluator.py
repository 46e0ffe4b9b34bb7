"""Evaluation of metadata and filename rules against a single file."""

from __future__ import annotations

import re
from functools import lru_cache

from tidyname.ingestion.models import FileInfo, UnifiedMetadata

from .fields import resolve_field
from .glob import match_glob
from .models import FilenamePatternRule, MetadataPatternRule, RuleCondition


class RuleEvaluationError(ValueError):
    """Raised when a rule cannot be evaluated, for example because of an invalid regex."""


@lru_cache(maxsize=256)
def _compile_regex(pattern: str, case_sensitive: bool) -> re.Pattern[str]:
    try:
        return re.compile(pattern, 0 if case_sensitive else re.IGNORECASE)
    except re.error as exc:
        raise RuleEvaluationError(f"Invalid regex pattern '{pattern}': {exc}") from exc


def evaluate_condition(condition: RuleCondition, metadata: UnifiedMetadata) -> bool:
    """Evaluate one condition against file metadata.

    Args:
        condition: Condition to evaluate.
        metadata: Metadata for the file.

    Returns:
        bool: Whether the condition holds.

    Raises:
        RuleEvaluationError: If a ``regex`` condition carries an invalid pattern.
    """
    actual = resolve_field(condition.field, metadata)
    if condition.operator == "exists":
        return actual is not None and actual != ""
    if condition.operator == "notExists":
        return actual is None or actual == ""
    if actual is None:
        return False

    expected = condition.value or ""
    if condition.operator == "regex":
        return _compile_regex(expected, condition.case_sensitive).search(actual) is not None

    if not condition.case_sensitive:
        actual = actual.lower()
        expected = expected.lower()
    if condition.operator == "equals":
        return actual == expected
    if condition.operator == "contains":
        return expected in actual
    if condition.operator == "startsWith":
        return actual.startswith(expected)
    return actual.endswith(expected)


def evaluate_rule(rule: MetadataPatternRule, metadata: UnifiedMetadata) -> bool:
    """Return True when ``rule`` matches ``metadata``.

    Disabled rules and rules without conditions never match. ``all`` requires every condition,
    ``any`` requires at least one.

    Raises:
        RuleEvaluationError: If a condition cannot be evaluated.
    """
    if not rule.enabled or not rule.conditions:
        return False
    results = (evaluate_condition(condition, metadata) for condition in rule.conditions)
    if rule.match_mode == "any":
        return any(results)
    return all(results)


def evaluate_filename_rule(rule: FilenamePatternRule, file: FileInfo) -> bool:
    """Return True when the rule's glob matches the file's full name."""
    if not rule.enabled:
        return False
    return match_glob(rule.pattern, file.full_name, case_sensitive=rule.case_sensitive)


__all__ = ["RuleEvaluationError", "evaluate_condition", "evaluate_filename_rule", "evaluate_rule"]
