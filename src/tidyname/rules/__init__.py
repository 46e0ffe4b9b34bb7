"""Rules that choose a naming template for each file."""

from .evaluator import (
    RuleEvaluationError,
    evaluate_condition,
    evaluate_filename_rule,
    evaluate_rule,
)
from .fields import field_exists, resolve_field
from .glob import GlobPatternError, compile_glob, match_glob, validate_glob_pattern
from .models import (
    FilenamePatternRule,
    MatchMode,
    MetadataPatternRule,
    RuleCondition,
    RuleMatch,
    RuleOperator,
    RulePriorityMode,
    RuleType,
    TemplateResolution,
)
from .resolver import find_matching_rules, resolve_template_for_rule

__all__ = [
    "FilenamePatternRule",
    "GlobPatternError",
    "MatchMode",
    "MetadataPatternRule",
    "RuleCondition",
    "RuleEvaluationError",
    "RuleMatch",
    "RuleOperator",
    "RulePriorityMode",
    "RuleType",
    "TemplateResolution",
    "compile_glob",
    "evaluate_condition",
    "evaluate_filename_rule",
    "evaluate_rule",
    "field_exists",
    "find_matching_rules",
    "match_glob",
    "resolve_field",
    "resolve_template_for_rule",
    "validate_glob_pattern",
]
