"""Pick the template that applies to a file from the configured rules."""

from __future__ import annotations

import logging
from typing import Iterable, Sequence, Union

from tidyname.ingestion.models import FileInfo, UnifiedMetadata
from tidyname.templates.models import Template

from .evaluator import RuleEvaluationError, evaluate_filename_rule, evaluate_rule
from .models import (
    FilenamePatternRule,
    MetadataPatternRule,
    RuleMatch,
    RulePriorityMode,
    TemplateResolution,
)

LOGGER = logging.getLogger(__name__)

AnyRule = Union[MetadataPatternRule, FilenamePatternRule]


def _by_priority(rules: Iterable[AnyRule]) -> list[AnyRule]:
    # sorted() is stable, so equal priorities keep their configured order
    return sorted((rule for rule in rules if rule.enabled), key=lambda rule: -rule.priority)


def _to_match(rule: AnyRule) -> RuleMatch:
    return RuleMatch(
        rule_id=rule.id,
        rule_name=rule.name,
        rule_type="metadata" if isinstance(rule, MetadataPatternRule) else "filename",
        template_id=rule.template_id,
        priority=rule.priority,
        folder_structure_id=rule.folder_structure_id,
    )


def _matches(rule: AnyRule, file: FileInfo, metadata: UnifiedMetadata) -> bool:
    if isinstance(rule, FilenamePatternRule):
        return evaluate_filename_rule(rule, file)
    try:
        return evaluate_rule(rule, metadata)
    except RuleEvaluationError as exc:
        LOGGER.debug("Rule %s skipped: %s", rule.id, exc)
        return False


def _collect(rules: Sequence[AnyRule], file: FileInfo, metadata: UnifiedMetadata) -> list[RuleMatch]:
    return [_to_match(rule) for rule in rules if _matches(rule, file, metadata)]


def find_matching_rules(
    metadata_rules: Sequence[MetadataPatternRule],
    filename_rules: Sequence[FilenamePatternRule],
    file: FileInfo,
    metadata: UnifiedMetadata,
    priority_mode: RulePriorityMode = "combined",
) -> list[RuleMatch]:
    """Return every matching rule in evaluation order.

    In ``metadata-first`` and ``filename-first`` modes the second rule set is only consulted when
    the first produced no match.
    """
    if priority_mode == "combined":
        return _collect(_by_priority([*metadata_rules, *filename_rules]), file, metadata)

    metadata_sorted = _by_priority(metadata_rules)
    filename_sorted = _by_priority(filename_rules)
    if priority_mode == "metadata-first":
        first, second = metadata_sorted, filename_sorted
    else:
        first, second = filename_sorted, metadata_sorted
    return _collect(first, file, metadata) or _collect(second, file, metadata)


def resolve_template_for_rule(
    metadata_rules: Sequence[MetadataPatternRule],
    filename_rules: Sequence[FilenamePatternRule],
    file: FileInfo,
    metadata: UnifiedMetadata,
    templates: Sequence[Template],
    priority_mode: RulePriorityMode = "combined",
) -> TemplateResolution:
    """Resolve which template applies to ``file``.

    Args:
        metadata_rules: Metadata pattern rules.
        filename_rules: Filename pattern rules.
        file: File being processed.
        metadata: Metadata for the file; pass ``UnifiedMetadata.empty(file)`` when none exists.
        templates: Configured templates, used to check that a rule's template still exists.
        priority_mode: Ordering between rule sets.

    Returns:
        TemplateResolution: The first matching rule whose template exists, or a fallback reason of
        ``no-match`` (nothing matched) or ``template-not-found`` (matches referenced unknown templates).
    """
    matches = find_matching_rules(metadata_rules, filename_rules, file, metadata, priority_mode)
    if not matches:
        return TemplateResolution(fallback_reason="no-match")

    known = {template.id for template in templates}
    for match in matches:
        if match.template_id in known:
            return TemplateResolution(
                template_id=match.template_id,
                matched_rule=match,
                folder_structure_id=match.folder_structure_id,
            )
    return TemplateResolution(fallback_reason="template-not-found")


__all__ = ["find_matching_rules", "resolve_template_for_rule"]
