"""Rule definitions used to pick a template for each file."""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .glob import validate_glob_pattern

RuleOperator = Literal["equals", "contains", "startsWith", "endsWith", "regex", "exists", "notExists"]
MatchMode = Literal["all", "any"]
RulePriorityMode = Literal["combined", "metadata-first", "filename-first"]
RuleType = Literal["metadata", "filename"]


class RuleCondition(BaseModel):
    """A single predicate against a metadata field.

    Attributes:
        field: Dotted field path such as ``image.cameraMake`` or ``file.extension``.
        operator: Comparison to apply.
        value: Expected value; unused by ``exists`` and ``notExists``.
        case_sensitive: Whether string comparisons honour case.
    """

    model_config = ConfigDict(extra="forbid")

    field: str = Field(min_length=1)
    operator: RuleOperator
    value: Optional[str] = None
    case_sensitive: bool = False


class MetadataPatternRule(BaseModel):
    """Maps files whose metadata satisfies conditions to a template."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    conditions: List[RuleCondition] = Field(default_factory=list)
    match_mode: MatchMode = "all"
    template_id: str = Field(min_length=1)
    folder_structure_id: Optional[str] = None
    priority: int = Field(default=0, ge=0)
    enabled: bool = True


class FilenamePatternRule(BaseModel):
    """Maps files whose name matches a glob pattern to a template."""

    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    pattern: str = Field(min_length=1)
    case_sensitive: bool = False
    template_id: str = Field(min_length=1)
    folder_structure_id: Optional[str] = None
    priority: int = Field(default=0, ge=0)
    enabled: bool = True

    @field_validator("pattern")
    @classmethod
    def _check_pattern(cls, value: str) -> str:
        errors = validate_glob_pattern(value)
        if errors:
            raise ValueError("; ".join(errors))
        return value


class RuleMatch(BaseModel):
    """Identifies the rule that selected a template."""

    rule_id: str
    rule_name: str
    rule_type: RuleType
    template_id: str
    priority: int
    folder_structure_id: Optional[str] = None


class TemplateResolution(BaseModel):
    """Outcome of rule-based template resolution.

    Attributes:
        template_id: Template chosen by the first usable matching rule.
        matched_rule: Rule that produced ``template_id``.
        fallback_reason: ``no-match`` or ``template-not-found`` when no template was chosen.
        folder_structure_id: Folder structure attached to the matched rule.
    """

    template_id: Optional[str] = None
    matched_rule: Optional[RuleMatch] = None
    fallback_reason: Optional[Literal["no-match", "template-not-found"]] = None
    folder_structure_id: Optional[str] = None


__all__ = [
    "FilenamePatternRule",
    "MatchMode",
    "MetadataPatternRule",
    "RuleCondition",
    "RuleMatch",
    "RuleOperator",
    "RulePriorityMode",
    "RuleType",
    "TemplateResolution",
]
