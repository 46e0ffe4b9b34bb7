"""Rename preview generation.

The generator walks files in input order and builds one immutable proposal per file through a
series of stages (template resolution, naming, OS sanitization, validity check, folder
structure). Conflict passes then run over the whole batch. Each stage returns a new proposal.
"""

from __future__ import annotations

import logging
import os
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional, Protocol, Sequence

from pydantic import BaseModel, ConfigDict, Field

from tidyname.classification.models import AnalysisResult
from tidyname.ingestion.models import FileInfo, UnifiedMetadata
from tidyname.rules.models import FilenamePatternRule, MetadataPatternRule, RulePriorityMode
from tidyname.rules.resolver import resolve_template_for_rule
from tidyname.templates.filenames import is_valid_filename
from tidyname.templates.folders import FolderResolutionError, resolve_folder_path
from tidyname.templates.models import FolderStructure, Template
from tidyname.templates.parser import TemplateSyntaxError
from tidyname.templates.preview import TemplateRenderError, render_filename

from .conflicts import detect_filesystem_collisions, normalize_path_key
from .models import (
    AppliedRule,
    LlmSuggestion,
    PreviewSummary,
    RenameIssue,
    RenamePreview,
    RenameProposal,
    RenameStatus,
    TemplateSource,
)
from .sanitize import SanitizeOptions, sanitize_filename

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]

SANITIZE_ISSUE_CODES = {
    "char_replacement": "SANITIZED_CHAR_REPLACEMENT",
    "reserved_name": "SANITIZED_RESERVED_NAME",
    "truncation": "SANITIZED_TRUNCATION",
    "trailing_fix": "SANITIZED_TRAILING_FIX",
}


class CancelToken(Protocol):
    def is_set(self) -> bool: ...


class PreviewError(Exception):
    """Base exception for preview generation failures.

    Attributes:
        code: ``cancelled``, ``generation_error`` or ``default_template_not_found``.
    """

    code = "generation_error"


class PreviewCancelledError(PreviewError):
    code = "cancelled"


class PreviewGenerationError(PreviewError):
    code = "generation_error"


class DefaultTemplateError(PreviewError):
    code = "default_template_not_found"


class PreviewOptions(BaseModel):
    """Inputs that shape preview generation.

    Attributes:
        templates: Available templates.
        default_template_id: Template used when no rule matches; must exist in ``templates``.
        metadata_rules: Metadata pattern rules.
        filename_rules: Filename pattern rules.
        rule_priority_mode: Ordering between rule sets.
        fallbacks: Placeholder fallback values.
        sanitize_filenames: Clean template output so it is filename-safe.
        os_sanitize: OS-level sanitization options, or None to skip that stage.
        check_filesystem: Mark proposals whose target already exists on disk.
        case_sensitive: Filesystem case sensitivity; None uses the platform default.
        folder_structures: Folder structures referenced by rules.
        base_directory: Root that folder structures resolve under; defaults to each file's directory.
        date_from_filesystem: Allow file modification times to fill date placeholders.
        enable_llm_analysis: Consider AI naming suggestions.
        llm_results: AI analysis results keyed by absolute file path.
        llm_confidence_threshold: Minimum confidence for an AI suggestion to be used.
    """

    model_config = ConfigDict(extra="forbid")

    templates: List[Template]
    default_template_id: str
    metadata_rules: List[MetadataPatternRule] = Field(default_factory=list)
    filename_rules: List[FilenamePatternRule] = Field(default_factory=list)
    rule_priority_mode: RulePriorityMode = "combined"
    fallbacks: Dict[str, str] = Field(default_factory=dict)
    sanitize_filenames: bool = True
    os_sanitize: Optional[SanitizeOptions] = Field(default_factory=SanitizeOptions)
    check_filesystem: bool = True
    case_sensitive: Optional[bool] = None
    folder_structures: List[FolderStructure] = Field(default_factory=list)
    base_directory: Optional[str] = None
    date_from_filesystem: bool = False
    enable_llm_analysis: bool = False
    llm_results: Optional[Dict[str, AnalysisResult]] = None
    llm_confidence_threshold: float = Field(default=0.7, ge=0.0, le=1.0)


class _Resolved(BaseModel):
    template: Template
    template_source: TemplateSource
    applied_rule: Optional[AppliedRule] = None
    folder_structure_id: Optional[str] = None
    warnings: List[RenameIssue] = Field(default_factory=list)


def _resolve_template(
    file: FileInfo, metadata: UnifiedMetadata, options: PreviewOptions, default: Template
) -> _Resolved:
    resolution = resolve_template_for_rule(
        options.metadata_rules,
        options.filename_rules,
        file,
        metadata,
        options.templates,
        options.rule_priority_mode,
    )
    if resolution.template_id and resolution.matched_rule:
        template = next(item for item in options.templates if item.id == resolution.template_id)
        return _Resolved(
            template=template,
            template_source="rule",
            applied_rule=AppliedRule(
                rule_id=resolution.matched_rule.rule_id,
                rule_name=resolution.matched_rule.rule_name,
                rule_type=resolution.matched_rule.rule_type,
            ),
            folder_structure_id=resolution.folder_structure_id,
        )
    if resolution.fallback_reason == "template-not-found":
        return _Resolved(
            template=default,
            template_source="fallback",
            warnings=[
                RenameIssue(
                    code="RULE_TEMPLATE_MISSING",
                    message="Rule matched but its template was not found, using default template",
                )
            ],
        )
    return _Resolved(template=default, template_source="default")


def _metadata_snapshot(metadata: Optional[UnifiedMetadata]) -> dict[str, Any]:
    if metadata is None:
        return {}
    snapshot: dict[str, Any] = {}
    for key in ("image", "pdf", "office"):
        section = getattr(metadata, key)
        if section is not None:
            snapshot[key] = section.model_dump(mode="json", exclude_none=True)
    return snapshot


def _llm_suggestion(result: Optional[AnalysisResult]) -> Optional[LlmSuggestion]:
    if result is None:
        return None
    return LlmSuggestion(
        suggested_name=result.suggestion.suggested_name,
        confidence=result.suggestion.confidence,
        reasoning=result.suggestion.reasoning,
        keywords=list(result.suggestion.keywords),
    )


def _start(file: FileInfo, metadata: Optional[UnifiedMetadata], resolved: _Resolved) -> RenameProposal:
    return RenameProposal(
        id=str(uuid.uuid4()),
        original_path=file.path,
        original_name=file.full_name,
        proposed_name=file.full_name,
        proposed_path=file.path,
        status=RenameStatus.READY,
        issues=list(resolved.warnings),
        metadata=_metadata_snapshot(metadata),
        applied_rule=resolved.applied_rule,
        template_source=resolved.template_source,
        folder_structure_id=resolved.folder_structure_id,
    )


def _apply_llm(
    proposal: RenameProposal, file: FileInfo, suggestion: LlmSuggestion
) -> RenameProposal:
    name = f"{suggestion.suggested_name}.{file.extension}" if file.extension else suggestion.suggested_name
    return proposal.with_issue(
        RenameIssue(
            code="LLM_SUGGESTION_USED",
            message=f"Using LLM suggestion (confidence: {suggestion.confidence * 100:.0f}%)",
        ),
        proposed_name=name,
        proposed_path=os.path.join(os.path.dirname(file.path), name),
        template_source="llm",
        use_llm_suggestion=True,
    )


def _apply_template(
    proposal: RenameProposal,
    file: FileInfo,
    metadata: UnifiedMetadata,
    template: Template,
    options: PreviewOptions,
) -> RenameProposal:
    try:
        rendered = render_filename(
            file,
            template.pattern,
            metadata,
            fallbacks=options.fallbacks,
            sanitize=options.sanitize_filenames,
            date_from_filesystem=options.date_from_filesystem,
        )
    except (TemplateSyntaxError, TemplateRenderError) as exc:
        return proposal.with_issue(
            RenameIssue(code="TEMPLATE_ERROR", message=str(exc)),
            status=RenameStatus.MISSING_DATA,
        )

    issues = list(proposal.issues)
    status = proposal.status
    for placeholder in rendered.empty_placeholders:
        issues.append(
            RenameIssue(
                code="MISSING_METADATA",
                message=f"Placeholder {{{placeholder}}} could not be filled",
                field=placeholder,
            )
        )
        status = RenameStatus.MISSING_DATA
    for placeholder in rendered.fallback_placeholders:
        issues.append(
            RenameIssue(
                code="USED_FALLBACK",
                message=f"Used fallback value for {{{placeholder}}}",
                field=placeholder,
            )
        )
    return proposal.model_copy(
        update={
            "proposed_name": rendered.proposed_name,
            "proposed_path": rendered.proposed_path,
            "issues": issues,
            "status": status,
        }
    )


def _apply_os_sanitize(proposal: RenameProposal, options: SanitizeOptions) -> RenameProposal:
    result = sanitize_filename(proposal.proposed_name, options)
    if not result.was_modified:
        return proposal
    issues = [
        *proposal.issues,
        *(
            RenameIssue(code=SANITIZE_ISSUE_CODES.get(change.type, "SANITIZED"), message=change.message)
            for change in result.changes
        ),
    ]
    return proposal.model_copy(
        update={
            "proposed_name": result.sanitized,
            "proposed_path": os.path.join(os.path.dirname(proposal.proposed_path), result.sanitized),
            "issues": issues,
        }
    )


def _check_validity(proposal: RenameProposal) -> RenameProposal:
    if is_valid_filename(proposal.proposed_name):
        return proposal
    return proposal.with_issue(
        RenameIssue(code="INVALID_NAME", message="Proposed filename contains invalid characters"),
        status=RenameStatus.INVALID_NAME,
    )


def _apply_folder_structure(
    proposal: RenameProposal,
    file: FileInfo,
    metadata: UnifiedMetadata,
    options: PreviewOptions,
) -> RenameProposal:
    structure_id = proposal.folder_structure_id
    if not structure_id:
        return proposal
    structure = next((item for item in options.folder_structures if item.id == structure_id), None)
    if structure is None or not structure.enabled:
        return proposal

    try:
        resolution = resolve_folder_path(
            structure.pattern,
            metadata,
            file,
            fallbacks=options.fallbacks,
            date_from_filesystem=options.date_from_filesystem,
        )
    except FolderResolutionError as exc:
        status = proposal.status
        if status != RenameStatus.INVALID_NAME:
            status = RenameStatus.MISSING_DATA
        return proposal.with_issue(
            RenameIssue(
                code="FOLDER_RESOLUTION_FAILED",
                message=f"Folder structure resolution failed: {exc}",
            ),
            status=status,
            folder_structure_id=None,
        )

    original_dir = os.path.dirname(file.path)
    base_dir = options.base_directory or original_dir
    proposed_path = os.path.join(base_dir, *resolution.resolved_path.split("/"), proposal.proposed_name)
    return proposal.model_copy(
        update={
            "proposed_path": proposed_path,
            "is_move_operation": os.path.normpath(os.path.dirname(proposed_path))
            != os.path.normpath(original_dir),
        }
    )


def _classify_unchanged(proposal: RenameProposal) -> RenameProposal:
    if proposal.status == RenameStatus.READY and proposal.proposed_path == proposal.original_path:
        return proposal.model_copy(update={"status": RenameStatus.NO_CHANGE})
    return proposal


def build_proposal(
    file: FileInfo,
    metadata: Optional[UnifiedMetadata],
    options: PreviewOptions,
    default_template: Template,
) -> RenameProposal:
    """Build the proposal for a single file.

    Args:
        file: File to rename.
        metadata: Metadata for the file, or None when none was extracted.
        options: Preview options.
        default_template: Template used when no rule applies.

    Returns:
        RenameProposal: Proposal before batch-level conflict marking.
    """
    effective = metadata or UnifiedMetadata.empty(file)
    resolved = _resolve_template(file, effective, options, default_template)
    proposal = _start(file, metadata, resolved)

    suggestion: Optional[LlmSuggestion] = None
    if options.enable_llm_analysis and options.llm_results is not None:
        suggestion = _llm_suggestion(options.llm_results.get(file.path))
        if suggestion is None:
            proposal = proposal.with_issue(
                RenameIssue(
                    code="LLM_ANALYSIS_FAILED",
                    message="LLM analysis failed or was unavailable, using template-based naming",
                )
            )
        else:
            proposal = proposal.model_copy(update={"llm_suggestion": suggestion})

    if suggestion is not None and suggestion.confidence >= options.llm_confidence_threshold:
        proposal = _apply_llm(proposal, file, suggestion)
    else:
        proposal = _apply_template(proposal, file, effective, resolved.template, options)

    if options.os_sanitize is not None:
        proposal = _apply_os_sanitize(proposal, options.os_sanitize)
    proposal = _check_validity(proposal)
    proposal = _apply_folder_structure(proposal, file, effective, options)
    return _classify_unchanged(proposal)


def mark_duplicates(proposals: Sequence[RenameProposal]) -> list[RenameProposal]:
    """Mark READY proposals that share a normalised proposed path with another proposal."""
    counts: dict[str, int] = {}
    for proposal in proposals:
        key = normalize_path_key(proposal.proposed_path)
        counts[key] = counts.get(key, 0) + 1

    marked: list[RenameProposal] = []
    for proposal in proposals:
        if counts[normalize_path_key(proposal.proposed_path)] > 1 and proposal.status == RenameStatus.READY:
            proposal = proposal.with_issue(
                RenameIssue(
                    code="DUPLICATE_NAME",
                    message="Another file would have the same name in this directory",
                ),
                status=RenameStatus.CONFLICT,
            )
        marked.append(proposal)
    return marked


def mark_filesystem_collisions(
    proposals: Sequence[RenameProposal], *, case_sensitive: Optional[bool] = None
) -> list[RenameProposal]:
    """Mark READY proposals whose target already exists on disk."""
    ready = [proposal for proposal in proposals if proposal.status == RenameStatus.READY]
    collisions = detect_filesystem_collisions(ready, case_sensitive=case_sensitive)
    marked: list[RenameProposal] = []
    for proposal in proposals:
        conflicts = collisions.get(proposal.id)
        if conflicts:
            proposal = proposal.model_copy(
                update={
                    "status": RenameStatus.CONFLICT,
                    "issues": [
                        *proposal.issues,
                        *(RenameIssue(code=info.code, message=info.message) for info in conflicts),
                    ],
                }
            )
        marked.append(proposal)
    return marked


def calculate_summary(proposals: Sequence[RenameProposal]) -> PreviewSummary:
    """Count proposals per status and per kind of operation."""
    moves = sum(1 for proposal in proposals if proposal.is_move_operation)

    def count(status: RenameStatus) -> int:
        return sum(1 for proposal in proposals if proposal.status == status)

    return PreviewSummary(
        total=len(proposals),
        ready=count(RenameStatus.READY),
        conflicts=count(RenameStatus.CONFLICT),
        missing_data=count(RenameStatus.MISSING_DATA),
        no_change=count(RenameStatus.NO_CHANGE),
        invalid_name=count(RenameStatus.INVALID_NAME),
        move_operations=moves,
        rename_only=len(proposals) - moves,
        llm_suggested=sum(1 for proposal in proposals if proposal.use_llm_suggestion),
    )


def _check_cancel(cancel: Optional[CancelToken]) -> None:
    if cancel is not None and cancel.is_set():
        raise PreviewCancelledError("Preview generation cancelled")


def generate_preview(
    files: Sequence[FileInfo],
    metadata_map: Mapping[str, UnifiedMetadata],
    options: PreviewOptions,
    *,
    on_progress: Optional[ProgressCallback] = None,
    cancel: Optional[CancelToken] = None,
) -> RenamePreview:
    """Generate rename proposals for ``files``.

    Args:
        files: Files to process, in the order proposals should appear.
        metadata_map: Metadata keyed by absolute file path; missing entries are allowed.
        options: Preview options.
        on_progress: Called with ``(current, total)`` after each file.
        cancel: Token polled before each file and before each batch pass.

    Returns:
        RenamePreview: Proposals, summary and generation timestamp.

    Raises:
        DefaultTemplateError: If ``options.default_template_id`` is not a known template.
        PreviewCancelledError: If ``cancel`` was set before generation finished.
        PreviewGenerationError: If an unexpected error occurred.
    """
    default_template = next(
        (template for template in options.templates if template.id == options.default_template_id),
        None,
    )
    if default_template is None:
        raise DefaultTemplateError(f'Default template "{options.default_template_id}" not found')

    try:
        proposals: list[RenameProposal] = []
        total = len(files)
        for index, file in enumerate(files, start=1):
            _check_cancel(cancel)
            proposals.append(build_proposal(file, metadata_map.get(file.path), options, default_template))
            if on_progress is not None:
                on_progress(index, total)

        _check_cancel(cancel)
        proposals = mark_duplicates(proposals)
        if options.check_filesystem:
            _check_cancel(cancel)
            proposals = mark_filesystem_collisions(proposals, case_sensitive=options.case_sensitive)
    except PreviewError:
        raise
    except Exception as exc:
        LOGGER.exception("Preview generation failed")
        raise PreviewGenerationError(f"Preview generation failed: {exc}") from exc

    LOGGER.debug("Generated %d proposal(s)", len(proposals))
    return RenamePreview(
        proposals=proposals,
        summary=calculate_summary(proposals),
        generated_at=datetime.now(timezone.utc),
        template_used=default_template.pattern,
    )


__all__ = [
    "CancelToken",
    "DefaultTemplateError",
    "PreviewCancelledError",
    "PreviewError",
    "PreviewGenerationError",
    "PreviewOptions",
    "ProgressCallback",
    "build_proposal",
    "calculate_summary",
    "generate_preview",
    "mark_duplicates",
    "mark_filesystem_collisions",
]
