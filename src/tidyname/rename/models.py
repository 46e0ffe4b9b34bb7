"""Rename proposal, preview and batch result models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from tidyname.rules.models import RuleType


class RenameStatus(str, Enum):
    """Classification of a proposal after preview generation."""

    READY = "ready"
    CONFLICT = "conflict"
    MISSING_DATA = "missing-data"
    NO_CHANGE = "no-change"
    INVALID_NAME = "invalid-name"


class RenameOutcome(str, Enum):
    """Outcome of executing a single proposal."""

    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


TemplateSource = Literal["rule", "fallback", "default", "llm"]


class RenameIssue(BaseModel):
    """A problem or note attached to a proposal.

    Attributes:
        code: Machine-readable issue code such as ``MISSING_METADATA``.
        message: Human-readable explanation.
        field: Placeholder or field the issue relates to, if any.
    """

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    field: Optional[str] = None


class AppliedRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    rule_id: str
    rule_name: str
    rule_type: RuleType


class LlmSuggestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    suggested_name: str = Field(min_length=1)
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str = ""
    keywords: List[str] = Field(default_factory=list)


class RenameProposal(BaseModel):
    """The proposed rename for one file.

    Proposals are immutable; each generation stage returns an updated copy.

    Attributes:
        id: Identifier unique within a preview, minted fresh on every generation.
        original_path: Absolute path of the file today.
        original_name: Current file name including extension.
        proposed_name: Proposed file name including extension.
        proposed_path: Proposed absolute path.
        status: Classification of the proposal.
        issues: Ordered issues collected during generation.
        metadata: Snapshot of the metadata that informed the proposal.
        applied_rule: Rule that selected the template, if any.
        template_source: Where the naming decision came from.
        is_move_operation: Whether the proposed directory differs from the current one.
        folder_structure_id: Folder structure used for the move, if any.
        llm_suggestion: AI suggestion available for this file, if any.
        use_llm_suggestion: Whether the AI suggestion was used for the proposed name.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    original_path: str
    original_name: str
    proposed_name: str
    proposed_path: str
    status: RenameStatus
    issues: List[RenameIssue] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    applied_rule: Optional[AppliedRule] = None
    template_source: Optional[TemplateSource] = None
    is_move_operation: bool = False
    folder_structure_id: Optional[str] = None
    llm_suggestion: Optional[LlmSuggestion] = None
    use_llm_suggestion: bool = False

    def with_issue(self, issue: RenameIssue, **changes: Any) -> RenameProposal:
        """Return a copy with ``issue`` appended and ``changes`` applied."""
        return self.model_copy(update={"issues": [*self.issues, issue], **changes})

    def has_issue(self, code: str) -> bool:
        return any(issue.code == code for issue in self.issues)


class PreviewSummary(BaseModel):
    total: int = 0
    ready: int = 0
    conflicts: int = 0
    missing_data: int = 0
    no_change: int = 0
    invalid_name: int = 0
    move_operations: int = 0
    rename_only: int = 0
    llm_suggested: int = 0


class RenamePreview(BaseModel):
    """Result of preview generation."""

    proposals: List[RenameProposal]
    summary: PreviewSummary
    generated_at: datetime
    template_used: str


class FileRenameResult(BaseModel):
    """Result of executing (or skipping) a single proposal."""

    proposal_id: str
    original_path: str
    original_name: str
    new_path: Optional[str] = None
    new_name: Optional[str] = None
    outcome: RenameOutcome
    error: Optional[str] = None
    is_move_operation: bool = False


class BatchRenameSummary(BaseModel):
    total: int = 0
    succeeded: int = 0
    skipped: int = 0
    failed: int = 0
    directories_created: int = 0


class BatchRenameResult(BaseModel):
    """Outcome of a batch execution, consumed by the history recorder.

    Attributes:
        success: True when no file failed.
        results: Per-proposal results in execution order.
        summary: Aggregated counts.
        started_at: Execution start time.
        completed_at: Execution end time.
        duration_ms: Wall-clock duration in milliseconds.
        aborted: Whether execution was cancelled before finishing.
        directories_created: Directories created during execution, parents first.
        history_entry_id: Identifier of the recorded history entry, if any.
    """

    success: bool
    results: List[FileRenameResult] = Field(default_factory=list)
    summary: BatchRenameSummary = Field(default_factory=BatchRenameSummary)
    started_at: datetime
    completed_at: datetime
    duration_ms: int = Field(default=0, ge=0)
    aborted: bool = False
    directories_created: List[str] = Field(default_factory=list)
    history_entry_id: Optional[str] = None


__all__ = [
    "AppliedRule",
    "BatchRenameResult",
    "BatchRenameSummary",
    "FileRenameResult",
    "LlmSuggestion",
    "PreviewSummary",
    "RenameIssue",
    "RenameOutcome",
    "RenamePreview",
    "RenameProposal",
    "RenameStatus",
    "TemplateSource",
]
