"""Rename preview generation, selection and execution."""

from .conflicts import (
    ConflictInfo,
    detect_filesystem_collisions,
    normalize_path_key,
)
from .executor import (
    BatchValidationError,
    ValidationIssue,
    execute_batch_rename,
    is_actionable,
    validate_batch_rename,
)
from .models import (
    AppliedRule,
    BatchRenameResult,
    BatchRenameSummary,
    FileRenameResult,
    LlmSuggestion,
    PreviewSummary,
    RenameIssue,
    RenameOutcome,
    RenamePreview,
    RenameProposal,
    RenameStatus,
    TemplateSource,
)
from .preview import (
    DefaultTemplateError,
    PreviewCancelledError,
    PreviewError,
    PreviewGenerationError,
    PreviewOptions,
    calculate_summary,
    generate_preview,
)
from .sanitize import SanitizeChange, SanitizeOptions, SanitizeResult, sanitize_filename
from .selection import SelectionManager, SelectionSnapshot, SelectionSummary

__all__ = [
    "AppliedRule",
    "BatchRenameResult",
    "BatchRenameSummary",
    "BatchValidationError",
    "ConflictInfo",
    "DefaultTemplateError",
    "FileRenameResult",
    "LlmSuggestion",
    "PreviewCancelledError",
    "PreviewError",
    "PreviewGenerationError",
    "PreviewOptions",
    "PreviewSummary",
    "RenameIssue",
    "RenameOutcome",
    "RenamePreview",
    "RenameProposal",
    "RenameStatus",
    "SanitizeChange",
    "SanitizeOptions",
    "SanitizeResult",
    "SelectionManager",
    "SelectionSnapshot",
    "SelectionSummary",
    "TemplateSource",
    "ValidationIssue",
    "calculate_summary",
    "detect_filesystem_collisions",
    "execute_batch_rename",
    "generate_preview",
    "is_actionable",
    "normalize_path_key",
    "sanitize_filename",
    "validate_batch_rename",
]
