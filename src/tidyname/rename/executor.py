"""Execute approved rename proposals against the filesystem."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Literal, Optional, Sequence

from tidyname.history.errors import HistoryError
from tidyname.history.pruner import PruneConfig
from tidyname.history.recorder import record_operation
from tidyname.history.storage import HistoryRepository

from .models import (
    BatchRenameResult,
    BatchRenameSummary,
    FileRenameResult,
    RenameOutcome,
    RenameProposal,
    RenameStatus,
)
from .preview import CancelToken

LOGGER = logging.getLogger(__name__)

ValidationErrorCode = Literal[
    "SOURCE_NOT_FOUND",
    "TARGET_EXISTS",
    "NO_WRITE_PERMISSION",
    "NO_PERMISSION_TO_CREATE_DIRECTORY",
]
ExecutionProgress = Callable[[int, int, FileRenameResult], None]


@dataclass(frozen=True)
class ValidationIssue:
    proposal_id: str
    file_path: str
    code: ValidationErrorCode
    message: str


class BatchValidationError(Exception):
    """Raised when pre-flight validation of a batch fails.

    Attributes:
        errors: Every validation problem found.
    """

    def __init__(self, errors: list[ValidationIssue]) -> None:
        first = errors[0]
        super().__init__(
            f"Validation failed: {len(errors)} error(s). First: [{first.code}] {first.message}"
        )
        self.errors = errors


def is_actionable(proposal: RenameProposal) -> bool:
    """Return True when executing ``proposal`` would change the filesystem."""
    return proposal.status == RenameStatus.READY and (
        proposal.original_name != proposal.proposed_name or proposal.is_move_operation
    )


def _target_occupied(original: str, proposed: str) -> bool:
    if proposed == original or not os.path.lexists(proposed):
        return False
    # case-only renames on case-insensitive filesystems resolve to the source itself
    try:
        return not os.path.samefile(original, proposed)
    except OSError:
        return True


def find_existing_ancestor(path: str) -> str:
    """Return the closest existing ancestor of ``path`` (or ``path`` itself)."""
    current = os.path.abspath(path)
    while not os.path.exists(current):
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent
    return current


def ensure_directory(path: str) -> list[str]:
    """Create ``path`` and any missing parents.

    Returns:
        list[str]: Directories that were created, outermost first.
    """
    missing: list[str] = []
    current = os.path.abspath(path)
    while not os.path.isdir(current):
        missing.append(current)
        parent = os.path.dirname(current)
        if parent == current:
            break
        current = parent
    created: list[str] = []
    for directory in reversed(missing):
        os.mkdir(directory)
        created.append(directory)
    return created


def _validate_one(proposal: RenameProposal, create_directories: bool) -> Optional[ValidationIssue]:
    if not os.path.exists(proposal.original_path):
        return ValidationIssue(
            proposal.id,
            proposal.original_path,
            "SOURCE_NOT_FOUND",
            f"Source file does not exist: {proposal.original_path}",
        )
    if _target_occupied(proposal.original_path, proposal.proposed_path):
        return ValidationIssue(
            proposal.id,
            proposal.proposed_path,
            "TARGET_EXISTS",
            f"Target file already exists: {proposal.proposed_path}",
        )

    source_dir = os.path.dirname(proposal.original_path)
    if not os.access(source_dir, os.W_OK):
        return ValidationIssue(
            proposal.id,
            source_dir,
            "NO_WRITE_PERMISSION",
            f"No write permission on source directory: {source_dir}",
        )

    target_dir = os.path.dirname(proposal.proposed_path)
    if target_dir == source_dir:
        return None
    if create_directories and proposal.is_move_operation and not os.path.exists(target_dir):
        ancestor = find_existing_ancestor(target_dir)
        if not os.path.isdir(ancestor) or not os.access(ancestor, os.W_OK):
            return ValidationIssue(
                proposal.id,
                ancestor,
                "NO_PERMISSION_TO_CREATE_DIRECTORY",
                f"No write permission to create directories under: {ancestor}",
            )
        return None
    if not os.access(target_dir, os.W_OK):
        return ValidationIssue(
            proposal.id,
            target_dir,
            "NO_WRITE_PERMISSION",
            f"No write permission on target directory: {target_dir}",
        )
    return None


def validate_batch_rename(
    proposals: Sequence[RenameProposal], *, create_directories: bool = True
) -> list[ValidationIssue]:
    """Check that every READY proposal can be executed.

    Args:
        proposals: Proposals to check; non-READY proposals are ignored.
        create_directories: Whether missing target directories will be created.

    Returns:
        list[ValidationIssue]: Problems found, empty when the batch is valid.
    """
    issues: list[ValidationIssue] = []
    for proposal in proposals:
        if proposal.status != RenameStatus.READY:
            continue
        issue = _validate_one(proposal, create_directories)
        if issue is not None:
            issues.append(issue)
    return issues


def _skipped(proposal: RenameProposal, reason: str) -> FileRenameResult:
    return FileRenameResult(
        proposal_id=proposal.id,
        original_path=proposal.original_path,
        original_name=proposal.original_name,
        outcome=RenameOutcome.SKIPPED,
        error=reason,
        is_move_operation=proposal.is_move_operation,
    )


def _failed(proposal: RenameProposal, error: str) -> FileRenameResult:
    return FileRenameResult(
        proposal_id=proposal.id,
        original_path=proposal.original_path,
        original_name=proposal.original_name,
        outcome=RenameOutcome.FAILED,
        error=error,
        is_move_operation=proposal.is_move_operation,
    )


def _rename_one(
    proposal: RenameProposal, create_directories: bool, created: list[str]
) -> FileRenameResult:
    if create_directories and proposal.is_move_operation:
        target_dir = os.path.dirname(proposal.proposed_path)
        try:
            created.extend(ensure_directory(target_dir))
        except OSError as exc:
            return _failed(proposal, f"Failed to create directory: {exc}")

    try:
        # os.rename silently replaces files on POSIX
        if _target_occupied(proposal.original_path, proposal.proposed_path):
            raise FileExistsError(f"Destination already exists: {proposal.proposed_path}")
        os.rename(proposal.original_path, proposal.proposed_path)
    except OSError as exc:
        LOGGER.warning("Rename failed for %s: %s", proposal.original_path, exc)
        return _failed(proposal, str(exc))

    return FileRenameResult(
        proposal_id=proposal.id,
        original_path=proposal.original_path,
        original_name=proposal.original_name,
        new_path=proposal.proposed_path,
        new_name=proposal.proposed_name,
        outcome=RenameOutcome.SUCCESS,
        is_move_operation=proposal.is_move_operation,
    )


def _summarize(results: list[FileRenameResult], directories_created: int) -> BatchRenameSummary:
    return BatchRenameSummary(
        total=len(results),
        succeeded=sum(1 for result in results if result.outcome == RenameOutcome.SUCCESS),
        skipped=sum(1 for result in results if result.outcome == RenameOutcome.SKIPPED),
        failed=sum(1 for result in results if result.outcome == RenameOutcome.FAILED),
        directories_created=directories_created,
    )


def execute_batch_rename(
    proposals: Sequence[RenameProposal],
    *,
    on_progress: Optional[ExecutionProgress] = None,
    cancel: Optional[CancelToken] = None,
    skip_validation: bool = False,
    create_directories: bool = True,
    history: Optional[HistoryRepository] = None,
    prune: Optional[PruneConfig] = None,
) -> BatchRenameResult:
    """Rename files for every actionable proposal, one at a time.

    Args:
        proposals: Proposals to execute; only READY proposals whose name or directory changes
            are acted on, the rest are reported as skipped.
        on_progress: Called with ``(completed, total, result)`` after each rename.
        cancel: Token polled before each rename; remaining proposals are skipped once set.
        skip_validation: Skip the pre-flight validation.
        create_directories: Create missing target directories for move operations.
        history: Repository to record the operation into.
        prune: Pruning applied to the history store when recording.

    Returns:
        BatchRenameResult: Per-file outcomes in execution order.

    Raises:
        BatchValidationError: If pre-flight validation fails; nothing is renamed.
    """
    started_at = datetime.now(timezone.utc)
    actionable = [proposal for proposal in proposals if is_actionable(proposal)]

    if not skip_validation and actionable:
        issues = validate_batch_rename(actionable, create_directories=create_directories)
        if issues:
            raise BatchValidationError(issues)

    results: list[FileRenameResult] = []
    created: list[str] = []
    aborted = False
    for index, proposal in enumerate(actionable):
        if cancel is not None and cancel.is_set():
            aborted = True
            results.extend(_skipped(item, "Operation cancelled") for item in actionable[index:])
            break
        result = _rename_one(proposal, create_directories, created)
        results.append(result)
        if on_progress is not None:
            on_progress(index + 1, len(actionable), result)

    for proposal in proposals:
        if proposal.status == RenameStatus.NO_CHANGE:
            results.append(_skipped(proposal, "No change needed"))
        elif proposal.status != RenameStatus.READY:
            results.append(_skipped(proposal, f"Status: {proposal.status.value}"))
        elif not is_actionable(proposal):
            results.append(_skipped(proposal, "Name unchanged"))

    completed_at = datetime.now(timezone.utc)
    batch = BatchRenameResult(
        success=not any(result.outcome == RenameOutcome.FAILED for result in results),
        results=results,
        summary=_summarize(results, len(created)),
        started_at=started_at,
        completed_at=completed_at,
        duration_ms=max(0, int((completed_at - started_at).total_seconds() * 1000)),
        aborted=aborted,
        directories_created=created,
    )

    if history is not None:
        try:
            entry = record_operation(batch, history, prune=prune)
        except HistoryError as exc:
            LOGGER.warning("Unable to record operation history: %s", exc)
        else:
            batch = batch.model_copy(update={"history_entry_id": entry.id})
    return batch


__all__ = [
    "BatchValidationError",
    "ExecutionProgress",
    "ValidationErrorCode",
    "ValidationIssue",
    "ensure_directory",
    "execute_batch_rename",
    "find_existing_ancestor",
    "is_actionable",
    "validate_batch_rename",
]
