"""Reverse recorded operations."""

from __future__ import annotations

import logging
import os
import time
from pathlib import PurePath
from typing import Iterable, Optional

from .errors import (
    EmptyHistoryError,
    HistoryError,
    OperationAlreadyUndoneError,
    OperationNotFoundError,
)
from .models import FileHistoryRecord, OperationHistoryEntry, UndoFileResult, UndoResult, utcnow
from .storage import HistoryRepository

LOGGER = logging.getLogger(__name__)


def _skipped(record: FileHistoryRecord, reason: str) -> UndoFileResult:
    return UndoFileResult(
        original_path=record.original_path,
        current_path=record.new_path,
        success=False,
        skip_reason=reason,
    )


def _failed(record: FileHistoryRecord, error: str) -> UndoFileResult:
    return UndoFileResult(
        original_path=record.original_path,
        current_path=record.new_path,
        success=False,
        error=error,
    )


def _restored(record: FileHistoryRecord) -> UndoFileResult:
    return UndoFileResult(original_path=record.original_path, current_path=record.new_path, success=True)


def validate_reversal(record: FileHistoryRecord) -> UndoFileResult:
    """Check whether ``record`` can be reversed without touching the filesystem."""
    if not record.success:
        return _skipped(record, "Original operation failed for this file")
    if not record.new_path:
        return _skipped(record, "No destination path recorded")
    if not os.path.exists(record.new_path):
        return _failed(record, "File no longer exists at expected location")
    if os.path.exists(record.original_path):
        return _failed(record, "Original path is now occupied by another file")
    parent = os.path.dirname(record.original_path)
    if not os.path.isdir(parent):
        return _failed(record, f"Parent directory does not exist: {parent}")
    return _restored(record)


def reverse_file(record: FileHistoryRecord) -> UndoFileResult:
    """Move the file of ``record`` back to its original path."""
    checked = validate_reversal(record)
    if not checked.success or not record.new_path:
        return checked
    try:
        os.rename(record.new_path, record.original_path)
    except OSError as exc:
        LOGGER.warning("Undo failed for %s: %s", record.new_path, exc)
        return _failed(record, str(exc))
    return checked


def _depth(path: str) -> int:
    return len(PurePath(path).parts)


def cleanup_directories(directories: Iterable[str]) -> list[str]:
    """Remove empty directories, deepest first.

    Directories are ordered by path segment count; a directory is only removed when it exists
    and is empty at removal time.

    Returns:
        list[str]: Directories actually removed.
    """
    removed: list[str] = []
    for directory in sorted(directories, key=_depth, reverse=True):
        try:
            if not os.path.isdir(directory) or os.listdir(directory):
                continue
            os.rmdir(directory)
        except OSError as exc:
            LOGGER.debug("Leaving directory %s in place: %s", directory, exc)
            continue
        removed.append(directory)
    return removed


def _resolve_entry(repository: HistoryRepository, operation_id: Optional[str]) -> OperationHistoryEntry:
    store = repository.load()
    if operation_id:
        entry = store.find(operation_id)
        if entry is None:
            raise OperationNotFoundError(f"Operation not found: {operation_id}")
    elif not store.entries:
        raise EmptyHistoryError("No operations in history to undo")
    else:
        entry = store.entries[0]
    if entry.is_undone:
        raise OperationAlreadyUndoneError("Operation already undone")
    return entry


def mark_operation_as_undone(repository: HistoryRepository, operation_id: str) -> OperationHistoryEntry:
    """Set ``undone_at`` on the stored entry and persist the store.

    Raises:
        OperationNotFoundError: If the entry disappeared from the store.
        HistoryStorageError: If the store cannot be saved.
    """
    store = repository.load()
    entry = store.find(operation_id)
    if entry is None:
        raise OperationNotFoundError(f"Operation not found: {operation_id}")
    updated = entry.model_copy(update={"undone_at": utcnow()})
    repository.save(store.replace_entry(updated))
    return updated


def _counts(results: list[UndoFileResult]) -> tuple[int, int, int]:
    restored = sum(1 for result in results if result.success)
    skipped = sum(1 for result in results if not result.success and result.skip_reason)
    return restored, skipped, len(results) - restored - skipped


def undo_operation(
    repository: HistoryRepository,
    operation_id: Optional[str] = None,
    *,
    dry_run: bool = False,
    force: bool = False,
) -> UndoResult:
    """Reverse every file move of a recorded operation.

    Every record is validated first. When any record fails validation and neither ``force``
    nor ``dry_run`` is set, nothing is touched and the validation outcome is returned with
    ``dry_run=True``. Otherwise files are moved back one at a time, directories created by the
    operation are removed when empty, and the entry is marked as undone.

    Args:
        repository: History repository.
        operation_id: Operation to undo; defaults to the most recent one.
        dry_run: Only validate.
        force: Execute even when some records fail validation.

    Returns:
        UndoResult: Per-file outcomes and removed directories.

    Raises:
        EmptyHistoryError: If no id was given and the history is empty.
        OperationNotFoundError: If no entry has ``operation_id``.
        OperationAlreadyUndoneError: If the entry was already undone.
    """
    started = time.monotonic()
    entry = _resolve_entry(repository, operation_id)

    def elapsed() -> int:
        return int((time.monotonic() - started) * 1000)

    checks = [validate_reversal(record) for record in entry.files]
    restored, skipped, failed = _counts(checks)
    if dry_run or (failed and not force):
        return UndoResult(
            operation_id=entry.id,
            success=failed == 0 if dry_run else False,
            dry_run=True,
            files_restored=restored if dry_run else 0,
            files_skipped=skipped,
            files_failed=failed,
            files=checks,
            duration_ms=elapsed(),
        )

    results = [reverse_file(record) for record in entry.files]
    removed = cleanup_directories(entry.directories_created)
    try:
        mark_operation_as_undone(repository, entry.id)
    except HistoryError as exc:
        LOGGER.warning("Failed to mark operation %s as undone: %s", entry.id, exc)

    restored, skipped, failed = _counts(results)
    return UndoResult(
        operation_id=entry.id,
        success=failed == 0,
        dry_run=False,
        files_restored=restored,
        files_skipped=skipped,
        files_failed=failed,
        directories_removed=removed,
        files=results,
        duration_ms=elapsed(),
    )


__all__ = [
    "cleanup_directories",
    "mark_operation_as_undone",
    "reverse_file",
    "undo_operation",
    "validate_reversal",
]
