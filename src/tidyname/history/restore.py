"""Restore single files to their original location."""

from __future__ import annotations

import logging
import os
import time
from typing import Optional

from .errors import HistoryError
from .lookup import lookup_file_history, normalize_path
from .models import RestoreResult
from .storage import HistoryRepository
from .undo import undo_operation

LOGGER = logging.getLogger(__name__)


def _restore_operation(
    repository: HistoryRepository, path: Optional[str], operation_id: str, dry_run: bool, started: float
) -> RestoreResult:
    searched = path or f"operation:{operation_id}"
    try:
        undo = undo_operation(repository, operation_id, dry_run=dry_run)
    except HistoryError as exc:
        return RestoreResult(
            success=False,
            dry_run=dry_run,
            searched_path=searched,
            operation_id=operation_id,
            error=str(exc),
            duration_ms=_elapsed(started),
        )
    if not undo.success:
        return RestoreResult(
            success=False,
            dry_run=undo.dry_run,
            searched_path=searched,
            operation_id=operation_id,
            error=f"Restore failed: {undo.files_failed} file(s) could not be restored",
            duration_ms=_elapsed(started),
        )
    return RestoreResult(
        success=True,
        dry_run=undo.dry_run,
        searched_path=searched,
        operation_id=operation_id,
        message=f"Restored {undo.files_restored} file(s) from operation",
        duration_ms=_elapsed(started),
    )


def _elapsed(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def restore_file(
    repository: HistoryRepository,
    path: Optional[str] = None,
    *,
    dry_run: bool = False,
    operation_id: Optional[str] = None,
    lookup: bool = False,
) -> RestoreResult:
    """Move a single file back to the path it had before its first recorded operation.

    Restoring is idempotent: a file already at its original location is reported as a
    success without touching the filesystem.

    Args:
        repository: History repository.
        path: Current or original path of the file.
        dry_run: Validate without moving the file.
        operation_id: Undo this whole operation instead of looking up ``path``.
        lookup: Only report where the file came from.

    Returns:
        RestoreResult: Outcome; failures are reported in ``error`` rather than raised.
    """
    started = time.monotonic()
    if operation_id:
        return _restore_operation(repository, path, operation_id, dry_run, started)
    if not path:
        return RestoreResult(
            success=False, dry_run=dry_run, searched_path="", error="File path is required"
        )

    searched = normalize_path(path)
    try:
        history = lookup_file_history(repository, searched)
    except HistoryError as exc:
        return RestoreResult(success=False, dry_run=dry_run, searched_path=searched, error=str(exc))
    if history is None or history.original_path is None:
        return RestoreResult(
            success=False,
            dry_run=dry_run,
            searched_path=searched,
            error=f"No history found for file: {searched}",
            duration_ms=_elapsed(started),
        )

    original = history.original_path
    current = history.current_path

    def result(success: bool, **fields: object) -> RestoreResult:
        payload: dict[str, object] = {
            "success": success,
            "dry_run": dry_run,
            "searched_path": searched,
            "original_path": original,
            "previous_path": current,
            "operation_id": history.last_operation_id,
            "duration_ms": _elapsed(started),
        }
        payload.update(fields)
        return RestoreResult.model_validate(payload)

    if lookup:
        return result(True, dry_run=True, message="Lookup completed")
    if history.is_at_original:
        return result(True, previous_path=original, message="File is already at original location")
    if not current or not os.path.exists(current):
        return result(
            False,
            error="File no longer exists at expected location. It may have been moved or deleted.",
        )
    if os.path.exists(original):
        return result(False, error=f"Original path is now occupied by another file: {original}")
    parent = os.path.dirname(original)
    if not os.path.isdir(parent):
        return result(False, error=f"Parent directory does not exist: {parent}")
    if dry_run:
        return result(True)

    try:
        os.rename(current, original)
    except OSError as exc:
        LOGGER.warning("Restore failed for %s: %s", current, exc)
        return result(False, error=str(exc))
    LOGGER.info("Restored %s to %s", current, original)
    return result(True, message=f"Restored to {original}")


def can_restore_file(repository: HistoryRepository, path: str) -> bool:
    """Return True when ``path`` has history and could be moved back right now."""
    checked = restore_file(repository, path, dry_run=True)
    return checked.success and checked.message is None


__all__ = ["can_restore_file", "restore_file"]
