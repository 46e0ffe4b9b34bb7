"""Turn batch execution results into history entries."""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Optional

from .models import (
    FileHistoryRecord,
    HistoryStore,
    OperationHistoryEntry,
    OperationSummary,
    OperationType,
    utcnow,
)
from .pruner import PruneConfig, prune_history
from .storage import HistoryRepository

if TYPE_CHECKING:
    from tidyname.rename.models import BatchRenameResult, FileRenameResult

LOGGER = logging.getLogger(__name__)


def determine_operation_type(results: list[FileRenameResult]) -> OperationType:
    return "move" if any(result.is_move_operation for result in results) else "rename"


def create_entry_from_result(result: BatchRenameResult) -> OperationHistoryEntry:
    """Build a history entry from a batch result.

    Args:
        result: Result returned by the batch executor.

    Returns:
        OperationHistoryEntry: Entry with a fresh UUID and the current timestamp; file records
        keep the execution order.
    """
    files = [
        FileHistoryRecord(
            original_path=item.original_path,
            new_path=item.new_path,
            is_move_operation=item.is_move_operation,
            success=item.outcome.value == "success",
            error=item.error,
        )
        for item in result.results
    ]
    return OperationHistoryEntry(
        id=str(uuid.uuid4()),
        timestamp=utcnow(),
        operation_type=determine_operation_type(result.results),
        file_count=len(files),
        summary=OperationSummary(
            succeeded=result.summary.succeeded,
            skipped=result.summary.skipped,
            failed=result.summary.failed,
            directories_created=result.summary.directories_created,
        ),
        duration_ms=result.duration_ms,
        files=files,
        directories_created=list(result.directories_created),
    )


def record_operation(
    result: BatchRenameResult,
    repository: HistoryRepository,
    *,
    store: Optional[HistoryStore] = None,
    prune: Optional[PruneConfig] = None,
) -> OperationHistoryEntry:
    """Record ``result`` as the newest history entry and persist the store.

    Args:
        result: Batch execution result.
        repository: Repository the store is persisted to.
        store: Store to extend instead of loading one from ``repository``.
        prune: Retention limits applied after prepending the entry.

    Returns:
        OperationHistoryEntry: The recorded entry.

    Raises:
        HistoryStorageError: If the store cannot be loaded or saved.
    """
    entry = create_entry_from_result(result)
    updated = (store if store is not None else repository.load()).with_entry(entry)
    if prune is not None:
        updated, removed = prune_history(updated, prune)
        if removed:
            LOGGER.debug("Pruned %d history entr%s", removed, "y" if removed == 1 else "ies")
    repository.save(updated)
    return entry


__all__ = ["create_entry_from_result", "determine_operation_type", "record_operation"]
