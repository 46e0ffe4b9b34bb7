"""Read-only queries over the history store."""

from __future__ import annotations

from typing import Optional

from .models import OperationHistoryEntry, OperationType
from .storage import HistoryRepository


def get_history(
    repository: HistoryRepository,
    *,
    limit: Optional[int] = None,
    operation_type: Optional[OperationType] = None,
) -> list[OperationHistoryEntry]:
    """Return entries newest first.

    Args:
        repository: History repository.
        limit: Maximum number of entries after filtering; None or <= 0 means unlimited.
        operation_type: Only return entries of this type.

    Returns:
        list[OperationHistoryEntry]: Matching entries.
    """
    entries = repository.load().entries
    if operation_type is not None:
        entries = [entry for entry in entries if entry.operation_type == operation_type]
    if limit is not None and limit > 0:
        entries = entries[:limit]
    return list(entries)


def get_history_entry(repository: HistoryRepository, operation_id: str) -> Optional[OperationHistoryEntry]:
    return repository.load().find(operation_id)


def get_history_count(
    repository: HistoryRepository, operation_type: Optional[OperationType] = None
) -> int:
    return len(get_history(repository, operation_type=operation_type))


__all__ = ["get_history", "get_history_count", "get_history_entry"]
