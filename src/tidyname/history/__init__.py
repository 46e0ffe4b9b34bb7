"""Operation history: recording, querying, undo and restore."""

from .errors import (
    EmptyHistoryError,
    HistoryError,
    HistoryStorageError,
    OperationAlreadyUndoneError,
    OperationNotFoundError,
)
from .lookup import (
    get_original_path,
    has_file_been_renamed,
    lookup_file_history,
    lookup_in_store,
    lookup_multiple_files,
)
from .models import (
    HISTORY_STORE_VERSION,
    FileHistoryLookup,
    FileHistoryRecord,
    FileOperationEntry,
    HistoryStore,
    OperationHistoryEntry,
    OperationSummary,
    OperationType,
    RestoreResult,
    UndoFileResult,
    UndoResult,
)
from .pruner import DEFAULT_PRUNE_CONFIG, PruneConfig, prune_history, should_prune
from .query import get_history, get_history_count, get_history_entry
from .recorder import create_entry_from_result, determine_operation_type, record_operation
from .restore import can_restore_file, restore_file
from .storage import DEFAULT_HISTORY_PATH, HistoryRepository
from .undo import cleanup_directories, mark_operation_as_undone, undo_operation

__all__ = [
    "DEFAULT_HISTORY_PATH",
    "DEFAULT_PRUNE_CONFIG",
    "EmptyHistoryError",
    "FileHistoryLookup",
    "FileHistoryRecord",
    "FileOperationEntry",
    "HISTORY_STORE_VERSION",
    "HistoryError",
    "HistoryRepository",
    "HistoryStorageError",
    "HistoryStore",
    "OperationAlreadyUndoneError",
    "OperationHistoryEntry",
    "OperationNotFoundError",
    "OperationSummary",
    "OperationType",
    "PruneConfig",
    "RestoreResult",
    "UndoFileResult",
    "UndoResult",
    "can_restore_file",
    "cleanup_directories",
    "create_entry_from_result",
    "determine_operation_type",
    "get_history",
    "get_history_count",
    "get_history_entry",
    "get_original_path",
    "has_file_been_renamed",
    "lookup_file_history",
    "lookup_in_store",
    "lookup_multiple_files",
    "mark_operation_as_undone",
    "prune_history",
    "record_operation",
    "restore_file",
    "should_prune",
    "undo_operation",
]
