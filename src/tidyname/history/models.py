"""Operation history models.

Attribute names are snake_case in Python and camelCase in the persisted JSON document.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

HISTORY_STORE_VERSION = 1

OperationType = Literal["rename", "move", "organize"]


class _HistoryModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class FileHistoryRecord(_HistoryModel):
    """What happened to one file during an operation.

    Attributes:
        original_path: Path of the file before the operation.
        new_path: Path after the operation, or None when it was not renamed.
        is_move_operation: Whether the file changed directory.
        success: Whether the rename succeeded.
        error: Failure or skip reason.
    """

    original_path: str
    new_path: Optional[str] = None
    is_move_operation: bool = False
    success: bool
    error: Optional[str] = None


class OperationSummary(_HistoryModel):
    succeeded: int = Field(default=0, ge=0)
    skipped: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    directories_created: int = Field(default=0, ge=0)


class OperationHistoryEntry(_HistoryModel):
    """A recorded batch operation.

    Entries never change after recording except for ``undone_at``, which is set once when
    the operation is undone.

    Attributes:
        id: UUID of the operation.
        timestamp: Time the operation was recorded.
        operation_type: ``move`` when any file changed directory, otherwise ``rename``.
        file_count: Number of file records.
        summary: Aggregated counts.
        duration_ms: Execution duration.
        files: File records in execution order.
        directories_created: Directories the operation created.
        undone_at: Time the operation was undone, if it was.
    """

    id: str
    timestamp: datetime
    operation_type: OperationType
    file_count: int = Field(ge=0)
    summary: OperationSummary
    duration_ms: int = Field(default=0, ge=0)
    files: List[FileHistoryRecord] = Field(default_factory=list)
    directories_created: List[str] = Field(default_factory=list)
    undone_at: Optional[datetime] = None

    @property
    def is_undone(self) -> bool:
        return self.undone_at is not None


class HistoryStore(_HistoryModel):
    """The persisted history document; ``entries`` are ordered newest first."""

    version: int = Field(default=HISTORY_STORE_VERSION, ge=0)
    last_pruned: Optional[datetime] = None
    entries: List[OperationHistoryEntry] = Field(default_factory=list)

    def with_entry(self, entry: OperationHistoryEntry) -> HistoryStore:
        """Return a copy with ``entry`` prepended."""
        return self.model_copy(update={"entries": [entry, *self.entries]})

    def replace_entry(self, entry: OperationHistoryEntry) -> HistoryStore:
        """Return a copy where the entry with ``entry.id`` is replaced by ``entry``."""
        return self.model_copy(
            update={"entries": [entry if item.id == entry.id else item for item in self.entries]}
        )

    def find(self, operation_id: str) -> Optional[OperationHistoryEntry]:
        return next((entry for entry in self.entries if entry.id == operation_id), None)


class UndoFileResult(_HistoryModel):
    original_path: str
    current_path: Optional[str] = None
    success: bool
    error: Optional[str] = None
    skip_reason: Optional[str] = None


class UndoResult(_HistoryModel):
    """Outcome of undoing an operation.

    ``dry_run`` is also True when a failed validation stopped execution without ``force``.
    """

    operation_id: str
    success: bool
    dry_run: bool
    files_restored: int = Field(default=0, ge=0)
    files_skipped: int = Field(default=0, ge=0)
    files_failed: int = Field(default=0, ge=0)
    directories_removed: List[str] = Field(default_factory=list)
    files: List[UndoFileResult] = Field(default_factory=list)
    duration_ms: int = Field(default=0, ge=0)


class FileOperationEntry(_HistoryModel):
    operation_id: str
    timestamp: datetime
    operation_type: OperationType
    original_path: str
    new_path: Optional[str] = None


class FileHistoryLookup(_HistoryModel):
    """Everything history knows about one file.

    Attributes:
        searched_path: Absolute path that was looked up.
        original_path: Path before the earliest recorded operation.
        current_path: Path after the most recent recorded operation.
        last_operation_id: Most recent operation touching the file.
        last_modified: Timestamp of that operation.
        is_at_original: Whether ``original_path`` exists on disk.
        operations: Matching operations, newest first.
    """

    searched_path: str
    found: bool = True
    original_path: Optional[str] = None
    current_path: Optional[str] = None
    last_operation_id: Optional[str] = None
    last_modified: Optional[datetime] = None
    is_at_original: bool = False
    operations: List[FileOperationEntry] = Field(default_factory=list)


class RestoreResult(_HistoryModel):
    success: bool
    dry_run: bool = False
    searched_path: str
    original_path: Optional[str] = None
    previous_path: Optional[str] = None
    operation_id: Optional[str] = None
    error: Optional[str] = None
    message: Optional[str] = None
    duration_ms: int = Field(default=0, ge=0)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


__all__ = [
    "FileHistoryLookup",
    "FileHistoryRecord",
    "FileOperationEntry",
    "HISTORY_STORE_VERSION",
    "HistoryStore",
    "OperationHistoryEntry",
    "OperationSummary",
    "OperationType",
    "RestoreResult",
    "UndoFileResult",
    "UndoResult",
    "utcnow",
]
