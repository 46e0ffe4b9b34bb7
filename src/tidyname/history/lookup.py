"""Find the recorded history of individual files."""

from __future__ import annotations

import os
from typing import Iterable, Optional

from .models import (
    FileHistoryLookup,
    FileHistoryRecord,
    FileOperationEntry,
    HistoryStore,
    OperationHistoryEntry,
)
from .storage import HistoryRepository

_Match = tuple[OperationHistoryEntry, FileHistoryRecord]


def normalize_path(path: str) -> str:
    return os.path.abspath(os.path.expanduser(path))


def _find_matches(entries: Iterable[OperationHistoryEntry], normalized: str) -> list[_Match]:
    matches: list[_Match] = []
    for entry in entries:
        for record in entry.files:
            new_path = normalize_path(record.new_path) if record.new_path else None
            if normalize_path(record.original_path) == normalized or new_path == normalized:
                matches.append((entry, record))
    return matches


def _build_lookup(searched: str, matches: list[_Match]) -> FileHistoryLookup:
    ordered = sorted(matches, key=lambda match: match[0].timestamp, reverse=True)
    latest_entry, latest_record = ordered[0]
    _, earliest_record = ordered[-1]
    return FileHistoryLookup(
        searched_path=searched,
        found=True,
        original_path=earliest_record.original_path,
        current_path=latest_record.new_path,
        last_operation_id=latest_entry.id,
        last_modified=latest_entry.timestamp,
        is_at_original=os.path.exists(earliest_record.original_path),
        operations=[
            FileOperationEntry(
                operation_id=entry.id,
                timestamp=entry.timestamp,
                operation_type=entry.operation_type,
                original_path=record.original_path,
                new_path=record.new_path,
            )
            for entry, record in ordered
        ],
    )


def lookup_in_store(store: HistoryStore, path: str) -> Optional[FileHistoryLookup]:
    """Look up ``path`` in an already loaded store."""
    normalized = normalize_path(path)
    matches = _find_matches(store.entries, normalized)
    if not matches:
        return None
    return _build_lookup(normalized, matches)


def lookup_file_history(repository: HistoryRepository, path: str) -> Optional[FileHistoryLookup]:
    """Return the history of the file at ``path``.

    The path is matched against both the original and the new path of every record. The
    original path comes from the oldest match and the current path from the newest.

    Args:
        repository: History repository.
        path: Path of the file, relative paths are resolved against the working directory.

    Returns:
        Optional[FileHistoryLookup]: Lookup result, or None when the file has no history.
    """
    return lookup_in_store(repository.load(), path)


def lookup_multiple_files(
    repository: HistoryRepository, paths: Iterable[str]
) -> dict[str, Optional[FileHistoryLookup]]:
    """Look up several paths against a single load of the store."""
    store = repository.load()
    return {path: lookup_in_store(store, path) for path in paths}


def has_file_been_renamed(repository: HistoryRepository, path: str) -> bool:
    lookup = lookup_file_history(repository, path)
    return lookup is not None and not lookup.is_at_original


def get_original_path(repository: HistoryRepository, path: str) -> Optional[str]:
    """Return the original path of a renamed file, or None if it is unknown or already there."""
    lookup = lookup_file_history(repository, path)
    if lookup is None or lookup.is_at_original:
        return None
    return lookup.original_path


__all__ = [
    "get_original_path",
    "has_file_been_renamed",
    "lookup_file_history",
    "lookup_in_store",
    "lookup_multiple_files",
    "normalize_path",
]
