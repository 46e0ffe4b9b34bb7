"""Tests for batch rename execution."""

from __future__ import annotations

import os
import threading
from datetime import datetime

import pytest

from tidyname.history import HistoryRepository, get_history
from tidyname.ingestion import ImageMetadata, UnifiedMetadata
from tidyname.rename import (
    BatchValidationError,
    PreviewOptions,
    RenameOutcome,
    RenameStatus,
    execute_batch_rename,
    generate_preview,
    validate_batch_rename,
)
from tidyname.rules import FilenamePatternRule
from tidyname.templates import FolderStructure, Template


def _preview(files, pattern: str, metadata=None, **extra):
    options = PreviewOptions(
        templates=[Template(id="main", name="Main", pattern=pattern)],
        default_template_id="main",
        **extra,
    )
    return generate_preview(files, metadata or {}, options)


def test_renames_ready_proposals(make_file, tmp_path) -> None:
    files = [make_file("a.txt"), make_file("b.txt")]
    preview = _preview(files, "new-{original}")
    progress: list[tuple[int, int]] = []

    result = execute_batch_rename(
        preview.proposals, on_progress=lambda done, total, _: progress.append((done, total))
    )

    assert result.success
    assert result.summary.succeeded == 2
    assert (tmp_path / "new-a.txt").exists()
    assert not (tmp_path / "a.txt").exists()
    assert [item.new_name for item in result.results] == ["new-a.txt", "new-b.txt"]
    assert progress == [(1, 2), (2, 2)]
    assert result.history_entry_id is None


def test_non_ready_proposals_are_skipped(make_file, tmp_path) -> None:
    unchanged = make_file("keep.txt")
    duplicates = [make_file("x.jpg"), make_file("y.jpg")]
    no_change = _preview([unchanged], "{original}").proposals
    conflicts = _preview(duplicates, "same").proposals

    result = execute_batch_rename([*no_change, *conflicts])

    assert result.success
    assert result.summary.skipped == 3
    reasons = [item.error for item in result.results]
    assert reasons == ["No change needed", "Status: conflict", "Status: conflict"]
    assert all(item.outcome == RenameOutcome.SKIPPED for item in result.results)
    assert (tmp_path / "x.jpg").exists()


def test_existing_target_fails_validation(make_file, tmp_path) -> None:
    file = make_file("a.txt")
    (proposal,) = _preview([file], "b").proposals
    assert proposal.status == RenameStatus.READY
    (tmp_path / "b.txt").write_text("late arrival")

    issues = validate_batch_rename([proposal])
    with pytest.raises(BatchValidationError) as excinfo:
        execute_batch_rename([proposal])

    assert [issue.code for issue in issues] == ["TARGET_EXISTS"]
    assert excinfo.value.errors[0].code == "TARGET_EXISTS"
    assert (tmp_path / "a.txt").exists()
    assert (tmp_path / "b.txt").read_text() == "late arrival"


def test_missing_source_fails_validation(make_file, tmp_path) -> None:
    file = make_file("a.txt")
    (proposal,) = _preview([file], "b").proposals
    (tmp_path / "a.txt").unlink()

    issues = validate_batch_rename([proposal])

    assert [issue.code for issue in issues] == ["SOURCE_NOT_FOUND"]


def test_move_creates_directories_outermost_first(make_file, tmp_path) -> None:
    file = make_file("photo.jpg")
    metadata = {file.path: UnifiedMetadata(file=file, image=ImageMetadata(date_taken=datetime(2024, 3, 15)))}
    preview = _preview(
        [file],
        "{original}",
        metadata,
        filename_rules=[
            FilenamePatternRule(
                id="jpgs", name="JPEGs", pattern="*.jpg", template_id="main", folder_structure_id="ym"
            )
        ],
        folder_structures=[FolderStructure(id="ym", name="Year/month", pattern="{year}/{month}")],
        base_directory=str(tmp_path),
    )

    result = execute_batch_rename(preview.proposals)

    assert result.success
    assert result.directories_created == [str(tmp_path / "2024"), str(tmp_path / "2024" / "03")]
    assert result.summary.directories_created == 2
    assert (tmp_path / "2024" / "03" / "photo.jpg").exists()
    assert result.results[0].is_move_operation


def test_cancellation_skips_remaining(make_file, tmp_path) -> None:
    files = [make_file("a.txt"), make_file("b.txt")]
    preview = _preview(files, "new-{original}")
    cancel = threading.Event()
    cancel.set()

    result = execute_batch_rename(preview.proposals, cancel=cancel)

    assert result.aborted
    assert result.summary.skipped == 2
    assert {item.error for item in result.results} == {"Operation cancelled"}
    assert (tmp_path / "a.txt").exists()


def test_execution_is_recorded_in_history(make_file, tmp_path) -> None:
    repository = HistoryRepository(tmp_path / "state" / "history.json")
    file = make_file("a.txt")
    preview = _preview([file], "new-{original}")

    result = execute_batch_rename(preview.proposals, history=repository)

    entries = get_history(repository)
    assert result.history_entry_id == entries[0].id
    assert entries[0].operation_type == "rename"
    assert entries[0].files[0].original_path == file.path
    assert entries[0].files[0].new_path == os.path.join(os.path.dirname(file.path), "new-a.txt")
    assert entries[0].summary.succeeded == 1
