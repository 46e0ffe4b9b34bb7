"""Tests for rename preview generation."""

from __future__ import annotations

import os
import threading
from datetime import datetime

import pytest

from tidyname.classification.models import AnalysisResult, NamingSuggestion
from tidyname.ingestion import ImageMetadata, UnifiedMetadata
from tidyname.rename import (
    DefaultTemplateError,
    PreviewCancelledError,
    PreviewGenerationError,
    PreviewOptions,
    RenameStatus,
    generate_preview,
)
from tidyname.rules import FilenamePatternRule
from tidyname.templates import FolderStructure, Template


def _options(pattern: str, **extra) -> PreviewOptions:
    templates = extra.pop("templates", [Template(id="main", name="Main", pattern=pattern)])
    return PreviewOptions(templates=templates, default_template_id="main", **extra)


def _codes(proposal) -> list[str]:
    return [issue.code for issue in proposal.issues]


def test_missing_date_marks_missing_data(make_file) -> None:
    file = make_file("vacation.jpg")

    preview = generate_preview([file], {}, _options("{date}_{original}"))

    (proposal,) = preview.proposals
    assert proposal.status == RenameStatus.MISSING_DATA
    assert proposal.proposed_name == "vacation.jpg"
    assert "MISSING_METADATA" in _codes(proposal)
    assert proposal.template_source == "default"
    assert preview.summary.missing_data == 1
    assert preview.template_used == "{date}_{original}"


def test_exif_date_produces_ready_proposal(make_file, tmp_path) -> None:
    file = make_file("vacation.jpg")
    metadata = UnifiedMetadata(file=file, image=ImageMetadata(date_taken=datetime(2024, 3, 15, 10, 0)))

    preview = generate_preview([file], {file.path: metadata}, _options("{date}_{original}"))

    (proposal,) = preview.proposals
    assert proposal.status == RenameStatus.READY
    assert proposal.proposed_name == "2024-03-15_vacation.jpg"
    assert proposal.proposed_path == str(tmp_path / "2024-03-15_vacation.jpg")
    assert proposal.metadata["image"]["date_taken"].startswith("2024-03-15")
    assert not proposal.is_move_operation


def test_identical_targets_are_conflicts(make_file) -> None:
    files = [make_file("photo1.jpg"), make_file("photo2.jpg")]

    preview = generate_preview(files, {}, _options("fixed-name"))

    for proposal in preview.proposals:
        assert proposal.proposed_name == "fixed-name.jpg"
        assert proposal.status == RenameStatus.CONFLICT
        assert "DUPLICATE_NAME" in _codes(proposal)
    assert preview.summary.conflicts == 2
    assert preview.summary.ready == 0


def test_reserved_name_is_sanitized(make_file) -> None:
    file = make_file("README")

    preview = generate_preview([file], {}, _options("CON"))

    (proposal,) = preview.proposals
    assert proposal.proposed_name == "CON_file"
    assert proposal.status == RenameStatus.READY
    assert "SANITIZED_RESERVED_NAME" in _codes(proposal)


def test_unchanged_name_is_no_change(make_file) -> None:
    file = make_file("notes.txt")

    preview = generate_preview([file], {}, _options("{original}"))

    (proposal,) = preview.proposals
    assert proposal.status == RenameStatus.NO_CHANGE
    assert preview.summary.no_change == 1


def test_existing_target_is_filesystem_conflict(make_file, tmp_path) -> None:
    file = make_file("a.txt")
    (tmp_path / "b.txt").write_text("existing")

    preview = generate_preview([file], {}, _options("b"))

    (proposal,) = preview.proposals
    assert proposal.status == RenameStatus.CONFLICT
    assert "FILE_EXISTS" in _codes(proposal)

    unchecked = generate_preview([file], {}, _options("b", check_filesystem=False))
    assert unchecked.proposals[0].status == RenameStatus.READY


def test_missing_default_template_raises(make_file) -> None:
    options = PreviewOptions(
        templates=[Template(id="other", name="Other", pattern="{original}")],
        default_template_id="main",
    )

    with pytest.raises(DefaultTemplateError) as excinfo:
        generate_preview([make_file("a.txt")], {}, options)

    assert excinfo.value.code == "default_template_not_found"


def test_cancel_token_stops_generation(make_file) -> None:
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(PreviewCancelledError):
        generate_preview([make_file("a.txt")], {}, _options("{original}"), cancel=cancel)


def test_progress_callback_reports_each_file(make_file) -> None:
    files = [make_file("a.txt"), make_file("b.txt")]
    calls: list[tuple[int, int]] = []

    generate_preview(files, {}, _options("x-{original}"), on_progress=lambda *args: calls.append(args))

    assert calls == [(1, 2), (2, 2)]


def test_unexpected_errors_are_wrapped(make_file) -> None:
    def broken_progress(current: int, total: int) -> None:
        raise RuntimeError("progress display closed")

    with pytest.raises(PreviewGenerationError) as excinfo:
        generate_preview([make_file("a.txt")], {}, _options("x-{original}"), on_progress=broken_progress)

    assert excinfo.value.code == "generation_error"
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_rule_selects_template_and_moves_into_folders(make_file, tmp_path) -> None:
    file = make_file("photo.jpg")
    metadata = UnifiedMetadata(file=file, image=ImageMetadata(date_taken=datetime(2024, 3, 15, 10, 0)))
    options = _options(
        "",
        templates=[
            Template(id="main", name="Main", pattern="{original}"),
            Template(id="photos", name="Photos", pattern="{date}-{original}"),
        ],
        filename_rules=[
            FilenamePatternRule(
                id="jpgs",
                name="JPEGs",
                pattern="*.jpg",
                template_id="photos",
                folder_structure_id="by-month",
            )
        ],
        folder_structures=[FolderStructure(id="by-month", name="By month", pattern="{year}/{month}")],
        base_directory=str(tmp_path),
    )

    preview = generate_preview([file], {file.path: metadata}, options)

    (proposal,) = preview.proposals
    assert proposal.status == RenameStatus.READY
    assert proposal.template_source == "rule"
    assert proposal.applied_rule is not None and proposal.applied_rule.rule_id == "jpgs"
    assert proposal.proposed_path == os.path.join(str(tmp_path), "2024", "03", "2024-03-15-photo.jpg")
    assert proposal.is_move_operation
    assert preview.summary.move_operations == 1
    assert preview.summary.rename_only == 0


def test_folder_resolution_failure_is_missing_data(make_file) -> None:
    file = make_file("photo.jpg")
    options = _options(
        "",
        templates=[Template(id="main", name="Main", pattern="new-{original}")],
        filename_rules=[
            FilenamePatternRule(
                id="jpgs", name="JPEGs", pattern="*.jpg", template_id="main", folder_structure_id="by-year"
            )
        ],
        folder_structures=[FolderStructure(id="by-year", name="By year", pattern="{year}")],
    )

    (proposal,) = generate_preview([file], {}, options).proposals

    assert proposal.status == RenameStatus.MISSING_DATA
    assert "FOLDER_RESOLUTION_FAILED" in _codes(proposal)
    assert proposal.folder_structure_id is None
    assert not proposal.is_move_operation


def test_rule_with_unknown_template_falls_back(make_file) -> None:
    file = make_file("photo.jpg")
    options = _options(
        "new-{original}",
        filename_rules=[FilenamePatternRule(id="r", name="r", pattern="*.jpg", template_id="gone")],
    )

    (proposal,) = generate_preview([file], {}, options).proposals

    assert proposal.template_source == "fallback"
    assert "RULE_TEMPLATE_MISSING" in _codes(proposal)
    assert proposal.proposed_name == "new-photo.jpg"


def _analysis(file, name: str, confidence: float) -> AnalysisResult:
    return AnalysisResult(
        file_path=file.path,
        suggestion=NamingSuggestion(suggested_name=name, confidence=confidence),
    )


def test_confident_llm_suggestion_is_used(make_file) -> None:
    file = make_file("IMG_0001.jpg")
    options = _options(
        "{original}",
        enable_llm_analysis=True,
        llm_results={file.path: _analysis(file, "beach-sunset", 0.9)},
    )

    preview = generate_preview([file], {}, options)

    (proposal,) = preview.proposals
    assert proposal.proposed_name == "beach-sunset.jpg"
    assert proposal.template_source == "llm"
    assert proposal.use_llm_suggestion
    assert "LLM_SUGGESTION_USED" in _codes(proposal)
    assert preview.summary.llm_suggested == 1


def test_low_confidence_llm_suggestion_is_kept_but_unused(make_file) -> None:
    file = make_file("IMG_0001.jpg")
    options = _options(
        "new-{original}",
        enable_llm_analysis=True,
        llm_results={file.path: _analysis(file, "beach-sunset", 0.5)},
    )

    (proposal,) = generate_preview([file], {}, options).proposals

    assert proposal.proposed_name == "new-IMG_0001.jpg"
    assert proposal.llm_suggestion is not None
    assert not proposal.use_llm_suggestion


def test_missing_llm_result_is_reported(make_file) -> None:
    file = make_file("IMG_0001.jpg")
    options = _options("new-{original}", enable_llm_analysis=True, llm_results={})

    (proposal,) = generate_preview([file], {}, options).proposals

    assert "LLM_ANALYSIS_FAILED" in _codes(proposal)
    assert proposal.status == RenameStatus.READY
