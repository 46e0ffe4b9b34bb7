"""Tests for template parsing, placeholder resolution and folder patterns."""

from __future__ import annotations

from datetime import datetime

import pytest

from tidyname.ingestion import GpsCoordinates, ImageMetadata, PdfMetadata, UnifiedMetadata
from tidyname.templates import (
    FolderResolutionError,
    TemplateRenderError,
    TemplateSyntaxError,
    clean_filename,
    format_bytes,
    is_valid_filename,
    parse_template,
    render_filename,
    resolve_folder_path,
    validate_folder_pattern,
)
from tidyname.templates.placeholders import strip_date_patterns


def test_parse_template_tokens_and_unique_placeholders() -> None:
    parsed = parse_template("{date}-{original}-{date}")

    assert parsed.placeholders == ("date", "original")
    assert [token.type for token in parsed.tokens] == [
        "placeholder",
        "literal",
        "placeholder",
        "literal",
        "placeholder",
    ]


def test_parse_template_escaped_braces_are_literal() -> None:
    parsed = parse_template("{{raw}}-{name}")

    assert parsed.placeholders == ("name",)
    assert parsed.tokens[0].value == "{raw}-"  # type: ignore[union-attr]


@pytest.mark.parametrize(
    ("pattern", "code"),
    [
        ("{date", "unclosed_brace"),
        ("{}", "empty_placeholder"),
        ("name}", "unexpected_close_brace"),
    ],
)
def test_parse_template_errors(pattern: str, code: str) -> None:
    with pytest.raises(TemplateSyntaxError) as excinfo:
        parse_template(pattern)

    assert excinfo.value.code == code


def test_clean_filename_collapses_and_trims() -> None:
    assert clean_filename("2024-03-15--trip: day 1") == "2024-03-15-trip_day 1"
    assert clean_filename("_vacation") == "vacation"


def test_is_valid_filename_rules() -> None:
    assert is_valid_filename("photo.jpg")
    assert not is_valid_filename("")
    assert not is_valid_filename("CON.txt")
    assert not is_valid_filename(".hidden")
    assert not is_valid_filename("trailing.")
    assert not is_valid_filename("a" * 201)


def test_format_bytes() -> None:
    assert format_bytes(0) == "0B"
    assert format_bytes(512) == "512B"
    assert format_bytes(1536) == "1.5KB"
    assert format_bytes(3 * 1024 * 1024) == "3MB"


def test_strip_date_patterns_removes_leading_and_trailing_dates() -> None:
    assert strip_date_patterns("2024-03-15_beach") == "beach"
    assert strip_date_patterns("beach_20240315") == "beach"
    assert strip_date_patterns("2024-03-15") == "2024-03-15"


def test_render_filename_uses_exif_date(make_file) -> None:
    file = make_file("IMG_0001.jpg")
    metadata = UnifiedMetadata(
        file=file,
        image=ImageMetadata(date_taken=datetime(2024, 3, 15, 10, 30)),
        extraction_status="success",
    )

    rendered = render_filename(file, "{date}-{original}", metadata)

    assert rendered.proposed_name == "2024-03-15-IMG_0001.jpg"
    assert rendered.empty_placeholders == []


def test_render_filename_ignores_mtime_unless_enabled(make_file) -> None:
    file = make_file("notes.txt")

    missing = render_filename(file, "{year}_{original}")
    filled = render_filename(file, "{year}_{original}", date_from_filesystem=True)

    assert missing.proposed_name == "notes.txt"
    assert missing.empty_placeholders == ["year"]
    assert filled.proposed_name == f"{file.modified_at.astimezone().year}_notes.txt"


def test_render_filename_reports_fallbacks(make_file) -> None:
    file = make_file("scan.pdf")

    rendered = render_filename(file, "{author}-{original}", fallbacks={"author": "unknown"})

    assert rendered.proposed_name == "unknown-scan.pdf"
    assert rendered.fallback_placeholders == ["author"]


def test_render_filename_metadata_placeholders(make_file) -> None:
    file = make_file("doc.pdf")
    metadata = UnifiedMetadata(
        file=file,
        pdf=PdfMetadata(title="Quarterly Report", author="Ada"),
        extraction_status="success",
    )

    rendered = render_filename(file, "{author} - {title}", metadata)

    assert rendered.proposed_name == "Ada-Quarterly Report.pdf"


def test_render_filename_camera_and_location(make_file) -> None:
    file = make_file("photo.jpg")
    metadata = UnifiedMetadata(
        file=file,
        image=ImageMetadata(
            camera_make="Canon",
            camera_model="Canon EOS R5",
            gps=GpsCoordinates(latitude=12.3456, longitude=-98.7654),
        ),
    )

    rendered = render_filename(file, "{camera}_{location}", metadata)

    assert rendered.proposed_name == "Canon EOS R5_12.3456N_98.7654W.jpg"


def test_render_filename_rejects_empty_result(make_file) -> None:
    file = make_file("photo.jpg")

    with pytest.raises(TemplateRenderError):
        render_filename(file, "{camera}")


def test_validate_folder_pattern_rejects_parent_segments() -> None:
    validation = validate_folder_pattern("photos/../{year}")

    assert not validation.valid
    assert validation.normalized_pattern == "photos/../{year}"


def test_validate_folder_pattern_normalizes_separators() -> None:
    validation = validate_folder_pattern("\\photos//{year}/")

    assert validation.valid
    assert validation.normalized_pattern == "photos/{year}"


def test_resolve_folder_path_from_metadata(make_file) -> None:
    file = make_file("photo.jpg")
    metadata = UnifiedMetadata(
        file=file, image=ImageMetadata(date_taken=datetime(2023, 7, 4, 12, 0))
    )

    resolution = resolve_folder_path("{year}/{month}", metadata, file)

    assert resolution.resolved_path == "2023/07"
    assert not resolution.used_fallbacks


def test_resolve_folder_path_missing_metadata(make_file) -> None:
    file = make_file("photo.jpg")

    with pytest.raises(FolderResolutionError) as excinfo:
        resolve_folder_path("{camera}", UnifiedMetadata.empty(file), file)

    assert excinfo.value.kind == "missing_metadata"
    assert excinfo.value.missing_fields == ["camera"]


def test_resolve_folder_path_uses_fallback(make_file) -> None:
    file = make_file("photo.jpg")

    resolution = resolve_folder_path(
        "cameras/{camera}", UnifiedMetadata.empty(file), file, fallbacks={"camera": "Unknown"}
    )

    assert resolution.resolved_path == "cameras/Unknown"
    assert resolution.used_fallbacks
