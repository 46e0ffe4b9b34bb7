"""Tests for OS-level filename sanitization."""

from __future__ import annotations

from tidyname.rename import SanitizeOptions, sanitize_filename


def test_valid_name_is_untouched() -> None:
    result = sanitize_filename("report.pdf")

    assert result.sanitized == "report.pdf"
    assert not result.was_modified
    assert result.changes == []


def test_existing_replacement_runs_are_left_alone() -> None:
    result = sanitize_filename("report__final.txt")

    assert result.sanitized == "report__final.txt"
    assert not result.was_modified
    assert result.changes == []


def test_invalid_characters_are_replaced_and_collapsed() -> None:
    result = sanitize_filename('a:b*?c.txt')

    assert result.sanitized == "a_b_c.txt"
    assert result.changes[0].type == "char_replacement"
    assert result.was_modified


def test_reserved_name_gets_file_suffix() -> None:
    result = sanitize_filename("CON.txt")

    assert result.sanitized == "CON_file.txt"
    assert [change.type for change in result.changes] == ["reserved_name"]


def test_reserved_name_check_skipped_for_linux_target() -> None:
    result = sanitize_filename("CON.txt", SanitizeOptions(target_platform="linux"))

    assert result.sanitized == "CON.txt"
    assert not result.was_modified


def test_trailing_spaces_and_periods_are_removed() -> None:
    result = sanitize_filename("notes. ")

    assert result.sanitized == "notes"
    assert result.changes[-1].type == "trailing_fix"


def test_long_names_are_truncated_keeping_extension() -> None:
    result = sanitize_filename("a" * 300 + ".jpeg", SanitizeOptions(max_length=50))

    assert len(result.sanitized) == 50
    assert result.sanitized.endswith("....jpeg")
    assert result.changes[-1].type == "truncation"


def test_truncation_without_ellipsis() -> None:
    options = SanitizeOptions(max_length=10, truncation_style="none")

    result = sanitize_filename("abcdefghijklmnop.md", options)

    assert result.sanitized == "abcdefg.md"
