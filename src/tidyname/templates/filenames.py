"""Filename cleanup and validity checks shared by templates and previews."""

from __future__ import annotations

import re

MAX_TEMPLATE_FILENAME_LENGTH = 200

_INVALID_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_SEPARATOR_RUN = re.compile(r"[-_\s]{2,}")
_RESERVED_NAME = re.compile(r"^(con|prn|aux|nul|com[0-9]|lpt[0-9])$", re.IGNORECASE)
_SEPARATORS = "-_ \t\r\n"


def _collapse_run(match: re.Match[str]) -> str:
    run = match.group(0)
    if "_" in run:
        return "_"
    if "-" in run:
        return "-"
    return " "


def clean_filename(value: str) -> str:
    """Return ``value`` made safe for use inside a generated filename.

    Invalid characters become ``_``, runs of separators collapse to one, separators are
    trimmed from both ends and the result is capped at 200 characters.

    Args:
        value: Raw text produced by a template or placeholder.

    Returns:
        str: Cleaned text, possibly empty.

    Examples:
        >>> clean_filename("2024-03-15--trip: day 1")
        '2024-03-15-trip_day 1'
        >>> clean_filename("-vacation")
        'vacation'
    """
    if not value:
        return ""
    result = _INVALID_CHARS.sub("_", value)
    result = _SEPARATOR_RUN.sub(_collapse_run, result)
    result = result.strip(_SEPARATORS)
    if len(result) > MAX_TEMPLATE_FILENAME_LENGTH:
        result = result[:MAX_TEMPLATE_FILENAME_LENGTH]
        cut = max(result.rfind("_"), result.rfind("-"), result.rfind(" "))
        if cut > MAX_TEMPLATE_FILENAME_LENGTH * 0.8:
            result = result[:cut]
        result = result.rstrip(_SEPARATORS)
    return result


def is_valid_filename(name: str) -> bool:
    """Return True if ``name`` is a valid filename on every supported platform.

    Args:
        name: Filename including extension.

    Returns:
        bool: Whether the name is non-empty, short enough, free of invalid and control
        characters, not a reserved device name and not starting or ending with a dot or space.
    """
    if not name or len(name) > MAX_TEMPLATE_FILENAME_LENGTH:
        return False
    if _INVALID_CHARS.search(name):
        return False
    stem = name[: name.rfind(".")] if "." in name else name
    if _RESERVED_NAME.match(stem):
        return False
    if name[0] in ". " or name[-1] in ". ":
        return False
    return True


__all__ = ["MAX_TEMPLATE_FILENAME_LENGTH", "clean_filename", "is_valid_filename"]
