"""Operating-system level filename sanitization."""

from __future__ import annotations

import re
import sys
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field

from tidyname.ingestion.models import split_filename

TargetPlatform = Literal["all", "windows", "macos", "linux", "current"]
SanitizeChangeType = Literal["char_replacement", "reserved_name", "truncation", "trailing_fix"]

MAX_FILENAME_LENGTH = 255
ELLIPSIS = "..."

INVALID_CHARS_UNIVERSAL = re.compile(r'[/\\:*?"<>|]')
INVALID_CHARS_WINDOWS = re.compile(r'[/\\:*?"<>|\x00-\x1f]')
INVALID_CHARS_POSIX = re.compile(r"[/\x00]")

WINDOWS_RESERVED_NAMES = frozenset(
    {"con", "prn", "aux", "nul"} | {f"com{n}" for n in range(1, 10)} | {f"lpt{n}" for n in range(1, 10)}
)

_TRAILING = re.compile(r"[. ]+$")


class SanitizeOptions(BaseModel):
    """Options controlling :func:`sanitize_filename`.

    Attributes:
        target_platform: Platform whose rules the output must satisfy.
        replacement: Replacement for invalid characters.
        max_length: Maximum length of the full name.
        truncation_style: Whether truncation inserts an ellipsis.
    """

    model_config = ConfigDict(extra="forbid")

    target_platform: TargetPlatform = "all"
    replacement: str = "_"
    max_length: int = Field(default=MAX_FILENAME_LENGTH, ge=1)
    truncation_style: Literal["ellipsis", "none"] = "ellipsis"


class SanitizeChange(BaseModel):
    type: SanitizeChangeType
    original: str
    replacement: str
    message: str


class SanitizeResult(BaseModel):
    sanitized: str
    original: str
    changes: List[SanitizeChange] = Field(default_factory=list)
    was_modified: bool = False


def _is_windows(platform: TargetPlatform) -> bool:
    return platform == "current" and sys.platform == "win32"


def _invalid_pattern(platform: TargetPlatform) -> re.Pattern[str]:
    if platform == "windows" or _is_windows(platform):
        return INVALID_CHARS_WINDOWS
    if platform in {"macos", "linux"}:
        return INVALID_CHARS_POSIX
    return INVALID_CHARS_UNIVERSAL


def _windows_rules_apply(platform: TargetPlatform) -> bool:
    return platform in {"all", "windows"} or _is_windows(platform)


def _truncate(name: str, options: SanitizeOptions, changes: list[SanitizeChange]) -> str:
    stem, ext = split_filename(name)
    max_stem = options.max_length - len(ext)
    if max_stem < 1:
        result = name[: options.max_length]
        changes.append(
            SanitizeChange(
                type="truncation",
                original=name,
                replacement=result,
                message=(
                    f"Truncated from {len(name)} to {options.max_length} characters "
                    "(extension too long)"
                ),
            )
        )
        return result

    if options.truncation_style == "ellipsis" and max_stem > len(ELLIPSIS):
        stem = stem[: max_stem - len(ELLIPSIS)] + ELLIPSIS
    else:
        stem = stem[:max_stem]
    result = stem + ext
    changes.append(
        SanitizeChange(
            type="truncation",
            original=name,
            replacement=result,
            message=f"Truncated from {len(name)} to {len(result)} characters",
        )
    )
    return result


def sanitize_filename(filename: str, options: SanitizeOptions | None = None) -> SanitizeResult:
    """Make ``filename`` valid on the target platform.

    Steps run in a fixed order. Invalid characters are replaced and the runs this creates are
    collapsed. Windows reserved device names get a ``_file`` suffix and trailing spaces and
    periods are stripped. Over-long names are truncated while keeping the extension.

    Args:
        filename: Candidate filename including extension.
        options: Sanitization options; defaults target all platforms.

    Returns:
        SanitizeResult: Sanitized name with one change record per mutating step.

    Examples:
        >>> sanitize_filename("CON.txt").sanitized
        'CON_file.txt'
        >>> sanitize_filename("report.pdf").was_modified
        False
    """
    options = options or SanitizeOptions()
    if not filename:
        return SanitizeResult(sanitized=filename, original=filename)

    changes: list[SanitizeChange] = []
    result = filename

    pattern = _invalid_pattern(options.target_platform)
    found = list(dict.fromkeys(pattern.findall(result)))
    if found:
        changes.append(
            SanitizeChange(
                type="char_replacement",
                original="".join(found),
                replacement=options.replacement * len(found),
                message="Replaced invalid characters: " + ", ".join(f'"{char}"' for char in found),
            )
        )
        result = pattern.sub(options.replacement, result)
        if options.replacement:
            result = re.sub(
                f"(?:{re.escape(options.replacement)}){{2,}}", options.replacement, result
            )

    if _windows_rules_apply(options.target_platform):
        stem, ext = split_filename(result)
        if stem.lower() in WINDOWS_RESERVED_NAMES:
            changes.append(
                SanitizeChange(
                    type="reserved_name",
                    original=stem,
                    replacement=f"{stem}_file",
                    message=f'"{stem}" is a reserved name on Windows',
                )
            )
            result = f"{stem}_file{ext}"

        stem, ext = split_filename(result)
        trimmed_stem = _TRAILING.sub("", stem)
        stem_fixed = trimmed_stem != stem
        if stem_fixed:
            changes.append(
                SanitizeChange(
                    type="trailing_fix",
                    original=stem[len(trimmed_stem) :],
                    replacement="",
                    message="Removed trailing spaces/periods (invalid on Windows)",
                )
            )
            result = trimmed_stem + ext

        trimmed = _TRAILING.sub("", result)
        if trimmed != result:
            if not stem_fixed:
                changes.append(
                    SanitizeChange(
                        type="trailing_fix",
                        original=result[len(trimmed) :],
                        replacement="",
                        message="Removed trailing spaces/periods (invalid on Windows)",
                    )
                )
            result = trimmed

    if len(result) > options.max_length:
        result = _truncate(result, options, changes)

    return SanitizeResult(
        sanitized=result,
        original=filename,
        changes=changes,
        was_modified=result != filename,
    )


__all__ = [
    "ELLIPSIS",
    "MAX_FILENAME_LENGTH",
    "SanitizeChange",
    "SanitizeChangeType",
    "SanitizeOptions",
    "SanitizeResult",
    "TargetPlatform",
    "WINDOWS_RESERVED_NAMES",
    "sanitize_filename",
]
