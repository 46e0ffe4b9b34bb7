"""Folder structure pattern validation and resolution."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Literal, Mapping, Optional

from tidyname.ingestion.models import FileInfo, UnifiedMetadata

from .models import ParsedTemplate
from .parser import TemplateSyntaxError, parse_template
from .placeholders import (
    DATE_PLACEHOLDERS,
    FILE_PLACEHOLDERS,
    KNOWN_PLACEHOLDERS,
    METADATA_PLACEHOLDERS,
    PlaceholderContext,
    resolve_placeholder,
)
from .preview import build_context, join_tokens

_INVALID_PATH_CHARS = re.compile(r'[<>:"|?*\x00-\x1f]')
_PLACEHOLDER = re.compile(r"\{[^{}]*\}")
_RESERVED_SEGMENTS = frozenset(
    {"con", "prn", "aux", "nul"} | {f"com{n}" for n in range(1, 10)} | {f"lpt{n}" for n in range(1, 10)}
)

FolderErrorKind = Literal["missing_metadata", "invalid_pattern"]


class FolderResolutionError(ValueError):
    """Raised when a folder pattern cannot be turned into a directory path.

    Attributes:
        kind: ``missing_metadata`` or ``invalid_pattern``.
        missing_fields: Placeholders that could not be resolved.
    """

    def __init__(
        self, kind: FolderErrorKind, message: str, missing_fields: Optional[list[str]] = None
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.missing_fields = missing_fields or []


@dataclass(frozen=True)
class FolderPatternValidation:
    """Validation outcome for a folder pattern."""

    normalized_pattern: str
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    placeholders: list[str] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class FolderResolution:
    """A resolved folder path relative to the base directory."""

    resolved_path: str
    resolved_placeholders: list[str]
    used_fallbacks: bool


def normalize_folder_pattern(pattern: str) -> str:
    """Normalise separators to ``/`` and drop duplicate, leading and trailing slashes."""
    normalized = re.sub(r"/+", "/", pattern.replace("\\", "/"))
    return normalized.strip("/")


def validate_folder_pattern(pattern: str) -> FolderPatternValidation:
    """Check a folder pattern for syntax problems and risky segments.

    Args:
        pattern: Folder pattern such as ``{year}/{month}``.

    Returns:
        FolderPatternValidation: Errors, warnings and the normalised pattern.
    """
    if not pattern or not pattern.strip():
        return FolderPatternValidation(normalized_pattern="", errors=["Pattern cannot be empty"])

    normalized = normalize_folder_pattern(pattern)
    errors: list[str] = []
    warnings: list[str] = []
    placeholders: list[str] = []

    literal_text = _PLACEHOLDER.sub("", normalized)
    invalid = sorted(set(_INVALID_PATH_CHARS.findall(literal_text)))
    if invalid:
        errors.append(f"Pattern contains invalid path characters: {', '.join(invalid)}")

    try:
        placeholders = list(parse_template(normalized).placeholders)
    except TemplateSyntaxError as exc:
        errors.append(str(exc))

    for name in placeholders:
        if name.lower() not in KNOWN_PLACEHOLDERS:
            warnings.append(f"Unknown placeholder '{{{name}}}' - may not resolve at runtime")

    for segment in normalized.split("/"):
        bare = _PLACEHOLDER.sub("", segment)
        if segment in {".", ".."}:
            errors.append(f"Path segment '{segment}' is not allowed")
        if bare.lower() in _RESERVED_SEGMENTS:
            warnings.append(f"Path segment '{bare}' is a Windows reserved name")
        if bare.endswith(".") and segment not in {".", ".."}:
            warnings.append(f"Path segment '{segment}' ends with a dot (may cause issues on Windows)")
        if bare.endswith(" "):
            warnings.append(f"Path segment '{segment}' ends with a space (may cause issues on Windows)")

    return FolderPatternValidation(
        normalized_pattern=normalized,
        errors=errors,
        warnings=warnings,
        placeholders=placeholders,
    )


def _sanitize_segment(value: str) -> str:
    return _INVALID_PATH_CHARS.sub("", value).strip()


def _resolve_one(
    name: str, context: PlaceholderContext, fallbacks: Mapping[str, str]
) -> tuple[Optional[str], bool]:
    key = name.lower()
    if key in DATE_PLACEHOLDERS or key in FILE_PLACEHOLDERS:
        resolution = resolve_placeholder(name, context)
        if resolution.value.strip():
            return resolution.value.strip(), False
    elif key in METADATA_PLACEHOLDERS:
        resolution = resolve_placeholder(name, context)
        if resolution.value.strip() and resolution.source != "literal":
            return resolution.value.strip(), False

    fallback = fallbacks.get(name, fallbacks.get(key, ""))
    if fallback.strip():
        return fallback.strip(), True
    return None, False


def resolve_folder_path(
    pattern: str,
    metadata: Optional[UnifiedMetadata],
    file: FileInfo,
    *,
    fallbacks: Mapping[str, str] | None = None,
    date_from_filesystem: bool = False,
) -> FolderResolution:
    """Resolve a folder pattern for one file.

    Args:
        pattern: Folder pattern to resolve.
        metadata: Metadata for the file, if any.
        file: File being organised.
        fallbacks: Values used when a placeholder has no data.
        date_from_filesystem: Allow the modification time for date placeholders.

    Returns:
        FolderResolution: Relative directory path with normalised separators.

    Raises:
        FolderResolutionError: If the pattern is invalid or a placeholder has no value.
    """
    validation = validate_folder_pattern(pattern)
    if not validation.valid:
        raise FolderResolutionError("invalid_pattern", "; ".join(validation.errors))

    template: ParsedTemplate = parse_template(validation.normalized_pattern)
    context = build_context(file, metadata, date_from_filesystem=date_from_filesystem)
    fallback_values = fallbacks or {}

    values: dict[str, str] = {}
    missing: list[str] = []
    used_fallbacks = False
    for name in template.placeholders:
        value, from_fallback = _resolve_one(name, context, fallback_values)
        if value is None:
            missing.append(name)
            continue
        values[name] = _sanitize_segment(value)
        used_fallbacks = used_fallbacks or from_fallback

    if missing:
        raise FolderResolutionError(
            "missing_metadata",
            f"Missing required metadata: {', '.join(missing)}",
            missing_fields=missing,
        )

    resolved = normalize_folder_pattern(join_tokens(template, values))
    if any(segment in {".", ".."} for segment in resolved.split("/")):
        raise FolderResolutionError("invalid_pattern", f"Resolved path escapes base directory: {resolved}")

    return FolderResolution(
        resolved_path=resolved,
        resolved_placeholders=list(values),
        used_fallbacks=used_fallbacks,
    )


__all__ = [
    "FolderErrorKind",
    "FolderPatternValidation",
    "FolderResolution",
    "FolderResolutionError",
    "normalize_folder_pattern",
    "resolve_folder_path",
    "validate_folder_pattern",
]
