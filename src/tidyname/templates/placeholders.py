"""Placeholder resolution for naming templates."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Mapping, Optional

from tidyname.ingestion.models import FileInfo, ImageMetadata, OfficeMetadata, PdfMetadata

from .filenames import clean_filename
from .models import PlaceholderResolution, PlaceholderSource
from .parser import extract_placeholders

DATE_PLACEHOLDERS = ("year", "month", "day", "date")
METADATA_PLACEHOLDERS = ("title", "author", "camera", "location")
FILE_PLACEHOLDERS = ("name", "ext", "original", "size", "ai")
KNOWN_PLACEHOLDERS = DATE_PLACEHOLDERS + METADATA_PLACEHOLDERS + FILE_PLACEHOLDERS

_DATE_START_PATTERNS = (
    re.compile(r"^(\d{4}[-_]\d{2}[-_]\d{2})[-_\s]+"),
    re.compile(r"^(\d{8})[-_\s]+"),
    re.compile(r"^(\d{2}[-_]\d{2}[-_]\d{4})[-_\s]+"),
    re.compile(r"^(\d{4}[-_]\d{2})[-_\s]+(?=\D)"),
    re.compile(r"^(\d{4})[-_\s]+(?=\D)"),
)
_DATE_END_PATTERNS = (
    re.compile(r"[-_\s]+(\d{4}[-_]\d{2}[-_]\d{2})$"),
    re.compile(r"[-_\s]+(\d{8})$"),
    re.compile(r"[-_\s]+(\d{2}[-_]\d{2}[-_]\d{4})$"),
    re.compile(r"(?<!\d[-_])[-_\s]+(\d{4}[-_]\d{2})$"),
    re.compile(r"(?<!\d[-_])[-_\s]+(\d{4})$"),
)
_CORPORATE_SUFFIX = re.compile(r"\s*\b(corporation|corp\.?|inc\.?|ltd\.?)(?=\s|$)\s*", re.IGNORECASE)
_SIZE_UNITS = (("GB", 1024**3), ("MB", 1024**2), ("KB", 1024))


@dataclass(frozen=True)
class PlaceholderContext:
    """Everything a placeholder may draw its value from.

    Attributes:
        file: Descriptor of the file being renamed.
        image: Image metadata, if any.
        pdf: PDF metadata, if any.
        office: Office metadata, if any.
        ai_name: AI-suggested name, if any.
        template_pattern: Pattern being rendered; controls date stripping for ``{name}``.
        date_from_filesystem: Allow the file modification time as the last date source.
    """

    file: FileInfo
    image: Optional[ImageMetadata] = None
    pdf: Optional[PdfMetadata] = None
    office: Optional[OfficeMetadata] = None
    ai_name: Optional[str] = None
    template_pattern: str = ""
    date_from_filesystem: bool = False


def format_bytes(size: int) -> str:
    """Return a compact human-readable size such as ``1.5KB``.

    Examples:
        >>> format_bytes(1536)
        '1.5KB'
        >>> format_bytes(2048)
        '2KB'
    """
    if size <= 0:
        return "0B"
    for unit, threshold in _SIZE_UNITS:
        if size >= threshold:
            display = f"{size / threshold:.1f}"
            if display.endswith(".0"):
                display = display[:-2]
            return f"{display}{unit}"
    return f"{size}B"


def strip_date_patterns(name: str) -> str:
    """Remove a leading and a trailing date fragment from ``name`` when something remains."""
    for pattern in _DATE_START_PATTERNS:
        match = pattern.match(name)
        if match and len(name) > match.end():
            name = name[match.end() :]
            break
    for pattern in _DATE_END_PATTERNS:
        match = pattern.search(name)
        if match and match.start() > 0:
            name = name[: match.start()]
            break
    return name


def template_has_date_placeholder(pattern: str) -> bool:
    return any(name.lower() in DATE_PLACEHOLDERS for name in extract_placeholders(pattern))


def best_date(context: PlaceholderContext) -> tuple[Optional[datetime], PlaceholderSource]:
    """Return the most authoritative date known for the file and its source."""
    if context.image is not None and context.image.date_taken is not None:
        return context.image.date_taken, "exif"
    if context.pdf is not None and context.pdf.creation_date is not None:
        return context.pdf.creation_date, "document"
    if context.office is not None and context.office.created is not None:
        return context.office.created, "document"
    if context.date_from_filesystem:
        return context.file.modified_at, "filesystem"
    return None, "literal"


def _format_date(placeholder: str, value: datetime) -> str:
    if value.tzinfo is not None:
        value = value.astimezone()
    formats = {"year": "%Y", "month": "%m", "day": "%d", "date": "%Y-%m-%d"}
    return value.strftime(formats[placeholder])


def _text(value: Optional[str]) -> str:
    return value.strip() if value else ""


def _camera_name(image: Optional[ImageMetadata]) -> str:
    if image is None:
        return ""
    make = _text(image.camera_make)
    model = _text(image.camera_model)
    if make and model:
        name = model if make.lower() in model.lower() else f"{make} {model}"
    else:
        name = make or model
    name = re.sub(r"\s+", " ", name)
    return _CORPORATE_SUFFIX.sub(" ", name).strip()


def _coordinate(value: float, positive: str, negative: str) -> str:
    return f"{abs(value):.4f}{positive if value >= 0 else negative}"


def _resolve_metadata(name: str, context: PlaceholderContext) -> tuple[str, PlaceholderSource]:
    if name == "title":
        for title in (context.pdf and context.pdf.title, context.office and context.office.title):
            if _text(title):
                return _text(title), "document"
        return context.file.name, "filesystem"
    if name == "author":
        for author in (context.pdf and context.pdf.author, context.office and context.office.creator):
            if _text(author):
                return _text(author), "document"
        return "", "literal"
    if name == "camera":
        camera = _camera_name(context.image)
        return (camera, "exif") if camera else ("", "literal")
    gps = context.image.gps if context.image is not None else None
    if gps is None:
        return "", "literal"
    location = f"{_coordinate(gps.latitude, 'N', 'S')}_{_coordinate(gps.longitude, 'E', 'W')}"
    return location, "exif"


def _resolve_file(name: str, context: PlaceholderContext) -> tuple[str, PlaceholderSource]:
    file = context.file
    if name == "name":
        strip = template_has_date_placeholder(context.template_pattern)
        if context.ai_name:
            return (strip_date_patterns(context.ai_name) if strip else context.ai_name), "ai"
        if not file.name:
            return "", "literal"
        return (strip_date_patterns(file.name) if strip else file.name), "filesystem"
    if name == "ext":
        return (file.extension.lstrip("."), "filesystem") if file.extension else ("", "literal")
    if name == "original":
        return (file.name, "filesystem") if file.name else ("", "literal")
    if name == "size":
        return format_bytes(file.size), "filesystem"
    return (context.ai_name, "ai") if context.ai_name else ("", "literal")


def resolve_placeholder(
    name: str,
    context: PlaceholderContext,
    *,
    fallbacks: Mapping[str, str] | None = None,
    sanitize: bool = True,
) -> PlaceholderResolution:
    """Resolve a single placeholder.

    Args:
        name: Placeholder name without braces.
        context: Values available for the file.
        fallbacks: Values used when a placeholder resolves to nothing.
        sanitize: Clean text values so they are safe inside filenames.

    Returns:
        PlaceholderResolution: Resolved value (empty when nothing was found) and its source.
    """
    key = name.lower()
    value = ""
    source: PlaceholderSource = "literal"

    if key in DATE_PLACEHOLDERS:
        found, source = best_date(context)
        if found is not None:
            value = _format_date(key, found)
    elif key in METADATA_PLACEHOLDERS:
        value, source = _resolve_metadata(key, context)
    elif key in FILE_PLACEHOLDERS:
        value, source = _resolve_file(key, context)

    if sanitize and value and key in METADATA_PLACEHOLDERS + ("name", "original", "ai"):
        value = clean_filename(value)

    if not value:
        fallback = (fallbacks or {}).get(name, (fallbacks or {}).get(key, ""))
        if fallback:
            return PlaceholderResolution(name, fallback, "fallback", used_fallback=True)
        return PlaceholderResolution(name, "", "literal")

    return PlaceholderResolution(name, value, source)


__all__ = [
    "DATE_PLACEHOLDERS",
    "FILE_PLACEHOLDERS",
    "KNOWN_PLACEHOLDERS",
    "METADATA_PLACEHOLDERS",
    "PlaceholderContext",
    "best_date",
    "format_bytes",
    "resolve_placeholder",
    "strip_date_patterns",
    "template_has_date_placeholder",
]
