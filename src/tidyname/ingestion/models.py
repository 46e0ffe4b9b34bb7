"""Data models describing scanned files and their extracted metadata."""

from __future__ import annotations

import mimetypes
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

FileCategory = Literal["image", "document", "video", "audio", "archive", "code", "data", "other"]
ExtractionStatus = Literal["success", "partial", "failed", "unsupported"]

EXTENSION_CATEGORIES: dict[str, FileCategory] = {
    # images
    "jpg": "image",
    "jpeg": "image",
    "png": "image",
    "gif": "image",
    "webp": "image",
    "heic": "image",
    "heif": "image",
    "bmp": "image",
    "tiff": "image",
    "tif": "image",
    "svg": "image",
    "ico": "image",
    "raw": "image",
    "cr2": "image",
    "nef": "image",
    "arw": "image",
    "dng": "image",
    # documents
    "pdf": "document",
    "doc": "document",
    "docx": "document",
    "txt": "document",
    "md": "document",
    "rtf": "document",
    "odt": "document",
    "xls": "document",
    "xlsx": "document",
    "csv": "document",
    "ods": "document",
    "ppt": "document",
    "pptx": "document",
    "odp": "document",
    # video
    "mp4": "video",
    "avi": "video",
    "mkv": "video",
    "mov": "video",
    "wmv": "video",
    "flv": "video",
    "webm": "video",
    "m4v": "video",
    "mpeg": "video",
    "mpg": "video",
    # audio
    "mp3": "audio",
    "wav": "audio",
    "flac": "audio",
    "aac": "audio",
    "ogg": "audio",
    "wma": "audio",
    "m4a": "audio",
    "aiff": "audio",
    # archives
    "zip": "archive",
    "rar": "archive",
    "7z": "archive",
    "tar": "archive",
    "gz": "archive",
    "bz2": "archive",
    "xz": "archive",
    # code
    "py": "code",
    "js": "code",
    "ts": "code",
    "rs": "code",
    "go": "code",
    "java": "code",
    "c": "code",
    "cpp": "code",
    "h": "code",
    "html": "code",
    "css": "code",
    "sh": "code",
    # data
    "json": "data",
    "xml": "data",
    "yaml": "data",
    "yml": "data",
    "toml": "data",
    "sqlite": "data",
    "db": "data",
}

METADATA_EXTENSIONS = frozenset(
    {"jpg", "jpeg", "tiff", "tif", "heic", "heif", "png", "webp", "pdf", "docx", "xlsx", "pptx"}
)


def split_filename(filename: str) -> tuple[str, str]:
    """Split a filename into its stem and extension.

    Dotfiles without a second dot (``.bashrc``) have no extension.

    Args:
        filename: Bare file name without directories.

    Returns:
        tuple[str, str]: Stem and extension, the extension keeping its leading dot.
    """
    if not filename:
        return "", ""
    if filename.startswith(".") and "." not in filename[1:]:
        return filename, ""
    index = filename.rfind(".")
    if index <= 0:
        return filename, ""
    return filename[:index], filename[index:]


def category_for_extension(extension: str) -> FileCategory:
    """Return the file category for an extension given without its dot."""
    return EXTENSION_CATEGORIES.get(extension.lower(), "other")


class FileInfo(BaseModel):
    """Immutable descriptor of a scanned file.

    Attributes:
        path: Absolute path to the file.
        name: File name without the extension.
        extension: Extension without the leading dot, empty when absent.
        full_name: File name including the extension.
        size: Size in bytes.
        created_at: Creation timestamp (birth time where the platform exposes it).
        modified_at: Last modification timestamp.
        relative_path: Path relative to the scanned root, if known.
        mime_type: Guessed MIME type.
        category: Broad file category derived from the extension.
        metadata_supported: Whether rich metadata extraction is supported.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    name: str
    extension: str = ""
    full_name: str
    size: int = 0
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    modified_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    relative_path: Optional[str] = None
    mime_type: Optional[str] = None
    category: FileCategory = "other"
    metadata_supported: bool = False

    @classmethod
    def from_path(cls, path: Path | str, root: Path | None = None) -> "FileInfo":
        """Build a descriptor from a file on disk.

        Args:
            path: File to describe.
            root: Optional scan root used to compute ``relative_path``.

        Returns:
            FileInfo: Descriptor populated from ``stat``.

        Raises:
            OSError: If the file cannot be inspected.
        """
        resolved = Path(path).expanduser().resolve()
        stat = resolved.stat()
        stem, dotted = split_filename(resolved.name)
        extension = dotted[1:]
        created = getattr(stat, "st_birthtime", stat.st_ctime)
        relative: Optional[str] = None
        if root is not None:
            try:
                relative = resolved.relative_to(root).as_posix()
            except ValueError:
                relative = None
        mime_type, _ = mimetypes.guess_type(resolved.name)
        return cls(
            path=os.fspath(resolved),
            name=stem,
            extension=extension,
            full_name=resolved.name,
            size=stat.st_size,
            created_at=datetime.fromtimestamp(created, tz=timezone.utc),
            modified_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            relative_path=relative,
            mime_type=mime_type,
            category=category_for_extension(extension),
            metadata_supported=extension.lower() in METADATA_EXTENSIONS,
        )


class GpsCoordinates(BaseModel):
    """Decimal GPS coordinates."""

    latitude: float
    longitude: float


class ImageMetadata(BaseModel):
    """EXIF-derived image metadata."""

    date_taken: Optional[datetime] = None
    camera_make: Optional[str] = None
    camera_model: Optional[str] = None
    gps: Optional[GpsCoordinates] = None
    width: Optional[int] = None
    height: Optional[int] = None
    orientation: Optional[int] = None
    exposure_time: Optional[str] = None
    f_number: Optional[float] = None
    iso: Optional[int] = None


class PdfMetadata(BaseModel):
    """Document information dictionary of a PDF."""

    title: Optional[str] = None
    author: Optional[str] = None
    subject: Optional[str] = None
    keywords: Optional[str] = None
    creator: Optional[str] = None
    producer: Optional[str] = None
    creation_date: Optional[datetime] = None
    modification_date: Optional[datetime] = None
    page_count: Optional[int] = None


class OfficeMetadata(BaseModel):
    """Core and extended properties of an Office Open XML document."""

    title: Optional[str] = None
    subject: Optional[str] = None
    creator: Optional[str] = None
    keywords: Optional[str] = None
    description: Optional[str] = None
    last_modified_by: Optional[str] = None
    created: Optional[datetime] = None
    modified: Optional[datetime] = None
    revision: Optional[int] = None
    category: Optional[str] = None
    application: Optional[str] = None
    app_version: Optional[str] = None
    page_count: Optional[int] = None
    word_count: Optional[int] = None


class UnifiedMetadata(BaseModel):
    """All metadata known about a file.

    Attributes:
        file: Filesystem descriptor for the file.
        image: Image metadata, if the file is an image with EXIF data.
        pdf: PDF metadata, if available.
        office: Office document metadata, if available.
        extraction_status: Outcome of metadata extraction.
        extraction_error: Error message when extraction failed.
    """

    file: FileInfo
    image: Optional[ImageMetadata] = None
    pdf: Optional[PdfMetadata] = None
    office: Optional[OfficeMetadata] = None
    extraction_status: ExtractionStatus = "unsupported"
    extraction_error: Optional[str] = None

    @classmethod
    def empty(cls, file: FileInfo) -> "UnifiedMetadata":
        """Return a metadata record carrying only the file descriptor."""
        return cls(file=file)

    def has_content(self) -> bool:
        """Return True when any content metadata section is populated."""
        return any(section is not None for section in (self.image, self.pdf, self.office))


__all__ = [
    "EXTENSION_CATEGORIES",
    "METADATA_EXTENSIONS",
    "ExtractionStatus",
    "FileCategory",
    "FileInfo",
    "GpsCoordinates",
    "ImageMetadata",
    "OfficeMetadata",
    "PdfMetadata",
    "UnifiedMetadata",
    "category_for_extension",
    "split_filename",
]
