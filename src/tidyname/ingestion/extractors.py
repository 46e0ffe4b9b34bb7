"""Metadata extraction helpers."""

from __future__ import annotations

import logging
import re
import zipfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional
from xml.etree import ElementTree

import pymupdf
from PIL import ExifTags, Image, UnidentifiedImageError

from .models import (
    FileInfo,
    GpsCoordinates,
    ImageMetadata,
    OfficeMetadata,
    PdfMetadata,
    UnifiedMetadata,
)

LOGGER = logging.getLogger(__name__)

IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "tiff", "tif", "png", "webp", "heic", "heif"})
OFFICE_EXTENSIONS = frozenset({"docx", "xlsx", "pptx"})
PDF_EXTENSIONS = frozenset({"pdf"})

_EXIF_DATE_FORMAT = "%Y:%m:%d %H:%M:%S"
_PDF_DATE = re.compile(r"D:(\d{4})(\d{2})?(\d{2})?(\d{2})?(\d{2})?(\d{2})?")
_CORE_NS = {
    "cp": "http://schemas.openxmlformats.org/package/2006/metadata/core-properties",
    "dc": "http://purl.org/dc/elements/1.1/",
    "dcterms": "http://purl.org/dc/terms/",
}
_APP_NS = {"ep": "http://schemas.openxmlformats.org/officeDocument/2006/extended-properties"}


class ExtractionError(Exception):
    """Raised when a file is readable but its metadata cannot be extracted."""


class MetadataExtractor:
    """Extract structured metadata for scanned files."""

    def extract(self, file: FileInfo) -> UnifiedMetadata:
        """Return the metadata known for ``file``.

        Extraction problems are reported through ``extraction_status`` rather than raised.

        Args:
            file: Descriptor of the file to inspect.

        Returns:
            UnifiedMetadata: Metadata record for the file.
        """
        extension = file.extension.lower()
        path = Path(file.path)
        try:
            if extension in IMAGE_EXTENSIONS:
                image = self._extract_image(path)
                return UnifiedMetadata(file=file, image=image, extraction_status="success")
            if extension in OFFICE_EXTENSIONS:
                office = self._extract_office(path)
                return UnifiedMetadata(file=file, office=office, extraction_status="success")
            if extension in PDF_EXTENSIONS:
                pdf = self._extract_pdf(path)
                return UnifiedMetadata(file=file, pdf=pdf, extraction_status="success")
        except (
            OSError,
            ExtractionError,
            UnidentifiedImageError,
            zipfile.BadZipFile,
            ElementTree.ParseError,
            pymupdf.FileDataError,
        ) as exc:
            LOGGER.debug("Metadata extraction failed for %s: %s", file.path, exc)
            return UnifiedMetadata(file=file, extraction_status="failed", extraction_error=str(exc))
        return UnifiedMetadata.empty(file)

    def extract_many(self, files: list[FileInfo]) -> dict[str, UnifiedMetadata]:
        """Return a mapping of file path to extracted metadata."""
        return {file.path: self.extract(file) for file in files}

    def _extract_image(self, path: Path) -> ImageMetadata:
        with Image.open(path) as img:
            width, height = img.size
            exif = img.getexif()
            details = exif.get_ifd(ExifTags.IFD.Exif)
            gps_info = exif.get_ifd(ExifTags.IFD.GPSInfo)

        taken = details.get(ExifTags.Base.DateTimeOriginal) or exif.get(ExifTags.Base.DateTime)
        exposure = details.get(ExifTags.Base.ExposureTime)
        f_number = details.get(ExifTags.Base.FNumber)
        iso = details.get(ExifTags.Base.ISOSpeedRatings)
        if isinstance(iso, tuple):
            iso = iso[0] if iso else None

        return ImageMetadata(
            date_taken=_parse_exif_date(taken),
            camera_make=_clean_text(exif.get(ExifTags.Base.Make)),
            camera_model=_clean_text(exif.get(ExifTags.Base.Model)),
            gps=_parse_gps(gps_info),
            width=width,
            height=height,
            orientation=exif.get(ExifTags.Base.Orientation),
            exposure_time=_format_exposure(exposure),
            f_number=float(f_number) if f_number else None,
            iso=int(iso) if iso else None,
        )

    def _extract_office(self, path: Path) -> OfficeMetadata:
        with zipfile.ZipFile(path) as archive:
            names = set(archive.namelist())
            core = archive.read("docProps/core.xml") if "docProps/core.xml" in names else None
            app = archive.read("docProps/app.xml") if "docProps/app.xml" in names else None

        values: dict[str, Any] = {}
        if core is not None:
            root = ElementTree.fromstring(core)
            values.update(
                title=_find_text(root, "dc:title", _CORE_NS),
                subject=_find_text(root, "dc:subject", _CORE_NS),
                creator=_find_text(root, "dc:creator", _CORE_NS),
                keywords=_find_text(root, "cp:keywords", _CORE_NS),
                description=_find_text(root, "dc:description", _CORE_NS),
                last_modified_by=_find_text(root, "cp:lastModifiedBy", _CORE_NS),
                created=_parse_iso(_find_text(root, "dcterms:created", _CORE_NS)),
                modified=_parse_iso(_find_text(root, "dcterms:modified", _CORE_NS)),
                revision=_parse_int(_find_text(root, "cp:revision", _CORE_NS)),
                category=_find_text(root, "cp:category", _CORE_NS),
            )
        if app is not None:
            root = ElementTree.fromstring(app)
            values.update(
                application=_find_text(root, "ep:Application", _APP_NS),
                app_version=_find_text(root, "ep:AppVersion", _APP_NS),
                page_count=_parse_int(_find_text(root, "ep:Pages", _APP_NS)),
                word_count=_parse_int(_find_text(root, "ep:Words", _APP_NS)),
            )
        return OfficeMetadata(**values)

    def _extract_pdf(self, path: Path) -> PdfMetadata:
        with pymupdf.open(path) as doc:
            if doc.needs_pass:
                raise ExtractionError("PDF is password-protected")
            info = doc.metadata or {}
            page_count = doc.page_count

        return PdfMetadata(
            title=_clean_text(info.get("title")),
            author=_clean_text(info.get("author")),
            subject=_clean_text(info.get("subject")),
            keywords=_clean_text(info.get("keywords")),
            creator=_clean_text(info.get("creator")),
            producer=_clean_text(info.get("producer")),
            creation_date=_parse_pdf_date(info.get("creationDate")),
            modification_date=_parse_pdf_date(info.get("modDate")),
            page_count=page_count,
        )


def _clean_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).replace("\x00", "").strip()
    return text or None


def _parse_exif_date(value: Any) -> Optional[datetime]:
    text = _clean_text(value)
    if not text:
        return None
    try:
        return datetime.strptime(text, _EXIF_DATE_FORMAT)
    except ValueError:
        return None


def _parse_pdf_date(value: Any) -> Optional[datetime]:
    """Parse a ``D:YYYYMMDDHHmmSS`` date; the timezone suffix is ignored."""
    match = _PDF_DATE.search(value or "")
    if match is None:
        return None
    year, month, day, hour, minute, second = (
        int(part) if part else default
        for part, default in zip(match.groups(), (1970, 1, 1, 0, 0, 0))
    )
    try:
        return datetime(year, month, day, hour, minute, second)
    except ValueError:
        return None


def _format_exposure(value: Any) -> Optional[str]:
    if not value:
        return None
    seconds = float(value)
    if 0 < seconds < 1:
        return f"1/{round(1 / seconds)}"
    return f"{seconds:g}"


def _dms_to_decimal(values: Any, ref: Any) -> Optional[float]:
    try:
        degrees, minutes, seconds = (float(part) for part in values)
    except (TypeError, ValueError):
        return None
    decimal = degrees + minutes / 60 + seconds / 3600
    if str(ref).upper() in {"S", "W"}:
        decimal = -decimal
    return decimal


def _parse_gps(gps_info: Any) -> Optional[GpsCoordinates]:
    if not gps_info:
        return None
    latitude = _dms_to_decimal(
        gps_info.get(ExifTags.GPS.GPSLatitude), gps_info.get(ExifTags.GPS.GPSLatitudeRef)
    )
    longitude = _dms_to_decimal(
        gps_info.get(ExifTags.GPS.GPSLongitude), gps_info.get(ExifTags.GPS.GPSLongitudeRef)
    )
    if latitude is None or longitude is None:
        return None
    return GpsCoordinates(latitude=latitude, longitude=longitude)


def _find_text(root: ElementTree.Element, tag: str, namespaces: dict[str, str]) -> Optional[str]:
    node = root.find(tag, namespaces)
    if node is None or node.text is None:
        return None
    return node.text.strip() or None


def _parse_iso(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


__all__ = [
    "ExtractionError",
    "IMAGE_EXTENSIONS",
    "MetadataExtractor",
    "OFFICE_EXTENSIONS",
    "PDF_EXTENSIONS",
]
