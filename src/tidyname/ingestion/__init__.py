"""File discovery and metadata extraction."""

from .discovery import DirectoryScanner
from .extractors import ExtractionError, MetadataExtractor
from .models import (
    FileInfo,
    GpsCoordinates,
    ImageMetadata,
    OfficeMetadata,
    PdfMetadata,
    UnifiedMetadata,
    split_filename,
)

__all__ = [
    "DirectoryScanner",
    "ExtractionError",
    "FileInfo",
    "GpsCoordinates",
    "ImageMetadata",
    "MetadataExtractor",
    "OfficeMetadata",
    "PdfMetadata",
    "UnifiedMetadata",
    "split_filename",
]
