"""Resolution of dotted field paths against file metadata."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel

from tidyname.ingestion.models import UnifiedMetadata

FIELD_NAMESPACES = ("image", "pdf", "office", "file")

_IMAGE_FIELDS = {
    "dateTaken": "date_taken",
    "cameraMake": "camera_make",
    "cameraModel": "camera_model",
    "gps": "gps",
    "width": "width",
    "height": "height",
    "orientation": "orientation",
    "exposureTime": "exposure_time",
    "fNumber": "f_number",
    "iso": "iso",
    "make": "camera_make",
    "model": "camera_model",
}
_PDF_FIELDS = {
    "title": "title",
    "author": "author",
    "subject": "subject",
    "keywords": "keywords",
    "creator": "creator",
    "producer": "producer",
    "creationDate": "creation_date",
    "modificationDate": "modification_date",
    "pageCount": "page_count",
}
_OFFICE_FIELDS = {
    "title": "title",
    "subject": "subject",
    "creator": "creator",
    "author": "creator",
    "keywords": "keywords",
    "description": "description",
    "lastModifiedBy": "last_modified_by",
    "created": "created",
    "modified": "modified",
    "revision": "revision",
    "category": "category",
    "application": "application",
    "appVersion": "app_version",
    "pageCount": "page_count",
    "wordCount": "word_count",
}
_FILE_FIELDS = {
    "path": "path",
    "name": "name",
    "extension": "extension",
    "fullName": "full_name",
    "size": "size",
    "createdAt": "created_at",
    "modifiedAt": "modified_at",
    "relativePath": "relative_path",
    "mimeType": "mime_type",
    "category": "category",
    "metadataSupported": "metadata_supported",
}


def parse_field_path(path: str) -> tuple[Optional[str], list[str]]:
    """Split ``namespace.field[.sub]`` into its namespace and remaining segments.

    Returns ``(None, [])`` when the namespace is unknown or no field is given.
    """
    namespace, _, rest = path.strip().partition(".")
    if namespace not in FIELD_NAMESPACES or not rest:
        return None, []
    return namespace, rest.split(".")


def _image_value(metadata: UnifiedMetadata, path: list[str]) -> Any:
    image = metadata.image
    if image is None:
        return None
    field, rest = path[0], path[1:]
    if field == "gps" and rest:
        if image.gps is None or rest[0] not in {"latitude", "longitude"}:
            return None
        return getattr(image.gps, rest[0])
    if field == "camera":
        if image.camera_make and image.camera_model:
            return f"{image.camera_make} {image.camera_model}"
        return image.camera_make or image.camera_model
    attribute = _IMAGE_FIELDS.get(field)
    return getattr(image, attribute) if attribute else None


def _lookup(section: Any, table: dict[str, str], field: str) -> Any:
    if section is None:
        return None
    attribute = table.get(field)
    return getattr(section, attribute) if attribute else None


def value_to_string(value: Any) -> Optional[str]:
    """Render a field value as the string used for comparisons."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, BaseModel):
        return value.model_dump_json()
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def resolve_field(path: str, metadata: UnifiedMetadata) -> Optional[str]:
    """Return the string value of a field path, or None when it is absent.

    Args:
        path: Dotted path such as ``pdf.author`` or ``image.gps.latitude``.
        metadata: Metadata to read from.

    Returns:
        Optional[str]: String value, or None if the field is unknown or empty.
    """
    namespace, segments = parse_field_path(path)
    if namespace is None:
        return None
    if namespace == "image":
        raw = _image_value(metadata, segments)
    elif namespace == "pdf":
        raw = _lookup(metadata.pdf, _PDF_FIELDS, segments[0])
    elif namespace == "office":
        raw = _lookup(metadata.office, _OFFICE_FIELDS, segments[0])
    else:
        raw = _lookup(metadata.file, _FILE_FIELDS, segments[0])
    return value_to_string(raw)


def field_exists(path: str, metadata: UnifiedMetadata) -> bool:
    return resolve_field(path, metadata) is not None


__all__ = ["FIELD_NAMESPACES", "field_exists", "parse_field_path", "resolve_field", "value_to_string"]
