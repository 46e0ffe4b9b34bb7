"""Naming templates: parsing, placeholder resolution and folder patterns."""

from .filenames import clean_filename, is_valid_filename
from .folders import (
    FolderResolution,
    FolderResolutionError,
    normalize_folder_pattern,
    resolve_folder_path,
    validate_folder_pattern,
)
from .models import FolderStructure, ParsedTemplate, PlaceholderResolution, Template
from .parser import TemplateSyntaxError, extract_placeholders, parse_template
from .placeholders import KNOWN_PLACEHOLDERS, PlaceholderContext, format_bytes, resolve_placeholder
from .preview import RenderedName, TemplateRenderError, render_filename

__all__ = [
    "FolderResolution",
    "FolderResolutionError",
    "FolderStructure",
    "KNOWN_PLACEHOLDERS",
    "ParsedTemplate",
    "PlaceholderContext",
    "PlaceholderResolution",
    "RenderedName",
    "Template",
    "TemplateRenderError",
    "TemplateSyntaxError",
    "clean_filename",
    "extract_placeholders",
    "format_bytes",
    "is_valid_filename",
    "normalize_folder_pattern",
    "parse_template",
    "render_filename",
    "resolve_folder_path",
    "resolve_placeholder",
    "validate_folder_pattern",
]
