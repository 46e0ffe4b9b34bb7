"""Apply a template to a single file."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from tidyname.ingestion.models import FileInfo, UnifiedMetadata

from .filenames import clean_filename
from .models import ParsedTemplate, PlaceholderResolution, PlaceholderToken
from .parser import parse_template
from .placeholders import PlaceholderContext, resolve_placeholder


class TemplateRenderError(ValueError):
    """Raised when a template cannot produce a usable filename."""


@dataclass(frozen=True)
class RenderedName:
    """Outcome of rendering a template for one file.

    Attributes:
        proposed_name: Filename including extension.
        proposed_path: ``proposed_name`` placed in the file's current directory.
        resolutions: Placeholder resolutions in template order.
    """

    proposed_name: str
    proposed_path: str
    resolutions: tuple[PlaceholderResolution, ...]

    @property
    def empty_placeholders(self) -> list[str]:
        return [resolution.placeholder for resolution in self.resolutions if resolution.is_empty]

    @property
    def fallback_placeholders(self) -> list[str]:
        return [resolution.placeholder for resolution in self.resolutions if resolution.used_fallback]


def build_context(
    file: FileInfo,
    metadata: Optional[UnifiedMetadata],
    *,
    template_pattern: str = "",
    ai_name: Optional[str] = None,
    date_from_filesystem: bool = False,
) -> PlaceholderContext:
    """Return a placeholder context for ``file`` and its optional metadata."""
    return PlaceholderContext(
        file=file,
        image=metadata.image if metadata else None,
        pdf=metadata.pdf if metadata else None,
        office=metadata.office if metadata else None,
        ai_name=ai_name,
        template_pattern=template_pattern,
        date_from_filesystem=date_from_filesystem,
    )


def join_tokens(template: ParsedTemplate, values: Mapping[str, str]) -> str:
    """Concatenate template tokens substituting placeholder values."""
    return "".join(
        values.get(token.name, "") if isinstance(token, PlaceholderToken) else token.value
        for token in template.tokens
    )


def render_filename(
    file: FileInfo,
    pattern: str,
    metadata: Optional[UnifiedMetadata] = None,
    *,
    fallbacks: Mapping[str, str] | None = None,
    sanitize: bool = True,
    include_extension: bool = True,
    date_from_filesystem: bool = False,
    ai_name: Optional[str] = None,
) -> RenderedName:
    """Render ``pattern`` for ``file``.

    Args:
        file: File being renamed.
        pattern: Template pattern.
        metadata: Optional metadata for the file.
        fallbacks: Placeholder fallback values.
        sanitize: Clean the rendered name so it is filename-safe.
        include_extension: Append the original extension when the name lacks it.
        date_from_filesystem: Use the modification time when no content date exists.
        ai_name: AI-suggested name available to ``{name}`` and ``{ai}``.

    Returns:
        RenderedName: Proposed name, path and placeholder resolutions.

    Raises:
        TemplateSyntaxError: If the pattern cannot be parsed.
        TemplateRenderError: If the result is empty or only an extension.
    """
    template = parse_template(pattern)
    context = build_context(
        file,
        metadata,
        template_pattern=pattern,
        ai_name=ai_name,
        date_from_filesystem=date_from_filesystem,
    )
    resolutions = tuple(
        resolve_placeholder(name, context, fallbacks=fallbacks, sanitize=sanitize)
        for name in template.placeholders
    )
    name = join_tokens(template, {res.placeholder: res.value for res in resolutions})
    if sanitize:
        name = clean_filename(name)

    extension = file.extension.lstrip(".")
    if include_extension and extension and not name.endswith(f".{extension}"):
        name = f"{name}.{extension}"

    trimmed = name.strip()
    if trimmed in {"", ".", ".."} or (extension and trimmed == f".{extension}"):
        raise TemplateRenderError("Template produced empty or invalid filename")

    directory = os.path.dirname(file.path)
    return RenderedName(
        proposed_name=name,
        proposed_path=os.path.join(directory, name),
        resolutions=resolutions,
    )


__all__ = ["RenderedName", "TemplateRenderError", "build_context", "join_tokens", "render_filename"]
