"""Template and folder structure definitions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Template(BaseModel):
    """A naming template.

    Attributes:
        id: Stable identifier referenced by rules.
        name: Human-readable label.
        pattern: Placeholder pattern such as ``{date}-{original}``.
        file_types: Extensions the template is intended for (informational).
        is_default: Whether this template is used when no rule matches.
        description: Optional free-form description.
    """

    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=100)
    pattern: str = Field(min_length=1, max_length=500)
    file_types: List[str] = Field(default_factory=list)
    is_default: bool = False
    description: Optional[str] = None


class FolderStructure(BaseModel):
    """A directory pattern used to move files into organised folders.

    Attributes:
        id: Stable identifier referenced by rules.
        name: Human-readable label.
        pattern: Directory pattern such as ``{year}/{month}``.
        description: Optional free-form description.
        enabled: Disabled structures are ignored during preview generation.
        priority: Ordering hint for presentation.
    """

    model_config = ConfigDict(extra="forbid")

    id: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=100)
    pattern: str = Field(min_length=1, max_length=500)
    description: Optional[str] = None
    enabled: bool = True
    priority: int = Field(default=0, ge=0)


@dataclass(frozen=True)
class LiteralToken:
    """Literal text inside a template."""

    value: str
    type: Literal["literal"] = "literal"


@dataclass(frozen=True)
class PlaceholderToken:
    """A ``{name}`` placeholder inside a template."""

    name: str
    type: Literal["placeholder"] = "placeholder"


TemplateToken = Union[LiteralToken, PlaceholderToken]


@dataclass(frozen=True)
class ParsedTemplate:
    """Tokenised template along with its unique placeholder names."""

    pattern: str
    tokens: tuple[TemplateToken, ...] = ()
    placeholders: tuple[str, ...] = field(default_factory=tuple)


PlaceholderSource = Literal["exif", "document", "filesystem", "ai", "fallback", "literal"]


@dataclass(frozen=True)
class PlaceholderResolution:
    """Value a placeholder resolved to and where it came from."""

    placeholder: str
    value: str
    source: PlaceholderSource
    used_fallback: bool = False

    @property
    def is_empty(self) -> bool:
        return self.value == ""


__all__ = [
    "FolderStructure",
    "LiteralToken",
    "ParsedTemplate",
    "PlaceholderResolution",
    "PlaceholderSource",
    "PlaceholderToken",
    "Template",
    "TemplateToken",
]
