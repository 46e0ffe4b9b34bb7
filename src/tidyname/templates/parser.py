"""Template pattern parsing."""

from __future__ import annotations

from typing import Literal

from .models import LiteralToken, ParsedTemplate, PlaceholderToken, TemplateToken

ParseErrorCode = Literal["unclosed_brace", "empty_placeholder", "unexpected_close_brace"]


class TemplateSyntaxError(ValueError):
    """Raised when a template pattern cannot be parsed.

    Attributes:
        code: Machine-readable error category.
        position: Index in the pattern where the problem was detected.
    """

    def __init__(self, code: ParseErrorCode, position: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.position = position


def parse_template(pattern: str) -> ParsedTemplate:
    """Split a pattern into literal and placeholder tokens.

    ``{name}`` introduces a placeholder; ``{{`` and ``}}`` produce literal braces.

    Args:
        pattern: Template pattern to parse.

    Returns:
        ParsedTemplate: Tokens plus the unique placeholder names in order of appearance.

    Raises:
        TemplateSyntaxError: If braces are unbalanced or a placeholder is empty.
    """
    tokens: list[TemplateToken] = []
    placeholders: list[str] = []
    literal: list[str] = []
    index = 0
    length = len(pattern)

    def flush() -> None:
        if literal:
            tokens.append(LiteralToken("".join(literal)))
            literal.clear()

    while index < length:
        char = pattern[index]
        following = pattern[index + 1] if index + 1 < length else ""

        if char in "{}" and following == char:
            literal.append(char)
            index += 2
            continue
        if char == "}":
            raise TemplateSyntaxError(
                "unexpected_close_brace",
                index,
                f"Unexpected closing brace at position {index}",
            )
        if char == "{":
            end = pattern.find("}", index + 1)
            inner = pattern[index + 1 : end] if end != -1 else ""
            if end == -1 or "{" in inner:
                raise TemplateSyntaxError(
                    "unclosed_brace", index, f"Unclosed brace at position {index}"
                )
            name = inner.strip()
            if not name:
                raise TemplateSyntaxError(
                    "empty_placeholder", index, "Empty placeholder {} is not allowed"
                )
            flush()
            tokens.append(PlaceholderToken(name))
            if name not in placeholders:
                placeholders.append(name)
            index = end + 1
            continue

        literal.append(char)
        index += 1

    flush()
    return ParsedTemplate(pattern=pattern, tokens=tuple(tokens), placeholders=tuple(placeholders))


def extract_placeholders(pattern: str) -> list[str]:
    """Return placeholder names used by ``pattern``, or an empty list if it is invalid."""
    try:
        return list(parse_template(pattern).placeholders)
    except TemplateSyntaxError:
        return []


__all__ = ["ParseErrorCode", "TemplateSyntaxError", "extract_placeholders", "parse_template"]
