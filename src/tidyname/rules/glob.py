"""Glob matching for filename rules."""

from __future__ import annotations

import fnmatch
import re
from functools import lru_cache


class GlobPatternError(ValueError):
    """Raised when a glob pattern is malformed."""


def expand_braces(pattern: str) -> list[str]:
    """Expand the first top-level ``{a,b}`` group recursively.

    Examples:
        >>> expand_braces("*.{jpg,png}")
        ['*.jpg', '*.png']
    """
    start = end = -1
    depth = 0
    for index, char in enumerate(pattern):
        if index and pattern[index - 1] == "\\":
            continue
        if char == "{":
            if depth == 0:
                start = index
            depth += 1
        elif char == "}" and depth:
            depth -= 1
            if depth == 0:
                end = index
                break
    if start == -1 or end == -1:
        return [pattern]

    prefix, body, suffix = pattern[:start], pattern[start + 1 : end], pattern[end + 1 :]
    alternatives: list[str] = []
    current: list[str] = []
    depth = 0
    for index, char in enumerate(body):
        if char == "," and depth == 0 and not (index and body[index - 1] == "\\"):
            alternatives.append("".join(current))
            current = []
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
        current.append(char)
    alternatives.append("".join(current))

    expanded: list[str] = []
    for alternative in alternatives:
        expanded.extend(expand_braces(prefix + alternative + suffix))
    return expanded


def validate_glob_pattern(pattern: str) -> list[str]:
    """Return a list of problems with ``pattern``; empty when it is valid."""
    if not pattern or not pattern.strip():
        return ["Pattern cannot be empty"]

    errors: list[str] = []
    brace_depth = 0
    in_class = False
    class_start = -1
    index = 0
    while index < len(pattern):
        char = pattern[index]
        if char == "\\":
            index += 2
            continue
        if in_class:
            if char == "]" and index > class_start + 1:
                in_class = False
        elif char == "[":
            in_class = True
            class_start = index
            if pattern[index + 1 : index + 2] in {"!", "^"}:
                class_start += 1
        elif char == "{":
            brace_depth += 1
        elif char == "}":
            if brace_depth == 0:
                errors.append(f"Unexpected closing brace at position {index}")
            else:
                brace_depth -= 1
        index += 1

    if in_class:
        errors.append("Unclosed character class '['")
    if brace_depth:
        errors.append("Unclosed brace '{'")
    if "[]" in pattern or "[!]" in pattern:
        errors.append("Empty character class")
    if re.search(r"\{,|,,|,\}", pattern):
        errors.append("Empty alternative in brace expansion")
    return errors


@lru_cache(maxsize=512)
def compile_glob(pattern: str, case_sensitive: bool = False) -> re.Pattern[str]:
    """Compile a glob pattern into an anchored regular expression.

    Raises:
        GlobPatternError: If the pattern is malformed.
    """
    errors = validate_glob_pattern(pattern)
    if errors:
        raise GlobPatternError("; ".join(errors))
    alternatives = expand_braces(pattern)
    body = "|".join(fnmatch.translate(alt) for alt in alternatives)
    return re.compile(body, 0 if case_sensitive else re.IGNORECASE)


def match_glob(pattern: str, filename: str, *, case_sensitive: bool = False) -> bool:
    """Return True when ``filename`` matches ``pattern``.

    ``*``, ``?``, ``[...]``, ``[!...]`` and ``{a,b}`` are supported. Malformed patterns never match.

    Args:
        pattern: Glob pattern.
        filename: File name including its extension.
        case_sensitive: Whether matching honours case.

    Returns:
        bool: Whether the whole filename matches.
    """
    try:
        compiled = compile_glob(pattern, case_sensitive)
    except GlobPatternError:
        return False
    return compiled.match(filename) is not None


__all__ = ["GlobPatternError", "compile_glob", "expand_braces", "match_glob", "validate_glob_pattern"]
