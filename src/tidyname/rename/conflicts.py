"""Detection of proposed paths that collide with existing files."""

from __future__ import annotations

import os
import sys
import time
from dataclasses import dataclass, field
from typing import Iterable, Optional

from tidyname.ingestion.models import split_filename

from .models import RenameProposal

FILE_EXISTS = "FILE_EXISTS"


@dataclass(frozen=True)
class ConflictInfo:
    """A conflict affecting one proposal.

    Attributes:
        code: Conflict code, ``FILE_EXISTS``.
        message: Human-readable description.
        conflicting_with: Paths involved in the conflict.
        suggestion: A name that would avoid the conflict.
    """

    code: str
    message: str
    conflicting_with: list[str] = field(default_factory=list)
    suggestion: Optional[str] = None


def default_case_sensitivity() -> bool:
    """Return whether the platform's default filesystem is case-sensitive."""
    return sys.platform.startswith("linux")


def normalize_path_key(path: str, *, case_sensitive: bool = False) -> str:
    """Return the key used to compare proposed paths.

    Backslashes become forward slashes, duplicate separators collapse and, unless
    ``case_sensitive`` is set, the path is lowercased.

    Examples:
        >>> normalize_path_key("C:\\\\Photos//IMG.JPG")
        'c:/photos/img.jpg'
    """
    normalized = path.replace("\\", "/")
    while "//" in normalized:
        normalized = normalized.replace("//", "/")
    return normalized if case_sensitive else normalized.lower()


def _with_suffix(name: str, suffix: str) -> str:
    stem, ext = split_filename(name)
    return f"{stem}_{suffix}{ext}"


def _base36(value: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    encoded = ""
    while value:
        value, remainder = divmod(value, 36)
        encoded = digits[remainder] + encoded
    return encoded or "0"


def detect_filesystem_collisions(
    proposals: Iterable[RenameProposal],
    *,
    case_sensitive: Optional[bool] = None,
) -> dict[str, list[ConflictInfo]]:
    """Find proposals whose target already exists on disk.

    A proposal whose target is its own current path (compared case-insensitively on
    case-insensitive filesystems) is never reported.

    Args:
        proposals: Proposals to check.
        case_sensitive: Filesystem case sensitivity; defaults to the platform's.

    Returns:
        dict[str, list[ConflictInfo]]: ``FILE_EXISTS`` conflicts keyed by proposal id.
    """
    if case_sensitive is None:
        case_sensitive = default_case_sensitivity()

    conflicts: dict[str, list[ConflictInfo]] = {}
    for proposal in proposals:
        if proposal.original_path == proposal.proposed_path:
            continue
        if not case_sensitive and proposal.original_path.lower() == proposal.proposed_path.lower():
            continue
        if os.path.lexists(proposal.proposed_path):
            suffix = _base36(int(time.time() * 1000))
            conflicts.setdefault(proposal.id, []).append(
                ConflictInfo(
                    code=FILE_EXISTS,
                    message=f'A file already exists at "{proposal.proposed_path}"',
                    conflicting_with=[proposal.proposed_path],
                    suggestion=_with_suffix(proposal.proposed_name, suffix),
                )
            )
    return conflicts


__all__ = [
    "ConflictInfo",
    "FILE_EXISTS",
    "default_case_sensitivity",
    "detect_filesystem_collisions",
    "normalize_path_key",
]
