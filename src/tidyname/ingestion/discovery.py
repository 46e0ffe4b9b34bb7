"""File discovery utilities."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator

from .models import FileInfo

LOGGER = logging.getLogger(__name__)


def _is_hidden(path: Path) -> bool:
    return any(part.startswith(".") for part in path.parts if part not in (".", ".."))


class DirectoryScanner:
    """Discover files within a directory tree subject to configuration filters."""

    def __init__(
        self,
        *,
        recursive: bool = False,
        include_hidden: bool = False,
        follow_symlinks: bool = False,
        extensions: Iterable[str] | None = None,
    ) -> None:
        self.recursive = recursive
        self.include_hidden = include_hidden
        self.follow_symlinks = follow_symlinks
        self.extensions = (
            {ext.lower().lstrip(".") for ext in extensions if ext.strip()} if extensions else None
        )

    def scan(self, root: Path) -> Iterator[FileInfo]:
        """Yield file descriptors discovered under root in sorted path order.

        Args:
            root: Directory (or single file) to scan.

        Yields:
            FileInfo: Descriptor for each file that passes the filters.
        """
        root = root.expanduser().resolve()
        if not root.exists():
            return

        base = root.parent if root.is_file() else root
        for path in sorted(self._iter_paths(root)):
            if path.is_symlink() and not self.follow_symlinks:
                continue
            if not path.is_file():
                continue
            try:
                relative = path.relative_to(base)
            except ValueError:
                relative = Path(path.name)
            if not self.include_hidden and _is_hidden(relative):
                continue
            if self.extensions is not None:
                suffix = path.suffix.lower().lstrip(".")
                if suffix not in self.extensions:
                    continue
            try:
                yield FileInfo.from_path(path, root=base)
            except OSError as exc:
                LOGGER.debug("Skipping unreadable file %s: %s", path, exc)

    def _iter_paths(self, root: Path) -> Iterable[Path]:
        """Internal helper to iterate candidate paths."""
        if root.is_file():
            yield root
            return

        if self.recursive:
            yield from root.rglob("*")
        else:
            yield from root.iterdir()


__all__ = ["DirectoryScanner"]
