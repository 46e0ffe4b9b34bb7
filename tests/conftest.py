"""Shared fixtures for the tidyname test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from tidyname.ingestion import FileInfo

FileFactory = Callable[..., FileInfo]


@pytest.fixture
def make_file(tmp_path: Path) -> FileFactory:
    """Return a factory that writes a file under ``tmp_path`` and describes it."""

    def _make(name: str, content: bytes = b"data", *, directory: Path | None = None) -> FileInfo:
        target_dir = directory or tmp_path
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / name
        path.write_bytes(content)
        return FileInfo.from_path(path, root=tmp_path)

    return _make
