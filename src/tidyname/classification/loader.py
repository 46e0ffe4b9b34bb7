"""Loading of precomputed naming analysis results."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from .models import AnalysisResult

_RESULTS = TypeAdapter(list[AnalysisResult])


class AnalysisLoadError(Exception):
    """Raised when analysis results cannot be read."""


def load_analysis_results(path: Path) -> dict[str, AnalysisResult]:
    """Load analysis results from a JSON document.

    The document may be a list of results or a mapping of file path to result.

    Args:
        path: JSON file to read.

    Returns:
        dict[str, AnalysisResult]: Results keyed by resolved file path.

    Raises:
        AnalysisLoadError: If the file is unreadable or does not match the schema.
    """
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise AnalysisLoadError(f"Unable to read analysis results from {path}: {exc}") from exc

    if isinstance(data, dict):
        data = [{"filePath": key, **value} for key, value in data.items()]
    try:
        results = _RESULTS.validate_python(data)
    except ValidationError as exc:
        raise AnalysisLoadError(f"Invalid analysis results in {path}: {exc}") from exc

    return {os.path.abspath(result.file_path): result for result in results}


__all__ = ["AnalysisLoadError", "load_analysis_results"]
