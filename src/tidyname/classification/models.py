"""Models describing AI naming suggestions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NamingSuggestion(_CamelModel):
    """A filename suggestion produced by a language model.

    Attributes:
        suggested_name: Proposed file name without extension.
        confidence: Confidence score between 0 and 1.
        reasoning: Short explanation supplied by the model.
        keywords: Keywords the model extracted from the content.
    """

    suggested_name: str = Field(min_length=1)
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str = ""
    keywords: List[str] = Field(default_factory=list)


class AnalysisResult(_CamelModel):
    """Outcome of analysing one file's content.

    Attributes:
        file_path: Absolute path of the analysed file.
        suggestion: Naming suggestion for the file.
        model_used: Identifier of the model that produced the suggestion.
        processing_time_ms: Time spent on the analysis.
        analyzed_at: Time the analysis completed.
        content_truncated: Whether the content was truncated before analysis.
        analysis_source: Whether text content or an image was analysed.
    """

    file_path: str
    suggestion: NamingSuggestion
    model_used: str = "unknown"
    processing_time_ms: int = 0
    analyzed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    content_truncated: bool = False
    analysis_source: Optional[Literal["text", "vision"]] = None


__all__ = ["AnalysisResult", "NamingSuggestion"]
