"""AI naming suggestion models and loaders."""

from .loader import AnalysisLoadError, load_analysis_results
from .models import AnalysisResult, NamingSuggestion

__all__ = ["AnalysisLoadError", "AnalysisResult", "NamingSuggestion", "load_analysis_results"]
