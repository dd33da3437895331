"""Model service contract: prompts, decoding and task calls."""

from deepsearch.analysis.schemas import EmbeddingResult, SourceAnalysis
from deepsearch.analysis.service import AnalysisService

__all__ = ["AnalysisService", "SourceAnalysis", "EmbeddingResult"]
