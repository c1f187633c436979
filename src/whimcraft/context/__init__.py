"""Context preparation for LLM calls."""

from .analysis import (
    ImageGenerationAction,
    MemoryExtractionRequest,
    MemoryRetrievalAction,
    PromptActions,
    PromptAnalysisResult,
    UserIntent,
    WebSearchAction,
    analysis_from_keywords,
)
from .orchestrator import ContextOrchestrator, ContextResult, select_model

__all__ = [
    "ContextOrchestrator",
    "ContextResult",
    "ImageGenerationAction",
    "MemoryExtractionRequest",
    "MemoryRetrievalAction",
    "PromptActions",
    "PromptAnalysisResult",
    "UserIntent",
    "WebSearchAction",
    "analysis_from_keywords",
    "select_model",
]
