"""Bilingual keyword triggers: matching, registry and dispatch."""

from .base import (
    CallbackAction,
    KeywordCategory,
    KeywordContext,
    KeywordMatchResult,
    KeywordTrigger,
    KeywordTriggerType,
    TriggerAction,
    category_for,
)
from .config import IMAGE_GENERATION_KEYWORDS, MEMORY_TRIGGER_KEYWORDS
from .dispatcher import KeywordDispatcher
from .matcher import KeywordConfig, contains_keywords, get_matched_keywords
from .registry import RegistryState, TriggerRegistry
from .triggers import ImageIntentAction, MemoryExtractionAction, build_default_registry

__all__ = [
    "IMAGE_GENERATION_KEYWORDS",
    "MEMORY_TRIGGER_KEYWORDS",
    "CallbackAction",
    "ImageIntentAction",
    "KeywordCategory",
    "KeywordConfig",
    "KeywordContext",
    "KeywordDispatcher",
    "KeywordMatchResult",
    "KeywordTrigger",
    "KeywordTriggerType",
    "MemoryExtractionAction",
    "RegistryState",
    "TriggerAction",
    "TriggerRegistry",
    "build_default_registry",
    "category_for",
    "contains_keywords",
    "get_matched_keywords",
]
