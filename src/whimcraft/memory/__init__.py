"""Tiered long-term memory about users."""

from .cleanup import cleanup_facts, cleanup_user_memory, remove_expired_facts
from .extractor import ExtractionResult, FactExtractor, should_extract_memory
from .manager import MemoryManager
from .models import (
    MAX_TOTAL_TOKENS,
    TIER_LIMITS,
    LanguagePreference,
    MemoryCategory,
    MemoryFact,
    MemoryStats,
    MemoryTier,
    UserMemory,
    calculate_expiry,
    filter_by_terms,
)
from .store import MemoryStore

__all__ = [
    "MAX_TOTAL_TOKENS",
    "TIER_LIMITS",
    "ExtractionResult",
    "FactExtractor",
    "LanguagePreference",
    "MemoryCategory",
    "MemoryFact",
    "MemoryManager",
    "MemoryStats",
    "MemoryStore",
    "MemoryTier",
    "UserMemory",
    "calculate_expiry",
    "cleanup_facts",
    "cleanup_user_memory",
    "filter_by_terms",
    "remove_expired_facts",
    "should_extract_memory",
]
