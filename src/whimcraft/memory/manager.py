"""Memory manager for orchestrating fact storage, retrieval and extraction."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Any, Iterable

from ..keywords.config import MEMORY_TRIGGER_KEYWORDS
from ..keywords.matcher import contains_keywords
from .extractor import should_extract_memory
from .models import (
    LanguagePreference,
    MemoryCategory,
    MemoryFact,
    MemoryTier,
    UserMemory,
    filter_by_terms,
    utcnow,
)
from .store import MemoryStore

if TYPE_CHECKING:
    from .extractor import FactExtractor

logger = logging.getLogger(__name__)

DUPLICATE_SIMILARITY = 0.8

_TIER_ORDER = {MemoryTier.CORE: 0, MemoryTier.IMPORTANT: 1, MemoryTier.CONTEXT: 2}

_SECTION_HEADINGS = [
    (MemoryCategory.PROFILE, "**About the user:**"),
    (MemoryCategory.PREFERENCE, "**Preferences:**"),
    (MemoryCategory.TECHNICAL, "**Technical Context:**"),
    (MemoryCategory.PROJECT, "**Current Work:**"),
]

_LANGUAGE_INSTRUCTIONS = {
    LanguagePreference.ENGLISH: "**Language Preference:** User prefers English. Respond in English.",
    LanguagePreference.CHINESE: (
        "**Language Preference:** User prefers Chinese (中文). Respond in Chinese."
    ),
    LanguagePreference.HYBRID: (
        "**Language Preference:** User is comfortable with both English and Chinese. "
        "You may use either language or mix them as appropriate."
    ),
}


def calculate_similarity(first: str, second: str) -> float:
    """Share of the longer string's length covered by the shorter string's characters."""
    longer, shorter = (first, second) if len(first) > len(second) else (second, first)
    if not longer:
        return 1.0
    matches = sum(1 for char in shorter if char in longer)
    return matches / len(longer)


def is_duplicate_fact(existing: Iterable[MemoryFact], new_fact: MemoryFact) -> bool:
    """Whether new_fact repeats one of the existing facts."""
    normalized_new = new_fact.content.lower().strip()
    for fact in existing:
        normalized = fact.content.lower().strip()
        if normalized == normalized_new:
            return True
        if calculate_similarity(normalized, normalized_new) > DUPLICATE_SIMILARITY:
            return True
    return False


class MemoryManager:
    """Main interface for the memory system.

    Coordinates the store (persistence) and the extractor (LLM) and knows
    how memory is rendered into a prompt.
    """

    def __init__(
        self,
        store: MemoryStore,
        extractor: FactExtractor | None = None,
    ) -> None:
        """Initialize the manager with a store and optional extractor.

        Args:
            store: The MemoryStore for persistence.
            extractor: Optional FactExtractor for automatic extraction.
        """
        self.store = store
        self.extractor = extractor

    def get(self, user_id: str) -> UserMemory:
        """Load a user's memory."""
        return self.store.get_user_memory(user_id)

    def retrieve(self, user_id: str, terms: list[str] | None = None) -> list[MemoryFact]:
        """Load a user's facts, filtered by terms when any are given."""
        facts = self.store.get_user_memory(user_id).facts
        if terms:
            return filter_by_terms(facts, terms)
        return facts

    def add_facts(self, user_id: str, facts: list[MemoryFact]) -> int:
        """Add facts, skipping duplicates of stored or earlier new facts.

        Returns:
            Number of facts actually added.
        """
        memory = self.store.get_user_memory(user_id)
        existing = list(memory.facts)
        added = 0

        for fact in facts:
            if is_duplicate_fact(existing, fact):
                continue
            existing.append(fact)
            added += 1

        if added == 0:
            logger.info("All new facts are duplicates, skipping")
            return 0
        if added < len(facts):
            logger.info("Filtered out %d duplicate facts", len(facts) - added)

        self.store.save_user_memory(user_id, existing)
        return added

    def remember(
        self,
        user_id: str,
        content: str,
        category: MemoryCategory,
        tier: MemoryTier = MemoryTier.CORE,
    ) -> MemoryFact | None:
        """Save a fact the user stated explicitly.

        Returns:
            The new fact, or None if it duplicates a stored one.
        """
        fact = MemoryFact.create(
            content,
            category,
            tier,
            1.0,
            auto_extracted=False,
            source="User explicitly stated",
        )
        return fact if self.add_facts(user_id, [fact]) else None

    def delete_fact(self, user_id: str, fact_id: str) -> bool:
        """Delete one fact. Returns True if it existed."""
        return self.store.delete_fact(user_id, fact_id)

    def clear(self, user_id: str) -> None:
        """Forget every fact about a user."""
        self.store.save_user_memory(user_id, [])

    def set_language_preference(self, user_id: str, preference: LanguagePreference) -> None:
        """Store the user's language preference."""
        memory = self.store.get_user_memory(user_id)
        self.store.save_user_memory(user_id, memory.facts, preference)

    def mark_used(self, user_id: str, fact_ids: Iterable[str], now: datetime | None = None) -> int:
        """Bump use_count and last_used_at of the given facts.

        Returns:
            Number of facts updated.
        """
        ids = set(fact_ids)
        if not ids:
            return 0
        now = now or utcnow()
        memory = self.store.get_user_memory(user_id)
        updated = 0
        facts = []
        for fact in memory.facts:
            if fact.id in ids:
                fact = fact.mark_used(now)
                updated += 1
            facts.append(fact)
        if updated:
            self.store.save_user_memory(user_id, facts)
        return updated

    def format_for_prompt(self, memory: UserMemory) -> str:
        """Format memory as a block for injection into the system prompt.

        Args:
            memory: The user's memory.

        Returns:
            Markdown memory block, or empty string if there is nothing to say.
        """
        language = _LANGUAGE_INSTRUCTIONS.get(memory.language_preference, "")

        if not memory.facts:
            return f"## User Memory\n\n{language}\n\n" if language else ""

        facts = sorted(memory.facts, key=lambda f: _TIER_ORDER[f.tier])
        parts = ["## User Memory\n\n"]
        if language:
            parts.append(f"{language}\n\n")

        for category, heading in _SECTION_HEADINGS:
            lines = [f"- {f.content}" for f in facts if f.category == category]
            if lines:
                parts.append(heading + "\n" + "\n".join(lines) + "\n\n")

        parts.append(
            "Use this information to personalize responses, "
            "but don't constantly reference it unless relevant.\n"
        )
        return "".join(parts)

    def load_for_chat(self, user_id: str) -> str:
        """Format a user's memory for a chat prompt and mark it used."""
        memory = self.store.get_user_memory(user_id)
        context = self.format_for_prompt(memory)
        if memory.facts:
            self.mark_used(user_id, [f.id for f in memory.facts])
        return context

    async def process_message(
        self,
        user_id: str,
        conversation_id: str,
        messages: list[dict[str, Any]],
        last_user_message: str | None = None,
        duration: timedelta = timedelta(0),
    ) -> int:
        """Extract and save facts from a conversation when it is worth it.

        Args:
            user_id: Owner of the memory.
            conversation_id: Conversation being analyzed.
            messages: The conversation messages.
            last_user_message: Latest user message, checked for trigger keywords.
            duration: Time between the first and last message.

        Returns:
            Number of new facts saved, duplicates excluded.
        """
        if not self.extractor:
            return 0

        has_trigger = bool(last_user_message) and contains_keywords(
            last_user_message, MEMORY_TRIGGER_KEYWORDS
        )
        if has_trigger:
            logger.info("Keyword trigger detected, extracting immediately")

        if not should_extract_memory(len(messages), duration, has_trigger):
            return 0

        result = await self.extractor.extract(messages, conversation_id)
        if result.empty:
            return 0

        added = self.add_facts(user_id, result.facts) if result.facts else 0
        if result.language_preference is not None:
            self.set_language_preference(user_id, result.language_preference)
            logger.info("Updated language preference to: %s", result.language_preference.value)

        logger.info(
            "Saved %d of %d extracted facts from conversation %s",
            added,
            len(result.facts),
            conversation_id,
        )
        return added
