"""Memory cleanup: expiry, per-tier limits and token budget."""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import TYPE_CHECKING

from .models import (
    MAX_TOTAL_TOKENS,
    TIER_LIMITS,
    MemoryFact,
    MemoryTier,
    estimate_token_usage,
    utcnow,
)

if TYPE_CHECKING:
    from .store import MemoryStore

logger = logging.getLogger(__name__)


def days_between(first: datetime, second: datetime) -> int:
    """Whole days between two dates, rounded up."""
    return math.ceil(abs((second - first).total_seconds()) / 86400)


def remove_expired_facts(facts: list[MemoryFact], now: datetime | None = None) -> list[MemoryFact]:
    """Drop facts whose expiry has passed. Core facts are always kept."""
    now = now or utcnow()
    return [fact for fact in facts if not fact.is_expired(now)]


def calculate_importance_score(fact: MemoryFact, now: datetime | None = None) -> float:
    """Score a fact out of 100: confidence 40, recency 30, usage 30."""
    now = now or utcnow()
    confidence_score = fact.confidence * 40
    recency_score = max(0.0, 30 - days_between(fact.created_at, now) / 3)
    usage_score = min(fact.use_count * 3, 30)
    return confidence_score + recency_score + usage_score


def sort_by_importance(facts: list[MemoryFact], now: datetime | None = None) -> list[MemoryFact]:
    """Facts sorted most important first."""
    now = now or utcnow()
    return sorted(facts, key=lambda f: calculate_importance_score(f, now), reverse=True)


def enforce_tier_limits(facts: list[MemoryFact], now: datetime | None = None) -> list[MemoryFact]:
    """Keep the most important facts of each tier up to its limit."""
    by_tier: dict[MemoryTier, list[MemoryFact]] = {tier: [] for tier in MemoryTier}
    for fact in facts:
        by_tier.get(fact.tier, by_tier[MemoryTier.CONTEXT]).append(fact)

    kept: list[MemoryFact] = []
    for tier, tier_facts in by_tier.items():
        limit = TIER_LIMITS[tier].max_facts
        kept.extend(sort_by_importance(tier_facts, now)[:limit])
    return kept


def enforce_token_budget(
    facts: list[MemoryFact],
    budget: int = MAX_TOTAL_TOKENS,
    now: datetime | None = None,
) -> list[MemoryFact]:
    """Prune the least important non-core facts until the budget fits."""
    result: list[MemoryFact] = []
    tokens = 0

    for fact in sort_by_importance(facts, now):
        fact_tokens = math.ceil(len(fact.content) / 4)
        if fact.tier == MemoryTier.CORE or tokens + fact_tokens <= budget:
            result.append(fact)
            tokens += fact_tokens

    return result


def cleanup_facts(
    facts: list[MemoryFact],
    now: datetime | None = None,
    token_budget: int = MAX_TOTAL_TOKENS,
) -> list[MemoryFact]:
    """Run expiry, tier limits and token budget in that order."""
    now = now or utcnow()
    cleaned = remove_expired_facts(facts, now)
    cleaned = enforce_tier_limits(cleaned, now)
    if estimate_token_usage(cleaned) > token_budget:
        cleaned = enforce_token_budget(cleaned, token_budget, now)
    return cleaned


def cleanup_user_memory(store: MemoryStore, user_id: str, now: datetime | None = None) -> int:
    """Clean a user's stored memory.

    Args:
        store: The fact store.
        user_id: User whose memory to clean.
        now: Reference time, defaults to the current time.

    Returns:
        Number of facts removed.
    """
    memory = store.get_user_memory(user_id)
    cleaned = cleanup_facts(memory.facts, now)
    removed = len(memory.facts) - len(cleaned)

    # language preference must survive the rewrite
    store.save_user_memory(user_id, cleaned, memory.language_preference, now=now)

    if removed:
        logger.info("Removed %d facts from memory of %s", removed, user_id)
    return removed
