"""Data models for the tiered memory system."""

import math
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Iterable


class MemoryTier(str, Enum):
    """How long a fact is kept."""

    CORE = "core"  # permanent profile info
    IMPORTANT = "important"  # key preferences
    CONTEXT = "context"  # recent work/topics


class MemoryCategory(str, Enum):
    """What a fact is about."""

    PROFILE = "profile"  # name, job, interests
    PREFERENCE = "preference"
    TECHNICAL = "technical"  # tech stack, languages
    PROJECT = "project"  # current work


class LanguagePreference(str, Enum):
    """Language the user prefers to be answered in."""

    ENGLISH = "english"
    CHINESE = "chinese"
    HYBRID = "hybrid"


@dataclass(frozen=True)
class TierLimit:
    """Retention limits for a tier.

    Attributes:
        max_facts: Facts kept per user by cleanup.
        max_age_days: Days until expiry, None for never.
    """

    max_facts: int
    max_age_days: int | None


TIER_LIMITS: dict[MemoryTier, TierLimit] = {
    MemoryTier.CORE: TierLimit(max_facts=8, max_age_days=None),
    MemoryTier.IMPORTANT: TierLimit(max_facts=12, max_age_days=90),
    MemoryTier.CONTEXT: TierLimit(max_facts=6, max_age_days=30),
}

MAX_TOTAL_TOKENS = 500


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def calculate_expiry(tier: MemoryTier, created_at: datetime) -> datetime | None:
    """Expiry date for a fact of the given tier, None if it never expires."""
    days = TIER_LIMITS[MemoryTier(tier)].max_age_days
    if days is None:
        return None
    return created_at + timedelta(days=days)


@dataclass(frozen=True)
class MemoryFact:
    """A single remembered statement about a user.

    Attributes:
        id: Unique id within the user's facts.
        content: The fact, e.g. "Prefers TypeScript over JavaScript".
        category: What the fact is about.
        tier: Retention tier.
        confidence: How sure the extractor was, 0..1.
        created_at: When the fact was created.
        last_used_at: When the fact was last put into a prompt.
        use_count: How many times it was put into a prompt.
        expires_at: Expiry date, always None for CORE facts.
        auto_extracted: True if an LLM extracted it, False if user-created.
        keywords: Search keywords attached to the fact.
        source: Free-text origin ("AI analysis", "User explicitly stated").
        extracted_from: Conversation id the fact came from, if any.
    """

    id: str
    content: str
    category: MemoryCategory
    tier: MemoryTier
    confidence: float
    created_at: datetime
    last_used_at: datetime
    use_count: int = 0
    expires_at: datetime | None = None
    auto_extracted: bool = True
    keywords: frozenset[str] = field(default_factory=frozenset)
    source: str = ""
    extracted_from: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "category", MemoryCategory(self.category))
        object.__setattr__(self, "tier", MemoryTier(self.tier))
        object.__setattr__(self, "keywords", frozenset(self.keywords))
        if not 0.0 <= self.confidence <= 1.0:
            raise ValueError(f"confidence must be within [0, 1], got {self.confidence}")
        if self.tier == MemoryTier.CORE and self.expires_at is not None:
            raise ValueError("core facts never expire")
        if self.use_count < 0:
            raise ValueError("use_count cannot be negative")

    @classmethod
    def create(
        cls,
        content: str,
        category: MemoryCategory,
        tier: MemoryTier,
        confidence: float = 1.0,
        *,
        auto_extracted: bool = True,
        keywords: Iterable[str] = (),
        source: str = "",
        extracted_from: str | None = None,
        now: datetime | None = None,
    ) -> "MemoryFact":
        """Create a new fact with a fresh id and its tier's expiry."""
        created = now or utcnow()
        return cls(
            id=str(uuid.uuid4()),
            content=content,
            category=category,
            tier=tier,
            confidence=confidence,
            created_at=created,
            last_used_at=created,
            use_count=0,
            expires_at=calculate_expiry(tier, created),
            auto_extracted=auto_extracted,
            keywords=frozenset(keywords),
            source=source,
            extracted_from=extracted_from,
        )

    def is_expired(self, now: datetime | None = None) -> bool:
        """Whether the fact's expiry has passed."""
        if self.expires_at is None:
            return False
        return self.expires_at <= (now or utcnow())

    def matches_terms(self, terms: Iterable[str]) -> bool:
        """Whether any term is a case-insensitive substring of the content."""
        content = self.content.lower()
        return any(term.lower() in content for term in terms)

    def mark_used(self, now: datetime | None = None) -> "MemoryFact":
        """Copy of the fact with use_count bumped and last_used_at refreshed."""
        return replace(self, use_count=self.use_count + 1, last_used_at=now or utcnow())


def filter_by_terms(facts: Iterable[MemoryFact], terms: Iterable[str]) -> list[MemoryFact]:
    """Facts whose content contains any of the terms."""
    terms = list(terms)
    return [fact for fact in facts if fact.matches_terms(terms)]


def estimate_token_usage(facts: Iterable[MemoryFact]) -> int:
    """Rough token estimate: about four characters per token."""
    return math.ceil(sum(len(fact.content) for fact in facts) / 4)


@dataclass
class MemoryStats:
    """Aggregate numbers kept alongside a user's facts."""

    total_facts: int = 0
    token_usage: int = 0
    last_cleanup: datetime = field(default_factory=utcnow)


@dataclass
class UserMemory:
    """All facts remembered about one user."""

    user_id: str
    facts: list[MemoryFact] = field(default_factory=list)
    stats: MemoryStats = field(default_factory=MemoryStats)
    updated_at: datetime = field(default_factory=utcnow)
    language_preference: LanguagePreference | None = None

    @classmethod
    def empty(cls, user_id: str) -> "UserMemory":
        return cls(user_id=user_id)
