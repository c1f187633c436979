"""Data models for web search and its usage accounting."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class SearchResult:
    """One web search hit."""

    title: str
    link: str
    snippet: str
    display_link: str


@dataclass(frozen=True)
class SearchUsage:
    """An append-only record of one search.

    Attributes:
        user_id: Who searched (for analytics; limits are global).
        query: The search query.
        results_count: Number of results returned.
        timestamp: When the search ran.
        cost_estimate: Estimated cost in cents.
    """

    user_id: str
    query: str
    results_count: int
    timestamp: datetime
    cost_estimate: float


@dataclass(frozen=True)
class RateLimitStatus:
    """Answer from the rate limiter."""

    allowed: bool
    daily_remaining: int
    message: str | None = None


@dataclass(frozen=True)
class GlobalSearchStats:
    """Search totals over the last 24 hours, all users combined."""

    searches_today: int
    daily_remaining: int
    total_cost: float  # cents
