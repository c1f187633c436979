"""Global rate limiter for web search.

Limits apply to ALL users combined over a rolling 24 hours:
- daily_limit searches per day (default 100, Google's free tier)
- the first free_daily_limit searches are free, each one after costs
  cost_per_search cents ($5 per 1,000 queries by default)

If the usage count cannot be read the limiter fails open and allows the
search; search cost is then unbounded until the usage store recovers.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Callable

from .models import GlobalSearchStats, RateLimitStatus, SearchUsage
from .usage_store import SearchUsageStore

if TYPE_CHECKING:
    from ..logging import JSONLLogger

logger = logging.getLogger(__name__)

WINDOW = timedelta(hours=24)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SearchRateLimiter:
    """Counts recent searches against fixed daily thresholds."""

    def __init__(
        self,
        store: SearchUsageStore,
        daily_limit: int = 100,
        free_daily_limit: int = 100,
        cost_per_search: float = 0.5,
        clock: Callable[[], datetime] = _utcnow,
        event_logger: JSONLLogger | None = None,
    ) -> None:
        """Initialize the limiter.

        Args:
            store: Usage log to count against.
            daily_limit: Searches allowed per 24 hours, all users combined.
            free_daily_limit: Searches per 24 hours that cost nothing.
            cost_per_search: Cents charged per search beyond the free tier.
            clock: Returns the current time.
            event_logger: Optional structured event log.
        """
        self.store = store
        self.daily_limit = daily_limit
        self.free_daily_limit = free_daily_limit
        self.cost_per_search = cost_per_search
        self.clock = clock
        self.event_logger = event_logger

    async def check_rate_limit(self) -> RateLimitStatus:
        """Check whether another search fits in the global daily limit."""
        since = self.clock() - WINDOW

        try:
            daily_count = self.store.count_since(since)
        except Exception as e:
            logger.error("Error checking rate limit, allowing search: %s", e)
            return RateLimitStatus(allowed=True, daily_remaining=self.daily_limit)

        if daily_count >= self.daily_limit:
            return RateLimitStatus(
                allowed=False,
                daily_remaining=0,
                message=(
                    f"Global daily search limit reached ({self.daily_limit} searches/day "
                    "for all users). Please try again tomorrow."
                ),
            )

        return RateLimitStatus(allowed=True, daily_remaining=self.daily_limit - daily_count)

    async def track_usage(self, user_id: str, query: str, results_count: int) -> None:
        """Record a search. Never raises; a lost record must not block search.

        Args:
            user_id: User who searched (for analytics).
            query: The search query.
            results_count: Number of results returned.
        """
        try:
            now = self.clock()
            global_count = self.store.count_since(now - WINDOW)
            cost_estimate = 0.0 if global_count < self.free_daily_limit else self.cost_per_search

            self.store.add(
                SearchUsage(
                    user_id=user_id,
                    query=query,
                    results_count=results_count,
                    timestamp=now,
                    cost_estimate=cost_estimate,
                )
            )
            if self.event_logger is not None:
                self.event_logger.log_search_usage(
                    query, results_count, cost_estimate, user_id=user_id
                )
        except Exception as e:
            logger.error("Error tracking search usage: %s", e)
            return

        logger.info(
            'Tracked: %s - "%s" (%d results, global: %d/%d, $%.3f)',
            user_id,
            query,
            results_count,
            global_count + 1,
            self.daily_limit,
            cost_estimate / 100,
        )

    async def get_global_stats(self) -> GlobalSearchStats:
        """Searches and cost over the last 24 hours, all users combined."""
        try:
            records = self.store.list_since(self.clock() - WINDOW)
        except Exception as e:
            logger.error("Error getting global search stats: %s", e)
            return GlobalSearchStats(
                searches_today=0, daily_remaining=self.daily_limit, total_cost=0.0
            )

        return GlobalSearchStats(
            searches_today=len(records),
            daily_remaining=max(0, self.daily_limit - len(records)),
            total_cost=sum(r.cost_estimate for r in records),
        )
