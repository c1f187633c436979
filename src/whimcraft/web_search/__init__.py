"""Web search backends and global search rate limiting."""

from .base import SearchBackend
from .google import GoogleSearchService
from .models import GlobalSearchStats, RateLimitStatus, SearchResult, SearchUsage
from .rate_limiter import SearchRateLimiter
from .tavily import TavilySearchService
from .usage_store import SearchUsageStore

__all__ = [
    "GlobalSearchStats",
    "GoogleSearchService",
    "RateLimitStatus",
    "SearchBackend",
    "SearchRateLimiter",
    "SearchResult",
    "SearchUsage",
    "SearchUsageStore",
    "TavilySearchService",
]
