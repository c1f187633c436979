"""Google Custom Search backend.

Setup:
    1. Enable "Custom Search API" for a Google Cloud project.
    2. Create a Programmable Search Engine that searches the entire web.
    3. Set GOOGLE_SEARCH_API_KEY and GOOGLE_SEARCH_ENGINE_ID.

Free tier: 100 queries/day. Paid tier: $5 per 1,000 queries.
"""

import logging
import os
from typing import Any

import httpx

from ..errors import SearchUnavailableError
from .base import SearchBackend
from .models import SearchResult

logger = logging.getLogger(__name__)

GOOGLE_SEARCH_API_URL = "https://www.googleapis.com/customsearch/v1"
MAX_RESULTS = 10


class GoogleSearchService(SearchBackend):
    """Searches the web through the Google Custom Search JSON API."""

    def __init__(
        self,
        api_key: str | None = None,
        engine_id: str | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            api_key: API key, defaults to GOOGLE_SEARCH_API_KEY.
            engine_id: Search engine id, defaults to GOOGLE_SEARCH_ENGINE_ID.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        self.api_key = api_key if api_key is not None else os.getenv("GOOGLE_SEARCH_API_KEY", "")
        self.engine_id = (
            engine_id if engine_id is not None else os.getenv("GOOGLE_SEARCH_ENGINE_ID", "")
        )
        self._timeout = timeout
        self._transport = transport

        if not self.is_available():
            logger.warning("Google Search credentials not configured, web search disabled")

    @property
    def name(self) -> str:
        return "google"

    def is_available(self) -> bool:
        return bool(self.api_key and self.engine_id)

    async def search(self, query: str, limit: int = 5) -> list[SearchResult]:
        """Search the web.

        Args:
            query: The search query.
            limit: Number of results, clamped to 1..10.

        Returns:
            The results, possibly empty.

        Raises:
            SearchUnavailableError: If credentials are missing.
            ValueError: If the query is empty.
            httpx.HTTPError: If the API call fails.
        """
        if not self.is_available():
            raise SearchUnavailableError(
                "Google Search API is not configured. Set GOOGLE_SEARCH_API_KEY "
                "and GOOGLE_SEARCH_ENGINE_ID."
            )
        if not query or not query.strip():
            raise ValueError("Search query cannot be empty")

        num = min(max(1, limit), MAX_RESULTS)
        params = {"key": self.api_key, "cx": self.engine_id, "q": query, "num": str(num)}

        logger.info('Searching for: "%s" (%d results)', query, num)

        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.get(GOOGLE_SEARCH_API_URL, params=params)

        if response.is_error:
            logger.error("Google Search API error %d: %s", response.status_code, response.text)
            response.raise_for_status()

        data: dict[str, Any] = response.json()
        items = data.get("items") or []
        if not items:
            logger.info('No results found for: "%s"', query)
            return []

        logger.info("Found %d results", len(items))
        return [
            SearchResult(
                title=item.get("title", ""),
                link=item.get("link", ""),
                snippet=item.get("snippet", ""),
                display_link=item.get("displayLink", ""),
            )
            for item in items
        ]
