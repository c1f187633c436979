"""Web search backend using the Tavily API."""

import logging
import os
from typing import Any
from urllib.parse import urlparse

from tavily import AsyncTavilyClient

from ..errors import SearchUnavailableError
from .base import SearchBackend
from .models import SearchResult

logger = logging.getLogger(__name__)


class TavilySearchService(SearchBackend):
    """Search backend for Tavily, an API tuned for LLM agents.

    Tavily returns clean snippets instead of raw HTML, which makes it a
    drop-in alternative to Google Custom Search.
    """

    def __init__(
        self,
        api_key: str | None = None,
        search_depth: str = "basic",
        client: AsyncTavilyClient | None = None,
    ) -> None:
        """Initialize the backend.

        Args:
            api_key: API key, defaults to TAVILY_API_KEY.
            search_depth: "basic" for fast results, "advanced" for deeper search.
            client: Pre-built client (used by tests).
        """
        self.api_key = api_key if api_key is not None else os.getenv("TAVILY_API_KEY", "")
        self._search_depth = search_depth
        self._client = client

    @property
    def name(self) -> str:
        return "tavily"

    def is_available(self) -> bool:
        return self._client is not None or bool(self.api_key)

    def _get_client(self) -> AsyncTavilyClient:
        """Get or create the Tavily async client."""
        if self._client is None:
            if not self.api_key:
                raise SearchUnavailableError("TAVILY_API_KEY environment variable is required")
            self._client = AsyncTavilyClient(api_key=self.api_key)
        return self._client

    async def search(self, query: str, limit: int = 5) -> list[SearchResult]:
        if not query or not query.strip():
            raise ValueError("Search query cannot be empty")

        client = self._get_client()
        response: dict[str, Any] = await client.search(
            query=query.strip(),
            search_depth=self._search_depth,
            max_results=min(max(1, limit), 20),
        )

        results = []
        for item in response.get("results", []):
            url = item.get("url", "")
            results.append(
                SearchResult(
                    title=item.get("title", "No title"),
                    link=url,
                    snippet=item.get("content", ""),
                    display_link=_display_link(url),
                )
            )
        logger.info("Tavily returned %d results", len(results))
        return results


def _display_link(url: str) -> str:
    """Host part of a URL, the way search engines show it."""
    host = urlparse(url).hostname or ""
    return host.removeprefix("www.")
