"""Search backend interface."""

from abc import ABC, abstractmethod

from .models import SearchResult


class SearchBackend(ABC):
    """Base interface for web search providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name, used in logs."""
        ...

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the provider is configured."""
        ...

    @abstractmethod
    async def search(self, query: str, limit: int = 5) -> list[SearchResult]:
        """Search the web.

        Raises:
            SearchUnavailableError: If the provider is not configured.
            ValueError: If the query is empty.
        """
        ...

    def format_results_for_ai(self, results: list[SearchResult], query: str) -> str:
        """Format results as markdown for the LLM context."""
        if not results:
            return f'No search results found for "{query}".'

        lines = [f'**Web Search Results for "{query}":**', ""]
        for i, result in enumerate(results, 1):
            lines.append(f"{i}. **{result.title}**")
            lines.append(f"   {result.snippet}")
            lines.append(f"   Source: {result.display_link}")
            lines.append("")

        return "\n".join(lines) + "\n"

    def format_results_for_user(self, results: list[SearchResult]) -> str:
        """Format results as source citations appended to a reply."""
        if not results:
            return ""

        lines = ["", "", "**Sources:**"]
        for i, result in enumerate(results, 1):
            lines.append(f"{i}. [{result.title}]({result.link})")

        return "\n".join(lines) + "\n"
