"""Context orchestration.

Turns a prompt analysis into the context block handed to the LLM:
    1. run the web search (if needed and within the global rate limit)
    2. retrieve matching memories (if needed)
    3. select the model
    4. assemble the context string, memory before search
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable

from ..config import ModelConfig
from ..errors import RateLimitExceededError
from ..memory.models import MemoryFact
from ..utils import best_effort
from ..web_search.base import SearchBackend
from ..web_search.models import SearchResult
from ..web_search.rate_limiter import SearchRateLimiter
from .analysis import PromptAnalysisResult

if TYPE_CHECKING:
    from ..logging import JSONLLogger
    from ..memory import MemoryManager

logger = logging.getLogger(__name__)

MEMORY_HEADER = "**User Context (from memory):**"
BLOCK_SEPARATOR = "\n---\n\n"
SEARCH_RESULT_LIMIT = 5


@dataclass
class ContextResult:
    """Prepared context and the data it was built from.

    Attributes:
        context: Text to include in the LLM prompt.
        model_name: Selected model identifier.
        web_search_results: Search results, None if no search ran, empty if it failed.
        memories_retrieved: Facts used, None if retrieval was skipped or failed.
        rate_limit_error: Denial message when the search was rate limited.
    """

    context: str
    model_name: str
    web_search_results: list[SearchResult] | None = None
    memories_retrieved: list[MemoryFact] | None = None
    rate_limit_error: str | None = None


def select_model(analysis: PromptAnalysisResult, models: ModelConfig) -> str:
    """Image model when the analysis asks for an image, main model otherwise."""
    if analysis.actions.image_generation.needed:
        return models.image
    return models.main


class ContextOrchestrator:
    """Prepares prompt context from web search and user memory."""

    def __init__(
        self,
        memory: MemoryManager,
        search: SearchBackend | None = None,
        rate_limiter: SearchRateLimiter | None = None,
        models: ModelConfig | None = None,
        event_logger: JSONLLogger | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            memory: Memory manager used for retrieval.
            search: Web search backend, None disables web search.
            rate_limiter: Global search limiter, None means unlimited.
            models: Model identifiers to choose from.
            event_logger: Optional structured event log.
        """
        self.memory = memory
        self.search = search
        self.rate_limiter = rate_limiter
        self.models = models or ModelConfig()
        self.event_logger = event_logger

    async def prepare(
        self,
        analysis: PromptAnalysisResult,
        user_id: str,
        conversation_id: str | None = None,
    ) -> ContextResult:
        """Prepare context for one chat turn.

        Sub-task failures never propagate: a failed search or memory read
        just leaves its block out of the context.

        Args:
            analysis: What the message needs.
            user_id: User for memory retrieval and usage tracking.
            conversation_id: Current conversation, used for logging.

        Returns:
            The prepared context.
        """
        start = time.monotonic()
        result = ContextResult(context="", model_name=select_model(analysis, self.models))

        web = analysis.actions.web_search
        memory = analysis.actions.memory_retrieval

        tasks: dict[str, Awaitable[Any]] = {}
        if web.needed and web.query:
            tasks["web_search"] = self._execute_web_search(user_id, web.query)
        if memory.needed:
            tasks["memory"] = self._retrieve_memories(user_id, memory.search_terms)

        outcomes = await asyncio.gather(*tasks.values(), return_exceptions=True)
        settled = dict(zip(tasks.keys(), outcomes))

        if "web_search" in settled:
            outcome = settled["web_search"]
            if isinstance(outcome, RateLimitExceededError):
                logger.warning("Web search rate limited: %s", outcome)
                result.rate_limit_error = str(outcome)
            elif isinstance(outcome, BaseException):
                logger.error("Web search failed: %s", outcome)
            else:
                result.web_search_results = outcome

        if "memory" in settled:
            outcome = settled["memory"]
            if isinstance(outcome, BaseException):
                logger.error("Memory retrieval failed: %s", outcome)
            else:
                result.memories_retrieved = outcome
                if outcome:
                    await best_effort(
                        self._mark_memories_used(user_id, [f.id for f in outcome]),
                        "memory usage update",
                    )

        result.context = self.build_context(
            result.memories_retrieved, result.web_search_results, web.query
        )

        if self.event_logger is not None:
            self.event_logger.log_context_prepared(
                result.model_name,
                user_id=user_id,
                conversation_id=conversation_id,
                duration_ms=(time.monotonic() - start) * 1000,
                search_results=_count(result.web_search_results),
                memories=_count(result.memories_retrieved),
                rate_limited=result.rate_limit_error is not None,
            )
        return result

    async def _execute_web_search(self, user_id: str, query: str) -> list[SearchResult]:
        """Search the web within the global rate limit.

        Raises:
            RateLimitExceededError: If the daily limit is reached.
        """
        if self.search is None or not self.search.is_available():
            logger.warning("Web search not configured, skipping search")
            return []

        if self.rate_limiter is not None:
            status = await self.rate_limiter.check_rate_limit()
            if not status.allowed:
                raise RateLimitExceededError(status.message or "Rate limit exceeded")

        try:
            results = await self.search.search(query, SEARCH_RESULT_LIMIT)
        except Exception as e:
            logger.error("Search error: %s", e)
            return []

        if self.rate_limiter is not None:
            await best_effort(
                self.rate_limiter.track_usage(user_id, query, len(results)),
                "search usage tracking",
            )
        return results

    async def _retrieve_memories(self, user_id: str, search_terms: list[str]) -> list[MemoryFact]:
        """Load the user's facts, filtered by search terms if any."""
        return self.memory.retrieve(user_id, search_terms or None)

    async def _mark_memories_used(self, user_id: str, fact_ids: list[str]) -> None:
        self.memory.mark_used(user_id, fact_ids)

    def build_context(
        self,
        memories: list[MemoryFact] | None,
        web_results: list[SearchResult] | None,
        query: str | None,
    ) -> str:
        """Assemble the context string: memory block first, then search block."""
        parts = []

        if memories:
            parts.append(f"{MEMORY_HEADER}\n\n")
            parts.extend(f"- {fact.content}\n" for fact in memories)
            parts.append(BLOCK_SEPARATOR)

        if web_results and query and self.search is not None:
            parts.append(self.search.format_results_for_ai(web_results, query))
            parts.append(BLOCK_SEPARATOR)

        return "".join(parts)

    def format_source_citations(self, web_results: list[SearchResult] | None) -> str:
        """Source list to append to the assistant's reply."""
        if not web_results or self.search is None:
            return ""
        return self.search.format_results_for_user(web_results)


def _count(items: list[Any] | None) -> int | None:
    return len(items) if items is not None else None
