"""Checks messages against registered triggers and runs their actions."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from .base import (
    KeywordCategory,
    KeywordContext,
    KeywordMatchResult,
    TriggerType,
    category_for,
    trigger_key,
)
from .matcher import get_matched_keywords
from .registry import TriggerRegistry

if TYPE_CHECKING:
    from ..logging import JSONLLogger

logger = logging.getLogger(__name__)


class KeywordDispatcher:
    """Dispatches keyword triggers from a shared registry.

    Usage:
        1. check() a message against every registered trigger
        2. execute() one trigger, or execute_all() for every match
    """

    def __init__(
        self,
        registry: TriggerRegistry,
        event_logger: JSONLLogger | None = None,
    ) -> None:
        self.registry = registry
        self.event_logger = event_logger

    def check(self, message: str) -> list[KeywordMatchResult]:
        """Check a message against all registered triggers.

        Returns one result per registered trigger, including non-matches,
        so callers can see why nothing fired.
        """
        results = []
        for trigger in self.registry.all():
            matched_keywords = get_matched_keywords(message, trigger.keywords)
            results.append(
                KeywordMatchResult(
                    type=trigger.type,
                    matched=bool(matched_keywords),
                    matched_keywords=matched_keywords,
                )
            )
        return results

    @staticmethod
    def matched_types(results: list[KeywordMatchResult]) -> list[TriggerType]:
        """Types of the matched results."""
        return [r.type for r in results if r.matched]

    async def execute(self, trigger_type: TriggerType, context: KeywordContext) -> Any:
        """Run the action of a single trigger.

        Returns None without running anything when the type is unknown or
        has no action. Errors raised by the action propagate.
        """
        key = trigger_key(trigger_type)
        trigger = self.registry.get(trigger_type)

        if trigger is None:
            logger.warning("No trigger registered for type: %s", key)
            return None

        if trigger.action is None:
            logger.warning("No action defined for trigger: %s", key)
            return None

        logger.info("Executing action for trigger: %s", key)
        start = time.monotonic()
        try:
            result = await trigger.action.run(context)
        except Exception as e:
            logger.error("Error executing action for %s: %s", key, e)
            self._log_event(key, context, start, error=e)
            raise

        self._log_event(key, context, start)
        return result

    async def execute_all(
        self,
        results: list[KeywordMatchResult],
        context: KeywordContext,
    ) -> dict[TriggerType, Any]:
        """Run the actions of every matched trigger, one after another.

        A failing action is recorded as {"error": exc} and does not stop
        the remaining actions.
        """
        execution_results: dict[TriggerType, Any] = {}

        for result in results:
            if not result.matched:
                continue
            try:
                execution_results[result.type] = await self.execute(result.type, context)
            except Exception as e:
                logger.error("Failed to execute %s: %s", trigger_key(result.type), e)
                execution_results[result.type] = {"error": e}

        return execution_results

    def get_category(self, trigger_type: TriggerType) -> KeywordCategory | None:
        """Category of a trigger type, None if unclassified."""
        trigger = self.registry.get(trigger_type)
        if trigger is not None:
            return trigger.category
        return category_for(trigger_type)

    def matched_by_category(
        self,
        results: list[KeywordMatchResult],
        category: KeywordCategory,
    ) -> list[KeywordMatchResult]:
        """Matched results whose trigger belongs to a category."""
        return [r for r in results if r.matched and self.get_category(r.type) == category]

    def has_category_match(
        self,
        results: list[KeywordMatchResult],
        category: KeywordCategory,
    ) -> bool:
        """Check if any trigger in a category matched."""
        return bool(self.matched_by_category(results, category))

    def _log_event(
        self,
        key: str,
        context: KeywordContext,
        start: float,
        error: Exception | None = None,
    ) -> None:
        if self.event_logger is None:
            return
        self.event_logger.log_trigger(
            key,
            error is None,
            user_id=context.user_id,
            conversation_id=context.conversation_id,
            duration_ms=(time.monotonic() - start) * 1000,
            error=str(error) if error is not None else None,
        )
