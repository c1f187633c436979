"""Per-message preparation: keyword triggers, then context."""

import logging
from dataclasses import dataclass, field
from typing import Any

from .context import ContextOrchestrator, ContextResult, PromptAnalysisResult, analysis_from_keywords
from .keywords import KeywordContext, KeywordDispatcher, KeywordMatchResult
from .keywords.base import trigger_key

logger = logging.getLogger(__name__)


@dataclass
class PreparedTurn:
    """Everything computed for an incoming message before the LLM call."""

    matches: list[KeywordMatchResult]
    trigger_results: dict[Any, Any]
    context: ContextResult
    analysis: PromptAnalysisResult
    errors: list[str] = field(default_factory=list)


class ChatTurnPreparer:
    """Runs the keyword dispatcher and the context orchestrator for a message."""

    def __init__(self, dispatcher: KeywordDispatcher, orchestrator: ContextOrchestrator) -> None:
        self.dispatcher = dispatcher
        self.orchestrator = orchestrator

    async def prepare(
        self,
        message: str,
        user_id: str,
        conversation_id: str | None = None,
        analysis: PromptAnalysisResult | None = None,
        **extra: Any,
    ) -> PreparedTurn:
        """Prepare one chat turn.

        Args:
            message: The incoming user message.
            user_id: Sender.
            conversation_id: Conversation the message belongs to.
            analysis: LLM analysis of the message; keyword analysis if None.
            **extra: Additional context fields passed to trigger actions.

        Returns:
            Trigger outcomes and the prepared context.
        """
        matches = self.dispatcher.check(message)
        context = KeywordContext(
            message=message,
            user_id=user_id,
            conversation_id=conversation_id,
            extra=extra,
        )
        trigger_results = await self.dispatcher.execute_all(matches, context)

        errors = [
            f"{trigger_key(key)}: {value['error']}"
            for key, value in trigger_results.items()
            if isinstance(value, dict) and isinstance(value.get("error"), BaseException)
        ]
        if errors:
            logger.warning("%d trigger action(s) failed: %s", len(errors), "; ".join(errors))

        if analysis is None:
            analysis = analysis_from_keywords(matches, message)

        prepared = await self.orchestrator.prepare(analysis, user_id, conversation_id)
        return PreparedTurn(
            matches=matches,
            trigger_results=trigger_results,
            context=prepared,
            analysis=analysis,
            errors=errors,
        )
