"""Default keyword triggers and their actions.

build_default_registry() is called once at start-up; the frozen registry
it returns is shared by every dispatcher.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from .base import KeywordContext, KeywordTrigger, KeywordTriggerType, TriggerAction
from .config import IMAGE_GENERATION_KEYWORDS, MEMORY_TRIGGER_KEYWORDS
from .registry import TriggerRegistry

if TYPE_CHECKING:
    from ..memory import MemoryManager

logger = logging.getLogger(__name__)


class MemoryExtractionAction(TriggerAction):
    """Extracts facts as soon as the user says something worth remembering.

    Reads optional "messages" (conversation history) and "duration"
    (timedelta) from the context's extra fields; the message alone is used
    when no history is supplied.
    """

    def __init__(self, memory: MemoryManager) -> None:
        self.memory = memory

    async def run(self, context: KeywordContext) -> dict[str, Any]:
        if not context.conversation_id or not context.user_id:
            logger.warning("Missing conversation_id or user_id for memory extraction")
            return {"success": False, "reason": "Missing required context"}

        messages = context.extra.get("messages") or [
            {"role": "user", "content": context.message}
        ]
        duration = context.extra.get("duration", timedelta(0))

        logger.info("Keyword detected, extracting memory...")
        try:
            facts_extracted = await self.memory.process_message(
                context.user_id,
                context.conversation_id,
                messages,
                last_user_message=context.message,
                duration=duration,
            )
        except Exception as e:
            logger.error("Error processing memory: %s", e)
            return {"success": False, "error": str(e)}

        return {"success": True, "facts_extracted": facts_extracted}


class ImageIntentAction(TriggerAction):
    """Flags an image generation request; generation itself happens elsewhere."""

    async def run(self, context: KeywordContext) -> dict[str, Any]:
        logger.info("Image generation request detected")
        return {
            "success": True,
            "detected": True,
            "message": "Image generation request detected",
        }


def build_default_registry(memory: MemoryManager | None = None) -> TriggerRegistry:
    """Build the start-up trigger registry.

    Args:
        memory: Memory manager used by the extraction trigger. Without it the
            memory trigger is still registered for detection, with no action.

    Returns:
        A frozen registry.
    """
    registry = TriggerRegistry()

    registry.register(
        KeywordTrigger(
            type=KeywordTriggerType.MEMORY_GENERAL,
            keywords=MEMORY_TRIGGER_KEYWORDS,
            description="Triggers immediate memory extraction from conversation",
            action=MemoryExtractionAction(memory) if memory is not None else None,
        )
    )
    registry.register(
        KeywordTrigger(
            type=KeywordTriggerType.INTENTION_IMAGE_GENERATION,
            keywords=IMAGE_GENERATION_KEYWORDS,
            description="Detects requests for image generation",
            action=ImageIntentAction(),
        )
    )

    return registry.freeze()
