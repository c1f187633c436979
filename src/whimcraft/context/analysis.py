"""Prompt analysis results consumed by the context orchestrator.

The analysis itself comes from an LLM call outside this package, or from
analysis_from_keywords() when no model analysis is available.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..keywords.base import KeywordMatchResult, KeywordTriggerType, trigger_key


class UserIntent(str, Enum):
    """Primary intent of a user message."""

    QUESTION = "question"
    IMAGE_GENERATION = "image_generation"
    CASUAL_CHAT = "casual_chat"
    COMMAND = "command"


@dataclass
class WebSearchAction:
    needed: bool = False
    query: str | None = None
    reason: str | None = None


@dataclass
class MemoryRetrievalAction:
    needed: bool = False
    search_terms: list[str] = field(default_factory=list)


@dataclass
class MemoryExtractionRequest:
    needed: bool = False
    trigger: str = "implicit"  # "explicit" when the user asked to remember


@dataclass
class ImageGenerationAction:
    needed: bool = False
    description: str | None = None


@dataclass
class PromptActions:
    """All actions an analysis may ask for; several can be needed at once."""

    web_search: WebSearchAction = field(default_factory=WebSearchAction)
    memory_retrieval: MemoryRetrievalAction = field(default_factory=MemoryRetrievalAction)
    memory_extraction: MemoryExtractionRequest = field(default_factory=MemoryExtractionRequest)
    image_generation: ImageGenerationAction = field(default_factory=ImageGenerationAction)


@dataclass
class PromptAnalysisResult:
    """What a message needs before it is sent to the LLM."""

    intent: UserIntent = UserIntent.CASUAL_CHAT
    actions: PromptActions = field(default_factory=PromptActions)
    language: str = "english"
    confidence: float = 0.0
    reasoning: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PromptAnalysisResult":
        """Build from the JSON shape returned by the analysis model.

        Unknown keys are ignored and missing sections default to "not needed".
        """
        actions = data.get("actions") or {}
        web = actions.get("web_search") or {}
        memory = actions.get("memory_retrieval") or {}
        extraction = actions.get("memory_extraction") or {}
        image = actions.get("image_generation") or {}

        try:
            intent = UserIntent(data.get("intent", UserIntent.CASUAL_CHAT))
        except ValueError:
            intent = UserIntent.QUESTION

        return cls(
            intent=intent,
            actions=PromptActions(
                web_search=WebSearchAction(
                    needed=bool(web.get("needed", False)),
                    query=web.get("query") or None,
                    reason=web.get("reason"),
                ),
                memory_retrieval=MemoryRetrievalAction(
                    needed=bool(memory.get("needed", False)),
                    search_terms=[str(t) for t in memory.get("search_terms") or []],
                ),
                memory_extraction=MemoryExtractionRequest(
                    needed=bool(extraction.get("needed", False)),
                    trigger=extraction.get("trigger", "implicit"),
                ),
                image_generation=ImageGenerationAction(
                    needed=bool(image.get("needed", False)),
                    description=image.get("description") or image.get("prompt"),
                ),
            ),
            language=data.get("language", "english"),
            confidence=float(data.get("confidence", 0.0)),
            reasoning=data.get("reasoning"),
        )


def analysis_from_keywords(results: list[KeywordMatchResult], message: str) -> PromptAnalysisResult:
    """Keyword-only analysis used when no model analysis is available.

    Memory is always loaded in full; an image trigger match selects image
    generation; web search is never requested.
    """
    matched = {trigger_key(r.type) for r in results if r.matched}
    wants_image = KeywordTriggerType.INTENTION_IMAGE_GENERATION.value in matched
    wants_memory = KeywordTriggerType.MEMORY_GENERAL.value in matched

    return PromptAnalysisResult(
        intent=UserIntent.IMAGE_GENERATION if wants_image else UserIntent.CASUAL_CHAT,
        actions=PromptActions(
            memory_retrieval=MemoryRetrievalAction(needed=True),
            memory_extraction=MemoryExtractionRequest(
                needed=wants_memory, trigger="explicit" if wants_memory else "implicit"
            ),
            image_generation=ImageGenerationAction(
                needed=wants_image, description=message if wants_image else None
            ),
        ),
        confidence=1.0 if matched else 0.5,
        reasoning="keyword analysis",
    )
