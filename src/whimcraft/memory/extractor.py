"""Fact extraction from conversations using an LLM."""

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

from groq import AsyncGroq

from .models import LanguagePreference, MemoryCategory, MemoryFact, MemoryTier

logger = logging.getLogger(__name__)

MIN_CONFIDENCE = 0.6
MIN_MESSAGES = 5
MIN_DURATION = timedelta(minutes=2)

EXTRACTION_PROMPT = """You are a memory extraction system. Analyze this conversation and extract ONLY important, lasting facts about the user.

RULES:
1. Extract personal facts, strong preferences, and ongoing projects
2. DO NOT extract: one-time questions, general knowledge, exploratory topics, hypothetical discussions
3. Be selective - only extract facts worth remembering long-term (3-6 months)
4. Assign confidence: 1.0 = certain, 0.7 = likely, 0.5 = possible
5. Only return facts with confidence >= 0.6

CATEGORIES:
- profile: Name, occupation, location, family, interests, background
- preference: Strong likes/dislikes, work style, communication preferences, habits
- technical: Programming languages, tools, frameworks, tech stack, methodologies
- project: Current work, ongoing projects, goals, challenges

TIERS (retention period):
- core: Permanent facts (profile information, fundamental preferences) - never expires
- important: Long-term preferences and technical info - 90 days
- context: Current projects and temporary context - 30 days

LANGUAGE PREFERENCE DETECTION:
- "english": User primarily uses English
- "chinese": User primarily uses Chinese (中文)
- "hybrid": User mixes both English and Chinese
If you cannot determine, set to null.

Return ONLY valid JSON in this exact format:
{
  "facts": [
    {
      "content": "Brief, clear statement (e.g., 'Prefers TypeScript over JavaScript')",
      "category": "profile|preference|technical|project",
      "confidence": 0.6-1.0,
      "tier": "core|important|context"
    }
  ],
  "language_preference": "english|chinese|hybrid|null"
}

Return an empty facts array if nothing important to extract.

CONVERSATION:
"""

_FENCED_JSON = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL)


@dataclass
class ExtractionResult:
    """Facts and language preference found in a conversation."""

    facts: list[MemoryFact] = field(default_factory=list)
    language_preference: LanguagePreference | None = None

    @property
    def empty(self) -> bool:
        return not self.facts and self.language_preference is None


def should_extract_memory(
    message_count: int,
    duration: timedelta,
    has_keyword_trigger: bool = False,
) -> bool:
    """Decide whether a conversation is worth extracting facts from.

    A keyword trigger extracts immediately; otherwise the conversation must
    have at least MIN_MESSAGES messages spanning MIN_DURATION.
    """
    if has_keyword_trigger:
        return True
    return message_count >= MIN_MESSAGES and duration >= MIN_DURATION


class FactExtractor:
    """Extracts tiered facts from conversations using an LLM."""

    def __init__(
        self,
        llm_client: AsyncGroq,
        model: str = "llama-3.1-70b-versatile",
    ) -> None:
        """Initialize the extractor.

        Args:
            llm_client: The Groq client for LLM calls.
            model: The model to use for extraction.
        """
        self.client = llm_client
        self.model = model

    async def extract(
        self,
        messages: list[dict[str, Any]],
        conversation_id: str | None = None,
    ) -> ExtractionResult:
        """Extract facts from a conversation.

        Args:
            messages: The conversation messages to analyze.
            conversation_id: Recorded on each fact as its origin.

        Returns:
            Extracted facts, empty on error.
        """
        if not messages:
            return ExtractionResult()

        full_prompt = EXTRACTION_PROMPT + self._format_conversation(messages)

        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": full_prompt}],
                temperature=0.1,
            )
            content = response.choices[0].message.content or ""
        except Exception as e:
            logger.warning("Fact extraction failed: %s", e)
            return ExtractionResult()

        return self._parse_response(content, conversation_id)

    def _format_conversation(self, messages: list[dict[str, Any]]) -> str:
        """Format messages into a readable conversation string."""
        lines = []
        for msg in messages:
            role = msg.get("role", "unknown")
            content = msg.get("content", "")
            if role == "user":
                lines.append(f"User: {content}")
            elif role == "assistant":
                lines.append(f"Assistant: {content}")
        return "\n\n".join(lines)

    def _parse_response(self, content: str, conversation_id: str | None = None) -> ExtractionResult:
        """Parse the LLM response into facts.

        Args:
            content: The raw LLM response, optionally wrapped in a code fence.
            conversation_id: Origin recorded on each fact.

        Returns:
            Parsed result, empty on parse error.
        """
        match = _FENCED_JSON.search(content)
        json_str = match.group(1) if match else content.strip()

        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            logger.warning("Failed to parse extraction response: %s", e)
            return ExtractionResult()

        if not isinstance(data, dict) or not isinstance(data.get("facts"), list):
            logger.warning("Invalid response structure: missing 'facts' list")
            return ExtractionResult()

        facts = []
        for item in data["facts"]:
            fact = self._parse_fact(item, conversation_id)
            if fact is not None:
                facts.append(fact)
            else:
                logger.debug("Skipping invalid fact item: %s", item)

        language_preference = None
        try:
            if data.get("language_preference"):
                language_preference = LanguagePreference(data["language_preference"])
        except ValueError:
            logger.debug("Ignoring unknown language preference: %s", data["language_preference"])

        return ExtractionResult(facts=facts, language_preference=language_preference)

    def _parse_fact(self, item: Any, conversation_id: str | None) -> MemoryFact | None:
        if not isinstance(item, dict):
            return None
        content = item.get("content")
        confidence = item.get("confidence")
        if not isinstance(content, str) or not content.strip():
            return None
        if isinstance(confidence, bool) or not isinstance(confidence, (int, float)):
            return None
        if not MIN_CONFIDENCE <= confidence <= 1.0:
            return None
        try:
            category = MemoryCategory(item.get("category"))
            tier = MemoryTier(item.get("tier"))
        except ValueError:
            return None

        return MemoryFact.create(
            content.strip(),
            category,
            tier,
            float(confidence),
            auto_extracted=True,
            source="AI analysis",
            extracted_from=conversation_id,
        )
