"""Tests for prompt analysis results."""

from whimcraft.context import (
    MemoryExtractionRequest,
    PromptAnalysisResult,
    UserIntent,
    analysis_from_keywords,
)
from whimcraft.keywords import KeywordMatchResult, KeywordTriggerType, MemoryExtractionAction


def match(trigger_type, matched: bool) -> KeywordMatchResult:
    return KeywordMatchResult(trigger_type, matched, ["kw"] if matched else [])


class TestFromDict:
    """Tests for PromptAnalysisResult.from_dict."""

    def test_full_payload(self):
        result = PromptAnalysisResult.from_dict(
            {
                "intent": "question",
                "actions": {
                    "web_search": {"needed": True, "query": "bitcoin price", "reason": "live data"},
                    "memory_retrieval": {"needed": True, "search_terms": ["crypto"]},
                    "memory_extraction": {"needed": False},
                    "image_generation": {"needed": False},
                },
                "language": "chinese",
                "confidence": 0.85,
                "reasoning": "asks for current price",
            }
        )

        assert result.intent == UserIntent.QUESTION
        assert result.actions.web_search.needed
        assert result.actions.web_search.query == "bitcoin price"
        assert result.actions.memory_retrieval.search_terms == ["crypto"]
        assert not result.actions.image_generation.needed
        assert result.language == "chinese"
        assert result.confidence == 0.85

    def test_missing_sections_default_to_not_needed(self):
        result = PromptAnalysisResult.from_dict({})

        assert result.intent == UserIntent.CASUAL_CHAT
        assert not result.actions.web_search.needed
        assert result.actions.web_search.query is None
        assert not result.actions.memory_retrieval.needed

    def test_unknown_intent(self):
        assert PromptAnalysisResult.from_dict({"intent": "dance"}).intent == UserIntent.QUESTION

    def test_image_prompt_alias(self):
        result = PromptAnalysisResult.from_dict(
            {"actions": {"image_generation": {"needed": True, "prompt": "a red fox"}}}
        )
        assert result.actions.image_generation.description == "a red fox"

    def test_empty_query_normalized(self):
        result = PromptAnalysisResult.from_dict({"actions": {"web_search": {"needed": True, "query": ""}}})
        assert result.actions.web_search.query is None


class TestAnalysisFromKeywords:
    """Tests for keyword-only analysis."""

    def test_no_matches(self):
        result = analysis_from_keywords(
            [match(KeywordTriggerType.MEMORY_GENERAL, False)], "hello"
        )

        assert result.intent == UserIntent.CASUAL_CHAT
        assert result.actions.memory_retrieval.needed
        assert not result.actions.web_search.needed
        assert not result.actions.image_generation.needed
        assert result.confidence == 0.5

    def test_image_match(self):
        result = analysis_from_keywords(
            [match(KeywordTriggerType.INTENTION_IMAGE_GENERATION, True)], "draw a cat"
        )

        assert result.intent == UserIntent.IMAGE_GENERATION
        assert result.actions.image_generation.needed
        assert result.actions.image_generation.description == "draw a cat"

    def test_memory_match_is_explicit(self):
        result = analysis_from_keywords([match("memory.general", True)], "remember that")

        assert result.actions.memory_extraction.needed
        assert result.actions.memory_extraction.trigger == "explicit"
        assert result.confidence == 1.0


class TestExportedNames:
    """Tests for names shared between the context and keywords packages."""

    def test_extraction_request_distinct_from_trigger_action(self):
        result = PromptAnalysisResult.from_dict({"actions": {"memory_extraction": {"needed": True}}})

        assert isinstance(result.actions.memory_extraction, MemoryExtractionRequest)
        assert MemoryExtractionRequest is not MemoryExtractionAction
        assert result.actions.memory_extraction.needed
