"""Tests for keyword matching."""

from whimcraft.keywords import (
    IMAGE_GENERATION_KEYWORDS,
    MEMORY_TRIGGER_KEYWORDS,
    KeywordConfig,
    contains_keywords,
    get_matched_keywords,
)


class TestKeywordConfig:
    """Tests for KeywordConfig."""

    def test_all_keywords_english_first(self):
        config = KeywordConfig(english=["draw", "paint"], chinese=["画图"])
        assert config.all_keywords() == ["draw", "paint", "画图"]

    def test_empty_config(self):
        assert KeywordConfig().all_keywords() == []


class TestContainsKeywords:
    """Tests for contains_keywords."""

    def test_case_insensitive(self):
        config = KeywordConfig(english=["remember that"])
        assert contains_keywords("REMEMBER THAT I like tea", config) is True

    def test_substring_inside_word(self):
        """Matching is plain substring, not whole words."""
        config = KeywordConfig(english=["draw"])
        assert contains_keywords("I have a drawer", config) is True

    def test_chinese_keyword(self):
        assert contains_keywords("请记住我喜欢猫", MEMORY_TRIGGER_KEYWORDS) is True

    def test_no_match(self):
        assert contains_keywords("What time is it?", MEMORY_TRIGGER_KEYWORDS) is False

    def test_empty_text(self):
        assert contains_keywords("", IMAGE_GENERATION_KEYWORDS) is False

    def test_empty_keyword_set(self):
        assert contains_keywords("anything", KeywordConfig()) is False


class TestGetMatchedKeywords:
    """Tests for get_matched_keywords."""

    def test_declaration_order_and_original_spelling(self):
        config = KeywordConfig(english=["I Prefer", "remember that"])
        matched = get_matched_keywords("remember that i prefer dark mode", config)
        assert matched == ["I Prefer", "remember that"]

    def test_overlapping_keywords_reported_independently(self):
        config = KeywordConfig(english=["i like", "i like it"])
        assert get_matched_keywords("I like it a lot", config) == ["i like", "i like it"]

    def test_mixed_languages(self):
        matched = get_matched_keywords("Please draw 一只猫 画图", IMAGE_GENERATION_KEYWORDS)
        assert "draw" in matched
        assert "画图" in matched
        assert matched.index("draw") < matched.index("画图")

    def test_no_match_returns_empty_list(self):
        assert get_matched_keywords("hello there", IMAGE_GENERATION_KEYWORDS) == []

    def test_builtin_memory_keywords(self):
        matched = get_matched_keywords("Remember that I prefer dark mode", MEMORY_TRIGGER_KEYWORDS)
        assert matched == ["remember that", "i prefer"]
