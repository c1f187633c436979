"""Bilingual substring keyword matching."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class KeywordConfig:
    """A bilingual keyword set.

    Attributes:
        english: English keywords.
        chinese: Chinese keywords.
    """

    english: list[str] = field(default_factory=list)
    chinese: list[str] = field(default_factory=list)

    def all_keywords(self) -> list[str]:
        """All keywords, English first, in declaration order."""
        return [*self.english, *self.chinese]


def contains_keywords(text: str, keywords: KeywordConfig) -> bool:
    """Check whether text contains any keyword (case-insensitive substring)."""
    lower_text = text.lower()
    return any(keyword.lower() in lower_text for keyword in keywords.all_keywords())


def get_matched_keywords(text: str, keywords: KeywordConfig) -> list[str]:
    """Return every keyword found in text, in declaration order.

    Overlapping keywords are reported independently, e.g. both "i like" and
    "i like it" match "I like it a lot".
    """
    lower_text = text.lower()
    return [keyword for keyword in keywords.all_keywords() if keyword.lower() in lower_text]
