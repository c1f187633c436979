"""Keyword trigger definitions and action interface."""

import inspect
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from .matcher import KeywordConfig


class KeywordCategory(Enum):
    """Main categories of keyword triggers."""

    INTENTION = "intention"  # what the user wants to do
    MEMORY = "memory"  # what the system should remember


class KeywordTriggerType(str, Enum):
    """Known trigger types, namespaced by category."""

    INTENTION_IMAGE_GENERATION = "intention.image_generation"
    INTENTION_WEB_SEARCH = "intention.web_search"
    INTENTION_FILE_OPERATION = "intention.file_operation"

    MEMORY_GENERAL = "memory.general"
    MEMORY_LANGUAGE_PREFERENCE = "memory.language_preference"
    MEMORY_PROFILE = "memory.profile"
    MEMORY_PREFERENCE = "memory.preference"


TriggerType = KeywordTriggerType | str

_CATEGORY_PREFIXES = {
    "intention.": KeywordCategory.INTENTION,
    "memory.": KeywordCategory.MEMORY,
}


def trigger_key(trigger_type: TriggerType) -> str:
    """Plain string key for a trigger type (enum members and strings agree)."""
    if isinstance(trigger_type, Enum):
        return str(trigger_type.value)
    return str(trigger_type)


def category_for(trigger_type: TriggerType) -> KeywordCategory | None:
    """Derive a category from the type's prefix, None if unclassified."""
    key = trigger_key(trigger_type)
    for prefix, category in _CATEGORY_PREFIXES.items():
        if key.startswith(prefix):
            return category
    return None


@dataclass
class KeywordContext:
    """Context passed to trigger actions.

    Attributes:
        message: The user message that was checked.
        user_id: Id of the user who sent it.
        conversation_id: Conversation the message belongs to.
        extra: Any additional caller-supplied fields.
    """

    message: str
    user_id: str | None = None
    conversation_id: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)


class TriggerAction(ABC):
    """Something to run when a trigger matches."""

    @abstractmethod
    async def run(self, context: KeywordContext) -> Any:
        """Run the action for a matched message."""
        ...


class CallbackAction(TriggerAction):
    """Adapts a plain sync or async callable to TriggerAction."""

    def __init__(self, callback: Callable[[KeywordContext], Any]) -> None:
        self.callback = callback

    async def run(self, context: KeywordContext) -> Any:
        result = self.callback(context)
        if inspect.isawaitable(result):
            result = await result
        return result


@dataclass
class KeywordTrigger:
    """A binding from a keyword set to an action.

    Attributes:
        type: Unique trigger id.
        keywords: Bilingual keywords that fire the trigger.
        description: Human-readable purpose.
        action: What to run on a match, None for detection-only triggers.
        category: Explicit category; derived from the type prefix if omitted.
    """

    type: TriggerType
    keywords: KeywordConfig
    description: str = ""
    action: TriggerAction | None = None
    category: KeywordCategory | None = None

    def __post_init__(self) -> None:
        if isinstance(self.type, str) and not isinstance(self.type, Enum):
            try:
                self.type = KeywordTriggerType(self.type)
            except ValueError:
                pass
        if self.action is not None and not isinstance(self.action, TriggerAction):
            if not callable(self.action):
                raise TypeError(f"Trigger action for '{trigger_key(self.type)}' is not callable")
            self.action = CallbackAction(self.action)
        if self.category is None:
            self.category = category_for(self.type)


@dataclass(frozen=True)
class KeywordMatchResult:
    """Outcome of checking one trigger against a message."""

    type: TriggerType
    matched: bool
    matched_keywords: list[str] = field(default_factory=list)
