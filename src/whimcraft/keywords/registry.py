"""Keyword trigger registry."""

import logging
from enum import Enum

from ..errors import RegistryFrozenError
from .base import KeywordCategory, KeywordTrigger, TriggerType, trigger_key

logger = logging.getLogger(__name__)


class RegistryState(Enum):
    """Lifecycle of a registry."""

    UNINITIALIZED = "uninitialized"
    READY = "ready"


class TriggerRegistry:
    """Registry of keyword triggers, keyed by trigger type.

    Built once at start-up and handed to dispatchers. After freeze() the
    registry is read-only, so it can be shared without locking.
    """

    def __init__(self) -> None:
        self._triggers: dict[str, KeywordTrigger] = {}
        self._frozen = False

    @property
    def state(self) -> RegistryState:
        return RegistryState.READY if self._triggers else RegistryState.UNINITIALIZED

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_mutable(self) -> None:
        if self._frozen:
            raise RegistryFrozenError("Trigger registry is frozen")

    def register(self, trigger: KeywordTrigger) -> None:
        """Register a trigger, replacing any trigger of the same type."""
        self._check_mutable()
        key = trigger_key(trigger.type)
        if key in self._triggers:
            logger.debug("Replacing trigger %s", key)
        self._triggers[key] = trigger

    def unregister(self, trigger_type: TriggerType) -> bool:
        """Unregister a trigger. Returns True if one was removed."""
        self._check_mutable()
        return self._triggers.pop(trigger_key(trigger_type), None) is not None

    def clear(self) -> None:
        """Remove all triggers."""
        self._check_mutable()
        self._triggers.clear()

    def freeze(self) -> "TriggerRegistry":
        """Make the registry read-only. Returns self for chaining."""
        self._frozen = True
        logger.info("Trigger registry ready with %d triggers", len(self._triggers))
        return self

    def get(self, trigger_type: TriggerType) -> KeywordTrigger | None:
        """Get a trigger by type."""
        return self._triggers.get(trigger_key(trigger_type))

    def has(self, trigger_type: TriggerType) -> bool:
        """Check if a trigger type is registered."""
        return trigger_key(trigger_type) in self._triggers

    def all(self) -> list[KeywordTrigger]:
        """All registered triggers in registration order."""
        return list(self._triggers.values())

    def by_category(self, category: KeywordCategory) -> list[KeywordTrigger]:
        """All triggers in a category."""
        return [t for t in self._triggers.values() if t.category == category]

    def __len__(self) -> int:
        return len(self._triggers)

    def __contains__(self, trigger_type: object) -> bool:
        if not isinstance(trigger_type, str):
            return False
        return self.has(trigger_type)
