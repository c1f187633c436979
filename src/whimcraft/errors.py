"""Exceptions raised by the WhimCraft core."""


class WhimcraftError(Exception):
    """Base class for WhimCraft errors."""


class RegistryFrozenError(WhimcraftError):
    """Raised when mutating a trigger registry after start-up."""


class RateLimitExceededError(WhimcraftError):
    """Raised by the search path when the global daily limit is reached.

    The message is human-readable and is surfaced to callers as data.
    """


class SearchUnavailableError(WhimcraftError):
    """Raised when a search backend is called without being configured."""


class MemoryStoreError(WhimcraftError):
    """Raised when the fact store cannot be read or written."""
