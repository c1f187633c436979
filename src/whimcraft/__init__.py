"""WhimCraft: keyword triggers, tiered memory and context preparation for chat."""

__version__ = "0.1.0"
