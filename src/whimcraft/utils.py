"""Small async helpers shared across modules."""

import logging
from typing import Any, Awaitable

logger = logging.getLogger(__name__)


async def best_effort(awaitable: Awaitable[Any], what: str) -> bool:
    """Await a side effect whose failure must never reach the caller.

    Args:
        awaitable: The side effect to run (usage tracking, bookkeeping).
        what: Short description used in the log line on failure.

    Returns:
        True if the side effect completed, False if it raised.
    """
    try:
        await awaitable
    except Exception as e:
        logger.warning("Best-effort %s failed: %s", what, e)
        return False
    return True
