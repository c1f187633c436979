"""Tests for async helpers."""

import pytest

from whimcraft.utils import best_effort


async def succeed():
    return "ok"


async def fail():
    raise RuntimeError("lost")


@pytest.mark.asyncio
async def test_best_effort_success():
    assert await best_effort(succeed(), "noop") is True


@pytest.mark.asyncio
async def test_best_effort_swallows_failure(caplog):
    assert await best_effort(fail(), "usage tracking") is False
    assert "usage tracking" in caplog.text
