"""Tests for the default triggers and their actions."""

from datetime import timedelta
from unittest.mock import AsyncMock, Mock

import pytest

from whimcraft.keywords import (
    ImageIntentAction,
    KeywordContext,
    KeywordDispatcher,
    KeywordTriggerType,
    MemoryExtractionAction,
    build_default_registry,
)
from whimcraft.memory import MemoryManager


@pytest.fixture
def memory() -> Mock:
    manager = Mock(spec=MemoryManager)
    manager.process_message = AsyncMock(return_value=2)
    return manager


class TestMemoryExtractionAction:
    """Tests for MemoryExtractionAction."""

    @pytest.mark.asyncio
    async def test_requires_user_and_conversation(self, memory: Mock):
        action = MemoryExtractionAction(memory)

        result = await action.run(KeywordContext(message="remember that", user_id="u1"))

        assert result == {"success": False, "reason": "Missing required context"}
        memory.process_message.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_uses_message_when_no_history(self, memory: Mock):
        action = MemoryExtractionAction(memory)
        context = KeywordContext(message="My name is Ana", user_id="u1", conversation_id="c1")

        result = await action.run(context)

        assert result == {"success": True, "facts_extracted": 2}
        memory.process_message.assert_awaited_once_with(
            "u1",
            "c1",
            [{"role": "user", "content": "My name is Ana"}],
            last_user_message="My name is Ana",
            duration=timedelta(0),
        )

    @pytest.mark.asyncio
    async def test_passes_history_and_duration(self, memory: Mock):
        history = [
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello"},
            {"role": "user", "content": "I prefer tea"},
        ]
        context = KeywordContext(
            message="I prefer tea",
            user_id="u1",
            conversation_id="c1",
            extra={"messages": history, "duration": timedelta(minutes=5)},
        )

        await MemoryExtractionAction(memory).run(context)

        args, kwargs = memory.process_message.call_args
        assert args[2] == history
        assert kwargs["duration"] == timedelta(minutes=5)

    @pytest.mark.asyncio
    async def test_error_becomes_failure_result(self, memory: Mock):
        memory.process_message.side_effect = RuntimeError("store down")
        context = KeywordContext(message="x", user_id="u1", conversation_id="c1")

        result = await MemoryExtractionAction(memory).run(context)

        assert result == {"success": False, "error": "store down"}


class TestImageIntentAction:
    """Tests for ImageIntentAction."""

    @pytest.mark.asyncio
    async def test_reports_detection(self):
        result = await ImageIntentAction().run(KeywordContext(message="draw a cat"))
        assert result["success"] is True
        assert result["detected"] is True


class TestDefaultRegistry:
    """Tests for build_default_registry."""

    def test_registers_default_triggers(self, memory: Mock):
        registry = build_default_registry(memory)

        assert registry.frozen
        assert registry.has(KeywordTriggerType.MEMORY_GENERAL)
        assert registry.has(KeywordTriggerType.INTENTION_IMAGE_GENERATION)
        assert isinstance(registry.get("memory.general").action, MemoryExtractionAction)

    def test_without_memory_detection_only(self):
        registry = build_default_registry()
        assert registry.get(KeywordTriggerType.MEMORY_GENERAL).action is None

    @pytest.mark.asyncio
    async def test_end_to_end_memory_trigger(self, memory: Mock):
        dispatcher = KeywordDispatcher(build_default_registry(memory))
        message = "Remember that I prefer dark mode"
        context = KeywordContext(message=message, user_id="u1", conversation_id="c1")

        results = dispatcher.check(message)
        outcome = await dispatcher.execute_all(results, context)

        assert outcome == {KeywordTriggerType.MEMORY_GENERAL: {"success": True, "facts_extracted": 2}}
        assert memory.process_message.call_args.kwargs["last_user_message"] == message

    @pytest.mark.asyncio
    async def test_end_to_end_image_trigger(self):
        dispatcher = KeywordDispatcher(build_default_registry())
        results = dispatcher.check("帮我画一张猫的图片")

        outcome = await dispatcher.execute_all(results, KeywordContext(message="帮我画一张猫的图片"))

        assert outcome[KeywordTriggerType.INTENTION_IMAGE_GENERATION]["detected"] is True
