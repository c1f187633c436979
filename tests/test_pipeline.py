"""Tests for ChatTurnPreparer."""

from pathlib import Path
from unittest.mock import AsyncMock, Mock

import pytest

from whimcraft.config import ModelConfig
from whimcraft.context import ContextOrchestrator, PromptAnalysisResult
from whimcraft.keywords import (
    KeywordConfig,
    KeywordDispatcher,
    KeywordTrigger,
    KeywordTriggerType,
    TriggerRegistry,
    build_default_registry,
)
from whimcraft.memory import MemoryCategory, MemoryManager, MemoryStore
from whimcraft.pipeline import ChatTurnPreparer


@pytest.fixture
def memory(tmp_path: Path) -> MemoryManager:
    store = MemoryStore(tmp_path / "memory.db")
    store.init_db()
    yield MemoryManager(store)
    store.close()


class TestChatTurnPreparer:
    """Tests for preparing a chat turn."""

    @pytest.mark.asyncio
    async def test_image_message(self, memory: MemoryManager):
        memory.remember("u1", "Loves foxes", MemoryCategory.PREFERENCE)
        preparer = ChatTurnPreparer(
            KeywordDispatcher(build_default_registry(memory)),
            ContextOrchestrator(memory),
        )

        turn = await preparer.prepare("Please draw a red fox", "u1", "c1")

        assert turn.context.model_name == ModelConfig().image
        assert turn.analysis.actions.image_generation.needed
        assert turn.trigger_results[KeywordTriggerType.INTENTION_IMAGE_GENERATION]["detected"]
        assert "- Loves foxes" in turn.context.context
        assert turn.errors == []
        assert memory.get("u1").facts[0].use_count == 1

    @pytest.mark.asyncio
    async def test_memory_trigger_runs_extraction(self, memory: MemoryManager):
        memory.process_message = AsyncMock(return_value=1)
        preparer = ChatTurnPreparer(
            KeywordDispatcher(build_default_registry(memory)),
            ContextOrchestrator(memory),
        )
        history = [{"role": "user", "content": "My name is Ana"}]

        turn = await preparer.prepare("My name is Ana", "u1", "c1", messages=history)

        assert turn.trigger_results[KeywordTriggerType.MEMORY_GENERAL] == {
            "success": True,
            "facts_extracted": 1,
        }
        assert memory.process_message.call_args.args[2] == history

    @pytest.mark.asyncio
    async def test_failing_trigger_reported(self, memory: MemoryManager):
        registry = TriggerRegistry()
        registry.register(
            KeywordTrigger(
                "intention.translate",
                KeywordConfig(["translate"]),
                action=AsyncMock(side_effect=RuntimeError("no translator")),
            )
        )
        preparer = ChatTurnPreparer(KeywordDispatcher(registry.freeze()), ContextOrchestrator(memory))

        turn = await preparer.prepare("translate this", "u1")

        assert turn.errors == ["intention.translate: no translator"]
        assert turn.context.model_name == ModelConfig().main

    @pytest.mark.asyncio
    async def test_given_analysis_used(self, memory: MemoryManager):
        orchestrator = Mock(spec=ContextOrchestrator)
        orchestrator.prepare = AsyncMock()
        analysis = PromptAnalysisResult()
        preparer = ChatTurnPreparer(KeywordDispatcher(TriggerRegistry()), orchestrator)

        turn = await preparer.prepare("hi", "u1", "c1", analysis=analysis)

        orchestrator.prepare.assert_awaited_once_with(analysis, "u1", "c1")
        assert turn.analysis is analysis
