"""Tests for MemoryStore."""

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from whimcraft.errors import MemoryStoreError
from whimcraft.memory import (
    LanguagePreference,
    MemoryCategory,
    MemoryFact,
    MemoryStore,
    MemoryTier,
)

NOW = datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def store(tmp_path: Path) -> MemoryStore:
    """Create a MemoryStore with a temporary database."""
    store = MemoryStore(tmp_path / "test_memory.db")
    store.init_db()
    yield store
    store.close()


def make_fact(content: str, tier: MemoryTier = MemoryTier.IMPORTANT) -> MemoryFact:
    return MemoryFact.create(
        content,
        MemoryCategory.TECHNICAL,
        tier,
        0.8,
        keywords=["python", "backend"],
        source="AI analysis",
        extracted_from="conv-1",
        now=NOW,
    )


class TestMemoryStoreInit:
    """Tests for database creation."""

    def test_creates_parent_directories(self, tmp_path: Path):
        store = MemoryStore(tmp_path / "nested" / "dir" / "memory.db")
        store.init_db()
        assert (tmp_path / "nested" / "dir" / "memory.db").exists()
        store.close()

    def test_init_db_is_idempotent(self, store: MemoryStore):
        store.init_db()
        assert store.get_user_memory("u1").facts == []


class TestMemoryStoreReadWrite:
    """Tests for saving and loading user memory."""

    def test_unknown_user_gets_empty_memory(self, store: MemoryStore):
        memory = store.get_user_memory("nobody")
        assert memory.user_id == "nobody"
        assert memory.facts == []
        assert memory.language_preference is None

    def test_round_trip_preserves_fields(self, store: MemoryStore):
        fact = make_fact("Builds APIs with FastAPI")
        store.save_user_memory("u1", [fact], now=NOW)

        [loaded] = store.get_user_memory("u1").facts

        assert loaded == fact

    def test_core_fact_round_trip(self, store: MemoryStore):
        fact = make_fact("Name is Ana", MemoryTier.CORE)
        store.save_user_memory("u1", [fact])

        [loaded] = store.get_user_memory("u1").facts
        assert loaded.expires_at is None

    def test_save_replaces_facts(self, store: MemoryStore):
        store.save_user_memory("u1", [make_fact("first fact")])
        second = make_fact("second fact")
        store.save_user_memory("u1", [second])

        assert [f.id for f in store.get_user_memory("u1").facts] == [second.id]

    def test_stats(self, store: MemoryStore):
        saved = store.save_user_memory("u1", [make_fact("abcdefgh")], now=NOW)
        assert saved.stats.total_facts == 1
        assert saved.stats.token_usage == 2
        assert saved.stats.last_cleanup == NOW

        loaded = store.get_user_memory("u1")
        assert loaded.stats.total_facts == 1
        assert loaded.updated_at == NOW

    def test_users_are_isolated(self, store: MemoryStore):
        store.save_user_memory("u1", [make_fact("belongs to u1")])
        assert store.get_user_memory("u2").facts == []


class TestLanguagePreference:
    """Tests for storing the language preference."""

    def test_saved_and_loaded(self, store: MemoryStore):
        store.save_user_memory("u1", [], LanguagePreference.HYBRID)
        assert store.get_user_memory("u1").language_preference == LanguagePreference.HYBRID

    def test_untouched_when_omitted(self, store: MemoryStore):
        store.save_user_memory("u1", [], LanguagePreference.CHINESE)
        store.save_user_memory("u1", [make_fact("new fact")])

        memory = store.get_user_memory("u1")
        assert memory.language_preference == LanguagePreference.CHINESE
        assert len(memory.facts) == 1

    def test_cleared_with_none(self, store: MemoryStore):
        store.save_user_memory("u1", [], LanguagePreference.ENGLISH)
        store.save_user_memory("u1", [], None)
        assert store.get_user_memory("u1").language_preference is None


class TestMemoryStoreDelete:
    """Tests for deleting facts."""

    def test_delete_fact(self, store: MemoryStore):
        fact = make_fact("to delete")
        store.save_user_memory("u1", [fact])

        assert store.delete_fact("u1", fact.id) is True
        assert store.delete_fact("u1", fact.id) is False
        assert store.get_user_memory("u1").facts == []

    def test_delete_other_users_fact(self, store: MemoryStore):
        fact = make_fact("private")
        store.save_user_memory("u1", [fact])
        assert store.delete_fact("u2", fact.id) is False

    def test_clear(self, store: MemoryStore):
        store.save_user_memory("u1", [make_fact("one"), make_fact("two")])
        assert store.clear("u1") == 2
        assert store.clear("u1") == 0

    def test_list_users(self, store: MemoryStore):
        store.save_user_memory("bob", [])
        store.save_user_memory("alice", [make_fact("x")])
        assert store.list_users() == ["alice", "bob"]


class TestMemoryStoreErrors:
    """Tests for error wrapping."""

    def test_read_error_wrapped(self, store: MemoryStore):
        real_conn = store._get_connection()
        conn = MagicMock()
        conn.execute.side_effect = sqlite3.OperationalError("disk I/O error")
        store._conn = conn

        with pytest.raises(MemoryStoreError):
            store.get_user_memory("u1")
        store._conn = real_conn

    def test_write_error_wrapped(self, tmp_path: Path):
        store = MemoryStore(tmp_path / "no_tables.db")
        with pytest.raises(MemoryStoreError):
            store.save_user_memory("u1", [make_fact("x")])
        store.close()
