"""SQLite storage for per-user memory."""

import json
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any

from ..errors import MemoryStoreError
from .models import (
    LanguagePreference,
    MemoryFact,
    MemoryStats,
    UserMemory,
    estimate_token_usage,
    utcnow,
)

_UNCHANGED: Any = object()


def _to_iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _from_iso(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


class MemoryStore:
    """Persistent storage for user memory using SQLite.

    Each user has one memory row (language preference, cleanup time) and
    any number of fact rows keyed by (user_id, id).
    """

    def __init__(self, db_path: Path) -> None:
        """Initialize the store with a database path.

        Args:
            db_path: Path to the SQLite database file.
        """
        self.db_path = db_path
        self._conn: sqlite3.Connection | None = None

    def _get_connection(self) -> sqlite3.Connection:
        """Get or create the database connection."""
        if self._conn is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(self.db_path)
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def init_db(self) -> None:
        """Create the tables if they don't exist."""
        conn = self._get_connection()
        conn.execute("""
            CREATE TABLE IF NOT EXISTS user_memory (
                user_id              TEXT PRIMARY KEY,
                language_preference  TEXT,
                last_cleanup         TEXT NOT NULL,
                updated_at           TEXT NOT NULL
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS memory_facts (
                user_id         TEXT NOT NULL,
                id              TEXT NOT NULL,
                content         TEXT NOT NULL,
                category        TEXT NOT NULL,
                tier            TEXT NOT NULL,
                confidence      REAL NOT NULL,
                created_at      TEXT NOT NULL,
                last_used_at    TEXT NOT NULL,
                use_count       INTEGER NOT NULL DEFAULT 0,
                expires_at      TEXT,
                auto_extracted  INTEGER NOT NULL DEFAULT 1,
                keywords        TEXT NOT NULL DEFAULT '[]',
                source          TEXT NOT NULL DEFAULT '',
                extracted_from  TEXT,
                PRIMARY KEY (user_id, id)
            )
        """)
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_memory_facts_user ON memory_facts(user_id)"
        )
        conn.commit()

    def get_user_memory(self, user_id: str) -> UserMemory:
        """Load a user's memory, or an empty one if nothing is stored yet.

        Args:
            user_id: The user to load.

        Returns:
            The user's memory.
        """
        conn = self._get_connection()
        try:
            row = conn.execute(
                "SELECT language_preference, last_cleanup, updated_at "
                "FROM user_memory WHERE user_id = ?",
                (user_id,),
            ).fetchone()
            fact_rows = conn.execute(
                "SELECT * FROM memory_facts WHERE user_id = ? ORDER BY created_at",
                (user_id,),
            ).fetchall()
        except sqlite3.Error as e:
            raise MemoryStoreError(f"Failed to load memory for {user_id}: {e}") from e

        if row is None and not fact_rows:
            return UserMemory.empty(user_id)

        facts = [self._row_to_fact(r) for r in fact_rows]
        memory = UserMemory(user_id=user_id, facts=facts)
        memory.stats = MemoryStats(
            total_facts=len(facts),
            token_usage=estimate_token_usage(facts),
        )
        if row is not None:
            memory.stats.last_cleanup = _from_iso(row["last_cleanup"]) or utcnow()
            memory.updated_at = _from_iso(row["updated_at"]) or utcnow()
            if row["language_preference"]:
                memory.language_preference = LanguagePreference(row["language_preference"])
        return memory

    def save_user_memory(
        self,
        user_id: str,
        facts: list[MemoryFact],
        language_preference: LanguagePreference | None = _UNCHANGED,
        now: datetime | None = None,
    ) -> UserMemory:
        """Replace a user's facts.

        Args:
            user_id: The user to save.
            facts: The complete new fact list.
            language_preference: New preference; left untouched if omitted.
            now: Timestamp recorded as cleanup/update time.

        Returns:
            The saved memory.
        """
        now = now or utcnow()
        conn = self._get_connection()
        try:
            with conn:
                if language_preference is _UNCHANGED:
                    current = conn.execute(
                        "SELECT language_preference FROM user_memory WHERE user_id = ?",
                        (user_id,),
                    ).fetchone()
                    pref_value = current["language_preference"] if current else None
                else:
                    pref_value = (
                        LanguagePreference(language_preference).value
                        if language_preference is not None
                        else None
                    )

                conn.execute(
                    """
                    INSERT INTO user_memory (user_id, language_preference, last_cleanup, updated_at)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT(user_id) DO UPDATE SET
                        language_preference = excluded.language_preference,
                        last_cleanup = excluded.last_cleanup,
                        updated_at = excluded.updated_at
                    """,
                    (user_id, pref_value, _to_iso(now), _to_iso(now)),
                )
                conn.execute("DELETE FROM memory_facts WHERE user_id = ?", (user_id,))
                conn.executemany(
                    """
                    INSERT INTO memory_facts (
                        user_id, id, content, category, tier, confidence,
                        created_at, last_used_at, use_count, expires_at,
                        auto_extracted, keywords, source, extracted_from
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    [self._fact_to_row(user_id, fact) for fact in facts],
                )
        except sqlite3.Error as e:
            raise MemoryStoreError(f"Failed to save memory for {user_id}: {e}") from e

        return UserMemory(
            user_id=user_id,
            facts=list(facts),
            stats=MemoryStats(
                total_facts=len(facts),
                token_usage=estimate_token_usage(facts),
                last_cleanup=now,
            ),
            updated_at=now,
            language_preference=LanguagePreference(pref_value) if pref_value else None,
        )

    def delete_fact(self, user_id: str, fact_id: str) -> bool:
        """Delete one fact.

        Returns:
            True if a fact was deleted, False otherwise.
        """
        conn = self._get_connection()
        cursor = conn.execute(
            "DELETE FROM memory_facts WHERE user_id = ? AND id = ?",
            (user_id, fact_id),
        )
        conn.commit()
        return cursor.rowcount > 0

    def clear(self, user_id: str) -> int:
        """Delete all of a user's facts. Returns the number deleted."""
        conn = self._get_connection()
        cursor = conn.execute("DELETE FROM memory_facts WHERE user_id = ?", (user_id,))
        conn.commit()
        return cursor.rowcount

    def list_users(self) -> list[str]:
        """Ids of all users with stored memory."""
        conn = self._get_connection()
        cursor = conn.execute(
            "SELECT user_id FROM user_memory UNION SELECT user_id FROM memory_facts ORDER BY user_id"
        )
        return [row["user_id"] for row in cursor.fetchall()]

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def _fact_to_row(self, user_id: str, fact: MemoryFact) -> tuple[Any, ...]:
        return (
            user_id,
            fact.id,
            fact.content,
            fact.category.value,
            fact.tier.value,
            fact.confidence,
            _to_iso(fact.created_at),
            _to_iso(fact.last_used_at),
            fact.use_count,
            _to_iso(fact.expires_at),
            int(fact.auto_extracted),
            json.dumps(sorted(fact.keywords), ensure_ascii=False),
            fact.source,
            fact.extracted_from,
        )

    def _row_to_fact(self, row: sqlite3.Row) -> MemoryFact:
        """Convert a database row to a MemoryFact."""
        return MemoryFact(
            id=row["id"],
            content=row["content"],
            category=row["category"],
            tier=row["tier"],
            confidence=row["confidence"],
            created_at=_from_iso(row["created_at"]),
            last_used_at=_from_iso(row["last_used_at"]),
            use_count=row["use_count"],
            expires_at=_from_iso(row["expires_at"]),
            auto_extracted=bool(row["auto_extracted"]),
            keywords=frozenset(json.loads(row["keywords"])),
            source=row["source"],
            extracted_from=row["extracted_from"],
        )
