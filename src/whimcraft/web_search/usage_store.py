"""SQLite append-only log of search usage."""

import sqlite3
from datetime import datetime
from pathlib import Path

from .models import SearchUsage


class SearchUsageStore:
    """Append-only storage for SearchUsage records.

    Records are never updated; they are only counted within time windows.
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
        """Create the search_usage table if it doesn't exist."""
        conn = self._get_connection()
        conn.execute("""
            CREATE TABLE IF NOT EXISTS search_usage (
                id             INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id        TEXT NOT NULL,
                query          TEXT NOT NULL,
                results_count  INTEGER NOT NULL,
                timestamp      REAL NOT NULL,
                cost_estimate  REAL NOT NULL
            )
        """)
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_search_usage_ts ON search_usage(timestamp)"
        )
        conn.commit()

    def add(self, usage: SearchUsage) -> None:
        """Append a usage record."""
        conn = self._get_connection()
        conn.execute(
            """
            INSERT INTO search_usage (user_id, query, results_count, timestamp, cost_estimate)
            VALUES (?, ?, ?, ?, ?)
            """,
            (
                usage.user_id,
                usage.query,
                usage.results_count,
                usage.timestamp.timestamp(),
                usage.cost_estimate,
            ),
        )
        conn.commit()

    def count_since(self, since: datetime) -> int:
        """Number of records with timestamp >= since."""
        conn = self._get_connection()
        row = conn.execute(
            "SELECT COUNT(*) AS n FROM search_usage WHERE timestamp >= ?",
            (since.timestamp(),),
        ).fetchone()
        return row["n"]

    def list_since(self, since: datetime) -> list[SearchUsage]:
        """Records with timestamp >= since, oldest first."""
        conn = self._get_connection()
        cursor = conn.execute(
            "SELECT user_id, query, results_count, timestamp, cost_estimate "
            "FROM search_usage WHERE timestamp >= ? ORDER BY timestamp",
            (since.timestamp(),),
        )
        return [
            SearchUsage(
                user_id=row["user_id"],
                query=row["query"],
                results_count=row["results_count"],
                timestamp=datetime.fromtimestamp(row["timestamp"], tz=since.tzinfo),
                cost_estimate=row["cost_estimate"],
            )
            for row in cursor.fetchall()
        ]

    def close(self) -> None:
        """Close the database connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
