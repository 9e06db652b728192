"""SQLite mirror of the search history log."""
import json
import aiosqlite
from pathlib import Path
from typing import Optional, List

from catalog_search.history import MAX_HISTORY_ENTRIES
from catalog_search.models import SearchHistoryEntry


# Default database location
DEFAULT_DB_PATH = Path.home() / ".catalog-search" / "history.db"


class HistoryDatabase:
    """Persists search history entries so the log survives restarts.

    Holds at most `max_entries` rows; older rows are deleted on every insert,
    mirroring the eviction of the in-memory SearchHistoryStore.
    """

    def __init__(self, db_path: Optional[Path] = None, max_entries: int = MAX_HISTORY_ENTRIES):
        self.db_path = db_path or DEFAULT_DB_PATH
        self.max_entries = min(max_entries, MAX_HISTORY_ENTRIES)
        self._connection: Optional[aiosqlite.Connection] = None

    async def initialize(self) -> None:
        """Initialize the database, creating the history table if needed."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._connection = await aiosqlite.connect(self.db_path)
        self._connection.row_factory = aiosqlite.Row

        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS search_history (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT UNIQUE NOT NULL,
                query TEXT NOT NULL,
                results_count INTEGER NOT NULL,
                clicked_results TEXT NOT NULL,
                timestamp TEXT NOT NULL
            )
        """)

        await self._connection.execute("""
            CREATE INDEX IF NOT EXISTS idx_history_timestamp
            ON search_history(timestamp DESC)
        """)

        await self._connection.commit()

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    def _require_connection(self) -> aiosqlite.Connection:
        if not self._connection:
            raise RuntimeError("HistoryDatabase not initialized. Call initialize() first.")
        return self._connection

    async def record(self, entry: SearchHistoryEntry) -> None:
        """Store an entry and evict rows beyond the cap.

        Args:
            entry: Entry created by SearchHistoryStore
        """
        connection = self._require_connection()

        await connection.execute(
            "INSERT OR REPLACE INTO search_history (id, query, results_count, clicked_results, timestamp) "
            "VALUES (?, ?, ?, ?, ?)",
            (
                entry.id,
                entry.query,
                entry.results_count,
                json.dumps(list(entry.clicked_results)),
                entry.timestamp.isoformat(),
            ),
        )
        await connection.execute(
            "DELETE FROM search_history WHERE seq NOT IN ("
            "SELECT seq FROM search_history ORDER BY timestamp DESC, seq DESC LIMIT ?)",
            (self.max_entries,),
        )
        await connection.commit()

    async def load_recent(self, limit: Optional[int] = None) -> List[SearchHistoryEntry]:
        """Load stored entries, newest first.

        Args:
            limit: Maximum entries to return (defaults to max_entries)

        Returns:
            List of entries, newest first
        """
        connection = self._require_connection()

        cursor = await connection.execute(
            "SELECT * FROM search_history ORDER BY timestamp DESC, seq DESC LIMIT ?",
            (limit if limit is not None else self.max_entries,),
        )
        rows = await cursor.fetchall()

        return [self._row_to_entry(row) for row in rows]

    async def clear(self) -> int:
        """Delete every stored entry.

        Returns:
            Number of rows deleted
        """
        connection = self._require_connection()

        cursor = await connection.execute("DELETE FROM search_history")
        await connection.commit()

        return cursor.rowcount

    def _row_to_entry(self, row: aiosqlite.Row) -> SearchHistoryEntry:
        """Convert a database row to a history entry."""
        data = dict(row)
        try:
            data["clicked_results"] = json.loads(data["clicked_results"] or "[]")
        except json.JSONDecodeError:
            data["clicked_results"] = []
        return SearchHistoryEntry.from_dict(data)


# Global database instance
_history_db: Optional[HistoryDatabase] = None


async def get_history_db() -> HistoryDatabase:
    """Get or create the global history database instance.

    Returns:
        Initialized HistoryDatabase
    """
    global _history_db

    if _history_db is None:
        from catalog_search.config import get_config
        config = get_config().history
        _history_db = HistoryDatabase(config.db_path, max_entries=config.max_entries)
        await _history_db.initialize()

    return _history_db
