"""
SQLite Store - File-backed storage for chats, moods and journals
================================================================

This module provides the SQLite storage backend including:
- Chat sessions and messages with their sentiment
- Mood entries
- Journal entries with tags
- Row statistics
"""

import sqlite3
import json
import threading
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional

from core.exceptions import DatabaseError
from core.logging import get_logger
from .base import (
    BaseStore,
    ChatMessage,
    ChatSession,
    JournalEntry,
    MoodEntry,
    JOURNAL_FIELDS,
)

logger = get_logger("storage.sqlite")


SCHEMA_SQL = """
-- Chat sessions: one row per conversation
CREATE TABLE IF NOT EXISTS chat_sessions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

-- Chat messages: user and assistant turns
CREATE TABLE IF NOT EXISTS chat_messages (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id INTEGER NOT NULL,
    role TEXT NOT NULL CHECK (role IN ('user', 'assistant')),
    content TEXT NOT NULL,
    sentiment TEXT CHECK (sentiment IN ('positive', 'negative', 'neutral')),
    created_at TEXT NOT NULL,
    FOREIGN KEY (session_id) REFERENCES chat_sessions(id) ON DELETE CASCADE
);

-- Mood entries
CREATE TABLE IF NOT EXISTS mood_entries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    mood TEXT NOT NULL,
    score INTEGER NOT NULL,
    notes TEXT,
    created_at TEXT NOT NULL
);

-- Journal entries; tags are a JSON array
CREATE TABLE IF NOT EXISTS journal_entries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    title TEXT,
    content TEXT NOT NULL,
    mood TEXT NOT NULL,
    tags TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_sessions_user ON chat_sessions(user_id);
CREATE INDEX IF NOT EXISTS idx_messages_session ON chat_messages(session_id);
CREATE INDEX IF NOT EXISTS idx_moods_user ON mood_entries(user_id, created_at);
CREATE INDEX IF NOT EXISTS idx_journals_user ON journal_entries(user_id, created_at);
"""


def _ts(value: datetime) -> str:
    return value.isoformat(timespec="microseconds")


def _parse_ts(value: str) -> datetime:
    return datetime.fromisoformat(value)


class SQLiteStore(BaseStore):
    """
    SQLite storage backend.

    Uses one connection per thread and a store-wide lock around every
    write, so only one mutation is in flight at a time.

    Attributes:
        db_path (str): Path to SQLite database file
        lock (threading.Lock): Write lock
    """

    name = "sqlite"

    def __init__(self, db_path: str, clock: Optional[Callable[[], datetime]] = None):
        """
        Open (and if needed create) the database.

        Args:
            db_path: Path to SQLite database file
            clock: Callable returning the current datetime for timestamps

        Raises:
            DatabaseError: If the database cannot be initialized
        """
        self.db_path = db_path
        self.clock = clock or datetime.now
        self.lock = threading.Lock()
        self._local = threading.local()

        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

        self._init_schema()
        logger.info(f"SQLite store ready at {db_path}")

    def _get_connection(self) -> sqlite3.Connection:
        """Get the database connection for the current thread."""
        if getattr(self._local, "connection", None) is None:
            connection = sqlite3.connect(self.db_path, timeout=30.0)
            connection.row_factory = sqlite3.Row
            connection.execute("PRAGMA foreign_keys = ON")
            self._local.connection = connection
        return self._local.connection

    @contextmanager
    def transaction(self):
        """
        Context manager for database transactions.

        Commits on success and rolls back on error.

        Example:
            with store.transaction() as conn:
                conn.execute("DELETE FROM mood_entries")
        """
        conn = self._get_connection()
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise DatabaseError(f"Transaction failed: {e}", {"db_path": self.db_path})

    @contextmanager
    def write(self):
        """Transaction taken under the store-wide write lock."""
        with self.lock:
            with self.transaction() as conn:
                yield conn

    def _init_schema(self) -> None:
        """Create all tables if they don't exist."""
        try:
            with self.write() as conn:
                conn.executescript(SCHEMA_SQL)
        except sqlite3.Error as e:
            raise DatabaseError(f"Failed to initialize database schema: {e}")

    # === Row conversion ===

    @staticmethod
    def _session(row: sqlite3.Row) -> ChatSession:
        return ChatSession(
            id=row["id"],
            user_id=row["user_id"],
            created_at=_parse_ts(row["created_at"]),
            updated_at=_parse_ts(row["updated_at"]),
        )

    @staticmethod
    def _message(row: sqlite3.Row) -> ChatMessage:
        return ChatMessage(
            id=row["id"],
            session_id=row["session_id"],
            role=row["role"],
            content=row["content"],
            sentiment=row["sentiment"],
            created_at=_parse_ts(row["created_at"]),
        )

    @staticmethod
    def _mood(row: sqlite3.Row) -> MoodEntry:
        return MoodEntry(
            id=row["id"],
            user_id=row["user_id"],
            mood=row["mood"],
            score=row["score"],
            notes=row["notes"],
            created_at=_parse_ts(row["created_at"]),
        )

    @staticmethod
    def _journal(row: sqlite3.Row) -> JournalEntry:
        return JournalEntry(
            id=row["id"],
            user_id=row["user_id"],
            title=row["title"],
            content=row["content"],
            mood=row["mood"],
            tags=json.loads(row["tags"]) if row["tags"] else [],
            created_at=_parse_ts(row["created_at"]),
            updated_at=_parse_ts(row["updated_at"]),
        )

    # === Chat Operations ===

    def create_session(self, user_id: int) -> ChatSession:
        now = _ts(self.clock())
        with self.write() as conn:
            cursor = conn.execute(
                "INSERT INTO chat_sessions (user_id, created_at, updated_at) VALUES (?, ?, ?)",
                (user_id, now, now)
            )
            session_id = cursor.lastrowid
        return self.get_session(session_id)

    def get_session(self, session_id: int) -> Optional[ChatSession]:
        with self.transaction() as conn:
            row = conn.execute(
                "SELECT * FROM chat_sessions WHERE id = ?", (session_id,)
            ).fetchone()
        return self._session(row) if row else None

    def list_sessions(self, user_id: int) -> List[ChatSession]:
        with self.transaction() as conn:
            rows = conn.execute(
                """
                SELECT * FROM chat_sessions
                WHERE user_id = ?
                ORDER BY updated_at DESC, id DESC
                """,
                (user_id,)
            ).fetchall()
        return [self._session(row) for row in rows]

    def add_message(
        self,
        session_id: int,
        role: str,
        content: str,
        sentiment: Optional[str] = None
    ) -> ChatMessage:
        now = _ts(self.clock())
        with self.write() as conn:
            cursor = conn.execute(
                """
                INSERT INTO chat_messages (session_id, role, content, sentiment, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (session_id, role, content, sentiment, now)
            )
            message_id = cursor.lastrowid
            conn.execute(
                "UPDATE chat_sessions SET updated_at = ? WHERE id = ?",
                (now, session_id)
            )
            row = conn.execute(
                "SELECT * FROM chat_messages WHERE id = ?", (message_id,)
            ).fetchone()
        return self._message(row)

    def get_messages(self, session_id: int, limit: Optional[int] = None) -> List[ChatMessage]:
        query = "SELECT * FROM chat_messages WHERE session_id = ? ORDER BY created_at DESC, id DESC"
        params = [session_id]
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        with self.transaction() as conn:
            rows = conn.execute(query, params).fetchall()
        # Return in chronological order
        return [self._message(row) for row in reversed(rows)]

    def clear_session(self, session_id: int) -> int:
        with self.write() as conn:
            cursor = conn.execute(
                "DELETE FROM chat_messages WHERE session_id = ?", (session_id,)
            )
            return cursor.rowcount

    def count_messages(
        self,
        user_id: int,
        role: Optional[str] = None,
        since: Optional[datetime] = None
    ) -> int:
        query = """
            SELECT COUNT(*) AS count
            FROM chat_messages m
            JOIN chat_sessions s ON s.id = m.session_id
            WHERE s.user_id = ?
        """
        params = [user_id]

        if role:
            query += " AND m.role = ?"
            params.append(role)

        if since:
            query += " AND m.created_at >= ?"
            params.append(_ts(since))

        with self.transaction() as conn:
            return conn.execute(query, params).fetchone()["count"]

    # === Mood Operations ===

    def add_mood(
        self,
        user_id: int,
        mood: str,
        score: int,
        notes: Optional[str] = None
    ) -> MoodEntry:
        with self.write() as conn:
            cursor = conn.execute(
                """
                INSERT INTO mood_entries (user_id, mood, score, notes, created_at)
                VALUES (?, ?, ?, ?, ?)
                """,
                (user_id, mood, score, notes, _ts(self.clock()))
            )
            row = conn.execute(
                "SELECT * FROM mood_entries WHERE id = ?", (cursor.lastrowid,)
            ).fetchone()
        return self._mood(row)

    def get_moods(self, user_id: int, limit: Optional[int] = None) -> List[MoodEntry]:
        query = "SELECT * FROM mood_entries WHERE user_id = ? ORDER BY created_at DESC, id DESC"
        params = [user_id]
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        with self.transaction() as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._mood(row) for row in rows]

    # === Journal Operations ===

    def add_journal(
        self,
        user_id: int,
        content: str,
        mood: str,
        title: Optional[str] = None,
        tags: Optional[List[str]] = None
    ) -> JournalEntry:
        now = _ts(self.clock())
        with self.write() as conn:
            cursor = conn.execute(
                """
                INSERT INTO journal_entries (user_id, title, content, mood, tags, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (user_id, title, content, mood, json.dumps(tags or []), now, now)
            )
            row = conn.execute(
                "SELECT * FROM journal_entries WHERE id = ?", (cursor.lastrowid,)
            ).fetchone()
        return self._journal(row)

    def get_journal(self, entry_id: int, user_id: int) -> Optional[JournalEntry]:
        with self.transaction() as conn:
            row = conn.execute(
                "SELECT * FROM journal_entries WHERE id = ? AND user_id = ?",
                (entry_id, user_id)
            ).fetchone()
        return self._journal(row) if row else None

    def update_journal(self, entry_id: int, user_id: int, **changes) -> Optional[JournalEntry]:
        updates = {k: v for k, v in changes.items() if k in JOURNAL_FIELDS}
        if "tags" in updates:
            updates["tags"] = json.dumps(updates["tags"] or [])
        updates["updated_at"] = _ts(self.clock())

        assignments = ", ".join(f"{column} = ?" for column in updates)
        params = list(updates.values()) + [entry_id, user_id]

        with self.write() as conn:
            cursor = conn.execute(
                f"UPDATE journal_entries SET {assignments} WHERE id = ? AND user_id = ?",
                params
            )
            if cursor.rowcount == 0:
                return None
            row = conn.execute(
                "SELECT * FROM journal_entries WHERE id = ?", (entry_id,)
            ).fetchone()
        return self._journal(row)

    def delete_journal(self, entry_id: int, user_id: int) -> bool:
        with self.write() as conn:
            cursor = conn.execute(
                "DELETE FROM journal_entries WHERE id = ? AND user_id = ?",
                (entry_id, user_id)
            )
            return cursor.rowcount > 0

    def get_journals(self, user_id: int) -> List[JournalEntry]:
        with self.transaction() as conn:
            rows = conn.execute(
                """
                SELECT * FROM journal_entries
                WHERE user_id = ?
                ORDER BY created_at DESC, id DESC
                """,
                (user_id,)
            ).fetchall()
        return [self._journal(row) for row in rows]

    # === Statistics ===

    def get_statistics(self) -> Dict[str, int]:
        tables = {
            "sessions": "chat_sessions",
            "messages": "chat_messages",
            "moods": "mood_entries",
            "journals": "journal_entries",
        }
        with self.transaction() as conn:
            return {
                key: conn.execute(f"SELECT COUNT(*) AS count FROM {table}").fetchone()["count"]
                for key, table in tables.items()
            }

    def close(self) -> None:
        """Close the database connection for the current thread."""
        connection = getattr(self._local, "connection", None)
        if connection is not None:
            connection.close()
            self._local.connection = None
