"""
Memory Store - In-process storage backend
=========================================

Keeps every record in dictionaries keyed by id. Nothing survives the
process; used for one-off runs and tests.
"""

import threading
from dataclasses import replace
from datetime import datetime
from typing import Callable, Dict, List, Optional

from core.exceptions import DatabaseError
from .base import (
    BaseStore,
    ChatMessage,
    ChatSession,
    JournalEntry,
    MoodEntry,
    JOURNAL_FIELDS,
)


class MemoryStore(BaseStore):
    """
    In-memory storage backend.

    Every read and write holds the store lock, so the dictionaries are
    never iterated while another thread changes them. Sessions and
    journal entries are handed out as copies.
    """

    name = "memory"

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        self.clock = clock or datetime.now
        self.lock = threading.Lock()

        self._sessions: Dict[int, ChatSession] = {}
        self._messages: Dict[int, ChatMessage] = {}
        self._moods: Dict[int, MoodEntry] = {}
        self._journals: Dict[int, JournalEntry] = {}
        self._next_ids = {"session": 1, "message": 1, "mood": 1, "journal": 1}

    def _next_id(self, kind: str) -> int:
        value = self._next_ids[kind]
        self._next_ids[kind] = value + 1
        return value

    # === Chat ===

    def create_session(self, user_id: int) -> ChatSession:
        with self.lock:
            now = self.clock()
            session = ChatSession(
                id=self._next_id("session"),
                user_id=user_id,
                created_at=now,
                updated_at=now,
            )
            self._sessions[session.id] = session
            return replace(session)

    def get_session(self, session_id: int) -> Optional[ChatSession]:
        with self.lock:
            session = self._sessions.get(session_id)
            return replace(session) if session else None

    def list_sessions(self, user_id: int) -> List[ChatSession]:
        with self.lock:
            sessions = [replace(s) for s in self._sessions.values() if s.user_id == user_id]
        return sorted(sessions, key=lambda s: (s.updated_at, s.id), reverse=True)

    def add_message(
        self,
        session_id: int,
        role: str,
        content: str,
        sentiment: Optional[str] = None
    ) -> ChatMessage:
        with self.lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise DatabaseError(
                    "Failed to add message: unknown session",
                    {"session_id": session_id}
                )

            now = self.clock()
            message = ChatMessage(
                id=self._next_id("message"),
                session_id=session_id,
                role=role,
                content=content,
                sentiment=sentiment,
                created_at=now,
            )
            self._messages[message.id] = message
            self._sessions[session_id] = replace(session, updated_at=now)
            return message

    def get_messages(self, session_id: int, limit: Optional[int] = None) -> List[ChatMessage]:
        with self.lock:
            messages = [m for m in self._messages.values() if m.session_id == session_id]
        messages.sort(key=lambda m: (m.created_at, m.id))
        if limit is not None:
            messages = messages[-limit:] if limit > 0 else []
        return messages

    def clear_session(self, session_id: int) -> int:
        with self.lock:
            doomed = [mid for mid, m in self._messages.items() if m.session_id == session_id]
            for message_id in doomed:
                del self._messages[message_id]
            return len(doomed)

    def count_messages(
        self,
        user_id: int,
        role: Optional[str] = None,
        since: Optional[datetime] = None
    ) -> int:
        with self.lock:
            owned = {sid for sid, s in self._sessions.items() if s.user_id == user_id}
            messages = [m for m in self._messages.values() if m.session_id in owned]

        count = 0
        for message in messages:
            if role and message.role != role:
                continue
            if since and message.created_at < since:
                continue
            count += 1
        return count

    # === Moods ===

    def add_mood(
        self,
        user_id: int,
        mood: str,
        score: int,
        notes: Optional[str] = None
    ) -> MoodEntry:
        with self.lock:
            entry = MoodEntry(
                id=self._next_id("mood"),
                user_id=user_id,
                mood=mood,
                score=score,
                notes=notes,
                created_at=self.clock(),
            )
            self._moods[entry.id] = entry
            return entry

    def get_moods(self, user_id: int, limit: Optional[int] = None) -> List[MoodEntry]:
        with self.lock:
            moods = [m for m in self._moods.values() if m.user_id == user_id]
        moods.sort(key=lambda m: (m.created_at, m.id), reverse=True)
        return moods if limit is None else moods[:limit]

    # === Journals ===

    def add_journal(
        self,
        user_id: int,
        content: str,
        mood: str,
        title: Optional[str] = None,
        tags: Optional[List[str]] = None
    ) -> JournalEntry:
        with self.lock:
            now = self.clock()
            entry = JournalEntry(
                id=self._next_id("journal"),
                user_id=user_id,
                title=title,
                content=content,
                mood=mood,
                tags=list(tags or []),
                created_at=now,
                updated_at=now,
            )
            self._journals[entry.id] = entry
            return replace(entry, tags=list(entry.tags))

    def get_journal(self, entry_id: int, user_id: int) -> Optional[JournalEntry]:
        with self.lock:
            entry = self._journals.get(entry_id)
            if entry is None or entry.user_id != user_id:
                return None
            return replace(entry, tags=list(entry.tags))

    def update_journal(self, entry_id: int, user_id: int, **changes) -> Optional[JournalEntry]:
        with self.lock:
            entry = self._journals.get(entry_id)
            if entry is None or entry.user_id != user_id:
                return None

            updates = {k: v for k, v in changes.items() if k in JOURNAL_FIELDS}
            if "tags" in updates:
                updates["tags"] = list(updates["tags"] or [])

            updated = replace(entry, updated_at=self.clock(), **updates)
            self._journals[entry_id] = updated
            return replace(updated, tags=list(updated.tags))

    def delete_journal(self, entry_id: int, user_id: int) -> bool:
        with self.lock:
            entry = self._journals.get(entry_id)
            if entry is None or entry.user_id != user_id:
                return False
            del self._journals[entry_id]
            return True

    def get_journals(self, user_id: int) -> List[JournalEntry]:
        with self.lock:
            entries = [
                replace(e, tags=list(e.tags))
                for e in self._journals.values()
                if e.user_id == user_id
            ]
        entries.sort(key=lambda e: (e.created_at, e.id), reverse=True)
        return entries

    def get_statistics(self) -> Dict[str, int]:
        with self.lock:
            return {
                "sessions": len(self._sessions),
                "messages": len(self._messages),
                "moods": len(self._moods),
                "journals": len(self._journals),
            }
