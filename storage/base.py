"""
Base Store - Record types and the abstract storage interface
============================================================

This module defines the records persisted by the application and the
interface every storage backend implements, so services never depend
on a particular storage technology.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass
class ChatSession:
    """A conversation between a user and the responder."""
    id: int
    user_id: int
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


@dataclass
class ChatMessage:
    """
    A single chat message.

    Attributes:
        role (str): "user" or "assistant"
        sentiment (str): Sentiment label, set on user messages only
    """
    id: int
    session_id: int
    role: str
    content: str
    created_at: datetime
    sentiment: Optional[str] = None

    @property
    def is_user(self) -> bool:
        return self.role == "user"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "session_id": self.session_id,
            "role": self.role,
            "content": self.content,
            "sentiment": self.sentiment,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class MoodEntry:
    """A logged mood with its 1-10 score."""
    id: int
    user_id: int
    mood: str
    score: int
    created_at: datetime
    notes: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "mood": self.mood,
            "score": self.score,
            "notes": self.notes,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class JournalEntry:
    """A journal entry written by a user."""
    id: int
    user_id: int
    content: str
    mood: str
    created_at: datetime
    updated_at: datetime
    title: Optional[str] = None
    tags: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "content": self.content,
            "mood": self.mood,
            "tags": list(self.tags),
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


# Journal fields that update_journal may change
JOURNAL_FIELDS = ("title", "content", "mood", "tags")


class BaseStore(ABC):
    """
    Abstract storage interface.

    Implementations must serialize mutations so only one write is in
    flight at a time. Lookups of missing records return None (or False
    for deletes); failures of the backend raise DatabaseError.

    List ordering:
    - get_messages: chronological (oldest first)
    - get_moods, get_journals, list_sessions: newest first
    """

    name: str = "base"

    # === Chat ===

    @abstractmethod
    def create_session(self, user_id: int) -> ChatSession:
        pass

    @abstractmethod
    def get_session(self, session_id: int) -> Optional[ChatSession]:
        pass

    @abstractmethod
    def list_sessions(self, user_id: int) -> List[ChatSession]:
        pass

    @abstractmethod
    def add_message(
        self,
        session_id: int,
        role: str,
        content: str,
        sentiment: Optional[str] = None
    ) -> ChatMessage:
        pass

    @abstractmethod
    def get_messages(self, session_id: int, limit: Optional[int] = None) -> List[ChatMessage]:
        """Return the session's messages; with a limit, only the most recent ones."""

    @abstractmethod
    def clear_session(self, session_id: int) -> int:
        """Delete a session's messages and return how many were removed."""

    @abstractmethod
    def count_messages(
        self,
        user_id: int,
        role: Optional[str] = None,
        since: Optional[datetime] = None
    ) -> int:
        pass

    # === Moods ===

    @abstractmethod
    def add_mood(
        self,
        user_id: int,
        mood: str,
        score: int,
        notes: Optional[str] = None
    ) -> MoodEntry:
        pass

    @abstractmethod
    def get_moods(self, user_id: int, limit: Optional[int] = None) -> List[MoodEntry]:
        pass

    # === Journals ===

    @abstractmethod
    def add_journal(
        self,
        user_id: int,
        content: str,
        mood: str,
        title: Optional[str] = None,
        tags: Optional[List[str]] = None
    ) -> JournalEntry:
        pass

    @abstractmethod
    def get_journal(self, entry_id: int, user_id: int) -> Optional[JournalEntry]:
        pass

    @abstractmethod
    def update_journal(self, entry_id: int, user_id: int, **changes) -> Optional[JournalEntry]:
        pass

    @abstractmethod
    def delete_journal(self, entry_id: int, user_id: int) -> bool:
        pass

    @abstractmethod
    def get_journals(self, user_id: int) -> List[JournalEntry]:
        pass

    # === Misc ===

    @abstractmethod
    def get_statistics(self) -> Dict[str, int]:
        """Return row counts per record type."""

    def close(self) -> None:
        """Release backend resources."""
