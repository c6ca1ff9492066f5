"""
Storage Module - Persistence backends
=====================================

This module provides the record types and the two interchangeable
backends behind a single interface:
- SQLite file-backed store
- In-memory store
"""

from .base import BaseStore, ChatSession, ChatMessage, MoodEntry, JournalEntry
from .sqlite import SQLiteStore
from .memory import MemoryStore
from .factory import create_store

__all__ = [
    "BaseStore",
    "ChatSession",
    "ChatMessage",
    "MoodEntry",
    "JournalEntry",
    "SQLiteStore",
    "MemoryStore",
    "create_store",
]
