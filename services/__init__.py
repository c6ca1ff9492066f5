"""
Services Module - Application services for Wellness Companion
=============================================================

This module provides the main services:
- Chat Service: conversations with the scripted responder
- Mood Tracker: mood logging and statistics
- Journal Service: journal entries, search and writing prompts
- Dashboard Service: activity overview
"""

from .chat import ChatService, ChatReply
from .mood import MoodTracker, MoodStats
from .journal import JournalService, JournalPrompt
from .dashboard import DashboardService, DashboardStats

__all__ = [
    "ChatService",
    "ChatReply",
    "MoodTracker",
    "MoodStats",
    "JournalService",
    "JournalPrompt",
    "DashboardService",
    "DashboardStats",
]
