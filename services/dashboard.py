"""
Dashboard Service - Overview numbers for a user
===============================================
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from storage.base import BaseStore, JournalEntry
from .mood import MoodTracker
from .streaks import day_streak

DEFAULT_USER_ID = 1
RECENT_ENTRIES = 3


@dataclass
class DashboardStats:
    """
    Attributes:
        journal_streak (int): Consecutive days with a journal entry, ending today
        total_entries (int): Number of journal entries
        chats_this_month (int): User messages sent this calendar month
        average_mood (float): Average mood score, 0 without entries
        recent_entries (list): Newest journal entries
    """
    journal_streak: int
    total_entries: int
    chats_this_month: int
    average_mood: float
    recent_entries: List[JournalEntry] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "journalStreak": self.journal_streak,
            "totalEntries": self.total_entries,
            "aiChats": self.chats_this_month,
            "avgMood": self.average_mood,
            "recentEntries": [e.to_dict() for e in self.recent_entries],
        }


class DashboardService:
    """Aggregates journal, mood and chat activity."""

    def __init__(self, store: BaseStore, clock: Optional[Callable[[], datetime]] = None):
        self.store = store
        self.clock = clock or datetime.now
        self.moods = MoodTracker(store, clock=self.clock)

    def stats(self, user_id: int = DEFAULT_USER_ID) -> DashboardStats:
        now = self.clock()
        journals = self.store.get_journals(user_id)
        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

        return DashboardStats(
            journal_streak=day_streak((e.created_at for e in journals), now.date()),
            total_entries=len(journals),
            chats_this_month=self.store.count_messages(user_id, role="user", since=month_start),
            average_mood=self.moods.stats(user_id).average_score,
            recent_entries=journals[:RECENT_ENTRIES],
        )
