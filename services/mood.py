"""
Mood Tracker - Logging moods and summarizing them
=================================================
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional

from core.exceptions import ValidationError
from core.logging import get_logger
from storage.base import BaseStore, MoodEntry
from .streaks import day_streak

logger = get_logger("services.mood")

DEFAULT_USER_ID = 1

MIN_SCORE = 1
MAX_SCORE = 10

# Score used when a mood is logged by label only
MOOD_SCORES: Dict[str, int] = {
    "very-happy": 10,
    "excited": 9,
    "happy": 8,
    "neutral": 5,
    "tired": 4,
    "sad": 3,
    "anxious": 2,
}
DEFAULT_SCORE = 5


@dataclass
class MoodStats:
    """Summary of a user's mood entries."""
    average_score: float
    streak: int
    total_entries: int

    def to_dict(self) -> Dict[str, float]:
        return {
            "averageScore": self.average_score,
            "streak": self.streak,
            "totalEntries": self.total_entries,
        }


def score_for(mood: str) -> int:
    """Default score for a mood label."""
    return MOOD_SCORES.get(mood.strip().lower(), DEFAULT_SCORE)


class MoodTracker:
    """Records mood entries and computes their statistics."""

    def __init__(self, store: BaseStore, clock: Optional[Callable[[], datetime]] = None):
        self.store = store
        self.clock = clock or datetime.now

    def log_mood(
        self,
        mood: str,
        score: Optional[int] = None,
        notes: Optional[str] = None,
        user_id: int = DEFAULT_USER_ID
    ) -> MoodEntry:
        """
        Log a mood.

        Args:
            mood: Mood label, e.g. "happy"
            score: 1-10; derived from the label when omitted
            notes: Optional free text

        Raises:
            ValidationError: If the label is blank or the score out of range
        """
        if not isinstance(mood, str) or not mood.strip():
            raise ValidationError("Mood is required")

        if score is None:
            score = score_for(mood)
        if isinstance(score, bool) or not isinstance(score, int):
            raise ValidationError("Mood score must be an integer", {"score": score})
        if not MIN_SCORE <= score <= MAX_SCORE:
            raise ValidationError(
                f"Mood score must be between {MIN_SCORE} and {MAX_SCORE}",
                {"score": score}
            )

        notes = notes.strip() if notes else None
        entry = self.store.add_mood(user_id, mood.strip(), score, notes or None)
        logger.info(f"Logged mood '{entry.mood}' ({entry.score})")
        return entry

    def history(self, user_id: int = DEFAULT_USER_ID) -> List[MoodEntry]:
        """All mood entries, newest first."""
        return self.store.get_moods(user_id)

    def recent(self, limit: int = 7, user_id: int = DEFAULT_USER_ID) -> List[MoodEntry]:
        return self.store.get_moods(user_id, limit=limit)

    def stats(self, user_id: int = DEFAULT_USER_ID) -> MoodStats:
        entries = self.store.get_moods(user_id)
        if not entries:
            return MoodStats(average_score=0, streak=0, total_entries=0)

        average = sum(e.score for e in entries) / len(entries)
        return MoodStats(
            average_score=round(average, 1),
            streak=day_streak((e.created_at for e in entries), self.clock().date()),
            total_entries=len(entries),
        )
