"""
Journal Service - Journal entries and search
============================================

CRUD over journal entries, search by text, mood, tags and a relative
date range, and writing prompts for when the page is blank.
"""

import random
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable, Iterable, List, Optional

from core.exceptions import NotFoundError, ValidationError
from core.logging import get_logger
from storage.base import BaseStore, JournalEntry

logger = get_logger("services.journal")

DEFAULT_USER_ID = 1

DATE_RANGES = ("today", "week", "month", "year")


@dataclass(frozen=True)
class JournalPrompt:
    """A writing suggestion; the description seeds a new entry."""
    title: str
    description: str


PROMPTS = (
    JournalPrompt("Gratitude Reflection", "What are three things you're grateful for today?"),
    JournalPrompt(
        "Challenge & Growth",
        "What challenge did you face today and how did you handle it?"
    ),
    JournalPrompt("Future Self", "What would you tell yourself one year from now?"),
    JournalPrompt("Mindful Moment", "Describe a moment today when you felt truly present."),
    JournalPrompt("Grateful Today", "What are you grateful for today?"),
    JournalPrompt("Good Memory", "Describe a positive experience you had recently."),
    JournalPrompt("Small Joys", "Write about something that made you smile."),
    JournalPrompt("Check In", "How are you feeling right now?"),
    JournalPrompt("Weekly Goal", "What is one thing you want to achieve this week?"),
)


def _clean_tags(tags: Optional[Iterable[str]]) -> List[str]:
    if tags is None:
        return []
    if isinstance(tags, str):
        tags = tags.split(",")
    cleaned = []
    for tag in tags:
        tag = str(tag).strip()
        if tag and tag not in cleaned:
            cleaned.append(tag)
    return cleaned


def _shift_months(moment: datetime, months: int) -> datetime:
    """Move a datetime back or forward by whole months, clamping the day."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    for day in (moment.day, 30, 29, 28):
        try:
            return moment.replace(year=year, month=month, day=day)
        except ValueError:
            continue
    raise ValueError(f"Cannot shift {moment} by {months} months")


class JournalService:
    """Manages a user's journal entries."""

    def __init__(
        self,
        store: BaseStore,
        clock: Optional[Callable[[], datetime]] = None,
        rng: Optional[Any] = None
    ):
        self.store = store
        self.clock = clock or datetime.now
        self.rng = rng if rng is not None else random.Random()

    def prompt(self, rng: Optional[Any] = None) -> JournalPrompt:
        """
        Pick a writing prompt uniformly at random.

        Args:
            rng: Object with a random() method; defaults to the service's source
        """
        source = rng if rng is not None else self.rng
        index = int(source.random() * len(PROMPTS))
        return PROMPTS[min(index, len(PROMPTS) - 1)]

    def create(
        self,
        content: str,
        mood: str,
        title: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
        user_id: int = DEFAULT_USER_ID
    ) -> JournalEntry:
        """
        Create a journal entry.

        Raises:
            ValidationError: If content or mood is blank
        """
        if not isinstance(content, str) or not content.strip():
            raise ValidationError("Journal content is required")
        if not isinstance(mood, str) or not mood.strip():
            raise ValidationError("Journal mood is required")

        entry = self.store.add_journal(
            user_id,
            content=content,
            mood=mood.strip(),
            title=title.strip() if title and title.strip() else None,
            tags=_clean_tags(tags),
        )
        logger.info(f"Created journal entry {entry.id}")
        return entry

    def get(self, entry_id: int, user_id: int = DEFAULT_USER_ID) -> JournalEntry:
        entry = self.store.get_journal(entry_id, user_id)
        if entry is None:
            raise NotFoundError("Journal entry not found", {"id": entry_id})
        return entry

    def update(self, entry_id: int, user_id: int = DEFAULT_USER_ID, **changes) -> JournalEntry:
        """
        Partially update an entry.

        Only title, content, mood and tags can change; unknown fields
        raise ValidationError.
        """
        unknown = set(changes) - {"title", "content", "mood", "tags"}
        if unknown:
            raise ValidationError("Unknown journal fields", {"fields": sorted(unknown)})

        for field_name in ("content", "mood"):
            if field_name in changes:
                value = changes[field_name]
                if not isinstance(value, str) or not value.strip():
                    raise ValidationError(f"Journal {field_name} cannot be empty")

        if "tags" in changes:
            changes["tags"] = _clean_tags(changes["tags"])

        entry = self.store.update_journal(entry_id, user_id, **changes)
        if entry is None:
            raise NotFoundError("Journal entry not found", {"id": entry_id})
        return entry

    def delete(self, entry_id: int, user_id: int = DEFAULT_USER_ID) -> None:
        if not self.store.delete_journal(entry_id, user_id):
            raise NotFoundError("Journal entry not found", {"id": entry_id})
        logger.info(f"Deleted journal entry {entry_id}")

    def list(self, user_id: int = DEFAULT_USER_ID) -> List[JournalEntry]:
        """All entries, newest first."""
        return self.store.get_journals(user_id)

    def search(
        self,
        query: str = "",
        mood: Optional[str] = None,
        date_range: Optional[str] = None,
        tags: Optional[Iterable[str]] = None,
        user_id: int = DEFAULT_USER_ID
    ) -> List[JournalEntry]:
        """
        Filter entries.

        Args:
            query: Case-insensitive text matched against title and content
            mood: Exact mood label
            date_range: "today", "week", "month" or "year"
            tags: Entries carrying any of these tags

        Raises:
            ValidationError: If date_range is not recognized
        """
        if date_range and date_range not in DATE_RANGES:
            raise ValidationError(
                f"Unknown date range: {date_range}",
                {"allowed": list(DATE_RANGES)}
            )

        needle = (query or "").lower()
        wanted_tags = set(_clean_tags(tags))
        cutoff_check = self._date_filter(date_range)

        results = []
        for entry in self.store.get_journals(user_id):
            if needle and needle not in entry.content.lower() and \
                    needle not in (entry.title or "").lower():
                continue
            if mood and entry.mood != mood:
                continue
            if wanted_tags and not wanted_tags.intersection(entry.tags):
                continue
            if cutoff_check and not cutoff_check(entry.created_at):
                continue
            results.append(entry)
        return results

    def _date_filter(self, date_range: Optional[str]) -> Optional[Callable[[datetime], bool]]:
        if not date_range:
            return None

        now = self.clock()
        if date_range == "today":
            return lambda ts: ts.date() == now.date()
        if date_range == "week":
            cutoff = now - timedelta(days=7)
        elif date_range == "month":
            cutoff = _shift_months(now, -1)
        else:
            cutoff = _shift_months(now, -12)
        return lambda ts: ts >= cutoff
