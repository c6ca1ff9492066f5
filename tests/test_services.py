"""
Test Services Module
====================

Unit tests for the chat, mood, journal and dashboard services.
"""

import pytest
from datetime import datetime, timedelta
from pathlib import Path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.exceptions import NotFoundError, ValidationError
from rules.engine import FIRST_MESSAGE_GREETING, ChatContext, ResponseEngine
from rules.patterns import DEFAULT_TABLE, GENERAL_RESPONSES
from services import ChatService, DashboardService, JournalService, MoodTracker
from services.journal import PROMPTS
from services.mood import score_for
from services.streaks import day_streak
from storage import MemoryStore


NOW = datetime(2026, 10, 19, 14, 0)


class FixedRandom:
    def __init__(self, value=0.0):
        self.value = value

    def random(self):
        return self.value


class ManualClock:
    """Clock that stays put until moved."""

    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


class RecordingEngine(ResponseEngine):
    """Engine that remembers the contexts it was given."""

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.contexts = []

    def generate(self, message, context=None):
        self.contexts.append(context)
        return super().generate(message, context)


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def store(clock):
    return MemoryStore(clock=clock)


@pytest.fixture
def engine(clock):
    return RecordingEngine(rng=FixedRandom(0.0), clock=clock)


@pytest.fixture
def chat(store, engine, clock):
    return ChatService(store, engine, clock=clock)


class TestChatService:
    """Tests for ChatService."""

    def test_first_message_starts_session(self, chat, store):
        reply = chat.send_message("The weather is mild today")

        assert reply.session_id == store.list_sessions(1)[0].id
        assert reply.message == FIRST_MESSAGE_GREETING + GENERAL_RESPONSES[0]
        assert reply.sentiment == "neutral"
        assert reply.category is None

    def test_both_turns_stored(self, chat, store):
        reply = chat.send_message("I feel so anxious and worried")

        messages = store.get_messages(reply.session_id)

        assert [m.role for m in messages] == ["user", "assistant"]
        assert messages[0].content == "I feel so anxious and worried"
        assert messages[0].sentiment == "negative"
        assert messages[1].content == reply.message
        assert messages[1].sentiment is None

    def test_conversation_length_counts_stored_messages(self, chat, engine):
        first = chat.send_message("hello")
        chat.send_message("I feel anxious", session_id=first.session_id)
        third = chat.send_message("still here", session_id=first.session_id)

        lengths = [c.conversation_length for c in engine.contexts]
        assert lengths == [1, 3, 5]
        assert not third.message.startswith(FIRST_MESSAGE_GREETING)

    def test_greeting_only_on_first_message(self, chat):
        first = chat.send_message("I feel anxious")
        second = chat.send_message("I feel anxious", session_id=first.session_id)

        anxiety = DEFAULT_TABLE.get("anxiety")
        assert first.message == FIRST_MESSAGE_GREETING + anxiety.responses[0]
        assert second.message == anxiety.responses[0]
        assert second.category == "anxiety"

    def test_context_carries_previous_user_messages(self, store, engine, clock):
        chat = ChatService(store, engine, clock=clock, context_window=2)
        reply = chat.send_message("one")
        for text in ("two", "three", "four"):
            chat.send_message(text, session_id=reply.session_id)

        context = engine.contexts[-1]
        assert isinstance(context, ChatContext)
        assert context.previous_messages == ["two", "three"]
        assert context.time_of_day == "14:00:00"

    def test_context_includes_latest_mood(self, chat, store, engine):
        store.add_mood(1, "sad", 3)
        store.add_mood(1, "happy", 8)

        chat.send_message("hi")

        assert engine.contexts[-1].user_mood == 8

    def test_blank_message_rejected(self, chat, store):
        for message in ("", "   ", None, 42):
            with pytest.raises(ValidationError):
                chat.send_message(message)
        assert store.list_sessions(1) == []

    def test_unknown_session(self, chat):
        with pytest.raises(NotFoundError):
            chat.send_message("hi", session_id=999)

    def test_session_of_other_user(self, chat):
        reply = chat.send_message("hi", user_id=1)
        with pytest.raises(NotFoundError):
            chat.send_message("hi", session_id=reply.session_id, user_id=2)

    def test_history_and_clear(self, chat):
        reply = chat.send_message("hi")
        chat.send_message("again", session_id=reply.session_id)

        assert len(chat.get_history(reply.session_id)) == 4
        assert chat.clear_history(reply.session_id) == 4
        assert chat.get_history(reply.session_id) == []

    def test_reply_to_dict(self, chat):
        data = chat.send_message("I'm so happy").to_dict()
        assert data["sentiment"] == "positive"
        assert set(data) == {"message", "followUp", "sentiment", "sessionId"}


class TestMoodTracker:
    """Tests for MoodTracker."""

    def test_log_with_score(self, store, clock):
        tracker = MoodTracker(store, clock=clock)
        entry = tracker.log_mood("happy", 7, notes="  Sunny walk ")

        assert entry.mood == "happy"
        assert entry.score == 7
        assert entry.notes == "Sunny walk"

    def test_score_from_label(self, store, clock):
        tracker = MoodTracker(store, clock=clock)
        assert tracker.log_mood("anxious").score == 2
        assert tracker.log_mood("Very-Happy").score == 10
        assert tracker.log_mood("curious").score == 5

    def test_score_for(self):
        assert score_for("excited") == 9
        assert score_for(" Tired ") == 4

    @pytest.mark.parametrize("mood,score", [
        ("", 5), ("  ", 5), (None, 5), ("happy", 0), ("happy", 11), ("happy", "7"), ("happy", True),
    ])
    def test_validation(self, store, mood, score):
        with pytest.raises(ValidationError):
            MoodTracker(store).log_mood(mood, score)

    def test_stats_empty(self, store, clock):
        stats = MoodTracker(store, clock=clock).stats()
        assert (stats.average_score, stats.streak, stats.total_entries) == (0, 0, 0)

    def test_stats(self, store, clock):
        tracker = MoodTracker(store, clock=clock)
        clock.advance(days=-2)
        tracker.log_mood("sad", 3)
        clock.advance(days=1)
        tracker.log_mood("neutral", 5)
        clock.advance(days=1)
        tracker.log_mood("happy", 8)
        tracker.log_mood("very-happy", 10)

        stats = tracker.stats()

        assert stats.total_entries == 4
        assert stats.average_score == 6.5
        assert stats.streak == 3
        assert stats.to_dict() == {"averageScore": 6.5, "streak": 3, "totalEntries": 4}

    def test_recent(self, store, clock):
        tracker = MoodTracker(store, clock=clock)
        for score in range(1, 10):
            tracker.log_mood("neutral", score)
            clock.advance(minutes=1)

        assert [e.score for e in tracker.recent(limit=3)] == [9, 8, 7]
        assert len(tracker.history()) == 9


class TestStreak:
    """Tests for day_streak."""

    def test_consecutive_days(self):
        days = [NOW, NOW - timedelta(days=1), NOW - timedelta(days=2)]
        assert day_streak(days, NOW.date()) == 3

    def test_same_day_counts_once(self):
        days = [NOW, NOW.replace(hour=8), NOW - timedelta(days=1)]
        assert day_streak(days, NOW.date()) == 2

    def test_gap_breaks_streak(self):
        days = [NOW, NOW - timedelta(days=2)]
        assert day_streak(days, NOW.date()) == 1

    def test_nothing_today(self):
        assert day_streak([NOW - timedelta(days=1)], NOW.date()) == 0
        assert day_streak([], NOW.date()) == 0


class TestJournalService:
    """Tests for JournalService."""

    @pytest.fixture
    def journal(self, store, clock):
        return JournalService(store, clock=clock)

    def test_create_and_get(self, journal):
        entry = journal.create("Long day at work", "tired", title=" Monday ", tags="work, sleep,work")

        assert entry.title == "Monday"
        assert entry.tags == ["work", "sleep"]
        assert journal.get(entry.id) == entry

    def test_create_requires_content_and_mood(self, journal):
        with pytest.raises(ValidationError):
            journal.create("  ", "happy")
        with pytest.raises(ValidationError):
            journal.create("Text", "")

    def test_get_missing(self, journal):
        with pytest.raises(NotFoundError):
            journal.get(123)

    def test_update(self, journal):
        entry = journal.create("Draft", "neutral")

        updated = journal.update(entry.id, content="Final", tags=["done"])

        assert updated.content == "Final"
        assert updated.tags == ["done"]
        assert updated.mood == "neutral"

    def test_update_rejects_bad_fields(self, journal):
        entry = journal.create("Draft", "neutral")
        with pytest.raises(ValidationError):
            journal.update(entry.id, user_id=1, owner=5)
        with pytest.raises(ValidationError):
            journal.update(entry.id, content="  ")
        with pytest.raises(NotFoundError):
            journal.update(999, content="Text")

    def test_delete(self, journal):
        entry = journal.create("Text", "happy")
        journal.delete(entry.id)

        assert journal.list() == []
        with pytest.raises(NotFoundError):
            journal.delete(entry.id)

    def test_entries_private_to_user(self, journal):
        entry = journal.create("Mine", "happy", user_id=1)
        with pytest.raises(NotFoundError):
            journal.get(entry.id, user_id=2)
        assert journal.list(user_id=2) == []

    def test_search_text_mood_and_tags(self, journal):
        journal.create("Stressful meeting at work", "anxious", title="Office", tags=["work"])
        journal.create("Slept well", "happy", title="Rest", tags=["sleep"])
        journal.create("Nothing much", "neutral", title="Work from home")

        assert [e.title for e in journal.search("WORK")] == ["Work from home", "Office"]
        assert [e.title for e in journal.search(mood="happy")] == ["Rest"]
        assert [e.title for e in journal.search(tags=["sleep", "other"])] == ["Rest"]
        assert [e.title for e in journal.search("work", mood="anxious")] == ["Office"]
        assert len(journal.search()) == 3

    def test_search_date_ranges(self, journal, clock):
        start = clock.now
        clock.now = start - timedelta(days=200)
        journal.create("Old", "neutral")
        clock.now = start - timedelta(days=20)
        journal.create("This month", "neutral")
        clock.now = start - timedelta(days=3)
        journal.create("This week", "neutral")
        clock.now = start
        journal.create("Today", "neutral")

        def contents(date_range):
            return [e.content for e in journal.search(date_range=date_range)]

        assert contents("today") == ["Today"]
        assert contents("week") == ["Today", "This week"]
        assert contents("month") == ["Today", "This week", "This month"]
        assert contents("year") == ["Today", "This week", "This month", "Old"]

    def test_search_unknown_range(self, journal):
        with pytest.raises(ValidationError):
            journal.search(date_range="decade")

    def test_prompt_uses_random_source(self, store):
        journal = JournalService(store, rng=FixedRandom(0.0))
        assert journal.prompt() == PROMPTS[0]
        assert journal.prompt().title == "Gratitude Reflection"

    @pytest.mark.parametrize("value, index", [(0.5, 4), (0.99, 8), (0.9999999, 8)])
    def test_prompt_pick(self, store, value, index):
        journal = JournalService(store)
        assert journal.prompt(rng=FixedRandom(value)) == PROMPTS[index]

    def test_prompt_pool(self):
        assert len(PROMPTS) == 9
        assert all(p.title and p.description for p in PROMPTS)
        assert "How are you feeling right now?" in [p.description for p in PROMPTS]


class TestDashboardService:
    """Tests for DashboardService."""

    def test_empty(self, store, clock):
        stats = DashboardService(store, clock=clock).stats()

        assert stats.journal_streak == 0
        assert stats.total_entries == 0
        assert stats.chats_this_month == 0
        assert stats.average_mood == 0
        assert stats.recent_entries == []

    def test_stats(self, store, clock, chat):
        journal = JournalService(store, clock=clock)
        tracker = MoodTracker(store, clock=clock)

        clock.now = datetime(2026, 9, 30, 20, 0)
        chat.send_message("last month")
        journal.create("September", "neutral")

        clock.now = datetime(2026, 10, 18, 10, 0)
        reply = chat.send_message("yesterday")
        chat.send_message("again", session_id=reply.session_id)
        journal.create("Yesterday", "happy")
        tracker.log_mood("happy", 8)

        clock.now = NOW
        for i in range(3):
            journal.create(f"Today {i}", "happy")
        tracker.log_mood("sad", 3)

        stats = DashboardService(store, clock=clock).stats()

        assert stats.journal_streak == 2
        assert stats.total_entries == 5
        assert stats.chats_this_month == 2
        assert stats.average_mood == 5.5
        assert [e.content for e in stats.recent_entries] == ["Today 2", "Today 1", "Today 0"]

        data = stats.to_dict()
        assert data["aiChats"] == 2
        assert data["journalStreak"] == 2
        assert len(data["recentEntries"]) == 3


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
