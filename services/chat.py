"""
Chat Service - Conversations with the scripted responder
========================================================

This module ties the response engine to storage: it records the
user's message with its sentiment, builds the conversation context
from the stored history, and stores the generated reply.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from core.exceptions import NotFoundError, ValidationError
from core.logging import get_logger, log_context
from rules.engine import ChatContext, ResponseEngine
from rules.sentiment import SentimentAnalyzer
from storage.base import BaseStore, ChatMessage, ChatSession

logger = get_logger("services.chat")

DEFAULT_USER_ID = 1


@dataclass
class ChatReply:
    """
    Result of handling one user message.

    Attributes:
        message (str): Reply text shown to the user, follow-up included
        follow_up (str): The follow-up question, if any
        sentiment (str): Sentiment of the user's message
        session_id (int): Conversation the exchange was stored in
        category (str): Matched pattern name, None for a general reply
    """
    message: str
    sentiment: str
    session_id: int
    follow_up: Optional[str] = None
    category: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "followUp": self.follow_up,
            "sentiment": self.sentiment,
            "sessionId": self.session_id,
        }


class ChatService:
    """
    Handles chat turns for a user.

    Example:
        service = ChatService(store, ResponseEngine())
        reply = service.send_message("I can't sleep lately")
        again = service.send_message("still tired", session_id=reply.session_id)
    """

    def __init__(
        self,
        store: BaseStore,
        engine: ResponseEngine,
        analyzer: Optional[SentimentAnalyzer] = None,
        clock: Optional[Callable[[], datetime]] = None,
        context_window: int = 5
    ):
        self.store = store
        self.engine = engine
        self.analyzer = analyzer or SentimentAnalyzer()
        self.clock = clock or datetime.now
        self.context_window = context_window

    def send_message(
        self,
        message: str,
        session_id: Optional[int] = None,
        user_id: int = DEFAULT_USER_ID
    ) -> ChatReply:
        """
        Store a user message, generate the reply and store it too.

        Args:
            message: The user's message
            session_id: Existing conversation; a new one is started if None
            user_id: Owner of the conversation

        Returns:
            ChatReply

        Raises:
            ValidationError: If the message is not a non-blank string
            NotFoundError: If session_id does not belong to the user
        """
        if not isinstance(message, str) or not message.strip():
            raise ValidationError("Message is required")

        session = self._resolve_session(session_id, user_id)

        with log_context(session_id=session.id, user_id=user_id):
            previous = self.store.get_messages(session.id)

            sentiment = self.analyzer.analyze(message).value
            self.store.add_message(session.id, "user", message, sentiment=sentiment)

            context = self._build_context(previous, user_id)
            response = self.engine.generate(message, context)

            self.store.add_message(session.id, "assistant", response.message)

            logger.info(
                "Chat reply stored",
                extra={"context": {
                    "category": response.category or "general",
                    "sentiment": sentiment,
                    "conversation_length": context.conversation_length,
                }}
            )

        return ChatReply(
            message=response.message,
            follow_up=response.follow_up,
            sentiment=sentiment,
            session_id=session.id,
            category=response.category,
        )

    def _resolve_session(self, session_id: Optional[int], user_id: int) -> ChatSession:
        if session_id is None:
            session = self.store.create_session(user_id)
            logger.info(f"Started chat session {session.id}")
            return session

        session = self.store.get_session(session_id)
        if session is None or session.user_id != user_id:
            raise NotFoundError("Chat session not found", {"session_id": session_id})
        return session

    def _build_context(self, previous: List[ChatMessage], user_id: int) -> ChatContext:
        user_messages = [m.content for m in previous if m.is_user]
        window = user_messages[-self.context_window:] if self.context_window else []

        latest_mood = self.store.get_moods(user_id, limit=1)

        return ChatContext(
            previous_messages=window,
            time_of_day=self.clock().strftime("%H:%M:%S"),
            conversation_length=len(previous) + 1,
            user_mood=latest_mood[0].score if latest_mood else None,
        )

    def get_history(self, session_id: int, user_id: int = DEFAULT_USER_ID) -> List[ChatMessage]:
        """Return a session's messages, oldest first."""
        session = self._resolve_session(session_id, user_id)
        return self.store.get_messages(session.id)

    def clear_history(self, session_id: int, user_id: int = DEFAULT_USER_ID) -> int:
        """Delete a session's messages; returns the number removed."""
        session = self._resolve_session(session_id, user_id)
        removed = self.store.clear_session(session.id)
        logger.info(f"Cleared {removed} messages from session {session.id}")
        return removed

    def list_sessions(self, user_id: int = DEFAULT_USER_ID) -> List[ChatSession]:
        return self.store.list_sessions(user_id)
