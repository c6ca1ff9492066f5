"""
Response Engine - Keyword matching and reply selection
======================================================

This module implements the engine that matches a user's message
against the ordered pattern table and builds the reply: a random
reply from the matched pool (or the general pool), an occasional
follow-up question, and a greeting on the first message of a
conversation.

The random source and the clock are constructor arguments so that
callers and tests can pin the output.
"""

import random
from pathlib import Path
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from core.logging import get_logger
from .patterns import DEFAULT_TABLE, PatternTable, ResponsePattern, load_patterns

logger = get_logger("rules.engine")


FIRST_MESSAGE_GREETING = "Hello! I'm here to listen and support you. "
MORNING_GREETING = "Good morning! "
EVENING_GREETING = "Good evening! "

# Local hours bounding the time-of-day greetings
MORNING_ENDS = 12
EVENING_STARTS = 18


@dataclass
class ChatContext:
    """
    Per-request conversational metadata.

    Attributes:
        previous_messages (list): Most recent user messages, oldest first
        time_of_day (str): Wall-clock time of the request, e.g. "09:15:02"
        conversation_length (int): Position of this message in the
            conversation; 1 means it opens the conversation
        user_mood (int): Latest logged mood score, if any

    time_of_day and user_mood are informational; replies do not depend
    on them and the greeting hour is read from the engine clock.
    """
    previous_messages: List[str] = field(default_factory=list)
    time_of_day: str = ""
    conversation_length: int = 0
    user_mood: Optional[int] = None

    @property
    def is_first_message(self) -> bool:
        return self.conversation_length == 1

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ChatContext":
        """
        Build a context from a loosely-typed mapping.

        Accepts snake_case or camelCase keys. Missing or malformed
        values fall back to defaults, so an absent conversation length
        is treated as a continuing conversation.
        """
        data = data or {}

        def pick(*keys):
            for key in keys:
                if key in data and data[key] is not None:
                    return data[key]
            return None

        previous = pick("previous_messages", "previousMessages") or []
        if isinstance(previous, str):
            previous = [previous]
        elif not isinstance(previous, (list, tuple)):
            previous = []

        return cls(
            previous_messages=[str(m) for m in previous],
            time_of_day=str(pick("time_of_day", "timeOfDay") or ""),
            conversation_length=_as_int(pick("conversation_length", "conversationLength"), 0),
            user_mood=_as_int(pick("user_mood", "userMood"), None),
        )


def _as_int(value: Any, default: Optional[int]) -> Optional[int]:
    """Whole numbers and integer strings only; anything else gives the default."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else default
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return default
    return default


@dataclass
class EngineResponse:
    """
    Reply produced by the engine.

    Attributes:
        message (str): Final text, follow-up already appended
        follow_up (str): The follow-up question, if one was chosen
        category (str): Name of the matched pattern, None for the general pool
        tone (str): Tone tag of the matched pattern
    """
    message: str
    follow_up: Optional[str] = None
    category: Optional[str] = None
    tone: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"message": self.message}
        if self.follow_up:
            data["followUp"] = self.follow_up
        return data


class ResponseEngine:
    """
    Rule-based responder for chat messages.

    Patterns are tried in declaration order and the first match wins.
    A pattern matches when one of its keywords is a substring of the
    lowercased message, or (in "prefix" mode) when a token of the
    message starts with the first word of one of its keywords.

    Example:
        engine = ResponseEngine(rng=random.Random(7))
        reply = engine.generate("I feel anxious", ChatContext(conversation_length=2))
        print(reply.message)
    """

    def __init__(
        self,
        table: Optional[PatternTable] = None,
        rng: Optional[Any] = None,
        clock: Optional[Callable[[], datetime]] = None,
        follow_up_threshold: float = 0.6,
        general_follow_up_threshold: float = 0.5,
        keyword_match: str = "prefix"
    ):
        """
        Initialize the engine.

        Args:
            table: Pattern table (defaults to the built-in table)
            rng: Object with a random() method returning floats in [0, 1)
            clock: Callable returning the current local datetime
            follow_up_threshold: Draw needed to add a pattern follow-up
            general_follow_up_threshold: Draw needed to add a general follow-up
            keyword_match: "prefix" or "substring"
        """
        self.table = table or DEFAULT_TABLE
        self.rng = rng if rng is not None else random.Random()
        self.clock = clock or datetime.now
        self.follow_up_threshold = follow_up_threshold
        self.general_follow_up_threshold = general_follow_up_threshold
        self.keyword_match = keyword_match

    @classmethod
    def from_config(
        cls,
        config,
        rng: Optional[Any] = None,
        clock: Optional[Callable[[], datetime]] = None
    ) -> "ResponseEngine":
        """
        Create an engine from application config.

        Uses the patterns file from the config directory when it exists,
        otherwise the built-in table.
        """
        table = DEFAULT_TABLE
        if Path(config.patterns_path).exists():
            table = load_patterns(config.patterns_path, create=False)

        return cls(
            table=table,
            rng=rng,
            clock=clock,
            follow_up_threshold=config.engine.follow_up_threshold,
            general_follow_up_threshold=config.engine.general_follow_up_threshold,
            keyword_match=config.engine.keyword_match,
        )

    @property
    def patterns(self) -> Sequence[ResponsePattern]:
        return self.table.patterns

    def matches(self, pattern: ResponsePattern, message: str) -> bool:
        """Check whether a single pattern matches a message."""
        lower = (message or "").lower()
        tokens = lower.split()

        for keyword in pattern.keywords:
            if keyword in lower:
                return True
            if self.keyword_match == "prefix":
                head = keyword.split(" ")[0]
                if head and any(token.startswith(head) for token in tokens):
                    return True
        return False

    def match_all(self, message: str) -> List[ResponsePattern]:
        """Return every matching pattern, in declaration order."""
        return [p for p in self.table.patterns if self.matches(p, message)]

    def match(self, message: str) -> Optional[ResponsePattern]:
        """Return the first declared pattern that matches, if any."""
        for pattern in self.table.patterns:
            if self.matches(pattern, message):
                return pattern
        return None

    def generate(
        self,
        message: Optional[str],
        context: Union[ChatContext, Dict[str, Any], None] = None
    ) -> EngineResponse:
        """
        Generate a reply for a user message.

        Never raises for string input: empty or unrecognized text gets a
        reply from the general pool.

        Args:
            message: The user's message
            context: ChatContext, a mapping of context fields, or None

        Returns:
            EngineResponse
        """
        if not isinstance(context, ChatContext):
            context = ChatContext.from_dict(context)

        message = message or ""
        pattern = self.match(message)
        follow_up = None

        if pattern:
            reply = self._choose(pattern.responses)
            if pattern.follow_ups and self.rng.random() > self.follow_up_threshold:
                follow_up = self._choose(pattern.follow_ups)
        else:
            reply = self._choose(self.table.general_responses)
            if self.table.general_follow_ups and self.rng.random() > self.general_follow_up_threshold:
                follow_up = self._choose(self.table.general_follow_ups)

        if context.is_first_message:
            reply = self._greeting() + FIRST_MESSAGE_GREETING + reply

        final = f"{reply}\n\n{follow_up}" if follow_up else reply

        logger.debug(
            "Generated reply",
            extra={"context": {
                "category": pattern.name if pattern else "general",
                "follow_up": follow_up is not None,
                "conversation_length": context.conversation_length,
            }}
        )

        return EngineResponse(
            message=final,
            follow_up=follow_up,
            category=pattern.name if pattern else None,
            tone=pattern.tone.value if pattern and pattern.tone else None,
        )

    def _choose(self, pool: Sequence[str]) -> str:
        """Pick a uniformly random element using the injected source."""
        index = int(self.rng.random() * len(pool))
        return pool[min(index, len(pool) - 1)]

    def _greeting(self) -> str:
        hour = self.clock().hour
        if hour < MORNING_ENDS:
            return MORNING_GREETING
        if hour >= EVENING_STARTS:
            return EVENING_GREETING
        return ""


def generate_response(
    message: Optional[str],
    context: Union[ChatContext, Dict[str, Any], None] = None,
    rng: Optional[Any] = None,
    clock: Optional[Callable[[], datetime]] = None
) -> EngineResponse:
    """Generate a reply with the built-in pattern table."""
    return ResponseEngine(rng=rng, clock=clock).generate(message, context)
