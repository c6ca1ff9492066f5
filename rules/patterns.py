"""
Response Patterns - Keyword table for the response engine
=========================================================

This module defines the static pattern table: each pattern maps a
set of trigger keywords to candidate replies, optional follow-up
questions and a tone tag. Patterns are kept in an ordered tuple; the
first declared match wins, so the order below is significant.

The table can be exported to and loaded from a YAML file so it can be
edited without touching code.
"""

import yaml
from pathlib import Path
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from core.exceptions import ConfigError
from core.logging import get_logger

logger = get_logger("rules.patterns")


def _string_list(data: Dict[str, Any], key: str, owner: str) -> List[str]:
    """Read a list of scalar values as strings; raise ConfigError otherwise."""
    values = data.get(key)
    if values is None:
        return []
    if not isinstance(values, list):
        raise ConfigError(f"'{key}' of '{owner}' must be a list, got {type(values).__name__}")
    for value in values:
        if isinstance(value, (dict, list)) or value is None:
            raise ConfigError(f"'{key}' of '{owner}' must contain only text, got {value!r}")
    return [str(v) for v in values]


class Tone(Enum):
    """Tone a pattern's replies are written in."""
    SUPPORTIVE = "supportive"
    ENCOURAGING = "encouraging"
    CALMING = "calming"
    EMPOWERING = "empowering"


@dataclass(frozen=True)
class ResponsePattern:
    """
    A keyword rule with its reply pools.

    Attributes:
        name (str): Category name, e.g. "anxiety"
        keywords (tuple): Lowercase trigger keywords
        responses (tuple): Candidate replies
        follow_ups (tuple): Optional follow-up questions
        tone (Tone): Tone tag of the replies
    """
    name: str
    keywords: Tuple[str, ...]
    responses: Tuple[str, ...]
    follow_ups: Tuple[str, ...] = ()
    tone: Optional[Tone] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "name": self.name,
            "keywords": list(self.keywords),
            "responses": list(self.responses),
        }
        if self.follow_ups:
            data["follow_ups"] = list(self.follow_ups)
        if self.tone:
            data["tone"] = self.tone.value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResponsePattern":
        if not isinstance(data, dict):
            raise ConfigError(f"Pattern entries must be mappings, got {data!r}")

        name = str(data.get("name") or "")
        keywords = [k.lower() for k in _string_list(data, "keywords", name) if k.strip()]
        responses = [r for r in _string_list(data, "responses", name) if r.strip()]

        if not keywords:
            raise ConfigError(f"Pattern '{name}' has no keywords")
        if not responses:
            raise ConfigError(f"Pattern '{name}' has no responses")

        tone = data.get("tone")
        try:
            tone = Tone(tone) if tone else None
        except (TypeError, ValueError):
            raise ConfigError(f"Pattern '{name}' has unknown tone: {tone}")

        return cls(
            name=name,
            keywords=tuple(keywords),
            responses=tuple(responses),
            follow_ups=tuple(_string_list(data, "follow_ups", name)),
            tone=tone,
        )


@dataclass(frozen=True)
class PatternTable:
    """Ordered patterns plus the general pools used when nothing matches."""
    patterns: Tuple[ResponsePattern, ...]
    general_responses: Tuple[str, ...]
    general_follow_ups: Tuple[str, ...] = field(default_factory=tuple)

    def get(self, name: str) -> Optional[ResponsePattern]:
        for pattern in self.patterns:
            if pattern.name == name:
                return pattern
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "patterns": [p.to_dict() for p in self.patterns],
            "general_responses": list(self.general_responses),
            "general_follow_ups": list(self.general_follow_ups),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PatternTable":
        if not isinstance(data, dict):
            raise ConfigError("Pattern table must be a mapping")

        entries = data.get("patterns") or []
        if not isinstance(entries, list):
            raise ConfigError("'patterns' must be a list of pattern mappings")

        patterns = tuple(ResponsePattern.from_dict(p) for p in entries)
        general = tuple(r for r in _string_list(data, "general_responses", "table") if r.strip())
        if not general:
            raise ConfigError("Pattern table needs at least one general response")
        return cls(
            patterns=patterns,
            general_responses=general,
            general_follow_ups=tuple(_string_list(data, "general_follow_ups", "table")),
        )


DEFAULT_PATTERNS: Tuple[ResponsePattern, ...] = (
    ResponsePattern(
        name="anxiety",
        keywords=("anxious", "anxiety", "worried", "panic", "nervous", "overwhelmed"),
        responses=(
            "I can hear that you're feeling anxious right now. That's completely understandable - anxiety is our mind's way of trying to protect us, even when it feels overwhelming.",
            "Anxiety can feel really intense. Let's try a grounding technique together: Can you name 5 things you can see around you right now?",
            "When anxiety hits, remember that feelings are temporary visitors - they come and they go. You've gotten through difficult moments before, and you can get through this one too.",
            "It sounds like you're carrying a lot right now. Sometimes anxiety is our body's way of telling us we need to slow down and breathe.",
        ),
        follow_ups=(
            "What's one small thing that usually helps you feel a bit calmer?",
            "Have you noticed any patterns in when your anxiety tends to be stronger?",
            "What would you tell a good friend who was feeling the way you're feeling right now?",
        ),
        tone=Tone.CALMING,
    ),
    ResponsePattern(
        name="sadness",
        keywords=("depressed", "sad", "hopeless", "empty", "worthless", "lonely", "down"),
        responses=(
            "I'm really glad you felt comfortable sharing how you're feeling with me. Depression can make everything feel heavy and difficult, but reaching out shows incredible strength.",
            "Those feelings of sadness are valid and real. You don't have to carry them alone, and you don't have to feel guilty about having them.",
            "Even when everything feels dark, you're still here, still trying, still reaching out. That takes courage, even if it doesn't feel like it right now.",
            "Depression can make us forget our own worth, but your feelings matter, your experiences matter, and you matter.",
        ),
        follow_ups=(
            "What's one tiny thing that brought you even a moment of peace recently?",
            "How has your sleep and eating been lately?",
            "Is there someone in your life you feel safe talking to about this?",
        ),
        tone=Tone.SUPPORTIVE,
    ),
    ResponsePattern(
        name="stress",
        keywords=("stressed", "pressure", "deadline", "work", "school", "busy", "exhausted"),
        responses=(
            "It sounds like you're juggling a lot right now. Stress can be our body's way of telling us we're pushing our limits.",
            "When we're under pressure, it's easy to forget that we're human beings, not machines. You deserve rest and compassion, especially from yourself.",
            "Stress can make everything feel urgent and overwhelming. Let's take a step back - what's the most important thing you need to focus on right now?",
            "Being busy doesn't mean being productive, and being productive doesn't mean being worthy. Your value isn't determined by how much you accomplish.",
        ),
        follow_ups=(
            "What's one thing you could take off your plate today, even temporarily?",
            "When did you last take a real break - not just scrolling your phone, but actually resting?",
            "What would 'good enough' look like for the thing that's stressing you most?",
        ),
        tone=Tone.CALMING,
    ),
    ResponsePattern(
        name="relationships",
        keywords=("relationship", "friend", "family", "conflict", "argument", "misunderstood", "rejected"),
        responses=(
            "Relationships can be one of the most rewarding and challenging parts of being human. It sounds like you're navigating something difficult right now.",
            "Conflict in relationships often happens when people care about each other but have different needs or perspectives. That doesn't make it less painful though.",
            "Feeling misunderstood can be really isolating. Your feelings about this situation are completely valid, regardless of how others might see it.",
            "Sometimes the people closest to us can hurt us the most, often without meaning to. It's okay to feel upset about that.",
        ),
        follow_ups=(
            "What do you think the other person might be feeling or thinking about this situation?",
            "What would you need to feel heard and understood in this relationship?",
            "How do you usually handle conflict - do you tend to avoid it, confront it directly, or something else?",
        ),
        tone=Tone.SUPPORTIVE,
    ),
    ResponsePattern(
        name="self_esteem",
        keywords=("confidence", "self-esteem", "failure", "mistake", "not good enough", "imposter"),
        responses=(
            "Self-doubt can be so loud sometimes that it drowns out everything else. But that critical voice in your head isn't always telling you the truth.",
            "Making mistakes doesn't make you a failure - it makes you human. Every person you admire has failed at something, probably many times.",
            "Imposter syndrome is incredibly common, especially among people who are actually quite capable. Sometimes our biggest critics live inside our own heads.",
            "You're being really hard on yourself right now. What would you say to a friend who was talking about themselves the way you're talking about yourself?",
        ),
        follow_ups=(
            "Can you think of a time when you overcame something you initially thought you couldn't handle?",
            "What's one thing you've learned or improved at recently, even if it seems small?",
            "Who in your life sees your strengths clearly? What would they say about you right now?",
        ),
        tone=Tone.EMPOWERING,
    ),
    ResponsePattern(
        name="sleep",
        keywords=("sleep", "tired", "insomnia", "can't sleep", "exhausted", "fatigue"),
        responses=(
            "Sleep issues can affect everything - our mood, our thinking, our ability to cope with stress. It's really important that you're paying attention to this.",
            "When we can't sleep, it often creates a cycle where we worry about not sleeping, which makes it even harder to sleep. It's frustrating.",
            "Your body and mind need rest to function well. Poor sleep isn't a personal failing - there are many factors that can affect our sleep patterns.",
            "Sleep problems are often connected to stress, anxiety, or changes in our routine. Have you noticed any patterns in when sleep is more difficult?",
        ),
        follow_ups=(
            "What does your bedtime routine usually look like?",
            "Have you noticed if certain activities or thoughts make it harder to fall asleep?",
            "How long has sleep been challenging for you?",
        ),
        tone=Tone.CALMING,
    ),
    ResponsePattern(
        name="gratitude",
        keywords=("grateful", "thankful", "happy", "good day", "accomplished", "proud", "excited"),
        responses=(
            "It's wonderful to hear some positivity in your voice! Celebrating the good moments, even small ones, is so important for our mental health.",
            "I love that you're taking time to notice and appreciate the good things. Gratitude can be a powerful tool for building resilience.",
            "It sounds like you're in a good space right now. These positive moments are worth savoring and remembering for times when things feel harder.",
            "Your happiness and excitement are contagious! It's beautiful when we can find joy in our daily experiences.",
        ),
        follow_ups=(
            "What made this moment or day particularly special for you?",
            "How can you carry some of this positive energy forward?",
            "What are you most looking forward to right now?",
        ),
        tone=Tone.ENCOURAGING,
    ),
)

GENERAL_RESPONSES: Tuple[str, ...] = (
    "Thank you for sharing that with me. I'm here to listen and support you however I can.",
    "It takes courage to open up about what you're going through. I'm glad you felt comfortable sharing with me.",
    "I hear you, and what you're experiencing sounds really challenging. You're not alone in feeling this way.",
    "Your feelings are completely valid. It's okay to not be okay sometimes.",
    "I appreciate you trusting me with your thoughts. How are you taking care of yourself today?",
)

GENERAL_FOLLOW_UPS: Tuple[str, ...] = (
    "Tell me more about that.",
    "How long have you been feeling this way?",
    "What's been most helpful for you in the past when dealing with similar feelings?",
    "What would make today feel a little bit better for you?",
    "Is there anything specific you'd like support with right now?",
)

DEFAULT_TABLE = PatternTable(
    patterns=DEFAULT_PATTERNS,
    general_responses=GENERAL_RESPONSES,
    general_follow_ups=GENERAL_FOLLOW_UPS,
)


def load_patterns(path: str, create: bool = True) -> PatternTable:
    """
    Load a pattern table from a YAML file.

    When the file does not exist the built-in table is returned and,
    if `create` is set, written to `path` so it can be edited.

    Args:
        path: YAML file path
        create: Write the default table when the file is missing

    Returns:
        PatternTable

    Raises:
        ConfigError: If the file cannot be parsed or a pattern is invalid
    """
    patterns_file = Path(path)

    if not patterns_file.exists():
        if create:
            save_patterns(str(patterns_file), DEFAULT_TABLE)
            logger.info(f"Wrote default response patterns to {patterns_file}")
        return DEFAULT_TABLE

    try:
        with open(patterns_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse patterns file: {e}", {"path": str(patterns_file)})

    if not isinstance(data, dict):
        raise ConfigError("Patterns file must contain a mapping", {"path": str(patterns_file)})

    table = PatternTable.from_dict(data)
    logger.info(f"Loaded {len(table.patterns)} response patterns from {patterns_file}")
    return table


def save_patterns(path: str, table: PatternTable) -> None:
    """Write a pattern table to a YAML file, keeping declaration order."""
    patterns_file = Path(path)
    patterns_file.parent.mkdir(parents=True, exist_ok=True)

    try:
        with open(patterns_file, "w", encoding="utf-8") as f:
            yaml.safe_dump(
                table.to_dict(),
                f,
                default_flow_style=False,
                sort_keys=False,
                allow_unicode=True,
                width=1000,
            )
    except IOError as e:
        raise ConfigError(f"Failed to save patterns file: {e}", {"path": str(patterns_file)})


def all_keywords(table: PatternTable = DEFAULT_TABLE) -> List[Tuple[str, str]]:
    """Return (pattern name, keyword) pairs in declaration order."""
    return [(p.name, k) for p in table.patterns for k in p.keywords]
