"""
Sentiment Analyzer - Three-way valence of a single message
==========================================================

Counts how many words of a positive and a negative word list occur
in a message (substring containment, not tokenized) and compares the
two counts. Ties, including no hits at all, are neutral.
"""

from enum import Enum
from typing import Iterable, Optional, Tuple


class Sentiment(Enum):
    """Coarse sentiment label stored with each user message."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


POSITIVE_WORDS: Tuple[str, ...] = (
    "happy", "good", "great", "wonderful", "excited",
    "grateful", "thankful", "proud", "accomplished",
)

NEGATIVE_WORDS: Tuple[str, ...] = (
    "sad", "depressed", "anxious", "worried", "stressed",
    "angry", "frustrated", "hopeless", "lonely",
)


class SentimentAnalyzer:
    """Keyword-count sentiment classifier."""

    def __init__(
        self,
        positive_words: Iterable[str] = POSITIVE_WORDS,
        negative_words: Iterable[str] = NEGATIVE_WORDS
    ):
        self.positive_words = tuple(w.lower() for w in positive_words)
        self.negative_words = tuple(w.lower() for w in negative_words)

    def scores(self, message: Optional[str]) -> Tuple[int, int]:
        """Return (positive hits, negative hits) for a message."""
        lower = (message or "").lower()
        positive = sum(1 for word in self.positive_words if word in lower)
        negative = sum(1 for word in self.negative_words if word in lower)
        return positive, negative

    def analyze(self, message: Optional[str]) -> Sentiment:
        positive, negative = self.scores(message)
        if positive > negative:
            return Sentiment.POSITIVE
        if negative > positive:
            return Sentiment.NEGATIVE
        return Sentiment.NEUTRAL


_default_analyzer = SentimentAnalyzer()


def analyze_sentiment(message: Optional[str]) -> str:
    """Return "positive", "negative" or "neutral" for a message."""
    return _default_analyzer.analyze(message).value
