"""
Rules Module - Scripted response engine
=======================================

This module provides the rule-based responder used by the chat:
- Ordered keyword pattern table (built in or loaded from YAML)
- Reply and follow-up selection with an injectable random source
- Keyword-count sentiment analysis
"""

from .engine import ResponseEngine, ChatContext, EngineResponse, generate_response
from .patterns import (
    ResponsePattern,
    PatternTable,
    Tone,
    DEFAULT_TABLE,
    load_patterns,
    save_patterns,
)
from .sentiment import Sentiment, SentimentAnalyzer, analyze_sentiment

__all__ = [
    "ResponseEngine",
    "ChatContext",
    "EngineResponse",
    "generate_response",
    "ResponsePattern",
    "PatternTable",
    "Tone",
    "DEFAULT_TABLE",
    "load_patterns",
    "save_patterns",
    "Sentiment",
    "SentimentAnalyzer",
    "analyze_sentiment",
]
