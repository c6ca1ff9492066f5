"""
Wellness Companion - Mood tracking, journaling and supportive chat
==================================================================

A small mental-wellness application built around two rule-based
components:
1. Response engine that answers chat messages from an ordered keyword table
2. Sentiment analyzer that labels each user message

Around them sit mood tracking, a searchable journal and a dashboard,
persisted in SQLite (or in memory) and driven from the command line.

Version: 1.0.0
"""

__version__ = "1.0.0"
__license__ = "MIT"
