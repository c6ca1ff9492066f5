#!/usr/bin/env python3
"""
Wellness Companion - Main Entry Point
=====================================

Command-line interface for chatting with the scripted companion,
logging moods and keeping a journal.

Usage:
    python main.py --chat                      # Interactive chat
    python main.py --chat "I feel anxious"     # Single message
    python main.py --mood happy 8              # Log a mood
    python main.py --journal "Title" "Text"    # Write a journal entry
    python main.py --search "work"             # Search the journal
    python main.py --prompt                    # Suggest a journal prompt
    python main.py --stats                     # Dashboard numbers
    python main.py --help                      # Show help
"""

import os
import sys
import argparse
from pathlib import Path
from typing import Optional

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent))

from core.config import load_config, Config
from core.exceptions import WellnessError
from core.logging import setup_logging, get_logger

logger = get_logger("main")


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Wellness Companion - mood tracking, journaling and supportive chat",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --chat                         Start an interactive chat
  python main.py --chat "Work is stressing me"  Send one message
  python main.py --chat "Still tired" --session 3
  python main.py --mood happy                   Log a mood (score from label)
  python main.py --mood tired 4 --notes "Short night"
  python main.py --journal "Monday" "Long day at work" --journal-mood tired --tags work,sleep
  python main.py --search work --date-range week
  python main.py --prompt                       Suggest something to write about
  python main.py --history --session 3
  python main.py --stats
  python main.py --init-patterns                Write patterns.yaml for editing
        """
    )

    mode_group = parser.add_mutually_exclusive_group()
    mode_group.add_argument(
        "--chat",
        nargs="?",
        const="",
        metavar="MESSAGE",
        help="Send a message, or start an interactive chat when no message is given"
    )
    mode_group.add_argument(
        "--mood",
        nargs="+",
        metavar=("LABEL", "SCORE"),
        help="Log a mood: --mood LABEL [SCORE]"
    )
    mode_group.add_argument(
        "--journal",
        nargs=2,
        metavar=("TITLE", "CONTENT"),
        help="Write a journal entry"
    )
    mode_group.add_argument(
        "--search",
        nargs="?",
        const="",
        metavar="QUERY",
        help="Search journal entries"
    )
    mode_group.add_argument(
        "--prompt",
        action="store_true",
        help="Suggest a journal writing prompt"
    )
    mode_group.add_argument(
        "--history",
        action="store_true",
        help="Show chat history for --session, or list sessions"
    )
    mode_group.add_argument(
        "--stats",
        action="store_true",
        help="Show dashboard statistics"
    )
    mode_group.add_argument(
        "--init-patterns",
        action="store_true",
        help="Write the response patterns file to the config directory"
    )

    parser.add_argument("--session", type=int, metavar="ID", help="Chat session id")
    parser.add_argument("--notes", type=str, help="Notes for --mood")
    parser.add_argument("--journal-mood", type=str, default="neutral", help="Mood for --journal")
    parser.add_argument("--tags", type=str, help="Comma separated tags for --journal/--search")
    parser.add_argument("--filter-mood", type=str, help="Mood filter for --search")
    parser.add_argument(
        "--date-range",
        choices=["today", "week", "month", "year"],
        help="Date filter for --search"
    )
    parser.add_argument("--config", type=str, metavar="PATH", help="Path to configuration file")
    parser.add_argument("--memory", action="store_true", help="Use the in-memory store")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")

    return parser.parse_args(argv)


def build_services(config: Config) -> dict:
    """Create the store, engine and services from configuration."""
    from rules.engine import ResponseEngine
    from storage.factory import create_store
    from services import ChatService, MoodTracker, JournalService, DashboardService

    store = create_store(config)
    engine = ResponseEngine.from_config(config)

    return {
        "store": store,
        "chat": ChatService(store, engine, context_window=config.engine.context_window),
        "mood": MoodTracker(store),
        "journal": JournalService(store),
        "dashboard": DashboardService(store),
    }


def print_reply(reply) -> None:
    print(f"\nCompanion: {reply.message}")
    print(f"  [session {reply.session_id} | sentiment: {reply.sentiment}]")


def run_chat(services: dict, message: str, session_id: Optional[int]) -> None:
    """Send one message, or run an interactive loop when message is empty."""
    chat = services["chat"]

    if message:
        print_reply(chat.send_message(message, session_id=session_id))
        return

    print("\nWellness Companion - type 'quit' to leave\n")
    while True:
        try:
            text = input("You: ").strip()
        except EOFError:
            print()
            break

        if text.lower() in ("quit", "exit"):
            break
        if not text:
            continue

        reply = chat.send_message(text, session_id=session_id)
        session_id = reply.session_id
        print_reply(reply)


def run_mood(services: dict, values: list, notes: Optional[str]) -> None:
    """Log a mood entry."""
    if len(values) > 2:
        raise WellnessError("Usage: --mood LABEL [SCORE]")

    label = values[0]
    score = None
    if len(values) > 1:
        try:
            score = int(values[1])
        except ValueError:
            raise WellnessError(f"Mood score must be a number, got {values[1]!r}")

    entry = services["mood"].log_mood(label, score=score, notes=notes)
    stats = services["mood"].stats()
    print(f"✓ Logged mood '{entry.mood}' with score {entry.score}")
    print(f"  Average: {stats.average_score} | Streak: {stats.streak} day(s)")


def run_journal(services: dict, title: str, content: str, mood: str, tags: Optional[str]) -> None:
    """Write a journal entry."""
    entry = services["journal"].create(content, mood, title=title, tags=tags)
    print(f"✓ Saved journal entry #{entry.id}: {entry.title or '(untitled)'}")


def run_search(services: dict, args: argparse.Namespace) -> None:
    """Search the journal and print matching entries."""
    results = services["journal"].search(
        query=args.search or "",
        mood=args.filter_mood,
        date_range=args.date_range,
        tags=args.tags,
    )

    if not results:
        print("No journal entries found.")
        return

    for entry in results:
        tags = f" [{', '.join(entry.tags)}]" if entry.tags else ""
        print(f"#{entry.id} {entry.created_at:%Y-%m-%d %H:%M} | {entry.title or '(untitled)'} | {entry.mood}{tags}")
        print(f"    {entry.content[:120]}")


def run_prompt(services: dict) -> None:
    """Print a random journal writing prompt."""
    prompt = services["journal"].prompt()
    print(f"Today's prompt: {prompt.title}")
    print(f"  {prompt.description}")
    print('  Write it with: --journal "TITLE" "CONTENT"')


def run_history(services: dict, session_id: Optional[int]) -> None:
    """Print a session's messages, or the list of sessions."""
    chat = services["chat"]

    if session_id is None:
        sessions = chat.list_sessions()
        if not sessions:
            print("No chat sessions yet.")
        for session in sessions:
            print(f"Session {session.id} | last activity {session.updated_at:%Y-%m-%d %H:%M}")
        return

    for message in chat.get_history(session_id):
        who = "You" if message.is_user else "Companion"
        suffix = f" ({message.sentiment})" if message.sentiment else ""
        print(f"{who}{suffix}: {message.content}\n")


def run_stats(services: dict) -> None:
    """Print dashboard statistics."""
    stats = services["dashboard"].stats()
    mood = services["mood"].stats()

    print("\n" + "=" * 40)
    print("Wellness Companion - Dashboard")
    print("=" * 40)
    print(f"  Journal streak:   {stats.journal_streak} day(s)")
    print(f"  Journal entries:  {stats.total_entries}")
    print(f"  Chats this month: {stats.chats_this_month}")
    print(f"  Average mood:     {stats.average_mood}")
    print(f"  Mood streak:      {mood.streak} day(s)")

    if stats.recent_entries:
        print("\nRecent entries")
        print("-" * 40)
        for entry in stats.recent_entries:
            print(f"  {entry.created_at:%Y-%m-%d} {entry.title or '(untitled)'}")
    print()


def run_init_patterns(config: Config) -> None:
    """Write the response patterns file so it can be customized."""
    from rules.patterns import DEFAULT_TABLE, save_patterns

    path = config.patterns_path
    if os.path.exists(path):
        print(f"Patterns file already exists: {path}")
        return

    save_patterns(path, DEFAULT_TABLE)
    print(f"✓ Wrote response patterns to {path}")


def main(argv: Optional[list] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = load_config(args.config)

        if args.memory:
            config.storage.backend = "memory"
        if args.debug:
            config.debug = True

        setup_logging(
            log_dir=config.log_dir,
            log_level="DEBUG" if config.debug else config.log_level,
            console_output=config.debug
        )
        logger.info(f"Starting {config.app_name} v{config.version} ({config.storage.backend} store)")

        if args.init_patterns:
            run_init_patterns(config)
            return 0

        services = build_services(config)

        try:
            if args.chat is not None:
                run_chat(services, args.chat, args.session)
            elif args.mood:
                run_mood(services, args.mood, args.notes)
            elif args.journal:
                run_journal(services, args.journal[0], args.journal[1], args.journal_mood, args.tags)
            elif args.search is not None:
                run_search(services, args)
            elif args.prompt:
                run_prompt(services)
            elif args.history:
                run_history(services, args.session)
            elif args.stats:
                run_stats(services)
            else:
                run_stats(services)
                print("No mode specified. Use --chat, --mood, --journal or --help")
        finally:
            services["store"].close()

        return 0

    except WellnessError as e:
        print(f"\nError: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 0


if __name__ == "__main__":
    sys.exit(main())
