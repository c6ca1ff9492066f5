"""
Test Command Line Interface
===========================

Smoke tests for main.py modes using the in-memory store.
"""

import os
import pytest
from pathlib import Path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

import main
from core.logging import reset_logging


class FixedRandom:
    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path, monkeypatch):
    for name in list(os.environ):
        if name.startswith("WELLNESS_"):
            monkeypatch.delenv(name)
    monkeypatch.setenv("WELLNESS_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.setenv("WELLNESS_DATA_DIR", str(tmp_path / "data"))
    yield tmp_path
    reset_logging()


class TestMain:
    """Tests for main()."""

    def test_parse_args_modes_exclusive(self):
        with pytest.raises(SystemExit):
            main.parse_args(["--stats", "--history"])

    def test_chat_single_message(self, capsys):
        assert main.main(["--memory", "--chat", "I feel anxious"]) == 0

        out = capsys.readouterr().out
        assert "Companion: " in out
        assert "Hello! I'm here to listen and support you." in out
        assert "sentiment: negative" in out

    def test_mood(self, capsys):
        assert main.main(["--memory", "--mood", "tired", "4", "--notes", "Short night"]) == 0
        assert "Logged mood 'tired' with score 4" in capsys.readouterr().out

    def test_mood_bad_score(self, capsys):
        assert main.main(["--memory", "--mood", "tired", "11"]) == 1
        assert "Error:" in capsys.readouterr().out

    def test_journal_persists_in_sqlite(self, capsys, isolated_dirs):
        assert main.main(["--journal", "Monday", "Long day at work", "--tags", "work"]) == 0
        assert main.main(["--search", "work"]) == 0

        out = capsys.readouterr().out
        assert "Saved journal entry #1: Monday" in out
        assert "Monday | neutral [work]" in out
        assert (isolated_dirs / "data" / "wellness.db").exists()

    def test_stats(self, capsys):
        assert main.main(["--memory", "--stats"]) == 0
        assert "Journal entries:  0" in capsys.readouterr().out

    def test_unknown_session(self, capsys):
        assert main.main(["--memory", "--chat", "hi", "--session", "5"]) == 1
        assert "Chat session not found" in capsys.readouterr().out

    def test_bad_config_file(self, capsys, isolated_dirs):
        path = isolated_dirs / "bad.yaml"
        path.write_text("engine:\n  follow_up_threshold: '0.7'\n")

        assert main.main(["--config", str(path), "--stats"]) == 1
        assert "follow_up_threshold must be a number" in capsys.readouterr().out

    def test_prompt(self, capsys):
        from services.journal import PROMPTS

        assert main.main(["--memory", "--prompt"]) == 0

        out = capsys.readouterr().out
        assert "Today's prompt: " in out
        assert any(p.description in out for p in PROMPTS)

    def test_prompt_pinned(self, capsys, monkeypatch):
        from services import journal

        monkeypatch.setattr(journal.random, "Random", lambda: FixedRandom(0.99))
        assert main.main(["--memory", "--prompt"]) == 0
        assert "Today's prompt: Weekly Goal" in capsys.readouterr().out

    def test_init_patterns(self, capsys, isolated_dirs):
        assert main.main(["--init-patterns"]) == 0
        assert (isolated_dirs / "config" / "patterns.yaml").exists()

        assert main.main(["--init-patterns"]) == 0
        assert "already exists" in capsys.readouterr().out


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
