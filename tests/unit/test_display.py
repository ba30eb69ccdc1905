"""Tests for Markdown rendering of notes."""

from datetime import datetime, timezone

from cc_notes.config import NotesConfig
from cc_notes.display import annotation_markdown, format_conversation_excerpt
from cc_notes.models import Annotation


def test_format_conversation_excerpt():
    excerpt = "👤 User: Fix it\n\n🤖 Claude: Sure\n\nTool (Bash): git status\n\nResult: clean"
    formatted = format_conversation_excerpt(excerpt, NotesConfig())

    assert "**👤 User: Fix it**" in formatted
    assert "🤖 Claude: Sure" in formatted
    assert "Tool (Bash):\n```\ngit status\n```" in formatted
    assert "_Result_:\n```\nclean\n```" in formatted


def test_format_unescapes_and_collapses_blank_lines():
    formatted = format_conversation_excerpt("User: a\\nb\n\n\n\nClaude: c")
    assert formatted == "**User: a**\nb\n\nClaude: c"


def test_annotation_markdown():
    note = Annotation(
        session_id="session-1",
        timestamp=datetime(2024, 1, 15, 10, 0, 0, tzinfo=timezone.utc),
        conversation_excerpt="User: hi",
        tools_used=["Bash", "Edit"],
        commit_context="Git command: git commit -m x",
        claude_version="claude-sonnet-4-20250514",
    )
    markdown = annotation_markdown(note, "abc1234 Fix bug")

    assert markdown.startswith("# Claude Conversation Notes")
    assert "`abc1234 Fix bug`" in markdown
    assert "**Tools Used:** Bash, Edit" in markdown
    assert "2024-01-15 10:00:00 UTC" in markdown
    assert "## Conversation Transcript" in markdown
    assert "**User: hi**" in markdown
