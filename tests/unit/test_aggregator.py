"""Tests for the context aggregator."""

from datetime import datetime, timedelta, timezone

from conftest import assistant_record, user_record, write_jsonl

from cc_notes.aggregator import aggregate
from cc_notes.models import EventKind
from cc_notes.redaction import PLACEHOLDER, Sanitizer

BASE = datetime(2024, 1, 15, 10, 0, 0, tzinfo=timezone.utc)


def at(seconds):
    return (BASE + timedelta(seconds=seconds)).isoformat()


def test_time_window(temp_dir):
    """Test that `since` selects the events at or after it, in order."""
    write_jsonl(
        temp_dir / "s.jsonl",
        [user_record("e1", at(0)), user_record("e2", at(10)), user_record("e3", at(20))],
    )

    windowed = aggregate(temp_dir, since=BASE + timedelta(seconds=15))
    assert [e.content for e in windowed.events] == ["e3"]

    everything = aggregate(temp_dir, since=None)
    assert [e.content for e in everything.events] == ["e1", "e2", "e3"]


def test_merges_files_chronologically(temp_dir):
    """Test that events from several files interleave by timestamp."""
    write_jsonl(temp_dir / "b.jsonl", [user_record("second", at(10)), user_record("fourth", at(30))])
    write_jsonl(
        temp_dir / "a.jsonl",
        [user_record("first", at(0)), assistant_record([{"type": "text", "text": "third"}], at(20))],
    )
    (temp_dir / "notes.txt").write_text("not a transcript")

    context = aggregate(temp_dir)
    assert [e.content for e in context.events] == ["first", "second", "third", "fourth"]
    assert context.last_event_time == BASE + timedelta(seconds=30)
    assert context.model == "claude-sonnet-4-20250514"


def test_untimed_events_sort_first_and_keep_order(temp_dir):
    write_jsonl(
        temp_dir / "a.jsonl",
        [user_record("timed", at(0)), user_record("untimed-1", None), user_record("untimed-2", None)],
    )
    context = aggregate(temp_dir)
    assert [e.content for e in context.events] == ["untimed-1", "untimed-2", "timed"]


def test_session_filter_across_files(temp_dir):
    write_jsonl(temp_dir / "a.jsonl", [user_record("mine", at(0), session_id="a")])
    write_jsonl(temp_dir / "b.jsonl", [user_record("other", at(1), session_id="b")])

    assert [e.content for e in aggregate(temp_dir, session_id="a").events] == ["mine"]
    assert len(aggregate(temp_dir).events) == 2


def test_redacts_every_event(temp_dir):
    """Test that prompts, tool input and tool output are all redacted."""
    write_jsonl(
        temp_dir / "a.jsonl",
        [
            user_record("my password: hunter2", at(0)),
            assistant_record(
                [{"type": "tool_use", "id": "t", "name": "Bash", "input": {"command": "export TOKEN=abc123"}}],
                at(1),
            ),
            user_record(
                [{"type": "tool_result", "tool_use_id": "t", "content": "secret: s3cr3t"}],
                at(2),
            ),
        ],
    )
    context = aggregate(temp_dir)

    assert [e.kind for e in context.events] == [EventKind.USER, EventKind.TOOL_USE, EventKind.TOOL_RESULT]
    for event in context.events:
        assert PLACEHOLDER in event.content
    text = " ".join(e.content for e in context.events)
    assert "hunter2" not in text
    assert "abc123" not in text
    assert "s3cr3t" not in text


def test_custom_sanitizer(temp_dir):
    write_jsonl(temp_dir / "a.jsonl", [user_record("ship it to acme-prod", at(0))])
    context = aggregate(temp_dir, sanitizer=Sanitizer(["acme-prod"]))
    assert context.events[0].content == f"ship it to {PLACEHOLDER}"


def test_empty_directory_argument():
    assert aggregate(None).events == []
    assert aggregate("").events == []


def test_empty_directory(temp_dir):
    context = aggregate(temp_dir)
    assert context.events == []
    assert context.last_event_time is None


def test_missing_directory_falls_back_to_transcript(temp_dir):
    """Test that an unlistable directory still reads the hook's transcript."""
    transcript = write_jsonl(temp_dir / "only.jsonl", [user_record("from fallback", at(0))])

    context = aggregate(temp_dir / "does-not-exist", fallback=transcript)
    assert [e.content for e in context.events] == ["from fallback"]

    assert aggregate(temp_dir / "does-not-exist").events == []


def test_unreadable_file_is_skipped(temp_dir):
    write_jsonl(temp_dir / "good.jsonl", [user_record("readable", at(0))])
    (temp_dir / "dir.jsonl").mkdir()

    context = aggregate(temp_dir)
    assert [e.content for e in context.events] == ["readable"]
