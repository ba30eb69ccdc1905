"""Pytest fixtures for cc-notes tests."""

import json
import tempfile
from pathlib import Path

import pytest

from cc_notes.errors import GitError


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


def user_record(text, timestamp, session_id="session-1", **extra):
    record = {
        "type": "user",
        "sessionId": session_id,
        "timestamp": timestamp,
        "message": {"role": "user", "content": text},
    }
    record.update(extra)
    return record


def assistant_record(blocks, timestamp, session_id="session-1", model="claude-sonnet-4-20250514"):
    return {
        "type": "assistant",
        "sessionId": session_id,
        "timestamp": timestamp,
        "message": {"role": "assistant", "model": model, "content": blocks},
    }


def write_jsonl(path, records):
    with open(path, "w", encoding="utf-8") as f:
        for record in records:
            f.write((record if isinstance(record, str) else json.dumps(record)) + "\n")
    return path


@pytest.fixture
def sample_transcript_records():
    """A short session: a prompt, a reply with a commit, and the commit output."""
    return [
        user_record("Please fix the login bug", "2024-01-15T10:00:00Z"),
        assistant_record(
            [
                {"type": "thinking", "thinking": "Let me look at auth.py"},
                {"type": "text", "text": "I'll fix the bug in auth.py"},
                {"type": "tool_use", "id": "toolu_1", "name": "Edit", "input": {"file_path": "/repo/auth.py"}},
            ],
            "2024-01-15T10:00:05Z",
        ),
        assistant_record(
            [
                {
                    "type": "tool_use",
                    "id": "toolu_2",
                    "name": "Bash",
                    "input": {"command": "git commit -m 'Fix login bug'"},
                },
            ],
            "2024-01-15T10:00:20Z",
        ),
        {
            "type": "user",
            "sessionId": "session-1",
            "timestamp": "2024-01-15T10:00:21Z",
            "message": {
                "role": "user",
                "content": [
                    {
                        "type": "tool_result",
                        "tool_use_id": "toolu_2",
                        "content": "[main abc1234] Fix login bug\n 1 file changed",
                    }
                ],
            },
        },
    ]


@pytest.fixture
def session_dir(temp_dir, sample_transcript_records):
    """A project directory holding one transcript file."""
    project = temp_dir / "projects" / "-repo"
    project.mkdir(parents=True)
    write_jsonl(project / "session-1.jsonl", sample_transcript_records)
    return project


class FakeGit:
    """In-memory stand-in for GitRunner covering the commands cc-notes uses."""

    def __init__(self, work_dir, objects=(), parent_times=None):
        self.work_dir = Path(work_dir)
        self.objects = set(objects)
        self.parent_times = dict(parent_times or {})
        self.notes: dict[str, dict[str, str]] = {}
        self.calls: list[tuple[str, ...]] = []
        self.add_error: GitError | None = None
        self.racing_writer = False

    def _fail(self, args, code=1, stderr="error"):
        raise GitError(list(args), code, stderr)

    def run(self, *args):
        self.calls.append(args)
        if args[0] == "notes":
            ref, command = args[2], args[3]
            notes = self.notes.setdefault(ref, {})
            if command == "show":
                commit = args[4]
                if commit not in notes:
                    self._fail(args, stderr=f"error: no note found for object {commit}.")
                return notes[commit] + "\n"
            if command == "add":
                message, commit = args[5], args[6]
                if self.racing_writer:
                    notes[commit] = message
                if self.add_error is not None:
                    raise self.add_error
                if commit in notes:
                    self._fail(args, stderr="error: Cannot add notes. Found existing notes")
                if commit not in self.objects:
                    self._fail(args, 128, f"error: failed to resolve '{commit}' as a valid ref.")
                notes[commit] = message
                return ""
            if command == "list":
                return "".join(f"{'f' * 40} {commit}\n" for commit in notes)
        if args[0] == "cat-file":
            if args[2] not in self.objects:
                self._fail(args, 128)
            return ""
        if args[0] == "log":
            if "--oneline" in args:
                return f"{args[-1][:7]} Some commit\n"
            commit = args[-1].rstrip("^")
            if commit not in self.parent_times:
                self._fail(args, 128, "fatal: ambiguous argument")
            return self.parent_times[commit] + "\n"
        self._fail(args, 129, "unsupported")


@pytest.fixture
def fake_git(temp_dir):
    return FakeGit(temp_dir, objects={"abc1234", "def5678"})
