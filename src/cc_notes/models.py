"""Data models for cc-notes."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from cc_notes.errors import AnnotationDecodeError

# Events without a timestamp sort before everything else
MIN_TIMESTAMP = datetime.min.replace(tzinfo=timezone.utc)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp into a UTC-aware datetime.

    Returns None for missing or unparseable values.
    """
    if not isinstance(value, str) or not value:
        return None
    try:
        ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


class EventKind(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    TOOL_USE = "tool_use"
    TOOL_RESULT = "tool_result"


@dataclass(frozen=True)
class Event:
    """One atomic occurrence in a session transcript."""

    kind: EventKind
    content: str
    timestamp: datetime | None = None
    tool_name: str | None = None
    session_id: str | None = None

    def sort_key(self) -> datetime:
        return self.timestamp or MIN_TIMESTAMP


@dataclass
class ConversationContext:
    """Events gathered from a session directory, sorted and redacted."""

    events: list[Event] = field(default_factory=list)
    last_event_time: datetime | None = None
    model: str | None = None

    def tool_names(self) -> list[str]:
        """Distinct tool names in first-seen order."""
        names: list[str] = []
        for event in self.events:
            if event.tool_name and event.tool_name not in names:
                names.append(event.tool_name)
        return names


@dataclass
class Annotation:
    """The conversation note stored for one commit."""

    session_id: str
    timestamp: datetime
    conversation_excerpt: str
    tools_used: list[str] = field(default_factory=list)
    commit_context: str = ""
    claude_version: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "timestamp": self.timestamp.isoformat(),
            "conversation_excerpt": self.conversation_excerpt,
            "tools_used": list(self.tools_used),
            "commit_context": self.commit_context,
            "claude_version": self.claude_version,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Annotation":
        """Build an annotation from decoded note JSON.

        Raises AnnotationDecodeError if the payload is not a note object.
        """
        if not isinstance(data, dict):
            raise AnnotationDecodeError(f"expected a JSON object, got {type(data).__name__}")

        timestamp = parse_timestamp(data.get("timestamp"))
        if timestamp is None:
            raise AnnotationDecodeError(f"invalid note timestamp: {data.get('timestamp')!r}")

        tools = data.get("tools_used") or []
        if not isinstance(tools, list):
            raise AnnotationDecodeError("tools_used must be a list")

        return cls(
            session_id=str(data.get("session_id") or ""),
            timestamp=timestamp,
            conversation_excerpt=str(data.get("conversation_excerpt") or ""),
            tools_used=[str(t) for t in tools],
            commit_context=str(data.get("commit_context") or ""),
            claude_version=str(data.get("claude_version") or ""),
        )


@dataclass
class AnnotationBackup:
    """A point-in-time export of every note under one notes ref."""

    backup_time: datetime
    notes_ref: str
    notes: dict[str, Annotation] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "backup_time": self.backup_time.isoformat(),
            "notes_ref": self.notes_ref,
            "notes": {commit: note.to_dict() for commit, note in self.notes.items()},
        }

    @classmethod
    def from_dict(cls, data: Any) -> "AnnotationBackup":
        if not isinstance(data, dict):
            raise AnnotationDecodeError("backup must be a JSON object")

        backup_time = parse_timestamp(data.get("backup_time"))
        if backup_time is None:
            raise AnnotationDecodeError(f"invalid backup time: {data.get('backup_time')!r}")

        raw_notes = data.get("notes") or {}
        if not isinstance(raw_notes, dict):
            raise AnnotationDecodeError("backup notes must be a JSON object")

        return cls(
            backup_time=backup_time,
            notes_ref=str(data.get("notes_ref") or ""),
            notes={commit: Annotation.from_dict(note) for commit, note in raw_notes.items()},
        )


@dataclass
class RestoreReport:
    restored: int = 0
    skipped: int = 0


@dataclass
class HookInput:
    """A Claude Code hook event as delivered on stdin."""

    session_id: str = ""
    transcript_path: str = ""
    cwd: str = ""
    hook_event_name: str = ""
    tool_name: str = ""
    tool_input: dict[str, Any] = field(default_factory=dict)
    tool_response: Any = None
    tool_use_result: Any = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HookInput":
        tool_input = data.get("tool_input")
        return cls(
            session_id=data.get("session_id") or "",
            transcript_path=data.get("transcript_path") or "",
            cwd=data.get("cwd") or "",
            hook_event_name=data.get("hook_event_name") or "",
            tool_name=data.get("tool_name") or "",
            tool_input=tool_input if isinstance(tool_input, dict) else {},
            tool_response=data.get("tool_response"),
            tool_use_result=data.get("tool_use_result"),
        )

    @property
    def command(self) -> str:
        """The shell command of a Bash tool call, or empty."""
        command = self.tool_input.get("command")
        return command if isinstance(command, str) else ""

    def tool_output(self) -> str:
        """Captured stdout of the tool call.

        Bash responses are objects with a stdout field; anything else is used as-is.
        """
        response = self.tool_response
        if isinstance(response, dict):
            stdout = response.get("stdout")
            if isinstance(stdout, str):
                return stdout
        elif isinstance(response, str) and response:
            return response

        result = self.tool_use_result
        if isinstance(result, dict):
            stdout = result.get("stdout")
            return stdout if isinstance(stdout, str) else ""
        if isinstance(result, str):
            return result
        return ""


@dataclass
class HookDecision:
    decision: str = "approve"
    additional_context: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"decision": self.decision}
        if self.additional_context:
            data["additionalContext"] = self.additional_context
        return data
