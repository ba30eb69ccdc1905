"""Transcript parsing: JSONL session records into typed events."""

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from cc_notes.models import Event, EventKind, parse_timestamp

INTERRUPT_MARKER = "[Request interrupted by user"

# Tool name -> input field holding the argument worth showing
PRIMARY_ARGUMENTS = {
    "Bash": "command",
    "Read": "file_path",
    "Write": "file_path",
    "Edit": "file_path",
    "MultiEdit": "file_path",
    "NotebookEdit": "notebook_path",
    "WebFetch": "url",
}


@dataclass
class ParseResult:
    events: list[Event] = field(default_factory=list)
    last_event_time: datetime | None = None
    model: str | None = None


@dataclass
class _RecordContext:
    """Per-record values shared by the variant decoders."""

    timestamp: datetime | None
    session_id: str | None
    # tool_use id -> tool name, accumulated across the file
    tool_names: dict[str, str]


def tool_primary_argument(tool_name: str, tool_input: Any) -> str:
    """Pick the most telling argument of a tool call.

    Known tools map to a single input field; anything else is serialized as
    compact JSON.
    """
    if not isinstance(tool_input, dict):
        return ""
    key = PRIMARY_ARGUMENTS.get(tool_name)
    if key is not None:
        value = tool_input.get(key)
        return value if isinstance(value, str) else ""
    if not tool_input:
        return ""
    return json.dumps(tool_input, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def _block_text(content: Any) -> str:
    """Flatten tool_result content, which is a string or a list of text blocks."""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = [
            block["text"]
            for block in content
            if isinstance(block, dict) and isinstance(block.get("text"), str) and block["text"]
        ]
        return "\n".join(parts)
    return ""


def _user_text_event(text: str, ctx: _RecordContext) -> Event | None:
    if not text.strip() or INTERRUPT_MARKER in text:
        return None
    return Event(
        kind=EventKind.USER,
        content=text,
        timestamp=ctx.timestamp,
        session_id=ctx.session_id,
    )


def _decode_user(record: dict[str, Any], ctx: _RecordContext) -> list[Event]:
    message = record.get("message")
    if not isinstance(message, dict):
        return []
    content = message.get("content")

    if isinstance(content, str):
        event = _user_text_event(content, ctx)
        return [event] if event else []

    if not isinstance(content, list):
        return []

    events: list[Event] = []
    for block in content:
        if not isinstance(block, dict):
            continue
        if block.get("type") == "tool_result":
            output = _block_text(block.get("content"))
            tool_use_id = block.get("tool_use_id")
            tool_name = ctx.tool_names.get(tool_use_id) if isinstance(tool_use_id, str) else None
            if output.strip():
                events.append(
                    Event(
                        kind=EventKind.TOOL_RESULT,
                        content=output,
                        timestamp=ctx.timestamp,
                        tool_name=tool_name,
                        session_id=ctx.session_id,
                    )
                )
            continue
        text = block.get("text")
        if isinstance(text, str):
            event = _user_text_event(text, ctx)
            if event:
                events.append(event)
    return events


def _decode_assistant(record: dict[str, Any], ctx: _RecordContext) -> list[Event]:
    message = record.get("message")
    if not isinstance(message, dict):
        return []
    content = message.get("content")
    if not isinstance(content, list):
        return []

    events: list[Event] = []
    for block in content:
        if not isinstance(block, dict):
            continue
        block_type = block.get("type")

        if block_type == "text":
            text = block.get("text")
            if isinstance(text, str) and text.strip():
                events.append(
                    Event(
                        kind=EventKind.ASSISTANT,
                        content=text,
                        timestamp=ctx.timestamp,
                        session_id=ctx.session_id,
                    )
                )

        elif block_type == "tool_use":
            tool_name = block.get("name")
            if not isinstance(tool_name, str) or not tool_name:
                continue
            if isinstance(block.get("id"), str):
                ctx.tool_names[block["id"]] = tool_name
            argument = tool_primary_argument(tool_name, block.get("input"))
            if argument:
                events.append(
                    Event(
                        kind=EventKind.TOOL_USE,
                        content=argument,
                        timestamp=ctx.timestamp,
                        tool_name=tool_name,
                        session_id=ctx.session_id,
                    )
                )

        # thinking blocks and anything else are not part of the excerpt
    return events


def _decode_tool_result(record: dict[str, Any], ctx: _RecordContext) -> list[Event]:
    result = record.get("result")
    if not isinstance(result, dict):
        return []
    output = result.get("stdout")
    if not isinstance(output, str) or not output:
        output = result.get("output")
    if not isinstance(output, str) or not output:
        return []
    tool_name = record.get("tool_name")
    return [
        Event(
            kind=EventKind.TOOL_RESULT,
            content=output,
            timestamp=ctx.timestamp,
            tool_name=tool_name if isinstance(tool_name, str) and tool_name else None,
            session_id=ctx.session_id,
        )
    ]


DECODERS: dict[str, Callable[[dict[str, Any], _RecordContext], list[Event]]] = {
    "user": _decode_user,
    "assistant": _decode_assistant,
    "tool_result": _decode_tool_result,
}


def parse_transcript(
    content: str,
    session_id: str = "",
    since: datetime | None = None,
) -> ParseResult:
    """Parse JSONL transcript content into events.

    Args:
        content: Raw transcript text, one JSON record per line.
        session_id: When non-empty, skip records that carry a different sessionId.
            Records without a sessionId are always kept.
        since: Skip records timestamped before this instant. Records with a
            missing or unparseable timestamp are kept.

    Malformed lines and unknown record types are skipped silently.
    """
    result = ParseResult()
    tool_names: dict[str, str] = {}

    for line in content.splitlines():
        line = line.strip()
        if not line:
            continue

        try:
            record = json.loads(line)
        except json.JSONDecodeError:
            # Partial or corrupt line
            continue

        if not isinstance(record, dict):
            continue

        record_session = record.get("sessionId")
        if not isinstance(record_session, str) or not record_session:
            record_session = None
        if session_id and record_session is not None and record_session != session_id:
            continue

        timestamp = parse_timestamp(record.get("timestamp"))
        if since is not None and timestamp is not None and timestamp < since:
            continue

        record_type = record.get("type")
        decoder = DECODERS.get(record_type) if isinstance(record_type, str) else None
        if decoder is None:
            continue

        ctx = _RecordContext(timestamp=timestamp, session_id=record_session, tool_names=tool_names)
        result.events.extend(decoder(record, ctx))

        if record_type == "assistant":
            message = record.get("message")
            model = message.get("model") if isinstance(message, dict) else None
            # "<synthetic>" marks messages Claude Code generates locally
            if isinstance(model, str) and model and not model.startswith("<"):
                result.model = model

    for event in result.events:
        if event.timestamp is not None and (
            result.last_event_time is None or event.timestamp > result.last_event_time
        ):
            result.last_event_time = event.timestamp

    return result
