"""Render conversation events into a bounded, human-readable excerpt."""

from collections.abc import Iterable

from cc_notes.config import DEFAULT_ASSISTANT_EMOJI, DEFAULT_MAX_EXCERPT_LENGTH, DEFAULT_USER_EMOJI
from cc_notes.models import Event, EventKind

ELLIPSIS = "..."
MESSAGE_CHARS = 200
TOOL_CHARS = 150
RESULT_LINES = 3
RESULT_CONTINUATION = "\n[...]"


def truncate(text: str, limit: int) -> str:
    """Cut text to at most ``limit`` characters, ending with an ellipsis if cut."""
    if len(text) <= limit:
        return text
    if limit <= len(ELLIPSIS):
        return text[:limit]
    return text[: limit - len(ELLIPSIS)] + ELLIPSIS


def format_event(
    event: Event,
    user_marker: str = DEFAULT_USER_EMOJI,
    assistant_marker: str = DEFAULT_ASSISTANT_EMOJI,
) -> str:
    if event.kind is EventKind.USER:
        return f"{user_marker} User: {truncate(event.content, MESSAGE_CHARS)}"

    if event.kind is EventKind.ASSISTANT:
        return f"{assistant_marker} Claude: {truncate(event.content, MESSAGE_CHARS)}"

    if event.kind is EventKind.TOOL_USE:
        return f"Tool ({event.tool_name}): {truncate(event.content, TOOL_CHARS)}"

    if event.kind is EventKind.TOOL_RESULT:
        lines = event.content.split("\n")
        if len(lines) > RESULT_LINES:
            content = "\n".join(lines[:RESULT_LINES]) + RESULT_CONTINUATION
        else:
            content = truncate(event.content, TOOL_CHARS)
        return f"Result: {content}"

    return ""


def compile_excerpt(
    events: Iterable[Event],
    max_length: int = DEFAULT_MAX_EXCERPT_LENGTH,
    user_marker: str = DEFAULT_USER_EMOJI,
    assistant_marker: str = DEFAULT_ASSISTANT_EMOJI,
    include_tool_output: bool = True,
) -> str:
    """Join formatted events with blank lines, in the order given.

    The result never exceeds ``max_length``; when it would, it is cut and ends
    with an ellipsis.
    """
    parts = []
    for event in events:
        if event.kind is EventKind.TOOL_RESULT and not include_tool_output:
            continue
        line = format_event(event, user_marker, assistant_marker)
        if line:
            parts.append(line)

    return truncate("\n\n".join(parts), max(max_length, 0))
