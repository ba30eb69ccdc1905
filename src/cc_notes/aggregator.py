"""Merge transcript events from every session file in a project directory."""

import dataclasses
import logging
from datetime import datetime
from pathlib import Path

from cc_notes.models import ConversationContext, Event
from cc_notes.parser import ParseResult, parse_transcript
from cc_notes.redaction import Sanitizer

logger = logging.getLogger(__name__)

TRANSCRIPT_SUFFIX = ".jsonl"


def discover_transcripts(directory: Path) -> list[Path]:
    """List transcript files in a directory, sorted by name.

    Raises OSError if the directory cannot be listed.
    """
    return sorted(
        p for p in directory.iterdir() if p.suffix == TRANSCRIPT_SUFFIX and p.is_file()
    )


def parse_transcript_file(
    path: Path,
    session_id: str = "",
    since: datetime | None = None,
) -> ParseResult:
    """Parse one transcript file; an unreadable file yields no events."""
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.debug("Skipping unreadable transcript %s: %s", path, e)
        return ParseResult()
    return parse_transcript(content, session_id=session_id, since=since)


def aggregate(
    directory: str | Path | None,
    session_id: str = "",
    since: datetime | None = None,
    sanitizer: Sanitizer | None = None,
    fallback: str | Path | None = None,
) -> ConversationContext:
    """Collect the conversation for a session from all transcripts in a directory.

    Events from every file are merged, sorted by timestamp (stable, so parse
    order breaks ties) and redacted. If the directory cannot be listed, only the
    ``fallback`` transcript is read.
    """
    if not directory:
        return ConversationContext()

    try:
        paths = discover_transcripts(Path(directory))
    except OSError as e:
        logger.debug("Cannot list transcript directory %s: %s", directory, e)
        paths = [Path(fallback)] if fallback else []

    events: list[Event] = []
    model: str | None = None
    for path in paths:
        parsed = parse_transcript_file(path, session_id=session_id, since=since)
        events.extend(parsed.events)
        if parsed.model:
            model = parsed.model

    events.sort(key=Event.sort_key)

    sanitizer = sanitizer or Sanitizer()
    redacted = [dataclasses.replace(e, content=sanitizer.sanitize(e.content)) for e in events]

    timestamps = [e.timestamp for e in redacted if e.timestamp is not None]
    return ConversationContext(
        events=redacted,
        last_event_time=max(timestamps) if timestamps else None,
        model=model,
    )
