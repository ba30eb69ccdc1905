"""Claude Code hook handlers: attach conversations to commits, warn about note loss."""

import json
import logging
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import IO

from cc_notes.aggregator import aggregate
from cc_notes.config import DEFAULT_NOTES_REF, load_notes_config
from cc_notes.errors import HookInputError, InputTimeout, NotesError, WriteConflict
from cc_notes.excerpt import compile_excerpt
from cc_notes.git import GitRunner, extract_commit_hash, is_git_commit_command, previous_commit_time
from cc_notes.models import Annotation, HookDecision, HookInput
from cc_notes.redaction import Sanitizer
from cc_notes.store import AnnotationStore

logger = logging.getLogger(__name__)

POST_TOOL_USE = "PostToolUse"
PRE_TOOL_USE = "PreToolUse"
MONITORED_TOOL = "Bash"

# The prompt that started the work usually lands tens of seconds before the
# previous commit finishes, so the window opens a little earlier.
WINDOW_BUFFER = timedelta(seconds=60)

HOOK_INPUT_TIMEOUT = 10.0

UNKNOWN_MODEL = "unknown"

# (command fragment, warning template); {ref} is the configured notes ref
DESTRUCTIVE_OPERATIONS = [
    (
        "git rebase",
        "⚠️  Git rebase can lose conversation notes attached to commits. Consider:\n"
        "   • Run 'git notes --ref={ref} list' to see which commits have notes\n"
        "   • Use 'git -c notes.rewrite.mode=copy rebase' to preserve notes\n"
        "   • Or back up notes first with 'cc-notes backup'",
    ),
    (
        "git reset --hard",
        "⚠️  Hard reset will lose commits and their conversation notes permanently.\n"
        "   • Consider using 'git reset --soft' or 'git reset --mixed' instead\n"
        "   • Back up important notes first with 'cc-notes backup'",
    ),
    (
        "git commit --amend",
        "⚠️  Amending commits changes their hash and may lose conversation notes.\n"
        "   • Notes are attached to the original commit hash\n"
        "   • Consider creating a new commit instead of amending",
    ),
]


def read_hook_input(stream: IO[str], timeout: float = HOOK_INPUT_TIMEOUT) -> HookInput:
    """Read one hook event from a stream.

    Raises:
        InputTimeout: Nothing arrived within ``timeout`` seconds.
        HookInputError: The input was empty or not a JSON object.
    """
    received: list[str] = []
    errors: list[BaseException] = []

    def _read() -> None:
        try:
            received.append(stream.read())
        except (OSError, ValueError) as e:
            errors.append(e)

    # Daemon thread so a stdin that never closes cannot keep the process alive
    reader = threading.Thread(target=_read, daemon=True)
    reader.start()
    reader.join(timeout)

    if reader.is_alive():
        raise InputTimeout(f"no hook input received within {timeout:g}s")
    if errors:
        raise HookInputError(f"failed to read hook input: {errors[0]}")

    raw = received[0].strip() if received else ""
    if not raw:
        raise HookInputError("no hook input received")

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise HookInputError(f"hook input is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise HookInputError("hook input must be a JSON object")

    return HookInput.from_dict(data)


def summarize_commit(command: str, output: str) -> str:
    """Short summary of the git command and what it printed."""
    parts = [f"Git command: {command}"]

    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue

        # The "[branch hash] subject" line says it all
        if "[" in line and "]" in line:
            parts.append(f"Result: {line}")
            break

        if not line.startswith(("On branch", "Your branch")):
            parts.append(f"Output: {line}")
            if len(parts) >= 3:
                break

    return "\n".join(parts)


def attach_conversation_to_commit(hook_input: HookInput, git: GitRunner | None = None) -> HookDecision:
    """Attach the conversation since the previous commit to a new commit.

    Runs after a Bash tool call. Always approves: the commit has already
    happened, so any failure here only means no note is written.
    """
    approve = HookDecision()

    if hook_input.hook_event_name != POST_TOOL_USE or hook_input.tool_name != MONITORED_TOOL:
        return approve

    command = hook_input.command
    if not is_git_commit_command(command):
        return approve

    config = load_notes_config(hook_input.cwd)
    if not config.enabled:
        return approve

    output = hook_input.tool_output()
    commit = extract_commit_hash(output)
    if not commit:
        logger.debug("Could not extract commit hash from git output: %r", output)
        return approve

    git = git or GitRunner(hook_input.cwd or None)
    store = AnnotationStore(git, config.notes_ref)

    if store.exists(commit):
        logger.debug("Commit %s already has a conversation note", commit)
        return approve

    since = previous_commit_time(git, commit)
    if since is not None:
        since -= WINDOW_BUFFER

    transcript = hook_input.transcript_path
    context = aggregate(
        Path(transcript).parent if transcript else None,
        session_id=hook_input.session_id,
        since=since,
        sanitizer=Sanitizer(config.exclude_patterns),
        fallback=transcript or None,
    )

    excerpt = compile_excerpt(
        context.events,
        max_length=config.max_excerpt_length,
        user_marker=config.user_emoji,
        assistant_marker=config.assistant_emoji,
        include_tool_output=config.include_tool_output,
    )

    tools_used = [hook_input.tool_name]
    for name in context.tool_names():
        if name not in tools_used:
            tools_used.append(name)

    annotation = Annotation(
        session_id=hook_input.session_id,
        timestamp=datetime.now(tz=timezone.utc),
        conversation_excerpt=excerpt,
        tools_used=tools_used,
        commit_context=summarize_commit(command, output),
        claude_version=context.model or UNKNOWN_MODEL,
    )

    try:
        store.put(commit, annotation)
    except WriteConflict:
        logger.debug("Another writer already annotated commit %s", commit)
        return approve
    except (NotesError, OSError) as e:
        logger.error(
            "Failed to add conversation note to commit %s (session %s): %s",
            commit,
            hook_input.session_id,
            e,
        )
        return approve

    logger.info(
        "Attached conversation context to commit %s (session %s, tools: %s, excerpt length %d)",
        commit,
        hook_input.session_id,
        ", ".join(tools_used),
        len(excerpt),
    )
    return approve


def warn_about_notes_loss(hook_input: HookInput) -> HookDecision:
    """Warn before git operations that can orphan conversation notes. Never blocks."""
    if hook_input.hook_event_name != PRE_TOOL_USE or hook_input.tool_name != MONITORED_TOOL:
        return HookDecision()

    command = hook_input.command.strip()
    for pattern, warning in DESTRUCTIVE_OPERATIONS:
        if pattern in command:
            notes_ref = load_notes_config(hook_input.cwd).notes_ref or DEFAULT_NOTES_REF
            logger.info("Warning about potential notes loss for %r (%s)", command, pattern)
            return HookDecision(
                additional_context=(
                    f"\n{warning.format(ref=notes_ref)}\n\nDo you want to proceed with this operation?"
                )
            )

    return HookDecision()


def dispatch(hook_input: HookInput, git: GitRunner | None = None) -> HookDecision:
    """Route a hook event to its handler."""
    if hook_input.hook_event_name == POST_TOOL_USE:
        return attach_conversation_to_commit(hook_input, git=git)
    if hook_input.hook_event_name == PRE_TOOL_USE:
        return warn_about_notes_loss(hook_input)
    return HookDecision()
