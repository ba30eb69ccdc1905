"""Markdown rendering of conversation notes."""

from cc_notes.config import NotesConfig
from cc_notes.models import Annotation


def format_conversation_excerpt(excerpt: str, config: NotesConfig | None = None) -> str:
    """Turn a stored excerpt into readable Markdown.

    User prompts are bolded; tool calls and results go into code blocks.
    """
    formatted = (
        excerpt.replace("\\n", "\n")
        .replace('\\"', '"')
        .replace("\\\\", "\\")
        .replace("\\t", "    ")
        .replace("\\r", "")
    )
    while "\n\n\n" in formatted:
        formatted = formatted.replace("\n\n\n", "\n\n")

    user_prefixes = ["User:"]
    assistant_prefixes = ["Claude:"]
    if config is not None:
        user_prefixes.extend(p for p in [config.user_emoji] if p)
        assistant_prefixes.extend(p for p in [config.assistant_emoji] if p)

    lines: list[str] = []
    for line in formatted.split("\n"):
        line = line.strip()
        if not line:
            lines.append("")
        elif line.startswith(tuple(user_prefixes)):
            lines.append(f"**{line}**")
        elif line.startswith(tuple(assistant_prefixes)):
            lines.append(line)
        elif line.startswith(("Tool (", "Result:")) and ": " in line:
            label, body = line.split(": ", 1)
            if label == "Result":
                label = "_Result_"
            lines.extend([f"{label}:", "```", body, "```"])
        else:
            lines.append(line)

    return "\n".join(lines)


def annotation_markdown(
    annotation: Annotation,
    commit_info: str,
    config: NotesConfig | None = None,
) -> str:
    lines = [
        "# Claude Conversation Notes",
        "",
        f"**Commit:** `{commit_info}`  ",
        f"**Session ID:** `{annotation.session_id}`  ",
        f"**Timestamp:** {annotation.timestamp.strftime('%Y-%m-%d %H:%M:%S %Z')}  ",
        f"**Claude Version:** {annotation.claude_version}  ",
        f"**Tools Used:** {', '.join(annotation.tools_used)}",
        "",
    ]

    if annotation.commit_context:
        lines.extend(["## Commit Context", "", "```", annotation.commit_context, "```", ""])

    if annotation.conversation_excerpt:
        lines.extend([
            "## Conversation Transcript",
            "",
            format_conversation_excerpt(annotation.conversation_excerpt, config),
            "",
        ])

    lines.extend(["---", "*Generated by `cc-notes`*"])
    return "\n".join(lines)
