"""CLI for cc-notes."""

import json
import logging
import sys
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown

from cc_notes import __version__

app = typer.Typer(
    name="cc-notes",
    help="Attach Claude Code conversations to git commits as git notes.",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)

RefOption = Annotated[
    str | None, typer.Option("--ref", "-r", help="Notes ref (default: from .claude/notes.json)")
]


def version_callback(value: bool) -> None:
    if value:
        console.print(f"cc-notes {__version__}")
        raise typer.Exit()


def configure_logging(level: str) -> None:
    # Logs go to stderr; stdout carries the hook decision
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option("--log-level", envvar="CC_NOTES_LOG_LEVEL", help="Logging level"),
    ] = "WARNING",
) -> None:
    """Attach Claude Code conversations to git commits."""
    configure_logging(log_level)


def _open_store(ref: str | None):
    from cc_notes.config import load_notes_config
    from cc_notes.git import GitRunner
    from cc_notes.store import AnnotationStore

    config = load_notes_config(Path.cwd())
    return AnnotationStore(GitRunner(Path.cwd()), ref or config.notes_ref), config


@app.command()
def run() -> None:
    """Handle one hook event from stdin (called by Claude Code)."""
    from cc_notes.errors import HookInputError
    from cc_notes.hook import dispatch, read_hook_input

    try:
        hook_input = read_hook_input(sys.stdin)
    except HookInputError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    decision = dispatch(hook_input)
    typer.echo(json.dumps(decision.to_dict(), ensure_ascii=False))


@app.command()
def show(
    commit: Annotated[str, typer.Argument(help="Commit to show (default: HEAD)")] = "HEAD",
    ref: RefOption = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output the raw note as JSON")] = False,
) -> None:
    """Show the conversation note for a commit."""
    from cc_notes.display import annotation_markdown
    from cc_notes.errors import AnnotationDecodeError
    from cc_notes.git import commit_oneline

    store, config = _open_store(ref)

    try:
        annotation = store.get(commit)
    except AnnotationDecodeError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if annotation is None:
        console.print(f"[yellow]No conversation notes found for commit {commit}[/yellow]")
        console.print("Use 'cc-notes list' to see which commits have notes")
        return

    if json_output:
        console.print_json(data=annotation.to_dict())
        return

    console.print(Markdown(annotation_markdown(annotation, commit_oneline(store.git, commit), config)))


@app.command("list")
def list_notes(
    ref: RefOption = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """List all commits with conversation notes."""
    store, _ = _open_store(ref)
    annotations = store.list_annotations()

    if json_output:
        console.print_json(data={commit: note.to_dict() for commit, note in annotations.items()})
        return

    if not annotations:
        console.print("[yellow]No conversation notes found.[/yellow]")
        return

    console.print(f"Found {len(annotations)} commits with conversation notes:\n")
    ordered = sorted(annotations.items(), key=lambda item: item[1].timestamp, reverse=True)
    for commit, note in ordered:
        console.print(f"• [cyan]{commit[:8]}[/cyan] ({note.timestamp.strftime('%Y-%m-%d %H:%M')})")
        console.print(f"  Session: {note.session_id}")
        console.print(f"  Tools: {', '.join(note.tools_used)}\n")

    console.print("View notes with: 'cc-notes show <commit>'")


@app.command()
def backup(
    filename: Annotated[
        Path | None, typer.Argument(help="Backup file (default: timestamped file)")
    ] = None,
    ref: RefOption = None,
) -> None:
    """Back up all conversation notes to a JSON file."""
    from cc_notes.errors import BackupFileError
    from cc_notes.store import create_backup_file

    store, _ = _open_store(ref)
    try:
        path, result = create_backup_file(store, filename)
    except BackupFileError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Backed up {len(result.notes)} conversation notes to {path}[/green]")


@app.command()
def restore(
    filename: Annotated[Path, typer.Argument(help="Backup file to restore")],
    ref: RefOption = None,
) -> None:
    """Restore conversation notes from a backup file.

    Only commits that still exist and have no note yet are restored.
    """
    from cc_notes.errors import BackupFileError, RestoreError
    from cc_notes.store import load_backup

    store, _ = _open_store(ref)
    try:
        backup_data = load_backup(store.resolve_path(filename))
    except BackupFileError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(
        f"Loaded backup from {filename} ({len(backup_data.notes)} notes, "
        f"created {backup_data.backup_time.strftime('%Y-%m-%d %H:%M:%S')})"
    )

    try:
        report = store.restore(backup_data)
    except RestoreError as e:
        err_console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(
        f"[green]Notes restoration complete: {report.restored} restored, {report.skipped} skipped[/green]"
    )


if __name__ == "__main__":
    app()
