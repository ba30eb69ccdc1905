"""Git command execution and git output parsing."""

import logging
import re
import subprocess
from datetime import datetime
from pathlib import Path

from cc_notes.errors import GitError
from cc_notes.models import parse_timestamp

logger = logging.getLogger(__name__)

# `git commit` as a command of its own, possibly after `cd x &&` or with -C/-c options
COMMIT_COMMAND = re.compile(r"(?:^|[;&|(]\s*)git(?:\s+-[cC]\s+\S+)*\s+commit(?![\w-])")

# "[main abc1234] message", "[main (root-commit) abc1234] message"
BRACKET_HASH = re.compile(r"^\[[^\]]*?\b([0-9a-f]{7,40})\]")
# "commit 1234567890abcdef"
COMMIT_LINE_HASH = re.compile(r"^commit\s+([0-9a-f]{7,40})\b")


class GitRunner:
    """Runs git in a working directory."""

    def __init__(self, work_dir: str | Path | None = None):
        self.work_dir = Path(work_dir) if work_dir else Path.cwd()

    def run(self, *args: str) -> str:
        """Run a git command and return its stdout.

        Raises GitError on a non-zero exit or if git is not installed.
        """
        try:
            proc = subprocess.run(
                ["git", *args],
                cwd=self.work_dir,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=True,
            )
        except OSError as e:
            raise GitError(list(args), 127, str(e)) from e
        except subprocess.CalledProcessError as e:
            raise GitError(list(args), e.returncode, e.stderr or "") from e
        return proc.stdout


def is_git_commit_command(command: str) -> bool:
    """Check whether a shell command runs `git commit`."""
    return bool(COMMIT_COMMAND.search(command.strip()))


def extract_commit_hash(output: str) -> str | None:
    """Extract the new commit's hash from `git commit` output.

    The bracketed summary line wins over a `commit <hash>` line.
    """
    fallback = None
    for line in output.splitlines():
        line = line.strip()
        match = BRACKET_HASH.match(line)
        if match:
            return match.group(1)
        if fallback is None:
            match = COMMIT_LINE_HASH.match(line)
            if match:
                fallback = match.group(1)
    return fallback


def previous_commit_time(git: GitRunner, commit: str) -> datetime | None:
    """Committer time of the commit's first parent, or None for a root commit."""
    try:
        output = git.run("log", "-1", "--format=%cI", f"{commit}^")
    except GitError as e:
        logger.debug("No parent commit time for %s: %s", commit, e)
        return None
    return parse_timestamp(output.strip())


def commit_oneline(git: GitRunner, commit: str) -> str:
    """One-line description of a commit, falling back to the ref itself."""
    try:
        return git.run("log", "--oneline", "-1", commit).strip() or commit
    except GitError:
        return commit
