"""Exceptions raised by cc-notes."""


class NotesError(Exception):
    """Base class for cc-notes errors."""


class GitError(NotesError):
    """A git invocation failed or git is not installed."""

    def __init__(self, args: list[str], returncode: int, stderr: str = ""):
        self.args_list = args
        self.returncode = returncode
        self.stderr = stderr.strip()
        detail = f": {self.stderr}" if self.stderr else ""
        super().__init__(f"git {' '.join(args)} exited with {returncode}{detail}")


class WriteConflict(NotesError):
    """A note already exists for the commit."""

    def __init__(self, commit: str):
        self.commit = commit
        super().__init__(f"commit {commit} already has a conversation note")


class StoreUnavailable(NotesError):
    """The git notes mechanism errored."""


class AnnotationDecodeError(NotesError):
    """A stored note is not a valid conversation annotation."""


class RestoreError(NotesError):
    """Restoring a backup stopped on an unrecoverable write."""

    def __init__(self, commit: str, cause: Exception):
        self.commit = commit
        self.cause = cause
        super().__init__(f"failed to restore note for commit {commit}: {cause}")


class BackupFileError(NotesError):
    """A backup file could not be read or written."""


class ConfigInvalid(NotesError):
    """The notes configuration file is malformed."""


class HookInputError(NotesError):
    """The hook event on stdin is missing or malformed."""


class InputTimeout(HookInputError):
    """No hook event arrived on stdin in time."""
