"""Conversation notes stored in git notes under a dedicated ref."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from cc_notes.config import DEFAULT_NOTES_REF
from cc_notes.errors import (
    AnnotationDecodeError,
    BackupFileError,
    GitError,
    RestoreError,
    StoreUnavailable,
    WriteConflict,
)
from cc_notes.git import GitRunner
from cc_notes.models import Annotation, AnnotationBackup, RestoreReport

logger = logging.getLogger(__name__)

BACKUP_PREFIX = ".claude-notes-backup-"


class AnnotationStore:
    """CRUD, backup and restore of conversation notes for one notes ref."""

    def __init__(self, git: GitRunner, notes_ref: str = DEFAULT_NOTES_REF):
        self.git = git
        self.notes_ref = notes_ref or DEFAULT_NOTES_REF

    def _notes(self, *args: str) -> str:
        return self.git.run("notes", "--ref", self.notes_ref, *args)

    def _read_raw(self, commit: str) -> str | None:
        try:
            return self._notes("show", commit)
        except GitError:
            # No note for this object, which is the common case
            return None

    def put(self, commit: str, annotation: Annotation) -> None:
        """Attach a note to a commit.

        Raises:
            WriteConflict: The commit already has a note.
            StoreUnavailable: git failed for any other reason.
        """
        if self.exists(commit):
            raise WriteConflict(commit)

        payload = json.dumps(annotation.to_dict(), indent=2, ensure_ascii=False)
        try:
            self._notes("add", "-m", payload, commit)
        except GitError as e:
            # git refuses to add over an existing note; another writer got there first
            if self.exists(commit):
                raise WriteConflict(commit) from e
            raise StoreUnavailable(str(e)) from e

    def get(self, commit: str) -> Annotation | None:
        """Read the note for a commit, or None if it has none.

        Raises AnnotationDecodeError if the note is not a conversation note.
        """
        raw = self._read_raw(commit)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise AnnotationDecodeError(f"note for {commit} is not JSON: {e}") from e
        return Annotation.from_dict(data)

    def exists(self, commit: str) -> bool:
        """Whether the commit has any note under this ref, readable or not."""
        return self._read_raw(commit) is not None

    def object_exists(self, commit: str) -> bool:
        try:
            self.git.run("cat-file", "-e", commit)
        except GitError:
            return False
        return True

    def list_annotations(self) -> dict[str, Annotation]:
        """Every readable note under this ref, keyed by commit hash.

        An empty or missing ref yields an empty mapping.
        """
        try:
            output = self._notes("list")
        except GitError as e:
            logger.debug("No notes under %s: %s", self.notes_ref, e)
            return {}

        annotations: dict[str, Annotation] = {}
        for line in output.splitlines():
            # Format: <note object> <annotated object>
            parts = line.split()
            if len(parts) != 2:
                continue
            commit = parts[1]
            try:
                annotation = self.get(commit)
            except AnnotationDecodeError as e:
                logger.debug("Skipping unreadable note for %s: %s", commit, e)
                continue
            if annotation is not None:
                annotations[commit] = annotation
        return annotations

    def backup(self, now: datetime | None = None) -> AnnotationBackup:
        return AnnotationBackup(
            backup_time=now or datetime.now(tz=timezone.utc),
            notes_ref=self.notes_ref,
            notes=self.list_annotations(),
        )

    def restore(self, backup: AnnotationBackup) -> RestoreReport:
        """Replay a backup onto the current repository.

        Notes for commits that no longer exist, or that already have a note, are
        skipped. Not transactional: notes written before a failure stay.

        Raises RestoreError on the first write that fails.
        """
        report = RestoreReport()

        for commit, annotation in backup.notes.items():
            if not self.object_exists(commit):
                logger.debug("Skipping %s: commit no longer exists", commit)
                report.skipped += 1
                continue

            if self.exists(commit):
                report.skipped += 1
                continue

            try:
                self.put(commit, annotation)
            except WriteConflict:
                report.skipped += 1
                continue
            except StoreUnavailable as e:
                raise RestoreError(commit, e) from e

            report.restored += 1

        logger.info(
            "Notes restoration complete: %d restored, %d skipped", report.restored, report.skipped
        )
        return report

    def resolve_path(self, filename: str | Path) -> Path:
        """Resolve a backup path relative to the repository working directory."""
        path = Path(filename)
        if not path.is_absolute():
            path = self.git.work_dir / path
        return path


def default_backup_filename(now: datetime | None = None) -> str:
    now = now or datetime.now()
    return f"{BACKUP_PREFIX}{now.strftime('%Y%m%d_%H%M%S')}.json"


def save_backup(backup: AnnotationBackup, path: Path) -> None:
    try:
        path.write_text(
            json.dumps(backup.to_dict(), indent=2, ensure_ascii=False) + "\n", encoding="utf-8"
        )
    except OSError as e:
        raise BackupFileError(f"failed to write backup {path}: {e}") from e


def load_backup(path: Path) -> AnnotationBackup:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise BackupFileError(f"failed to read backup file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise BackupFileError(f"backup file {path} is not valid JSON: {e}") from e

    try:
        return AnnotationBackup.from_dict(data)
    except AnnotationDecodeError as e:
        raise BackupFileError(f"backup file {path} is malformed: {e}") from e


def create_backup_file(store: AnnotationStore, filename: str | Path | None = None) -> tuple[Path, AnnotationBackup]:
    """Back up every note to a file, timestamped when no name is given."""
    path = store.resolve_path(filename or default_backup_filename())
    backup = store.backup()
    save_backup(backup, path)
    return path, backup
