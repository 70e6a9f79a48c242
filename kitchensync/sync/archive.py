"""Archiving of destination content before it is overwritten or removed.

Every run owns one ArchiveSession. Its directory,
``<destination>/.kitchensync/<run start time>``, is only created when the
first entry is archived, so runs that change nothing leave no trace.
"""

import logging
import shutil
import threading
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..exceptions import ArchiveError
from .ignore import ARCHIVE_DIR_NAME
from .scanner import Entry

logger = logging.getLogger(__name__)

# Sortable: lexical order equals chronological order.
SESSION_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"


def format_session_timestamp(moment: datetime) -> str:
    """Format a session name, e.g. ``2024-01-15_14-30-05.123``."""
    millis = moment.microsecond // 1000
    return f"{moment.strftime(SESSION_TIMESTAMP_FORMAT)}.{millis:03d}"


class ArchiveSession:
    """Holding area for everything displaced during one run."""

    def __init__(self, destination_root: Path, started: Optional[datetime] = None):
        """Initialize archive session.

        Args:
            destination_root: Root of the destination tree
            started: Run start time (defaults to now)
        """
        self.destination_root = Path(destination_root)
        self.started = started or datetime.now()
        self.name = format_session_timestamp(self.started)
        self._root: Optional[Path] = None
        self._lock = threading.Lock()

    @property
    def archive_dir(self) -> Path:
        """Directory holding all sessions of this destination."""
        return self.destination_root / ARCHIVE_DIR_NAME

    @property
    def created(self) -> bool:
        """Whether the session directory exists."""
        return self._root is not None

    @property
    def root(self) -> Path:
        """Session directory, whether or not it has been created yet."""
        return self._root or self.archive_dir / self.name

    def ensure_created(self) -> Path:
        """Create the session directory on first use.

        Safe to call from several threads; the directory is created once.
        If a directory with the same name exists from an earlier run, a
        numeric suffix is appended.

        Returns:
            Path of the session directory
        """
        with self._lock:
            if self._root is not None:
                return self._root

            self.archive_dir.mkdir(parents=True, exist_ok=True)
            candidate = self.archive_dir / self.name
            suffix = 0
            while True:
                try:
                    candidate.mkdir()
                    break
                except FileExistsError:
                    suffix += 1
                    candidate = self.archive_dir / f"{self.name}-{suffix}"

            logger.debug("Created archive session %s", candidate)
            self._root = candidate
            return candidate

    def discard_if_empty(self) -> bool:
        """Remove the session directory if nothing is left inside it.

        A session becomes empty when every archived entry was moved back by
        :meth:`Archiver.restore`. The holding directory is removed too once
        it is empty.

        Returns:
            True if the session directory was removed
        """
        with self._lock:
            if self._root is None:
                return False

            if any(self._root.iterdir()):
                return False

            self._root.rmdir()

            if not any(self.archive_dir.iterdir()):
                self.archive_dir.rmdir()
            self._root = None
            return True

    def path_for(self, relative_path: str) -> Path:
        """Location of an archived entry inside the session."""
        return self.root.joinpath(*relative_path.split("/"))


class Archiver:
    """Moves destination entries into an archive session."""

    def archive(self, entry: Entry, session: ArchiveSession) -> Path:
        """Move a destination entry into the session.

        Directories are moved as a whole subtree. The move falls back to
        copy-and-delete when the archive lives on another device.

        Args:
            entry: Destination entry to archive
            session: Active archive session

        Returns:
            Path of the archived copy

        Raises:
            ArchiveError: If the entry could not be moved; the destination is
                left as it was
        """
        try:
            session.ensure_created()
            target = session.path_for(entry.relative_path)
            target.parent.mkdir(parents=True, exist_ok=True)
            logger.debug("Archiving %s -> %s", entry.path, target)
            shutil.move(str(entry.path), str(target))
        except OSError as e:
            raise ArchiveError(
                f"Cannot archive {entry.relative_path}: {e.strerror or e}",
                path=entry.path,
            ) from e
        return target

    def restore(self, entry: Entry, session: ArchiveSession) -> None:
        """Move an archived entry back to its destination path.

        Used to undo an archive step when the copy that followed it failed.

        Raises:
            ArchiveError: If the archived entry could not be moved back
        """
        archived = session.path_for(entry.relative_path)
        if not archived.exists() and not archived.is_symlink():
            return

        try:
            if entry.path.is_dir() and not entry.path.is_symlink():
                shutil.rmtree(entry.path)
            elif entry.path.exists() or entry.path.is_symlink():
                entry.path.unlink()
            logger.debug("Restoring %s from %s", entry.path, archived)
            shutil.move(str(archived), str(entry.path))
            # Drop folders that only existed to hold the restored entry
            parent = archived.parent
            while parent != session.root and not any(parent.iterdir()):
                parent.rmdir()
                parent = parent.parent
        except OSError as e:
            raise ArchiveError(
                f"Cannot restore {entry.relative_path} from archive: {e.strerror or e}",
                path=archived,
            ) from e
