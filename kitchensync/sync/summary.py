"""Counters collected during a sync run."""

import threading
from dataclasses import dataclass, field
from typing import Optional

from .comparator import SyncAction, SyncDecision


@dataclass(frozen=True)
class EntryError:
    """A failure that aborted the action for one entry."""

    relative_path: str
    """Relative path of the entry"""

    operation: str
    """What was being done, e.g. "copying" or "archiving" """

    message: str
    """Error description"""


@dataclass
class RunSummary:
    """Outcome of one sync run.

    In preview mode the counters hold what would have been done.
    """

    preview: bool = False
    copied: int = 0
    dirs_created: int = 0
    archived: int = 0
    removed: int = 0
    skipped: int = 0
    dirs_skipped: int = 0
    filtered: int = 0
    links_skipped: int = 0
    errors: list[EntryError] = field(default_factory=list)
    archive_session: Optional[str] = None
    """Path of the archive session directory, if one was created"""

    _lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )

    @property
    def ok(self) -> bool:
        """Whether every entry was handled without error."""
        return not self.errors

    def record(self, decision: SyncDecision) -> None:
        """Count a completed (or, in preview, planned) action."""
        with self._lock:
            action = decision.action
            if action == SyncAction.SKIP:
                if decision.is_dir:
                    self.dirs_skipped += 1
                else:
                    self.skipped += 1
                return

            if action.archives:
                self.archived += 1

            if action == SyncAction.ARCHIVE_AND_REMOVE:
                self.removed += 1
            elif decision.is_dir:
                self.dirs_created += 1
            else:
                self.copied += 1

    def record_error(self, relative_path: str, operation: str, message: str) -> None:
        """Count a failed action."""
        with self._lock:
            self.errors.append(EntryError(relative_path, operation, message))

    def to_dict(self) -> dict:
        """Convert summary to a dictionary."""
        return {
            "preview": self.preview,
            "copied": self.copied,
            "dirs_created": self.dirs_created,
            "archived": self.archived,
            "removed": self.removed,
            "skipped": self.skipped,
            "dirs_skipped": self.dirs_skipped,
            "filtered": self.filtered,
            "links_skipped": self.links_skipped,
            "errors": len(self.errors),
        }
