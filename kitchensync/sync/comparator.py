"""File comparison logic for sync operations."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .modes import CompareMode
from .scanner import Entry


class SyncAction(str, Enum):
    """Actions that can be taken for a path during sync."""

    SKIP = "skip"
    """Nothing to do"""

    COPY = "copy"
    """Copy source to a destination path that does not exist yet"""

    ARCHIVE_AND_REPLACE = "archive_and_replace"
    """Archive the destination entry, then copy the source over it"""

    ARCHIVE_AND_REMOVE = "archive_and_remove"
    """Archive the destination entry, then remove it"""

    @property
    def archives(self) -> bool:
        """Whether existing destination content is archived first."""
        return self in (SyncAction.ARCHIVE_AND_REPLACE, SyncAction.ARCHIVE_AND_REMOVE)


@dataclass(frozen=True)
class EntryPair:
    """Source and destination entries joined by relative path."""

    relative_path: str
    """Relative path shared by both sides"""

    source: Optional[Entry] = None
    """Source entry (if exists)"""

    destination: Optional[Entry] = None
    """Destination entry (if exists)"""

    @property
    def sort_key(self) -> tuple[str, ...]:
        """Key ordering parents before their contents."""
        return tuple(self.relative_path.split("/"))

    @property
    def kind_mismatch(self) -> bool:
        """Whether a file and a directory meet at the same path."""
        return (
            self.source is not None
            and self.destination is not None
            and self.source.kind != self.destination.kind
        )


@dataclass
class SyncDecision:
    """Represents a decision about how to sync a path."""

    action: SyncAction
    """Action to take"""

    reason: str
    """Human-readable reason for this decision"""

    pair: EntryPair
    """Entries the decision was made for"""

    @property
    def relative_path(self) -> str:
        """Relative path of the entry."""
        return self.pair.relative_path

    @property
    def source(self) -> Optional[Entry]:
        """Source entry (if exists)."""
        return self.pair.source

    @property
    def destination(self) -> Optional[Entry]:
        """Destination entry (if exists)."""
        return self.pair.destination

    @property
    def is_dir(self) -> bool:
        """Whether the entry the action produces or removes is a directory."""
        entry = self.pair.source or self.pair.destination
        return entry is not None and entry.is_dir


def same_mtime(first: Entry, second: Entry) -> bool:
    """Compare modification times at whole-second resolution."""
    return int(first.mtime) == int(second.mtime)


def join_entries(
    source_entries: dict[str, Entry],
    destination_entries: dict[str, Entry],
) -> list[EntryPair]:
    """Join two indexed trees into pairs ordered by path components.

    Args:
        source_entries: Dictionary mapping relative_path to source Entry
        destination_entries: Dictionary mapping relative_path to destination Entry

    Returns:
        List of EntryPair objects, parents before children
    """
    all_paths = set(source_entries) | set(destination_entries)
    pairs = [
        EntryPair(
            relative_path=path,
            source=source_entries.get(path),
            destination=destination_entries.get(path),
        )
        for path in all_paths
    ]
    pairs.sort(key=lambda pair: pair.sort_key)
    return pairs


class FileComparator:
    """Compares source and destination entries to determine sync actions."""

    def __init__(
        self, compare_mode: CompareMode = CompareMode.MODTIME, force_copy: bool = False
    ):
        """Initialize file comparator.

        Args:
            compare_mode: How files present on both sides are compared
            force_copy: Replace every file present on both sides
        """
        self.compare_mode = compare_mode
        self.force_copy = force_copy

    def compare(self, pairs: list[EntryPair]) -> list[SyncDecision]:
        """Decide the action for every pair, keeping the pair order."""
        return [self.decide(pair) for pair in pairs]

    def decide(self, pair: EntryPair) -> SyncDecision:
        """Compare a single pair and determine the action.

        Args:
            pair: Source and destination entries for one relative path

        Returns:
            SyncDecision for this path
        """
        source, destination = pair.source, pair.destination

        # Case 1: Only in source
        if source is not None and destination is None:
            reason = "New directory" if source.is_dir else "New file"
            return SyncDecision(SyncAction.COPY, reason, pair)

        # Case 2: Only in destination
        if source is None and destination is not None:
            return self._handle_destination_only(pair, destination)

        # Case 3: On both sides
        if source is not None and destination is not None:
            return self._compare_existing(pair, source, destination)

        # Should never happen
        return SyncDecision(SyncAction.SKIP, "No entry found", pair)

    def _handle_destination_only(
        self, pair: EntryPair, destination: Entry
    ) -> SyncDecision:
        """Handle an entry that only exists in the destination."""
        if not self.compare_mode.removes_orphans:
            return SyncDecision(
                SyncAction.SKIP,
                f"Not in source, kept by {self.compare_mode.value} mode",
                pair,
            )
        if destination.is_dir:
            reason = "Directory not in source"
        else:
            reason = "File not in source"
        return SyncDecision(SyncAction.ARCHIVE_AND_REMOVE, reason, pair)

    def _compare_existing(
        self, pair: EntryPair, source: Entry, destination: Entry
    ) -> SyncDecision:
        """Compare entries that exist in both trees."""
        if pair.kind_mismatch:
            reason = f"{destination.kind.value} replaced by {source.kind.value}"
            return SyncDecision(
                SyncAction.ARCHIVE_AND_REPLACE, reason.capitalize(), pair
            )

        # Directories are structural; their contents are compared instead
        if source.is_dir:
            return SyncDecision(SyncAction.SKIP, "Directory exists", pair)

        if self.force_copy:
            return SyncDecision(SyncAction.ARCHIVE_AND_REPLACE, "Forced copy", pair)

        if self.compare_mode == CompareMode.GREATER_SIZE:
            if source.size > destination.size:
                reason = f"Source is larger ({source.size} > {destination.size} bytes)"
                return SyncDecision(SyncAction.ARCHIVE_AND_REPLACE, reason, pair)
            return SyncDecision(SyncAction.SKIP, "Source is not larger", pair)

        if self.compare_mode == CompareMode.SIZE:
            if source.size != destination.size:
                reason = f"Sizes differ ({source.size} vs {destination.size} bytes)"
                return SyncDecision(SyncAction.ARCHIVE_AND_REPLACE, reason, pair)
            return SyncDecision(SyncAction.SKIP, "Same size", pair)

        if not same_mtime(source, destination):
            return SyncDecision(
                SyncAction.ARCHIVE_AND_REPLACE, "Modification times differ", pair
            )
        return SyncDecision(SyncAction.SKIP, "Same modification time", pair)
