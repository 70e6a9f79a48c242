"""Directory scanning for sync operations."""

import logging
import os
import stat
from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from ..exceptions import WalkError
from .ignore import PathFilter

logger = logging.getLogger(__name__)

_FILE_ATTRIBUTE_HIDDEN = 0x2


class EntryKind(str, Enum):
    """Kind of filesystem node."""

    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class Entry:
    """Snapshot of a file or directory found while walking a tree."""

    relative_path: str
    """Relative path (using forward slashes for cross-platform compatibility)"""

    kind: EntryKind
    """File or directory"""

    size: int
    """File size in bytes (0 for directories)"""

    mtime: float
    """Last modification time (Unix timestamp)"""

    path: Path
    """Absolute path of the node when it was captured"""

    @property
    def is_dir(self) -> bool:
        """Whether the entry is a directory."""
        return self.kind == EntryKind.DIRECTORY

    @classmethod
    def from_stat(
        cls, path: Path, relative_path: str, st: os.stat_result
    ) -> "Entry":
        """Create an Entry from a stat result.

        Args:
            path: Absolute path of the node
            relative_path: Path relative to the walked root
            st: Result of ``os.stat`` (symlinks already followed)

        Returns:
            Entry instance
        """
        is_dir = stat.S_ISDIR(st.st_mode)
        return cls(
            relative_path=relative_path,
            kind=EntryKind.DIRECTORY if is_dir else EntryKind.FILE,
            size=0 if is_dir else st.st_size,
            mtime=st.st_mtime,
            path=path,
        )


def _is_hidden(name: str, st: os.stat_result) -> bool:
    """Check the dotfile convention and the Windows hidden attribute."""
    if name.startswith("."):
        return True
    attributes = getattr(st, "st_file_attributes", 0)
    return bool(attributes & _FILE_ATTRIBUTE_HIDDEN)


class DirectoryScanner:
    """Walks a directory tree and yields filtered entries.

    Entries come out depth-first with siblings in lexical order, so a
    directory always precedes its contents and two walks over an unchanged
    tree produce the same sequence.

    Problems met during a walk do not stop it. They are collected on the
    scanner and reset at the start of every walk:

    * ``errors``: directories that could not be listed
    * ``filtered``: relative paths removed by the path filter
    * ``links_skipped``: relative paths of broken symlinks and of directory
      links whose target was already walked

    Examples:
        >>> scanner = DirectoryScanner(PathFilter(patterns=["*.tmp"]))
        >>> for entry in scanner.walk(Path("/data/photos")):
        ...     print(entry.relative_path)
    """

    def __init__(self, path_filter: Optional[PathFilter] = None):
        """Initialize directory scanner.

        Args:
            path_filter: Exclusion rules (defaults to the built-in rules only)
        """
        self.path_filter = path_filter or PathFilter()
        self.errors: list[WalkError] = []
        self.filtered: list[str] = []
        self.links_skipped: list[str] = []
        self._visited: set[str] = set()

    def walk(self, root: Path) -> Iterator[Entry]:
        """Recursively walk a directory tree.

        Args:
            root: Directory to walk. A missing root yields nothing.

        Yields:
            Entry for every non-excluded file and directory below root
        """
        self.errors = []
        self.filtered = []
        self.links_skipped = []

        root = Path(root)
        if not root.is_dir():
            logger.debug("Nothing to walk at %s", root)
            return

        self._visited = {os.path.realpath(root)}
        yield from self._walk_directory(root, "")

    def scan(self, root: Path) -> dict[str, Entry]:
        """Walk a tree and index its entries by relative path."""
        return {entry.relative_path: entry for entry in self.walk(root)}

    def _walk_directory(self, directory: Path, prefix: str) -> Iterator[Entry]:
        try:
            names = sorted(os.listdir(directory))
        except OSError as e:
            error = WalkError(
                f"Cannot read directory {prefix or '.'}: {e.strerror or e}",
                path=directory,
            )
            logger.warning(error.message)
            self.errors.append(error)
            return

        for name in names:
            path = directory / name
            relative_path = f"{prefix}/{name}" if prefix else name

            try:
                st = os.stat(path)
            except OSError as e:
                if os.path.islink(path):
                    logger.warning("Skipping broken symlink: %s", relative_path)
                    self.links_skipped.append(relative_path)
                else:
                    error = WalkError(
                        f"Cannot stat {relative_path}: {e.strerror or e}", path=path
                    )
                    logger.warning(error.message)
                    self.errors.append(error)
                continue

            if self.path_filter.excluded(relative_path, is_hidden=_is_hidden(name, st)):
                logger.debug("Filtered: %s", relative_path)
                self.filtered.append(relative_path)
                continue

            entry = Entry.from_stat(path, relative_path, st)

            if entry.is_dir and os.path.islink(path):
                if os.path.realpath(path) in self._visited:
                    logger.warning(
                        "Skipping symlink to an already walked directory: %s",
                        relative_path,
                    )
                    self.links_skipped.append(relative_path)
                    continue

            yield entry

            if entry.is_dir:
                self._visited.add(os.path.realpath(path))
                yield from self._walk_directory(path, relative_path)
