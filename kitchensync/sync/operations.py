"""Filesystem operations used by the sync engine."""

import logging
import os
import shutil
from pathlib import Path

from ..exceptions import CopyError
from .scanner import Entry

logger = logging.getLogger(__name__)


class SyncOperations:
    """Copy, create and remove operations on the destination tree."""

    def __init__(self, destination_root: Path):
        """Initialize sync operations.

        Args:
            destination_root: Root of the destination tree
        """
        self.destination_root = Path(destination_root)

    def destination_path(self, relative_path: str) -> Path:
        """Absolute destination path for a relative path."""
        return self.destination_root.joinpath(*relative_path.split("/"))

    def copy_file(self, source: Entry) -> Path:
        """Copy a source file to the destination.

        Content and modification time are copied, then the size is checked.
        A copy whose size does not match the source is removed again. The
        target must not exist: anything already there has to be archived first.

        Args:
            source: Source file entry

        Returns:
            Destination path written

        Raises:
            CopyError: If the target already exists, the source could not be
                read or the destination could not be written
        """
        target = self.destination_path(source.relative_path)
        if os.path.lexists(target):
            raise CopyError(
                f"Cannot copy {source.relative_path}: destination already exists",
                path=target,
            )

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source.path, target)
            # Destination mtime must equal the source mtime
            source_stat = os.stat(source.path)
            os.utime(target, ns=(source_stat.st_atime_ns, source_stat.st_mtime_ns))
            target_size = target.stat().st_size
        except OSError as e:
            raise CopyError(
                f"Cannot copy {source.relative_path}: {e.strerror or e}",
                path=source.path,
            ) from e

        source_size = source_stat.st_size
        if source_size != target_size:
            target.unlink()
            raise CopyError(
                f"Size mismatch copying {source.relative_path} "
                f"(expected {source_size} bytes, got {target_size} bytes)",
                path=target,
            )

        return target

    def make_directory(self, source: Entry) -> Path:
        """Create the destination directory for a source directory.

        Raises:
            CopyError: If the directory could not be created
        """
        target = self.destination_path(source.relative_path)
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CopyError(
                f"Cannot create directory {source.relative_path}: {e.strerror or e}",
                path=target,
            ) from e
        return target

    def remove(self, destination: Entry) -> None:
        """Remove whatever is left at a destination path after archiving."""
        target = destination.path
        if target.is_symlink() or target.is_file():
            target.unlink()
        elif target.is_dir():
            shutil.rmtree(target)

    def align_mtime(self, source: Entry, destination: Entry) -> None:
        """Set the destination modification time to the source's.

        Raises:
            CopyError: If the timestamp could not be changed
        """
        try:
            source_stat = os.stat(source.path)
            os.utime(
                destination.path, ns=(source_stat.st_atime_ns, source_stat.st_mtime_ns)
            )
        except OSError as e:
            raise CopyError(
                f"Cannot update modification time of {destination.relative_path}: "
                f"{e.strerror or e}",
                path=destination.path,
            ) from e
