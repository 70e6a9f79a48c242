"""Exceptions raised by KitchenSync."""

from pathlib import Path
from typing import Optional


class KitchenSyncError(Exception):
    """Base exception for all KitchenSync errors."""

    def __init__(self, message: str, path: Optional[Path] = None):
        """Initialize the error.

        Args:
            message: Human-readable description
            path: Filesystem path the error refers to, if any
        """
        super().__init__(message)
        self.message = message
        self.path = path


class ConfigError(KitchenSyncError):
    """Invalid flags or paths. Fatal: the engine never starts."""


class WalkError(KitchenSyncError):
    """A directory could not be listed; its subtree is treated as empty."""


class ArchiveError(KitchenSyncError):
    """Destination content could not be moved into the archive session."""


class CopyError(KitchenSyncError):
    """Source could not be read or destination could not be written."""
