"""KitchenSync - one-way directory mirroring that archives instead of deleting."""

from .exceptions import (
    ArchiveError,
    ConfigError,
    CopyError,
    KitchenSyncError,
    WalkError,
)
from .sync import RunSummary, SyncConfig, SyncEngine

__version__ = "0.1.0"

__all__ = [
    "SyncEngine",
    "SyncConfig",
    "RunSummary",
    "KitchenSyncError",
    "ConfigError",
    "WalkError",
    "ArchiveError",
    "CopyError",
    "__version__",
]
