"""Sync engine for KitchenSync - one-way mirroring with archiving."""

from .archive import ArchiveSession, Archiver
from .comparator import EntryPair, FileComparator, SyncAction, SyncDecision
from .config import SyncConfig
from .engine import SyncEngine
from .ignore import ARCHIVE_DIR_NAME, PathFilter, has_timestamp_like_name
from .modes import CompareMode
from .operations import SyncOperations
from .reporter import SyncReporter
from .scanner import DirectoryScanner, Entry, EntryKind
from .summary import EntryError, RunSummary

__all__ = [
    "SyncEngine",
    "SyncConfig",
    "CompareMode",
    "SyncOperations",
    "SyncReporter",
    "DirectoryScanner",
    "Entry",
    "EntryKind",
    "EntryPair",
    "FileComparator",
    "SyncAction",
    "SyncDecision",
    "ArchiveSession",
    "Archiver",
    "PathFilter",
    "ARCHIVE_DIR_NAME",
    "has_timestamp_like_name",
    "RunSummary",
    "EntryError",
]
