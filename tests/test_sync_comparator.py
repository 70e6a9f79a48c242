"""Tests for the FileComparator class."""

from pathlib import Path

from kitchensync.sync.comparator import (
    EntryPair,
    FileComparator,
    SyncAction,
    join_entries,
)
from kitchensync.sync.modes import CompareMode
from kitchensync.sync.scanner import Entry, EntryKind


def _file(
    relative_path: str = "test.txt", size: int = 100, mtime: float = 1234567890.0
) -> Entry:
    """Create a file Entry for testing."""
    return Entry(
        relative_path=relative_path,
        kind=EntryKind.FILE,
        size=size,
        mtime=mtime,
        path=Path(f"/tree/{relative_path}"),
    )


def _dir(relative_path: str = "folder", mtime: float = 1234567890.0) -> Entry:
    """Create a directory Entry for testing."""
    return Entry(
        relative_path=relative_path,
        kind=EntryKind.DIRECTORY,
        size=0,
        mtime=mtime,
        path=Path(f"/tree/{relative_path}"),
    )


class TestDefaultMode:
    """Tests for modification-time based comparison."""

    def test_source_only_file_is_copied(self):
        comparator = FileComparator()
        decision = comparator.decide(EntryPair("test.txt", source=_file()))

        assert decision.action == SyncAction.COPY
        assert decision.reason == "New file"

    def test_source_only_directory_is_copied(self):
        comparator = FileComparator()
        decision = comparator.decide(EntryPair("folder", source=_dir()))

        assert decision.action == SyncAction.COPY
        assert decision.is_dir

    def test_destination_only_is_removed(self):
        comparator = FileComparator()
        decision = comparator.decide(EntryPair("test.txt", destination=_file()))

        assert decision.action == SyncAction.ARCHIVE_AND_REMOVE
        assert decision.reason == "File not in source"

    def test_destination_only_directory_is_removed(self):
        comparator = FileComparator()
        decision = comparator.decide(EntryPair("folder", destination=_dir()))

        assert decision.action == SyncAction.ARCHIVE_AND_REMOVE
        assert decision.is_dir

    def test_same_mtime_skips(self):
        comparator = FileComparator()
        pair = EntryPair("test.txt", source=_file(), destination=_file(size=5))

        assert comparator.decide(pair).action == SyncAction.SKIP

    def test_subsecond_mtime_difference_skips(self):
        comparator = FileComparator()
        pair = EntryPair(
            "test.txt",
            source=_file(mtime=1234567890.2),
            destination=_file(mtime=1234567890.7),
        )

        assert comparator.decide(pair).action == SyncAction.SKIP

    def test_different_mtime_replaces(self):
        comparator = FileComparator()
        pair = EntryPair(
            "test.txt",
            source=_file(mtime=1234567890.0),
            destination=_file(mtime=1234567000.0),
        )

        decision = comparator.decide(pair)

        assert decision.action == SyncAction.ARCHIVE_AND_REPLACE
        assert decision.reason == "Modification times differ"

    def test_directories_are_structural(self):
        comparator = FileComparator()
        pair = EntryPair(
            "folder", source=_dir(mtime=1.0), destination=_dir(mtime=2_000_000_000.0)
        )

        assert comparator.decide(pair).action == SyncAction.SKIP

    def test_kind_mismatch_replaces(self):
        comparator = FileComparator()

        file_over_dir = comparator.decide(
            EntryPair("x", source=_file("x"), destination=_dir("x"))
        )
        dir_over_file = comparator.decide(
            EntryPair("x", source=_dir("x"), destination=_file("x"))
        )

        assert file_over_dir.action == SyncAction.ARCHIVE_AND_REPLACE
        assert not file_over_dir.is_dir
        assert dir_over_file.action == SyncAction.ARCHIVE_AND_REPLACE
        assert dir_over_file.is_dir


class TestGreaterSizeMode:
    """Tests for greater-size-only comparison."""

    def test_larger_source_replaces(self):
        comparator = FileComparator(CompareMode.GREATER_SIZE)
        pair = EntryPair(
            "test.txt", source=_file(size=200), destination=_file(size=100)
        )

        assert comparator.decide(pair).action == SyncAction.ARCHIVE_AND_REPLACE

    def test_equal_or_smaller_source_skips_even_with_new_mtime(self):
        comparator = FileComparator(CompareMode.GREATER_SIZE)
        equal = EntryPair(
            "test.txt",
            source=_file(size=100, mtime=2_000_000_000.0),
            destination=_file(size=100),
        )
        smaller = EntryPair(
            "test.txt",
            source=_file(size=50, mtime=2_000_000_000.0),
            destination=_file(size=100),
        )

        assert comparator.decide(equal).action == SyncAction.SKIP
        assert comparator.decide(smaller).action == SyncAction.SKIP

    def test_destination_only_is_kept(self):
        comparator = FileComparator(CompareMode.GREATER_SIZE)
        decision = comparator.decide(EntryPair("test.txt", destination=_file()))

        assert decision.action == SyncAction.SKIP
        assert "kept" in decision.reason


class TestSizeModeAndForceCopy:
    """Tests for size comparison and forced copies."""

    def test_size_mode_ignores_mtime(self):
        comparator = FileComparator(CompareMode.SIZE)
        same_size = EntryPair(
            "test.txt",
            source=_file(mtime=1.0),
            destination=_file(mtime=2_000_000_000.0),
        )
        other_size = EntryPair(
            "test.txt", source=_file(size=1), destination=_file(size=2)
        )

        assert comparator.decide(same_size).action == SyncAction.SKIP
        assert comparator.decide(other_size).action == SyncAction.ARCHIVE_AND_REPLACE

    def test_force_copy_replaces_identical_files(self):
        comparator = FileComparator(force_copy=True)
        pair = EntryPair("test.txt", source=_file(), destination=_file())

        decision = comparator.decide(pair)

        assert decision.action == SyncAction.ARCHIVE_AND_REPLACE
        assert decision.reason == "Forced copy"


class TestJoinEntries:
    """Tests for joining two trees by relative path."""

    def test_parents_precede_children(self):
        source = {
            "a": _dir("a"),
            "a/x.txt": _file("a/x.txt"),
            "a-b.txt": _file("a-b.txt"),
        }
        destination = {"a": _dir("a"), "z.txt": _file("z.txt")}

        pairs = join_entries(source, destination)

        assert [p.relative_path for p in pairs] == ["a", "a/x.txt", "a-b.txt", "z.txt"]
        assert pairs[0].source is not None and pairs[0].destination is not None
        assert pairs[1].destination is None
        assert pairs[3].source is None

    def test_compare_keeps_order(self):
        pairs = join_entries({"b": _file("b"), "a": _file("a")}, {})

        decisions = FileComparator().compare(pairs)

        assert [d.relative_path for d in decisions] == ["a", "b"]
