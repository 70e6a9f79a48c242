"""Tests for exclusion rules."""

import pytest

from kitchensync.sync.ignore import PathFilter, expand_braces, has_timestamp_like_name


class TestTimestampLikeNames:
    """Tests for the timestamp-name heuristic."""

    @pytest.mark.parametrize(
        "filename",
        [
            "backup_20240115_1430.zip",
            "log-2023.12.25-09.txt",
            "snapshot_202401151823_data.db",
            "1985-07-04_00_archive.tar",
            "report_2024-01-15T14.pdf",
            "export_20240115.csv",
        ],
    )
    def test_detects_dated_names(self, filename):
        """Names with an embedded date token are timestamp-like."""
        assert has_timestamp_like_name(filename)

    @pytest.mark.parametrize(
        "filename",
        [
            "normal_file.txt",
            "test123.log",
            "data.db",
            "file_2024.txt",
            "file_20241301.txt",
            "file_20240132.txt",
            "file_2024010124.txt",
            "file_1969010100.txt",
            "file_2051010100.txt",
            "",
            None,
        ],
    )
    def test_ignores_other_names(self, filename):
        """Names without a valid date token are not timestamp-like."""
        assert not has_timestamp_like_name(filename)


class TestExpandBraces:
    """Tests for brace expansion in glob patterns."""

    def test_no_braces(self):
        assert expand_braces("*.txt") == ("*.txt",)

    def test_alternatives(self):
        assert expand_braces("*.{jpg,png}") == ("*.jpg", "*.png")

    def test_multiple_groups(self):
        assert expand_braces("{a,b}.{x,y}") == ("a.x", "a.y", "b.x", "b.y")


class TestPathFilter:
    """Tests for PathFilter.excluded."""

    def test_matches_file_name_not_full_path(self):
        """Patterns apply to the final path segment."""
        path_filter = PathFilter(patterns=["*.tmp"])

        assert path_filter.excluded("scratch.tmp")
        assert path_filter.excluded("deep/nested/scratch.tmp")
        assert not path_filter.excluded("scratch.tmp.keep")
        assert not path_filter.excluded("tmp/keep.txt")

    def test_any_pattern_excludes(self):
        path_filter = PathFilter(patterns=["*.log", "build"])

        assert path_filter.excluded("app.log")
        assert path_filter.excluded("src/build")
        assert not path_filter.excluded("src/main.py")

    def test_dotfile_pattern(self):
        """A pattern of .* excludes every dotfile."""
        path_filter = PathFilter(patterns=[".*"])

        assert path_filter.excluded(".git")
        assert path_filter.excluded("src/.env")
        assert not path_filter.excluded("src/env")

    def test_hidden_attribute_with_dotfile_pattern(self):
        """Hidden nodes are excluded when .* is registered."""
        assert PathFilter(patterns=[".*"]).excluded("Thumbs.db", is_hidden=True)
        assert not PathFilter().excluded("Thumbs.db", is_hidden=True)

    def test_pattern_with_slash_matches_relative_path(self):
        path_filter = PathFilter(patterns=["build/*.o"])

        assert path_filter.excluded("build/main.o")
        assert not path_filter.excluded("src/main.o")

    def test_brace_pattern(self):
        path_filter = PathFilter(patterns=["*.{jpg,png}"])

        assert path_filter.excluded("photo.jpg")
        assert path_filter.excluded("photo.png")
        assert not path_filter.excluded("photo.gif")

    def test_timestamp_names_excluded_by_default(self):
        assert PathFilter().excluded("backup_20240115_1430.zip")

    def test_include_timestamps(self):
        path_filter = PathFilter(include_timestamps=True)

        assert not path_filter.excluded("backup_20240115_1430.zip")

    def test_archive_directory_always_excluded(self):
        path_filter = PathFilter(include_timestamps=True)

        assert path_filter.excluded(".kitchensync")
        assert path_filter.excluded("sub/.kitchensync")

    def test_no_patterns(self):
        assert not PathFilter().excluded("notes/readme.md")
