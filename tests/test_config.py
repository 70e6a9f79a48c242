"""Tests for SyncConfig and compare modes."""

import tempfile
from pathlib import Path

import pytest

from kitchensync.exceptions import ConfigError
from kitchensync.sync import CompareMode, SyncConfig


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


class TestSyncConfig:
    """Tests for SyncConfig."""

    def test_defaults(self, temp_dir):
        config = SyncConfig(source=temp_dir / "a", destination=temp_dir / "b")

        assert config.preview is True
        assert config.verbosity == 1
        assert config.exclude_patterns == []
        assert config.max_workers == 1
        assert config.compare_mode == CompareMode.MODTIME

    def test_paths_normalized(self, temp_dir):
        config = SyncConfig(source=str(temp_dir / "a"), destination=str(temp_dir / "b"))
        assert isinstance(config.source, Path)
        assert isinstance(config.destination, Path)

    @pytest.mark.parametrize(
        "kwargs,expected",
        [
            ({}, CompareMode.MODTIME),
            ({"use_modtime": False}, CompareMode.SIZE),
            ({"greater_size_only": True}, CompareMode.GREATER_SIZE),
            (
                {"greater_size_only": True, "use_modtime": False},
                CompareMode.GREATER_SIZE,
            ),
        ],
    )
    def test_compare_mode(self, temp_dir, kwargs, expected):
        config = SyncConfig(source=temp_dir, destination=temp_dir / "b", **kwargs)
        assert config.compare_mode == expected

    def test_invalid_verbosity(self, temp_dir):
        with pytest.raises(ConfigError, match="Verbosity"):
            SyncConfig(source=temp_dir, destination=temp_dir / "b", verbosity=3)

    def test_invalid_workers(self, temp_dir):
        with pytest.raises(ConfigError, match="workers"):
            SyncConfig(source=temp_dir, destination=temp_dir / "b", max_workers=0)


class TestValidatePaths:
    """Tests for filesystem preconditions."""

    def test_valid(self, temp_dir):
        (temp_dir / "src").mkdir()
        config = SyncConfig(source=temp_dir / "src", destination=temp_dir / "dst")
        config.validate_paths()

    def test_destination_is_file(self, temp_dir):
        (temp_dir / "src").mkdir()
        (temp_dir / "dst").write_text("x")
        config = SyncConfig(source=temp_dir / "src", destination=temp_dir / "dst")

        with pytest.raises(ConfigError, match="Destination is not a directory"):
            config.validate_paths()

    def test_destination_parent_missing(self, temp_dir):
        (temp_dir / "src").mkdir()
        config = SyncConfig(
            source=temp_dir / "src", destination=temp_dir / "missing" / "dst"
        )

        with pytest.raises(ConfigError, match="parent"):
            config.validate_paths()

    def test_same_directory(self, temp_dir):
        config = SyncConfig(source=temp_dir, destination=temp_dir)
        with pytest.raises(ConfigError, match="same directory"):
            config.validate_paths()

    def test_nested(self, temp_dir):
        (temp_dir / "src").mkdir()
        config = SyncConfig(
            source=temp_dir / "src", destination=temp_dir / "src" / "dst"
        )

        with pytest.raises(ConfigError, match="nested"):
            config.validate_paths()


class TestCompareMode:
    """Tests for CompareMode."""

    def test_properties(self):
        assert not CompareMode.GREATER_SIZE.removes_orphans
        assert CompareMode.SIZE.removes_orphans
        assert not CompareMode.MODTIME.aligns_modtime
        assert CompareMode.SIZE.aligns_modtime
