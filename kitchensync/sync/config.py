"""Configuration for a sync run."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from ..exceptions import ConfigError
from .modes import CompareMode

VERBOSITY_LEVELS = (0, 1, 2)


@dataclass
class SyncConfig:
    """Everything the sync engine needs to know for one run.

    Examples:
        >>> config = SyncConfig(
        ...     source=Path("/home/user/Photos"),
        ...     destination=Path("/mnt/backup/Photos"),
        ...     preview=False,
        ...     exclude_patterns=["*.tmp"],
        ... )
        >>> config.compare_mode
        <CompareMode.MODTIME: 'modtime'>
    """

    source: Path
    """Source directory (authoritative)"""

    destination: Path
    """Destination directory (made to match the source)"""

    preview: bool = True
    """Only report what would be done"""

    verbosity: int = 1
    """0 = silent, 1 = actions and summary, 2 = also skips and filtered paths"""

    exclude_patterns: list[str] = field(default_factory=list)
    """Glob patterns of names to leave out"""

    include_timestamps: bool = False
    """Sync timestamp-like file names instead of filtering them"""

    greater_size_only: bool = False
    """Replace files only when the source is larger"""

    use_modtime: bool = True
    """Compare modification times (otherwise sizes)"""

    force_copy: bool = False
    """Replace every file present on both sides"""

    max_workers: int = 1
    """Threads used for file copies"""

    def __post_init__(self) -> None:
        """Normalize and validate values."""
        self.source = Path(self.source)
        self.destination = Path(self.destination)
        self.exclude_patterns = [p for p in (self.exclude_patterns or []) if p]

        if isinstance(self.verbosity, bool) or self.verbosity not in VERBOSITY_LEVELS:
            raise ConfigError(
                f"Verbosity must be 0, 1, or 2 (got {self.verbosity!r})"
            )
        if self.max_workers < 1:
            raise ConfigError(
                f"Number of workers must be at least 1 (got {self.max_workers})"
            )

    @property
    def compare_mode(self) -> CompareMode:
        """Comparison mode derived from the flags."""
        if self.greater_size_only:
            return CompareMode.GREATER_SIZE
        if not self.use_modtime:
            return CompareMode.SIZE
        return CompareMode.MODTIME

    def validate_paths(self) -> None:
        """Check filesystem preconditions before a run.

        Raises:
            ConfigError: If the source is not a directory, the destination
                exists but is not a directory, the destination's parent is
                missing, or one tree contains the other
        """
        if not self.source.exists():
            raise ConfigError(f"Source directory does not exist: {self.source}")
        if not self.source.is_dir():
            raise ConfigError(f"Source is not a directory: {self.source}")

        if self.destination.exists() and not self.destination.is_dir():
            raise ConfigError(f"Destination is not a directory: {self.destination}")

        destination = self.destination.resolve()
        if not destination.parent.exists():
            raise ConfigError(
                f"Destination parent directory does not exist: {destination.parent}"
            )

        source = self.source.resolve()
        if source == destination:
            raise ConfigError("Source and destination are the same directory")
        if _is_relative_to(destination, source) or _is_relative_to(source, destination):
            raise ConfigError(
                "Source and destination must not be nested inside each other"
            )


def _is_relative_to(path: Path, other: Union[Path, str]) -> bool:
    try:
        path.relative_to(other)
        return True
    except ValueError:
        return False
