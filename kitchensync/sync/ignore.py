"""Exclusion rules applied while walking source and destination trees.

Three kinds of rules decide whether a node takes part in a sync:

* user supplied shell-style globs (``-x``), matched against the file name,
  or against the whole relative path when the pattern contains ``/``;
* the timestamp-name heuristic, which hides dated backup artifacts such as
  ``backup_20240115_1430.zip`` unless timestamps are explicitly included;
* the archive directory ``.kitchensync``, which is never synchronized.

Examples:
    >>> path_filter = PathFilter(patterns=["*.tmp", ".*"])
    >>> path_filter.excluded("build/output.tmp")
    True
    >>> path_filter.excluded("notes/backup_20240115_1430.zip")
    True
    >>> PathFilter(include_timestamps=True).excluded("backup_20240115_1430.zip")
    False
"""

import fnmatch
import re
from functools import lru_cache
from typing import Optional

ARCHIVE_DIR_NAME = ".kitchensync"

# YYYY[sep]MM[sep]DD with a consistent optional separator, optionally
# followed by an hour (and minutes). The date must not sit inside a longer
# run of digits.
_TIMESTAMP_RE = re.compile(
    r"(?<!\d)"
    r"(?:19[7-9]\d|20[0-4]\d|2050)"
    r"(?P<sep>[-_.]?)"
    r"(?:0[1-9]|1[0-2])"
    r"(?P=sep)"
    r"(?:0[1-9]|[12]\d|3[01])"
    r"(?:[-_.T]?(?:[01]\d|2[0-3])(?:[-_.:]?[0-5]\d)?)?"
    r"(?!\d)"
)

_BRACE_RE = re.compile(r"\{([^{}]*)\}")


def has_timestamp_like_name(filename: Optional[str]) -> bool:
    """Check whether a file name looks like a dated backup artifact.

    Args:
        filename: File name (final path segment)

    Returns:
        True if the name embeds a date token such as ``20240115``
    """
    if not filename:
        return False
    return _TIMESTAMP_RE.search(filename) is not None


@lru_cache(maxsize=256)
def expand_braces(pattern: str) -> tuple[str, ...]:
    """Expand ``{a,b}`` alternatives into separate glob patterns.

    Args:
        pattern: Glob pattern, e.g. ``*.{jpg,png}``

    Returns:
        Tuple of patterns without braces, e.g. ``("*.jpg", "*.png")``
    """
    match = _BRACE_RE.search(pattern)
    if match is None:
        return (pattern,)

    expanded: list[str] = []
    head, tail = pattern[: match.start()], pattern[match.end() :]
    for alternative in match.group(1).split(","):
        expanded.extend(expand_braces(head + alternative + tail))
    return tuple(expanded)


class PathFilter:
    """Decides whether a relative path is excluded from a sync."""

    def __init__(
        self,
        patterns: Optional[list[str]] = None,
        include_timestamps: bool = False,
    ):
        """Initialize path filter.

        Args:
            patterns: Glob patterns to exclude (e.g. ["*.tmp", ".*"])
            include_timestamps: Keep timestamp-like file names instead of
                excluding them
        """
        self.patterns = list(patterns or [])
        self.include_timestamps = include_timestamps
        self._name_patterns: list[str] = []
        self._path_patterns: list[str] = []
        for pattern in self.patterns:
            for expanded in expand_braces(pattern.strip()):
                if not expanded:
                    continue
                if "/" in expanded:
                    self._path_patterns.append(expanded.strip("/"))
                else:
                    self._name_patterns.append(expanded)
        self._excludes_hidden = ".*" in self._name_patterns

    def matches_pattern(self, relative_path: str) -> bool:
        """Check a relative path against the user supplied patterns only."""
        name = relative_path.rsplit("/", 1)[-1]
        for pattern in self._name_patterns:
            if fnmatch.fnmatchcase(name, pattern):
                return True
        for pattern in self._path_patterns:
            if fnmatch.fnmatchcase(relative_path, pattern):
                return True
        return False

    def excluded(self, relative_path: str, is_hidden: bool = False) -> bool:
        """Check if a path is excluded from consideration.

        Args:
            relative_path: Path relative to the tree root, with forward slashes
            is_hidden: Whether the node carries the platform hidden attribute

        Returns:
            True if the node must not be walked, copied, archived or removed
        """
        name = relative_path.rsplit("/", 1)[-1]

        if name == ARCHIVE_DIR_NAME:
            return True

        if is_hidden and self._excludes_hidden:
            return True

        if not self.include_timestamps and has_timestamp_like_name(name):
            return True

        return self.matches_pattern(relative_path)
