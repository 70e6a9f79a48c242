"""Comparison modes for deciding whether a file needs to be replaced."""

from enum import Enum


class CompareMode(str, Enum):
    """How a source file is compared against its destination counterpart."""

    MODTIME = "modtime"
    """Replace when modification times differ (default)"""

    SIZE = "size"
    """Replace when sizes differ, ignoring modification times"""

    GREATER_SIZE = "greaterSize"
    """Replace only when the source is strictly larger than the destination"""

    @property
    def removes_orphans(self) -> bool:
        """Whether destination-only entries are archived and removed.

        The greater-size mode is meant for merging several sources into one
        destination, so content found only in the destination is kept.
        """
        return self != CompareMode.GREATER_SIZE

    @property
    def aligns_modtime(self) -> bool:
        """Whether equal-size files get their modification time aligned."""
        return self != CompareMode.MODTIME
