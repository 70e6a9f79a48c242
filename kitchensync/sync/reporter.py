"""Progress lines and end-of-run summary for sync runs."""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Optional

from rich.progress import Progress, SpinnerColumn, TextColumn

from ..output import OutputFormatter
from .comparator import SyncAction, SyncDecision
from .config import SyncConfig
from .summary import RunSummary

LINE_TIMESTAMP_FORMAT = "%Y-%m-%d_%H:%M:%S"


class SyncReporter:
    """Renders sync events according to the verbosity level.

    * 0: nothing but fatal errors
    * 1: one line per change, entry errors, configuration and summary
    * 2: additionally skipped and filtered paths and walk warnings
    """

    def __init__(self, verbosity: int = 1, output: Optional[OutputFormatter] = None):
        """Initialize sync reporter.

        Args:
            verbosity: Verbosity level (0, 1 or 2)
            output: Output formatter (a quiet one is created for verbosity 0)
        """
        self.verbosity = verbosity
        self.output = output or OutputFormatter(quiet=verbosity == 0)

    def _line(self, message: str, style: str = "") -> None:
        timestamp = datetime.now().strftime(LINE_TIMESTAMP_FORMAT)
        self.output.print(f"[{timestamp}] {message}", style=style)

    @contextmanager
    def scanning(self, description: str) -> Iterator[None]:
        """Show a transient spinner while a tree is walked."""
        console = self.output.console
        if self.verbosity == 0 or not console.is_terminal:
            yield
            return

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(description, total=None)
            yield

    def configuration(self, config: SyncConfig) -> None:
        """Print the effective configuration."""
        if self.verbosity < 1:
            return

        def enabled(flag: bool) -> str:
            return "enabled" if flag else "disabled"

        patterns = ", ".join(f'"{p}"' for p in config.exclude_patterns)
        self.output.info("KitchenSync Configuration:")
        self.output.info(f"  Source:           {config.source}")
        self.output.info(f"  Destination:      {config.destination}")
        self.output.info(f"  Preview:          {enabled(config.preview)}")
        skip_timestamps = enabled(not config.include_timestamps)
        self.output.info(f"  Skip timestamps:  {skip_timestamps}")
        self.output.info(f"  Use modtime:      {enabled(config.use_modtime)}")
        self.output.info(f"  Greater size:     {enabled(config.greater_size_only)}")
        self.output.info(f"  Force copy:       {enabled(config.force_copy)}")
        self.output.info(f"  Excludes:         [{patterns}]")
        self.output.info(f"  Verbosity:        {config.verbosity}")
        self.output.print("")
        if config.preview:
            self.output.warning(
                "PREVIEW MODE: No changes will be made. Use -p=Y to perform the sync."
            )
            self.output.print("")

    def decision(self, decision: SyncDecision) -> None:
        """Report the action taken (or planned) for one entry."""
        path = decision.relative_path
        action = decision.action

        if action == SyncAction.SKIP:
            if self.verbosity >= 2:
                self._line(f"skipping {path} ({decision.reason})", style="dim")
            return

        if self.verbosity < 1:
            return

        if action.archives:
            self._line(f"archiving {path}")
        if action == SyncAction.ARCHIVE_AND_REMOVE:
            self._line(f"removing {path}")
        elif decision.is_dir:
            self._line(f"creating directory {path}")
        else:
            self._line(f"copying {path}")

    def mtime_aligned(self, relative_path: str) -> None:
        """Report a destination modification time set to the source's."""
        if self.verbosity >= 2:
            self._line(f"updating modification time {relative_path}", style="dim")

    def filtered(self, relative_path: str) -> None:
        """Report a path left out by the exclusion rules."""
        if self.verbosity >= 2:
            self._line(f"filtered {relative_path}", style="dim")

    def walk_warning(self, message: str) -> None:
        """Report a recoverable problem found while walking."""
        if self.verbosity >= 2:
            self._line(f"warning: {message}", style="yellow")

    def entry_error(self, relative_path: str, operation: str, message: str) -> None:
        """Report a failed action."""
        if self.verbosity >= 1:
            self._line(f"error: {operation} '{relative_path}': {message}", style="red")

    def summary(self, summary: RunSummary) -> None:
        """Print the end-of-run tally."""
        if self.verbosity < 1:
            return

        self.output.print("")
        self.output.info("Synchronization summary:")
        self.output.info(f"  Files copied:        {summary.copied}")
        self.output.info(f"  Directories created: {summary.dirs_created}")
        self.output.info(f"  Files archived:      {summary.archived}")
        self.output.info(f"  Files removed:       {summary.removed}")
        self.output.info(f"  Files skipped:       {summary.skipped}")
        self.output.info(f"  Directories skipped: {summary.dirs_skipped}")
        self.output.info(f"  Files filtered:      {summary.filtered}")
        self.output.info(f"  Symlinks skipped:    {summary.links_skipped}")
        self.output.info(f"  Errors:              {len(summary.errors)}")

        if summary.archive_session:
            self.output.info(f"  Archive:             {summary.archive_session}")

        if summary.errors:
            self.output.print("")
            self.output.warning(
                f"Synchronization completed with {len(summary.errors)} error(s):"
            )
            for error in summary.errors:
                self.output.warning(
                    f"  {error.operation} '{error.relative_path}': {error.message}"
                )

        if summary.preview:
            self.output.print("")
            self.output.warning(
                "PREVIEW MODE: No changes were made. "
                "Use -p=Y to perform the sync shown above."
            )
