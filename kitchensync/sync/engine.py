"""Core sync engine for mirroring a source tree onto a destination tree."""

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from ..exceptions import ArchiveError, CopyError, KitchenSyncError
from .archive import ArchiveSession, Archiver
from .comparator import (
    EntryPair,
    FileComparator,
    SyncAction,
    SyncDecision,
    join_entries,
    same_mtime,
)
from .config import SyncConfig
from .ignore import PathFilter
from .operations import SyncOperations
from .reporter import SyncReporter
from .scanner import DirectoryScanner, Entry
from .summary import RunSummary

logger = logging.getLogger(__name__)


def _under(relative_path: str, prefixes: set[str]) -> bool:
    """Check whether a path lies strictly below one of the prefixes."""
    parts = relative_path.split("/")
    return any("/".join(parts[:i]) in prefixes for i in range(1, len(parts)))


def _within(relative_path: str, prefixes: set[str]) -> bool:
    """Check whether a path is one of the prefixes or lies below one."""
    return (
        "." in prefixes
        or relative_path in prefixes
        or _under(relative_path, prefixes)
    )


class SyncEngine:
    """Core sync engine that makes a destination mirror a source.

    One call to :meth:`run` is one pass: both trees are walked, entries are
    joined by relative path and every pair is handled in path order.
    Destination content is moved into the run's archive session before it
    is overwritten or removed. In preview mode nothing is written at all.
    """

    def __init__(self, config: SyncConfig, reporter: Optional[SyncReporter] = None):
        """Initialize sync engine.

        Args:
            config: Run configuration
            reporter: Reporter for progress lines and summary
        """
        self.config = config
        self.reporter = reporter or SyncReporter(config.verbosity)
        self.path_filter = PathFilter(
            patterns=config.exclude_patterns,
            include_timestamps=config.include_timestamps,
        )
        self.comparator = FileComparator(config.compare_mode, config.force_copy)
        self.archiver = Archiver()
        self.operations = SyncOperations(config.destination)

    def run(self) -> RunSummary:
        """Run one sync pass.

        Returns:
            RunSummary with counters and per-entry errors

        Raises:
            ConfigError: If the source or destination paths are unusable

        Examples:
            >>> config = SyncConfig(Path("/src"), Path("/dst"), preview=True)
            >>> engine = SyncEngine(config)
            >>> summary = engine.run()
            >>> print(f"Would copy {summary.copied} files")
        """
        config = self.config
        config.validate_paths()

        start_time = time.time()
        summary = RunSummary(preview=config.preview)
        session = ArchiveSession(config.destination)
        logger.debug(
            "Starting sync %s -> %s (mode=%s, preview=%s)",
            config.source,
            config.destination,
            config.compare_mode.value,
            config.preview,
        )

        if not config.preview and not config.destination.exists():
            try:
                config.destination.mkdir()
            except OSError as e:
                message = str(e.strerror or e)
                summary.record_error(".", "creating destination", message)
                self.reporter.entry_error(".", "creating destination", message)
                return summary

        source_entries, source_unreadable = self._scan(
            config.source, "source", summary
        )
        destination_entries, destination_unreadable = self._scan(
            config.destination, "destination", summary
        )

        pairs = join_entries(source_entries, destination_entries)
        logger.debug("Comparing %d path(s)", len(pairs))

        self._execute(
            pairs,
            session,
            summary,
            protected=source_unreadable,
            untouchable=destination_unreadable,
        )

        if session.created:
            self._discard_unused_session(session)
        if session.created:
            summary.archive_session = str(session.root)

        logger.debug(
            "Sync finished in %.2fs: %s", time.time() - start_time, summary.to_dict()
        )
        self.reporter.summary(summary)
        return summary

    def _scan(
        self, root: Path, label: str, summary: RunSummary
    ) -> tuple[dict[str, Entry], set[str]]:
        """Walk one tree and record what the walk left out.

        Returns:
            Entries by relative path, and relative paths of unreadable
            directories
        """
        scanner = DirectoryScanner(self.path_filter)
        with self.reporter.scanning(f"Scanning {label} directory..."):
            entries = scanner.scan(root)
        logger.debug("Found %d %s entries", len(entries), label)

        summary.filtered += len(scanner.filtered)
        summary.links_skipped += len(scanner.links_skipped)
        for relative_path in scanner.filtered:
            self.reporter.filtered(relative_path)
        for relative_path in scanner.links_skipped:
            self.reporter.walk_warning(f"skipped symlink {relative_path}")

        unreadable: set[str] = set()
        for error in scanner.errors:
            relative_path = "."
            if error.path is not None:
                relative_path = Path(error.path).relative_to(root).as_posix()
            unreadable.add(relative_path)
            operation = f"reading {label} directory"
            summary.record_error(relative_path, operation, error.message)
            self.reporter.entry_error(relative_path, operation, error.message)

        return entries, unreadable

    def _execute(
        self,
        pairs: list[EntryPair],
        session: ArchiveSession,
        summary: RunSummary,
        protected: set[str],
        untouchable: set[str],
    ) -> None:
        """Decide and carry out the action for every pair in path order.

        Args:
            pairs: Joined entries, parents before children
            session: Archive session for this run
            summary: Summary to update
            protected: Source paths that could not be read; the destination
                at and below them is left alone
            untouchable: Destination paths that could not be read; nothing
                at or below them is written, archived or removed
        """
        # Destination subtrees already archived (or left alone) as a whole
        pruned: set[str] = set()
        # Source directories whose creation failed
        blocked: set[str] = set()

        executor: Optional[ThreadPoolExecutor] = None
        futures: list[Future] = []
        if self.config.max_workers > 1 and not self.config.preview:
            executor = ThreadPoolExecutor(max_workers=self.config.max_workers)
            logger.debug(
                "Executing file actions with %d workers", self.config.max_workers
            )

        try:
            for pair in pairs:
                path = pair.relative_path
                if _under(path, pruned) or _under(path, blocked):
                    continue
                if pair.source is None and _within(path, protected):
                    continue
                if _within(path, untouchable):
                    continue

                decision = self.comparator.decide(pair)
                destination = pair.destination

                if (
                    destination is not None
                    and destination.is_dir
                    and decision.action.archives
                ):
                    pruned.add(path)

                if self.config.preview:
                    summary.record(decision)
                    self.reporter.decision(decision)
                    continue

                if decision.action == SyncAction.SKIP:
                    self._skip(decision, summary)
                    continue

                structural = decision.is_dir or pair.kind_mismatch
                if executor is not None and not structural:
                    futures.append(
                        executor.submit(self._apply, decision, session, summary)
                    )
                    continue

                if not self._apply(decision, session, summary) and structural:
                    if pair.source is not None and pair.source.is_dir:
                        blocked.add(path)
        finally:
            if executor is not None:
                for future in futures:
                    future.result()
                executor.shutdown(wait=True)

    def _skip(self, decision: SyncDecision, summary: RunSummary) -> None:
        """Count a skipped entry, aligning its timestamp where the mode asks."""
        source, destination = decision.source, decision.destination
        summary.record(decision)
        self.reporter.decision(decision)

        if (
            self.comparator.compare_mode.aligns_modtime
            and source is not None
            and destination is not None
            and not source.is_dir
            and not destination.is_dir
            and source.size == destination.size
            and not same_mtime(source, destination)
        ):
            try:
                self.operations.align_mtime(source, destination)
                self.reporter.mtime_aligned(decision.relative_path)
            except CopyError as e:
                self._fail(decision, "updating modification time", e, summary)

    def _apply(
        self, decision: SyncDecision, session: ArchiveSession, summary: RunSummary
    ) -> bool:
        """Carry out one mutating decision.

        Returns:
            True if the action completed, False if it failed and was recorded
        """
        action = decision.action
        source, destination = decision.source, decision.destination

        try:
            if action == SyncAction.COPY and source is not None:
                self._copy(source)
            elif (
                action == SyncAction.ARCHIVE_AND_REPLACE
                and source is not None
                and destination is not None
            ):
                self._archive_and_replace(source, destination, session)
            elif action == SyncAction.ARCHIVE_AND_REMOVE and destination is not None:
                self._archive_and_remove(destination, session)
            else:
                raise ValueError(f"Unhandled sync action: {action}")
        except ArchiveError as e:
            self._fail(decision, "archiving", e, summary)
            return False
        except CopyError as e:
            operation = "creating directory" if decision.is_dir else "copying"
            self._fail(decision, operation, e, summary)
            return False
        except OSError as e:
            self._fail(decision, "removing", e, summary)
            return False

        summary.record(decision)
        self.reporter.decision(decision)
        return True

    def _copy(self, source: Entry) -> None:
        if source.is_dir:
            self.operations.make_directory(source)
        else:
            self.operations.copy_file(source)

    def _archive_and_replace(
        self, source: Entry, destination: Entry, session: ArchiveSession
    ) -> None:
        self.archiver.archive(destination, session)
        try:
            self._copy(source)
        except CopyError:
            logger.debug("Rolling back %s from archive", destination.relative_path)
            try:
                self.archiver.restore(destination, session)
            except ArchiveError as restore_error:
                logger.warning(restore_error.message)
            raise

    def _archive_and_remove(self, destination: Entry, session: ArchiveSession) -> None:
        self.archiver.archive(destination, session)
        self.operations.remove(destination)

    def _discard_unused_session(self, session: ArchiveSession) -> None:
        """Remove a session left empty after every archived entry was restored."""
        try:
            if session.discard_if_empty():
                logger.debug("Removed empty archive session %s", session.name)
        except OSError as e:
            logger.warning(
                "Cannot remove empty archive session %s: %s", session.root, e
            )

    def _fail(
        self,
        decision: SyncDecision,
        operation: str,
        error: Exception,
        summary: RunSummary,
    ) -> None:
        message = error.message if isinstance(error, KitchenSyncError) else str(error)
        logger.debug("Failed %s %s: %s", operation, decision.relative_path, message)
        summary.record_error(decision.relative_path, operation, message)
        self.reporter.entry_error(decision.relative_path, operation, message)
