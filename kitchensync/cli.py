"""Command line interface for KitchenSync."""

import logging
from pathlib import Path
from typing import Any, Optional

import click

from . import __version__
from .exceptions import ConfigError
from .output import OutputFormatter
from .sync import SyncConfig, SyncEngine, SyncReporter

logger = logging.getLogger(__name__)

TRUE_VALUES = ("Y", "YES", "TRUE")
FALSE_VALUES = ("N", "NO", "FALSE")


def _strip_equals(value: str) -> str:
    """Drop the ``=`` left over from ``-p=Y`` style short options."""
    return value[1:] if value.startswith("=") else value


class YesNo(click.ParamType):
    """Y/N flag value, written ``-p=Y``, ``-p Y`` or ``--perform=yes``."""

    name = "Y/N"

    def convert(self, value: Any, param: Optional[click.Parameter], ctx: Any) -> bool:
        if isinstance(value, bool):
            return value
        text = _strip_equals(str(value)).strip().upper()
        if text in TRUE_VALUES:
            return True
        if text in FALSE_VALUES:
            return False
        self.fail(f"{value!r} is not a valid value (expected Y or N)", param, ctx)


class BoundedInt(click.ParamType):
    """Integer in a closed range, written ``-v=2`` or ``-v 2``."""

    def __init__(self, minimum: int, maximum: Optional[int] = None):
        self.minimum = minimum
        self.maximum = maximum
        self.name = f"{minimum}..{maximum}" if maximum is not None else "N"

    def convert(self, value: Any, param: Optional[click.Parameter], ctx: Any) -> int:
        if isinstance(value, int):
            number = value
        else:
            try:
                number = int(_strip_equals(str(value)).strip())
            except ValueError:
                self.fail(f"{value!r} is not a valid integer", param, ctx)
        if number < self.minimum:
            self.fail(f"{number} is smaller than {self.minimum}", param, ctx)
        if self.maximum is not None and number > self.maximum:
            self.fail(f"{number} is larger than {self.maximum}", param, ctx)
        return number


YES_NO = YesNo()


def _configure_logging(verbosity: int, debug: bool) -> None:
    """Set up logging for the kitchensync loggers."""
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%H:%M:%S",
        )
        logging.getLogger("kitchensync").setLevel(logging.DEBUG)
    elif verbosity == 0:
        # Silent mode: only errors
        logging.basicConfig(level=logging.ERROR)
        logging.getLogger("kitchensync").setLevel(logging.ERROR)
    else:
        logging.basicConfig(level=logging.WARNING)
        logging.getLogger("kitchensync").setLevel(logging.WARNING)


def _exclude_patterns(ctx: Any, param: Any, value: tuple[str, ...]) -> list[str]:
    return [_strip_equals(pattern) for pattern in value]


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument("source", type=click.Path(path_type=Path))
@click.argument("destination", type=click.Path(path_type=Path))
@click.option(
    "-p",
    "--perform",
    type=YES_NO,
    default="N",
    show_default=True,
    help="Y performs the sync, N only previews what would be done",
)
@click.option(
    "-v",
    "--verbosity",
    type=BoundedInt(0, 2),
    default=1,
    show_default=True,
    help="0 = silent, 1 = changes and summary, 2 = also skipped and filtered paths",
)
@click.option(
    "-x",
    "--exclude",
    multiple=True,
    callback=_exclude_patterns,
    help="Exclude file names matching this glob pattern (can be repeated)",
)
@click.option(
    "-g",
    "--greater-size",
    type=YES_NO,
    default="N",
    show_default=True,
    help="Replace files only when the source is larger; keep destination-only files",
)
@click.option(
    "-t",
    "--include-timestamps",
    type=YES_NO,
    default="N",
    show_default=True,
    help="Include timestamp-like file names such as backup_20240115_1430.zip",
)
@click.option(
    "-m",
    "--use-modtime",
    type=YES_NO,
    default="Y",
    show_default=True,
    help="Compare modification times (N compares sizes only)",
)
@click.option(
    "-c",
    "--force-copy",
    type=YES_NO,
    default="N",
    show_default=True,
    help="Archive and replace every file present on both sides",
)
@click.option(
    "-w",
    "--workers",
    type=BoundedInt(1),
    default=1,
    show_default=True,
    help="Number of parallel workers for file copies",
)
@click.option("--debug", is_flag=True, help="Enable debug logging output")
@click.version_option(version=__version__, prog_name="kitchensync")
@click.pass_context
def main(
    ctx: Any,
    source: Path,
    destination: Path,
    perform: bool,
    verbosity: int,
    exclude: list[str],
    greater_size: bool,
    include_timestamps: bool,
    use_modtime: bool,
    force_copy: bool,
    workers: int,
    debug: bool,
) -> None:
    """KitchenSync - make DESTINATION mirror SOURCE.

    Files that would be overwritten or removed are first moved into
    DESTINATION/.kitchensync/<timestamp>/. Without -p=Y nothing is changed;
    the run only shows what would be done.
    """
    _configure_logging(verbosity, debug)
    out = OutputFormatter(quiet=verbosity == 0)

    try:
        config = SyncConfig(
            source=source,
            destination=destination,
            preview=not perform,
            verbosity=verbosity,
            exclude_patterns=exclude,
            include_timestamps=include_timestamps,
            greater_size_only=greater_size,
            use_modtime=use_modtime,
            force_copy=force_copy,
            max_workers=workers,
        )
        reporter = SyncReporter(verbosity, out)
        reporter.configuration(config)
        summary = SyncEngine(config, reporter).run()
    except ConfigError as e:
        out.error(f"Error: {e.message}")
        ctx.exit(1)
    except KeyboardInterrupt:
        out.warning("\nSync cancelled by user")
        ctx.exit(130)  # Standard exit code for SIGINT

    if not summary.ok:
        logger.debug("Run finished with %d error(s)", len(summary.errors))
        ctx.exit(1)


if __name__ == "__main__":
    main()
