"""Console output helpers built on rich."""

from rich.console import Console


class OutputFormatter:
    """Writes user-facing messages to the terminal.

    Messages are printed without rich markup interpretation so that paths
    containing square brackets are shown verbatim.
    """

    def __init__(self, quiet: bool = False, no_color: bool = False):
        """Initialize output formatter.

        Args:
            quiet: Suppress everything except errors
            no_color: Disable colored output
        """
        self.quiet = quiet
        self.console = Console(
            highlight=False, soft_wrap=True, emoji=False, no_color=no_color
        )
        self.err_console = Console(
            stderr=True, highlight=False, soft_wrap=True, emoji=False, no_color=no_color
        )

    def print(self, message: str = "", style: str = "") -> None:
        """Print a plain line."""
        if self.quiet:
            return
        self.console.print(message, style=style or None, markup=False)

    def info(self, message: str) -> None:
        """Print an informational line."""
        self.print(message)

    def warning(self, message: str) -> None:
        """Print a warning line."""
        self.print(message, style="yellow")

    def error(self, message: str) -> None:
        """Print an error line to stderr. Errors are shown even when quiet."""
        self.err_console.print(message, style="bold red", markup=False)
