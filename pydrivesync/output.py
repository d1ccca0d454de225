"""Console output formatting for the CLI."""

import json
from typing import Any

from rich.console import Console
from rich.table import Table


class OutputFormatter:
    """Prints human-readable or JSON output via rich."""

    def __init__(self, json_output: bool = False, quiet: bool = False):
        """Initialize output formatter.

        Args:
            json_output: Emit machine-readable JSON instead of text
            quiet: Suppress non-essential output
        """
        self.json_output = json_output
        self.quiet = quiet
        self.console = Console()
        self.err_console = Console(stderr=True)

    def print(self, message: str = "") -> None:
        """Print a plain line."""
        if not self.quiet and not self.json_output:
            self.console.print(message)

    def info(self, message: str) -> None:
        """Print an informational message."""
        if not self.quiet and not self.json_output:
            self.console.print(message)

    def success(self, message: str) -> None:
        """Print a success message."""
        if not self.quiet and not self.json_output:
            self.console.print(f"[green]✓[/green] {message}")

    def warning(self, message: str) -> None:
        """Print a warning to stderr."""
        if not self.quiet:
            self.err_console.print(f"[yellow]Warning:[/yellow] {message}")

    def error(self, message: str) -> None:
        """Print an error to stderr (never suppressed)."""
        self.err_console.print(f"[red]Error:[/red] {message}")

    def print_json(self, data: Any) -> None:
        """Print data as JSON."""
        self.console.print_json(json.dumps(data))

    def print_table(
        self, columns: list[str], rows: list[list[str]], title: str = ""
    ) -> None:
        """Print rows as a table, or as a list of objects in JSON mode.

        Args:
            columns: Column headers
            rows: Row values
            title: Optional table title
        """
        if self.json_output:
            self.print_json([dict(zip(columns, row)) for row in rows])
            return
        if self.quiet:
            return
        table = Table(title=title or None)
        for column in columns:
            table.add_column(column)
        for row in rows:
            table.add_row(*row)
        self.console.print(table)
