#!/usr/bin/env python3
"""
Console UI Module using Rich

Provides the console interface for sdisk: styled messages, entry tables,
the scan spinner, a numbered multi-select and a yes/no confirmation prompt.
"""

from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.prompt import Prompt
from rich.table import Table


class PromptError(Exception):
    """Operator input could not be read"""


class ConsoleUI:
    """Console UI handler using Rich for the sdisk CLI"""

    def __init__(self, console: Optional[Console] = None, force_terminal: Optional[bool] = None):
        """Initialize with an existing console or a new one"""
        self.console = console or Console(force_terminal=force_terminal, highlight=False)

    # Basic styled output methods
    def print_success(self, message: str):
        """Print success message in green"""
        self.console.print(message, style="green")

    def print_error(self, message: str):
        """Print error message in red"""
        self.console.print(message, style="red bold")

    def print_warning(self, message: str):
        """Print warning message in yellow"""
        self.console.print(message, style="yellow")

    def print_info(self, message: str):
        """Print info message in cyan"""
        self.console.print(message, style="cyan")

    def print_plain(self, message: str):
        """Print message in plain white"""
        self.console.print(message, style="white")

    def print_header(self, title: str, subtitle: Optional[str] = None):
        """Print a header with optional subtitle"""
        if subtitle:
            header_text = f"[bold]{title}[/bold]\n[dim]{subtitle}[/dim]"
        else:
            header_text = f"[bold]{title}[/bold]"

        panel = Panel(header_text, box=box.ROUNDED, padding=(0, 1))
        self.console.print(panel)

    def print_table(self, title: str, columns: list[tuple[str, dict]], rows: list[list[str]]):
        """Print rows as a table; each column is (header, rich column options)"""
        table = Table(title=title, box=box.ROUNDED, show_lines=False)
        for header, options in columns:
            table.add_column(header, **options)
        for row in rows:
            table.add_row(*row)
        self.console.print(table)

    # Progress
    def create_activity_progress(self):
        """Create a Rich progress context manager for activity-only display (no counts)"""
        return Progress(
            SpinnerColumn(),
            TextColumn("{task.description}"),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        )

    def show_operation_summary(self, successful: list[str], failed: list[tuple[str, str]], operation_name: str):
        """Show summary of completed operations"""
        if successful:
            self.print_success(f"{operation_name.capitalize()} {len(successful)} items")

        if failed:
            self.print_error(f"Failed {len(failed)} items:")
            for path, error in failed:
                self.console.print(f"[red dim]  • {escape(path)}: {escape(error)}[/red dim]")

    # Interactive prompts
    def _read_line(self, prompt: str) -> str:
        try:
            return self.console.input(prompt)
        except (EOFError, OSError) as e:
            raise PromptError(f"cannot read input: {str(e) or type(e).__name__}") from e

    def confirm(self, question: str) -> bool:
        """Ask for yes/no confirmation; only 'y' or 'yes' counts as yes"""
        answer = self._read_line(escape(f"{question} [y/N] "))
        return answer.strip().lower() in ("y", "yes")

    def select_indices(self, items: list[str], title: str = "Select items") -> list[int]:
        """Allow user to select multiple items from a numbered list

        Accepts comma separated numbers and ranges (e.g. 1,3,5-7), 'all', or
        an empty answer for none. Returns sorted, zero-based, unique indices.
        """
        if not items:
            return []

        self.console.print(f"\n[cyan]{title}:[/cyan]")
        for i, item in enumerate(items, 1):
            self.console.print(f"  {i:>3}. {escape(item)}")

        while True:
            try:
                response = Prompt.ask(
                    "Enter numbers separated by commas (e.g., 1,3,5-7), 'all', or nothing to skip",
                    default="",
                    show_default=False,
                    console=self.console,
                )
            except (EOFError, OSError) as e:
                raise PromptError(f"cannot read input: {str(e) or type(e).__name__}") from e

            try:
                return parse_selection(response, len(items))
            except ValueError as e:
                self.print_error(f"Invalid selection: {e}. Please try again.")


def parse_selection(response: str, count: int) -> list[int]:
    """Parse a multi-select answer into sorted zero-based indices

    Raises:
        ValueError: For tokens that are not numbers/ranges or are out of range
    """
    response = response.strip().lower()
    if not response:
        return []
    if response == "all":
        return list(range(count))

    selected: set[int] = set()
    for token in response.split(","):
        token = token.strip()
        if not token:
            continue
        if "-" in token:
            start_text, end_text = token.split("-", 1)
            start, end = int(start_text), int(end_text)
            if start > end:
                raise ValueError(f"empty range '{token}'")
            numbers = range(start, end + 1)
        else:
            numbers = [int(token)]
        for number in numbers:
            if not 1 <= number <= count:
                raise ValueError(f"{number} is not between 1 and {count}")
            selected.add(number - 1)
    return sorted(selected)
