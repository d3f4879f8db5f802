# SPDX-License-Identifier: GPL-3.0-or-later
# Copyright (C) 2024-2026 SIMCAL Team

"""
Terminal output for CLI commands.

Thin wrapper over ``rich`` so command handlers print user-facing messages
the same way and tests can swap in a recording console.
"""

from typing import Iterable, Optional, Sequence

from rich.console import Console as RichConsole
from rich.table import Table


class Console:
    """User-facing output with consistent styling."""

    def __init__(self, stdout: Optional[RichConsole] = None, stderr: Optional[RichConsole] = None):
        self._out = stdout or RichConsole(highlight=False)
        self._err = stderr or RichConsole(stderr=True, highlight=False)

    def info(self, message: str) -> None:
        self._out.print(message)

    def success(self, message: str) -> None:
        self._out.print(f"[green]{message}[/green]")

    def warning(self, message: str) -> None:
        self._err.print(f"[yellow]Warning:[/yellow] {message}")

    def error(self, message: str) -> None:
        self._err.print(f"[bold red]Error:[/bold red] {message}")

    def rule(self, title: str = '') -> None:
        self._out.rule(title)

    def table(self, columns: Sequence[str], rows: Iterable[Sequence], title: Optional[str] = None) -> None:
        table = Table(title=title)
        for column in columns:
            table.add_column(column)
        for row in rows:
            table.add_row(*(str(cell) for cell in row))
        self._out.print(table)


console = Console()
