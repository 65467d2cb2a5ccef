"""CLI UI components (Rich).

Keeps rendering details (tables, panels, verbosity filtering) out of the
command functions.
"""

from __future__ import annotations

from typing import Callable

from rich.align import Align
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.domain.models import TestBatchResult, TestOutcome
from core.domain.verbosity import Verbosity


def print_banner(console: Console) -> None:
    title = Text("fwbuild", style="bold cyan")
    subtitle = Text("Build • Test • Load • Debug", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def make_status_printer(console: Console, verbosity: Verbosity) -> Callable[[Verbosity, str], None]:
    """Return a status callback that drops messages above `verbosity`."""

    def _print(level: Verbosity, message: str) -> None:
        if level > verbosity:
            return
        console.print(message, markup=False, highlight=False, soft_wrap=True)

    return _print


def make_outcome_printer(console: Console, verbosity: Verbosity) -> Callable[[TestOutcome], None]:
    def _print(outcome: TestOutcome) -> None:
        if verbosity < Verbosity.DEFAULT:
            return
        if outcome.passed:
            console.print(f"[green]PASS[/green] {escape(outcome.package)}", highlight=False)
        else:
            console.print(f"[red]FAIL[/red] {escape(outcome.package)}", highlight=False)

    return _print


def print_error(console: Console, text: str) -> None:
    console.print(Text("Error: ", style="bold red") + Text(text), soft_wrap=True)


def build_results_table(result: TestBatchResult) -> Table:
    """Summary table of a batch test run, in selection order."""

    table = Table(title="Unit Tests")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Package", style="cyan")
    table.add_column("Result")
    for index, outcome in enumerate(result.outcomes, start=1):
        status = Text("PASS", style="green") if outcome.passed else Text("FAIL", style="bold red")
        table.add_row(str(index), Text(outcome.package), status)
    return table
