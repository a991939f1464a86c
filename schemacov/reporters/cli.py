"""Terminal coverage table rendered with rich."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from schemacov.coverage import CoverageResultSet

from .base import summarize


class CliReporter:
    def __init__(self, width: int = 120):
        self.width = width

    def build_table(self, results: CoverageResultSet) -> Table:
        table = Table(title="Keyword coverage", show_lines=False)
        table.add_column("id")
        table.add_column("coverage", justify="right")
        table.add_column("total", justify="right")
        table.add_column("either", justify="right")
        table.add_column("both", justify="right")
        for summary in summarize(results):
            table.add_row(
                summary.id or "(no id)",
                f"{summary.rate:.3f}",
                str(summary.total),
                str(summary.either),
                str(summary.both),
            )
        return table

    def render(self, results: CoverageResultSet) -> str:
        console = Console(width=self.width, force_terminal=False, color_system=None)
        with console.capture() as capture:
            console.print(self.build_table(results))
        return capture.get()
