"""Terminal table rendering of the nodes report."""

from typing import TextIO

from rich.console import Console
from rich.table import Table

from src.reporting.models import NodeReportItem

MIN_TERM_WIDTH = 120

NODE_COLUMNS = ["Node Name", "Chef Version", "Operating System", "Cookbooks"]

NARROW_TERMINAL_NOTE = (
    "Note: If the output above is not formatted correctly, please expand your "
    f"terminal window to be at least {MIN_TERM_WIDTH} characters wide."
)


def build_nodes_table(items: list[NodeReportItem], width: int) -> Table:
    table = Table(show_header=True, box=None, pad_edge=False, expand=False)
    # node names can get long, chef versions are tiny
    table.add_column(NODE_COLUMNS[0], min_width=int(width * 0.30), overflow="fold")
    table.add_column(NODE_COLUMNS[1], min_width=int(width * 0.10))
    table.add_column(NODE_COLUMNS[2], min_width=int(width * 0.15))
    table.add_column(NODE_COLUMNS[3], overflow="fold")
    for item in items:
        table.add_row(*item.as_row())
    return table


def write_nodes_report(
    items: list[NodeReportItem], stream: TextIO, width: int | None = None
) -> None:
    """Print the nodes table, with a hint when the terminal is too narrow."""
    console = Console(file=stream, width=width, force_terminal=False, highlight=False)
    console.print()
    console.print(build_nodes_table(items, console.width))
    if console.width < MIN_TERM_WIDTH:
        console.print()
        console.print(NARROW_TERMINAL_NOTE, soft_wrap=True)
