from .cookbooks import (
    render_cookbooks,
    render_cookbooks_csv,
    render_error_summary,
    write_cookbooks_csv,
)
from .nodes import write_nodes_report

__all__ = [
    "render_cookbooks",
    "render_cookbooks_csv",
    "render_error_summary",
    "write_cookbooks_csv",
    "write_nodes_report",
]
