"""Interfaces of the data sources consumed by the aggregation engines.

The Chef Infra Server clients in ``src.chef`` and the Cookstyle adapter in
``src.analyzers`` implement these; tests substitute in-memory fakes.
"""

from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from src.reporting.models import CookbookVersionRef, FileOffenses


@runtime_checkable
class CookbookCatalog(Protocol):
    """Authoritative inventory of cookbooks and versions."""

    def list_cookbooks(self) -> list[CookbookVersionRef]:
        """Return every (name, version) pair known to the server."""
        ...

    def download(self, ref: CookbookVersionRef) -> Path:
        """Fetch the source tree of one cookbook version and return its root."""
        ...


@runtime_checkable
class UsageIndex(Protocol):
    """Queryable index of which nodes apply which cookbook versions."""

    def nodes_using(self, ref: CookbookVersionRef) -> list[str]:
        """Return names of nodes currently applying ``ref``."""
        ...

    def all_nodes(self) -> list[dict[str, Any]]:
        """Return raw attribute payloads for every node."""
        ...


@runtime_checkable
class StaticAnalyzer(Protocol):
    """Runs static analysis over a cookbook source tree."""

    def analyze(self, path: Path) -> list[FileOffenses]:
        """Return offenses grouped by file, in emission order."""
        ...
