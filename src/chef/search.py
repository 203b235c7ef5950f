"""Usage index backed by Chef Infra Server partial node search."""

from __future__ import annotations

import re
from typing import Any, Iterator

import requests

from src.chef.base_client import ChefServerClient
from src.reporting.errors import UsageLookupError
from src.reporting.models import CookbookVersionRef
from src.utils.logging import get_logger

logger = get_logger(__name__)

NODE_NAME_KEYS: dict[str, list[str]] = {"name": ["name"]}

NODE_REPORT_KEYS: dict[str, list[str]] = {
    "name": ["name"],
    "chef_version": ["automatic", "chef_packages", "chef", "version"],
    "os": ["automatic", "platform"],
    "os_version": ["automatic", "platform_version"],
    "cookbooks": ["automatic", "cookbooks"],
}

_QUERY_SPECIAL = re.compile(r'([+\-!(){}\[\]^"~*?:\\/&|])')


def escape_query_value(value: str) -> str:
    """Escape characters that have a meaning in a search query."""
    return _QUERY_SPECIAL.sub(r"\\\1", value)


def cookbook_usage_query(ref: CookbookVersionRef) -> str:
    """Search query matching nodes whose run applies ``ref``."""
    return (
        f"cookbooks_{escape_query_value(ref.name)}_version:"
        f"{escape_query_value(ref.version)}"
    )


class ChefNodeSearch:
    """Answers which nodes apply a cookbook version, and what every node reports."""

    def __init__(self, client: ChefServerClient) -> None:
        self._client = client

    def partial_search(
        self, index: str, query: str, keys: dict[str, list[str]]
    ) -> Iterator[dict[str, Any]]:
        """Yield the ``data`` of every row, following pagination.

        Raises:
            requests.RequestException: If a page cannot be retrieved
            ValueError: If a page is malformed
        """
        rows = self._client.search_rows
        start = 0
        while True:
            page = self._client.post(
                f"/search/{index}",
                json=keys,
                params={"q": query, "start": start, "rows": rows},
            )
            if not isinstance(page, dict) or not isinstance(page.get("rows"), list):
                raise ValueError(f"unexpected search response for query {query!r}")

            page_rows = page["rows"]
            for row in page_rows:
                yield row.get("data", row) if isinstance(row, dict) else row

            start += len(page_rows)
            total = page.get("total", 0)
            if not page_rows or not isinstance(total, int) or start >= total:
                return

    def nodes_using(self, ref: CookbookVersionRef) -> list[str]:
        """Return the names of nodes that currently apply ``ref``.

        Raises:
            UsageLookupError: If the search fails
        """
        query = cookbook_usage_query(ref)
        try:
            names = [
                row["name"]
                for row in self.partial_search("node", query, NODE_NAME_KEYS)
                if isinstance(row, dict) and row.get("name")
            ]
        except (requests.RequestException, ValueError) as e:
            raise UsageLookupError(f"unable to search nodes using {ref}: {e}") from e

        logger.debug(f"{len(names)} nodes apply {ref}")
        return names

    def all_nodes(self) -> list[dict[str, Any]]:
        """Return the report attributes of every node.

        Raises:
            UsageLookupError: If the search fails
        """
        try:
            return list(self.partial_search("node", "*:*", NODE_REPORT_KEYS))
        except (requests.RequestException, ValueError) as e:
            raise UsageLookupError(f"unable to search nodes: {e}") from e
